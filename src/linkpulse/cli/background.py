"""CLI command: linkpulse background: periodic probe bursts."""

from __future__ import annotations

import asyncio
import contextlib
import signal
from collections.abc import Callable

import click
from rich.console import Console

from linkpulse.background.cycle import BackgroundCycle
from linkpulse.background.scheduler import AsyncioScheduler
from linkpulse.cli.settings import load_settings
from linkpulse.config import LinkPulseConfig, Settings, SettingsStore
from linkpulse.network.psutil_ import PsutilNetworkSource
from linkpulse.probe.http import HttpProber
from linkpulse.session.models import Session
from linkpulse.storage.store import SqliteSessionStore

console = Console(stderr=True)


@click.command()
@click.option("--once", is_flag=True, help="Run a single burst now and exit.")
@click.option(
    "--budget",
    type=float,
    default=30.0,
    show_default=True,
    help="Seconds a burst may run before it is cut short.",
)
@click.pass_context
def background(ctx: click.Context, once: bool, budget: float) -> None:
    """Run short probe bursts every few minutes (background mode)."""
    settings = load_settings(ctx)
    config: LinkPulseConfig = ctx.obj["config"]
    store: SettingsStore = ctx.obj["settings_store"]

    if once:
        session = asyncio.run(_run_once(config, store, budget))
        if session is None:
            console.print("[dim]No background session recorded.[/dim]")
        else:
            _print_session(session)
        return

    if not settings.background_enabled:
        console.print(
            "[yellow]Background monitoring is disabled.[/yellow]\n"
            "Enable with: linkpulse config set background_enabled true"
        )
        raise SystemExit(1)

    console.print(
        f"[bold]LinkPulse[/bold] background probes of "
        f"[cyan]{settings.target_host}[/cyan] every "
        f"{settings.background_interval_minutes:g} min"
        + (" (WiFi only)" if settings.background_wifi_only else "")
    )
    console.print("  Press Ctrl+C to stop.\n")
    asyncio.run(_run_forever(config, store, budget))


def _settings_provider(store: SettingsStore) -> Callable[[], Settings]:
    # Re-read on every trigger so config changes apply without a restart.
    def provider() -> Settings:
        return store.load()

    return provider


async def _run_once(
    config: LinkPulseConfig,
    settings_store: SettingsStore,
    budget: float,
) -> Session | None:
    session_store = await SqliteSessionStore.open(config.db_path)
    network = PsutilNetworkSource()
    network.refresh()
    scheduler = AsyncioScheduler(time_budget=budget)
    cycle = BackgroundCycle(
        settings_provider=_settings_provider(settings_store),
        prober=HttpProber(),
        network_source=network,
        store=session_store,
        scheduler=scheduler,
    )
    scheduler.on_trigger(cycle.handle_background_trigger, cycle.expire)
    expiry = asyncio.get_running_loop().call_later(budget, cycle.expire)
    try:
        return await cycle.handle_background_trigger()
    finally:
        expiry.cancel()
        scheduler.cancel()
        await session_store.close()


async def _run_forever(
    config: LinkPulseConfig,
    settings_store: SettingsStore,
    budget: float,
) -> None:
    session_store = await SqliteSessionStore.open(config.db_path)
    network = PsutilNetworkSource()
    network.start()
    scheduler = AsyncioScheduler(time_budget=budget)
    cycle = BackgroundCycle(
        settings_provider=_settings_provider(settings_store),
        prober=HttpProber(),
        network_source=network,
        store=session_store,
        scheduler=scheduler,
    )

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop_event.set)

    try:
        if not cycle.register():
            console.print("[red]Could not schedule background probes.[/red]")
            return
        # First burst right away rather than after a full interval.
        scheduler.schedule_next(0)
        await stop_event.wait()
        console.print("\n[dim]Stopping...[/dim]")
        cycle.expire()
        cycle.cancel_scheduled()
        await scheduler.wait_idle()
    finally:
        network.stop()
        await session_store.close()


def _print_session(session: Session) -> None:
    quality = session.quality
    avg = f"{session.avg_latency:.1f} ms" if session.avg_latency is not None else "—"
    console.print(
        f"  Session [cyan]{session.id}[/cyan]: {len(session.samples)} samples, "
        f"avg {avg}, loss {session.packet_loss:.1f}%, "
        f"[{quality.tier.color}]score {quality.score}[/{quality.tier.color}]"
    )
