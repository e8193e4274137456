"""CLI command: linkpulse monitor: live foreground monitoring."""

from __future__ import annotations

import asyncio
import contextlib
import dataclasses
import signal

import click
from rich.console import Console
from rich.live import Live
from rich.table import Table

from linkpulse.alerts.manager import AlertManager
from linkpulse.alerts.notifiers import DesktopNotifier, LogNotifier
from linkpulse.cli.settings import load_settings
from linkpulse.config import InvalidSettingError, LinkPulseConfig, Settings
from linkpulse.network.psutil_ import PsutilNetworkSource
from linkpulse.probe.http import HttpProber
from linkpulse.session.models import Session
from linkpulse.session.monitor import MonitorLoop, MonitorSnapshot
from linkpulse.storage.store import SqliteSessionStore

console = Console(stderr=True)


@click.command()
@click.option("--host", default=None, help="Override the target host for this run.")
@click.option(
    "--interval",
    type=float,
    default=None,
    help="Override the probe interval in seconds (minimum 0.5).",
)
@click.option(
    "--duration",
    type=float,
    default=None,
    help="Stop automatically after this many seconds.",
)
@click.option("--desktop", is_flag=True, help="Send alerts as desktop notifications.")
@click.option("--plain", is_flag=True, help="Print one line per probe instead of a live table.")
@click.pass_context
def monitor(
    ctx: click.Context,
    host: str | None,
    interval: float | None,
    duration: float | None,
    desktop: bool,
    plain: bool,
) -> None:
    """Probe the target continuously and show live connection quality."""
    settings = load_settings(ctx)
    overrides = {}
    if host is not None:
        overrides["target_host"] = host.strip()
    if interval is not None:
        overrides["probe_interval"] = interval
    if overrides:
        settings = dataclasses.replace(settings, **overrides)
        try:
            settings.validate()
        except InvalidSettingError as exc:
            raise click.BadParameter(str(exc)) from exc

    config: LinkPulseConfig = ctx.obj["config"]
    live = console.is_terminal and not plain

    console.print(
        f"[bold]LinkPulse[/bold] monitoring [cyan]{settings.target_host}[/cyan] "
        f"every {settings.probe_interval:g}s "
        f"(policy [cyan]{settings.monitoring_policy.value}[/cyan])"
    )
    console.print("  Press Ctrl+C to stop.\n")

    session = asyncio.run(_run_monitor(config, settings, duration, desktop, live))
    if session is None:
        console.print(
            "[yellow]Monitoring not started: the current network is not "
            "allowed by the monitoring policy.[/yellow]"
        )
        raise SystemExit(1)
    _print_summary(session)


async def _run_monitor(
    config: LinkPulseConfig,
    settings: Settings,
    duration: float | None,
    desktop: bool,
    live: bool,
) -> Session | None:
    store = await SqliteSessionStore.open(config.db_path)
    network = PsutilNetworkSource()
    network.start()

    notifier = DesktopNotifier() if desktop else LogNotifier()
    monitor_loop = MonitorLoop(
        settings=settings,
        prober=HttpProber(),
        network_source=network,
        store=store,
        alerts=AlertManager(notifier),
    )

    stop_event = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop_event.set)

    def _stop_when_idle(snapshot: MonitorSnapshot) -> None:
        # The policy can pause the loop on a network change.
        if not snapshot.is_monitoring:
            stop_event.set()

    try:
        session = await monitor_loop.start()
        if session is None:
            return None
        monitor_loop.add_listener(_stop_when_idle)

        if live:
            with Live(
                build_table(monitor_loop.snapshot()),
                console=console,
                refresh_per_second=4,
            ) as view:
                monitor_loop.add_listener(lambda snap: view.update(build_table(snap)))
                await _wait(stop_event, duration)
        else:
            monitor_loop.add_listener(_print_line)
            await _wait(stop_event, duration)

        await monitor_loop.stop()
        if monitor_loop.pending_sessions:
            console.print("[red]Session could not be saved to the database.[/red]")
        return session
    finally:
        network.stop()
        await store.close()


async def _wait(stop_event: asyncio.Event, duration: float | None) -> None:
    if duration is None:
        await stop_event.wait()
        return
    with contextlib.suppress(asyncio.TimeoutError):
        await asyncio.wait_for(stop_event.wait(), timeout=duration)


def _fmt_ms(value: float | None) -> str:
    return f"{value:.1f} ms" if value is not None else "—"


def build_table(snapshot: MonitorSnapshot) -> Table:
    """Render a monitor snapshot as a two-column table."""
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="dim")
    table.add_column()

    status = "[green]running[/green]" if snapshot.is_monitoring else "[dim]idle[/dim]"
    connected = "" if snapshot.is_connected else " [red](offline)[/red]"
    table.add_row("Status", status)
    table.add_row("Host", snapshot.host)
    table.add_row("Network", f"{snapshot.network_type.value}{connected}")
    table.add_row("Current", _fmt_ms(snapshot.current_latency))
    table.add_row(
        "Min / Avg / Max",
        " / ".join(
            _fmt_ms(v)
            for v in (snapshot.min_latency, snapshot.avg_latency, snapshot.max_latency)
        ),
    )
    table.add_row("Packet loss", f"{snapshot.packet_loss:.1f}%")

    if snapshot.quality_score is not None and snapshot.quality_tier is not None:
        color = snapshot.quality_tier.color
        table.add_row(
            "Quality",
            f"[{color}]{snapshot.quality_score} ({snapshot.quality_tier.value})[/{color}]",
        )
    else:
        table.add_row("Quality", "—")
    table.add_row("Samples", str(snapshot.sample_count))
    return table


def _print_line(snapshot: MonitorSnapshot) -> None:
    if not snapshot.is_monitoring or snapshot.sample_count == 0:
        return
    score = snapshot.quality_score if snapshot.quality_score is not None else "—"
    console.print(
        f"  [blue]{_fmt_ms(snapshot.current_latency):>10}[/blue]  "
        f"avg {_fmt_ms(snapshot.avg_latency)}  "
        f"loss {snapshot.packet_loss:.1f}%  "
        f"score {score}"
    )


def _print_summary(session: Session) -> None:
    console.print("\n[bold]Session Summary[/bold]")
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="dim")
    table.add_column()

    quality = session.quality
    table.add_row("Session ID", session.id)
    table.add_row("Host", session.host)
    table.add_row("Network", session.network_type.value)
    table.add_row("Duration", session.formatted_duration)
    table.add_row("Samples", str(len(session.samples)))
    table.add_row("Avg latency", _fmt_ms(session.avg_latency))
    table.add_row("Packet loss", f"{session.packet_loss:.1f}%")
    table.add_row(
        "Quality",
        f"[{quality.tier.color}]{quality.score} ({quality.tier.value})"
        f"[/{quality.tier.color}]",
    )
    console.print(table)
