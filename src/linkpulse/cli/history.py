"""CLI commands for stored sessions: history, show, delete, purge, insights."""

from __future__ import annotations

import asyncio
from datetime import datetime
from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from linkpulse.cli.settings import load_settings
from linkpulse.config import LinkPulseConfig
from linkpulse.quality.activities import ActivityStatus, recommend
from linkpulse.quality.insights import generate_insights, time_of_day_breakdown
from linkpulse.session.models import Session
from linkpulse.storage.store import SqliteSessionStore

console = Console(stderr=True)

_STATUS_COLORS = {
    ActivityStatus.EXCELLENT: "green",
    ActivityStatus.GOOD: "cyan",
    ActivityStatus.POOR: "red",
}


def _db_path(ctx: click.Context) -> Path:
    config: LinkPulseConfig = ctx.obj["config"]
    return config.db_path


def _fmt_time(ts: float | None) -> str:
    if ts is None:
        return "—"
    return datetime.fromtimestamp(ts).strftime("%Y-%m-%d %H:%M:%S")


def _fmt_ms(value: float | None) -> str:
    return f"{value:.1f}" if value is not None else "—"


@click.command()
@click.option("--limit", type=int, default=20, show_default=True)
@click.pass_context
def history(ctx: click.Context, limit: int) -> None:
    """List recent monitoring sessions, newest first."""

    async def _load() -> list[Session]:
        store = await SqliteSessionStore.open(_db_path(ctx))
        try:
            return await store.list_sessions(limit=limit)
        finally:
            await store.close()

    sessions = asyncio.run(_load())
    if not sessions:
        console.print("[dim]No sessions recorded yet.[/dim]")
        return

    table = Table(title="Sessions")
    table.add_column("ID", style="cyan")
    table.add_column("Started")
    table.add_column("Duration", justify="right")
    table.add_column("Host")
    table.add_column("Network")
    table.add_column("Avg ms", justify="right")
    table.add_column("Loss %", justify="right")
    table.add_column("Score", justify="right")

    for session in sessions:
        quality = session.quality
        kind = " (bg)" if session.is_background else ""
        table.add_row(
            session.id,
            _fmt_time(session.start_time),
            session.formatted_duration,
            session.host,
            session.network_type.value + kind,
            _fmt_ms(session.avg_latency),
            f"{session.packet_loss:.1f}",
            f"[{quality.tier.color}]{quality.score}[/{quality.tier.color}]",
        )
    console.print(table)


@click.command()
@click.argument("session_id")
@click.option("--samples/--no-samples", default=False, help="List every sample.")
@click.pass_context
def show(ctx: click.Context, session_id: str, samples: bool) -> None:
    """Show details of one stored session."""

    async def _load() -> Session | None:
        store = await SqliteSessionStore.open(_db_path(ctx))
        try:
            return await store.get(session_id)
        finally:
            await store.close()

    session = asyncio.run(_load())
    if session is None:
        raise click.ClickException(f"Session {session_id} not found")

    quality = session.quality
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="dim")
    table.add_column()
    table.add_row("Session ID", session.id)
    table.add_row("Host", session.host)
    table.add_row("Network", session.network_type.value)
    table.add_row("Mode", "background" if session.is_background else "foreground")
    table.add_row("Started", _fmt_time(session.start_time))
    table.add_row("Ended", _fmt_time(session.end_time))
    table.add_row("Duration", session.formatted_duration)
    table.add_row("Samples", str(len(session.samples)))
    table.add_row(
        "Min / Avg / Max",
        f"{_fmt_ms(session.min_latency)} / {_fmt_ms(session.avg_latency)} / "
        f"{_fmt_ms(session.max_latency)} ms",
    )
    table.add_row("Packet loss", f"{session.packet_loss:.1f}%")
    table.add_row(
        "Quality",
        f"[{quality.tier.color}]{quality.score} ({quality.tier.value})"
        f"[/{quality.tier.color}]",
    )
    console.print(table)

    if samples and session.samples:
        sample_table = Table(title="Samples")
        sample_table.add_column("Time")
        sample_table.add_column("Latency ms", justify="right")
        sample_table.add_column("Result")
        for sample in session.samples:
            result = "[green]ok[/green]" if sample.succeeded else "[red]timeout[/red]"
            sample_table.add_row(
                _fmt_time(sample.timestamp), _fmt_ms(sample.latency), result
            )
        console.print(sample_table)


@click.command()
@click.argument("session_id", required=False)
@click.option("--all", "delete_all", is_flag=True, help="Delete every session.")
@click.option("--yes", is_flag=True, help="Skip the confirmation prompt.")
@click.pass_context
def delete(ctx: click.Context, session_id: str | None, delete_all: bool, yes: bool) -> None:
    """Delete one session, or all of them with --all."""
    if not session_id and not delete_all:
        raise click.UsageError("Give a SESSION_ID or --all")
    if delete_all and not yes:
        click.confirm("Delete all stored sessions?", abort=True)

    async def _delete() -> int:
        store = await SqliteSessionStore.open(_db_path(ctx))
        try:
            if delete_all:
                return await store.delete_all()
            return int(await store.delete(session_id))
        finally:
            await store.close()

    count = asyncio.run(_delete())
    if not delete_all and count == 0:
        raise click.ClickException(f"Session {session_id} not found")
    console.print(f"[green]Deleted {count} session(s)[/green]")


@click.command()
@click.option(
    "--days",
    type=int,
    default=None,
    help="Keep this many days (default: data_retention_days setting).",
)
@click.pass_context
def purge(ctx: click.Context, days: int | None) -> None:
    """Delete sessions older than the retention period."""
    if days is None:
        days = load_settings(ctx).data_retention_days
    if days < 1:
        raise click.BadParameter("must be at least 1", param_hint="--days")

    async def _purge() -> int:
        store = await SqliteSessionStore.open(_db_path(ctx))
        try:
            return await store.purge_older_than(days)
        finally:
            await store.close()

    count = asyncio.run(_purge())
    console.print(f"Purged {count} session(s) older than {days} days")


@click.command()
@click.option("--limit", type=int, default=200, show_default=True)
@click.pass_context
def insights(ctx: click.Context, limit: int) -> None:
    """Summarize trends across stored sessions and rate everyday activities."""

    async def _load() -> list[Session]:
        store = await SqliteSessionStore.open(_db_path(ctx))
        try:
            return await store.list_sessions(limit=limit)
        finally:
            await store.close()

    sessions = asyncio.run(_load())
    if not sessions:
        console.print("[dim]No sessions recorded yet.[/dim]")
        return

    console.print("[bold]Insights[/bold]")
    for insight in generate_insights(sessions):
        color = "dark_orange" if insight.color.value == "orange" else insight.color.value
        console.print(f"  [{color}]{insight.title}[/{color}]")
        console.print(f"    [dim]{insight.description}[/dim]")

    periods = Table(title="Time of day")
    periods.add_column("Period")
    periods.add_column("Hours")
    periods.add_column("Sessions", justify="right")
    periods.add_column("Avg ms", justify="right")
    periods.add_column("Avg score", justify="right")
    for row in time_of_day_breakdown(sessions):
        periods.add_row(
            row.period,
            row.hour_range,
            str(row.session_count),
            _fmt_ms(row.avg_latency),
            str(row.avg_score) if row.session_count else "—",
        )
    console.print(periods)

    latest = sessions[0]
    recommendations = recommend(latest.avg_latency, latest.packet_loss)
    if not recommendations:
        return
    activities = Table(title=f"Activities (latest session {latest.id})")
    activities.add_column("Activity")
    activities.add_column("Needs")
    activities.add_column("Status")
    for rec in recommendations:
        color = _STATUS_COLORS[rec.status]
        activities.add_row(
            rec.activity.name,
            f"<{rec.activity.max_latency:g} ms, <{rec.activity.max_packet_loss:g}%",
            f"[{color}]{rec.message}[/{color}]",
        )
    console.print(activities)
