"""CLI command: linkpulse server: start the web API."""

from __future__ import annotations

import click
from rich.console import Console

from linkpulse.cli.settings import load_settings
from linkpulse.config import LinkPulseConfig

console = Console(stderr=True)


@click.command()
@click.option(
    "--port",
    type=int,
    default=None,
    help="Port to listen on (default: 8471).",
)
@click.option(
    "--desktop",
    is_flag=True,
    help="Deliver alerts as desktop notifications.",
)
@click.pass_context
def server(ctx: click.Context, port: int | None, desktop: bool) -> None:
    """Start the LinkPulse web API with a controllable monitor."""
    try:
        import uvicorn
    except ImportError:
        console.print(
            "[red]Web dependencies not installed.[/red]\n"
            "Install with: pip install linkpulse[web]"
        )
        raise SystemExit(1)

    load_settings(ctx)
    config: LinkPulseConfig = ctx.obj["config"]
    if port is not None:
        config.web_port = port

    console.print(
        f"[bold]LinkPulse[/bold] API starting on "
        f"[cyan]http://{config.web_host}:{config.web_port}/api[/cyan]"
    )
    console.print("  [dim]Bound to 127.0.0.1 only[/dim]\n")

    from linkpulse.alerts.notifiers import DesktopNotifier
    from linkpulse.web.app import create_app

    app = create_app(
        config,
        settings_store=ctx.obj["settings_store"],
        notifier=DesktopNotifier() if desktop else None,
    )
    uvicorn.run(app, host=config.web_host, port=config.web_port, log_level="info")
