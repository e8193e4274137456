"""CLI entry point: Click group with global options."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from linkpulse import __version__
from linkpulse.config import LinkPulseConfig, SettingsStore


@click.group()
@click.version_option(version=__version__, prog_name="linkpulse")
@click.option(
    "--config-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding settings.yaml.",
)
@click.option(
    "--data-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory holding the session database.",
)
@click.option("--verbose", "-v", is_flag=True, help="Enable verbose output.")
@click.pass_context
def main(
    ctx: click.Context,
    config_dir: Path | None,
    data_dir: Path | None,
    verbose: bool,
) -> None:
    """LinkPulse: connection quality monitoring for a single endpoint."""
    config = LinkPulseConfig.load()
    if config_dir is not None:
        config.config_dir = config_dir
    if data_dir is not None:
        config.data_dir = data_dir
    config.verbose = verbose

    ctx.ensure_object(dict)
    ctx.obj["config"] = config
    ctx.obj["settings_store"] = SettingsStore(config.settings_path)

    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )


def _register_commands() -> None:
    from linkpulse.cli.background import background  # noqa: F811
    from linkpulse.cli.history import delete, history, insights, purge, show  # noqa: F811
    from linkpulse.cli.monitor import monitor  # noqa: F811
    from linkpulse.cli.server import server  # noqa: F811
    from linkpulse.cli.settings import config  # noqa: F811

    main.add_command(monitor)
    main.add_command(background)
    main.add_command(history)
    main.add_command(show)
    main.add_command(delete)
    main.add_command(purge)
    main.add_command(insights)
    main.add_command(config)
    main.add_command(server)


_register_commands()
