"""CLI command group: linkpulse config: inspect and change settings."""

from __future__ import annotations

import click
from rich.console import Console
from rich.table import Table

from linkpulse.config import InvalidSettingError, Settings, SettingsStore

console = Console(stderr=True)


def load_settings(ctx: click.Context) -> Settings:
    """Load settings for a command, turning bad values into a usage error."""
    store: SettingsStore = ctx.obj["settings_store"]
    try:
        return store.load()
    except ValueError as exc:
        raise click.ClickException(f"{store.path}: {exc}") from exc


@click.group()
def config() -> None:
    """Show or change monitoring settings."""


@config.command("show")
@click.pass_context
def show_config(ctx: click.Context) -> None:
    """Print the current settings."""
    settings = load_settings(ctx)
    table = Table(show_header=False, box=None, padding=(0, 2))
    table.add_column(style="dim")
    table.add_column()
    for key, value in settings.to_dict().items():
        table.add_row(key, str(value))
    console.print(table)


@config.command("set")
@click.argument("key")
@click.argument("value")
@click.pass_context
def set_config(ctx: click.Context, key: str, value: str) -> None:
    """Change one setting, e.g. `linkpulse config set target_host example.com`."""
    store: SettingsStore = ctx.obj["settings_store"]
    try:
        store.update(**{key: value})
    except InvalidSettingError as exc:
        raise click.BadParameter(str(exc), param_hint=key) from exc
    except ValueError as exc:
        raise click.ClickException(f"{store.path}: {exc}") from exc
    console.print(f"[green]{key}[/green] = {value}")


@config.command("reset")
@click.pass_context
def reset_config(ctx: click.Context) -> None:
    """Restore every setting to its default."""
    store: SettingsStore = ctx.obj["settings_store"]
    store.save(Settings())
    console.print("[green]Settings reset to defaults[/green]")


@config.command("path")
@click.pass_context
def config_path(ctx: click.Context) -> None:
    """Print the settings file location."""
    store: SettingsStore = ctx.obj["settings_store"]
    click.echo(str(store.path))
