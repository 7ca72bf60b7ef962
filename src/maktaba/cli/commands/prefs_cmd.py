# ABOUTME: The `maktaba prefs` command group for viewing and changing preferences.
# ABOUTME: Preferences supply defaults for search mode, input script, sect, and server.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from maktaba.cli.options import prefs_option
from maktaba.prefs import (
    PREFERENCE_KEYS,
    coerce_preference,
    load_preferences,
    save_preferences,
)

console = Console()


@click.group("prefs")
def prefs() -> None:
    """View or change saved preferences."""


@prefs.command("show")
@prefs_option
def show(prefs_path: Path | None) -> None:
    """Print the current preferences."""
    current = load_preferences(prefs_path)
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Key", style="bold")
    table.add_column("Value")
    for key, value in current.to_dict().items():
        table.add_row(key, value)
    console.print(table)


@prefs.command("set")
@click.argument("key", type=click.Choice(PREFERENCE_KEYS))
@click.argument("value")
@prefs_option
def set_pref(key: str, value: str, prefs_path: Path | None) -> None:
    """Change one preference."""
    try:
        typed = coerce_preference(key, value)
    except ValueError as exc:
        console.print(f"[red]Invalid value for {key}:[/red] {value}")
        raise SystemExit(1) from exc
    current = load_preferences(prefs_path)
    setattr(current, key, typed)
    saved = save_preferences(current, prefs_path)
    console.print(f"[green]Saved[/green] {key} = {current.to_dict()[key]} [dim]({saved})[/dim]")
