# ABOUTME: Shared Click options and helpers for Maktaba CLI commands.
# ABOUTME: Provides the --db and --prefs flags and opens a loaded library for a command.

from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import click
from rich.console import Console

from maktaba.core.library import Library
from maktaba.db.connection import DEFAULT_DB_PATH, open_library
from maktaba.db.store import DocumentStore, StorageError
from maktaba.prefs import DEFAULT_PREFS_PATH

console = Console()

db_option = click.option(
    "--db",
    "db_path",
    type=click.Path(path_type=Path),
    default=None,
    envvar="MAKTABA_DB",
    help=f"Path to library database (default: {DEFAULT_DB_PATH})",
)

prefs_option = click.option(
    "--prefs",
    "prefs_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    envvar="MAKTABA_PREFS",
    help=f"Path to preferences file (default: {DEFAULT_PREFS_PATH})",
)


@contextmanager
def opened_library(db_path: Path | None) -> Iterator[Library]:
    """Open the database, load the mirror, and close the connection afterwards.

    A database that cannot be opened or loaded ends the command with exit 1.
    """
    path = db_path or DEFAULT_DB_PATH
    try:
        conn = open_library(path)
    except StorageError as exc:
        console.print(f"[red]Cannot open library {path}:[/red] {exc}")
        raise SystemExit(1) from exc

    try:
        try:
            library = Library.open(DocumentStore(conn))
        except StorageError as exc:
            console.print(f"[red]Cannot load library {path}:[/red] {exc}")
            raise SystemExit(1) from exc
        yield library
    finally:
        conn.close()
