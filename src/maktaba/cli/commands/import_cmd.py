# ABOUTME: The `maktaba import` command for loading book archives from disk.
# ABOUTME: Imports each ZIP in turn and reports volumes imported, skipped, and failed.

from pathlib import Path

import click
from rich.console import Console

from maktaba.cli.options import db_option, opened_library
from maktaba.core.importer import import_archive
from maktaba.db.store import StorageError
from maktaba.formats.archive import ArchiveImportError

console = Console()


@click.command("import")
@click.argument(
    "archives",
    nargs=-1,
    required=True,
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@db_option
@click.option(
    "--source-id",
    default=None,
    help="Mark the imported book as a translation of this book id.",
)
def import_command(archives: tuple[Path, ...], db_path: Path | None, source_id: str | None) -> None:
    """Import one or more book archives (ZIP files) into the library."""
    failed = 0
    with opened_library(db_path) as library:
        for archive_path in archives:
            try:
                result = import_archive(archive_path, library, source_id=source_id)
            except ArchiveImportError as exc:
                failed += 1
                console.print(f"[red]{archive_path.name}:[/red] {exc}")
                continue
            except StorageError as exc:
                console.print(f"[red]Storage error:[/red] {exc}")
                raise SystemExit(1) from exc

            console.print(
                f"[green]Imported[/green] {result.title} [dim]({result.book_id})[/dim]: "
                f"{len(result.volumes_imported)} volume(s), {result.pages_imported} page(s)"
            )
            for volume, reason in result.volumes_failed:
                console.print(f"  [yellow]Volume {volume} skipped:[/yellow] {reason}")
            if result.pages_missing:
                console.print(f"  [dim]{result.pages_missing} declared page(s) were missing[/dim]")

    if failed:
        console.print(f"\n[red]{failed} archive(s) could not be imported.[/red]")
        raise SystemExit(1)
