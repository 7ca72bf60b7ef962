# ABOUTME: The `maktaba info` and `maktaba stats` commands.
# ABOUTME: Shows one book with its volumes and translation, or corpus-wide counts.

from pathlib import Path

import click
from rich.console import Console
from rich.table import Table

from maktaba.cli.options import db_option, opened_library
from maktaba.core.sects import book_sect

console = Console()


@click.command("info")
@click.argument("book_id")
@db_option
def info(book_id: str, db_path: Path | None) -> None:
    """Show a book's details and its imported volumes."""
    with opened_library(db_path) as library:
        book = library.get_book(book_id)
        if book is None:
            console.print(f"[red]Book {book_id} not found.[/red]")
            raise SystemExit(1)

        table = Table(show_header=False, box=None, pad_edge=False)
        table.add_column("Field", style="bold", width=14)
        table.add_column("Value")

        table.add_row("ID", book.id)
        table.add_row("Title", book.title)
        table.add_row("Author", book.author or "unknown")
        table.add_row("Language", book.language or "ar")
        table.add_row("Sect", book_sect(book.source_id or book.id).value)
        table.add_row("Volumes", str(book.volume_count))
        if book.source_id:
            table.add_row("Translates", book.source_id)
        translation = library.translation_for(book.id)
        if translation is not None:
            table.add_row("Translation", f"{translation.title} ({translation.id})")
        if book.imported_at:
            table.add_row("Imported", book.imported_at)
        console.print(table)

        volumes = library.volumes_for(book.id)
        if not volumes:
            return
        vol_table = Table()
        vol_table.add_column("Volume", justify="right")
        vol_table.add_column("Pages", justify="right")
        vol_table.add_column("Stored", justify="right")
        vol_table.add_column("Translated")
        for volume in volumes:
            vol_table.add_row(
                str(volume.volume),
                str(volume.total_pages),
                str(len(library.pages_for(book.id, volume.volume))),
                "yes" if library.has_translation(book.id, volume.volume) else "",
            )
        console.print(vol_table)


@click.command("stats")
@db_option
def stats(db_path: Path | None) -> None:
    """Show how many books, volumes, and pages are stored."""
    with opened_library(db_path) as library:
        counts = library.stats()
    console.print(
        f"{counts.books} book(s), {counts.volumes} volume(s), {counts.pages} page(s)"
    )
