# ABOUTME: The `maktaba ls` command for listing imported books.
# ABOUTME: Displays a Rich table of books with their sect, language, and volume counts.

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from maktaba.cli.options import db_option, opened_library
from maktaba.core.sects import Sect, book_sect, matches_sect

console = Console()


@click.command("ls")
@db_option
@click.option(
    "--sect",
    type=click.Choice([s.value for s in Sect]),
    default=Sect.ALL.value,
    help="Only list books of this sect.",
)
def ls(db_path: Path | None, sect: str) -> None:
    """List all books in the library."""
    with opened_library(db_path) as library:
        books = [
            b for b in library.books() if matches_sect(b.source_id or b.id, Sect(sect))
        ]
        if not books:
            console.print("[yellow]No books in the library.[/yellow]")
            return

        table = Table()
        table.add_column("ID", style="dim")
        table.add_column("Title", style="bold")
        table.add_column("Author")
        table.add_column("Sect")
        table.add_column("Lang", width=5)
        table.add_column("Vols", justify="right")

        for book in books:
            title = escape(book.title)
            if book.is_translation:
                title = f"{title} [dim](translation of {book.source_id})[/dim]"
            table.add_row(
                book.id,
                title,
                book.author or "[dim]unknown[/dim]",
                book_sect(book.source_id or book.id).value,
                book.language or "ar",
                str(len(library.volumes_for(book.id))),
            )

        console.print(table)
        console.print(f"\n[dim]{len(books)} book(s)[/dim]")
