# ABOUTME: The `maktaba read` command for displaying one stored page.
# ABOUTME: Renders the page's paragraphs, optionally from the book's translation.

from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.text import Text

from maktaba.cli.options import db_option, opened_library
from maktaba.text.paragraphs import format_page_text

console = Console()


@click.command("read")
@click.argument("book_id")
@click.argument("volume", type=click.IntRange(min=1))
@click.argument("page", type=click.IntRange(min=1), default=1)
@db_option
@click.option(
    "--translation",
    is_flag=True,
    default=False,
    help="Show the same page from the book's translation.",
)
def read(book_id: str, volume: int, page: int, db_path: Path | None, translation: bool) -> None:
    """Show one page of a book."""
    with opened_library(db_path) as library:
        book = library.get_book(book_id)
        if book is None:
            console.print(f"[red]Book {book_id} not found.[/red]")
            raise SystemExit(1)

        if translation:
            linked = library.translation_for(book_id)
            if linked is None:
                console.print(f"[red]No translation of {book_id} is imported.[/red]")
                raise SystemExit(1)
            book = linked

        stored = library.get_page(book.id, volume, page)
        if stored is None:
            console.print(f"[red]Page {page} of volume {volume} is not stored.[/red]")
            raise SystemExit(1)

        numbers = [p.page for p in library.pages_for(book.id, volume)]
        position = numbers.index(page)
        console.print(
            Panel(
                Text(format_page_text(stored.text)),
                title=f"{book.title} | vol {volume} | page {page}",
                title_align="left",
            )
        )
        nav = []
        if position > 0:
            nav.append(f"previous: {numbers[position - 1]}")
        if position < len(numbers) - 1:
            nav.append(f"next: {numbers[position + 1]}")
        if nav:
            console.print(f"[dim]{', '.join(nav)}[/dim]")
