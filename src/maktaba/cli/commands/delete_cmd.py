# ABOUTME: The `maktaba delete` and `maktaba clear` commands.
# ABOUTME: Removes one book with its translations, or wipes the whole library.

from pathlib import Path

import click
from rich.console import Console

from maktaba.cli.options import db_option, opened_library
from maktaba.db.store import StorageError

console = Console()


@click.command("delete")
@click.argument("book_id")
@db_option
@click.option("-y", "--yes", is_flag=True, default=False, help="Do not ask for confirmation.")
def delete(book_id: str, db_path: Path | None, yes: bool) -> None:
    """Delete a book, its volumes and pages, and any imported translation."""
    with opened_library(db_path) as library:
        book = library.get_book(book_id)
        if book is None:
            console.print(f"[red]Book {book_id} not found.[/red]")
            raise SystemExit(1)
        if not yes and not click.confirm(f"Delete {book.title} ({book_id})?"):
            console.print("[yellow]Cancelled.[/yellow]")
            return
        try:
            removed = library.delete_book(book_id)
        except StorageError as exc:
            console.print(f"[red]Delete failed:[/red] {exc}")
            raise SystemExit(1) from exc
    console.print(f"[green]Deleted[/green] {', '.join(removed)}")


@click.command("clear")
@db_option
@click.option("-y", "--yes", is_flag=True, default=False, help="Do not ask for confirmation.")
def clear(db_path: Path | None, yes: bool) -> None:
    """Delete every book in the library."""
    if not yes and not click.confirm("Delete every book in the library?"):
        console.print("[yellow]Cancelled.[/yellow]")
        return
    with opened_library(db_path) as library:
        try:
            library.clear_all()
        except StorageError as exc:
            console.print(f"[red]Clear failed:[/red] {exc}")
            raise SystemExit(1) from exc
    console.print("[green]Library cleared.[/green]")
