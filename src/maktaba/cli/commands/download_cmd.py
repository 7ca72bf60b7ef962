# ABOUTME: The `maktaba available` and `maktaba download` commands.
# ABOUTME: Lists the server's catalog and downloads volumes through the bounded fetch pool.

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.progress import (
    BarColumn,
    MofNCompleteColumn,
    Progress,
    SpinnerColumn,
    TextColumn,
    TimeRemainingColumn,
)
from rich.table import Table

from maktaba.cli.options import db_option, opened_library, prefs_option
from maktaba.core.downloads import (
    DEFAULT_CONCURRENCY,
    BatchSummary,
    download_volumes,
    downloads_for_sect,
    missing_downloads,
)
from maktaba.core.sects import Sect, book_sect
from maktaba.db.store import StorageError
from maktaba.prefs import load_preferences
from maktaba.remote.catalog import (
    LANGUAGE_FILTERS,
    AvailableDownload,
    DownloadCatalog,
    fetch_catalog,
    filter_books,
)
from maktaba.remote.http import DownloadError, HttpClient, MaktabaHttpClient

console = Console()


def _create_client() -> MaktabaHttpClient:
    """Create the default HTTP client."""
    return MaktabaHttpClient()


def _make_progress(console: Console) -> Progress:
    return Progress(
        SpinnerColumn(),
        TextColumn("[bold]{task.description}"),
        BarColumn(),
        MofNCompleteColumn(),
        TimeRemainingColumn(),
        console=console,
    )


def _load_catalog(client: HttpClient, server: str | None, prefs_path: Path | None) -> DownloadCatalog:
    server_url = server or load_preferences(prefs_path).server_url
    try:
        return fetch_catalog(client, server_url)
    except DownloadError as exc:
        console.print(f"[red]Could not load the catalog:[/red] {exc}")
        raise SystemExit(1) from exc


server_option = click.option(
    "--server",
    default=None,
    help="Catalog server URL (default: from prefs).",
)


@click.command("available")
@prefs_option
@server_option
@click.option(
    "--sect",
    type=click.Choice([s.value for s in Sect]),
    default=Sect.ALL.value,
    help="Only list books of this sect.",
)
@click.option(
    "--language",
    type=click.Choice(LANGUAGE_FILTERS),
    default="all",
    help="Only list books in this language.",
)
@click.option(
    "--translations",
    is_flag=True,
    default=False,
    help="List translations instead of original books.",
)
def available(
    prefs_path: Path | None,
    server: str | None,
    sect: str,
    language: str,
    translations: bool,
) -> None:
    """List books available for download."""
    with _create_client() as client:
        catalog = _load_catalog(client, server, prefs_path)

    source = catalog.translations if translations else catalog.books
    books = filter_books(source, sect=Sect(sect), language=language)
    if not books:
        console.print("[yellow]No books available.[/yellow]")
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
        if book.title_en and book.title_en != book.title:
            title = f"{title}\n[dim]{escape(book.title_en)}[/dim]"
        table.add_row(
            book.book_id,
            title,
            escape(book.author or ""),
            book_sect(book.classification_id).value,
            book.language,
            str(book.total),
        )
    console.print(table)
    console.print(f"\n[dim]{len(books)} book(s)[/dim]")


def _select_downloads(
    catalog: DownloadCatalog,
    book_ids: tuple[str, ...],
    volumes: tuple[int, ...],
    sect: str | None,
    with_translation: bool,
) -> list[AvailableDownload]:
    if sect is not None:
        return downloads_for_sect(catalog, Sect(sect), include_translations=with_translation)

    by_id = {b.book_id: b for b in catalog.books + catalog.translations}
    selected: list[AvailableDownload] = []
    for book_id in book_ids:
        book = by_id.get(book_id)
        if book is None:
            console.print(f"[red]Book {book_id} is not in the catalog.[/red]")
            raise SystemExit(1)
        chosen = [d for d in book.downloads if not volumes or d.volume in volumes]
        selected.extend(chosen)
        if with_translation:
            linked = catalog.translation_for(book)
            if linked is not None:
                selected.extend(d for d in linked.downloads if not volumes or d.volume in volumes)
    return selected


def _print_summary(summary: BatchSummary) -> None:
    parts = [f"[green]{summary.success_count} downloaded[/green]"]
    if summary.failure_count:
        parts.append(f"[red]{summary.failure_count} failed[/red]")
    console.print(f"{', '.join(parts)} of {summary.total}")
    for failure in summary.failures:
        d = failure.download
        console.print(f"  [dim]{d.book_id} vol {d.volume}:[/dim] {failure.reason}")


@click.command("download")
@click.argument("book_ids", nargs=-1)
@db_option
@prefs_option
@server_option
@click.option(
    "--volume",
    "volumes",
    type=click.IntRange(min=1),
    multiple=True,
    help="Only download this volume. Repeatable; default is every volume.",
)
@click.option(
    "--sect",
    type=click.Choice([Sect.SHIA.value, Sect.SUNNI.value]),
    default=None,
    help="Download every book of a sect instead of naming books.",
)
@click.option(
    "--with-translation",
    is_flag=True,
    default=False,
    help="Also download matching translation volumes.",
)
@click.option(
    "--redownload",
    is_flag=True,
    default=False,
    help="Download volumes that are already in the library.",
)
@click.option(
    "-j", "--concurrency",
    type=click.IntRange(min=1),
    default=DEFAULT_CONCURRENCY,
    help=f"Parallel downloads (default: {DEFAULT_CONCURRENCY}).",
)
def download(
    book_ids: tuple[str, ...],
    db_path: Path | None,
    prefs_path: Path | None,
    server: str | None,
    volumes: tuple[int, ...],
    sect: str | None,
    with_translation: bool,
    redownload: bool,
    concurrency: int,
) -> None:
    """Download and import volumes of BOOK_IDS from the catalog server."""
    if not book_ids and sect is None:
        console.print("[red]Name at least one book id, or use --sect.[/red]")
        raise SystemExit(1)

    with _create_client() as client:
        catalog = _load_catalog(client, server, prefs_path)
        selected = _select_downloads(catalog, book_ids, volumes, sect, with_translation)

        with opened_library(db_path) as library:
            if not redownload:
                pending = missing_downloads(selected, library)
                skipped = len(selected) - len(pending)
                if skipped:
                    console.print(f"[dim]Skipping {skipped} volume(s) already in the library.[/dim]")
                selected = pending
            if not selected:
                console.print("[green]Nothing to download.[/green]")
                return

            progress = _make_progress(console)
            task_id = progress.add_task("Downloading", total=len(selected))
            try:
                with progress:
                    summary = download_volumes(
                        selected,
                        client,
                        library,
                        concurrency=concurrency,
                        on_progress=lambda done, total: progress.update(task_id, completed=done),
                    )
            except StorageError as exc:
                console.print(f"[red]Storage error:[/red] {exc}")
                raise SystemExit(1) from exc

    _print_summary(summary)
    if summary.failure_count:
        raise SystemExit(1)
