# ABOUTME: The `maktaba search` command for full-text search of stored pages.
# ABOUTME: Applies saved preferences as defaults and prints a page of results or book groups.

from pathlib import Path

import click
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from maktaba.cli.options import db_option, opened_library, prefs_option
from maktaba.core.engine import SearchEngine, SearchSession
from maktaba.core.search import InputScript, MatchMode, ResultGroup, SearchRequest
from maktaba.core.sects import Sect
from maktaba.prefs import load_preferences
from maktaba.text.transliterate import contains_roman

console = Console()


def _resolve_script(script: str | None, default: InputScript, query: str) -> InputScript:
    if script == "auto":
        return InputScript.ROMANIZED if contains_roman(query) else InputScript.NATIVE
    if script is None:
        return default
    return InputScript(script)


def _print_groups(groups: list[ResultGroup]) -> None:
    for group in groups:
        marker = "-" if group.collapsed else "+"
        console.print(
            f"{marker} [bold]{escape(group.book_title)}[/bold] [dim]({group.book_id})[/dim]: "
            f"{group.count} result(s)",
            highlight=False,
        )
        if group.collapsed:
            continue
        for result in group.results:
            console.print(
                f"    vol {result.volume} p. {result.page}: {result.snippet}",
                markup=False,
                highlight=False,
            )


@click.command("search")
@click.argument("query")
@db_option
@prefs_option
@click.option(
    "--mode",
    type=click.Choice([m.value for m in MatchMode]),
    default=None,
    help="exact matches diacritics as typed; root ignores them (default: from prefs).",
)
@click.option(
    "--script",
    type=click.Choice([s.value for s in InputScript] + ["auto"]),
    default=None,
    help="Script the query is typed in; auto detects Latin letters.",
)
@click.option(
    "--sect",
    type=click.Choice([s.value for s in Sect]),
    default=None,
    help="Only search books of this sect (default: from prefs).",
)
@click.option(
    "--book",
    "book_ids",
    multiple=True,
    help="Restrict the search to this book id. Repeatable.",
)
@click.option(
    "-p", "--page",
    "page_number",
    type=click.IntRange(min=1),
    default=1,
    help="Results page to show.",
)
@click.option(
    "--grouped",
    is_flag=True,
    default=False,
    help="Group results by book instead of paging through them.",
)
@click.option(
    "--expand",
    "expanded",
    multiple=True,
    help="With --grouped, list the results of this book id. Repeatable.",
)
def search(
    query: str,
    db_path: Path | None,
    prefs_path: Path | None,
    mode: str | None,
    script: str | None,
    sect: str | None,
    book_ids: tuple[str, ...],
    page_number: int,
    grouped: bool,
    expanded: tuple[str, ...],
) -> None:
    """Search every stored page for QUERY."""
    if not query.strip():
        console.print("[yellow]Enter a search query.[/yellow]")
        return

    prefs = load_preferences(prefs_path)
    request = SearchRequest(
        query=query,
        mode=MatchMode(mode) if mode else prefs.search_mode,
        script=_resolve_script(script, prefs.input_script, query),
        sect=Sect(sect) if sect else prefs.sect_filter,
        book_ids=frozenset(book_ids),
    )

    with opened_library(db_path) as library, SearchEngine(library) as engine:
        session = SearchSession(engine)
        session.run(request)
        duration = engine.last_duration or 0.0

        if request.script == InputScript.ROMANIZED:
            console.print(f"[dim]Searching for {request.search_term()}[/dim]", highlight=False)

        if not session.total:
            console.print("[yellow]No results found.[/yellow]")
            return

        if grouped:
            for book_id in expanded:
                session.toggle_group(book_id)
            groups = session.groups()
            _print_groups(groups)
            shown = ""
            if len(groups) < session.group_total:
                shown = f", showing the first {len(groups)}"
            console.print(
                f"\n[dim]{session.total} result(s) in {session.group_total} book(s)"
                f"{shown} ({duration:.2f}s)[/dim]"
            )
            return

        page = session.go_to(page_number)
        table = Table()
        table.add_column("Book", style="bold")
        table.add_column("Vol", justify="right")
        table.add_column("Page", justify="right")
        table.add_column("Snippet")
        for result in page.items:
            table.add_row(
                f"{escape(result.book_title)} [dim]({result.book_id})[/dim]",
                str(result.volume),
                str(result.page),
                escape(result.snippet),
            )
        console.print(table)
        console.print(
            f"\n[dim]{page.total} result(s), page {page.number} of {page.total_pages} "
            f"({duration:.2f}s)[/dim]"
        )
