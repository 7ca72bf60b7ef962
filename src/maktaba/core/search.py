# ABOUTME: Substring search over page text with exact and root (normalized) matching.
# ABOUTME: Builds snippets from the original text and shapes results into groups and pages.

import math
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from enum import Enum

from maktaba.core.sects import Sect
from maktaba.db.mapping import Page
from maktaba.text.normalize import normalize_arabic, normalize_with_offsets
from maktaba.text.transliterate import transliterate

MAX_MATCHES_PER_PAGE = 3
SNIPPET_CONTEXT = 50
MAX_DISPLAYED_GROUPS = 50
RESULTS_PER_PAGE = 20
ELLIPSIS = "..."


class MatchMode(str, Enum):
    """How a query is compared with page text."""

    EXACT = "exact"
    ROOT = "root"


class InputScript(str, Enum):
    """The script the query was typed in."""

    NATIVE = "native"
    ROMANIZED = "romanized"


@dataclass(frozen=True)
class SearchRequest:
    """A query plus everything that changes its results."""

    query: str
    mode: MatchMode = MatchMode.ROOT
    script: InputScript = InputScript.NATIVE
    sect: Sect = Sect.ALL
    book_ids: frozenset[str] = frozenset()

    def search_term(self) -> str:
        """The query after trimming and, for romanized input, transliteration."""
        term = self.query.strip()
        if self.script == InputScript.ROMANIZED:
            term = transliterate(term)
        return term

    def cache_key(self) -> tuple[str, str, tuple[str, ...], str]:
        return (
            MatchMode(self.mode).value,
            Sect(self.sect).value,
            tuple(sorted(self.book_ids)),
            self.search_term(),
        )


@dataclass(frozen=True)
class SearchResult:
    """One match. match_index counts matches within the page, from 0."""

    book_id: str
    book_title: str
    volume: int
    page: int
    snippet: str
    match_index: int


def build_snippet(text: str, start: int, end: int, context: int = SNIPPET_CONTEXT) -> str:
    """Cut a window of context characters either side of text[start:end].

    An ellipsis marks each side where the window does not reach the end
    of the text.
    """
    lo = max(0, start - context)
    hi = min(len(text), end + context)
    snippet = text[lo:hi]
    if lo > 0:
        snippet = ELLIPSIS + snippet
    if hi < len(text):
        snippet = snippet + ELLIPSIS
    return snippet


def _page_spans(
    text: str, needle: str, mode: MatchMode, limit: int
) -> list[tuple[int, int]]:
    """Find up to limit non-overlapping matches, as spans into the original text."""
    if mode == MatchMode.ROOT:
        # Cheap containment check before building the offset map
        if needle not in normalize_arabic(text):
            return []
        haystack, offsets = normalize_with_offsets(text)
    else:
        haystack, offsets = text, None

    spans: list[tuple[int, int]] = []
    position = 0
    while len(spans) < limit:
        index = haystack.find(needle, position)
        if index == -1:
            break
        end = index + len(needle)
        if offsets is None:
            spans.append((index, end))
        else:
            spans.append((offsets[index], offsets[end - 1] + 1))
        position = end
    return spans


def find_matches(
    term: str,
    mode: MatchMode,
    pages: Iterable[Page],
    titles: Mapping[str, str],
    *,
    max_per_page: int = MAX_MATCHES_PER_PAGE,
) -> list[SearchResult]:
    """Scan pages for a search term.

    In root mode both the term and each page are normalized before
    comparison; in exact mode they are compared as-is. Each page yields
    at most max_per_page results, searching on from the end of the
    previous match. Results come back in page order with no ranking.

    Args:
        term: The query, already transliterated if needed.
        mode: Exact or root matching.
        pages: Candidate pages, already filtered.
        titles: Book id to title, resolved at search time.
        max_per_page: Cap on results from a single page.

    Returns:
        One SearchResult per match.
    """
    needle = normalize_arabic(term) if mode == MatchMode.ROOT else term
    if not needle:
        return []

    results: list[SearchResult] = []
    for page in pages:
        text = page.flat_text
        for match_index, (start, end) in enumerate(_page_spans(text, needle, mode, max_per_page)):
            results.append(
                SearchResult(
                    book_id=page.book_id,
                    book_title=titles.get(page.book_id, page.book_id),
                    volume=page.volume,
                    page=page.page,
                    snippet=build_snippet(text, start, end),
                    match_index=match_index,
                )
            )
    return results


@dataclass
class ResultGroup:
    """Results from one book. Groups start collapsed."""

    book_id: str
    book_title: str
    results: list[SearchResult] = field(default_factory=list)
    collapsed: bool = True

    @property
    def count(self) -> int:
        return len(self.results)


def group_results(results: Iterable[SearchResult]) -> list[ResultGroup]:
    """Group results by book, in order of each book's first result."""
    groups: dict[str, ResultGroup] = {}
    for result in results:
        group = groups.get(result.book_id)
        if group is None:
            group = groups[result.book_id] = ResultGroup(result.book_id, result.book_title)
        group.results.append(result)
    return list(groups.values())


@dataclass(frozen=True)
class ResultPage:
    """One page of a paginated result list. number is 1-based."""

    items: list[SearchResult]
    number: int
    total_pages: int
    total: int

    @property
    def has_next(self) -> bool:
        return self.number < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.number > 1


def paginate(
    results: Sequence[SearchResult], number: int, per_page: int = RESULTS_PER_PAGE
) -> ResultPage:
    """Slice out one page of results, clamping number into range."""
    if per_page < 1:
        raise ValueError("per_page must be at least 1")
    total_pages = max(1, math.ceil(len(results) / per_page))
    number = min(max(number, 1), total_pages)
    start = (number - 1) * per_page
    return ResultPage(
        items=list(results[start:start + per_page]),
        number=number,
        total_pages=total_pages,
        total=len(results),
    )
