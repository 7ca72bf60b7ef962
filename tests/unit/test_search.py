# ABOUTME: Unit tests for matching, snippets, grouping, and pagination.
# ABOUTME: Runs find_matches over hand-built pages without touching the database.

import pytest

from maktaba.core.search import (
    ELLIPSIS,
    InputScript,
    MatchMode,
    SearchRequest,
    SearchResult,
    build_snippet,
    find_matches,
    group_results,
    paginate,
)
from maktaba.core.sects import Sect
from maktaba.db.mapping import Page
from maktaba.text.paragraphs import serialize_paragraphs

TITLES = {"b1": "كتاب", "b2": "كتاب آخر"}


def _page(text: str, book_id: str = "b1", volume: int = 1, page: int = 1) -> Page:
    return Page(book_id, volume, page, serialize_paragraphs([text]))


def _result(book_id: str, page: int = 1, index: int = 0) -> SearchResult:
    return SearchResult(book_id, TITLES.get(book_id, book_id), 1, page, "s", index)


class TestBuildSnippet:
    """Tests for build_snippet()."""

    def test_short_text_has_no_ellipsis(self) -> None:
        assert build_snippet("abc", 1, 2) == "abc"

    def test_window_and_markers(self) -> None:
        text = "x" * 100 + "MATCH" + "y" * 100
        snippet = build_snippet(text, 100, 105)
        assert snippet == ELLIPSIS + "x" * 50 + "MATCH" + "y" * 50 + ELLIPSIS

    def test_only_trailing_marker_at_start(self) -> None:
        text = "MATCH" + "y" * 100
        snippet = build_snippet(text, 0, 5)
        assert snippet.startswith("MATCH")
        assert snippet.endswith(ELLIPSIS)

    def test_custom_context(self) -> None:
        assert build_snippet("abcdefg", 3, 4, context=1) == ELLIPSIS + "cde" + ELLIPSIS


class TestFindMatches:
    """Tests for find_matches()."""

    def test_root_match_ignores_diacritics(self) -> None:
        pages = [_page("العِلْمُ نُورٌ")]
        results = find_matches("علم", MatchMode.ROOT, pages, TITLES)
        assert len(results) == 1
        assert results[0].book_title == "كتاب"

    def test_exact_match_respects_diacritics(self) -> None:
        pages = [_page("العِلْمُ نُورٌ")]
        assert find_matches("علم", MatchMode.EXACT, pages, TITLES) == []
        assert len(find_matches("العِلْمُ", MatchMode.EXACT, pages, TITLES)) == 1

    def test_root_query_is_normalized_too(self) -> None:
        pages = [_page("الايمان")]
        assert len(find_matches("الإِيمَان", MatchMode.ROOT, pages, TITLES)) == 1

    def test_snippet_cut_from_original_text(self) -> None:
        pages = [_page("قَالَ العِلْمُ نُورٌ")]
        [result] = find_matches("علم", MatchMode.ROOT, pages, TITLES)
        assert result.snippet == "قَالَ العِلْمُ نُورٌ"

    def test_caps_matches_per_page(self) -> None:
        pages = [_page(" ".join(["علم"] * 10))]
        results = find_matches("علم", MatchMode.ROOT, pages, TITLES)
        assert len(results) == 3
        assert [r.match_index for r in results] == [0, 1, 2]

    def test_custom_cap(self) -> None:
        pages = [_page("علم علم علم")]
        assert len(find_matches("علم", MatchMode.ROOT, pages, TITLES, max_per_page=1)) == 1

    def test_matches_do_not_overlap(self) -> None:
        pages = [_page("aaaa")]
        assert len(find_matches("aa", MatchMode.EXACT, pages, TITLES)) == 2

    def test_results_follow_page_order(self) -> None:
        pages = [
            _page("علم", page=1),
            _page("لا شيء", page=2),
            _page("علم", "b2", page=1),
        ]
        results = find_matches("علم", MatchMode.ROOT, pages, TITLES)
        assert [(r.book_id, r.page) for r in results] == [("b1", 1), ("b2", 1)]

    def test_matches_across_paragraph_boundary(self) -> None:
        page = Page("b1", 1, 1, serialize_paragraphs(["العلم", "نور"]))
        assert len(find_matches("العلم نور", MatchMode.ROOT, [page], TITLES)) == 1

    def test_raw_page_text_is_searched(self) -> None:
        page = Page("b1", 1, 1, "العلم نور بلا قوسين")
        assert len(find_matches("نور", MatchMode.ROOT, [page], TITLES)) == 1

    def test_empty_term_finds_nothing(self) -> None:
        assert find_matches("", MatchMode.ROOT, [_page("علم")], TITLES) == []
        assert find_matches("\u064e", MatchMode.ROOT, [_page("علم")], TITLES) == []

    def test_unknown_title_falls_back_to_id(self) -> None:
        [result] = find_matches("علم", MatchMode.ROOT, [_page("علم", "b9")], TITLES)
        assert result.book_title == "b9"


class TestSearchRequest:
    """Tests for SearchRequest helpers."""

    def test_native_term_is_trimmed(self) -> None:
        assert SearchRequest("  علم  ").search_term() == "علم"

    def test_romanized_term_is_transliterated(self) -> None:
        request = SearchRequest("ilm", script=InputScript.ROMANIZED)
        assert request.search_term() == "علم"

    def test_cache_key_uses_effective_query(self) -> None:
        romanized = SearchRequest("ilm", script=InputScript.ROMANIZED)
        native = SearchRequest("علم")
        assert romanized.cache_key() == native.cache_key()

    def test_cache_key_distinguishes_parameters(self) -> None:
        base = SearchRequest("علم")
        assert base.cache_key() != SearchRequest("علم", mode=MatchMode.EXACT).cache_key()
        assert base.cache_key() != SearchRequest("علم", sect=Sect.SUNNI).cache_key()
        assert base.cache_key() != SearchRequest("علم", book_ids=frozenset({"b1"})).cache_key()

    def test_cache_key_ignores_book_order(self) -> None:
        a = SearchRequest("علم", book_ids=frozenset({"b1", "b2"}))
        b = SearchRequest("علم", book_ids=frozenset({"b2", "b1"}))
        assert a.cache_key() == b.cache_key()


class TestGroupResults:
    """Tests for group_results()."""

    def test_groups_in_first_seen_order(self) -> None:
        results = [_result("b2"), _result("b1"), _result("b2", page=2)]
        groups = group_results(results)
        assert [g.book_id for g in groups] == ["b2", "b1"]
        assert [g.count for g in groups] == [2, 1]

    def test_groups_start_collapsed(self) -> None:
        assert all(g.collapsed for g in group_results([_result("b1")]))

    def test_empty(self) -> None:
        assert group_results([]) == []


class TestPaginate:
    """Tests for paginate()."""

    def test_first_page(self) -> None:
        results = [_result("b1", page=n) for n in range(1, 46)]
        page = paginate(results, 1)
        assert len(page.items) == 20
        assert page.total_pages == 3
        assert page.total == 45
        assert page.has_next
        assert not page.has_previous

    def test_last_page_is_partial(self) -> None:
        results = [_result("b1", page=n) for n in range(1, 46)]
        page = paginate(results, 3)
        assert [r.page for r in page.items] == list(range(41, 46))
        assert not page.has_next

    def test_number_is_clamped(self) -> None:
        results = [_result("b1", page=n) for n in range(1, 6)]
        assert paginate(results, 99).number == 1
        assert paginate(results, 0).number == 1

    def test_empty_results(self) -> None:
        page = paginate([], 1)
        assert page.items == []
        assert page.total_pages == 1

    def test_rejects_bad_page_size(self) -> None:
        with pytest.raises(ValueError):
            paginate([], 1, per_page=0)
