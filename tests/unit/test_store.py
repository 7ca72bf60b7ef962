# ABOUTME: Unit tests for DocumentStore CRUD and transactional behavior.
# ABOUTME: Covers upserts, ordered loads, volume replacement, cascading deletes, and error wrapping.

import sqlite3

import pytest

from maktaba.db.mapping import Book, Page, Volume
from maktaba.db.store import DocumentStore, StorageError


def _pages(book_id: str, volume: int, *numbers: int) -> list[Page]:
    return [Page(book_id, volume, n, f'["page {n}"]') for n in numbers]


class TestBooks:
    """Tests for book records."""

    def test_put_and_get(self, store: DocumentStore) -> None:
        book = Book("b1", "كتاب", author="مؤلف", volume_count=2)
        store.put_book(book)
        assert store.get_book("b1") == book

    def test_get_missing(self, store: DocumentStore) -> None:
        assert store.get_book("nope") is None

    def test_put_replaces_existing(self, store: DocumentStore) -> None:
        store.put_book(Book("b1", "Old"))
        store.put_book(Book("b1", "New", volume_count=4))
        book = store.get_book("b1")
        assert book is not None
        assert book.title == "New"
        assert book.volume_count == 4

    def test_translation_ids(self, store: DocumentStore) -> None:
        store.put_book(Book("b1", "Original"))
        store.put_book(Book("b1_en", "Translation", source_id="b1"))
        store.put_book(Book("other", "Other"))
        assert store.translation_ids("b1") == ["b1_en"]


class TestVolumesAndPages:
    """Tests for volume and page records."""

    def test_replace_volume_writes_pages_and_record(self, store: DocumentStore) -> None:
        store.replace_volume(Volume("b1", 1, 2), _pages("b1", 1, 1, 2))
        assert [p.page for p in store.list_pages("b1", 1)] == [1, 2]
        assert store.list_volumes("b1") == [Volume("b1", 1, 2)]

    def test_replace_volume_drops_stale_pages(self, store: DocumentStore) -> None:
        store.replace_volume(Volume("b1", 1, 2), _pages("b1", 1, 1, 2))
        store.replace_volume(Volume("b1", 1, 1), _pages("b1", 1, 1))
        assert [p.page for p in store.list_pages("b1", 1)] == [1]

    def test_replace_volume_leaves_other_volumes(self, store: DocumentStore) -> None:
        store.replace_volume(Volume("b1", 1, 1), _pages("b1", 1, 1))
        store.replace_volume(Volume("b1", 2, 1), _pages("b1", 2, 1))
        store.replace_volume(Volume("b1", 1, 1), [])
        assert store.list_pages("b1", 1) == []
        assert len(store.list_pages("b1", 2)) == 1

    def test_failed_replace_keeps_previous_pages(self, store: DocumentStore) -> None:
        store.replace_volume(Volume("b1", 1, 2), _pages("b1", 1, 1, 2))
        bad = [Page("b1", 1, 1, '["ok"]'), Page("b1", 1, 0, '["bad"]')]
        with pytest.raises(StorageError):
            store.replace_volume(Volume("b1", 1, 2), bad)
        assert [p.page for p in store.list_pages("b1", 1)] == [1, 2]
        assert store.list_pages("b1", 1)[0].text == '["page 1"]'

    def test_delete_pages_for_counts_rows(self, store: DocumentStore) -> None:
        store.put_pages(_pages("b1", 1, 1, 2, 3))
        assert store.delete_pages_for("b1", 1) == 3
        assert store.list_pages("b1") == []

    def test_put_volume_upserts(self, store: DocumentStore) -> None:
        store.put_volume(Volume("b1", 1, 5))
        store.put_volume(Volume("b1", 1, 7))
        assert [v.total_pages for v in store.list_volumes("b1")] == [7]

    def test_list_pages_of_whole_book(self, store: DocumentStore) -> None:
        store.put_pages(_pages("b1", 2, 1) + _pages("b1", 1, 2, 1))
        assert [p.key for p in store.list_pages("b1")] == [("b1", 1, 1), ("b1", 1, 2), ("b1", 2, 1)]


class TestLoadAll:
    """Tests for load_all()."""

    def test_empty_store(self, store: DocumentStore) -> None:
        assert store.load_all() == ([], [], [])

    def test_returns_records_in_key_order(self, store: DocumentStore) -> None:
        store.put_book(Book("b2", "B"))
        store.put_book(Book("b1", "A"))
        store.replace_volume(Volume("b2", 1, 1), _pages("b2", 1, 1))
        store.replace_volume(Volume("b1", 1, 2), _pages("b1", 1, 2, 1))

        books, volumes, pages = store.load_all()
        assert [b.id for b in books] == ["b1", "b2"]
        assert [v.key for v in volumes] == [("b1", 1), ("b2", 1)]
        assert [p.key for p in pages] == [("b1", 1, 1), ("b1", 1, 2), ("b2", 1, 1)]

    def test_fails_loudly_on_closed_connection(self, conn: sqlite3.Connection) -> None:
        store = DocumentStore(conn)
        conn.close()
        with pytest.raises(StorageError, match="load books"):
            store.load_all()


class TestDeletion:
    """Tests for delete_book() and clear_all()."""

    def test_delete_book_cascades(self, store: DocumentStore) -> None:
        store.put_book(Book("b1", "A", volume_count=1))
        store.replace_volume(Volume("b1", 1, 1), _pages("b1", 1, 1))

        assert store.delete_book("b1") == ["b1"]
        assert store.load_all() == ([], [], [])

    def test_delete_book_removes_translations(self, store: DocumentStore) -> None:
        store.put_book(Book("b1", "A"))
        store.put_book(Book("b1_en", "A (en)", source_id="b1"))
        store.replace_volume(Volume("b1_en", 1, 1), _pages("b1_en", 1, 1))
        store.put_book(Book("b2", "B"))

        assert store.delete_book("b1") == ["b1", "b1_en"]
        books, volumes, pages = store.load_all()
        assert [b.id for b in books] == ["b2"]
        assert volumes == []
        assert pages == []

    def test_delete_book_clears_orphans(self, store: DocumentStore) -> None:
        store.replace_volume(Volume("ghost", 1, 1), _pages("ghost", 1, 1))
        store.delete_book("ghost")
        assert store.list_pages("ghost") == []
        assert store.list_volumes("ghost") == []

    def test_clear_all(self, store: DocumentStore) -> None:
        store.put_book(Book("b1", "A"))
        store.replace_volume(Volume("b1", 1, 1), _pages("b1", 1, 1))
        store.clear_all()
        assert store.load_all() == ([], [], [])

    def test_write_on_closed_connection_raises_storage_error(self, conn: sqlite3.Connection) -> None:
        store = DocumentStore(conn)
        conn.close()
        with pytest.raises(StorageError):
            store.put_book(Book("b1", "A"))
