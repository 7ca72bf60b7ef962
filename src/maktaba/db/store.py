# ABOUTME: Durable storage of books, volumes, and pages in SQLite.
# ABOUTME: Groups every multi-record change in one transaction and wraps sqlite3 errors.

import logging
import sqlite3
from collections.abc import Iterable, Iterator
from contextlib import contextmanager

from maktaba.db.mapping import (
    Book,
    Page,
    Volume,
    book_to_row,
    page_to_row,
    row_to_book,
    row_to_page,
    row_to_volume,
    volume_to_row,
)

logger = logging.getLogger(__name__)


class StorageError(Exception):
    """Raised when a document store operation fails."""


def _upsert_sql(table: str, columns: tuple[str, ...], key: tuple[str, ...]) -> str:
    """Build an INSERT ... ON CONFLICT DO UPDATE statement with named placeholders."""
    placeholders = ", ".join(f":{c}" for c in columns)
    updates = ", ".join(f"{c} = excluded.{c}" for c in columns if c not in key)
    return (
        f"INSERT INTO {table} ({', '.join(columns)}) VALUES ({placeholders}) "
        f"ON CONFLICT ({', '.join(key)}) DO UPDATE SET {updates}"
    )


_BOOK_UPSERT = _upsert_sql(
    "books",
    ("id", "title", "author", "volume_count", "source_id", "language", "imported_at"),
    ("id",),
)
_VOLUME_UPSERT = _upsert_sql(
    "volumes",
    ("book_id", "volume", "total_pages", "imported_at"),
    ("book_id", "volume"),
)
_PAGE_UPSERT = _upsert_sql(
    "pages",
    ("book_id", "volume", "page", "text"),
    ("book_id", "volume", "page"),
)


class DocumentStore:
    """Wraps a sqlite3 connection and provides typed storage for the corpus.

    Each public write runs in its own transaction: either every record of
    the call commits or none does. A process killed mid-call can still
    leave the database as of the last completed call, so a multi-call
    sequence (an import of several volumes) is not atomic as a whole.
    """

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    @contextmanager
    def _transaction(self, action: str) -> Iterator[sqlite3.Connection]:
        """Run a block inside one transaction, rolling back on any error."""
        try:
            with self._conn:
                yield self._conn
        except sqlite3.Error as exc:
            raise StorageError(f"{action} failed: {exc}") from exc

    def _query(self, action: str, sql: str, params: tuple = ()) -> list[sqlite3.Row]:
        try:
            return self._conn.execute(sql, params).fetchall()
        except sqlite3.Error as exc:
            raise StorageError(f"{action} failed: {exc}") from exc

    # --- Reads ---

    def load_all(self) -> tuple[list[Book], list[Volume], list[Page]]:
        """Load the whole corpus, ordered by key.

        Raises:
            StorageError: If any table cannot be read. Partial data is never returned.
        """
        books = [row_to_book(r) for r in self._query("load books", "SELECT * FROM books ORDER BY id")]
        volumes = [
            row_to_volume(r)
            for r in self._query("load volumes", "SELECT * FROM volumes ORDER BY book_id, volume")
        ]
        pages = [
            row_to_page(r)
            for r in self._query("load pages", "SELECT * FROM pages ORDER BY book_id, volume, page")
        ]
        logger.info(
            "Loaded %d book(s), %d volume(s), %d page(s) from store",
            len(books), len(volumes), len(pages),
        )
        return books, volumes, pages

    def get_book(self, book_id: str) -> Book | None:
        """Retrieve a book by its id."""
        rows = self._query("get book", "SELECT * FROM books WHERE id = ?", (book_id,))
        return row_to_book(rows[0]) if rows else None

    def list_volumes(self, book_id: str) -> list[Volume]:
        """Return all volumes of a book, ordered by volume number."""
        rows = self._query(
            "list volumes",
            "SELECT * FROM volumes WHERE book_id = ? ORDER BY volume",
            (book_id,),
        )
        return [row_to_volume(r) for r in rows]

    def list_pages(self, book_id: str, volume: int | None = None) -> list[Page]:
        """Return pages of a book, or of one of its volumes, ordered by key."""
        if volume is None:
            rows = self._query(
                "list pages",
                "SELECT * FROM pages WHERE book_id = ? ORDER BY volume, page",
                (book_id,),
            )
        else:
            rows = self._query(
                "list pages",
                "SELECT * FROM pages WHERE book_id = ? AND volume = ? ORDER BY page",
                (book_id, volume),
            )
        return [row_to_page(r) for r in rows]

    def translation_ids(self, book_id: str) -> list[str]:
        """Return the ids of books whose source_id is book_id."""
        rows = self._query(
            "find translations",
            "SELECT id FROM books WHERE source_id = ? ORDER BY id",
            (book_id,),
        )
        return [r["id"] for r in rows]

    # --- Writes ---

    def put_book(self, book: Book) -> None:
        """Insert or replace a book record."""
        with self._transaction(f"put book {book.id}") as conn:
            conn.execute(_BOOK_UPSERT, book_to_row(book))

    def put_volume(self, volume: Volume) -> None:
        """Insert or replace a volume record."""
        with self._transaction(f"put volume {volume.book_id}/{volume.volume}") as conn:
            conn.execute(_VOLUME_UPSERT, volume_to_row(volume))

    def put_pages(self, pages: Iterable[Page]) -> None:
        """Insert or replace a batch of pages, all or nothing."""
        rows = [page_to_row(p) for p in pages]
        if not rows:
            return
        with self._transaction(f"put {len(rows)} page(s)") as conn:
            conn.executemany(_PAGE_UPSERT, rows)

    def delete_pages_for(self, book_id: str, volume: int) -> int:
        """Delete every page of one volume. Returns the number of rows removed."""
        with self._transaction(f"delete pages {book_id}/{volume}") as conn:
            cursor = conn.execute(
                "DELETE FROM pages WHERE book_id = ? AND volume = ?", (book_id, volume),
            )
        return cursor.rowcount

    def replace_volume(self, volume: Volume, pages: Iterable[Page]) -> None:
        """Swap a volume's pages and record in a single transaction.

        Existing pages for (book_id, volume) are deleted, the new pages
        inserted, and the volume record upserted. A later load_all() sees
        either the old volume or the new one, never a mix.
        """
        rows = [page_to_row(p) for p in pages]
        with self._transaction(f"replace volume {volume.book_id}/{volume.volume}") as conn:
            conn.execute(
                "DELETE FROM pages WHERE book_id = ? AND volume = ?",
                (volume.book_id, volume.volume),
            )
            if rows:
                conn.executemany(_PAGE_UPSERT, rows)
            conn.execute(_VOLUME_UPSERT, volume_to_row(volume))

    def delete_book(self, book_id: str) -> list[str]:
        """Delete a book with all its volumes and pages, plus its translations.

        Runs as one transaction. Volumes and pages are removed by book_id
        even when no book row exists, which also clears orphans.

        Returns:
            The ids whose records were removed, book_id first.
        """
        with self._transaction(f"delete book {book_id}") as conn:
            removed = [book_id, *self.translation_ids(book_id)]
            for target in removed:
                conn.execute("DELETE FROM pages WHERE book_id = ?", (target,))
                conn.execute("DELETE FROM volumes WHERE book_id = ?", (target,))
                conn.execute("DELETE FROM books WHERE id = ?", (target,))
        return removed

    def clear_all(self) -> None:
        """Remove every book, volume, and page."""
        with self._transaction("clear store") as conn:
            conn.execute("DELETE FROM pages")
            conn.execute("DELETE FROM volumes")
            conn.execute("DELETE FROM books")
