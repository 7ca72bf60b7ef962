# ABOUTME: In-memory mirror of the document store that every read path works from.
# ABOUTME: Mutations write through to the store first and update the mirror only after commit.

import logging
from collections.abc import Collection, Iterable, Iterator
from dataclasses import dataclass

from maktaba.db.mapping import Book, Page, Volume
from maktaba.db.store import DocumentStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CorpusSnapshot:
    """An immutable view of the pages a search will scan.

    Handed to the search worker so later mirror changes cannot affect a
    running scan.
    """

    pages: tuple[Page, ...]
    titles: dict[str, str]
    revision: int


@dataclass(frozen=True)
class LibraryStats:
    """Record counts held by the mirror."""

    books: int
    volumes: int
    pages: int


class Library:
    """The corpus held in memory, kept in step with a DocumentStore.

    The mirror is filled once from DocumentStore.load_all() and after that
    only changes through the mutation methods here. Each mutation commits
    to the store before touching the mirror, so a failed write leaves the
    mirror as it was and a successful one is visible as soon as the
    method returns.
    """

    def __init__(self, store: DocumentStore) -> None:
        self._store = store
        self._books: dict[str, Book] = {}
        self._volumes: dict[tuple[str, int], Volume] = {}
        self._pages: dict[tuple[str, int], dict[int, Page]] = {}
        self._revision = 0
        self._loaded = False

    @classmethod
    def open(cls, store: DocumentStore) -> "Library":
        """Create a library and load the full corpus from the store."""
        library = cls(store)
        library.load()
        return library

    def load(self) -> None:
        """Fill the mirror from the store.

        Raises:
            RuntimeError: If the mirror was already loaded.
            StorageError: If the store cannot be read.
        """
        if self._loaded:
            raise RuntimeError("Library mirror is already loaded")
        books, volumes, pages = self._store.load_all()
        self._books = {book.id: book for book in books}
        self._volumes = {volume.key: volume for volume in volumes}
        self._pages = {}
        for page in pages:
            self._pages.setdefault((page.book_id, page.volume), {})[page.page] = page
        self._loaded = True
        self._revision += 1

    @property
    def revision(self) -> int:
        """Counter bumped by every change to the mirror."""
        return self._revision

    # --- Browsing ---

    def books(self) -> list[Book]:
        """All books, ordered by title then id."""
        return sorted(self._books.values(), key=lambda b: (b.title, b.id))

    def get_book(self, book_id: str) -> Book | None:
        return self._books.get(book_id)

    def volumes_for(self, book_id: str) -> list[Volume]:
        """Volumes of a book, ordered by volume number."""
        return sorted(
            (v for key, v in self._volumes.items() if key[0] == book_id),
            key=lambda v: v.volume,
        )

    def get_volume(self, book_id: str, volume: int) -> Volume | None:
        return self._volumes.get((book_id, volume))

    def pages_for(self, book_id: str, volume: int) -> list[Page]:
        """Pages of one volume, ordered by page number."""
        pages = self._pages.get((book_id, volume), {})
        return [pages[number] for number in sorted(pages)]

    def get_page(self, book_id: str, volume: int, page: int) -> Page | None:
        return self._pages.get((book_id, volume), {}).get(page)

    def iter_pages(self, book_ids: Collection[str] | None = None) -> Iterator[Page]:
        """Yield pages in (book_id, volume, page) order.

        Args:
            book_ids: Restrict to these books. None means every book.
        """
        for key in sorted(self._pages):
            if book_ids is not None and key[0] not in book_ids:
                continue
            pages = self._pages[key]
            for number in sorted(pages):
                yield pages[number]

    def translation_for(self, book_id: str) -> Book | None:
        """The first book (by id) whose source_id is book_id."""
        linked = sorted(
            (b for b in self._books.values() if b.source_id == book_id),
            key=lambda b: b.id,
        )
        return linked[0] if linked else None

    def has_translation(self, book_id: str, volume: int) -> bool:
        """Check whether a translation of this volume has been imported."""
        translation = self.translation_for(book_id)
        return translation is not None and (translation.id, volume) in self._volumes

    def stats(self) -> LibraryStats:
        return LibraryStats(
            books=len(self._books),
            volumes=len(self._volumes),
            pages=sum(len(pages) for pages in self._pages.values()),
        )

    def snapshot(self, book_ids: Collection[str] | None = None) -> CorpusSnapshot:
        """Freeze the pages of the given books, plus every book title."""
        return CorpusSnapshot(
            pages=tuple(self.iter_pages(book_ids)),
            titles={book.id: book.title for book in self._books.values()},
            revision=self._revision,
        )

    # --- Mutations ---

    def put_book(self, book: Book) -> None:
        """Insert or replace a book record."""
        self._store.put_book(book)
        self._books[book.id] = book
        self._revision += 1

    def replace_volume(self, volume: Volume, pages: Iterable[Page]) -> None:
        """Replace every page of a volume and its record.

        Raises:
            ValueError: If a page does not belong to the volume.
            StorageError: If the store write fails; the mirror is unchanged.
        """
        new_pages = list(pages)
        for page in new_pages:
            if (page.book_id, page.volume) != volume.key:
                raise ValueError(
                    f"Page {page.key} does not belong to volume {volume.key}"
                )

        self._store.replace_volume(volume, new_pages)

        self._pages[volume.key] = {page.page: page for page in new_pages}
        self._volumes[volume.key] = volume
        self._revision += 1
        logger.info(
            "Replaced volume %s/%d with %d page(s)",
            volume.book_id, volume.volume, len(new_pages),
        )

    def delete_book(self, book_id: str) -> list[str]:
        """Delete a book, its volumes and pages, and any linked translations.

        Returns:
            The ids removed, book_id first.
        """
        removed = self._store.delete_book(book_id)
        targets = set(removed)
        for target in removed:
            self._books.pop(target, None)
        self._volumes = {k: v for k, v in self._volumes.items() if k[0] not in targets}
        self._pages = {k: v for k, v in self._pages.items() if k[0] not in targets}
        self._revision += 1
        logger.info("Deleted book(s): %s", ", ".join(removed))
        return removed

    def clear_all(self) -> None:
        """Remove the entire corpus from store and mirror."""
        self._store.clear_all()
        self._books.clear()
        self._volumes.clear()
        self._pages.clear()
        self._revision += 1
        logger.info("Cleared library")
