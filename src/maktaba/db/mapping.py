# ABOUTME: Record types for the document store (Book, Volume, Page) and their row converters.
# ABOUTME: Pages keep their text serialized; paragraph decoding happens on demand.

from dataclasses import dataclass
from typing import Any

from maktaba.text.paragraphs import flatten_page_text, parse_paragraphs


@dataclass(frozen=True)
class Book:
    """A logical work spanning one or more volumes.

    volume_count is the highest volume number ever imported for this id,
    not the number of volumes present. A translation is a separate Book
    whose source_id names the book it translates.
    """

    id: str
    title: str
    author: str | None = None
    volume_count: int = 0
    source_id: str | None = None
    language: str | None = None
    imported_at: str | None = None

    @property
    def is_translation(self) -> bool:
        return self.source_id is not None


@dataclass(frozen=True)
class Volume:
    """A numbered subdivision of a book, keyed by (book_id, volume)."""

    book_id: str
    volume: int
    total_pages: int
    imported_at: str | None = None

    @property
    def key(self) -> tuple[str, int]:
        return (self.book_id, self.volume)


@dataclass(frozen=True)
class Page:
    """One page of text, keyed by (book_id, volume, page)."""

    book_id: str
    volume: int
    page: int
    text: str

    @property
    def key(self) -> tuple[str, int, int]:
        return (self.book_id, self.volume, self.page)

    @property
    def paragraphs(self) -> list[str]:
        """The decoded paragraph list, or the raw text as one paragraph."""
        return parse_paragraphs(self.text)

    @property
    def flat_text(self) -> str:
        """Paragraphs joined with spaces, as scanned by search."""
        return flatten_page_text(self.text)


def book_to_row(book: Book) -> dict[str, Any]:
    """Convert a Book to a dict suitable for INSERT."""
    return {
        "id": book.id,
        "title": book.title,
        "author": book.author,
        "volume_count": book.volume_count,
        "source_id": book.source_id,
        "language": book.language,
        "imported_at": book.imported_at,
    }


def row_to_book(row: Any) -> Book:
    """Convert a database row (dict-like) back to a Book."""
    return Book(
        id=row["id"],
        title=row["title"],
        author=row["author"],
        volume_count=row["volume_count"],
        source_id=row["source_id"],
        language=row["language"],
        imported_at=row["imported_at"],
    )


def volume_to_row(volume: Volume) -> dict[str, Any]:
    """Convert a Volume to a dict suitable for INSERT."""
    return {
        "book_id": volume.book_id,
        "volume": volume.volume,
        "total_pages": volume.total_pages,
        "imported_at": volume.imported_at,
    }


def row_to_volume(row: Any) -> Volume:
    """Convert a database row back to a Volume."""
    return Volume(
        book_id=row["book_id"],
        volume=row["volume"],
        total_pages=row["total_pages"],
        imported_at=row["imported_at"],
    )


def page_to_row(page: Page) -> dict[str, Any]:
    """Convert a Page to a dict suitable for INSERT."""
    return {
        "book_id": page.book_id,
        "volume": page.volume,
        "page": page.page,
        "text": page.text,
    }


def row_to_page(row: Any) -> Page:
    """Convert a database row back to a Page."""
    return Page(
        book_id=row["book_id"],
        volume=row["volume"],
        page=row["page"],
        text=row["text"],
    )
