# ABOUTME: Parser for the available-download catalog served alongside book archives.
# ABOUTME: Understands the static books.json layout and the download server layout.

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from maktaba.core.sects import Sect, matches_sect
from maktaba.remote.http import DownloadError, HttpClient

logger = logging.getLogger(__name__)

DEFAULT_SERVER_URL = "https://raw.githubusercontent.com/hadithhub12/hadith-data/main"

LANGUAGE_FILTERS = ("all", "ar", "fa", "en")


class CatalogFormatError(DownloadError):
    """Raised when a catalog document has an unrecognized structure."""


@dataclass(frozen=True)
class AvailableDownload:
    """One downloadable volume archive."""

    book_id: str
    book_title: str
    volume: int
    download_url: str
    size_formatted: str = ""
    language: str | None = None
    filename: str | None = None
    size: int | None = None
    source_book_id: str | None = None


@dataclass
class AvailableBook:
    """A book offered by the catalog, with its volume downloads."""

    book_id: str
    title: str
    slug: str | None = None
    title_en: str | None = None
    author: str | None = None
    author_en: str | None = None
    sect: str | None = None
    language: str = "ar"
    source_book_id: str | None = None
    downloads: list[AvailableDownload] = field(default_factory=list)

    @property
    def total(self) -> int:
        return len(self.downloads)

    @property
    def classification_id(self) -> str:
        """The id used for sect classification; translations use their source."""
        return self.source_book_id or self.book_id


@dataclass
class DownloadCatalog:
    books: list[AvailableBook] = field(default_factory=list)
    translations: list[AvailableBook] = field(default_factory=list)

    def translation_for(self, book: AvailableBook) -> AvailableBook | None:
        """The translation offered for a book, matched by source id or slug."""
        for candidate in self.translations:
            if candidate.source_book_id == book.book_id:
                return candidate
            if book.slug and candidate.slug == book.slug:
                return candidate
        return None


def is_static_host(server_url: str) -> bool:
    return "raw.githubusercontent.com" in server_url


def catalog_endpoint(server_url: str) -> str:
    """The catalog URL for a server: books.json on static hosts, /downloads otherwise."""
    base = server_url.rstrip("/")
    return f"{base}/books.json" if is_static_host(base) else f"{base}/downloads"


def resolve_download_url(download_url: str, server_url: str) -> str:
    """Make a possibly server-relative download URL absolute."""
    if download_url.startswith(("http://", "https://")):
        return download_url
    return f"{server_url.rstrip('/')}/{download_url.lstrip('/')}"


def _text(value: Any) -> str | None:
    if value is None:
        return None
    return str(value)


def _static_book(entry: dict[str, Any], base_url: str, folder: str, translation: bool) -> AvailableBook:
    book_id = str(entry["id"])
    title_ar = _text(entry.get("titleAr"))
    title_en = _text(entry.get("titleEn"))
    title = (title_en if translation else title_ar) or title_ar or title_en or book_id
    author = _text(entry.get("authorEn") or entry.get("authorAr")) if translation else _text(entry.get("authorAr"))
    language = "en" if translation else (entry.get("language") or "ar")
    source_id = _text(entry.get("sourceId")) if translation else None

    downloads = [
        AvailableDownload(
            book_id=book_id,
            book_title=title,
            volume=int(volume["volume"]),
            download_url=f"{base_url.rstrip('/')}/{folder}/{volume['filename']}",
            size_formatted=volume.get("sizeFormatted") or "",
            language=language,
            filename=volume["filename"],
            size=volume.get("size"),
            source_book_id=source_id,
        )
        for volume in entry.get("volumes") or []
    ]
    return AvailableBook(
        book_id=book_id,
        title=title,
        slug=entry.get("slug"),
        title_en=title_en,
        author=author,
        author_en=_text(entry.get("authorEn")),
        sect=entry.get("sect"),
        language=language,
        source_book_id=source_id,
        downloads=downloads,
    )


def _server_book(entry: dict[str, Any], server_url: str) -> AvailableBook:
    book_id = str(entry["bookId"])
    title = entry.get("bookTitle") or book_id
    source_id = _text(entry.get("sourceBookId"))
    downloads = [
        AvailableDownload(
            book_id=str(item.get("bookId", book_id)),
            book_title=item.get("bookTitle") or title,
            volume=int(item["volume"]),
            download_url=resolve_download_url(item["downloadUrl"], server_url),
            size_formatted=item.get("sizeFormatted") or "",
            language=item.get("language"),
            filename=item.get("filename"),
            size=item.get("size"),
            source_book_id=source_id,
        )
        for item in entry.get("downloads") or []
    ]
    return AvailableBook(
        book_id=book_id,
        title=title,
        slug=entry.get("slug"),
        title_en=entry.get("bookTitleEn"),
        author=entry.get("author"),
        author_en=entry.get("authorEn"),
        sect=entry.get("sect"),
        language=entry.get("bookLanguage") or "ar",
        source_book_id=source_id,
        downloads=downloads,
    )


def parse_catalog(data: Any, server_url: str = DEFAULT_SERVER_URL) -> DownloadCatalog:
    """Parse a catalog document into available books and translations.

    Raises:
        CatalogFormatError: If the document matches neither layout or an
            entry lacks a required field.
    """
    if not isinstance(data, dict) or not isinstance(data.get("books"), list):
        raise CatalogFormatError("Catalog must be an object with a 'books' list")

    try:
        if data.get("baseUrl"):
            base_url = str(data["baseUrl"])
            return DownloadCatalog(
                books=[_static_book(e, base_url, "books", False) for e in data["books"]],
                translations=[
                    _static_book(e, base_url, "translations", True)
                    for e in data.get("translations") or []
                ],
            )
        return DownloadCatalog(
            books=[_server_book(e, server_url) for e in data["books"]],
            translations=[_server_book(e, server_url) for e in data.get("translations") or []],
        )
    except (KeyError, TypeError, ValueError) as exc:
        raise CatalogFormatError(f"Malformed catalog entry: {exc}") from exc


def fetch_catalog(client: HttpClient, server_url: str = DEFAULT_SERVER_URL) -> DownloadCatalog:
    """Download and parse the catalog from a server.

    Raises:
        DownloadError: If the request fails or the document is malformed.
    """
    endpoint = catalog_endpoint(server_url)
    logger.info("Fetching download catalog from %s", endpoint)
    catalog = parse_catalog(client.get_json(endpoint), server_url)
    logger.info(
        "Catalog lists %d book(s) and %d translation(s)",
        len(catalog.books), len(catalog.translations),
    )
    return catalog


def filter_books(
    books: Iterable[AvailableBook],
    *,
    sect: Sect = Sect.ALL,
    language: str = "all",
) -> list[AvailableBook]:
    """Narrow a book listing by sect and content language."""
    if language not in LANGUAGE_FILTERS:
        raise ValueError(f"Unknown language filter: {language}")
    return [
        book
        for book in books
        if matches_sect(book.classification_id, sect)
        and (language == "all" or book.language == language)
    ]
