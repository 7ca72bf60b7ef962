# ABOUTME: Unit tests for the available-download catalog parser.
# ABOUTME: Covers both catalog layouts, URL resolution, filters, and malformed documents.

import httpx
import pytest

from maktaba.core.sects import Sect
from maktaba.remote.catalog import (
    DEFAULT_SERVER_URL,
    CatalogFormatError,
    catalog_endpoint,
    fetch_catalog,
    filter_books,
    parse_catalog,
    resolve_download_url,
)
from maktaba.remote.http import DownloadError, MaktabaHttpClient
from tests.fixtures.catalog_responses import (
    SERVER_CATALOG,
    SERVER_URL,
    STATIC_BASE_URL,
    STATIC_CATALOG,
)


class TestEndpoints:
    """Tests for catalog URL helpers."""

    def test_static_host_uses_books_json(self) -> None:
        assert catalog_endpoint(DEFAULT_SERVER_URL + "/") == f"{DEFAULT_SERVER_URL}/books.json"

    def test_server_uses_downloads(self) -> None:
        assert catalog_endpoint(SERVER_URL) == f"{SERVER_URL}/downloads"

    def test_resolve_relative_url(self) -> None:
        assert resolve_download_url("/download/1/1", SERVER_URL + "/") == f"{SERVER_URL}/download/1/1"

    def test_absolute_url_unchanged(self) -> None:
        assert resolve_download_url("https://cdn/x.zip", SERVER_URL) == "https://cdn/x.zip"


class TestParseStaticCatalog:
    """Tests for the books.json layout."""

    def test_books_and_translations(self) -> None:
        catalog = parse_catalog(STATIC_CATALOG)
        assert [b.book_id for b in catalog.books] == ["1234", "02384", "555"]
        assert [t.book_id for t in catalog.translations] == ["1234_en"]

    def test_book_fields(self) -> None:
        book = parse_catalog(STATIC_CATALOG).books[0]
        assert book.title == "الكافي"
        assert book.title_en == "Al-Kafi"
        assert book.author == "الكليني"
        assert book.language == "ar"
        assert book.total == 2

    def test_download_urls_built_from_base(self) -> None:
        book = parse_catalog(STATIC_CATALOG).books[0]
        assert book.downloads[1].download_url == f"{STATIC_BASE_URL}/books/1234_v2.zip"
        assert book.downloads[1].size_formatted == "2 KB"
        assert book.downloads[1].volume == 2

    def test_language_defaults_to_arabic(self) -> None:
        assert parse_catalog(STATIC_CATALOG).books[1].language == "ar"

    def test_translation_fields(self) -> None:
        translation = parse_catalog(STATIC_CATALOG).translations[0]
        assert translation.title == "Al-Kafi (English)"
        assert translation.language == "en"
        assert translation.source_book_id == "1234"
        download = translation.downloads[0]
        assert download.download_url == f"{STATIC_BASE_URL}/translations/1234_en_v1.zip"
        assert download.source_book_id == "1234"

    def test_translation_for(self) -> None:
        catalog = parse_catalog(STATIC_CATALOG)
        linked = catalog.translation_for(catalog.books[0])
        assert linked is not None
        assert linked.book_id == "1234_en"
        assert catalog.translation_for(catalog.books[1]) is None


class TestParseServerCatalog:
    """Tests for the download server layout."""

    def test_relative_urls_resolved(self) -> None:
        catalog = parse_catalog(SERVER_CATALOG, SERVER_URL)
        [download] = catalog.books[0].downloads
        assert download.download_url == f"{SERVER_URL}/download/1234/1"
        assert download.book_title == "الكافي"

    def test_translation_link(self) -> None:
        catalog = parse_catalog(SERVER_CATALOG, SERVER_URL)
        translation = catalog.translations[0]
        assert translation.source_book_id == "1234"
        assert translation.language == "en"
        assert translation.downloads[0].download_url == "https://cdn.example.org/1234_en_v1.zip"


class TestMalformedCatalog:
    """Tests for rejected documents."""

    @pytest.mark.parametrize("data", [[], {"items": []}, {"books": "x"}])
    def test_wrong_shape(self, data: object) -> None:
        with pytest.raises(CatalogFormatError):
            parse_catalog(data)

    def test_entry_missing_field(self) -> None:
        with pytest.raises(CatalogFormatError):
            parse_catalog({"baseUrl": "https://x", "books": [{"titleAr": "no id"}]})

    def test_format_error_is_a_download_error(self) -> None:
        assert issubclass(CatalogFormatError, DownloadError)


class TestFilterBooks:
    """Tests for filter_books()."""

    def test_sect(self) -> None:
        books = parse_catalog(STATIC_CATALOG).books
        assert [b.book_id for b in filter_books(books, sect=Sect.SUNNI)] == ["02384"]
        assert [b.book_id for b in filter_books(books, sect=Sect.SHIA)] == ["1234", "555"]

    def test_language(self) -> None:
        books = parse_catalog(STATIC_CATALOG).books
        assert [b.book_id for b in filter_books(books, language="fa")] == ["555"]

    def test_translation_classified_by_source(self) -> None:
        translations = parse_catalog(STATIC_CATALOG).translations
        assert filter_books(translations, sect=Sect.SUNNI) == []

    def test_unknown_language(self) -> None:
        with pytest.raises(ValueError):
            filter_books([], language="xx")


class TestFetchCatalog:
    """Tests for fetch_catalog() over a fake transport."""

    def test_fetches_books_json(self, fake_transport) -> None:
        transport = fake_transport(
            {f"{DEFAULT_SERVER_URL}/books.json": httpx.Response(200, json=STATIC_CATALOG)}
        )
        client = MaktabaHttpClient(transport=transport, retry_delay=0.0)
        catalog = fetch_catalog(client)
        assert len(catalog.books) == 3

    def test_fetches_server_downloads(self, fake_transport) -> None:
        transport = fake_transport({f"{SERVER_URL}/downloads": httpx.Response(200, json=SERVER_CATALOG)})
        client = MaktabaHttpClient(transport=transport, retry_delay=0.0)
        catalog = fetch_catalog(client, SERVER_URL)
        assert catalog.books[0].downloads[0].download_url.startswith(SERVER_URL)
