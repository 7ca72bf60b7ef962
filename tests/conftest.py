# ABOUTME: Shared pytest fixtures for Maktaba tests.
# ABOUTME: Provides a temporary library database, a ZIP archive builder, and a fake HTTP transport.

import io
import json
import sqlite3
import struct
import zipfile
from collections.abc import Callable, Iterator
from pathlib import Path

import httpx
import pytest

from maktaba.core.library import Library
from maktaba.db.connection import open_library
from maktaba.db.store import DocumentStore

PageFiles = dict[tuple[int, int], list[str] | str]
ArchiveBuilder = Callable[..., bytes]


def _build_archive(
    manifest: dict | str | None,
    pages: PageFiles | None = None,
    compression: int = zipfile.ZIP_STORED,
) -> bytes:
    """Build archive bytes. A list page is JSON-serialized; a str is written as-is."""
    buffer = io.BytesIO()
    with zipfile.ZipFile(buffer, "w", compression=compression) as zf:
        if manifest is not None:
            body = manifest if isinstance(manifest, str) else json.dumps(manifest, ensure_ascii=False)
            zf.writestr("manifest.json", body)
        for (volume, page), content in (pages or {}).items():
            text = content if isinstance(content, str) else json.dumps(content, ensure_ascii=False)
            zf.writestr(f"volumes/{volume}/{page}.txt", text)
    return buffer.getvalue()


@pytest.fixture
def archive_bytes() -> ArchiveBuilder:
    """Factory that builds archive bytes from a manifest and page files."""
    return _build_archive


def _corrupt_member(raw: bytes, name: str) -> bytes:
    """Flip four bytes in the middle of one member's compressed data."""
    with zipfile.ZipFile(io.BytesIO(raw)) as zf:
        info = zf.getinfo(name)
    data = bytearray(raw)
    # Local file header: 30 fixed bytes, then the file name and extra field
    name_len, extra_len = struct.unpack_from("<HH", data, info.header_offset + 26)
    start = info.header_offset + 30 + name_len + extra_len
    middle = start + info.compress_size // 2
    for index in range(middle, middle + 4):
        data[index] ^= 0xFF
    return bytes(data)


@pytest.fixture
def corrupt_archive_bytes() -> Callable[..., bytes]:
    """Factory for a deflated archive whose named member has a damaged stream."""

    def _make(manifest: dict, member: str) -> bytes:
        # Varied text so every deflated stream is hundreds of bytes long
        text = [f"{n} - حدثنا محمد بن يعقوب عن علي بن ابراهيم رقم {n * 7919}" for n in range(1, 201)]
        pages: PageFiles = {
            (entry["volume"], page): text
            for entry in manifest["volumes"]
            for page in range(1, entry["totalPages"] + 1)
        }
        raw = _build_archive(manifest, pages, compression=zipfile.ZIP_DEFLATED)
        return _corrupt_member(raw, member)

    return _make


@pytest.fixture
def make_archive(tmp_path: Path) -> Callable[..., Path]:
    """Factory that writes an archive ZIP under tmp_path and returns its path."""

    def _make(manifest: dict | str | None, pages: PageFiles | None = None, name: str | None = None) -> Path:
        if name is None:
            name = f"{manifest['id']}.zip" if isinstance(manifest, dict) else "archive.zip"
        path = tmp_path / name
        path.write_bytes(_build_archive(manifest, pages))
        return path

    return _make


@pytest.fixture
def sample_manifest() -> dict:
    """A one-volume book with two pages."""
    return {
        "id": "b1",
        "title": "كتاب الاختبار",
        "author": "مؤلف",
        "volumes": [{"volume": 1, "totalPages": 2}],
    }


@pytest.fixture
def sample_pages() -> PageFiles:
    return {
        (1, 1): ["العلم نور"],
        (1, 2): ["الجهل ظلام"],
    }


@pytest.fixture
def db_path(tmp_path: Path) -> Path:
    return tmp_path / "library.db"


@pytest.fixture
def conn(db_path: Path) -> Iterator[sqlite3.Connection]:
    connection = open_library(db_path)
    yield connection
    connection.close()


@pytest.fixture
def store(conn: sqlite3.Connection) -> DocumentStore:
    return DocumentStore(conn)


@pytest.fixture
def library(store: DocumentStore) -> Library:
    return Library.open(store)


class FakeTransport(httpx.BaseTransport):
    """Fake transport for httpx that serves canned responses by URL.

    A route may map to one response or a list consumed in order. Unknown
    URLs get a 404.
    """

    def __init__(self, routes: dict[str, httpx.Response | list[httpx.Response]] | None = None) -> None:
        self._routes = dict(routes or {})
        self.requests: list[str] = []

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        url = str(request.url)
        self.requests.append(url)
        route = self._routes.get(url)
        if isinstance(route, list):
            return route.pop(0) if route else httpx.Response(404)
        if route is None:
            return httpx.Response(404)
        # Fresh copy so one route can answer repeated requests
        return httpx.Response(route.status_code, headers=route.headers, content=route.content)

    @property
    def call_count(self) -> int:
        return len(self.requests)


@pytest.fixture
def fake_transport() -> Callable[..., FakeTransport]:
    return FakeTransport


@pytest.fixture
def cli_env(tmp_path: Path) -> dict[str, str]:
    """Environment that points the CLI at a temporary database and preferences file."""
    return {
        "MAKTABA_DB": str(tmp_path / "cli" / "library.db"),
        "MAKTABA_PREFS": str(tmp_path / "cli" / "preferences.json"),
    }
