# ABOUTME: Book archive reader: a ZIP with manifest.json and volumes/<volume>/<page>.txt files.
# ABOUTME: Validates the manifest up front and reads page files per volume, skipping missing ones.

import io
import json
import logging
import zipfile
import zlib
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from maktaba.db.mapping import Page

logger = logging.getLogger(__name__)

MANIFEST_NAME = "manifest.json"


class ArchiveImportError(Exception):
    """Base class for archives that cannot be imported."""


class ManifestMissingError(ArchiveImportError):
    """Raised when an archive has no manifest.json at its root."""


class ManifestMalformedError(ArchiveImportError):
    """Raised when manifest.json is not valid JSON or lacks required fields."""


class ArchiveUnreadableError(ArchiveImportError):
    """Raised when the archive container or one of its files cannot be read."""


@dataclass(frozen=True)
class VolumeEntry:
    """One volume declared by a manifest."""

    volume: int
    total_pages: int


@dataclass
class Manifest:
    """The parsed manifest.json of a book archive.

    declares_source is True when the manifest has a sourceId key at all,
    including an explicit null, so callers can tell "not a translation"
    apart from "not stated".
    """

    id: str
    title: str
    volumes: list[VolumeEntry]
    author: str | None = None
    source_id: str | None = None
    language: str | None = None
    declares_source: bool = False


def page_path(volume: int, page: int) -> str:
    """Archive member name of a page file."""
    return f"volumes/{volume}/{page}.txt"


def _optional_str(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    if not isinstance(value, str):
        raise ManifestMalformedError(f"'{key}' must be a string, got {type(value).__name__}")
    return value or None


def _required_int(entry: dict[str, Any], key: str, minimum: int) -> int:
    value = entry.get(key)
    # bool is an int subclass; reject it explicitly
    if not isinstance(value, int) or isinstance(value, bool):
        raise ManifestMalformedError(f"Volume entry '{key}' must be an integer: {entry!r}")
    if value < minimum:
        raise ManifestMalformedError(f"Volume entry '{key}' must be >= {minimum}: {entry!r}")
    return value


def parse_manifest(data: Any) -> Manifest:
    """Validate a decoded manifest.json document.

    Raises:
        ManifestMalformedError: On any missing or mistyped required field.
    """
    if not isinstance(data, dict):
        raise ManifestMalformedError("Manifest must be a JSON object")

    raw_id = data.get("id")
    if isinstance(raw_id, int) and not isinstance(raw_id, bool):
        raw_id = str(raw_id)
    if not isinstance(raw_id, str) or not raw_id.strip():
        raise ManifestMalformedError("Manifest 'id' is missing or empty")

    title = data.get("title")
    if not isinstance(title, str) or not title.strip():
        raise ManifestMalformedError("Manifest 'title' is missing or empty")

    raw_volumes = data.get("volumes")
    if not isinstance(raw_volumes, list) or not raw_volumes:
        raise ManifestMalformedError("Manifest 'volumes' must be a non-empty list")

    volumes: list[VolumeEntry] = []
    seen: set[int] = set()
    for entry in raw_volumes:
        if not isinstance(entry, dict):
            raise ManifestMalformedError(f"Volume entry must be an object: {entry!r}")
        number = _required_int(entry, "volume", 1)
        if number in seen:
            raise ManifestMalformedError(f"Volume {number} is declared twice")
        seen.add(number)
        volumes.append(VolumeEntry(volume=number, total_pages=_required_int(entry, "totalPages", 0)))

    return Manifest(
        id=raw_id.strip(),
        title=title.strip(),
        volumes=volumes,
        author=_optional_str(data, "author"),
        source_id=_optional_str(data, "sourceId"),
        language=_optional_str(data, "language"),
        declares_source="sourceId" in data,
    )


class BookArchive:
    """An open book archive with a validated manifest."""

    def __init__(self, zf: zipfile.ZipFile, manifest: Manifest) -> None:
        self._zf = zf
        self.manifest = manifest

    def __enter__(self) -> "BookArchive":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._zf.close()

    def read_pages(self, entry: VolumeEntry) -> list[Page]:
        """Read the page files of one volume.

        Pages 1..total_pages are looked up by name; absent files are
        skipped, so the result may be sparse.

        Raises:
            ArchiveUnreadableError: If a page file exists but cannot be
                read or is not UTF-8.
        """
        names = set(self._zf.namelist())
        pages: list[Page] = []
        for number in range(1, entry.total_pages + 1):
            name = page_path(entry.volume, number)
            if name not in names:
                continue
            try:
                text = self._zf.read(name).decode("utf-8")
            except (zipfile.BadZipFile, zlib.error, UnicodeDecodeError, OSError) as exc:
                raise ArchiveUnreadableError(f"Cannot read {name}: {exc}") from exc
            pages.append(
                Page(book_id=self.manifest.id, volume=entry.volume, page=number, text=text)
            )

        missing = entry.total_pages - len(pages)
        if missing:
            logger.debug(
                "Volume %s/%d: %d of %d page file(s) absent",
                self.manifest.id, entry.volume, missing, entry.total_pages,
            )
        return pages


def open_archive(source: Path | bytes) -> BookArchive:
    """Open an archive from a path or raw bytes and validate its manifest.

    Raises:
        ArchiveUnreadableError: If the source is not a readable ZIP file.
        ManifestMissingError: If manifest.json is absent.
        ManifestMalformedError: If manifest.json cannot be parsed.
    """
    try:
        zf = zipfile.ZipFile(io.BytesIO(source) if isinstance(source, bytes) else source)
    except (zipfile.BadZipFile, OSError) as exc:
        raise ArchiveUnreadableError(f"Not a readable archive: {exc}") from exc

    try:
        try:
            raw = zf.read(MANIFEST_NAME)
        except KeyError as exc:
            raise ManifestMissingError(f"{MANIFEST_NAME} not found in archive") from exc
        except (zipfile.BadZipFile, zlib.error, OSError) as exc:
            raise ArchiveUnreadableError(f"Cannot read {MANIFEST_NAME}: {exc}") from exc

        try:
            data = json.loads(raw.decode("utf-8-sig"))
        except (UnicodeDecodeError, json.JSONDecodeError) as exc:
            raise ManifestMalformedError(f"{MANIFEST_NAME} is not valid JSON: {exc}") from exc

        manifest = parse_manifest(data)
    except ArchiveImportError:
        zf.close()
        raise

    return BookArchive(zf, manifest)
