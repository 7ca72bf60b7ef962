# ABOUTME: Import pipeline for loading book archives into the library.
# ABOUTME: Replaces each declared volume wholesale, then records the book with its highest volume.

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from pathlib import Path

from maktaba.core.library import Library
from maktaba.db.mapping import Book, Volume
from maktaba.formats.archive import (
    ArchiveUnreadableError,
    BookArchive,
    Manifest,
    open_archive,
)

logger = logging.getLogger(__name__)

# Archives published before manifests carried sourceId name translations
# "<source id>_en".
TRANSLATION_SUFFIX = "_en"


@dataclass
class ImportResult:
    """Summary of importing one archive."""

    book_id: str
    title: str
    volumes_imported: list[int] = field(default_factory=list)
    volumes_failed: list[tuple[int, str]] = field(default_factory=list)
    pages_imported: int = 0
    pages_missing: int = 0

    @property
    def complete(self) -> bool:
        """Whether every declared volume was imported."""
        return not self.volumes_failed


def _timestamp() -> str:
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S")


def resolve_source_id(manifest: Manifest, source_id: str | None = None) -> str | None:
    """Work out which book, if any, this archive translates.

    An explicit source_id wins, then the manifest's sourceId key (even when
    null), and only then the legacy "_en" id suffix.
    """
    if source_id is not None:
        return source_id
    if manifest.declares_source:
        return manifest.source_id
    if manifest.id.endswith(TRANSLATION_SUFFIX) and len(manifest.id) > len(TRANSLATION_SUFFIX):
        return manifest.id[: -len(TRANSLATION_SUFFIX)]
    return None


def _resolve_language(manifest: Manifest, source_id: str | None) -> str | None:
    if manifest.language:
        return manifest.language
    if source_id is not None and manifest.id.endswith(TRANSLATION_SUFFIX):
        return TRANSLATION_SUFFIX.lstrip("_")
    return None


def import_book_archive(
    archive: BookArchive,
    library: Library,
    *,
    source_id: str | None = None,
) -> ImportResult:
    """Import every volume of an open archive into the library.

    For each volume in manifest order: read the page files that exist,
    then replace the volume's pages and record in one store transaction.
    A volume whose files cannot be read is recorded as failed and left as
    it was; the remaining volumes still import. Once all volumes are
    processed the book record is upserted with volume_count raised to the
    highest volume imported.

    Args:
        archive: An archive opened with open_archive().
        library: The library to import into.
        source_id: Id of the book this archive translates, if known.

    Returns:
        ImportResult with per-volume outcomes and page counts.

    Raises:
        ArchiveUnreadableError: If no volume could be read.
        StorageError: If a store write fails.
    """
    manifest = archive.manifest
    result = ImportResult(book_id=manifest.id, title=manifest.title)
    imported_at = _timestamp()

    for entry in manifest.volumes:
        try:
            pages = archive.read_pages(entry)
        except ArchiveUnreadableError as exc:
            logger.warning("Skipping volume %s/%d: %s", manifest.id, entry.volume, exc)
            result.volumes_failed.append((entry.volume, str(exc)))
            continue

        volume = Volume(
            book_id=manifest.id,
            volume=entry.volume,
            total_pages=entry.total_pages,
            imported_at=imported_at,
        )
        library.replace_volume(volume, pages)
        result.volumes_imported.append(entry.volume)
        result.pages_imported += len(pages)
        result.pages_missing += entry.total_pages - len(pages)

    if not result.volumes_imported:
        raise ArchiveUnreadableError(f"No volume of {manifest.id} could be read")

    highest = max(result.volumes_imported)
    linked_id = resolve_source_id(manifest, source_id)
    existing = library.get_book(manifest.id)
    if existing is not None:
        book = replace(
            existing,
            volume_count=max(existing.volume_count, highest),
            source_id=existing.source_id or linked_id,
            language=existing.language or _resolve_language(manifest, linked_id),
        )
    else:
        book = Book(
            id=manifest.id,
            title=manifest.title,
            author=manifest.author,
            volume_count=highest,
            source_id=linked_id,
            language=_resolve_language(manifest, linked_id),
            imported_at=imported_at,
        )
    library.put_book(book)

    logger.info(
        "Imported %s: %d volume(s), %d page(s), %d failed volume(s)",
        manifest.id,
        len(result.volumes_imported),
        result.pages_imported,
        len(result.volumes_failed),
    )
    return result


def import_archive(
    source: Path | bytes,
    library: Library,
    *,
    source_id: str | None = None,
) -> ImportResult:
    """Open an archive from a path or bytes and import it.

    Raises:
        ArchiveImportError: If the archive or its manifest cannot be read.
            Nothing is written in that case.
        StorageError: If a store write fails.
    """
    with open_archive(source) as archive:
        return import_book_archive(archive, library, source_id=source_id)
