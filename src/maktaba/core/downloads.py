# ABOUTME: Batch download of volume archives with a bounded fetch pool.
# ABOUTME: Archives are fetched concurrently and imported one at a time on the calling thread.

import logging
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field

from maktaba.core.importer import ImportResult, import_archive
from maktaba.core.library import Library
from maktaba.core.sects import Sect
from maktaba.formats.archive import ArchiveImportError
from maktaba.remote.catalog import AvailableDownload, DownloadCatalog, filter_books
from maktaba.remote.http import DownloadError, HttpClient

logger = logging.getLogger(__name__)

DEFAULT_CONCURRENCY = 3

ProgressCallback = Callable[[int, int], None]


@dataclass
class DownloadFailure:
    download: AvailableDownload
    reason: str


@dataclass
class BatchSummary:
    """Outcome of a batch download. success_count + failure_count == total."""

    total: int
    success_count: int = 0
    failure_count: int = 0
    failures: list[DownloadFailure] = field(default_factory=list)
    imported: list[ImportResult] = field(default_factory=list)


def download_volumes(
    downloads: Sequence[AvailableDownload],
    client: HttpClient,
    library: Library,
    *,
    concurrency: int = DEFAULT_CONCURRENCY,
    on_progress: ProgressCallback | None = None,
) -> BatchSummary:
    """Download and import a batch of volume archives.

    At most `concurrency` fetches run at once. Each fetched archive is
    imported before the next completed fetch is handled, so library writes
    never overlap. One failed volume does not abort the batch; it is counted
    and reported in the summary. on_progress receives (completed, total)
    after every volume, whether it succeeded or failed.

    Raises:
        ValueError: If concurrency is less than 1.
        StorageError: If the local store rejects a write.
    """
    if concurrency < 1:
        raise ValueError("concurrency must be at least 1")

    summary = BatchSummary(total=len(downloads))
    if not downloads:
        return summary

    logger.info("Downloading %d volume(s), %d at a time", len(downloads), concurrency)
    completed = 0
    with ThreadPoolExecutor(max_workers=concurrency, thread_name_prefix="maktaba-download") as pool:
        futures = {pool.submit(client.get_bytes, d.download_url): d for d in downloads}
        for future in as_completed(futures):
            download = futures[future]
            try:
                payload = future.result()
                result = import_archive(payload, library, source_id=download.source_book_id)
            except (DownloadError, ArchiveImportError) as exc:
                summary.failure_count += 1
                summary.failures.append(DownloadFailure(download, str(exc)))
                logger.warning(
                    "Volume %d of %s failed: %s", download.volume, download.book_id, exc
                )
            else:
                summary.success_count += 1
                summary.imported.append(result)
            completed += 1
            if on_progress is not None:
                on_progress(completed, summary.total)

    logger.info(
        "Batch finished: %d succeeded, %d failed",
        summary.success_count,
        summary.failure_count,
    )
    return summary


def downloads_for_sect(
    catalog: DownloadCatalog,
    sect: Sect,
    *,
    include_translations: bool = False,
    language: str = "all",
) -> list[AvailableDownload]:
    """Every volume download for the books of one sect."""
    books = filter_books(catalog.books, sect=sect, language=language)
    if include_translations:
        books += filter_books(catalog.translations, sect=sect, language=language)
    return [d for book in books for d in book.downloads]


def missing_downloads(
    downloads: Iterable[AvailableDownload], library: Library
) -> list[AvailableDownload]:
    """Drop volumes the library already holds."""
    return [d for d in downloads if library.get_volume(d.book_id, d.volume) is None]
