# ABOUTME: Search engine over the library mirror, plus the paginated session used by viewers.
# ABOUTME: Filters candidates up front, caches results, and offloads large scans to a worker.

import logging
import threading
import time
from concurrent.futures import Future

from maktaba.core.cache import SearchCache
from maktaba.core.executor import (
    INLINE_PAGE_THRESHOLD,
    ExecutionStrategy,
    InlineExecutor,
    SearchExecutor,
    ThreadExecutor,
)
from maktaba.core.library import CorpusSnapshot, Library
from maktaba.core.search import (
    MAX_DISPLAYED_GROUPS,
    RESULTS_PER_PAGE,
    MatchMode,
    ResultGroup,
    ResultPage,
    SearchRequest,
    SearchResult,
    find_matches,
    group_results,
    paginate,
)
from maktaba.core.sects import matches_sect

logger = logging.getLogger(__name__)


def _completed(results: list[SearchResult]) -> "Future[list[SearchResult]]":
    future: Future[list[SearchResult]] = Future()
    future.set_running_or_notify_cancel()
    future.set_result(results)
    return future


class SearchEngine:
    """Runs searches against a Library.

    search() always returns a Future. Depending on the strategy and the
    number of candidate pages the scan runs inline (the Future is already
    done) or on a background thread. Submitting a new search cancels the
    previous one if it has not started; a caller holding an older Future
    can check is_current() to tell whether it is still the latest.

    The cache is dropped whenever the library revision changes, so results
    never outlive an import or delete.
    """

    def __init__(
        self,
        library: Library,
        *,
        cache: SearchCache | None = None,
        strategy: ExecutionStrategy = ExecutionStrategy.AUTO,
        inline_threshold: int = INLINE_PAGE_THRESHOLD,
        background: SearchExecutor | None = None,
    ) -> None:
        self._library = library
        self._cache = cache if cache is not None else SearchCache()
        self._strategy = ExecutionStrategy(strategy)
        self._inline_threshold = inline_threshold
        self._inline = InlineExecutor()
        self._background = background
        self._cache_revision = library.revision
        self._latest: Future | None = None
        self._lock = threading.Lock()
        self.last_duration: float | None = None

    def __enter__(self) -> "SearchEngine":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    @property
    def cache(self) -> SearchCache:
        return self._cache

    def close(self) -> None:
        """Stop the background worker, if one was started."""
        if self._background is not None:
            self._background.shutdown()

    def candidate_book_ids(self, request: SearchRequest) -> set[str]:
        """Books that pass the sect filter and the optional id subset.

        A translation is classified by the book it translates.
        """
        selected = set()
        for book in self._library.books():
            if not matches_sect(book.source_id or book.id, request.sect):
                continue
            if request.book_ids and book.id not in request.book_ids:
                continue
            selected.add(book.id)
        return selected

    def is_current(self, future: Future) -> bool:
        """Whether future belongs to the most recently submitted search."""
        with self._lock:
            return future is self._latest

    def search(self, request: SearchRequest) -> "Future[list[SearchResult]]":
        """Start a search and return a Future for its results."""
        self._sync_revision()
        key = request.cache_key()
        cached = self._cache.get(key)
        if cached is not None:
            future = _completed(list(cached))
            with self._lock:
                self._supersede(future)
            return future

        snapshot = self._library.snapshot(self.candidate_book_ids(request))
        executor = self._executor_for(len(snapshot.pages))

        with self._lock:
            future = executor.submit(self._scan, request.search_term(), request.mode, snapshot, key)
            self._supersede(future)
        return future

    def _supersede(self, future: Future) -> None:
        """Make future the latest search, cancelling the previous one if unstarted."""
        previous = self._latest
        if previous is not None and previous.cancel():
            logger.debug("Cancelled superseded search")
        self._latest = future

    def search_now(self, request: SearchRequest) -> list[SearchResult]:
        """Run a search and wait for its results."""
        return self.search(request).result()

    def _scan(
        self,
        term: str,
        mode: MatchMode,
        snapshot: CorpusSnapshot,
        key: tuple,
    ) -> list[SearchResult]:
        started = time.perf_counter()
        results = find_matches(term, mode, snapshot.pages, snapshot.titles)
        self.last_duration = time.perf_counter() - started
        logger.debug(
            "Scanned %d page(s) for %r in %.3fs: %d result(s)",
            len(snapshot.pages), term, self.last_duration, len(results),
        )
        if snapshot.revision == self._cache_revision:
            self._cache.put(key, tuple(results))
        return results

    def _sync_revision(self) -> None:
        revision = self._library.revision
        if revision != self._cache_revision:
            self._cache.clear()
            self._cache_revision = revision

    def _executor_for(self, page_count: int) -> SearchExecutor:
        if self._strategy == ExecutionStrategy.INLINE:
            return self._inline
        if self._strategy == ExecutionStrategy.AUTO and page_count < self._inline_threshold:
            return self._inline
        if self._background is None:
            self._background = ThreadExecutor()
        return self._background


class SearchSession:
    """What a results viewer holds: the last query's results and its position.

    Running a new query resets the page to 1 and collapses every group.
    Grouped display is capped at group_limit books while total and
    group_total keep the true counts.
    """

    def __init__(
        self,
        engine: SearchEngine,
        *,
        per_page: int = RESULTS_PER_PAGE,
        group_limit: int = MAX_DISPLAYED_GROUPS,
    ) -> None:
        self._engine = engine
        self._per_page = per_page
        self._group_limit = group_limit
        self.request: SearchRequest | None = None
        self.results: list[SearchResult] = []
        self.page_number = 1
        self._expanded: set[str] = set()

    def run(self, request: SearchRequest) -> list[SearchResult]:
        """Search and reset pagination and group state."""
        self.results = self._engine.search_now(request)
        self.request = request
        self.page_number = 1
        self._expanded.clear()
        return self.results

    @property
    def total(self) -> int:
        return len(self.results)

    def current_page(self) -> ResultPage:
        return paginate(self.results, self.page_number, self._per_page)

    def go_to(self, number: int) -> ResultPage:
        page = paginate(self.results, number, self._per_page)
        self.page_number = page.number
        return page

    def next_page(self) -> ResultPage:
        return self.go_to(self.page_number + 1)

    def previous_page(self) -> ResultPage:
        return self.go_to(self.page_number - 1)

    @property
    def group_total(self) -> int:
        return len({r.book_id for r in self.results})

    def groups(self) -> list[ResultGroup]:
        """Groups by book, capped, with collapse state applied."""
        groups = group_results(self.results)[: self._group_limit]
        for group in groups:
            group.collapsed = group.book_id not in self._expanded
        return groups

    def toggle_group(self, book_id: str) -> bool:
        """Flip a group between collapsed and expanded. Returns True if now expanded."""
        if book_id in self._expanded:
            self._expanded.discard(book_id)
            return False
        self._expanded.add(book_id)
        return True
