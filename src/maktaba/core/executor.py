# ABOUTME: Interchangeable strategies for running a search scan: inline or on a worker thread.
# ABOUTME: Both hand back a concurrent.futures.Future so callers never depend on the choice.

from collections.abc import Callable
from concurrent.futures import Future, ThreadPoolExecutor
from enum import Enum
from typing import Any, Protocol, TypeVar, runtime_checkable

T = TypeVar("T")

# Corpora below this many candidate pages are scanned inline under AUTO.
INLINE_PAGE_THRESHOLD = 2000


class ExecutionStrategy(str, Enum):
    AUTO = "auto"
    INLINE = "inline"
    THREAD = "thread"


@runtime_checkable
class SearchExecutor(Protocol):
    """Runs a callable and reports its outcome through a Future."""

    def submit(self, fn: Callable[..., T], *args: Any) -> "Future[T]": ...

    def shutdown(self) -> None: ...


class InlineExecutor:
    """Runs the callable immediately on the calling thread."""

    def submit(self, fn: Callable[..., T], *args: Any) -> "Future[T]":
        future: Future[T] = Future()
        future.set_running_or_notify_cancel()
        try:
            result = fn(*args)
        except Exception as exc:
            future.set_exception(exc)
        else:
            future.set_result(result)
        return future

    def shutdown(self) -> None:
        pass


class ThreadExecutor:
    """Runs callables one at a time on a single background thread.

    Queued work that has not started yet can be dropped with
    Future.cancel(); a scan already running finishes on its own.
    """

    def __init__(self) -> None:
        self._pool = ThreadPoolExecutor(max_workers=1, thread_name_prefix="maktaba-search")

    def submit(self, fn: Callable[..., T], *args: Any) -> "Future[T]":
        return self._pool.submit(fn, *args)

    def shutdown(self) -> None:
        self._pool.shutdown(wait=True, cancel_futures=True)
