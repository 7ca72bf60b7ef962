# ABOUTME: HTTP client for the download catalog and archive files.
# ABOUTME: Provides rate limiting, retry with backoff, and injectable transport for testing.

import logging
import time
from typing import Any, Protocol, runtime_checkable

import httpx

from maktaba import __version__

logger = logging.getLogger(__name__)

_RETRYABLE_STATUS_CODES = {429, 500, 502, 503, 504}


class DownloadError(Exception):
    """Raised when a catalog or archive request fails."""


@runtime_checkable
class HttpClient(Protocol):
    """Protocol for the two GET operations the transport needs."""

    def get_json(self, url: str) -> Any: ...

    def get_bytes(self, url: str) -> bytes: ...


class MaktabaHttpClient:
    """HTTP client with rate limiting and retry.

    Wraps httpx.Client with configurable request intervals and retry logic
    for transient failures (429, 5xx). Safe to share between download
    worker threads.
    """

    def __init__(
        self,
        *,
        min_request_interval: float = 0.0,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        timeout: float = 60.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        client_kwargs: dict[str, Any] = {
            "headers": {"User-Agent": f"maktaba/{__version__}"},
            "timeout": timeout,
            "follow_redirects": True,
        }
        if transport is not None:
            client_kwargs["transport"] = transport
        self._client = httpx.Client(**client_kwargs)
        self._min_interval = min_request_interval
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._last_request_time: float = 0.0

    def __enter__(self) -> "MaktabaHttpClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def get_json(self, url: str) -> Any:
        """GET a URL and decode its JSON body.

        Raises:
            DownloadError: On transport errors, exhausted retries, or a body
                that is not JSON.
        """
        response = self._get(url)
        try:
            return response.json()
        except ValueError as exc:
            raise DownloadError(f"Invalid JSON from {url}: {exc}") from exc

    def get_bytes(self, url: str) -> bytes:
        """GET a URL and return its raw body.

        Raises:
            DownloadError: On transport errors or exhausted retries.
        """
        return self._get(url).content

    def _get(self, url: str) -> httpx.Response:
        """Send a GET request with rate limiting and retry."""
        self._rate_limit()

        attempts = 1 + self._max_retries
        last_status = 0
        for attempt in range(attempts):
            try:
                response = self._client.get(url)
                last_status = response.status_code
            except httpx.HTTPError as exc:
                raise DownloadError(f"Request failed: {url}: {exc}") from exc

            if response.status_code == 200:
                return response

            if response.status_code not in _RETRYABLE_STATUS_CODES:
                raise DownloadError(f"HTTP {response.status_code} from {url}")

            if attempt < attempts - 1:
                delay = self._retry_delay * (2**attempt)
                logger.warning(
                    "HTTP %d from %s, retrying in %.1fs (attempt %d/%d)",
                    response.status_code,
                    url,
                    delay,
                    attempt + 1,
                    self._max_retries,
                )
                time.sleep(delay)

        raise DownloadError(f"HTTP {last_status} from {url} after {attempts} attempts")

    def _rate_limit(self) -> None:
        """Sleep if needed to maintain minimum interval between requests."""
        if self._min_interval <= 0:
            return
        now = time.monotonic()
        elapsed = now - self._last_request_time
        if elapsed < self._min_interval and self._last_request_time > 0:
            time.sleep(self._min_interval - elapsed)
        self._last_request_time = time.monotonic()
