# ABOUTME: JSON-over-HTTP client used by the optional ISBN lookup.
# ABOUTME: Spaces requests out, retries busy servers with growing delays, accepts fake transports.

import logging
import time
from typing import Any, Protocol, runtime_checkable

import httpx

logger = logging.getLogger(__name__)

# Statuses that mean "busy, try again" rather than "no such book".
_RETRY_ON = frozenset({429, 500, 502, 503, 504})

_DEFAULT_HEADERS = {
    "User-Agent": "homelib/0.1.0 (home library catalog)",
    "Accept": "application/json",
}


class MetadataFetchError(Exception):
    """Raised when the lookup service can't be reached or gives no usable answer."""


@runtime_checkable
class HttpClient(Protocol):
    """Anything that can fetch a JSON document by URL."""

    def get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]: ...


class HomelibHttpClient:
    """Polite JSON client for public book APIs.

    Requests are spaced at least min_request_interval seconds apart, and a
    busy or failing server (429, 5xx) is retried up to max_retries times,
    waiting retry_delay, then twice that, and so on. Use it as a context
    manager, or call close() when done.
    """

    def __init__(
        self,
        *,
        min_request_interval: float = 0.1,
        max_retries: int = 3,
        retry_delay: float = 1.0,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        self._client = httpx.Client(
            headers=_DEFAULT_HEADERS,
            timeout=timeout,
            follow_redirects=True,
            transport=transport,
        )
        self._min_interval = min_request_interval
        self._max_retries = max_retries
        self._retry_delay = retry_delay
        self._last_sent: float | None = None

    def __enter__(self) -> "HomelibHttpClient":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        self._client.close()

    def get(self, url: str, params: dict[str, str] | None = None) -> dict[str, Any]:
        """Fetch url and decode its JSON body.

        Raises:
            MetadataFetchError: On a network failure, a non-retryable status,
                a body that isn't JSON, or when every retry came back busy.
        """
        response = self._send_with_retries(url, params)
        try:
            return response.json()
        except ValueError as exc:
            raise MetadataFetchError(f"Invalid JSON from {url}") from exc

    def _send_with_retries(self, url: str, params: dict[str, str] | None) -> httpx.Response:
        attempts = self._max_retries + 1
        delay = self._retry_delay
        for attempt in range(1, attempts + 1):
            self._throttle()
            try:
                response = self._client.get(url, params=params)
            except httpx.HTTPError as exc:
                raise MetadataFetchError(f"Request failed: {url}: {exc}") from exc

            if response.status_code == 200:
                return response
            if response.status_code not in _RETRY_ON:
                raise MetadataFetchError(f"HTTP {response.status_code} from {url}")
            if attempt == attempts:
                break

            logger.warning(
                "%s answered HTTP %d, retry %d/%d in %.1fs",
                url, response.status_code, attempt, self._max_retries, delay,
            )
            time.sleep(delay)
            delay *= 2

        raise MetadataFetchError(
            f"HTTP {response.status_code} from {url} after {attempts} attempts"
        )

    def _throttle(self) -> None:
        if self._min_interval > 0 and self._last_sent is not None:
            wait = self._min_interval - (time.monotonic() - self._last_sent)
            if wait > 0:
                time.sleep(wait)
        self._last_sent = time.monotonic()
