"""API Request Executor module.

Handles HTTP request execution with retry logic, rate limiting and response
classification for the public platform endpoints (Deezer API, oEmbed, short
links). Every failure leaves this module as a ``PlatformError`` carrying an
``ErrorKind``; callers never see raw aiohttp exceptions.
"""

from __future__ import annotations

import asyncio
import json
import logging
import secrets
import time
import urllib.parse
from collections import defaultdict
from typing import TYPE_CHECKING, Any

import aiohttp

from tunebridge.core.exceptions import ErrorKind, PlatformError

if TYPE_CHECKING:
    from tunebridge.services.http.rate_limiter import EnhancedRateLimiter


# Constants
WAIT_TIME_LOG_THRESHOLD = 0.1
LONG_RETRY_DELAY_THRESHOLD = 15.0
HTTP_REQUEST_TIMEOUT = 408
HTTP_TOO_MANY_REQUESTS = 429
HTTP_SERVER_ERROR = 500
HTTP_NOT_FOUND = 404
HTTP_ACCESS_DENIED = frozenset({401, 403})
API_RESPONSE_LOG_LIMIT = 500
MAX_REDIRECTS = 5
DEFAULT_ACCEPT = "application/json, text/html, */*"
SECURE_RANDOM = secrets.SystemRandom()

RETRYABLE_CLIENT_ERRORS = (
    aiohttp.ClientConnectorError,
    aiohttp.ServerDisconnectedError,
    TimeoutError,
)


class _RetryableResponseError(Exception):
    """Raised for 429 and 5xx responses, which are worth another attempt."""

    def __init__(self, status: int, snippet: str) -> None:
        super().__init__(f"HTTP {status}: {snippet[:200]}")
        self.status = status


def kind_for_status(status: int) -> ErrorKind:
    """Map a failing HTTP status to an error kind."""
    if status == HTTP_NOT_FOUND:
        return ErrorKind.NOT_FOUND
    if status in HTTP_ACCESS_DENIED or status == HTTP_TOO_MANY_REQUESTS:
        return ErrorKind.ACCESS_DENIED
    if status == HTTP_REQUEST_TIMEOUT:
        return ErrorKind.TIMEOUT
    return ErrorKind.UNKNOWN


class ApiRequestExecutor:
    """Executes HTTP GET requests with rate limiting and retries.

    Handles all low-level HTTP communication including:
    - Request preparation (headers, timeouts)
    - Rate limiting coordination per platform
    - Retry with exponential backoff and jitter for 429, 5xx and network errors
    - Classification of failures into ``ErrorKind``
    - JSON decoding
    """

    def __init__(
        self,
        *,
        rate_limiters: dict[str, EnhancedRateLimiter],
        console_logger: logging.Logger,
        error_logger: logging.Logger,
        user_agent: str,
        default_max_retries: int,
        default_retry_delay: float,
        max_retry_delay: float = 30.0,
    ) -> None:
        """Initialize the API request executor.

        Args:
            rate_limiters: Dict mapping platform names to rate limiters
            console_logger: Logger for info/debug messages
            error_logger: Logger for errors/warnings
            user_agent: User-Agent header for requests
            default_max_retries: Retry count for retryable failures
            default_retry_delay: Base delay between retries (seconds)
            max_retry_delay: Upper bound of a single backoff delay (seconds)

        """
        self.rate_limiters = rate_limiters
        self.console_logger = console_logger
        self.error_logger = error_logger
        self.user_agent = user_agent
        self.default_max_retries = default_max_retries
        self.default_retry_delay = default_retry_delay
        self.max_retry_delay = max_retry_delay

        # Session managed externally, set via set_session()
        self.session: aiohttp.ClientSession | None = None

        self.request_counts: defaultdict[str, int] = defaultdict(int)
        self.api_call_durations: defaultdict[str, list[float]] = defaultdict(list)

    def set_session(self, session: aiohttp.ClientSession | None) -> None:
        """Set the aiohttp session for making requests."""
        self.session = session

    async def get_json(
        self,
        api_name: str,
        url: str,
        params: dict[str, str] | None = None,
        headers_override: dict[str, str] | None = None,
    ) -> Any:
        """GET a URL and decode its JSON body.

        Args:
            api_name: Platform name used for rate limiting and metrics
            url: Request URL
            params: Query parameters
            headers_override: Additional headers to merge

        Returns:
            Decoded JSON (usually a dict)

        Raises:
            PlatformError: On any transport failure or undecodable body

        """
        text, _ = await self.get_text(api_name, url, params, headers_override)
        try:
            return json.loads(text)
        except json.JSONDecodeError as e:
            self.error_logger.warning(
                "[%s] Invalid JSON from %s. Snippet: %s",
                api_name,
                url,
                text[:200],
            )
            msg = f"Invalid JSON response from {api_name}"
            raise PlatformError(msg, ErrorKind.UNKNOWN, platform=api_name) from e

    async def get_text(
        self,
        api_name: str,
        url: str,
        params: dict[str, str] | None = None,
        headers_override: dict[str, str] | None = None,
    ) -> tuple[str, str]:
        """GET a URL following redirects.

        Returns:
            Tuple of (response body, final URL after redirects)

        Raises:
            PlatformError: On any transport failure

        """
        request_headers, limiter = self._prepare_request(api_name, headers_override)
        log_url = self._build_log_url(url, params)

        for attempt in range(self.default_max_retries + 1):
            try:
                return await self._execute_single_request(
                    api_name,
                    url,
                    params,
                    request_headers=request_headers,
                    limiter=limiter,
                    attempt=attempt,
                    log_url=log_url,
                )
            except _RetryableResponseError as e:
                if attempt >= self.default_max_retries:
                    self._log_final_failure(api_name, log_url, e)
                    raise PlatformError(str(e), kind_for_status(e.status), platform=api_name, status=e.status) from e
                await self._backoff(api_name, e, attempt)
            except RETRYABLE_CLIENT_ERRORS as e:
                self.api_call_durations[api_name].append(0.0)
                if attempt >= self.default_max_retries:
                    self._log_final_failure(api_name, log_url, e)
                    raise self._client_error(api_name, e) from e
                await self._backoff(api_name, e, attempt)
            except aiohttp.ClientError as e:
                self._log_final_failure(api_name, log_url, e)
                raise self._client_error(api_name, e) from e

        # range() above always runs at least once and every branch returns or raises
        msg = f"Request to {api_name} was not attempted"
        raise PlatformError(msg, ErrorKind.UNKNOWN, platform=api_name)

    def _prepare_request(
        self,
        api_name: str,
        headers_override: dict[str, str] | None,
    ) -> tuple[dict[str, str], EnhancedRateLimiter]:
        """Prepare request headers and the platform's rate limiter."""
        self._ensure_session()

        request_headers = {"User-Agent": self.user_agent, "Accept": DEFAULT_ACCEPT}
        if headers_override:
            request_headers |= headers_override

        limiter = self.rate_limiters.get(api_name)
        if limiter is None:
            msg = f"No rate limiter configured for API: {api_name}"
            raise PlatformError(msg, ErrorKind.UNKNOWN, platform=api_name)

        return request_headers, limiter

    @staticmethod
    def _build_log_url(url: str, params: dict[str, str] | None) -> str:
        """Build URL string for logging purposes."""
        return url + (f"?{urllib.parse.urlencode(params or {}, safe=':/')}" if params else "")

    async def _execute_single_request(
        self,
        api_name: str,
        url: str,
        params: dict[str, str] | None,
        *,
        request_headers: dict[str, str],
        limiter: EnhancedRateLimiter,
        attempt: int,
        log_url: str,
    ) -> tuple[str, str]:
        """Perform a single request attempt."""
        wait_time = await limiter.acquire()
        if wait_time > WAIT_TIME_LOG_THRESHOLD:
            self.console_logger.debug("[%s] Waited %.3fs for rate limiting", api_name, wait_time)

        self.request_counts[api_name] += 1
        self._ensure_session()
        assert self.session is not None  # _ensure_session() guarantees this

        start_time = time.monotonic()
        async with self.session.get(
            url,
            params=params,
            headers=request_headers,
            max_redirects=MAX_REDIRECTS,
        ) as response:
            elapsed = time.monotonic() - start_time
            self.api_call_durations[api_name].append(elapsed)
            return await self._process_response(response, api_name, attempt, log_url, elapsed)

    def _ensure_session(self) -> None:
        """Ensure session is available, raise if not."""
        if self.session is None or self.session.closed:
            msg = "HTTP session not initialized or closed"
            raise PlatformError(msg, ErrorKind.UNKNOWN)

    async def _process_response(
        self,
        response: aiohttp.ClientResponse,
        api_name: str,
        attempt: int,
        log_url: str,
        elapsed: float,
    ) -> tuple[str, str]:
        """Classify the response status and return its body.

        Raises:
            _RetryableResponseError: For 429 and 5xx responses
            PlatformError: For any other non-2xx response

        """
        status = response.status
        text = await response.text(encoding="utf-8", errors="ignore")
        snippet = text[:API_RESPONSE_LOG_LIMIT]

        self.console_logger.debug(
            "[%s] Request (Attempt %d): %s - Status: %d (%.3fs)",
            api_name,
            attempt + 1,
            log_url,
            status,
            elapsed,
        )

        if status == HTTP_TOO_MANY_REQUESTS or status >= HTTP_SERVER_ERROR:
            raise _RetryableResponseError(status, snippet)

        if not response.ok:
            self.error_logger.warning(
                "[%s] API request failed with status %d. URL: %s. Snippet: %s",
                api_name,
                status,
                log_url,
                snippet[:200],
            )
            msg = f"{api_name} responded with HTTP {status}"
            raise PlatformError(msg, kind_for_status(status), platform=api_name, status=status)

        return text, str(response.url)

    async def _backoff(self, api_name: str, exception: Exception, attempt: int) -> None:
        """Sleep with exponential backoff and jitter before the next attempt."""
        delay = min(
            self.default_retry_delay * (2**attempt) * (0.8 + SECURE_RANDOM.random() * 0.4),
            self.max_retry_delay,
        )

        if delay > LONG_RETRY_DELAY_THRESHOLD:
            self.console_logger.info(
                "[%s] Long retry delay: waiting %.1fs before attempt %d/%d",
                api_name,
                delay,
                attempt + 2,
                self.default_max_retries + 1,
            )

        self.console_logger.warning(
            "[%s] %s, retrying %d/%d in %.2fs",
            api_name,
            type(exception).__name__,
            attempt + 1,
            self.default_max_retries,
            delay,
        )
        await asyncio.sleep(delay)

    @staticmethod
    def _client_error(api_name: str, exception: Exception) -> PlatformError:
        if isinstance(exception, TimeoutError):
            return PlatformError(f"Request to {api_name} timed out", ErrorKind.TIMEOUT, platform=api_name)
        if isinstance(exception, aiohttp.ClientResponseError):
            return PlatformError(str(exception), kind_for_status(exception.status), platform=api_name, status=exception.status)
        return PlatformError(f"Request to {api_name} failed: {exception}", ErrorKind.UNKNOWN, platform=api_name)

    def _log_final_failure(self, api_name: str, url: str, exception: Exception) -> None:
        """Log the final failure after all retries exhausted."""
        self.error_logger.error(
            "[%s] Request failed for URL: %s. Last exception: %s: %s",
            api_name,
            url,
            type(exception).__name__,
            exception,
        )

    def get_stats(self, api_name: str) -> dict[str, Any]:
        """Request count and average latency for one platform."""
        durations = self.api_call_durations.get(api_name, [])
        return {
            "requests": self.request_counts.get(api_name, 0),
            "avg_duration": sum(durations) / len(durations) if durations else 0.0,
        }
