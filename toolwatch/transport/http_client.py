"""
HTTP infrastructure layer for dependency APIs.

Provides:
- RetryConfig: Exponential backoff configuration
- HTTPClient: Async HTTP client with automatic retry on transient failures

Used for the GitHub REST API and the archive endpoint. Liveness probes
and badge fetches use their own single-attempt clients.
"""

import asyncio
import logging
import random
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)


@dataclass
class RetryConfig:
    """
    Exponential backoff configuration for HTTP retries.

    Formula: min(max_backoff, base_delay * 2^attempt) * (1 + random(0, jitter_factor))
    """

    max_retries: int = 2
    max_backoff_seconds: float = 30.0
    base_delay: float = 1.0
    jitter_factor: float = 0.1

    def calculate_backoff(self, attempt: int) -> float:
        """
        Calculate backoff duration for a given retry attempt.

        Args:
            attempt: The retry attempt number (0-indexed)

        Returns:
            Backoff duration in seconds with jitter applied
        """
        delay = self.base_delay * (2**attempt)
        delay = min(delay, self.max_backoff_seconds)
        jitter = delay * self.jitter_factor * random.random()
        return delay + jitter

    def is_retryable_status(self, status_code: int) -> bool:
        """429 and gateway-style 5xx responses are retried."""
        return status_code in {429, 500, 502, 503, 504}

    def is_retryable_exception(self, exc: Exception) -> bool:
        """Timeouts and connection-level errors are retried."""
        return isinstance(
            exc,
            (
                httpx.TimeoutException,
                httpx.ConnectError,
                httpx.ReadError,
            ),
        )


class HTTPClientError(Exception):
    """Base exception for HTTP client errors."""

    def __init__(
        self,
        message: str,
        status_code: int | None = None,
        response_body: str | None = None,
    ):
        super().__init__(message)
        self.status_code = status_code
        self.response_body = response_body


class RateLimitError(HTTPClientError):
    """Raised when rate limit is hit and all retries exhausted."""

    pass


class HTTPClient:
    """
    Async HTTP client with retry logic.

    Example:
        async with HTTPClient(RetryConfig(max_retries=2), timeout=10.0) as client:
            response = await client.get("https://api.github.com/repos/o/r")
    """

    def __init__(
        self,
        retry_config: RetryConfig | None = None,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
    ):
        """
        Initialize HTTP client.

        Args:
            retry_config: Configuration for retry behavior. Uses defaults if None.
            timeout: Request timeout in seconds, applied to every attempt.
            headers: Default headers sent with every request.
        """
        self.retry_config = retry_config or RetryConfig()
        self.timeout = timeout
        self._headers = dict(headers) if headers else {}
        self._client: httpx.AsyncClient | None = None

    async def __aenter__(self) -> "HTTPClient":
        self._client = httpx.AsyncClient(timeout=self.timeout, headers=self._headers)
        return self

    async def __aexit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._client:
            await self._client.aclose()
            self._client = None

    async def get(
        self,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Perform GET request with retry logic."""
        return await self.request("GET", url, params=params, headers=headers)

    async def post(
        self,
        url: str,
        json_body: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        data: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Perform POST request with retry logic (JSON or form body)."""
        return await self.request(
            "POST", url, json_body=json_body, headers=headers, data=data
        )

    async def put(
        self,
        url: str,
        json_body: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ) -> httpx.Response:
        """Perform PUT request with retry logic."""
        return await self.request("PUT", url, json_body=json_body, headers=headers)

    async def request(
        self,
        method: str,
        url: str,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        json_body: dict[str, Any] | None = None,
        data: dict[str, str] | None = None,
    ) -> httpx.Response:
        """
        Execute HTTP request with retry logic.

        Each attempt gets the full ``timeout``; backoff happens between
        attempts, outside any request deadline.

        Raises:
            HTTPClientError: On non-retryable errors or after retries exhausted
            RateLimitError: When rate limited and retries exhausted
        """
        if not self._client:
            raise RuntimeError("HTTPClient must be used as async context manager")

        last_status_code: int | None = None
        last_response_body: str | None = None

        for attempt in range(self.retry_config.max_retries + 1):
            try:
                response = await self._client.request(
                    method,
                    url,
                    params=params or None,
                    headers=headers or None,
                    json=json_body,
                    data=data,
                )

                if self.retry_config.is_retryable_status(response.status_code):
                    last_status_code = response.status_code
                    last_response_body = response.text

                    if attempt < self.retry_config.max_retries:
                        backoff = self.retry_config.calculate_backoff(attempt)
                        logger.warning(
                            "Retryable status %d from %s %s, attempt %d/%d, backing off %.2fs",
                            response.status_code,
                            method,
                            url,
                            attempt + 1,
                            self.retry_config.max_retries + 1,
                            backoff,
                        )
                        await asyncio.sleep(backoff)
                        continue

                    if response.status_code == 429:
                        raise RateLimitError(
                            f"Rate limit exceeded for {url} after {attempt + 1} attempts",
                            status_code=response.status_code,
                            response_body=last_response_body,
                        )
                    raise HTTPClientError(
                        f"Request failed with status {response.status_code} after {attempt + 1} attempts",
                        status_code=response.status_code,
                        response_body=last_response_body,
                    )

                if response.status_code >= 400:
                    raise HTTPClientError(
                        f"Request failed with status {response.status_code}",
                        status_code=response.status_code,
                        response_body=response.text,
                    )

                return response

            except (httpx.TimeoutException, httpx.ConnectError, httpx.ReadError) as e:
                if attempt < self.retry_config.max_retries:
                    backoff = self.retry_config.calculate_backoff(attempt)
                    logger.warning(
                        "Retryable error %s for %s %s, attempt %d/%d, backing off %.2fs",
                        type(e).__name__,
                        method,
                        url,
                        attempt + 1,
                        self.retry_config.max_retries + 1,
                        backoff,
                    )
                    await asyncio.sleep(backoff)
                    continue

                raise HTTPClientError(
                    f"Request failed after {attempt + 1} attempts: {e}",
                    status_code=last_status_code,
                ) from e

        raise HTTPClientError(
            f"Request failed after {self.retry_config.max_retries + 1} attempts",
            status_code=last_status_code,
            response_body=last_response_body,
        )
