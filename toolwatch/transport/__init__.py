"""HTTP transport with retry/backoff for dependency APIs."""

from toolwatch.transport.http_client import (
    HTTPClient,
    HTTPClientError,
    RateLimitError,
    RetryConfig,
)

__all__ = ["HTTPClient", "HTTPClientError", "RateLimitError", "RetryConfig"]
