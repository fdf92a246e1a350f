"""Client for the Internet Archive "Save Page Now" endpoint."""

import logging

from toolwatch.transport.http_client import HTTPClient, HTTPClientError, RetryConfig

logger = logging.getLogger(__name__)

SAVE_ENDPOINT = "https://web.archive.org/save"
SNAPSHOT_PREFIX = "https://web.archive.org/web/"

# Captures can take a while; the submission itself is never retried
SAVE_TIMEOUT_SECONDS = 60.0


def snapshot_url(url: str) -> str:
    """Wayback URL that always resolves to the latest capture of ``url``."""
    return f"{SNAPSHOT_PREFIX}{url}"


class WaybackArchiver:
    """
    Submits URLs for capture using S3-style archive.org credentials.

    Usage:
        archiver = WaybackArchiver(access_key, secret_key)
        archived = await archiver.save("https://example.com")
    """

    def __init__(
        self,
        access_key: str,
        secret_key: str,
        timeout: float = SAVE_TIMEOUT_SECONDS,
    ):
        self._access_key = access_key
        self._secret_key = secret_key
        self._timeout = timeout

    async def save(self, url: str) -> str | None:
        """
        Request a capture of ``url``.

        Returns:
            The snapshot URL on success, None if the submission failed
        """
        headers = {"Authorization": f"LOW {self._access_key}:{self._secret_key}"}
        try:
            async with HTTPClient(
                RetryConfig(max_retries=0),
                timeout=self._timeout,
                headers=headers,
            ) as client:
                await client.post(
                    SAVE_ENDPOINT,
                    data={"url": url, "capture_all": "1"},
                )
        except HTTPClientError as e:
            logger.warning(
                "Archive submission failed for %s (status=%s): %s",
                url,
                e.status_code,
                e,
            )
            return None
        return snapshot_url(url)
