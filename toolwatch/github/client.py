"""
GitHub REST API client.

Covers the three surfaces the reconciliation jobs touch:
- Repository metadata (stars, forks, license, language)
- Repository contents (read current file + sha, create/update file)
- Issues (verification notifications)

Reads and content writes go through the retrying HTTPClient. Issue
creation is not idempotent, so it is sent exactly once per request.
"""

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from datetime import datetime
from typing import Any

from toolwatch.storage.schemas import RepoMetadata
from toolwatch.transport.http_client import HTTPClient, HTTPClientError, RetryConfig

logger = logging.getLogger(__name__)

GITHUB_API_BASE = "https://api.github.com"


class GitHubApiError(Exception):
    """
    Non-success response from the GitHub API.

    Attributes:
        status: HTTP status, or None if no response arrived
        gh_message: The ``message`` field of GitHub's error body, if any
    """

    def __init__(
        self,
        message: str,
        status: int | None = None,
        gh_message: str | None = None,
    ):
        super().__init__(message)
        self.status = status
        self.gh_message = gh_message


class IssuesDisabledError(GitHubApiError):
    """Issues are disabled for the repository (410). Not retriable."""

    def __init__(self, gh_message: str | None = None):
        super().__init__(
            "Issues are disabled for this repository",
            status=410,
            gh_message=gh_message,
        )


@dataclass
class RemoteFile:
    """
    A file in a repository, as read through the contents API.

    Attributes:
        sha: Blob sha, required to update the file
        content: Decoded UTF-8 text, or None if it could not be decoded
    """

    sha: str
    content: str | None


@dataclass
class IssueRef:
    url: str
    number: int


def _gh_message(body: str | None) -> str:
    """Pull GitHub's ``message`` out of an error body, falling back to raw text."""
    if not body:
        return ""
    try:
        parsed = json.loads(body)
    except ValueError:
        return body
    if isinstance(parsed, dict) and parsed.get("message"):
        return str(parsed["message"])
    return body


def _decode_content(encoded: str | None) -> str | None:
    if encoded is None:
        return None
    try:
        return base64.b64decode(encoded.replace("\n", "")).decode("utf-8")
    except (binascii.Error, UnicodeDecodeError, ValueError):
        return None


def _parse_timestamp(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        return datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        return None


class GitHubClient:
    """
    Thin async wrapper over the GitHub REST endpoints used here.

    Usage:
        client = GitHubClient(token=settings.github_token, timeout=30.0)
        current = await client.get_file("owner/repo", "tools.json")
    """

    def __init__(
        self,
        token: str | None = None,
        timeout: float = 30.0,
        user_agent: str = "toolwatch/1.0",
        retry_config: RetryConfig | None = None,
        api_base: str = GITHUB_API_BASE,
    ):
        self._token = token
        self._timeout = timeout
        self._user_agent = user_agent
        self._retry_config = retry_config or RetryConfig()
        self._api_base = api_base.rstrip("/")

    def _headers(self) -> dict[str, str]:
        headers = {
            "Accept": "application/vnd.github.v3+json",
            "User-Agent": self._user_agent,
        }
        if self._token:
            headers["Authorization"] = f"Bearer {self._token}"
        return headers

    async def _request(
        self,
        method: str,
        path: str,
        json_body: dict[str, Any] | None = None,
        retry: bool = True,
    ) -> Any:
        """Send one API request and return the decoded JSON body."""
        retry_config = self._retry_config if retry else RetryConfig(max_retries=0)
        url = f"{self._api_base}{path}"
        try:
            async with HTTPClient(
                retry_config,
                timeout=self._timeout,
                headers=self._headers(),
            ) as client:
                response = await client.request(method, url, json_body=json_body)
        except HTTPClientError as e:
            gh_message = _gh_message(e.response_body)
            if e.status_code is None:
                raise GitHubApiError(str(e)) from e
            raise GitHubApiError(
                f"GitHub API {e.status_code}: {gh_message}",
                status=e.status_code,
                gh_message=gh_message,
            ) from e
        return response.json()

    async def get_repo(self, owner: str, repo: str) -> RepoMetadata:
        """Fetch public repository metadata."""
        data = await self._request("GET", f"/repos/{owner}/{repo}")
        license_info = data.get("license") or {}
        return RepoMetadata(
            stars=int(data.get("stargazers_count") or 0),
            forks=int(data.get("forks_count") or 0),
            license=license_info.get("spdx_id") or None,
            language=data.get("language"),
            updated_at=_parse_timestamp(data.get("updated_at")),
        )

    async def get_file(self, repo: str, path: str) -> RemoteFile | None:
        """
        Read a file through the contents API.

        Returns:
            The file, or None if it does not exist (404)

        Raises:
            GitHubApiError: For any other failure
        """
        try:
            data = await self._request("GET", f"/repos/{repo}/contents/{path}")
        except GitHubApiError as e:
            if e.status == 404:
                return None
            raise
        return RemoteFile(sha=data["sha"], content=_decode_content(data.get("content")))

    async def put_file(
        self,
        repo: str,
        path: str,
        content: str,
        sha: str | None = None,
        message: str | None = None,
        committer: dict[str, str] | None = None,
    ) -> None:
        """
        Create ``path`` (no sha) or update it against the revision ``sha``.

        A stale sha is rejected by GitHub, which surfaces as GitHubApiError.
        """
        body: dict[str, Any] = {
            "message": message or f"Update {path}",
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
        }
        if committer:
            body["committer"] = committer
            body["author"] = committer
        if sha:
            body["sha"] = sha

        await self._request("PUT", f"/repos/{repo}/contents/{path}", json_body=body)
        logger.info("Pushed %s to %s", path, repo)

    async def create_issue(
        self,
        owner: str,
        repo: str,
        title: str,
        body: str,
        labels: list[str] | None = None,
    ) -> IssueRef:
        """
        Open an issue.

        A 422 (typically a label the repository does not have) is retried
        once without labels.

        Raises:
            IssuesDisabledError: The repository has issues turned off
            GitHubApiError: Any other failure
        """
        payload: dict[str, Any] = {"title": title, "body": body}
        if labels:
            payload["labels"] = labels

        try:
            data = await self._post_issue(owner, repo, payload)
        except GitHubApiError as e:
            if e.status != 422 or "labels" not in payload:
                raise
            logger.info(
                "Issue creation for %s/%s rejected (%s), retrying without labels",
                owner,
                repo,
                e.gh_message,
            )
            data = await self._post_issue(owner, repo, {"title": title, "body": body})

        return IssueRef(url=data["html_url"], number=int(data["number"]))

    async def _post_issue(self, owner: str, repo: str, payload: dict[str, Any]) -> Any:
        try:
            return await self._request(
                "POST",
                f"/repos/{owner}/{repo}/issues",
                json_body=payload,
                retry=False,
            )
        except GitHubApiError as e:
            if e.status == 410:
                raise IssuesDisabledError(e.gh_message) from e
            raise
