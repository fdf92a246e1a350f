"""Content-addressed publishing: fetch current, compare, write if different.

``publish_if_changed`` knows nothing about GitHub. It takes a reader
returning ``(content, revision)`` (or None when the target is absent) and
a writer accepting ``(content, revision)``, so the same rule can sit in
front of any store with optimistic concurrency tokens.
"""

import logging
from collections.abc import Awaitable, Callable

from toolwatch.github.client import GitHubClient

logger = logging.getLogger(__name__)

Reader = Callable[[], Awaitable[tuple[str | None, str | None] | None]]
Writer = Callable[[str, str | None], Awaitable[None]]


async def publish_if_changed(read: Reader, write: Writer, content: str) -> bool:
    """
    Write ``content`` unless the current content is byte-identical.

    A target whose current content could not be decoded (None) is
    treated as changed.

    Returns:
        True if a write happened
    """
    current = await read()
    revision = None
    if current is not None:
        existing, revision = current
        if existing is not None and existing == content:
            return False
    await write(content, revision)
    return True


async def publish_file(
    client: GitHubClient,
    repo: str,
    path: str,
    content: str,
    committer: dict[str, str] | None = None,
) -> bool:
    """Publish one artifact to a repository through the contents API."""

    async def read() -> tuple[str | None, str | None] | None:
        remote = await client.get_file(repo, path)
        if remote is None:
            return None
        return remote.content, remote.sha

    async def write(new_content: str, sha: str | None) -> None:
        await client.put_file(
            repo,
            path,
            new_content,
            sha=sha,
            message=f"Update {path}",
            committer=committer,
        )

    updated = await publish_if_changed(read, write, content)
    if not updated:
        logger.info("%s unchanged, skipped", path)
    return updated
