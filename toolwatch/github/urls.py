"""GitHub repository URL parsing."""

from typing import NamedTuple
from urllib.parse import urlparse

GITHUB_HOSTS = frozenset({"github.com", "www.github.com"})


class RepoRef(NamedTuple):
    owner: str
    repo: str

    @property
    def full_name(self) -> str:
        return f"{self.owner}/{self.repo}"


def parse_repo_url(url: str | None) -> RepoRef | None:
    """
    Extract owner/name from a GitHub repository URL.

    Accepts ``https://github.com/owner/repo``, a trailing ``.git`` and
    deeper paths such as ``/tree/main/docs``. Returns None for anything
    that is not a GitHub repository URL.
    """
    if not url:
        return None
    try:
        parsed = urlparse(url.strip())
    except ValueError:
        return None
    if parsed.scheme not in ("http", "https") or parsed.hostname not in GITHUB_HOSTS:
        return None

    parts = [p for p in parsed.path.split("/") if p]
    if len(parts) < 2:
        return None

    owner = parts[0]
    repo = parts[1].removesuffix(".git")
    if not owner or not repo:
        return None
    return RepoRef(owner, repo)
