"""GitHub REST API access: contents, repository metadata, issues."""

from toolwatch.github.client import (
    GitHubApiError,
    GitHubClient,
    IssueRef,
    IssuesDisabledError,
    RemoteFile,
)
from toolwatch.github.urls import RepoRef, parse_repo_url

__all__ = [
    "GitHubApiError",
    "GitHubClient",
    "IssueRef",
    "IssuesDisabledError",
    "RemoteFile",
    "RepoRef",
    "parse_repo_url",
]
