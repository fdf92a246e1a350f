"""Open a "you have been verified" issue on an approved tool's repository.

The per-tool notification record is the idempotency token: a ``created``
record blocks another issue unless the operator forces it. Every attempt
that reaches GitHub leaves the record in ``created`` or ``error`` state.
"""

from datetime import datetime, timezone

import structlog

from toolwatch.config.settings import get_settings
from toolwatch.github.client import GitHubClient
from toolwatch.github.urls import parse_repo_url
from toolwatch.notifications.config import NotificationConfig
from toolwatch.notifications.repository import NotificationRepository
from toolwatch.notifications.schemas import GitHubNotification
from toolwatch.observability.metrics import get_metrics
from toolwatch.storage.database import Database
from toolwatch.storage.repository import ToolRepository
from toolwatch.storage.schemas import Tool

logger = structlog.get_logger(__name__)


class NotificationError(Exception):
    """A notification precondition failed before GitHub was contacted."""


class NotificationsNotConfiguredError(NotificationError):
    """No GitHub token is configured."""


class ToolNotFoundError(NotificationError):
    """The tool does not exist."""


class ToolNotEligibleError(NotificationError):
    """The tool is not approved or has no usable GitHub repository URL."""


class AlreadyNotifiedError(NotificationError):
    """An issue was already created for this tool."""

    def __init__(self, issue_url: str | None, issue_number: int | None):
        super().__init__("Notification already sent. Use force to resend.")
        self.issue_url = issue_url
        self.issue_number = issue_number


def render_issue(tool: Tool, site_url: str) -> tuple[str, str]:
    """Build the issue title and markdown body for a verified tool."""
    site_url = site_url.rstrip("/")
    site_label = site_url.split("://", 1)[-1]
    badge_url = f"{site_url}/badges/flat.svg"
    badge_page_url = f"{site_url}/badge/{tool.slug}"
    tool_page_url = f"{site_url}/tool/{tool.slug}"

    title = f"[NoLogin Verified] {tool.name} has been verified by {site_label}"
    body = f"""## 🎉 Congratulations!

**{tool.name}** has been verified by [{site_label}]({site_url}/about) as a privacy-friendly tool that works without requiring user login.

### What is NoLogin Verified?

[NoLogin Verified]({site_url}/badge/) is a trust badge for tools that respect user privacy. Your tool has been manually reviewed and confirmed to:
- ✅ Work without requiring user registration or login
- ✅ Respect user privacy
- ✅ Be continuously monitored for availability

Learn more: [{site_url}/badge/]({site_url}/badge/)

### Add the NoLogin Verified badge

#### In your README

[![NoLogin Verified]({badge_url})]({badge_page_url})

```markdown
[![NoLogin Verified]({badge_url})]({badge_page_url})
```

#### On your landing page or footer

```html
<a href="{badge_page_url}"><img src="{badge_url}" alt="NoLogin Verified" title="Verified by {site_label}" /></a>
```

### More badge styles

Visit your [badge page]({badge_page_url}#embed) to find the style that best fits your site.

### Your tool page

View your verified tool page: [{tool_page_url}]({tool_page_url})

---

*This is an automated notification from [{site_label}]({site_url}). If you have questions, visit our [about page]({site_url}/about).*"""
    return title, body


async def notify_tool(
    database: Database,
    tool_id: int,
    force: bool = False,
    config: NotificationConfig | None = None,
    github_token: str | None = None,
    site_url: str | None = None,
) -> GitHubNotification:
    """
    Create the verification issue for one tool.

    Args:
        database: Connected Database instance.
        tool_id: Tool to notify.
        force: Re-notify even if an issue was already created.
        config: Notification configuration (default: from env).
        github_token: Token with issue write access (default: from settings).
        site_url: Directory site linked from the issue (default: from settings).

    Returns:
        The stored ``created`` record.

    Raises:
        NotificationError subclasses for failed preconditions.
        GitHubApiError / IssuesDisabledError when GitHub rejects the issue;
        an ``error`` record is stored first.
    """
    config = config or NotificationConfig()
    settings = get_settings()
    github_token = github_token or settings.github_token
    site_url = site_url or settings.site_url

    if not github_token:
        raise NotificationsNotConfiguredError("GITHUB_TOKEN is not configured.")

    tool = await ToolRepository(database).get_by_id(tool_id)
    if tool is None:
        raise ToolNotFoundError(f"Tool {tool_id} not found.")
    if tool.status != "approved":
        raise ToolNotEligibleError("Tool must be approved to send notification.")
    if not tool.repo_url:
        raise ToolNotEligibleError("Tool has no repository URL.")
    ref = parse_repo_url(tool.repo_url)
    if ref is None:
        raise ToolNotEligibleError("Invalid GitHub repository URL.")

    notifications = NotificationRepository(database)
    existing = await notifications.get(tool_id)
    if existing is not None and existing.is_created and not force:
        raise AlreadyNotifiedError(existing.issue_url, existing.issue_number)

    title, body = render_issue(tool, site_url)
    client = GitHubClient(
        token=github_token,
        timeout=config.timeout_seconds,
        user_agent=config.user_agent,
    )
    metrics = get_metrics()

    try:
        issue = await client.create_issue(
            ref.owner, ref.repo, title, body, labels=[config.label]
        )
    except Exception as e:
        message = (str(e) or type(e).__name__)[: config.error_message_max_length]
        logger.warning(
            "Notification issue failed",
            tool_id=tool_id,
            repo=ref.full_name,
            error=message,
        )
        await notifications.upsert(
            GitHubNotification(
                tool_id=tool_id,
                status="error",
                issue_url=existing.issue_url if existing else None,
                issue_number=existing.issue_number if existing else None,
                error_message=message,
                created_at=datetime.now(timezone.utc),
            )
        )
        metrics.record_notification("error")
        raise

    record = GitHubNotification(
        tool_id=tool_id,
        status="created",
        issue_url=issue.url,
        issue_number=issue.number,
        created_at=datetime.now(timezone.utc),
    )
    await notifications.upsert(record)
    metrics.record_notification("created")
    logger.info(
        "Notification issue created",
        tool_id=tool_id,
        repo=ref.full_name,
        issue_url=issue.url,
    )
    return record
