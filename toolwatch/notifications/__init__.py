"""Verification notification issues with a per-tool idempotency record."""

from toolwatch.notifications.config import NotificationConfig
from toolwatch.notifications.repository import NotificationRepository
from toolwatch.notifications.schemas import GitHubNotification
from toolwatch.notifications.service import (
    AlreadyNotifiedError,
    NotificationError,
    NotificationsNotConfiguredError,
    ToolNotEligibleError,
    ToolNotFoundError,
    notify_tool,
    render_issue,
)

__all__ = [
    "AlreadyNotifiedError",
    "GitHubNotification",
    "NotificationConfig",
    "NotificationError",
    "NotificationRepository",
    "NotificationsNotConfiguredError",
    "ToolNotEligibleError",
    "ToolNotFoundError",
    "notify_tool",
    "render_issue",
]
