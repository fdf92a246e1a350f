"""GitHub Sync Engine: publish the approved catalog when it changes.

Each run renders ``tools.json`` and ``README.md`` from the approved tools,
writes only the artifacts whose content differs from what is published,
and appends exactly one audit row describing the attempt.

Designed for external cron scheduling: ``0 3 * * * toolwatch export --trigger cron``
"""

import logging
import time

from toolwatch.config.settings import get_settings
from toolwatch.export.config import ExportConfig
from toolwatch.export.publish import publish_file
from toolwatch.export.render import build_catalog, render_data_file, render_readme
from toolwatch.export.repository import ExportRepository
from toolwatch.export.schemas import ExportAttempt
from toolwatch.github.client import GitHubClient
from toolwatch.observability.metrics import get_metrics
from toolwatch.observability.tracing import get_tracer, traced
from toolwatch.storage.database import Database
from toolwatch.storage.repository import ToolRepository

logger = logging.getLogger(__name__)
tracer = get_tracer(__name__)

MISSING_TOKEN_MESSAGE = "GITHUB_TOKEN not configured"


async def run_data_export(
    database: Database,
    config: ExportConfig | None = None,
    github_token: str | None = None,
    site_url: str | None = None,
    trigger_source: str = "cron",
) -> ExportAttempt:
    """
    Render and publish the catalog, recording the attempt.

    Args:
        database: Connected Database instance (caller manages lifecycle).
        config: Export configuration (default: from env).
        github_token: Token with contents write access (default: from settings).
        site_url: Directory site linked from the listing (default: from settings).
        trigger_source: "cron" or "manual".

    Returns:
        The ExportAttempt that was (or should have been) recorded.
    """
    config = config or ExportConfig()
    settings = get_settings()
    github_token = github_token or settings.github_token
    site_url = site_url or settings.site_url

    attempt = ExportAttempt(trigger_source=trigger_source)
    start_time = time.monotonic()

    if not github_token:
        logger.warning("%s, skipping data export", MISSING_TOKEN_MESSAGE)
        attempt.status = "error"
        attempt.error_message = MISSING_TOKEN_MESSAGE
        return await _finish(database, attempt, start_time)

    client = GitHubClient(
        token=github_token,
        timeout=config.timeout_seconds,
        user_agent=config.user_agent,
    )
    committer = {"name": config.committer_name, "email": config.committer_email}

    with traced(tracer, "export_cycle", {"trigger_source": trigger_source}):
        try:
            tools = await ToolRepository(database).list_approved_with_tags()
            entries = build_catalog(tools)
            attempt.tool_count = len(entries)
            logger.info("Data export: %d approved tools", attempt.tool_count)

            artifacts = (
                (config.data_filename, render_data_file(entries)),
                (config.readme_filename, render_readme(entries, site_url, config.repo)),
            )
            for path, content in artifacts:
                if await publish_file(client, config.repo, path, content, committer):
                    attempt.files_updated.append(path)
        except Exception as e:
            logger.exception("Data export failed")
            attempt.status = "error"
            message = str(e) or type(e).__name__
            attempt.error_message = message[: config.error_message_max_length]

    return await _finish(database, attempt, start_time)


async def _finish(
    database: Database,
    attempt: ExportAttempt,
    start_time: float,
) -> ExportAttempt:
    """Append the audit row. A failure to record is logged, never raised."""
    try:
        attempt.id = await ExportRepository(database).record(attempt)
    except Exception:
        logger.exception("Failed to record export attempt")

    elapsed = time.monotonic() - start_time
    metrics = get_metrics()
    metrics.record_export(attempt.status, attempt.trigger_source, attempt.files_updated)
    metrics.record_cycle("export", elapsed, 1 if attempt.status == "error" else 0)
    logger.info(
        "Data export %s: tools=%d updated=%s (%.1fs)",
        attempt.status,
        attempt.tool_count,
        attempt.files_updated or "none",
        elapsed,
    )
    return attempt


async def list_export_history(
    database: Database,
    limit: int | None = None,
) -> list[ExportAttempt]:
    """Most recent export attempts, newest first."""
    limit = limit or ExportConfig().history_limit
    return await ExportRepository(database).list_recent(limit)
