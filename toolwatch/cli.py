"""
Command-line interface for toolwatch.

Every reconciliation job is a command, so each can be driven by cron or
run by hand. Cycle commands record ``manual`` as their trigger source
unless told otherwise.

Usage:
    toolwatch init-db        # Create tables
    toolwatch health-check   # Probe a sample of tools (every 6h)
    toolwatch badge-scan     # Classify badge display (daily)
    toolwatch export         # Publish the catalog to GitHub (daily)
    toolwatch repo-refresh   # Refresh GitHub metadata (daily)
    toolwatch scheduler      # Run all of the above on their cadences
    toolwatch serve          # Start the operator API
"""

import asyncio
import signal
import sys

import click

from toolwatch.config.settings import get_settings
from toolwatch.observability.logging import setup_logging
from toolwatch.observability.metrics import get_metrics

TRIGGER_CHOICES = click.Choice(["manual", "cron"])


@click.group()
@click.option("--debug", is_flag=True, help="Enable debug logging")
def main(debug: bool) -> None:
    """toolwatch - verification and health reconciliation for the tool directory."""
    if debug:
        import os
        os.environ["LOG_LEVEL"] = "DEBUG"
        get_settings.cache_clear()

    setup_logging()

    # Initialize tracing if enabled
    settings = get_settings()
    if settings.tracing_enabled:
        from toolwatch.observability.tracing import setup_tracing

        setup_tracing(
            service_name=settings.otel_service_name,
            otlp_endpoint=settings.otel_exporter_otlp_endpoint,
        )


@main.command("init-db")
def init_db() -> None:
    """Initialize the database schema."""
    from toolwatch.storage.database import Database
    from toolwatch.storage.repository import ToolRepository

    async def run():
        db = Database()
        await db.connect()

        try:
            await ToolRepository(db).create_tables()
            click.echo("Database initialized successfully")
        finally:
            await db.close()

    asyncio.run(run())


@main.command("health-check")
@click.option("--tool-id", default=None, type=int, help="Probe a single tool instead of a sample")
@click.option("--trigger", "trigger_source", default="manual", type=TRIGGER_CHOICES,
              help="Trigger source recorded for this run")
def health_check(tool_id: int | None, trigger_source: str) -> None:
    """Run a health reconciliation cycle, or probe one tool.

    Designed for cron scheduling: 0 */6 * * * toolwatch health-check --trigger cron

    Example:
        toolwatch health-check              # Sample, probe, archive, prune
        toolwatch health-check --tool-id 42 # Probe one tool now
    """
    from toolwatch.health.scheduler import check_tool, run_health_checks
    from toolwatch.storage.database import Database

    async def run():
        db = Database()
        await db.connect()

        try:
            if tool_id is not None:
                result = await check_tool(db, tool_id)
                if result is None:
                    click.echo(click.style(f"Tool {tool_id} not found", fg="red"))
                    sys.exit(1)

                state = "online" if result.is_online else "offline"
                color = "green" if result.is_online else "red"
                click.echo(click.style(f"Tool {tool_id}: {state}", fg=color))
                click.echo(f"  HTTP status:   {result.http_status}")
                click.echo(f"  Response time: {result.response_time_ms} ms")
                return

            result = await run_health_checks(db, trigger_source=trigger_source)

            click.echo("\nHealth Check Results:")
            click.echo(f"  Tools probed:       {result.tools_probed}")
            click.echo(f"  Online:             {result.online}")
            click.echo(f"  Offline:            {result.offline}")
            click.echo(f"  Records written:    {result.records_written}")
            click.echo(f"  Archives triggered: {len(result.archives_triggered)}")
            click.echo(f"  Records pruned:     {result.records_pruned}")
            click.echo(f"  Errors:             {len(result.errors)}")
            click.echo(f"  Elapsed:            {result.elapsed_seconds:.2f}s")

            if result.errors:
                click.echo("\nErrors:")
                for err in result.errors:
                    click.echo(click.style(f"  - {err}", fg="red"))
        finally:
            await db.close()

    asyncio.run(run())


@main.command()
@click.argument("tool_id", type=int)
def status(tool_id: int) -> None:
    """Show a tool's effective status (online, unstable, offline, unknown)."""
    from toolwatch.health.scheduler import get_effective_status
    from toolwatch.storage.database import Database

    colors = {"online": "green", "unstable": "yellow", "offline": "red"}

    async def run():
        db = Database()
        await db.connect()

        try:
            effective = await get_effective_status(db, tool_id)
            label = effective or "unknown"
            click.echo(click.style(f"Tool {tool_id}: {label}", fg=colors.get(label, "white")))
        finally:
            await db.close()

    asyncio.run(run())


@main.command("badge-scan")
@click.option("--trigger", "trigger_source", default="manual", type=TRIGGER_CHOICES,
              help="Trigger source recorded for this run")
def badge_scan(trigger_source: str) -> None:
    """Classify badge display on every approved tool's homepage.

    Designed for cron scheduling: 0 4 * * * toolwatch badge-scan --trigger cron
    """
    from toolwatch.badges.detector import run_badge_detection
    from toolwatch.storage.database import Database

    async def run():
        db = Database()
        await db.connect()

        try:
            result = await run_badge_detection(db, trigger_source=trigger_source)

            click.echo("\nBadge Scan Results:")
            click.echo(f"  Tools scanned: {result.tools_scanned}")
            click.echo(f"  Explicit:      {result.explicit}")
            click.echo(f"  Implicit:      {result.implicit}")
            click.echo(f"  None:          {result.none}")
            click.echo(f"  Errors:        {len(result.errors)}")
            click.echo(f"  Elapsed:       {result.elapsed_seconds:.2f}s")
        finally:
            await db.close()

    asyncio.run(run())


@main.command()
@click.option("--trigger", "trigger_source", default="manual", type=TRIGGER_CHOICES,
              help="Trigger source recorded for this run")
def export(trigger_source: str) -> None:
    """Publish tools.json and README.md to GitHub if they changed.

    Designed for cron scheduling: 0 3 * * * toolwatch export --trigger cron
    """
    from toolwatch.export.service import run_data_export
    from toolwatch.storage.database import Database

    async def run():
        db = Database()
        await db.connect()

        try:
            attempt = await run_data_export(db, trigger_source=trigger_source)

            if attempt.status == "success":
                updated = ", ".join(attempt.files_updated) or "none (unchanged)"
                click.echo(click.style("Export succeeded", fg="green"))
                click.echo(f"  Tools:         {attempt.tool_count}")
                click.echo(f"  Files updated: {updated}")
            else:
                click.echo(click.style(f"Export failed: {attempt.error_message}", fg="red"))
                sys.exit(1)
        finally:
            await db.close()

    asyncio.run(run())


@main.command("export-history")
@click.option("--limit", default=None, type=int, help="Attempts to show (default 20)")
def export_history(limit: int | None) -> None:
    """List recent export attempts, newest first."""
    from toolwatch.export.service import list_export_history
    from toolwatch.storage.database import Database

    async def run():
        db = Database()
        await db.connect()

        try:
            attempts = await list_export_history(db, limit=limit)
            if not attempts:
                click.echo("No export attempts recorded")
                return

            for a in attempts:
                color = "green" if a.status == "success" else "red"
                files = ", ".join(a.files_updated) or "-"
                line = (
                    f"{a.exported_at:%Y-%m-%d %H:%M} {a.trigger_source:<6} "
                    f"{a.status:<7} tools={a.tool_count} files={files}"
                )
                click.echo(click.style(line, fg=color))
                if a.error_message:
                    click.echo(f"    {a.error_message}")
        finally:
            await db.close()

    asyncio.run(run())


@main.command("repo-refresh")
@click.option("--tool-id", default=None, type=int, help="Refresh a single tool regardless of staleness")
@click.option("--trigger", "trigger_source", default="manual", type=TRIGGER_CHOICES,
              help="Trigger source recorded for this run")
def repo_refresh(tool_id: int | None, trigger_source: str) -> None:
    """Refresh cached GitHub stars/forks/license for stale tools.

    Designed for cron scheduling: 0 5 * * * toolwatch repo-refresh --trigger cron
    """
    from toolwatch.github.client import GitHubApiError
    from toolwatch.repometa.refresher import (
        InvalidRepoUrlError,
        refresh_tool,
        run_repo_refresh,
    )
    from toolwatch.storage.database import Database

    async def run():
        db = Database()
        await db.connect()

        try:
            if tool_id is not None:
                try:
                    metadata = await refresh_tool(db, tool_id)
                except (InvalidRepoUrlError, GitHubApiError) as e:
                    click.echo(click.style(f"Refresh failed: {e}", fg="red"))
                    sys.exit(1)
                if metadata is None:
                    click.echo(click.style(f"Tool {tool_id} not found", fg="red"))
                    sys.exit(1)

                click.echo(click.style(f"Tool {tool_id} refreshed", fg="green"))
                click.echo(f"  Stars:    {metadata.stars}")
                click.echo(f"  Forks:    {metadata.forks}")
                click.echo(f"  License:  {metadata.license or '-'}")
                click.echo(f"  Language: {metadata.language or '-'}")
                return

            result = await run_repo_refresh(db, trigger_source=trigger_source)

            click.echo("\nRepo Refresh Results:")
            click.echo(f"  Candidates:  {result.candidates}")
            click.echo(f"  Updated:     {len(result.updated)}")
            click.echo(f"  Invalid URL: {len(result.skipped_invalid)}")
            click.echo(f"  Failed:      {len(result.failed)}")
            click.echo(f"  Elapsed:     {result.elapsed_seconds:.2f}s")
        finally:
            await db.close()

    asyncio.run(run())


@main.command()
@click.argument("tool_id", type=int)
@click.option("--force", is_flag=True, help="Create a new issue even if one exists")
def notify(tool_id: int, force: bool) -> None:
    """Open a verification issue on a tool's GitHub repository."""
    from toolwatch.github.client import GitHubApiError
    from toolwatch.notifications.service import AlreadyNotifiedError, NotificationError, notify_tool
    from toolwatch.storage.database import Database

    async def run():
        db = Database()
        await db.connect()

        try:
            try:
                record = await notify_tool(db, tool_id, force=force)
            except AlreadyNotifiedError as e:
                click.echo(click.style(f"Already notified: {e.issue_url}", fg="yellow"))
                click.echo("Use --force to create another issue.")
                sys.exit(1)
            except (NotificationError, GitHubApiError) as e:
                click.echo(click.style(f"Notification failed: {e}", fg="red"))
                sys.exit(1)

            click.echo(click.style(f"Issue created: {record.issue_url}", fg="green"))
        finally:
            await db.close()

    asyncio.run(run())


@main.command()
@click.option("--metrics/--no-metrics", default=True, help="Enable metrics server")
@click.option("--metrics-port", default=None, type=int, help="Metrics server port")
def scheduler(metrics: bool, metrics_port: int | None) -> None:
    """Run every job on its own interval until interrupted."""
    from toolwatch.services.scheduler_service import SchedulerService

    async def run():
        service = SchedulerService()

        if metrics:
            get_metrics().start_server(port=metrics_port)

        # Handle shutdown signals
        loop = asyncio.get_running_loop()
        for sig in (signal.SIGTERM, signal.SIGINT):
            loop.add_signal_handler(sig, lambda: asyncio.create_task(service.stop()))

        await service.start()

    asyncio.run(run())


@main.command()
@click.option("--host", default=None, help="API server host")
@click.option("--port", default=None, type=int, help="API server port")
@click.option("--reload", is_flag=True, help="Enable auto-reload (dev only)")
@click.option("--metrics-port", default=None, type=int, help="Metrics server port")
def serve(host: str | None, port: int | None, reload: bool, metrics_port: int | None) -> None:
    """Start the operator API server."""
    import uvicorn

    settings = get_settings()
    host = host or settings.api_host
    port = port or settings.api_port
    metrics_port = metrics_port or settings.metrics_port

    get_metrics().start_server(port=metrics_port)

    click.echo(f"Starting API server on {host}:{port}")
    click.echo(f"Metrics available on http://localhost:{metrics_port}/metrics")
    click.echo(f"API docs available on http://localhost:{port}/docs")

    uvicorn.run(
        "toolwatch.api.app:create_app",
        factory=True,
        host=host,
        port=port,
        reload=reload,
        log_level="info",
    )


if __name__ == "__main__":
    main()
