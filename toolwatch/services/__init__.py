"""Long-running services and detached background work.

The interval scheduler lives in ``toolwatch.services.scheduler_service``
and is imported from there directly, since it depends on every job.
"""

from toolwatch.services.background import BackgroundTaskGroup

__all__ = ["BackgroundTaskGroup"]
