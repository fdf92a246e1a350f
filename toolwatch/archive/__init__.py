"""Web archival of tools that have gone offline."""

from toolwatch.archive.client import WaybackArchiver, snapshot_url
from toolwatch.archive.trigger import ArchivalTrigger

__all__ = ["ArchivalTrigger", "WaybackArchiver", "snapshot_url"]
