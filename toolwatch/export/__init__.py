"""Catalog export to a GitHub repository with content-addressed writes."""

from toolwatch.export.config import ExportConfig
from toolwatch.export.publish import publish_file, publish_if_changed
from toolwatch.export.render import (
    build_catalog,
    group_by_category,
    render_data_file,
    render_readme,
)
from toolwatch.export.repository import ExportRepository
from toolwatch.export.schemas import CatalogEntry, ExportAttempt
from toolwatch.export.service import list_export_history, run_data_export

__all__ = [
    "CatalogEntry",
    "ExportAttempt",
    "ExportConfig",
    "ExportRepository",
    "build_catalog",
    "group_by_category",
    "list_export_history",
    "publish_file",
    "publish_if_changed",
    "render_data_file",
    "render_readme",
    "run_data_export",
]
