"""
FastAPI operator service.

Provides on-demand triggers for every reconciliation job:
- POST /admin/health-check, /admin/health-cycle
- POST /admin/badge-scan
- POST /admin/data-export, GET /admin/export-history
- POST /admin/github-fetch, /admin/repo-refresh
- POST /admin/github-notify
- GET /health - Service health check
"""

from toolwatch.api.app import create_app

__all__ = ["create_app"]
