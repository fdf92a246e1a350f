"""Tests for health reconciliation endpoints."""

from unittest.mock import AsyncMock, patch

from toolwatch.health.schemas import HealthCycleResult, ProbeResult

ROUTES = "toolwatch.api.routes.checks"


class TestProbeTool:

    def test_probe_result(self, client, api_db):
        result = ProbeResult(is_online=True, http_status=200, response_time_ms=87)

        with patch(f"{ROUTES}.check_tool", new_callable=AsyncMock, return_value=result) as check:
            resp = client.post("/admin/health-check", json={"tool_id": 7})

        assert resp.status_code == 200
        data = resp.json()
        assert data["tool_id"] == 7
        assert data["is_online"] is True
        assert data["http_status"] == 200
        assert data["response_time_ms"] == 87
        check.assert_awaited_once_with(api_db, 7)

    def test_unreachable_has_null_status(self, client):
        result = ProbeResult(is_online=False)

        with patch(f"{ROUTES}.check_tool", new_callable=AsyncMock, return_value=result):
            data = client.post("/admin/health-check", json={"tool_id": 7}).json()

        assert data["is_online"] is False
        assert data["http_status"] is None
        assert data["response_time_ms"] is None

    def test_unknown_tool_404(self, client):
        with patch(f"{ROUTES}.check_tool", new_callable=AsyncMock, return_value=None):
            resp = client.post("/admin/health-check", json={"tool_id": 99})

        assert resp.status_code == 404
        assert resp.json()["detail"] == "Tool 99 not found"

    def test_invalid_tool_id_422(self, client):
        resp = client.post("/admin/health-check", json={"tool_id": 0})
        assert resp.status_code == 422


class TestHealthCycle:

    def test_runs_cycle_as_manual(self, client, api_db, background):
        result = HealthCycleResult(
            trigger_source="manual",
            tools_probed=10,
            online=8,
            offline=2,
            records_written=10,
            archives_triggered=[4],
            records_pruned=3,
            elapsed_seconds=1.23456,
        )

        with patch(f"{ROUTES}.run_health_checks", new_callable=AsyncMock, return_value=result) as run:
            resp = client.post("/admin/health-cycle")

        assert resp.status_code == 200
        data = resp.json()
        assert data["tools_probed"] == 10
        assert data["archives_triggered"] == [4]
        assert data["records_pruned"] == 3
        assert data["elapsed_seconds"] == 1.235
        run.assert_awaited_once_with(api_db, background=background, trigger_source="manual")


class TestToolStatus:

    def test_effective_status(self, client):
        with patch(f"{ROUTES}.get_effective_status", new_callable=AsyncMock, return_value="unstable"):
            resp = client.get("/admin/tools/3/status")

        assert resp.json() == {"tool_id": 3, "status": "unstable"}

    def test_no_data_is_null(self, client):
        with patch(f"{ROUTES}.get_effective_status", new_callable=AsyncMock, return_value=None):
            resp = client.get("/admin/tools/3/status")

        assert resp.status_code == 200
        assert resp.json()["status"] is None
