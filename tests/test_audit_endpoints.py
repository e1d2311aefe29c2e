"""
Endpoint tests for discovery, audit and aggregation.

Services are patched at the route modules, so no request leaves the process.
"""
from unittest.mock import patch

from app.features.scan.schemas.audit import AuditOutcome
from app.features.scan.schemas.report import AggregateReport
from app.platform.exceptions import NoPagesDiscovered, ServerUnreachable

BASE = "http://localhost:3000"


def outcome(score=85, passed=True):
    return AuditOutcome(
        scan_id="run-1",
        base_url=BASE,
        pages=["/", "/about"],
        threshold=80,
        passed=passed,
        report=AggregateReport(scan_id="run-1", total_scans=2, completed_scans=2, overall_score=score),
        duration_ms=1500,
    )


class TestDiscoveryEndpoint:

    @patch("app.features.discovery.routes.discovery.PageDiscoveryService")
    def test_discovery_returns_pages(self, mock_service, client):
        mock_service.return_value.discover_or_raise.return_value = ["/", "/about"]
        mock_service.resolve_strategy.return_value.value = "sitemap"

        response = client.post("/api/v1/discovery", json={"url": "https://example.com/", "strategy": "sitemap"})

        assert response.status_code == 200
        payload = response.json()
        assert payload["status"] == "success"
        assert payload["data"]["base_url"] == "https://example.com"
        assert payload["data"]["pages"] == ["/", "/about"]
        assert payload["data"]["count"] == 2
        assert payload["data"]["strategy"] == "sitemap"

    def test_single_strategy_without_network(self, client):
        response = client.post("/api/v1/discovery", json={"url": "https://example.com", "strategy": "single"})

        assert response.status_code == 200
        assert response.json()["data"]["pages"] == ["/"]

    def test_paths_strategy_end_to_end(self, client):
        response = client.post("/api/v1/discovery", json={
            "url": "https://example.com",
            "strategy": "paths",
            "options": {"paths": "/\n/about\n\n# comment\n/contact"},
        })

        assert response.json()["data"]["pages"] == ["/", "/about", "/contact"]

    def test_invalid_url_is_rejected(self, client):
        response = client.post("/api/v1/discovery", json={"url": "not a url"})

        assert response.status_code == 422
        assert response.json()["status"] == "error"

    @patch("app.features.discovery.routes.discovery.PageDiscoveryService")
    def test_empty_discovery_maps_to_422(self, mock_service, client):
        mock_service.return_value.discover_or_raise.side_effect = NoPagesDiscovered("No pages discovered")

        response = client.post("/api/v1/discovery", json={"url": "https://example.com"})

        assert response.status_code == 422
        assert response.json()["data"]["error"] == "NoPagesDiscovered"


class TestAuditEndpoint:

    @patch("app.features.scan.routes.audit.AuditRunner")
    def test_audit_passed(self, mock_runner, client):
        mock_runner.return_value.run.return_value = outcome(85, True)

        response = client.post("/api/v1/audit", json={"url": BASE, "threshold": 80})

        assert response.status_code == 200
        payload = response.json()
        assert payload["message"] == "Audit passed with score 85/100"
        assert payload["data"]["passed"] is True
        assert payload["data"]["report"]["overall_score"] == 85

        request = mock_runner.return_value.run.call_args.args[0]
        assert request.base_url == BASE
        assert request.threshold == 80

    @patch("app.features.scan.routes.audit.AuditRunner")
    def test_audit_below_threshold(self, mock_runner, client):
        mock_runner.return_value.run.return_value = outcome(60, False)

        response = client.post("/api/v1/audit", json={"url": BASE})

        assert response.status_code == 200
        assert response.json()["message"] == "Audit score 60 below threshold 80"

    @patch("app.features.scan.routes.audit.AuditRunner")
    def test_unreachable_target(self, mock_runner, client):
        mock_runner.return_value.run.side_effect = ServerUnreachable("Server health check failed")

        response = client.post("/api/v1/audit", json={"url": BASE})

        assert response.status_code == 503
        assert response.json()["status"] == "error"

    def test_invalid_wcag_level(self, client):
        response = client.post("/api/v1/audit", json={"url": BASE, "wcag_level": "AAAA"})

        assert response.status_code == 422


class TestAggregateEndpoint:

    def test_aggregate(self, client):
        response = client.post("/api/v1/audit/aggregate", json={
            "scan_id": "run-9",
            "results": [
                {"url": f"{BASE}/", "status": "completed", "score": 80, "pass_count": 10},
                {"url": f"{BASE}/x", "status": "failed", "error": "boom"},
                {"url": f"{BASE}/y", "status": "completed", "score": 60, "pass_count": 4},
            ],
        })

        assert response.status_code == 200
        report = response.json()["data"]
        assert report["scan_id"] == "run-9"
        assert report["overall_score"] == 70
        assert report["total_scans"] == 3
        assert report["completed_scans"] == 2
        assert report["failed_scans"] == 1
        assert report["total_passes"] == 14

    def test_empty_results(self, client):
        response = client.post("/api/v1/audit/aggregate", json={"results": []})

        assert response.status_code == 200
        assert response.json()["data"]["total_scans"] == 0


class TestHttpSessionLifecycle:

    @patch("app.features.scan.routes.audit.AuditRunner")
    @patch("app.features.scan.routes.audit.requests.Session")
    def test_audit_closes_its_session(self, mock_session_cls, mock_runner, client):
        mock_runner.return_value.run.return_value = outcome()
        http = mock_session_cls.return_value.__enter__.return_value

        client.post("/api/v1/audit", json={"url": BASE})

        mock_runner.assert_called_once_with(session=http)
        mock_session_cls.return_value.__exit__.assert_called_once()

    @patch("app.features.discovery.routes.discovery.PageDiscoveryService")
    @patch("app.features.discovery.routes.discovery.requests.Session")
    def test_discovery_closes_its_session(self, mock_session_cls, mock_service, client):
        mock_service.return_value.discover_or_raise.return_value = ["/"]
        mock_service.resolve_strategy.return_value.value = "single"
        http = mock_session_cls.return_value.__enter__.return_value

        client.post("/api/v1/discovery", json={"url": "https://example.com"})

        mock_service.assert_called_once_with(session=http)
        mock_session_cls.return_value.__exit__.assert_called_once()
