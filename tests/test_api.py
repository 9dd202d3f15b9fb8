"""
API tests for the risk and SLA routers.

Services are swapped for instances built on in-memory repositories, so no
database is needed.
"""

import pytest
from fastapi.testclient import TestClient

from review_gate.main import app
from review_gate.risk.interfaces.controllers import get_risk_service
from review_gate.sla.interfaces.controllers import (
    get_evaluation_service,
    get_metrics_service,
    get_sla_service,
)


@pytest.fixture
def client(risk_service, sla_service, metrics_service, evaluation_service):
    app.dependency_overrides[get_risk_service] = lambda: risk_service
    app.dependency_overrides[get_sla_service] = lambda: sla_service
    app.dependency_overrides[get_metrics_service] = lambda: metrics_service
    app.dependency_overrides[get_evaluation_service] = lambda: evaluation_service
    yield TestClient(app)
    app.dependency_overrides.clear()


ASSESS_PAYLOAD = {
    "project_id": "proj-1",
    "artifact_type": "script",
    "ai_confidence_score": 20,
    "files_affected": 10,
    "source_agent": "agent-1",
}


class TestHealth:
    def test_health_without_database_is_degraded(self, client):
        resp = client.get("/health")

        assert resp.status_code == 200
        assert resp.json()["status"] == "degraded"
        assert resp.json()["checks"]["database"] == "unavailable"

    def test_correlation_id_is_echoed(self, client):
        resp = client.get("/", headers={"X-Correlation-ID": "abc-123"})

        assert resp.status_code == 200
        assert resp.headers["X-Correlation-ID"] == "abc-123"

    def test_correlation_id_is_generated(self, client):
        assert client.get("/").headers.get("X-Correlation-ID")


class TestRiskRoutes:
    def test_assess(self, client):
        resp = client.post("/approvals/risk/assess", json=ASSESS_PAYLOAD)

        assert resp.status_code == 200, resp.text
        body = resp.json()
        assert body["risk_score"] == 60
        assert body["risk_level"] == "high"
        assert body["risk_factors"]["scope_score"] == 60
        assert body["approval_requirements"]["requires_lead"] is True
        assert body["approval_requirements"]["can_auto_approve"] is False

    def test_assess_rejects_out_of_range_confidence(self, client):
        resp = client.post("/approvals/risk/assess", json={**ASSESS_PAYLOAD, "ai_confidence_score": 150})
        assert resp.status_code == 422

    def test_get_default_settings(self, client):
        resp = client.get("/approvals/settings/proj-1")

        assert resp.status_code == 200
        settings = resp.json()["settings"]
        assert settings["low_risk_threshold"] == 25
        assert settings["critical_risk_sla_hours"] == 48

    def test_update_settings(self, client):
        resp = client.put("/approvals/settings/proj-1", json={"high_risk_sla_hours": 12})

        assert resp.status_code == 200, resp.text
        assert resp.json()["settings"]["high_risk_sla_hours"] == 12
        assert client.get("/approvals/settings/proj-1").json()["settings"]["high_risk_sla_hours"] == 12

    def test_update_with_unordered_thresholds(self, client, settings_repo):
        resp = client.put(
            "/approvals/settings/proj-1",
            json={"low_risk_threshold": 50, "medium_risk_threshold": 30, "high_risk_threshold": 75}
        )

        assert resp.status_code == 400
        assert resp.json()["error_type"] == "ValidationException"
        assert resp.json()["details"]["errors"]
        assert settings_repo.writes == 0

    def test_update_unknown_project(self, client):
        resp = client.put("/approvals/settings/nope", json={"low_risk_threshold": 10})
        assert resp.status_code == 404

    def test_update_rejects_unknown_fields(self, client):
        resp = client.put("/approvals/settings/proj-1", json={"colour": "blue"})
        assert resp.status_code == 422


class TestSLARoutes:
    def test_create_and_read_status(self, client, artifact_repo, clock):
        artifact_repo.add("art-1")

        created = client.post("/sla/art-1", json={"risk_level": "medium"})
        assert created.status_code == 201, created.text
        assert created.json()["status"] == "within_sla"
        assert created.json()["deadline_hours"] == 4

        clock.advance(hours=3)
        status = client.get("/sla/art-1")
        assert status.status_code == 200
        assert status.json()["status"] == "approaching_sla"
        assert status.json()["is_approaching"] is True

    def test_create_for_unknown_artifact(self, client):
        resp = client.post("/sla/nope", json={"risk_level": "low"})

        assert resp.status_code == 404
        assert "nope" in resp.json()["detail"]

    def test_create_with_invalid_level(self, client, artifact_repo):
        artifact_repo.add("art-1")
        assert client.post("/sla/art-1", json={"risk_level": "extreme"}).status_code == 422

    def test_status_for_untracked_artifact(self, client):
        assert client.get("/sla/nope").status_code == 404

    def test_queues_are_not_read_as_artifact_ids(self, client, artifact_repo, clock):
        artifact_repo.add("a")
        artifact_repo.add("b")
        client.post("/sla/a", json={"risk_level": "low"})
        client.post("/sla/b", json={"risk_level": "critical"})
        clock.advance(hours=2)
        client.get("/sla/a")

        approaching = client.get("/sla/approaching", params={"limit": 5})
        breached = client.get("/sla/breached", params={"project_id": "proj-1"})

        assert approaching.status_code == 200
        assert [t["artifact_id"] for t in approaching.json()["data"]] == ["b"]
        assert approaching.json()["limit"] == 5
        assert [t["artifact_id"] for t in breached.json()["data"]] == ["a"]
        assert breached.json()["total_pages"] == 1

    def test_queue_paging_is_validated(self, client):
        assert client.get("/sla/approaching", params={"page": 0}).status_code == 422

    def test_escalate(self, client, artifact_repo):
        artifact_repo.add("art-1")
        client.post("/sla/art-1", json={"risk_level": "high"})

        resp = client.post("/sla/art-1/escalate", json={"escalated_to_id": "lead-1", "reason": "Blocked"})

        assert resp.status_code == 200, resp.text
        assert resp.json()["status"] == "escalated"
        assert resp.json()["escalated_to_id"] == "lead-1"

    def test_escalate_untracked(self, client):
        resp = client.post("/sla/nope/escalate", json={"escalated_to_id": "lead-1", "reason": "x"})
        assert resp.status_code == 404

    def test_complete(self, client, artifact_repo):
        artifact_repo.add("art-1")
        client.post("/sla/art-1", json={"risk_level": "low"})

        resp = client.post("/sla/art-1/complete")

        assert resp.status_code == 200
        assert resp.json()["completed_at"] is not None

    def test_complete_untracked_is_a_no_op(self, client):
        resp = client.post("/sla/nope/complete")

        assert resp.status_code == 200
        assert resp.json() is None

    def test_metrics(self, client):
        resp = client.get("/sla/metrics/proj-1", params={"days": 7})

        assert resp.status_code == 200
        assert resp.json()["compliance_rate"] == 100
        assert resp.json()["days"] == 7

    def test_evaluate(self, client, artifact_repo, clock, sink):
        artifact_repo.add("art-1")
        client.post("/sla/art-1", json={"risk_level": "low"})
        clock.advance(hours=2)

        resp = client.post("/sla/evaluate")

        assert resp.status_code == 200, resp.text
        assert resp.json()["transition_count"] == 1
        assert resp.json()["transitions"][0]["status"] == "breached"
        assert len(sink.sent) == 1
