"""Tests for the lifecycle HTTP endpoints."""

import pytest
from fastapi.testclient import TestClient

from csp_rules.constants import CSP_RULE_SAVED_OBJECT_TYPE
from csp_rules.lifecycle.router import get_store
from csp_rules.main import app


@pytest.fixture(name="client")
def client_fixture(store, installed_templates):
    app.dependency_overrides[get_store] = lambda: store
    client = TestClient(app)
    yield client
    app.dependency_overrides.clear()


@pytest.fixture
def policy_payload():
    return {
        "id": "pp-1",
        "policy_id": "agent-policy-1",
        "name": "cspm-1",
        "package": {"name": "cloud_security_posture", "version": "0.0.21"},
        "inputs": [
            {"type": "cloudbeat/cis_k8s", "enabled": False},
            {"type": "cloudbeat/cis_eks", "enabled": True, "streams": [{"enabled": True}]},
        ],
    }


class TestLifecycleEndpoints:
    def test_create(self, client: TestClient, policy_payload: dict):
        response = client.post("/csp/lifecycle/package-policies", json=policy_payload)
        assert response.status_code == 200
        data = response.json()
        assert data["event"] == "packagePolicyPostCreate"
        (report,) = data["reports"]
        assert report["benchmark_id"] == "cis_eks"
        assert len(report["created_ids"]) == 3
        assert report["error"] is None

    def test_upgrade(self, client: TestClient, policy_payload: dict):
        client.post("/csp/lifecycle/package-policies", json=policy_payload)
        response = client.put("/csp/lifecycle/package-policies", json=policy_payload)
        assert response.status_code == 200
        (report,) = response.json()["reports"]
        assert len(report["deleted_ids"]) == 3

    def test_create_failure_still_succeeds(self, client: TestClient, store, policy_payload: dict):
        store.fail_bulk_create = True
        response = client.post("/csp/lifecycle/package-policies", json=policy_payload)
        assert response.status_code == 200
        assert response.json()["reports"][0]["error"] is not None

    def test_other_package_is_ignored(self, client: TestClient, policy_payload: dict):
        policy_payload["package"]["name"] = "endpoint"
        response = client.post("/csp/lifecycle/package-policies", json=policy_payload)
        assert response.status_code == 200
        assert response.json()["reports"] == []

    def test_invalid_payload(self, client: TestClient):
        response = client.post("/csp/lifecycle/package-policies", json={"id": "pp-1"})
        assert response.status_code == 422

    def test_delete(self, client: TestClient, policy_payload: dict):
        client.post("/csp/lifecycle/package-policies", json=policy_payload)
        response = client.post(
            "/csp/lifecycle/package-policies/delete",
            json=[
                {"id": "pp-1", "policy_id": "agent-policy-1", "package": {"name": "cloud_security_posture"}},
                {"id": "pp-9", "policy_id": "agent-policy-9", "package": {"name": "endpoint"}},
            ],
        )
        assert response.status_code == 200
        (report,) = response.json()["reports"]
        assert len(report["deleted_ids"]) == 3
        assert report["failures"] == {}


class TestQueryEndpoints:
    def test_status(self, client: TestClient, policy_payload: dict):
        assert client.get("/csp/status").json() == {"installed": False}
        client.post("/csp/lifecycle/package-policies", json=policy_payload)
        assert client.get("/csp/status").json() == {"installed": True}

    def test_list_rules(self, client: TestClient, policy_payload: dict):
        client.post("/csp/lifecycle/package-policies", json=policy_payload)
        response = client.get("/csp/rules", params={"package_policy_id": "pp-1", "policy_id": "agent-policy-1"})
        assert response.status_code == 200
        data = response.json()
        assert data["total"] == 3
        assert all(r["type"] == "csp-rule" for r in data["rules"])

    def test_list_rules_store_failure(self, client: TestClient, store):
        store.fail_find_types.add(CSP_RULE_SAVED_OBJECT_TYPE)
        response = client.get("/csp/rules", params={"package_policy_id": "pp-1", "policy_id": "agent-policy-1"})
        assert response.status_code == 503

    def test_health(self, client: TestClient):
        assert client.get("/health").json() == {"status": "healthy"}

    def test_requests_do_not_log_callback_registration(self, client: TestClient, policy_payload: dict, caplog):
        caplog.set_level("INFO")
        client.post("/csp/lifecycle/package-policies", json=policy_payload)
        client.put("/csp/lifecycle/package-policies", json=policy_payload)
        assert "Lifecycle callback registered" not in caplog.text
