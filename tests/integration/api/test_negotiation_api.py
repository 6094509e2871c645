from __future__ import annotations

import pytest
from fastapi.testclient import TestClient

import app.api.v1.health as health_module
from app.core.config import get_config
from app.core.dependencies import build_services, get_services
from app.core.exceptions import PersistenceError
from app.main import create_app
from app.utils.retry import RetryPolicy


@pytest.fixture
def services(session_factory):
    return build_services(session_factory, get_config())


@pytest.fixture
def client(services, monkeypatch):
    monkeypatch.setattr(health_module, "verify_database_connection", lambda: True)
    app = create_app()
    app.dependency_overrides[get_services] = lambda: services
    return TestClient(app)


def _start_negotiation(client, seed) -> str:
    response = client.post(
        f"/api/v1/proposals/{seed.proposal_id}/actions",
        json={"action": "NEGOTIATE", "debtor_id": seed.debtor_id, "debtor_name": "María González"},
    )
    assert response.status_code == 200
    body = response.json()
    assert body["action"] == "negotiating"
    return body["conversation_id"]


def test_health_reports_database_state(client):
    response = client.get("/api/v1/health")
    assert response.status_code == 200
    assert response.json()["database"] == "ok"


def test_negotiation_turn_over_http(client, seed):
    conversation_id = _start_negotiation(client, seed)

    greeting = client.get(f"/api/v1/conversations/{conversation_id}/messages").json()
    assert greeting["total"] == 1
    assert greeting["items"][0]["sender_type"] == "ai_assistant"

    response = client.post(
        f"/api/v1/conversations/{conversation_id}/messages",
        json={"content": "Quiero hablar con una persona"},
    )

    assert response.status_code == 201
    turn = response.json()
    assert turn["escalated"] is True
    assert turn["escalation"]["reason"] == "user_requested_human"
    assert turn["inbound"]["sequence"] == 2
    assert turn["reply"]["sequence"] == 3
    assert turn["conversation"]["status"] == "escalated"
    assert turn["conversation"]["ai_enabled"] is False


def test_unknown_conversation_is_404(client):
    response = client.post("/api/v1/conversations/missing/messages", json={"content": "Hola"})
    assert response.status_code == 404
    assert client.get("/api/v1/conversations/missing").status_code == 404


def test_closed_conversation_is_409(client, seed):
    conversation_id = _start_negotiation(client, seed)

    outcome = client.post(f"/api/v1/conversations/{conversation_id}/outcome", json={"outcome": "agreed"})
    assert outcome.status_code == 200
    assert outcome.json()["status"] == "agreed"

    response = client.post(f"/api/v1/conversations/{conversation_id}/messages", json={"content": "Hola"})
    assert response.status_code == 409


def test_invalid_requests_are_422(client, seed):
    response = client.post(
        f"/api/v1/proposals/{seed.proposal_id}/actions",
        json={"action": "COUNTER", "debtor_id": seed.debtor_id, "debtor_name": "María González"},
    )
    assert response.status_code == 422

    response = client.put(
        f"/api/v1/corporate-clients/{seed.corporate_client_id}/ai-config",
        json={"max_negotiation_discount": 150},
    )
    assert response.status_code == 422


def test_storage_outage_is_503(client, services, seed, monkeypatch):
    conversation_id = _start_negotiation(client, seed)

    def unavailable(*args, **kwargs):
        raise PersistenceError("append_message failed")

    monkeypatch.setattr(services.orchestrator, "retry", RetryPolicy(max_retries=0))
    monkeypatch.setattr(services.store, "append_message", unavailable)

    response = client.post(f"/api/v1/conversations/{conversation_id}/messages", json={"content": "Hola"})
    assert response.status_code == 503


def test_metrics_reflect_tracked_outcomes(client, seed):
    response = client.post(
        f"/api/v1/proposals/{seed.proposal_id}/actions",
        json={"action": "ACCEPT", "debtor_id": seed.debtor_id, "debtor_name": "María González"},
    )
    assert response.status_code == 200
    assert response.json()["agreement_id"]

    metrics = client.get(f"/api/v1/analytics/{seed.company_id}/metrics")
    assert metrics.status_code == 200
    assert metrics.json()["total_negotiations"] == 1
    assert metrics.json()["ai_success_rate"] == 100

    report = client.get(f"/api/v1/analytics/{seed.company_id}/report", params={"include_details": "true"})
    assert report.status_code == 200
    assert report.json()["performance"]["customer_satisfaction_validated"] is False
