"""Integration tests for API endpoints"""

import pytest
from datetime import datetime, timedelta, timezone
from fastapi.testclient import TestClient
from prometheus_client import REGISTRY
from crm_insights.config import settings


def _message(body: str | None, message_id: str = "wamid.1", type: str = "text") -> dict:
    payload = {"id": message_id, "from": "5511999999999", "timestamp": "1760000000", "type": type}
    if body is not None:
        payload["text"] = {"body": body}
    return payload


def _days_ago(days: int) -> str:
    return (datetime.now(timezone.utc) - timedelta(days=days)).isoformat()


def test_health_endpoint(client: TestClient):
    """Test health check endpoint"""
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"


def test_metrics_endpoint(client: TestClient):
    """Test Prometheus metrics endpoint"""
    response = client.get("/metrics")
    assert response.status_code == 200
    assert "crm_messages_processed_total" in response.text


def test_request_id_is_propagated(client: TestClient):
    response = client.get("/health", headers={"X-Request-ID": "req-123"})
    assert response.headers["X-Request-ID"] == "req-123"
    assert client.get("/health").headers["X-Request-ID"]


def test_process_purchase_message(client: TestClient):
    """Test POST /v1/messages/process classifies and builds the interaction record"""
    response = client.post("/v1/messages/process", json=_message("Comprei uma camisa por R$ 50,00"))

    assert response.status_code == 200
    data = response.json()
    assert data["message_id"] == "wamid.1"
    assert data["interaction_type"] == "PURCHASE"
    assert data["sentiment"] == "NEUTRAL"
    assert data["extracted_data"] == {"value": 50.0, "category": "geral"}
    assert data["should_respond"] is True
    assert "R$ 50.00" in data["suggested_response"]
    assert data["interaction"]["client_id"] == "5511999999999"
    assert data["interaction"]["value"] == 50.0


def test_process_image_message(client: TestClient):
    """Test non-text messages degrade to GENERAL without a reply"""
    response = client.post("/v1/messages/process", json=_message(None, type="image"))

    assert response.status_code == 200
    data = response.json()
    assert data["interaction_type"] == "GENERAL"
    assert data["extracted_data"] == {}
    assert data["should_respond"] is False
    assert data["suggested_response"] is None
    assert data["interaction"] is None


def test_process_message_too_long(client: TestClient):
    """Test interaction invariant violations become a 422 instead of a crash"""
    response = client.post("/v1/messages/process", json=_message("a" * 1001))

    assert response.status_code == 422
    assert response.json()["detail"].startswith("Could not process message")


def test_process_message_rejects_unknown_type(client: TestClient):
    response = client.post("/v1/messages/process", json=_message("oi", type="sticker"))
    assert response.status_code == 422


def test_process_batch(client: TestClient):
    """Test batch keeps order and isolates failures per message"""
    response = client.post(
        "/v1/messages/batch",
        json={
            "messages": [
                _message("Qual o horário de funcionamento?", "m1"),
                _message("a" * 1001, "m2"),
                _message("Oi", "m3"),
            ]
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["processed"] == 3
    assert [r["message_id"] for r in data["results"]] == ["m1", "m2", "m3"]
    assert data["results"][0]["interaction_type"] == "QUESTION"
    assert data["results"][1]["error"].startswith("Could not process message")
    assert data["results"][1]["interaction"] is None
    assert data["results"][2]["should_respond"] is False


def test_process_batch_too_large(client: TestClient, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setattr(settings, "max_batch_size", 1)

    response = client.post(
        "/v1/messages/batch",
        json={"messages": [_message("Oi", "m1"), _message("Oi", "m2")]},
    )

    assert response.status_code == 413


def test_client_analysis_dormant_client(client: TestClient):
    """Test POST /v1/clients/analysis for a client silent for 100 days"""
    response = client.post(
        "/v1/clients/analysis",
        json={
            "client": {"whatsapp_number": "+55 11 99999-9999", "created_at": _days_ago(200)},
            "interactions": [
                {"type": "QUESTION", "content": "tem estoque?", "created_at": _days_ago(120)},
                {"type": "QUESTION", "content": "qual o preço?", "created_at": _days_ago(100)},
            ],
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["segment"] == "INACTIVE"
    assert data["churn_risk"] == "CRITICAL"
    assert data["days_since_last_interaction"] == 100
    assert data["client"]["whatsapp_number"] == "5511999999999"
    assert data["client"]["segment"] == "INACTIVE"
    assert "Campanha de reativação" in data["recommendations"]
    assert {i["type"] for i in data["insights"]} == {"SEGMENTATION", "CHURN_PREDICTION", "RECOMMENDATION"}


def test_client_analysis_purchase_history(client: TestClient):
    response = client.post(
        "/v1/clients/analysis",
        json={
            "client": {"whatsapp_number": "5511999999999"},
            "interactions": [
                {"type": "PURCHASE", "content": "comprei", "value": 120.0, "category": "casa",
                 "sentiment": "POSITIVE", "created_at": _days_ago(2)},
                {"type": "PURCHASE", "content": "comprei", "value": 80.0, "category": "casa",
                 "sentiment": "POSITIVE", "created_at": _days_ago(1)},
            ],
        },
    )

    assert response.status_code == 200
    data = response.json()
    assert data["total_value"] == 200.0
    assert data["average_value"] == 100.0
    assert data["behavior_patterns"]["preferred_categories"] == ["casa"]
    assert data["behavior_patterns"]["purchase_pattern"]["total_purchases"] == 2
    assert 0 <= data["engagement_score"] <= 100


@pytest.mark.parametrize(
    "client_payload",
    [
        {"whatsapp_number": "123"},
        {"whatsapp_number": "5511999999999", "engagement_score": 150},
    ],
)
def test_client_analysis_invalid_client(client: TestClient, client_payload: dict):
    """Test client invariant violations are reported as 'could not process'"""
    response = client.post("/v1/clients/analysis", json={"client": client_payload, "interactions": []})

    assert response.status_code == 422
    assert response.json()["detail"].startswith("Could not process client")


def test_client_analysis_invalid_interaction(client: TestClient):
    response = client.post(
        "/v1/clients/analysis",
        json={
            "client": {"whatsapp_number": "5511999999999"},
            "interactions": [{"type": "GENERAL", "content": "   "}],
        },
    )

    assert response.status_code == 422
    assert "content" in response.json()["detail"]


def test_rejected_message_still_counts_as_processed(client: TestClient):
    """Test classification metrics are recorded before the interaction record is built"""
    labels = {"interaction_type": "GENERAL", "sentiment": "NEUTRAL"}
    before = REGISTRY.get_sample_value("crm_messages_processed_total", labels) or 0

    response = client.post("/v1/messages/process", json=_message("a" * 1001))

    assert response.status_code == 422
    assert REGISTRY.get_sample_value("crm_messages_processed_total", labels) == before + 1
