"""
Tests for the REST API.
"""

import pytest
from fastapi.testclient import TestClient

from po_reconciliation.api import app


client = TestClient(app)


@pytest.fixture
def payload(sample_order, matching_confirmation):
    return {
        "order": sample_order.model_dump(mode="json"),
        "confirmation": matching_confirmation.model_dump(mode="json", exclude={"unit_price"}) | {"unit_price": 12.0},
        "tolerance": {"quantity_tolerance_percent": 10, "price_tolerance_percent": 5},
    }


def test_health():
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_config_exposes_default_tolerances():
    body = client.get("/config").json()
    assert "quantity_tolerance_percent" in body
    assert "price_tolerance_percent" in body


def test_reconcile(payload):
    response = client.post("/reconcile", json=payload)
    assert response.status_code == 200

    body = response.json()
    assert body["deviations_present"] is True
    assert body["deviation_types"] == ["price"]
    assert body["price_deviation_percent"] == pytest.approx(20.0)
    assert body["status"] == "open"


def test_reconcile_referential_mismatch(payload):
    payload["confirmation"]["order_id"] = "ffffffffffffffffffffffff"
    response = client.post("/reconcile", json=payload)
    assert response.status_code == 422
    assert "references order" in response.json()["error"]


def test_transition():
    response = client.post("/transition", json={
        "status": "in_review",
        "decision": {"result_id": "r1", "decision": "approve"},
    })
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "approved"
    assert body["allowed_decisions"] == []


def test_transition_not_allowed():
    response = client.post("/transition", json={
        "status": "approved",
        "decision": {"result_id": "r1", "decision": "reject"},
    })
    assert response.status_code == 409


def test_summary(payload):
    result = client.post("/reconcile", json=payload).json()
    response = client.post("/summary", json=[result])
    assert response.status_code == 200
    assert response.json()["deviation_type_counts"] == {"price": 1}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
