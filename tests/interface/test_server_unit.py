from unittest.mock import AsyncMock, patch

import pytest
from fastapi.testclient import TestClient

from asma.application.practice_service import PracticeService
from asma.consts import VERSION
from asma.infrastructure.catalog import BundledCatalog
from asma.infrastructure.stores import InMemoryStateStore
from asma.server import app, set_service

client = TestClient(app)


@pytest.fixture(autouse=True)
def service():
    svc = PracticeService(BundledCatalog(), InMemoryStateStore())
    set_service(svc)
    yield svc
    set_service(None)


def test_health_check():
    response = client.get("/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "ok"
    assert data["version"] == VERSION


def test_get_version():
    response = client.get("/version")
    assert response.status_code == 200
    assert response.json() == {"version": VERSION}


def test_session_endpoint():
    response = client.get("/session")
    assert response.status_code == 200
    data = response.json()
    assert [e["item_id"] for e in data] == [1, 2, 3]
    assert data[0]["name"] == "Ar-Rahman"
    assert data[0]["type"] == "new"
    assert data[0]["state"] is None


def test_session_endpoint_params():
    response = client.get("/session", params={"seconds": 45, "ordering": "interleaved"})
    assert response.status_code == 200
    assert len(response.json()) == 1

    response = client.get("/session", params={"ordering": "random"})
    assert response.status_code == 422


def test_answer_endpoint():
    response = client.post("/answer", json={"item_id": 1, "answer": "Rahmaan"})
    assert response.status_code == 200
    data = response.json()
    assert data["correct"] is True
    assert data["state"]["consecutive_correct"] == 1
    assert data["state"]["stage"] == "learning"

    response = client.post("/answer", json={"item_id": 1, "answer": "Malik"})
    assert response.json()["correct"] is False
    assert response.json()["state"]["consecutive_correct"] == 0


def test_answer_unknown_item():
    response = client.post("/answer", json={"item_id": 500, "answer": "x"})
    assert response.status_code == 404
    assert "Unknown item id" in response.json()["detail"]


def test_rate_endpoint(service):
    response = client.post("/rate", json={"item_id": 4, "quality": 5})
    assert response.status_code == 200
    data = response.json()
    assert data["item_id"] == 4
    assert data["ease_factor"] == pytest.approx(2.6)
    assert data["interval"] == 1


@pytest.mark.parametrize("quality", [-1, 6])
def test_rate_rejects_out_of_range_quality(quality):
    response = client.post("/rate", json={"item_id": 4, "quality": quality})
    assert response.status_code == 422


def test_rate_unknown_item():
    response = client.post("/rate", json={"item_id": 0, "quality": 3})
    assert response.status_code == 404


def test_stats_endpoint():
    client.post("/rate", json={"item_id": 4, "quality": 5})
    response = client.get("/stats")
    assert response.status_code == 200
    data = response.json()
    assert data["total"] == 99
    assert data["new"] == 98
    assert data["learning"] == 1
    assert data["average_accuracy"] is None


def test_stats_fail(service):
    with patch.object(service, "progress", new_callable=AsyncMock) as mock_progress:
        mock_progress.side_effect = Exception("Boom")
        response = client.get("/stats")

    assert response.status_code == 500
    assert "Boom" in response.json()["detail"]
