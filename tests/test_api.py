"""Tests for the HTTP API."""

import pytest
from fastapi.testclient import TestClient

from nutrition_estimator.api.app import create_app
from nutrition_estimator.containers import AppContainer
from nutrition_estimator.errors import ConfigurationError
from tests.conftest import FakeFdcClient


def test_health(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_nutrition_returns_items_and_total(container: AppContainer) -> None:
    client = TestClient(create_app(container))
    payload = {
        "items": [
            {
                "id": 1,
                "label": "fried rice",
                "confidence": 0.92,
                "bbox": [0.1, 0.1, 0.7, 0.6],
                "suggested_portion_unit": "plate",
            },
            {
                "id": 2,
                "label": "egg",
                "confidence": 0.88,
                "bbox": [0.4, 0.3, 0.15, 0.15],
                "suggested_portion_unit": "piece",
            },
        ],
        "barcodes": [],
        "notes": "",
    }

    response = client.post("/nutrition", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert [item["id"] for item in body["items"]] == [1, 2]
    assert body["items"][0]["gramsPerUnit"] == 300
    assert body["items"][1]["estimated"]["kcal"] == pytest.approx(90)
    assert body["total"]["kcal"] == pytest.approx(690)


def test_nutrition_rejects_malformed_payload(container: AppContainer) -> None:
    client = TestClient(create_app(container))

    response = client.post("/nutrition", json={"items": "not-a-list"})

    assert response.status_code == 422


def test_nutrition_reports_configuration_errors(
    container: AppContainer, fdc_client: FakeFdcClient
) -> None:
    fdc_client.error = ConfigurationError("FDC API key is not configured")
    client = TestClient(create_app(container))

    response = client.post(
        "/nutrition", json={"items": [{"id": 1, "label": "egg"}], "notes": ""}
    )

    assert response.status_code == 500
    assert response.json() == {"error": "FDC API key is not configured"}


def test_nutrition_tolerates_one_malformed_item(container: AppContainer) -> None:
    client = TestClient(create_app(container))
    payload = {
        "items": [
            {"id": 1, "label": "egg"},
            {
                "id": 2,
                "label": "fried rice",
                "bbox": None,
                "suggested_portion_unit": "plate",
            },
            {"id": 3, "label": "egg", "count": 1.5},
        ]
    }

    response = client.post("/nutrition", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert [item["id"] for item in body["items"]] == [1, 2, 3]
    assert body["items"][1]["grams"] == 300
    assert body["items"][2]["count"] == 1
    assert body["total"]["kcal"] == pytest.approx(780)
