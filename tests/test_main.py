"""HTTP surface: routing and error mapping."""

import pytest
from fastapi.testclient import TestClient

from closet.errors import (
    ExhaustedRetriesError,
    FieldIssue,
    GenerationFailedError,
    ValidationError,
)
from closet.main import app
from closet.models import OutfitVisualizationResult

from conftest import PNG_DATA_URI


@pytest.fixture
def client() -> TestClient:
    return TestClient(app)


def test_health_returns_ok(client) -> None:
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok"}


def test_visualization_route_returns_result(client, mocker) -> None:
    flow = mocker.patch(
        "closet.main.generate_outfit_visualization",
        new_callable=mocker.AsyncMock,
        return_value=OutfitVisualizationResult(visualization_url=PNG_DATA_URI),
    )

    response = client.post("/outfits/visualization", json={"description": "Zomerjurk"})

    assert response.status_code == 200
    assert response.json() == {"visualization_url": PNG_DATA_URI}
    assert flow.await_args.args[0].description == "Zomerjurk"


@pytest.mark.parametrize(
    ("error", "status_code"),
    [
        (ValidationError("ColorAnalysisResult", [FieldIssue("avoid_colors", "too few")]), 422),
        (ExhaustedRetriesError("Color analysis", 3, RuntimeError("rate limit")), 503),
        (GenerationFailedError("Failed to generate outfit image."), 502),
    ],
)
def test_flow_errors_are_mapped(client, mocker, error, status_code) -> None:
    mocker.patch(
        "closet.main.perform_color_analysis",
        new_callable=mocker.AsyncMock,
        side_effect=error,
    )

    response = client.post("/color-analysis", json={"user_data_uri": PNG_DATA_URI})

    assert response.status_code == status_code
    assert response.json() == {"status": "error", "error": str(error)}


def test_malformed_body_is_rejected_before_the_flow(client, mocker) -> None:
    flow = mocker.patch("closet.main.analyze_clothing_item", new_callable=mocker.AsyncMock)

    response = client.post("/clothing/analyze", json={"photo_data_uri": "shirt.jpg"})

    assert response.status_code == 422
    flow.assert_not_awaited()
    body = response.json()
    assert body["status"] == "error"
    assert "photo_data_uri" in body["error"]


def test_missing_field_uses_the_error_envelope(client) -> None:
    response = client.post("/color-analysis", json={})

    assert response.status_code == 422
    assert response.json() == {"status": "error", "error": "Invalid request: user_data_uri: Field required"}
