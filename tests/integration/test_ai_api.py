"""Integration tests for the AI endpoints (classifier mocked)."""

from unittest.mock import patch

from tripmate.errors import ClassificationFailedError
from tripmate.schemas.analysis import AIAnalysisResult


class TestAnalyzeImage:

    def test_returns_classification(self, client):
        result = AIAnalysisResult(type="expense", category="stay", name="Homestay", amount=600, description="Đẹp")

        with patch("tripmate.api.routes.ai.analyze_image", return_value=result) as analyze:
            response = client.post("/ai/analyze-image", json={"base64Data": "QUJD", "mimeType": "image/jpeg"})

        assert response.status_code == 200
        assert response.json() == {
            "type": "expense",
            "category": "stay",
            "name": "Homestay",
            "amount": 600,
            "description": "Đẹp",
        }
        analyze.assert_called_once_with("QUJD", "image/jpeg")

    def test_missing_fields(self, client):
        response = client.post("/ai/analyze-image", json={"mimeType": "image/jpeg"})

        assert response.status_code == 400
        assert response.json()["error"] == "Missing required fields"

    def test_classifier_failure(self, client):
        with patch(
            "tripmate.api.routes.ai.analyze_image",
            side_effect=ClassificationFailedError("Failed to analyze image"),
        ):
            response = client.post("/ai/analyze-image", json={"base64Data": "QUJD", "mimeType": "image/jpeg"})

        assert response.status_code == 500
        assert response.json() == {"error": "Failed to analyze image"}


class TestAnalyzeExpenses:

    def test_returns_summary(self, client):
        expenses = [{"name": "Phở", "amount": 50, "category": "food"}]

        with patch("tripmate.api.routes.ai.analyze_trip_expenses", return_value="Ăn ngon 🍜") as analyze:
            response = client.post("/ai/analyze-expenses", json={"expenses": expenses})

        assert response.json() == {"analysis": "Ăn ngon 🍜"}
        analyze.assert_called_once_with(expenses)

    def test_missing_expenses(self, client):
        assert client.post("/ai/analyze-expenses", json={}).status_code == 400
