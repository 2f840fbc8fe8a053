"""Integration tests for the download proxy and health endpoints."""

from unittest.mock import AsyncMock, patch

from tripmate.errors import DownloadFailedError
from tripmate.services.download_proxy import FetchedAsset

URL = "http://assets.test/tripmate-assets/trips/t1/items/1_a.jpg"


class TestDownload:

    def test_attachment(self, client):
        asset = FetchedAsset(content=b"jpeg-bytes", content_type="image/jpeg", source="remote")

        with patch("tripmate.api.routes.downloads.fetch_asset", AsyncMock(return_value=asset)) as fetch:
            response = client.get("/download", params={"url": URL, "filename": "da-lat.jpg"})

        assert response.status_code == 200
        assert response.content == b"jpeg-bytes"
        assert response.headers["content-type"] == "image/jpeg"
        assert response.headers["content-disposition"] == 'attachment; filename="da-lat.jpg"'
        assert response.headers["content-length"] == "10"
        fetch.assert_awaited_once_with(URL)

    def test_default_filename(self, client):
        asset = FetchedAsset(content=b"x", content_type="image/png", source="cache")

        with patch("tripmate.api.routes.downloads.fetch_asset", AsyncMock(return_value=asset)):
            response = client.get("/download", params={"url": URL})

        assert response.headers["content-disposition"] == 'attachment; filename="download"'

    def test_url_required(self, client):
        response = client.get("/download")

        assert response.status_code == 400
        assert response.json() == {"error": "URL is required"}

    def test_upstream_status(self, client):
        failure = DownloadFailedError("Failed to fetch file", status_code=404)

        with patch("tripmate.api.routes.downloads.fetch_asset", AsyncMock(side_effect=failure)):
            response = client.get("/download", params={"url": URL})

        assert response.status_code == 404
        assert response.json() == {"error": "Failed to fetch file"}


class TestHealth:

    def test_health(self, client):
        body = client.get("/health").json()

        assert body["status"] == "healthy"
        assert body["checks"] == {"app": True}

    def test_ready(self, client):
        body = client.get("/health/ready").json()

        assert body["ready"] is True
        assert body["checks"]["database"] == {"status": "ok"}

    def test_live(self, client):
        assert client.get("/health/live").json()["status"] == "alive"

    def test_request_id_is_echoed(self, client):
        response = client.get("/health", headers={"X-Request-ID": "abc-123"})

        assert response.headers["X-Request-ID"] == "abc-123"

    def test_request_id_is_generated(self, client):
        response = client.get("/health/live")

        assert len(response.headers["X-Request-ID"]) == 32
