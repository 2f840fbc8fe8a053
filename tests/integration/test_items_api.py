"""
Integration tests for trip item endpoints, including batch ingestion.

The batch endpoint runs a pipeline with a fake classifier; the MinIO client
is mocked.
"""

import pytest

from tripmate.api.deps import get_ingestion_pipeline
from tripmate.errors import ClassificationFailedError
from tripmate.schemas.analysis import AIAnalysisResult
from tripmate.services.ingestion import ItemIngestionPipeline
from tripmate.storage.object_storage import get_public_url


def item_body(**overrides) -> dict:
    body = {"name": "Bánh căn", "category": "food", "type": "expense", "amount": 40, "createdBy": "user-1"}
    body.update(overrides)
    return body


class TestItemCrud:

    def test_create_and_list(self, client, sample_trip):
        item_id = client.post(f"/trips/{sample_trip.id}/items", json=item_body()).json()["itemId"]

        items = client.get(f"/trips/{sample_trip.id}/items").json()["items"]

        assert [i["id"] for i in items] == [item_id]
        assert items[0]["tripId"] == sample_trip.id
        assert items[0]["amount"] == 40
        assert items[0]["images"] == []

    def test_newest_event_first(self, client, sample_trip):
        client.post(f"/trips/{sample_trip.id}/items", json=item_body(name="old", timestamp="2025-03-01T08:00:00Z"))
        client.post(f"/trips/{sample_trip.id}/items", json=item_body(name="new", timestamp="2025-03-02T08:00:00Z"))

        items = client.get(f"/trips/{sample_trip.id}/items").json()["items"]

        assert [i["name"] for i in items] == ["new", "old"]

    @pytest.mark.parametrize("missing", ["name", "category", "type", "createdBy"])
    def test_missing_field_is_400(self, client, sample_trip, missing):
        body = item_body()
        del body[missing]

        response = client.post(f"/trips/{sample_trip.id}/items", json=body)

        assert response.status_code == 400
        assert response.json()["error"] == "Missing required fields"

    def test_get_one(self, client, sample_trip):
        item_id = client.post(f"/trips/{sample_trip.id}/items", json=item_body()).json()["itemId"]

        response = client.get(f"/trips/{sample_trip.id}/items/{item_id}")

        assert response.json()["item"]["name"] == "Bánh căn"

    def test_get_missing_is_404(self, client, sample_trip):
        assert client.get(f"/trips/{sample_trip.id}/items/nope").status_code == 404

    def test_put_overwrites(self, client, sample_trip):
        item_id = client.post(f"/trips/{sample_trip.id}/items", json=item_body()).json()["itemId"]

        response = client.put(
            f"/trips/{sample_trip.id}/items/{item_id}",
            json=item_body(name="Bánh xèo", amount=55),
        )

        assert response.json() == {"success": True}
        item = client.get(f"/trips/{sample_trip.id}/items/{item_id}").json()["item"]
        assert item["name"] == "Bánh xèo"
        assert item["amount"] == 55

    def test_put_missing_is_404(self, client, sample_trip):
        response = client.put(f"/trips/{sample_trip.id}/items/nope", json=item_body())

        assert response.status_code == 404


class TestDeleteItem:

    def test_delete_twice(self, client, sample_trip, make_item):
        item = make_item(sample_trip.id)

        first = client.delete(f"/trips/{sample_trip.id}/items/{item.id}")
        second = client.delete(f"/trips/{sample_trip.id}/items/{item.id}")

        assert first.json() == {"success": True, "alreadyDeleted": False}
        assert second.json() == {"success": True, "alreadyDeleted": True}

    def test_nonexistent_item(self, client, sample_trip):
        response = client.delete(f"/trips/{sample_trip.id}/items/never-existed")

        assert response.status_code == 200
        assert response.json()["alreadyDeleted"] is True

    def test_orphaned_blob_reported(self, client, sample_trip, make_item, minio_client):
        path = f"trips/{sample_trip.id}/items/1_a.jpg"
        item = make_item(sample_trip.id, image_url=get_public_url(path), storage_path=path)
        minio_client.remove_object.side_effect = OSError("unreachable")

        body = client.delete(f"/trips/{sample_trip.id}/items/{item.id}").json()

        assert body["success"] is True
        assert body["partiallyDeleted"] is True
        assert body["orphanedPaths"] == [path]


class TestBatchIngestion:

    @pytest.fixture
    def use_pipeline(self, db):
        from tripmate.api.main import app

        def install(analyze):
            app.dependency_overrides[get_ingestion_pipeline] = lambda: ItemIngestionPipeline(db, analyze=analyze)

        return install

    def test_one_failure_in_three(self, client, sample_trip, use_pipeline, jpeg_bytes):
        answers = iter([
            AIAnalysisResult(type="expense", category="food", name="Phở", amount=50),
            None,
            AIAnalysisResult(type="memory", category="scenery", name="Chợ đêm"),
        ])

        def analyze(encoded, mime_type):
            answer = next(answers)
            if answer is None:
                raise ClassificationFailedError("Failed to analyze image")
            return answer

        use_pipeline(analyze)
        files = [("files", (f"{n}.jpg", jpeg_bytes, "image/jpeg")) for n in ("a", "b", "c")]

        response = client.post(
            f"/trips/{sample_trip.id}/items/batch",
            files=files,
            data={"createdBy": "user-1"},
        )

        body = response.json()
        assert response.status_code == 200
        assert body["total"] == 3
        assert body["succeeded"] == 2
        assert body["failed"] == 1
        assert body["outcome"] == "mixed"
        assert body["failures"][0]["filename"] == "b.jpg"

        items = client.get(f"/trips/{sample_trip.id}/items").json()["items"]
        assert sorted(i["name"] for i in items) == ["Chợ đêm", "Phở"]
        assert all(i["thumbnailUrl"] for i in items)

    def test_video_and_rejected_type(self, client, sample_trip, use_pipeline):
        use_pipeline(lambda encoded, mime_type: AIAnalysisResult())
        files = [
            ("files", ("clip.mp4", b"\x00" * 16, "video/mp4")),
            ("files", ("notes.txt", b"hello", "text/plain")),
        ]

        body = client.post(
            f"/trips/{sample_trip.id}/items/batch",
            files=files,
            data={"createdBy": "user-1"},
        ).json()

        assert body["succeeded"] == 1
        assert body["failures"][0]["stage"] == "size_validated"
        item = client.get(f"/trips/{sample_trip.id}/items").json()["items"][0]
        assert item["category"] == "video"
        assert item["videoUrl"]

    def test_created_by_required(self, client, sample_trip, jpeg_bytes):
        response = client.post(
            f"/trips/{sample_trip.id}/items/batch",
            files=[("files", ("a.jpg", jpeg_bytes, "image/jpeg"))],
        )

        assert response.status_code == 400

    def test_created_by_too_long(self, client, sample_trip, jpeg_bytes):
        response = client.post(
            f"/trips/{sample_trip.id}/items/batch",
            files=[("files", ("a.jpg", jpeg_bytes, "image/jpeg"))],
            data={"createdBy": "u" * 200},
        )

        assert response.status_code == 400
        assert response.json() == {"error": "createdBy is too long"}
