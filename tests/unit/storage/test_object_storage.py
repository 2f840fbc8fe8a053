"""Unit tests for object_storage module (MinIO client mocked)."""

import re
from datetime import datetime, timezone
from types import SimpleNamespace

import pytest

from tripmate.config import settings
from tripmate.errors import UploadFailedError
from tripmate.storage.object_storage import (
    build_item_path,
    build_thumbnail_path,
    delete_file,
    get_public_url,
    list_paths,
    path_from_url,
    sanitize_filename,
    upload_file,
)


def store_error() -> OSError:
    return OSError("connection reset by peer")


class TestPaths:

    def test_sanitizes_filename(self):
        assert sanitize_filename("My photo (1).JPG") == "My_photo__1_.JPG"
        assert sanitize_filename("bill#2 final?.png") == "bill_2_final_.png"

    def test_item_path_layout(self):
        path = build_item_path("trip1", "bill 1.jpg")

        assert re.fullmatch(r"trips/trip1/items/\d{13,}_bill_1\.jpg", path)

    def test_item_paths_never_collide(self):
        paths = {build_item_path("trip1", "same.jpg") for _ in range(50)}

        assert len(paths) == 50

    def test_thumbnail_path(self):
        assert (
            build_thumbnail_path("trips/t1/items/1700000000000_a.jpg")
            == "trips/t1/items/1700000000000_thumb_a.jpg"
        )


class TestUrls:

    def test_public_url_round_trip(self):
        url = get_public_url("trips/t1/items/1_a.jpg")

        assert url == f"{settings.object_store_base_url}/trips/t1/items/1_a.jpg"
        assert path_from_url(url) == "trips/t1/items/1_a.jpg"

    def test_legacy_firebase_url(self):
        url = (
            "https://firebasestorage.googleapis.com/v0/b/app.appspot.com/o/"
            "trips%2Ft1%2Fitems%2F1_a.jpg?alt=media&token=abc"
        )

        assert path_from_url(url) == "trips/t1/items/1_a.jpg"

    @pytest.mark.parametrize("url", ["", None, "https://example.com/picture.jpg"])
    def test_foreign_urls(self, url):
        assert path_from_url(url) is None


class TestUpload:

    def test_upload_returns_public_url(self, minio_client):
        url = upload_file(b"abc", "trips/t1/items/1_a.jpg", "image/jpeg")

        assert url == get_public_url("trips/t1/items/1_a.jpg")
        kwargs = minio_client.put_object.call_args.kwargs
        assert kwargs["object_name"] == "trips/t1/items/1_a.jpg"
        assert kwargs["length"] == 3
        assert kwargs["content_type"] == "image/jpeg"

    def test_upload_failure(self, minio_client):
        minio_client.put_object.side_effect = store_error()

        with pytest.raises(UploadFailedError):
            upload_file(b"abc", "trips/t1/items/1_a.jpg", "image/jpeg")


class TestDelete:

    def test_delete_succeeds(self, minio_client):
        assert delete_file("trips/t1/items/1_a.jpg") is True
        minio_client.remove_object.assert_called_once_with(settings.minio_bucket_name, "trips/t1/items/1_a.jpg")

    def test_retries_then_succeeds(self, minio_client):
        minio_client.remove_object.side_effect = [store_error(), None]

        assert delete_file("p", attempts=2) is True
        assert minio_client.remove_object.call_count == 2

    def test_gives_up_after_attempts(self, minio_client):
        minio_client.remove_object.side_effect = store_error()

        assert delete_file("p", attempts=3) is False
        assert minio_client.remove_object.call_count == 3


class TestListPaths:

    def test_lists_objects_with_naive_utc_times(self, minio_client):
        modified = datetime(2025, 3, 1, 10, 0, tzinfo=timezone.utc)
        minio_client.list_objects.return_value = [
            SimpleNamespace(object_name="trips/t1/items/1_a.jpg", last_modified=modified, is_dir=False),
            SimpleNamespace(object_name="trips/t1/items/sub/", last_modified=None, is_dir=True),
        ]

        listed = list_paths("trips/t1/items/")

        assert [o.path for o in listed] == ["trips/t1/items/1_a.jpg"]
        assert listed[0].last_modified == datetime(2025, 3, 1, 10, 0)
