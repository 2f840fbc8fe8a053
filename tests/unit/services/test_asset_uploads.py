"""Unit tests for the asset upload service (MinIO client mocked)."""

from unittest.mock import patch

import pytest

from tripmate.config import settings
from tripmate.errors import UploadFailedError, ValidationError
from tripmate.services.asset_uploads import is_image, is_video, store_asset, validate_upload


class TestValidateUpload:
    """Tests for type and size checks."""

    def test_image_ceiling_is_independent_of_video_ceiling(self):
        with patch.object(settings, "max_image_upload_bytes", 100), \
             patch.object(settings, "max_video_upload_bytes", 1000):
            validate_upload("image/jpeg", 100)
            validate_upload("video/mp4", 101)

            with pytest.raises(ValidationError):
                validate_upload("image/jpeg", 101)
            with pytest.raises(ValidationError):
                validate_upload("video/mp4", 1001)

    def test_size_message_uses_megabytes(self):
        with pytest.raises(ValidationError) as exc_info:
            validate_upload("image/png", settings.max_image_upload_bytes + 1)

        assert exc_info.value.message == "File size exceeds 50MB limit"
        assert exc_info.value.status_code == 400

    @pytest.mark.parametrize("content_type", ["application/pdf", "text/plain", "", None])
    def test_rejects_other_types(self, content_type):
        with pytest.raises(ValidationError, match="Only image and video files are allowed"):
            validate_upload(content_type, 10)

    def test_type_predicates(self):
        assert is_image("image/webp") is True
        assert is_video("video/quicktime") is True
        assert is_image(None) is False
        assert is_video("image/jpeg") is False


class TestStoreAsset:
    """Tests for store_asset."""

    def test_image_gets_thumbnail_and_blur(self, minio_client, jpeg_bytes):
        asset = store_asset("t1", "pho.jpg", "image/jpeg", jpeg_bytes)

        assert asset.is_video is False
        assert asset.path.startswith("trips/t1/items/")
        assert asset.path.endswith("_pho.jpg")
        assert asset.thumbnail_path.endswith("_thumb_pho.jpg")
        assert asset.thumbnail_url != asset.url
        assert asset.blur_data_url.startswith("data:image/webp;base64,")
        assert asset.size == len(jpeg_bytes)

        uploaded = [c.kwargs["object_name"] for c in minio_client.put_object.call_args_list]
        assert uploaded == [asset.path, asset.thumbnail_path]
        assert minio_client.put_object.call_args_list[1].kwargs["content_type"] == "image/webp"

    def test_thumbnail_failure_falls_back_to_original(self, minio_client, jpeg_bytes):
        minio_client.put_object.side_effect = [None, OSError("disk full")]

        asset = store_asset("t1", "pho.jpg", "image/jpeg", jpeg_bytes)

        assert asset.thumbnail_url == asset.url
        assert asset.thumbnail_path == asset.path

    def test_undecodable_image_still_stores_original(self, minio_client):
        asset = store_asset("t1", "broken.jpg", "image/jpeg", b"\xff\xd8 truncated")

        assert asset.thumbnail_url == asset.url
        assert asset.blur_data_url == ""
        assert minio_client.put_object.call_count == 1

    def test_video_has_no_derived_assets(self, minio_client):
        asset = store_asset("t1", "clip.mp4", "video/mp4", b"\x00" * 64)

        assert asset.is_video is True
        assert asset.thumbnail_url == asset.url
        assert asset.blur_data_url == ""
        assert minio_client.put_object.call_count == 1

    def test_rejected_before_upload(self, minio_client):
        with pytest.raises(ValidationError):
            store_asset("t1", "notes.txt", "text/plain", b"hello")

        minio_client.put_object.assert_not_called()

    def test_original_upload_failure(self, minio_client, jpeg_bytes):
        minio_client.put_object.side_effect = OSError("connection refused")

        with pytest.raises(UploadFailedError):
            store_asset("t1", "pho.jpg", "image/jpeg", jpeg_bytes)

    def test_to_dict(self, minio_client):
        asset = store_asset("t1", "clip.mp4", "video/mp4", b"\x00")

        assert set(asset.to_dict()) == {
            "url", "thumbnail_url", "blur_data_url", "path", "thumbnail_path",
            "name", "size", "type", "is_video",
        }
