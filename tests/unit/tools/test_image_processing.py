"""Unit tests for image_processing.py (compression, thumbnails, blur placeholders)."""

import base64
import os
from io import BytesIO
from unittest.mock import patch

import pytest
from PIL import Image, UnidentifiedImageError

from tripmate.config import settings
from tripmate.tools.image_processing import (
    compress_image,
    create_thumbnail,
    generate_blur_data_url,
)


def noisy_image_bytes(size=(400, 300), mode="RGB", fmt="JPEG", **save_kwargs) -> bytes:
    """Random pixels so the encoded file is large and compressible by resizing."""
    channels = len(mode)
    image = Image.frombytes(mode, size, os.urandom(size[0] * size[1] * channels))
    buffer = BytesIO()
    image.save(buffer, format=fmt, **save_kwargs)
    return buffer.getvalue()


def decode(data: bytes) -> Image.Image:
    return Image.open(BytesIO(data))


class TestCompressImage:
    """Tests for compress_image."""

    def test_small_image_is_untouched(self, jpeg_bytes):
        data, content_type = compress_image(jpeg_bytes, "image/jpeg")

        assert data is jpeg_bytes
        assert content_type == "image/jpeg"

    def test_downscales_large_dimensions(self):
        original = noisy_image_bytes(quality=95)

        with patch.object(settings, "image_max_dimension", 100):
            data, content_type = compress_image(original, "image/jpeg")

        assert content_type == "image/jpeg"
        assert len(data) < len(original)
        assert max(decode(data).size) <= 100

    def test_png_with_alpha_becomes_jpeg(self):
        original = noisy_image_bytes(mode="RGBA", fmt="PNG")

        with patch.object(settings, "image_max_dimension", 120):
            data, content_type = compress_image(original, "image/png")

        assert content_type == "image/jpeg"
        image = decode(data)
        assert image.format == "JPEG"
        assert image.mode == "RGB"

    def test_byte_ceiling_triggers_recompression(self):
        original = noisy_image_bytes(quality=95)

        with patch.object(settings, "image_max_compressed_bytes", len(original) // 2):
            data, _ = compress_image(original, "image/jpeg")

        assert len(data) < len(original)
        assert decode(data).size == (400, 300)

    def test_undecodable_bytes_are_returned_as_is(self):
        data, content_type = compress_image(b"not an image", "image/heic")

        assert data == b"not an image"
        assert content_type == "image/heic"


class TestCreateThumbnail:
    """Tests for create_thumbnail."""

    def test_webp_within_bounds(self, image_factory):
        source = image_factory(size=(1200, 800))

        thumbnail = decode(create_thumbnail(source))

        assert thumbnail.format == "WEBP"
        assert max(thumbnail.size) == settings.thumbnail_max_dimension

    def test_small_image_keeps_size(self, image_factory):
        thumbnail = decode(create_thumbnail(image_factory(size=(50, 40))))

        assert thumbnail.size == (50, 40)

    def test_palette_png(self):
        source = Image.new("P", (300, 300))
        buffer = BytesIO()
        source.save(buffer, format="PNG")

        assert decode(create_thumbnail(buffer.getvalue())).format == "WEBP"

    def test_rejects_non_images(self):
        with pytest.raises(UnidentifiedImageError):
            create_thumbnail(b"%PDF-1.7")


class TestGenerateBlurDataUrl:
    """Tests for generate_blur_data_url."""

    def test_tiny_webp_data_url(self, image_factory):
        url = generate_blur_data_url(image_factory(size=(640, 480)))

        assert url.startswith("data:image/webp;base64,")
        payload = base64.b64decode(url.split(",", 1)[1])
        assert max(decode(payload).size) <= settings.blur_placeholder_dimension

    def test_failure_yields_empty_string(self):
        assert generate_blur_data_url(b"garbage") == ""
