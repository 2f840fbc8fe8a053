"""
Image processing for uploaded trip photos using Pillow.

Provides upload compression, grid thumbnails and the tiny blur placeholder
shown while the thumbnail loads.
"""

import base64
from io import BytesIO

from PIL import Image, ImageOps, UnidentifiedImageError

from tripmate.config import settings
from tripmate.logging_config import get_logger

logger = get_logger(__name__)

JPEG_QUALITY_STEPS = (85, 75, 65, 55, 45)
BLUR_QUALITY = 20


def _open_image(data: bytes) -> Image.Image:
    """Decode bytes and apply the EXIF orientation."""
    image = Image.open(BytesIO(data))
    image = ImageOps.exif_transpose(image)
    return image


def _to_rgb(image: Image.Image) -> Image.Image:
    if image.mode in ("RGBA", "LA", "P"):
        image = image.convert("RGBA")
        background = Image.new("RGB", image.size, (255, 255, 255))
        background.paste(image, mask=image.split()[-1])
        return background
    if image.mode != "RGB":
        return image.convert("RGB")
    return image


def _fit(image: Image.Image, max_dimension: int) -> Image.Image:
    """Downscale in place so the longest side is at most max_dimension."""
    if max(image.size) > max_dimension:
        image.thumbnail((max_dimension, max_dimension), Image.Resampling.LANCZOS)
    return image


def compress_image(data: bytes, content_type: str) -> tuple[bytes, str]:
    """
    Shrink an uploaded image before it is classified and stored.

    The longest side is bounded by settings.image_max_dimension and the
    JPEG quality is lowered step by step until the result fits
    settings.image_max_compressed_bytes (or the lowest step is reached).

    Args:
        data: Original image bytes
        content_type: Original MIME type

    Returns:
        (bytes, content_type); the original pair when it is already small
        enough or when compression fails
    """
    max_dimension = settings.image_max_dimension
    max_bytes = settings.image_max_compressed_bytes

    try:
        image = _open_image(data)
        if len(data) <= max_bytes and max(image.size) <= max_dimension:
            return data, content_type

        original_size = image.size
        image = _to_rgb(_fit(image, max_dimension))

        best = data
        for quality in JPEG_QUALITY_STEPS:
            buffer = BytesIO()
            image.save(buffer, format="JPEG", quality=quality, optimize=True)
            best = buffer.getvalue()
            if len(best) <= max_bytes:
                break
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.warning("image_compression_failed", error=str(e), content_type=content_type)
        return data, content_type

    if len(best) >= len(data):
        return data, content_type

    logger.debug(
        "image_compressed",
        original_bytes=len(data),
        compressed_bytes=len(best),
        original_size=original_size,
        size=image.size,
        quality=quality,
    )
    return best, "image/jpeg"


def create_thumbnail(data: bytes) -> bytes:
    """
    Build the grid thumbnail: WebP, longest side settings.thumbnail_max_dimension.

    Raises:
        UnidentifiedImageError / OSError: If the bytes are not a decodable image
    """
    image = _fit(_open_image(data), settings.thumbnail_max_dimension)
    if image.mode not in ("RGB", "RGBA"):
        image = image.convert("RGBA" if "A" in image.getbands() else "RGB")

    buffer = BytesIO()
    image.save(buffer, format="WEBP", quality=settings.thumbnail_quality)
    return buffer.getvalue()


def generate_blur_data_url(data: bytes) -> str:
    """
    Encode a tiny WebP version of the image as a data URL.

    Returns:
        data:image/webp;base64,... or "" if the image cannot be processed
    """
    try:
        image = _fit(_open_image(data), settings.blur_placeholder_dimension)
        image = _to_rgb(image)
        buffer = BytesIO()
        image.save(buffer, format="WEBP", quality=BLUR_QUALITY)
    except (UnidentifiedImageError, OSError, ValueError) as e:
        logger.warning("blur_placeholder_failed", error=str(e))
        return ""

    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/webp;base64,{encoded}"
