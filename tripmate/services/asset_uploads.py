"""
Asset upload service.

Validates an incoming photo or video, stores the original and, for images,
derives the grid thumbnail and the inline blur placeholder.
"""

from dataclasses import asdict, dataclass

from PIL import UnidentifiedImageError

from tripmate.config import settings
from tripmate.errors import UploadFailedError, ValidationError
from tripmate.logging_config import get_logger
from tripmate.storage.object_storage import (
    build_item_path,
    build_thumbnail_path,
    upload_file,
)
from tripmate.tools.image_processing import create_thumbnail, generate_blur_data_url

logger = get_logger(__name__)

THUMBNAIL_CONTENT_TYPE = "image/webp"


@dataclass
class StoredAsset:
    """Where an uploaded asset (and its derived thumbnail) ended up."""
    url: str
    thumbnail_url: str
    blur_data_url: str
    path: str
    thumbnail_path: str
    name: str
    size: int
    type: str
    is_video: bool

    def to_dict(self) -> dict:
        return asdict(self)


def is_video(content_type: str | None) -> bool:
    return bool(content_type) and content_type.startswith("video/")


def is_image(content_type: str | None) -> bool:
    return bool(content_type) and content_type.startswith("image/")


def validate_upload(content_type: str | None, size: int) -> None:
    """
    Check type and size before anything touches the network.

    Images and videos have independent ceilings.

    Raises:
        ValidationError: For a non image/video type or an oversized file
    """
    if is_image(content_type):
        limit = settings.max_image_upload_bytes
    elif is_video(content_type):
        limit = settings.max_video_upload_bytes
    else:
        raise ValidationError(
            "Only image and video files are allowed",
            content_type=content_type,
        )

    if size > limit:
        raise ValidationError(
            f"File size exceeds {limit // (1024 * 1024)}MB limit",
            content_type=content_type,
            size=size,
            limit=limit,
        )


def _store_thumbnail(data: bytes, original_path: str) -> tuple[str, str] | None:
    """Upload the WebP thumbnail; None if it cannot be produced or stored."""
    thumbnail_path = build_thumbnail_path(original_path)
    try:
        thumbnail = create_thumbnail(data)
        thumbnail_url = upload_file(thumbnail, thumbnail_path, THUMBNAIL_CONTENT_TYPE)
    except (UnidentifiedImageError, OSError, ValueError, UploadFailedError) as e:
        logger.warning(
            "thumbnail_generation_failed",
            path=original_path,
            error=str(e),
        )
        return None
    return thumbnail_url, thumbnail_path


def store_asset(
    trip_id: str,
    filename: str,
    content_type: str,
    data: bytes,
) -> StoredAsset:
    """
    Store one asset under the trip's item prefix.

    Thumbnail and blur failures never block the original: the original then
    doubles as its own thumbnail.

    Args:
        trip_id: Owning trip
        filename: Client file name (sanitized into the path)
        content_type: MIME type of data
        data: Bytes to store (already compressed for images)

    Returns:
        StoredAsset describing the original and derived assets

    Raises:
        ValidationError: For a disallowed type or size
        UploadFailedError: If the original cannot be stored
    """
    validate_upload(content_type, len(data))

    path = build_item_path(trip_id, filename)
    url = upload_file(data, path, content_type)

    thumbnail_url, thumbnail_path = url, path
    blur_data_url = ""
    video = is_video(content_type)

    if not video:
        thumbnail = _store_thumbnail(data, path)
        if thumbnail is not None:
            thumbnail_url, thumbnail_path = thumbnail
        blur_data_url = generate_blur_data_url(data)

    logger.info(
        "asset_stored",
        trip_id=trip_id,
        path=path,
        is_video=video,
        has_thumbnail=thumbnail_path != path,
        has_blur=bool(blur_data_url),
        size_bytes=len(data),
    )

    return StoredAsset(
        url=url,
        thumbnail_url=thumbnail_url,
        blur_data_url=blur_data_url,
        path=path,
        thumbnail_path=thumbnail_path,
        name=filename,
        size=len(data),
        type=content_type,
        is_video=video,
    )
