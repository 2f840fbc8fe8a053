"""
Object storage utilities for trip photos, thumbnails and videos.

Uses MinIO (S3-compatible) for all blob operations. Assets are addressed by a
path inside the bucket and exposed through a stable public URL.
"""

import re
import threading
import time
from dataclasses import dataclass
from datetime import datetime
from io import BytesIO
from urllib.parse import unquote, urlparse

from minio import Minio
from minio.error import S3Error

from tripmate.config import settings
from tripmate.errors import UploadFailedError
from tripmate.logging_config import get_logger
from tripmate.schemas.common import to_naive_utc

logger = get_logger(__name__)

# MinIO client singleton
_minio_client: Minio | None = None

_UNSAFE_NAME_CHARS = re.compile(r"[^a-zA-Z0-9.-]")

_timestamp_lock = threading.Lock()
_last_timestamp_ms = 0


@dataclass
class StoredObject:
    """A blob listed from the bucket."""
    path: str
    last_modified: datetime | None


def get_minio_client() -> Minio:
    """
    Get or create MinIO client instance.

    Returns:
        MinIO client
    """
    global _minio_client

    if _minio_client is None:
        _minio_client = Minio(
            f"{settings.minio_host}:{settings.minio_port}",
            access_key=settings.minio_access_key,
            secret_key=settings.minio_secret_key,
            secure=settings.minio_secure,
        )
        logger.debug(
            "minio_client_initialized",
            host=settings.minio_host,
            port=settings.minio_port,
        )

    return _minio_client


def ensure_bucket() -> None:
    """Ensure the MinIO bucket exists."""
    client = get_minio_client()
    bucket_name = settings.minio_bucket_name

    if not client.bucket_exists(bucket_name):
        client.make_bucket(bucket_name)
        logger.info("minio_bucket_created", bucket=bucket_name)
    else:
        logger.debug("minio_bucket_exists", bucket=bucket_name)


def sanitize_filename(filename: str) -> str:
    """Replace every character outside [a-zA-Z0-9.-] with '_'."""
    return _UNSAFE_NAME_CHARS.sub("_", filename or "file")


def _next_timestamp_ms() -> int:
    """Millisecond clock that never repeats within the process."""
    global _last_timestamp_ms

    with _timestamp_lock:
        now_ms = int(time.time() * 1000)
        if now_ms <= _last_timestamp_ms:
            now_ms = _last_timestamp_ms + 1
        _last_timestamp_ms = now_ms
        return now_ms


def build_item_path(trip_id: str, filename: str) -> str:
    """
    Build the storage path of an uploaded item asset.

    Args:
        trip_id: Owning trip ID
        filename: Original client filename

    Returns:
        trips/{trip_id}/items/{millis}_{sanitized name}
    """
    return f"trips/{trip_id}/items/{_next_timestamp_ms()}_{sanitize_filename(filename)}"


def build_thumbnail_path(original_path: str) -> str:
    """
    Sibling path of an image's thumbnail.

    trips/t1/items/1700000000000_a.jpg -> trips/t1/items/1700000000000_thumb_a.jpg
    """
    directory, _, name = original_path.rpartition("/")
    stamp, sep, rest = name.partition("_")
    thumb_name = f"{stamp}_thumb_{rest}" if sep else f"{name}_thumb"
    return f"{directory}/{thumb_name}" if directory else thumb_name


def get_public_url(path: str) -> str:
    """Stable retrieval URL of a stored path."""
    return f"{settings.object_store_base_url}/{path.lstrip('/')}"


def path_from_url(url: str) -> str | None:
    """
    Recover the storage path from an asset URL.

    Understands URLs built by get_public_url and legacy Firebase download
    URLs (.../o/<url-encoded path>?alt=media).

    Returns:
        The path, or None when the URL does not point into this store
    """
    if not url:
        return None

    base = settings.object_store_base_url + "/"
    if url.startswith(base):
        return unquote(url[len(base):].split("?", 1)[0]) or None

    parsed = urlparse(url)
    if "/o/" in parsed.path:
        encoded = parsed.path.split("/o/", 1)[1]
        return unquote(encoded) or None

    return None


def upload_file(data: bytes, path: str, content_type: str) -> str:
    """
    Upload bytes to MinIO and return the public URL.

    Args:
        data: File content
        path: Destination path inside the bucket
        content_type: MIME type stored with the object

    Returns:
        Public URL of the stored object

    Raises:
        UploadFailedError: If the store rejects the upload
    """
    client = get_minio_client()
    bucket_name = settings.minio_bucket_name

    try:
        ensure_bucket()
        client.put_object(
            bucket_name=bucket_name,
            object_name=path,
            data=BytesIO(data),
            length=len(data),
            content_type=content_type,
        )
    except (S3Error, OSError, ValueError) as e:
        logger.error(
            "file_upload_failed",
            path=path,
            error=str(e),
            exc_info=True,
        )
        raise UploadFailedError("Upload failed", path=path) from e

    logger.info(
        "file_uploaded",
        bucket=bucket_name,
        path=path,
        size_bytes=len(data),
        content_type=content_type,
    )

    return get_public_url(path)


def delete_file(path: str, attempts: int | None = None) -> bool:
    """
    Delete a blob, retrying on failure.

    Args:
        path: Storage path
        attempts: Total tries (defaults to settings.asset_delete_attempts)

    Returns:
        True if deleted, False if every attempt failed
    """
    client = get_minio_client()
    attempts = max(attempts or settings.asset_delete_attempts, 1)

    for attempt in range(1, attempts + 1):
        try:
            client.remove_object(settings.minio_bucket_name, path)
            logger.info("file_deleted", path=path, attempt=attempt)
            return True
        except (S3Error, OSError) as e:
            logger.warning(
                "file_delete_attempt_failed",
                path=path,
                attempt=attempt,
                attempts=attempts,
                error=str(e),
            )

    logger.error("file_delete_failed", path=path, attempts=attempts)
    return False


def list_paths(prefix: str) -> list[StoredObject]:
    """
    List every blob under a prefix.

    Args:
        prefix: Path prefix, e.g. trips/{trip_id}/items/

    Returns:
        StoredObject entries with naive UTC modification times
    """
    client = get_minio_client()
    objects = client.list_objects(
        settings.minio_bucket_name,
        prefix=prefix,
        recursive=True,
    )
    listed = [
        StoredObject(path=obj.object_name, last_modified=to_naive_utc(obj.last_modified))
        for obj in objects
        if not getattr(obj, "is_dir", False)
    ]
    logger.debug("files_listed", prefix=prefix, count=len(listed))
    return listed


def download_file(path: str) -> bytes:
    """Read a blob's bytes (used by the thumbnail backfill)."""
    client = get_minio_client()
    response = client.get_object(settings.minio_bucket_name, path)
    try:
        return response.read()
    finally:
        response.close()
        response.release_conn()
