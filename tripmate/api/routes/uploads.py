"""
Asset upload endpoints.

POST stores a photo/video (plus thumbnail and blur placeholder for images);
DELETE removes a stored blob by path.
"""

from typing import Annotated

from fastapi import APIRouter, File, Form, UploadFile

from tripmate.errors import UploadFailedError, ValidationError
from tripmate.logging_config import get_logger
from tripmate.schemas.upload import DeleteUploadRequest, UploadResult
from tripmate.services.asset_uploads import store_asset, validate_upload
from tripmate.storage.object_storage import delete_file

logger = get_logger(__name__)

router = APIRouter(prefix="/upload", tags=["uploads"])


@router.post("")
def upload_asset(
    file: Annotated[UploadFile | None, File()] = None,
    trip_id: Annotated[str | None, Form(alias="tripId")] = None,
) -> dict:
    """Store one asset under trips/{tripId}/items/."""
    if file is None:
        raise ValidationError("No file provided")
    if not trip_id:
        raise ValidationError("No tripId provided")

    content_type = file.content_type or "application/octet-stream"
    # Reject by declared size before reading the body into memory
    if file.size is not None:
        validate_upload(content_type, file.size)

    data = file.file.read()
    asset = store_asset(trip_id, file.filename or "file", content_type, data)
    return UploadResult.model_validate(asset.to_dict()).model_dump(by_alias=True)


@router.delete("")
def delete_asset(payload: DeleteUploadRequest) -> dict:
    """Delete one blob by storage path."""
    if not delete_file(payload.path):
        raise UploadFailedError("Failed to delete file", path=payload.path)
    return {"success": True}
