"""
Pydantic schemas for asset upload endpoints.
"""

from pydantic import Field

from tripmate.schemas.common import CamelModel


class UploadResult(CamelModel):
    """Response of POST /upload."""

    url: str
    thumbnail_url: str
    blur_data_url: str = ""
    path: str
    thumbnail_path: str
    name: str
    size: int
    type: str
    is_video: bool


class DeleteUploadRequest(CamelModel):
    """DELETE /upload body."""

    path: str = Field(..., min_length=1)
