"""
Download proxy endpoint.

Fetches a remote asset server-side and returns it as an attachment so the
browser saves it under the requested file name.
"""

from fastapi import APIRouter, Query
from fastapi.responses import Response

from tripmate.errors import ValidationError
from tripmate.logging_config import get_logger
from tripmate.services.download_proxy import fetch_asset

logger = get_logger(__name__)

router = APIRouter(prefix="/download", tags=["downloads"])


def content_disposition(filename: str) -> str:
    safe = filename.replace('"', "").replace("\r", "").replace("\n", "") or "download"
    return f'attachment; filename="{safe}"'


@router.get("")
async def download(
    url: str | None = Query(default=None),
    filename: str = Query(default="download"),
) -> Response:
    if not url:
        raise ValidationError("URL is required")

    asset = await fetch_asset(url)
    return Response(
        content=asset.content,
        media_type=asset.content_type,
        headers={
            "Content-Disposition": content_disposition(filename),
            "Content-Length": str(asset.size),
        },
    )
