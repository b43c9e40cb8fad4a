# ---------------------------------------------------------------------------
# Author  : Kyle <kyle@hacking-linux.com>
# Version : 20260206v1
# ---------------------------------------------------------------------------
"""
Upload endpoint – accepts a single multipart image and hands it back,
downscaled to the configured pixel bound when it is larger.  Nothing is
persisted; clients use it to preview what a comment image will look like.
"""

from fastapi import APIRouter, File, UploadFile, status
from fastapi.responses import Response

from core.config import settings
from core.errors import ApiError, bad_request, unprocessable
from core.images import ImageError, process_upload
from core.logger import logger

router = APIRouter(tags=["upload"])

_ALLOWED_MIME = {"image/jpeg", "image/png", "image/gif"}


@router.post("/upload")
async def upload_image(image: UploadFile | None = File(None)):
    if image is None:
        raise bad_request("The file wasn't uploaded")

    if image.content_type not in _ALLOWED_MIME:
        raise bad_request("Only JPG, PNG or GIF files allowed")

    raw = await image.read(settings.max_upload_size + 1)
    if len(raw) > settings.max_upload_size:
        raise ApiError(
            status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            "File is too large",
            f"Maximum upload size is {settings.max_upload_size} bytes",
        )

    try:
        data, media_type = process_upload(raw)
    except ImageError as exc:
        raise unprocessable("Error reading file", str(exc)) from exc

    logger.info("Upload %s processed (%d → %d bytes)", image.filename, len(raw), len(data))
    return Response(content=data, media_type=media_type)
