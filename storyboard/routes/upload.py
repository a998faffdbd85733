"""
Storyboard Backend — Image Upload Route
========================================

What:  POST /api/upload stores one image and returns its public path.
How:   Reads the multipart field `image` (bounded by MAX_UPLOAD_SIZE + 1
       bytes), then FileService validates and writes it.
Who:   The part form, before it submits a create/update with image_path.

Request Flow:
    1. require_auth rejects anonymous callers before the body is touched
    2. FastAPI parses multipart/form-data into an UploadFile
    3. FileService: extension → declared MIME type → size → write
    4. 200 {"path": "/uploads/<uuid>.<ext>"}
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile

from storyboard.config import settings
from storyboard.dependencies import require_auth
from storyboard.exceptions import ValidationError
from storyboard.schemas.part import ErrorResponse, UploadResponse
from storyboard.services.file_service import file_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Upload"])


@router.post(
    "/upload",
    response_model=UploadResponse,
    dependencies=[Depends(require_auth)],
    responses={
        400: {"description": "Missing, too large or non-image file", "model": ErrorResponse},
        401: {"description": "Authentication required", "model": ErrorResponse},
        500: {"description": "File could not be written", "model": ErrorResponse},
    },
    summary="Upload a part image",
    description="Accepts one JPEG, PNG, GIF or WebP image (max 10MB) in field `image`.",
)
async def upload_image(
    image: Optional[UploadFile] = File(default=None, description="Image file"),
) -> UploadResponse:
    if image is None or not image.filename:
        raise ValidationError(message="No file uploaded", field="image")

    try:
        # One byte past the limit is enough to detect an oversized file
        content = await image.read(settings.max_upload_size + 1)

        logger.info(
            "Received upload: filename=%s, content_type=%s, size=%d bytes",
            image.filename,
            image.content_type,
            len(content),
        )

        path = await file_service.validate_and_store(
            filename=image.filename,
            content_type=image.content_type,
            content=content,
            content_length=image.size,
        )
        return UploadResponse(path=path)
    finally:
        await image.close()
