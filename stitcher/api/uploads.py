"""
Upload API Routes
Stateless image upload pass-through to object storage.
"""

import logging
import re
from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from stitcher.api.deps import get_storage_service
from stitcher.core.config import settings
from stitcher.core.exceptions import StorageError
from stitcher.schemas.job import UploadImageResponse
from stitcher.services.storage import StorageService

logger = logging.getLogger(__name__)

router = APIRouter()

IMAGE_TYPES = re.compile(r"^image/(png|jpeg|jpg|webp|gif)$", re.IGNORECASE)


@router.post("/upload-image", response_model=UploadImageResponse)
def upload_image(
    image: Optional[UploadFile] = File(None),
    storage: StorageService = Depends(get_storage_service),
):
    """Store one png/jpeg/webp/gif image and return its public URL."""
    if image is None:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="No file uploaded")

    content_type = image.content_type or ""
    if not IMAGE_TYPES.match(content_type):
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Only image files are allowed (png, jpg, webp, gif).",
        )

    data = image.file.read(settings.MAX_IMAGE_UPLOAD_BYTES + 1)
    if len(data) > settings.MAX_IMAGE_UPLOAD_BYTES:
        raise HTTPException(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            detail=f"Image exceeds {settings.MAX_IMAGE_UPLOAD_BYTES} bytes",
        )

    try:
        url = storage.put(data, content_type.lower())
    except StorageError as e:
        logger.error(f"[Upload API] {e}")
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail=e.message)

    return UploadImageResponse(url=url)
