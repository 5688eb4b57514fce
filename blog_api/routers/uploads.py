"""
Image relay endpoint:
  POST /upload-image — multipart field `image`; returns the provider's public URL

The file is validated here (type allow-list, 5 MiB ceiling) so rejected
uploads never cause an outbound call. Nothing is persisted: the client
stores the returned URL on a post via POST/PUT /blog.
"""
import logging
import time

from fastapi import APIRouter, Depends, Request
from starlette.datastructures import UploadFile

from blog_api.auth import get_current_user_id
from blog_api.clients.image_client import (
    ALLOWED_IMAGE_TYPES,
    MAX_IMAGE_BYTES,
    ImageUploadError,
    image_client,
)
from blog_api.errors import BadRequest, InternalError
from blog_api.schemas import ImageUploadResponse
from blog_api.telemetry import IMAGE_UPLOAD_LATENCY, IMAGE_UPLOADS_TOTAL

logger = logging.getLogger(__name__)
router = APIRouter()


@router.post("/upload-image", response_model=ImageUploadResponse)
async def upload_image(
    request: Request,
    user_id: str = Depends(get_current_user_id),
):
    if not image_client.configured:
        raise InternalError("Image storage configuration is incomplete")

    # Parsed after the auth gate; unauthenticated bodies are never read.
    async with request.form() as form:
        image = form.get("image")
        if not isinstance(image, UploadFile):
            raise BadRequest("No image provided or invalid image format")

        if image.content_type not in ALLOWED_IMAGE_TYPES:
            IMAGE_UPLOADS_TOTAL.labels(outcome="rejected").inc()
            raise BadRequest("Invalid image type. Only JPEG, PNG, GIF, and WebP are supported")

        content_type = image.content_type
        data = await image.read()

    if len(data) > MAX_IMAGE_BYTES:
        IMAGE_UPLOADS_TOTAL.labels(outcome="rejected").inc()
        raise BadRequest("Image too large. Maximum size is 5MB")

    start = time.time()
    try:
        url = await image_client.upload(data, content_type)
    except ImageUploadError as exc:
        IMAGE_UPLOADS_TOTAL.labels(outcome="provider_error").inc()
        raise InternalError(exc.message, details=exc.details)
    finally:
        IMAGE_UPLOAD_LATENCY.observe(time.time() - start)

    IMAGE_UPLOADS_TOTAL.labels(outcome="success").inc()
    logger.info("User %s uploaded image (%d bytes)", user_id, len(data))
    return ImageUploadResponse(image_url=url)
