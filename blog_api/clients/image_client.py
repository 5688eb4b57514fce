"""
Image storage client (Cloudinary signed upload API).

The API never stores image bytes itself: validated uploads are relayed to the
provider, which answers with a public CDN URL. Callers store that URL on the
owning post or user record.

Upload request (form-encoded):
  POST {image_api_url}/v1_1/{cloud_name}/image/upload
  file=data:<mime>;base64,<bytes>  api_key  folder  timestamp  signature

The signature authenticates us without sending the secret:
  sha1("folder=<folder>&timestamp=<ts>" + api_secret)
with the signed parameters sorted by name.
"""
import base64
import hashlib
import logging
import time
from typing import Optional

import httpx

from blog_api.config import settings

logger = logging.getLogger(__name__)

ALLOWED_IMAGE_TYPES = frozenset({"image/jpeg", "image/png", "image/gif", "image/webp"})
MAX_IMAGE_BYTES = 5 * 1024 * 1024


class ImageUploadError(Exception):
    def __init__(self, message: str, details: Optional[str] = None) -> None:
        super().__init__(message)
        self.message = message
        self.details = details


def sign_params(params: dict[str, str], api_secret: str) -> str:
    to_sign = "&".join(f"{key}={value}" for key, value in sorted(params.items()))
    return hashlib.sha1((to_sign + api_secret).encode("utf-8")).hexdigest()


class ImageClient:
    def __init__(self) -> None:
        self._http: Optional[httpx.AsyncClient] = None

    async def start(self) -> None:
        self._http = httpx.AsyncClient(
            base_url=settings.image_api_url, timeout=settings.image_upload_timeout
        )

    async def stop(self) -> None:
        if self._http:
            await self._http.aclose()

    @property
    def configured(self) -> bool:
        return bool(
            settings.cloudinary_cloud_name
            and settings.cloudinary_api_key
            and settings.cloudinary_api_secret
        )

    async def upload(self, data: bytes, content_type: str) -> str:
        """
        Forward one image to the provider and return its secure URL.

        No retries: a provider rejection raises ImageUploadError carrying the
        provider's response text; transport failures raise it without details.
        """
        if self._http is None:
            raise RuntimeError("Image client not initialised — call start() at startup")

        params = {
            "folder": settings.image_folder,
            "timestamp": str(int(time.time())),
        }
        form = {
            "file": f"data:{content_type};base64,{base64.b64encode(data).decode('ascii')}",
            "api_key": settings.cloudinary_api_key,
            "signature": sign_params(params, settings.cloudinary_api_secret),
            **params,
        }

        try:
            resp = await self._http.post(
                f"/v1_1/{settings.cloudinary_cloud_name}/image/upload", data=form
            )
        except httpx.HTTPError as exc:
            logger.warning("Image provider unreachable: %s", exc)
            raise ImageUploadError("Error uploading image") from exc

        if resp.is_error:
            logger.warning("Image provider rejected upload (%s): %s", resp.status_code, resp.text)
            raise ImageUploadError("Failed to upload image", details=resp.text)

        try:
            payload = resp.json()
        except ValueError:
            payload = None
        if not isinstance(payload, dict):
            logger.warning("Image provider returned an unreadable body: %s", resp.text)
            raise ImageUploadError("Failed to upload image", details=resp.text)

        url = payload.get("secure_url")
        if not url:
            raise ImageUploadError("Failed to upload image", details="provider returned no URL")
        logger.debug("Uploaded image → %s", url)
        return url


# Singleton
image_client = ImageClient()
