"""
CallBoard Backend — Image Host Service
========================================

What:  Validates uploaded images and proxies them to the external image host.
Why:   Listings and avatars only ever store URLs; the bytes live on the host.
How:   Content-type + Pillow sniffing for validation, httpx for the upload,
       tenacity for retrying transient host failures.
Who:   Called by CallService (listing images) and UserService (avatars).

Validation order (cheapest first):
    1. Content type must be image/*           → 415 otherwise
    2. Size: non-empty and <= max_file_size   → 400 otherwise
    3. Pillow must recognise the bytes        → 415 otherwise
    4. Pixel count within Pillow's bomb limit → 400 otherwise

Host protocol (imgbb-compatible):
    POST {image_host_url}?key={api_key}
    form: image=<base64>, name=<original filename>
    200 → {"data": {"url": "https://..."}, "success": true}
"""

import base64
import io
import logging
import time
import uuid
import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

import httpx
from PIL import Image, UnidentifiedImageError
from starlette.datastructures import UploadFile
from tenacity import (
    RetryError,
    before_sleep_log,
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential_jitter,
)

from app.config import settings
from app.exceptions import ImageHostError, UnsupportedMediaTypeError, ValidationError

logger = logging.getLogger(__name__)


@dataclass
class ImagePayload:
    """An uploaded image after validation, ready to send to the host."""
    filename: str
    content: bytes
    format: str


def _is_transient(exc: BaseException) -> bool:
    """Network failures, throttling and host-side errors are worth another attempt."""
    if isinstance(exc, httpx.TransportError):
        return True
    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or status >= 500
    return False


class ImageHostService:
    """
    Validation + upload pipeline for user images.

    The httpx transport is injectable so tests can replace the host with
    httpx.MockTransport without patching module globals.
    """

    def __init__(self, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.transport = transport

    # ── Validation ────────────────────────────────────────────────────────

    def validate_content_type(self, content_type: Optional[str]) -> None:
        if not content_type or not content_type.lower().startswith("image/"):
            raise UnsupportedMediaTypeError(context={"content_type": content_type})

    def validate_size(self, content: bytes) -> None:
        if not content:
            raise ValidationError(message="Uploaded image is empty", field="file")
        if len(content) > settings.max_file_size:
            max_mb = settings.max_file_size / (1024 * 1024)
            raise ValidationError(
                message=f"Image size exceeds maximum of {max_mb:.0f}MB",
                field="file",
                context={"actual_size": len(content), "max_size": settings.max_file_size},
            )

    def detect_format(self, content: bytes) -> str:
        """Inspect the bytes themselves; a renamed text file is not an image."""
        try:
            with warnings.catch_warnings():
                warnings.simplefilter("error", Image.DecompressionBombWarning)
                with Image.open(io.BytesIO(content)) as img:
                    img.verify()
                    return (img.format or "").upper()
        except (Image.DecompressionBombError, Image.DecompressionBombWarning) as e:
            raise ValidationError(
                message="Image dimensions are too large",
                field="file",
                context={"reason": str(e), "max_pixels": Image.MAX_IMAGE_PIXELS},
            )
        except (UnidentifiedImageError, OSError, SyntaxError) as e:
            raise UnsupportedMediaTypeError(context={"reason": str(e)})

    async def read_image(self, upload: UploadFile) -> ImagePayload:
        """Read and validate one multipart upload."""
        self.validate_content_type(upload.content_type)
        content = await upload.read()
        self.validate_size(content)
        image_format = self.detect_format(content)
        return ImagePayload(
            filename=Path(upload.filename or "image").name,
            content=content,
            format=image_format,
        )

    async def read_images(self, uploads: Sequence[UploadFile]) -> List[ImagePayload]:
        return [await self.read_image(upload) for upload in uploads]

    # ── Upload ────────────────────────────────────────────────────────────

    async def upload_image(self, image: ImagePayload) -> str:
        """
        Send one validated image to the host and return its public URL.

        Raises:
            ImageHostError: retries exhausted, host rejected the image, or the
                response did not contain a URL.
        """
        request_id = str(uuid.uuid4())[:8]
        logger.info(
            "[%s] Uploading image %s (%d bytes, %s)",
            request_id,
            image.filename,
            len(image.content),
            image.format,
        )

        try:
            body = await self._post_with_retry(image, request_id)
        except RetryError as e:
            last = e.last_attempt.exception() if e.last_attempt else None
            logger.error("[%s] Image host retries exhausted: %s", request_id, last)
            raise ImageHostError(
                message="Image upload failed after multiple attempts. Please try again later.",
                retry_after=int(settings.retry_max_wait) or None,
                context={"request_id": request_id, "attempts": settings.retry_max_attempts},
            )
        except (httpx.HTTPError, ValueError) as e:
            # 4xx answers are not retried; ValueError covers a non-JSON body
            logger.error("[%s] Image host request failed: %s", request_id, e)
            raise ImageHostError(
                message="The image host rejected the upload.",
                context={"request_id": request_id, "error_type": type(e).__name__},
            )

        data = body.get("data") if isinstance(body, dict) else None
        url = data.get("url") if isinstance(data, dict) else None
        if not isinstance(url, str) or not url:
            logger.error("[%s] Image host response had no URL", request_id)
            raise ImageHostError(
                message="The image host returned an unexpected response.",
                context={"request_id": request_id},
            )
        return url

    async def upload_images(self, images: Sequence[ImagePayload]) -> List[str]:
        """Upload sequentially so returned URLs keep the order of the form parts."""
        return [await self.upload_image(image) for image in images]

    @retry(
        retry=retry_if_exception(_is_transient),
        stop=stop_after_attempt(settings.retry_max_attempts),
        wait=wait_exponential_jitter(
            initial=settings.retry_min_wait,
            max=settings.retry_max_wait,
            jitter=settings.retry_jitter,
        ),
        before_sleep=before_sleep_log(logger, logging.WARNING),
    )
    async def _post_with_retry(self, image: ImagePayload, request_id: str) -> dict:
        start_time = time.perf_counter()
        async with httpx.AsyncClient(
            transport=self.transport,
            timeout=settings.image_host_timeout,
        ) as client:
            response = await client.post(
                settings.image_host_url,
                params={"key": settings.image_host_api_key},
                data={
                    "image": base64.b64encode(image.content).decode("ascii"),
                    "name": image.filename,
                },
            )
            duration_ms = (time.perf_counter() - start_time) * 1000
            if response.is_error:
                logger.warning(
                    "[%s] Image host answered %d after %.0fms",
                    request_id,
                    response.status_code,
                    duration_ms,
                )
            response.raise_for_status()
            logger.info("[%s] Image uploaded in %.0fms", request_id, duration_ms)
            return response.json()


image_service = ImageHostService()
