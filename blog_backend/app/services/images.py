from __future__ import annotations

import io
import logging
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import cloudinary
import cloudinary.exceptions
import cloudinary.uploader
from starlette.concurrency import run_in_threadpool

from ..core.errors import InternalError, ValidationError


logger = logging.getLogger(__name__)

ALLOWED_TYPES = {"image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp"}
LOCAL_MAX_BYTES = 5 * 1024 * 1024
CLOUD_MAX_BYTES = 10 * 1024 * 1024


@dataclass
class StoredImage:
    filename: str
    url: str
    original_name: str
    size: int
    mimetype: str
    storage: str


class ImageHost:
    """Stores uploaded images on Cloudinary when configured, else on local disk."""

    def __init__(
        self,
        upload_dir: str | Path,
        cloud_name: str | None = None,
        api_key: str | None = None,
        api_secret: str | None = None,
        folder: str = "blog-images",
    ) -> None:
        self.upload_dir = Path(upload_dir)
        self.folder = folder
        self.use_cloudinary = bool(cloud_name and api_key and api_secret)
        if self.use_cloudinary:
            cloudinary.config(cloud_name=cloud_name, api_key=api_key, api_secret=api_secret, secure=True)

    @property
    def storage(self) -> str:
        return "cloudinary" if self.use_cloudinary else "local"

    @property
    def max_bytes(self) -> int:
        return CLOUD_MAX_BYTES if self.use_cloudinary else LOCAL_MAX_BYTES

    def ensure_upload_dir(self) -> Path:
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        return self.upload_dir

    def validate(self, mimetype: str | None, size: int) -> None:
        if size <= 0:
            raise ValidationError("No file uploaded", code="NO_FILE_UPLOADED")
        if (mimetype or "").lower() not in ALLOWED_TYPES:
            raise ValidationError(
                "Invalid file type. Only JPEG, PNG, GIF, and WebP images are allowed.",
                code="INVALID_FILE_TYPE",
            )
        if size > self.max_bytes:
            limit_mb = self.max_bytes // (1024 * 1024)
            raise ValidationError(f"File too large. Maximum size is {limit_mb}MB.", code="FILE_TOO_LARGE")

    @staticmethod
    def local_filename(original_name: str) -> str:
        ext = Path(original_name or "").suffix.lower()
        return f"{int(time.time() * 1000)}-{secrets.token_hex(3)}{ext}"

    async def save(self, data: bytes, original_name: str, mimetype: str) -> StoredImage:
        self.validate(mimetype, len(data))
        if self.use_cloudinary:
            return await self._save_cloudinary(data, original_name, mimetype)
        return await self._save_local(data, original_name, mimetype)

    async def _save_local(self, data: bytes, original_name: str, mimetype: str) -> StoredImage:
        filename = self.local_filename(original_name)
        target = self.ensure_upload_dir() / filename
        await run_in_threadpool(target.write_bytes, data)
        logger.info("stored upload %s (%d bytes) locally", filename, len(data))
        return StoredImage(filename, f"/uploads/{filename}", original_name, len(data), mimetype, "local")

    async def _save_cloudinary(self, data: bytes, original_name: str, mimetype: str) -> StoredImage:
        try:
            result: dict[str, Any] = await run_in_threadpool(
                cloudinary.uploader.upload, io.BytesIO(data), folder=self.folder, resource_type="image"
            )
        except cloudinary.exceptions.Error as exc:
            logger.exception("Cloudinary upload failed")
            raise InternalError("Image upload failed. Please try again.", code="UPLOAD_FAILED") from exc
        return StoredImage(
            filename=str(result.get("public_id", original_name)),
            url=result["secure_url"],
            original_name=original_name,
            size=int(result.get("bytes", len(data))),
            mimetype=mimetype,
            storage="cloudinary",
        )
