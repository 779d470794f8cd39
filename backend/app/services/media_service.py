"""Media uploads: stage incoming files on disk and push them to Cloudinary."""
import asyncio
import logging
import os
import re
import time
import uuid
from typing import Optional
import aiofiles
import cloudinary
import cloudinary.uploader
from fastapi import UploadFile
from app.config import get_settings
from app.exceptions import MediaUploadError

logger = logging.getLogger(__name__)
settings = get_settings()

ALLOWED_MIME_TYPES = {
    # Images
    "image/jpeg", "image/jpg", "image/png", "image/gif", "image/webp", "image/svg+xml",
    # Documents
    "application/pdf",
    "application/msword",
    "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
    "application/vnd.ms-excel",
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
    "text/plain", "text/csv",
    # Videos
    "video/mp4", "video/mpeg", "video/quicktime", "video/x-msvideo", "video/webm",
    # Audio
    "audio/mpeg", "audio/wav", "audio/ogg", "audio/mp4",
}


def _sub_dir(mimetype: str) -> str:
    if mimetype.startswith("image/"):
        return "images"
    if mimetype.startswith("video/"):
        return "videos"
    if mimetype.startswith("audio/"):
        return "audio"
    if "pdf" in mimetype:
        return "documents"
    return "general"


def _safe_filename(original: str) -> str:
    name, ext = os.path.splitext(os.path.basename(original or "upload"))
    name = re.sub(r"[^a-zA-Z0-9]", "_", name) or "upload"
    return f"{name}-{int(time.time() * 1000)}-{uuid.uuid4().hex[:8]}{ext}"


class MediaService:
    """Wraps the Cloudinary SDK. Credentials come from settings only."""

    def __init__(self):
        self._configured = False

    def _configure(self):
        if self._configured:
            return
        cloudinary.config(
            cloud_name=settings.cloudinary_cloud_name,
            api_key=settings.cloudinary_api_key,
            api_secret=settings.cloudinary_api_secret,
            secure=True,
        )
        self._configured = True

    async def upload_on_cloudinary(self, local_file_path: Optional[str]) -> Optional[dict]:
        """Upload a local file. Returns the Cloudinary response, or None on any failure."""
        if not local_file_path:
            return None
        self._configure()
        try:
            response = await asyncio.to_thread(
                cloudinary.uploader.upload, local_file_path, resource_type="auto"
            )
        except Exception as e:
            logger.error("Cloudinary upload failed: %s", e)
            return None
        logger.info("File uploaded successfully %s", response.get("secure_url") or response.get("url"))
        return response

    async def save_attachment(self, file: UploadFile, images_only: bool = False) -> dict:
        """
        Validate an incoming upload, stage it under UPLOAD_DIR, push it to
        Cloudinary and return the attachment descriptor stored on a complaint.
        The staged copy is always removed.
        """
        mimetype = file.content_type or "application/octet-stream"
        if images_only and not mimetype.startswith("image/"):
            raise MediaUploadError("Please upload a valid image file")
        if mimetype not in ALLOWED_MIME_TYPES:
            raise MediaUploadError(f"File type {mimetype} is not allowed")

        content = await file.read()
        if len(content) > settings.max_file_size:
            limit_mb = settings.max_file_size // (1024 * 1024)
            raise MediaUploadError(f"File too large. Maximum size is {limit_mb}MB.")

        directory = os.path.join(settings.upload_dir, _sub_dir(mimetype))
        os.makedirs(directory, exist_ok=True)
        filename = _safe_filename(file.filename)
        file_path = os.path.join(directory, filename)

        async with aiofiles.open(file_path, "wb") as f:
            await f.write(content)

        try:
            response = await self.upload_on_cloudinary(file_path)
        finally:
            if os.path.exists(file_path):
                os.remove(file_path)

        if not response:
            raise MediaUploadError("File upload failed", status_code=502, filename=file.filename)

        return {
            "filename": filename,
            "original_name": file.filename,
            "url": response.get("secure_url") or response.get("url"),
            "mimetype": mimetype,
            "size": len(content),
            "cloudinary_id": response.get("public_id"),
        }


media_service = MediaService()
