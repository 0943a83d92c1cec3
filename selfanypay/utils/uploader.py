# selfanypay/utils/uploader.py
import logging
from dataclasses import dataclass
from typing import Dict, List, Optional, Sequence

import requests
from fastapi import Request, UploadFile

from selfanypay.errors import UploadError, ValidationError

logger = logging.getLogger("selfanypay.upload")

CLOUDINARY_API = "https://api.cloudinary.com/v1_1"

MAX_IMAGES = 10
MAX_FILES = 20


@dataclass(frozen=True)
class PendingFile:
    filename: str
    content_type: str
    content: bytes


class CloudinaryUploader:
    """Unsigned uploads to Cloudinary, one request per file."""

    def __init__(
        self,
        cloud_name: Optional[str],
        upload_preset: Optional[str],
        timeout: int = 30,
    ):
        self.cloud_name = cloud_name
        self.upload_preset = upload_preset
        self.timeout = timeout

    def upload(self, pending: PendingFile, resource_type: str = "auto") -> str:
        if not self.cloud_name or not self.upload_preset:
            raise UploadError("Missing Cloudinary cloud name or upload preset configuration")

        url = f"{CLOUDINARY_API}/{self.cloud_name}/{resource_type}/upload"

        try:
            response = requests.post(
                url,
                data={"upload_preset": self.upload_preset},
                files={"file": (pending.filename, pending.content, pending.content_type)},
                timeout=self.timeout,
            )
        except requests.RequestException as exc:
            raise UploadError(f"Failed to upload {pending.filename}: {exc}") from exc

        if not response.ok:
            raise UploadError(
                f"Upload failed. Cloudinary response: {response.text[:100]}"
            )

        try:
            data = response.json()
        except ValueError as exc:
            raise UploadError("Upload failed. Cloudinary returned invalid JSON") from exc

        secure_url = data.get("secure_url") if isinstance(data, dict) else None
        if not secure_url:
            raise UploadError("Upload failed. Cloudinary response had no secure_url")
        return secure_url

    def upload_many(self, files: Sequence[PendingFile], resource_type: str = "auto") -> List[str]:
        """Upload every file in order; any failure fails the whole batch."""
        urls = []
        for pending in files:
            try:
                urls.append(self.upload(pending, resource_type))
            except UploadError:
                logger.error(
                    "upload_failed",
                    extra={"uploaded_before_failure": len(urls), "batch_size": len(files)},
                )
                raise

        logger.info("upload_batch_succeeded", extra={"batch_size": len(files)})
        return urls


def get_uploader(request: Request) -> CloudinaryUploader:
    return request.app.state.uploader


# -------------------------
# Multipart helpers
# -------------------------

def collect_pending_files(
    images: Optional[List[UploadFile]],
    files: Optional[List[UploadFile]],
) -> List[PendingFile]:
    images = images or []
    files = files or []

    if len(images) > MAX_IMAGES:
        raise ValidationError(f"At most {MAX_IMAGES} images per request", fields=["image"])
    if len(files) > MAX_FILES:
        raise ValidationError(f"At most {MAX_FILES} files per request", fields=["file"])

    pending = []
    for upload in [*images, *files]:
        pending.append(
            PendingFile(
                filename=upload.filename or "upload",
                content_type=upload.content_type or "application/octet-stream",
                content=upload.file.read(),
            )
        )
    return pending


def upload_gallery(uploader: CloudinaryUploader, pending: Sequence[PendingFile]) -> List[Dict[str, str]]:
    """Upload ``pending`` and pair each URL with the original MIME type."""
    if not pending:
        return []
    urls = uploader.upload_many(pending)
    return [
        {"url": url, "file_type": item.content_type}
        for url, item in zip(urls, pending)
    ]
