"""
Profile image storage.

The credential service only keeps the reference string returned by save();
serving the files back is left to a static asset server.
"""
from pathlib import Path
from typing import Optional, Protocol
import logging
import os
import shutil
import time
import uuid

from fastapi import UploadFile

from .errors import ValidationError

logger = logging.getLogger(__name__)


class ImageStorage(Protocol):
    def save(self, upload: UploadFile) -> str:
        ...

    def discard(self, reference: str) -> None:
        ...


class LocalImageStorage:
    """Stores uploads in a local directory under timestamp-based names."""

    def __init__(self, upload_dir: str, url_prefix: str = "/uploads"):
        self.upload_dir = Path(upload_dir)
        self.url_prefix = url_prefix.rstrip("/")

    def _filename(self, original: Optional[str]) -> str:
        ext = os.path.splitext(original or "")[1].lower()
        return f"{time.time_ns()}-{uuid.uuid4().hex[:8]}{ext}"

    def save(self, upload: UploadFile) -> str:
        """
        Write upload to disk.

        Returns:
            Reference of the form "<url_prefix>/<filename>"

        Raises:
            ValidationError: upload is not an image
        """
        content_type = upload.content_type or ""
        if not content_type.startswith("image/"):
            raise ValidationError("Profile image must be an image file")

        self.upload_dir.mkdir(parents=True, exist_ok=True)
        filename = self._filename(upload.filename)
        with open(self.upload_dir / filename, "wb") as out:
            shutil.copyfileobj(upload.file, out)

        logger.info("Stored profile image %s", filename)
        return f"{self.url_prefix}/{filename}"

    def discard(self, reference: str) -> None:
        path = self.upload_dir / Path(reference).name
        try:
            path.unlink()
        except FileNotFoundError:
            pass
