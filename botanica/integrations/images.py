# botanica/integrations/images.py
from __future__ import annotations

import logging
import re
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict

log = logging.getLogger(__name__)

ALLOWED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".webp", ".gif"}
MAX_IMAGE_BYTES = 10 * 1024 * 1024

_FOLDER_RE = re.compile(r"[^a-z0-9_\-/]+")


class ImageUploadError(Exception):
    pass


@dataclass
class UploadResult:
    public_id: str
    url: str
    bytes: int
    format: str

    def as_dict(self) -> Dict[str, Any]:
        return {
            "success": True,
            "publicId": self.public_id,
            "url": self.url,
            "bytes": self.bytes,
            "format": self.format,
        }


class ImageHost:
    def upload(self, data: bytes, filename: str, folder: str) -> UploadResult:
        raise NotImplementedError

    def check(self) -> Dict[str, Any]:
        raise NotImplementedError


def _clean_folder(folder: str) -> str:
    folder = _FOLDER_RE.sub("-", (folder or "").strip().lower()).strip("/")
    parts = [p.strip("-") for p in folder.split("/")]
    return "/".join(p for p in parts if p) or "misc"


class LocalImageHost(ImageHost):
    """Stores uploads on disk and serves them under a URL prefix."""

    def __init__(self, root: str | Path, base_url: str = "/uploads"):
        self.root = Path(root)
        self.base_url = base_url.rstrip("/")

    def upload(self, data: bytes, filename: str, folder: str) -> UploadResult:
        if not data:
            raise ImageUploadError("Empty image file")
        if len(data) > MAX_IMAGE_BYTES:
            raise ImageUploadError("Image is too large")

        ext = Path(filename or "").suffix.lower()
        if ext not in ALLOWED_EXTENSIONS:
            raise ImageUploadError(f"Unsupported image type: {ext or 'none'}")

        folder = _clean_folder(folder)
        public_id = f"{folder}/{uuid.uuid4().hex[:12]}"
        target = self.root / f"{public_id}{ext}"
        target.parent.mkdir(parents=True, exist_ok=True)
        target.write_bytes(data)

        log.info("stored image %s (%d bytes)", public_id, len(data))
        return UploadResult(
            public_id=public_id,
            url=f"{self.base_url}/{public_id}{ext}",
            bytes=len(data),
            format=ext.lstrip("."),
        )

    def check(self) -> Dict[str, Any]:
        try:
            self.root.mkdir(parents=True, exist_ok=True)
            probe = self.root / ".probe"
            probe.write_bytes(b"ok")
            probe.unlink()
        except OSError as e:
            log.error("image storage is not writable: %s", e)
            return {"success": False, "error": "Image storage is not writable"}
        return {"success": True, "message": "Image storage is reachable", "baseUrl": self.base_url}
