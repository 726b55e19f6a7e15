"""
scenecut.media - Content-addressed image storage for a project.

Scene and asset images are referenced by string. Generated or imported
bytes are stored under media/<hash>.<ext> and referenced by that relative
path; data: URLs are accepted as references as well.
"""

from __future__ import annotations

import base64
import binascii
import hashlib
import mimetypes
from pathlib import Path

from scenecut.exceptions import MediaError
from scenecut.io import write_bytes

MEDIA_DIRNAME = "media"


def sniff_image_suffix(data: bytes) -> str:
    if data.startswith(b"\x89PNG\r\n\x1a\n"):
        return ".png"
    if data.startswith(b"\xff\xd8"):
        return ".jpg"
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return ".webp"
    return ".png"


def decode_data_url(ref: str) -> tuple[str, bytes]:
    """Split a data: URL into (mime_type, bytes)."""
    header, sep, payload = ref.partition(",")
    if not sep or not header.startswith("data:"):
        raise MediaError("Malformed data URL")
    mime_type = header[5:].split(";")[0] or "image/png"
    try:
        return mime_type, base64.b64decode(payload, validate=False)
    except (binascii.Error, ValueError) as e:
        raise MediaError(f"Invalid base64 payload in data URL: {e}") from e


class MediaStore:
    """Stores image bytes inside the project directory."""

    def __init__(self, project_dir: Path) -> None:
        self.project_dir = project_dir
        self.media_dir = project_dir / MEDIA_DIRNAME

    def put(self, data: bytes, suffix: str | None = None) -> str:
        """Store bytes and return their reference."""
        if not data:
            raise MediaError("Refusing to store empty image data")
        digest = hashlib.sha256(data).hexdigest()[:16]
        suffix = suffix or sniff_image_suffix(data)
        ref = f"{MEDIA_DIRNAME}/{digest}{suffix}"
        path = self.project_dir / ref
        if not path.exists():
            write_bytes(path, data)
        return ref

    def import_file(self, source: Path) -> str:
        if not source.exists():
            raise MediaError(f"Image not found: {source}")
        return self.put(source.read_bytes(), source.suffix.lower() or None)

    def path(self, ref: str) -> Path:
        return self.project_dir / ref

    def read(self, ref: str) -> bytes:
        if ref.startswith("data:"):
            return decode_data_url(ref)[1]
        path = self.path(ref)
        try:
            return path.read_bytes()
        except OSError as e:
            raise MediaError(f"Cannot read image {ref}: {e}") from e

    def mime_type(self, ref: str) -> str:
        if ref.startswith("data:"):
            return decode_data_url(ref)[0]
        return mimetypes.guess_type(ref)[0] or "image/png"
