"""Local file storage for product images."""

from __future__ import annotations

import re
from io import BytesIO
from pathlib import Path
from typing import Optional

from PIL import Image, UnidentifiedImageError
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename


MAX_IMAGE_BYTES = 4 * 1024 * 1024
_FORMAT_BY_EXT = {"jpg": "JPEG", "jpeg": "JPEG", "png": "PNG", "webp": "WEBP", "gif": "GIF"}
_ANIMATED_FORMATS = {"GIF", "PNG", "WEBP"}


class BlobStorage:
    """Stores uploads under ``root`` and hands back their public URL."""

    def __init__(self, root: Path, base_url: str = "/static/uploads") -> None:
        self._root = root
        self._base_url = base_url.rstrip("/")
        self._root.mkdir(parents=True, exist_ok=True)

    @property
    def root(self) -> Path:
        return self._root

    def put(self, path_hint: str, uploaded: FileStorage) -> str:
        """Save the upload at ``path_hint`` (relative) and return its URL."""

        self._validate_upload(uploaded)
        binary = uploaded.read()
        if not binary:
            raise ValueError("Image content is empty.")
        if len(binary) >= MAX_IMAGE_BYTES:
            raise ValueError("Each image must be less than 4MB.")

        relative = self._safe_path(path_hint)
        target_path = self._root / relative
        target_path.parent.mkdir(parents=True, exist_ok=True)
        self._save_image(binary, target_path)
        return self.public_url(relative)

    def public_url(self, relative: str) -> str:
        return f"{self._base_url}/{relative.lstrip('/')}"

    def _validate_upload(self, uploaded: Optional[FileStorage]) -> None:
        if uploaded is None or uploaded.filename is None or not uploaded.filename.strip():
            raise ValueError("Please choose an image file to upload.")

    def _safe_path(self, path_hint: str) -> str:
        parts = [p for p in re.split(r"[\\/]+", path_hint) if p not in {"", ".", ".."}]
        cleaned = [secure_filename(p) or "file" for p in parts]
        if not cleaned:
            raise ValueError("Empty storage path.")
        return "/".join(cleaned)

    def _save_image(self, binary: bytes, target_path: Path) -> None:
        ext = target_path.suffix.lower().lstrip(".")
        fmt = _FORMAT_BY_EXT.get(ext)
        try:
            with Image.open(BytesIO(binary)) as image:
                image.verify()
        except (UnidentifiedImageError, OSError) as exc:
            raise ValueError("Uploaded file is not a valid image.") from exc

        if fmt is None:
            target_path.write_bytes(binary)
            return
        # verify() leaves the image unusable, reopen to re-encode
        with Image.open(BytesIO(binary)) as image:
            if fmt in _ANIMATED_FORMATS and getattr(image, "is_animated", False):
                image.save(target_path, format=fmt, save_all=True)
                return
            if fmt == "JPEG" and image.mode not in {"RGB", "L"}:
                image = image.convert("RGB")
            image.save(target_path, format=fmt)
