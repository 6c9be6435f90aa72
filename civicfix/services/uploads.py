from __future__ import annotations
from pathlib import Path, PurePath
from typing import BinaryIO, Optional
import shutil
import time

from werkzeug.utils import secure_filename

from civicfix.errors import UploadError


class UploadStorage:
    """Writes complaint images into a shared directory.

    Files are stored as ``<epoch ms>-<sanitized name>`` and referenced by a
    public path under ``url_prefix``. Sanitized names never contain ``,``,
    so the comma-joined ``imagePaths`` column splits back cleanly.
    """

    def __init__(self, directory: str | Path, url_prefix: str = "/uploads") -> None:
        self.directory = Path(directory)
        self.url_prefix = url_prefix.rstrip("/")

    def ensure(self) -> None:
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise UploadError(f"Could not create uploads directory {self.directory}: {exc}") from exc

    @staticmethod
    def stored_name(original: Optional[str], now: Optional[float] = None) -> str:
        # Browsers may send full client paths (C:\...\photo.jpg).
        base = PurePath((original or "").replace("\\", "/")).name
        safe = secure_filename(base) or "upload"
        stamp = int((now if now is not None else time.time()) * 1000)
        return f"{stamp}-{safe}"

    def save(self, original_name: Optional[str], stream: BinaryIO) -> str:
        name = self.stored_name(original_name)
        target = self.directory / name
        try:
            with open(target, "wb") as out:
                shutil.copyfileobj(stream, out)
        except OSError as exc:
            raise UploadError(f"Could not write upload {name}: {exc}") from exc
        return f"{self.url_prefix}/{name}"
