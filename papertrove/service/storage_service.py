from __future__ import annotations

import logging
import random
import time
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Optional

from papertrove.config import UploadConfig
from papertrove.errors import ValidationError

logger = logging.getLogger(__name__)

PDF_CONTENT_TYPE = "application/pdf"


@dataclass
class StoredFile:
    disk_path: Path
    public_path: str


class PaperStorage:
    """
    Uploaded PDF files on local disk, served statically under ``public_prefix``
    """

    def __init__(self, config: UploadConfig):
        self.upload_dir = Path(config.upload_dir)
        self.public_prefix = config.public_prefix.rstrip("/")
        self.max_size_bytes = config.max_size_bytes

    @staticmethod
    def make_filename(original_name: Optional[str]) -> str:
        """paper-<epoch ms>-<random>.<original extension>"""
        suffix = Path(original_name or "").suffix.lower() or ".pdf"
        unique = f"{int(time.time() * 1000)}-{random.randint(0, 10**9)}"
        return f"paper-{unique}{suffix}"

    def check_content_type(self, content_type: Optional[str]) -> None:
        if (content_type or "").split(";")[0].strip().lower() != PDF_CONTENT_TYPE:
            raise ValidationError("Only PDF files are allowed")

    def save(self, stream: BinaryIO, original_name: Optional[str]) -> StoredFile:
        """
        Copy an upload stream to disk.

        Raises:
            ValidationError: file exceeds the size limit (partial file removed)
        """
        self.upload_dir.mkdir(parents=True, exist_ok=True)
        filename = self.make_filename(original_name)
        disk_path = self.upload_dir / filename

        written = 0
        with disk_path.open("wb") as f:
            while True:
                chunk = stream.read(1024 * 64)
                if not chunk:
                    break
                written += len(chunk)
                if written > self.max_size_bytes:
                    break
                f.write(chunk)

        if written > self.max_size_bytes:
            self.remove(disk_path)
            raise ValidationError(
                f"File too large, limit is {self.max_size_bytes // (1024 * 1024)}MB"
            )

        logger.info(f"Stored upload {filename} ({written} bytes)")
        return StoredFile(disk_path=disk_path, public_path=f"{self.public_prefix}/{filename}")

    def resolve(self, public_path: str) -> Path:
        """Map a stored public path back to its file in upload_dir"""
        return self.upload_dir / Path(public_path).name

    def remove(self, disk_path: Path) -> bool:
        """Delete a file; a missing file is not an error"""
        try:
            disk_path.unlink()
            return True
        except FileNotFoundError:
            return False

    def remove_public(self, public_path: Optional[str]) -> bool:
        if not public_path:
            return False
        removed = self.remove(self.resolve(public_path))
        if not removed:
            logger.warning(f"Stored file already missing: {public_path}")
        return removed
