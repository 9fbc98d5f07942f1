import logging
import uuid
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from app.config import Settings, get_settings

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhotoUpload:
    content: bytes
    filename: str

    @property
    def extension(self) -> str:
        return Path(self.filename or "").suffix.lower()


def generate_photo_filename(original_filename: str) -> str:
    """Random file name that keeps the extension of the uploaded file."""
    return f"{uuid.uuid4()}{Path(original_filename or '').suffix.lower()}"


class PhotoStorage:
    """Flat directory holding product photos, addressed by generated file name."""

    def __init__(
        self,
        directory,
        *,
        allowed_extensions: Optional[set[str]] = None,
        max_bytes: Optional[int] = None,
    ):
        self.directory = Path(directory)
        self.allowed_extensions = allowed_extensions
        self.max_bytes = max_bytes

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "PhotoStorage":
        settings = settings or get_settings()
        return cls(
            settings.PHOTO_DIR,
            allowed_extensions=settings.photo_extensions(),
            max_bytes=settings.PHOTO_MAX_BYTES,
        )

    def ensure_dir(self) -> Path:
        self.directory.mkdir(parents=True, exist_ok=True)
        return self.directory

    def path_for(self, file_name: str) -> Path:
        name = Path(file_name or "").name
        if name in ("", ".", ".."):
            raise ValueError(f"Invalid photo file name: {file_name!r}")
        return self.directory / name

    def exists(self, file_name: Optional[str]) -> bool:
        if not file_name:
            return False
        try:
            return self.path_for(file_name).is_file()
        except ValueError:
            return False

    def check(self, upload: PhotoUpload) -> dict[str, str]:
        """Return field errors for an upload that must not be stored."""
        if not upload.content:
            return {"photo": "The uploaded photo is empty."}
        if self.allowed_extensions is not None and upload.extension not in self.allowed_extensions:
            allowed = ", ".join(sorted(self.allowed_extensions))
            return {"photo": f"Unsupported photo type. Allowed: {allowed}."}
        if self.max_bytes is not None and len(upload.content) > self.max_bytes:
            return {"photo": f"The photo exceeds {self.max_bytes} bytes."}
        return {}

    def save(self, upload: PhotoUpload) -> str:
        self.ensure_dir()
        file_name = generate_photo_filename(upload.filename)
        with open(self.path_for(file_name), "wb") as f:
            f.write(upload.content)
        logger.info("Stored photo %s (%d bytes)", file_name, len(upload.content))
        return file_name

    def delete(self, file_name: Optional[str]) -> bool:
        """Remove a stored photo. Missing files and removal failures are not errors."""
        if not file_name:
            return False
        try:
            path = self.path_for(file_name)
        except ValueError:
            logger.warning("Refusing to delete photo with invalid name %r", file_name)
            return False
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError:
            logger.warning("Could not delete photo %s", path, exc_info=True)
            return False
        logger.info("Deleted photo %s", file_name)
        return True


__all__ = ["PhotoStorage", "PhotoUpload", "generate_photo_filename"]
