"""
Picture store - profile picture blobs on local disk, one file per upload.
Files are named {uuid}{ext}; the profile record keeps only the filename.
"""
import mimetypes
import uuid
from pathlib import Path

from portfolio.app.core.config import (
    DEFAULT_PICTURE_CONTENT_TYPE,
    PICTURE_CONTENT_TYPES,
)
from portfolio.app.core.exceptions import StorageError, ValidationError
from portfolio.app.core.logging_config import get_logger

logger = get_logger("services.pictures")

MAX_PICTURE_BYTES = 10 * 1024 * 1024


def content_type_for(filename: str) -> str:
    """Response content type for a stored picture, by extension."""
    return PICTURE_CONTENT_TYPES.get(Path(filename).suffix.lower(), DEFAULT_PICTURE_CONTENT_TYPE)


def _extension_for(original_name: str | None, mime_type: str) -> str:
    suffix = Path(original_name or "").suffix.lower()
    if suffix:
        return suffix
    return mimetypes.guess_extension(mime_type) or ""


class PictureStore:
    def __init__(self, directory: str | Path, max_bytes: int = MAX_PICTURE_BYTES):
        self.directory = Path(directory)
        self.max_bytes = max_bytes
        self.directory.mkdir(parents=True, exist_ok=True)

    def _path(self, filename: str) -> Path | None:
        """Path inside the store for filename, or None if it is not a bare filename."""
        if not filename or Path(filename).name != filename or filename in (".", ".."):
            return None
        return self.directory / filename

    def put(
        self,
        data: bytes,
        mime_type: str,
        size_bytes: int,
        original_name: str | None = None,
    ) -> str:
        """
        Validate and write a picture; returns the generated filename.

        Raises ValidationError (nothing written) for non-image types or
        uploads over max_bytes, StorageError if the write fails.
        """
        if not (mime_type or "").startswith("image/"):
            raise ValidationError("Not an image! Please upload an image.", detail=f"mime_type={mime_type}")
        if max(size_bytes, len(data)) > self.max_bytes:
            raise ValidationError(
                f"File too large. Maximum size is {self.max_bytes // (1024 * 1024)}MB.",
                detail=f"size_bytes={max(size_bytes, len(data))}",
            )

        filename = f"{uuid.uuid4()}{_extension_for(original_name, mime_type)}"
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            (self.directory / filename).write_bytes(data)
        except OSError as e:
            logger.error("Picture write failed filename=%s error=%s", filename, e)
            raise StorageError("Failed to store picture", detail=str(e)) from e

        logger.info("Picture stored filename=%s size_bytes=%d mime_type=%s", filename, len(data), mime_type)
        return filename

    def get(self, filename: str) -> bytes | None:
        """Picture bytes, or None if there is no such file."""
        path = self._path(filename)
        if path is None:
            return None
        try:
            return path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StorageError("Failed to read picture", detail=str(e)) from e

    def exists(self, filename: str) -> bool:
        path = self._path(filename)
        return path is not None and path.is_file()

    def delete(self, filename: str) -> None:
        """Remove a picture. A missing file is not an error."""
        path = self._path(filename)
        if path is None:
            return
        try:
            path.unlink()
            logger.info("Picture deleted filename=%s", filename)
        except FileNotFoundError:
            return
        except OSError as e:
            logger.warning("Picture delete failed filename=%s error=%s", filename, e)
            raise StorageError("Failed to delete picture", detail=str(e)) from e
