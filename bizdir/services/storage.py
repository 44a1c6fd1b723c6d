"""Local-disk storage for uploaded photos."""

import logging
import secrets
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Sequence

from fastapi import UploadFile

from bizdir.core.config import settings
from bizdir.core.errors import ValidationError

logger = logging.getLogger(__name__)

ALLOWED_CONTENT_TYPES = {"image/jpeg", "image/png", "image/gif", "image/webp"}
CHUNK_SIZE = 1024 * 1024


@dataclass
class StoredFile:
    filename: str
    original_name: str
    path: str
    size: int

    @property
    def url(self) -> str:
        return f"{settings.uploads_url_prefix.rstrip('/')}/{self.filename}"


def upload_root() -> Path:
    root = Path(settings.upload_dir)
    root.mkdir(parents=True, exist_ok=True)
    return root


def selected_files(files: Sequence[UploadFile] | None) -> list[UploadFile]:
    """Drop empty multipart parts (a file input submitted with nothing chosen)."""
    return [f for f in (files or []) if f is not None and f.filename]


def check_uploads(files: Sequence[UploadFile], max_files: int) -> None:
    """
    Reject the whole batch before anything is written: too many files or
    a non-image content type.
    """
    if len(files) > max_files:
        raise ValidationError(f"Maximum {max_files} photos allowed")
    for f in files:
        if f.content_type not in ALLOWED_CONTENT_TYPES:
            raise ValidationError("Only image files are allowed")


def _unique_filename(original_name: str) -> str:
    suffix = Path(original_name).suffix.lower()
    if not suffix[1:].isalnum():
        suffix = ""
    return f"{int(time.time() * 1000)}-{secrets.token_hex(6)}{suffix}"


async def _save_one(upload: UploadFile, root: Path) -> StoredFile:
    filename = _unique_filename(upload.filename or "")
    dest = root / filename
    size = 0
    too_large = False
    try:
        with dest.open("wb") as out:
            while chunk := await upload.read(CHUNK_SIZE):
                size += len(chunk)
                if size > settings.max_upload_bytes:
                    too_large = True
                    break
                out.write(chunk)
    except BaseException:
        # Partial file is not tracked by save_uploads yet
        dest.unlink(missing_ok=True)
        raise
    if too_large:
        dest.unlink(missing_ok=True)
        raise ValidationError(f"{upload.filename} exceeds the {settings.max_upload_bytes // (1024 * 1024)}MB size limit")
    return StoredFile(filename=filename, original_name=upload.filename or filename, path=str(dest), size=size)


async def save_uploads(files: Sequence[UploadFile], max_files: int | None = None) -> list[StoredFile]:
    """
    Validate then write every file. All or nothing: if any write fails,
    files already written in this batch are removed before re-raising.
    """
    limit = settings.max_photos if max_files is None else max_files
    check_uploads(files, limit)
    root = upload_root()
    stored: list[StoredFile] = []
    try:
        for upload in files:
            stored.append(await _save_one(upload, root))
    except Exception:
        remove_files(f.path for f in stored)
        raise
    logger.info(f"Stored {len(stored)} uploaded file(s) in {root}")
    return stored


def remove_files(paths: Iterable[str]) -> int:
    """Best-effort delete of stored files; returns how many were removed."""
    removed = 0
    for path in paths:
        try:
            Path(path).unlink()
            removed += 1
        except FileNotFoundError:
            logger.warning(f"Stored file already gone: {path}")
        except OSError as e:
            logger.error(f"Failed to remove stored file {path}: {e}")
    return removed
