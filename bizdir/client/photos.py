"""Photo picker state for the add-business form."""

import base64
import itertools
import logging
from dataclasses import dataclass, field
from typing import Optional, Sequence

from bizdir.services.storage import ALLOWED_CONTENT_TYPES

logger = logging.getLogger(__name__)

MAX_PHOTOS = 10
MAX_PHOTO_BYTES = 10 * 1024 * 1024


@dataclass
class SelectedPhoto:
    id: int
    filename: str
    content: bytes
    content_type: str
    preview: Optional[str] = None  # data URL, filled once the preview read completes

    @property
    def size(self) -> int:
        return len(self.content)

    def as_upload(self):
        return (self.filename, self.content, self.content_type)


@dataclass
class PendingPreview:
    """A preview read in flight, tagged with the photo it belongs to."""
    photo_id: int
    content: bytes
    content_type: str


def encode_preview(content: bytes, content_type: str) -> str:
    return f"data:{content_type};base64,{base64.b64encode(content).decode('ascii')}"


@dataclass
class PhotoSelection:
    max_photos: int = MAX_PHOTOS
    max_bytes: int = MAX_PHOTO_BYTES
    photos: list[SelectedPhoto] = field(default_factory=list)
    error: str = ""
    _ids: itertools.count = field(default_factory=lambda: itertools.count(1), repr=False)

    def add(self, files: Sequence[tuple[str, bytes, str]]) -> list[PendingPreview]:
        """
        Add (filename, content, content_type) files. The whole batch is refused
        when it would exceed the count limit or contains a non-image or oversized file.
        Returns one pending preview read per accepted photo.
        """
        self.error = ""
        if len(files) + len(self.photos) > self.max_photos:
            self.error = f"Maximum {self.max_photos} photos allowed"
            return []
        if any(content_type not in ALLOWED_CONTENT_TYPES for _, _, content_type in files):
            self.error = "Only image files are allowed"
            return []
        if any(len(content) > self.max_bytes for _, content, _ in files):
            self.error = f"Some files exceed the {self.max_bytes // (1024 * 1024)}MB size limit"
            return []

        pending = []
        for filename, content, content_type in files:
            photo = SelectedPhoto(id=next(self._ids), filename=filename, content=content, content_type=content_type)
            self.photos.append(photo)
            pending.append(PendingPreview(photo_id=photo.id, content=content, content_type=content_type))
        return pending

    def complete_preview(self, photo_id: int, preview: str) -> bool:
        """
        Attach a finished preview. A read that finishes after its photo was
        removed is discarded; returns whether the preview was kept.
        """
        for photo in self.photos:
            if photo.id == photo_id:
                photo.preview = preview
                return True
        logger.debug(f"Discarding stale preview for removed photo {photo_id}")
        return False

    def read_preview(self, pending: PendingPreview) -> bool:
        return self.complete_preview(pending.photo_id, encode_preview(pending.content, pending.content_type))

    def remove(self, photo_id: int) -> None:
        self.photos = [p for p in self.photos if p.id != photo_id]
        self.error = ""

    def reset(self) -> None:
        self.photos = []
        self.error = ""

    @property
    def previews(self) -> list[str]:
        return [p.preview for p in self.photos if p.preview is not None]

    def uploads(self) -> list[tuple]:
        return [p.as_upload() for p in self.photos]
