"""
UploadCoordinator - Ingests one batch of uploaded files into an album.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .album_record import Photo, new_id
from .album_registry import AlbumRegistry
from .errors import (
    AlbumNotFound, FileTooLarge, GalleryError, UnclassifiableTier, UnsupportedType,
)
from .file_store import FileStore
from .ingest_stats import IngestStats
from .path_classifier import UNKNOWN, classify
from .thumbnail_generator import ThumbnailGenerator

DEFAULT_MAX_FILE_SIZE = 100 * 1024 * 1024
ALLOWED_CONTENT_TYPES = ('image/jpeg', 'image/png', 'image/webp', 'image/gif')


@dataclass(frozen=True)
class UploadedFile:
    """One file part as handed over by the web layer."""
    filename: str
    content_type: str
    data: bytes


@dataclass(frozen=True)
class UploadFailure:
    filename: str
    reason: str
    message: str

    def to_dict(self) -> dict:
        return {'filename': self.filename, 'reason': self.reason, 'message': self.message}


@dataclass
class IngestResult:
    """
    Outcome of one batch.

    Attributes:
        album_id: Album the photos went to; None if a new album got no photos
        accepted: Photo records appended, in processing order
        failures: Rejected files with their reasons
        stats: Batch statistics
    """
    album_id: Optional[str]
    accepted: List[Photo] = field(default_factory=list)
    failures: List[UploadFailure] = field(default_factory=list)
    stats: IngestStats = field(default_factory=IngestStats)


class UploadCoordinator:
    """
    Validates, stores, thumbnails and registers uploaded files.

    A failing file never aborts its batch; it is reported next to the
    accepted ones so the client can retry just the failures. Calls for the
    same album only ever append.
    """

    def __init__(
        self,
        registry: AlbumRegistry,
        file_store: FileStore,
        thumbnail_generator: ThumbnailGenerator,
        max_file_size: int = DEFAULT_MAX_FILE_SIZE,
        allowed_types: Sequence[str] = ALLOWED_CONTENT_TYPES,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize coordinator.

        Args:
            registry: Album registry to append to
            file_store: Storage for originals and thumbnails
            thumbnail_generator: Thumbnail renderer
            max_file_size: Byte ceiling per file
            allowed_types: Accepted MIME types
            logger: Optional logger instance
        """
        self.registry = registry
        self.store = file_store
        self.thumb_gen = thumbnail_generator
        self.max_file_size = max_file_size
        self.allowed_types = tuple(allowed_types)
        self.logger = logger or logging.getLogger(__name__)

    def ingest(
        self,
        album_id: Optional[str],
        album_name: Optional[str],
        files: Sequence[UploadedFile]
    ) -> IngestResult:
        """
        Ingest one batch of files.

        Args:
            album_id: Existing album id, or None to start a new album
            album_name: Display name used when the album gets created
            files: Uploaded files, processed in order

        Returns:
            IngestResult with accepted photos and per-file failures
        """
        creating = album_id is None
        if creating:
            album_id = new_id()
            album_name = (album_name or '').strip() or 'Untitled'
        else:
            self.registry.get(album_id)
            album_name = None

        result = IngestResult(album_id=album_id)
        result.stats.total_files = len(files)
        self.logger.info(
            f"Ingesting {len(files)} file(s) into album {album_id}"
            f"{' (new)' if creating else ''}"
        )

        for upload in files:
            try:
                photo = self._ingest_file(album_id, album_name, upload)
            except AlbumNotFound:
                raise
            except GalleryError as e:
                self.logger.warning(f"Rejected {upload.filename}: {e.reason}: {e.message}")
                result.failures.append(UploadFailure(upload.filename, e.reason, e.message))
                result.stats.failed += 1
                continue

            result.accepted.append(photo)
            result.stats.accepted += 1
            result.stats.bytes_stored += photo.size

        result.stats.finish()
        if creating and not result.accepted:
            result.album_id = None

        self.logger.info(
            f"Batch complete: {result.stats.accepted} accepted, {result.stats.failed} failed "
            f"({result.stats.elapsed_seconds:.1f}s, {result.stats.rate_per_second:.1f} files/s)"
        )
        return result

    def _ingest_file(self, album_id: str, album_name: Optional[str], upload: UploadedFile) -> Photo:
        data = upload.data
        if len(data) > self.max_file_size:
            raise FileTooLarge(
                f"File too large: {len(data)} bytes (limit {self.max_file_size})"
            )

        content_type, width, height = self.thumb_gen.probe(data)
        if content_type not in self.allowed_types:
            detected = content_type or upload.content_type or 'unknown'
            raise UnsupportedType(f"Unsupported MIME type: {detected}")

        tier, clean_name = classify(upload.filename)
        if tier == UNKNOWN:
            raise UnclassifiableTier(
                f"No light/max folder or name token in {upload.filename!r}"
            )

        # rendered before anything is written so a bad image is never stored
        thumb_data = self.thumb_gen.generate(data, content_type)

        stored_path = self.store.store(album_id, tier, clean_name, data)
        stem = f"{os.path.splitext(clean_name)[0]}_{tier}"
        thumbnail_path = self.store.store_thumbnail(album_id, stem, thumb_data)

        photo = Photo(
            id=new_id(),
            original_filename=upload.filename,
            tier=tier,
            stored_path=stored_path,
            width=width,
            height=height,
            thumbnail_path=thumbnail_path,
            size=len(data),
            content_type=content_type,
        )
        self.registry.append(album_id, photo, album_name=album_name)
        self.logger.debug(f"Stored {upload.filename} as {stored_path} ({width}x{height})")
        return photo
