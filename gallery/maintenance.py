"""
Maintenance - Storage housekeeping that runs outside the request path.

OrphanScanner finds files in the storage tree that no registry record
points at (left behind by interrupted uploads). ThumbnailRebuilder
regenerates thumbnails that went missing from disk.
"""

import logging
import os
from dataclasses import dataclass, field
from typing import Iterator, List, Optional

from .album_record import Photo
from .album_registry import AlbumRegistry
from .errors import GalleryError, IOFailure
from .file_store import FileStore
from .thumbnail_generator import ThumbnailGenerator


@dataclass
class RebuildStats:
    """
    Statistics for a thumbnail rebuild run.

    Attributes:
        checked: Photos inspected
        rebuilt: Thumbnails written (or that would be, in dry run)
        errors: Photos whose thumbnail could not be rebuilt
        error_details: Error messages
    """
    checked: int = 0
    rebuilt: int = 0
    errors: int = 0
    error_details: List[str] = field(default_factory=list)


class OrphanScanner:
    """Lists stored files that belong to no registered photo."""

    def __init__(
        self,
        registry: AlbumRegistry,
        file_store: FileStore,
        logger: Optional[logging.Logger] = None
    ):
        self.registry = registry
        self.store = file_store
        self.logger = logger or logging.getLogger(__name__)

    def scan(self, album_ids: Optional[List[str]] = None) -> Iterator[str]:
        """
        Yield stored paths of orphaned files.

        Args:
            album_ids: Albums to scan (None = every directory in storage)
        """
        known = {}
        for album in self.registry.list_all():
            known[album.id] = {p.stored_path for p in album.photos}

        targets = album_ids or self.store.list_album_ids()
        self.logger.info(f"Scanning {len(targets)} album folder(s) for orphans")
        for album_id in targets:
            referenced = known.get(album_id, set())
            for stored_path in self.store.iter_album_files(album_id):
                if stored_path not in referenced:
                    yield stored_path

    def delete(self, stored_paths: List[str]) -> int:
        for stored_path in stored_paths:
            self.logger.info(f"Deleting orphan {stored_path}")
            self.store.delete(stored_path)
        return len(stored_paths)


class ThumbnailRebuilder:
    """Regenerates missing thumbnails for registered photos in place."""

    def __init__(
        self,
        registry: AlbumRegistry,
        file_store: FileStore,
        thumbnail_generator: ThumbnailGenerator,
        dry_run: bool = False,
        logger: Optional[logging.Logger] = None
    ):
        self.registry = registry
        self.store = file_store
        self.thumb_gen = thumbnail_generator
        self.dry_run = dry_run
        self.logger = logger or logging.getLogger(__name__)

    def rebuild(self, album_ids: Optional[List[str]] = None) -> RebuildStats:
        stats = RebuildStats()
        albums = [self.registry.get(a) for a in album_ids] if album_ids else self.registry.list_all()

        for album in albums:
            for photo in album.photos:
                stats.checked += 1
                if self.store.thumbnail_exists(photo.thumbnail_path):
                    continue
                if self.dry_run:
                    self.logger.info(f"[DRY RUN] Would rebuild: {photo.thumbnail_path}")
                    stats.rebuilt += 1
                    continue
                try:
                    self._rebuild_photo(photo)
                    stats.rebuilt += 1
                except GalleryError as e:
                    msg = f"Error rebuilding {photo.stored_path}: {e.message}"
                    self.logger.error(msg)
                    stats.errors += 1
                    stats.error_details.append(msg)

        self.logger.info(
            f"Rebuild complete: {stats.checked} checked, {stats.rebuilt} rebuilt, "
            f"{stats.errors} errors"
        )
        return stats

    def _rebuild_photo(self, photo: Photo) -> None:
        data = self.store.read(photo.stored_path)
        content_type = photo.content_type or self.thumb_gen.probe(data)[0] or ''
        thumb_data = self.thumb_gen.generate(data, content_type)

        # the record keeps its path, so write exactly there
        target = self.store.thumbnail_absolute_path(photo.thumbnail_path)
        try:
            os.makedirs(os.path.dirname(target), exist_ok=True)
            with open(target, 'xb') as f:
                f.write(thumb_data)
        except OSError as e:
            raise IOFailure(f"Cannot write {photo.thumbnail_path}: {e.strerror or e}")
        self.logger.debug(f"Rebuilt {photo.thumbnail_path}")
