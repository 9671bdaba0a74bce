"""
FileStore - Persists uploaded photos and their thumbnails on the local filesystem.

Layout:
    <storage_root>/<album_id>/<tier>/<filename>
    <thumb_root>/<album_id>/<thumb_name>.jpg
"""

import logging
import os
import shutil
from typing import BinaryIO, Iterator, Optional

from .errors import IOFailure


class FileStore:
    """
    Create-only file storage for album photos.

    Files are never overwritten: a name that is already taken gets a
    " (n)" suffix before its extension.
    """

    def __init__(
        self,
        storage_root: str,
        thumb_root: str,
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize file store.

        Args:
            storage_root: Directory holding <album_id>/<tier>/ folders
            thumb_root: Directory holding <album_id>/ thumbnail folders
            logger: Optional logger instance
        """
        self.storage_root = os.path.abspath(storage_root)
        self.thumb_root = os.path.abspath(thumb_root)
        self.logger = logger or logging.getLogger(__name__)

    # --- Writing ------------------------------------------------------------------
    def store(self, album_id: str, tier: str, filename: str, data: bytes) -> str:
        """
        Write a photo into its album/tier directory.

        Returns:
            Stored path relative to the storage root ('/' separated)
        """
        directory = self._ensure_directory(os.path.join(self.storage_root, album_id, tier))
        name = self._write_unique(directory, filename, data)
        return '/'.join((album_id, tier, name))

    def store_thumbnail(self, album_id: str, stem: str, data: bytes) -> str:
        """
        Write a JPEG thumbnail for an album.

        Returns:
            Thumbnail path relative to the thumbnail root
        """
        directory = self._ensure_directory(os.path.join(self.thumb_root, album_id))
        name = self._write_unique(directory, f"{stem}.jpg", data)
        return '/'.join((album_id, name))

    def _ensure_directory(self, directory: str) -> str:
        try:
            os.makedirs(directory, exist_ok=True)
        except OSError as e:
            self.logger.error(f"Cannot create directory {directory}: {e}")
            raise IOFailure(f"Cannot create directory: {e.strerror or e}")
        return directory

    def _write_unique(self, directory: str, filename: str, data: bytes) -> str:
        """Create a new file under directory, picking the first free name."""
        base, ext = os.path.splitext(filename)
        candidate = filename
        counter = 1
        while True:
            target = os.path.join(directory, candidate)
            try:
                handle = open(target, 'xb')
            except FileExistsError:
                candidate = f"{base} ({counter}){ext}"
                counter += 1
                continue
            except OSError as e:
                self.logger.error(f"Cannot create {target}: {e}")
                raise IOFailure(f"Cannot create file: {e.strerror or e}")
            break

        try:
            with handle:
                handle.write(data)
        except OSError as e:
            self.logger.error(f"Write to {target} did not complete: {e}")
            self._remove_quietly(target)
            raise IOFailure(f"Write did not complete: {e.strerror or e}")

        if candidate != filename:
            self.logger.debug(f"Name collision: {filename} stored as {candidate}")
        return candidate

    # --- Reading ------------------------------------------------------------------
    def absolute_path(self, stored_path: str) -> str:
        """Resolve a stored path, refusing anything outside the storage root."""
        return self._resolve(self.storage_root, stored_path)

    def thumbnail_absolute_path(self, thumbnail_path: str) -> str:
        return self._resolve(self.thumb_root, thumbnail_path)

    def exists(self, stored_path: str) -> bool:
        return os.path.isfile(self.absolute_path(stored_path))

    def thumbnail_exists(self, thumbnail_path: str) -> bool:
        return os.path.isfile(self.thumbnail_absolute_path(thumbnail_path))

    def open(self, stored_path: str) -> BinaryIO:
        try:
            return open(self.absolute_path(stored_path), 'rb')
        except OSError as e:
            raise IOFailure(f"Cannot read {stored_path}: {e.strerror or e}")

    def read(self, stored_path: str) -> bytes:
        with self.open(stored_path) as f:
            return f.read()

    def iter_album_files(self, album_id: str) -> Iterator[str]:
        """Yield stored paths of every file on disk under an album directory."""
        album_dir = self._resolve(self.storage_root, album_id)
        for dirpath, dirnames, filenames in os.walk(album_dir):
            dirnames.sort()
            for name in sorted(filenames):
                full = os.path.join(dirpath, name)
                yield os.path.relpath(full, self.storage_root).replace(os.sep, '/')

    def list_album_ids(self) -> list:
        """Album directories present in the storage tree."""
        if not os.path.isdir(self.storage_root):
            return []
        return sorted(
            name for name in os.listdir(self.storage_root)
            if os.path.isdir(os.path.join(self.storage_root, name))
        )

    # --- Deleting -----------------------------------------------------------------
    def delete(self, stored_path: str) -> None:
        self._remove_quietly(self.absolute_path(stored_path))

    def delete_thumbnail(self, thumbnail_path: str) -> None:
        self._remove_quietly(self.thumbnail_absolute_path(thumbnail_path))

    def remove_album(self, album_id: str) -> None:
        """Remove the album's photo and thumbnail trees."""
        for root in (self.storage_root, self.thumb_root):
            directory = self._resolve(root, album_id)
            if os.path.isdir(directory):
                self.logger.info(f"Removing {directory}")
                shutil.rmtree(directory)

    def _remove_quietly(self, path: str) -> None:
        if os.path.exists(path):
            try:
                os.remove(path)
            except OSError as e:
                self.logger.warning(f"Could not delete {path}: {e}")

    @staticmethod
    def _resolve(root: str, relative: str) -> str:
        full = os.path.abspath(os.path.join(root, *relative.split('/')))
        if os.path.commonpath([root, full]) != root or full == root:
            raise IOFailure(f"Path outside storage: {relative}")
        return full
