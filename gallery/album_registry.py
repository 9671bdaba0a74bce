"""
AlbumRegistry - The durable record of albums and their photos.
"""

import logging
import threading
from typing import List, Optional

from .album_record import Album, Photo, now_iso
from .errors import AlbumNotFound, IOFailure, PhotoNotFound


class AlbumRegistry:
    """
    Read-modify-write access to the album registry document.

    Every mutation reloads the document from the backend, applies a single
    change and saves it back. Mutations in this process are serialized by a
    lock that is held only for that short cycle.
    """

    def __init__(self, backend, logger: Optional[logging.Logger] = None):
        """
        Initialize registry.

        Args:
            backend: Object with load() -> dict and save(dict)
            logger: Optional logger instance
        """
        self.backend = backend
        self.logger = logger or logging.getLogger(__name__)
        self._write_lock = threading.Lock()

    # --- Reads --------------------------------------------------------------------
    def get(self, album_id: str) -> Album:
        album = self.find(album_id)
        if album is None:
            raise AlbumNotFound(f"Album not found: {album_id}")
        return album

    def find(self, album_id: str) -> Optional[Album]:
        data = self._load()['albums'].get(album_id)
        return Album.from_dict(data) if data else None

    def list_all(self) -> List[Album]:
        return [Album.from_dict(a) for a in self._load()['albums'].values()]

    # --- Mutations ----------------------------------------------------------------
    def append(self, album_id: str, photo: Photo, album_name: Optional[str] = None) -> Album:
        """
        Append a photo to an album.

        Args:
            album_id: Target album
            photo: Photo record to append
            album_name: When given, the album is created if it does not exist

        Returns:
            The album as saved
        """
        with self._write_lock:
            data = self._load()
            albums = data['albums']
            if album_id not in albums:
                if album_name is None:
                    raise AlbumNotFound(f"Album not found: {album_id}")
                self.logger.info(f"Creating album {album_name!r} ({album_id})")
                albums[album_id] = Album(id=album_id, name=album_name, created_at=now_iso()).to_dict()

            albums[album_id]['photos'].append(photo.to_dict())
            self._save(data)
            return Album.from_dict(albums[album_id])

    def remove(self, album_id: str, photo_id: str) -> Photo:
        """Remove one photo record and return it."""
        with self._write_lock:
            data = self._load()
            album = data['albums'].get(album_id)
            if album is None:
                raise AlbumNotFound(f"Album not found: {album_id}")

            for index, entry in enumerate(album['photos']):
                if entry['id'] == photo_id:
                    del album['photos'][index]
                    self._save(data)
                    return Photo.from_dict(entry)
        raise PhotoNotFound(f"Photo not found: {photo_id}")

    def delete_album(self, album_id: str) -> Album:
        """Remove an album record and return it."""
        with self._write_lock:
            data = self._load()
            album = data['albums'].pop(album_id, None)
            if album is None:
                raise AlbumNotFound(f"Album not found: {album_id}")
            self._save(data)
        self.logger.info(f"Deleted album {album.get('name')!r} ({album_id})")
        return Album.from_dict(album)

    # --- Backend access -----------------------------------------------------------
    def _load(self) -> dict:
        try:
            return self.backend.load()
        except OSError as e:
            self.logger.error(f"Cannot read album registry: {e}")
            raise IOFailure(f"Cannot read album registry: {e.strerror or e}")

    def _save(self, data: dict) -> None:
        try:
            self.backend.save(data)
        except OSError as e:
            self.logger.error(f"Cannot write album registry: {e}")
            raise IOFailure(f"Cannot write album registry: {e.strerror or e}")
