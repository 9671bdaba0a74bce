"""
ArchiveStreamer - Builds zip archives of albums on disk and streams them in chunks.
"""

import logging
import os
import tempfile
import zipfile
from typing import Callable, Iterator, List, Optional, Sequence

from .album_record import TIERS, Album
from .album_registry import AlbumRegistry
from .errors import ArchiveBuildFailure, EmptyArchive, IOFailure
from .file_store import FileStore
from .path_classifier import clean_component

DEFAULT_CHUNK_SIZE = 64 * 1024

COMPRESSION = {
    'deflated': zipfile.ZIP_DEFLATED,
    'stored': zipfile.ZIP_STORED,
}


class BuiltArchive:
    """
    A finished archive waiting in a temporary file.

    The file is removed once it has been streamed, when the consumer
    stops iterating early, or on discard().
    """

    def __init__(
        self,
        path: str,
        file_count: int,
        album_names: List[str],
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        logger: Optional[logging.Logger] = None
    ):
        self.path = path
        self.file_count = file_count
        self.album_names = album_names
        self.chunk_size = chunk_size
        self.size = os.path.getsize(path)
        self.logger = logger or logging.getLogger(__name__)

    def iter_chunks(self) -> Iterator[bytes]:
        """Yield the archive in chunk_size pieces, deleting it afterwards."""
        try:
            with open(self.path, 'rb') as body:
                for chunk in iter(lambda: body.read(self.chunk_size), b''):
                    yield chunk
        finally:
            self.discard()

    def discard(self) -> None:
        if os.path.exists(self.path):
            try:
                os.remove(self.path)
            except OSError as e:
                self.logger.warning(f"Could not delete {self.path}: {e}")


class ArchiveStreamer:
    """
    Creates one zip archive for one or many albums.

    Members are compressed one at a time into a temporary file so memory
    use does not grow with the archive. The final size is known before
    the first byte is handed out.
    """

    def __init__(
        self,
        registry: AlbumRegistry,
        file_store: FileStore,
        tmp_dir: Optional[str] = None,
        chunk_size: int = DEFAULT_CHUNK_SIZE,
        compression: str = 'deflated',
        logger: Optional[logging.Logger] = None
    ):
        """
        Initialize archive streamer.

        Args:
            registry: Album registry (source of truth for album contents)
            file_store: Storage the photos are read from
            tmp_dir: Directory for archives under construction (default: system temp)
            chunk_size: Bytes per emitted chunk
            compression: 'deflated' or 'stored'
            logger: Optional logger instance
        """
        if compression not in COMPRESSION:
            raise ValueError(f"Unknown compression: {compression}")
        self.registry = registry
        self.store = file_store
        self.tmp_dir = tmp_dir
        self.chunk_size = chunk_size
        self.compression = COMPRESSION[compression]
        self.logger = logger or logging.getLogger(__name__)

    def stream(
        self,
        album_ids: Sequence[str],
        sink: Callable[[bytes], object],
        should_abort: Optional[Callable[[], bool]] = None
    ) -> int:
        """
        Build the archive and feed it to sink chunk by chunk.

        Returns:
            Number of bytes written to sink
        """
        archive = self.build(album_ids, should_abort=should_abort)
        written = 0
        for chunk in archive.iter_chunks():
            sink(chunk)
            written += len(chunk)
        return written

    def build(
        self,
        album_ids: Sequence[str],
        should_abort: Optional[Callable[[], bool]] = None
    ) -> BuiltArchive:
        """
        Write the archive for the given albums to a temporary file.

        Unknown and empty albums are skipped.

        Raises:
            EmptyArchive: No file was added
            ArchiveBuildFailure: Writing or finalizing failed, or should_abort fired
        """
        albums = self._resolve_albums(album_ids)

        if self.tmp_dir:
            os.makedirs(self.tmp_dir, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(dir=self.tmp_dir, prefix='zip_', suffix='.zip')
        os.close(fd)

        try:
            file_count, names = self._write_archive(tmp_path, albums, should_abort)
        except (OSError, zipfile.BadZipFile, IOFailure) as e:
            self._remove(tmp_path)
            self.logger.error(f"Archive build failed: {e}")
            raise ArchiveBuildFailure(f"Failed to finalize ZIP archive: {e}")
        except BaseException:
            self._remove(tmp_path)
            raise

        if file_count == 0:
            self._remove(tmp_path)
            raise EmptyArchive("The selected albums contain no photos")

        archive = BuiltArchive(tmp_path, file_count, names, self.chunk_size, self.logger)
        self.logger.info(
            f"Archive ready: {file_count} file(s) from {len(names)} album(s), "
            f"{archive.size} bytes"
        )
        return archive

    def _resolve_albums(self, album_ids: Sequence[str]) -> List[Album]:
        albums = []
        seen = set()
        for album_id in album_ids:
            if album_id in seen:
                continue
            seen.add(album_id)
            album = self.registry.find(album_id)
            if album is None:
                self.logger.warning(f"Skipping unknown album {album_id}")
                continue
            albums.append(album)
        return albums

    def _write_archive(self, tmp_path, albums, should_abort):
        file_count = 0
        used_folders = set()
        names = []

        with zipfile.ZipFile(tmp_path, 'w', compression=self.compression, allowZip64=True) as zf:
            for album in albums:
                added = 0
                folder = self._folder_name(album.name, used_folders)
                for tier in TIERS:
                    photos = [p for p in album.photos_in_tier(tier) if self._available(p.stored_path)]
                    if not photos:
                        continue
                    zf.writestr(zipfile.ZipInfo(f"{folder}/{tier}/"), b'')
                    for photo in photos:
                        if should_abort and should_abort():
                            raise ArchiveBuildFailure("Archive build aborted")
                        zf.write(self.store.absolute_path(photo.stored_path), f"{folder}/{tier}/{photo.filename}")
                        added += 1

                if added:
                    used_folders.add(folder.lower())
                    names.append(album.name)
                    file_count += added
                else:
                    self.logger.debug(f"Album {album.id} has no files, omitted")

        return file_count, names

    def _available(self, stored_path: str) -> bool:
        try:
            if self.store.exists(stored_path):
                return True
        except IOFailure:
            pass
        self.logger.warning(f"Registered file missing from storage: {stored_path}")
        return False

    @staticmethod
    def _folder_name(album_name: str, used: set) -> str:
        base = clean_component(album_name or '').strip('.') or 'album'
        candidate = base
        counter = 1
        while candidate.lower() in used:
            candidate = f"{base} ({counter})"
            counter += 1
        return candidate

    def _remove(self, path: str) -> None:
        if os.path.exists(path):
            try:
                os.remove(path)
            except OSError as e:
                self.logger.warning(f"Could not delete {path}: {e}")
