"""
GalleryServices - Wires the gallery components together once per process.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from .album_registry import AlbumRegistry
from .archive_streamer import ArchiveStreamer
from .config import GalleryConfig
from .file_store import FileStore
from .registry_backends import JsonFileBackend
from .thumbnail_generator import ThumbnailGenerator
from .upload_coordinator import UploadCoordinator


@dataclass
class GalleryServices:
    config: GalleryConfig
    registry: AlbumRegistry
    store: FileStore
    thumbnails: ThumbnailGenerator
    coordinator: UploadCoordinator
    streamer: ArchiveStreamer

    @classmethod
    def from_config(
        cls,
        config: GalleryConfig,
        backend=None,
        logger: Optional[logging.Logger] = None
    ) -> 'GalleryServices':
        """
        Build all components from configuration.

        Args:
            config: Gallery configuration
            backend: Registry backend (default: JSON file at config.registry_file)
            logger: Optional logger shared by all components
        """
        errors = config.validate()
        if errors:
            raise ValueError("; ".join(errors))

        registry = AlbumRegistry(backend or JsonFileBackend(config.registry_file, logger), logger)
        store = FileStore(config.storage_dir, config.thumb_dir, logger)
        thumbnails = ThumbnailGenerator(config.thumbnail_size, config.thumbnail_quality, logger)
        coordinator = UploadCoordinator(
            registry,
            store,
            thumbnails,
            max_file_size=config.max_file_size,
            allowed_types=config.allowed_types,
            logger=logger,
        )
        streamer = ArchiveStreamer(
            registry,
            store,
            tmp_dir=config.tmp_dir,
            chunk_size=config.archive_chunk_size,
            compression=config.archive_compression,
            logger=logger,
        )
        return cls(config, registry, store, thumbnails, coordinator, streamer)
