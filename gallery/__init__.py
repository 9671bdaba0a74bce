"""
Album storage package for the gallery asset server

Ingestion: uploaded files are classified into light/max tiers, stored,
thumbnailed and registered in the album registry.
Retrieval: one or more albums are packed into a zip archive on disk and
streamed back in fixed-size chunks.
"""

__version__ = "1.0.0"

from .errors import (
    GalleryError, ValidationFailure, FileTooLarge, UnsupportedType, UnclassifiableTier,
    IOFailure, ThumbnailFailure, UnsupportedFormat, DecodeFailure,
    ArchiveFailure, ArchiveBuildFailure, EmptyArchive, AlbumNotFound, PhotoNotFound,
)
from .album_record import Album, Photo
from .path_classifier import classify, sanitize_filename
from .file_store import FileStore
from .thumbnail_generator import ThumbnailGenerator
from .registry_backends import JsonFileBackend, MemoryBackend
from .album_registry import AlbumRegistry
from .ingest_stats import IngestStats
from .upload_coordinator import UploadCoordinator, UploadedFile, UploadFailure, IngestResult
from .archive_streamer import ArchiveStreamer, BuiltArchive
from .config import GalleryConfig
from .services import GalleryServices

__all__ = [
    "GalleryError",
    "ValidationFailure",
    "FileTooLarge",
    "UnsupportedType",
    "UnclassifiableTier",
    "IOFailure",
    "ThumbnailFailure",
    "UnsupportedFormat",
    "DecodeFailure",
    "ArchiveFailure",
    "ArchiveBuildFailure",
    "EmptyArchive",
    "AlbumNotFound",
    "PhotoNotFound",
    "Album",
    "Photo",
    "classify",
    "sanitize_filename",
    "FileStore",
    "ThumbnailGenerator",
    "JsonFileBackend",
    "MemoryBackend",
    "AlbumRegistry",
    "IngestStats",
    "UploadCoordinator",
    "UploadedFile",
    "UploadFailure",
    "IngestResult",
    "ArchiveStreamer",
    "BuiltArchive",
    "GalleryConfig",
    "GalleryServices",
]
