"""
GalleryConfig - Storage and processing configuration for the gallery core.
"""

import os
from dataclasses import dataclass, field
from typing import List, Optional

from .upload_coordinator import ALLOWED_CONTENT_TYPES, DEFAULT_MAX_FILE_SIZE


@dataclass
class GalleryConfig:
    """
    Configuration for storage roots, upload limits, thumbnails and archives.

    Attributes:
        base_dir: Parent directory of the default locations below
        storage_dir: Root of the <album_id>/<tier>/ photo tree
        thumb_dir: Root of the <album_id>/ thumbnail tree
        registry_file: JSON file holding the album registry
        tmp_dir: Directory for archives under construction
        max_file_size: Upload size ceiling in bytes
        allowed_types: Accepted MIME types
        thumbnail_size: Edge length of square thumbnails
        thumbnail_quality: JPEG quality of thumbnails
        archive_chunk_size: Bytes per streamed archive chunk
        archive_compression: 'deflated' or 'stored'
    """
    base_dir: str = './data'
    storage_dir: Optional[str] = None
    thumb_dir: Optional[str] = None
    registry_file: Optional[str] = None
    tmp_dir: Optional[str] = None
    max_file_size: int = DEFAULT_MAX_FILE_SIZE
    allowed_types: List[str] = field(default_factory=lambda: list(ALLOWED_CONTENT_TYPES))
    thumbnail_size: int = 400
    thumbnail_quality: int = 80
    archive_chunk_size: int = 64 * 1024
    archive_compression: str = 'deflated'

    def __post_init__(self):
        self.storage_dir = self.storage_dir or os.path.join(self.base_dir, 'albums')
        self.thumb_dir = self.thumb_dir or os.path.join(self.base_dir, 'thumbnails')
        self.registry_file = self.registry_file or os.path.join(self.base_dir, 'albums.json')
        self.tmp_dir = self.tmp_dir or os.path.join(self.base_dir, 'tmp')

    @classmethod
    def from_env(cls) -> 'GalleryConfig':
        """Build configuration from GALLERY_* environment variables."""
        allowed = os.getenv('GALLERY_ALLOWED_TYPES')
        return cls(
            base_dir=os.getenv('GALLERY_BASE_DIR', './data'),
            storage_dir=os.getenv('GALLERY_STORAGE_DIR'),
            thumb_dir=os.getenv('GALLERY_THUMB_DIR'),
            registry_file=os.getenv('GALLERY_REGISTRY_FILE'),
            tmp_dir=os.getenv('GALLERY_TMP_DIR'),
            max_file_size=int(os.getenv('GALLERY_MAX_FILE_SIZE', str(DEFAULT_MAX_FILE_SIZE))),
            allowed_types=(
                [t.strip() for t in allowed.split(',') if t.strip()]
                if allowed else list(ALLOWED_CONTENT_TYPES)
            ),
            thumbnail_size=int(os.getenv('GALLERY_THUMBNAIL_SIZE', '400')),
            thumbnail_quality=int(os.getenv('GALLERY_THUMBNAIL_QUALITY', '80')),
            archive_chunk_size=int(os.getenv('GALLERY_ARCHIVE_CHUNK_SIZE', str(64 * 1024))),
            archive_compression=os.getenv('GALLERY_ARCHIVE_COMPRESSION', 'deflated'),
        )

    def validate(self) -> List[str]:
        """Return a list of configuration errors (empty when valid)."""
        errors = []
        if self.max_file_size <= 0:
            errors.append("GALLERY_MAX_FILE_SIZE must be positive")
        if self.thumbnail_size <= 0:
            errors.append("GALLERY_THUMBNAIL_SIZE must be positive")
        if not 1 <= self.thumbnail_quality <= 95:
            errors.append("GALLERY_THUMBNAIL_QUALITY must be between 1 and 95")
        if self.archive_chunk_size <= 0:
            errors.append("GALLERY_ARCHIVE_CHUNK_SIZE must be positive")
        if self.archive_compression not in ('deflated', 'stored'):
            errors.append("GALLERY_ARCHIVE_COMPRESSION must be 'deflated' or 'stored'")
        unknown = set(self.allowed_types) - set(ALLOWED_CONTENT_TYPES)
        if unknown:
            errors.append(f"GALLERY_ALLOWED_TYPES has unsupported types: {sorted(unknown)}")
        return errors
