"""
AlbumRecord - Album and Photo records as stored in the album registry.
"""

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Dict, List, Optional

TIERS = ('light', 'max')


def new_id() -> str:
    """Return a new opaque identifier for an album or photo."""
    return str(uuid.uuid4())


def now_iso() -> str:
    return datetime.now().isoformat(timespec='seconds')


@dataclass(frozen=True)
class Photo:
    """
    One accepted upload.

    Attributes:
        id: Opaque photo identifier
        original_filename: Filename (or relative path) as uploaded
        tier: 'light' or 'max'
        stored_path: Path relative to the storage root, '/' separated
        width: Pixel width
        height: Pixel height
        thumbnail_path: Path relative to the thumbnail root
        size: Stored size in bytes
        content_type: Detected MIME type
        uploaded_at: ISO timestamp
    """
    id: str
    original_filename: str
    tier: str
    stored_path: str
    width: int
    height: int
    thumbnail_path: str
    size: int = 0
    content_type: str = ''
    uploaded_at: str = field(default_factory=now_iso)

    @property
    def filename(self) -> str:
        """Final component of the stored path."""
        return self.stored_path.rsplit('/', 1)[-1]

    def to_dict(self) -> dict:
        """Convert to the camelCase form used on disk and over HTTP."""
        return {
            'id': self.id,
            'originalFilename': self.original_filename,
            'tier': self.tier,
            'storedPath': self.stored_path,
            'width': self.width,
            'height': self.height,
            'thumbnailPath': self.thumbnail_path,
            'size': self.size,
            'contentType': self.content_type,
            'uploadedAt': self.uploaded_at,
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Photo':
        return cls(
            id=data['id'],
            original_filename=data.get('originalFilename', ''),
            tier=data['tier'],
            stored_path=data['storedPath'],
            width=int(data.get('width', 0)),
            height=int(data.get('height', 0)),
            thumbnail_path=data.get('thumbnailPath', ''),
            size=int(data.get('size', 0)),
            content_type=data.get('contentType', ''),
            uploaded_at=data.get('uploadedAt', ''),
        )


@dataclass
class Album:
    """
    A named, ordered collection of photos.

    Attributes:
        id: Stable album identifier
        name: Display name (not unique)
        photos: Photos in insertion order
        created_at: ISO timestamp of the first accepted photo
    """
    id: str
    name: str
    photos: List[Photo] = field(default_factory=list)
    created_at: str = field(default_factory=now_iso)

    @property
    def photo_count(self) -> int:
        return len(self.photos)

    @property
    def total_bytes(self) -> int:
        return sum(p.size for p in self.photos)

    def photos_in_tier(self, tier: str) -> List[Photo]:
        """Photos of one tier, in insertion order."""
        return [p for p in self.photos if p.tier == tier]

    def tier_counts(self) -> Dict[str, int]:
        return {tier: len(self.photos_in_tier(tier)) for tier in TIERS}

    def to_dict(self) -> dict:
        return {
            'id': self.id,
            'name': self.name,
            'createdAt': self.created_at,
            'photos': [p.to_dict() for p in self.photos],
        }

    @classmethod
    def from_dict(cls, data: dict) -> 'Album':
        return cls(
            id=data['id'],
            name=data.get('name', ''),
            photos=[Photo.from_dict(p) for p in data.get('photos', [])],
            created_at=data.get('createdAt', ''),
        )

    def format_status(self) -> str:
        """
        Format a one-line human-readable summary.

        Returns:
            Status string like "Wedding (3f2a...) - 12 light, 12 max (48.1 MB)"
        """
        counts = self.tier_counts()
        size_str = self._format_bytes(self.total_bytes)
        return (
            f"{self.name} ({self.id}) - {counts['light']} light, "
            f"{counts['max']} max ({size_str})"
        )

    @staticmethod
    def _format_bytes(bytes_val: Optional[int]) -> str:
        """Format bytes as human-readable string."""
        if bytes_val is None:
            return "unknown"
        for unit in ['B', 'KB', 'MB', 'GB']:
            if bytes_val < 1024:
                return f"{bytes_val:.1f} {unit}"
            bytes_val /= 1024
        return f"{bytes_val:.1f} TB"
