"""
Errors - Exception hierarchy shared by ingestion and archive building.
"""


class GalleryError(Exception):
    """Base class for all user-displayable gallery errors."""

    default_message = "Gallery error"

    def __init__(self, message: str = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message

    @property
    def reason(self) -> str:
        """Machine readable failure reason (the exception class name)."""
        return type(self).__name__


class ValidationFailure(GalleryError):
    """Raised when an uploaded file is rejected before being stored."""
    default_message = "File rejected"


class FileTooLarge(ValidationFailure):
    default_message = "File too large"


class UnsupportedType(ValidationFailure):
    default_message = "Unsupported content type"


class UnclassifiableTier(ValidationFailure):
    default_message = "Cannot tell whether file belongs to light or max"


class IOFailure(GalleryError):
    """Raised when a directory or file cannot be written or read."""
    default_message = "Storage write failed"


class ThumbnailFailure(GalleryError):
    default_message = "Thumbnail generation failed"


class UnsupportedFormat(ThumbnailFailure):
    default_message = "Unsupported image format for thumbnails"


class DecodeFailure(ThumbnailFailure):
    default_message = "Image data could not be decoded"


class ArchiveFailure(GalleryError):
    default_message = "Archive could not be created"


class ArchiveBuildFailure(ArchiveFailure):
    default_message = "Failed to finalize ZIP archive"


class EmptyArchive(ArchiveFailure):
    default_message = "No photos to download"


class AlbumNotFound(GalleryError):
    default_message = "Album not found"


class PhotoNotFound(GalleryError):
    default_message = "Photo not found"
