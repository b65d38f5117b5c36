"""Custom exceptions for the photo timeline application."""


class PhotoTimelineError(Exception):
    """Base exception for photo timeline operations."""
    pass


class ConfigurationError(PhotoTimelineError):
    """Raised when there are configuration-related errors."""
    pass


class MetadataReadError(PhotoTimelineError):
    """Raised when an image's metadata container cannot be read."""
    pass


class SurfaceError(PhotoTimelineError):
    """Raised when the map surface is used outside its lifecycle."""
    pass


class FileOperationError(PhotoTimelineError):
    """Raised when file operations fail."""
    pass
