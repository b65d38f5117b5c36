"""Utility classes for the photo timeline application."""

import logging
import os
import re
from datetime import date, datetime, time
from pathlib import Path
from typing import Iterator

from .constants import Constants
from .exceptions import FileOperationError

# EXIF writes dates as 'YYYY:MM:DD HH:MM:SS'
_EXIF_DATE_PREFIX = re.compile(r"^(\d{4}):(\d{2}):(\d{2})")


class LoggingSetup:
    """Handles logging configuration."""

    @staticmethod
    def setup_logging(level: int = logging.INFO) -> logging.Logger:
        """Set up logging configuration."""
        logging.basicConfig(
            level=level,
            format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )
        return logging.getLogger("photo_timeline")


class PathNormalizer:
    """Handles path normalization across different platforms."""

    @staticmethod
    def normalize_path(path: str) -> str:
        """Normalize a file path for the current platform."""
        if not path:
            return path
        return str(Path(path).resolve())

    @staticmethod
    def to_file_uri(path: str | Path) -> str:
        """Return an absolute file:// URI for a local path."""
        return Path(path).resolve().as_uri()


class DateParser:
    """Handles timestamp parsing and validation."""

    @staticmethod
    def parse_timestamp(value) -> datetime:
        """
        Parse a metadata timestamp into a timezone-aware datetime.

        Accepts datetime/date objects, EXIF strings ('YYYY:MM:DD HH:MM:SS', optionally
        with fractional seconds and a UTC offset) and ISO-8601 strings. Values without
        an offset are interpreted in local time.

        Raises:
            ValueError: If the value does not denote a real point in time.
        """
        if isinstance(value, datetime):
            parsed = value
        elif isinstance(value, date):
            parsed = datetime.combine(value, time())
        else:
            if isinstance(value, bytes):
                value = value.decode(errors="ignore")
            if not isinstance(value, str):
                raise ValueError(f"Unsupported timestamp type: {type(value).__name__}")
            text = value.replace("\x00", "").strip()
            if not text:
                raise ValueError("Empty timestamp")
            text = _EXIF_DATE_PREFIX.sub(r"\1-\2-\3", text, count=1)
            parsed = datetime.fromisoformat(text)

        # astimezone() on a naive value assumes local time
        return parsed.astimezone()


class FileScanner:
    """Finds candidate photo files below a directory."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

    def is_jpeg_file(self, filename: str | Path) -> bool:
        """Check if a file is a JPEG image based on its file extension."""
        return Path(filename).suffix.lower() in Constants.JPEG_EXTENSIONS

    def scan(self, folder_path: str, recursive: bool = True) -> Iterator[Path]:
        """Yield JPEG files in `folder_path`, sorted by name within each directory."""
        root = Path(folder_path)
        if not root.is_dir():
            raise FileOperationError(f"Folder does not exist: {folder_path}")

        if recursive:
            for dirpath, dirnames, filenames in os.walk(root):
                dirnames.sort()
                for filename in sorted(filenames):
                    if self.is_jpeg_file(filename):
                        yield Path(dirpath) / filename
            return

        try:
            entries = sorted(root.iterdir())
        except (OSError, PermissionError) as e:
            raise FileOperationError(f"Error accessing folder: {e}") from e
        for entry in entries:
            if entry.is_file() and self.is_jpeg_file(entry.name):
                yield entry
