"""Type definitions for the photo timeline application."""

from dataclasses import dataclass, field
from datetime import date, datetime
from enum import Enum
from pathlib import Path

from .constants import Constants


class SkipReason(str, Enum):
    """Closed set of user-facing reasons a file was not accepted."""
    READ_FAILED = "failed to read metadata"
    MISSING_DATA = "missing GPS or timestamp"
    INVALID_TIMESTAMP = "invalid timestamp"


@dataclass(frozen=True)
class GeotaggedPhoto:
    """A photo with both a capture time and a GPS coordinate."""
    file: Path
    name: str
    captured_at: datetime
    coordinate: tuple[float, float]  # (longitude, latitude)

    @property
    def longitude(self) -> float:
        return self.coordinate[0]

    @property
    def latitude(self) -> float:
        return self.coordinate[1]


@dataclass(frozen=True)
class SkippedFile:
    """A file that failed extraction, with the reason shown to the user."""
    file: Path
    reason: SkipReason


@dataclass
class ParseResult:
    """Extractor output: chronologically sorted points plus skipped files."""
    points: list[GeotaggedPhoto] = field(default_factory=list)
    skipped: list[SkippedFile] = field(default_factory=list)


@dataclass
class DayAlbum:
    """All photos captured on one local calendar day."""
    day_key: str
    photos: list[GeotaggedPhoto] = field(default_factory=list)
    distance_km: float = 0.0
    location: str | None = None

    @property
    def day(self) -> date:
        return date.fromisoformat(self.day_key)

    @property
    def title(self) -> str:
        """
        Long-form label, e.g. 'Saturday, June 1, 2024'.

        Weekday and month names follow LC_TIME; the field order is always
        weekday, month, day, year.
        """
        day = self.day
        return f"{day:%A}, {day:%B} {day.day}, {day:%Y}"


@dataclass
class PreviewHandle:
    """Lightweight reference to a photo preview, released exactly once."""
    uri: str
    released: bool = False


@dataclass(frozen=True)
class TimelineEntry:
    """One point on the timeline paired with its own preview."""
    photo: GeotaggedPhoto
    preview: PreviewHandle | None = None


@dataclass
class DirectoryConfig:
    """Directory configuration parameters."""
    root: str | None = None
    recursive: bool = True


@dataclass
class ExtractionConfig:
    """Metadata extraction parameters."""
    max_concurrency: int = Constants.DEFAULT_MAX_CONCURRENCY


@dataclass
class MapConfig:
    """Map surface and camera parameters."""
    width: int = Constants.DEFAULT_VIEWPORT[0]
    height: int = Constants.DEFAULT_VIEWPORT[1]
    padding: int = Constants.FIT_PADDING
    duration_ms: int = Constants.FIT_DURATION_MS
    max_layout_attempts: int | None = Constants.MAX_LAYOUT_ATTEMPTS
    frame_interval: float = Constants.FRAME_INTERVAL_SECONDS


@dataclass
class OutputConfig:
    """Output configuration parameters."""
    kml_path: str | None = None
    csv_path: str | None = None
    geocode_days: bool = False
    verbose: bool = False


@dataclass
class ApplicationConfig:
    """Complete application configuration."""
    directory: DirectoryConfig = field(default_factory=DirectoryConfig)
    extraction: ExtractionConfig = field(default_factory=ExtractionConfig)
    map: MapConfig = field(default_factory=MapConfig)
    output: OutputConfig = field(default_factory=OutputConfig)
