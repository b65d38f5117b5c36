"""Pytest configuration and shared fixtures for photo_timeline tests."""

import tempfile
import time
from datetime import datetime
from pathlib import Path
from unittest.mock import Mock

import pytest

from photo_timeline.exceptions import MetadataReadError
from photo_timeline.types import GeotaggedPhoto, PreviewHandle, TimelineEntry


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests of a single component")
    config.addinivalue_line("markers", "integration: tests spanning several components")


# =============================================================================
# Test Utilities
# =============================================================================

def make_photo(name: str, local_time: str, longitude: float = 2.35, latitude: float = 48.85) -> GeotaggedPhoto:
    """Build a GeotaggedPhoto captured at a naive local ISO time."""
    return GeotaggedPhoto(
        file=Path("/photos") / name,
        name=name,
        captured_at=datetime.fromisoformat(local_time).astimezone(),
        coordinate=(longitude, latitude),
    )


def make_entries(count: int, with_previews: bool = False) -> list[TimelineEntry]:
    """Build `count` timeline entries one hour apart along a line."""
    entries = []
    for i in range(count):
        photo = make_photo(f"p{i}.jpg", f"2024-06-01T{8 + i:02d}:00", 2.0 + i * 0.01, 48.0 + i * 0.01)
        preview = PreviewHandle(uri=f"file:///photos/p{i}.jpg") if with_previews else None
        entries.append(TimelineEntry(photo=photo, preview=preview))
    return entries


class FakeReader:
    """Metadata reader serving canned tag mappings keyed by file name."""

    def __init__(self, tags_by_name: dict, delays: dict | None = None):
        self.tags_by_name = tags_by_name
        self.delays = delays or {}
        self.calls: list[str] = []

    def read(self, path):
        name = Path(path).name
        self.calls.append(name)
        if name in self.delays:
            time.sleep(self.delays[name])
        tags = self.tags_by_name.get(name)
        if isinstance(tags, Exception):
            raise tags
        return tags or {}


def gps_tags(timestamp: str, latitude: float = 48.85, longitude: float = 2.35) -> dict:
    """Tag mapping as produced by ExifMetadataReader."""
    return {"DateTimeOriginal": timestamp, "latitude": latitude, "longitude": longitude}


# =============================================================================
# Fixtures
# =============================================================================

@pytest.fixture
def temp_dir():
    """Temporary directory for test outputs."""
    with tempfile.TemporaryDirectory() as tmp_dir:
        yield Path(tmp_dir)


@pytest.fixture
def mock_logger():
    """Mock logger for testing."""
    logger = Mock()
    logger.info = Mock()
    logger.warning = Mock()
    logger.error = Mock()
    logger.debug = Mock()
    return logger


@pytest.fixture
def trip_points():
    """Five photos over two local days, already in chronological order."""
    return [
        make_photo("a.jpg", "2024-06-01T09:00", 2.35, 48.85),
        make_photo("b.jpg", "2024-06-01T12:30", 2.29, 48.86),
        make_photo("c.jpg", "2024-06-01T23:50", 2.30, 48.87),
        make_photo("d.jpg", "2024-06-02T00:10", 2.31, 48.88),
        make_photo("e.jpg", "2024-06-02T15:00", 4.83, 45.76),
    ]


@pytest.fixture
def batch_reader():
    """Reader for a five-file batch where two files have no GPS tags."""
    return FakeReader({
        "1.jpg": gps_tags("2024:06:01 18:00:00"),
        "2.jpg": {"DateTimeOriginal": "2024:06:01 10:00:00"},
        "3.jpg": gps_tags("2024:06:01 09:00:00"),
        "4.jpg": {"CreateDate": "2024:06:02 08:00:00"},
        "5.jpg": gps_tags("2024:06:02 07:30:00"),
        "broken.jpg": MetadataReadError("not a JPEG"),
    })


@pytest.fixture
def mock_geocoder():
    """Mock geocoder for testing reverse geocoding of day albums."""
    geocoder = Mock()

    mock_reverse = Mock()
    mock_reverse.address = "Paris, Ile-de-France, France"
    mock_reverse.raw = {
        'address': {
            'city': 'Paris',
            'state': 'Ile-de-France',
            'country': 'France'
        }
    }
    geocoder.reverse.return_value = mock_reverse

    return geocoder
