"""Tests for the types module.

These tests document the data records passed between the pipeline stages.
"""

from dataclasses import FrozenInstanceError
from datetime import date
from pathlib import Path

import pytest

from photo_timeline.types import (
    ApplicationConfig, DayAlbum, MapConfig, ParseResult, PreviewHandle,
    SkippedFile, SkipReason, TimelineEntry,
)
from conftest import make_photo


class TestGeotaggedPhoto:
    """Test suite for GeotaggedPhoto."""

    @pytest.mark.unit
    def test_coordinate_is_longitude_first(self):
        photo = make_photo("a.jpg", "2024-06-01T09:00", longitude=2.35, latitude=48.85)

        assert photo.coordinate == (2.35, 48.85)
        assert photo.longitude == 2.35
        assert photo.latitude == 48.85

    @pytest.mark.unit
    def test_photo_is_immutable(self):
        photo = make_photo("a.jpg", "2024-06-01T09:00")

        with pytest.raises(FrozenInstanceError):
            photo.name = "b.jpg"

    @pytest.mark.unit
    def test_captured_at_is_timezone_aware(self):
        photo = make_photo("a.jpg", "2024-06-01T09:00")

        assert photo.captured_at.tzinfo is not None


class TestSkipReason:
    """Test suite for the closed set of skip reasons."""

    @pytest.mark.unit
    def test_reason_texts(self):
        assert SkipReason.READ_FAILED == "failed to read metadata"
        assert SkipReason.MISSING_DATA == "missing GPS or timestamp"
        assert SkipReason.INVALID_TIMESTAMP == "invalid timestamp"
        assert len(SkipReason) == 3

    @pytest.mark.unit
    def test_skipped_file_keeps_original_handle(self):
        path = Path("/photos/x.jpg")
        skipped = SkippedFile(file=path, reason=SkipReason.MISSING_DATA)

        assert skipped.file is path
        assert skipped.reason.value == "missing GPS or timestamp"


class TestDayAlbum:
    """Test suite for DayAlbum."""

    @pytest.mark.unit
    def test_title_is_derived_from_day_key(self):
        album = DayAlbum(day_key="2024-06-01")

        assert album.day == date(2024, 6, 1)
        assert album.title == "Saturday, June 1, 2024"

    @pytest.mark.unit
    def test_title_field_order_is_fixed(self):
        """Weekday, month name, unpadded day, year; only the names are localized."""
        album = DayAlbum(day_key="2023-12-09")

        weekday, rest = album.title.split(", ", 1)
        assert weekday == f"{date(2023, 12, 9):%A}"
        assert rest == f"{date(2023, 12, 9):%B} 9, 2023"

    @pytest.mark.unit
    def test_albums_compare_by_content(self):
        photo = make_photo("a.jpg", "2024-06-01T09:00")

        assert DayAlbum("2024-06-01", [photo]) == DayAlbum("2024-06-01", [photo])
        assert DayAlbum("2024-06-01", [photo]) != DayAlbum("2024-06-02", [photo])


class TestContainers:
    """Test suite for the remaining records and configuration defaults."""

    @pytest.mark.unit
    def test_parse_result_defaults_to_empty(self):
        result = ParseResult()

        assert result.points == []
        assert result.skipped == []

    @pytest.mark.unit
    def test_timeline_entry_pairs_photo_with_preview(self):
        photo = make_photo("a.jpg", "2024-06-01T09:00")
        preview = PreviewHandle(uri="file:///photos/a.jpg")
        entry = TimelineEntry(photo=photo, preview=preview)

        assert entry.photo is photo
        assert entry.preview is preview
        assert TimelineEntry(photo=photo).preview is None

    @pytest.mark.unit
    def test_application_config_defaults(self):
        config = ApplicationConfig()

        assert config.directory.recursive is True
        assert config.extraction.max_concurrency >= 1
        assert config.map == MapConfig()
        assert config.map.padding == 80
        assert config.map.duration_ms == 600
        assert config.output.geocode_days is False
