"""Tests for the grouping module.

These tests document how the chronological point sequence is split into
per-day albums and how albums can be named after places.
"""

from datetime import datetime, timedelta, timezone
from unittest.mock import Mock

import pytest
from geopy.exc import GeocoderTimedOut

from photo_timeline.grouping import DayLocationResolver, TemporalGrouper, format_day_key
from photo_timeline.types import DayAlbum, GeotaggedPhoto
from conftest import make_photo


def flatten(albums):
    return [photo for album in albums for photo in album.photos]


class TestTemporalGrouper:
    """Test suite for TemporalGrouper."""

    def setup_method(self):
        self.mock_logger = Mock()
        self.grouper = TemporalGrouper(self.mock_logger)

    @pytest.mark.unit
    def test_local_midnight_splits_days(self):
        """09:00 and 23:50 on one day, 00:10 the next: two albums."""
        points = [
            make_photo("a.jpg", "2024-06-01T09:00"),
            make_photo("b.jpg", "2024-06-01T23:50"),
            make_photo("c.jpg", "2024-06-02T00:10"),
        ]

        albums = self.grouper.group(points)

        assert [a.day_key for a in albums] == ["2024-06-01", "2024-06-02"]
        assert [len(a.photos) for a in albums] == [2, 1]

    @pytest.mark.unit
    def test_concatenation_reproduces_input(self, trip_points):
        albums = self.grouper.group(trip_points)

        assert flatten(albums) == trip_points

    @pytest.mark.unit
    def test_grouping_is_idempotent(self, trip_points):
        albums = self.grouper.group(trip_points)

        assert self.grouper.group(flatten(albums)) == albums

    @pytest.mark.unit
    def test_albums_ordered_by_day_key(self, trip_points):
        keys = [a.day_key for a in self.grouper.group(trip_points)]

        assert keys == sorted(keys)

    @pytest.mark.unit
    def test_order_within_day_is_preserved(self):
        """Photos keep the input order inside a day; the grouper never re-sorts them."""
        later = make_photo("later.jpg", "2024-06-01T18:00")
        earlier = make_photo("earlier.jpg", "2024-06-01T08:00")

        albums = self.grouper.group([later, earlier])

        assert albums[0].photos == [later, earlier]

    @pytest.mark.unit
    def test_empty_input(self):
        assert self.grouper.group([]) == []

    @pytest.mark.unit
    def test_explicit_time_zone(self):
        """The day boundary follows the viewer's zone, not UTC."""
        photo = GeotaggedPhoto(
            file=None,
            name="x.jpg",
            captured_at=datetime(2024, 6, 1, 22, 30, tzinfo=timezone.utc),
            coordinate=(0.0, 0.0),
        )
        tokyo = timezone(timedelta(hours=9))

        assert TemporalGrouper(self.mock_logger, tz=timezone.utc).group([photo])[0].day_key == "2024-06-01"
        assert TemporalGrouper(self.mock_logger, tz=tokyo).group([photo])[0].day_key == "2024-06-02"

    @pytest.mark.unit
    def test_album_titles(self):
        albums = self.grouper.group([make_photo("a.jpg", "2024-06-01T09:00")])

        assert albums[0].title == "Saturday, June 1, 2024"

    @pytest.mark.unit
    def test_distance_per_day(self):
        """Paris to Lyon is roughly 390 km as the crow flies."""
        points = [
            make_photo("paris.jpg", "2024-06-01T09:00", 2.3522, 48.8566),
            make_photo("lyon.jpg", "2024-06-01T15:00", 4.8357, 45.7640),
            make_photo("lyon2.jpg", "2024-06-02T10:00", 4.8357, 45.7640),
        ]

        albums = self.grouper.group(points)

        assert 380 < albums[0].distance_km < 400
        assert albums[1].distance_km == 0.0


class TestFormatDayKey:
    """Test suite for format_day_key."""

    @pytest.mark.unit
    def test_local_day_key(self):
        assert format_day_key(datetime(2024, 6, 1, 23, 59).astimezone()) == "2024-06-01"

    @pytest.mark.unit
    def test_zero_padding(self):
        assert format_day_key(datetime(2024, 1, 2, 12, tzinfo=timezone.utc), timezone.utc) == "2024-01-02"


class TestDayLocationResolver:
    """Test suite for reverse geocoding day albums."""

    def setup_method(self):
        self.mock_logger = Mock()

    @pytest.mark.unit
    def test_annotates_with_first_photo_place(self, mock_geocoder):
        resolver = DayLocationResolver(self.mock_logger, geolocator=mock_geocoder)
        album = DayAlbum("2024-06-01", [make_photo("a.jpg", "2024-06-01T09:00", 2.35, 48.85)])

        resolver.annotate([album])

        assert album.location == "Paris"
        args, kwargs = mock_geocoder.reverse.call_args
        assert args[0] == (48.85, 2.35)
        assert "timeout" in kwargs

    @pytest.mark.unit
    def test_falls_back_through_address_components(self, mock_geocoder):
        mock_geocoder.reverse.return_value.raw = {"address": {"village": "Giverny", "state": "Normandy"}}
        resolver = DayLocationResolver(self.mock_logger, geolocator=mock_geocoder)

        assert resolver.resolve(make_photo("a.jpg", "2024-06-01T09:00")) == "Giverny"

    @pytest.mark.unit
    def test_geocoder_failure_leaves_location_unset(self, mock_geocoder):
        mock_geocoder.reverse.side_effect = GeocoderTimedOut("slow")
        resolver = DayLocationResolver(self.mock_logger, geolocator=mock_geocoder)
        album = DayAlbum("2024-06-01", [make_photo("a.jpg", "2024-06-01T09:00")])

        resolver.annotate([album])

        assert album.location is None
        self.mock_logger.warning.assert_called_once()

    @pytest.mark.unit
    def test_no_address(self, mock_geocoder):
        mock_geocoder.reverse.return_value = None
        resolver = DayLocationResolver(self.mock_logger, geolocator=mock_geocoder)

        assert resolver.resolve(make_photo("a.jpg", "2024-06-01T09:00")) is None
