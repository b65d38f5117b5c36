"""Partitioning of the chronological point sequence into day albums."""

import logging
from datetime import datetime, tzinfo
from typing import Iterable

from geopy.distance import distance
from geopy.exc import GeocoderServiceError, GeocoderTimedOut
from geopy.geocoders import Nominatim

from .constants import Constants
from .types import DayAlbum, GeotaggedPhoto


def format_day_key(captured_at: datetime, tz: tzinfo | None = None) -> str:
    """Return the YYYY-MM-DD calendar day of `captured_at` in `tz` (local time by default)."""
    return captured_at.astimezone(tz).strftime("%Y-%m-%d")


class TemporalGrouper:
    """Groups sorted photos into per-calendar-day albums."""

    def __init__(self, logger: logging.Logger, tz: tzinfo | None = None):
        self.logger = logger
        self.tz = tz

    def group(self, points: Iterable[GeotaggedPhoto]) -> list[DayAlbum]:
        """
        Partition a chronologically sorted point sequence into day albums.

        Albums are ordered by day key and each keeps the input order of its photos,
        so concatenating the albums reproduces the input exactly.
        """
        albums: dict[str, DayAlbum] = {}
        for photo in points:
            key = format_day_key(photo.captured_at, self.tz)
            album = albums.get(key)
            if album is None:
                album = albums[key] = DayAlbum(day_key=key)
            album.photos.append(photo)

        ordered = [albums[key] for key in sorted(albums)]
        for album in ordered:
            album.distance_km = self.track_length_km(album.photos)

        self.logger.debug(f"Grouped photos into {len(ordered)} day albums")
        return ordered

    @staticmethod
    def track_length_km(photos: list[GeotaggedPhoto]) -> float:
        """Geodesic length of the path through `photos`, in kilometers."""
        total = 0.0
        for previous, current in zip(photos, photos[1:]):
            total += distance(
                (previous.latitude, previous.longitude),
                (current.latitude, current.longitude),
            ).km
        return total


class DayLocationResolver:
    """Names day albums after the place of their first photo."""

    def __init__(self, logger: logging.Logger, geolocator=None):
        self.logger = logger
        self.geolocator = geolocator or Nominatim(user_agent=Constants.DEFAULT_USER_AGENT)

    def annotate(self, albums: list[DayAlbum]) -> None:
        """Fill in `location` for each album; lookups that fail leave it unset."""
        for album in albums:
            if album.photos:
                album.location = self.resolve(album.photos[0])

    def resolve(self, photo: GeotaggedPhoto) -> str | None:
        """Reverse geocode a photo to a city, town, village, county or state name."""
        try:
            location_info = self.geolocator.reverse(
                (photo.latitude, photo.longitude), timeout=Constants.GEOCODING_TIMEOUT_SECONDS
            )
        except (GeocoderTimedOut, GeocoderServiceError, OSError) as e:
            self.logger.warning(f"Reverse geocoding failed for {photo.name}: {e}")
            return None

        if not location_info or not location_info.raw.get("address"):
            return None

        address = location_info.raw["address"]
        for component in ["city", "town", "village", "county", "state"]:
            if component in address:
                return address[component]
        return None
