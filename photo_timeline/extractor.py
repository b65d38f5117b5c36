"""Geotemporal metadata extraction for a batch of photo files."""

import asyncio
import logging
import math
from pathlib import Path
from typing import Any, Iterable, Mapping, Protocol

from .constants import Constants
from .exceptions import MetadataReadError
from .types import ExtractionConfig, GeotaggedPhoto, ParseResult, SkippedFile, SkipReason
from .utils import DateParser


class MetadataReader(Protocol):
    """Anything that maps an image file to its metadata tags."""

    def read(self, path: str | Path) -> Mapping[str, Any]: ...


class MetadataExtractor:
    """Turns raw photo files into geotagged records or skip records."""

    def __init__(
        self,
        reader: MetadataReader,
        logger: logging.Logger,
        config: ExtractionConfig | None = None,
    ):
        self.reader = reader
        self.logger = logger
        self.config = config or ExtractionConfig()
        self.date_parser = DateParser()

    async def parse_files(self, files: Iterable[str | Path]) -> ParseResult:
        """
        Extract every file of a batch concurrently.

        Results are collected in completion order and then sorted, so the returned
        points are ascending by capture time (ties keep submission order) and the
        skipped list follows submission order, whatever order the reads finish in.
        """
        paths = [Path(f) for f in files]
        semaphore = asyncio.Semaphore(max(1, self.config.max_concurrency))

        async def run(index: int, path: Path):
            async with semaphore:
                return index, await asyncio.to_thread(self.extract_file, path)

        accepted: list[tuple[int, GeotaggedPhoto]] = []
        skipped: list[tuple[int, SkippedFile]] = []
        for job in asyncio.as_completed([run(i, p) for i, p in enumerate(paths)]):
            index, outcome = await job
            if isinstance(outcome, GeotaggedPhoto):
                accepted.append((index, outcome))
            else:
                skipped.append((index, outcome))

        accepted.sort(key=lambda item: (item[1].captured_at, item[0]))
        skipped.sort(key=lambda item: item[0])

        self.logger.info(f"Extracted {len(accepted)} geotagged photos, skipped {len(skipped)} of {len(paths)} files")
        return ParseResult(
            points=[photo for _, photo in accepted],
            skipped=[skip for _, skip in skipped],
        )

    def extract_file(self, path: Path) -> GeotaggedPhoto | SkippedFile:
        """Read one file and build its record."""
        try:
            tags = self.reader.read(path)
        except (MetadataReadError, OSError) as e:
            self.logger.info(f"Skipping {path.name}: {e}")
            return SkippedFile(file=path, reason=SkipReason.READ_FAILED)
        except Exception as e:  # pylint: disable=broad-exception-caught
            self.logger.warning(f"Unexpected error reading {path.name}: {e}")
            return SkippedFile(file=path, reason=SkipReason.READ_FAILED)
        return self.build_record(path, tags or {})

    def build_record(self, path: Path, tags: Mapping[str, Any]) -> GeotaggedPhoto | SkippedFile:
        """Validate a tag mapping; both a coordinate and a timestamp are required."""
        coordinate = self._get_coordinate(tags)
        raw_timestamp = self._first_timestamp(tags)

        if coordinate is None or raw_timestamp is None:
            self.logger.debug(f"Skipping {path.name}: missing GPS or timestamp")
            return SkippedFile(file=path, reason=SkipReason.MISSING_DATA)

        try:
            captured_at = self.date_parser.parse_timestamp(raw_timestamp)
        except (ValueError, OverflowError, OSError) as e:
            self.logger.debug(f"Skipping {path.name}: invalid timestamp {raw_timestamp!r} ({e})")
            return SkippedFile(file=path, reason=SkipReason.INVALID_TIMESTAMP)

        return GeotaggedPhoto(
            file=path,
            name=path.name,
            captured_at=captured_at,
            coordinate=coordinate,
        )

    def _first_timestamp(self, tags: Mapping[str, Any]):
        for field_name in Constants.TIMESTAMP_FIELDS:
            value = tags.get(field_name)
            if value:
                return value
        return None

    def _get_coordinate(self, tags: Mapping[str, Any]) -> tuple[float, float] | None:
        """Return (longitude, latitude) when both are finite numbers in range."""
        latitude = tags.get("latitude", tags.get("GPSLatitude"))
        longitude = tags.get("longitude", tags.get("GPSLongitude"))
        if not self._is_number(latitude) or not self._is_number(longitude):
            return None

        try:
            latitude = float(latitude)
            longitude = float(longitude)
        except OverflowError:
            return None
        if not (math.isfinite(latitude) and math.isfinite(longitude)):
            return None
        if not (-90.0 <= latitude <= 90.0 and -180.0 <= longitude <= 180.0):
            return None
        return longitude, latitude

    @staticmethod
    def _is_number(value) -> bool:
        return isinstance(value, (int, float)) and not isinstance(value, bool)
