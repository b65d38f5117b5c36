"""Image metadata reading for the extraction pipeline."""

import logging
from pathlib import Path
from typing import Any

try:
    from exif import Image
except ImportError:
    Image = None

from .exceptions import MetadataReadError

# Canonical tag name -> attribute exposed by the exif library
TIMESTAMP_ATTRIBUTES = (
    ("DateTimeOriginal", "datetime_original"),
    ("CreateDate", "datetime_digitized"),
    ("ModifyDate", "datetime"),
    ("OffsetTimeOriginal", "offset_time_original"),
)


class ExifMetadataReader:
    """Reads GPS and timestamp tags from JPEG files into a plain mapping."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger

        if not Image:
            raise ImportError("exif library is required for metadata reading. Install with: pip install exif")

    def read(self, path: str | Path) -> dict[str, Any]:
        """
        Read the metadata container of a single image.

        Args:
            path: Path of the image file

        Returns:
            Mapping of tag name to value. Missing tags are simply absent; an image
            without an EXIF block yields an empty mapping.

        Raises:
            MetadataReadError: If the file or its metadata container cannot be read.
        """
        try:
            with open(path, "rb") as img_file:
                image = Image(img_file)
        except (OSError, MemoryError) as e:
            raise MetadataReadError(f"Error reading {path}: {e}") from e
        except Exception as e:  # pylint: disable=broad-exception-caught
            raise MetadataReadError(f"Corrupt metadata in {path}: {e}") from e

        if not image.has_exif:
            self.logger.debug(f"No EXIF block in {path}")
            return {}

        tags: dict[str, Any] = {}
        for tag_name, attribute in TIMESTAMP_ATTRIBUTES:
            value = self._get(image, attribute)
            if value:
                tags[tag_name] = value

        latitude, longitude = self._get_decimal_coords(image)
        if latitude is not None and longitude is not None:
            tags["latitude"] = latitude
            tags["longitude"] = longitude
        return tags

    def _get(self, image, attribute: str):
        """Return a tag value or None when absent or undecodable."""
        try:
            return image.get(attribute)
        except (AttributeError, KeyError, ValueError, TypeError, NotImplementedError) as e:
            self.logger.debug(f"Could not decode {attribute}: {e}")
            return None

    def _get_decimal_coords(self, image) -> tuple[float | None, float | None]:
        """
        Extract and convert GPS coordinates from an image to decimal degrees format.

        Returns:
            Tuple containing (latitude, longitude) in decimal degrees format
        """
        lat_deg_dec = None
        long_deg_dec = None

        decimal_latitude = self._convert_dhms_to_decimal(self._get(image, "gps_latitude"))
        if decimal_latitude is not None:
            lat_ref = self._get(image, "gps_latitude_ref") or "N"
            lat_deg_dec = -decimal_latitude if lat_ref.upper().startswith("S") else decimal_latitude

        decimal_longitude = self._convert_dhms_to_decimal(self._get(image, "gps_longitude"))
        if decimal_longitude is not None:
            lon_ref = self._get(image, "gps_longitude_ref") or "E"
            long_deg_dec = -decimal_longitude if lon_ref.upper().startswith("W") else decimal_longitude

        return lat_deg_dec, long_deg_dec

    @staticmethod
    def _convert_dhms_to_decimal(dhms) -> float | None:
        """
        Convert degrees, minutes, seconds (DMS) format to decimal degrees.

        Args:
            dhms: A sequence containing [degrees, minutes, seconds] values

        Returns:
            The decimal degree equivalent of the DMS values, or None if invalid
        """
        if not dhms or len(dhms) < 3:
            return None

        try:
            degrees = float(dhms[0])
            minutes = float(dhms[1]) / 60
            seconds = float(dhms[2]) / 3600
        except (TypeError, ValueError):
            return None
        return degrees + minutes + seconds
