"""Export functionality for timeline reports and map overlays."""

import csv
import logging
from pathlib import Path

from .exceptions import FileOperationError
from .surface import KMLSurface
from .types import DayAlbum, SkippedFile
from .utils import PathNormalizer


class ExportManager:
    """Base class for export functionality."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.path_normalizer = PathNormalizer()


class CSVExporter(ExportManager):
    """Handles CSV export of the day timeline and of skipped files."""

    TIMELINE_FIELDS = ["day_key", "index", "filename", "path", "captured_at", "latitude", "longitude"]
    SKIPPED_FIELDS = ["filename", "path", "reason"]

    def export_timeline(self, days: list[DayAlbum], csv_path: str | Path) -> bool:
        """Write one row per photo, in timeline order. Returns False if there is nothing to write."""
        if not days:
            self.logger.info("No geotagged photos to export.")
            return False

        rows = []
        index = 0
        for album in days:
            for photo in album.photos:
                index += 1
                rows.append({
                    "day_key": album.day_key,
                    "index": index,
                    "filename": photo.name,
                    "path": str(photo.file),
                    "captured_at": photo.captured_at.isoformat(),
                    "latitude": photo.latitude,
                    "longitude": photo.longitude,
                })

        self._write(csv_path, self.TIMELINE_FIELDS, rows)
        self.logger.info(f"Exported {len(rows)} timeline rows to {csv_path}")
        return True

    def export_skipped(self, skipped: list[SkippedFile], csv_path: str | Path) -> bool:
        """Write the skipped files with their reasons. Returns False if none were skipped."""
        if not skipped:
            return False

        rows = [
            {"filename": item.file.name, "path": str(item.file), "reason": item.reason.value}
            for item in skipped
        ]
        self._write(csv_path, self.SKIPPED_FIELDS, rows)
        self.logger.info(f"Exported {len(rows)} skipped files to {csv_path}")
        return True

    def _write(self, csv_path: str | Path, fieldnames: list[str], rows: list[dict]) -> None:
        try:
            with open(csv_path, "w", newline="", encoding="utf-8") as csvfile:
                writer = csv.DictWriter(csvfile, fieldnames=fieldnames)
                writer.writeheader()
                writer.writerows(rows)
        except (OSError, IOError) as e:
            raise FileOperationError(f"Error writing CSV file {csv_path}: {e}") from e


class KMLExporter(ExportManager):
    """Writes the overlay of a KML surface to disk."""

    def export_surface(self, surface: KMLSurface, kml_path: str | Path, name: str = "Photo Timeline") -> Path:
        kml_content = surface.render(name)
        path = Path(kml_path)
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(kml_content)
        except (OSError, IOError) as e:
            raise FileOperationError(f"Error writing KML file {path}: {e}") from e

        self.logger.info(f"KML file created: {path}")
        return path
