"""
Photo Timeline - builds a day-by-day map timeline from geotagged photos.

This package provides functionality to:
- Extract capture time and GPS position from a batch of photos
- Group the photos into albums per local calendar day
- Keep a map surface (track, photo markers, camera) in step with the timeline
  and the selected photo
- Export the map overlay to KML and the timeline to CSV
"""

__version__ = "1.0.0"

from .main import main

__all__ = ["main"]
