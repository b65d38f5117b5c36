"""Preview handles for photos shown as map markers."""

import logging
from typing import Iterable

from .types import GeotaggedPhoto, PreviewHandle, TimelineEntry
from .utils import PathNormalizer


class PreviewRegistry:
    """Creates preview handles and tracks which ones are still outstanding."""

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.path_normalizer = PathNormalizer()
        self._outstanding: list[PreviewHandle] = []

    @property
    def outstanding(self) -> int:
        return len(self._outstanding)

    def create(self, photo: GeotaggedPhoto) -> PreviewHandle:
        handle = PreviewHandle(uri=self.path_normalizer.to_file_uri(photo.file))
        self._outstanding.append(handle)
        return handle

    def build_entries(self, points: Iterable[GeotaggedPhoto]) -> list[TimelineEntry]:
        """Pair every point with a freshly created preview."""
        return [TimelineEntry(photo=photo, preview=self.create(photo)) for photo in points]

    def release(self, handle: PreviewHandle) -> None:
        if handle.released:
            self.logger.warning(f"Preview already released: {handle.uri}")
            return
        handle.released = True
        self._outstanding = [h for h in self._outstanding if h is not handle]

    def release_entries(self, entries: Iterable[TimelineEntry]) -> None:
        for entry in entries:
            if entry.preview is not None:
                self.release(entry.preview)
