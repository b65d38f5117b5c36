"""Shared selection state for the day list and the map."""

import logging
from typing import Callable

from .types import DayAlbum

SelectionListener = Callable[["SelectionState"], None]


class SelectionState:
    """
    Active day and active point, kept consistent with each other.

    The point index refers to the flattened chronological point sequence, which is
    the concatenation of the albums' photos. Selecting a day moves the active point
    to that day's first photo; selecting a point moves the active day to the album
    containing it. Listeners are called after every change.
    """

    def __init__(self, logger: logging.Logger):
        self.logger = logger
        self.active_day_index: int | None = None
        self.active_point_index: int | None = None
        self._day_starts: list[int] = []
        self._day_of_point: list[int] = []
        self._listeners: list[SelectionListener] = []

    @property
    def point_count(self) -> int:
        return len(self._day_of_point)

    def reset(self, days: list[DayAlbum]) -> None:
        """Rebind to a new album list and select the first photo, if any."""
        self._day_starts = []
        self._day_of_point = []
        for day_index, album in enumerate(days):
            self._day_starts.append(len(self._day_of_point))
            self._day_of_point.extend([day_index] * len(album.photos))

        if self._day_of_point:
            self._set(0, 0)
        else:
            self._set(None, None)

    def select_day(self, index: int) -> bool:
        """Activate a day album; returns False when the index is out of range."""
        if not 0 <= index < len(self._day_starts):
            self.logger.debug(f"Ignoring selection of unknown day {index}")
            return False

        start = self._day_starts[index]
        has_photos = start < len(self._day_of_point) and self._day_of_point[start] == index
        self._set(index, start if has_photos else None)
        return True

    def select_point(self, index: int) -> bool:
        """Activate a point; returns False when the index is out of range."""
        if not 0 <= index < len(self._day_of_point):
            self.logger.debug(f"Ignoring selection of unknown point {index}")
            return False

        self._set(self._day_of_point[index], index)
        return True

    def step(self, offset: int) -> bool:
        """Move the active point by `offset`, clamped to the first and last point."""
        if not self._day_of_point:
            return False
        current = self.active_point_index or 0
        target = min(max(current + offset, 0), len(self._day_of_point) - 1)
        return self.select_point(target)

    def subscribe(self, listener: SelectionListener) -> Callable[[], None]:
        """Register a change listener; returns a function that removes it."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set(self, day_index: int | None, point_index: int | None) -> None:
        if (day_index, point_index) == (self.active_day_index, self.active_point_index):
            return
        self.active_day_index = day_index
        self.active_point_index = point_index
        for listener in list(self._listeners):
            listener(self)
