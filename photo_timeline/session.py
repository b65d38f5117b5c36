"""Upload session tying extraction, grouping, selection and the map together."""

import logging
from pathlib import Path
from typing import Iterable

from .extractor import MetadataExtractor
from .grouping import DayLocationResolver, TemporalGrouper
from .previews import PreviewRegistry
from .selection import SelectionState
from .synchronizer import MapSynchronizer
from .types import DayAlbum, GeotaggedPhoto, ParseResult, TimelineEntry


class TimelineSession:
    """
    Holds everything derived from the most recent upload batch.

    `submit_files` replaces the parse result, the day albums, the selection and
    the map entries wholesale. Batches are numbered; a batch that finishes after
    a newer one was submitted is discarded, so only the latest upload is shown.
    """

    def __init__(
        self,
        extractor: MetadataExtractor,
        grouper: TemporalGrouper,
        logger: logging.Logger,
        synchronizer: MapSynchronizer | None = None,
        location_resolver: DayLocationResolver | None = None,
    ):
        self.extractor = extractor
        self.grouper = grouper
        self.logger = logger
        self.synchronizer = synchronizer
        self.location_resolver = location_resolver
        self.previews = PreviewRegistry(logger)
        self.selection = SelectionState(logger)
        self.result = ParseResult()
        self.days: list[DayAlbum] = []
        self.entries: list[TimelineEntry] = []
        self._batch = 0
        self._closed = False

        self.selection.subscribe(self._on_selection_changed)
        if self.synchronizer is not None:
            self.synchronizer.on_select = self.select_point

    @property
    def points(self) -> list[GeotaggedPhoto]:
        return self.result.points

    @property
    def active_day(self) -> DayAlbum | None:
        index = self.selection.active_day_index
        return self.days[index] if index is not None else None

    async def submit_files(self, files: Iterable[str | Path]) -> ParseResult | None:
        """
        Run the extract -> group pipeline for a batch and publish its results.

        Returns the new ParseResult, or None if a newer batch was submitted while
        this one was being extracted.
        """
        self._batch += 1
        batch = self._batch
        result = await self.extractor.parse_files(files)
        if batch != self._batch or self._closed:
            self.logger.info(f"Discarding results of superseded batch {batch}")
            return None

        days = self.grouper.group(result.points)
        if self.location_resolver is not None:
            self.location_resolver.annotate(days)

        await self._publish(result, days)
        return result

    async def _publish(self, result: ParseResult, days: list[DayAlbum]) -> None:
        previous_entries = self.entries
        self.result = result
        self.days = days
        self.entries = self.previews.build_entries(result.points)

        if self.synchronizer is not None:
            self.synchronizer.update(entries=self.entries, active_index=0 if self.entries else None)
        self.selection.reset(days)

        # Old previews stay alive until the markers showing them are gone
        if self.synchronizer is not None:
            await self.synchronizer.settle()
        self.previews.release_entries(previous_entries)

        self.logger.info(f"Timeline has {len(result.points)} photos over {len(days)} days")

    def select_day(self, index: int) -> bool:
        return self.selection.select_day(index)

    def select_point(self, index: int) -> bool:
        return self.selection.select_point(index)

    def step(self, offset: int) -> bool:
        return self.selection.step(offset)

    def _on_selection_changed(self, selection: SelectionState) -> None:
        if self.synchronizer is not None and not self._closed:
            self.synchronizer.set_active_index(selection.active_point_index)

    def close(self) -> None:
        """Dispose the map and release every preview still held."""
        if self._closed:
            return
        self._closed = True
        if self.synchronizer is not None:
            self.synchronizer.dispose()
        self.previews.release_entries(self.entries)
        self.entries = []
