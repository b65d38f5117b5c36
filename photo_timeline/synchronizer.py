"""Keeps a rendering surface in step with the timeline and the active point."""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Sequence

from shapely.geometry import MultiPoint

from .constants import Constants
from .exceptions import SurfaceError
from .surface import Bounds, MarkerSpec, RenderingSurface
from .types import MapConfig, TimelineEntry


_UNSET = object()


class MapState(Enum):
    """Lifecycle of the map surface."""
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    UNAVAILABLE = "unavailable"
    DISPOSED = "disposed"


@dataclass
class MapOverlayState:
    """What the synchronizer has placed on the surface."""
    track: dict | None = None
    markers: dict[int, object] = field(default_factory=dict)  # point index -> surface handle
    bounds: Bounds | None = None
    passes: int = 0


def track_geometry(entries: Sequence[TimelineEntry]) -> dict:
    """GeoJSON LineString feature through the entries in order."""
    return {
        "type": "Feature",
        "geometry": {
            "type": "LineString",
            "coordinates": [list(entry.photo.coordinate) for entry in entries],
        },
        "properties": {},
    }


def bounding_box(entries: Sequence[TimelineEntry]) -> Bounds:
    """((west, south), (east, north)) covering every entry's coordinate."""
    west, south, east, north = MultiPoint([entry.photo.coordinate for entry in entries]).bounds
    return (west, south), (east, north)


class MapSynchronizer:
    """
    Reconciles the timeline entries and the active index with a map surface.

    Inputs may change at any time. While the surface is not READY the latest values
    are only recorded; once it becomes READY one pass renders them. Changes made
    within one event-loop tick are coalesced into a single pass, and each pass runs
    without suspending, so it always sees one consistent snapshot.
    """

    def __init__(
        self,
        surface: RenderingSurface,
        logger: logging.Logger,
        config: MapConfig | None = None,
        on_select: Callable[[int], None] | None = None,
    ):
        self.surface = surface
        self.logger = logger
        self.config = config or MapConfig()
        self.on_select = on_select
        self.state = MapState.UNINITIALIZED
        self.overlay = MapOverlayState()
        self._entries: list[TimelineEntry] = []
        self._active_index: int | None = None
        self._pending: asyncio.Handle | None = None
        self._ready = asyncio.Event()
        self._settled = asyncio.Event()
        self._settled.set()

    @property
    def entries(self) -> list[TimelineEntry]:
        return list(self._entries)

    @property
    def active_index(self) -> int | None:
        return self._active_index

    async def start(self) -> MapState:
        """
        Construct the surface once it has been laid out.

        A zero-sized surface is measured again on the next frame, up to
        `max_layout_attempts` frames (unbounded when None). Exhausting the attempts
        leaves the synchronizer UNAVAILABLE. Returns the state reached.
        """
        if self.state is not MapState.UNINITIALIZED:
            return self.state

        attempts = 0
        while True:
            width, height = self.surface.measure()
            if width > 0 and height > 0:
                break
            attempts += 1
            limit = self.config.max_layout_attempts
            if limit is not None and attempts >= limit:
                self.state = MapState.UNAVAILABLE
                self.logger.warning(f"Map surface still has no size after {attempts} frames; giving up")
                self._ready.set()
                return self.state
            await asyncio.sleep(self.config.frame_interval)
            if self.state is MapState.DISPOSED:
                return self.state

        self.state = MapState.INITIALIZING
        self.surface.on("load", self._on_load)
        self.surface.on("error", self._on_error)
        try:
            self.surface.construct({
                "center": Constants.INITIAL_CENTER,
                "zoom": Constants.INITIAL_ZOOM,
                "attribution_control": False,
                "track_resize": True,
                "hash": False,
            })
        except SurfaceError as e:
            self.state = MapState.UNAVAILABLE
            self.logger.error(f"Map initialization failed: {e}")
            self._ready.set()
        return self.state

    async def wait_ready(self, timeout: float | None = None) -> bool:
        """Wait until READY; False if the surface ended up unavailable or disposed."""
        if self.state in (MapState.UNAVAILABLE, MapState.DISPOSED):
            return False
        try:
            await asyncio.wait_for(self._ready.wait(), timeout)
        except asyncio.TimeoutError:
            return False
        return self.state is MapState.READY

    async def settle(self) -> None:
        """Wait for any scheduled reconciliation pass to run."""
        await self._settled.wait()

    def _on_load(self) -> None:
        if self.state is not MapState.INITIALIZING:
            return
        self.state = MapState.READY
        self.surface.add_control("navigation", "top-right")
        self._ready.set()
        self.logger.info("Map surface ready")
        self._schedule()

    def _on_error(self, error) -> None:
        self.logger.error(f"Map surface error: {error}")

    def update(
        self,
        entries: Sequence[TimelineEntry] | None = None,
        active_index=_UNSET,
    ) -> None:
        """Record new inputs and schedule a pass; omitted arguments keep their value."""
        self._check_not_disposed()
        if entries is not None:
            self._entries = list(entries)
        if active_index is not _UNSET:
            self._active_index = active_index
        self._schedule()

    def set_entries(self, entries: Sequence[TimelineEntry]) -> None:
        self.update(entries=entries)

    def set_active_index(self, index: int | None) -> None:
        self.update(active_index=index)

    def _schedule(self) -> None:
        if self.state is not MapState.READY or self._pending is not None:
            return
        self._settled.clear()
        self._pending = asyncio.get_running_loop().call_soon(self._run_pass)

    def _run_pass(self) -> None:
        self._pending = None
        try:
            if self.state is not MapState.READY:
                return
            if not self.surface.is_style_loaded():
                self.logger.debug("Map style not loaded; skipping reconciliation pass")
                return
            self.reconcile()
        finally:
            # a callback during the pass may already have scheduled the next one
            if self._pending is None:
                self._settled.set()

    def reconcile(self) -> None:
        """One reconciliation pass: track, then markers, then camera."""
        entries = list(self._entries)
        active_index = self._active_index

        self._sync_track(entries)
        self._clear_markers()
        self._place_markers(entries, active_index)
        self._fit_camera(entries)
        self.overlay.passes += 1

    def _sync_track(self, entries: list[TimelineEntry]) -> None:
        geometry = track_geometry(entries)
        try:
            if self.surface.get_source(Constants.TRACK_SOURCE_ID) is None:
                self.surface.add_source(Constants.TRACK_SOURCE_ID, geometry)
            else:
                self.surface.set_data(Constants.TRACK_SOURCE_ID, geometry)
            if self.surface.get_layer(Constants.TRACK_LAYER_ID) is None:
                self.surface.add_layer({
                    "id": Constants.TRACK_LAYER_ID,
                    "type": "line",
                    "source": Constants.TRACK_SOURCE_ID,
                    "paint": {"line-color": Constants.TRACK_COLOR, "line-width": Constants.TRACK_WIDTH},
                })
            self.overlay.track = geometry
        except Exception as e:  # pylint: disable=broad-exception-caught
            self.logger.warning(f"Failed to update track source: {e}")

    def _clear_markers(self) -> None:
        for handle in self.overlay.markers.values():
            try:
                self.surface.remove_marker(handle)
            except SurfaceError as e:
                self.logger.warning(f"Failed to remove marker: {e}")
        self.overlay.markers = {}

    def _place_markers(self, entries: list[TimelineEntry], active_index: int | None) -> None:
        for index, entry in enumerate(entries):
            preview = entry.preview
            marker = MarkerSpec(
                coordinate=entry.photo.coordinate,
                label=entry.photo.name if preview else str(index + 1),
                image_uri=preview.uri if preview else None,
                active=index == active_index,
                on_click=self._click_handler(index),
            )
            try:
                self.overlay.markers[index] = self.surface.add_marker(marker)
            except Exception as e:  # pylint: disable=broad-exception-caught
                self.logger.warning(f"Failed to add marker {index + 1}: {e}")

    def _click_handler(self, index: int) -> Callable[[], None]:
        def handle_click():
            if self.on_select is not None:
                self.on_select(index)
            else:
                self.set_active_index(index)
        return handle_click

    def _fit_camera(self, entries: list[TimelineEntry]) -> None:
        if not entries:
            return
        bounds = bounding_box(entries)
        try:
            self.surface.fit_bounds(bounds, self.config.padding, self.config.duration_ms)
            self.overlay.bounds = bounds
        except Exception as e:  # pylint: disable=broad-exception-caught
            self.logger.debug(f"Camera fit failed: {e}")

    def dispose(self) -> None:
        """Release markers, layers and the surface itself."""
        if self.state is MapState.DISPOSED:
            return
        if self._pending is not None:
            self._pending.cancel()
            self._pending = None
        self._settled.set()
        if self.state is MapState.READY:
            self._clear_markers()
        self.surface.remove()
        self.overlay = MapOverlayState()
        self.state = MapState.DISPOSED
        self._ready.set()
        self.logger.debug("Map surface disposed")

    def _check_not_disposed(self) -> None:
        if self.state is MapState.DISPOSED:
            raise SurfaceError("Map synchronizer has been disposed")
