"""Rendering surfaces driven by the map synchronizer."""

import asyncio
import itertools
import logging
from abc import ABC, abstractmethod
from collections import defaultdict
from dataclasses import dataclass
from typing import Any, Callable

try:
    from fastkml.kml import KML
    from fastkml.containers import Document, Folder
    from fastkml.features import Placemark
    from fastkml.links import Icon
    from fastkml.styles import IconStyle, LineStyle, Style, StyleUrl
    from fastkml.views import LookAt
    from pygeoif.geometry import LineString, Point
    KML_AVAILABLE = True
except ImportError:
    KML_AVAILABLE = False
    KML = None

from geopy.distance import distance

from .constants import Constants
from .exceptions import SurfaceError

Bounds = tuple[tuple[float, float], tuple[float, float]]  # ((west, south), (east, north))


@dataclass
class MarkerSpec:
    """A clickable point marker as requested by the synchronizer."""
    coordinate: tuple[float, float]
    label: str
    image_uri: str | None = None
    active: bool = False
    on_click: Callable[[], None] | None = None


@dataclass
class CameraView:
    """Where the camera was last asked to look."""
    bounds: Bounds
    padding: int
    duration_ms: int


class RenderingSurface(ABC):
    """
    Narrow interface over an interactive map.

    Construction is asynchronous: after `construct` the surface emits a "load" event
    once its style is ready, and only then may sources, layers and markers be added.
    """

    @abstractmethod
    def measure(self) -> tuple[int, int]:
        """Current laid-out (width, height) of the surface."""

    @abstractmethod
    def construct(self, options: dict[str, Any]) -> None: ...

    @abstractmethod
    def on(self, event: str, callback: Callable[..., None]) -> None: ...

    @abstractmethod
    def is_style_loaded(self) -> bool: ...

    @abstractmethod
    def add_control(self, name: str, position: str) -> None: ...

    @abstractmethod
    def get_source(self, source_id: str) -> dict | None: ...

    @abstractmethod
    def add_source(self, source_id: str, data: dict) -> None: ...

    @abstractmethod
    def set_data(self, source_id: str, data: dict) -> None: ...

    @abstractmethod
    def add_layer(self, layer: dict) -> None: ...

    @abstractmethod
    def get_layer(self, layer_id: str) -> dict | None: ...

    @abstractmethod
    def add_marker(self, marker: MarkerSpec) -> Any:
        """Place a marker and return an opaque handle for `remove_marker`."""

    @abstractmethod
    def remove_marker(self, handle: Any) -> None: ...

    @abstractmethod
    def fit_bounds(self, bounds: Bounds, padding: int, duration_ms: int) -> None: ...

    @abstractmethod
    def remove(self) -> None:
        """Tear the surface down; no operation is valid afterwards."""


class KMLSurface(RenderingSurface):
    """
    In-memory map surface that renders its overlay as a KML document.

    The viewport size starts at (width, height) and may be changed with `resize`;
    a zero size models a surface that has not been laid out yet.
    """

    def __init__(self, logger: logging.Logger, width: int = 0, height: int = 0):
        self.logger = logger
        self.width = width
        self.height = height
        self.options: dict[str, Any] | None = None
        self.controls: list[tuple[str, str]] = []
        self.sources: dict[str, dict] = {}
        self.layers: dict[str, dict] = {}
        self.markers: dict[int, MarkerSpec] = {}
        self.camera: CameraView | None = None
        self.removed = False
        self._style_loaded = False
        self._handlers: dict[str, list[Callable[..., None]]] = defaultdict(list)
        self._marker_ids = itertools.count(1)

        if not KML_AVAILABLE:
            self.logger.warning("KML rendering not available. Install 'fastkml' and 'shapely' packages.")

    def resize(self, width: int, height: int) -> None:
        self.width = width
        self.height = height

    def measure(self) -> tuple[int, int]:
        return self.width, self.height

    def construct(self, options: dict[str, Any]) -> None:
        self._check_alive()
        if self.options is not None:
            raise SurfaceError("Surface already constructed")
        self.options = dict(options)
        asyncio.get_running_loop().call_soon(self._finish_loading)

    def _finish_loading(self) -> None:
        if self.removed:
            return
        self._style_loaded = True
        self._emit("load")

    def on(self, event: str, callback: Callable[..., None]) -> None:
        self._handlers[event].append(callback)

    def _emit(self, event: str, *args) -> None:
        for callback in list(self._handlers.get(event, [])):
            try:
                callback(*args)
            except Exception as e:  # pylint: disable=broad-exception-caught
                self.logger.error(f"Error in '{event}' handler: {e}")
                if event != "error":
                    self._emit("error", e)

    def is_style_loaded(self) -> bool:
        return self._style_loaded and not self.removed

    def add_control(self, name: str, position: str) -> None:
        self._check_ready()
        self.controls.append((name, position))

    def get_source(self, source_id: str) -> dict | None:
        self._check_ready()
        return self.sources.get(source_id)

    def add_source(self, source_id: str, data: dict) -> None:
        self._check_ready()
        if source_id in self.sources:
            raise SurfaceError(f"Source already exists: {source_id}")
        self.sources[source_id] = data

    def set_data(self, source_id: str, data: dict) -> None:
        self._check_ready()
        if source_id not in self.sources:
            raise SurfaceError(f"No such source: {source_id}")
        self.sources[source_id] = data

    def add_layer(self, layer: dict) -> None:
        self._check_ready()
        if layer["id"] in self.layers:
            raise SurfaceError(f"Layer already exists: {layer['id']}")
        if layer.get("source") not in self.sources:
            raise SurfaceError(f"Layer {layer['id']} references unknown source {layer.get('source')}")
        self.layers[layer["id"]] = layer

    def get_layer(self, layer_id: str) -> dict | None:
        self._check_ready()
        return self.layers.get(layer_id)

    def add_marker(self, marker: MarkerSpec) -> int:
        self._check_ready()
        longitude, latitude = marker.coordinate
        if not (-180.0 <= longitude <= 180.0 and -90.0 <= latitude <= 90.0):
            raise SurfaceError(f"Invalid marker position: {marker.coordinate}")
        marker_id = next(self._marker_ids)
        self.markers[marker_id] = marker
        return marker_id

    def remove_marker(self, handle: int) -> None:
        self._check_alive()
        self.markers.pop(handle, None)

    def click(self, handle: int) -> None:
        """Deliver a user click to a marker."""
        self._check_ready()
        marker = self.markers[handle]
        if marker.on_click is not None:
            marker.on_click()

    def fit_bounds(self, bounds: Bounds, padding: int, duration_ms: int) -> None:
        self._check_ready()
        self.camera = CameraView(bounds=bounds, padding=padding, duration_ms=duration_ms)
        asyncio.get_running_loop().call_soon(self._emit, "moveend")

    def remove(self) -> None:
        self.markers.clear()
        self.layers.clear()
        self.sources.clear()
        self.controls.clear()
        self.camera = None
        self._handlers.clear()
        self._style_loaded = False
        self.removed = True

    def _check_alive(self) -> None:
        if self.removed:
            raise SurfaceError("Surface has been removed")

    def _check_ready(self) -> None:
        self._check_alive()
        if not self._style_loaded:
            raise SurfaceError("Surface style is not loaded")

    def camera_range(self) -> float:
        """Eye distance in meters that shows the current camera bounds."""
        if self.camera is None:
            return float(Constants.MIN_CAMERA_RANGE)
        (west, south), (east, north) = self.camera.bounds
        diagonal = distance((south, west), (north, east)).m
        short_side = max(1, min(self.width, self.height))
        scale = 1 + 2 * self.camera.padding / short_side
        return max(float(Constants.MIN_CAMERA_RANGE), diagonal * scale)

    def render(self, name: str = "Photo Timeline") -> str:
        """
        Render the current overlay as a KML document.

        The track source becomes a LineString placemark, every marker a point
        placemark (the active one with its own style) and the camera a LookAt.
        """
        if not KML_AVAILABLE:
            raise ImportError("KML rendering not available. Install 'fastkml' and 'shapely' packages.")
        self._check_alive()

        track_color = Constants.TRACK_COLOR.lstrip("#")
        # KML colors are aabbggrr
        kml_track_color = f"ff{track_color[4:6]}{track_color[2:4]}{track_color[0:2]}"
        styles = [
            Style(id="track", styles=[LineStyle(color=kml_track_color, width=Constants.TRACK_WIDTH)]),
            Style(id="marker", styles=[IconStyle(scale=1.0)]),
            Style(id="marker-active", styles=[IconStyle(scale=1.6, color="ff0000ff")]),
        ]

        view = None
        if self.camera is not None:
            (west, south), (east, north) = self.camera.bounds
            view = LookAt(
                longitude=(west + east) / 2,
                latitude=(south + north) / 2,
                range=self.camera_range(),
            )

        k = KML()
        doc = Document(
            id="photo_timeline",
            name=name,
            description=f"{len(self.markers)} geotagged photos",
            styles=styles,
            view=view,
        )
        k.append(doc)

        track = self.sources.get(Constants.TRACK_SOURCE_ID)
        coordinates = track["geometry"]["coordinates"] if track else []
        if len(coordinates) >= 2:
            doc.append(Placemark(
                name="Track",
                style_url=StyleUrl(url="#track"),
                geometry=LineString([tuple(c) for c in coordinates]),
            ))

        photos_folder = Folder(name="Photos", description=f"{len(self.markers)} markers")
        doc.append(photos_folder)
        for marker in self.markers.values():
            longitude, latitude = marker.coordinate
            description = None
            marker_styles = None
            if marker.image_uri:
                description = f'<img style="max-width:500px;" src="{marker.image_uri}">'
                marker_styles = [Style(styles=[IconStyle(icon=Icon(href=marker.image_uri))])]
            photos_folder.append(Placemark(
                name=marker.label,
                description=description,
                style_url=StyleUrl(url="#marker-active" if marker.active else "#marker"),
                styles=marker_styles,
                geometry=Point(longitude, latitude),
            ))

        return k.to_string(prettyprint=True)
