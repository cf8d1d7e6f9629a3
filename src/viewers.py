"""
Viewer Geometry and Coordinate Mapping

Maps rectangles from source-image pixel space into the coordinate space of
whichever viewer is currently displaying the page. Three viewer shapes are
supported, each with its own relationship between image and view:

    FreeZoomViewer      arbitrary pan/zoom; the viewer maps points itself
    FixedFrameViewer    content drawn into a display rect inside the viewer
    IntrinsicFitViewer  viewer size equals the scaled content size

Geometry objects are snapshots queried once per paint frame. The mapper
never mutates them.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, Optional, Tuple, Union

from src.errors import GeometryUnavailable
from src.geometry import SourceRect, ViewRect

logger = logging.getLogger(__name__)


__all__ = [
    "ViewerKind",
    "FreeZoomViewer",
    "FixedFrameViewer",
    "IntrinsicFitViewer",
    "ViewerGeometry",
    "CoordinateMapper",
]


Point = Tuple[float, float]


class ViewerKind(Enum):
    """Discriminant for the viewer geometry variants."""
    FREE_ZOOM = auto()
    FIXED_FRAME = auto()
    INTRINSIC_FIT = auto()


@dataclass(frozen=True)
class FreeZoomViewer:
    """
    Deep-zoom style viewer that exposes its own source->view transform.

    Attributes:
        source_to_view: Maps an image point to a view point, or None
        ready: False until the viewer has loaded and laid out the image
    """
    source_to_view: Callable[[float, float], Optional[Point]]
    ready: bool = True
    kind: ViewerKind = field(default=ViewerKind.FREE_ZOOM, init=False)

    @property
    def is_available(self) -> bool:
        return self.ready


@dataclass(frozen=True)
class FixedFrameViewer:
    """
    Viewer whose content occupies `display_rect` (already panned/zoomed),
    backed by a bitmap of fixed intrinsic size.
    """
    display_rect: ViewRect
    intrinsic_width: int
    intrinsic_height: int
    kind: ViewerKind = field(default=ViewerKind.FIXED_FRAME, init=False)

    @property
    def is_available(self) -> bool:
        return self.intrinsic_width > 0 and self.intrinsic_height > 0


@dataclass(frozen=True)
class IntrinsicFitViewer:
    """
    Viewer sized to its scaled content (e.g. one page of a vertical strip).
    View origin coincides with content origin.
    """
    view_width: float
    view_height: float
    intrinsic_width: int
    intrinsic_height: int
    kind: ViewerKind = field(default=ViewerKind.INTRINSIC_FIT, init=False)

    @property
    def is_available(self) -> bool:
        return self.intrinsic_width > 0 and self.intrinsic_height > 0


ViewerGeometry = Union[FreeZoomViewer, FixedFrameViewer, IntrinsicFitViewer]


def _map_free_zoom(rect: SourceRect, viewer: FreeZoomViewer) -> ViewRect:
    if not viewer.ready:
        raise GeometryUnavailable("viewer not ready")

    top_left = viewer.source_to_view(float(rect.left), float(rect.top))
    bottom_right = viewer.source_to_view(float(rect.right), float(rect.bottom))
    if top_left is None or bottom_right is None:
        raise GeometryUnavailable("viewer returned no mapping")

    return ViewRect.from_points(top_left, bottom_right)


def _map_fixed_frame(rect: SourceRect, viewer: FixedFrameViewer) -> ViewRect:
    if not viewer.is_available:
        raise GeometryUnavailable("content not loaded")

    display = viewer.display_rect
    scale_x = display.width / viewer.intrinsic_width
    scale_y = display.height / viewer.intrinsic_height

    return ViewRect.from_points(
        (display.left + rect.left * scale_x, display.top + rect.top * scale_y),
        (display.left + rect.right * scale_x, display.top + rect.bottom * scale_y),
    )


def _map_intrinsic_fit(rect: SourceRect, viewer: IntrinsicFitViewer) -> ViewRect:
    if not viewer.is_available:
        raise GeometryUnavailable("content not loaded")

    scale_x = viewer.view_width / viewer.intrinsic_width
    scale_y = viewer.view_height / viewer.intrinsic_height

    return ViewRect.from_points(
        (rect.left * scale_x, rect.top * scale_y),
        (rect.right * scale_x, rect.bottom * scale_y),
    )


_HANDLERS = {
    ViewerKind.FREE_ZOOM: _map_free_zoom,
    ViewerKind.FIXED_FRAME: _map_fixed_frame,
    ViewerKind.INTRINSIC_FIT: _map_intrinsic_fit,
}


class CoordinateMapper:
    """
    Maps source-space rectangles into view space for any viewer variant.

    map_to_view() returns None when the viewer has no geometry yet
    (retry on the next frame). A returned ViewRect may still be empty;
    callers skip those individually.
    """

    def map_to_view(self, rect: SourceRect, geometry: ViewerGeometry) -> Optional[ViewRect]:
        """
        Map one rectangle.

        Args:
            rect: Rectangle in source-image pixels
            geometry: Current viewer geometry snapshot

        Returns:
            ViewRect, or None if the viewer cannot map yet
        """
        handler = _HANDLERS.get(geometry.kind)
        if handler is None:
            logger.warning(f"Unsupported viewer kind: {geometry.kind}")
            return None

        try:
            return handler(rect, geometry)
        except GeometryUnavailable as e:
            logger.debug(f"Geometry unavailable for {rect}: {e}")
            return None
