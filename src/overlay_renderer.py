"""
Overlay Renderer

Turns translated lines into drawable primitives for the current viewer
geometry. Called on every paint frame; pan/zoom changes the geometry
continuously, so nothing is cached between calls.

Primitives are emitted in input (recognition) order, one background fill
followed by one text primitive per line. Overlapping boxes are not
arbitrated: the one drawn last wins.
"""

import logging
from dataclasses import dataclass
from typing import Iterator, List, Optional, Sequence, Tuple, Union

from src.geometry import ViewRect
from src.text_fit import FitResult, TextFitter, vertical_offset
from src.viewers import CoordinateMapper, ViewerGeometry

logger = logging.getLogger(__name__)


# Default colours (RGB)
BACKGROUND_COLOR = (255, 255, 255)
TEXT_COLOR = (0, 0, 0)


@dataclass(frozen=True)
class FillPrimitive:
    """Opaque background covering the original text."""
    rect: ViewRect
    color: Tuple[int, int, int]
    opacity: float  # 0.0-1.0

    @property
    def alpha(self) -> int:
        """Opacity as an 8-bit alpha value."""
        return int(self.opacity * 255)


@dataclass(frozen=True)
class TextPrimitive:
    """Laid-out text anchored at `origin` (top-left of the first line box)."""
    rect: ViewRect
    origin: Tuple[float, float]
    fit: FitResult
    color: Tuple[int, int, int]

    def line_origins(self) -> Iterator[Tuple[str, float, float]]:
        """Yield (line, x, y) with each line centred within rect width."""
        x0, y0 = self.origin
        for index, (line, line_width) in enumerate(zip(self.fit.lines, self.fit.line_widths)):
            x = x0 + (self.rect.width - line_width) / 2
            y = y0 + index * self.fit.line_height
            yield line, x, y


OverlayPrimitive = Union[FillPrimitive, TextPrimitive]


class OverlayRenderer:
    """
    Produces overlay primitives from translated lines.

    Usage:
        renderer = OverlayRenderer(TextFitter())
        for primitive in renderer.render(lines, geometry, 0.8, 1.0):
            draw(primitive)
    """

    def __init__(
        self,
        fitter: Optional[TextFitter] = None,
        mapper: Optional[CoordinateMapper] = None,
        background_color: Tuple[int, int, int] = BACKGROUND_COLOR,
        text_color: Tuple[int, int, int] = TEXT_COLOR,
    ):
        self.fitter = fitter or TextFitter()
        self.mapper = mapper or CoordinateMapper()
        self.background_color = background_color
        self.text_color = text_color

    def render(
        self,
        lines: Sequence,
        geometry: ViewerGeometry,
        background_opacity: float,
        font_scale: float,
        mapper: Optional[CoordinateMapper] = None,
    ) -> List[OverlayPrimitive]:
        """
        Build primitives for one paint pass.

        Args:
            lines: TranslatedLine sequence (recognition order)
            geometry: Current viewer geometry
            background_opacity: Fill opacity, clamped to 0.0-1.0
            font_scale: User font scale applied after fitting
            mapper: Override the renderer's mapper for this pass

        Returns:
            [fill, text, fill, text, ...] for every line that maps to a
            non-empty-width view rect
        """
        mapper = mapper or self.mapper
        opacity = min(max(background_opacity, 0.0), 1.0)
        primitives: List[OverlayPrimitive] = []

        for line in lines:
            view_rect = mapper.map_to_view(line.bounding_box, geometry)
            if view_rect is None or view_rect.width <= 0:
                continue

            fit = self.fitter.fit_rect(line.translated_text, view_rect, font_scale)
            origin = (view_rect.left, view_rect.top + vertical_offset(fit, view_rect.height))

            primitives.append(FillPrimitive(rect=view_rect, color=self.background_color, opacity=opacity))
            primitives.append(TextPrimitive(rect=view_rect, origin=origin, fit=fit, color=self.text_color))

        return primitives
