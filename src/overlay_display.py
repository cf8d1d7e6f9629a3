"""
Overlay Display Module for the Translation Overlay

PyQt5 display surface: measures text with Qt font metrics, snapshots viewer
geometry from Qt widgets, and paints overlay primitives in a transparent,
click-through widget stacked over the page viewer.

Geometry adapters, one per viewer kind:
    graphics_view_geometry  QGraphicsView with a pixmap item (used by ReaderWindow)
    display_rect_geometry   widget painting a pixmap into a display rect
    label_geometry          QLabel sized to its scaled pixmap

The reader window only uses the first. The other two let OverlayWidget
sit over those viewer styles through its geometry_provider.
"""

import logging
import threading
from typing import Callable, Dict, List, Optional, Sequence

from PyQt5.QtWidgets import QWidget, QGraphicsView, QGraphicsPixmapItem, QLabel
from PyQt5.QtCore import Qt, QEvent, QObject, QPointF, QRectF, QSize, pyqtSignal
from PyQt5.QtGui import QPainter, QColor, QFont, QFontMetricsF, QPixmap

from src.geometry import ViewRect
from src.overlay_renderer import FillPrimitive, OverlayPrimitive, OverlayRenderer, TextPrimitive
from src.text_fit import TextFitter, TextMeasurer
from src.viewers import (
    FixedFrameViewer,
    FreeZoomViewer,
    IntrinsicFitViewer,
    ViewerGeometry,
)

# Configure module logger
logger = logging.getLogger(__name__)


# Overlay text is bold, like the reader's default bold typeface
OVERLAY_FONT_BOLD = True


def make_font(size: float, family: str = "") -> QFont:
    """Create the overlay font at a pixel size."""
    font = QFont(family) if family else QFont()
    font.setPixelSize(max(1, int(round(size))))
    font.setBold(OVERLAY_FONT_BOLD)
    return font


class QtTextMeasurer(TextMeasurer):
    """
    Measures text with the same QFont used to paint it.

    Requires a QGuiApplication instance.
    """

    def __init__(self, family: str = ""):
        self._family = family
        self._metrics: Dict[int, QFontMetricsF] = {}

    def _metrics_for(self, size: float) -> QFontMetricsF:
        key = max(1, int(round(size)))
        metrics = self._metrics.get(key)
        if metrics is None:
            metrics = QFontMetricsF(make_font(key, self._family))
            self._metrics[key] = metrics
        return metrics

    def text_width(self, text: str, size: float) -> float:
        return self._metrics_for(size).horizontalAdvance(text)

    def line_height(self, size: float) -> float:
        return self._metrics_for(size).height()


def graphics_view_geometry(
    view: QGraphicsView,
    item: Optional[QGraphicsPixmapItem]
) -> FreeZoomViewer:
    """
    Snapshot a QGraphicsView showing a pixmap item as a FreeZoomViewer.

    Points map item (image) coords -> scene -> viewport coords.
    """
    ready = item is not None and not item.pixmap().isNull()

    def source_to_view(x: float, y: float):
        if item is None:
            return None
        scene_point = item.mapToScene(QPointF(x, y))
        view_point = view.viewportTransform().map(scene_point)
        return view_point.x(), view_point.y()

    return FreeZoomViewer(source_to_view=source_to_view, ready=ready)


def display_rect_geometry(display_rect: Optional[QRectF], pixmap: Optional[QPixmap]) -> Optional[FixedFrameViewer]:
    """
    Snapshot a viewer that draws `pixmap` into `display_rect`.

    Returns None if the viewer has no display rect or pixmap yet.
    """
    if display_rect is None or pixmap is None:
        return None

    rect = ViewRect.from_points(
        (display_rect.left(), display_rect.top()),
        (display_rect.right(), display_rect.bottom()),
    )
    return FixedFrameViewer(
        display_rect=rect,
        intrinsic_width=pixmap.width(),
        intrinsic_height=pixmap.height(),
    )


def label_geometry(label: QLabel, intrinsic_size: QSize) -> IntrinsicFitViewer:
    """Snapshot a QLabel sized to its scaled page image."""
    return IntrinsicFitViewer(
        view_width=label.width(),
        view_height=label.height(),
        intrinsic_width=intrinsic_size.width(),
        intrinsic_height=intrinsic_size.height(),
    )


class OverlayWidget(QWidget):
    """
    Transparent, click-through widget that paints translated text.

    Stack it over the widget that displays the page (see attach_to()).
    Primitives are rebuilt on every paint from the current geometry, so
    call update() whenever the viewer pans or zooms.

    Thread-safe: set_translations() can be called from a worker thread.
    """

    # Signal for thread-safe updates from worker
    _update_signal = pyqtSignal(object)

    def __init__(
        self,
        geometry_provider: Callable[[], Optional[ViewerGeometry]],
        renderer: Optional[OverlayRenderer] = None,
        parent: Optional[QWidget] = None
    ):
        super().__init__(parent)

        self._geometry_provider = geometry_provider
        self._renderer = renderer or OverlayRenderer(TextFitter(QtTextMeasurer()))
        self._lines: List = []
        self._background_opacity = 0.8
        self._font_scale = 1.0
        self._visible_overlay = True
        self._lock = threading.Lock()
        self._tracked: Optional[QWidget] = None

        self.setAttribute(Qt.WA_TranslucentBackground, True)
        self.setAttribute(Qt.WA_TransparentForMouseEvents, True)

        # Connect internal signal for thread-safe updates
        self._update_signal.connect(self._on_update)

    def attach_to(self, target: QWidget) -> None:
        """Keep this widget covering `target` (a sibling or child of our parent)."""
        if self._tracked is not None:
            self._tracked.removeEventFilter(self)
        self._tracked = target
        target.installEventFilter(self)
        self._sync_geometry()

    def eventFilter(self, obj: QObject, event: QEvent) -> bool:
        if obj is self._tracked and event.type() in (QEvent.Resize, QEvent.Move):
            self._sync_geometry()
        return False

    def _sync_geometry(self) -> None:
        if self._tracked is None:
            return
        self.setGeometry(self._tracked.geometry())
        self.raise_()
        self.update()

    def set_translations(self, lines: Sequence) -> None:
        """Replace the displayed lines (thread-safe)."""
        self._update_signal.emit(list(lines))

    def clear(self) -> None:
        self._update_signal.emit([])

    def _on_update(self, lines) -> None:
        with self._lock:
            self._lines = lines
        logger.debug(f"Overlay: {len(lines)} translated lines")
        self.update()

    def set_preferences(self, background_opacity: float, font_scale: float) -> None:
        """Apply live preference values and repaint."""
        with self._lock:
            self._background_opacity = background_opacity
            self._font_scale = font_scale
        self.update()

    def set_overlay_visible(self, visible: bool) -> None:
        self._visible_overlay = visible
        self.update()

    @property
    def overlay_visible(self) -> bool:
        return self._visible_overlay

    def build_primitives(self) -> List[OverlayPrimitive]:
        """Primitives for the current geometry (empty if none is available)."""
        with self._lock:
            lines = self._lines
            opacity = self._background_opacity
            scale = self._font_scale

        if not lines or not self._visible_overlay:
            return []

        geometry = self._geometry_provider()
        if geometry is None or not geometry.is_available:
            logger.debug("Overlay: viewer geometry not available yet")
            return []

        return self._renderer.render(lines, geometry, opacity, scale)

    def paintEvent(self, event):
        """Paint background fills and translated text."""
        primitives = self.build_primitives()
        if not primitives:
            return

        painter = QPainter(self)
        painter.setRenderHint(QPainter.Antialiasing)
        painter.setRenderHint(QPainter.TextAntialiasing)

        for primitive in primitives:
            if isinstance(primitive, FillPrimitive):
                r, g, b = primitive.color
                rect = primitive.rect
                painter.fillRect(
                    QRectF(rect.left, rect.top, rect.width, rect.height),
                    QColor(r, g, b, primitive.alpha)
                )
            elif isinstance(primitive, TextPrimitive) and not primitive.fit.is_empty:
                font = make_font(primitive.fit.font_size)
                ascent = QFontMetricsF(font).ascent()
                painter.setFont(font)
                painter.setPen(QColor(*primitive.color))
                # No clipping: overflow past the box is intended
                for line, x, y in primitive.line_origins():
                    painter.drawText(QPointF(x, y + ascent), line)

        painter.end()
