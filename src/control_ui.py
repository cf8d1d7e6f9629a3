"""
Reader Window Module for the Translation Overlay

Provides a PyQt5 page viewer: a pan/zoom QGraphicsView showing the page
image with the translation overlay stacked on top of its viewport.

Keys:
    O  open an image
    T  translate the current page
    C  toggle auto-crop
    S  cycle the source language
    L  cycle the target language
    [ ]  decrease / increase background opacity
    - =  decrease / increase font scale
    H  show/hide the overlay
"""

import logging
from typing import Optional

from PIL import Image
from PyQt5.QtWidgets import (
    QMainWindow, QGraphicsView, QGraphicsScene, QGraphicsPixmapItem, QFileDialog, QLabel
)
from PyQt5.QtCore import Qt, pyqtSignal
from PyQt5.QtGui import QPixmap, QPainter

from src.overlay_display import OverlayWidget, graphics_view_geometry
from src.translation import SUPPORTED_LANGUAGES

logger = logging.getLogger(__name__)


# Zoom factor per wheel step
ZOOM_STEP = 1.15

# Display preference keys: key -> (settings name, direction)
PREFERENCE_KEYS = {
    Qt.Key_BracketLeft: ("background_opacity", -1),
    Qt.Key_BracketRight: ("background_opacity", 1),
    Qt.Key_Minus: ("font_scale", -1),
    Qt.Key_Equal: ("font_scale", 1),
    Qt.Key_Plus: ("font_scale", 1),
}


def next_language(code: str) -> str:
    """Next language code in SUPPORTED_LANGUAGES, wrapping around."""
    codes = [c for _, c in SUPPORTED_LANGUAGES]
    if code not in codes:
        return codes[0]
    return codes[(codes.index(code) + 1) % len(codes)]


class PageView(QGraphicsView):
    """Pan/zoom view of a single page pixmap."""

    view_changed = pyqtSignal()

    def __init__(self, parent=None):
        super().__init__(parent)
        self.setScene(QGraphicsScene(self))
        self.setDragMode(QGraphicsView.ScrollHandDrag)
        self.setRenderHint(QPainter.SmoothPixmapTransform)
        self.setTransformationAnchor(QGraphicsView.AnchorUnderMouse)
        self.pixmap_item: Optional[QGraphicsPixmapItem] = None

        self.horizontalScrollBar().valueChanged.connect(self.view_changed)
        self.verticalScrollBar().valueChanged.connect(self.view_changed)

    def set_pixmap(self, pixmap: QPixmap) -> None:
        self.scene().clear()
        self.resetTransform()
        self.pixmap_item = self.scene().addPixmap(pixmap)
        self.setSceneRect(self.pixmap_item.boundingRect())
        self.fitInView(self.pixmap_item, Qt.KeepAspectRatio)
        self.view_changed.emit()

    def wheelEvent(self, event):
        if self.pixmap_item is None:
            return
        factor = ZOOM_STEP if event.angleDelta().y() > 0 else 1 / ZOOM_STEP
        self.scale(factor, factor)
        self.view_changed.emit()

    def resizeEvent(self, event):
        super().resizeEvent(event)
        self.view_changed.emit()


class ReaderWindow(QMainWindow):
    """
    Main reader window.

    Emits requests; the Application object wires them to the worker.
    """

    # Signals for worker thread communication
    image_opened = pyqtSignal(object)       # PIL Image
    translate_requested = pyqtSignal()
    auto_crop_toggled = pyqtSignal(bool)
    languages_changed = pyqtSignal(str, str)   # source, target
    preference_step = pyqtSignal(str, int)      # settings name, +1/-1
    shutdown_requested = pyqtSignal()

    def __init__(self, auto_crop: bool = False, source_language: str = "en", target_language: str = "it"):
        super().__init__()
        self._auto_crop = auto_crop
        self._source_language = source_language
        self._target_language = target_language
        self._status = ""
        self._image: Optional[Image.Image] = None
        self._init_ui()

    def _init_ui(self):
        """Initialize the user interface components."""
        self.setWindowTitle("Page Translation Overlay")
        self.resize(900, 1100)

        self.page_view = PageView()
        self.setCentralWidget(self.page_view)

        # Overlay covers the viewport; coordinates are viewport coordinates
        self.overlay = OverlayWidget(
            lambda: graphics_view_geometry(self.page_view, self.page_view.pixmap_item),
            parent=self.page_view
        )
        self.overlay.attach_to(self.page_view.viewport())
        self.page_view.view_changed.connect(self.overlay.update)

        self.status_label = QLabel()
        self.statusBar().addWidget(self.status_label, 1)
        self.set_status("Press O to open a page")

    @property
    def image(self) -> Optional[Image.Image]:
        return self._image

    @property
    def auto_crop(self) -> bool:
        return self._auto_crop

    def load_image(self, path: str) -> bool:
        """Load and display a page image. Returns False if it cannot be read."""
        try:
            image = Image.open(path)
            image.load()
        except (OSError, ValueError) as e:
            logger.error(f"Failed to open {path}: {e}")
            self.set_status(f"Error: cannot open {path}")
            return False

        # The previous page may still be read by a cancelled run; let it be collected
        self._image = image.convert("RGB")
        image.close()

        self.overlay.clear()
        self.page_view.set_pixmap(QPixmap(path))
        self.setWindowTitle(f"Page Translation Overlay - {path}")
        self.set_status(f"Loaded {self._image.width}x{self._image.height}")
        self.image_opened.emit(self._image)
        return True

    def set_status(self, status: str):
        """
        Update the status label.

        Args:
            status: Status text to display (e.g., "Translating...", "Error: message")
        """
        self._status = status
        crop = "on" if self._auto_crop else "off"
        self.status_label.setText(
            f"{status}    [{self._source_language} -> {self._target_language}, auto-crop: {crop}]"
        )

        if status.lower().startswith("error"):
            self.status_label.setStyleSheet("color: #d32f2f;")
        else:
            self.status_label.setStyleSheet("color: #333333;")

    def keyPressEvent(self, event):
        key = event.key()
        if key == Qt.Key_O:
            path, _ = QFileDialog.getOpenFileName(
                self, "Open page", "", "Images (*.png *.jpg *.jpeg *.webp *.bmp)"
            )
            if path:
                self.load_image(path)
        elif key == Qt.Key_T:
            if self._image is not None:
                self.translate_requested.emit()
        elif key == Qt.Key_C:
            self._auto_crop = not self._auto_crop
            self.auto_crop_toggled.emit(self._auto_crop)
            self.set_status("Auto-crop toggled")
        elif key == Qt.Key_S:
            self._source_language = next_language(self._source_language)
            self._on_languages_changed()
        elif key == Qt.Key_L:
            self._target_language = next_language(self._target_language)
            self._on_languages_changed()
        elif key == Qt.Key_H:
            self.overlay.set_overlay_visible(not self.overlay.overlay_visible)
        elif key in PREFERENCE_KEYS:
            self.preference_step.emit(*PREFERENCE_KEYS[key])
        else:
            super().keyPressEvent(event)

    def _on_languages_changed(self):
        self.languages_changed.emit(self._source_language, self._target_language)
        self.set_status(self._status)

    def closeEvent(self, event):
        """
        Handle window close event.

        Emits shutdown_requested signal before closing to allow
        graceful cleanup of worker threads.
        """
        self.shutdown_requested.emit()
        event.accept()
