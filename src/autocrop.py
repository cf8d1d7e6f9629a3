"""
Auto-Crop Detector

Finds the bounding rectangle of non-background content in a page image
so recognition runs on the content region only.

The background colour is taken from the top-left pixel. Scans sample every
`stride`-th column (or row), so thin isolated content narrower than the
stride near an edge can be missed.
"""

import logging
from dataclasses import dataclass

import numpy as np
from PIL import Image

from src.geometry import SourceRect

logger = logging.getLogger(__name__)


# Per-channel difference (0-255) below which a pixel counts as background
BACKGROUND_THRESHOLD = 40

# Sample every Nth column/row while scanning
SAMPLE_STRIDE = 10


@dataclass
class CropResult:
    """Image to process plus the rect it covers in the original image."""
    image: Image.Image
    rect: SourceRect
    is_copy: bool  # True if `image` is a new image the caller must close

    def release(self) -> None:
        """Close the cropped copy. No-op when no crop was made."""
        if self.is_copy:
            self.image.close()


class AutoCropDetector:
    """
    Detects the content region of an image.

    Example:
        detector = AutoCropDetector()
        rect = detector.detect(page)
        crop = detector.crop(page)
        try:
            recognize(crop.image)
        finally:
            crop.release()
    """

    def __init__(self, threshold: int = BACKGROUND_THRESHOLD, stride: int = SAMPLE_STRIDE):
        if stride < 1:
            raise ValueError(f"stride must be >= 1, got {stride}")
        self.threshold = threshold
        self.stride = stride

    def detect(self, image: Image.Image) -> SourceRect:
        """
        Return the bounding box of non-background content.

        Falls back to the full image bounds when the image is uniform,
        the detected bounds are degenerate, or the content already
        touches every edge.

        Args:
            image: PIL Image (any mode convertible to RGB)

        Returns:
            SourceRect in image pixel space
        """
        width, height = image.size
        full = SourceRect(0, 0, width, height)
        if width == 0 or height == 0:
            return full

        pixels = np.asarray(image.convert("RGB"))
        reference = pixels[0, 0].astype(np.int16)

        top, bottom = 0, height
        left, right = 0, width

        # Rows, sampling every Nth column
        row_hits = np.flatnonzero(self._content(pixels[:, ::self.stride], reference).any(axis=1))
        if row_hits.size:
            top = int(row_hits[0])
            bottom = int(row_hits[-1]) + 1

        # Columns, sampling every Nth row inside [top, bottom)
        col_hits = np.flatnonzero(self._content(pixels[top:bottom:self.stride, :], reference).any(axis=0))
        if col_hits.size:
            left = int(col_hits[0])
            right = int(col_hits[-1]) + 1

        if left >= right or top >= bottom:
            logger.debug("Auto-crop: degenerate bounds, keeping full image")
            return full

        rect = SourceRect(left, top, right, bottom)
        if rect == full:
            logger.debug("Auto-crop: content fills image, no crop")
        else:
            logger.debug(f"Auto-crop: {width}x{height} -> {rect}")
        return rect

    def _content(self, samples: np.ndarray, reference: np.ndarray) -> np.ndarray:
        """Mask of sampled pixels differing from the background in any channel."""
        diff = np.abs(samples.astype(np.int16) - reference)
        return np.any(diff >= self.threshold, axis=-1)

    def crop(self, image: Image.Image) -> CropResult:
        """
        Crop an image to its content region.

        Returns the original image object (is_copy=False) when no useful
        crop exists; otherwise a new, separately owned image.
        """
        rect = self.detect(image)
        if rect == SourceRect(0, 0, image.width, image.height):
            return CropResult(image=image, rect=rect, is_copy=False)

        cropped = image.crop(rect.as_box())
        cropped.load()
        return CropResult(image=cropped, rect=rect, is_copy=True)
