"""
Recognition Debug Utilities

Functions for saving annotated debug images and burning overlays into images.
"""

import logging
from pathlib import Path
from typing import Optional, Sequence

from PIL import Image, ImageDraw, ImageFont

from src.geometry import SourceRect
from .result import RecognitionResult

logger = logging.getLogger(__name__)


# Debug settings
DEBUG_DIR = Path("./debug")
MAX_DEBUG_IMAGES = 10

# Confidence thresholds for coloring
HIGH_CONFIDENCE = 0.90
MEDIUM_CONFIDENCE = 0.60


def _load_font(size: float, font_path: Optional[str] = None):
    if font_path:
        try:
            return ImageFont.truetype(font_path, size)
        except OSError:
            logger.debug(f"Font {font_path} not found, using default")
    return ImageFont.load_default(size=size)


def save_debug_image(
    image: Image.Image,
    result: Optional[RecognitionResult],
    crop_rect: Optional[SourceRect],
    path: str
) -> None:
    """
    Save an annotated debug image showing crop bounds and recognised blocks.

    Annotations include:
    - Auto-crop bounds (blue)
    - Block boxes coloured by confidence
    - Block index next to each box

    Block boxes are expected in `image` pixel space.

    Args:
        image: Original PIL Image
        result: Recognition result (can be None)
        crop_rect: Auto-crop rect (can be None)
        path: Output file path
    """
    DEBUG_DIR.mkdir(parents=True, exist_ok=True)

    debug_img = image.convert("RGB")
    draw = ImageDraw.Draw(debug_img)
    font = _load_font(12)

    if crop_rect is not None:
        draw.rectangle(crop_rect.as_box(), outline="blue", width=2)
        draw.text((10, 10), f"Crop: {crop_rect.width}x{crop_rect.height}", fill="blue", font=font)

    if result is not None:
        for index, block in enumerate(result.blocks):
            if block.bounding_box is None:
                continue

            color = get_confidence_color(block.confidence)
            draw.rectangle(block.bounding_box.as_box(), outline=color, width=2)
            draw.text(
                (block.bounding_box.left + 2, block.bounding_box.top - 14),
                str(index), fill=color, font=font
            )

        summary = f"Blocks: {len(result.blocks)}, Time: {result.processing_time_ms:.1f}ms"
        draw.text((10, 30), summary, fill="blue", font=font)

    debug_img.save(path, "PNG")

    _cleanup_debug_images()


def draw_overlay(
    image: Image.Image,
    primitives: Sequence,
    font_path: Optional[str] = None
) -> Image.Image:
    """
    Draw overlay primitives onto a copy of an image.

    Primitives must already be in the image's pixel space (e.g. rendered
    against an IntrinsicFitViewer the size of the image).

    Args:
        image: Source PIL Image (not modified)
        primitives: FillPrimitive / TextPrimitive sequence in draw order
        font_path: TrueType font matching the one used for fitting

    Returns:
        New RGBA image with the overlay composited
    """
    canvas = image.convert("RGBA")
    draw = ImageDraw.Draw(canvas, "RGBA")

    for primitive in primitives:
        if hasattr(primitive, "opacity"):
            rect = primitive.rect
            draw.rectangle(
                (rect.left, rect.top, rect.right, rect.bottom),
                fill=primitive.color + (primitive.alpha,)
            )
        elif not primitive.fit.is_empty:
            font = _load_font(primitive.fit.font_size, font_path)
            for line, x, y in primitive.line_origins():
                draw.text((x, y), line, fill=primitive.color + (255,), font=font)

    return canvas


def _cleanup_debug_images() -> None:
    """Remove old debug images, keeping only the most recent MAX_DEBUG_IMAGES."""
    if not DEBUG_DIR.exists():
        return

    debug_files = sorted(
        DEBUG_DIR.glob("debug_*.png"),
        key=lambda p: p.stat().st_mtime,
        reverse=True
    )

    for old_file in debug_files[MAX_DEBUG_IMAGES:]:
        try:
            old_file.unlink()
        except OSError as e:
            logger.debug(f"Could not remove {old_file}: {e}")


def get_confidence_color(confidence: float) -> str:
    """
    Get color code for confidence level.

    Args:
        confidence: Confidence value 0.0-1.0

    Returns:
        Hex color code string
    """
    if confidence >= HIGH_CONFIDENCE:
        return "#4CAF50"  # Green
    elif confidence >= MEDIUM_CONFIDENCE:
        return "#FFC107"  # Yellow
    else:
        return "#d32f2f"  # Red
