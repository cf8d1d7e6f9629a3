"""
Text Recognition Module

Pluggable recognizer architecture for extracting text blocks from page images.

Usage:
    from src.ocr import create_recognizer

    recognizer = create_recognizer("tesseract", language="en")
    result = await recognizer.recognize(image)

    for block in result.blocks:
        print(block.text, block.bounding_box)
"""

# Public API - Result types
from .result import (
    TextBlock,
    RecognitionResult,
)

# Public API - Base class for custom engines
from .base import TextRecognizer

# Public API - Factory functions
from .factory import (
    create_recognizer,
    register_recognizer,
    available_recognizers,
)

# Debug utilities
from .debug import DEBUG_DIR, save_debug_image, draw_overlay

__all__ = [
    # Result types
    "TextBlock",
    "RecognitionResult",
    # Base class
    "TextRecognizer",
    # Factory
    "create_recognizer",
    "register_recognizer",
    "available_recognizers",
    # Debug
    "DEBUG_DIR",
    "save_debug_image",
    "draw_overlay",
]
