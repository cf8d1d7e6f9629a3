"""
Text Fitting

Lays out translated text inside a target box: finds the largest font size
whose centre-aligned, word-wrapped layout fits the box height, applies the
user's font scale, and re-wraps at the final size.

Overflow is allowed: at the minimum size, text that still does not fit runs
past the bottom of the box and is never truncated.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple

from PIL import ImageFont

from src.geometry import ViewRect

logger = logging.getLogger(__name__)


# Font search parameters (pixels)
MAX_FONT_SIZE = 100.0
MIN_FONT_SIZE = 10.0
FONT_SIZE_STEP = 2.0

# Line spacing multiplier
LINE_SPACING = 1.0


class TextMeasurer(ABC):
    """Measures text for a given font size."""

    @abstractmethod
    def text_width(self, text: str, size: float) -> float:
        """Advance width of a single line of text."""
        pass

    @abstractmethod
    def line_height(self, size: float) -> float:
        """Height of one line (ascent + descent) at unit spacing."""
        pass


class PilTextMeasurer(TextMeasurer):
    """
    Measures text with Pillow fonts.

    Uses the TrueType font at `font_path` when given, otherwise Pillow's
    bundled default font. Fonts are cached per size.
    """

    def __init__(self, font_path: Optional[str] = None):
        self._font_path = font_path
        self._fonts: Dict[float, ImageFont.FreeTypeFont] = {}

    def _font(self, size: float):
        key = round(size, 2)
        font = self._fonts.get(key)
        if font is None:
            font = self._load_font(key)
            self._fonts[key] = font
        return font

    def _load_font(self, size: float):
        if self._font_path:
            try:
                return ImageFont.truetype(self._font_path, size)
            except OSError as e:
                logger.warning(f"Failed to load font {self._font_path}: {e}, using default")
                self._font_path = None
        return ImageFont.load_default(size=size)

    def text_width(self, text: str, size: float) -> float:
        return float(self._font(size).getlength(text))

    def line_height(self, size: float) -> float:
        ascent, descent = self._font(size).getmetrics()
        return float(ascent + descent)


@dataclass(frozen=True)
class FitResult:
    """Laid-out text at its final size."""
    font_size: float
    lines: Tuple[str, ...]
    total_height: float
    line_height: float = 0.0
    line_widths: Tuple[float, ...] = ()

    @classmethod
    def empty(cls) -> "FitResult":
        return cls(font_size=0.0, lines=(), total_height=0.0)

    @property
    def is_empty(self) -> bool:
        return not self.lines


class TextFitter:
    """
    Picks the largest font size that fits text into a box.

    Stateless apart from the measurer's font cache: identical inputs
    always give identical FitResults.
    """

    def __init__(
        self,
        measurer: Optional[TextMeasurer] = None,
        max_size: float = MAX_FONT_SIZE,
        min_size: float = MIN_FONT_SIZE,
        step: float = FONT_SIZE_STEP,
        line_spacing: float = LINE_SPACING,
    ):
        self.measurer = measurer or PilTextMeasurer()
        self.max_size = max_size
        self.min_size = min_size
        self.step = step
        self.line_spacing = line_spacing

    def fit(self, text: str, width: float, height: float, user_scale: float = 1.0) -> FitResult:
        """
        Fit text into a width x height box.

        Args:
            text: Text to lay out
            width: Box width (wrap width)
            height: Box height
            user_scale: Multiplier applied to the fitted size; may cause overflow

        Returns:
            FitResult at the final size, or an empty result if width <= 0
        """
        if width <= 0:
            return FitResult.empty()

        size = self.max_size
        while size > self.min_size:
            if self.layout(text, width, size).total_height <= height:
                break
            size -= self.step

        size = max(size * user_scale, self.min_size)
        return self.layout(text, width, size)

    def fit_rect(self, text: str, rect: ViewRect, user_scale: float = 1.0) -> FitResult:
        return self.fit(text, rect.width, rect.height, user_scale)

    def layout(self, text: str, width: float, size: float) -> FitResult:
        """Wrap text at a fixed size and measure it."""
        lines = self.wrap(text, width, size)
        line_height = self.measurer.line_height(size) * self.line_spacing
        widths = tuple(self.measurer.text_width(line, size) for line in lines)
        return FitResult(
            font_size=size,
            lines=tuple(lines),
            total_height=line_height * len(lines),
            line_height=line_height,
            line_widths=widths,
        )

    def wrap(self, text: str, width: float, size: float) -> List[str]:
        """
        Greedy word wrap.

        Explicit newlines start a new line. A word wider than `width`
        is broken between characters.
        """
        if not text.strip():
            return []

        measure = self.measurer.text_width
        lines: List[str] = []

        for paragraph in text.split("\n"):
            words = paragraph.split()
            if not words:
                lines.append("")
                continue

            current = ""
            for word in words:
                candidate = f"{current} {word}" if current else word
                if measure(candidate, size) <= width:
                    current = candidate
                    continue

                if current:
                    lines.append(current)

                if measure(word, size) <= width:
                    current = word
                else:
                    pieces = self._break_word(word, width, size)
                    lines.extend(pieces[:-1])
                    current = pieces[-1]

            lines.append(current)

        return lines

    def _break_word(self, word: str, width: float, size: float) -> List[str]:
        pieces: List[str] = []
        current = ""
        for char in word:
            if current and self.measurer.text_width(current + char, size) > width:
                pieces.append(current)
                current = char
            else:
                current += char
        pieces.append(current)
        return pieces


def vertical_offset(fit: FitResult, box_height: float) -> float:
    """Centre text shorter than the box; top-align text that overflows."""
    if fit.total_height < box_height:
        return (box_height - fit.total_height) / 2
    return 0.0
