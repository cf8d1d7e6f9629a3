"""
Geometry Primitives

Rectangles in source-image pixel space and in on-screen view space.
"""

from dataclasses import dataclass
from typing import Tuple


@dataclass(frozen=True)
class SourceRect:
    """Integer pixel rectangle in (possibly cropped) image space."""
    left: int
    top: int
    right: int
    bottom: int

    def __post_init__(self):
        if self.left > self.right or self.top > self.bottom:
            raise ValueError(f"Inverted rectangle: {self}")

    @classmethod
    def from_xywh(cls, x: int, y: int, width: int, height: int) -> "SourceRect":
        return cls(x, y, x + width, y + height)

    @property
    def width(self) -> int:
        return self.right - self.left

    @property
    def height(self) -> int:
        return self.bottom - self.top

    @property
    def is_empty(self) -> bool:
        """Zero width or height (valid "no match" signal)."""
        return self.width == 0 or self.height == 0

    def offset(self, dx: int, dy: int) -> "SourceRect":
        return SourceRect(self.left + dx, self.top + dy, self.right + dx, self.bottom + dy)

    def union(self, other: "SourceRect") -> "SourceRect":
        return SourceRect(
            min(self.left, other.left),
            min(self.top, other.top),
            max(self.right, other.right),
            max(self.bottom, other.bottom),
        )

    def as_box(self) -> Tuple[int, int, int, int]:
        """(left, top, right, bottom) tuple as PIL expects it."""
        return self.left, self.top, self.right, self.bottom


@dataclass(frozen=True)
class ViewRect:
    """Floating-point rectangle in view (on-screen) space."""
    left: float
    top: float
    right: float
    bottom: float

    def __post_init__(self):
        if self.left > self.right or self.top > self.bottom:
            raise ValueError(f"Inverted rectangle: {self}")

    @classmethod
    def from_points(cls, p1: Tuple[float, float], p2: Tuple[float, float]) -> "ViewRect":
        """Build a rect from two opposite corners given in any order."""
        (x1, y1), (x2, y2) = p1, p2
        return cls(min(x1, x2), min(y1, y2), max(x1, x2), max(y1, y2))

    @property
    def width(self) -> float:
        return self.right - self.left

    @property
    def height(self) -> float:
        return self.bottom - self.top

    @property
    def is_empty(self) -> bool:
        return self.width <= 0 or self.height <= 0
