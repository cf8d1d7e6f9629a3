"""
Tests for overlay primitive generation.

Usage:
    pytest tests/test_overlay_renderer.py
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.geometry import SourceRect, ViewRect
from src.overlay_renderer import FillPrimitive, OverlayRenderer, TextPrimitive
from src.pipeline import TranslatedLine
from src.text_fit import TextFitter, TextMeasurer, vertical_offset
from src.viewers import FreeZoomViewer, IntrinsicFitViewer


class FixedWidthMeasurer(TextMeasurer):
    def text_width(self, text, size):
        return len(text) * size * 0.5

    def line_height(self, size):
        return float(size)


# Identity viewer: view space == image space
IDENTITY = IntrinsicFitViewer(view_width=1000, view_height=1000, intrinsic_width=1000, intrinsic_height=1000)


@pytest.fixture
def renderer():
    return OverlayRenderer(TextFitter(FixedWidthMeasurer()))


def make_lines(count):
    return [
        TranslatedLine(f"orig {i}", f"translated {i}", SourceRect(10, 100 * i, 210, 100 * i + 80))
        for i in range(count)
    ]


def test_no_lines_no_primitives(renderer):
    assert renderer.render([], IDENTITY, 0.8, 1.0) == []


def test_two_primitives_per_line_in_input_order(renderer):
    lines = make_lines(3)
    primitives = renderer.render(lines, IDENTITY, 0.8, 1.0)

    assert len(primitives) == 6
    for i, line in enumerate(lines):
        fill, text = primitives[2 * i], primitives[2 * i + 1]
        assert isinstance(fill, FillPrimitive)
        assert isinstance(text, TextPrimitive)
        assert fill.rect == ViewRect(10, 100 * i, 210, 100 * i + 80)
        assert text.rect == fill.rect
        assert " ".join(text.fit.lines) == line.translated_text


def test_recognition_order_is_kept_not_spatial_order(renderer):
    lines = list(reversed(make_lines(3)))
    primitives = renderer.render(lines, IDENTITY, 0.8, 1.0)

    tops = [p.rect.top for p in primitives if isinstance(p, FillPrimitive)]
    assert tops == [200, 100, 0]


def test_render_is_idempotent(renderer):
    lines = make_lines(4)
    assert renderer.render(lines, IDENTITY, 0.5, 1.2) == renderer.render(lines, IDENTITY, 0.5, 1.2)


def test_opacity_is_clamped(renderer):
    high = renderer.render(make_lines(1), IDENTITY, 1.7, 1.0)[0]
    low = renderer.render(make_lines(1), IDENTITY, -0.2, 1.0)[0]

    assert high.opacity == 1.0
    assert high.alpha == 255
    assert low.opacity == 0.0


def test_zero_width_rects_are_skipped(renderer):
    lines = make_lines(2) + [TranslatedLine("x", "y", SourceRect(50, 50, 50, 90))]

    assert len(renderer.render(lines, IDENTITY, 0.8, 1.0)) == 4


def test_unavailable_geometry_renders_nothing(renderer):
    not_ready = FreeZoomViewer(source_to_view=lambda x, y: (x, y), ready=False)
    not_loaded = IntrinsicFitViewer(100, 100, 0, 0)

    assert renderer.render(make_lines(2), not_ready, 0.8, 1.0) == []
    assert renderer.render(make_lines(2), not_loaded, 0.8, 1.0) == []


def test_rects_follow_viewer_scale(renderer):
    half = IntrinsicFitViewer(view_width=500, view_height=500, intrinsic_width=1000, intrinsic_height=1000)
    fill = renderer.render(make_lines(1), half, 0.8, 1.0)[0]

    assert fill.rect == ViewRect(5, 0, 105, 40)


def test_text_origin_is_vertically_centred(renderer):
    text = renderer.render(make_lines(1), IDENTITY, 0.8, 1.0)[1]

    expected_top = text.rect.top + vertical_offset(text.fit, text.rect.height)
    assert text.origin == (text.rect.left, expected_top)


def test_overflowing_text_is_top_aligned(renderer):
    lines = [TranslatedLine("a", "word " * 40, SourceRect(0, 0, 40, 10))]
    text = renderer.render(lines, IDENTITY, 0.8, 1.0)[1]

    assert text.fit.total_height > text.rect.height
    assert text.origin == (0, 0)


def test_line_origins_are_horizontally_centred(renderer):
    lines = [TranslatedLine("a", "Hi", SourceRect(0, 0, 200, 100))]
    text = renderer.render(lines, IDENTITY, 0.8, 1.0)[1]

    (line, x, y), = list(text.line_origins())
    line_width = text.fit.line_widths[0]
    assert line == "Hi"
    assert x == pytest.approx((200 - line_width) / 2)
    assert y == text.origin[1]


def test_font_scale_is_applied(renderer):
    plain = renderer.render(make_lines(1), IDENTITY, 0.8, 1.0)[1]
    doubled = renderer.render(make_lines(1), IDENTITY, 0.8, 2.0)[1]

    assert doubled.fit.font_size == 2 * plain.fit.font_size
