"""
Tests for font-size fitting and word wrapping.

Most tests use a fixed-width measurer (each character is half the font
size wide, lines are one font size tall) so expected sizes are exact.

Usage:
    pytest tests/test_text_fit.py
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.geometry import ViewRect
from src.text_fit import (
    FitResult,
    MAX_FONT_SIZE,
    MIN_FONT_SIZE,
    PilTextMeasurer,
    TextFitter,
    TextMeasurer,
    vertical_offset,
)


class FixedWidthMeasurer(TextMeasurer):
    def text_width(self, text, size):
        return len(text) * size * 0.5

    def line_height(self, size):
        return float(size)


LONG_TEXT = "This translated sentence is much longer than the speech bubble it replaces " * 3


@pytest.fixture
def fitter():
    return TextFitter(FixedWidthMeasurer())


def test_short_text_in_large_box_uses_max_size(fitter):
    result = fitter.fit("Hi", 1000, 1000)

    assert result.font_size == MAX_FONT_SIZE
    assert result.lines == ("Hi",)
    assert result.total_height == 100


def test_long_text_in_tiny_box_uses_floor(fitter):
    result = fitter.fit(LONG_TEXT, 40, 10, user_scale=1.0)

    assert result.font_size == MIN_FONT_SIZE
    # Overflow is allowed, not clipped
    assert result.total_height > 10


def test_user_scale_doubles_floor_size(fitter):
    result = fitter.fit(LONG_TEXT, 40, 10, user_scale=2.0)

    assert result.font_size == 2 * MIN_FONT_SIZE


def test_user_scale_is_not_capped_by_box(fitter):
    result = fitter.fit("Hi", 1000, 1000, user_scale=2.0)

    assert result.font_size == 2 * MAX_FONT_SIZE
    assert result.total_height > 1000 / 10


def test_user_scale_below_floor_is_clamped(fitter):
    result = fitter.fit("Hi", 1000, 1000, user_scale=0.05)

    assert result.font_size == MIN_FONT_SIZE


def test_largest_fitting_size_is_chosen(fitter):
    # One line of 9 chars fits 100px wide up to size 22.2; two lines never fit 30px tall above 15
    result = fitter.fit("aaaa bbbb", 100, 30)

    assert result.font_size == 22
    assert result.lines == ("aaaa bbbb",)


def test_fit_is_idempotent(fitter):
    first = fitter.fit(LONG_TEXT, 120, 80, user_scale=1.3)
    second = fitter.fit(LONG_TEXT, 120, 80, user_scale=1.3)

    assert first == second


def test_non_positive_width_returns_empty(fitter):
    assert fitter.fit("Hello", 0, 100) == FitResult.empty()
    assert fitter.fit("Hello", -5, 100).is_empty


def test_fit_rect_uses_rect_size(fitter):
    assert fitter.fit_rect("Hi", ViewRect(10, 10, 1010, 1010)) == fitter.fit("Hi", 1000, 1000)


def test_wrap_breaks_on_words(fitter):
    assert fitter.wrap("hello world", 30, 10) == ["hello", "world"]


def test_wrap_keeps_words_together_when_they_fit(fitter):
    assert fitter.wrap("a b c d", 20, 10) == ["a b", "c d"]


def test_wrap_breaks_long_words_by_character(fitter):
    assert fitter.wrap("abcdefghij", 20, 10) == ["abcd", "efgh", "ij"]


def test_wrap_honours_newlines(fitter):
    assert fitter.wrap("one\ntwo", 1000, 10) == ["one", "two"]


def test_wrap_blank_text_has_no_lines(fitter):
    assert fitter.wrap("   ", 100, 10) == []


def test_layout_measures_each_line(fitter):
    result = fitter.layout("hello world", 30, 10)

    assert result.line_widths == (25.0, 25.0)
    assert result.line_height == 10
    assert result.total_height == 20


def test_vertical_offset_centres_short_text():
    fit = FitResult(font_size=10, lines=("a", "b"), total_height=20, line_height=10, line_widths=(5, 5))

    assert vertical_offset(fit, 100) == 40


def test_vertical_offset_top_aligns_overflow():
    fit = FitResult(font_size=10, lines=("a",) * 12, total_height=120, line_height=10)

    assert vertical_offset(fit, 100) == 0
    assert vertical_offset(FitResult(10, ("a",), 100.0, 100.0), 100) == 0


def test_pillow_measurer_fits_short_text_at_max_size():
    fitter = TextFitter(PilTextMeasurer())
    result = fitter.fit("Hi", 2000, 2000)

    assert result.font_size == MAX_FONT_SIZE
    assert result.lines == ("Hi",)


def test_pillow_measurer_width_grows_with_size():
    measurer = PilTextMeasurer()

    assert measurer.text_width("Hello", 40) > measurer.text_width("Hello", 20) > 0
    assert measurer.line_height(40) > measurer.line_height(20)


def test_pillow_measurer_falls_back_when_font_missing():
    measurer = PilTextMeasurer("/nonexistent/font.ttf")

    assert measurer.text_width("Hello", 20) > 0
