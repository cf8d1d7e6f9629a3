"""
Tests for viewer geometry and source -> view coordinate mapping.

Usage:
    pytest tests/test_viewers.py
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.geometry import SourceRect, ViewRect
from src.viewers import (
    CoordinateMapper,
    FixedFrameViewer,
    FreeZoomViewer,
    IntrinsicFitViewer,
    ViewerKind,
)


@pytest.fixture
def mapper():
    return CoordinateMapper()


def test_intrinsic_fit_scales_both_axes(mapper):
    viewer = IntrinsicFitViewer(view_width=400, view_height=200, intrinsic_width=200, intrinsic_height=100)

    assert mapper.map_to_view(SourceRect(10, 10, 50, 50), viewer) == ViewRect(20, 20, 100, 100)


def test_intrinsic_fit_independent_axis_scales(mapper):
    viewer = IntrinsicFitViewer(view_width=100, view_height=300, intrinsic_width=200, intrinsic_height=100)

    assert mapper.map_to_view(SourceRect(20, 10, 40, 30), viewer) == ViewRect(10, 30, 20, 90)


@pytest.mark.parametrize("width,height", [(0, 100), (200, 0), (0, 0)])
def test_intrinsic_fit_without_content_yields_nothing(mapper, width, height):
    viewer = IntrinsicFitViewer(view_width=400, view_height=200, intrinsic_width=width, intrinsic_height=height)

    assert not viewer.is_available
    assert mapper.map_to_view(SourceRect(10, 10, 50, 50), viewer) is None


def test_fixed_frame_offsets_by_display_rect(mapper):
    viewer = FixedFrameViewer(
        display_rect=ViewRect(100, 50, 500, 250),
        intrinsic_width=200,
        intrinsic_height=100,
    )

    assert mapper.map_to_view(SourceRect(10, 10, 50, 50), viewer) == ViewRect(120, 70, 200, 150)


def test_fixed_frame_panned_off_screen(mapper):
    # Display rect partly above/left of the view after panning
    viewer = FixedFrameViewer(
        display_rect=ViewRect(-300, -100, 100, 100),
        intrinsic_width=400,
        intrinsic_height=200,
    )

    assert mapper.map_to_view(SourceRect(0, 0, 100, 100), viewer) == ViewRect(-300, -100, -200, 0)


def test_fixed_frame_without_content_yields_nothing(mapper):
    viewer = FixedFrameViewer(display_rect=ViewRect(0, 0, 100, 100), intrinsic_width=0, intrinsic_height=50)

    assert mapper.map_to_view(SourceRect(0, 0, 10, 10), viewer) is None


def test_free_zoom_maps_each_corner(mapper):
    calls = []

    def transform(x, y):
        calls.append((x, y))
        return x * 3 + 5, y * 3 + 7

    viewer = FreeZoomViewer(source_to_view=transform, ready=True)
    rect = mapper.map_to_view(SourceRect(10, 20, 30, 40), viewer)

    assert rect == ViewRect(35, 67, 95, 127)
    assert calls == [(10.0, 20.0), (30.0, 40.0)]


def test_free_zoom_not_ready_yields_nothing(mapper):
    viewer = FreeZoomViewer(source_to_view=lambda x, y: (x, y), ready=False)

    assert mapper.map_to_view(SourceRect(0, 0, 10, 10), viewer) is None


def test_free_zoom_missing_point_yields_nothing(mapper):
    viewer = FreeZoomViewer(source_to_view=lambda x, y: None if x > 5 else (x, y))

    assert mapper.map_to_view(SourceRect(0, 0, 10, 10), viewer) is None


def test_empty_mapping_differs_from_no_geometry(mapper):
    # Everything collapses to one point: geometry exists, rect is empty
    viewer = FreeZoomViewer(source_to_view=lambda x, y: (0.0, 0.0))
    rect = mapper.map_to_view(SourceRect(0, 0, 10, 10), viewer)

    assert rect is not None
    assert rect.is_empty


def test_viewer_kinds_are_explicit():
    assert FreeZoomViewer(source_to_view=lambda x, y: (x, y)).kind == ViewerKind.FREE_ZOOM
    assert FixedFrameViewer(ViewRect(0, 0, 1, 1), 1, 1).kind == ViewerKind.FIXED_FRAME
    assert IntrinsicFitViewer(1, 1, 1, 1).kind == ViewerKind.INTRINSIC_FIT


def test_inverted_rects_are_rejected():
    with pytest.raises(ValueError):
        SourceRect(10, 0, 5, 10)
    with pytest.raises(ValueError):
        ViewRect(0, 10, 10, 5)


def test_degenerate_rect_is_valid():
    rect = SourceRect(5, 5, 5, 20)
    assert rect.is_empty
    assert rect.width == 0
