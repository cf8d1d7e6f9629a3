"""
Tests for grouping Tesseract word rows into text blocks.

Feeds hand-built image_to_data() dictionaries, so the tesseract binary
is not needed.

Usage:
    pytest tests/test_tesseract_grouping.py
"""

import sys
from pathlib import Path

import pytest

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from src.geometry import SourceRect
from src.ocr.tesseract_engine import group_words, to_tesseract_language


def make_data(rows):
    """rows: (block, par, line, text, conf, left, top, width, height)"""
    data = {key: [] for key in (
        "page_num", "block_num", "par_num", "line_num", "text", "conf",
        "left", "top", "width", "height",
    )}
    for block, par, line, text, conf, left, top, width, height in rows:
        data["page_num"].append(1)
        data["block_num"].append(block)
        data["par_num"].append(par)
        data["line_num"].append(line)
        data["text"].append(text)
        data["conf"].append(conf)
        data["left"].append(left)
        data["top"].append(top)
        data["width"].append(width)
        data["height"].append(height)
    return data


def test_words_are_grouped_into_lines_and_blocks():
    data = make_data([
        (1, 1, 1, "", -1, 0, 0, 300, 200),        # Block row, no text
        (1, 1, 1, "Hello", 96, 10, 10, 50, 20),
        (1, 1, 1, "there", 90, 70, 12, 45, 20),
        (1, 1, 2, "friend", 84, 10, 40, 60, 20),
        (2, 1, 1, "Bye", 80, 200, 150, 30, 18),
    ])

    blocks = group_words(data)

    assert len(blocks) == 2
    first, second = blocks
    assert first.text == "Hello there\nfriend"
    assert first.lines == ["Hello there", "friend"]
    assert first.bounding_box == SourceRect(10, 10, 115, 60)
    assert first.confidence == pytest.approx(0.9)
    assert second.text == "Bye"
    assert second.bounding_box == SourceRect(200, 150, 230, 168)


def test_blank_and_negative_confidence_words_are_dropped():
    data = make_data([
        (1, 1, 1, "   ", 95, 0, 0, 10, 10),
        (1, 1, 1, "noise", -1, 0, 0, 10, 10),
        (2, 1, 1, "Kept", 70, 5, 5, 20, 10),
    ])

    blocks = group_words(data)

    assert [block.text for block in blocks] == ["Kept"]


def test_empty_data_gives_no_blocks():
    assert group_words(make_data([])) == []


def test_language_codes_map_to_traineddata_names():
    assert to_tesseract_language("en") == "eng"
    assert to_tesseract_language("zh") == "chi_sim"
    assert to_tesseract_language("eng+jpn") == "eng+jpn"
