"""
Tesseract Recognizer

Text recognition backed by Tesseract through pytesseract. Words returned
by image_to_data() are grouped into lines and blocks using Tesseract's own
block/paragraph/line numbering, so one Tesseract block becomes one
TextBlock.
"""

import asyncio
import logging
import time
from collections import OrderedDict
from typing import Dict, List, Optional, Tuple

import pytesseract
from PIL import Image

from src.errors import RecognitionFailure
from src.geometry import SourceRect
from .base import TextRecognizer
from .result import RecognitionResult, TextBlock

logger = logging.getLogger(__name__)


# ISO 639-1 -> Tesseract traineddata names
TESSERACT_LANGUAGES: Dict[str, str] = {
    "en": "eng",
    "it": "ita",
    "es": "spa",
    "fr": "fra",
    "de": "deu",
    "ja": "jpn",
    "ko": "kor",
    "zh": "chi_sim",
}

# Words below this confidence (0-100) are dropped; Tesseract reports -1 for non-words
MIN_WORD_CONFIDENCE = 0.0


def to_tesseract_language(code: str) -> str:
    """Map an ISO 639-1 code to Tesseract's name, passing unknown codes through."""
    return TESSERACT_LANGUAGES.get(code, code)


class TesseractRecognizer(TextRecognizer):
    """
    Recognizer using the Tesseract OCR engine.

    Configuration:
        language: ISO 639-1 code of the text in the image (default "en")
        tesseract_cmd: Path to the tesseract binary if not on PATH
        config: Extra command-line options passed to tesseract
    """

    def __init__(self, language: str = "en"):
        self._language = language
        self._config = ""

    @property
    def name(self) -> str:
        return "tesseract"

    @property
    def language(self) -> str:
        return self._language

    def configure(self, **kwargs) -> None:
        if "language" in kwargs:
            self._language = kwargs["language"]
        if "tesseract_cmd" in kwargs:
            pytesseract.pytesseract.tesseract_cmd = kwargs["tesseract_cmd"]
        if "config" in kwargs:
            self._config = kwargs["config"]

    async def recognize(self, image: Image.Image) -> RecognitionResult:
        return await asyncio.to_thread(self._recognize_sync, image)

    def _recognize_sync(self, image: Image.Image) -> RecognitionResult:
        start_time = time.perf_counter()
        lang = to_tesseract_language(self._language)

        try:
            data = pytesseract.image_to_data(
                image,
                lang=lang,
                config=self._config,
                output_type=pytesseract.Output.DICT,
            )
        except (pytesseract.TesseractError, pytesseract.TesseractNotFoundError, RuntimeError) as e:
            raise RecognitionFailure(f"Tesseract failed: {e}") from e

        blocks = group_words(data)
        processing_time = (time.perf_counter() - start_time) * 1000
        logger.debug(f"Tesseract ({lang}): {len(blocks)} blocks in {processing_time:.1f}ms")

        return RecognitionResult(blocks=blocks, processing_time_ms=processing_time)


def group_words(data: Dict[str, list]) -> List[TextBlock]:
    """
    Group image_to_data() word rows into TextBlocks.

    Args:
        data: pytesseract DICT output

    Returns:
        Blocks in Tesseract's reading order
    """
    # (page, block) -> (page, block, par, line) -> words
    blocks: "OrderedDict[Tuple[int, int], OrderedDict[Tuple[int, int, int, int], List[str]]]" = OrderedDict()
    boxes: Dict[Tuple[int, int], SourceRect] = {}
    confidences: Dict[Tuple[int, int], List[float]] = {}

    for i, raw_text in enumerate(data.get("text", [])):
        text = (raw_text or "").strip()
        if not text:
            continue

        confidence = float(data["conf"][i])
        if confidence < MIN_WORD_CONFIDENCE:
            continue

        block_key = (int(data["page_num"][i]), int(data["block_num"][i]))
        line_key = block_key + (int(data["par_num"][i]), int(data["line_num"][i]))
        word_box = SourceRect.from_xywh(
            int(data["left"][i]), int(data["top"][i]),
            int(data["width"][i]), int(data["height"][i]),
        )

        lines = blocks.setdefault(block_key, OrderedDict())
        lines.setdefault(line_key, []).append(text)

        previous: Optional[SourceRect] = boxes.get(block_key)
        boxes[block_key] = word_box if previous is None else previous.union(word_box)
        confidences.setdefault(block_key, []).append(confidence)

    result = []
    for block_key, lines in blocks.items():
        line_texts = [" ".join(words) for words in lines.values()]
        scores = confidences[block_key]
        result.append(TextBlock(
            text="\n".join(line_texts),
            bounding_box=boxes[block_key],
            confidence=sum(scores) / len(scores) / 100.0,
            lines=line_texts,
        ))

    return result
