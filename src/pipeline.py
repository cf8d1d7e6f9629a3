"""
Translation Pipeline

Runs one page through: optional auto-crop -> recognition -> block merge ->
per-block translation, and returns the translated lines ready for the
overlay renderer.

State Flow:
    IDLE -> CROPPING -> RECOGNIZING -> MERGING -> TRANSLATING -> DONE
                 (skipped if       |                  |
                  auto-crop off)   +------> ERROR <---+
                                (recognition    (model download
                                 failed)         failed)

Failure policy:
    - Recognition failure or model download failure abort the run with an
      empty result. Nothing is raised to the caller.
    - A single block that fails to translate is dropped; the run continues.
    - Cancellation propagates CancelledError. No partial result is published.

Runs on the same pipeline are serialized. A language switch requested while
a run is in flight is applied once that run finishes, so the translator it
is using is never closed underneath it.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Callable, List, Optional, Tuple

from PIL import Image

from src.autocrop import AutoCropDetector, CropResult
from src.errors import (
    BlockTranslationFailure,
    ModelUnavailable,
    OverlayError,
    RecognitionFailure,
)
from src.geometry import SourceRect
from src.ocr import RecognitionResult, TextBlock, TextRecognizer
from src.translation import TranslationEngine

logger = logging.getLogger(__name__)


__all__ = [
    "PipelineState",
    "TranslatedLine",
    "TranslatorState",
    "BlockOutcome",
    "PipelineResult",
    "TranslationPipeline",
    "rebuild_translator",
    "merge_blocks",
]


TranslatorFactory = Callable[[str, str], TranslationEngine]


class PipelineState(Enum):
    """
    Pipeline run states.

    States:
        IDLE: No run in progress
        CROPPING: Detecting the content region
        RECOGNIZING: Waiting on the recognizer
        MERGING: Flattening recognised blocks into translatable units
        TRANSLATING: Downloading the model (if needed) and translating blocks
        DONE: Run finished with a result
        ERROR: Run aborted (recognition or model failure)
    """
    IDLE = auto()
    CROPPING = auto()
    RECOGNIZING = auto()
    MERGING = auto()
    TRANSLATING = auto()
    DONE = auto()
    ERROR = auto()


@dataclass(frozen=True)
class TranslatedLine:
    """One translated text block and where it sits on the page."""
    original_text: str
    translated_text: str
    bounding_box: SourceRect  # Displayed (uncropped) image pixel space


@dataclass
class TranslatorState:
    """Translator handle plus the language pair it is bound to."""
    source_language: str
    target_language: str
    translator: TranslationEngine
    model_ready: bool = False


def rebuild_translator(
    state: Optional[TranslatorState],
    source_language: str,
    target_language: str,
    factory: TranslatorFactory
) -> TranslatorState:
    """
    Build a translator for a new pair, then release the current one (if any).

    Args:
        state: Current state, or None on first construction
        source_language: New source language code
        target_language: New target language code
        factory: Creates a TranslationEngine for a language pair

    Returns:
        Fresh TranslatorState owning the new translator

    Raises:
        Whatever the factory raises; `state` is then left open and usable
    """
    translator = factory(source_language, target_language)

    if state is not None:
        logger.debug(f"Closing translator {state.translator!r}")
        state.translator.close()

    logger.info(f"Translator ready: {source_language} -> {target_language}")
    return TranslatorState(source_language, target_language, translator)


@dataclass(frozen=True)
class BlockOutcome:
    """Result of translating one block: either a line or a failure."""
    index: int
    line: Optional[TranslatedLine] = None
    error: Optional[BlockTranslationFailure] = None

    @property
    def ok(self) -> bool:
        return self.line is not None


@dataclass
class PipelineResult:
    """Outcome of one pipeline run."""
    lines: List[TranslatedLine]
    state: PipelineState
    error: Optional[OverlayError] = None
    crop_rect: Optional[SourceRect] = None
    recognition: Optional[RecognitionResult] = None  # Boxes in displayed image space
    failed_blocks: List[BlockTranslationFailure] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.state == PipelineState.DONE


def shift_recognition(result: RecognitionResult, dx: int, dy: int) -> RecognitionResult:
    """Move every block box by (dx, dy), e.g. from cropped to full-image space."""
    if dx == 0 and dy == 0:
        return result

    blocks = [
        TextBlock(
            text=block.text,
            bounding_box=block.bounding_box.offset(dx, dy) if block.bounding_box else None,
            confidence=block.confidence,
            lines=list(block.lines),
        )
        for block in result.blocks
    ]
    return RecognitionResult(blocks=blocks, processing_time_ms=result.processing_time_ms)


def merge_blocks(result: RecognitionResult) -> List[Tuple[str, SourceRect]]:
    """
    Turn recognised blocks into translatable units.

    One recognised block is one unit. Line breaks inside a block become
    spaces so a sentence wrapped across lines is translated whole.
    Blocks without a box or without text are skipped.
    """
    units = []
    for block in result.blocks:
        if block.bounding_box is None:
            continue
        text = block.text.replace("\n", " ").strip()
        if not text:
            continue
        units.append((text, block.bounding_box))
    return units


class TranslationPipeline:
    """
    Orchestrates recognition and translation for one page at a time.

    Owns the translator exclusively; only the pipeline changes languages
    or recreates it.

    Usage:
        pipeline = TranslationPipeline(recognizer, factory, "en", "it")
        result = await pipeline.run(page_image, auto_crop=True)
        overlay.set_translations(result.lines)
        ...
        pipeline.close()
    """

    def __init__(
        self,
        recognizer: TextRecognizer,
        translator_factory: TranslatorFactory,
        source_language: str = "en",
        target_language: str = "it",
        auto_crop: bool = False,
        crop_detector: Optional[AutoCropDetector] = None,
    ):
        """
        Initialize the pipeline and its first translator.

        Args:
            recognizer: Text recognizer (external OCR engine)
            translator_factory: Builds a translator for a language pair
            source_language: Initial source language code
            target_language: Initial target language code
            auto_crop: Crop to the content region before recognition by default
            crop_detector: Detector to use (default thresholds if None)
        """
        self._recognizer = recognizer
        self._translator_factory = translator_factory
        self.auto_crop = auto_crop
        self._crop_detector = crop_detector or AutoCropDetector()

        self._recognizer.configure(language=source_language)
        self._engine: TranslatorState = rebuild_translator(
            None, source_language, target_language, translator_factory
        )

        self._state = PipelineState.IDLE
        self._lock = asyncio.Lock()
        self._pending_languages: Optional[Tuple[str, str]] = None
        self._last_result: Optional[PipelineResult] = None
        self._closed = False

    @property
    def state(self) -> PipelineState:
        return self._state

    @property
    def translator_state(self) -> TranslatorState:
        return self._engine

    @property
    def languages(self) -> Tuple[str, str]:
        """Requested (source, target) pair, including a deferred switch."""
        if self._pending_languages is not None:
            return self._pending_languages
        return self._engine.source_language, self._engine.target_language

    @property
    def source_language(self) -> str:
        return self.languages[0]

    @property
    def target_language(self) -> str:
        return self.languages[1]

    @property
    def last_result(self) -> Optional[PipelineResult]:
        return self._last_result

    @property
    def is_running(self) -> bool:
        return self._lock.locked()

    def set_source_language(self, language: str) -> None:
        """
        Switch source language. No-op if unchanged; never retranslates.

        When idle, a factory error propagates and the current pair stays
        in use. During a run the switch is deferred and such an error is
        only logged.
        """
        self._request_languages(language, self.target_language)

    def set_target_language(self, language: str) -> None:
        """Switch target language. Same rules as set_source_language()."""
        self._request_languages(self.source_language, language)

    def set_languages(self, source: str, target: str) -> None:
        """Switch both languages with a single translator rebuild."""
        self._request_languages(source, target)

    def _request_languages(self, source: str, target: str) -> None:
        if (source, target) == self.languages:
            return

        if self._lock.locked():
            logger.info(f"Run in progress, deferring language switch to {source} -> {target}")
            self._pending_languages = (source, target)
            return

        self._apply_languages(source, target)

    def _apply_languages(self, source: str, target: str) -> None:
        previous_source = self._engine.source_language
        self._engine = rebuild_translator(self._engine, source, target, self._translator_factory)
        if source != previous_source:
            self._recognizer.configure(language=source)

    def _apply_pending_languages(self) -> None:
        if self._pending_languages is None:
            return
        source, target = self._pending_languages
        self._pending_languages = None
        if (source, target) == (self._engine.source_language, self._engine.target_language):
            return
        try:
            self._apply_languages(source, target)
        except Exception as e:
            logger.error(f"Language switch to {source} -> {target} failed, keeping "
                         f"{self._engine.source_language} -> {self._engine.target_language}: {e}")

    def _set_state(self, state: PipelineState) -> None:
        logger.debug(f"Pipeline: {self._state.name} -> {state.name}")
        self._state = state

    async def run(self, image: Image.Image, auto_crop: Optional[bool] = None) -> PipelineResult:
        """
        Run the full pipeline on one image.

        Concurrent calls queue behind each other. To supersede a run,
        cancel its task before starting the next one.

        Args:
            image: Page image (not modified or closed)
            auto_crop: Override the pipeline's auto_crop setting

        Returns:
            PipelineResult; `lines` is empty on any run-level failure

        Raises:
            RuntimeError: If the pipeline was closed (caller bug, not a run failure)
        """
        if self._closed:
            raise RuntimeError("Pipeline is closed")

        use_crop = self.auto_crop if auto_crop is None else auto_crop

        async with self._lock:
            try:
                result = await self._run_locked(image, use_crop)
            except asyncio.CancelledError:
                logger.info("Pipeline run cancelled")
                self._set_state(PipelineState.IDLE)
                raise
            finally:
                self._apply_pending_languages()

            self._last_result = result
            return result

    async def _run_locked(self, image: Image.Image, use_crop: bool) -> PipelineResult:
        crop: Optional[CropResult] = None
        work_image = image

        if use_crop:
            self._set_state(PipelineState.CROPPING)
            crop = self._crop_detector.crop(image)
            work_image = crop.image

        crop_rect = crop.rect if crop is not None else None

        try:
            self._set_state(PipelineState.RECOGNIZING)
            recognition = await self._recognizer.recognize(work_image)
        except Exception as e:
            failure = e if isinstance(e, RecognitionFailure) else RecognitionFailure(str(e))
            logger.error(f"Recognition failed: {failure}")
            return self._fail(failure, crop_rect)
        finally:
            if crop is not None:
                crop.release()

        self._set_state(PipelineState.MERGING)
        if crop_rect is not None:
            recognition = shift_recognition(recognition, crop_rect.left, crop_rect.top)
        units = merge_blocks(recognition)
        logger.info(f"Recognised {len(recognition.blocks)} blocks, {len(units)} translatable")

        if not units:
            self._set_state(PipelineState.DONE)
            return PipelineResult(lines=[], state=PipelineState.DONE, crop_rect=crop_rect,
                                  recognition=recognition)

        self._set_state(PipelineState.TRANSLATING)
        engine = self._engine

        if not engine.model_ready:
            try:
                await engine.translator.ensure_model_available()
            except Exception as e:
                failure = e if isinstance(e, ModelUnavailable) else ModelUnavailable(
                    engine.source_language, engine.target_language, str(e)
                )
                logger.error(f"Model download failed: {failure}")
                return self._fail(failure, crop_rect)
            engine.model_ready = True

        outcomes: List[BlockOutcome] = []
        for index, (text, box) in enumerate(units):
            outcomes.append(await self._translate_block(engine.translator, index, text, box))

        lines = [outcome.line for outcome in outcomes if outcome.ok]
        failures = [outcome.error for outcome in outcomes if not outcome.ok]
        if failures:
            logger.warning(f"{len(failures)} of {len(outcomes)} blocks failed to translate")

        self._set_state(PipelineState.DONE)
        return PipelineResult(
            lines=lines,
            state=PipelineState.DONE,
            crop_rect=crop_rect,
            recognition=recognition,
            failed_blocks=failures,
        )

    async def _translate_block(
        self,
        translator: TranslationEngine,
        index: int,
        text: str,
        box: SourceRect
    ) -> BlockOutcome:
        try:
            translated = await translator.translate(text)
        except Exception as e:
            failure = BlockTranslationFailure(index, text, e)
            logger.warning(f"Translation failed for block {index} ({text[:40]!r}): {e}")
            return BlockOutcome(index=index, error=failure)

        return BlockOutcome(index=index, line=TranslatedLine(text, translated, box))

    def _fail(self, error: OverlayError, crop_rect: Optional[SourceRect]) -> PipelineResult:
        self._set_state(PipelineState.ERROR)
        return PipelineResult(lines=[], state=PipelineState.ERROR, error=error, crop_rect=crop_rect)

    def close(self) -> None:
        """Release the translator and recognizer."""
        if self._closed:
            return
        self._closed = True
        self._engine.translator.close()
        self._recognizer.close()
        logger.info("Pipeline closed")
