"""
Error Types

Failure taxonomy shared by the pipeline, the engine adapters and the mapper.
None of these are fatal: each one degrades to "show nothing new".
"""

from typing import Optional


class OverlayError(Exception):
    """Base class for all translation-overlay failures."""


class RecognitionFailure(OverlayError):
    """The recognizer call itself failed (no text, bad image, engine missing)."""


class ModelUnavailable(OverlayError):
    """The translation model for a language pair could not be made available."""

    def __init__(self, source_language: str, target_language: str, reason: str = ""):
        self.source_language = source_language
        self.target_language = target_language
        message = f"Translation model {source_language}->{target_language} unavailable"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)


class BlockTranslationFailure(OverlayError):
    """A single text block failed to translate; the run continues without it."""

    def __init__(self, index: int, text: str, cause: Optional[BaseException] = None):
        self.index = index
        self.text = text
        self.cause = cause
        super().__init__(f"Block {index} failed to translate: {cause}")


class GeometryUnavailable(OverlayError):
    """The viewer has no usable geometry this frame (not ready, content not loaded)."""
