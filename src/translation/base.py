"""
Translation Engine Base Interface

Abstract base class defining the translator contract.
"""

from abc import ABC, abstractmethod


# Languages offered in the reader settings (label, ISO 639-1 code)
SUPPORTED_LANGUAGES = [
    ("English", "en"),
    ("Italian", "it"),
    ("Spanish", "es"),
    ("French", "fr"),
    ("German", "de"),
    ("Japanese", "ja"),
    ("Korean", "ko"),
    ("Chinese", "zh"),
]


class TranslationEngine(ABC):
    """
    Abstract base class for translators.

    An instance is bound to one (source, target) language pair for its
    whole life. Changing either language means closing this instance and
    creating a new one. Language codes are opaque strings passed through
    to the underlying engine.
    """

    name: str = "base"

    def __init__(self, source_language: str, target_language: str):
        self.source_language = source_language
        self.target_language = target_language
        self._closed = False

    @abstractmethod
    async def ensure_model_available(self) -> None:
        """
        Make sure the model for this language pair is present, downloading it if needed.

        Raises:
            ModelUnavailable: If the model cannot be obtained
        """
        pass

    @abstractmethod
    async def translate(self, text: str) -> str:
        """
        Translate one piece of text.

        Args:
            text: Source-language text

        Returns:
            Target-language text
        """
        pass

    def close(self) -> None:
        """Release the engine. Safe to call more than once."""
        self._closed = True

    @property
    def closed(self) -> bool:
        return self._closed

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.source_language}->{self.target_language})"
