"""
Text Recognizer Base Interface

Abstract base class defining the recognizer contract.
"""

from abc import ABC, abstractmethod
from PIL import Image

from .result import RecognitionResult


class TextRecognizer(ABC):
    """
    Abstract base class for text recognizers.

    Implementations wrap an external OCR engine. recognize() is a
    one-shot coroutine; engines with blocking APIs should run them in a
    worker thread so the pipeline's event loop stays responsive.
    """

    @abstractmethod
    async def recognize(self, image: Image.Image) -> RecognitionResult:
        """
        Recognise text blocks in an image.

        Args:
            image: PIL Image (read-only; must not be closed by the engine)

        Returns:
            RecognitionResult with blocks in recognition order

        Raises:
            RecognitionFailure: If the engine cannot process the image
        """
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """
        Engine identifier.

        Returns:
            String name identifying this engine type (e.g., "tesseract")
        """
        pass

    def configure(self, **kwargs) -> None:
        """
        Configure engine parameters.

        Override in subclasses to support runtime configuration
        (e.g. language=<ISO 639-1 code>). Default implementation does nothing.
        """
        pass

    def close(self) -> None:
        """Release engine resources. Default implementation does nothing."""
        pass
