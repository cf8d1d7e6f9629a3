"""
Recognizer Factory

Factory for creating text recognizer instances.
"""

import importlib
from typing import Dict, List, Type, Union

from .base import TextRecognizer


# Registry of available engines ("module.Class" paths are imported lazily)
_ENGINE_REGISTRY: Dict[str, Union[str, Type[TextRecognizer]]] = {
    "tesseract": "tesseract_engine.TesseractRecognizer",
}

# Cache for loaded engine classes
_ENGINE_CACHE: Dict[str, Type[TextRecognizer]] = {}


def _load_engine_class(engine_type: str) -> Type[TextRecognizer]:
    """Lazily load an engine class by type."""
    if engine_type in _ENGINE_CACHE:
        return _ENGINE_CACHE[engine_type]

    entry = _ENGINE_REGISTRY[engine_type]
    if isinstance(entry, str):
        module_name, class_name = entry.rsplit(".", 1)
        module = importlib.import_module(f".{module_name}", package="src.ocr")
        engine_class = getattr(module, class_name)
    else:
        engine_class = entry

    _ENGINE_CACHE[engine_type] = engine_class
    return engine_class


def create_recognizer(engine_type: str = "tesseract", **config) -> TextRecognizer:
    """
    Create a text recognizer by type.

    Args:
        engine_type: Engine type identifier. Available types:
            - "tesseract" (default): Tesseract via pytesseract
        **config: Engine-specific configuration options:
            For "tesseract":
                - language: ISO 639-1 source language code
                - tesseract_cmd: Path to the tesseract executable

    Returns:
        Configured TextRecognizer instance

    Raises:
        ValueError: If engine_type is not recognized

    Example:
        recognizer = create_recognizer("tesseract", language="en")
        result = await recognizer.recognize(image)
    """
    if engine_type not in _ENGINE_REGISTRY:
        available = ", ".join(_ENGINE_REGISTRY.keys())
        raise ValueError(f"Unknown engine type: {engine_type}. Available: {available}")

    engine_class = _load_engine_class(engine_type)
    engine = engine_class()

    if config:
        engine.configure(**config)

    return engine


def register_recognizer(name: str, engine_class: type) -> None:
    """
    Register a custom recognizer type.

    Args:
        name: Engine type identifier
        engine_class: TextRecognizer subclass

    Example:
        class MyRecognizer(TextRecognizer):
            ...

        register_recognizer("custom", MyRecognizer)
    """
    if not issubclass(engine_class, TextRecognizer):
        raise TypeError(f"{engine_class} must be a subclass of TextRecognizer")
    _ENGINE_REGISTRY[name] = engine_class
    _ENGINE_CACHE.pop(name, None)


def available_recognizers() -> List[str]:
    """
    List available recognizer types.

    Returns:
        List of registered engine type names
    """
    return list(_ENGINE_REGISTRY.keys())
