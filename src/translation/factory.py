"""
Translator Factory

Registry and factory for translation engines.
"""

import importlib
from typing import Dict, List, Type, Union

from .base import TranslationEngine


# Registry of available engines ("module.Class" paths are imported lazily)
_ENGINE_REGISTRY: Dict[str, Union[str, Type[TranslationEngine]]] = {
    "argos": "argos_engine.ArgosTranslationEngine",
}

# Cache for loaded engine classes
_ENGINE_CACHE: Dict[str, Type[TranslationEngine]] = {}


def _load_engine_class(engine_type: str) -> Type[TranslationEngine]:
    """Lazily load an engine class by type."""
    if engine_type in _ENGINE_CACHE:
        return _ENGINE_CACHE[engine_type]

    entry = _ENGINE_REGISTRY[engine_type]
    if isinstance(entry, str):
        module_name, class_name = entry.rsplit(".", 1)
        module = importlib.import_module(f".{module_name}", package="src.translation")
        engine_class = getattr(module, class_name)
    else:
        engine_class = entry

    _ENGINE_CACHE[engine_type] = engine_class
    return engine_class


def create_translator(
    engine_type: str,
    source_language: str,
    target_language: str,
    **config
) -> TranslationEngine:
    """
    Create a translation engine bound to a language pair.

    Args:
        engine_type: Engine type identifier. Available types:
            - "argos": offline Argos Translate models
        source_language: Source language code
        target_language: Target language code
        **config: Engine-specific constructor options

    Returns:
        TranslationEngine instance

    Raises:
        ValueError: If engine_type is not recognized
    """
    if engine_type not in _ENGINE_REGISTRY:
        available = ", ".join(_ENGINE_REGISTRY.keys())
        raise ValueError(f"Unknown translator: {engine_type}. Available: {available}")

    engine_class = _load_engine_class(engine_type)
    return engine_class(source_language, target_language, **config)


def register_translator(name: str, engine_class: type) -> None:
    """
    Register a custom translation engine type.

    Args:
        name: Engine type identifier
        engine_class: TranslationEngine subclass
    """
    if not issubclass(engine_class, TranslationEngine):
        raise TypeError(f"{engine_class} must be a subclass of TranslationEngine")
    _ENGINE_REGISTRY[name] = engine_class
    _ENGINE_CACHE.pop(name, None)


def available_translators() -> List[str]:
    """
    List available translator types.

    Returns:
        List of registered engine type names
    """
    return list(_ENGINE_REGISTRY.keys())
