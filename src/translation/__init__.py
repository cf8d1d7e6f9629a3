"""
Translation Module

Pluggable translation engines bound to a (source, target) language pair.

Usage:
    from src.translation import create_translator

    translator = create_translator("argos", "en", "it")
    await translator.ensure_model_available()
    text = await translator.translate("Hello")
    translator.close()
"""

from .base import TranslationEngine, SUPPORTED_LANGUAGES
from .factory import (
    create_translator,
    register_translator,
    available_translators,
)

__all__ = [
    "TranslationEngine",
    "SUPPORTED_LANGUAGES",
    "create_translator",
    "register_translator",
    "available_translators",
]
