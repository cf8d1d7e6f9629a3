"""
Argos Translate Engine

Offline translation with Argos Translate. Models are fetched from the
Argos package index the first time a language pair is used; pairs without
a direct package are chained through English (see argos_packages).
"""

import asyncio
import logging

import argostranslate.package
import argostranslate.translate

from src.errors import ModelUnavailable
from .argos_packages import find_package, plan_packages
from .base import TranslationEngine

logger = logging.getLogger(__name__)


class ArgosTranslationEngine(TranslationEngine):
    """Translator backed by locally installed Argos Translate models."""

    name = "argos"

    def __init__(self, source_language: str, target_language: str, update_index: bool = True):
        super().__init__(source_language, target_language)
        self._update_index = update_index

    def _is_available(self) -> bool:
        """True if installed models can translate this pair, directly or chained."""
        languages = {lang.code: lang for lang in argostranslate.translate.get_installed_languages()}
        source = languages.get(self.source_language)
        target = languages.get(self.target_language)
        if source is None or target is None:
            return False
        return source.get_translation(target) is not None

    def _download_and_install(self) -> None:
        if self._is_available():
            return

        logger.info(f"Downloading Argos models for {self.source_language}->{self.target_language}")
        if self._update_index:
            argostranslate.package.update_package_index()

        available = argostranslate.package.get_available_packages()
        installed = argostranslate.package.get_installed_packages()
        for from_code, to_code in plan_packages(available, installed, self.source_language, self.target_language):
            package = find_package(available, from_code, to_code)
            argostranslate.package.install_from_path(package.download())
            logger.info(f"Installed Argos model {from_code}->{to_code}")

        if not self._is_available():
            raise ModelUnavailable(self.source_language, self.target_language, "installed models cannot chain")

    async def ensure_model_available(self) -> None:
        try:
            await asyncio.to_thread(self._download_and_install)
        except ModelUnavailable:
            raise
        except Exception as e:
            raise ModelUnavailable(self.source_language, self.target_language, str(e)) from e

    async def translate(self, text: str) -> str:
        return await asyncio.to_thread(
            argostranslate.translate.translate,
            text,
            self.source_language,
            self.target_language,
        )
