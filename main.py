"""
Page Translation Overlay - Entry Point

Opens the reader window, runs recognition + translation on a background
worker, and paints translated text over the page.

Example:
    python main.py --image page.png
    python main.py --image page.png --source ja --target en --auto-crop
"""

import sys
import logging
import argparse
from functools import partial
from typing import Optional

from PyQt5.QtWidgets import QApplication

from src.autocrop import AutoCropDetector
from src.control_ui import ReaderWindow
from src.ocr import create_recognizer
from src.pipeline import TranslationPipeline
from src.pipeline_worker import PipelineWorker
from src.settings import load_settings, save_settings, background_opacity, font_scale, step_preference
from src.translation import create_translator


# Configure logging - output to both console and file
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    datefmt="%H:%M:%S",
    handlers=[
        logging.StreamHandler(),  # Console output
        logging.FileHandler("translator.log", mode='w', encoding='utf-8')  # File output
    ]
)
logger = logging.getLogger(__name__)


class Application:
    """
    Main application controller.

    Manages the lifecycle of the reader window and the pipeline worker,
    connecting signals between them.
    """

    def __init__(self, args: argparse.Namespace):
        """
        Initialize the application.

        Args:
            args: Parsed command line arguments (override saved settings)
        """
        self.args = args
        self.window: Optional[ReaderWindow] = None
        self.worker: Optional[PipelineWorker] = None

        # Load persistent settings
        self.settings = load_settings()
        if args.source:
            self.settings["source_language"] = args.source
        if args.target:
            self.settings["target_language"] = args.target
        if args.auto_crop:
            self.settings["auto_crop"] = True

        # CLI flag overrides saved setting
        self.debug_mode = args.debug or self.settings.get("debug_enabled", False)

    def _create_pipeline(self) -> TranslationPipeline:
        recognizer = create_recognizer(self.settings["recognizer"])
        factory = partial(create_translator, self.settings["translator"])
        detector = AutoCropDetector(
            threshold=int(self.settings["crop_threshold"]),
            stride=int(self.settings["crop_stride"]),
        )
        return TranslationPipeline(
            recognizer,
            factory,
            source_language=self.settings["source_language"],
            target_language=self.settings["target_language"],
            auto_crop=bool(self.settings["auto_crop"]),
            crop_detector=detector,
        )

    def setup(self):
        """Set up the UI, worker, and connect signals."""
        self.window = ReaderWindow(
            auto_crop=bool(self.settings["auto_crop"]),
            source_language=self.settings["source_language"],
            target_language=self.settings["target_language"],
        )
        self.window.overlay.set_preferences(background_opacity(self.settings), font_scale(self.settings))

        self.worker = PipelineWorker(self._create_pipeline(), debug_mode=self.debug_mode)

        # Window -> worker
        self.window.translate_requested.connect(self._on_translate)
        self.window.image_opened.connect(self._on_image_opened)
        self.window.auto_crop_toggled.connect(self._on_auto_crop_toggled)
        self.window.languages_changed.connect(self._on_languages_changed)
        self.window.preference_step.connect(self._on_preference_step)
        self.window.shutdown_requested.connect(self._on_shutdown)

        # Worker -> window
        self.worker.status_changed.connect(self.window.set_status)
        self.worker.error_occurred.connect(self._on_error)
        self.worker.translations_ready.connect(self._on_translations_ready)

        self.worker.start()

        if self.debug_mode:
            logger.info("Debug mode enabled - debug images will be saved after each run")

        logger.info(
            f"Application initialized: {self.settings['source_language']} -> "
            f"{self.settings['target_language']}, recognizer={self.settings['recognizer']}, "
            f"translator={self.settings['translator']}"
        )

    def _on_image_opened(self, image):
        """A new page is shown: start translating it right away."""
        self.worker.submit(image, auto_crop=self.window.auto_crop)

    def _on_translate(self):
        """Handle translate key."""
        if self.window.image is not None:
            self.worker.submit(self.window.image, auto_crop=self.window.auto_crop)

    def _on_translations_ready(self, result):
        """Show the lines of a finished run."""
        self.window.overlay.set_translations(result.lines)

    def _on_auto_crop_toggled(self, enabled: bool):
        """Handle auto-crop toggle and persist it."""
        logger.info(f"Auto-crop toggled: {enabled}")
        self.settings["auto_crop"] = enabled
        save_settings(self.settings)

    def _on_languages_changed(self, source: str, target: str):
        """Rebuild the translator for the new pair and persist it."""
        logger.info(f"Languages changed: {source} -> {target}")
        self.worker.set_languages(source, target)
        self.settings["source_language"] = source
        self.settings["target_language"] = target
        save_settings(self.settings)

    def _on_preference_step(self, name: str, direction: int):
        """Adjust opacity or font scale, repaint the overlay and persist it."""
        value = step_preference(self.settings, name, direction)
        save_settings(self.settings)
        self.window.overlay.set_preferences(background_opacity(self.settings), font_scale(self.settings))
        label = "Opacity" if name == "background_opacity" else "Font size"
        self.window.set_status(f"{label}: {value:.0%}")

    def _on_error(self, error_msg: str):
        """Handle worker error."""
        logger.error(f"Worker error: {error_msg}")

    def _on_shutdown(self):
        """Handle window close."""
        logger.info("Shutdown requested")
        if self.worker and self.worker.isRunning():
            self.worker.request_stop()
            self.worker.wait(2000)  # 2 second timeout

            if self.worker.isRunning():
                logger.warning("Worker did not stop gracefully, terminating")
                self.worker.terminate()
                self.worker.wait()

        self.worker = None

    def run(self) -> int:
        """
        Show the window and open the initial page, if any.

        Returns:
            Exit code
        """
        self.window.show()
        if self.args.image:
            self.window.load_image(self.args.image)
        return 0


def parse_args():
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Page Translation Overlay - translated text over page images"
    )
    parser.add_argument(
        "--image", "-i",
        help="Page image to open on start"
    )
    parser.add_argument(
        "--source", "-s",
        help="Source language code (default: saved setting)"
    )
    parser.add_argument(
        "--target", "-t",
        help="Target language code (default: saved setting)"
    )
    parser.add_argument(
        "--auto-crop", "-c",
        action="store_true",
        help="Crop page borders before recognition"
    )
    parser.add_argument(
        "--debug", "-d",
        action="store_true",
        help="Enable debug mode (save annotated debug images after each run)"
    )
    return parser.parse_args()


def main():
    """Initialize and run the translation overlay application."""
    args = parse_args()

    app = QApplication(sys.argv)

    application = Application(args)
    application.setup()
    application.run()

    sys.exit(app.exec_())


if __name__ == "__main__":
    main()
