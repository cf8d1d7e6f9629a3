"""
Pipeline Worker Module for the Translation Overlay

Provides a background QThread that owns an asyncio event loop and runs
TranslationPipeline jobs on it. Communicates with the UI via Qt signals
for thread-safe result delivery.
"""

import asyncio
import logging
import time
from concurrent.futures import CancelledError, Future
from datetime import datetime
from typing import Optional

from PIL import Image
from PyQt5.QtCore import QThread, pyqtSignal

from src.ocr.debug import save_debug_image, DEBUG_DIR
from src.pipeline import PipelineResult, TranslationPipeline


# Configure module logger
logger = logging.getLogger(__name__)


class PipelineWorker(QThread):
    """
    Background worker thread for translation runs.

    At most one run is in flight. Submitting a new page cancels the
    current run (supersede) so an abandoned page never publishes results.

    Signals:
        status_changed(str): Emitted when worker status changes
        translations_ready(object): Emits the PipelineResult of a finished run
        error_occurred(str): Emitted when a run ends in the ERROR state

    Example:
        worker = PipelineWorker(pipeline)
        worker.translations_ready.connect(on_result)
        worker.start()
        worker.submit(page_image)
        # ...
        worker.request_stop()
        worker.wait()
    """

    status_changed = pyqtSignal(str)
    translations_ready = pyqtSignal(object)
    error_occurred = pyqtSignal(str)

    # Seconds to wait for the event loop to come up in submit()
    LOOP_START_TIMEOUT = 2.0

    def __init__(self, pipeline: TranslationPipeline, debug_mode: bool = False):
        """
        Initialize the pipeline worker.

        Args:
            pipeline: Pipeline owned by this worker from now on
            debug_mode: Save an annotated debug image after each run
        """
        super().__init__()
        self._pipeline = pipeline
        self._debug_mode = debug_mode
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self._current: Optional[Future] = None

    def run(self):
        """Thread body: run the event loop until request_stop()."""
        self._loop = asyncio.new_event_loop()
        asyncio.set_event_loop(self._loop)
        logger.info("Pipeline worker started")
        self.status_changed.emit("Ready")

        try:
            self._loop.run_forever()
        finally:
            pending = asyncio.all_tasks(self._loop)
            for task in pending:
                task.cancel()
            if pending:
                self._loop.run_until_complete(asyncio.gather(*pending, return_exceptions=True))
            self._pipeline.close()
            self._loop.close()
            self._loop = None
            logger.info("Pipeline worker stopped")

    def _wait_for_loop(self) -> bool:
        deadline = time.monotonic() + self.LOOP_START_TIMEOUT
        while self._loop is None or not self._loop.is_running():
            if time.monotonic() > deadline:
                return False
            time.sleep(0.01)
        return True

    def submit(self, image: Image.Image, auto_crop: Optional[bool] = None) -> bool:
        """
        Start translating a page, cancelling any run in progress.

        Args:
            image: Page image (the caller keeps ownership)
            auto_crop: Override the pipeline's auto-crop setting

        Returns:
            True if the run was scheduled
        """
        if not self._wait_for_loop():
            logger.warning("Worker loop not running, submit ignored")
            return False

        if self._current is not None and not self._current.done():
            logger.info("Superseding in-flight translation run")
            self._current.cancel()

        self.status_changed.emit("Translating...")
        self._current = asyncio.run_coroutine_threadsafe(self._run_once(image, auto_crop), self._loop)
        self._current.add_done_callback(self._on_run_done)
        return True

    async def _run_once(self, image: Image.Image, auto_crop: Optional[bool]) -> PipelineResult:
        result = await self._pipeline.run(image, auto_crop=auto_crop)
        if self._debug_mode:
            self._save_debug_image(image, result)
        return result

    def _on_run_done(self, future: Future) -> None:
        try:
            result = future.result()
        except CancelledError:
            logger.debug("Translation run cancelled")
            return
        except Exception as e:
            logger.exception("Error in translation run")
            self.error_occurred.emit(str(e))
            return

        if result.error is not None:
            self.error_occurred.emit(str(result.error))
            self.status_changed.emit("Error")
        else:
            self.status_changed.emit(f"Done ({len(result.lines)} lines)")
        self.translations_ready.emit(result)

    def set_languages(self, source: str, target: str) -> None:
        """Switch languages on the loop thread. Takes effect from the next run."""
        def apply():
            try:
                self._pipeline.set_languages(source, target)
            except Exception as e:
                logger.error(f"Failed to switch languages to {source} -> {target}: {e}")
                self.error_occurred.emit(f"Cannot translate {source} -> {target}: {e}")

        if self._loop is None:
            apply()
            return

        self._loop.call_soon_threadsafe(apply)

    def set_debug_mode(self, enabled: bool) -> None:
        self._debug_mode = enabled

    def request_stop(self):
        """
        Request the worker to stop.

        Cancels the current run. Use wait() after calling this to block
        until stopped.
        """
        logger.info("Stop requested")
        if self._current is not None:
            self._current.cancel()
            self._current = None
        if self._loop is not None:
            self._loop.call_soon_threadsafe(self._loop.stop)

    def _save_debug_image(self, image: Image.Image, result: PipelineResult) -> Optional[str]:
        """Save the page with crop bounds and recognised blocks drawn on it."""
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")[:-3]
        filepath = DEBUG_DIR / f"debug_{timestamp}.png"

        try:
            save_debug_image(image, result.recognition, result.crop_rect, str(filepath))
        except OSError as e:
            logger.warning(f"Failed to save debug image: {e}")
            return None

        logger.info(f"Debug image saved: {filepath}")
        return str(filepath)
