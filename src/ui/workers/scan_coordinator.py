# ui/workers/scan_coordinator.py
from __future__ import annotations

import logging

from PySide6.QtCore import QObject, Signal, Slot

from library.scan_library import AUDIO_EXTS
from library.storage import music_roots
from ui.workers.library_scanner import LibraryScanner

logger = logging.getLogger(__name__)


class ScanCoordinator(QObject):
    """
    Owns library rescans. A rescan while another is running cancels the old
    worker (cancel-and-restart); anything a superseded worker still reports
    is dropped by generation number.
    """

    scanStarted = Signal()
    scanFinished = Signal(bool, str)   # ok, message
    progress = Signal(int)

    def __init__(self, app_state, worker_factory=LibraryScanner):
        super().__init__()
        self.app_state = app_state
        self._worker_factory = worker_factory
        self._generation = 0
        self._worker = None
        self._threads: list = []   # cancelled workers stay referenced until they stop

    def is_scanning(self) -> bool:
        return self._worker is not None

    def rescan(self, roots: list[str] | None = None) -> None:
        config = self.app_state.config
        if roots is None:
            roots = music_roots(config)

        self._cancel_current()
        self._prune_threads()

        self._generation += 1
        worker = self._worker_factory(
            roots,
            extensions=config.extensions if config is not None else AUDIO_EXTS,
            sort=config.sort_results if config is not None else True,
            generation=self._generation,
        )
        worker.progress_signal.connect(self._on_progress)
        worker.tracks_signal.connect(self._on_tracks)
        worker.finished_signal.connect(self._on_finished)
        self._worker = worker
        self._threads.append(worker)

        logger.info("Scanning %d root(s): %s", len(roots), ", ".join(roots))
        self.app_state.queue.set_scanning(True)
        self.scanStarted.emit()
        worker.start()

    def cancel(self) -> None:
        if self._cancel_current():
            self.app_state.queue.set_scanning(False)

    def shutdown(self, timeout_ms: int = 5000) -> None:
        self._cancel_current()
        # a thread that is still running must stay referenced
        self._threads = [w for w in self._threads if not w.wait(timeout_ms)]
        if self._threads:
            logger.warning("%d scan thread(s) still running after shutdown", len(self._threads))
        self.app_state.queue.set_scanning(False)

    def _cancel_current(self) -> bool:
        worker = self._worker
        if worker is None:
            return False
        worker.cancel()
        self._worker = None
        self._generation += 1
        logger.info("Cancelled in-flight scan")
        return True

    def _prune_threads(self) -> None:
        self._threads = [w for w in self._threads if w.isRunning()]

    @Slot(int, int)
    def _on_progress(self, generation: int, found: int):
        if generation == self._generation:
            self.progress.emit(found)

    @Slot(int, list)
    def _on_tracks(self, generation: int, tracks):
        if generation != self._generation:
            return
        controller = self.app_state.controller
        if controller is not None:
            controller.set_tracks(tracks)
        else:
            self.app_state.queue.set_tracks(tracks)

    @Slot(int, bool, str)
    def _on_finished(self, generation: int, ok: bool, msg: str):
        if generation != self._generation:
            logger.debug("Dropping result of superseded scan: %s", msg)
            return
        self._worker = None
        self._prune_threads()
        self.app_state.queue.set_scanning(False)
        if not ok:
            self.app_state.notify(f"Library scanning failed: {msg}", "error")
        self.scanFinished.emit(ok, msg)
