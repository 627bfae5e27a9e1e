"""Tests for rescan coordination (cancel-and-restart) and the scan worker."""

from pathlib import Path

import pytest
from PySide6.QtCore import QObject, Signal

from conftest import FakeEngine, SignalSpy, make_tracks, write_file
from core.config import AppConfig
from core.state import AppState
from player.queue import QueueController
from ui.workers.library_scanner import LibraryScanner
from ui.workers.scan_coordinator import ScanCoordinator


class FakeWorker(QObject):
    progress_signal = Signal(int, int)
    tracks_signal = Signal(int, list)
    finished_signal = Signal(int, bool, str)

    def __init__(self, directories, extensions=(), sort=True, generation=0):
        super().__init__()
        self.directories = directories
        self.extensions = extensions
        self.sort = sort
        self.generation = generation
        self.started = False
        self.cancelled = False
        self.done = False
        self.stuck = False

    def start(self):
        self.started = True

    def cancel(self):
        self.cancelled = True

    def isRunning(self):
        return self.started and not self.done

    def wait(self, timeout_ms=None):
        if self.stuck:
            return False
        self.done = True
        return True

    def complete(self, tracks, ok=True, msg="done"):
        self.progress_signal.emit(self.generation, len(tracks))
        if ok:
            self.tracks_signal.emit(self.generation, tracks)
        self.finished_signal.emit(self.generation, ok, msg)
        self.done = True


@pytest.fixture
def workers():
    return []


@pytest.fixture
def coordinator(workers):
    app_state = AppState(AppConfig(roots=("/music",), extensions=(".mp3", ".flac"), sort_results=False))

    def factory(*args, **kwargs):
        w = FakeWorker(*args, **kwargs)
        workers.append(w)
        return w

    return ScanCoordinator(app_state, worker_factory=factory)


def test_rescan_uses_config(coordinator, workers):
    coordinator.rescan()

    (w,) = workers
    assert w.started
    assert w.directories == ["/music"]
    assert w.extensions == (".mp3", ".flac")
    assert w.sort is False
    assert coordinator.app_state.queue.scanning is True


def test_results_replace_tracks(coordinator, workers):
    finished = SignalSpy(coordinator.scanFinished)
    coordinator.rescan()
    tracks = make_tracks(3)

    workers[0].complete(tracks)

    queue = coordinator.app_state.queue
    assert queue.tracks == tracks
    assert queue.scanning is False
    assert finished.calls == [(True, "done")]


def test_results_go_through_controller(coordinator, workers):
    app_state = coordinator.app_state
    app_state.controller = QueueController(FakeEngine(), app_state.queue)
    app_state.controller.set_tracks(make_tracks(2))
    app_state.controller.play(1)

    coordinator.rescan()
    workers[0].complete(make_tracks(4))

    assert len(app_state.queue.tracks) == 4
    assert app_state.controller.current_index == 1
    app_state.controller.dispose()


def test_rescan_while_running_cancels_previous(coordinator, workers):
    coordinator.rescan()
    coordinator.rescan()

    first, second = workers
    assert first.cancelled
    assert not second.cancelled

    first.complete(make_tracks(5))       # superseded, dropped
    assert coordinator.app_state.queue.tracks == []
    assert coordinator.app_state.queue.scanning is True

    second.complete(make_tracks(2))
    assert len(coordinator.app_state.queue.tracks) == 2
    assert coordinator.app_state.queue.scanning is False


def test_cancel(coordinator, workers):
    coordinator.rescan()
    coordinator.cancel()

    assert workers[0].cancelled
    assert coordinator.app_state.queue.scanning is False
    assert not coordinator.is_scanning()

    workers[0].complete(make_tracks(1))
    assert coordinator.app_state.queue.tracks == []


def test_failed_scan_notifies(coordinator, workers):
    notes = SignalSpy(coordinator.app_state.notification)
    coordinator.rescan()

    workers[0].complete([], ok=False, msg="Scan failed: boom")

    assert coordinator.app_state.queue.scanning is False
    assert notes.calls[-1][0].notify_type == "error"


def test_progress_forwarded_only_for_current(coordinator, workers):
    progress = SignalSpy(coordinator.progress)
    coordinator.rescan()
    coordinator.rescan()

    workers[0].progress_signal.emit(workers[0].generation, 10)
    workers[1].progress_signal.emit(workers[1].generation, 3)

    assert progress.calls == [(3,)]


def test_shutdown_waits_for_workers(coordinator, workers):
    coordinator.rescan()
    coordinator.shutdown()

    assert workers[0].cancelled
    assert workers[0].done
    assert coordinator.app_state.queue.scanning is False



def test_shutdown_keeps_threads_that_did_not_stop(coordinator, workers):
    coordinator.rescan()
    coordinator.rescan()
    workers[0].stuck = True

    coordinator.shutdown(timeout_ms=10)

    assert coordinator._threads == [workers[0]]
    assert coordinator.app_state.queue.scanning is False

def test_library_scanner_run_inline(tmp_path: Path):
    write_file(tmp_path / "a.mp3")
    write_file(tmp_path / "b.mp3")
    worker = LibraryScanner([str(tmp_path)], generation=7)
    tracks_spy = SignalSpy(worker.tracks_signal)
    finished_spy = SignalSpy(worker.finished_signal)

    worker.run()

    generation, tracks = tracks_spy.calls[0]
    assert generation == 7
    assert [t.title for t in tracks] == ["a", "b"]
    assert finished_spy.calls == [(7, True, "Found 2 track(s)")]


def test_library_scanner_cancelled(tmp_path: Path):
    write_file(tmp_path / "a.mp3")
    worker = LibraryScanner([str(tmp_path)], generation=1)
    finished_spy = SignalSpy(worker.finished_signal)

    worker.cancel()
    worker.run()

    assert finished_spy.calls == [(1, False, "Scan cancelled")]
