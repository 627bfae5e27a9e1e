"""Shared test fixtures: an offscreen Qt application, a fake audio engine and track helpers."""

import os
from pathlib import Path

import pytest
from PySide6.QtWidgets import QApplication

from core.errors import EngineLoadFailure
from core.models import Track
from core.state import AppState, QueueState
from player.engine import AudioEngine
from player.queue import QueueController


@pytest.fixture(scope="session", autouse=True)
def qapp():
    os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")
    app = QApplication.instance() or QApplication([])
    yield app


class FakeEngine(AudioEngine):
    """Records commands and emits notifications on demand.

    With auto_load=True a successful load_and_play reports playing + loaded
    right away; otherwise the test emits `loaded` / `loadFailed` itself.
    """

    def __init__(self, auto_load: bool = True):
        super().__init__()
        self.auto_load = auto_load
        self.fail_paths: set[str] = set()
        self.calls: list[tuple] = []
        self.disposed = False

    def load_and_play(self, path: str) -> None:
        self.calls.append(("load_and_play", path))
        if path in self.fail_paths:
            raise EngineLoadFailure(path, "corrupt file")
        if self.auto_load:
            self.playingChanged.emit(True)
            self.loaded.emit(path)

    def pause(self) -> None:
        self.calls.append(("pause",))
        self.playingChanged.emit(False)

    def resume(self) -> None:
        self.calls.append(("resume",))
        self.playingChanged.emit(True)

    def seek(self, ms: int) -> None:
        self.calls.append(("seek", ms))

    def stop(self) -> None:
        self.calls.append(("stop",))
        self.playingChanged.emit(False)

    def dispose(self) -> None:
        self.calls.append(("dispose",))
        self.disposed = True

    def loads(self) -> list[str]:
        return [c[1] for c in self.calls if c[0] == "load_and_play"]


class SignalSpy:
    def __init__(self, signal):
        self.calls: list[tuple] = []
        signal.connect(self._record)

    def _record(self, *args):
        self.calls.append(args)

    def __len__(self):
        return len(self.calls)


def make_tracks(n: int, base: str = "/music") -> list[Track]:
    return [Track(title=f"song{i}", path=f"{base}/song{i}.mp3") for i in range(n)]


def write_file(path: Path, content: bytes = b"ID3 dummy audio") -> Path:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(content)
    return path


@pytest.fixture
def engine():
    return FakeEngine()


@pytest.fixture
def state():
    return QueueState()


@pytest.fixture
def controller(engine, state):
    ctl = QueueController(engine, state)
    ctl.set_tracks(make_tracks(3))
    yield ctl
    ctl.dispose()


@pytest.fixture
def app_state():
    return AppState()
