# src/player/engine.py
from __future__ import annotations

from PySide6.QtCore import QObject, Signal


class AudioEngine(QObject):
    """
    What the queue controller needs from an audio backend.

    Notification channels are independent: a position tick says nothing about
    the playing flag or the duration. `finished` fires only when media ends on
    its own, never because of stop().
    """

    playingChanged = Signal(bool)
    durationChanged = Signal(int)       # ms
    positionChanged = Signal(int)       # ms
    finished = Signal()
    loaded = Signal(str)                # path, media ready and playing
    loadFailed = Signal(str, str)       # path, message
    errorOccurred = Signal(str)         # mid-playback failure

    def load_and_play(self, path: str) -> None:
        """Start loading `path`. May raise EngineLoadFailure right away."""
        raise NotImplementedError

    def pause(self) -> None:
        raise NotImplementedError

    def resume(self) -> None:
        raise NotImplementedError

    def seek(self, ms: int) -> None:
        raise NotImplementedError

    def stop(self) -> None:
        raise NotImplementedError

    def set_volume(self, volume_0_to_1: float) -> None:
        pass

    def dispose(self) -> None:
        pass

    def backend_name(self) -> str:
        return type(self).__name__
