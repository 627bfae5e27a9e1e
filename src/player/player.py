# src/player/player.py
from __future__ import annotations

import logging
import os
import stat

from mutagen import File as MutagenFile
from mutagen import MutagenError
from PySide6.QtCore import QUrl
from PySide6.QtMultimedia import QMediaPlayer, QAudioOutput

from core.errors import EngineLoadFailure
from .engine import AudioEngine

logger = logging.getLogger(__name__)


def probe_audio_file(path: str) -> None:
    """
    Cheap checks before the file reaches QMediaPlayer, so a bad selection does
    not interrupt whatever is currently playing.
    """
    try:
        st = os.stat(path)
    except OSError as e:
        raise EngineLoadFailure(path, e.strerror or str(e)) from e

    if not stat.S_ISREG(st.st_mode):
        raise EngineLoadFailure(path, "not a regular file")
    if st.st_size <= 0:
        raise EngineLoadFailure(path, "file is empty")
    if not os.access(path, os.R_OK):
        raise EngineLoadFailure(path, "permission denied")

    try:
        audio = MutagenFile(path)
    except (MutagenError, OSError) as e:
        raise EngineLoadFailure(path, f"unreadable audio data ({e})") from e

    if audio is None or getattr(audio, "info", None) is None:
        raise EngineLoadFailure(path, "unsupported format")


class QtAudioEngine(AudioEngine):
    """AudioEngine backed by QtMultimedia."""

    def __init__(self, volume: float = 0.7, probe=probe_audio_file):
        super().__init__()
        self._probe = probe
        self._pending_path: str | None = None
        self._current_path: str | None = None
        self._disposed = False

        self.audio = QAudioOutput()
        self.media = QMediaPlayer()
        self.media.setAudioOutput(self.audio)

        self.set_volume(volume)

        # Qt signal forwarding
        self.media.positionChanged.connect(self._on_qt_position)
        self.media.durationChanged.connect(self._on_qt_duration)
        self.media.playbackStateChanged.connect(self._on_qt_state_changed)
        self.media.mediaStatusChanged.connect(self._on_qt_media_status)
        self.media.errorOccurred.connect(self._on_qt_error)

    # ----------------------------
    # Qt handlers
    # ----------------------------

    def _on_qt_position(self, ms: int) -> None:
        self.positionChanged.emit(int(ms))

    def _on_qt_duration(self, ms: int) -> None:
        self.durationChanged.emit(max(0, int(ms)))

    def _on_qt_state_changed(self, state: QMediaPlayer.PlaybackState) -> None:
        self.playingChanged.emit(state == QMediaPlayer.PlaybackState.PlayingState)

    def _on_qt_media_status(self, status: QMediaPlayer.MediaStatus) -> None:
        MS = QMediaPlayer.MediaStatus

        if self._pending_path is not None:
            if status in (MS.LoadedMedia, MS.BufferingMedia, MS.BufferedMedia):
                path = self._pending_path
                self._pending_path = None
                self._current_path = path
                self.loaded.emit(path)
            elif status == MS.InvalidMedia:
                path = self._pending_path
                self._pending_path = None
                self.loadFailed.emit(path, self.media.errorString() or "invalid media")
            return

        if status == MS.EndOfMedia:
            self.finished.emit()

    def _on_qt_error(self, error: QMediaPlayer.Error, message: str) -> None:
        if error == QMediaPlayer.Error.NoError:
            return

        if self._pending_path is not None:
            path = self._pending_path
            self._pending_path = None
            logger.warning("Load failed for %s: %s", path, message)
            self.loadFailed.emit(path, message or "load failed")
            return

        logger.warning("Playback error on %s: %s", self._current_path, message)
        self.errorOccurred.emit(message or "playback error")

    # ----------------------------
    # Public API
    # ----------------------------

    def load_and_play(self, path: str) -> None:
        if self._disposed:
            raise RuntimeError("engine disposed")

        self._probe(path)

        self._pending_path = path
        self.media.setSource(QUrl.fromLocalFile(path))
        self.media.play()

    def pause(self) -> None:
        self.media.pause()

    def resume(self) -> None:
        self.media.play()

    def stop(self) -> None:
        self._pending_path = None
        self.media.stop()

    def seek(self, ms: int) -> None:
        self.media.setPosition(max(0, int(ms)))

    def set_volume(self, volume_0_to_1: float) -> None:
        v = min(1.0, max(0.0, float(volume_0_to_1)))
        self.audio.setVolume(v)

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._pending_path = None
        self.media.stop()
        self.media.setSource(QUrl())
        self.media.deleteLater()
        self.audio.deleteLater()

    def backend_name(self) -> str:
        return "qt-multimedia"
