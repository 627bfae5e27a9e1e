# src/player/queue.py
from __future__ import annotations

import logging
from typing import Optional

from PySide6.QtCore import QObject, Signal, Slot

from core.errors import EngineLoadFailure, EnginePlaybackError
from core.models import PlayerStatus, Track
from core.state import QueueState
from .engine import AudioEngine

logger = logging.getLogger(__name__)


class QueueController(QObject):
    """
    Owns the track list and the current index, and is the only thing that
    talks to the audio engine.

        IDLE -> LOADING -> PLAYING <-> PAUSED
                   ^          |
                   +----------+  (track switch)

    stop(), dispose(), a playback error or the last track finishing go back
    to IDLE. Overlapping play() calls resolve latest-wins: engine events for
    a superseded path are ignored.
    """

    playFailed = Signal(object)     # EngineLoadFailure | EnginePlaybackError

    def __init__(self, engine: AudioEngine, state: Optional[QueueState] = None):
        super().__init__()
        self.engine = engine
        self.state = state if state is not None else QueueState()

        self._pending_index: int | None = None
        self._pending_track: Track | None = None
        self._pending_duration_ms = 0
        self._status_before_load = PlayerStatus.IDLE
        self._disposed = False

        self.engine.playingChanged.connect(self._on_playing_changed)
        self.engine.durationChanged.connect(self._on_duration_changed)
        self.engine.positionChanged.connect(self._on_position_changed)
        self.engine.finished.connect(self._on_finished)
        self.engine.loaded.connect(self._on_loaded)
        self.engine.loadFailed.connect(self._on_load_failed)
        self.engine.errorOccurred.connect(self._on_engine_error)

    # ----------------------------
    # Read-only views
    # ----------------------------

    @property
    def tracks(self) -> list[Track]:
        return self.state.tracks

    @property
    def current_index(self) -> int | None:
        return self.state.current_index

    @property
    def current_track(self) -> Track | None:
        return self.state.current_track

    @property
    def status(self) -> PlayerStatus:
        return self.state.status

    # ----------------------------
    # Track list
    # ----------------------------

    def set_tracks(self, tracks: list[Track]) -> None:
        """Replace the list; keep pointing at the current track if it survived."""
        self._ensure_alive()
        tracks = list(tracks)

        current = self.state.current_track
        new_index: int | None = None
        if current is not None:
            new_index = next((i for i, t in enumerate(tracks) if t.path == current.path), None)

        if self._pending_track is not None:
            pending_path = self._pending_track.path
            self._pending_index = next(
                (i for i, t in enumerate(tracks) if t.path == pending_path), None
            )

        self.state.set_tracks(tracks)
        if new_index is not None:
            relocated = tracks[new_index]
            if relocated.duration is None:
                relocated.duration = current.duration
            self.state.set_current(new_index, relocated)
        elif current is not None:
            # the loaded file keeps playing, but it is no longer part of the list
            self.state.set_current(None, current)

    # ----------------------------
    # Transport
    # ----------------------------

    def play(self, index: int) -> None:
        self._ensure_alive()
        if index < 0 or index >= len(self.state.tracks):
            raise IndexError(f"track index {index} out of range")
        self.play_track(self.state.tracks[index], index)

    def play_track(self, track: Track, index: int) -> None:
        """
        Ask the engine to load and play `track`. The current index/track only
        change once the engine confirms the load; a rejected file raises
        EngineLoadFailure and leaves them untouched.
        """
        self._ensure_alive()

        if self.state.status != PlayerStatus.LOADING:
            self._status_before_load = self.state.status
        previous = (self._pending_index, self._pending_track, self._pending_duration_ms)

        self._pending_index = index
        self._pending_track = track
        self.state.set_status(PlayerStatus.LOADING)

        try:
            self.engine.load_and_play(track.path)
        except EngineLoadFailure as e:
            # an earlier load that is still in flight stays the one we wait for
            self._pending_index, self._pending_track, self._pending_duration_ms = previous
            if self._pending_track is None:
                self.state.set_status(self._status_before_load)
            logger.warning("%s", e)
            self.playFailed.emit(e)
            raise

    def pause(self) -> None:
        self._ensure_alive()
        if self.state.status == PlayerStatus.PLAYING:
            self.engine.pause()
            self.state.set_status(PlayerStatus.PAUSED)

    def resume(self) -> None:
        self._ensure_alive()
        status = self.state.status
        if status == PlayerStatus.PAUSED:
            self.engine.resume()
            self.state.set_status(PlayerStatus.PLAYING)
        elif status == PlayerStatus.IDLE and self.state.current_index is not None:
            self.play(self.state.current_index)

    def toggle_play_pause(self) -> None:
        if self.state.status == PlayerStatus.PLAYING:
            self.pause()
        else:
            self.resume()

    def seek(self, ms: int) -> None:
        self._ensure_alive()
        if self.state.current_track is None and self._pending_track is None:
            return
        self.engine.seek(ms)

    def stop(self) -> None:
        self._ensure_alive()
        self._clear_pending()
        self.engine.stop()
        self.state.set_status(PlayerStatus.IDLE)
        self.state.set_position(0)

    def next(self) -> bool:
        """Play the following track. Returns False (no-op) at the end of the list."""
        base = self._base_index()
        if base is None or base + 1 >= len(self.state.tracks):
            return False
        self.play(base + 1)
        return True

    def previous(self) -> bool:
        base = self._base_index()
        if base is None or base - 1 < 0:
            return False
        self.play(base - 1)
        return True

    # ----------------------------
    # Lifecycle
    # ----------------------------

    def dispose(self) -> None:
        if self._disposed:
            return
        self._disposed = True
        self._clear_pending()

        for sig, slot in (
            (self.engine.playingChanged, self._on_playing_changed),
            (self.engine.durationChanged, self._on_duration_changed),
            (self.engine.positionChanged, self._on_position_changed),
            (self.engine.finished, self._on_finished),
            (self.engine.loaded, self._on_loaded),
            (self.engine.loadFailed, self._on_load_failed),
            (self.engine.errorOccurred, self._on_engine_error),
        ):
            sig.disconnect(slot)

        self.engine.stop()
        self.engine.dispose()
        self.state.set_playing(False)
        self.state.set_status(PlayerStatus.IDLE)

    @property
    def disposed(self) -> bool:
        return self._disposed

    # ----------------------------
    # Engine notifications
    # ----------------------------

    @Slot(bool)
    def _on_playing_changed(self, playing: bool) -> None:
        self.state.set_playing(playing)
        if self.state.status in (PlayerStatus.PLAYING, PlayerStatus.PAUSED):
            self.state.set_status(PlayerStatus.PLAYING if playing else PlayerStatus.PAUSED)

    @Slot(int)
    def _on_duration_changed(self, ms: int) -> None:
        self.state.set_duration(ms)
        if self._pending_track is not None:
            self._pending_duration_ms = int(ms)
            return
        track = self.state.current_track
        if track is not None and ms > 0:
            track.duration = ms / 1000.0

    @Slot(int)
    def _on_position_changed(self, ms: int) -> None:
        self.state.set_position(ms)

    @Slot(str)
    def _on_loaded(self, path: str) -> None:
        track = self._pending_track
        if track is None or track.path != path:
            logger.debug("Ignoring load event for superseded %s", path)
            return

        index = self._pending_index
        duration_ms = self._pending_duration_ms
        self._clear_pending()
        self.state.set_current(index, track)
        self.state.set_status(PlayerStatus.PLAYING if self.state.playing else PlayerStatus.PAUSED)
        if duration_ms > 0:
            track.duration = duration_ms / 1000.0
        logger.info("Now playing: %s", track.path)

    @Slot(str, str)
    def _on_load_failed(self, path: str, message: str) -> None:
        track = self._pending_track
        if track is None or track.path != path:
            return
        self._clear_pending()
        # The engine already dropped the previous media, so nothing is loaded now.
        self.state.set_status(PlayerStatus.IDLE)
        self.state.set_playing(False)
        err = EngineLoadFailure(path, message)
        logger.warning("%s", err)
        self.playFailed.emit(err)

    @Slot()
    def _on_finished(self) -> None:
        if self._pending_track is not None:
            return
        try:
            advanced = self.next()
        except EngineLoadFailure:
            advanced = False
        if not advanced:
            self.state.set_status(PlayerStatus.IDLE)
            self.state.set_playing(False)

    @Slot(str)
    def _on_engine_error(self, message: str) -> None:
        self._clear_pending()
        self.state.set_status(PlayerStatus.IDLE)
        self.state.set_playing(False)
        current = self.state.current_track
        err = EnginePlaybackError(message, current.path if current else None)
        logger.warning("%s", err)
        self.playFailed.emit(err)

    # ----------------------------
    # Helpers
    # ----------------------------

    def _base_index(self) -> int | None:
        if self._pending_track is not None:
            return self._pending_index
        return self.state.current_index

    def _clear_pending(self) -> None:
        self._pending_index = None
        self._pending_track = None
        self._pending_duration_ms = 0

    def _ensure_alive(self) -> None:
        if self._disposed:
            raise RuntimeError("queue controller disposed")
