from __future__ import annotations
from dataclasses import dataclass
from PySide6.QtCore import QObject, Signal, Slot

from core.models import PlayerStatus, Track

@dataclass(frozen=True)
class Notify:
    message: str
    notify_type: str = "info"   # info/success/warn/error


class QueueState(QObject):
    """
    Observable playback state. Every field has its own change signal and a
    setter that emits only on an actual change. Only the queue controller and
    the scan coordinator write here; widgets just listen.
    """

    tracksChanged = Signal(list)        # list[Track]
    currentChanged = Signal(object)     # int | None
    statusChanged = Signal(object)      # PlayerStatus
    playingChanged = Signal(bool)
    positionChanged = Signal(int)       # ms
    durationChanged = Signal(int)       # ms
    scanningChanged = Signal(bool)

    def __init__(self):
        super().__init__()
        self.tracks: list[Track] = []
        self.current_index: int | None = None
        self.current_track: Track | None = None
        self.status = PlayerStatus.IDLE
        self.playing = False
        self.position_ms = 0
        self.duration_ms = 0
        self.scanning = False

    def set_tracks(self, tracks: list[Track]) -> None:
        self.tracks = list(tracks)
        self.tracksChanged.emit(self.tracks)

    def set_current(self, index: int | None, track: Track | None) -> None:
        if index == self.current_index and track is self.current_track:
            return
        self.current_index = index
        self.current_track = track
        self.currentChanged.emit(index)

    def set_status(self, status: PlayerStatus) -> None:
        if self.status != status:
            self.status = status
            self.statusChanged.emit(status)

    def set_playing(self, playing: bool) -> None:
        playing = bool(playing)
        if self.playing != playing:
            self.playing = playing
            self.playingChanged.emit(playing)

    def set_position(self, ms: int) -> None:
        ms = max(0, int(ms))
        if self.position_ms != ms:
            self.position_ms = ms
            self.positionChanged.emit(ms)

    def set_duration(self, ms: int) -> None:
        ms = max(0, int(ms))
        if self.duration_ms != ms:
            self.duration_ms = ms
            self.durationChanged.emit(ms)

    def set_scanning(self, scanning: bool) -> None:
        scanning = bool(scanning)
        if self.scanning != scanning:
            self.scanning = scanning
            self.scanningChanged.emit(scanning)


class AppState(QObject):
    notification = Signal(object)   # emits Notify

    def __init__(self, config=None):
        super().__init__()
        self.config = config
        self.queue = QueueState()
        self.engine = None
        self.controller = None
        self.scanner = None
        self.queued_notifications: list[Notify] = []

    @Slot(str, str)
    def notify(self, message: str, notify_type: str = "info"):
        self.notification.emit(Notify(message=message, notify_type=notify_type))
