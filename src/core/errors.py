# core/errors.py
from __future__ import annotations


class PlayerError(Exception):
    """Base class for scanner and playback errors."""


class DirectoryUnavailable(PlayerError):
    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        super().__init__(f"Directory unavailable: {path}" + (f" ({reason})" if reason else ""))


class FileMetadataUnreadable(PlayerError):
    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot read file: {path}" + (f" ({reason})" if reason else ""))


class ScanCancelled(PlayerError):
    pass


class EngineLoadFailure(PlayerError):
    """The engine refused to load a file (missing, corrupt, unsupported)."""

    def __init__(self, path: str, reason: str = ""):
        self.path = path
        self.reason = reason
        super().__init__(f"Cannot play {path}" + (f": {reason}" if reason else ""))


class EnginePlaybackError(PlayerError):
    """Playback failed after the track had started."""

    def __init__(self, reason: str, path: str | None = None):
        self.reason = reason
        self.path = path
        super().__init__(f"Playback error: {reason}")
