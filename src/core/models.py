# core/models.py
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, auto

UNKNOWN_ARTIST = "Unknown Artist"


@dataclass
class Track:
    title: str
    path: str           # absolute path, identity within one scan
    artist: str = UNKNOWN_ARTIST
    duration: float | None = None   # seconds, known only after the engine loads it


class PlayerStatus(Enum):
    IDLE = auto()
    LOADING = auto()
    PLAYING = auto()
    PAUSED = auto()
