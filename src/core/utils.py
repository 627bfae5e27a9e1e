# core/utils.py
from __future__ import annotations


def fmt_ms(ms: int | None) -> str:
    """Format milliseconds as m:ss (minutes wrap at 60, like the seek bar labels)."""
    ms = max(0, int(ms or 0))
    s = ms // 1000
    m = (s // 60) % 60
    s = s % 60
    return f"{m}:{s:02d}"


def fmt_seconds(seconds: float | None) -> str:
    if seconds is None:
        return ""
    return fmt_ms(int(round(seconds * 1000)))
