# src/library/scan_library.py
from __future__ import annotations

import os
import logging
import stat
import threading
from typing import Callable, Iterable, Iterator, Optional

from core.errors import DirectoryUnavailable, FileMetadataUnreadable, ScanCancelled
from core.models import Track, UNKNOWN_ARTIST

logger = logging.getLogger(__name__)

AUDIO_EXTS = {".mp3"}

# Substrings that mark voice notes, chat attachments and ringtones.
EXCLUDE_MARKERS = ("AUD-", "Slack")
EXCLUDE_MARKERS_NOCASE = ("ringtone",)


def is_audio_path(path: str, extensions: Iterable[str] = AUDIO_EXTS) -> bool:
    lower = path.lower()
    return any(lower.endswith(ext) for ext in extensions)


def is_excluded(path: str) -> bool:
    if any(marker in path for marker in EXCLUDE_MARKERS):
        return True
    lower = path.lower()
    return any(marker in lower for marker in EXCLUDE_MARKERS_NOCASE)


def title_from_path(path: str) -> str:
    name = os.path.basename(path)
    stem, dot, _ = name.rpartition(".")
    return stem if dot else name


def _check_cancel(cancel: Optional[threading.Event]) -> None:
    if cancel is not None and cancel.is_set():
        raise ScanCancelled()


def iter_audio_paths(
    root: str,
    extensions: Iterable[str] = AUDIO_EXTS,
    cancel: Optional[threading.Event] = None,
    sort: bool = True,
) -> Iterator[str]:
    """
    Walk one root and yield candidate paths (extension allowlist, exclusion
    markers applied). Symlinks are neither followed nor yielded.

    Raises DirectoryUnavailable if the root itself cannot be used; errors on
    nested directories are logged and that subtree is skipped.
    """
    if not os.path.isdir(root):
        raise DirectoryUnavailable(root, "not found or not a directory")

    root_errors: list[OSError] = []

    def _onerror(err: OSError) -> None:
        if os.path.normpath(err.filename or "") == os.path.normpath(root):
            root_errors.append(err)
            return
        logger.warning("Skipping directory %s: %s", err.filename, err.strerror or err)

    exts = tuple(extensions)

    for dirpath, dirnames, filenames in os.walk(root, onerror=_onerror, followlinks=False):
        _check_cancel(cancel)
        if sort:
            dirnames.sort()
            filenames.sort()

        for fn in filenames:
            path = os.path.join(dirpath, fn)
            if not is_audio_path(path, exts) or is_excluded(path):
                continue
            if os.path.islink(path):
                continue
            yield path

    if root_errors:
        err = root_errors[0]
        raise DirectoryUnavailable(root, err.strerror or str(err))


def new_track_from_path(path: str) -> Track | None:
    """
    Build a Track for a candidate file, or None for empty files.
    Raises FileMetadataUnreadable if the file cannot be stat'ed.
    """
    try:
        st = os.stat(path, follow_symlinks=False)
    except OSError as e:
        raise FileMetadataUnreadable(path, e.strerror or str(e)) from e

    if not stat.S_ISREG(st.st_mode) or st.st_size <= 0:
        return None

    return Track(
        title=title_from_path(path),
        path=os.path.abspath(path),
        artist=UNKNOWN_ARTIST,
    )


def scan(
    roots: Iterable[str],
    *,
    extensions: Iterable[str] = AUDIO_EXTS,
    cancel: Optional[threading.Event] = None,
    sort: bool = True,
    on_track: Callable[[Track], None] | None = None,
) -> list[Track]:
    """
    Scan every root and return a fresh list of Tracks.

    Roots keep the caller's order; inside a root the walk is sorted by name
    unless sort=False. One bad root or file never aborts the scan. Raises
    ScanCancelled as soon as `cancel` is set.
    """
    exts = tuple(e.lower() for e in extensions)
    tracks: list[Track] = []
    seen_roots: set[str] = set()

    for root in roots:
        _check_cancel(cancel)
        if not root:
            continue

        key = os.path.realpath(root)
        if key in seen_roots:
            continue
        seen_roots.add(key)

        try:
            for path in iter_audio_paths(root, exts, cancel=cancel, sort=sort):
                _check_cancel(cancel)
                try:
                    track = new_track_from_path(path)
                except FileMetadataUnreadable as e:
                    logger.warning("%s", e)
                    continue
                if track is None:
                    continue
                tracks.append(track)
                if on_track is not None:
                    on_track(track)
        except DirectoryUnavailable as e:
            logger.warning("%s", e)
            continue
        except OSError as e:
            logger.warning("Error scanning directory %s: %s", root, e)
            continue

    logger.info("Scan finished: %d track(s) in %d root(s)", len(tracks), len(seen_roots))
    return tracks
