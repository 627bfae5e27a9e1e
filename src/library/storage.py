# src/library/storage.py
from __future__ import annotations

import logging
import os

from PySide6.QtCore import QStandardPaths

from core.config import AppConfig

logger = logging.getLogger(__name__)


def platform_music_dirs() -> list[str]:
    locations = QStandardPaths.standardLocations(QStandardPaths.MusicLocation)
    return [p for p in locations if p and os.path.isdir(p)]


def music_roots(config: AppConfig | None = None) -> list[str]:
    """
    Directories to scan: configured roots first, otherwise the platform
    music locations, otherwise the user's home directory.
    """
    if config is not None and config.roots:
        return list(config.roots)

    roots = platform_music_dirs()
    if roots:
        return roots

    home = os.path.expanduser("~")
    logger.info("No music location reported by the platform, scanning %s", home)
    return [home]
