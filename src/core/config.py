# core/config.py
from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from typing import Mapping

logger = logging.getLogger(__name__)

ENV_PREFIX = "MP3PLAYER_"

DEFAULT_EXTENSIONS = (".mp3",)
DEFAULT_VOLUME = 0.7


@dataclass(frozen=True)
class AppConfig:
    roots: tuple[str, ...] = ()
    extensions: tuple[str, ...] = DEFAULT_EXTENSIONS
    volume: float = DEFAULT_VOLUME
    sort_results: bool = True
    debug: bool = False
    extra: dict[str, str] = field(default_factory=dict, compare=False)


def _parse_roots(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return ()
    roots: list[str] = []
    for part in raw.split(os.pathsep):
        part = part.strip()
        if part:
            roots.append(os.path.abspath(os.path.expanduser(part)))
    return tuple(roots)


def _parse_extensions(raw: str | None) -> tuple[str, ...]:
    if not raw:
        return DEFAULT_EXTENSIONS
    exts: list[str] = []
    for part in raw.split(","):
        part = part.strip().lower()
        if not part:
            continue
        if not part.startswith("."):
            part = "." + part
        if part not in exts:
            exts.append(part)
    return tuple(exts) or DEFAULT_EXTENSIONS


def _parse_volume(raw: str | None) -> float:
    if raw is None or raw == "":
        return DEFAULT_VOLUME
    try:
        v = float(raw)
    except ValueError:
        logger.warning("Ignoring invalid %sVOLUME=%r", ENV_PREFIX, raw)
        return DEFAULT_VOLUME
    return min(1.0, max(0.0, v))


def _flag(raw: str | None, default: bool) -> bool:
    if raw is None or raw == "":
        return default
    return raw.strip().lower() not in ("0", "false", "no", "off")


def load_config(environ: Mapping[str, str] | None = None) -> AppConfig:
    """
    Build the app configuration from MP3PLAYER_* environment variables.
    Unknown MP3PLAYER_* keys are kept in `extra` so they show up in debug logs.
    """
    env = os.environ if environ is None else environ

    known = {"ROOTS", "EXTENSIONS", "VOLUME", "SORT", "DEBUG"}
    extra = {
        k[len(ENV_PREFIX):]: v
        for k, v in env.items()
        if k.startswith(ENV_PREFIX) and k[len(ENV_PREFIX):] not in known
    }

    return AppConfig(
        roots=_parse_roots(env.get(ENV_PREFIX + "ROOTS")),
        extensions=_parse_extensions(env.get(ENV_PREFIX + "EXTENSIONS")),
        volume=_parse_volume(env.get(ENV_PREFIX + "VOLUME")),
        sort_results=_flag(env.get(ENV_PREFIX + "SORT"), True),
        debug=_flag(env.get(ENV_PREFIX + "DEBUG"), False),
        extra=extra,
    )
