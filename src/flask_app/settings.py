from __future__ import annotations

import os
from dataclasses import dataclass
from functools import lru_cache


def _env(name: str, default: str) -> str:
    value = os.getenv(name)
    return default if value is None or value == "" else value


def _bool(name: str, default: bool) -> bool:
    raw = _env(name, "1" if default else "0").strip().lower()
    return raw in {"1", "true", "yes", "y", "on"}


def _int(name: str, default: int) -> int:
    raw = _env(name, str(default)).strip()
    try:
        return int(raw)
    except ValueError:
        return default


@dataclass(frozen=True)
class FlaskSettings:
    flask_host: str
    flask_port: int
    flask_debug: bool


@lru_cache(maxsize=1)
def get_settings() -> FlaskSettings:
    return FlaskSettings(
        flask_host=_env("FLASK_HOST", "localhost"),
        flask_port=_int("FLASK_PORT", default=5000),
        flask_debug=_bool("FLASK_DEBUG", default=False),
    )


def flask_host() -> str:
    return get_settings().flask_host


def flask_port() -> int:
    return get_settings().flask_port


def flask_debug() -> bool:
    return get_settings().flask_debug
