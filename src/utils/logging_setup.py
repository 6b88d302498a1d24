from __future__ import annotations

import logging
import os
from typing import Iterable


def _env(name: str, default: str) -> str:
    value = os.getenv(name)
    return default if value is None or value == "" else value


def configure_logging(
    *,
    default_level: str = "INFO",
    fmt: str = "%(asctime)s %(levelname)s %(name)s: %(message)s",
    datefmt: str = "%Y-%m-%d %H:%M:%S",
    force: bool = True,
    aligned_loggers: Iterable[str] = ("werkzeug",),
    quiet_loggers: Iterable[str] = ("urllib3",),
) -> None:
    """Configure stdlib logging once for the CLI and the Flask server.

    Environment variables:
    - LOG_LEVEL: overrides default_level (e.g. DEBUG, INFO)
    - LOG_FORCE: when set to 0/false, keeps an existing configuration

    `aligned_loggers` follow the chosen level; `quiet_loggers` are capped at
    WARNING so HTTP connection chatter does not drown calculator DEBUG output.
    """

    level_name = _env("LOG_LEVEL", default_level).upper()
    level = getattr(logging, level_name, logging.INFO)

    env_force = _env("LOG_FORCE", "1").lower() not in {"0", "false", "no"}

    logging.basicConfig(level=level, format=fmt, datefmt=datefmt, force=(force and env_force))

    for name in aligned_loggers:
        logging.getLogger(name).setLevel(level)
    for name in quiet_loggers:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
