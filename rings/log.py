"""Logging set-up for the package, driven by the ``log`` section of the configuration."""

from __future__ import annotations

import logging
import logging.handlers
import sys
import threading
from pathlib import Path

from . import conf

TRACE = 5
logging.addLevelName(TRACE, "TRACE")

_ROOT = __name__.partition(".")[0]
_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
_LEVELS = {
    "trace": TRACE,
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warn": logging.WARNING,
    "warning": logging.WARNING,
    "error": logging.ERROR,
    "off": logging.CRITICAL + 1,
}

_lock = threading.Lock()
_initialized = False
_installed: list[logging.Handler] = []
_leveled: list[str] = []


def _parse_directives(text: str) -> tuple[int, dict[str, int]]:
    """Split ``level,target=level,...`` into a global level and per-target levels."""
    global_level = logging.ERROR
    targets: dict[str, int] = {}
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        target, sep, level_name = part.rpartition("=")
        level = _LEVELS.get(level_name.strip().lower())
        if level is None:
            continue
        if sep:
            targets[target.strip().replace("::", ".")] = level
        else:
            global_level = level
    return global_level, targets


def logging_initialize() -> list[logging.Handler]:
    """Install console and daily file handlers once; return the handlers installed."""
    global _initialized
    with _lock:
        if _initialized:
            return []

        rebit = conf.rebit()
        log_conf = rebit.log if rebit.log is not None else conf.Log()

        logs_dir = log_conf.dirs.strip()
        if logs_dir and not Path(logs_dir).is_dir():
            raise NotADirectoryError(f"log dir is not a directory: {logs_dir}")

        handlers: list[logging.Handler] = []
        if log_conf.console:
            handlers.append(logging.StreamHandler(sys.stdout))
        if logs_dir:
            path = Path(logs_dir) / f"{rebit.name}_rings.log"
            handlers.append(logging.handlers.TimedRotatingFileHandler(path, when="midnight", encoding="utf-8"))

        formatter = logging.Formatter(_FORMAT)
        logger = logging.getLogger(_ROOT)
        for handler in handlers:
            handler.setFormatter(formatter)
            logger.addHandler(handler)

        global_level, targets = _parse_directives(log_conf.level)
        logger.setLevel(global_level)
        _leveled.append(_ROOT)
        for target, level in targets.items():
            logging.getLogger(target).setLevel(level)
            _leveled.append(target)

        _installed.extend(handlers)
        _initialized = True
        return list(handlers)


def _reset() -> None:
    global _initialized
    with _lock:
        logger = logging.getLogger(_ROOT)
        for handler in _installed:
            logger.removeHandler(handler)
            handler.close()
        _installed.clear()
        for name in _leveled:
            logging.getLogger(name).setLevel(logging.NOTSET)
        _leveled.clear()
        _initialized = False