import logging
import os
from typing import Dict

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

_loggers: Dict[str, logging.Logger] = {}


def _default_level() -> int:
    if os.getenv("FORMBOT_DEBUG", "false").strip().lower() in ("1", "true", "yes"):
        return logging.DEBUG
    return logging.INFO


def get_logger(name: str) -> logging.Logger:
    """Logger with a single stderr handler, shared per name.

    FORMBOT_DEBUG=true starts it at DEBUG; set_level() changes all of them later.
    """
    if name in _loggers:
        return _loggers[name]

    lg = logging.getLogger(name)
    if not lg.handlers:
        level = _default_level()
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler.setLevel(level)
        lg.addHandler(handler)
        lg.setLevel(level)
        lg.propagate = False
    _loggers[name] = lg
    return lg


def set_level(level: str) -> None:
    numeric = logging.getLevelName(level.upper())
    if not isinstance(numeric, int):
        numeric = logging.INFO
    for lg in _loggers.values():
        lg.setLevel(numeric)
        for handler in lg.handlers:
            handler.setLevel(numeric)


def mask(value: str, secret: bool) -> str:
    """Value as it may appear in logs; secrets become at most eight stars."""
    return "*" * min(len(value), 8) if secret else value
