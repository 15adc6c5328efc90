"""Shared logger for the game and the headless runner."""
from __future__ import annotations

import logging
import sys
from typing import Optional

LOGGER_NAME = "matcha_mother"


class GameLogger:
    """Singleton wrapper that configures the package logger once."""

    _instance: Optional["GameLogger"] = None
    _logger: Optional[logging.Logger] = None

    def __new__(cls) -> "GameLogger":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self) -> None:
        if self._logger is None:
            logger = logging.getLogger(LOGGER_NAME)
            logger.setLevel(logging.INFO)
            if not logger.handlers:
                handler = logging.StreamHandler(sys.stderr)
                handler.setFormatter(logging.Formatter("[%(levelname)s] %(name)s: %(message)s"))
                logger.addHandler(handler)
            GameLogger._logger = logger

    @classmethod
    def get_logger(cls) -> logging.Logger:
        instance = cls()
        assert instance._logger is not None
        return instance._logger


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the package logger, or a named child of it."""
    base = GameLogger.get_logger()
    return base.getChild(name) if name else base


def set_verbose(verbose: bool) -> None:
    GameLogger.get_logger().setLevel(logging.DEBUG if verbose else logging.INFO)
