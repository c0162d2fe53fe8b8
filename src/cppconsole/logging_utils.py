from __future__ import annotations

import logging
import sys
from typing import Optional, TextIO

LOGGER_NAME = "cppconsole"
_FORMAT = "%(levelname)s %(name)s: %(message)s"


class _ConsoleHandler(logging.StreamHandler):
    """Writes to whatever ``sys.stderr`` is at emit time unless a stream is pinned."""

    def __init__(self, stream: Optional[TextIO] = None) -> None:
        super().__init__(stream)
        self._pinned = stream

    @property
    def stream(self) -> TextIO:
        return self._pinned if self._pinned is not None else sys.stderr

    @stream.setter
    def stream(self, value: Optional[TextIO]) -> None:
        self._pinned = value


def normalize_level(level: Optional[str]) -> int:
    if not level:
        return logging.WARNING
    value = logging.getLevelName(str(level).strip().upper())
    return value if isinstance(value, int) else logging.WARNING


def configure_logging(level: Optional[str] = None, stream: Optional[TextIO] = None) -> logging.Logger:
    """
    Attach a single console handler to the package logger.

    Calling this again only updates the level, so repeated CLI invocations in
    one process do not stack handlers.
    """
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(normalize_level(level))
    if not any(isinstance(h, _ConsoleHandler) for h in logger.handlers):
        handler = _ConsoleHandler(stream)
        handler.setFormatter(logging.Formatter(_FORMAT))
        logger.addHandler(handler)
    return logger
