"""Logging setup and the in-memory sink behind ``GET /api/logs``.

Application code logs through stdlib ``logging`` (``get_logger(__name__)``).
Every formatted line is also forwarded to the installed ``LogSink``. The
default sink is a ``RingBufferSink`` that keeps the most recent
``LOG_BUFFER_SIZE`` lines and drops the oldest one once full.
"""
from __future__ import annotations

import logging
from collections import deque
from typing import Protocol

from .config import settings

LOG_FORMAT = "%(asctime)s [%(name)s] %(levelname)s %(message)s"
DATE_FORMAT = "%I:%M:%S %p"


class LogSink(Protocol):
    def emit(self, line: str) -> None:
        ...


class RingBufferSink:
    def __init__(self, maxlen: int = 200) -> None:
        if maxlen < 1:
            raise ValueError("maxlen must be positive")
        self._lines: deque[str] = deque(maxlen=maxlen)

    @property
    def maxlen(self) -> int:
        return self._lines.maxlen or 0

    def emit(self, line: str) -> None:
        self._lines.append(line)

    def lines(self) -> list[str]:
        return list(self._lines)

    def clear(self) -> None:
        self._lines.clear()


class SinkHandler(logging.Handler):
    """Forwards formatted records to a ``LogSink``."""

    def __init__(self, sink: LogSink, level: int = logging.NOTSET) -> None:
        super().__init__(level)
        self.sink = sink

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self.sink.emit(self.format(record))
        except Exception:
            self.handleError(record)


_sink: LogSink = RingBufferSink(settings.LOG_BUFFER_SIZE)
_handler = SinkHandler(_sink)
_handler.setFormatter(logging.Formatter(LOG_FORMAT, DATE_FORMAT))


def configure_logging() -> None:
    root = logging.getLogger("remotehq")
    if _handler in root.handlers:
        return
    root.setLevel(settings.LOG_LEVEL.upper())
    root.addHandler(_handler)
    if not logging.getLogger().handlers:
        logging.basicConfig(level=settings.LOG_LEVEL.upper(), format=LOG_FORMAT, datefmt=DATE_FORMAT)


def install_sink(sink: LogSink) -> LogSink:
    """Replace the sink that receives log lines; returns the previous one."""
    global _sink
    previous, _sink = _sink, sink
    _handler.sink = sink
    return previous


def get_sink() -> LogSink:
    return _sink


def get_logger(name: str) -> logging.Logger:
    configure_logging()
    return logging.getLogger(name)
