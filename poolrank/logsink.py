"""Structured log sinks for pipeline diagnostics.

The orchestrator reports soft failures through a ``LogSink`` instead of
writing to a particular display. ``LoggerSink`` forwards to stdlib logging;
``BufferedLogSink`` additionally keeps the most recent entries in memory for
any front end that wants to show them (the CLI's ``--show-logs``).
"""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Protocol

MAX_BUFFERED_ENTRIES = 200

_LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class LogSink(Protocol):
    def emit(self, level: str, message: str, **fields: Any) -> None: ...


@dataclass(frozen=True)
class LogEntry:
    level: str
    message: str
    timestamp: str
    fields: dict[str, Any] = field(default_factory=dict)


class LoggerSink:
    """Forward entries to a stdlib logger; fields go into ``extra``."""

    def __init__(self, logger: logging.Logger | str = "poolrank"):
        self.logger = logging.getLogger(logger) if isinstance(logger, str) else logger

    def emit(self, level: str, message: str, **fields: Any) -> None:
        if fields:
            detail = " ".join(f"{k}={v}" for k, v in fields.items())
            self.logger.log(_LEVELS.get(level, logging.INFO), "%s (%s)", message, detail,
                            extra={"poolrank_fields": fields})
        else:
            self.logger.log(_LEVELS.get(level, logging.INFO), "%s", message)


class BufferedLogSink:
    """Ring buffer of recent entries, optionally mirrored to another sink."""

    def __init__(self, maxlen: int = MAX_BUFFERED_ENTRIES, forward: LogSink | None = None):
        self._entries: deque[LogEntry] = deque(maxlen=maxlen)
        self._forward = forward

    def emit(self, level: str, message: str, **fields: Any) -> None:
        self._entries.append(LogEntry(
            level=level,
            message=message,
            timestamp=datetime.now(timezone.utc).isoformat(timespec="seconds"),
            fields=dict(fields),
        ))
        if self._forward is not None:
            self._forward.emit(level, message, **fields)

    def entries(self, level: str | None = None) -> list[LogEntry]:
        if level is None:
            return list(self._entries)
        return [e for e in self._entries if e.level == level]

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
