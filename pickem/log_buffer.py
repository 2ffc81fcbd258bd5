"""In-memory ring buffer of recent log records for the admin activity log."""

from __future__ import annotations

import logging
from collections import deque
from dataclasses import asdict, dataclass
from datetime import datetime, timezone

TARGET_LOGGERS = (
    "pickem.main",
    "pickem.live",
    "pickem.ingestion.sync",
    "pickem.ingestion.feed",
    "pickem.ingestion.espn_client",
    "pickem.ingestion.odds_client",
    "pickem.ingestion.espn_parser",
    "pickem.ingestion.spreads",
    "pickem.scoring.ledger",
)


@dataclass(frozen=True)
class LogEntry:
    timestamp: str
    level: str
    logger: str
    message: str


class BufferHandler(logging.Handler):
    def __init__(self, maxlen: int = 200) -> None:
        super().__init__()
        self._buffer: deque[LogEntry] = deque(maxlen=maxlen)

    def emit(self, record: logging.LogRecord) -> None:
        try:
            self._buffer.append(
                LogEntry(
                    timestamp=datetime.fromtimestamp(record.created, tz=timezone.utc).strftime(
                        "%Y-%m-%d %H:%M:%S UTC"
                    ),
                    level=record.levelname,
                    logger=record.name,
                    message=self.format(record),
                )
            )
        except Exception:
            self.handleError(record)

    def entries(self, limit: int = 100, level: str | None = None) -> list[dict]:
        """Most recent entries first, optionally only those at ``level``."""
        items = list(self._buffer)
        if level:
            items = [item for item in items if item.level == level.upper()]
        items = items[-limit:] if limit > 0 else []
        items.reverse()
        return [asdict(item) for item in items]

    def clear(self) -> None:
        self._buffer.clear()


_handler: BufferHandler | None = None


def get_buffer_handler() -> BufferHandler:
    global _handler
    if _handler is None:
        _handler = BufferHandler(maxlen=200)
        _handler.setFormatter(logging.Formatter("%(message)s"))
        _handler.setLevel(logging.INFO)
    return _handler


def install_buffer_handler() -> BufferHandler:
    handler = get_buffer_handler()
    for name in TARGET_LOGGERS:
        target = logging.getLogger(name)
        if handler not in target.handlers:
            target.addHandler(handler)
        target.setLevel(logging.INFO)
    return handler
