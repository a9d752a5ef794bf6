"""Server logging and audit trail.

Every worker records what it does (connections accepted, requests
parsed, scripts run, responses written) as structured entries in a
shared log.  The log is the server's equivalent of an access/error log:

- **LogLevel** — severity levels ordered for filtering (DEBUG < ERROR).
- **LogEntry** — a single structured record (level, message, source, peer).
- **Logger** — a bounded, thread-safe ring buffer with filtering and an
  optional echo sink for console output.

Design choices:
    - **IntEnum for levels** so they compare naturally with ``<``.
    - **Frozen dataclass for entries** — log records should be immutable.
    - **Bounded deque** — a long-running server must not grow its log
      without limit; the oldest entries fall off the front.
    - **One lock around the buffer** — entries arrive from every worker
      thread at once.
"""

from __future__ import annotations

import sys
import threading
from collections import deque
from dataclasses import dataclass
from enum import IntEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Callable

DEFAULT_CAPACITY = 4096


class LogLevel(IntEnum):
    """Severity levels for log entries."""

    DEBUG = 0
    INFO = 1
    WARNING = 2
    ERROR = 3

    @classmethod
    def from_name(cls, name: str) -> LogLevel:
        """Look up a level by case-insensitive name (e.g. ``"debug"``).

        Raises:
            ValueError: If *name* is not a known level.

        """
        try:
            return cls[name.strip().upper()]
        except KeyError:
            msg = f"Unknown log level: {name!r}"
            raise ValueError(msg) from None


@dataclass(frozen=True)
class LogEntry:
    """A single structured log record.

    Attributes:
        level: The severity of this event.
        message: A human-readable description of what happened.
        source: The component that generated the event (e.g. "cgi").
        peer: The remote address of the connection involved, if any.

    """

    level: LogLevel
    message: str
    source: str
    peer: str | None = None

    def __str__(self) -> str:
        """Format as ``[LEVEL] source: message`` (with the peer when known)."""
        where = f" ({self.peer})" if self.peer else ""
        return f"[{self.level.name}] {self.source}{where}: {self.message}"


def stderr_sink(entry: LogEntry) -> None:
    """Echo an entry to standard error."""
    print(entry, file=sys.stderr, flush=True)  # noqa: T201


class Logger:
    """Bounded, thread-safe log buffer with filtering.

    Entries below ``min_level`` are discarded on arrival.  When a sink
    is configured every kept entry is also handed to it, which is how
    the command-line server prints its log.
    """

    def __init__(
        self,
        *,
        min_level: LogLevel = LogLevel.DEBUG,
        capacity: int = DEFAULT_CAPACITY,
        sink: Callable[[LogEntry], None] | None = None,
    ) -> None:
        """Create an empty logger.

        Args:
            min_level: Entries below this level are dropped.
            capacity: Maximum number of entries kept in memory.
            sink: Optional callable receiving each kept entry.

        """
        self._entries: deque[LogEntry] = deque(maxlen=capacity)
        self._lock = threading.Lock()
        self.min_level = min_level
        self.sink = sink

    @property
    def entries(self) -> list[LogEntry]:
        """Return all log entries in chronological order."""
        with self._lock:
            return list(self._entries)

    def log(
        self,
        level: LogLevel,
        message: str,
        *,
        source: str,
        peer: str | None = None,
    ) -> None:
        """Append a new entry to the log.

        Args:
            level: Severity of the event.
            message: Human-readable event description.
            source: Component that generated the event.
            peer: Remote address associated with the event.

        """
        if level < self.min_level:
            return
        entry = LogEntry(level=level, message=message, source=source, peer=peer)
        with self._lock:
            self._entries.append(entry)
        if self.sink is not None:
            self.sink(entry)

    def debug(self, message: str, *, source: str, peer: str | None = None) -> None:
        """Log at DEBUG level."""
        self.log(LogLevel.DEBUG, message, source=source, peer=peer)

    def info(self, message: str, *, source: str, peer: str | None = None) -> None:
        """Log at INFO level."""
        self.log(LogLevel.INFO, message, source=source, peer=peer)

    def warning(self, message: str, *, source: str, peer: str | None = None) -> None:
        """Log at WARNING level."""
        self.log(LogLevel.WARNING, message, source=source, peer=peer)

    def error(self, message: str, *, source: str, peer: str | None = None) -> None:
        """Log at ERROR level."""
        self.log(LogLevel.ERROR, message, source=source, peer=peer)

    def filter(
        self,
        *,
        min_level: LogLevel | None = None,
        source: str | None = None,
    ) -> list[LogEntry]:
        """Return entries matching the given criteria.

        Args:
            min_level: If set, only return entries at or above this level.
            source: If set, only return entries from this source.

        Returns:
            A filtered list of log entries.

        """
        result = self.entries
        if min_level is not None:
            result = [e for e in result if e.level >= min_level]
        if source is not None:
            result = [e for e in result if e.source == source]
        return result

    def clear(self) -> None:
        """Remove all log entries."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        """Return the number of entries currently held."""
        with self._lock:
            return len(self._entries)


_default_logger = Logger(min_level=LogLevel.INFO)


def get_logger() -> Logger:
    """Return the process-wide logger used when none is passed explicitly."""
    return _default_logger
