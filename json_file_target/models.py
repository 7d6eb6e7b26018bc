"""Log record model and severity levels."""

import time
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Any, Optional


class Level(IntEnum):
    """Severity levels. Bit values so a set of levels can be OR-ed into a mask."""

    ERROR = 0x01
    WARNING = 0x02
    INFO = 0x04
    DEBUG = 0x08


def get_level_name(level) -> str:
    """Return the display name for a level ("error", "warning", ...)."""
    try:
        return Level(level).name.lower()
    except ValueError:
        return "unknown"


def parse_level(name: str) -> Level:
    """Look up a Level by its display name, case-insensitively."""
    key = name.strip().upper()
    if key == "WARN":
        key = "WARNING"
    try:
        return Level[key]
    except KeyError:
        raise ValueError(f"Unknown log level: {name!r}") from None


@dataclass
class LogRecord:
    message: Any
    level: Level = Level.INFO
    category: str = "application"
    timestamp: float = field(default_factory=time.time)
    trace: Optional[str] = None


def create_log_record(
    message: Any,
    level: Level = Level.INFO,
    category: str = "application",
    timestamp: Optional[float] = None,
    trace: Optional[str] = None,
) -> LogRecord:
    """Factory function that creates a LogRecord stamped with the current time."""
    return LogRecord(
        message=message,
        level=level,
        category=category,
        timestamp=timestamp if timestamp is not None else time.time(),
        trace=trace,
    )
