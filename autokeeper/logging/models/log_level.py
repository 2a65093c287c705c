from __future__ import annotations

from enum import Enum
from typing import Literal

LogLevelName = Literal[
    'trace',
    'debug',
    'info',
    'warn',
    'error',
    'critical',
    'fatal'
]


class LogLevel(Enum):
    """Log levels, declared from least to most severe."""

    TRACE = "TRACE"
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARN = "WARN"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"
    FATAL = "FATAL"

    @property
    def severity(self) -> int:
        return _SEVERITY[self]

    def includes(self, level: LogLevel) -> bool:
        """Whether a logger configured at this level emits entries at level."""
        return level.severity >= self.severity

    @classmethod
    def from_name(cls, level_name: str) -> LogLevel | None:
        """Level for a configuration name such as "warn", None if unknown."""
        return cls.__members__.get(level_name.strip().upper())


_SEVERITY = {level: severity for severity, level in enumerate(LogLevel)}
