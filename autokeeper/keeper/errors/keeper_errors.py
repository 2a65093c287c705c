"""
Keeper Error Hierarchy

Categorized exceptions raised by the keeper's state store, transition
engine, monitor client and reconciliation driver. Errors are classified
by category so the command boundary can map each one to a distinct
exit code:

- ARGUMENTS: bad operator input (unknown role names, bad ports)
- CONFIG: missing or invalid configuration and paths
- STATE: missing, corrupt or already-existing state, or no legal path
- INSTANCE: a role's side-effecting action failed
- MONITOR: network, timeout, protocol or version problems with the monitor
- SERIALIZATION: a record could not be rendered or parsed
"""

from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Any


class ErrorCategory(Enum):
    """What kind of error is this?"""

    ARGUMENTS = auto()
    CONFIG = auto()
    STATE = auto()
    INSTANCE = auto()
    MONITOR = auto()
    SERIALIZATION = auto()


@dataclass
class KeeperError(Exception):
    """
    Base exception for keeper errors.

    All keeper errors carry:
    - message: Human-readable description
    - category: What kind of error
    - context: Additional debugging info
    - cause: Original exception if wrapping

    Example:
        raise StateNotFoundError(
            "Keeper state file does not exist",
            context={"path": "/var/lib/keeper/keeper.state"},
        )
    """

    message: str
    category: ErrorCategory = ErrorCategory.STATE
    context: dict[str, Any] = field(default_factory=dict)
    cause: BaseException | None = None

    def __str__(self) -> str:
        ctx = f" {self.context}" if self.context else ""
        cause = ""
        if self.cause:
            cause_str = str(self.cause)
            cause_type = type(self.cause).__name__
            if cause_str:
                cause = f" (caused by {cause_type}: {cause_str})"
            else:
                cause = f" (caused by {cause_type})"
        return f"[{self.category.name}] {self.message}{ctx}{cause}"

    def with_context(self, **kwargs: Any) -> 'KeeperError':
        """Add additional context to the error."""
        self.context.update(kwargs)
        return self

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for structured logging."""
        return {
            'error_type': self.__class__.__name__,
            'message': self.message,
            'category': self.category.name,
            'context': self.context,
            'cause': str(self.cause) if self.cause else None,
        }


# =============================================================================
# Operator input
# =============================================================================


@dataclass
class BadArgumentsError(KeeperError):
    """Unknown role name, malformed port, or an unusable command argument."""

    category: ErrorCategory = ErrorCategory.ARGUMENTS


# =============================================================================
# Configuration
# =============================================================================


@dataclass
class ConfigError(KeeperError):
    """Missing or invalid configuration. Never retried."""

    category: ErrorCategory = ErrorCategory.CONFIG


# =============================================================================
# Durable state and transitions
# =============================================================================


@dataclass
class StateError(KeeperError):
    """
    The durable record is missing, corrupt, or already exists, or the
    requested goal cannot be reached. The record is never auto-repaired.
    """

    category: ErrorCategory = ErrorCategory.STATE


@dataclass
class StateNotFoundError(StateError):
    """No state file at the expected path."""


@dataclass
class StateAlreadyExistsError(StateError):
    """Refusing to clobber an existing state file."""


@dataclass
class StateCorruptedError(StateError):
    """Truncated record, checksum mismatch, or unknown version marker."""


@dataclass
class NoTransitionPathError(StateError):
    """No chain of legal transitions leads from the current to the assigned role."""


@dataclass
class NoConvergenceError(StateError):
    """The assigned role was not reached within the hop budget."""


@dataclass
class PreconditionError(StateError):
    """The local instance does not match what a requested role requires."""


# =============================================================================
# Managed instance
# =============================================================================


@dataclass
class InstanceActionError(KeeperError):
    """
    A role's side-effecting action failed. The current role has not been
    advanced, so the caller may retry the same transition.
    """

    category: ErrorCategory = ErrorCategory.INSTANCE


# =============================================================================
# Monitor
# =============================================================================


@dataclass
class MonitorError(KeeperError):
    """Any failure talking to the monitor. Retryable by the caller."""

    category: ErrorCategory = ErrorCategory.MONITOR


@dataclass
class MonitorTimeoutError(MonitorError):
    """
    The call did not complete in time. The monitor may or may not have
    applied the request.
    """


@dataclass
class MonitorConnectionError(MonitorError):
    """The monitor could not be reached or the transport failed."""


@dataclass
class MonitorProtocolError(MonitorError):
    """The monitor answered with missing or malformed rows."""


@dataclass
class IncompatibleMonitorError(MonitorError):
    """The monitor's extension version does not match the keeper's."""


# =============================================================================
# Serialization
# =============================================================================


@dataclass
class SerializationError(KeeperError):
    """A record could not be rendered or parsed."""

    category: ErrorCategory = ErrorCategory.SERIALIZATION
