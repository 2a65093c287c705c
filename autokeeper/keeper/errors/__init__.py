from .exit_codes import ExitCode as ExitCode
from .keeper_errors import (
    BadArgumentsError as BadArgumentsError,
    ConfigError as ConfigError,
    ErrorCategory as ErrorCategory,
    IncompatibleMonitorError as IncompatibleMonitorError,
    InstanceActionError as InstanceActionError,
    KeeperError as KeeperError,
    MonitorConnectionError as MonitorConnectionError,
    MonitorError as MonitorError,
    MonitorProtocolError as MonitorProtocolError,
    MonitorTimeoutError as MonitorTimeoutError,
    NoConvergenceError as NoConvergenceError,
    NoTransitionPathError as NoTransitionPathError,
    PreconditionError as PreconditionError,
    SerializationError as SerializationError,
    StateAlreadyExistsError as StateAlreadyExistsError,
    StateCorruptedError as StateCorruptedError,
    StateError as StateError,
    StateNotFoundError as StateNotFoundError,
)
