"""
The one place keeper errors become process exit codes.
"""

import sys
from typing import TYPE_CHECKING, Awaitable, TextIO

from autokeeper.keeper.errors import (
    BadArgumentsError,
    ConfigError,
    ExitCode,
    InstanceActionError,
    KeeperError,
    MonitorError,
    PreconditionError,
    SerializationError,
    StateError,
)
from autokeeper.keeper.logging_models import KeeperErrorLog, KeeperFatal

if TYPE_CHECKING:
    from autokeeper.logging import Logger


_EXIT_CODES: list[tuple[type[KeeperError], ExitCode]] = [
    (BadArgumentsError, ExitCode.BAD_ARGS),
    (ConfigError, ExitCode.BAD_CONFIG),
    (PreconditionError, ExitCode.BAD_CONFIG),
    (StateError, ExitCode.BAD_STATE),
    (SerializationError, ExitCode.BAD_STATE),
    (InstanceActionError, ExitCode.PGCTL),
    (MonitorError, ExitCode.MONITOR),
]


def exit_code_for(error: BaseException) -> ExitCode:
    for error_type, exit_code in _EXIT_CODES:
        if isinstance(error, error_type):
            return exit_code

    return ExitCode.INTERNAL_ERROR


async def run_command(
    command: Awaitable[str],
    logger: "Logger | None" = None,
    output: TextIO | None = None,
) -> ExitCode:
    """
    Await a command, write its output and return the exit code the
    process should end with. Errors are logged here and nowhere else.
    """
    if output is None:
        output = sys.stdout

    try:
        text = await command

    except KeeperError as error:
        exit_code = exit_code_for(error)

        if logger is not None:
            await logger.log(KeeperErrorLog(
                message=f"{error} (exit code {exit_code.value})",
            ))

        return exit_code

    except Exception as error:
        if logger is not None:
            await logger.log(KeeperFatal(
                message=f"Unexpected {type(error).__name__}: {error}",
            ))

        return ExitCode.INTERNAL_ERROR

    if text:
        output.write(f"{text}\n")

    return ExitCode.QUIT
