import asyncio
import pathlib
from typing import TYPE_CHECKING, Protocol, runtime_checkable

import psutil

from autokeeper.keeper.errors import StateError
from autokeeper.keeper.logging_models import KeeperTrace
from autokeeper.keeper.models import InstanceFacts

if TYPE_CHECKING:
    from autokeeper.logging import Logger


POSTMASTER_PID_FILENAME = "postmaster.pid"
PG_VERSION_FILENAME = "PG_VERSION"
POSTGRES_PROCESS_NAMES = ("postgres", "postmaster")


@runtime_checkable
class InstanceProbe(Protocol):
    """Collects live facts about the managed instance. Raises StateError on failure."""

    async def probe(self) -> InstanceFacts: ...


class LocalInstanceProbe:
    """
    Observes a local data directory: whether it holds an initialized
    cluster, and whether the process recorded in its postmaster.pid is
    alive and is a database server.

    WAL position and sync state need a connection to the server and are
    left unknown here.
    """

    __slots__ = (
        "_pgdata",
        "_logger",
    )

    def __init__(
        self,
        pgdata: str,
        logger: "Logger | None" = None,
    ) -> None:
        self._pgdata = pathlib.Path(pgdata)
        self._logger = logger

    async def probe(self) -> InstanceFacts:
        loop = asyncio.get_running_loop()

        try:
            facts = await loop.run_in_executor(None, self._probe)

        except (OSError, psutil.Error) as error:
            raise StateError(
                "Failed to probe the local instance",
                context={"pgdata": str(self._pgdata)},
                cause=error,
            ) from error

        if self._logger is not None:
            await self._logger.log(KeeperTrace(
                message=(
                    f"Probed {self._pgdata}: exists={facts.pgdata_exists} "
                    f"running={facts.is_running}"
                ),
            ))

        return facts

    def _probe(self) -> InstanceFacts:
        pgdata_exists = (self._pgdata / PG_VERSION_FILENAME).is_file()

        is_running = False
        if pgdata_exists and (pid := self._read_postmaster_pid()):
            is_running = self._is_postgres_process(pid)

        return InstanceFacts(
            pgdata_exists=pgdata_exists,
            is_running=is_running,
        )

    def _read_postmaster_pid(self) -> int | None:
        pidfile = self._pgdata / POSTMASTER_PID_FILENAME

        try:
            first_line = pidfile.read_text().splitlines()[0]

        except (FileNotFoundError, IndexError):
            return None

        try:
            return int(first_line.strip())

        except ValueError:
            return None

    def _is_postgres_process(self, pid: int) -> bool:
        try:
            process_name = psutil.Process(pid).name()

        except psutil.NoSuchProcess:
            return False

        except psutil.AccessDenied:
            return psutil.pid_exists(pid)

        return any(name in process_name for name in POSTGRES_PROCESS_NAMES)
