"""
Durable, atomic persistence of the keeper's state record.

A single keeper process owns the state file. Writes go to a temporary
file in the same directory which is fsynced and then renamed over the
record, so readers only ever see the previous or the new state.
"""

import asyncio
import os
import pathlib
import tempfile
from typing import TYPE_CHECKING

from autokeeper.keeper.errors import (
    StateAlreadyExistsError,
    StateError,
    StateNotFoundError,
)
from autokeeper.keeper.logging_models import KeeperDebug, KeeperInfo
from autokeeper.keeper.models import KeeperState

from .state_record import pack_state, parse_state, serialize_state, unpack_state

if TYPE_CHECKING:
    from autokeeper.logging import Logger


class StateStore:
    """
    Reads and writes one keeper state file.

    Blocking file IO runs in the event loop's default executor.

    Usage:
        store = StateStore("/var/lib/autokeeper/pgdata/keeper.state", logger)

        state = await store.create()
        state.assigned_role = NodeRole.SINGLE
        await store.write(state)

        print(store.serialize(await store.read()))
    """

    __slots__ = (
        "_path",
        "_logger",
    )

    def __init__(
        self,
        path: str | os.PathLike,
        logger: "Logger | None" = None,
    ) -> None:
        self._path = pathlib.Path(path)
        self._logger = logger

    @property
    def path(self) -> pathlib.Path:
        return self._path

    async def exists(self) -> bool:
        loop = asyncio.get_running_loop()
        return await loop.run_in_executor(None, self._path.exists)

    async def create(self, state: KeeperState | None = None) -> KeeperState:
        """
        Write the initial record, uninitialized unless a state is given.
        Fails when a state file already exists so another node's
        identity is never clobbered.
        """
        if await self.exists():
            raise StateAlreadyExistsError(
                "Keeper state file already exists",
                context={"path": str(self._path)},
            )

        if state is None:
            state = KeeperState()

        await self.write(state)

        await self._log(KeeperInfo(
            message=f"Initialized keeper state in {self._path}",
            role=state.current_role.value,
        ))

        return state

    async def read(self) -> KeeperState:
        loop = asyncio.get_running_loop()

        try:
            data = await loop.run_in_executor(None, self._path.read_bytes)

        except FileNotFoundError as error:
            raise StateNotFoundError(
                "Keeper state file does not exist",
                context={"path": str(self._path)},
                cause=error,
            ) from error

        except OSError as error:
            raise StateError(
                "Failed to read keeper state file",
                context={"path": str(self._path)},
                cause=error,
            ) from error

        try:
            return unpack_state(data)

        except StateError as error:
            raise error.with_context(path=str(self._path))

    async def write(self, state: KeeperState) -> None:
        data = pack_state(state)
        loop = asyncio.get_running_loop()

        try:
            await loop.run_in_executor(None, self._write_atomically, data)

        except OSError as error:
            raise StateError(
                "Failed to write keeper state file",
                context={"path": str(self._path)},
                cause=error,
            ) from error

        await self._log(KeeperDebug(
            message=f"Wrote keeper state to {self._path}",
            node_id=state.node_id,
            group_id=state.group_id,
            role=state.current_role.value,
        ))

    async def remove(self) -> None:
        """Delete the state file. Only explicit re-initialization does this."""
        loop = asyncio.get_running_loop()

        try:
            await loop.run_in_executor(None, self._path.unlink)

        except FileNotFoundError as error:
            raise StateNotFoundError(
                "Keeper state file does not exist",
                context={"path": str(self._path)},
                cause=error,
            ) from error

    def serialize(self, state: KeeperState) -> str:
        return serialize_state(state)

    def parse(self, text: str | bytes) -> KeeperState:
        return parse_state(text)

    def _write_atomically(self, data: bytes) -> None:
        directory = self._path.parent
        directory.mkdir(parents=True, exist_ok=True)

        descriptor, temp_path = tempfile.mkstemp(
            prefix=f".{self._path.name}.",
            suffix=".tmp",
            dir=directory,
        )

        try:
            with os.fdopen(descriptor, "wb") as temp_file:
                temp_file.write(data)
                temp_file.flush()
                os.fsync(temp_file.fileno())

            os.replace(temp_path, self._path)

        except BaseException:
            if os.path.exists(temp_path):
                os.unlink(temp_path)

            raise

        directory_descriptor = os.open(directory, os.O_RDONLY)
        try:
            os.fsync(directory_descriptor)

        finally:
            os.close(directory_descriptor)

    async def _log(self, entry) -> None:
        if self._logger is not None:
            await self._logger.log(entry)
