import asyncio
import io
import os
import pathlib
import sys
from collections import defaultdict
from typing import (
    Callable,
    Dict,
    TypeVar,
)

import msgspec

from autokeeper.logging.config.logging_config import LoggingConfig
from autokeeper.logging.config.stream_type import StreamType
from autokeeper.logging.models import Entry, Log

T = TypeVar('T', bound=Entry)

EntryOrLog = Entry | Log


DEFAULT_TEMPLATE = "{timestamp} - {level} - {thread_id} - {filename}:{function_name}.{line_number} - {message}"
DEFAULT_LOGFILE = "logs.json"


class LoggerStream:
    def __init__(
        self,
        name: str | None = None,
        template: str | None = None,
        filename: str | None = None,
        directory: str | None = None,
    ) -> None:
        if name is None:
            name = "default"

        self._name = name
        self._default_template = template
        self._default_logfile = filename
        self._default_log_directory = directory

        self._init_lock = asyncio.Lock()
        self._loop: asyncio.AbstractEventLoop | None = None

        self._files: Dict[str, io.BufferedWriter] = {}
        self._file_locks: Dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)
        self._cwd: str | None = None
        self._default_logfile_path: str | None = None

        self._config = LoggingConfig()
        self._initialized: bool = False
        self._closed = False

    async def initialize(self):

        async with self._init_lock:

            if self._initialized:
                return

            if self._loop is None:
                self._loop = asyncio.get_running_loop()

            self._closed = False
            self._initialized = True

    async def open_file(
        self,
        filename: str,
        directory: str | None = None,
        is_default: bool = False,
    ):
        if self._cwd is None:
            self._cwd = await self._loop.run_in_executor(
                None,
                os.getcwd,
            )

        logfile_path = self._to_logfile_path(filename, directory=directory)

        file_lock = self._file_locks[logfile_path]
        async with file_lock:
            self._files[logfile_path] = await self._loop.run_in_executor(
                None,
                self._open_file,
                logfile_path,
            )

        if is_default:
            self._default_logfile_path = logfile_path

    def _open_file(self, logfile_path: str):
        resolved_path = pathlib.Path(logfile_path).absolute().resolve()
        resolved_path.parent.mkdir(parents=True, exist_ok=True)

        return open(resolved_path, "ab+")

    def _to_logfile_path(
        self,
        filename: str,
        directory: str | None = None,
    ):
        filename_path = pathlib.Path(filename)

        if filename_path.suffix != ".json":
            filename = f"{filename_path.stem}.json"

        if directory is None:
            directory = self._config.directory or os.path.join(self._cwd, "logs")

        return os.path.join(directory, filename)

    async def close(self):
        self._closed = True

        for logfile_path, logfile in list(self._files.items()):
            async with self._file_locks[logfile_path]:
                if logfile.closed is False:
                    await self._loop.run_in_executor(None, logfile.close)

        self._files.clear()
        self._initialized = False

    async def log(
        self,
        entry: EntryOrLog,
        template: str | None = None,
        path: str | None = None,
        filter: Callable[[T], bool] | None = None,
    ):
        """
        Write to the path given, else to the context's file or directory,
        else to the configured log directory, else to the output stream.
        """
        if isinstance(entry, Log):
            log = entry

        else:
            log = Log.from_frame(entry, sys._getframe(1))

        filename: str | None = None
        directory: str | None = None

        if path:
            logfile_path = pathlib.Path(path)
            is_logfile = len(logfile_path.suffix) > 0

            filename = logfile_path.name if is_logfile else None
            directory = str(logfile_path.parent.absolute()) if is_logfile else str(logfile_path.absolute())

        if template is None:
            template = self._default_template

        if filename is None:
            filename = self._default_logfile

        if directory is None:
            directory = self._default_log_directory

        if filename is None and directory is None:
            directory = self._config.directory

        if self._config.enabled(self._name, log.entry.level) is False:
            return

        if filter and filter(log.entry) is False:
            return

        if self._initialized is False:
            await self.initialize()

        if filename or directory:
            await self._log_to_file(
                log,
                filename=filename,
                directory=directory,
            )

        else:
            await self._log(
                log,
                template=template,
            )

    async def _log(
        self,
        log: Log,
        template: str | None = None,
    ):
        if template is None:
            template = DEFAULT_TEMPLATE

        stream = sys.stdout if self._config.output == StreamType.STDOUT else sys.stderr

        line = log.entry.to_template(
            template,
            context=log.context(),
        )

        await self._loop.run_in_executor(
            None,
            self._write_to_stream,
            stream,
            line,
        )

    def _write_to_stream(
        self,
        stream: io.TextIOBase,
        line: str,
    ):
        if stream.closed:
            return

        stream.write(f"{line}\n")
        stream.flush()

    async def _log_to_file(
        self,
        log: Log,
        filename: str | None = None,
        directory: str | None = None,
    ):
        if self._cwd is None:
            self._cwd = await self._loop.run_in_executor(
                None,
                os.getcwd,
            )

        if filename is None and self._default_logfile_path:
            logfile_path = self._default_logfile_path

        else:
            if filename is None:
                filename = DEFAULT_LOGFILE

            logfile_path = self._to_logfile_path(
                filename,
                directory=directory,
            )

        if self._files.get(logfile_path) is None or self._files[logfile_path].closed:
            await self.open_file(
                pathlib.Path(logfile_path).name,
                directory=str(pathlib.Path(logfile_path).parent),
            )

        async with self._file_locks[logfile_path]:
            await self._loop.run_in_executor(
                None,
                self._write_to_file,
                log,
                logfile_path,
            )

    def _write_to_file(
        self,
        log: Log,
        logfile_path: str,
    ):
        if (
            logfile := self._files.get(logfile_path)
        ) and (
            logfile.closed is False
        ):

            logfile.write(msgspec.json.encode(log) + b"\n")
            logfile.flush()
