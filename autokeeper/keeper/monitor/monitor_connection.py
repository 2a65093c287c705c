import asyncio
from typing import TYPE_CHECKING, Any, Mapping

import sqlalchemy
from sqlalchemy.engine import URL, make_url
from sqlalchemy.exc import ArgumentError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncEngine, create_async_engine
from sqlalchemy.pool import NullPool

from autokeeper.keeper.errors import (
    ConfigError,
    MonitorConnectionError,
    MonitorTimeoutError,
)
from autokeeper.keeper.logging_models import MonitorDebug

from .monitor_transport import Row

if TYPE_CHECKING:
    from autokeeper.logging import Logger


def to_async_url(monitor_uri: str) -> URL:
    """Parse a postgres:// monitor URI into an asyncpg SQLAlchemy URL."""
    try:
        url = make_url(monitor_uri)

    except ArgumentError as error:
        raise ConfigError(
            "Failed to parse the monitor URI",
            cause=error,
        ) from error

    if url.get_backend_name() not in ("postgres", "postgresql"):
        raise ConfigError(
            "The monitor URI must use the postgresql scheme",
            context={"scheme": url.drivername},
        )

    return url.set(drivername="postgresql+asyncpg")


class MonitorConnection:
    """
    MonitorTransport over SQLAlchemy's asyncio engine and the asyncpg
    driver. Connections are not pooled: the keeper talks to the monitor
    once or twice per round.
    """

    __slots__ = (
        "_url",
        "_logger",
        "_engine",
    )

    def __init__(
        self,
        monitor_uri: str,
        logger: "Logger | None" = None,
    ) -> None:
        self._url = to_async_url(monitor_uri)
        self._logger = logger
        self._engine: AsyncEngine | None = None

    def connect(self) -> AsyncEngine:
        if self._engine is None:
            self._engine = create_async_engine(
                self._url,
                poolclass=NullPool,
                echo=False,
            )

        return self._engine

    async def fetch(
        self,
        query: str,
        params: Mapping[str, Any],
        timeout: float,
    ) -> list[Row]:
        engine = self.connect()

        if self._logger is not None:
            await self._logger.log(MonitorDebug(
                message=f"{query} {dict(params)}",
                function="fetch",
            ))

        try:
            return await asyncio.wait_for(
                self._execute(engine, query, params),
                timeout=timeout,
            )

        except asyncio.TimeoutError as error:
            raise MonitorTimeoutError(
                f"Monitor call timed out after {timeout}s",
                context={
                    "host": self._url.host,
                    "timeout": timeout,
                },
                cause=error,
            ) from error

        except (SQLAlchemyError, OSError) as error:
            raise MonitorConnectionError(
                "Monitor call failed",
                context={"host": self._url.host},
                cause=error,
            ) from error

    async def _execute(
        self,
        engine: AsyncEngine,
        query: str,
        params: Mapping[str, Any],
    ) -> list[Row]:
        async with engine.begin() as connection:
            result = await connection.execute(
                sqlalchemy.text(query),
                dict(params),
            )

            if result.returns_rows is False:
                return []

            return [dict(row) for row in result.mappings()]

    async def close(self) -> None:
        if self._engine is not None:
            await self._engine.dispose()
            self._engine = None
