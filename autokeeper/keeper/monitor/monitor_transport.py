from typing import Any, Mapping, Protocol, runtime_checkable


Row = Mapping[str, Any]


@runtime_checkable
class MonitorTransport(Protocol):
    """
    Remote-call interface to the monitor: run one query and hand back
    its rows as mappings.

    Implementations raise MonitorTimeoutError when the call did not
    finish within timeout and MonitorConnectionError for any other
    transport failure.
    """

    async def fetch(
        self,
        query: str,
        params: Mapping[str, Any],
        timeout: float,
    ) -> list[Row]: ...

    async def close(self) -> None: ...
