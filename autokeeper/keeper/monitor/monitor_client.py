"""
Client side of the monitor protocol.

The client holds no state between calls; every operation takes the
identity it reports explicitly and can be retried on its own. Monitor
answers are parsed into AssignedState and NodeAddress values and any
row that does not have the expected shape is a MonitorProtocolError.
"""

import re
from typing import TYPE_CHECKING, Any

import msgspec

from autokeeper.keeper.errors import (
    IncompatibleMonitorError,
    MonitorError,
    MonitorProtocolError,
)
from autokeeper.keeper.logging_models import (
    MonitorDebug,
    MonitorErrorLog,
    MonitorInfo,
    MonitorWarning,
)
from autokeeper.keeper.models import (
    UNKNOWN_LSN,
    AssignedState,
    MonitorExtensionVersion,
    NodeAddress,
    NodeRole,
)

from .monitor_transport import MonitorTransport, Row
from .queries import (
    EXTENSION_VERSION,
    GET_COORDINATOR,
    GET_OTHER_NODES,
    GET_OTHER_NODES_IN_STATE,
    GET_PRIMARY,
    MONITOR_EXTENSION_NAME,
    MONITOR_EXTENSION_VERSION,
    NODE_ACTIVE,
    REGISTER_NODE,
    UPDATE_EXTENSION,
)

if TYPE_CHECKING:
    from autokeeper.logging import Logger


_VERSION_PATTERN = re.compile(r"^[0-9]+(\.[0-9]+)*$")


def monitor_role_name(role: NodeRole) -> str:
    """Name of a role on the wire. A never-registered node reports as init."""
    if role == NodeRole.UNINITIALIZED:
        return NodeRole.INIT.value

    return role.value


class MonitorClient:
    """
    Request/response operations against the monitor.

    Usage:
        client = MonitorClient(MonitorConnection(config.monitor_uri), timeout=10.0)

        assigned = await client.report_active(
            formation="default",
            nodename="node-a",
            port=5432,
            node_id=state.node_id,
            group_id=state.group_id,
            current_role=state.current_role,
            is_running=facts.is_running,
            position=facts.current_lsn,
            sync_state=facts.sync_state,
        )
    """

    __slots__ = (
        "_transport",
        "_timeout",
        "_logger",
    )

    def __init__(
        self,
        transport: MonitorTransport,
        timeout: float = 10.0,
        logger: "Logger | None" = None,
    ) -> None:
        self._transport = transport
        self._timeout = timeout
        self._logger = logger

    async def register(
        self,
        formation: str,
        group_id: int,
        node_id: int,
        address: NodeAddress,
        initial_role: NodeRole,
        dbname: str = "postgres",
    ) -> AssignedState:
        rows = await self._fetch(
            "register_node",
            REGISTER_NODE,
            {
                "formation": formation,
                "nodename": address.host,
                "nodeport": address.port,
                "dbname": dbname,
                "desired_node_id": node_id,
                "desired_group_id": group_id,
                "initial_group_role": monitor_role_name(initial_role),
            },
            formation=formation,
        )

        assigned = self._to_assigned_state("register_node", rows)

        await self._log(MonitorInfo(
            message=(
                f"Registered node {address} with id {assigned.node_id} in formation "
                f"{formation}, group {assigned.group_id}, state {assigned.role.value}"
            ),
            function="register_node",
            formation=formation,
        ))

        return assigned

    async def report_active(
        self,
        formation: str,
        nodename: str,
        port: int,
        node_id: int,
        group_id: int,
        current_role: NodeRole,
        is_running: bool,
        position: str | None = None,
        sync_state: str = "",
    ) -> AssignedState:
        rows = await self._fetch(
            "node_active",
            NODE_ACTIVE,
            {
                "formation": formation,
                "nodename": nodename,
                "nodeport": port,
                "current_node_id": node_id,
                "current_group_id": group_id,
                "current_group_role": monitor_role_name(current_role),
                "current_pg_is_running": is_running,
                "current_lsn": position or UNKNOWN_LSN,
                "current_rep_state": sync_state,
            },
            formation=formation,
        )

        assigned = self._to_assigned_state("node_active", rows)

        await self._log(MonitorDebug(
            message=(
                f"Node {nodename}:{port} reported {current_role.value}, "
                f"monitor assigned {assigned.role.value}"
            ),
            function="node_active",
            formation=formation,
        ))

        return assigned

    async def get_primary(
        self,
        formation: str,
        group_id: int,
    ) -> NodeAddress:
        rows = await self._fetch(
            "get_primary",
            GET_PRIMARY,
            {
                "formation": formation,
                "group_id": group_id,
            },
            formation=formation,
        )

        if len(rows) != 1:
            raise MonitorProtocolError(
                "Expected exactly one primary node from the monitor",
                context={
                    "formation": formation,
                    "group_id": group_id,
                    "rows": len(rows),
                },
            )

        return self._to_node_address("get_primary", rows[0], "primary_name", "primary_port")

    async def get_others(
        self,
        nodename: str,
        port: int,
        role_filter: NodeRole = NodeRole.ANY,
    ) -> list[NodeAddress]:
        params: dict[str, Any] = {
            "nodename": nodename,
            "nodeport": port,
        }

        query = GET_OTHER_NODES
        if role_filter != NodeRole.ANY:
            query = GET_OTHER_NODES_IN_STATE
            params["current_state"] = monitor_role_name(role_filter)

        rows = await self._fetch("get_other_nodes", query, params)

        return [
            self._to_node_address("get_other_nodes", row, "node_name", "node_port")
            for row in rows
        ]

    async def get_others_as_json(
        self,
        nodename: str,
        port: int,
        role_filter: NodeRole = NodeRole.ANY,
    ) -> str:
        others = await self.get_others(nodename, port, role_filter=role_filter)

        return msgspec.json.format(
            msgspec.json.encode(others),
            indent=4,
        ).decode()

    async def get_coordinator(self, formation: str) -> NodeAddress | None:
        """The formation's coordinator, or None when none is ready yet."""
        rows = await self._fetch(
            "get_coordinator",
            GET_COORDINATOR,
            {"formation": formation},
            formation=formation,
        )

        if len(rows) == 0 or rows[0].get("node_name") is None:
            return None

        return self._to_node_address("get_coordinator", rows[0], "node_name", "node_port")

    async def ensure_extension_version(
        self,
        expected_version: str = MONITOR_EXTENSION_VERSION,
        allow_update: bool = True,
    ) -> MonitorExtensionVersion:
        """
        Check that the monitor runs the extension version the keeper speaks.

        When the installed version differs and allow_update is set, the
        extension is updated first. A version that still differs raises
        IncompatibleMonitorError.
        """
        version = await self._extension_version()

        if version.installed_version == expected_version:
            return version

        if allow_update and _VERSION_PATTERN.match(expected_version):
            await self._log(MonitorWarning(
                message=(
                    f"Monitor extension {MONITOR_EXTENSION_NAME} is at version "
                    f"{version.installed_version}, updating to {expected_version}"
                ),
                function="ensure_extension_version",
            ))

            await self._fetch(
                "ensure_extension_version",
                UPDATE_EXTENSION.format(version=expected_version),
                {},
            )

            version = await self._extension_version()

        if version.installed_version != expected_version:
            await self._log(MonitorErrorLog(
                message=(
                    f"Monitor extension version {version.installed_version} "
                    f"is not the expected {expected_version}"
                ),
                function="ensure_extension_version",
            ))

            raise IncompatibleMonitorError(
                "Monitor extension version mismatch",
                context={
                    "expected_version": expected_version,
                    "installed_version": version.installed_version,
                    "default_version": version.default_version,
                },
            )

        return version

    async def close(self) -> None:
        await self._transport.close()

    async def _extension_version(self) -> MonitorExtensionVersion:
        rows = await self._fetch(
            "ensure_extension_version",
            EXTENSION_VERSION,
            {"extension": MONITOR_EXTENSION_NAME},
        )

        if len(rows) != 1:
            raise MonitorProtocolError(
                f"Extension {MONITOR_EXTENSION_NAME} is not available on the monitor",
            )

        row = rows[0]
        installed_version = row.get("installed_version")

        if installed_version is None:
            raise IncompatibleMonitorError(
                f"Extension {MONITOR_EXTENSION_NAME} is not installed on the monitor",
                context={"default_version": row.get("default_version")},
            )

        return MonitorExtensionVersion(
            default_version=str(row.get("default_version")),
            installed_version=str(installed_version),
        )

    async def _fetch(
        self,
        function: str,
        query: str,
        params: dict[str, Any],
        formation: str = "",
    ) -> list[Row]:
        try:
            return await self._transport.fetch(query, params, self._timeout)

        except MonitorError as error:
            await self._log(MonitorErrorLog(
                message=f"Monitor call failed: {error}",
                function=function,
                formation=formation,
            ))
            raise error.with_context(function=function)

    def _to_assigned_state(self, function: str, rows: list[Row]) -> AssignedState:
        if len(rows) != 1:
            raise MonitorProtocolError(
                f"Expected exactly one row from {function}",
                context={"rows": len(rows)},
            )

        row = rows[0]

        try:
            return AssignedState(
                node_id=int(row["assigned_node_id"]),
                group_id=int(row["assigned_group_id"]),
                role=NodeRole(row["assigned_group_state"]),
            )

        except (KeyError, TypeError, ValueError) as error:
            raise MonitorProtocolError(
                f"Malformed row from {function}",
                context={"row": dict(row)},
                cause=error,
            ) from error

    def _to_node_address(
        self,
        function: str,
        row: Row,
        host_column: str,
        port_column: str,
    ) -> NodeAddress:
        try:
            return NodeAddress(
                host=str(row[host_column]),
                port=int(row[port_column]),
                node_id=int(row.get("node_id", -1)),
            )

        except (KeyError, TypeError, ValueError) as error:
            raise MonitorProtocolError(
                f"Malformed row from {function}",
                context={"row": dict(row)},
                cause=error,
            ) from error

    async def _log(self, entry) -> None:
        if self._logger is not None:
            await self._logger.log(entry)
