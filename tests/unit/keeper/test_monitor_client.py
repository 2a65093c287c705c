"""
Tests for the monitor client.

Covers:
- request parameters sent for register and node_active
- parsing of assigned states and node addresses
- protocol errors on missing or malformed rows
- coordinator lookups with and without a coordinator
- extension version checks, updates and mismatches
- timeouts surfacing as MonitorTimeoutError
"""

import asyncio
import json

import pytest

from autokeeper.keeper.errors import (
    ConfigError,
    IncompatibleMonitorError,
    MonitorConnectionError,
    MonitorProtocolError,
    MonitorTimeoutError,
)
from autokeeper.keeper.logging_models import MonitorErrorLog
from autokeeper.keeper.models import AssignedState, NodeAddress, NodeRole
from autokeeper.keeper.monitor import (
    MonitorClient,
    MonitorConnection,
    monitor_role_name,
    to_async_url,
)

from tests.unit.keeper.mocks import (
    MockTransport,
    RecordingLogger,
    assigned_row,
    node_row,
)


@pytest.fixture
def client(transport: MockTransport, recording_logger: RecordingLogger) -> MonitorClient:
    return MonitorClient(transport, timeout=2.5, logger=recording_logger)


# =============================================================================
# Register / node active
# =============================================================================


class TestRegister:
    @pytest.mark.asyncio
    async def test_register_returns_assigned_state(
        self,
        client: MonitorClient,
        transport: MockTransport,
    ):
        transport.rows["register_node"] = [assigned_row(4, 1, "wait_standby")]

        assigned = await client.register(
            formation="default",
            group_id=1,
            node_id=-1,
            address=NodeAddress(host="node-a", port=5433),
            initial_role=NodeRole.WAIT_STANDBY,
            dbname="app",
        )

        assert assigned == AssignedState(
            node_id=4,
            group_id=1,
            role=NodeRole.WAIT_STANDBY,
        )
        assert transport.called("register_node") == [
            {
                "formation": "default",
                "nodename": "node-a",
                "nodeport": 5433,
                "dbname": "app",
                "desired_node_id": -1,
                "desired_group_id": 1,
                "initial_group_role": "wait_standby",
            }
        ]

    @pytest.mark.asyncio
    async def test_register_without_answer(
        self,
        client: MonitorClient,
    ):
        with pytest.raises(MonitorProtocolError):
            await client.register(
                formation="default",
                group_id=0,
                node_id=-1,
                address=NodeAddress(host="node-a", port=5433),
                initial_role=NodeRole.SINGLE,
            )

    @pytest.mark.asyncio
    async def test_unknown_assigned_role(
        self,
        client: MonitorClient,
        transport: MockTransport,
    ):
        transport.rows["register_node"] = [assigned_row(4, 0, "leader")]

        with pytest.raises(MonitorProtocolError, match="Malformed"):
            await client.register(
                formation="default",
                group_id=0,
                node_id=-1,
                address=NodeAddress(host="node-a", port=5433),
                initial_role=NodeRole.SINGLE,
            )


class TestReportActive:
    @pytest.mark.asyncio
    async def test_report_active_sends_identity_and_position(
        self,
        client: MonitorClient,
        transport: MockTransport,
    ):
        transport.rows["node_active"] = [assigned_row(4, 0, "primary")]

        assigned = await client.report_active(
            formation="default",
            nodename="node-a",
            port=5433,
            node_id=4,
            group_id=0,
            current_role=NodeRole.WAIT_PRIMARY,
            is_running=True,
            position="0/3000060",
            sync_state="sync",
        )

        assert assigned.role == NodeRole.PRIMARY

        params = transport.called("node_active")[0]
        assert params["current_group_role"] == "wait_primary"
        assert params["current_pg_is_running"] is True
        assert params["current_lsn"] == "0/3000060"
        assert params["current_rep_state"] == "sync"

    @pytest.mark.asyncio
    async def test_unknown_position_is_reported_as_zero(
        self,
        client: MonitorClient,
        transport: MockTransport,
    ):
        transport.rows["node_active"] = [assigned_row(4, 0, "init")]

        await client.report_active(
            formation="default",
            nodename="node-a",
            port=5433,
            node_id=4,
            group_id=0,
            current_role=NodeRole.UNINITIALIZED,
            is_running=False,
        )

        params = transport.called("node_active")[0]
        assert params["current_lsn"] == "0/0"
        assert params["current_group_role"] == "init"

    @pytest.mark.asyncio
    async def test_timeout_is_logged_and_raised(
        self,
        client: MonitorClient,
        transport: MockTransport,
        recording_logger: RecordingLogger,
    ):
        transport.timeouts.add("node_active")

        with pytest.raises(MonitorTimeoutError) as error:
            await client.report_active(
                formation="default",
                nodename="node-a",
                port=5433,
                node_id=4,
                group_id=0,
                current_role=NodeRole.SECONDARY,
                is_running=True,
            )

        assert error.value.context["function"] == "node_active"
        assert error.value.context["timeout"] == 2.5

        errors = recording_logger.of_type(MonitorErrorLog)
        assert len(errors) == 1
        assert errors[0].function == "node_active"


# =============================================================================
# Node lookups
# =============================================================================


class TestNodeLookups:
    @pytest.mark.asyncio
    async def test_get_primary(
        self,
        client: MonitorClient,
        transport: MockTransport,
    ):
        transport.rows["get_primary"] = [
            {"primary_name": "node-b", "primary_port": 5432},
        ]

        primary = await client.get_primary("default", 0)

        assert primary == NodeAddress(host="node-b", port=5432)
        assert transport.called("get_primary") == [{"formation": "default", "group_id": 0}]

    @pytest.mark.asyncio
    async def test_get_primary_requires_exactly_one_row(
        self,
        client: MonitorClient,
        transport: MockTransport,
    ):
        transport.rows["get_primary"] = []

        with pytest.raises(MonitorProtocolError, match="exactly one primary"):
            await client.get_primary("default", 0)

    @pytest.mark.asyncio
    async def test_get_others(
        self,
        client: MonitorClient,
        transport: MockTransport,
    ):
        transport.rows["get_other_nodes"] = [
            node_row(2, "node-b", 5432),
            node_row(3, "node-c", 5432),
        ]

        others = await client.get_others("node-a", 5433)

        assert [str(node) for node in others] == ["node-b:5432", "node-c:5432"]
        assert [node.node_id for node in others] == [2, 3]
        assert "current_state" not in transport.called("get_other_nodes")[0]

    @pytest.mark.asyncio
    async def test_get_others_in_state(
        self,
        client: MonitorClient,
        transport: MockTransport,
    ):
        transport.rows["get_other_nodes"] = [node_row(2, "node-b", 5432)]

        await client.get_others("node-a", 5433, role_filter=NodeRole.SECONDARY)

        assert transport.called("get_other_nodes")[0]["current_state"] == "secondary"

    @pytest.mark.asyncio
    async def test_get_others_as_json(
        self,
        client: MonitorClient,
        transport: MockTransport,
    ):
        transport.rows["get_other_nodes"] = [node_row(2, "node-b", 5432)]

        rendered = json.loads(await client.get_others_as_json("node-a", 5433))

        assert rendered == [{"host": "node-b", "port": 5432, "node_id": 2}]

    @pytest.mark.asyncio
    async def test_malformed_node_row(
        self,
        client: MonitorClient,
        transport: MockTransport,
    ):
        transport.rows["get_other_nodes"] = [{"node_name": "node-b"}]

        with pytest.raises(MonitorProtocolError):
            await client.get_others("node-a", 5433)

    @pytest.mark.asyncio
    async def test_coordinator(
        self,
        client: MonitorClient,
        transport: MockTransport,
    ):
        transport.rows["get_coordinator"] = [{"node_name": "coord", "node_port": 5432}]

        coordinator = await client.get_coordinator("default")

        assert coordinator == NodeAddress(host="coord", port=5432)

    @pytest.mark.asyncio
    async def test_no_coordinator_ready(
        self,
        client: MonitorClient,
        transport: MockTransport,
    ):
        assert await client.get_coordinator("default") is None

        transport.rows["get_coordinator"] = [{"node_name": None, "node_port": None}]

        assert await client.get_coordinator("default") is None


# =============================================================================
# Extension version
# =============================================================================


class TestExtensionVersion:
    @pytest.mark.asyncio
    async def test_current_version(
        self,
        client: MonitorClient,
        transport: MockTransport,
    ):
        transport.rows["extension_version"] = [
            {"default_version": "1.0", "installed_version": "1.0"},
        ]

        version = await client.ensure_extension_version()

        assert version.installed_version == "1.0"
        assert version.is_current
        assert transport.called("update_extension") == []

    @pytest.mark.asyncio
    async def test_outdated_version_is_updated(
        self,
        client: MonitorClient,
        transport: MockTransport,
    ):
        answers = iter([
            [{"default_version": "1.0", "installed_version": "0.9"}],
            [{"default_version": "1.0", "installed_version": "1.0"}],
        ])

        original_fetch = transport.fetch

        async def fetch(query, params, timeout):
            rows = await original_fetch(query, params, timeout)
            if transport.calls[-1][0] == "extension_version":
                return next(answers)

            return rows

        transport.fetch = fetch

        version = await client.ensure_extension_version()

        assert version.installed_version == "1.0"
        assert [name for name, _ in transport.calls] == [
            "extension_version",
            "update_extension",
            "extension_version",
        ]

    @pytest.mark.asyncio
    async def test_mismatch_without_update(
        self,
        client: MonitorClient,
        transport: MockTransport,
    ):
        transport.rows["extension_version"] = [
            {"default_version": "1.0", "installed_version": "0.9"},
        ]

        with pytest.raises(IncompatibleMonitorError) as error:
            await client.ensure_extension_version(allow_update=False)

        assert error.value.context["installed_version"] == "0.9"
        assert transport.called("update_extension") == []

    @pytest.mark.asyncio
    async def test_update_that_does_not_take(
        self,
        client: MonitorClient,
        transport: MockTransport,
    ):
        transport.rows["extension_version"] = [
            {"default_version": "0.9", "installed_version": "0.9"},
        ]

        with pytest.raises(IncompatibleMonitorError):
            await client.ensure_extension_version()

        assert len(transport.called("update_extension")) == 1

    @pytest.mark.asyncio
    async def test_extension_not_installed(
        self,
        client: MonitorClient,
        transport: MockTransport,
    ):
        transport.rows["extension_version"] = [
            {"default_version": "1.0", "installed_version": None},
        ]

        with pytest.raises(IncompatibleMonitorError, match="not installed"):
            await client.ensure_extension_version()

    @pytest.mark.asyncio
    async def test_extension_not_available(self, client: MonitorClient):
        with pytest.raises(MonitorProtocolError, match="not available"):
            await client.ensure_extension_version()


# =============================================================================
# Role names and connection setup
# =============================================================================


class TestRoleNames:
    def test_uninitialized_is_sent_as_init(self):
        assert monitor_role_name(NodeRole.UNINITIALIZED) == "init"

    def test_other_roles_keep_their_names(self):
        assert monitor_role_name(NodeRole.PREPARE_PROMOTION) == "prepare_promotion"


class TestMonitorConnection:
    def test_uri_uses_asyncpg_driver(self):
        url = to_async_url("postgres://autoctl@monitor:6000/pg_auto_failover")

        assert url.drivername == "postgresql+asyncpg"
        assert url.host == "monitor"
        assert url.port == 6000
        assert url.database == "pg_auto_failover"

    def test_rejects_other_schemes(self):
        with pytest.raises(ConfigError):
            to_async_url("mysql://monitor/db")

    def test_rejects_unparseable_uri(self):
        with pytest.raises(ConfigError):
            to_async_url("not a uri")

    @pytest.mark.asyncio
    async def test_slow_call_times_out(self, monkeypatch: pytest.MonkeyPatch):
        async def slow_execute(self, engine, query, params):
            await asyncio.sleep(1)
            return []

        monkeypatch.setattr(MonitorConnection, "_execute", slow_execute)

        connection = MonitorConnection("postgresql://autoctl@monitor/pg_auto_failover")

        try:
            with pytest.raises(MonitorTimeoutError):
                await connection.fetch("SELECT 1", {}, timeout=0.01)

        finally:
            await connection.close()

    @pytest.mark.asyncio
    async def test_unreachable_monitor(self, monkeypatch: pytest.MonkeyPatch):
        async def refused_execute(self, engine, query, params):
            raise ConnectionRefusedError("connection refused")

        monkeypatch.setattr(MonitorConnection, "_execute", refused_execute)

        connection = MonitorConnection("postgresql://autoctl@monitor/pg_auto_failover")

        try:
            with pytest.raises(MonitorConnectionError):
                await connection.fetch("SELECT 1", {}, timeout=1.0)

        finally:
            await connection.close()
