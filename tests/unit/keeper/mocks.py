"""
Mock implementations for keeper tests.

This module contains in-memory stand-ins for the instance actions, the
monitor transport and the instance probe, so the transition engine,
monitor client and reconciliation driver can be exercised without a
database server or a monitor.
"""

from dataclasses import dataclass, field
from typing import Any, Mapping

from autokeeper.keeper.errors import MonitorTimeoutError, StateError
from autokeeper.keeper.fsm import ActionContext, TransitionAction
from autokeeper.keeper.models import InstanceFacts
from autokeeper.keeper.monitor.queries import (
    EXTENSION_VERSION,
    GET_COORDINATOR,
    GET_OTHER_NODES,
    GET_OTHER_NODES_IN_STATE,
    GET_PRIMARY,
    NODE_ACTIVE,
    REGISTER_NODE,
)


QUERY_NAMES = {
    REGISTER_NODE: "register_node",
    NODE_ACTIVE: "node_active",
    GET_PRIMARY: "get_primary",
    GET_OTHER_NODES: "get_other_nodes",
    GET_OTHER_NODES_IN_STATE: "get_other_nodes",
    GET_COORDINATOR: "get_coordinator",
    EXTENSION_VERSION: "extension_version",
}


@dataclass
class MockInstance:
    """What the fake actions did to the "database instance"."""

    pgdata_exists: bool = False
    is_running: bool = False
    is_primary: bool = False
    sync_rep: bool = False
    replication_prepared: bool = False
    following: str | None = None
    maintenance: bool = False


class MockInstanceActions:
    """
    Idempotent fake actions that flip flags on a MockInstance.

    Each call is recorded in `calls`. Actions named in `failing` raise
    RuntimeError instead of doing anything.
    """

    def __init__(self, instance: MockInstance | None = None) -> None:
        self.instance = instance or MockInstance()
        self.calls: list[tuple[TransitionAction, ActionContext]] = []
        self.failing: set[TransitionAction] = set()

    def _record(self, action: TransitionAction, context: ActionContext) -> None:
        self.calls.append((action, context))

        if action in self.failing:
            raise RuntimeError(f"{action.value} failed")

    @property
    def called(self) -> list[TransitionAction]:
        return [action for action, _ in self.calls]

    async def init_primary(self, context: ActionContext) -> None:
        self._record(TransitionAction.INIT_PRIMARY, context)
        self.instance.pgdata_exists = True
        self.instance.is_running = True
        self.instance.is_primary = True

    async def prepare_replication(self, context: ActionContext) -> None:
        self._record(TransitionAction.PREPARE_REPLICATION, context)
        self.instance.replication_prepared = True

    async def enable_sync_rep(self, context: ActionContext) -> None:
        self._record(TransitionAction.ENABLE_SYNC_REP, context)
        self.instance.sync_rep = True

    async def disable_sync_rep(self, context: ActionContext) -> None:
        self._record(TransitionAction.DISABLE_SYNC_REP, context)
        self.instance.sync_rep = False

    async def disable_replication(self, context: ActionContext) -> None:
        self._record(TransitionAction.DISABLE_REPLICATION, context)
        self.instance.replication_prepared = False
        self.instance.sync_rep = False

    async def stop_postgres(self, context: ActionContext) -> None:
        self._record(TransitionAction.STOP_POSTGRES, context)
        self.instance.is_running = False

    async def rewind_or_init(self, context: ActionContext) -> None:
        self._record(TransitionAction.REWIND_OR_INIT, context)
        self._follow(context)

    async def init_standby(self, context: ActionContext) -> None:
        self._record(TransitionAction.INIT_STANDBY, context)
        self._follow(context)

    async def maintain_replication_slots(self, context: ActionContext) -> None:
        self._record(TransitionAction.MAINTAIN_REPLICATION_SLOTS, context)

    async def prepare_standby_for_promotion(self, context: ActionContext) -> None:
        self._record(TransitionAction.PREPARE_STANDBY_FOR_PROMOTION, context)

    async def stop_replication(self, context: ActionContext) -> None:
        self._record(TransitionAction.STOP_REPLICATION, context)
        self.instance.following = None

    async def promote_standby(self, context: ActionContext) -> None:
        self._record(TransitionAction.PROMOTE_STANDBY, context)
        self.instance.following = None
        self.instance.is_primary = True

    async def start_maintenance(self, context: ActionContext) -> None:
        self._record(TransitionAction.START_MAINTENANCE, context)
        self.instance.maintenance = True

    async def restart_standby(self, context: ActionContext) -> None:
        self._record(TransitionAction.RESTART_STANDBY, context)
        self.instance.maintenance = False
        self.instance.is_running = True

    def _follow(self, context: ActionContext) -> None:
        self.instance.pgdata_exists = True
        self.instance.is_running = True
        self.instance.is_primary = False
        self.instance.following = (
            str(context.other_node) if context.other_node else None
        )


@dataclass
class MockTransport:
    """
    Canned monitor answers keyed by function name.

    Every fetch is recorded as (function, params). Functions named in
    `timeouts` raise MonitorTimeoutError instead of answering.
    """

    rows: dict[str, list[dict[str, Any]]] = field(default_factory=dict)
    timeouts: set[str] = field(default_factory=set)
    calls: list[tuple[str, dict[str, Any]]] = field(default_factory=list)
    closed: bool = False

    async def fetch(
        self,
        query: str,
        params: Mapping[str, Any],
        timeout: float,
    ) -> list[dict[str, Any]]:
        function = QUERY_NAMES.get(query, "update_extension")
        self.calls.append((function, dict(params)))

        if function in self.timeouts:
            raise MonitorTimeoutError(
                f"Monitor call timed out after {timeout}s",
                context={"timeout": timeout},
            )

        return list(self.rows.get(function, []))

    async def close(self) -> None:
        self.closed = True

    def called(self, function: str) -> list[dict[str, Any]]:
        return [params for name, params in self.calls if name == function]


@dataclass
class MockProbe:
    """Returns fixed facts, or raises StateError when `failing` is set."""

    facts: InstanceFacts = field(default_factory=InstanceFacts)
    failing: bool = False
    probes: int = 0

    async def probe(self) -> InstanceFacts:
        self.probes += 1

        if self.failing:
            raise StateError("Failed to probe the local instance")

        return self.facts


@dataclass
class RecordingLogger:
    """Collects logged entries instead of writing them anywhere."""

    entries: list[Any] = field(default_factory=list)

    async def log(self, entry: Any, **kwargs: Any) -> None:
        self.entries.append(entry)

    def of_type(self, entry_type: type) -> list[Any]:
        return [entry for entry in self.entries if isinstance(entry, entry_type)]


def assigned_row(node_id: int, group_id: int, role: str) -> dict[str, Any]:
    return {
        "assigned_node_id": node_id,
        "assigned_group_id": group_id,
        "assigned_group_state": role,
    }


def node_row(node_id: int, host: str, port: int) -> dict[str, Any]:
    return {
        "node_id": node_id,
        "node_name": host,
        "node_port": port,
    }
