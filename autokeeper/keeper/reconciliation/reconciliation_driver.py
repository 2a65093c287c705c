"""
Reconciliation rounds for one keeper.

A round reads live instance facts, obtains the goal (from the monitor or
from an operator), walks the transition engine toward it and persists
the state after every applied transition. All configuration, storage
and collaborators are handed in explicitly.
"""

import time
from typing import TYPE_CHECKING

import msgspec

from autokeeper.keeper.config import KeeperConfig
from autokeeper.keeper.errors import (
    BadArgumentsError,
    ConfigError,
    StateAlreadyExistsError,
    StateError,
)
from autokeeper.keeper.fsm import (
    InstanceActions,
    PeerSource,
    TransitionEdge,
    TransitionEngine,
)
from autokeeper.keeper.instance import InstanceProbe, LocalInstanceProbe
from autokeeper.keeper.logging_models import (
    KeeperInfo,
    KeeperWarning,
)
from autokeeper.keeper.models import (
    AssignedState,
    InstanceFacts,
    KeeperState,
    NodeAddress,
    NodeRole,
)
from autokeeper.keeper.monitor import (
    MonitorClient,
    MonitorConnection,
    MonitorTransport,
)
from autokeeper.keeper.state import StateStore

from .preconditions import check_register_preconditions

if TYPE_CHECKING:
    from autokeeper.logging import Logger


class ReconciliationDriver:
    """
    Orchestrates the state store, instance probe, monitor client and
    transition engine for one keeper.

    Usage:
        driver = ReconciliationDriver.from_config(config, actions, logger)

        old_role, new_role = await driver.step()
    """

    __slots__ = (
        "_config",
        "_store",
        "_engine",
        "_probe",
        "_monitor",
        "_logger",
    )

    def __init__(
        self,
        config: KeeperConfig,
        store: StateStore,
        engine: TransitionEngine,
        probe: InstanceProbe,
        monitor: MonitorClient | None = None,
        logger: "Logger | None" = None,
    ) -> None:
        self._config = config
        self._store = store
        self._engine = engine
        self._probe = probe
        self._monitor = monitor
        self._logger = logger

    @classmethod
    def from_config(
        cls,
        config: KeeperConfig,
        actions: InstanceActions,
        logger: "Logger | None" = None,
        transport: MonitorTransport | None = None,
        probe: InstanceProbe | None = None,
    ) -> "ReconciliationDriver":
        monitor: MonitorClient | None = None
        if config.monitor_disabled is False:
            monitor = MonitorClient(
                transport or MonitorConnection(config.monitor_uri, logger=logger),
                timeout=config.monitor_timeout,
                logger=logger,
            )

        return cls(
            config=config,
            store=StateStore(config.state_path, logger=logger),
            engine=TransitionEngine(
                actions,
                logger=logger,
                max_hops=config.max_hops,
            ),
            probe=probe or LocalInstanceProbe(config.pgdata, logger=logger),
            monitor=monitor,
            logger=logger,
        )

    @property
    def config(self) -> KeeperConfig:
        return self._config

    @property
    def store(self) -> StateStore:
        return self._store

    @property
    def engine(self) -> TransitionEngine:
        return self._engine

    @property
    def monitor(self) -> MonitorClient:
        if self._monitor is None:
            raise ConfigError(
                "The monitor is disabled for this keeper",
                context={"pgdata": self._config.pgdata},
            )

        return self._monitor

    async def close(self) -> None:
        if self._monitor is not None:
            await self._monitor.close()

    async def refresh_facts(self, strict: bool = True) -> InstanceFacts:
        """
        Probe the managed instance. In lenient mode a failed probe is
        logged and the unknown facts are returned instead, so a monitor
        exchange can still happen with a stale picture of the instance.
        """
        try:
            return await self._probe.probe()

        except StateError as error:
            if strict:
                raise

            await self._log(KeeperWarning(
                message=f"Failed to update the local instance facts, reporting unknown: {error}",
            ))

            return InstanceFacts.unknown()

    async def init_state(self) -> KeeperState:
        await self.refresh_facts(strict=True)

        return await self._store.create()

    async def show_state(self) -> KeeperState:
        state = await self._store.read()
        await self.refresh_facts(strict=True)
        await self._store.write(state)

        return state

    async def list_transitions(self) -> tuple[KeeperState, list[TransitionEdge]]:
        state = await self._store.read()

        return state, self._engine.table.transitions_from(state.current_role)

    async def register(self, initial_role: NodeRole) -> tuple[KeeperState, AssignedState]:
        """
        Register this node with the monitor in initial_role and create its
        state file. Preconditions are checked before the monitor is called.
        """
        monitor = self.monitor

        facts = await self.refresh_facts(strict=True)
        check_register_preconditions(initial_role, facts)

        if await self._store.exists():
            raise StateAlreadyExistsError(
                "Refusing to register: a keeper state file already exists",
                context={"path": str(self._store.path)},
            )

        assigned = await monitor.register(
            formation=self._config.formation,
            group_id=self._config.group_id,
            node_id=-1,
            address=NodeAddress(
                host=self._config.nodename,
                port=self._config.pgport,
            ),
            initial_role=initial_role,
            dbname=self._config.dbname,
        )

        state = await self._store.create(
            KeeperState(
                node_id=assigned.node_id,
                group_id=assigned.group_id,
                current_role=NodeRole.INIT,
                assigned_role=assigned.role,
                last_monitor_contact=time.time(),
            )
        )

        await self._log(KeeperInfo(
            message=f"Registered with the monitor, assigned {assigned.role.value}",
            node_id=state.node_id,
            group_id=state.group_id,
            role=state.current_role.value,
        ))

        return state, assigned

    async def report_active(
        self,
        state: KeeperState | None = None,
    ) -> tuple[KeeperState, AssignedState]:
        """
        Report liveness and position to the monitor and take its assigned
        role as the new goal.

        A failure to persist the updated goal is logged, not raised: the
        monitor has already seen this report, and the next round repeats it.
        """
        monitor = self.monitor

        if state is None:
            state = await self._store.read()

        facts = await self.refresh_facts(strict=False)

        assigned = await monitor.report_active(
            formation=self._config.formation,
            nodename=self._config.nodename,
            port=self._config.pgport,
            node_id=state.node_id,
            group_id=state.group_id,
            current_role=state.current_role,
            is_running=facts.is_running,
            position=facts.current_lsn,
            sync_state=facts.sync_state,
        )

        state = msgspec.structs.replace(
            state,
            node_id=assigned.node_id,
            group_id=assigned.group_id,
            assigned_role=assigned.role,
            last_monitor_contact=time.time(),
        )

        try:
            await self._store.write(state)

        except StateError as error:
            await self._log(KeeperWarning(
                message=f"Failed to update keeper's state: {error}",
                node_id=state.node_id,
                group_id=state.group_id,
                formation=self._config.formation,
                role=state.current_role.value,
            ))

        return state, assigned

    async def assign(
        self,
        role: NodeRole,
        other_node: NodeAddress | None = None,
    ) -> KeeperState:
        """
        Manual override: make role the goal without asking the monitor and
        walk toward it, persisting after each transition.
        """
        if role == NodeRole.ANY:
            raise BadArgumentsError(
                "The wildcard role cannot be assigned",
            )

        state = await self._store.read()
        facts = await self.refresh_facts(strict=False)

        state = msgspec.structs.replace(state, assigned_role=role)

        state, _ = await self._engine.reach_assigned(
            state,
            facts,
            other_node=other_node,
            persist=self._store.write,
        )

        await self._store.write(state)

        return state

    async def step(self) -> tuple[NodeRole, NodeRole]:
        """
        One monitor-driven round: fetch the goal, transition toward it,
        then report the reached role. Returns the (old, new) current roles.
        """
        if self._monitor is None:
            raise ConfigError(
                "Stepping as instructed by the monitor requires the monitor, "
                "which is disabled; assign a role manually instead",
            )

        state = await self._store.read()
        old_role = state.current_role

        state, _ = await self.report_active(state)

        facts = await self.refresh_facts(strict=False)

        state, applied = await self._engine.reach_assigned(
            state,
            facts,
            persist=self._store.write,
            resolve_peer=self.resolve_peer,
        )

        if applied:
            state, _ = await self.report_active(state)

        await self._log(KeeperInfo(
            message=f"Reconciliation round done: {old_role.value} -> {state.current_role.value}",
            node_id=state.node_id,
            group_id=state.group_id,
            formation=self._config.formation,
            role=state.current_role.value,
        ))

        return old_role, state.current_role

    async def resolve_peer(
        self,
        source: PeerSource,
        state: KeeperState,
    ) -> NodeAddress | None:
        """Look up the peer an edge with the given peer source needs."""
        if source == PeerSource.PRIMARY:
            return await self.monitor.get_primary(
                self._config.formation,
                state.group_id,
            )

        others = await self.monitor.get_others(
            self._config.nodename,
            self._config.pgport,
        )

        return others[0] if others else None

    async def _log(self, entry) -> None:
        if self._logger is not None:
            await self._logger.log(entry)
