"""
Keeper transition engine.

Moves a KeeperState one legal edge at a time from its current role
toward its assigned role, applying each edge's side effect to the
managed instance before advancing current_role. The input state is never
mutated: callers persist the returned state, so a crash between the
action and the persist leaves the pre-action role on disk and the same
(idempotent) action is simply retried.
"""

from typing import TYPE_CHECKING, Awaitable, Callable

import msgspec

from autokeeper.keeper.errors import InstanceActionError, NoConvergenceError
from autokeeper.keeper.logging_models import KeeperDebug, KeeperInfo
from autokeeper.keeper.models import InstanceFacts, KeeperState, NodeAddress, NodeRole

from .instance_actions import ActionContext, InstanceActions
from .transition_action import PeerSource, TransitionAction
from .transition_edge import TransitionEdge
from .transition_table import TransitionTable

if TYPE_CHECKING:
    from autokeeper.logging import Logger


PersistCallback = Callable[[KeeperState], Awaitable[None]]
PeerResolver = Callable[[PeerSource, KeeperState], Awaitable[NodeAddress | None]]


class TransitionEngine:
    """
    Applies transitions from a TransitionTable through InstanceActions.

    Each TransitionAction is dispatched via a lookup dict to the matching
    InstanceActions coroutine. Edges without an action only change the
    recorded role.

    Usage:
        engine = TransitionEngine(actions, logger)

        state, applied = await engine.step(state, facts)

        state, applied = await engine.reach_assigned(
            state,
            facts,
            persist=store.write,
        )
    """

    __slots__ = (
        "_actions",
        "_logger",
        "_table",
        "_max_hops",
        "_handlers",
    )

    def __init__(
        self,
        actions: InstanceActions,
        logger: "Logger | None" = None,
        table: TransitionTable | None = None,
        max_hops: int | None = None,
    ) -> None:
        self._actions = actions
        self._logger = logger
        self._table = table or TransitionTable()
        if max_hops is None:
            max_hops = len(NodeRole.assignable())

        if max_hops < 1:
            raise ValueError(f"max_hops must be at least 1, got {max_hops}")

        self._max_hops = max_hops
        self._handlers: dict[TransitionAction, Callable[[ActionContext], Awaitable[None]]] = {
            TransitionAction.INIT_PRIMARY: actions.init_primary,
            TransitionAction.PREPARE_REPLICATION: actions.prepare_replication,
            TransitionAction.ENABLE_SYNC_REP: actions.enable_sync_rep,
            TransitionAction.DISABLE_SYNC_REP: actions.disable_sync_rep,
            TransitionAction.DISABLE_REPLICATION: actions.disable_replication,
            TransitionAction.STOP_POSTGRES: actions.stop_postgres,
            TransitionAction.REWIND_OR_INIT: actions.rewind_or_init,
            TransitionAction.INIT_STANDBY: actions.init_standby,
            TransitionAction.MAINTAIN_REPLICATION_SLOTS: actions.maintain_replication_slots,
            TransitionAction.PREPARE_STANDBY_FOR_PROMOTION: actions.prepare_standby_for_promotion,
            TransitionAction.STOP_REPLICATION: actions.stop_replication,
            TransitionAction.PROMOTE_STANDBY: actions.promote_standby,
            TransitionAction.START_MAINTENANCE: actions.start_maintenance,
            TransitionAction.RESTART_STANDBY: actions.restart_standby,
        }

    @property
    def table(self) -> TransitionTable:
        return self._table

    @property
    def max_hops(self) -> int:
        return self._max_hops

    def next_edge(self, state: KeeperState) -> TransitionEdge | None:
        """The edge step() would apply next, or None when the goal is reached."""
        if state.reached:
            return None

        return self._table.next_edge(state.current_role, state.assigned_role)

    async def step(
        self,
        state: KeeperState,
        facts: InstanceFacts,
        other_node: NodeAddress | None = None,
    ) -> tuple[KeeperState, bool]:
        """
        Apply the single next transition toward state.assigned_role.

        Returns (state, False) untouched when the goal is already reached.
        Raises NoTransitionPathError when the goal is unreachable and
        InstanceActionError when the edge's action failed; in both cases
        nothing was advanced.
        """
        edge = self.next_edge(state)
        if edge is None:
            return state, False

        await self._log(KeeperInfo(
            message=(
                f"Transition from {edge.from_role.value} to {edge.to_role.value}: "
                f"{edge.description}"
            ),
            node_id=state.node_id,
            group_id=state.group_id,
            role=state.current_role.value,
        ))

        await self._apply(
            ActionContext(
                state=state,
                facts=facts,
                edge=edge,
                other_node=other_node,
            )
        )

        return msgspec.structs.replace(state, current_role=edge.to_role), True

    async def reach_assigned(
        self,
        state: KeeperState,
        facts: InstanceFacts,
        other_node: NodeAddress | None = None,
        persist: PersistCallback | None = None,
        resolve_peer: PeerResolver | None = None,
    ) -> tuple[KeeperState, bool]:
        """
        Step until the assigned role is reached, awaiting persist after
        every applied transition.

        When resolve_peer is given, every edge that needs a peer is handed
        the address resolve_peer returns for that edge's peer source.
        Other edges, or all edges without a resolver, get other_node.

        Returns the final state and whether any transition was applied.
        Raises NoConvergenceError when max_hops transitions were applied
        without reaching the goal.
        """
        applied_any = False

        for _ in range(self._max_hops):
            peer = other_node

            edge = self.next_edge(state)
            if resolve_peer is not None and edge is not None and edge.peer is not None:
                peer = await resolve_peer(edge.peer, state)

            state, applied = await self.step(state, facts, other_node=peer)

            if applied is False:
                return state, applied_any

            applied_any = True

            if persist is not None:
                await persist(state)

        if state.reached:
            return state, applied_any

        raise NoConvergenceError(
            f"Failed to reach {state.assigned_role.value} within {self._max_hops} transitions",
            context={
                "current_role": state.current_role.value,
                "assigned_role": state.assigned_role.value,
                "max_hops": self._max_hops,
            },
        )

    async def _apply(self, context: ActionContext) -> None:
        edge = context.edge
        if edge.action is None:
            return

        handler = self._handlers[edge.action]

        try:
            await handler(context)

        except InstanceActionError:
            raise

        except Exception as error:
            raise InstanceActionError(
                f"Failed to {edge.action.value.replace('_', ' ')} "
                f"while moving from {edge.from_role.value} to {edge.to_role.value}",
                context={
                    "action": edge.action.value,
                    "from_role": edge.from_role.value,
                    "to_role": edge.to_role.value,
                },
                cause=error,
            ) from error

        await self._log(KeeperDebug(
            message=f"Applied {edge.action.value}",
            node_id=context.state.node_id,
            group_id=context.state.group_id,
            role=edge.from_role.value,
        ))

    async def _log(self, entry) -> None:
        if self._logger is not None:
            await self._logger.log(entry)
