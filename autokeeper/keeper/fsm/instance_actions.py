from dataclasses import dataclass
from typing import Protocol, runtime_checkable

from autokeeper.keeper.models import InstanceFacts, KeeperState, NodeAddress

from .transition_edge import TransitionEdge


@dataclass(slots=True, frozen=True)
class ActionContext:
    """
    Everything an instance action gets to see.

    The state is the one from before the transition: its current_role is
    still edge.from_role, whether or not a previous attempt at the same
    action got partway through.
    """

    state: KeeperState
    facts: InstanceFacts
    edge: TransitionEdge
    other_node: NodeAddress | None = None


@runtime_checkable
class InstanceActions(Protocol):
    """
    Side effects applied to the managed database instance, one coroutine
    per transition action.

    Every action must be idempotent: running it again after a crash that
    happened before the new role was persisted has to converge on the
    same end state instead of failing or repeating effects. Actions bound
    their own waits; they are never cancelled once started.
    """

    async def init_primary(self, context: ActionContext) -> None: ...

    async def prepare_replication(self, context: ActionContext) -> None: ...

    async def enable_sync_rep(self, context: ActionContext) -> None: ...

    async def disable_sync_rep(self, context: ActionContext) -> None: ...

    async def disable_replication(self, context: ActionContext) -> None: ...

    async def stop_postgres(self, context: ActionContext) -> None: ...

    async def rewind_or_init(self, context: ActionContext) -> None: ...

    async def init_standby(self, context: ActionContext) -> None: ...

    async def maintain_replication_slots(self, context: ActionContext) -> None: ...

    async def prepare_standby_for_promotion(self, context: ActionContext) -> None: ...

    async def stop_replication(self, context: ActionContext) -> None: ...

    async def promote_standby(self, context: ActionContext) -> None: ...

    async def start_maintenance(self, context: ActionContext) -> None: ...

    async def restart_standby(self, context: ActionContext) -> None: ...
