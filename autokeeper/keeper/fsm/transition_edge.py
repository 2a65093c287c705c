from dataclasses import dataclass

from autokeeper.keeper.models import NodeRole

from .transition_action import PeerSource, TransitionAction


@dataclass(slots=True, frozen=True)
class TransitionEdge:
    """
    One legal transition of the keeper state machine.

    Attributes:
        from_role: Role the instance must currently be in.
        to_role: Role the instance is in once the action succeeded.
        description: Why this transition happens, for listings and graphs.
        action: Side effect applied to the instance, None for a pure role change.
        peer: Peer address the action needs, None when it needs none.
    """

    from_role: NodeRole
    to_role: NodeRole
    description: str
    action: TransitionAction | None = None
    peer: PeerSource | None = None
