import msgspec

from .node_role import NodeRole


class AssignedState(msgspec.Struct, frozen=True, kw_only=True):
    """Goal handed back by the monitor's register and node-active calls."""

    node_id: int
    group_id: int
    role: NodeRole
