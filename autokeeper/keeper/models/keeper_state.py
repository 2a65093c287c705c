import msgspec

from .node_role import NodeRole


KEEPER_STATE_VERSION = 1


class KeeperState(msgspec.Struct, kw_only=True):
    """
    The keeper's durable record.

    current_role always reflects a condition already applied to the
    managed instance; assigned_role is the goal and may be ahead of it.

    Attributes:
        node_id: Monitor-assigned node id, -1 until registered.
        group_id: Replication group within the formation, -1 until registered.
        current_role: Role the instance is known to be in.
        assigned_role: Role the keeper has been told to reach.
        last_monitor_contact: Epoch seconds of the last successful monitor
            exchange, 0 when never.
        last_secondary_contact: Epoch seconds the standby was last seen, 0 when never.
        xlog_lag: Replication lag in bytes, -1 when unknown.
    """

    node_id: int = -1
    group_id: int = -1
    current_role: NodeRole = NodeRole.UNINITIALIZED
    assigned_role: NodeRole = NodeRole.UNINITIALIZED
    last_monitor_contact: float = 0.0
    last_secondary_contact: float = 0.0
    xlog_lag: int = -1

    @property
    def reached(self) -> bool:
        return self.current_role == self.assigned_role
