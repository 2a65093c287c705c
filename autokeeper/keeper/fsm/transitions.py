"""
The keeper's transition table for a primary/standby group.

Each edge is applied only when the monitor (or an operator) assigned a
goal whose shortest path starts with it. Descriptions read as the
reason the monitor had for the assignment.
"""

from autokeeper.keeper.models import NodeRole

from .transition_action import PeerSource, TransitionAction
from .transition_edge import TransitionEdge


COMMENT_REGISTERED = "Registered to the monitor, waiting for an assignment"
COMMENT_INIT_TO_SINGLE = "Start as a single node"
COMMENT_INIT_TO_WAIT_STANDBY = "Start following a primary"
COMMENT_SINGLE_TO_WAIT_PRIMARY = "A new secondary was added"
COMMENT_WAIT_PRIMARY_TO_PRIMARY = "A healthy secondary appeared"
COMMENT_PRIMARY_TO_WAIT_PRIMARY = "Secondary became unhealthy"
COMMENT_PRIMARY_TO_SINGLE = "Other node was forcibly removed, now a single"
COMMENT_PRIMARY_TO_DRAINING = "A failover occurred, stopping writes"
COMMENT_PRIMARY_TO_DEMOTE_TIMEOUT = "A failover occurred, no longer primary"
COMMENT_PRIMARY_TO_DEMOTED = "A failover occurred, no longer primary"
COMMENT_DRAINING_TO_DEMOTE_TIMEOUT = "Secondary confirms it's receiving no more writes"
COMMENT_DRAINING_TO_DEMOTED = "Demoted after a failover, no longer primary"
COMMENT_DEMOTE_TIMEOUT_TO_DEMOTED = "Demote timeout expired"
COMMENT_DEMOTED_TO_CATCHINGUP = (
    "A new primary is available. First, try to rewind. "
    "If that fails, do a base backup."
)
COMMENT_WAIT_STANDBY_TO_CATCHINGUP = "The primary is now ready to accept a standby"
COMMENT_CATCHINGUP_TO_SECONDARY = (
    "Convinced the monitor that I'm up and running, "
    "and eligible for promotion again"
)
COMMENT_SECONDARY_TO_CATCHINGUP = (
    "Failed to report back to the monitor, not eligible for promotion"
)
COMMENT_TO_PREPARE_PROMOTION = "Stop traffic to primary, wait for it to finish draining"
COMMENT_PREPARE_PROMOTION_TO_STOP_REPLICATION = "Prevent against split-brain situations"
COMMENT_PREPARE_PROMOTION_TO_WAIT_PRIMARY = "Promoted to a primary, waiting for a standby"
COMMENT_STOP_REPLICATION_TO_WAIT_PRIMARY = "Confirmed promotion with the monitor"
COMMENT_TO_MAINTENANCE = "Suspending standby for manual maintenance"
COMMENT_MAINTENANCE_TO_CATCHINGUP = "Restarting standby after manual maintenance is done"


KEEPER_TRANSITIONS: tuple[TransitionEdge, ...] = (
    # Fresh state file, before and right after registration
    TransitionEdge(NodeRole.UNINITIALIZED, NodeRole.INIT, COMMENT_REGISTERED),
    TransitionEdge(
        NodeRole.UNINITIALIZED,
        NodeRole.SINGLE,
        COMMENT_INIT_TO_SINGLE,
        TransitionAction.INIT_PRIMARY,
    ),
    TransitionEdge(NodeRole.UNINITIALIZED, NodeRole.WAIT_STANDBY, COMMENT_INIT_TO_WAIT_STANDBY),
    TransitionEdge(
        NodeRole.INIT,
        NodeRole.SINGLE,
        COMMENT_INIT_TO_SINGLE,
        TransitionAction.INIT_PRIMARY,
    ),
    TransitionEdge(NodeRole.INIT, NodeRole.WAIT_STANDBY, COMMENT_INIT_TO_WAIT_STANDBY),

    # Primary side
    TransitionEdge(
        NodeRole.SINGLE,
        NodeRole.WAIT_PRIMARY,
        COMMENT_SINGLE_TO_WAIT_PRIMARY,
        TransitionAction.PREPARE_REPLICATION,
        PeerSource.STANDBY,
    ),
    TransitionEdge(
        NodeRole.WAIT_PRIMARY,
        NodeRole.PRIMARY,
        COMMENT_WAIT_PRIMARY_TO_PRIMARY,
        TransitionAction.ENABLE_SYNC_REP,
    ),
    TransitionEdge(
        NodeRole.PRIMARY,
        NodeRole.WAIT_PRIMARY,
        COMMENT_PRIMARY_TO_WAIT_PRIMARY,
        TransitionAction.DISABLE_SYNC_REP,
    ),
    TransitionEdge(
        NodeRole.PRIMARY,
        NodeRole.SINGLE,
        COMMENT_PRIMARY_TO_SINGLE,
        TransitionAction.DISABLE_REPLICATION,
    ),
    TransitionEdge(
        NodeRole.WAIT_PRIMARY,
        NodeRole.SINGLE,
        COMMENT_PRIMARY_TO_SINGLE,
        TransitionAction.DISABLE_REPLICATION,
    ),

    # Demotion after a failover
    TransitionEdge(
        NodeRole.PRIMARY,
        NodeRole.DRAINING,
        COMMENT_PRIMARY_TO_DRAINING,
        TransitionAction.STOP_POSTGRES,
    ),
    TransitionEdge(
        NodeRole.PRIMARY,
        NodeRole.DEMOTE_TIMEOUT,
        COMMENT_PRIMARY_TO_DEMOTE_TIMEOUT,
        TransitionAction.STOP_POSTGRES,
    ),
    TransitionEdge(
        NodeRole.PRIMARY,
        NodeRole.DEMOTED,
        COMMENT_PRIMARY_TO_DEMOTED,
        TransitionAction.STOP_POSTGRES,
    ),
    TransitionEdge(
        NodeRole.WAIT_PRIMARY,
        NodeRole.DRAINING,
        COMMENT_PRIMARY_TO_DRAINING,
        TransitionAction.STOP_POSTGRES,
    ),
    TransitionEdge(
        NodeRole.WAIT_PRIMARY,
        NodeRole.DEMOTE_TIMEOUT,
        COMMENT_PRIMARY_TO_DEMOTE_TIMEOUT,
        TransitionAction.STOP_POSTGRES,
    ),
    TransitionEdge(
        NodeRole.WAIT_PRIMARY,
        NodeRole.DEMOTED,
        COMMENT_PRIMARY_TO_DEMOTED,
        TransitionAction.STOP_POSTGRES,
    ),
    TransitionEdge(
        NodeRole.DRAINING,
        NodeRole.DEMOTE_TIMEOUT,
        COMMENT_DRAINING_TO_DEMOTE_TIMEOUT,
        TransitionAction.STOP_POSTGRES,
    ),
    TransitionEdge(
        NodeRole.DRAINING,
        NodeRole.DEMOTED,
        COMMENT_DRAINING_TO_DEMOTED,
        TransitionAction.STOP_POSTGRES,
    ),
    TransitionEdge(
        NodeRole.DEMOTE_TIMEOUT,
        NodeRole.DEMOTED,
        COMMENT_DEMOTE_TIMEOUT_TO_DEMOTED,
        TransitionAction.STOP_POSTGRES,
    ),
    TransitionEdge(
        NodeRole.DEMOTED,
        NodeRole.CATCHINGUP,
        COMMENT_DEMOTED_TO_CATCHINGUP,
        TransitionAction.REWIND_OR_INIT,
        PeerSource.PRIMARY,
    ),

    # Standby side
    TransitionEdge(
        NodeRole.WAIT_STANDBY,
        NodeRole.CATCHINGUP,
        COMMENT_WAIT_STANDBY_TO_CATCHINGUP,
        TransitionAction.INIT_STANDBY,
        PeerSource.PRIMARY,
    ),
    TransitionEdge(
        NodeRole.CATCHINGUP,
        NodeRole.SECONDARY,
        COMMENT_CATCHINGUP_TO_SECONDARY,
        TransitionAction.MAINTAIN_REPLICATION_SLOTS,
    ),
    TransitionEdge(NodeRole.SECONDARY, NodeRole.CATCHINGUP, COMMENT_SECONDARY_TO_CATCHINGUP),

    # Promotion
    TransitionEdge(
        NodeRole.SECONDARY,
        NodeRole.PREPARE_PROMOTION,
        COMMENT_TO_PREPARE_PROMOTION,
        TransitionAction.PREPARE_STANDBY_FOR_PROMOTION,
    ),
    TransitionEdge(
        NodeRole.CATCHINGUP,
        NodeRole.PREPARE_PROMOTION,
        COMMENT_TO_PREPARE_PROMOTION,
        TransitionAction.PREPARE_STANDBY_FOR_PROMOTION,
    ),
    TransitionEdge(
        NodeRole.PREPARE_PROMOTION,
        NodeRole.STOP_REPLICATION,
        COMMENT_PREPARE_PROMOTION_TO_STOP_REPLICATION,
        TransitionAction.STOP_REPLICATION,
    ),
    TransitionEdge(
        NodeRole.PREPARE_PROMOTION,
        NodeRole.WAIT_PRIMARY,
        COMMENT_PREPARE_PROMOTION_TO_WAIT_PRIMARY,
        TransitionAction.PROMOTE_STANDBY,
    ),
    TransitionEdge(
        NodeRole.STOP_REPLICATION,
        NodeRole.WAIT_PRIMARY,
        COMMENT_STOP_REPLICATION_TO_WAIT_PRIMARY,
        TransitionAction.PROMOTE_STANDBY,
    ),

    # Maintenance
    TransitionEdge(
        NodeRole.SECONDARY,
        NodeRole.MAINTENANCE,
        COMMENT_TO_MAINTENANCE,
        TransitionAction.START_MAINTENANCE,
    ),
    TransitionEdge(
        NodeRole.CATCHINGUP,
        NodeRole.MAINTENANCE,
        COMMENT_TO_MAINTENANCE,
        TransitionAction.START_MAINTENANCE,
    ),
    TransitionEdge(
        NodeRole.MAINTENANCE,
        NodeRole.CATCHINGUP,
        COMMENT_MAINTENANCE_TO_CATCHINGUP,
        TransitionAction.RESTART_STANDBY,
    ),
)
