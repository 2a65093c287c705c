from enum import Enum


class TransitionAction(Enum):
    INIT_PRIMARY = "init_primary"
    PREPARE_REPLICATION = "prepare_replication"
    ENABLE_SYNC_REP = "enable_sync_rep"
    DISABLE_SYNC_REP = "disable_sync_rep"
    DISABLE_REPLICATION = "disable_replication"
    STOP_POSTGRES = "stop_postgres"
    REWIND_OR_INIT = "rewind_or_init"
    INIT_STANDBY = "init_standby"
    MAINTAIN_REPLICATION_SLOTS = "maintain_replication_slots"
    PREPARE_STANDBY_FOR_PROMOTION = "prepare_standby_for_promotion"
    STOP_REPLICATION = "stop_replication"
    PROMOTE_STANDBY = "promote_standby"
    START_MAINTENANCE = "start_maintenance"
    RESTART_STANDBY = "restart_standby"


class PeerSource(Enum):
    """Which peer address an action needs the driver to look up first."""

    PRIMARY = "primary"
    STANDBY = "standby"
