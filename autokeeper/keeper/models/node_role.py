from __future__ import annotations

from enum import Enum

from autokeeper.keeper.errors import BadArgumentsError


class NodeRole(Enum):
    UNINITIALIZED = "uninitialized"
    INIT = "init"
    SINGLE = "single"
    WAIT_PRIMARY = "wait_primary"
    PRIMARY = "primary"
    DRAINING = "draining"
    DEMOTE_TIMEOUT = "demote_timeout"
    DEMOTED = "demoted"
    WAIT_STANDBY = "wait_standby"
    CATCHINGUP = "catchingup"
    SECONDARY = "secondary"
    PREPARE_PROMOTION = "prepare_promotion"
    STOP_REPLICATION = "stop_replication"
    MAINTENANCE = "maintenance"
    ANY = "#any state#"

    @classmethod
    def from_name(cls, name: str) -> NodeRole:
        try:
            return cls(name.strip().lower())

        except ValueError as error:
            raise BadArgumentsError(
                f'Unknown node role "{name}"',
                context={
                    "known_roles": [role.value for role in cls if role != cls.ANY],
                },
                cause=error,
            ) from error

    @classmethod
    def assignable(cls) -> list[NodeRole]:
        """Every role a keeper can actually be in, i.e. all but the wildcard."""
        return [role for role in cls if role != cls.ANY]
