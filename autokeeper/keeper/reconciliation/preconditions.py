from autokeeper.keeper.errors import BadArgumentsError, PreconditionError
from autokeeper.keeper.models import InstanceFacts, NodeRole


def check_register_preconditions(
    initial_role: NodeRole,
    facts: InstanceFacts,
) -> None:
    """
    Refuse to register a node in a role the local instance contradicts.

    Only the roles a node can be created in are checked; anything else is
    left for the monitor to accept or reject.
    """
    if initial_role in (NodeRole.UNINITIALIZED, NodeRole.ANY):
        raise BadArgumentsError(
            f"Cannot register a node in the {initial_role.value} role",
        )

    if initial_role == NodeRole.SINGLE and facts.pgdata_exists is False:
        raise PreconditionError(
            "Registering as single requires an existing database instance",
            context={"initial_role": initial_role.value},
        )

    if initial_role == NodeRole.WAIT_STANDBY and (
        facts.pgdata_exists is False or facts.is_running is False
    ):
        raise PreconditionError(
            "Registering as wait_standby requires an existing, running database instance",
            context={
                "initial_role": initial_role.value,
                "pgdata_exists": facts.pgdata_exists,
                "is_running": facts.is_running,
            },
        )
