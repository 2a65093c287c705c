"""
Operator commands driving the local transition engine without the
monitor. Each returns the text the command prints.
"""

from autokeeper.keeper.errors import BadArgumentsError
from autokeeper.keeper.models import NodeAddress, NodeRole
from autokeeper.keeper.reconciliation import ReconciliationDriver

from .output import format_step, format_transitions


async def fsm_init(driver: ReconciliationDriver) -> str:
    state = await driver.init_state()

    return driver.store.serialize(state)


async def fsm_state(driver: ReconciliationDriver) -> str:
    state = await driver.show_state()

    return driver.store.serialize(state)


async def fsm_list(driver: ReconciliationDriver) -> str:
    _, edges = await driver.list_transitions()

    return format_transitions(edges)


async def fsm_gv(driver: ReconciliationDriver) -> str:
    return driver.engine.table.to_graphviz()


async def fsm_assign(
    driver: ReconciliationDriver,
    role_name: str,
    host: str | None = None,
    port: str | int | None = None,
) -> str:
    """
    Manually assign a goal role, optionally naming the peer node the
    transitions toward it need, and walk there.
    """
    role = NodeRole.from_name(role_name)

    other_node: NodeAddress | None = None
    if host is not None or port is not None:
        if host is None or port is None:
            raise BadArgumentsError(
                "Both a host and a port are needed to name the other node",
            )

        other_node = NodeAddress(host=host, port=parse_port(port))

    state = await driver.assign(role, other_node=other_node)

    return driver.store.serialize(state)


async def fsm_step(driver: ReconciliationDriver) -> str:
    old_role, new_role = await driver.step()

    return format_step(old_role, new_role)


def parse_port(port: str | int) -> int:
    try:
        value = int(port)

    except (TypeError, ValueError) as error:
        raise BadArgumentsError(
            f'Failed to parse port number "{port}"',
            cause=error,
        ) from error

    if value < 1 or value > 65535:
        raise BadArgumentsError(
            f"Port number {value} is out of range",
        )

    return value
