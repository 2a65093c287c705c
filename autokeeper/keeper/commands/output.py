"""Plain-text renderings other programs parse out of command output."""

from autokeeper.keeper.config import KeeperConfig
from autokeeper.keeper.fsm import TransitionEdge
from autokeeper.keeper.models import AssignedState, NodeAddress, NodeRole


def format_status_line(
    config: KeeperConfig,
    assigned: AssignedState,
) -> str:
    return (
        f"{config.formation}/{config.group_id} "
        f"{config.nodename}:{config.pgport} "
        f"{assigned.node_id}:{assigned.group_id} "
        f"{assigned.role.value}"
    )


def format_step(old_role: NodeRole, new_role: NodeRole) -> str:
    return f"{old_role.value} ➜ {new_role.value}"


def format_node_table(nodes: list[NodeAddress]) -> str:
    host_width = max(
        [len("Host")] + [len(node.host) for node in nodes]
    )

    lines = [
        f"{'Host':>{host_width}} | {'Port':>6}",
        f"{'-' * host_width}-+-{'-' * 6}",
    ]

    for node in nodes:
        lines.append(f"{node.host:>{host_width}} | {node.port:>6}")

    return "\n".join(lines)


def format_coordinator(formation: str, coordinator: NodeAddress | None) -> str:
    if coordinator is None:
        return f"{formation} has no coordinator ready yet"

    return f"{formation} {coordinator}"


def format_transitions(edges: list[TransitionEdge]) -> str:
    return "\n".join(
        f"{edge.from_role.value:>20} -> {edge.to_role.value:<20} : {edge.description}"
        for edge in edges
    )
