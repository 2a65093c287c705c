"""
Static routing over the keeper transition edges.

The edge list is turned into a directed graph once, and every connected
(current, assigned) pair is mapped to the first edge of a shortest path
between them. Lookups at runtime are plain dict reads; nothing about the
routing depends on the keeper's state.
"""

from typing import Iterable

import networkx

from autokeeper.keeper.errors import BadArgumentsError, NoTransitionPathError
from autokeeper.keeper.models import NodeRole

from .transition_edge import TransitionEdge
from .transitions import KEEPER_TRANSITIONS


STABLE_ROLES = (
    NodeRole.UNINITIALIZED,
    NodeRole.INIT,
    NodeRole.SINGLE,
    NodeRole.PRIMARY,
    NodeRole.SECONDARY,
)


class TransitionTable:
    """
    Adjacency and routing tables for a set of transition edges.

    Usage:
        table = TransitionTable()

        edge = table.next_edge(NodeRole.SINGLE, NodeRole.PRIMARY)
        assert edge.to_role == NodeRole.WAIT_PRIMARY

        print(table.to_graphviz())
    """

    __slots__ = (
        "_edges",
        "_graph",
        "_routes",
        "_distances",
    )

    def __init__(
        self,
        edges: Iterable[TransitionEdge] = KEEPER_TRANSITIONS,
    ) -> None:
        self._edges: dict[tuple[NodeRole, NodeRole], TransitionEdge] = {}
        self._graph = networkx.DiGraph()

        for role in NodeRole.assignable():
            self._graph.add_node(role)

        for edge in edges:
            if NodeRole.ANY in (edge.from_role, edge.to_role):
                raise ValueError("The wildcard role cannot take part in a transition")

            if edge.from_role == edge.to_role:
                raise ValueError(f"Self transition on {edge.from_role.value}")

            if (edge.from_role, edge.to_role) in self._edges:
                raise ValueError(
                    f"Duplicate transition {edge.from_role.value} -> {edge.to_role.value}"
                )

            self._edges[(edge.from_role, edge.to_role)] = edge
            self._graph.add_edge(edge.from_role, edge.to_role)

        self._routes: dict[tuple[NodeRole, NodeRole], TransitionEdge] = {}
        self._distances: dict[tuple[NodeRole, NodeRole], int] = {}

        for source, paths in networkx.all_pairs_shortest_path(self._graph):
            for target, path in paths.items():
                if target == source:
                    continue

                self._routes[(source, target)] = self._edges[(path[0], path[1])]
                self._distances[(source, target)] = len(path) - 1

    @property
    def edges(self) -> list[TransitionEdge]:
        return list(self._edges.values())

    @property
    def diameter(self) -> int:
        """Longest shortest path between two connected roles."""
        return max(self._distances.values(), default=0)

    def next_edge(
        self,
        current_role: NodeRole,
        assigned_role: NodeRole,
    ) -> TransitionEdge:
        """
        First edge on the way from current_role to assigned_role. Raises
        NoTransitionPathError when assigned_role is unreachable.
        """
        edge = self._routes.get((current_role, assigned_role))

        if edge is None:
            raise NoTransitionPathError(
                f"No transition path from {current_role.value} to {assigned_role.value}",
                context={
                    "current_role": current_role.value,
                    "assigned_role": assigned_role.value,
                },
            )

        return edge

    def path(
        self,
        current_role: NodeRole,
        assigned_role: NodeRole,
    ) -> list[TransitionEdge]:
        """Every edge on the route next_edge() follows, empty when already there."""
        edges: list[TransitionEdge] = []

        while current_role != assigned_role:
            edge = self.next_edge(current_role, assigned_role)
            edges.append(edge)
            current_role = edge.to_role

        return edges

    def distance(
        self,
        current_role: NodeRole,
        assigned_role: NodeRole,
    ) -> int | None:
        if current_role == assigned_role:
            return 0

        return self._distances.get((current_role, assigned_role))

    def transitions_from(self, role: NodeRole) -> list[TransitionEdge]:
        return [
            edge for edge in self._edges.values() if edge.from_role == role
        ]

    def reachable_roles(self, role: NodeRole) -> list[NodeRole]:
        """
        Roles reachable from role through zero or more transitions, in
        breadth-first order, starting with role itself.
        """
        if role == NodeRole.ANY:
            raise BadArgumentsError(
                "The wildcard role is only valid as a query filter",
            )

        return list(networkx.bfs_tree(self._graph, role).nodes)

    def to_graphviz(self) -> str:
        stable_roles = " ".join(f'"{role.value}"' for role in STABLE_ROLES)

        lines = [
            "digraph keeper_fsm",
            "{",
            '    size="12"',
            '    ratio="fill"',
            f"    node [shape = doubleoctagon]; {stable_roles};",
            "    node [shape = octagon];",
        ]

        for edge in self._edges.values():
            lines.append(
                f'    "{edge.from_role.value}" -> "{edge.to_role.value}" '
                f'[ label = "{edge.description}" ];'
            )

        lines.append("}")

        return "\n".join(lines)
