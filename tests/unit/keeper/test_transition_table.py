"""
Tests for the static transition table.

Covers:
- first-edge routing along shortest paths
- unreachable goals and the wildcard role
- breadth-first reachability
- rejection of malformed edge sets
- DOT rendering
"""

import pytest

from autokeeper.keeper.errors import BadArgumentsError, NoTransitionPathError
from autokeeper.keeper.fsm import (
    KEEPER_TRANSITIONS,
    PeerSource,
    TransitionAction,
    TransitionEdge,
    TransitionTable,
)
from autokeeper.keeper.models import NodeRole


@pytest.fixture
def table() -> TransitionTable:
    return TransitionTable()


class TestRouting:
    def test_direct_edge(self, table: TransitionTable):
        edge = table.next_edge(NodeRole.INIT, NodeRole.SINGLE)

        assert edge.from_role == NodeRole.INIT
        assert edge.to_role == NodeRole.SINGLE
        assert edge.action == TransitionAction.INIT_PRIMARY

    def test_first_edge_of_multi_hop_route(self, table: TransitionTable):
        edge = table.next_edge(NodeRole.SINGLE, NodeRole.PRIMARY)

        assert edge.to_role == NodeRole.WAIT_PRIMARY
        assert edge.peer == PeerSource.STANDBY

    def test_path_follows_next_edge(self, table: TransitionTable):
        path = table.path(NodeRole.DEMOTED, NodeRole.SECONDARY)

        assert [edge.to_role for edge in path] == [
            NodeRole.CATCHINGUP,
            NodeRole.SECONDARY,
        ]
        assert path[0].peer == PeerSource.PRIMARY

    def test_path_to_current_role_is_empty(self, table: TransitionTable):
        assert table.path(NodeRole.PRIMARY, NodeRole.PRIMARY) == []
        assert table.distance(NodeRole.PRIMARY, NodeRole.PRIMARY) == 0

    def test_unreachable_goal(self, table: TransitionTable):
        with pytest.raises(NoTransitionPathError) as error:
            table.next_edge(NodeRole.SECONDARY, NodeRole.INIT)

        assert error.value.context == {
            "current_role": "secondary",
            "assigned_role": "init",
        }

    def test_wildcard_is_never_routable(self, table: TransitionTable):
        with pytest.raises(NoTransitionPathError):
            table.next_edge(NodeRole.PRIMARY, NodeRole.ANY)

    def test_distance_of_unreachable_goal(self, table: TransitionTable):
        assert table.distance(NodeRole.MAINTENANCE, NodeRole.UNINITIALIZED) is None

    def test_every_route_shrinks_distance_by_one(self, table: TransitionTable):
        for current in NodeRole.assignable():
            for assigned in NodeRole.assignable():
                distance = table.distance(current, assigned)
                if distance is None or distance == 0:
                    continue

                edge = table.next_edge(current, assigned)

                assert table.distance(edge.to_role, assigned) == distance - 1

    def test_diameter(self, table: TransitionTable):
        longest = max(
            table.distance(current, assigned) or 0
            for current in NodeRole.assignable()
            for assigned in NodeRole.assignable()
        )

        assert table.diameter == longest
        assert table.diameter < len(NodeRole.assignable())


class TestReachability:
    def test_transitions_from(self, table: TransitionTable):
        targets = {edge.to_role for edge in table.transitions_from(NodeRole.SECONDARY)}

        assert targets == {
            NodeRole.CATCHINGUP,
            NodeRole.PREPARE_PROMOTION,
            NodeRole.MAINTENANCE,
        }

    def test_reachable_roles_start_with_role(self, table: TransitionTable):
        reachable = table.reachable_roles(NodeRole.INIT)

        assert reachable[0] == NodeRole.INIT
        assert set(reachable[1:3]) == {NodeRole.SINGLE, NodeRole.WAIT_STANDBY}
        assert NodeRole.UNINITIALIZED not in reachable

    def test_reachable_roles_match_distances(self, table: TransitionTable):
        reachable = table.reachable_roles(NodeRole.SINGLE)

        for role in NodeRole.assignable():
            assert (role in reachable) == (table.distance(NodeRole.SINGLE, role) is not None)

    def test_wildcard_reachability_is_rejected(self, table: TransitionTable):
        with pytest.raises(BadArgumentsError):
            table.reachable_roles(NodeRole.ANY)


class TestTableConstruction:
    def test_default_edges(self, table: TransitionTable):
        assert len(table.edges) == len(KEEPER_TRANSITIONS)

    def test_rejects_duplicate_edges(self):
        edge = TransitionEdge(NodeRole.INIT, NodeRole.SINGLE, "twice")

        with pytest.raises(ValueError, match="Duplicate"):
            TransitionTable([edge, edge])

    def test_rejects_self_edges(self):
        with pytest.raises(ValueError, match="Self"):
            TransitionTable([TransitionEdge(NodeRole.SINGLE, NodeRole.SINGLE, "loop")])

    def test_rejects_wildcard_edges(self):
        with pytest.raises(ValueError, match="wildcard"):
            TransitionTable([TransitionEdge(NodeRole.ANY, NodeRole.SINGLE, "any")])


class TestGraphviz:
    def test_renders_every_edge(self, table: TransitionTable):
        dot = table.to_graphviz()

        assert dot.startswith("digraph keeper_fsm\n{")
        assert dot.endswith("}")
        assert '"init" -> "single" [ label = "Start as a single node" ];' in dot
        assert dot.count(" -> ") == len(KEEPER_TRANSITIONS)

    def test_stable_roles_are_highlighted(self, table: TransitionTable):
        dot = table.to_graphviz()

        assert 'node [shape = doubleoctagon]; "uninitialized" "init" "single" "primary" "secondary";' in dot
