from .instance_actions import (
    ActionContext as ActionContext,
    InstanceActions as InstanceActions,
)
from .transition_action import (
    PeerSource as PeerSource,
    TransitionAction as TransitionAction,
)
from .transition_edge import TransitionEdge as TransitionEdge
from .transition_engine import TransitionEngine as TransitionEngine
from .transition_table import TransitionTable as TransitionTable
from .transitions import KEEPER_TRANSITIONS as KEEPER_TRANSITIONS
