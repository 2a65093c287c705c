from .assigned_state import AssignedState as AssignedState
from .extension_version import MonitorExtensionVersion as MonitorExtensionVersion
from .instance_facts import (
    InstanceFacts as InstanceFacts,
    UNKNOWN_LSN as UNKNOWN_LSN,
)
from .keeper_state import (
    KEEPER_STATE_VERSION as KEEPER_STATE_VERSION,
    KeeperState as KeeperState,
)
from .node_address import NodeAddress as NodeAddress
from .node_role import NodeRole as NodeRole
