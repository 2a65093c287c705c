MONITOR_EXTENSION_NAME = "pgautofailover"
MONITOR_EXTENSION_VERSION = "1.0"

REGISTER_NODE = (
    "SELECT assigned_node_id, assigned_group_id, assigned_group_state "
    "FROM pgautofailover.register_node("
    ":formation, :nodename, :nodeport, :dbname, :desired_node_id, :desired_group_id, "
    "CAST(:initial_group_role AS pgautofailover.replication_state))"
)

NODE_ACTIVE = (
    "SELECT assigned_node_id, assigned_group_id, assigned_group_state "
    "FROM pgautofailover.node_active("
    ":formation, :nodename, :nodeport, :current_node_id, :current_group_id, "
    "CAST(:current_group_role AS pgautofailover.replication_state), "
    ":current_pg_is_running, CAST(:current_lsn AS pg_lsn), :current_rep_state)"
)

GET_PRIMARY = (
    "SELECT primary_name, primary_port "
    "FROM pgautofailover.get_primary(:formation, :group_id)"
)

GET_OTHER_NODES = (
    "SELECT node_id, node_name, node_port "
    "FROM pgautofailover.get_other_nodes(:nodename, :nodeport)"
)

GET_OTHER_NODES_IN_STATE = (
    "SELECT node_id, node_name, node_port "
    "FROM pgautofailover.get_other_nodes(:nodename, :nodeport, "
    "CAST(:current_state AS pgautofailover.replication_state))"
)

GET_COORDINATOR = (
    "SELECT node_name, node_port "
    "FROM pgautofailover.get_coordinator(:formation)"
)

EXTENSION_VERSION = (
    "SELECT default_version, installed_version "
    "FROM pg_available_extensions WHERE name = :extension"
)

UPDATE_EXTENSION = "ALTER EXTENSION pgautofailover UPDATE TO '{version}'"
