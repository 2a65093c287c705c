from .fsm_commands import (
    fsm_assign as fsm_assign,
    fsm_gv as fsm_gv,
    fsm_init as fsm_init,
    fsm_list as fsm_list,
    fsm_state as fsm_state,
    fsm_step as fsm_step,
    parse_port as parse_port,
)
from .monitor_commands import (
    monitor_active as monitor_active,
    monitor_coordinator as monitor_coordinator,
    monitor_others as monitor_others,
    monitor_primary as monitor_primary,
    monitor_register as monitor_register,
    monitor_version as monitor_version,
)
from .output import (
    format_coordinator as format_coordinator,
    format_node_table as format_node_table,
    format_status_line as format_status_line,
    format_step as format_step,
    format_transitions as format_transitions,
)
from .run_command import (
    exit_code_for as exit_code_for,
    run_command as run_command,
)
