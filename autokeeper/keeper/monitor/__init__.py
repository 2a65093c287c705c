from .monitor_client import (
    MonitorClient as MonitorClient,
    monitor_role_name as monitor_role_name,
)
from .monitor_connection import (
    MonitorConnection as MonitorConnection,
    to_async_url as to_async_url,
)
from .monitor_transport import (
    MonitorTransport as MonitorTransport,
    Row as Row,
)
from .queries import (
    MONITOR_EXTENSION_NAME as MONITOR_EXTENSION_NAME,
    MONITOR_EXTENSION_VERSION as MONITOR_EXTENSION_VERSION,
)
