"""
Structured logging models for keeper operations.

Keeper entries carry the node identity and role the keeper was working
with when it logged. Monitor entries carry the monitor function called.
"""

from autokeeper.logging.models import Entry, LogLevel


class KeeperEntry(Entry, kw_only=True):
    node_id: int = -1
    group_id: int = -1
    formation: str = ""
    role: str = ""


class MonitorEntry(Entry, kw_only=True):
    function: str
    formation: str = ""


# =============================================================================
# Keeper Logging Models
# =============================================================================


class KeeperTrace(KeeperEntry, kw_only=True):
    level: LogLevel = LogLevel.TRACE


class KeeperDebug(KeeperEntry, kw_only=True):
    level: LogLevel = LogLevel.DEBUG


class KeeperInfo(KeeperEntry, kw_only=True):
    level: LogLevel = LogLevel.INFO


class KeeperWarning(KeeperEntry, kw_only=True):
    level: LogLevel = LogLevel.WARN


class KeeperErrorLog(KeeperEntry, kw_only=True):
    level: LogLevel = LogLevel.ERROR


class KeeperFatal(KeeperEntry, kw_only=True):
    level: LogLevel = LogLevel.FATAL


# =============================================================================
# Monitor Logging Models
# =============================================================================


class MonitorDebug(MonitorEntry, kw_only=True):
    level: LogLevel = LogLevel.DEBUG


class MonitorInfo(MonitorEntry, kw_only=True):
    level: LogLevel = LogLevel.INFO


class MonitorWarning(MonitorEntry, kw_only=True):
    level: LogLevel = LogLevel.WARN


class MonitorErrorLog(MonitorEntry, kw_only=True):
    level: LogLevel = LogLevel.ERROR
