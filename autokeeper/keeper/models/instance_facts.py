from dataclasses import dataclass


UNKNOWN_LSN = "0/0"


@dataclass(slots=True, frozen=True)
class InstanceFacts:
    """
    What the keeper observed about the managed instance this round.

    Attributes:
        pgdata_exists: The data directory exists and holds an initialized cluster.
        is_running: A database server process owns the data directory.
        current_lsn: Current WAL position, "0/0" when unknown.
        sync_state: Replication sync state reported by the server, "" when unknown.
    """

    pgdata_exists: bool = False
    is_running: bool = False
    current_lsn: str = UNKNOWN_LSN
    sync_state: str = ""

    @classmethod
    def unknown(cls) -> "InstanceFacts":
        return cls()
