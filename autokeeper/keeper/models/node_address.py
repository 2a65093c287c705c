import msgspec


class NodeAddress(msgspec.Struct, frozen=True, kw_only=True):
    """
    Connection endpoint of a peer, as handed out by the monitor.

    Attributes:
        host: Hostname or address the peer accepts connections on.
        port: Port the peer's database listens on.
        node_id: Monitor-assigned id, or -1 when the monitor did not say.
    """

    host: str
    port: int
    node_id: int = -1

    def __str__(self) -> str:
        return f"{self.host}:{self.port}"
