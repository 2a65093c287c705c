from typing import Callable, Dict, Literal, Union

from pydantic import BaseModel, StrictBool, StrictFloat, StrictInt, StrictStr

PrimaryType = Union[str, int, float, bytes, bool]


class KeeperEnv(BaseModel):
    KEEPER_PGDATA: StrictStr | None = None
    KEEPER_PGPORT: StrictInt = 5432
    KEEPER_DBNAME: StrictStr = "postgres"
    KEEPER_NODENAME: StrictStr = "localhost"
    KEEPER_FORMATION: StrictStr = "default"
    KEEPER_GROUP_ID: StrictInt = 0
    KEEPER_MONITOR_URI: StrictStr | None = None
    KEEPER_MONITOR_TIMEOUT: StrictFloat = 10.0
    KEEPER_MONITOR_UPDATE_EXTENSION: StrictBool = True
    KEEPER_STATE_DIRECTORY: StrictStr | None = None
    KEEPER_MAX_HOPS: StrictInt | None = None
    KEEPER_LOG_LEVEL: Literal["trace", "debug", "info", "warn", "error", "critical", "fatal"] = "info"
    KEEPER_LOG_OUTPUT: Literal["stdout", "stderr"] = "stderr"
    KEEPER_LOG_DIRECTORY: StrictStr | None = None

    @classmethod
    def types_map(self) -> Dict[str, Callable[[str], PrimaryType]]:
        return {
            "KEEPER_PGDATA": str,
            "KEEPER_PGPORT": int,
            "KEEPER_DBNAME": str,
            "KEEPER_NODENAME": str,
            "KEEPER_FORMATION": str,
            "KEEPER_GROUP_ID": int,
            "KEEPER_MONITOR_URI": str,
            "KEEPER_MONITOR_TIMEOUT": float,
            "KEEPER_MONITOR_UPDATE_EXTENSION": parse_bool,
            "KEEPER_STATE_DIRECTORY": str,
            "KEEPER_MAX_HOPS": int,
            "KEEPER_LOG_LEVEL": str,
            "KEEPER_LOG_OUTPUT": str,
            "KEEPER_LOG_DIRECTORY": str,
        }


def parse_bool(value: str) -> bool:
    return value.strip().lower() in ("1", "true", "yes", "on")
