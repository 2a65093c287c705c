import os
import pathlib

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    StrictBool,
    StrictStr,
    ValidationError,
    field_validator,
)
from sqlalchemy.engine import make_url
from sqlalchemy.exc import ArgumentError

from autokeeper.keeper.env import KeeperEnv, load_env
from autokeeper.keeper.errors import ConfigError
from autokeeper.logging import LoggingConfig


MONITOR_DISABLED = "MONITOR_DISABLED"
STATE_FILENAME = "keeper.state"


def default_state_directory() -> str:
    data_home = os.getenv("XDG_DATA_HOME") or os.path.join(
        os.path.expanduser("~"),
        ".local",
        "share",
    )

    return os.path.join(data_home, "autokeeper")


class KeeperConfig(BaseModel):
    """
    Everything a keeper command needs to know about its node, passed
    explicitly to each operation.
    """

    model_config = ConfigDict(frozen=True)

    pgdata: StrictStr
    pgport: int = Field(default=5432, ge=1, le=65535)
    dbname: StrictStr = "postgres"
    nodename: StrictStr = "localhost"
    formation: StrictStr = "default"
    group_id: int = Field(default=0, ge=0)
    monitor_uri: StrictStr | None = None
    monitor_timeout: float = Field(default=10.0, gt=0)
    monitor_update_extension: StrictBool = True
    state_directory: StrictStr | None = None
    max_hops: int | None = Field(default=None, ge=1)
    log_level: StrictStr = "info"
    log_output: StrictStr = "stderr"
    log_directory: StrictStr | None = None

    @field_validator("pgdata")
    @classmethod
    def validate_pgdata(cls, pgdata: str) -> str:
        if len(pgdata.strip()) == 0:
            raise ValueError("pgdata must not be empty")

        return pgdata

    @field_validator("monitor_uri")
    @classmethod
    def validate_monitor_uri(cls, monitor_uri: str | None) -> str | None:
        if monitor_uri is None or monitor_uri == MONITOR_DISABLED:
            return monitor_uri

        try:
            url = make_url(monitor_uri)

        except ArgumentError as error:
            raise ValueError(f"invalid monitor URI: {error}") from error

        if url.get_backend_name() not in ("postgres", "postgresql"):
            raise ValueError(
                f"monitor URI must use the postgresql scheme, got {url.drivername}"
            )

        return monitor_uri

    @property
    def monitor_disabled(self) -> bool:
        return self.monitor_uri is None or self.monitor_uri == MONITOR_DISABLED

    @property
    def state_path(self) -> str:
        state_directory = self.state_directory or default_state_directory()
        pgdata_path = pathlib.Path(self.pgdata).absolute()

        return os.path.join(
            state_directory,
            *pgdata_path.parts[1:],
            STATE_FILENAME,
        )

    @classmethod
    def from_env(cls, env: KeeperEnv) -> "KeeperConfig":
        if env.KEEPER_PGDATA is None:
            raise ConfigError(
                "Failed to get PGDATA from KEEPER_PGDATA",
            )

        try:
            return cls(
                pgdata=env.KEEPER_PGDATA,
                pgport=env.KEEPER_PGPORT,
                dbname=env.KEEPER_DBNAME,
                nodename=env.KEEPER_NODENAME,
                formation=env.KEEPER_FORMATION,
                group_id=env.KEEPER_GROUP_ID,
                monitor_uri=env.KEEPER_MONITOR_URI,
                monitor_timeout=env.KEEPER_MONITOR_TIMEOUT,
                monitor_update_extension=env.KEEPER_MONITOR_UPDATE_EXTENSION,
                state_directory=env.KEEPER_STATE_DIRECTORY,
                max_hops=env.KEEPER_MAX_HOPS,
                log_level=env.KEEPER_LOG_LEVEL,
                log_output=env.KEEPER_LOG_OUTPUT,
                log_directory=env.KEEPER_LOG_DIRECTORY,
            )

        except ValidationError as error:
            raise ConfigError(
                "Invalid keeper configuration",
                context={"pgdata": env.KEEPER_PGDATA},
                cause=error,
            ) from error

    def configure_logging(self):
        LoggingConfig().update(
            log_directory=self.log_directory,
            log_level=self.log_level,
            log_output=self.log_output,
        )


def load_config(env_file: str | None = None) -> KeeperConfig:
    return KeeperConfig.from_env(
        load_env(KeeperEnv, env_file=env_file)
    )
