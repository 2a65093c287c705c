from .keeper_config import (
    MONITOR_DISABLED as MONITOR_DISABLED,
    KeeperConfig as KeeperConfig,
    load_config as load_config,
)
