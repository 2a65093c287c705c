from .env import KeeperEnv as KeeperEnv
from .load_env import load_env as load_env
