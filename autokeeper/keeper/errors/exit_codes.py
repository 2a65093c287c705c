from enum import IntEnum


class ExitCode(IntEnum):
    QUIT = 0
    BAD_ARGS = 1
    BAD_CONFIG = 2
    BAD_STATE = 3
    PGSQL = 4
    PGCTL = 5
    MONITOR = 6
    INTERNAL_ERROR = 12
