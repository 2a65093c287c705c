from .state_record import (
    pack_state as pack_state,
    parse_state as parse_state,
    serialize_state as serialize_state,
    unpack_state as unpack_state,
)
from .state_store import StateStore as StateStore
