"""
Durable keeper state record.

Binary frame format:
    [4:crc32][4:payload_length][N:payload]

The payload is the msgspec JSON encoding of the KeeperState fields
plus a "version" marker. CRC32 covers the payload so a truncated or
torn file is detected on read rather than parsed into a wrong state.
"""

import struct
import zlib
from typing import Any

import msgspec

from autokeeper.keeper.errors import SerializationError, StateCorruptedError
from autokeeper.keeper.models import KEEPER_STATE_VERSION, KeeperState, NodeRole


_HEADER_FORMAT = ">I I"
_HEADER_SIZE = struct.calcsize(_HEADER_FORMAT)  # 8 bytes


def _wildcard_roles(state: KeeperState) -> dict[str, str]:
    return {
        field: role.value
        for field, role in (
            ("current_role", state.current_role),
            ("assigned_role", state.assigned_role),
        )
        if role == NodeRole.ANY
    }


def pack_state(state: KeeperState) -> bytes:
    """Encode a state into its checksummed on-disk frame."""
    record: dict[str, Any] = {"version": KEEPER_STATE_VERSION}
    record.update(msgspec.to_builtins(state))

    payload = msgspec.json.encode(record)
    crc = zlib.crc32(payload) & 0xFFFFFFFF

    return struct.pack(_HEADER_FORMAT, crc, len(payload)) + payload


def unpack_state(data: bytes) -> KeeperState:
    """
    Decode an on-disk frame. Raises StateCorruptedError on truncation,
    checksum mismatch, a missing or unknown version, invalid fields, or
    a role that is the any-state wildcard.
    """
    if len(data) < _HEADER_SIZE:
        raise StateCorruptedError(
            "State file is truncated",
            context={"size": len(data)},
        )

    stored_crc, payload_length = struct.unpack_from(_HEADER_FORMAT, data, 0)
    payload = data[_HEADER_SIZE:_HEADER_SIZE + payload_length]

    if len(payload) != payload_length or len(data) != _HEADER_SIZE + payload_length:
        raise StateCorruptedError(
            "State file length does not match its header",
            context={
                "expected": payload_length,
                "actual": len(data) - _HEADER_SIZE,
            },
        )

    computed_crc = zlib.crc32(payload) & 0xFFFFFFFF
    if computed_crc != stored_crc:
        raise StateCorruptedError(
            "State file checksum mismatch",
            context={
                "stored_crc": stored_crc,
                "computed_crc": computed_crc,
            },
        )

    try:
        record = msgspec.json.decode(payload, type=dict[str, Any])

    except msgspec.DecodeError as error:
        raise StateCorruptedError(
            "State file payload is not valid JSON",
            cause=error,
        ) from error

    version = record.pop("version", None)
    if version != KEEPER_STATE_VERSION:
        raise StateCorruptedError(
            "State file has an unsupported version marker",
            context={
                "version": version,
                "expected": KEEPER_STATE_VERSION,
            },
        )

    try:
        state = msgspec.convert(record, type=KeeperState)

    except msgspec.ValidationError as error:
        raise StateCorruptedError(
            "State file fields are invalid",
            cause=error,
        ) from error

    if wildcards := _wildcard_roles(state):
        raise StateCorruptedError(
            "State file holds the any-state wildcard as a role",
            context=wildcards,
        )

    return state


def serialize_state(state: KeeperState) -> str:
    """Render a state as indented JSON for machine-readable output."""
    try:
        return msgspec.json.format(
            msgspec.json.encode(state),
            indent=4,
        ).decode()

    except (msgspec.EncodeError, TypeError) as error:
        raise SerializationError(
            "Failed to serialize keeper state to JSON",
            cause=error,
        ) from error


def parse_state(text: str | bytes) -> KeeperState:
    """Parse the JSON rendering produced by serialize_state."""
    try:
        state = msgspec.json.decode(text, type=KeeperState)

    except (msgspec.DecodeError, msgspec.ValidationError) as error:
        raise SerializationError(
            "Failed to parse keeper state JSON",
            cause=error,
        ) from error

    if wildcards := _wildcard_roles(state):
        raise SerializationError(
            "Keeper state JSON holds the any-state wildcard as a role",
            context=wildcards,
        )

    return state
