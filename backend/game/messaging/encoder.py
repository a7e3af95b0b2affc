"""
MessagePack encoder/decoder for outbound event payloads.

Payloads are plain dicts produced by event_payload.service_event_payload().
The NotificationBus encodes them here before handing bytes to a transport.
"""

from typing import Any

import msgpack

# Size limits to prevent resource exhaustion from malicious payloads.
MAX_BUFFER_LEN = 128 * 1024  # 128KB total payload
MAX_STR_LEN = 16 * 1024  # 16KB per string
MAX_ARRAY_LEN = 512  # max array elements (pool ids, eliminated ids)
MAX_MAP_LEN = 64  # max map entries


class DecodeError(Exception):
    """Error raised when MessagePack decoding fails."""


def _to_wire(obj: object) -> object:
    """
    Recursively coerce containers to MessagePack-friendly shapes.

    Sets become sorted lists, tuples become lists, and non-string dict keys
    become strings (strict map keys).
    """
    if isinstance(obj, dict):
        return {k if isinstance(k, str) else str(k): _to_wire(v) for k, v in obj.items()}
    if isinstance(obj, (set, frozenset)):
        return sorted(_to_wire(item) for item in obj)  # type: ignore[type-var]
    if isinstance(obj, (list, tuple)):
        return [_to_wire(item) for item in obj]
    return obj


def encode(data: dict[str, Any]) -> bytes:
    """
    Encode a dict to MessagePack bytes.
    """
    return msgpack.packb(_to_wire(data))


def decode(data: bytes) -> dict[str, Any]:
    """
    Decode MessagePack bytes to a dict.

    Raises DecodeError if data is invalid, not a dict, or exceeds size limits.
    """
    if len(data) > MAX_BUFFER_LEN:
        raise DecodeError(f"payload too large: {len(data)} bytes (max {MAX_BUFFER_LEN})")
    try:
        result = msgpack.unpackb(
            data,
            raw=False,
            max_str_len=MAX_STR_LEN,
            max_array_len=MAX_ARRAY_LEN,
            max_map_len=MAX_MAP_LEN,
        )
    except (msgpack.UnpackException, ValueError) as e:
        raise DecodeError(f"failed to decode MessagePack data: {e}") from e

    if not isinstance(result, dict):
        raise DecodeError(f"expected dict, got {type(result).__name__}")

    return result
