"""Helper functions: base64 encoding/decoding, integer/byte conversion, hex previews."""

import base64
import binascii


def b64e(b: bytes) -> str:
    """Base64 encode bytes to string for JSON transmission."""
    return base64.b64encode(b).decode('utf-8')


def b64d(s: str) -> bytes:
    """Base64 decode string to bytes from JSON messages."""
    return base64.b64decode(s, validate=True)


def int_to_bytes(value: int) -> bytes:
    """
    Encode an integer as minimal big-endian two's complement.

    Positive values whose top bit is set gain a leading zero byte, so
    0x80 encodes as b'\\x00\\x80' and 0 encodes as b'\\x00'.
    """
    length = (value.bit_length() + 8) // 8
    return value.to_bytes(length, byteorder='big', signed=True)


def bytes_to_int(data: bytes) -> int:
    """Decode big-endian two's complement bytes produced by int_to_bytes."""
    return int.from_bytes(data, byteorder='big', signed=True)


def to_hex(data: bytes, limit: int = 16) -> str:
    """Hex preview of data, truncated to limit characters."""
    if data is None:
        return "null"
    text = binascii.hexlify(data).decode('ascii')
    if len(text) > limit:
        return text[:limit] + "..."
    return text
