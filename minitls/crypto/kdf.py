"""
Key derivation from the DH shared secret.

- derive_key(): iterated hash of the secret, sized to the requested length
- derive_session_keys(): 32 bytes split into encryption and MAC keys
"""

from typing import NamedTuple

from minitls.common.utils import int_to_bytes
from minitls.crypto.rsa import simple_hash

KDF_ITERATIONS = 10000
KEY_SIZE = 16


class SessionKeys(NamedTuple):
    encryption_key: bytes
    mac_key: bytes


def derive_key(secret: int, iterations: int, length: int) -> bytes:
    """
    Stretch secret into length bytes.

    Args:
        secret: Shared secret, hashed from its big-endian two's complement bytes
        iterations: Number of times the hash is applied
        length: Output size; truncates or zero-extends the final digest

    Returns:
        bytes: Derived key material
    """
    if iterations < 0 or length < 0:
        raise ValueError("iterations and length must be non-negative")

    key = int_to_bytes(secret)
    for _ in range(iterations):
        key = simple_hash(key)

    return key[:length].ljust(length, b'\x00')


def derive_session_keys(secret: int, iterations: int = KDF_ITERATIONS) -> SessionKeys:
    """Derive the 16-byte encryption key and 16-byte MAC key."""
    master = derive_key(secret, iterations, 2 * KEY_SIZE)
    return SessionKeys(
        encryption_key=master[:KEY_SIZE],
        mac_key=master[KEY_SIZE:2 * KEY_SIZE]
    )
