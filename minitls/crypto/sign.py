"""Textbook RSA signatures over simple_hash(), used only by the signed-certificate mode."""

from minitls.crypto.mathutils import mod_pow
from minitls.crypto.rsa import PrivateKey, PublicKey, simple_hash


def _digest_as_int(data: bytes, n: int) -> int:
    return int.from_bytes(simple_hash(data), byteorder='big') % n


def sign(data: bytes, private_key: PrivateKey) -> bytes:
    """
    Sign data as simple_hash(data)^d mod n.

    Args:
        data: Data bytes to sign
        private_key: RSA private key (d, n)

    Returns:
        Signature bytes, big-endian, padded to the byte length of n
    """
    signature = mod_pow(_digest_as_int(data, private_key.n), private_key.d, private_key.n)
    return signature.to_bytes((private_key.n.bit_length() + 7) // 8, byteorder='big')


def verify(data: bytes, signature: bytes, public_key: PublicKey) -> bool:
    """
    Verify a signature produced by sign().

    Returns:
        True if signature is valid

    Raises:
        ValueError: With SIG_FAIL message if verification fails
    """
    value = int.from_bytes(signature, byteorder='big')
    if value >= public_key.n:
        raise ValueError("SIG_FAIL: Signature out of range for modulus")

    if mod_pow(value, public_key.e, public_key.n) != _digest_as_int(data, public_key.n):
        raise ValueError("SIG_FAIL: Signature verification failed")
    return True
