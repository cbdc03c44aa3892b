"""RSA key pair generation and the SHA-256 hash primitive."""

from typing import NamedTuple

from cryptography.exceptions import UnsupportedAlgorithm
from cryptography.hazmat.primitives import hashes

from minitls.crypto.mathutils import (
    DEFAULT_PRIMALITY_ROUNDS, gcd, generate_prime, mod_inverse
)

DEFAULT_PUBLIC_EXPONENT = 65537
HASH_SIZE = 32


class PublicKey(NamedTuple):
    e: int
    n: int

    def __repr__(self) -> str:
        return f"PublicKey(e={self.e}, n={self.n.bit_length()}-bit)"


class PrivateKey(NamedTuple):
    d: int
    n: int

    def __repr__(self) -> str:
        return f"PrivateKey(n={self.n.bit_length()}-bit)"


class RSAKeyPair(NamedTuple):
    public_key: PublicKey
    private_key: PrivateKey


def generate_key_pair(bit_length: int, iterations: int = DEFAULT_PRIMALITY_ROUNDS) -> RSAKeyPair:
    """
    Generate an RSA key pair.

    Args:
        bit_length: Target modulus size; each prime gets bit_length // 2 bits
        iterations: Miller-Rabin rounds for the prime search

    Returns:
        RSAKeyPair with public (e, n) and private (d, n)

    Raises:
        ValueError: If bit_length < 6, the smallest size with two distinct primes
    """
    if bit_length < 6:
        raise ValueError(f"RSA modulus must be at least 6 bits, got {bit_length}")

    prime_bits = bit_length // 2
    p = generate_prime(prime_bits, iterations)
    q = generate_prime(prime_bits, iterations)
    while p == q:
        q = generate_prime(prime_bits, iterations)

    n = p * q
    phi = (p - 1) * (q - 1)

    e = DEFAULT_PUBLIC_EXPONENT
    while gcd(e, phi) != 1:
        e += 2

    d = mod_inverse(e, phi)

    return RSAKeyPair(
        public_key=PublicKey(e=e, n=n),
        private_key=PrivateKey(d=d, n=n)
    )


def _xor_fold(data: bytes) -> bytes:
    folded = bytearray(HASH_SIZE)
    for i, byte in enumerate(data):
        folded[i % HASH_SIZE] ^= byte
    return bytes(folded)


def simple_hash(data: bytes) -> bytes:
    """
    32-byte digest of data.

    SHA-256 from the cryptography backend. If the backend reports SHA-256 as
    unsupported, degrades to an XOR-fold over 32-byte blocks, which has no
    cryptographic strength and only keeps the handshake runnable.
    """
    try:
        digest = hashes.Hash(hashes.SHA256())
    except UnsupportedAlgorithm:
        return _xor_fold(data)
    digest.update(data)
    return digest.finalize()
