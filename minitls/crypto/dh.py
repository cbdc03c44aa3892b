"""Diffie-Hellman parameter generation, key pairs and shared secret computation."""

from typing import NamedTuple, Optional

from minitls.common.errors import InvalidStateError, ProtocolViolation
from minitls.crypto.mathutils import (
    DEFAULT_PRIMALITY_ROUNDS, generate_prime, mod_pow, random_big_integer
)

DEFAULT_G = 2


class DHParameters(NamedTuple):
    """Public DH group: prime modulus p and generator g."""
    p: int
    g: int

    def __repr__(self) -> str:
        return f"DHParameters(p={self.p.bit_length()}-bit, g={self.g})"


def generate_parameters(bit_length: int, iterations: int = DEFAULT_PRIMALITY_ROUNDS) -> DHParameters:
    """
    Generate fresh DH parameters.

    Args:
        bit_length: Size of the prime p
        iterations: Miller-Rabin rounds for the prime search

    Returns:
        DHParameters with a random full-width prime p and g = 2
    """
    p = generate_prime(bit_length, iterations)
    return DHParameters(p=p, g=DEFAULT_G)


def validate_public_value(params: DHParameters, value: int) -> int:
    """
    Reject peer public values outside [2, p-2].

    Raises:
        ProtocolViolation: If value is 0, 1, p-1 or out of range
    """
    if not (2 <= value <= params.p - 2):
        raise ProtocolViolation(
            f"PROTOCOL: DH public value out of range [2, p-2] for {params.p.bit_length()}-bit p"
        )
    return value


class DiffieHellman:
    """One party's ephemeral DH key pair under fixed parameters."""

    def __init__(self, p: int, g: int) -> None:
        self.params = DHParameters(p=p, g=g)
        self.private_key: Optional[int] = None
        self.public_key: Optional[int] = None

    @classmethod
    def from_parameters(cls, params: DHParameters) -> "DiffieHellman":
        return cls(params.p, params.g)

    def generate_private_key(self) -> int:
        """Sample the private exponent uniformly from [2, p-2]."""
        self.private_key = random_big_integer(2, self.params.p - 2)
        self.public_key = None
        return self.private_key

    def compute_public_key(self) -> int:
        """
        Compute g^private mod p.

        Raises:
            InvalidStateError: If no private key has been generated
        """
        if self.private_key is None:
            raise InvalidStateError("STATE: generate the DH private key first")
        self.public_key = mod_pow(self.params.g, self.private_key, self.params.p)
        return self.public_key

    def compute_shared_secret(self, other_public: int) -> int:
        """
        Compute other_public^private mod p.

        Raises:
            InvalidStateError: If no private key has been generated
        """
        if self.private_key is None:
            raise InvalidStateError("STATE: generate the DH private key first")
        return mod_pow(other_public, self.private_key, self.params.p)
