"""Runtime settings read from the environment and an optional .env file."""

import os
from dataclasses import dataclass

from dotenv import find_dotenv, load_dotenv

from minitls.crypto.kdf import KDF_ITERATIONS
from minitls.crypto.mathutils import DEFAULT_PRIMALITY_ROUNDS


def _env_flag(name: str, default: str = "0") -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class HandshakeConfig:
    """Key sizes, cipher choice and network endpoint for both parties."""
    server_host: str = "localhost"
    server_port: int = 8888
    rsa_key_bits: int = 1024
    dh_prime_bits: int = 1024
    kdf_iterations: int = KDF_ITERATIONS
    primality_rounds: int = DEFAULT_PRIMALITY_ROUNDS
    cipher: str = "xor"
    signed_certificates: bool = False
    require_signed_certificate: bool = False

    @classmethod
    def from_env(cls) -> "HandshakeConfig":
        """Load settings, letting a .env file in the working directory fill gaps."""
        load_dotenv(find_dotenv(usecwd=True))
        return cls(
            server_host=os.getenv('SERVER_HOST', 'localhost'),
            server_port=int(os.getenv('SERVER_PORT', 8888)),
            rsa_key_bits=int(os.getenv('RSA_KEY_BITS', 1024)),
            dh_prime_bits=int(os.getenv('DH_PRIME_BITS', 1024)),
            kdf_iterations=int(os.getenv('KDF_ITERATIONS', KDF_ITERATIONS)),
            primality_rounds=int(os.getenv('PRIMALITY_ROUNDS', DEFAULT_PRIMALITY_ROUNDS)),
            cipher=os.getenv('CIPHER', 'xor'),
            signed_certificates=_env_flag('SIGNED_CERTIFICATES'),
            require_signed_certificate=_env_flag('REQUIRE_SIGNED_CERTIFICATE'),
        )
