"""
Pluggable symmetric cipher for Finished and ApplicationData payloads.

- SymmetricCipher: stable interface used by the handshake parties
- XorCipher: repeating-key XOR, the default; illustrative only
- get_cipher(): resolve a cipher by configured name

The AES strategy lives in minitls.crypto.aes.
"""


class SymmetricCipher:
    """encrypt()/decrypt() over raw bytes with the session encryption key."""

    name = ""

    def encrypt(self, data: bytes, key: bytes) -> bytes:
        raise NotImplementedError

    def decrypt(self, data: bytes, key: bytes) -> bytes:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name={self.name!r})"


class XorCipher(SymmetricCipher):
    """Byte-wise XOR with the key repeated cyclically. Self-inverse."""

    name = "xor"

    def encrypt(self, data: bytes, key: bytes) -> bytes:
        """
        Raises:
            ValueError: If key is empty
        """
        if not key:
            raise ValueError("Encryption key cannot be empty")
        key_length = len(key)
        return bytes(b ^ key[i % key_length] for i, b in enumerate(data))

    def decrypt(self, data: bytes, key: bytes) -> bytes:
        return self.encrypt(data, key)


def available_ciphers() -> dict:
    """Map of cipher name to cipher class."""
    from minitls.crypto.aes import AesCipher

    return {cls.name: cls for cls in (XorCipher, AesCipher)}


def get_cipher(name: str) -> SymmetricCipher:
    """
    Instantiate the cipher registered under name.

    Raises:
        ValueError: If no cipher has that name
    """
    ciphers = available_ciphers()
    try:
        return ciphers[name.lower()]()
    except KeyError:
        raise ValueError(
            f"Unknown cipher '{name}', expected one of {sorted(ciphers)}"
        ) from None
