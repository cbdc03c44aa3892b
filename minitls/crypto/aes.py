"""AES-128 ECB record cipher with PKCS#7 padding."""

from cryptography.hazmat.primitives.ciphers import Cipher, algorithms, modes
from cryptography.hazmat.primitives import padding as sym_padding

from minitls.crypto.cipher import SymmetricCipher
from minitls.crypto.kdf import KEY_SIZE

BLOCK_BITS = 128


def _aes(key: bytes) -> Cipher:
    if len(key) != KEY_SIZE:
        raise ValueError(f"AES-128 needs a {KEY_SIZE}-byte session key, got {len(key)} bytes")
    return Cipher(algorithms.AES(key), modes.ECB())


class AesCipher(SymmetricCipher):
    """AES-128 in ECB mode over the 16-byte session encryption key."""

    name = "aes-128-ecb"

    def encrypt(self, data: bytes, key: bytes) -> bytes:
        """
        Pad data to the block size and encrypt it.

        Raises:
            ValueError: If key is not 16 bytes
        """
        encryptor = _aes(key).encryptor()
        padder = sym_padding.PKCS7(BLOCK_BITS).padder()
        padded = padder.update(data) + padder.finalize()
        return encryptor.update(padded) + encryptor.finalize()

    def decrypt(self, data: bytes, key: bytes) -> bytes:
        """
        Decrypt and strip the PKCS#7 padding.

        Raises:
            ValueError: If key is not 16 bytes, the ciphertext is not whole
                blocks, or the padding is invalid
        """
        decryptor = _aes(key).decryptor()
        try:
            padded = decryptor.update(data) + decryptor.finalize()
            unpadder = sym_padding.PKCS7(BLOCK_BITS).unpadder()
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError as e:
            raise ValueError(f"Decryption failed - {e}") from e
