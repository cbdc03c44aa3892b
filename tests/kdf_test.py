import hashlib

import pytest

from minitls.common.utils import int_to_bytes
from minitls.crypto.kdf import KDF_ITERATIONS, KEY_SIZE, derive_key, derive_session_keys


def test_single_iteration_is_sha256_of_secret_bytes():
    secret = 0xDEADBEEF
    assert derive_key(secret, 1, 32) == hashlib.sha256(int_to_bytes(secret)).digest()


def test_zero_iterations_pads_raw_secret():
    assert derive_key(0x0102, 0, 4) == b'\x01\x02\x00\x00'
    assert derive_key(0x0102, 0, 1) == b'\x01'


def test_output_length_is_exact():
    assert len(derive_key(12345, 3, 16)) == 16
    assert len(derive_key(12345, 3, 48)) == 48
    assert derive_key(12345, 3, 48)[32:] == bytes(16)


def test_rejects_negative_arguments():
    with pytest.raises(ValueError):
        derive_key(1, -1, 16)


def test_session_keys_split_the_master_key():
    secret = 2 ** 200 + 17
    keys = derive_session_keys(secret, iterations=50)
    master = derive_key(secret, 50, 2 * KEY_SIZE)

    assert keys.encryption_key == master[:KEY_SIZE]
    assert keys.mac_key == master[KEY_SIZE:]
    assert len(keys.encryption_key) == len(keys.mac_key) == KEY_SIZE


def test_session_keys_are_deterministic_and_secret_dependent():
    assert derive_session_keys(987654321) == derive_session_keys(987654321)
    assert derive_session_keys(987654321) != derive_session_keys(987654322)


def test_default_iteration_count():
    secret = 424242
    expected = int_to_bytes(secret)
    for _ in range(KDF_ITERATIONS):
        expected = hashlib.sha256(expected).digest()
    assert derive_session_keys(secret).encryption_key == expected[:KEY_SIZE]
