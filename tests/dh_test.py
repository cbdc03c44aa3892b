import pytest

from minitls.common.errors import InvalidStateError, ProtocolViolation
from minitls.crypto.dh import DEFAULT_G, DiffieHellman, generate_parameters, validate_public_value
from minitls.crypto.mathutils import is_probable_prime


@pytest.fixture(scope="module")
def params():
    return generate_parameters(128)


def test_parameters(params):
    assert params.p.bit_length() == 128
    assert params.g == DEFAULT_G == 2
    assert is_probable_prime(params.p)


def test_shared_secret_agrees(params):
    alice = DiffieHellman.from_parameters(params)
    bob = DiffieHellman.from_parameters(params)
    alice.generate_private_key()
    bob.generate_private_key()

    alice_public = alice.compute_public_key()
    bob_public = bob.compute_public_key()

    assert alice.compute_shared_secret(bob_public) == bob.compute_shared_secret(alice_public)


def test_private_key_range(params):
    dh = DiffieHellman.from_parameters(params)
    for _ in range(50):
        assert 2 <= dh.generate_private_key() <= params.p - 2


def test_public_key_is_g_to_the_private(params):
    dh = DiffieHellman(params.p, params.g)
    private = dh.generate_private_key()
    assert dh.compute_public_key() == pow(params.g, private, params.p)


def test_operations_require_private_key(params):
    dh = DiffieHellman.from_parameters(params)
    with pytest.raises(InvalidStateError):
        dh.compute_public_key()
    with pytest.raises(InvalidStateError):
        dh.compute_shared_secret(5)


def test_validate_public_value(params):
    assert validate_public_value(params, 2) == 2
    assert validate_public_value(params, params.p - 2) == params.p - 2
    for bad in (0, 1, params.p - 1, params.p, params.p + 5, -3):
        with pytest.raises(ProtocolViolation):
            validate_public_value(params, bad)
