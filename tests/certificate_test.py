import pytest

from minitls.common.errors import AuthenticationFailure, MalformedEncoding
from minitls.common.utils import int_to_bytes
from minitls.crypto.dh import DHParameters
from minitls.crypto.pki import (
    LENGTH_PREFIX, decode_certificate, encode_certificate, encode_certificate_body, verify_certificate
)

PARAMS = DHParameters(p=0xE3B5C1F3A7D9B1C5, g=2)
DH_PUBLIC = 0x1F2E3D4C5B6A7988


@pytest.fixture
def unsigned(key_pair):
    return encode_certificate(key_pair.public_key, PARAMS, DH_PUBLIC)


@pytest.fixture
def signed(key_pair):
    return encode_certificate(key_pair.public_key, PARAMS, DH_PUBLIC, key_pair.private_key)


def test_decode_recovers_every_field(key_pair, unsigned):
    certificate = decode_certificate(unsigned)
    assert certificate.rsa_public_key == key_pair.public_key
    assert certificate.dh_params == PARAMS
    assert certificate.dh_public == DH_PUBLIC
    assert certificate.body == unsigned
    assert not certificate.is_signed


def test_field_layout(key_pair, unsigned):
    e_bytes = int_to_bytes(key_pair.public_key.e)
    (first_length,) = LENGTH_PREFIX.unpack_from(unsigned, 0)
    assert first_length == len(e_bytes)
    assert unsigned[4:4 + first_length] == e_bytes
    assert unsigned.endswith(int_to_bytes(DH_PUBLIC))


def test_truncated_field(unsigned):
    with pytest.raises(MalformedEncoding, match="BAD_CERT"):
        decode_certificate(unsigned[:-1])


def test_truncated_length_prefix():
    with pytest.raises(MalformedEncoding, match="truncated"):
        decode_certificate(b'\x00\x00\x01')


def test_empty_field(unsigned):
    with pytest.raises(MalformedEncoding, match="empty"):
        decode_certificate(LENGTH_PREFIX.pack(0) + unsigned)


def test_missing_payload():
    with pytest.raises(MalformedEncoding):
        decode_certificate(None)


def test_trailing_garbage(unsigned, signed):
    with pytest.raises(MalformedEncoding):
        decode_certificate(unsigned + b'\x00')
    with pytest.raises(MalformedEncoding, match="trailing"):
        decode_certificate(signed + b'\x00')


def test_signed_certificate_verifies(signed, unsigned):
    certificate = decode_certificate(signed)
    assert certificate.is_signed
    assert certificate.body == unsigned
    assert verify_certificate(certificate) is certificate


def test_unsigned_certificate_fails_verification(unsigned):
    with pytest.raises(AuthenticationFailure, match="not signed"):
        verify_certificate(decode_certificate(unsigned))


def test_substituted_dh_value_breaks_signature(key_pair, signed):
    signature = decode_certificate(signed).signature
    forged = (
        encode_certificate_body(key_pair.public_key, PARAMS, DH_PUBLIC + 1)
        + LENGTH_PREFIX.pack(len(signature)) + signature
    )
    with pytest.raises(AuthenticationFailure, match="SIG_FAIL"):
        verify_certificate(decode_certificate(forged))
