"""
Responder certificate: length-prefixed binary encoding and opt-in signature check.

Layout, each field a u32 big-endian length followed by that many bytes:

    [RSA e][RSA n][DH p][DH g][responder DH public]([signature])

Integers are minimal big-endian two's complement. The signature field is
present only when the responder runs in signed-certificate mode.
"""

import struct
from typing import List, NamedTuple, Optional, Tuple

from minitls.common.errors import AuthenticationFailure, MalformedEncoding
from minitls.common.utils import bytes_to_int, int_to_bytes
from minitls.crypto import sign
from minitls.crypto.dh import DHParameters
from minitls.crypto.rsa import PrivateKey, PublicKey

FIELD_NAMES = ("rsa_e", "rsa_n", "dh_p", "dh_g", "dh_public")
LENGTH_PREFIX = struct.Struct(">I")


class Certificate(NamedTuple):
    """Decoded certificate payload."""
    rsa_public_key: PublicKey
    dh_params: DHParameters
    dh_public: int
    body: bytes
    signature: Optional[bytes] = None

    @property
    def is_signed(self) -> bool:
        return self.signature is not None


def _pack_field(data: bytes) -> bytes:
    return LENGTH_PREFIX.pack(len(data)) + data


def _read_field(data: bytes, offset: int, name: str) -> Tuple[bytes, int]:
    if len(data) - offset < LENGTH_PREFIX.size:
        raise MalformedEncoding(
            f"BAD_CERT: truncated length prefix for field '{name}' at offset {offset}"
        )
    (length,) = LENGTH_PREFIX.unpack_from(data, offset)
    offset += LENGTH_PREFIX.size

    if length == 0:
        raise MalformedEncoding(f"BAD_CERT: field '{name}' is empty")
    if length > len(data) - offset:
        raise MalformedEncoding(
            f"BAD_CERT: field '{name}' declares {length} bytes, only {len(data) - offset} remain"
        )
    return data[offset:offset + length], offset + length


def encode_certificate_body(rsa_public_key: PublicKey, dh_params: DHParameters, dh_public: int) -> bytes:
    """Encode the five unsigned certificate fields in their fixed order."""
    values = (rsa_public_key.e, rsa_public_key.n, dh_params.p, dh_params.g, dh_public)
    return b"".join(_pack_field(int_to_bytes(value)) for value in values)


def encode_certificate(
    rsa_public_key: PublicKey,
    dh_params: DHParameters,
    dh_public: int,
    signing_key: Optional[PrivateKey] = None
) -> bytes:
    """
    Encode a certificate payload.

    Args:
        rsa_public_key: Responder RSA public key
        dh_params: DH parameters for this session
        dh_public: Responder DH public value
        signing_key: If given, append a signature over the five fields

    Returns:
        bytes: Certificate payload
    """
    body = encode_certificate_body(rsa_public_key, dh_params, dh_public)
    if signing_key is None:
        return body
    return body + _pack_field(sign.sign(body, signing_key))


def decode_certificate(data: bytes) -> Certificate:
    """
    Decode a certificate payload, reading fields strictly in order.

    Raises:
        MalformedEncoding: On a truncated prefix, an overrunning or empty
            field, or trailing bytes after the optional signature
    """
    if data is None:
        raise MalformedEncoding("BAD_CERT: certificate payload is missing")

    offset = 0
    values: List[int] = []
    for name in FIELD_NAMES:
        field, offset = _read_field(data, offset, name)
        values.append(bytes_to_int(field))
    body = data[:offset]

    signature = None
    if offset < len(data):
        signature, offset = _read_field(data, offset, "signature")
        if offset != len(data):
            raise MalformedEncoding(
                f"BAD_CERT: {len(data) - offset} unexpected trailing bytes"
            )

    e, n, p, g, dh_public = values
    return Certificate(
        rsa_public_key=PublicKey(e=e, n=n),
        dh_params=DHParameters(p=p, g=g),
        dh_public=dh_public,
        body=body,
        signature=signature
    )


def verify_certificate(certificate: Certificate) -> Certificate:
    """
    Check the certificate signature against the RSA key it carries.

    This proves the sender holds the matching private key. It is not a
    trust decision: there is no CA.

    Raises:
        AuthenticationFailure: If the signature is absent or invalid
    """
    if not certificate.is_signed:
        raise AuthenticationFailure("SIG_FAIL: certificate is not signed")
    try:
        sign.verify(certificate.body, certificate.signature, certificate.rsa_public_key)
    except ValueError as e:
        raise AuthenticationFailure(str(e)) from e
    return certificate
