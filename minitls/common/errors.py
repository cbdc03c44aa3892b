"""Error kinds raised by the handshake core."""


class HandshakeError(Exception):
    """Base class for every handshake failure."""


class ProtocolViolation(HandshakeError, ValueError):
    """Received message does not match the expected handshake step."""


class AuthenticationFailure(HandshakeError):
    """Finished payload or certificate signature failed verification."""


class InvalidStateError(HandshakeError, RuntimeError):
    """Operation invoked before its prerequisite phase."""


class MalformedEncoding(HandshakeError, ValueError):
    """Certificate or wire message could not be decoded."""
