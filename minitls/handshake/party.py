"""Behaviour shared by both handshake roles: message checks and record encryption."""

from contextlib import contextmanager
from typing import Iterator, Optional

from minitls.common.config import HandshakeConfig
from minitls.common.errors import (
    AuthenticationFailure, MalformedEncoding, ProtocolViolation
)
from minitls.common.protocol import HandshakeMessage, MessageType
from minitls.crypto.cipher import SymmetricCipher, get_cipher
from minitls.handshake.state import HandshakeState, Phase

SESSION_ID_PREFIX = "SessionID:"


class Party:
    """One side of the handshake. Owns its HandshakeState exclusively."""

    role = "party"

    def __init__(self, config: Optional[HandshakeConfig] = None,
                 cipher: Optional[SymmetricCipher] = None) -> None:
        self.config = config or HandshakeConfig()
        self.cipher = cipher or get_cipher(self.config.cipher)
        self.state = HandshakeState()

    @property
    def is_handshake_complete(self) -> bool:
        return self.state.is_handshake_complete

    @property
    def session_id(self) -> Optional[str]:
        return self.state.session_id

    @contextmanager
    def _failing_on_error(self) -> Iterator[None]:
        """Move to ERROR if the wrapped step raises a protocol-level failure."""
        try:
            yield
        except (ProtocolViolation, MalformedEncoding, AuthenticationFailure):
            self.state.fail()
            raise

    def _expect(self, message: Optional[HandshakeMessage], expected: MessageType) -> HandshakeMessage:
        if message is None:
            raise ProtocolViolation(
                f"PROTOCOL: connection closed while waiting for {expected.name}"
            )
        if message.type is MessageType.ERROR:
            raise ProtocolViolation(f"PROTOCOL: peer reported error: {message.text}")
        if message.type is not expected:
            raise ProtocolViolation(
                f"PROTOCOL: expected {expected.name}, got {message.type.name}"
            )
        return message

    @staticmethod
    def _require_payload(message: HandshakeMessage) -> bytes:
        if message.payload is None:
            raise MalformedEncoding(f"BAD_MESSAGE: {message.type.name} has no payload")
        return message.payload

    def _seal(self, text: str) -> bytes:
        return self.cipher.encrypt(text.encode('utf-8'), self.state.encryption_key)

    def _open(self, payload: bytes) -> str:
        return self.cipher.decrypt(payload, self.state.encryption_key).decode('utf-8', errors='replace')

    def _open_finished(self, payload: bytes) -> str:
        # A wrong key must surface as a failed check, not a cipher error.
        try:
            return self._open(payload)
        except ValueError:
            return ""

    def send_data(self, plaintext: str) -> HandshakeMessage:
        """
        Encrypt an application record.

        Raises:
            InvalidStateError: If the handshake is not complete
        """
        self.state.require_phase(Phase.HANDSHAKE_COMPLETE)
        return HandshakeMessage(
            type=MessageType.APPLICATION_DATA,
            payload=self._seal(plaintext)
        )

    def receive_data(self, message: HandshakeMessage) -> str:
        """
        Decrypt an application record.

        Raises:
            InvalidStateError: If the handshake is not complete
            ProtocolViolation: If message is not APPLICATION_DATA
        """
        self.state.require_phase(Phase.HANDSHAKE_COMPLETE)
        if message.type is not MessageType.APPLICATION_DATA:
            raise ProtocolViolation(
                f"PROTOCOL: expected APPLICATION_DATA, got {message.type.name}"
            )
        return self._open(self._require_payload(message))

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.state!r})"
