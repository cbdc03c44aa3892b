"""Responder (server) side of the handshake."""

import secrets
from typing import Callable, Optional, Tuple

from minitls.common.config import HandshakeConfig
from minitls.common.errors import InvalidStateError
from minitls.common.protocol import HandshakeMessage, MessageType
from minitls.common.utils import bytes_to_int
from minitls.crypto.cipher import SymmetricCipher
from minitls.crypto.dh import DiffieHellman, generate_parameters, validate_public_value
from minitls.crypto.kdf import derive_session_keys
from minitls.crypto.pki import encode_certificate
from minitls.crypto.rsa import RSAKeyPair, generate_key_pair
from minitls.handshake.party import SESSION_ID_PREFIX, Party
from minitls.handshake.state import Phase

RANDOM_SIZE = 32


def new_session_id() -> str:
    """Random 8-character hex session id."""
    return secrets.token_hex(4)


class Responder(Party):
    """
    Waits for Hello, answers with ServerHello and Certificate, completes the
    key exchange and proves key possession with an encrypted Finished.
    """

    role = "responder"

    def __init__(self, config: Optional[HandshakeConfig] = None,
                 cipher: Optional[SymmetricCipher] = None,
                 session_id_factory: Callable[[], str] = new_session_id) -> None:
        super().__init__(config, cipher)
        self._session_id_factory = session_id_factory
        self._dh: Optional[DiffieHellman] = None

    def initialize(self, key_pair: Optional[RSAKeyPair] = None) -> RSAKeyPair:
        """
        Set up the RSA identity, generating one unless key_pair is given.

        Raises:
            InvalidStateError: If the handshake has already started
        """
        self.state.require_phase(Phase.IDLE)
        if key_pair is None:
            key_pair = generate_key_pair(self.config.rsa_key_bits, self.config.primality_rounds)
        self.state.rsa_key_pair = key_pair
        return key_pair

    def handle_hello(self, message: Optional[HandshakeMessage]) -> Tuple[HandshakeMessage, HandshakeMessage]:
        """
        Process Hello and produce ServerHello plus Certificate.

        Generates the server random, the session id, fresh DH parameters and
        the responder DH key pair.

        Raises:
            InvalidStateError: If initialize() was not called
            ProtocolViolation: If message is not a Hello
        """
        self.state.require_phase(Phase.IDLE)
        if self.state.rsa_key_pair is None:
            raise InvalidStateError("STATE: call initialize() before handling Hello")

        with self._failing_on_error():
            message = self._expect(message, MessageType.HELLO)
            self.state.client_random = self._require_payload(message)
            self.state.transition_to(Phase.HELLO_RECEIVED)

        self.state.server_random = secrets.token_bytes(RANDOM_SIZE)
        self.state.session_id = self._session_id_factory()

        params = generate_parameters(self.config.dh_prime_bits, self.config.primality_rounds)
        self.state.dh_params = params
        self._dh = DiffieHellman.from_parameters(params)
        self._dh.generate_private_key()
        self.state.server_dh_public = self._dh.compute_public_key()

        server_hello = HandshakeMessage(
            type=MessageType.SERVER_HELLO,
            payload=self.state.server_random,
            text=f"{SESSION_ID_PREFIX}{self.state.session_id}"
        )

        key_pair = self.state.rsa_key_pair
        signing_key = key_pair.private_key if self.config.signed_certificates else None
        certificate = HandshakeMessage(
            type=MessageType.CERTIFICATE,
            payload=encode_certificate(
                key_pair.public_key, params, self.state.server_dh_public, signing_key
            )
        )
        return server_hello, certificate

    def handle_key_exchange(self, message: Optional[HandshakeMessage]) -> HandshakeMessage:
        """
        Process the initiator's DH public value and answer with Finished.

        Raises:
            InvalidStateError: If Hello has not been handled
            ProtocolViolation: If message is not a KeyExchange or the public
                value is out of range
        """
        self.state.require_phase(Phase.HELLO_RECEIVED)

        with self._failing_on_error():
            message = self._expect(message, MessageType.KEY_EXCHANGE)
            client_public = validate_public_value(
                self.state.dh_params, bytes_to_int(self._require_payload(message))
            )

        self.state.client_dh_public = client_public
        self.state.shared_secret = self._dh.compute_shared_secret(client_public)
        self.state.session_keys = derive_session_keys(
            self.state.shared_secret, self.config.kdf_iterations
        )
        self.state.transition_to(Phase.KEY_EXCHANGE_RECEIVED)

        finished = self._seal(f"RESPONDER_FINISHED:{self.state.session_id}")
        self.state.transition_to(Phase.FINISHED_SENT)

        return HandshakeMessage(type=MessageType.FINISHED, payload=finished)

    def handle_finished(self, message: Optional[HandshakeMessage]) -> bool:
        """
        Verify the initiator's Finished.

        Returns:
            True if the decrypted text contains the session id and the
            handshake is complete; False (state ERROR) otherwise

        Raises:
            InvalidStateError: If Finished was not sent yet
            ProtocolViolation: If message is not a Finished
        """
        self.state.require_phase(Phase.FINISHED_SENT)

        with self._failing_on_error():
            message = self._expect(message, MessageType.FINISHED)
            payload = self._require_payload(message)

        if self.state.session_id in self._open_finished(payload):
            self.state.transition_to(Phase.HANDSHAKE_COMPLETE)
            return True

        self.state.fail()
        return False
