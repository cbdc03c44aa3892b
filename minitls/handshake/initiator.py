"""Initiator (client) side of the handshake."""

import secrets
from typing import Optional

from minitls.common.errors import AuthenticationFailure, InvalidStateError, MalformedEncoding
from minitls.common.protocol import HandshakeMessage, MessageType
from minitls.common.utils import int_to_bytes
from minitls.crypto.dh import DiffieHellman, validate_public_value
from minitls.crypto.kdf import derive_session_keys
from minitls.crypto.pki import Certificate, decode_certificate, verify_certificate
from minitls.handshake.party import SESSION_ID_PREFIX, Party
from minitls.handshake.responder import RANDOM_SIZE
from minitls.handshake.state import Phase


def parse_session_id(text: Optional[str]) -> str:
    """
    Extract the session id from ServerHello text "SessionID:<id>".

    Raises:
        MalformedEncoding: If the prefix or the id is missing
    """
    if not text or not text.startswith(SESSION_ID_PREFIX):
        raise MalformedEncoding(f"BAD_MESSAGE: ServerHello text {text!r} carries no session id")
    session_id = text[len(SESSION_ID_PREFIX):].strip()
    if not session_id:
        raise MalformedEncoding("BAD_MESSAGE: empty session id")
    return session_id


class Initiator(Party):
    """
    Sends Hello, accepts the responder certificate, contributes its DH
    public value and answers the responder's Finished with its own.
    """

    role = "initiator"

    def send_hello(self) -> HandshakeMessage:
        """Generate the client random and emit Hello."""
        self.state.require_phase(Phase.IDLE)
        self.state.client_random = secrets.token_bytes(RANDOM_SIZE)
        self.state.transition_to(Phase.HELLO_SENT)
        return HandshakeMessage(type=MessageType.HELLO, payload=self.state.client_random)

    def handle_server_messages(self, server_hello: Optional[HandshakeMessage],
                               certificate: Optional[HandshakeMessage]) -> Certificate:
        """
        Process ServerHello and Certificate.

        The certificate is taken on faith unless the config requires a
        signed certificate, in which case its signature is checked against
        the RSA key it carries.

        Returns:
            The decoded Certificate

        Raises:
            InvalidStateError: If Hello has not been sent
            ProtocolViolation: On an unexpected message type or DH value
            MalformedEncoding: If the session id or certificate cannot be decoded
            AuthenticationFailure: If a required signature is missing or invalid
        """
        self.state.require_phase(Phase.HELLO_SENT)

        with self._failing_on_error():
            server_hello = self._expect(server_hello, MessageType.SERVER_HELLO)
            self.state.server_random = self._require_payload(server_hello)
            self.state.session_id = parse_session_id(server_hello.text)
            self.state.transition_to(Phase.SERVER_HELLO_RECEIVED)

            certificate = self._expect(certificate, MessageType.CERTIFICATE)
            decoded = decode_certificate(self._require_payload(certificate))
            if self.config.require_signed_certificate:
                verify_certificate(decoded)
            validate_public_value(decoded.dh_params, decoded.dh_public)

            self.state.peer_rsa_public_key = decoded.rsa_public_key
            self.state.dh_params = decoded.dh_params
            self.state.server_dh_public = decoded.dh_public
            self.state.transition_to(Phase.CERTIFICATE_RECEIVED)

        return decoded

    def send_key_exchange(self) -> HandshakeMessage:
        """
        Generate the initiator DH key pair, compute the shared secret,
        derive session keys and emit the DH public value.

        Raises:
            InvalidStateError: If no DH parameters have been received
        """
        if self.state.dh_params is None:
            raise InvalidStateError("STATE: DH parameters not received")
        self.state.require_phase(Phase.CERTIFICATE_RECEIVED)

        dh = DiffieHellman.from_parameters(self.state.dh_params)
        dh.generate_private_key()
        self.state.client_dh_public = dh.compute_public_key()
        self.state.shared_secret = dh.compute_shared_secret(self.state.server_dh_public)
        self.state.session_keys = derive_session_keys(
            self.state.shared_secret, self.config.kdf_iterations
        )
        self.state.transition_to(Phase.KEY_EXCHANGE_SENT)

        return HandshakeMessage(
            type=MessageType.KEY_EXCHANGE,
            payload=int_to_bytes(self.state.client_dh_public)
        )

    def handle_finished(self, message: Optional[HandshakeMessage]) -> HandshakeMessage:
        """
        Verify the responder's Finished and emit the initiator's Finished.

        Raises:
            InvalidStateError: If the key exchange has not been sent
            ProtocolViolation: If message is not a Finished
            AuthenticationFailure: If the decrypted text lacks the session id
        """
        self.state.require_phase(Phase.KEY_EXCHANGE_SENT)

        with self._failing_on_error():
            message = self._expect(message, MessageType.FINISHED)
            text = self._open_finished(self._require_payload(message))
            if self.state.session_id not in text:
                raise AuthenticationFailure("AUTH_FAIL: session id mismatch in responder Finished")
            self.state.transition_to(Phase.FINISHED_RECEIVED)

        finished = self._seal(f"INITIATOR_FINISHED:{self.state.session_id}")
        self.state.transition_to(Phase.HANDSHAKE_COMPLETE)

        return HandshakeMessage(type=MessageType.FINISHED, payload=finished)
