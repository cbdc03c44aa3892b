"""Drive a party through the full handshake over a Channel."""

from typing import Callable, Union

from minitls.common.errors import AuthenticationFailure, MalformedEncoding, ProtocolViolation
from minitls.common.protocol import HandshakeMessage, MessageType
from minitls.common.transport import Channel
from minitls.common.utils import to_hex
from minitls.handshake.initiator import Initiator
from minitls.handshake.responder import Responder

Reporter = Callable[[str], None]


def _silent(_: str) -> None:
    pass


class _Narrator:
    """Forwards progress lines and newly recorded phase transitions to report."""

    def __init__(self, party: Union[Initiator, Responder], report: Reporter) -> None:
        self.party = party
        self.report = report
        self._seen = 0

    def __call__(self, line: str = "") -> None:
        history = self.party.state.history
        for old, new in history[self._seen:]:
            self.report(f"State: {old.value} -> {new.value}")
        self._seen = len(history)
        if line:
            self.report(line)


def _notify_peer(channel: Channel, reason: str) -> None:
    try:
        channel.send(HandshakeMessage(type=MessageType.ERROR, text=reason))
    except OSError:
        pass  # peer already gone; the local failure is still raised


def run_responder_handshake(responder: Responder, channel: Channel,
                            report: Reporter = _silent, pause: Reporter = _silent) -> bool:
    """
    Run the responder side until HANDSHAKE_COMPLETE.

    Expects initialize() to have been called.

    Returns:
        True on success, False if the initiator's Finished failed verification

    Raises:
        ProtocolViolation, MalformedEncoding, AuthenticationFailure: After
            sending an ERROR message with the reason to the peer
    """
    narrate = _Narrator(responder, report)
    try:
        narrate("Waiting for HELLO...")
        hello = channel.receive()

        pause("Press ENTER to send SERVER_HELLO and CERTIFICATE")
        server_hello, certificate = responder.handle_hello(hello)
        narrate(f"Client random: {to_hex(responder.state.client_random)}")
        narrate(f"Session ID: {responder.session_id}")
        channel.send(server_hello)
        channel.send(certificate)
        narrate("Sent SERVER_HELLO and CERTIFICATE")

        narrate("Waiting for KEY_EXCHANGE...")
        key_exchange = channel.receive()

        pause("Press ENTER to compute shared secret and send FINISHED")
        finished = responder.handle_key_exchange(key_exchange)
        narrate(f"Shared secret computed: {hex(responder.state.shared_secret)[:34]}...")
        narrate(f"Encryption key: {to_hex(responder.state.encryption_key)}")
        channel.send(finished)
        narrate("Sent FINISHED")

        narrate("Waiting for FINISHED...")
        success = responder.handle_finished(channel.receive())
        narrate()
    except (ProtocolViolation, MalformedEncoding, AuthenticationFailure) as e:
        narrate()
        _notify_peer(channel, str(e))
        raise

    if not success:
        _notify_peer(channel, "AUTH_FAIL: session id mismatch in initiator Finished")
    return success


def run_initiator_handshake(initiator: Initiator, channel: Channel,
                            report: Reporter = _silent, pause: Reporter = _silent) -> None:
    """
    Run the initiator side until HANDSHAKE_COMPLETE.

    Raises:
        ProtocolViolation, MalformedEncoding, AuthenticationFailure: After
            sending an ERROR message with the reason to the peer
    """
    narrate = _Narrator(initiator, report)
    try:
        pause("Press ENTER to send HELLO")
        channel.send(initiator.send_hello())
        narrate(f"Sent HELLO, client random: {to_hex(initiator.state.client_random)}")

        narrate("Waiting for SERVER_HELLO and CERTIFICATE...")
        server_hello = channel.receive()
        certificate = None
        if server_hello is not None and server_hello.type is not MessageType.ERROR:
            certificate = channel.receive()

        pause("Press ENTER to process certificate and send KEY_EXCHANGE")
        decoded = initiator.handle_server_messages(server_hello, certificate)
        narrate(f"Session ID: {initiator.session_id}")
        narrate(f"Server RSA public key: {decoded.rsa_public_key!r}")
        narrate(f"DH parameters: {decoded.dh_params!r}")
        if decoded.is_signed and initiator.config.require_signed_certificate:
            narrate("Certificate signature verified")

        channel.send(initiator.send_key_exchange())
        narrate(f"Shared secret computed: {hex(initiator.state.shared_secret)[:34]}...")
        narrate(f"Encryption key: {to_hex(initiator.state.encryption_key)}")
        narrate("Sent KEY_EXCHANGE")

        narrate("Waiting for FINISHED...")
        server_finished = channel.receive()

        pause("Press ENTER to send FINISHED")
        channel.send(initiator.handle_finished(server_finished))
        narrate("Sent FINISHED")
    except (ProtocolViolation, MalformedEncoding, AuthenticationFailure) as e:
        narrate()
        _notify_peer(channel, str(e))
        raise
