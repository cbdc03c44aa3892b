"""Shared fixtures: small key sizes so prime generation stays fast."""

import pytest

from minitls.common.config import HandshakeConfig
from minitls.crypto.rsa import generate_key_pair
from minitls.handshake.initiator import Initiator
from minitls.handshake.responder import Responder

TEST_SESSION_ID = "a1b2c3d4"


@pytest.fixture
def config():
    return HandshakeConfig(rsa_key_bits=256, dh_prime_bits=128)


@pytest.fixture
def signed_config():
    return HandshakeConfig(
        rsa_key_bits=256,
        dh_prime_bits=128,
        signed_certificates=True,
        require_signed_certificate=True,
    )


@pytest.fixture(scope="session")
def key_pair():
    return generate_key_pair(256)


@pytest.fixture
def responder(config, key_pair):
    party = Responder(config, session_id_factory=lambda: TEST_SESSION_ID)
    party.initialize(key_pair)
    return party


@pytest.fixture
def initiator(config):
    return Initiator(config)


@pytest.fixture
def complete_handshake():
    """Run every handshake step by direct calls and return the last Finished."""
    def run(initiator, responder):
        server_hello, certificate = responder.handle_hello(initiator.send_hello())
        initiator.handle_server_messages(server_hello, certificate)
        finished = responder.handle_key_exchange(initiator.send_key_exchange())
        client_finished = initiator.handle_finished(finished)
        assert responder.handle_finished(client_finished)
        return client_finished
    return run
