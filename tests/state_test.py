import pytest

from minitls.common.errors import InvalidStateError
from minitls.crypto.kdf import SessionKeys
from minitls.handshake.state import TRANSITIONS, HandshakeState, Phase, can_transition

KEYS = SessionKeys(encryption_key=bytes(16), mac_key=bytes(16))

INITIATOR_PATH = [
    Phase.HELLO_SENT,
    Phase.SERVER_HELLO_RECEIVED,
    Phase.CERTIFICATE_RECEIVED,
    Phase.KEY_EXCHANGE_SENT,
    Phase.FINISHED_RECEIVED,
    Phase.HANDSHAKE_COMPLETE,
]
RESPONDER_PATH = [
    Phase.HELLO_RECEIVED,
    Phase.KEY_EXCHANGE_RECEIVED,
    Phase.FINISHED_SENT,
    Phase.HANDSHAKE_COMPLETE,
]


def walk(state, path):
    for phase in path:
        if phase is Phase.KEY_EXCHANGE_SENT or phase is Phase.KEY_EXCHANGE_RECEIVED:
            state.session_keys = KEYS
        state.transition_to(phase)


def test_starts_idle():
    state = HandshakeState()
    assert state.phase is Phase.IDLE
    assert state.history == []
    assert not state.is_handshake_complete


@pytest.mark.parametrize("path", [INITIATOR_PATH, RESPONDER_PATH])
def test_full_paths(path):
    state = HandshakeState()
    walk(state, path)
    assert state.is_handshake_complete
    assert [new for _, new in state.history] == path
    assert state.history[0] == (Phase.IDLE, path[0])


def test_illegal_transition():
    state = HandshakeState()
    with pytest.raises(InvalidStateError, match="illegal transition"):
        state.transition_to(Phase.FINISHED_SENT)
    assert state.phase is Phase.IDLE


def test_keyed_phase_requires_session_keys():
    state = HandshakeState()
    walk(state, INITIATOR_PATH[:3])
    with pytest.raises(InvalidStateError, match="without session keys"):
        state.transition_to(Phase.KEY_EXCHANGE_SENT)
    state.session_keys = KEYS
    state.transition_to(Phase.KEY_EXCHANGE_SENT)


def test_error_reachable_from_every_non_terminal_phase():
    for phase in TRANSITIONS:
        expected = phase not in (Phase.HANDSHAKE_COMPLETE, Phase.ERROR)
        assert can_transition(phase, Phase.ERROR) == expected


def test_fail():
    state = HandshakeState()
    state.transition_to(Phase.HELLO_SENT)
    state.fail()
    assert state.is_failed
    state.fail()
    assert state.history[-1] == (Phase.HELLO_SENT, Phase.ERROR)
    with pytest.raises(InvalidStateError):
        state.transition_to(Phase.SERVER_HELLO_RECEIVED)


def test_fail_after_completion_is_ignored():
    state = HandshakeState()
    walk(state, RESPONDER_PATH)
    state.fail()
    assert state.is_handshake_complete


def test_require_phase():
    state = HandshakeState()
    state.require_phase(Phase.IDLE, Phase.HELLO_SENT)
    with pytest.raises(InvalidStateError, match="expected phase HELLO_SENT"):
        state.require_phase(Phase.HELLO_SENT)


def test_encryption_key_requires_keys():
    state = HandshakeState()
    with pytest.raises(InvalidStateError):
        state.encryption_key
    state.session_keys = KEYS
    assert state.encryption_key == bytes(16)


def test_repr_does_not_leak_secrets():
    state = HandshakeState()
    state.shared_secret = 1234567890123
    assert "1234567890123" not in repr(state)
    assert "has_shared_secret=True" in repr(state)
