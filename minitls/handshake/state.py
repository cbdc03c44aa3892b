"""Per-party handshake session record and the phase transition table."""

from enum import Enum
from typing import Dict, FrozenSet, List, Optional, Tuple

from minitls.common.errors import InvalidStateError
from minitls.crypto.dh import DHParameters
from minitls.crypto.kdf import SessionKeys
from minitls.crypto.rsa import PublicKey, RSAKeyPair


class Phase(str, Enum):
    IDLE = "IDLE"
    HELLO_SENT = "HELLO_SENT"
    HELLO_RECEIVED = "HELLO_RECEIVED"
    SERVER_HELLO_RECEIVED = "SERVER_HELLO_RECEIVED"
    CERTIFICATE_RECEIVED = "CERTIFICATE_RECEIVED"
    KEY_EXCHANGE_SENT = "KEY_EXCHANGE_SENT"
    KEY_EXCHANGE_RECEIVED = "KEY_EXCHANGE_RECEIVED"
    FINISHED_SENT = "FINISHED_SENT"
    FINISHED_RECEIVED = "FINISHED_RECEIVED"
    HANDSHAKE_COMPLETE = "HANDSHAKE_COMPLETE"
    ERROR = "ERROR"


TERMINAL_PHASES: FrozenSet[Phase] = frozenset({Phase.HANDSHAKE_COMPLETE, Phase.ERROR})

# Phases that may only be entered once session keys are installed
KEYED_PHASES: FrozenSet[Phase] = frozenset({
    Phase.KEY_EXCHANGE_SENT,
    Phase.KEY_EXCHANGE_RECEIVED,
    Phase.FINISHED_SENT,
    Phase.FINISHED_RECEIVED,
    Phase.HANDSHAKE_COMPLETE,
})

TRANSITIONS: Dict[Phase, FrozenSet[Phase]] = {
    Phase.IDLE: frozenset({Phase.HELLO_SENT, Phase.HELLO_RECEIVED}),
    # initiator
    Phase.HELLO_SENT: frozenset({Phase.SERVER_HELLO_RECEIVED}),
    Phase.SERVER_HELLO_RECEIVED: frozenset({Phase.CERTIFICATE_RECEIVED}),
    Phase.CERTIFICATE_RECEIVED: frozenset({Phase.KEY_EXCHANGE_SENT}),
    Phase.KEY_EXCHANGE_SENT: frozenset({Phase.FINISHED_RECEIVED}),
    Phase.FINISHED_RECEIVED: frozenset({Phase.HANDSHAKE_COMPLETE}),
    # responder
    Phase.HELLO_RECEIVED: frozenset({Phase.KEY_EXCHANGE_RECEIVED}),
    Phase.KEY_EXCHANGE_RECEIVED: frozenset({Phase.FINISHED_SENT}),
    Phase.FINISHED_SENT: frozenset({Phase.HANDSHAKE_COMPLETE}),
    Phase.HANDSHAKE_COMPLETE: frozenset(),
    Phase.ERROR: frozenset(),
}


def can_transition(current: Phase, new: Phase) -> bool:
    """True if new is reachable from current in one step."""
    if new is Phase.ERROR:
        return current not in TERMINAL_PHASES
    return new in TRANSITIONS[current]


class HandshakeState:
    """
    Mutable session record owned by exactly one party.

    Holds the current phase, long-term and ephemeral key material, the
    derived secrets, both random nonces and the session id. Every phase
    change goes through transition_to(), which enforces the transition
    table and refuses keyed phases until session keys are installed.
    """

    def __init__(self) -> None:
        self.phase = Phase.IDLE
        self.history: List[Tuple[Phase, Phase]] = []

        self.rsa_key_pair: Optional[RSAKeyPair] = None  # responder identity
        self.peer_rsa_public_key: Optional[PublicKey] = None  # initiator's view

        self.dh_params: Optional[DHParameters] = None
        self.client_dh_public: Optional[int] = None
        self.server_dh_public: Optional[int] = None
        self.shared_secret: Optional[int] = None
        self.session_keys: Optional[SessionKeys] = None

        self.client_random: Optional[bytes] = None
        self.server_random: Optional[bytes] = None
        self.session_id: Optional[str] = None

    def transition_to(self, new_phase: Phase) -> None:
        """
        Move to new_phase.

        Raises:
            InvalidStateError: If the transition is not in the table, or
                new_phase is keyed and no session keys are installed
        """
        if not can_transition(self.phase, new_phase):
            raise InvalidStateError(
                f"STATE: illegal transition {self.phase.value} -> {new_phase.value}"
            )
        if new_phase in KEYED_PHASES and self.session_keys is None:
            raise InvalidStateError(
                f"STATE: cannot enter {new_phase.value} without session keys"
            )
        self.history.append((self.phase, new_phase))
        self.phase = new_phase

    def fail(self) -> None:
        """Move to ERROR unless already terminal."""
        if self.phase not in TERMINAL_PHASES:
            self.transition_to(Phase.ERROR)

    def require_phase(self, *phases: Phase) -> None:
        """
        Raises:
            InvalidStateError: If the current phase is not one of phases
        """
        if self.phase not in phases:
            expected = " or ".join(p.value for p in phases)
            raise InvalidStateError(
                f"STATE: expected phase {expected}, current phase is {self.phase.value}"
            )

    @property
    def is_handshake_complete(self) -> bool:
        return self.phase is Phase.HANDSHAKE_COMPLETE

    @property
    def is_failed(self) -> bool:
        return self.phase is Phase.ERROR

    @property
    def encryption_key(self) -> bytes:
        if self.session_keys is None:
            raise InvalidStateError("STATE: session keys not derived yet")
        return self.session_keys.encryption_key

    def __repr__(self) -> str:
        return (
            f"HandshakeState(phase={self.phase.value}, session_id={self.session_id!r}, "
            f"has_shared_secret={self.shared_secret is not None}, "
            f"has_session_keys={self.session_keys is not None})"
        )
