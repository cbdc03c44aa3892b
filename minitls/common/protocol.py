"""Pydantic models for handshake messages and their JSON line wire format."""

import json
from enum import Enum
from typing import Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from minitls.common.errors import MalformedEncoding
from minitls.common.utils import b64d, b64e, to_hex


class MessageType(str, Enum):
    """Handshake and record message types."""
    HELLO = "hello"
    SERVER_HELLO = "server_hello"
    CERTIFICATE = "certificate"
    KEY_EXCHANGE = "key_exchange"
    FINISHED = "finished"
    APPLICATION_DATA = "application_data"
    ERROR = "error"


class HandshakeMessage(BaseModel):
    """Tagged envelope: type plus optional binary payload and optional text."""
    model_config = ConfigDict(frozen=True)

    type: MessageType
    payload: Optional[bytes] = None
    text: Optional[str] = None

    def __repr__(self) -> str:
        parts = [f"type={self.type.name}"]
        if self.payload is not None:
            parts.append(f"payload={to_hex(self.payload, 32)}")
        if self.text is not None:
            parts.append(f"text={self.text!r}")
        return f"HandshakeMessage({', '.join(parts)})"

    __str__ = __repr__


class WireMessage(BaseModel):
    """JSON form of a HandshakeMessage."""
    type: MessageType
    payload: Optional[str] = Field(None, description="Base64 encoded payload")
    text: Optional[str] = None


class WireClose(BaseModel):
    """Graceful close sentinel."""
    type: Literal["close"]


class WireEnvelope(BaseModel):
    message: Union[WireClose, WireMessage]


def encode_message(message: Optional[HandshakeMessage]) -> bytes:
    """
    Serialize a message to one JSON line.

    Args:
        message: Message to send, or None for the close sentinel

    Returns:
        UTF-8 JSON terminated by a newline
    """
    if message is None:
        wire = WireClose(type="close")
    else:
        wire = WireMessage(
            type=message.type,
            payload=b64e(message.payload) if message.payload is not None else None,
            text=message.text
        )
    return json.dumps(wire.model_dump(mode="json")).encode('utf-8') + b'\n'


def decode_message(line: bytes) -> Optional[HandshakeMessage]:
    """
    Deserialize one JSON line produced by encode_message().

    Returns:
        HandshakeMessage, or None for the close sentinel

    Raises:
        MalformedEncoding: If the line is not valid JSON, fails schema
            validation, or carries an invalid base64 payload
    """
    try:
        data = json.loads(line.decode('utf-8'))
        wire = WireEnvelope.model_validate({"message": data}).message
    except (UnicodeDecodeError, json.JSONDecodeError, ValidationError) as e:
        raise MalformedEncoding(f"BAD_MESSAGE: {e}") from e

    if isinstance(wire, WireClose):
        return None

    try:
        payload = b64d(wire.payload) if wire.payload is not None else None
    except ValueError as e:
        raise MalformedEncoding(f"BAD_MESSAGE: invalid payload encoding - {e}") from e

    return HandshakeMessage(type=wire.type, payload=payload, text=wire.text)
