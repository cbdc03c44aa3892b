"""
Duplex message channels carrying HandshakeMessage objects.

Every channel honours send(message) / receive() -> message. Sending None
signals a graceful close, and receive() returns None once the peer has
closed.
"""

import queue
import socket
from typing import Optional, Tuple

from minitls.common.errors import MalformedEncoding
from minitls.common.protocol import HandshakeMessage, decode_message, encode_message

RECV_CHUNK = 4096
MAX_LINE_LENGTH = 64 * 1024


class Channel:
    def send(self, message: Optional[HandshakeMessage]) -> None:
        raise NotImplementedError

    def receive(self) -> Optional[HandshakeMessage]:
        raise NotImplementedError

    def close(self) -> None:
        pass

    def __enter__(self) -> "Channel":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class SocketChannel(Channel):
    """Newline-delimited JSON messages over a connected TCP socket."""

    def __init__(self, connection: socket.socket) -> None:
        self.connection = connection
        self._buffer = b''
        self._closed = False

    @classmethod
    def connect(cls, host: str, port: int) -> "SocketChannel":
        return cls(socket.create_connection((host, port)))

    def send(self, message: Optional[HandshakeMessage]) -> None:
        """Serialize and send one message over the socket."""
        self.connection.sendall(encode_message(message))

    def receive(self) -> Optional[HandshakeMessage]:
        """
        Receive and deserialize one message.

        Returns:
            The message, or None on the close sentinel or a clean EOF

        Raises:
            ConnectionError: If the connection drops in the middle of a message
            MalformedEncoding: If the line cannot be decoded or exceeds
                MAX_LINE_LENGTH bytes
        """
        if self._closed:
            return None

        while b'\n' not in self._buffer:
            received_chunk = self.connection.recv(RECV_CHUNK)
            if not received_chunk:
                self._closed = True
                if self._buffer:
                    raise ConnectionError("Connection closed mid-message")
                return None
            self._buffer += received_chunk
            if b'\n' not in self._buffer and len(self._buffer) > MAX_LINE_LENGTH:
                self._line_too_long()

        line, self._buffer = self._buffer.split(b'\n', 1)
        if len(line) > MAX_LINE_LENGTH:
            self._line_too_long()
        message = decode_message(line)
        if message is None:
            self._closed = True
        return message

    def _line_too_long(self) -> None:
        self._closed = True
        raise MalformedEncoding(f"BAD_MESSAGE: no line break within {MAX_LINE_LENGTH} bytes")

    def close(self) -> None:
        try:
            self.connection.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass  # already disconnected
        self.connection.close()


class MemoryChannel(Channel):
    """In-process endpoint backed by a pair of queues."""

    def __init__(self, inbox: queue.Queue, outbox: queue.Queue,
                 timeout: Optional[float] = None) -> None:
        self._inbox = inbox
        self._outbox = outbox
        self.timeout = timeout

    @classmethod
    def pair(cls, timeout: Optional[float] = None) -> Tuple["MemoryChannel", "MemoryChannel"]:
        """Two connected endpoints: what one sends the other receives."""
        a_to_b: queue.Queue = queue.Queue()
        b_to_a: queue.Queue = queue.Queue()
        return cls(b_to_a, a_to_b, timeout), cls(a_to_b, b_to_a, timeout)

    def send(self, message: Optional[HandshakeMessage]) -> None:
        self._outbox.put(message)

    def receive(self) -> Optional[HandshakeMessage]:
        """
        Raises:
            TimeoutError: If nothing arrives within the channel timeout
        """
        try:
            return self._inbox.get(timeout=self.timeout)
        except queue.Empty:
            raise TimeoutError(f"No message within {self.timeout} seconds") from None
