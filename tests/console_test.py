import time

from minitls.common.protocol import HandshakeMessage, MessageType
from minitls.common.transport import MemoryChannel
from minitls.console import chat_mode, error, reporter, tagged


def scripted(lines):
    feed = iter(lines)
    return lambda prompt: next(feed)


def test_prefix_helpers():
    assert "SERVER: " in tagged("SERVER", "ready")
    assert error("boom").startswith("\033[1;31mError: boom")


def test_reporter_prints_tagged_lines(capsys):
    reporter("CLIENT")("Sent HELLO")
    out = capsys.readouterr().out
    assert "CLIENT: " in out
    assert "Sent HELLO" in out


def test_chat_sends_encrypted_lines_until_quit(initiator, responder, complete_handshake, capsys):
    complete_handshake(initiator, responder)
    client_channel, server_channel = MemoryChannel.pair(timeout=5)

    chat_mode(initiator, client_channel, "CLIENT", "SERVER",
              read_line=scripted(["hello there", "   ", "quit"]))

    record = server_channel.receive()
    assert record.type is MessageType.APPLICATION_DATA
    assert responder.receive_data(record) == "hello there"
    assert server_channel.receive() is None
    assert "Encrypted and sent!" in capsys.readouterr().out


def test_chat_treats_end_of_input_as_quit(initiator, responder, complete_handshake):
    complete_handshake(initiator, responder)
    client_channel, server_channel = MemoryChannel.pair(timeout=5)

    def closed_stdin(prompt):
        raise EOFError

    chat_mode(initiator, client_channel, "CLIENT", "SERVER", read_line=closed_stdin)
    assert server_channel.receive() is None


def test_chat_displays_peer_messages(initiator, responder, complete_handshake, capsys):
    complete_handshake(initiator, responder)
    client_channel, server_channel = MemoryChannel.pair(timeout=5)
    server_channel.send(responder.send_data("hi from server"))
    server_channel.send(HandshakeMessage(type=MessageType.ERROR, text="PROTOCOL: going away"))

    captured = []

    def wait_for_peer(prompt):
        seen = ""
        deadline = time.monotonic() + 5
        while "going away" not in seen and time.monotonic() < deadline:
            seen += capsys.readouterr().out
            time.sleep(0.01)
        captured.append(seen)
        return "quit"

    chat_mode(initiator, client_channel, "CLIENT", "SERVER", read_line=wait_for_peer)

    assert "hi from server" in captured[0]
    assert "SERVER reported: PROTOCOL: going away" in captured[0]
