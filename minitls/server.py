"""
TLS Handshake Responder
Accepts TCP connections, runs the responder side of the handshake and
switches to encrypted chat once both Finished messages check out.
"""

import argparse
import socket

from minitls.common.config import HandshakeConfig
from minitls.common.errors import HandshakeError
from minitls.common.transport import SocketChannel
from minitls.console import (
    chat_mode, error, info, print_header, reporter, step_prompt, success, tagged
)
from minitls.crypto.rsa import RSAKeyPair, generate_key_pair
from minitls.handshake.responder import Responder
from minitls.handshake.session import run_responder_handshake

ROLE = "SERVER"


def create_identity(config: HandshakeConfig) -> RSAKeyPair:
    """Generate the long-term RSA identity shared by every session."""
    print(tagged(ROLE, f"Generating RSA keys ({config.rsa_key_bits}-bit)..."))
    key_pair = generate_key_pair(config.rsa_key_bits, config.primality_rounds)
    print(success(f"Server initialized with RSA keys: {key_pair.public_key!r}"))
    return key_pair


def handle_client_session(
    connection: socket.socket,
    client_address: tuple,
    config: HandshakeConfig,
    key_pair: RSAKeyPair,
    step: bool = False
):
    """Process one client session from handshake to disconnection."""
    print(tagged(ROLE, f"Client connected from {client_address}"))
    channel = SocketChannel(connection)
    responder = Responder(config)
    responder.initialize(key_pair)

    pause = step_prompt(ROLE) if step else (lambda _: None)
    try:
        if not run_responder_handshake(responder, channel, reporter(ROLE), pause):
            print(error("Handshake failed: initiator Finished did not verify"))
            return

        print(success("------- SECURE CONNECTION ESTABLISHED! -------"))
        chat_mode(responder, channel, ROLE, "CLIENT")
    except HandshakeError as e:
        print(error(f"Handshake failed: {e}"))
    except (ConnectionError, OSError) as e:
        print(error(f"Connection error: {e}"))
    finally:
        channel.close()
        print(info(f"Client {client_address} disconnected"))


def parse_arguments(config: HandshakeConfig):
    """Handle command-line argument parsing."""
    arg_parser = argparse.ArgumentParser(description="TLS handshake responder")
    arg_parser.add_argument("--host", default=config.server_host,
                            help=f"Bind address (default: {config.server_host})")
    arg_parser.add_argument("--port", type=int, default=config.server_port,
                            help=f"Bind port (default: {config.server_port})")
    arg_parser.add_argument("--step", action="store_true",
                            help="Pause for ENTER before each handshake phase")
    return arg_parser.parse_args()


def start_server():
    """Main server application entry point."""
    config = HandshakeConfig.from_env()
    args = parse_arguments(config)

    print_header(ROLE)
    key_pair = create_identity(config)

    listening_socket = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    listening_socket.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    listening_socket.bind((args.host, args.port))
    listening_socket.listen(1)

    print(tagged(ROLE, f"Listening on {args.host}:{args.port}"))

    try:
        while True:
            client_socket, client_address = listening_socket.accept()
            handle_client_session(client_socket, client_address, config, key_pair, args.step)
    except KeyboardInterrupt:
        print("\nServer shutting down...")
    finally:
        listening_socket.close()


if __name__ == "__main__":
    start_server()
