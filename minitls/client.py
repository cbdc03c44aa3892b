"""
TLS Handshake Initiator
Connects to the responder, runs the initiator side of the handshake and
switches to encrypted chat.
"""

import argparse

from minitls.common.config import HandshakeConfig
from minitls.common.errors import HandshakeError
from minitls.common.transport import SocketChannel
from minitls.console import (
    chat_mode, error, print_header, reporter, step_prompt, success, tagged
)
from minitls.handshake.initiator import Initiator
from minitls.handshake.session import run_initiator_handshake

ROLE = "CLIENT"


def parse_arguments(config: HandshakeConfig):
    """Handle command-line argument parsing."""
    arg_parser = argparse.ArgumentParser(description="TLS handshake initiator")
    arg_parser.add_argument("--host", default=config.server_host,
                            help=f"Server host (default: {config.server_host})")
    arg_parser.add_argument("--port", type=int, default=config.server_port,
                            help=f"Server port (default: {config.server_port})")
    arg_parser.add_argument("--step", action="store_true",
                            help="Pause for ENTER before each handshake phase")
    return arg_parser.parse_args()


def run_client():
    """Main client application entry point."""
    config = HandshakeConfig.from_env()
    args = parse_arguments(config)

    print_header(ROLE)
    try:
        channel = SocketChannel.connect(args.host, args.port)
    except OSError as e:
        print(error(f"Could not connect to {args.host}:{args.port} - {e}"))
        return

    print(tagged(ROLE, f"Connected to server at {args.host}:{args.port}"))
    initiator = Initiator(config)
    pause = step_prompt(ROLE) if args.step else (lambda _: None)

    try:
        run_initiator_handshake(initiator, channel, reporter(ROLE), pause)
        print(success("------- SECURE CONNECTION ESTABLISHED! -------"))
        chat_mode(initiator, channel, ROLE, "SERVER")
    except HandshakeError as e:
        print(error(f"Handshake failed: {e}"))
    except (ConnectionError, OSError) as e:
        print(error(f"Connection error: {e}"))
    finally:
        channel.close()


if __name__ == "__main__":
    run_client()
