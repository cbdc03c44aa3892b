"""
Handshake Demo
Runs both parties in one process over an in-memory channel pair, then
exchanges a few encrypted records and prints what each side derived.
"""

import argparse
import threading

from minitls.common.config import HandshakeConfig
from minitls.common.errors import HandshakeError
from minitls.common.transport import MemoryChannel
from minitls.common.utils import to_hex
from minitls.console import error, info, reporter, success, tagged
from minitls.crypto.cipher import available_ciphers
from minitls.handshake.initiator import Initiator
from minitls.handshake.responder import Responder
from minitls.handshake.session import run_initiator_handshake, run_responder_handshake


def run_responder_side(responder: Responder, channel: MemoryChannel, outcome: dict):
    """Thread body for the responder; records the result in outcome."""
    try:
        outcome["verified"] = run_responder_handshake(responder, channel, reporter("SERVER"))
        if not outcome["verified"]:
            return
        for _ in range(2):
            record = channel.receive()
            if record is None:
                break
            text = responder.receive_data(record)
            print(tagged("SERVER", f"Decrypted: {text}"))
            channel.send(responder.send_data(f"ACK {text}"))
    except HandshakeError as e:
        outcome["error"] = e


def compare_sessions(initiator: Initiator, responder: Responder):
    """Print both parties' derived values side by side."""
    client_state, server_state = initiator.state, responder.state
    print(info("\n------------------ SESSION SUMMARY ------------------"))
    print(f"Session ID:        {client_state.session_id} / {server_state.session_id}")
    print(f"Shared secrets:    {'MATCH' if client_state.shared_secret == server_state.shared_secret else 'DIFFER'}")
    print(f"Encryption key:    {to_hex(client_state.encryption_key, 32)}")
    print(f"MAC key:           {to_hex(client_state.session_keys.mac_key, 32)}")
    print(f"Final phases:      {client_state.phase.value} / {server_state.phase.value}")


def run_demo(config: HandshakeConfig, messages):
    """Main demo routine."""
    print(info(f"RSA {config.rsa_key_bits}-bit, DH {config.dh_prime_bits}-bit, cipher {config.cipher}"))

    client_channel, server_channel = MemoryChannel.pair(timeout=120)
    responder = Responder(config)
    responder.initialize()
    initiator = Initiator(config)

    outcome = {}
    server_thread = threading.Thread(
        target=run_responder_side, args=(responder, server_channel, outcome), daemon=True
    )
    server_thread.start()

    try:
        run_initiator_handshake(initiator, client_channel, reporter("CLIENT"))
        print(success("------- SECURE CONNECTION ESTABLISHED! -------"))
        for text in messages:
            client_channel.send(initiator.send_data(text))
            print(tagged("CLIENT", f"Sent encrypted: {text}"))
            reply = client_channel.receive()
            print(tagged("CLIENT", f"Reply: {initiator.receive_data(reply)}"))
        client_channel.send(None)
    except HandshakeError as e:
        print(error(f"Handshake failed: {e}"))
    finally:
        server_thread.join(timeout=10)

    if "error" in outcome:
        print(error(f"Responder failed: {outcome['error']}"))
    elif outcome.get("verified"):
        compare_sessions(initiator, responder)


def parse_arguments():
    """Handle command-line argument parsing."""
    arg_parser = argparse.ArgumentParser(
        description="Run a complete handshake between two in-process parties"
    )
    arg_parser.add_argument(
        "--rsa-bits",
        type=int,
        default=512,
        help="RSA modulus size (default: 512)"
    )
    arg_parser.add_argument(
        "--dh-bits",
        type=int,
        default=512,
        help="DH prime size (default: 512)"
    )
    arg_parser.add_argument(
        "--cipher",
        default="xor",
        choices=sorted(available_ciphers()),
        help="Record cipher (default: xor)"
    )
    arg_parser.add_argument(
        "--signed",
        action="store_true",
        help="Sign the certificate and require the signature"
    )
    return arg_parser.parse_args()


if __name__ == "__main__":
    parsed_args = parse_arguments()
    demo_config = HandshakeConfig(
        rsa_key_bits=parsed_args.rsa_bits,
        dh_prime_bits=parsed_args.dh_bits,
        cipher=parsed_args.cipher,
        signed_certificates=parsed_args.signed,
        require_signed_certificate=parsed_args.signed,
    )
    run_demo(demo_config, ["Hello, Server!", "This is a secret message."])
