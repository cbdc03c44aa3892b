"""Terminal helpers: colored role prefixes, step prompts and the encrypted chat loop."""

import threading
from typing import Callable, Union

from minitls.common.errors import MalformedEncoding, ProtocolViolation
from minitls.common.protocol import MessageType
from minitls.common.transport import Channel
from minitls.handshake.initiator import Initiator
from minitls.handshake.responder import Responder

RESET = "\033[0m"
BLUE = "\033[0;34m"
MAGENTA = "\033[0;35m"
CYAN = "\033[0;36m"
BOLD_GREEN = "\033[1;32m"
BOLD_RED = "\033[1;31m"
BOLD_CYAN = "\033[1;36m"
BOLD_MAGENTA = "\033[1;35m"

ROLE_COLORS = {"SERVER": MAGENTA, "CLIENT": CYAN}
ROLE_BOLD_COLORS = {"SERVER": BOLD_MAGENTA, "CLIENT": BOLD_CYAN}


def tagged(role: str, msg: str) -> str:
    return f"{ROLE_COLORS.get(role, BLUE)}{role}: {RESET}{msg}"


def success(msg: str) -> str:
    return f"{BOLD_GREEN}{msg}{RESET}"


def error(msg: str) -> str:
    return f"{BOLD_RED}Error: {msg}{RESET}"


def info(msg: str) -> str:
    return f"{BLUE}{msg}{RESET}"


def print_header(role: str) -> None:
    color = ROLE_BOLD_COLORS.get(role, BOLD_GREEN)
    print(f"{color}--------------- TLS HANDSHAKE PROTOCOL ---------------{RESET}")
    print(f"{color}-------------------- {role} TERMINAL --------------------{RESET}")


def reporter(role: str) -> Callable[[str], None]:
    """Print handshake progress lines with the role prefix."""
    def report(line: str) -> None:
        print(tagged(role, line))
    return report


def step_prompt(role: str) -> Callable[[str], None]:
    """Block on ENTER before each handshake phase."""
    color = ROLE_COLORS.get(role, BLUE)

    def pause(message: str) -> None:
        input(f"\n{color}-> {RESET}{message}: ")
    return pause


def chat_mode(party: Union[Initiator, Responder], channel: Channel, role: str,
              peer_role: str, read_line: Callable[[str], str] = input) -> None:
    """
    Interactive encrypted chat after a completed handshake.

    The calling thread owns the party and sends; a daemon thread receives
    and decrypts. Typing 'quit' sends the close sentinel.
    """
    color = ROLE_BOLD_COLORS.get(role, BOLD_GREEN)
    peer_color = ROLE_BOLD_COLORS.get(peer_role, BOLD_GREEN)
    peer_gone = threading.Event()

    print(f"{color}------------- SECURE CHAT MODE ACTIVATED -------------{RESET}")
    print(info("Type your messages and press ENTER to send"))
    print(info("Type 'quit' to exit\n"))

    def receive_loop() -> None:
        while True:
            try:
                message = channel.receive()
            except (OSError, MalformedEncoding) as e:
                print(error(f"Receive failed: {e}"))
                break
            if message is None:
                print("\n" + info(f"{peer_role} disconnected."))
                break
            if message.type is MessageType.ERROR:
                print("\n" + error(f"{peer_role} reported: {message.text}"))
                break
            try:
                text = party.receive_data(message)
            except ProtocolViolation as e:
                print("\n" + error(str(e)))
                continue
            print(f"\n{peer_color}{peer_role}{RESET}: {text}")
            print(f"{color}{role}{RESET}: ", end="", flush=True)
        peer_gone.set()

    receiver = threading.Thread(target=receive_loop, daemon=True)
    receiver.start()

    while not peer_gone.is_set():
        try:
            line = read_line(f"{color}{role}{RESET}: ")
        except EOFError:
            line = "quit"

        if line.strip().lower() == "quit":
            try:
                channel.send(None)
            except OSError:
                pass  # peer already closed
            print(info("Closing connection..."))
            break
        if not line.strip() or peer_gone.is_set():
            continue

        try:
            channel.send(party.send_data(line))
        except OSError as e:
            print(error(f"Failed to send: {e}"))
            break
        print(success("Encrypted and sent!"))

    print(success("Connection closed. Goodbye!"))
