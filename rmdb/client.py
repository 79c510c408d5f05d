"""Interactive command-line client for the database server.

Commands are read line by line, sent to the server terminated by a NUL
byte, and the server's reply (up to the first NUL byte) is printed.
"""

from __future__ import annotations

import argparse
import re
import socket
import sys
from collections.abc import Iterable, Iterator
from typing import Optional, TextIO

try:  # line editing and history for input(), where the platform has it
    import readline  # noqa: F401
except ImportError:  # pragma: no cover - platform dependent
    readline = None

MAX_MEM_BUFFER_SIZE = 8192
PORT_DEFAULT = 8765
DEFAULT_HOST = "127.0.0.1"
PROMPT = "Rucbase> "

_EXIT_COMMANDS = frozenset({"exit", "exit;", "bye", "bye;"})


def is_exit_command(command: str) -> bool:
    """Return True if the command asks the client to quit."""
    return command in _EXIT_COMMANDS


def connect_unix(path: str) -> socket.socket:
    """Connect to the server through a Unix domain socket."""
    try:
        sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    except OSError as exc:
        raise ConnectionError(f"failed to create unix socket. {exc.strerror or exc}") from exc
    try:
        sock.connect(path)
    except OSError as exc:
        sock.close()
        raise ConnectionError(
            f"failed to connect to server. unix socket path '{path}'. error {exc.strerror or exc}"
        ) from exc
    return sock


def connect_tcp(host: str, port: int) -> socket.socket:
    """Connect to the server over IPv4 TCP."""
    try:
        address = socket.gethostbyname(host)
    except OSError as exc:
        raise ConnectionError(f"gethostbyname failed. errmsg={exc.errno}:{exc.strerror or exc}") from exc
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    except OSError as exc:
        raise ConnectionError(f"create socket error. errmsg={exc.errno}:{exc.strerror or exc}") from exc
    try:
        sock.connect((address, port))
    except OverflowError as exc:
        sock.close()
        raise ConnectionError(f"Failed to connect. errmsg={exc}") from exc
    except OSError as exc:
        sock.close()
        raise ConnectionError(f"Failed to connect. errmsg={exc.errno}:{exc.strerror or exc}") from exc
    return sock


def read_reply(sock: socket.socket) -> Optional[str]:
    """Receive one reply; return its text up to the first NUL, or None if the peer closed."""
    data = sock.recv(MAX_MEM_BUFFER_SIZE)
    if not data:
        return None
    text, _, _ = data.partition(b"\0")
    return text.decode("utf-8", errors="replace")


def run_session(sock: socket.socket, lines: Iterable[str], out: TextIO) -> int:
    """Send each non-empty line as a command and write the replies to ``out``.

    Stops at an exit command, at the end of ``lines`` or when the connection
    ends. Returns the number of commands sent. A failed send raises OSError.
    """
    sent = 0
    for line in lines:
        command = line.rstrip("\r\n")
        if not command:
            continue
        if is_exit_command(command):
            out.write("The client will be closed.\n")
            break
        sock.sendall(command.encode("utf-8") + b"\0")
        sent += 1
        try:
            reply = read_reply(sock)
        except OSError as exc:
            sys.stderr.write(f"Connection was broken: {exc.strerror or exc}\n")
            break
        if reply is None:
            out.write("Connection has been closed\n")
            break
        out.write(reply)
        out.flush()
    return sent


def _parse_port(text: str) -> int:
    """Read a leading decimal integer, yielding 0 when there is none."""
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def _prompt_lines(prompt: str) -> Iterator[str]:
    while True:
        try:
            yield input(prompt)
        except EOFError:
            return


def main(argv: Optional[list[str]] = None) -> int:
    """Run the interactive client; return the process exit status."""
    parser = argparse.ArgumentParser(prog="rmdb-client", add_help=False)
    parser.add_argument("-s", dest="unix_socket", default=None)
    parser.add_argument("-h", dest="host", default=DEFAULT_HOST)
    parser.add_argument("-p", dest="port", default=str(PORT_DEFAULT))
    args, _ = parser.parse_known_args(argv)

    try:
        if args.unix_socket is not None:
            sock = connect_unix(args.unix_socket)
        else:
            sock = connect_tcp(args.host, _parse_port(args.port))
    except ConnectionError as exc:
        sys.stderr.write(f"{exc}\n")
        return 1

    with sock:
        try:
            run_session(sock, _prompt_lines(PROMPT), sys.stdout)
        except OSError as exc:
            sys.stderr.write(f"send error: {exc.errno}:{exc.strerror or exc} \n\n")
            return 1
    sys.stdout.write("Bye.\n")
    return 0


if __name__ == "__main__":
    sys.exit(main())