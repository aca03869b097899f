"""Game client: connecting to the server and waiting for the game to start."""

from __future__ import annotations

import argparse
import ipaddress
import re
import socket
import sys
import time
from collections import deque
from dataclasses import dataclass, field
from typing import Callable, Optional

from mazefps.errors import ClientError, ServerNotRespondingError
from mazefps.netutil import get_local_ip
from mazefps.protocol import DecodeError, Join, StartGame, decode_message, encode_message
from mazefps.server import DEFAULT_PORT

_BUFFER_SIZE = 1024
_CONNECT_TIMEOUT = 5.0
_PORT_PATTERN = re.compile(r"\+?[0-9]+")


def _is_ipv6(host: str) -> bool:
    try:
        return ipaddress.ip_address(host).version == 6
    except ValueError:
        return False


class Client:
    """A named player about to join a server."""

    def __init__(self, name: str) -> None:
        self.name = name

    def connect(self, address: tuple, timeout: float = _CONNECT_TIMEOUT) -> socket.socket:
        """Send a join request and return the connected socket once the server answers."""
        host, port = address[0], address[1]
        v6 = _is_ipv6(str(host))
        sock = socket.socket(socket.AF_INET6 if v6 else socket.AF_INET, socket.SOCK_DGRAM)
        try:
            sock.bind(("::" if v6 else "0.0.0.0", 0))
            sock.connect((host, port))
            sock.settimeout(timeout)
            try:
                sock.send(encode_message(Join(name=self.name)))
            except TimeoutError as exc:
                raise ServerNotRespondingError() from exc
            try:
                sock.recv(_BUFFER_SIZE)
            except OSError as exc:
                raise ServerNotRespondingError() from exc
        except BaseException:
            sock.close()
            raise
        sock.settimeout(None)
        return sock


@dataclass
class NetworkResource:
    """The connected socket with a queue of outgoing game messages."""

    socket: socket.socket
    send_queue: deque = field(default_factory=deque)
    last_sent: float = field(default_factory=time.monotonic)

    def send(self, message) -> None:
        """Queue ``message`` for sending."""
        self.send_queue.append(message)


def _invalid_address(text: str) -> ValueError:
    return ValueError(f"Adresse invalide: {text!r}")


def parse_server_address(text: str, default_ip) -> tuple[str, int]:
    """Parse ``ip:port`` or ``[ipv6]:port``; blank text means the default IP on the default port."""
    stripped = text.strip()
    if not stripped:
        return str(default_ip), DEFAULT_PORT
    if stripped.startswith("["):
        host, sep, port_text = stripped[1:].partition("]:")
        version = 6
    else:
        host, sep, port_text = stripped.rpartition(":")
        version = 4
    if not sep or not _PORT_PATTERN.fullmatch(port_text):
        raise _invalid_address(stripped)
    port = int(port_text)
    if port > 65535:
        raise _invalid_address(stripped)
    try:
        ip = ipaddress.ip_address(host)
    except ValueError:
        raise _invalid_address(stripped) from None
    if ip.version != version:
        raise _invalid_address(stripped)
    return str(ip), port


def _ask(prompt: str) -> str:
    try:
        return input(prompt)
    except EOFError:
        return ""


def input_connexion(ask: Optional[Callable[[str], str]] = None) -> tuple[str, tuple[str, int]]:
    """Ask for the player's name and the server address."""
    ask = ask or _ask
    name = ask("Entrez votre nom : ").strip()
    default_ip = get_local_ip()
    address = ask(f"Entrez l'adresse du serveur (defaut: {default_ip}:{DEFAULT_PORT}) : ")
    return name, parse_server_address(address, default_ip)


def wait_for_start(sock: socket.socket) -> StartGame:
    """Block until the server sends the start of the game, ignoring anything else."""
    while True:
        try:
            data = sock.recv(_BUFFER_SIZE)
        except (TimeoutError, BlockingIOError, InterruptedError, ConnectionError):
            continue
        try:
            message = decode_message(data)
        except DecodeError:
            continue
        if isinstance(message, StartGame):
            return message


def main(argv=None) -> int:
    """Command-line entry point of the game client."""
    argparse.ArgumentParser(prog="mazefps-client", description="Join a maze shooter server.").parse_args(argv)
    try:
        name, address = input_connexion()
    except (ValueError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    try:
        sock = Client(name).connect(address)
    except (ClientError, OSError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        return 1
    with sock:
        print("Wait for the number of player to be completed !")
        start = wait_for_start(sock)
    print(f"Game started as {start.player.name} at {tuple(start.player.position)}")
    for enemy in start.enemies:
        print(f"Enemy {enemy.name} at {tuple(enemy.position)}")
    return 0


if __name__ == "__main__":
    sys.exit(main())