"""UDP game server: lobby, spawn positions and relaying of player updates."""

from __future__ import annotations

import argparse
import re
import socket
import sys
from typing import Callable, Optional

from mazefps.errors import InvalidClientError, InvalidMessageError, ServerConnectionError, ServerError
from mazefps.netutil import get_local_ip
from mazefps.protocol import (
    CommonPlayer,
    DeadPlayer,
    DecodeError,
    Join,
    PlayerUpdateReceiving,
    PlayerUpdateSending,
    StartGame,
    decode_message,
    encode_message,
)
from mazefps.vecmath import Vec3

DEFAULT_PORT = 8080
DEFAULT_PLAYER_COUNT = 2
MAX_PLAYER_COUNT = 10

# Spawn points handed out in join order; their number caps the lobby size.
POSITIONS: tuple[Vec3, ...] = (
    Vec3(-18.0, 0.0, 13.0),
    Vec3(-18.0, 0.0, -15.0),
    Vec3(-18.0, 0.0, 3.0),
    Vec3(-18.0, 0.0, 0.0),
    Vec3(-0.0, 0.0, 13.0),
    Vec3(3.0, 0.0, 13.0),
    Vec3(6.0, 0.0, 13.0),
    Vec3(9.0, 0.0, 13.0),
    Vec3(12.0, 0.0, 13.0),
    Vec3(15.0, 0.0, 13.0),
)

_BUFFER_SIZE = 1024
_SPAWN_LIFT = 1.5
_USIZE_MAX = 2**64 - 1
_COUNT_PATTERN = re.compile(r"\+?[0-9]+")

Address = tuple
SendFn = Callable[[bytes, Address], object]


def _format_addr(addr: Address) -> str:
    host, port = addr[0], addr[1]
    return f"[{host}]:{port}" if ":" in str(host) else f"{host}:{port}"


def _no_socket(payload: bytes, addr: Address) -> None:
    raise ServerError("the server socket is not open")


class Server:
    """Game lobby that assigns spawn points and relays player state."""

    def __init__(self, player_count: int = DEFAULT_PLAYER_COUNT, send: Optional[SendFn] = None) -> None:
        self.player_count = player_count
        self.is_game_started = False
        self.all_dead_players: list[str] = []
        self.clients: dict[Address, tuple[str, Vec3]] = {}
        self.address: Optional[Address] = None
        self._next_position = 0
        self._send: SendFn = send or _no_socket

    def add_dead_player_if_not_exists(self, names) -> None:
        """Record each name as dead, keeping the first-seen order."""
        for name in names:
            if name not in self.all_dead_players:
                self.all_dead_players.append(name)

    def dead_players_payload(self) -> bytes:
        """The encoded list of every player known to be dead."""
        return encode_message(DeadPlayer(all_dead_players=list(self.all_dead_players)))

    def broadcast(self, payload: bytes) -> None:
        """Send ``payload`` to every client; a failed send does not stop the others."""
        for addr in list(self.clients):
            try:
                self._send(payload, addr)
            except OSError as exc:
                print(f"Sending error to {_format_addr(addr)}: {exc}", file=sys.stderr)

    def handle_join(self, addr: Address, name: str) -> None:
        """Admit a player; once the lobby is full, send everyone the start of the game."""
        if self.is_game_started:
            return
        if not name.strip():
            raise InvalidClientError("Unauthorized empty name")
        if any(existing == name for existing, _ in self.clients.values()):
            raise InvalidClientError("Name already used")

        print(f"New connected customer: {name} from {_format_addr(addr)}")
        if self._next_position >= len(POSITIONS):
            raise InvalidClientError("Server is full")

        position = POSITIONS[self._next_position]
        self._next_position += 1
        self.clients[addr] = (name, position)

        self.broadcast(encode_message(Join(name=name)))

        if len(self.clients) == self.player_count:
            self.is_game_started = True
            self._send_start()

    def _send_start(self) -> None:
        for addr, (name, position) in self.clients.items():
            player = CommonPlayer(
                name=name,
                position=Vec3(position.x, position.y + _SPAWN_LIFT, position.z),
            )
            enemies = [
                CommonPlayer(name=other_name, position=other_position)
                for other_addr, (other_name, other_position) in self.clients.items()
                if other_addr != addr
            ]
            self._send(encode_message(StartGame(player=player, enemies=enemies)), addr)

    def handle_datagram(self, data: bytes, addr: Address) -> None:
        """Decode one datagram from ``addr`` and act on it."""
        try:
            message = decode_message(data)
        except DecodeError as exc:
            raise InvalidMessageError(addr) from exc

        match message:
            case Join(name=name):
                self.handle_join(addr, name)
            case PlayerUpdateSending(position=position, rotation=rotation, all_dead_players=dead):
                self.add_dead_player_if_not_exists(dead)
                try:
                    name, _ = self.clients[addr]
                except KeyError:
                    raise ServerError(f"update from unknown client {_format_addr(addr)}") from None
                update = PlayerUpdateReceiving(name=name, position=position, rotation=rotation)
                self.broadcast(encode_message(update))
            case _:
                raise ServerError(
                    f"unsupported message {type(message).__name__} from {_format_addr(addr)}"
                )

    def run(self, host: Optional[str] = None, port: int = DEFAULT_PORT) -> None:
        """Serve on ``host``:``port`` until a fatal error is raised.

        Without a host, the address of the interface that reaches the
        internet is used.
        """
        if host is None:
            try:
                host = str(get_local_ip())
            except OSError:
                host = "0.0.0.0"
        family = socket.AF_INET6 if ":" in host else socket.AF_INET
        try:
            sock = socket.socket(family, socket.SOCK_DGRAM)
        except OSError as exc:
            raise ServerConnectionError(exc) from exc

        with sock:
            try:
                sock.bind((host, port))
            except OSError as exc:
                raise ServerConnectionError(exc) from exc
            self.address = sock.getsockname()[:2]
            print(f"Server listens to {_format_addr(self.address)}")

            previous_send = self._send
            self._send = sock.sendto
            try:
                while True:
                    self.broadcast(self.dead_players_payload())
                    try:
                        data, addr = sock.recvfrom(_BUFFER_SIZE)
                        self.handle_datagram(data, addr[:2])
                    except (ServerError, OSError) as exc:
                        print(f"Error when processing the message: {exc}", file=sys.stderr)
                        if not getattr(exc, "recoverable", False):
                            raise
            finally:
                self._send = previous_send


def parse_player_count(text: str) -> int:
    """Read the lobby size; anything unreadable means the default of two."""
    stripped = text.strip()
    count = int(stripped) if _COUNT_PATTERN.fullmatch(stripped) else DEFAULT_PLAYER_COUNT
    if count > _USIZE_MAX:
        count = DEFAULT_PLAYER_COUNT
    if count > MAX_PLAYER_COUNT:
        raise InvalidClientError("Number of invalid players")
    return count


def start_server(text: Optional[str] = None) -> None:
    """Ask for the number of players (unless given) and serve forever."""
    if text is None:
        print(f"Enter the number of player: (Default {DEFAULT_PLAYER_COUNT})", end="", flush=True)
        text = sys.stdin.readline()
    count = parse_player_count(text)
    Server(count).run()


def main(argv=None) -> int:
    """Command-line entry point of the game server."""
    argparse.ArgumentParser(prog="mazefps-server", description="Run the maze shooter server.").parse_args(argv)
    try:
        start_server()
    except (ServerError, OSError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())