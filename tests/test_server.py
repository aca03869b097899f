import io
import socket
import threading
import time

import pytest

from mazefps.client import Client
from mazefps.errors import InvalidClientError, InvalidMessageError, ServerConnectionError, ServerError
from mazefps.protocol import (
    CommonPlayer,
    DeadPlayer,
    Join,
    Leave,
    PlayerUpdateReceiving,
    PlayerUpdateSending,
    StartGame,
    decode_message,
    encode_message,
)
from mazefps.server import POSITIONS, Server, main, parse_player_count, start_server
from mazefps.vecmath import Quat, Vec3

ALICE = ("127.0.0.1", 40001)
BOB = ("127.0.0.1", 40002)
CAROL = ("127.0.0.1", 40003)


class _Outbox:
    def __init__(self):
        self.sent = []

    def __call__(self, payload, addr):
        self.sent.append((decode_message(payload), addr))


@pytest.mark.parametrize("text, expected", [("", 2), ("abc", 2), (" 4\n", 4), ("10", 10), ("-1", 2)])
def test_parse_player_count(text, expected):
    assert parse_player_count(text) == expected


def test_parse_player_count_rejects_more_than_ten():
    with pytest.raises(InvalidClientError) as info:
        parse_player_count("11")
    assert info.value.reason == "Number of invalid players"


def test_start_server_rejects_count_before_binding():
    with pytest.raises(InvalidClientError):
        start_server("25")


def test_main_reports_invalid_count(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("42\n"))
    assert main([]) == 1
    assert "Number of invalid players" in capsys.readouterr().err


@pytest.mark.parametrize("name", ["", "   "])
def test_join_rejects_empty_name(name):
    server = Server(2, _Outbox())
    with pytest.raises(InvalidClientError) as info:
        server.handle_join(ALICE, name)
    assert info.value.reason == "Unauthorized empty name"
    assert server.clients == {}


def test_join_rejects_duplicate_name():
    server = Server(3, _Outbox())
    server.handle_join(ALICE, "alice")
    with pytest.raises(InvalidClientError) as info:
        server.handle_join(BOB, "alice")
    assert info.value.reason == "Name already used"
    assert list(server.clients) == [ALICE]


def test_join_assigns_positions_and_broadcasts():
    outbox = _Outbox()
    server = Server(3, outbox)
    server.handle_join(ALICE, "alice")
    server.handle_join(BOB, "bob")
    assert server.clients == {ALICE: ("alice", POSITIONS[0]), BOB: ("bob", POSITIONS[1])}
    assert outbox.sent == [
        (Join("alice"), ALICE),
        (Join("bob"), ALICE),
        (Join("bob"), BOB),
    ]
    assert not server.is_game_started


def test_full_lobby_starts_game():
    outbox = _Outbox()
    server = Server(2, outbox)
    server.handle_join(ALICE, "alice")
    server.handle_join(BOB, "bob")
    assert server.is_game_started
    starts = {addr: msg for msg, addr in outbox.sent if isinstance(msg, StartGame)}
    lifted = POSITIONS[0] + Vec3(0.0, 1.5, 0.0)
    assert starts[ALICE] == StartGame(CommonPlayer("alice", lifted), [CommonPlayer("bob", POSITIONS[1])])
    assert starts[BOB].player.name == "bob"
    assert starts[BOB].enemies == [CommonPlayer("alice", POSITIONS[0])]


def test_join_after_start_is_ignored():
    outbox = _Outbox()
    server = Server(2, outbox)
    server.handle_join(ALICE, "alice")
    server.handle_join(BOB, "bob")
    sent_before = len(outbox.sent)
    server.handle_join(CAROL, "carol")
    assert list(server.clients) == [ALICE, BOB]
    assert len(outbox.sent) == sent_before


def test_server_full_after_all_positions_taken():
    server = Server(0, _Outbox())
    for index in range(len(POSITIONS)):
        server.handle_join(("127.0.0.1", 41000 + index), f"player{index}")
    with pytest.raises(InvalidClientError) as info:
        server.handle_join(CAROL, "late")
    assert info.value.reason == "Server is full"
    assert len(server.clients) == len(POSITIONS)


def test_garbage_datagram_is_recoverable_error():
    server = Server(2, _Outbox())
    with pytest.raises(InvalidMessageError) as info:
        server.handle_datagram(b"\x09", ALICE)
    assert info.value.addr == ALICE
    assert info.value.recoverable


def test_player_update_is_relayed_with_name():
    outbox = _Outbox()
    server = Server(3, outbox)
    server.handle_join(ALICE, "alice")
    server.handle_join(BOB, "bob")
    outbox.sent.clear()
    update = PlayerUpdateSending(Vec3(1.0, 2.0, 3.0), Quat.IDENTITY, ["carol", "dave", "carol"])
    server.handle_datagram(encode_message(update), BOB)
    server.handle_datagram(encode_message(update), BOB)
    assert server.all_dead_players == ["carol", "dave"]
    relayed = PlayerUpdateReceiving("bob", Vec3(1.0, 2.0, 3.0), Quat.IDENTITY)
    assert outbox.sent[:2] == [(relayed, ALICE), (relayed, BOB)]


def test_update_from_unknown_client_is_fatal():
    server = Server(2, _Outbox())
    update = PlayerUpdateSending(Vec3.ZERO, Quat.IDENTITY, [])
    with pytest.raises(ServerError) as info:
        server.handle_datagram(encode_message(update), CAROL)
    assert not info.value.recoverable


def test_leave_is_fatal():
    server = Server(2, _Outbox())
    with pytest.raises(ServerError) as info:
        server.handle_datagram(encode_message(Leave()), ALICE)
    assert not info.value.recoverable


def test_dead_players_payload_round_trip():
    server = Server(2, _Outbox())
    server.add_dead_player_if_not_exists(["x", "y", "x"])
    assert decode_message(server.dead_players_payload()) == DeadPlayer(["x", "y"])


def test_broadcast_goes_on_after_send_error(capsys):
    delivered = []

    def flaky(payload, addr):
        if addr == ALICE:
            raise OSError("unreachable")
        delivered.append(addr)

    server = Server(3, flaky)
    server.handle_join(ALICE, "alice")
    server.handle_join(BOB, "bob")
    server.broadcast(b"payload")
    assert delivered == [BOB, BOB]
    assert "Sending error to 127.0.0.1:40001" in capsys.readouterr().err


def test_run_fails_on_busy_port():
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as holder:
        holder.bind(("127.0.0.1", 0))
        port = holder.getsockname()[1]
        with pytest.raises(ServerConnectionError):
            Server(2).run("127.0.0.1", port)


def test_run_serves_until_fatal_message():
    server = Server(2)
    errors = []

    def serve():
        try:
            server.run("127.0.0.1", 0)
        except ServerError as exc:
            errors.append(exc)

    thread = threading.Thread(target=serve, daemon=True)
    thread.start()
    deadline = time.monotonic() + 5
    while server.address is None and time.monotonic() < deadline:
        time.sleep(0.01)
    assert server.address is not None

    sock = Client("alice").connect(server.address, timeout=5)
    with sock:
        sock.settimeout(5)
        assert decode_message(sock.recv(1024)) == DeadPlayer([])
        sock.send(encode_message(Leave()))
    thread.join(5)
    assert not thread.is_alive()
    assert len(errors) == 1 and not errors[0].recoverable
    assert [name for name, _ in server.clients.values()] == ["alice"]