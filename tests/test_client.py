import ipaddress
import socket
import threading
from unittest.mock import patch

import pytest

from mazefps.client import Client, NetworkResource, input_connexion, parse_server_address, wait_for_start
from mazefps.errors import ServerNotRespondingError
from mazefps.protocol import CommonPlayer, DeadPlayer, Join, PlayerUpdate, StartGame, decode_message, encode_message
from mazefps.server import DEFAULT_PORT
from mazefps.vecmath import Quat, Vec3


@pytest.mark.parametrize(
    "text, expected",
    [
        ("127.0.0.1:9000", ("127.0.0.1", 9000)),
        ("  127.0.0.1:9000\n", ("127.0.0.1", 9000)),
        ("[::1]:7000", ("::1", 7000)),
    ],
)
def test_parse_server_address(text, expected):
    assert parse_server_address(text, ipaddress.ip_address("10.1.2.3")) == expected


def test_parse_server_address_blank_uses_default():
    assert parse_server_address(" \n", ipaddress.ip_address("10.1.2.3")) == ("10.1.2.3", DEFAULT_PORT)


@pytest.mark.parametrize("text", ["nonsense", "127.0.0.1", "127.0.0.1:70000", "localhost:80", "::1:80", "[1.2.3.4]:80"])
def test_parse_server_address_rejects(text):
    with pytest.raises(ValueError):
        parse_server_address(text, ipaddress.ip_address("10.1.2.3"))


def test_network_resource_queues_in_order():
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        resource = NetworkResource(sock)
        first = PlayerUpdate(Vec3.ZERO, Quat.IDENTITY, Vec3.ZERO, 1)
        second = PlayerUpdate(Vec3.ONE, Quat.IDENTITY, Vec3.ZERO, 2)
        resource.send(first)
        resource.send(second)
        assert list(resource.send_queue) == [first, second]


def test_input_connexion_uses_default_address():
    prompts = []
    answers = iter(["  alice \n", ""])

    def ask(prompt):
        prompts.append(prompt)
        return next(answers)

    with patch("socket.socket") as factory:
        factory.return_value.__enter__.return_value.getsockname.return_value = ("192.0.2.7", 5555)
        name, address = input_connexion(ask)
    assert name == "alice"
    assert address == ("192.0.2.7", DEFAULT_PORT)
    assert prompts[1] == "Entrez l'adresse du serveur (defaut: 192.0.2.7:8080) : "


def _reply_once(server_sock, received):
    data, addr = server_sock.recvfrom(1024)
    received.append((data, addr))
    server_sock.sendto(encode_message(Join("alice")), addr)


def test_connect_then_wait_for_start():
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as server_sock:
        server_sock.bind(("127.0.0.1", 0))
        server_sock.settimeout(5)
        received = []
        thread = threading.Thread(target=_reply_once, args=(server_sock, received))
        thread.start()
        sock = Client("alice").connect(server_sock.getsockname(), timeout=5)
        thread.join(5)
        with sock:
            assert decode_message(received[0][0]) == Join("alice")
            assert sock.getpeername() == server_sock.getsockname()
            addr = received[0][1]
            start = StartGame(
                CommonPlayer("alice", Vec3(-18.0, 1.5, 13.0)),
                [CommonPlayer("bob", Vec3(-18.0, 0.0, -15.0))],
            )
            server_sock.sendto(b"\xff\xff", addr)
            server_sock.sendto(encode_message(DeadPlayer(["x"])), addr)
            server_sock.sendto(encode_message(start), addr)
            sock.settimeout(5)
            assert wait_for_start(sock) == start


def test_connect_without_answer_raises():
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as silent:
        silent.bind(("127.0.0.1", 0))
        with pytest.raises(ServerNotRespondingError) as info:
            Client("alice").connect(silent.getsockname(), timeout=0.2)
        assert str(info.value) == "Le serveur n'a pas répondu"