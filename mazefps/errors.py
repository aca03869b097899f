"""Errors raised by the game server and client."""

from __future__ import annotations

import ipaddress


def _format_addr(addr: tuple) -> str:
    host, port = addr[0], addr[1]
    try:
        if ipaddress.ip_address(host).version == 6:
            return f"[{host}]:{port}"
    except ValueError:
        pass
    return f"{host}:{port}"


class ServerError(Exception):
    """Base class for server errors.

    ``recoverable`` tells whether the server may go on serving after it.
    """

    recoverable = False


class ServerConnectionError(ServerError):
    """The server could not open or resolve its socket."""

    def __init__(self, source: OSError) -> None:
        super().__init__(f"Erreur de connexion à l'adresse  {source}")
        self.source = source


class InvalidClientError(ServerError):
    """A client was refused."""

    recoverable = True

    def __init__(self, reason: str) -> None:
        super().__init__(f"Client invalide: {reason}")
        self.reason = reason


class InvalidMessageError(ServerError):
    """A datagram could not be decoded."""

    recoverable = True

    def __init__(self, addr: tuple) -> None:
        super().__init__(f"Message invalide reçu de {_format_addr(addr)}")
        self.addr = addr


class ClientError(Exception):
    """Base class for client errors."""


class ConnectionTimeoutError(ClientError):
    """Connecting took too long."""

    def __init__(self) -> None:
        super().__init__("Délai de connexion dépassé")


class ServerNotRespondingError(ClientError):
    """The server did not answer the join request."""

    def __init__(self) -> None:
        super().__init__("Le serveur n'a pas répondu")