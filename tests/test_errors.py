from mazefps.errors import (
    ClientError,
    ConnectionTimeoutError,
    InvalidClientError,
    InvalidMessageError,
    ServerConnectionError,
    ServerError,
    ServerNotRespondingError,
)


def test_invalid_client_message_and_reason():
    err = InvalidClientError("Name already used")
    assert str(err) == "Client invalide: Name already used"
    assert err.reason == "Name already used"


def test_invalid_client_is_recoverable_server_error():
    err = InvalidClientError("Server is full")
    assert isinstance(err, ServerError)
    assert err.recoverable is True
    assert err.reason == "Server is full"


def test_invalid_message_ipv4_format():
    err = InvalidMessageError(("127.0.0.1", 9000))
    assert str(err) == "Message invalide reçu de 127.0.0.1:9000"
    assert err.addr == ("127.0.0.1", 9000)
    assert err.recoverable is True


def test_invalid_message_ipv6_format():
    err = InvalidMessageError(("::1", 9000, 0, 0))
    assert str(err).endswith("[::1]:9000")


def test_connection_error_is_fatal_and_keeps_source():
    source = OSError("Could not get local address")
    err = ServerConnectionError(source)
    assert err.source is source
    assert err.recoverable is False
    assert str(err).endswith("Could not get local address")


def test_client_errors_share_base():
    err = ServerNotRespondingError()
    assert isinstance(err, ClientError)
    assert str(err) == "Le serveur n'a pas répondu"


def test_connection_timeout_message():
    err = ConnectionTimeoutError()
    assert isinstance(err, ClientError)
    assert str(err) == "Délai de connexion dépassé"