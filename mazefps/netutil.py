"""Network helpers."""

from __future__ import annotations

import ipaddress
import socket

# Connecting a UDP socket sends nothing; it only makes the system pick the
# interface that would route to the outside world.
_PROBE_ADDRESS = ("8.8.8.8", 80)


def get_local_ip() -> ipaddress.IPv4Address | ipaddress.IPv6Address:
    """Return the local address of the interface used to reach the internet."""
    with socket.socket(socket.AF_INET, socket.SOCK_DGRAM) as sock:
        sock.bind(("0.0.0.0", 0))
        sock.connect(_PROBE_ADDRESS)
        host = sock.getsockname()[0]
    return ipaddress.ip_address(host)