"""Networking, protocol and game-state core of a multiplayer maze shooter."""

__version__ = "0.1.0"