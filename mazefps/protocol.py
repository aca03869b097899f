"""Game messages and their binary wire encoding.

Integers are little-endian, enum variants carry a u32 tag, strings and lists
are prefixed with a u64 length, and vectors are packed f32 components.
"""

from __future__ import annotations

import struct
from dataclasses import dataclass, field
from typing import Callable, TypeVar, Union

from mazefps.vecmath import Quat, Vec3

_U32 = struct.Struct("<I")
_U64 = struct.Struct("<Q")
_VEC3 = struct.Struct("<3f")
_QUAT = struct.Struct("<4f")

T = TypeVar("T")


class DecodeError(ValueError):
    """Raised when bytes do not hold a valid message."""


@dataclass
class CommonPlayer:
    """A player's name and position as exchanged between client and server."""

    name: str = ""
    position: Vec3 = Vec3.ZERO


@dataclass
class Join:
    name: str


@dataclass
class PlayerUpdateSending:
    position: Vec3
    rotation: Quat
    all_dead_players: list[str] = field(default_factory=list)


@dataclass
class PlayerUpdateReceiving:
    name: str
    position: Vec3
    rotation: Quat


@dataclass
class StartGame:
    player: CommonPlayer
    enemies: list[CommonPlayer] = field(default_factory=list)


@dataclass
class DeadPlayer:
    all_dead_players: list[str] = field(default_factory=list)


@dataclass
class Leave:
    pass


@dataclass
class PlayerUpdate:
    position: Vec3
    rotation: Quat
    velocity: Vec3
    timestamp: int


Message = Union[
    Join, PlayerUpdateSending, PlayerUpdateReceiving, StartGame, DeadPlayer, Leave
]


def _tag(value: int) -> bytes:
    return _U32.pack(value)


def _string(text: str) -> bytes:
    raw = text.encode("utf-8")
    return _U64.pack(len(raw)) + raw


def _strings(items: list[str]) -> bytes:
    return _U64.pack(len(items)) + b"".join(_string(item) for item in items)


def _vec3(v: Vec3) -> bytes:
    return _VEC3.pack(v.x, v.y, v.z)


def _quat(q: Quat) -> bytes:
    return _QUAT.pack(q.x, q.y, q.z, q.w)


def _player(player: CommonPlayer) -> bytes:
    return _string(player.name) + _vec3(player.position)


def encode_message(message: Message) -> bytes:
    """Encode a game message to bytes."""
    match message:
        case Join(name=name):
            parts = [_tag(0), _string(name)]
        case PlayerUpdateSending(
            position=position, rotation=rotation, all_dead_players=dead
        ):
            parts = [_tag(1), _vec3(position), _quat(rotation), _strings(dead)]
        case PlayerUpdateReceiving(name=name, position=position, rotation=rotation):
            parts = [_tag(2), _string(name), _vec3(position), _quat(rotation)]
        case StartGame(player=player, enemies=enemies):
            parts = [
                _tag(3),
                _player(player),
                _U64.pack(len(enemies)),
                *(_player(enemy) for enemy in enemies),
            ]
        case DeadPlayer(all_dead_players=dead):
            parts = [_tag(4), _strings(dead)]
        case Leave():
            parts = [_tag(5)]
        case _:
            raise TypeError(f"not a message: {message!r}")
    return b"".join(parts)


def encode_game_message(message: PlayerUpdate) -> bytes:
    """Encode a game-state message to bytes."""
    if not isinstance(message, PlayerUpdate):
        raise TypeError(f"not a game message: {message!r}")
    try:
        timestamp = _U64.pack(message.timestamp)
    except struct.error as exc:
        raise ValueError(f"timestamp out of range: {message.timestamp}") from exc
    return b"".join(
        [
            _tag(0),
            _vec3(message.position),
            _quat(message.rotation),
            _vec3(message.velocity),
            timestamp,
        ]
    )


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = bytes(data)
        self._pos = 0

    @property
    def remaining(self) -> int:
        return len(self._data) - self._pos

    def take(self, size: int) -> bytes:
        if size > self.remaining:
            raise DecodeError("unexpected end of data")
        chunk = self._data[self._pos : self._pos + size]
        self._pos += size
        return chunk

    def unpack(self, layout: struct.Struct) -> tuple:
        return layout.unpack(self.take(layout.size))

    def u32(self) -> int:
        return self.unpack(_U32)[0]

    def u64(self) -> int:
        return self.unpack(_U64)[0]

    def string(self) -> str:
        raw = self.take(self.u64())
        try:
            return raw.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise DecodeError("string is not valid UTF-8") from exc

    def vec3(self) -> Vec3:
        return Vec3(*self.unpack(_VEC3))

    def quat(self) -> Quat:
        return Quat(*self.unpack(_QUAT))

    def sequence(self, read_item: Callable[[], T]) -> list[T]:
        count = self.u64()
        if count > self.remaining:
            raise DecodeError(f"sequence length {count} exceeds the data")
        return [read_item() for _ in range(count)]

    def player(self) -> CommonPlayer:
        return CommonPlayer(name=self.string(), position=self.vec3())


def decode_message(data: bytes) -> Message:
    """Decode a game message; trailing bytes are ignored."""
    reader = _Reader(data)
    tag = reader.u32()
    match tag:
        case 0:
            return Join(name=reader.string())
        case 1:
            return PlayerUpdateSending(
                position=reader.vec3(),
                rotation=reader.quat(),
                all_dead_players=reader.sequence(reader.string),
            )
        case 2:
            return PlayerUpdateReceiving(
                name=reader.string(), position=reader.vec3(), rotation=reader.quat()
            )
        case 3:
            return StartGame(
                player=reader.player(), enemies=reader.sequence(reader.player)
            )
        case 4:
            return DeadPlayer(all_dead_players=reader.sequence(reader.string))
        case 5:
            return Leave()
    raise DecodeError(f"unknown message variant {tag}")


def decode_game_message(data: bytes) -> PlayerUpdate:
    """Decode a game-state message; trailing bytes are ignored."""
    reader = _Reader(data)
    tag = reader.u32()
    if tag != 0:
        raise DecodeError(f"unknown game message variant {tag}")
    return PlayerUpdate(
        position=reader.vec3(),
        rotation=reader.quat(),
        velocity=reader.vec3(),
        timestamp=reader.u64(),
    )