"""Client-side game state: enemies, the local player, the maze and update pacing."""

from __future__ import annotations

import math
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Optional

from mazefps.protocol import CommonPlayer, PlayerUpdateSending
from mazefps.vecmath import Quat, Vec3

UPDATE_INTERVAL = 1.0 / 100.0
RUN_THRESHOLD = 0.1


class EnemyState(Enum):
    """What an enemy is doing, which picks the animation it plays."""

    IDLE = "idle"
    RUN = "run"
    SHOOT = "shoot"
    DEATH = "death"
    GUN_POINTING = "gun_pointing"


# Clip numbers of each state's animation in the enemy model.
_ANIMATION_INDEX = {
    EnemyState.IDLE: 4,
    EnemyState.RUN: 16,
    EnemyState.GUN_POINTING: 6,
    EnemyState.DEATH: 0,
    EnemyState.SHOOT: 1,
}


def _facing_back() -> Quat:
    return Quat.from_rotation_y(math.pi)


@dataclass
class Enemy:
    """Another player as seen by this client."""

    name: str = ""
    position: Vec3 = Vec3.ZERO
    orientation: Quat = field(default_factory=_facing_back)
    current_state: EnemyState = EnemyState.IDLE


@dataclass
class EnemyMovement:
    """Interpolation state of an enemy's displayed position."""

    target_position: Vec3 = Vec3.ZERO
    current_position: Vec3 = Vec3.ZERO
    lerp_time: float = 0.0


@dataclass
class EnemyResource:
    """All enemies of the game and the names of the players known to be dead."""

    enemies: list[Enemy] = field(default_factory=list)
    dead_players: list[str] = field(default_factory=list)

    @classmethod
    def from_players(cls, players: Iterable[CommonPlayer]) -> EnemyResource:
        """Build the enemy list from the players sent at the start of the game."""
        return cls(enemies=[Enemy(name=p.name, position=p.position) for p in players])

    def add_dead_players(self, names: Iterable[str]) -> bool:
        """Record the first name not yet known as dead.

        Returns True if a name was added; at most one name is added per call.
        """
        for name in names:
            if name not in self.dead_players:
                self.dead_players.append(name)
                return True
        return False


@dataclass
class PlayerResource:
    """The local player's name and position."""

    name: str = ""
    position: Vec3 = Vec3.ZERO

    @classmethod
    def from_player(cls, player: CommonPlayer) -> PlayerResource:
        return cls(name=player.name, position=player.position)


@dataclass
class MazeResource:
    """The maze grid, one character per cell."""

    grid: list[list[str]] = field(default_factory=list)
    width: int = 0
    height: int = 0


def animation_index(state: EnemyState) -> int:
    """The animation clip played for ``state``."""
    return _ANIMATION_INDEX[state]


def next_enemy_state(enemy: Enemy, translation: Vec3) -> EnemyState:
    """Running if the enemy is displayed away from its recorded position, else aiming."""
    moved = (translation - enemy.position).length()
    return EnemyState.RUN if moved > RUN_THRESHOLD else EnemyState.GUN_POINTING


class AnimationTracker:
    """Remembers each enemy's last state so animations change only on transitions."""

    def __init__(self) -> None:
        self.previous: dict[str, EnemyState] = {}

    def update(self, name: str, state: EnemyState) -> Optional[int]:
        """Return the animation to start if ``state`` differs from the last one, else None."""
        if self.previous.get(name, EnemyState.IDLE) == state:
            return None
        self.previous[name] = state
        return animation_index(state)


class UpdateThrottle:
    """Limits how often player updates are sent."""

    def __init__(self, interval: float = UPDATE_INTERVAL, last_sent: Optional[float] = None) -> None:
        self.interval = interval
        self.last_sent = time.monotonic() if last_sent is None else last_sent

    def ready(self, now: Optional[float] = None) -> bool:
        """Whether more than the interval has passed since the last send."""
        now = time.monotonic() if now is None else now
        return now - self.last_sent > self.interval

    def mark(self, now: Optional[float] = None) -> None:
        """Record a send at ``now``."""
        self.last_sent = time.monotonic() if now is None else now


def build_player_update(position: Vec3, rotation: Quat, dead_players: Iterable[str]) -> PlayerUpdateSending:
    """The message that tells the server where the player is and who is dead."""
    return PlayerUpdateSending(
        position=position, rotation=rotation, all_dead_players=list(dead_players)
    )