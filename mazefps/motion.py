"""Movement of the local player and interpolation of enemies."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Optional

from mazefps.state import EnemyMovement
from mazefps.vecmath import Quat, Vec3

LERP_SPEED = 15.0
SPEED = 0.06
PITCH_LIMIT = math.pi / 2 - 0.01
MINIMAP_SCALE = 5.0
MINIMAP_OFFSET_X = 525.0
MINIMAP_OFFSET_Y = 260.0


@dataclass(frozen=True)
class CameraSensitivity:
    """Radians of rotation per unit of mouse motion, horizontally and vertically."""

    x: float = 0.003
    y: float = 0.002


def lerp(start: Vec3, end: Vec3, t: float) -> Vec3:
    """Linear interpolation with ``t`` clamped to [0, 1]."""
    return start.lerp(end, min(1.0, max(0.0, t)))


def step_enemy(
    movement: EnemyMovement, target: Vec3, rotation: Quat, delta_secs: float
) -> tuple[Vec3, Quat]:
    """Move an enemy towards a received position and orientation.

    The target is put on the ground, ``movement`` is updated in place, and the
    enemy's new translation and its yaw-only rotation are returned.
    """
    target = Vec3(target.x, 0.0, target.z)
    movement.target_position = target
    movement.current_position = lerp(movement.current_position, target, LERP_SPEED * delta_secs)
    yaw, _, _ = rotation.to_euler_yxz()
    facing = Quat.from_rotation_y(math.pi) * Quat.from_euler_yxz(yaw, 0.0, 0.0)
    return movement.current_position, facing


def rotate_player(
    rotation: Quat, delta: tuple[float, float], sensitivity: Optional[CameraSensitivity] = None
) -> Quat:
    """Turn the player by a mouse motion, keeping the pitch short of vertical."""
    dx, dy = delta
    if dx == 0.0 and dy == 0.0:
        return rotation
    sensitivity = sensitivity or CameraSensitivity()
    yaw, pitch, roll = rotation.to_euler_yxz()
    yaw -= dx * sensitivity.x
    pitch = min(PITCH_LIMIT, max(-PITCH_LIMIT, pitch - dy * sensitivity.y))
    return Quat.from_euler_yxz(yaw, pitch, roll)


def move_direction(rotation: Quat, up: bool, down: bool, left: bool, right: bool) -> Vec3:
    """The horizontal displacement for one frame given the arrow keys held."""
    forward = rotation.forward()
    side = rotation.right()
    forward_flat = Vec3(forward.x, 0.0, forward.z).normalize_or_zero()
    right_flat = Vec3(side.x, 0.0, side.z).normalize_or_zero()
    along = (1.0 if up else 0.0) - (1.0 if down else 0.0)
    across = (1.0 if right else 0.0) - (1.0 if left else 0.0)
    return (forward_flat * along + right_flat * across).normalize_or_zero() * SPEED


def minimap_position(position: Vec3) -> tuple[float, float]:
    """Where the player's marker goes on the minimap."""
    return (
        position.x * MINIMAP_SCALE - MINIMAP_OFFSET_X,
        position.z * MINIMAP_SCALE - MINIMAP_OFFSET_Y,
    )