from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from .arena import TileType


class TankKind(Enum):
    PLAYER = "player"
    ENEMY = "enemy"


@dataclass
class Position:
    x: float
    y: float


@dataclass
class Velocity:
    x: float = 0.0
    y: float = 0.0


@dataclass
class Collider:
    radius: float


@dataclass
class Tank:
    kind: TankKind
    angle: float
    max_speed: float
    accel: float
    turn_speed: float
    fire_rate: float  # seconds between shots
    reverse_ratio: float = 0.55  # reverse speed limit as a share of max_speed
    speed: float = 0.0
    fire_cooldown: float = 0.0

    @property
    def min_speed(self) -> float:
        return -self.max_speed * self.reverse_ratio


@dataclass
class PlayerControl:
    strafe_speed: float
    invuln: float = 0.0


@dataclass
class EnemyBrain:
    think_timer: float
    desired_angle: float
    jitter: float
    desired_speed: float = 0.0
    hp: int = 1


@dataclass
class Projectile:
    owner: TankKind
    life: float


@dataclass
class Wall:
    x: float
    y: float
    w: float
    h: float
    kind: TileType
    hp: float  # math.inf for steel

    @property
    def destructible(self) -> bool:
        return not math.isinf(self.hp)


@dataclass
class Particle:
    life: float
    max_life: float
    radius: float
    color: tuple[int, int, int]
