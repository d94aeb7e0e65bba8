from __future__ import annotations

import math
import random
from typing import List, Tuple

import esper

from .arena import Level, derive_walls
from .config import GameplayConfig
from .context import EffectCue
from .ecs_components import (
    Collider,
    EnemyBrain,
    Particle,
    PlayerControl,
    Position,
    Projectile,
    Tank,
    TankKind,
    Velocity,
)
from .geometry import lerp


def create_player(world: esper.World, gp: GameplayConfig, pos: Tuple[float, float]) -> int:
    return world.create_entity(
        Position(float(pos[0]), float(pos[1])),
        Collider(radius=gp.player_radius),
        Tank(
            kind=TankKind.PLAYER,
            angle=-math.pi / 2,
            max_speed=gp.player_max_speed,
            accel=gp.player_accel,
            turn_speed=gp.player_turn_speed,
            fire_rate=gp.player_fire_rate,
            reverse_ratio=gp.player_reverse_ratio,
        ),
        PlayerControl(strafe_speed=gp.player_strafe_speed, invuln=gp.player_spawn_invuln),
    )


def create_enemy(world: esper.World, gp: GameplayConfig, pos: Tuple[float, float], rng: random.Random) -> int:
    # Facing down the arena, towards the player's half
    angle = math.pi / 2
    return world.create_entity(
        Position(float(pos[0]), float(pos[1])),
        Collider(radius=gp.enemy_radius),
        Tank(
            kind=TankKind.ENEMY,
            angle=angle,
            max_speed=gp.enemy_max_speed,
            accel=gp.enemy_accel,
            turn_speed=gp.enemy_turn_speed,
            fire_rate=lerp(*gp.enemy_fire_rate_range, rng.random()),
            reverse_ratio=gp.enemy_reverse_ratio,
            fire_cooldown=lerp(*gp.enemy_fire_cooldown_range, rng.random()),
        ),
        EnemyBrain(
            think_timer=lerp(*gp.enemy_think_range, rng.random()),
            desired_angle=angle,
            jitter=lerp(*gp.enemy_jitter_range, rng.random()),
            hp=gp.enemy_hp,
        ),
    )


def create_enemies(world: esper.World, gp: GameplayConfig, spawns: List[Tuple[float, float]], count: int, rng: random.Random) -> List[int]:
    if not spawns:
        return []
    return [create_enemy(world, gp, spawns[i % len(spawns)], rng) for i in range(count)]


def create_walls(world: esper.World, level: Level) -> List[int]:
    return [world.create_entity(wall) for wall in derive_walls(level)]


def create_projectile(world: esper.World, gp: GameplayConfig, owner: TankKind, x: float, y: float, angle: float) -> int:
    if owner is TankKind.PLAYER:
        speed, radius = gp.player_projectile_speed, gp.player_projectile_radius
    else:
        speed, radius = gp.enemy_projectile_speed, gp.enemy_projectile_radius
    return world.create_entity(
        Position(x, y),
        Velocity(math.cos(angle) * speed, math.sin(angle) * speed),
        Collider(radius=radius),
        Projectile(owner=owner, life=gp.projectile_lifetime),
    )


def spawn_burst(world: esper.World, cue: EffectCue, rng: random.Random) -> None:
    for _ in range(cue.count):
        a = rng.random() * math.pi * 2
        s = lerp(60, 260, rng.random())
        life = lerp(0.25, 0.65, rng.random())
        world.create_entity(
            Position(cue.x, cue.y),
            Velocity(math.cos(a) * s, math.sin(a) * s),
            Particle(life=life, max_life=0.65, radius=lerp(1.5, 3.6, rng.random()), color=cue.color),
        )
