from __future__ import annotations

import math
import random
from typing import Iterable, List, Optional, Tuple

import esper

from .arena import TileType, friction_at
from .config import AIConfig, GameplayConfig, SimulationConfig
from .context import GameContext, GameMode
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
    Wall,
)
from .factories import create_projectile, spawn_burst
from .geometry import circle_rect_hit, circles_hit, clamp, lerp, norm_angle


def _ordered(world: esper.World, query: Iterable[Tuple[int, object]]) -> List[Tuple[int, object]]:
    # Stable entity-id order, skipping anything already marked for deletion
    return sorted((item for item in query if world.entity_exists(item[0])), key=lambda item: item[0])


def live_walls(world: esper.World) -> List[Tuple[int, Wall]]:
    return _ordered(world, world.get_component(Wall))


def find_player(world: esper.World) -> Optional[Tuple[int, Position]]:
    for e, (pos, _pc) in _ordered(world, world.get_components(Position, PlayerControl)):
        return e, pos
    return None


def _blocked(x: float, y: float, r: float, walls: List[Wall]) -> bool:
    for w in walls:
        if circle_rect_hit(x, y, r, w):
            return True
    return False


def apply_motion(
    world: esper.World,
    ctx: GameContext,
    pos: Position,
    radius: float,
    tank: Tank,
    dx: float,
    dy: float,
    dt: float,
    sim: SimulationConfig,
) -> None:
    """Move one axis at a time, undoing whichever axis ends inside a wall.

    Reverting per axis lets a tank driving diagonally into a wall slide along
    it. Drag and terrain friction are applied to the speed afterwards.
    """
    walls = [w for _, w in live_walls(world)]

    prev = pos.x
    pos.x = clamp(pos.x + dx, radius + 1, ctx.width - radius - 1)
    if _blocked(pos.x, pos.y, radius, walls):
        pos.x = prev

    prev = pos.y
    pos.y = clamp(pos.y + dy, radius + 1, ctx.height - radius - 1)
    if _blocked(pos.x, pos.y, radius, walls):
        pos.y = prev

    friction = friction_at(ctx.level, pos.x, pos.y) if ctx.level is not None else 1.0
    tank.speed *= math.pow(sim.drag_per_tick, sim.reference_fps * dt) * friction


def fire(world: esper.World, ctx: GameContext, eid: int, gp: GameplayConfig) -> Optional[int]:
    """Spawn a projectile at the muzzle; does nothing while cooling down."""
    tank = world.component_for_entity(eid, Tank)
    if tank.fire_cooldown > 0:
        return None
    pos = world.component_for_entity(eid, Position)
    col = world.component_for_entity(eid, Collider)
    muzzle = col.radius + gp.muzzle_offset
    bx = pos.x + math.cos(tank.angle) * muzzle
    by = pos.y + math.sin(tank.angle) * muzzle
    proj = create_projectile(world, gp, tank.kind, bx, by, tank.angle)
    tank.fire_cooldown = tank.fire_rate
    ctx.stats.shots_fired += 1
    return proj


def think(
    pos: Position,
    tank: Tank,
    brain: EnemyBrain,
    target: Optional[Position],
    ai: AIConfig,
    rng: random.Random,
    dt: float,
) -> bool:
    """Count down the decision timer and pick a new goal when it lapses.

    Returns True when a new decision was taken.
    """
    brain.think_timer -= dt
    if brain.think_timer > 0:
        return False
    brain.think_timer = lerp(*ai.think_range, rng.random()) * brain.jitter
    if target is None:
        return True

    dx, dy = target.x - pos.x, target.y - pos.y
    dist = math.hypot(dx, dy)
    bearing = math.atan2(dy, dx)
    chase = ai.chase_probability_near if dist < ai.chase_range else ai.chase_probability_far
    if rng.random() < chase:
        brain.desired_angle = bearing + lerp(-ai.chase_offset, ai.chase_offset, rng.random())
        brain.desired_speed = tank.max_speed * (1.0 if dist > ai.close_range else ai.close_speed_ratio)
    else:
        brain.desired_angle = tank.angle + lerp(-ai.wander_offset, ai.wander_offset, rng.random())
        brain.desired_speed = tank.max_speed * lerp(*ai.wander_speed_range, rng.random())
    return True


def steer(tank: Tank, brain: EnemyBrain, dt: float) -> None:
    da = norm_angle(brain.desired_angle - tank.angle)
    tank.angle = norm_angle(tank.angle + clamp(da, -1.0, 1.0) * tank.turn_speed * dt)
    dv = brain.desired_speed - tank.speed
    tank.speed += clamp(dv, -tank.accel * dt, tank.accel * dt)
    tank.speed = clamp(tank.speed, tank.min_speed, tank.max_speed)


class PlayerControlSystem(esper.Processor):
    def __init__(self, ctx: GameContext, gameplay: GameplayConfig, sim: SimulationConfig) -> None:
        super().__init__()
        self.ctx = ctx
        self.gameplay = gameplay
        self.sim = sim

    def process(self, dt: float) -> None:
        if not self.ctx.running:
            return
        c = self.ctx.controls
        for e, (pos, col, tank, pc) in _ordered(self.world, self.world.get_components(Position, Collider, Tank, PlayerControl)):
            tank.angle = norm_angle(tank.angle + c.turn * tank.turn_speed * dt)
            tank.speed += c.thrust * tank.accel * dt
            tank.speed = clamp(tank.speed, tank.min_speed, tank.max_speed)

            # Strafing is perpendicular to the hull and bypasses speed/drag
            side = tank.angle + math.pi / 2
            sx = math.cos(side) * c.strafe * pc.strafe_speed * dt
            sy = math.sin(side) * c.strafe * pc.strafe_speed * dt
            vx = math.cos(tank.angle) * tank.speed * dt
            vy = math.sin(tank.angle) * tank.speed * dt
            apply_motion(self.world, self.ctx, pos, col.radius, tank, vx + sx, vy + sy, dt, self.sim)

            if c.fire:
                fire(self.world, self.ctx, e, self.gameplay)
            tank.fire_cooldown = max(0.0, tank.fire_cooldown - dt)
            pc.invuln = max(0.0, pc.invuln - dt)


class EnemyAISystem(esper.Processor):
    def __init__(self, ctx: GameContext, gameplay: GameplayConfig, ai: AIConfig, sim: SimulationConfig) -> None:
        super().__init__()
        self.ctx = ctx
        self.gameplay = gameplay
        self.ai = ai
        self.sim = sim

    def process(self, dt: float) -> None:
        if not self.ctx.running:
            return
        found = find_player(self.world)
        target = found[1] if found is not None else None
        rng = self.ctx.rng
        for e, (pos, col, tank, brain) in _ordered(self.world, self.world.get_components(Position, Collider, Tank, EnemyBrain)):
            think(pos, tank, brain, target, self.ai, rng, dt)
            steer(tank, brain, dt)
            dx = math.cos(tank.angle) * tank.speed * dt
            dy = math.sin(tank.angle) * tank.speed * dt
            apply_motion(self.world, self.ctx, pos, col.radius, tank, dx, dy, dt, self.sim)

            if target is not None:
                bearing = math.atan2(target.y - pos.y, target.x - pos.x)
                facing = abs(norm_angle(bearing - tank.angle)) < self.ai.facing_tolerance
                if facing and rng.random() < self.ai.fire_probability:
                    fire(self.world, self.ctx, e, self.gameplay)
            tank.fire_cooldown = max(0.0, tank.fire_cooldown - dt)


class ProjectileSystem(esper.Processor):
    """Ballistics plus hit resolution. Each projectile resolves at most once."""

    def __init__(self, ctx: GameContext, gameplay: GameplayConfig, player_start: Tuple[float, float]) -> None:
        super().__init__()
        self.ctx = ctx
        self.gameplay = gameplay
        self.player_start = player_start

    def process(self, dt: float) -> None:
        if not self.ctx.running:
            return
        walls = live_walls(self.world)
        enemies = _ordered(self.world, self.world.get_components(Position, Collider, EnemyBrain))
        player = None
        for e, comps in _ordered(self.world, self.world.get_components(Position, Collider, Tank, PlayerControl)):
            player = (e, comps)
            break

        for pe, (pos, vel, col, proj) in _ordered(self.world, self.world.get_components(Position, Velocity, Collider, Projectile)):
            if not self.ctx.running:
                # Round ended mid-pass; leave the rest untouched
                break
            pos.x += vel.x * dt
            pos.y += vel.y * dt
            proj.life -= dt
            if proj.life <= 0 or self._out_of_bounds(pos):
                self.world.delete_entity(pe)
                continue

            if self._hit_wall(pos, col.radius, walls):
                self.world.delete_entity(pe)
                continue

            if proj.owner is TankKind.ENEMY:
                if player is not None:
                    _, (ppos, pcol, ptank, pc) = player
                    if circles_hit(pos.x, pos.y, col.radius, ppos.x, ppos.y, pcol.radius):
                        self._damage_player(ppos, ptank, pc)
                        self.world.delete_entity(pe)
            elif proj.owner is TankKind.PLAYER:
                if self._hit_enemy(pos, col.radius, enemies):
                    self.world.delete_entity(pe)

    def _out_of_bounds(self, pos: Position) -> bool:
        m = self.gameplay.projectile_bounds_margin
        return pos.x < -m or pos.y < -m or pos.x > self.ctx.width + m or pos.y > self.ctx.height + m

    def _hit_wall(self, pos: Position, radius: float, walls: List[Tuple[int, Wall]]) -> bool:
        for i, (we, wall) in enumerate(walls):
            if not circle_rect_hit(pos.x, pos.y, radius, wall):
                continue
            if wall.kind == TileType.BRICK:
                wall.hp -= 1
                self.ctx.emit(pos.x, pos.y, self.gameplay.brick_color, 10)
                if wall.hp <= 0:
                    self.world.delete_entity(we)
                    del walls[i]
            else:
                self.ctx.emit(pos.x, pos.y, self.gameplay.steel_color, 8)
            return True
        return False

    def _damage_player(self, ppos: Position, ptank: Tank, pc: PlayerControl) -> None:
        if pc.invuln > 0:
            return
        ctx = self.ctx
        ctx.lives = max(0, ctx.lives - 1)
        pc.invuln = self.gameplay.player_hit_invuln
        ctx.emit(ppos.x, ppos.y, self.gameplay.player_color, 18)
        if ctx.lives <= 0:
            ctx.set_mode(GameMode.LOSE)
        else:
            ppos.x, ppos.y = self.player_start
            ptank.speed = 0.0

    def _hit_enemy(self, pos: Position, radius: float, enemies: list) -> bool:
        for i, (ee, (epos, ecol, brain)) in enumerate(enemies):
            if not circles_hit(pos.x, pos.y, radius, epos.x, epos.y, ecol.radius):
                continue
            brain.hp -= 1
            if brain.hp <= 0:
                self.ctx.emit(epos.x, epos.y, self.gameplay.enemy_color, 20)
                self.world.delete_entity(ee)
                del enemies[i]
                self.ctx.score += self.gameplay.score_per_kill
                self.ctx.stats.kills += 1
            else:
                self.ctx.emit(pos.x, pos.y, self.gameplay.enemy_color, 6)
            return True
        return False


class ParticleSystem(esper.Processor):
    """Cosmetic only: turns this tick's effect cues into drifting particles."""

    def __init__(self, ctx: GameContext, sim: SimulationConfig) -> None:
        super().__init__()
        self.ctx = ctx
        self.sim = sim

    def process(self, dt: float) -> None:
        # Cues from the tick that ended the round still get their burst
        for cue in self.ctx.cues:
            spawn_burst(self.world, cue, self.ctx.fx_rng)
        if not self.ctx.running:
            return
        damp = math.pow(self.sim.particle_drag_per_tick, self.sim.reference_fps * dt)
        for e, (pos, vel, part) in self.world.get_components(Position, Velocity, Particle):
            pos.x += vel.x * dt
            pos.y += vel.y * dt
            vel.x *= damp
            vel.y *= damp
            part.life -= dt
            if part.life <= 0:
                self.world.delete_entity(e)


class RoundStateSystem(esper.Processor):
    def __init__(self, ctx: GameContext) -> None:
        super().__init__()
        self.ctx = ctx

    def process(self, dt: float) -> None:
        if not self.ctx.running:
            return
        self.ctx.stats.time_sec += dt
        alive = [e for e, _ in self.world.get_component(EnemyBrain) if self.world.entity_exists(e)]
        if not alive:
            self.ctx.set_mode(GameMode.WIN)
