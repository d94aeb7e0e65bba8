from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List

import yaml


@dataclass
class WindowConfig:
    title: str = "Tank Battle"
    fps: int = 60


def _default_enemy_spawns() -> List[tuple[float, float]]:
    return [(96.0, 64.0), (928.0, 64.0), (512.0, 64.0), (332.0, 64.0), (692.0, 64.0)]


@dataclass
class ArenaConfig:
    width: int = 1024
    height: int = 768
    tile_size: int = 32
    enemy_count: int = 6
    player_start: tuple[float, float] = (96.0, 672.0)
    enemy_spawns: List[tuple[float, float]] = field(default_factory=_default_enemy_spawns)


@dataclass
class GameplayConfig:
    lives: int = 3
    score_per_kill: int = 100

    player_radius: float = 16.0
    player_max_speed: float = 240.0
    player_accel: float = 620.0
    player_turn_speed: float = 2.8
    player_strafe_speed: float = 140.0
    player_reverse_ratio: float = 0.55
    player_fire_rate: float = 0.28
    player_spawn_invuln: float = 1.0
    player_hit_invuln: float = 1.2
    player_color: tuple[int, int, int] = (110, 231, 255)

    enemy_radius: float = 16.0
    enemy_max_speed: float = 190.0
    enemy_accel: float = 520.0
    enemy_turn_speed: float = 2.4
    enemy_reverse_ratio: float = 0.3
    enemy_hp: int = 1
    enemy_fire_rate_range: tuple[float, float] = (0.55, 0.9)
    enemy_fire_cooldown_range: tuple[float, float] = (0.1, 0.6)
    enemy_think_range: tuple[float, float] = (0.25, 0.6)
    enemy_jitter_range: tuple[float, float] = (0.5, 1.2)
    enemy_color: tuple[int, int, int] = (255, 77, 109)

    player_projectile_speed: float = 520.0
    enemy_projectile_speed: float = 460.0
    player_projectile_radius: float = 4.5
    enemy_projectile_radius: float = 4.0
    projectile_lifetime: float = 1.8
    muzzle_offset: float = 10.0
    projectile_bounds_margin: float = 20.0

    brick_color: tuple[int, int, int] = (194, 91, 75)
    steel_color: tuple[int, int, int] = (107, 122, 165)


@dataclass
class AIConfig:
    think_range: tuple[float, float] = (0.22, 0.52)
    chase_range: float = 520.0
    chase_probability_near: float = 0.80
    chase_probability_far: float = 0.50
    chase_offset: float = 0.35
    close_range: float = 200.0
    close_speed_ratio: float = 0.4
    wander_offset: float = 1.4
    wander_speed_range: tuple[float, float] = (0.2, 0.9)
    facing_tolerance: float = 0.45
    fire_probability: float = 0.45


@dataclass
class SimulationConfig:
    max_dt: float = 0.033
    drag_per_tick: float = 0.98
    reference_fps: float = 60.0
    particle_drag_per_tick: float = 0.90


@dataclass
class Settings:
    window: WindowConfig = field(default_factory=WindowConfig)
    arena: ArenaConfig = field(default_factory=ArenaConfig)
    gameplay: GameplayConfig = field(default_factory=GameplayConfig)
    ai: AIConfig = field(default_factory=AIConfig)
    simulation: SimulationConfig = field(default_factory=SimulationConfig)


def _tuple3(v: Any, default: tuple[int, int, int]) -> tuple[int, int, int]:
    try:
        a, b, c = v
        return int(a), int(b), int(c)
    except (TypeError, ValueError):
        return default


def _pair(v: Any, default: tuple[float, float]) -> tuple[float, float]:
    try:
        a, b = v
        return float(a), float(b)
    except (TypeError, ValueError):
        return default


def _spawn_points(v: Any, default: List[tuple[float, float]]) -> List[tuple[float, float]]:
    # Malformed entries are dropped; an empty result keeps the defaults
    points = []
    for s in v if isinstance(v, list) else []:
        p = _pair(s, None) if isinstance(s, (list, tuple)) else None
        if p is not None:
            points.append(p)
        else:
            print(f"[Config] Ignoring malformed enemy spawn {s!r}")
    return points or default


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    return raw.get(name) or {}


def load_settings(path: str | Path = "config/settings.yaml") -> Settings:
    p = Path(path)
    raw: Dict[str, Any] = {}
    if p.exists():
        raw = yaml.safe_load(p.read_text(encoding="utf-8")) or {}

    d = WindowConfig()
    win = _section(raw, "window")
    window = WindowConfig(
        title=str(win.get("title", d.title)),
        fps=int(win.get("fps", d.fps)),
    )

    da = ArenaConfig()
    ar = _section(raw, "arena")
    arena = ArenaConfig(
        width=int(ar.get("width", da.width)),
        height=int(ar.get("height", da.height)),
        tile_size=int(ar.get("tile_size", da.tile_size)),
        enemy_count=int(ar.get("enemy_count", da.enemy_count)),
        player_start=_pair(ar.get("player_start"), da.player_start),
        enemy_spawns=_spawn_points(ar.get("enemy_spawns"), da.enemy_spawns),
    )

    dg = GameplayConfig()
    gp = _section(raw, "gameplay")
    pl = gp.get("player") or {}
    en = gp.get("enemy") or {}
    pr = gp.get("projectile") or {}
    walls = gp.get("walls") or {}
    gameplay = GameplayConfig(
        lives=int(gp.get("lives", dg.lives)),
        score_per_kill=int(gp.get("score_per_kill", dg.score_per_kill)),
        player_radius=float(pl.get("radius", dg.player_radius)),
        player_max_speed=float(pl.get("max_speed", dg.player_max_speed)),
        player_accel=float(pl.get("accel", dg.player_accel)),
        player_turn_speed=float(pl.get("turn_speed", dg.player_turn_speed)),
        player_strafe_speed=float(pl.get("strafe_speed", dg.player_strafe_speed)),
        player_reverse_ratio=float(pl.get("reverse_ratio", dg.player_reverse_ratio)),
        player_fire_rate=float(pl.get("fire_rate", dg.player_fire_rate)),
        player_spawn_invuln=float(pl.get("spawn_invuln", dg.player_spawn_invuln)),
        player_hit_invuln=float(pl.get("hit_invuln", dg.player_hit_invuln)),
        player_color=_tuple3(pl.get("color"), dg.player_color),
        enemy_radius=float(en.get("radius", dg.enemy_radius)),
        enemy_max_speed=float(en.get("max_speed", dg.enemy_max_speed)),
        enemy_accel=float(en.get("accel", dg.enemy_accel)),
        enemy_turn_speed=float(en.get("turn_speed", dg.enemy_turn_speed)),
        enemy_reverse_ratio=float(en.get("reverse_ratio", dg.enemy_reverse_ratio)),
        enemy_hp=int(en.get("hp", dg.enemy_hp)),
        enemy_fire_rate_range=_pair(en.get("fire_rate_range"), dg.enemy_fire_rate_range),
        enemy_fire_cooldown_range=_pair(en.get("fire_cooldown_range"), dg.enemy_fire_cooldown_range),
        enemy_think_range=_pair(en.get("think_range"), dg.enemy_think_range),
        enemy_jitter_range=_pair(en.get("jitter_range"), dg.enemy_jitter_range),
        enemy_color=_tuple3(en.get("color"), dg.enemy_color),
        player_projectile_speed=float(pr.get("player_speed", dg.player_projectile_speed)),
        enemy_projectile_speed=float(pr.get("enemy_speed", dg.enemy_projectile_speed)),
        player_projectile_radius=float(pr.get("player_radius", dg.player_projectile_radius)),
        enemy_projectile_radius=float(pr.get("enemy_radius", dg.enemy_projectile_radius)),
        projectile_lifetime=float(pr.get("lifetime", dg.projectile_lifetime)),
        muzzle_offset=float(pr.get("muzzle_offset", dg.muzzle_offset)),
        projectile_bounds_margin=float(pr.get("bounds_margin", dg.projectile_bounds_margin)),
        brick_color=_tuple3(walls.get("brick_color"), dg.brick_color),
        steel_color=_tuple3(walls.get("steel_color"), dg.steel_color),
    )

    di = AIConfig()
    a = _section(raw, "ai")
    ai = AIConfig(
        think_range=_pair(a.get("think_range"), di.think_range),
        chase_range=float(a.get("chase_range", di.chase_range)),
        chase_probability_near=float(a.get("chase_probability_near", di.chase_probability_near)),
        chase_probability_far=float(a.get("chase_probability_far", di.chase_probability_far)),
        chase_offset=float(a.get("chase_offset", di.chase_offset)),
        close_range=float(a.get("close_range", di.close_range)),
        close_speed_ratio=float(a.get("close_speed_ratio", di.close_speed_ratio)),
        wander_offset=float(a.get("wander_offset", di.wander_offset)),
        wander_speed_range=_pair(a.get("wander_speed_range"), di.wander_speed_range),
        facing_tolerance=float(a.get("facing_tolerance", di.facing_tolerance)),
        fire_probability=float(a.get("fire_probability", di.fire_probability)),
    )

    ds = SimulationConfig()
    sm = _section(raw, "simulation")
    simulation = SimulationConfig(
        max_dt=float(sm.get("max_dt", ds.max_dt)),
        drag_per_tick=float(sm.get("drag_per_tick", ds.drag_per_tick)),
        reference_fps=float(sm.get("reference_fps", ds.reference_fps)),
        particle_drag_per_tick=float(sm.get("particle_drag_per_tick", ds.particle_drag_per_tick)),
    )

    return Settings(window=window, arena=arena, gameplay=gameplay, ai=ai, simulation=simulation)
