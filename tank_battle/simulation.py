from __future__ import annotations

import random
from dataclasses import dataclass, field
from typing import Callable, Iterable, List, Optional

import esper

from .arena import Level, generate_level
from .config import Settings
from .context import Command, Controls, EffectCue, GameContext, GameMode, RunStats
from .ecs_components import EnemyBrain, Projectile, Wall
from .ecs_systems import (
    EnemyAISystem,
    ParticleSystem,
    PlayerControlSystem,
    ProjectileSystem,
    RoundStateSystem,
)
from .factories import create_enemies, create_player, create_walls
from .geometry import clamp


@dataclass
class Snapshot:
    mode: GameMode
    score: int
    lives: int
    level_index: int
    enemies: int
    elapsed: float
    cues: List[EffectCue] = field(default_factory=list)


class Simulation:
    """One self-contained game session: an esper world plus its context.

    Nothing is shared between instances, so several can run side by side.
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        seed: Optional[int] = None,
        level_factory: Optional[Callable[[], Level]] = None,
    ) -> None:
        self.settings = settings or Settings()
        arena = self.settings.arena
        self.world = esper.World()
        self.ctx = GameContext(
            rng=random.Random(seed),
            fx_rng=random.Random(None if seed is None else seed + 1),
            width=arena.width,
            height=arena.height,
            lives=self.settings.gameplay.lives,
        )
        self.level_factory = level_factory or (lambda: generate_level(arena.width, arena.height, arena.tile_size))
        self.player_eid: Optional[int] = None
        self._setup_systems()
        self.reset_world()

    def _setup_systems(self) -> None:
        s = self.settings
        self.world.add_processor(PlayerControlSystem(self.ctx, s.gameplay, s.simulation), priority=90)
        self.world.add_processor(EnemyAISystem(self.ctx, s.gameplay, s.ai, s.simulation), priority=80)
        self.world.add_processor(ProjectileSystem(self.ctx, s.gameplay, s.arena.player_start), priority=70)
        self.world.add_processor(ParticleSystem(self.ctx, s.simulation), priority=60)
        self.world.add_processor(RoundStateSystem(self.ctx), priority=10)

    # World lifecycle
    def reset_world(self) -> None:
        s = self.settings
        self.world.clear_database()
        self.ctx.level = self.level_factory()
        walls = create_walls(self.world, self.ctx.level)
        self.player_eid = create_player(self.world, s.gameplay, s.arena.player_start)
        enemies = create_enemies(self.world, s.gameplay, s.arena.enemy_spawns, s.arena.enemy_count, self.ctx.rng)
        self.ctx.cues.clear()
        print(f"[Level] {self.ctx.level_index}: {self.ctx.level.cols}x{self.ctx.level.rows} tiles, {len(walls)} walls, {len(enemies)} enemies")

    def _reset_run(self) -> None:
        self.ctx.level_index = 1
        self.ctx.score = 0
        self.ctx.lives = self.settings.gameplay.lives
        self.ctx.stats = RunStats()

    # Mode transitions
    def start(self) -> None:
        mode = self.ctx.mode
        if mode is GameMode.INTRO:
            self._reset_run()
            self.reset_world()
            self.ctx.set_mode(GameMode.RUNNING)
        elif mode in (GameMode.WIN, GameMode.LOSE):
            self.restart()
            self.start()

    def restart(self) -> None:
        self._reset_run()
        self.reset_world()
        self.ctx.set_mode(GameMode.INTRO)

    def toggle_pause(self) -> None:
        if self.ctx.mode is GameMode.RUNNING:
            self.ctx.set_mode(GameMode.PAUSED)
        elif self.ctx.mode is GameMode.PAUSED:
            self.ctx.set_mode(GameMode.RUNNING)

    def handle(self, command: Command) -> None:
        if command is Command.START:
            self.start()
        elif command is Command.RESTART:
            self.restart()
        elif command is Command.TOGGLE_PAUSE:
            self.toggle_pause()

    def tick(self, dt: float, controls: Optional[Controls] = None, commands: Iterable[Command] = ()) -> Snapshot:
        self.ctx.cues.clear()
        for command in commands:
            self.handle(command)
        self.ctx.controls = controls or Controls()
        # Long stalls advance at most one capped step
        self.world.process(clamp(dt, 0.0, self.settings.simulation.max_dt))
        return self.snapshot()

    # Queries
    def _alive(self, component_type: type) -> List[int]:
        return sorted(e for e, _ in self.world.get_component(component_type) if self.world.entity_exists(e))

    def enemy_ids(self) -> List[int]:
        return self._alive(EnemyBrain)

    def projectile_ids(self) -> List[int]:
        return self._alive(Projectile)

    def wall_ids(self) -> List[int]:
        return self._alive(Wall)

    def snapshot(self) -> Snapshot:
        return Snapshot(
            mode=self.ctx.mode,
            score=self.ctx.score,
            lives=self.ctx.lives,
            level_index=self.ctx.level_index,
            enemies=len(self.enemy_ids()),
            elapsed=self.ctx.stats.time_sec,
            cues=list(self.ctx.cues),
        )
