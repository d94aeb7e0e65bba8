from __future__ import annotations

import random
from typing import Iterable

import pytest

from tank_battle.arena import empty_level
from tank_battle.config import Settings
from tank_battle.ecs_components import EnemyBrain, Tank
from tank_battle.factories import create_enemy
from tank_battle.simulation import Simulation


class ScriptedRandom(random.Random):
    """random.Random whose random() replays a fixed script and fails when it runs dry."""

    def __init__(self, values: Iterable[float]) -> None:
        super().__init__(0)
        self._values = list(values)

    def random(self) -> float:
        if not self._values:
            raise AssertionError("unexpected random draw")
        return self._values.pop(0)


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def open_sim(settings: Settings) -> Simulation:
    """Running simulation in a border-only arena with no enemies spawned."""
    settings.arena.enemy_count = 0
    a = settings.arena
    sim = Simulation(settings, seed=7, level_factory=lambda: empty_level(a.width, a.height, a.tile_size))
    sim.start()
    return sim


def add_idle_enemy(sim: Simulation, x: float, y: float, angle: float = 0.0) -> int:
    """Enemy that keeps still: long think timer and zero desired speed."""
    eid = create_enemy(sim.world, sim.settings.gameplay, (x, y), random.Random(0))
    brain = sim.world.component_for_entity(eid, EnemyBrain)
    brain.think_timer = 1000.0
    brain.desired_speed = 0.0
    brain.desired_angle = angle
    tank = sim.world.component_for_entity(eid, Tank)
    tank.angle = angle
    tank.fire_cooldown = 1000.0
    return eid
