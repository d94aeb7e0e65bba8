import random

import pytest

from conftest import add_idle_enemy
from tank_battle.arena import derive_walls
from tank_battle.context import Command, Controls, GameMode
from tank_battle.ecs_components import Collider, Position, Tank
from tank_battle.simulation import Simulation


@pytest.fixture
def sim(settings):
    return Simulation(settings, seed=11)


def test_starts_in_intro_and_does_not_advance(sim):
    assert sim.ctx.mode is GameMode.INTRO
    pos = sim.world.component_for_entity(sim.player_eid, Position)
    before = (pos.x, pos.y)
    snap = sim.tick(1 / 60, Controls(forward=True))
    assert snap.elapsed == 0.0
    assert (pos.x, pos.y) == before


def test_start_builds_a_fresh_round(sim, settings):
    sim.start()
    snap = sim.snapshot()
    assert snap.mode is GameMode.RUNNING
    assert snap.lives == settings.gameplay.lives
    assert snap.score == 0
    assert snap.level_index == 1
    assert snap.enemies == settings.arena.enemy_count
    assert len(sim.wall_ids()) == len(derive_walls(sim.ctx.level))


def test_start_is_ignored_while_running_or_paused(sim):
    sim.start()
    sim.ctx.score = 500
    sim.handle(Command.START)
    assert sim.ctx.score == 500
    sim.toggle_pause()
    sim.handle(Command.START)
    assert sim.ctx.mode is GameMode.PAUSED
    assert sim.ctx.score == 500


def test_pause_freezes_the_simulation(sim):
    sim.start()
    sim.tick(1 / 60)
    snap = sim.tick(1 / 60, commands=[Command.TOGGLE_PAUSE])
    assert snap.mode is GameMode.PAUSED
    elapsed = snap.elapsed
    positions = [(p.x, p.y) for _, p in sim.world.get_component(Position)]
    for _ in range(10):
        sim.tick(1 / 60, Controls(forward=True, fire=True))
    assert sim.ctx.stats.time_sec == elapsed
    assert [(p.x, p.y) for _, p in sim.world.get_component(Position)] == positions
    assert sim.tick(1 / 60, commands=[Command.TOGGLE_PAUSE]).mode is GameMode.RUNNING


def test_toggle_pause_outside_a_round_does_nothing(sim):
    sim.toggle_pause()
    assert sim.ctx.mode is GameMode.INTRO


def test_restart_resets_everything(sim, settings):
    sim.start()
    sim.ctx.score = 700
    sim.ctx.lives = 1
    for e in sim.wall_ids()[:5]:
        sim.world.delete_entity(e)
    sim.tick(1 / 60, commands=[Command.RESTART])
    assert sim.ctx.mode is GameMode.INTRO
    assert sim.ctx.score == 0
    assert sim.ctx.lives == settings.gameplay.lives
    assert len(sim.wall_ids()) == len(derive_walls(sim.ctx.level))
    assert len(sim.enemy_ids()) == settings.arena.enemy_count


def test_long_stall_is_clamped(sim):
    sim.start()
    snap = sim.tick(5.0)
    assert snap.elapsed == pytest.approx(0.033)
    snap = sim.tick(-1.0)
    assert snap.elapsed == pytest.approx(0.033)


def test_win_only_when_last_enemy_is_gone(open_sim):
    first = add_idle_enemy(open_sim, 800.0, 100.0)
    second = add_idle_enemy(open_sim, 900.0, 100.0)
    open_sim.world.delete_entity(first)
    assert open_sim.tick(1 / 60).mode is GameMode.RUNNING
    open_sim.world.delete_entity(second)
    snap = open_sim.tick(1 / 60)
    assert snap.mode is GameMode.WIN
    assert open_sim.ctx.stats.final_score == 0


def test_start_after_round_end_begins_a_new_run(open_sim):
    open_sim.tick(1 / 60)
    assert open_sim.ctx.mode is GameMode.WIN
    open_sim.ctx.score = 400
    # terminal modes stay put until told otherwise
    open_sim.tick(1 / 60)
    assert open_sim.ctx.mode is GameMode.WIN
    open_sim.handle(Command.START)
    assert open_sim.ctx.mode is GameMode.RUNNING
    assert open_sim.ctx.score == 0


def test_instances_are_independent(settings):
    a = Simulation(settings, seed=5)
    b = Simulation(settings, seed=5)
    a.start()
    b.start()
    for _ in range(30):
        a.tick(1 / 60, Controls(forward=True))
    assert b.ctx.stats.time_sec == 0.0
    pa = a.world.component_for_entity(a.player_eid, Position)
    pb = b.world.component_for_entity(b.player_eid, Position)
    assert (pa.x, pa.y) != (pb.x, pb.y)


def _tank_states(sim):
    return sorted((e, round(p.x, 6), round(p.y, 6), round(t.angle, 6)) for e, (p, t) in sim.world.get_components(Position, Tank))


def test_same_seed_same_game(settings):
    runs = []
    for _ in range(2):
        sim = Simulation(settings, seed=99)
        sim.start()
        for i in range(240):
            sim.tick(1 / 60, Controls(forward=i % 3 == 0, turn_left=i % 50 < 10, fire=True))
        runs.append((sim.snapshot().score, sim.ctx.lives, _tank_states(sim)))
    assert runs[0] == runs[1]


def test_tanks_stay_inside_the_arena(settings):
    sim = Simulation(settings, seed=2024)
    sim.start()
    rng = random.Random(8)
    w, h = settings.arena.width, settings.arena.height
    for _ in range(600):
        controls = Controls(
            turn_left=rng.random() < 0.3,
            turn_right=rng.random() < 0.3,
            forward=rng.random() < 0.6,
            backward=rng.random() < 0.2,
            strafe_left=rng.random() < 0.2,
            strafe_right=rng.random() < 0.2,
            fire=rng.random() < 0.5,
        )
        sim.tick(1 / 60, controls)
        assert sim.ctx.lives >= 0
        for e, (pos, col, _t) in sim.world.get_components(Position, Collider, Tank):
            assert col.radius + 1 <= pos.x <= w - col.radius - 1
            assert col.radius + 1 <= pos.y <= h - col.radius - 1
