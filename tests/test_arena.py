import math

import pytest

from tank_battle.arena import (
    BRICK_HP,
    Level,
    TileType,
    derive_walls,
    empty_level,
    friction_at,
    generate_level,
    tile_at,
)


@pytest.fixture
def level():
    return generate_level(1024, 768, 32)


def test_grid_dimensions_floor_the_arena_size():
    lv = generate_level(1000, 700, 32)
    assert (lv.cols, lv.rows) == (31, 21)
    assert len(lv.grid) == 21 and all(len(row) == 31 for row in lv.grid)


def test_border_is_steel(level):
    assert level.border_is_steel()
    assert all(t == TileType.STEEL for t in level.grid[0])
    assert all(row[-1] == TileType.STEEL for row in level.grid)


def test_small_arena_keeps_its_border():
    lv = generate_level(8 * 32, 8 * 32, 32)
    assert lv.border_is_steel()


def test_layout_features(level):
    codes = level.as_codes()
    assert codes[3][3:9] == [1] * 6  # top-left brick room
    assert codes[9][6] == 2 and codes[level.rows - 10][level.cols - 7] == 2  # steel barriers
    assert codes[level.rows // 2 - 1][level.cols // 2 - 4] == 1  # central cross
    assert codes[2][level.cols // 2 - 2] == 3  # water
    assert codes[level.rows - 6][2] == 4  # grass


def test_derive_walls_one_per_solid_cell(level):
    walls = derive_walls(level)
    solid = sum(1 for row in level.grid for t in row if t in (TileType.BRICK, TileType.STEEL))
    assert len(walls) == solid
    bricks = [w for w in walls if w.kind == TileType.BRICK]
    steels = [w for w in walls if w.kind == TileType.STEEL]
    assert bricks and steels
    assert all(w.hp == BRICK_HP and w.destructible for w in bricks)
    assert all(math.isinf(w.hp) and not w.destructible for w in steels)
    first = walls[0]
    assert (first.x, first.y, first.w, first.h) == (0, 0, 32, 32)


def test_tile_at_out_of_grid_reads_as_steel(level):
    assert tile_at(level, -1, 100) == TileType.STEEL
    assert tile_at(level, 100, -0.5) == TileType.STEEL
    assert tile_at(level, 1024, 100) == TileType.STEEL
    assert tile_at(level, 100, 10_000) == TileType.STEEL


def test_tile_at_interior(level):
    assert tile_at(level, 14 * 32 + 1, 2 * 32 + 1) == TileType.WATER
    assert tile_at(level, 64 + 5, 64 + 5) == TileType.EMPTY
    assert tile_at(level, 3 * 32, 3 * 32) == TileType.BRICK


def test_friction(level):
    assert friction_at(level, 14 * 32 + 1, 2 * 32 + 1) == pytest.approx(0.70)
    assert friction_at(level, 2 * 32 + 1, (level.rows - 6) * 32 + 1) == pytest.approx(0.88)
    assert friction_at(level, 64 + 5, 64 + 5) == 1.0
    assert friction_at(level, -50, -50) == 1.0


def test_codes_round_trip(level):
    again = Level.from_codes(level.as_codes(), 32)
    assert again.grid == level.grid


def test_from_codes_rejects_bad_grids():
    with pytest.raises(ValueError):
        Level.from_codes([[2, 2, 2], [2, 0, 2], [2, 0, 2]], 32)  # open bottom edge
    with pytest.raises(ValueError):
        Level.from_codes([[2, 2, 2], [2, 0], [2, 2, 2]], 32)
    with pytest.raises(ValueError):
        Level.from_codes([[2, 2, 2], [2, 9, 2], [2, 2, 2]], 32)


def test_empty_level_has_only_border():
    lv = empty_level(320, 320, 32)
    walls = derive_walls(lv)
    assert len(walls) == 4 * 10 - 4
    assert tile_at(lv, 160, 160) == TileType.EMPTY
