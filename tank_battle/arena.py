from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import IntEnum
from typing import Dict, List, Sequence

from .ecs_components import Wall


class TileType(IntEnum):
    EMPTY = 0
    BRICK = 1
    STEEL = 2
    WATER = 3
    GRASS = 4


BRICK_HP = 2

# Speed retention multiplier per terrain; missing entries mean no slowdown
TILE_FRICTION: Dict[TileType, float] = {
    TileType.WATER: 0.70,
    TileType.GRASS: 0.88,
}


@dataclass
class Level:
    """Rectangular tile grid, indexed grid[row][col]."""
    cols: int
    rows: int
    tile_size: int
    grid: List[List[TileType]] = field(default_factory=list)

    def __post_init__(self) -> None:
        assert self.tile_size > 0, "tile size must be positive"
        if not self.grid:
            self.grid = [[TileType.EMPTY] * self.cols for _ in range(self.rows)]

    @classmethod
    def from_arena(cls, width: int, height: int, tile_size: int) -> "Level":
        return cls(cols=width // tile_size, rows=height // tile_size, tile_size=tile_size)

    @classmethod
    def from_codes(cls, codes: Sequence[Sequence[int]], tile_size: int) -> "Level":
        """Build a level from plain tile codes, enforcing the steel border."""
        rows = len(codes)
        cols = len(codes[0]) if rows else 0
        if rows < 3 or cols < 3:
            raise ValueError(f"level must be at least 3x3, got {cols}x{rows}")
        grid: List[List[TileType]] = []
        for y, row in enumerate(codes):
            if len(row) != cols:
                raise ValueError(f"row {y} has {len(row)} cells, expected {cols}")
            try:
                grid.append([TileType(int(c)) for c in row])
            except ValueError:
                raise ValueError(f"row {y} contains an unknown tile code: {list(row)}") from None
        level = cls(cols=cols, rows=rows, tile_size=tile_size, grid=grid)
        if not level.border_is_steel():
            raise ValueError("level border must be fully steel")
        return level

    def as_codes(self) -> List[List[int]]:
        return [[int(t) for t in row] for row in self.grid]

    def border_is_steel(self) -> bool:
        top, bottom = self.grid[0], self.grid[-1]
        if any(t != TileType.STEEL for t in top + bottom):
            return False
        return all(row[0] == TileType.STEEL and row[-1] == TileType.STEEL for row in self.grid)

    def fill_rect(self, x0: int, y0: int, w: int, h: int, tile: TileType) -> None:
        # Interior only: the border stays steel whatever the layout asks for
        for y in range(y0, y0 + h):
            for x in range(x0, x0 + w):
                if 0 < x < self.cols - 1 and 0 < y < self.rows - 1:
                    self.grid[y][x] = tile


def empty_level(width: int, height: int, tile_size: int = 32) -> Level:
    """Open arena: steel border, nothing inside."""
    level = Level.from_arena(width, height, tile_size)
    for x in range(level.cols):
        level.grid[0][x] = TileType.STEEL
        level.grid[level.rows - 1][x] = TileType.STEEL
    for y in range(level.rows):
        level.grid[y][0] = TileType.STEEL
        level.grid[y][level.cols - 1] = TileType.STEEL
    return level


def generate_level(width: int, height: int, tile_size: int = 32) -> Level:
    level = empty_level(width, height, tile_size)
    cols, rows = level.cols, level.rows
    put = level.fill_rect

    # Brick rooms in the top corners
    put(3, 3, 6, 1, TileType.BRICK)
    put(3, 4, 1, 4, TileType.BRICK)
    put(8, 4, 1, 4, TileType.BRICK)
    put(cols - 9, 3, 6, 1, TileType.BRICK)
    put(cols - 9, 4, 1, 4, TileType.BRICK)
    put(cols - 4, 4, 1, 4, TileType.BRICK)

    # Steel barriers
    put(6, 9, cols - 12, 1, TileType.STEEL)
    put(6, rows - 10, cols - 12, 1, TileType.STEEL)

    # Central brick cross
    put(cols // 2 - 4, rows // 2 - 1, 8, 1, TileType.BRICK)
    put(cols // 2 - 1, rows // 2 - 4, 1, 8, TileType.BRICK)

    # Terrain
    put(2, rows - 6, 5, 3, TileType.GRASS)
    put(cols - 7, rows - 6, 5, 3, TileType.GRASS)
    put(cols // 2 - 2, 2, 4, 2, TileType.WATER)
    return level


def derive_walls(level: Level) -> List[Wall]:
    ts = level.tile_size
    walls: List[Wall] = []
    for y, row in enumerate(level.grid):
        for x, t in enumerate(row):
            if t == TileType.BRICK:
                walls.append(Wall(x * ts, y * ts, ts, ts, TileType.BRICK, BRICK_HP))
            elif t == TileType.STEEL:
                walls.append(Wall(x * ts, y * ts, ts, ts, TileType.STEEL, math.inf))
    return walls


def tile_at(level: Level, x: float, y: float) -> TileType:
    """Tile under a world coordinate. Anything outside the grid reads as steel."""
    tx = math.floor(x / level.tile_size)
    ty = math.floor(y / level.tile_size)
    if tx < 0 or ty < 0 or tx >= level.cols or ty >= level.rows:
        return TileType.STEEL
    return level.grid[ty][tx]


def friction_at(level: Level, x: float, y: float) -> float:
    return TILE_FRICTION.get(tile_at(level, x, y), 1.0)
