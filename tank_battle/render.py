from __future__ import annotations

import math

import pygame

from .arena import TileType
from .config import Settings
from .context import GameMode
from .ecs_components import Collider, Particle, PlayerControl, Position, Projectile, Tank, TankKind, Wall
from .geometry import clamp
from .simulation import Simulation


BG = (11, 16, 32)
GRID = (24, 29, 45)
WATER = (33, 62, 84)
GRASS = (22, 58, 55)
BRICK_EDGE = (120, 54, 44)
STEEL_EDGE = (66, 75, 102)
BULLET_PLAYER = (246, 247, 255)
BULLET_ENEMY = (255, 77, 109)


class Renderer:
    def __init__(self, surface: pygame.Surface, settings: Settings) -> None:
        self.surf = surface
        self.settings = settings
        self.time = 0.0

    def draw(self, sim: Simulation, dt: float) -> None:
        self.time += dt
        world = sim.world
        level = sim.ctx.level
        gp = self.settings.gameplay
        w, h = self.surf.get_size()
        self.surf.fill(BG)

        if level is not None:
            ts = level.tile_size
            for x in range(0, w + 1, ts):
                pygame.draw.line(self.surf, GRID, (x, 0), (x, h))
            for y in range(0, h + 1, ts):
                pygame.draw.line(self.surf, GRID, (0, y), (w, y))
            for ty, row in enumerate(level.grid):
                for tx, t in enumerate(row):
                    if t == TileType.WATER:
                        pygame.draw.rect(self.surf, WATER, pygame.Rect(tx * ts, ty * ts, ts, ts))
                    elif t == TileType.GRASS:
                        pygame.draw.rect(self.surf, GRASS, pygame.Rect(tx * ts, ty * ts, ts, ts))

        for e, wall in world.get_component(Wall):
            if not world.entity_exists(e):
                continue
            rect = pygame.Rect(int(wall.x), int(wall.y), int(wall.w), int(wall.h))
            brick = wall.kind == TileType.BRICK
            pygame.draw.rect(self.surf, gp.brick_color if brick else gp.steel_color, rect)
            pygame.draw.rect(self.surf, BRICK_EDGE if brick else STEEL_EDGE, rect.inflate(-2, -2), 2)
            if brick and wall.hp == 1:
                pygame.draw.rect(self.surf, BRICK_EDGE, rect.inflate(-8, -8))

        for e, (pos, col, tank) in world.get_components(Position, Collider, Tank):
            if not world.entity_exists(e):
                continue
            color = gp.player_color if tank.kind is TankKind.PLAYER else gp.enemy_color
            self._draw_tank(pos, col.radius, tank.angle, color)
            pc = world.try_component(e, PlayerControl)
            if pc is not None and pc.invuln > 0:
                pulse = int(120 + 100 * math.sin(self.time * 18))
                pygame.draw.circle(self.surf, (pulse, 231, 255), (int(pos.x), int(pos.y)), int(col.radius + 6), 2)

        for e, (pos, col, proj) in world.get_components(Position, Collider, Projectile):
            if not world.entity_exists(e):
                continue
            color = BULLET_PLAYER if proj.owner is TankKind.PLAYER else BULLET_ENEMY
            pygame.draw.circle(self.surf, color, (int(pos.x), int(pos.y)), max(1, round(col.radius)))

        for _, (pos, part) in world.get_components(Position, Particle):
            fade = clamp(part.life / part.max_life, 0.0, 1.0)
            color = tuple(int(c * fade + b * (1 - fade)) for c, b in zip(part.color, BG))
            pygame.draw.circle(self.surf, color, (int(pos.x), int(pos.y)), max(1, round(part.radius)))

        if sim.ctx.mode is GameMode.PAUSED:
            shade = pygame.Surface((w, h), pygame.SRCALPHA)
            shade.fill((0, 0, 0, 56))
            self.surf.blit(shade, (0, 0))

    def _draw_tank(self, pos: Position, r: float, angle: float, color: tuple[int, int, int]) -> None:
        ca, sa = math.cos(angle), math.sin(angle)

        def rot(px: float, py: float) -> tuple[float, float]:
            return pos.x + px * ca - py * sa, pos.y + px * sa + py * ca

        pygame.draw.ellipse(self.surf, (5, 8, 16), pygame.Rect(int(pos.x - r + 3), int(pos.y - r * 0.9 + 5), int(r * 2.1), int(r * 1.8)))
        hull = [rot(-r, -r * 0.75), rot(r, -r * 0.75), rot(r, r * 0.75), rot(-r, r * 0.75)]
        pygame.draw.polygon(self.surf, color, hull)
        pygame.draw.polygon(self.surf, (0, 0, 0), hull, 2)
        pygame.draw.circle(self.surf, tuple(min(255, c + 40) for c in color), (int(pos.x), int(pos.y)), int(r * 0.55))
        pygame.draw.line(self.surf, (30, 30, 40), rot(2, 0), rot(r + 12, 0), 7)
