import math

import pytest

from tank_battle.ecs_components import Wall
from tank_battle.arena import TileType
from tank_battle.geometry import aabb_intersect, circle_rect_hit, circles_hit, clamp, lerp, norm_angle


def rect(x, y, w, h):
    return Wall(x, y, w, h, TileType.STEEL, math.inf)


def test_clamp_and_lerp():
    assert clamp(5, 0, 3) == 3
    assert clamp(-1, 0, 3) == 0
    assert clamp(2, 0, 3) == 2
    assert lerp(0.22, 0.52, 0.5) == pytest.approx(0.37)
    assert lerp(10, 20, 0) == 10


def test_aabb_overlap_is_strict():
    a = rect(0, 0, 10, 10)
    assert aabb_intersect(a, rect(5, 5, 10, 10))
    assert not aabb_intersect(a, rect(10, 0, 10, 10))
    assert not aabb_intersect(a, rect(0, 20, 5, 5))


def test_circle_rect_hit():
    r = rect(10, 0, 10, 10)
    assert circle_rect_hit(15, 5, 1, r)  # centre inside
    assert circle_rect_hit(5, 5, 5, r)  # exactly touching the left edge
    assert not circle_rect_hit(4.9, 5, 5, r)
    # near the corner the exact distance matters, not the bounding box
    assert not circle_rect_hit(6, -4, 5, r)
    assert circle_rect_hit(7, -2, 5, r)


def test_circles_hit():
    assert circles_hit(0, 0, 2, 3, 4, 3)
    assert not circles_hit(0, 0, 2, 3, 4, 2.9)


@pytest.mark.parametrize("a", [0.0, 1.0, -1.0, math.pi, -math.pi, 3 * math.pi, -3 * math.pi, 7.5, -100.0, 1e6, 2 * math.pi, -2 * math.pi])
def test_norm_angle_range_and_idempotence(a):
    n = norm_angle(a)
    assert -math.pi < n <= math.pi
    assert norm_angle(n) == n
    assert math.cos(n) == pytest.approx(math.cos(a), abs=1e-6)
    assert math.sin(n) == pytest.approx(math.sin(a), abs=1e-6)


def test_norm_angle_maps_minus_pi_to_pi():
    assert norm_angle(-math.pi) == math.pi
