from __future__ import annotations

import math

TWO_PI = math.pi * 2


def clamp(v: float, lo: float, hi: float) -> float:
    return max(lo, min(hi, v))


def lerp(a: float, b: float, t: float) -> float:
    return a + (b - a) * t


def aabb_intersect(a, b) -> bool:
    """Strict overlap of two objects exposing x, y, w, h."""
    return a.x < b.x + b.w and a.x + a.w > b.x and a.y < b.y + b.h and a.y + a.h > b.y


def circle_rect_hit(cx: float, cy: float, r: float, rect) -> bool:
    # Closest point of the rect to the circle centre; touching counts as a hit
    px = clamp(cx, rect.x, rect.x + rect.w)
    py = clamp(cy, rect.y, rect.y + rect.h)
    dx, dy = cx - px, cy - py
    return dx * dx + dy * dy <= r * r


def circles_hit(ax: float, ay: float, ar: float, bx: float, by: float, br: float) -> bool:
    dx, dy = ax - bx, ay - by
    rr = ar + br
    return dx * dx + dy * dy <= rr * rr


def norm_angle(a: float) -> float:
    """Wrap an angle into (-pi, pi]."""
    a = math.fmod(a, TWO_PI)
    if a > math.pi:
        a -= TWO_PI
    if a <= -math.pi:
        a += TWO_PI
    return a
