"""Scalar math and collision predicates shared by physics and AI."""

from __future__ import annotations

from .vec2 import Vec2


def clamp(value: float, low: float, high: float) -> float:
    """Clamp value to [low, high]."""
    return max(low, min(high, value))


def circles_overlap(a: Vec2, radius_a: float, b: Vec2, radius_b: float) -> bool:
    """True if two circles strictly overlap."""
    return a.distance_to(b) < radius_a + radius_b


def format_clock(seconds: float) -> str:
    """Format seconds as M:SS."""
    seconds = max(0, int(seconds))
    return f"{seconds // 60}:{seconds % 60:02d}"
