"""Ball flight: gravity, drag, bounces, and launch solving.

The ball is integrated once per tick here and nowhere else. Height (z) is
above the floor; the hoop sits at floor level in this top-down model, so a
made shot is a ball descending through the hoop circle at low height.
"""

from __future__ import annotations

from ..core.entities import Ball
from ..core.vec2 import Vec2


# =============================================================================
# Constants (per tick)
# =============================================================================

GRAVITY = 0.5
AIR_RESISTANCE = 0.99
RESTITUTION = 0.7
BOUNCE_STOP_THRESHOLD = 0.5     # |vz| below this after a bounce -> vz = 0
GROUND_FRICTION = 0.9
REST_SPEED = 0.05               # Rolling ball below this speed comes to rest

SHOT_ARRIVAL_HEIGHT = 5.0
PASS_ARRIVAL_HEIGHT = 12.0
MIN_FLIGHT_TICKS = 8
MAX_PASS_SECONDS = 0.6          # Upper bound on pass flight time


def integrate(ball: Ball) -> bool:
    """Advance an airborne ball by one tick.

    Returns:
        True if the ball bounced off the floor this tick
    """
    ball.vz = (ball.vz - GRAVITY) * AIR_RESISTANCE
    ball.velocity = ball.velocity * AIR_RESISTANCE
    ball.pos = ball.pos + ball.velocity
    ball.z += ball.vz

    if ball.z > 0:
        return False

    ball.z = 0.0
    rebound = -ball.vz * RESTITUTION if ball.vz < 0 else ball.vz
    if abs(rebound) >= BOUNCE_STOP_THRESHOLD:
        ball.vz = rebound
        return True

    # Done bouncing: roll with floor friction
    ball.vz = 0.0
    ball.velocity = ball.velocity * GROUND_FRICTION
    if ball.velocity.length() < REST_SPEED:
        ball.velocity = Vec2.zero()
    return False


# =============================================================================
# Launch solving
# =============================================================================

def _drag_sum(ticks: int) -> float:
    """Sum of AIR_RESISTANCE^k for k = 1..ticks (horizontal travel per unit v0)."""
    a = AIR_RESISTANCE
    return a * (1 - a ** ticks) / (1 - a)


def _gravity_drop(ticks: int) -> float:
    """Height change after `ticks` for a ball launched with vz = 0."""
    vz = 0.0
    z = 0.0
    for _ in range(ticks):
        vz = (vz - GRAVITY) * AIR_RESISTANCE
        z += vz
    return z


def solve_launch(
    start: Vec2,
    target: Vec2,
    ticks: int,
    start_z: float = 0.0,
    end_z: float = 0.0,
) -> tuple[Vec2, float]:
    """Launch velocity that puts the ball at (target, end_z) after `ticks`.

    Integration is linear in the launch velocity, so both components are
    solved exactly against the same drag and gravity `integrate` applies.

    Returns:
        (horizontal velocity, vertical velocity)
    """
    ticks = max(MIN_FLIGHT_TICKS, ticks)
    travel = _drag_sum(ticks)
    velocity = (target - start) / travel
    vz = (end_z - start_z - _gravity_drop(ticks)) / travel
    return velocity, vz


def shot_flight_ticks(distance: float, power: float, ticks_per_second: int = 60) -> int:
    """Flight time for a shot: longer for distant shots and soft releases."""
    seconds = (1 + distance / 300 + (1 - power) * 0.5) / 2
    return max(MIN_FLIGHT_TICKS, round(seconds * ticks_per_second))


def pass_flight_ticks(distance: float, ticks_per_second: int = 60) -> int:
    """Flight time for a pass."""
    seconds = min(MAX_PASS_SECONDS, (0.5 + distance / 500) / 2)
    return max(MIN_FLIGHT_TICKS, round(seconds * ticks_per_second))

