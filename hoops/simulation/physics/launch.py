"""Releasing the ball: shots and passes.

Both go through `solve_launch`, so the ball lands exactly where it was aimed
under the same drag and gravity the flight pass integrates. A shot's result
is rolled at release: a make is aimed at the hoop center, a miss at a point
off the rim. Score detection only lets a recorded make through.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from ..context import SimulationContext
from ..core.court import THREE_POINT_DISTANCE
from ..core.entities import Player, ShotAttempt
from ..core.events import EventType
from ..core.geometry import clamp
from ..core.vec2 import Vec2
from .ball_flight import (
    PASS_ARRIVAL_HEIGHT,
    SHOT_ARRIVAL_HEIGHT,
    pass_flight_ticks,
    shot_flight_ticks,
    solve_launch,
)

logger = logging.getLogger(__name__)


MISS_LATERAL_MIN = 35.0     # Off-rim offset, always > hoop radius
MISS_LATERAL_MAX = 50.0
MISS_SHORT_MAX = 15.0
PASS_LEAD = 0.5             # Fraction of receiver velocity × flight time to lead by


def miss_point(hoop: Vec2, origin: Vec2, rng: random.Random) -> Vec2:
    """A landing point beside the rim and slightly short of it."""
    toward = origin.direction_to(hoop)
    if toward == Vec2.zero():
        toward = Vec2(1, 0)
    lateral = toward.perpendicular() * (rng.uniform(MISS_LATERAL_MIN, MISS_LATERAL_MAX) * rng.choice((-1, 1)))
    short = toward * -rng.uniform(0.0, MISS_SHORT_MAX)
    return hoop + lateral + short


def release_shot(
    ctx: SimulationContext,
    shooter: Player,
    accuracy: float,
    power: float = 1.0,
    is_three_attempt: bool = False,
    aim: Optional[Vec2] = None,
) -> ShotAttempt:
    """Launch a shot at the shooter's attacking hoop.

    Args:
        accuracy: Make probability, rolled once here
        power: 0-1 release power; soft releases hang longer
        aim: Optional aim point replacing the hoop center

    Returns:
        The ShotAttempt now riding on the ball
    """
    ball = ctx.ball
    hoop = ctx.court.attacking_hoop(shooter.side)
    distance = shooter.pos.distance_to(hoop)
    made = ctx.rng.random() < accuracy

    target = aim if aim is not None else hoop
    landing = target if made else miss_point(target, ball.pos, ctx.rng)
    ticks = shot_flight_ticks(distance, power, ctx.clock.ticks_per_second)
    velocity, vz = solve_launch(ball.pos, landing, ticks, end_z=SHOT_ARRIVAL_HEIGHT)

    shooter.begin_shot()
    ctx.release_ball(velocity, vz)

    shot = ShotAttempt(
        shooter_id=shooter.id,
        side=shooter.side,
        release_pos=shooter.pos,
        distance=distance,
        is_three_attempt=is_three_attempt or distance > THREE_POINT_DISTANCE,
        made=made,
    )
    ball.shot = shot
    if ball.last_passer_id == shooter.id:
        ball.last_passer_id = None

    team = ctx.team(shooter.side)
    shooter.stats.shots_attempted += 1
    team.stats.field_goals_attempted += 1
    if shot.points == 3:
        shooter.stats.three_attempted += 1
        team.stats.threes_attempted += 1

    ctx.emit(
        EventType.SHOT_ATTEMPT,
        player_id=shooter.id,
        description=f"{shooter.name} shoots from {distance:.0f}",
        distance=round(distance, 1),
        accuracy=round(accuracy, 3),
        points=shot.points,
    )
    logger.debug(f"{shooter.id} shot d={distance:.0f} acc={accuracy:.2f} make={made}")
    return shot


def release_pass(ctx: SimulationContext, passer: Player, receiver: Player) -> Vec2:
    """Throw the ball to where the receiver will be and send them there.

    Returns:
        The landing point
    """
    ball = ctx.ball
    distance = ball.pos.distance_to(receiver.pos)
    ticks = pass_flight_ticks(distance, ctx.clock.ticks_per_second)
    landing = receiver.pos + receiver.velocity * (ticks * PASS_LEAD)
    landing = Vec2(
        clamp(landing.x, ctx.court.min_x, ctx.court.max_x),
        clamp(landing.y, ctx.court.min_y, ctx.court.max_y),
    )

    velocity, vz = solve_launch(ball.pos, landing, ticks, end_z=PASS_ARRIVAL_HEIGHT)
    ctx.release_ball(velocity, vz)
    ball.shot = None
    ball.last_passer_id = passer.id
    receiver.set_target(landing)

    ctx.emit(
        EventType.PASS,
        player_id=passer.id,
        target_id=receiver.id,
        description=f"{passer.name} passes to {receiver.name}",
        distance=round(distance, 1),
    )
    return landing
