"""Situation analysis and the probability helpers the AI rolls against.

Everything here is a pure read of the context: no entity is mutated.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional

from ..context import SimulationContext
from ..core.court import MID_RANGE_DISTANCE, THREE_POINT_DISTANCE, Side
from ..core.entities import Player
from ..core.geometry import clamp


# =============================================================================
# Tunables
# =============================================================================

PRESSURE_RADIUS = 150.0
MAX_PRESSURE = 100.0
BLOCK_RADIUS = 120.0
MAX_DUNK_BLOCK_CHANCE = 0.5

SHOT_CLOCK_CRITICAL = 5
LOSING_BADLY_MARGIN = -10
WINNING_COMFORTABLY_MARGIN = 10
CRUNCH_TIME_QUARTER = 4
CRUNCH_TIME_SECONDS = 60


class SituationType(str, Enum):
    """Game situation classes, checked in declaration order."""
    SHOT_CLOCK_CRITICAL = "shot_clock_critical"
    LOSING_BADLY = "losing_badly"
    LOSING = "losing"
    WINNING_COMFORTABLY = "winning_comfortably"
    CRUNCH_TIME = "crunch_time"
    NORMAL = "normal"


class ShotType(str, Enum):
    NORMAL = "normal"
    THREE = "three"


@dataclass
class Situation:
    """Snapshot of what the AI sees when it decides.

    Attributes:
        type: The classified situation
        shot_clock: Seconds left on the shot clock
        score_diff: AI side's lead (negative when trailing)
        quarter: Current quarter
        time_remaining: Seconds left in the quarter
        pressure: Team-level defensive pressure on the handler
    """
    type: SituationType
    shot_clock: int
    score_diff: int
    quarter: int
    time_remaining: int
    pressure: float = 0.0


# =============================================================================
# Classification
# =============================================================================

def classify(shot_clock: int, score_diff: int, quarter: int, time_remaining: int) -> SituationType:
    """First matching class wins."""
    if shot_clock < SHOT_CLOCK_CRITICAL:
        return SituationType.SHOT_CLOCK_CRITICAL
    if score_diff < LOSING_BADLY_MARGIN:
        return SituationType.LOSING_BADLY
    if score_diff < 0:
        return SituationType.LOSING
    if score_diff > WINNING_COMFORTABLY_MARGIN:
        return SituationType.WINNING_COMFORTABLY
    if quarter >= CRUNCH_TIME_QUARTER and time_remaining < CRUNCH_TIME_SECONDS:
        return SituationType.CRUNCH_TIME
    return SituationType.NORMAL


def analyze(ctx: SimulationContext, side: Side, handler: Optional[Player] = None) -> Situation:
    """Read the match state from `side`'s point of view."""
    state = ctx.state
    diff = state.score_diff(side)
    pressure = 0.0
    if handler is not None:
        pressure = team_pressure(handler, ctx.opponents(side), len(ctx.team(side).roster))

    return Situation(
        type=classify(state.shot_clock, diff, state.quarter, state.game_clock),
        shot_clock=state.shot_clock,
        score_diff=diff,
        quarter=state.quarter,
        time_remaining=state.game_clock,
        pressure=pressure,
    )


# =============================================================================
# Pressure
# =============================================================================

def defensive_pressure(player: Player, defenders: Iterable[Player]) -> float:
    """Weighted pressure on a player from nearby defenders, 0-100.

    Each defender inside the pressure radius contributes more the closer and
    better they are.
    """
    pressure = 0.0
    for defender in defenders:
        distance = defender.pos.distance_to(player.pos)
        if distance < PRESSURE_RADIUS:
            pressure += (PRESSURE_RADIUS - distance) * defender.attributes.defense / PRESSURE_RADIUS
    return min(MAX_PRESSURE, pressure)


def team_pressure(handler: Player, defenders: Iterable[Player], team_size: int) -> float:
    """Unweighted closeness of defenders to the handler, averaged over team size."""
    total = 0.0
    for defender in defenders:
        distance = defender.pos.distance_to(handler.pos)
        if distance < PRESSURE_RADIUS:
            total += (PRESSURE_RADIUS - distance) / PRESSURE_RADIUS
    return total / max(1, team_size)


# =============================================================================
# Probability helpers
# =============================================================================

def calculate_shot_accuracy(
    distance: float,
    skill: float,
    pressure: float,
    shot_type: ShotType = ShotType.NORMAL,
) -> float:
    """Make probability from distance, a 0-99 skill rating and 0-100 pressure.

    Non-increasing in pressure and in distance bucket; clamped to [0.1, 0.95].
    """
    base = skill / 100
    if distance > THREE_POINT_DISTANCE:
        distance_factor = 0.8 if shot_type == ShotType.THREE else 0.6
    elif distance > MID_RANGE_DISTANCE:
        distance_factor = 0.8
    else:
        distance_factor = 1.0

    defense_factor = 1.0 - clamp(pressure, 0.0, MAX_PRESSURE) / 100
    return clamp(base * distance_factor * defense_factor, 0.1, 0.95)


def dunk_block_chance(player: Player, defenders: Iterable[Player]) -> float:
    """Chance a dunk attempt gets blocked by the defenders around the rim."""
    chance = 0.0
    for defender in defenders:
        if defender.pos.distance_to(player.pos) < BLOCK_RADIUS:
            chance += defender.attributes.defense / 500
    return min(MAX_DUNK_BLOCK_CHANCE, chance)
