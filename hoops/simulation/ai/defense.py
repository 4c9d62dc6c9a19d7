"""Defensive behavior for an AI side without the ball.

Runs every tick. Man-to-man and press defenders shadow a mark at a scheme
distance; zone defenders hold formation spots. Any defender may roll for a
steal against the handler or a block against a shot in flight.
"""

from __future__ import annotations

import logging
import random
from typing import Optional

from ..context import Outcome, OutcomeKind, SimulationContext
from ..core.court import Court, Side
from ..core.entities import Player
from ..core.events import EventType
from ..core.team import DefenseScheme
from ..core.vec2 import Vec2
from .difficulty import DifficultyProfile

logger = logging.getLogger(__name__)


# =============================================================================
# Tunables
# =============================================================================

# Scheme -> (ideal distance to the handler, ideal distance to anyone else)
IDEAL_DISTANCE: dict[DefenseScheme, tuple[float, float]] = {
    DefenseScheme.MAN_TO_MAN: (80.0, 120.0),
    DefenseScheme.PRESS: (50.0, 90.0),
}

HANDLER_FOCUS_RADIUS = 200.0
CLOSE_OUT_GAIN = 1.2
BACK_OFF_GAIN = 0.5
BACK_OFF_SLACK = 20.0
PRESS_PUSH = 1.0

STEAL_RANGE = 100.0
STEAL_ATTEMPT_RATE = 0.01       # × aggression, per tick
STEAL_SUCCESS_SCALE = 0.3
BLOCK_RANGE = 120.0
BLOCK_MAX_HEIGHT = 100.0
BLOCK_ATTEMPT_RATE = 0.005      # × defense reaction, per tick
BLOCK_SUCCESS_SCALE = 0.2
BLOCK_REBOUND = -0.5
BLOCK_POP = 30.0


# Zone spots for a team defending the left hoop, mirrored for the right.
ZONE_FORMATIONS: dict[DefenseScheme, tuple[Vec2, ...]] = {
    DefenseScheme.ZONE_2_3: (
        Vec2(300, 200),
        Vec2(300, 400),
        Vec2(150, 250),
        Vec2(150, 350),
        Vec2(150, 450),
    ),
    DefenseScheme.ZONE_3_2: (
        Vec2(320, 150),
        Vec2(340, 300),
        Vec2(320, 450),
        Vec2(160, 230),
        Vec2(160, 370),
    ),
}


def zone_spots(court: Court, side: Side, scheme: DefenseScheme) -> list[Vec2]:
    """Formation spots for `side`'s zone, oriented to the hoop it defends."""
    formation = ZONE_FORMATIONS.get(scheme, ZONE_FORMATIONS[DefenseScheme.ZONE_2_3])
    return [court.mirror_for(side, spot) for spot in formation]


def ideal_distances(scheme: DefenseScheme) -> tuple[float, float]:
    return IDEAL_DISTANCE.get(scheme, IDEAL_DISTANCE[DefenseScheme.MAN_TO_MAN])


# =============================================================================
# Controller
# =============================================================================

class DefenseController:
    """Per-tick defensive movement and steal/block rolls for one side."""

    def __init__(self, ctx: SimulationContext, side: Side, difficulty: DifficultyProfile, rng: random.Random):
        self.ctx = ctx
        self.side = side
        self.difficulty = difficulty
        self.rng = rng

    @property
    def scheme(self) -> DefenseScheme:
        return self.ctx.team(self.side).strategy.defense

    def opposing_handler(self) -> Optional[Player]:
        holder = self.ctx.holder()
        if holder is not None and holder.side != self.side:
            return holder
        return None

    def update(self) -> None:
        defenders = [p for p in self.ctx.team(self.side).roster if not p.is_controlled]
        handler = self.opposing_handler()
        scheme = self.scheme

        if scheme.is_zone:
            for defender, spot in zip(defenders, zone_spots(self.ctx.court, self.side, scheme)):
                if defender.pos.distance_to(spot) > BACK_OFF_SLACK:
                    defender.set_target(spot)

        for defender in defenders:
            mark = self.find_mark(defender, handler)
            if mark is None:
                continue

            distance = defender.pos.distance_to(mark.pos)
            if not scheme.is_zone:
                self._shadow(defender, mark, distance, mark is handler)
                if scheme == DefenseScheme.PRESS:
                    self.press_push(defender)

            if mark is handler and distance < STEAL_RANGE and self.rng.random() < STEAL_ATTEMPT_RATE * self.difficulty.aggression:
                if self.attempt_steal(defender, handler):
                    handler = None

            self._maybe_block(defender)

    # =========================================================================
    # Positioning
    # =========================================================================

    def find_mark(self, defender: Player, handler: Optional[Player]) -> Optional[Player]:
        """The handler if close enough, otherwise the nearest opponent."""
        if handler is not None and defender.pos.distance_to(handler.pos) < HANDLER_FOCUS_RADIUS:
            return handler
        opponents = self.ctx.opponents(self.side)
        if not opponents:
            return None
        return min(opponents, key=lambda p: defender.pos.distance_to(p.pos))

    def _shadow(self, defender: Player, mark: Player, distance: float, on_ball: bool) -> None:
        on_ball_ideal, off_ball_ideal = ideal_distances(self.scheme)
        ideal = on_ball_ideal if on_ball else off_ball_ideal
        direction = defender.pos.direction_to(mark.pos)

        if distance > ideal:
            defender.nudge(direction, CLOSE_OUT_GAIN * self.difficulty.defense_reaction)
        elif distance < ideal - BACK_OFF_SLACK:
            defender.nudge(-direction, BACK_OFF_GAIN)

    def press_push(self, defender: Player) -> None:
        """Push toward the opponent's backcourt."""
        defender.nudge(Vec2(self.ctx.court.attack_direction(self.side), 0), PRESS_PUSH)

    # =========================================================================
    # Steals and blocks
    # =========================================================================

    def attempt_steal(self, defender: Player, handler: Player) -> bool:
        chance = defender.attributes.defense / 100 * STEAL_SUCCESS_SCALE * self.difficulty.aggression
        if self.rng.random() >= chance:
            return False

        self.ctx.give_ball(defender)
        self.ctx.queue(Outcome(
            kind=OutcomeKind.STEAL,
            side=defender.side,
            player_id=defender.id,
            target_id=handler.id,
        ))
        logger.debug(f"{defender.id} stole the ball from {handler.id}")
        return True

    def _maybe_block(self, defender: Player) -> None:
        ball = self.ctx.ball
        shot = ball.shot
        if not ball.in_air or shot is None or shot.side == self.side or shot.blocked:
            return
        if ball.z >= BLOCK_MAX_HEIGHT or defender.pos.distance_to(ball.pos) >= BLOCK_RANGE:
            return
        if self.rng.random() >= BLOCK_ATTEMPT_RATE * self.difficulty.defense_reaction:
            return
        self.attempt_block(defender)

    def attempt_block(self, defender: Player) -> bool:
        chance = defender.attributes.defense / 100 * BLOCK_SUCCESS_SCALE * self.difficulty.defense_reaction
        if self.rng.random() >= chance:
            return False

        ball = self.ctx.ball
        ball.velocity = ball.velocity * BLOCK_REBOUND
        ball.vz = BLOCK_POP
        ball.shot.blocked = True

        defender.stats.blocks += 1
        self.ctx.team(defender.side).stats.blocks += 1
        self.ctx.emit(
            EventType.BLOCK,
            player_id=defender.id,
            target_id=ball.shot.shooter_id,
            description=f"{defender.name} blocks the shot!",
        )
        return True
