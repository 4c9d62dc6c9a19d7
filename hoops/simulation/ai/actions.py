"""Offensive actions: candidate lists, capability filters, the roll, execution.

The action set is closed. Selection is a pure function of the situation, the
handler's ratings and one random roll; execution mutates entities through the
context and queues terminal outcomes for the orchestrator.
"""

from __future__ import annotations

import logging
import random
from enum import Enum
from typing import Callable, Optional, Sequence

from ..context import Outcome, OutcomeKind, SimulationContext
from ..core.court import THREE_POINT_DISTANCE
from ..core.entities import DribbleMove, Player
from ..core.events import EventType
from ..core.vec2 import Vec2
from ..physics.launch import release_pass, release_shot
from .difficulty import DifficultyProfile
from .situation import (
    ShotType,
    SituationType,
    calculate_shot_accuracy,
    defensive_pressure,
    dunk_block_chance,
)

logger = logging.getLogger(__name__)


class ActionType(str, Enum):
    """Everything a ball handler can decide to do."""
    SHOOT = "shoot"
    SHOOT_THREE = "shoot_three"
    MID_RANGE = "mid_range"
    DRIVE = "drive"
    DRIVE_AGGRESSIVE = "drive_aggressive"
    DUNK = "dunk"
    PASS = "pass"
    POST_UP = "post_up"
    PICK_AND_ROLL = "pick_and_roll"
    FAST_BREAK = "fast_break"
    TURNOVER = "turnover"


SHOOTING_ACTIONS = frozenset({ActionType.SHOOT, ActionType.SHOOT_THREE, ActionType.MID_RANGE})
DRIVING_ACTIONS = frozenset({ActionType.DRIVE, ActionType.DRIVE_AGGRESSIVE})
TACTIC_ACTIONS = frozenset({ActionType.PICK_AND_ROLL, ActionType.FAST_BREAK})


# =============================================================================
# Tunables
# =============================================================================

AI_SHOT_POWER = 0.7
DRIVE_DEPTH = 110.0             # Drive target: this far in front of the hoop
DRIVE_ARRIVED = 50.0
DRIVE_CLOSE = 100.0
DRIVE_SHOOT_CHANCE = 0.3
DRIVE_PASS_CHANCE = 0.2
AGGRESSIVE_DEPTH = 60.0
AGGRESSIVE_ARRIVED = 30.0
DUNK_RANGE = 80.0
DUNK_ATTEMPT_CHANCE = 0.5
DUNK_MAKE_CHANCE = 0.8
DUNK_SCORE_DELAY_MS = 1000
POST_DEPTH = 60.0               # The block
POST_ARRIVED = 30.0
HOOK_CHANCE = 0.4
TURNAROUND_CHANCE = 0.7
CATCH_AND_SHOOT_CHANCE = 0.3
CATCH_AND_SHOOT_DELAY_MS = 500
THREE_RELOCATE_DELAY_MS = 800
ARC_BUFFER = 15.0
THREE_DIFFICULTY = 0.9
MISTAKE_SCALE = 0.1

FANCY_DRIBBLES = (DribbleMove.CROSSOVER, DribbleMove.BEHIND_BACK, DribbleMove.SPIN)


# =============================================================================
# Selection
# =============================================================================

def candidate_actions(situation: SituationType) -> list[ActionType]:
    """Actions worth considering in a situation, before capability filtering."""
    if situation == SituationType.SHOT_CLOCK_CRITICAL:
        return [ActionType.SHOOT]
    if situation == SituationType.LOSING_BADLY:
        return [ActionType.SHOOT_THREE, ActionType.DRIVE_AGGRESSIVE, ActionType.FAST_BREAK]
    if situation == SituationType.CRUNCH_TIME:
        return [ActionType.DRIVE, ActionType.POST_UP, ActionType.MID_RANGE]
    return [
        ActionType.DRIVE,
        ActionType.SHOOT,
        ActionType.PASS,
        ActionType.POST_UP,
        ActionType.PICK_AND_ROLL,
    ]


def is_viable(action: ActionType, player: Player, teammates: Sequence[Player]) -> bool:
    """Can this handler reasonably attempt the action?"""
    attrs = player.attributes
    if action in SHOOTING_ACTIONS:
        return attrs.shooting > 70
    if action in DRIVING_ACTIONS:
        return attrs.dribbling > 75 and attrs.speed > 75
    if action == ActionType.POST_UP:
        return player.strength > 70 and player.height > 200
    if action == ActionType.PICK_AND_ROLL:
        return attrs.dribbling > 70 and any(t.role.is_frontcourt for t in teammates)
    return True


def viable_actions(
    candidates: Sequence[ActionType],
    player: Player,
    teammates: Sequence[Player],
) -> list[ActionType]:
    """Filter candidates by capability; an empty result defaults to passing."""
    viable = [a for a in candidates if is_viable(a, player, teammates)]
    return viable or [ActionType.PASS]


def choose_action(
    situation: SituationType,
    player: Player,
    teammates: Sequence[Player],
    difficulty: DifficultyProfile,
    rng: random.Random,
) -> ActionType:
    """Roll once against mistake rate and aggression, else pick uniformly."""
    viable = viable_actions(candidate_actions(situation), player, teammates)
    roll = rng.random()
    if roll < MISTAKE_SCALE * difficulty.mistake_rate:
        return ActionType.TURNOVER
    if ActionType.SHOOT in viable and roll < difficulty.aggression:
        return ActionType.SHOOT
    return rng.choice(viable)


def parse_action(value: str) -> ActionType:
    """Action from its wire name; unknown names fall back to PASS."""
    try:
        return ActionType(value)
    except ValueError:
        logger.warning(f"Unknown action '{value}', passing instead")
        return ActionType.PASS


# =============================================================================
# Execution
# =============================================================================

class ActionRunner:
    """Executes player-level actions for one AI side.

    Every method returns True if the action did something (moved, released
    the ball, queued an outcome) and False if it could not run.
    """

    def __init__(self, ctx: SimulationContext, difficulty: DifficultyProfile, rng: random.Random):
        self.ctx = ctx
        self.difficulty = difficulty
        self.rng = rng

    def run(self, action: ActionType, player: Player) -> bool:
        handlers: dict[ActionType, Callable[[Player], bool]] = {
            ActionType.SHOOT: self.shoot,
            ActionType.MID_RANGE: self.shoot,
            ActionType.SHOOT_THREE: self.shoot_three,
            ActionType.DRIVE: self.drive,
            ActionType.DRIVE_AGGRESSIVE: self.drive_aggressive,
            ActionType.DUNK: self.dunk,
            ActionType.PASS: self.pass_ball,
            ActionType.POST_UP: self.post_up,
            ActionType.TURNOVER: self.turnover,
        }
        handler = handlers.get(action, self.pass_ball)
        return handler(player)

    # =========================================================================
    # Helpers
    # =========================================================================

    def _hoop(self, player: Player) -> Vec2:
        return self.ctx.court.attacking_hoop(player.side)

    def _pressure_on(self, player: Player) -> float:
        return defensive_pressure(player, self.ctx.opponents(player.side))

    def _holding(self, player: Player) -> bool:
        return player.has_ball and self.ctx.ball.holder_id == player.id

    def _defer_if_holding(self, player: Player, delay_ms: float, name: str, action: Callable[[Player], bool]) -> None:
        def follow_up() -> None:
            if self._holding(player):
                action(player)
        self.ctx.schedule(delay_ms, name, follow_up)

    # =========================================================================
    # Shots
    # =========================================================================

    def shoot(self, player: Player) -> bool:
        if not self._holding(player):
            return False
        distance = player.pos.distance_to(self._hoop(player))
        accuracy = calculate_shot_accuracy(
            distance,
            player.attributes.shooting,
            self._pressure_on(player),
        ) * self.difficulty.accuracy
        release_shot(self.ctx, player, accuracy, power=AI_SHOT_POWER)
        return True

    def shoot_three(self, player: Player) -> bool:
        """Shoot from beyond the arc, stepping back to it first if needed."""
        if not self._holding(player):
            return False

        hoop = self._hoop(player)
        if player.pos.distance_to(hoop) > THREE_POINT_DISTANCE:
            return self._release_three(player)

        court = self.ctx.court
        spot = hoop + hoop.direction_to(player.pos) * (THREE_POINT_DISTANCE + ARC_BUFFER)
        if not court.contains(spot):
            spot = court.spot_in_front_of_hoop(player.side, THREE_POINT_DISTANCE + ARC_BUFFER)
        player.set_target(spot, sprint=True)
        self._defer_if_holding(player, THREE_RELOCATE_DELAY_MS, "three_point_shot", self._release_three)
        return True

    def _release_three(self, player: Player) -> bool:
        distance = player.pos.distance_to(self._hoop(player))
        accuracy = calculate_shot_accuracy(
            distance,
            player.attributes.three_point,
            self._pressure_on(player),
            ShotType.THREE,
        ) * self.difficulty.accuracy * THREE_DIFFICULTY
        release_shot(self.ctx, player, accuracy, power=AI_SHOT_POWER, is_three_attempt=True)
        return True

    # =========================================================================
    # Drives
    # =========================================================================

    def drive(self, player: Player) -> bool:
        target = self.ctx.court.spot_in_front_of_hoop(player.side, DRIVE_DEPTH)
        distance = player.pos.distance_to(target)

        if distance <= DRIVE_ARRIVED:
            return self.shoot(player)

        player.set_target(target)
        player.nudge(player.pos.direction_to(target), 2.0)
        if not self._holding(player):
            return True

        move = DribbleMove.CROSSOVER if self.rng.random() < 0.5 else DribbleMove.NORMAL
        player.perform_dribble(move)

        if distance < DRIVE_CLOSE and self.rng.random() < DRIVE_SHOOT_CHANCE:
            return self.shoot(player)
        if self.rng.random() < DRIVE_PASS_CHANCE:
            return self.pass_ball(player)
        return True

    def drive_aggressive(self, player: Player) -> bool:
        target = self.ctx.court.spot_in_front_of_hoop(player.side, AGGRESSIVE_DEPTH)
        distance = player.pos.distance_to(target)

        if distance > AGGRESSIVE_ARRIVED:
            player.set_target(target, sprint=True)
            player.nudge(player.pos.direction_to(target), 3.0)
            player.perform_dribble(self.rng.choice(FANCY_DRIBBLES))

        if distance < DUNK_RANGE and self.rng.random() < DUNK_ATTEMPT_CHANCE:
            return self.dunk(player)
        return True

    def dunk(self, player: Player) -> bool:
        """Dunk attempt: contested by defenders near the rim, scored a moment later."""
        if not self._holding(player):
            return False

        ctx = self.ctx
        team = ctx.team(player.side)
        defenders = ctx.opponents(player.side)
        player.begin_shot()
        player.stats.shots_attempted += 1
        team.stats.field_goals_attempted += 1
        ctx.emit(
            EventType.SHOT_ATTEMPT,
            player_id=player.id,
            description=f"{player.name} goes up for the dunk",
            points=2,
            dunk=True,
        )

        if self.rng.random() < dunk_block_chance(player, defenders):
            blocker = min(defenders, key=lambda d: d.pos.distance_to(player.pos))
            blocker.stats.blocks += 1
            ctx.team(blocker.side).stats.blocks += 1
            ctx.emit(
                EventType.BLOCK,
                player_id=blocker.id,
                target_id=player.id,
                description=f"{blocker.name} blocks {player.name}'s dunk!",
            )
            return self.turnover(player)

        if self.rng.random() >= DUNK_MAKE_CHANCE:
            ctx.emit(EventType.SHOT_MISSED, player_id=player.id, description=f"{player.name} misses the dunk")
            return self.turnover(player)

        hoop = self._hoop(player)
        passer = ctx.ball.last_passer_id
        ctx.kill_ball()
        ctx.ball.place(hoop)
        ctx.emit(EventType.DUNK, player_id=player.id, description=f"{player.name} throws it down!")

        def score() -> None:
            ctx.queue(Outcome(
                kind=OutcomeKind.BASKET,
                side=player.side,
                player_id=player.id,
                target_id=passer,
                points=2,
                data={"dunk": True},
            ))
        ctx.schedule(DUNK_SCORE_DELAY_MS, "dunk_score", score)
        return True

    # =========================================================================
    # Passing and post play
    # =========================================================================

    def best_pass_target(self, player: Player) -> Optional[Player]:
        """Teammate with the best mix of closeness, shooting and openness."""
        best = None
        best_quality = float("-inf")
        for teammate in self.ctx.teammates(player):
            distance = max(1.0, player.pos.distance_to(teammate.pos))
            quality = (1.0 / distance) * (1 + teammate.attributes.shooting / 100)
            quality *= 1 - self._pressure_on(teammate) / 100
            if quality > best_quality:
                best = teammate
                best_quality = quality
        return best

    def pass_ball(self, player: Player) -> bool:
        receiver = self.best_pass_target(player)
        if receiver is None:
            return False
        if not self.pass_to(player, receiver):
            return False
        if self.rng.random() < CATCH_AND_SHOOT_CHANCE:
            self._defer_if_holding(receiver, CATCH_AND_SHOOT_DELAY_MS, "catch_and_shoot", self.shoot)
        return True

    def pass_to(self, player: Player, receiver: Player) -> bool:
        if not self._holding(player) or receiver.id == player.id:
            return False
        release_pass(self.ctx, player, receiver)
        return True

    def post_up(self, player: Player) -> bool:
        """Back down to the block, then hook, turnaround or kick it out."""
        if not player.role.is_frontcourt:
            return self.pass_ball(player)

        block = self.ctx.court.spot_in_front_of_hoop(player.side, POST_DEPTH)
        distance = player.pos.distance_to(block)
        if distance > POST_ARRIVED:
            player.set_target(block)
            player.nudge(player.pos.direction_to(block), 1.5)
            return True

        roll = self.rng.random()
        if roll < HOOK_CHANCE:
            return self.shoot(player)
        if roll < TURNAROUND_CHANCE:
            return self.shoot(player)
        return self.pass_ball(player)

    # =========================================================================
    # Mistakes
    # =========================================================================

    def turnover(self, player: Player) -> bool:
        """Cough it up: dead ball, possession to the other side."""
        self.ctx.kill_ball()
        self.ctx.ball.place(player.pos)
        self.ctx.queue(Outcome(
            kind=OutcomeKind.TURNOVER,
            side=player.side.opponent,
            player_id=player.id,
        ))
        return True
