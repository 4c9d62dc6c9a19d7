"""Team tactics: multi-player plays an AI side can call.

Offensive plays move several players and usually end in an action for the
handler, sometimes deferred until a feed arrives. Defensive calls switch the
team's scheme and nudge defenders into it.
"""

from __future__ import annotations

import logging
import math
import random
from enum import Enum
from typing import Optional

from ..context import SimulationContext
from ..core.court import Side
from ..core.entities import Player
from ..core.geometry import clamp
from ..core.team import DefenseScheme
from ..core.vec2 import Vec2
from .actions import DRIVE_DEPTH, ActionRunner
from .defense import zone_spots

logger = logging.getLogger(__name__)


class Tactic(str, Enum):
    ISOLATION = "isolation"
    PICK_AND_ROLL = "pick_and_roll"
    FAST_BREAK = "fast_break"
    THREE_POINT_PLAY = "three_point_play"
    POST_UP_PLAY = "post_up_play"
    MAN_TO_MAN = "man_to_man"
    ZONE = "zone"
    FULL_COURT_PRESS = "full_court_press"
    DOUBLE_TEAM = "double_team"


DEFENSIVE_TACTICS = frozenset({
    Tactic.MAN_TO_MAN,
    Tactic.ZONE,
    Tactic.FULL_COURT_PRESS,
    Tactic.DOUBLE_TEAM,
})


# =============================================================================
# Tunables
# =============================================================================

ISOLATION_SPACING = 200.0
SCREEN_OFFSET = 50.0
SCREEN_SET = 20.0
SCREEN_APPROACH = 2.0
PNR_DRIVE = 3.0
PNR_LATERAL = 60.0
POP_DISTANCE = 100.0
BLOCK_DEPTH = 60.0
FAST_BREAK_RUNNERS = 3
FAST_BREAK_PUSH = 4.0
FAST_BREAK_DEPTH = 150.0
FAST_BREAK_LANES = (0.0, -120.0, 120.0)
FAST_BREAK_PASS_CHANCE = 0.5
THREE_SHOOTER_MIN = 75
THREE_SHOT_DELAY_MS = 800
POST_FEED_DELAY_MS = 1000
DOUBLE_TEAM_SIZE = 2
DOUBLE_TEAM_RANGE = 50.0
DOUBLE_TEAM_GAIN = 2.0


class TacticRunner:
    """Runs tactics for one AI side."""

    def __init__(self, ctx: SimulationContext, side: Side, actions: ActionRunner, rng: random.Random):
        self.ctx = ctx
        self.side = side
        self.actions = actions
        self.rng = rng

    def run(self, tactic: Tactic) -> bool:
        plays = {
            Tactic.ISOLATION: self.isolation,
            Tactic.PICK_AND_ROLL: self.pick_and_roll,
            Tactic.FAST_BREAK: self.fast_break,
            Tactic.THREE_POINT_PLAY: self.three_point_play,
            Tactic.POST_UP_PLAY: self.post_up_play,
            Tactic.MAN_TO_MAN: self.man_to_man,
            Tactic.ZONE: self.zone,
            Tactic.FULL_COURT_PRESS: self.full_court_press,
            Tactic.DOUBLE_TEAM: self.double_team,
        }
        logger.debug(f"{self.side.value} runs {tactic.value}")
        return plays[tactic]()

    # =========================================================================
    # Helpers
    # =========================================================================

    @property
    def roster(self) -> list[Player]:
        return self.ctx.team(self.side).roster

    def handler(self) -> Optional[Player]:
        holder = self.ctx.holder()
        if holder is not None and holder.side == self.side:
            return holder
        return None

    def _on_court(self, pos: Vec2) -> Vec2:
        court = self.ctx.court
        return Vec2(clamp(pos.x, court.min_x, court.max_x), clamp(pos.y, court.min_y, court.max_y))

    # =========================================================================
    # Offense
    # =========================================================================

    def isolation(self) -> bool:
        """Clear out for the best scorer and let them drive."""
        star = max(self.roster, key=lambda p: p.attributes.shooting + p.attributes.dribbling)
        for player in self.roster:
            if player is star:
                continue
            angle = self.rng.uniform(0, 2 * math.pi)
            player.set_target(self._on_court(star.pos + Vec2.from_angle(angle, ISOLATION_SPACING)))

        handler = self.handler()
        if handler is not None and handler is not star:
            self.actions.pass_to(handler, star)
            return True
        return self.actions.drive(star)

    def pick_and_roll(self) -> bool:
        """Big sets a screen beside the handler, then rolls to the block or pops."""
        handler = self.handler() or self.roster[0]
        big = next((p for p in self.roster if p.role.is_frontcourt and p is not handler), None)
        if big is None:
            return False

        court = self.ctx.court
        forward = court.attack_direction(self.side)
        screen = handler.pos + Vec2(forward * SCREEN_OFFSET, 0)

        if big.pos.distance_to(screen) > SCREEN_SET:
            big.set_target(screen)
            big.nudge(big.pos.direction_to(screen), SCREEN_APPROACH)
            return True

        lateral = PNR_LATERAL * self.rng.choice((-1, 1))
        lane = court.spot_in_front_of_hoop(self.side, DRIVE_DEPTH, lateral)
        handler.set_target(lane, sprint=True)
        handler.nudge(handler.pos.direction_to(lane), PNR_DRIVE)

        if self.rng.random() < 0.5:
            big.set_target(court.spot_in_front_of_hoop(self.side, BLOCK_DEPTH))
        else:
            big.set_target(self._on_court(handler.pos - Vec2(forward * POP_DISTANCE, 0)))
        return True

    def fast_break(self) -> bool:
        """Fastest three sprint up the lanes; maybe a long pass to the leader."""
        court = self.ctx.court
        runners = sorted(self.roster, key=lambda p: p.attributes.speed, reverse=True)[:FAST_BREAK_RUNNERS]
        forward = Vec2(court.attack_direction(self.side), 0)

        for runner, lane in zip(runners, FAST_BREAK_LANES):
            runner.set_target(court.spot_in_front_of_hoop(self.side, FAST_BREAK_DEPTH, lane), sprint=True)
            runner.nudge(forward, FAST_BREAK_PUSH)

        handler = self.handler()
        leader = runners[0] if runners else None
        if handler is not None and leader is not None and leader is not handler:
            if self.rng.random() < FAST_BREAK_PASS_CHANCE:
                self.actions.pass_to(handler, leader)
        return True

    def three_point_play(self) -> bool:
        """Feed the best long-range shooter, who sets up at the arc."""
        shooters = sorted(
            (p for p in self.roster if p.attributes.three_point > THREE_SHOOTER_MIN),
            key=lambda p: p.attributes.three_point,
            reverse=True,
        )
        if not shooters:
            return False

        shooter = shooters[0]
        handler = self.handler()
        if handler is None:
            return False
        if handler is shooter:
            return self.actions.shoot_three(shooter)

        self.actions.pass_to(handler, shooter)

        def shoot() -> None:
            if shooter.has_ball:
                self.actions.shoot_three(shooter)
        self.ctx.schedule(THREE_SHOT_DELAY_MS, "three_point_play", shoot)
        return True

    def post_up_play(self) -> bool:
        """Feed the first big on the block and let them work."""
        bigs = self.ctx.team(self.side).frontcourt()
        if not bigs:
            return False

        post = bigs[0]
        handler = self.handler()
        if handler is None:
            return False
        if handler is post:
            return self.actions.post_up(post)

        self.actions.pass_to(handler, post)

        def work() -> None:
            if post.has_ball:
                self.actions.post_up(post)
        self.ctx.schedule(POST_FEED_DELAY_MS, "post_up_play", work)
        return True

    # =========================================================================
    # Defense
    # =========================================================================

    def man_to_man(self) -> bool:
        self.ctx.team(self.side).strategy.defense = DefenseScheme.MAN_TO_MAN
        return True

    def zone(self, scheme: Optional[DefenseScheme] = None) -> bool:
        """Switch to a zone and send everyone to their spot."""
        strategy = self.ctx.team(self.side).strategy
        if scheme is None:
            scheme = strategy.defense if strategy.defense.is_zone else DefenseScheme.ZONE_2_3
        strategy.defense = scheme

        for player, spot in zip(self.roster, zone_spots(self.ctx.court, self.side, scheme)):
            player.set_target(spot)
        return True

    def full_court_press(self) -> bool:
        self.ctx.team(self.side).strategy.defense = DefenseScheme.PRESS
        push = Vec2(self.ctx.court.attack_direction(self.side), 0)
        for player in self.roster:
            player.nudge(push, 1.0)
        return True

    def double_team(self) -> bool:
        """Two nearest defenders converge on the opposing handler."""
        holder = self.ctx.holder()
        if holder is None or holder.side == self.side:
            return False

        nearest = sorted(self.roster, key=lambda p: p.pos.distance_to(holder.pos))[:DOUBLE_TEAM_SIZE]
        for defender in nearest:
            if defender.pos.distance_to(holder.pos) > DOUBLE_TEAM_RANGE:
                defender.nudge(defender.pos.direction_to(holder.pos), DOUBLE_TEAM_GAIN)
        return True
