"""Physics engine: authoritative per-tick kinematics.

One call to `PhysicsEngine.update` advances every player and the ball by a
tick, resolves contacts, enforces the court boundary and checks for a made
basket. Anything terminal (basket, catch, foul, out of bounds) is queued on
the context's outcome list; the orchestrator applies it at the end of the
tick.
"""

from __future__ import annotations

import logging
from typing import List, Optional

from ..context import Outcome, OutcomeKind, SimulationContext
from ..core.court import SCORE_WINDOW_HEIGHT, Court
from ..core.entities import Ball, Player
from ..core.vec2 import Vec2
from . import ball_flight
from .ball_flight import RESTITUTION
from .collision import (
    BallContact,
    ball_touches,
    classify_ball_contact,
    deflect_ball,
    resolve_player_collision,
    roll_foul,
)
from .movement import MovementProfile, MovementSolver
from .spatial import SpatialGrid, all_pairs

logger = logging.getLogger(__name__)


BOUNDARY_BOUNCE = 0.5       # Player velocity kept (and turned inward) at the boundary


class PhysicsEngine:
    """Advances all kinematic bodies.

    Order within a tick:
        1. Steer toward targets and apply friction
        2. Resolve player-player overlaps (grid broad phase or O(n²))
        3. Cap speed and integrate player positions
        4. Clamp players to the court
        5. Re-lock a held ball to its holder
        6. Integrate a flying ball, check for a score, then ball-player
           contacts, then the ball boundary
    """

    def __init__(self, use_grid: bool = True):
        self.solver = MovementSolver()
        self.grid = SpatialGrid()
        self.use_grid = use_grid
        self._profiles: dict[str, MovementProfile] = {}

    def profile_for(self, player: Player) -> MovementProfile:
        profile = self._profiles.get(player.id)
        if profile is None:
            profile = MovementProfile.from_attributes(player.attributes.speed)
            self._profiles[player.id] = profile
        return profile

    def reset(self) -> None:
        self._profiles.clear()

    # =========================================================================
    # Main update
    # =========================================================================

    def update(self, ctx: SimulationContext) -> None:
        players = list(ctx.players())

        for player in players:
            self.solver.steer(player, self.profile_for(player))
            self.solver.damp(player)

        self._resolve_player_collisions(ctx, players)

        for player in players:
            self.solver.cap_and_integrate(player, self.profile_for(player))

        self.enforce_player_bounds(ctx.court, players)

        holder = ctx.holder()
        if holder is not None:
            ctx.ball.update(holder)
            return

        if not ctx.ball.in_air:
            return

        if ball_flight.integrate(ctx.ball):
            ctx.ball.bounces += 1
        if self.check_score(ctx):
            return
        self._resolve_ball_contacts(ctx, players)
        if ctx.ball.in_air:
            self.enforce_ball_bounds(ctx)

    # =========================================================================
    # Players
    # =========================================================================

    def _resolve_player_collisions(self, ctx: SimulationContext, players: List[Player]) -> None:
        if self.use_grid:
            self.grid.rebuild(players)
            pairs = self.grid.candidate_pairs()
        else:
            pairs = all_pairs(players)

        for a, b in pairs:
            contact = resolve_player_collision(a, b)
            if contact is None or not roll_foul(contact, ctx.rng):
                continue

            possession = ctx.state.possession
            fouler, fouled = (a, b) if a.side != possession else (b, a)
            ctx.queue(Outcome(
                kind=OutcomeKind.FOUL,
                side=fouled.side,
                player_id=fouler.id,
                target_id=fouled.id,
            ))

    @staticmethod
    def enforce_player_bounds(court: Court, players: List[Player]) -> None:
        """Hard-clamp players inside the margin, bouncing velocity inward at half speed."""
        for player in players:
            x, y = player.pos.x, player.pos.y
            vx, vy = player.velocity.x, player.velocity.y

            if x < court.min_x:
                x, vx = court.min_x, abs(vx) * BOUNDARY_BOUNCE
            elif x > court.max_x:
                x, vx = court.max_x, -abs(vx) * BOUNDARY_BOUNCE

            if y < court.min_y:
                y, vy = court.min_y, abs(vy) * BOUNDARY_BOUNCE
            elif y > court.max_y:
                y, vy = court.max_y, -abs(vy) * BOUNDARY_BOUNCE

            player.pos = Vec2(x, y)
            player.velocity = Vec2(vx, vy)

    # =========================================================================
    # Ball
    # =========================================================================

    def check_score(self, ctx: SimulationContext) -> bool:
        """Register a basket if a made shot is dropping through its hoop.

        Only a shot rolled as a make at release, never touched and never
        bounced, can go in, and only on the hoop its side attacks. Passes and
        misses that wander near a rim stay live. The shot's recorded release
        distance decides 2 or 3 points.
        """
        ball = ctx.ball
        court = ctx.court
        shot = ball.shot
        if shot is None or not shot.can_score or ball.bounces > 0:
            return False
        if not ball.is_descending or ball.z > SCORE_WINDOW_HEIGHT:
            return False

        hoop = self._hoop_under(ball, court)
        if hoop is None or court.attacker_of(hoop) != shot.side:
            return False

        ctx.kill_ball()
        ball.pos = hoop
        ctx.queue(Outcome(
            kind=OutcomeKind.BASKET,
            side=shot.side,
            player_id=shot.shooter_id,
            target_id=ball.last_passer_id,
            points=shot.points,
            data={"distance": round(shot.distance, 1)},
        ))
        logger.debug(f"{shot.shooter_id} scores {shot.points} for {shot.side.value}")
        return True

    @staticmethod
    def _hoop_under(ball: Ball, court: Court) -> Optional[Vec2]:
        for hoop in (court.left_hoop, court.right_hoop):
            if ball.pos.distance_to(hoop) <= court.hoop_radius:
                return hoop
        return None

    def _resolve_ball_contacts(self, ctx: SimulationContext, players: List[Player]) -> None:
        """First (closest) player touching the loose ball catches or deflects it."""
        ball = ctx.ball
        for player in sorted(players, key=lambda p: p.pos.distance_to(ball.pos)):
            if not ball_touches(ball, player, ctx.now):
                continue

            if classify_ball_contact(ball) == BallContact.CATCH:
                was_shot = ball.shot is not None
                ctx.give_ball(player)
                ctx.queue(Outcome(
                    kind=OutcomeKind.POSSESSION,
                    side=player.side,
                    player_id=player.id,
                    data={"rebound": was_shot},
                ))
            else:
                deflect_ball(ball, player, ctx.rng)
            return

    def enforce_ball_bounds(self, ctx: SimulationContext) -> None:
        """Bounce a flying ball off the margin; past the slack it's out of bounds."""
        ball = ctx.ball
        court = ctx.court

        if court.is_out_of_bounds(ball.pos):
            ctx.kill_ball()
            ctx.queue(Outcome(
                kind=OutcomeKind.OUT_OF_BOUNDS,
                side=ctx.state.possession.opponent,
                data={"x": round(ball.pos.x, 1), "y": round(ball.pos.y, 1)},
            ))
            return

        vx, vy = ball.velocity.x, ball.velocity.y
        if (ball.pos.x < court.min_x and vx < 0) or (ball.pos.x > court.max_x and vx > 0):
            vx = -vx * RESTITUTION
        if (ball.pos.y < court.min_y and vy < 0) or (ball.pos.y > court.max_y and vy > 0):
            vy = -vy * RESTITUTION
        ball.velocity = Vec2(vx, vy)
