"""Collision detection and response.

Player-player contacts are circle-circle overlaps resolved by positional
separation plus an equal-and-opposite impulse. Ball-player contacts either
end in a catch or a deflection.

Simultaneous contacts between more than two bodies are resolved pairwise in
enumeration order with no global solver. That is an accepted approximation
at arcade fidelity.
"""

from __future__ import annotations

import random
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from ..core.entities import Ball, Player
from ..core.geometry import circles_overlap
from ..core.vec2 import Vec2
from .ball_flight import RESTITUTION


COLLISION_IMPULSE = 0.5
FOUL_PROBABILITY = 0.01         # Per opposite-team contact

BALL_CONTACT_HEIGHT = 50.0      # Ball-player contact only checked below this
CATCH_MAX_HEIGHT = 20.0
CATCH_MAX_VZ = 10.0
DEFLECT_JITTER = 1.0

MIN_SEPARATION = 0.0001         # Coincident bodies: no direction, no response


@dataclass
class PlayerContact:
    """A resolved player-player overlap."""
    a: Player
    b: Player
    normal: Vec2          # From a toward b
    penetration: float

    @property
    def is_opposing(self) -> bool:
        return self.a.side != self.b.side


class BallContact(str, Enum):
    CATCH = "catch"
    DEFLECT = "deflect"


# =============================================================================
# Player vs player
# =============================================================================

def resolve_player_collision(a: Player, b: Player) -> Optional[PlayerContact]:
    """Separate two overlapping players and push them apart.

    Each player moves half the penetration depth along the normal, then
    receives an impulse of the same magnitude in opposite directions.
    Coincident players have no usable normal and are left alone.
    """
    delta = b.pos - a.pos
    dist = delta.length()
    min_dist = a.radius + b.radius

    if dist >= min_dist or dist < MIN_SEPARATION:
        return None

    normal = delta / dist
    penetration = min_dist - dist

    a.pos = a.pos - normal * (penetration * 0.5)
    b.pos = b.pos + normal * (penetration * 0.5)

    a.velocity = a.velocity - normal * COLLISION_IMPULSE
    b.velocity = b.velocity + normal * COLLISION_IMPULSE

    return PlayerContact(a=a, b=b, normal=normal, penetration=penetration)


def roll_foul(contact: PlayerContact, rng: random.Random) -> bool:
    """Opposite-team contact occasionally draws a foul."""
    return contact.is_opposing and rng.random() < FOUL_PROBABILITY


# =============================================================================
# Ball vs player
# =============================================================================

def ball_touches(ball: Ball, player: Player, now: float) -> bool:
    """True if a loose ball is low enough and close enough to a player.

    A rising shot passes over everyone (only an explicit block stops it),
    and the player who just released the ball is ignored briefly.
    """
    if not ball.in_air or ball.z >= BALL_CONTACT_HEIGHT:
        return False
    if ball.shot is not None and ball.vz > 0:
        return False
    if not ball.can_be_caught_by(player.id, now):
        return False
    if ball.z >= player.radius:
        return False
    return circles_overlap(ball.pos, ball.radius, player.pos, player.radius)


def classify_ball_contact(ball: Ball) -> BallContact:
    """Soft, low balls are caught; anything else bounces off."""
    if ball.holder_id is None and abs(ball.vz) < CATCH_MAX_VZ and ball.z < CATCH_MAX_HEIGHT:
        return BallContact.CATCH
    return BallContact.DEFLECT


def deflect_ball(ball: Ball, player: Player, rng: random.Random) -> None:
    """Bounce the ball off a player's body.

    The horizontal velocity is reflected about the contact normal, scaled by
    restitution and jittered so repeated contacts don't loop. A deflected shot
    can no longer go in.
    """
    delta = ball.pos - player.pos
    dist = delta.length()
    if dist < MIN_SEPARATION:
        normal = (-ball.velocity).normalized()
        if normal == Vec2.zero():
            normal = Vec2(1, 0)
    else:
        normal = delta / dist

    if ball.velocity.dot(normal) < 0:
        ball.velocity = ball.velocity.reflect(normal) * RESTITUTION
    ball.velocity = ball.velocity + Vec2(
        rng.uniform(-DEFLECT_JITTER, DEFLECT_JITTER),
        rng.uniform(-DEFLECT_JITTER, DEFLECT_JITTER),
    )
    ball.pos = player.pos + normal * (player.radius + ball.radius)
    if ball.shot is not None:
        ball.shot.made = False
