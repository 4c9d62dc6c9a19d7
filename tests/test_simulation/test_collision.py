"""Tests for player and ball collision response."""

import pytest

from hoops.simulation.core.court import Side
from hoops.simulation.core.entities import Ball, ShotAttempt
from hoops.simulation.core.vec2 import Vec2
from hoops.simulation.physics.collision import (
    COLLISION_IMPULSE,
    BallContact,
    ball_touches,
    classify_ball_contact,
    deflect_ball,
    resolve_player_collision,
    roll_foul,
)


class TestPlayerCollision:
    """Circle-circle separation plus equal and opposite impulses."""

    def test_players_30_apart_end_40_apart(self, player_factory):
        a = player_factory("a", pos=Vec2(400, 300))
        b = player_factory("b", pos=Vec2(430, 300))

        contact = resolve_player_collision(a, b)

        assert contact is not None
        assert contact.penetration == pytest.approx(10.0)
        assert a.pos.distance_to(b.pos) == pytest.approx(40.0)
        assert a.pos == Vec2(395, 300)
        assert b.pos == Vec2(435, 300)

        normal = contact.normal
        assert a.velocity.dot(normal) == pytest.approx(-COLLISION_IMPULSE)
        assert b.velocity.dot(normal) == pytest.approx(COLLISION_IMPULSE)
        assert a.velocity.dot(normal) == pytest.approx(-b.velocity.dot(normal))

    def test_no_contact_when_apart(self, player_factory):
        a = player_factory("a", pos=Vec2(0, 0))
        b = player_factory("b", pos=Vec2(40, 0))
        assert resolve_player_collision(a, b) is None

    def test_coincident_players_skipped(self, player_factory):
        a = player_factory("a", pos=Vec2(100, 100))
        b = player_factory("b", pos=Vec2(100, 100))
        assert resolve_player_collision(a, b) is None
        assert a.velocity == Vec2(0, 0)

    def test_foul_only_between_opponents(self, player_factory, fixed_rng):
        a = player_factory("a", side=Side.HOME, pos=Vec2(0, 0))
        b = player_factory("b", side=Side.HOME, pos=Vec2(30, 0))
        c = player_factory("c", side=Side.AWAY, pos=Vec2(30, 0))
        always = fixed_rng(0.0)

        same_team = resolve_player_collision(a, b)
        assert not roll_foul(same_team, always)

        a.pos = Vec2(0, 0)
        opposing = resolve_player_collision(a, c)
        assert roll_foul(opposing, always)
        assert not roll_foul(opposing, fixed_rng(0.5))


class TestBallContact:
    """Catching and deflecting a loose ball."""

    def test_rising_shot_passes_over(self, player_factory):
        player = player_factory(pos=Vec2(500, 300))
        ball = Ball(pos=Vec2(500, 300), in_air=True, z=5.0, vz=3.0)
        ball.shot = ShotAttempt("x", Side.AWAY, Vec2(0, 0), 100.0)
        assert not ball_touches(ball, player, now=1.0)

    def test_releaser_cannot_recatch_immediately(self, player_factory):
        player = player_factory("p1", pos=Vec2(500, 300))
        ball = Ball(pos=Vec2(500, 300))
        ball.attach("p1")
        ball.launch(Vec2(0, 0), 0.0, now=1.0, z=5.0)
        assert not ball_touches(ball, player, now=1.1)
        assert ball_touches(ball, player, now=1.3)

    def test_high_ball_not_touched(self, player_factory):
        player = player_factory(pos=Vec2(500, 300))
        ball = Ball(pos=Vec2(500, 300), in_air=True, z=25.0)
        assert not ball_touches(ball, player, now=1.0)

    def test_classify(self):
        assert classify_ball_contact(Ball(in_air=True, z=5.0, vz=-2.0)) == BallContact.CATCH
        assert classify_ball_contact(Ball(in_air=True, z=5.0, vz=-15.0)) == BallContact.DEFLECT

    def test_deflect_reflects_and_moves_outside(self, player_factory, rng):
        player = player_factory(pos=Vec2(500, 300))
        ball = Ball(pos=Vec2(485, 300), in_air=True, velocity=Vec2(6, 0))
        deflect_ball(ball, player, rng)
        assert ball.velocity.x < 0
        assert ball.pos.distance_to(player.pos) == pytest.approx(player.radius + ball.radius)
