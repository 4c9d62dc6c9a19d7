"""Tests for ball flight integration, launch solving and shot release."""

import pytest

from hoops.simulation.core.court import Side
from hoops.simulation.core.entities import Ball
from hoops.simulation.core.events import EventType
from hoops.simulation.core.vec2 import Vec2
from hoops.simulation.physics.ball_flight import (
    GRAVITY,
    MAX_PASS_SECONDS,
    MIN_FLIGHT_TICKS,
    integrate,
    pass_flight_ticks,
    shot_flight_ticks,
    solve_launch,
)
from hoops.simulation.physics.launch import (
    MISS_LATERAL_MIN,
    miss_point,
    release_pass,
    release_shot,
)


def fly(ball: Ball, ticks: int) -> None:
    for _ in range(ticks):
        integrate(ball)


class TestIntegrate:
    """One flight step per tick."""

    def test_gravity_pulls_down(self):
        ball = Ball(in_air=True, z=50.0, vz=0.0)
        integrate(ball)
        assert ball.vz < 0
        assert ball.z < 50.0

    def test_first_step_applies_gravity_then_drag(self):
        ball = Ball(in_air=True, z=50.0, vz=0.0)
        integrate(ball)
        assert ball.vz == pytest.approx(-GRAVITY * 0.99)

    def test_bounce_reports_and_reverses(self):
        ball = Ball(in_air=True, z=1.0, vz=-10.0)
        assert integrate(ball)
        assert ball.z == 0
        assert ball.vz > 0

    def test_restitution_decays_to_rest(self):
        """Each bounce is lower; the ball ends with vz exactly 0 on the floor."""
        ball = Ball(in_air=True, z=100.0, vz=0.0)
        peaks = []
        for _ in range(2000):
            if integrate(ball):
                peaks.append(ball.vz)
        assert len(peaks) >= 2
        assert all(later < earlier for earlier, later in zip(peaks, peaks[1:]))
        assert ball.vz == 0.0
        assert ball.z == 0.0

    def test_rolling_ball_stops(self):
        ball = Ball(in_air=True, z=0.0, vz=0.0, velocity=Vec2(3, 0))
        fly(ball, 200)
        assert ball.velocity == Vec2(0, 0)


class TestSolveLaunch:
    """Launch velocities land exactly on target under the integrator."""

    @pytest.mark.parametrize("ticks", [10, 45, 90])
    def test_lands_on_target(self, ticks):
        start = Vec2(300, 250)
        target = Vec2(910, 300)
        velocity, vz = solve_launch(start, target, ticks, end_z=5.0)
        ball = Ball(pos=start, in_air=True, velocity=velocity, vz=vz)

        # Step without the floor clamp interfering mid-flight
        for _ in range(ticks):
            ball.vz = (ball.vz - GRAVITY) * 0.99
            ball.velocity = ball.velocity * 0.99
            ball.pos = ball.pos + ball.velocity
            ball.z += ball.vz

        assert ball.pos.x == pytest.approx(target.x, abs=1e-6)
        assert ball.pos.y == pytest.approx(target.y, abs=1e-6)
        assert ball.z == pytest.approx(5.0, abs=1e-6)

    def test_flight_has_a_floor(self):
        v_short, _ = solve_launch(Vec2(0, 0), Vec2(10, 0), 1)
        v_min, _ = solve_launch(Vec2(0, 0), Vec2(10, 0), MIN_FLIGHT_TICKS)
        assert v_short == v_min

    def test_long_shots_hang_longer(self):
        assert shot_flight_ticks(500, 1.0) > shot_flight_ticks(100, 1.0)
        assert shot_flight_ticks(200, 0.2) > shot_flight_ticks(200, 1.0)

    def test_pass_flight_capped(self):
        assert pass_flight_ticks(5000) == round(MAX_PASS_SECONDS * 60)


class TestMissPoint:
    """Misses are aimed off the rim."""

    def test_always_outside_hoop(self, rng):
        hoop = Vec2(910, 300)
        for _ in range(100):
            point = miss_point(hoop, Vec2(600, 200), rng)
            assert point.distance_to(hoop) >= MISS_LATERAL_MIN - 1e-6


class TestRelease:
    """Shots and passes leave the hands through the context."""

    def test_release_shot_records_attempt(self, ctx):
        shooter = ctx.team(Side.HOME).roster[0]
        shooter.pos = Vec2(700, 300)
        ctx.give_ball(shooter)

        shot = release_shot(ctx, shooter, accuracy=1.0)

        assert ctx.ball.in_air
        assert ctx.ball.shot is shot
        assert not shooter.has_ball
        assert shooter.is_shooting
        assert shooter.stats.shots_attempted == 1
        assert shot.distance == pytest.approx(210.0)
        events = ctx.event_bus.get_events_by_type(EventType.SHOT_ATTEMPT)
        assert len(events) == 1
        assert events[0].data["points"] == 2

    def test_three_attempt_counted(self, ctx):
        shooter = ctx.team(Side.HOME).roster[1]
        shooter.pos = Vec2(450, 300)
        ctx.give_ball(shooter)
        release_shot(ctx, shooter, accuracy=0.0)
        assert shooter.stats.three_attempted == 1
        assert ctx.team(Side.HOME).stats.threes_attempted == 1

    def test_release_pass_tags_passer_and_sends_receiver(self, ctx):
        passer, receiver = ctx.team(Side.AWAY).roster[:2]
        ctx.give_ball(passer)
        landing = release_pass(ctx, passer, receiver)

        assert ctx.ball.in_air
        assert ctx.ball.shot is None
        assert ctx.ball.last_passer_id == passer.id
        assert receiver.target == landing
        assert ctx.court.contains(landing)
