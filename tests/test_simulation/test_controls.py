"""Tests for the shot meter and the controlled-player input commands."""

import pytest

from hoops.simulation.controls import (
    METER_INTERVAL,
    METER_MAX,
    METER_STEP,
    InputController,
    ShotMeter,
    ShotTiming,
    timing_for,
)
from hoops.simulation.core.court import Side
from hoops.simulation.core.entities import DribbleMove, Role
from hoops.simulation.core.events import EventType
from hoops.simulation.core.vec2 import Vec2


def advance_clock(ctx, seconds: float) -> None:
    for _ in range(ctx.clock.seconds_to_ticks(seconds)):
        ctx.clock.tick()


@pytest.fixture
def controls(ctx):
    """Controller with the home PG under control and holding the ball."""
    guard = ctx.team(Side.HOME).player_by_role(Role.PG)
    guard.is_controlled = True
    ctx.give_ball(guard)
    return InputController(ctx, Side.HOME)


class TestShotMeter:
    """0 → 100 → 0 sweep on simulation time."""

    def test_rises_per_interval(self):
        meter = ShotMeter()
        meter.start()
        meter.advance(METER_INTERVAL)
        assert meter.power == METER_STEP

    def test_partial_intervals_carry(self):
        meter = ShotMeter()
        meter.start()
        meter.advance(METER_INTERVAL / 2)
        assert meter.power == 0
        meter.advance(METER_INTERVAL / 2)
        assert meter.power == METER_STEP

    def test_turns_around_at_max(self):
        meter = ShotMeter()
        meter.start()
        for _ in range(int(METER_MAX / METER_STEP)):
            meter.advance(METER_INTERVAL)
        assert meter.power == METER_MAX
        assert not meter.rising
        meter.advance(METER_INTERVAL)
        assert meter.power == METER_MAX - METER_STEP

    def test_idle_meter_does_not_move(self):
        meter = ShotMeter()
        meter.advance(1.0)
        assert meter.power == 0

    def test_release_stops_charging(self):
        meter = ShotMeter()
        meter.start()
        meter.advance(METER_INTERVAL * 5)
        assert meter.release() == pytest.approx(10.0)
        meter.advance(1.0)
        assert meter.power == pytest.approx(10.0)

    @pytest.mark.parametrize("power, timing", [
        (10, ShotTiming.WEAK),
        (29, ShotTiming.WEAK),
        (30, ShotTiming.GOOD),
        (45, ShotTiming.GOOD),
        (50, ShotTiming.PERFECT),
        (55, ShotTiming.GOOD),
        (70, ShotTiming.GOOD),
        (71, ShotTiming.STRONG),
    ])
    def test_timing_labels(self, power, timing):
        assert timing_for(power) == timing


class TestMovement:
    """Held movement intent."""

    def test_intent_moves_controlled_player(self, ctx, controls):
        player = controls.player
        assert controls.set_movement_intent(1.0, 0.0)
        controls.apply(ctx.clock.tick_rate)
        assert player.velocity.x > 0

    def test_zero_intent_is_idle(self, ctx, controls):
        controls.set_movement_intent(0.0, 0.0)
        controls.apply(ctx.clock.tick_rate)
        assert controls.player.velocity == Vec2(0, 0)

    def test_no_controlled_player(self, ctx):
        controller = InputController(ctx, Side.HOME)
        assert controller.player is None
        assert not controller.set_movement_intent(1.0, 0.0)
        assert not controller.start_shot_charge()
        assert not controller.release_shot(0.5)
        assert not controller.perform_dribble(DribbleMove.SPIN)
        assert not controller.pump_fake()
        assert not controller.switch_player()


class TestShooting:
    """Charge and release."""

    def test_charge_needs_ball(self, ctx, controls):
        ctx.kill_ball()
        assert not controls.start_shot_charge()

    def test_charge_once(self, controls):
        assert controls.start_shot_charge()
        assert not controls.start_shot_charge()

    def test_release_with_explicit_power(self, ctx, controls):
        shooter = controls.player
        assert controls.release_shot(power=0.5)
        assert ctx.ball.in_air
        assert ctx.ball.shot.shooter_id == shooter.id
        assert not controls.release_shot(power=0.5)

    def test_release_uses_meter_reading(self, ctx, controls):
        controls.start_shot_charge()
        controls.apply(METER_INTERVAL * 25)
        assert controls.release_shot()
        assert not controls.meter.charging
        assert controls.meter.power == pytest.approx(50.0)

    def test_release_toward_aim(self, ctx, controls):
        assert controls.release_shot(power=0.5, aim=Vec2(600, 300))
        assert ctx.ball.velocity.x > 0


class TestMoves:
    """Dribbles, pump fakes and player switching."""

    def test_dribble_cooldown(self, ctx, controls):
        assert controls.perform_dribble(DribbleMove.CROSSOVER)
        assert not controls.perform_dribble(DribbleMove.SPIN)
        advance_clock(ctx, 0.5)
        assert controls.perform_dribble(DribbleMove.SPIN)
        events = ctx.event_bus.get_events_by_type(EventType.DRIBBLE_MOVE)
        assert [e.data["move"] for e in events] == ["crossover", "spin"]

    def test_dribble_needs_ball(self, ctx, controls):
        ctx.kill_ball()
        assert not controls.perform_dribble(DribbleMove.CROSSOVER)

    def test_pump_fake(self, ctx, controls):
        assert controls.pump_fake()
        assert len(ctx.event_bus.get_events_by_type(EventType.PUMP_FAKE)) == 1

    def test_switch_player_cycles_roster(self, ctx, controls):
        roster = ctx.team(Side.HOME).roster
        assert controls.switch_player()
        assert controls.player is roster[1]
        assert [p for p in roster if p.is_controlled] == [roster[1]]

        assert not controls.switch_player()
        advance_clock(ctx, 0.3)
        assert controls.switch_player()
        assert controls.player is roster[2]

    def test_switch_wraps_around(self, ctx, controls):
        roster = ctx.team(Side.HOME).roster
        roster[0].is_controlled = False
        roster[-1].is_controlled = True
        assert controls.switch_player()
        assert controls.player is roster[0]
