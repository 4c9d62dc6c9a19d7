"""Tests for situation analysis, action selection and the decision engine."""

import pytest

from hoops.simulation.ai.actions import (
    ActionRunner,
    ActionType,
    candidate_actions,
    choose_action,
    is_viable,
    parse_action,
    viable_actions,
)
from hoops.simulation.ai.difficulty import DIFFICULTIES, get_difficulty
from hoops.simulation.ai.engine import DecisionEngine, DecisionPhase
from hoops.simulation.ai.situation import (
    SituationType,
    calculate_shot_accuracy,
    classify,
    defensive_pressure,
)
from hoops.simulation.context import OutcomeKind
from hoops.simulation.core.court import Side
from hoops.simulation.core.entities import Role
from hoops.simulation.core.events import EventType
from hoops.simulation.core.trace import TraceCategory
from hoops.simulation.core.vec2 import Vec2


class TestClassify:
    """First matching situation class wins."""

    def test_shot_clock_beats_everything(self):
        assert classify(4, -20, 4, 10) == SituationType.SHOT_CLOCK_CRITICAL

    def test_margins(self):
        assert classify(20, -11, 1, 600) == SituationType.LOSING_BADLY
        assert classify(20, -3, 1, 600) == SituationType.LOSING
        assert classify(20, 11, 1, 600) == SituationType.WINNING_COMFORTABLY

    def test_crunch_time(self):
        assert classify(20, 0, 4, 59) == SituationType.CRUNCH_TIME
        assert classify(20, 0, 3, 59) == SituationType.NORMAL
        assert classify(20, 0, 4, 60) == SituationType.NORMAL

    def test_boundaries(self):
        assert classify(5, 0, 1, 600) == SituationType.NORMAL
        assert classify(20, -10, 1, 600) == SituationType.LOSING
        assert classify(20, 10, 1, 600) == SituationType.NORMAL


class TestProbabilityHelpers:
    """Shot, dunk, steal and block chances."""

    def test_shot_accuracy_non_increasing_in_pressure(self):
        values = [calculate_shot_accuracy(200, 80, p) for p in (0, 20, 50, 90)]
        assert values == sorted(values, reverse=True)

    def test_shot_accuracy_clamped(self):
        assert calculate_shot_accuracy(50, 99, 0) == pytest.approx(0.95)
        assert calculate_shot_accuracy(500, 40, 100) == pytest.approx(0.1)

    def test_shot_accuracy_distance_buckets(self):
        close = calculate_shot_accuracy(100, 80, 0)
        mid = calculate_shot_accuracy(300, 80, 0)
        deep = calculate_shot_accuracy(450, 80, 0)
        assert close > mid > deep

    def test_pressure_from_nearby_defenders(self, player_factory):
        handler = player_factory("h", pos=Vec2(500, 300))
        near = player_factory("d1", side=Side.AWAY, pos=Vec2(550, 300), defense=90)
        far = player_factory("d2", side=Side.AWAY, pos=Vec2(900, 300))
        assert defensive_pressure(handler, [far]) == 0.0
        assert defensive_pressure(handler, [near]) == pytest.approx(100 / 150 * 90)


class TestActionSelection:
    """Candidates, capability filter, the roll."""

    def test_candidates(self):
        assert candidate_actions(SituationType.SHOT_CLOCK_CRITICAL) == [ActionType.SHOOT]
        assert ActionType.FAST_BREAK in candidate_actions(SituationType.LOSING_BADLY)
        assert ActionType.POST_UP in candidate_actions(SituationType.CRUNCH_TIME)

    def test_weak_handler_can_only_pass(self, player_factory):
        player = player_factory(shooting=60, dribbling=60, speed=60)
        teammates = [player_factory("c", role=Role.C)]
        viable = viable_actions(candidate_actions(SituationType.NORMAL), player, teammates)
        assert viable == [ActionType.PASS]

    def test_weak_handler_passes_on_high_roll(self, player_factory, fixed_rng):
        player = player_factory(shooting=60, dribbling=60, speed=60)
        action = choose_action(SituationType.NORMAL, player, [], get_difficulty("pro"), fixed_rng(0.99))
        assert action == ActionType.PASS

    def test_critical_clock_without_shooter_passes(self, player_factory):
        player = player_factory(shooting=60)
        viable = viable_actions(candidate_actions(SituationType.SHOT_CLOCK_CRITICAL), player, [])
        assert viable == [ActionType.PASS]

    def test_low_roll_is_a_turnover(self, player_factory, fixed_rng):
        player = player_factory(shooting=90)
        action = choose_action(SituationType.NORMAL, player, [], get_difficulty("rookie"), fixed_rng(0.0))
        assert action == ActionType.TURNOVER

    def test_aggression_favors_shooting(self, player_factory, fixed_rng):
        player = player_factory(shooting=90)
        action = choose_action(SituationType.NORMAL, player, [], get_difficulty("legendary"), fixed_rng(0.5))
        assert action == ActionType.SHOOT

    def test_capability_filters(self, player_factory):
        guard = player_factory(role=Role.PG, dribbling=80, speed=80)
        center = player_factory("c", role=Role.C)
        assert is_viable(ActionType.DRIVE, guard, [])
        assert not is_viable(ActionType.POST_UP, guard, [])
        assert is_viable(ActionType.POST_UP, center, [])
        assert not is_viable(ActionType.PICK_AND_ROLL, guard, [])
        assert is_viable(ActionType.PICK_AND_ROLL, guard, [center])

    def test_parse_action_falls_back_to_pass(self):
        assert parse_action("dunk") == ActionType.DUNK
        assert parse_action("moonball") == ActionType.PASS


class TestDifficulty:
    """Presets and lookup."""

    def test_presets_scale(self):
        latencies = [DIFFICULTIES[k].decision_latency_ms for k in ("rookie", "pro", "allstar", "legendary")]
        assert latencies == sorted(latencies, reverse=True)

    def test_unknown_falls_back_to_pro(self):
        assert get_difficulty("impossible") is DIFFICULTIES["pro"]
        assert get_difficulty("ALLSTAR") is DIFFICULTIES["allstar"]

    def test_latency_seconds(self):
        assert get_difficulty("legendary").decision_latency == pytest.approx(0.3)


class TestActionRunner:
    """Execution against a live context."""

    def test_turnover_queues_outcome_for_opponent(self, ctx):
        player = ctx.team(Side.AWAY).roster[0]
        ctx.give_ball(player)
        runner = ActionRunner(ctx, get_difficulty("pro"), ctx.rng)

        assert runner.run(ActionType.TURNOVER, player)

        assert ctx.ball.is_dead
        assert ctx.outcomes[-1].kind == OutcomeKind.TURNOVER
        assert ctx.outcomes[-1].side == Side.HOME

    def test_shoot_releases_ball(self, ctx):
        player = ctx.team(Side.AWAY).roster[1]
        ctx.give_ball(player)
        runner = ActionRunner(ctx, get_difficulty("pro"), ctx.rng)

        assert runner.run(ActionType.SHOOT, player)
        assert ctx.ball.in_air
        assert ctx.ball.shot.shooter_id == player.id

    def test_shoot_without_ball_fails(self, ctx):
        runner = ActionRunner(ctx, get_difficulty("pro"), ctx.rng)
        assert not runner.shoot(ctx.team(Side.AWAY).roster[0])

    def test_pass_goes_to_a_teammate(self, ctx):
        passer = ctx.team(Side.AWAY).roster[0]
        ctx.give_ball(passer)
        runner = ActionRunner(ctx, get_difficulty("pro"), ctx.rng)
        target = runner.best_pass_target(passer)
        assert target is not None and target.side == Side.AWAY and target is not passer
        assert runner.pass_to(passer, target)
        assert ctx.ball.last_passer_id == passer.id

    def test_guard_post_up_becomes_a_pass(self, ctx):
        guard = ctx.team(Side.AWAY).roster[0]
        ctx.give_ball(guard)
        runner = ActionRunner(ctx, get_difficulty("pro"), ctx.rng)
        assert runner.post_up(guard)
        assert ctx.ball.in_air
        assert ctx.ball.shot is None


class TestDecisionEngine:
    """Latency-gated offensive decisions for the away side."""

    @pytest.fixture
    def engine(self, ctx):
        ctx.state.possession = Side.AWAY
        ctx.give_ball(ctx.team(Side.AWAY).roster[0])
        return DecisionEngine(ctx, Side.AWAY, "pro")

    def test_decides_for_handler(self, ctx, engine):
        decision = engine.update()
        assert decision is not None
        assert decision.handler_id == "away-PG"
        assert decision.phase in (DecisionPhase.SUCCESS, DecisionPhase.FAILURE)
        assert engine.last_decision is decision
        assert engine.phase == DecisionPhase.IDLE
        assert len(ctx.event_bus.get_events_by_type(EventType.DECISION_MADE)) == 1

    def test_latency_gates_next_decision(self, engine):
        assert engine.update() is not None
        assert engine.update() is None
        assert len(engine.history) == 1

    def test_dead_ball_means_no_decision(self, ctx, engine):
        ctx.kill_ball()
        assert engine.update() is None
        assert len(engine.history) == 0

    def test_inactive_match_means_no_decision(self, ctx, engine):
        ctx.state.paused = True
        assert engine.update() is None

    def test_defends_without_possession(self, ctx, engine):
        ctx.state.possession = Side.HOME
        ctx.give_ball(ctx.team(Side.HOME).roster[0])
        assert engine.update() is None
        assert len(engine.history) == 0

    def test_execute_by_wire_name(self, ctx, engine):
        handler = ctx.holder()
        assert engine.execute("turnover", handler)
        assert ctx.outcomes[-1].kind == OutcomeKind.TURNOVER

    def test_execute_unknown_name_passes(self, ctx, engine):
        handler = ctx.holder()
        assert engine.execute("moonball", handler)
        assert ctx.ball.in_air
        assert ctx.ball.last_passer_id == handler.id
        assert ctx.event_bus.get_events_by_type(EventType.PASS)[-1].player_id == handler.id

    def test_controlled_holder_is_not_driven(self, ctx, engine):
        ctx.holder().is_controlled = True
        decision = engine.decide()
        assert decision.handler_id is None
        assert decision.action is None

    def test_trace_covers_decision_stages(self, ctx, engine):
        ctx.trace.enable()
        engine.update()
        categories = {e.category for e in ctx.trace.get_entries()}
        assert categories == {TraceCategory.PERCEPTION, TraceCategory.DECISION, TraceCategory.ACTION}

    def test_run_tactic_by_name(self, ctx, engine):
        assert engine.run_tactic("zone")
        assert ctx.team(Side.AWAY).strategy.defense.is_zone
        assert len(ctx.event_bus.get_events_by_type(EventType.TACTIC_CALLED)) == 1

    def test_unknown_tactic_rejected(self, engine):
        assert not engine.run_tactic("triangle")

    def test_chase_loose_ball(self, ctx, engine):
        ctx.kill_ball()
        ctx.ball.pos = Vec2(700, 300)
        ctx.ball.in_air = True
        ctx.ball.bounces = 1
        chaser = engine.chase_loose_ball()
        assert chaser is not None
        assert chaser.target == Vec2(700, 300)
        assert chaser.is_sprinting

    def test_reset_clears_history(self, engine):
        engine.update()
        engine.reset()
        assert engine.last_decision is None
