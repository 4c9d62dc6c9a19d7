"""Tests for players, the ball, teams and the simulation context."""

import pytest

from hoops.simulation.core.court import Side
from hoops.simulation.core.entities import (
    BASE_MAX_SPEED,
    RECATCH_WINDOW,
    Ball,
    DribbleMove,
    PlayerAttributes,
    Role,
    ShotAttempt,
)
from hoops.simulation.core.team import generate_team
from hoops.simulation.core.vec2 import Vec2


class TestPlayer:
    """Player self-update and actions."""

    def test_stamina_starts_full(self, player_factory):
        player = player_factory(stamina=80)
        assert player.current_stamina == 80

    def test_move_normalizes_direction(self, player_factory):
        player = player_factory(speed=80)
        player.move(Vec2(10, 0))
        assert player.velocity == Vec2(0.8, 0)

    def test_zero_input_adds_no_velocity(self, player_factory):
        player = player_factory()
        player.move(Vec2(0, 0), sprint=True)
        assert player.velocity == Vec2(0, 0)
        assert not player.is_sprinting

    def test_sprint_costs_stamina_and_raises_cap(self, player_factory):
        player = player_factory(stamina=50)
        player.move(Vec2(1, 0), sprint=True)
        assert player.is_sprinting
        assert player.current_stamina == 49
        assert player.max_speed > BASE_MAX_SPEED

    def test_sprint_needs_stamina(self, player_factory):
        player = player_factory()
        player.current_stamina = 0
        player.move(Vec2(1, 0), sprint=True)
        assert not player.is_sprinting

    def test_update_regenerates_stamina_up_to_max(self, player_factory):
        player = player_factory(stamina=80)
        player.current_stamina = 79.8
        player.update()
        assert player.current_stamina == 80

    def test_update_does_not_damp_velocity(self, player_factory):
        """Friction belongs to the physics pass."""
        player = player_factory()
        player.velocity = Vec2(1.5, 0)
        player.update()
        assert player.velocity == Vec2(1.5, 0)

    def test_dribble_requires_ball(self, player_factory):
        player = player_factory()
        assert not player.perform_dribble(DribbleMove.CROSSOVER)
        player.has_ball = True
        assert player.perform_dribble(DribbleMove.CROSSOVER)
        assert player.dribble == DribbleMove.CROSSOVER
        assert player.animation.spin == 30

    def test_dribble_reverts_to_normal(self, player_factory):
        player = player_factory()
        player.has_ball = True
        player.perform_dribble(DribbleMove.BEHIND_BACK)
        for _ in range(25):
            player.update()
        assert player.dribble == DribbleMove.NORMAL

    def test_shooting_flag_clears_after_jump(self, player_factory):
        player = player_factory()
        player.begin_shot()
        for _ in range(30):
            player.update()
        assert not player.is_shooting

    def test_pump_fake(self, player_factory):
        player = player_factory()
        assert not player.pump_fake()
        player.has_ball = True
        assert player.pump_fake()
        assert player.animation.fade == 30

    def test_role_proxies(self, player_factory):
        center = player_factory(role=Role.C)
        guard = player_factory(role=Role.PG)
        assert center.height > guard.height
        assert center.strength > guard.strength


class TestShotChance:
    """Accuracy falls with distance and pressure."""

    def test_pressure_is_monotonic(self, player_factory):
        player = player_factory(shooting=85)
        chances = [player.shot_chance(150, p) for p in (0, 25, 50, 75)]
        assert chances == sorted(chances, reverse=True)

    def test_distance_is_monotonic(self, player_factory):
        player = player_factory(shooting=85, three_point=70)
        chances = [player.shot_chance(d, 0) for d in (100, 300, 450)]
        assert chances == sorted(chances, reverse=True)

    def test_clamped(self, player_factory):
        player = player_factory(shooting=99)
        assert player.shot_chance(50, 0) <= 0.9
        assert player.shot_chance(500, 100) >= 0.1


class TestBall:
    """Ball states and handles."""

    def test_starts_dead(self):
        ball = Ball()
        assert ball.is_dead
        assert not ball.is_held

    def test_attach_clears_flight(self):
        ball = Ball(in_air=True, vz=3.0, z=40.0)
        ball.attach("p1")
        assert ball.is_held
        assert not ball.in_air
        assert ball.z == 0 and ball.vz == 0

    def test_launch_remembers_releaser(self):
        ball = Ball()
        ball.attach("p1")
        ball.launch(Vec2(2, 0), 5.0, now=1.0)
        assert ball.in_air
        assert ball.holder_id is None
        assert ball.last_holder_id == "p1"

    def test_recatch_window(self):
        ball = Ball()
        ball.attach("p1")
        ball.launch(Vec2(2, 0), 5.0, now=1.0)
        assert not ball.can_be_caught_by("p1", 1.0 + RECATCH_WINDOW / 2)
        assert ball.can_be_caught_by("p1", 1.0 + RECATCH_WINDOW)
        assert ball.can_be_caught_by("p2", 1.0)

    def test_update_snaps_to_holder(self, player_factory):
        player = player_factory(pos=Vec2(400, 200))
        ball = Ball()
        ball.attach(player.id)
        ball.update(player)
        assert ball.pos == Vec2(400, 200 - player.radius)

    def test_loose_after_bounce(self):
        ball = Ball(in_air=True)
        assert not ball.is_loose
        ball.bounces = 1
        assert ball.is_loose

    def test_blocked_shot_is_loose(self):
        ball = Ball(in_air=True)
        ball.shot = ShotAttempt("p1", Side.HOME, Vec2(0, 0), 100.0, blocked=True)
        assert ball.is_loose

    def test_only_clean_makes_can_score(self):
        assert ShotAttempt("p1", Side.HOME, Vec2(0, 0), 100.0, made=True).can_score
        assert not ShotAttempt("p1", Side.HOME, Vec2(0, 0), 100.0).can_score
        assert not ShotAttempt("p1", Side.HOME, Vec2(0, 0), 100.0, made=True, blocked=True).can_score

    def test_three_point_value_from_release_distance(self):
        assert ShotAttempt("p1", Side.HOME, Vec2(0, 0), 401.0).points == 3
        assert ShotAttempt("p1", Side.HOME, Vec2(0, 0), 400.0).points == 2


class TestTeam:
    """Roster generation and management."""

    def test_generate_team(self, court, rng):
        team = generate_team(Side.AWAY, "Celtics", court, rng, bench_size=3)
        assert [p.role for p in team.roster] == [Role.PG, Role.SG, Role.SF, Role.PF, Role.C]
        assert len(team.bench) == 3
        assert team.roster[0].id == "away-PG"
        for player in team.roster:
            assert 40 <= player.attributes.speed <= 99

    def test_formations_are_mirrored(self, court, rng):
        home = generate_team(Side.HOME, "H", court, rng)
        away = generate_team(Side.AWAY, "A", court, rng)
        for h, a in zip(home.roster, away.roster):
            assert h.pos.x == pytest.approx(court.width - a.pos.x)
            assert h.pos.y == a.pos.y

    def test_substitute(self, court, rng):
        team = generate_team(Side.HOME, "H", court, rng, bench_size=1)
        out_id = team.roster[1].id
        in_id = team.bench[0].id
        assert team.substitute(out_id, in_id)
        assert team.roster[1].id == in_id
        assert team.bench[0].id == out_id

    def test_cannot_sub_out_ball_handler(self, court, rng):
        team = generate_team(Side.HOME, "H", court, rng, bench_size=1)
        team.roster[0].has_ball = True
        assert not team.substitute(team.roster[0].id, team.bench[0].id)

    def test_quarter_fouls(self, court, rng):
        team = generate_team(Side.HOME, "H", court, rng)
        team.add_foul(2)
        team.add_foul(2)
        assert team.quarter_fouls(2) == 2
        assert team.stats.fouls == 2

    def test_lookups(self, court, rng):
        team = generate_team(Side.HOME, "H", court, rng, bench_size=1)
        team.roster[3].attributes.defense = 99
        team.roster[1].attributes.shooting = 99
        team.roster[1].attributes.three_point = 99
        assert team.best_defender() is team.roster[3]
        assert team.best_shooter() is team.roster[1]
        assert team.player_by_role(Role.C) is team.roster[4]
        assert team.player_by_number(team.roster[2].number) is team.roster[2]
        assert team.player_by_number(6) is None

    def test_call_timeout(self, court, rng):
        team = generate_team(Side.HOME, "H", court, rng)
        team.stats.timeouts = 1
        assert team.call_timeout()
        assert team.stats.timeouts == 0
        assert not team.call_timeout()
        assert team.stats.timeouts == 0

    def test_shooting_percentages(self, court, rng):
        team = generate_team(Side.HOME, "H", court, rng)
        assert team.field_goal_pct == 0.0
        assert team.three_point_pct == 0.0
        team.stats.field_goals_attempted = 8
        team.stats.field_goals_made = 2
        team.stats.threes_attempted = 4
        team.stats.threes_made = 3
        assert team.field_goal_pct == pytest.approx(25.0)
        assert team.three_point_pct == pytest.approx(75.0)

    def test_attribute_variance_stays_in_range(self, rng):
        template = PlayerAttributes(speed=98, shooting=41)
        for _ in range(20):
            varied = PlayerAttributes.with_variance(template, rng)
            assert varied.speed <= 99
            assert varied.shooting >= 40


class TestBallOwnership:
    """has_ball is exclusive and mirrors the ball's holder handle."""

    def test_give_ball_is_exclusive(self, ctx):
        first, second = ctx.team(Side.HOME).roster[:2]
        ctx.give_ball(first)
        ctx.give_ball(second)
        holders = [p for p in ctx.players() if p.has_ball]
        assert holders == [second]
        assert ctx.ball.holder_id == second.id

    def test_release_clears_holder(self, ctx):
        player = ctx.team(Side.HOME).roster[0]
        ctx.give_ball(player)
        releaser = ctx.release_ball(Vec2(1, 0), 4.0)
        assert releaser is player
        assert not player.has_ball
        assert ctx.ball.in_air

    def test_kill_ball(self, ctx):
        ctx.give_ball(ctx.team(Side.AWAY).roster[0])
        ctx.kill_ball()
        assert ctx.ball.is_dead
        assert not any(p.has_ball for p in ctx.players())
