"""Shared pytest fixtures for Hoops tests."""

import random

import pytest

from hoops.simulation import MatchConfig, Orchestrator
from hoops.simulation.context import SimulationContext
from hoops.simulation.core.court import Court, Side
from hoops.simulation.core.entities import Ball, Player, PlayerAttributes, Role
from hoops.simulation.core.team import generate_team
from hoops.simulation.core.vec2 import Vec2


# =============================================================================
# Helpers
# =============================================================================


def make_player(
    player_id: str = "p1",
    side: Side = Side.HOME,
    role: Role = Role.PG,
    pos: Vec2 = Vec2(500, 300),
    **ratings,
) -> Player:
    """Bare player with all ratings at 75 unless overridden."""
    return Player(
        id=player_id,
        name=player_id,
        side=side,
        role=role,
        pos=pos,
        attributes=PlayerAttributes(**ratings),
    )


class FixedRandom(random.Random):
    """Random source whose random() always returns the same roll."""

    def __init__(self, roll: float):
        super().__init__(0)
        self.roll = roll

    def random(self) -> float:
        return self.roll


# =============================================================================
# Context Fixtures
# =============================================================================


@pytest.fixture
def rng() -> random.Random:
    """Seeded random source."""
    return random.Random(1234)


@pytest.fixture
def court() -> Court:
    return Court()


@pytest.fixture
def ctx(court, rng) -> SimulationContext:
    """Context with two generated teams in formation and the ball at center."""
    teams = {
        Side.HOME: generate_team(Side.HOME, "Home", court, rng),
        Side.AWAY: generate_team(Side.AWAY, "Away", court, rng),
    }
    context = SimulationContext(court=court, teams=teams, ball=Ball(pos=court.center), rng=rng)
    context.state.active = True
    return context


# =============================================================================
# Match Fixtures
# =============================================================================


@pytest.fixture
def match() -> Orchestrator:
    """Seeded match at tip-off with the home PG under user control."""
    return Orchestrator(MatchConfig(seed=7))


@pytest.fixture
def autopilot_match() -> Orchestrator:
    """Seeded match with the AI driving both sides, short quarters."""
    return Orchestrator(MatchConfig(seed=11, autopilot=True, quarter_length=60))


# =============================================================================
# Factories
# =============================================================================


@pytest.fixture
def player_factory():
    """Factory for bare players: player_factory("a", pos=Vec2(...), shooting=60)."""
    return make_player


@pytest.fixture
def fixed_rng():
    """Factory for a random source that always rolls the given value."""
    return FixedRandom
