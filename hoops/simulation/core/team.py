"""Teams: roster, bench, aggregate stats and strategy."""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from .court import Court, Side
from .entities import Player, PlayerAttributes, Role
from .vec2 import Vec2


class OffenseScheme(str, Enum):
    BALANCED = "balanced"
    FAST_BREAK = "fast_break"
    INSIDE = "inside"
    OUTSIDE = "outside"


class DefenseScheme(str, Enum):
    MAN_TO_MAN = "man_to_man"
    ZONE_2_3 = "zone_2_3"
    ZONE_3_2 = "zone_3_2"
    PRESS = "press"

    @property
    def is_zone(self) -> bool:
        return self in (DefenseScheme.ZONE_2_3, DefenseScheme.ZONE_3_2)


# =============================================================================
# Role Templates
# =============================================================================

ROLE_ORDER: tuple[Role, ...] = (Role.PG, Role.SG, Role.SF, Role.PF, Role.C)

ROLE_TEMPLATES: dict[Role, PlayerAttributes] = {
    Role.PG: PlayerAttributes(speed=85, shooting=78, dribbling=88, defense=75, stamina=90, three_point=80),
    Role.SG: PlayerAttributes(speed=82, shooting=85, dribbling=80, defense=72, stamina=88, three_point=85),
    Role.SF: PlayerAttributes(speed=80, shooting=82, dribbling=75, defense=78, stamina=85, three_point=80),
    Role.PF: PlayerAttributes(speed=75, shooting=76, dribbling=70, defense=85, stamina=90, three_point=70),
    Role.C: PlayerAttributes(speed=70, shooting=72, dribbling=65, defense=90, stamina=95, three_point=60),
}

# Formation spots for the home side; away spots are mirrored across midcourt.
HOME_FORMATION: dict[Role, Vec2] = {
    Role.PG: Vec2(200, 300),
    Role.SG: Vec2(150, 200),
    Role.SF: Vec2(150, 400),
    Role.PF: Vec2(100, 250),
    Role.C: Vec2(100, 350),
}

DEFAULT_NUMBERS: dict[Role, int] = {
    Role.PG: 1,
    Role.SG: 2,
    Role.SF: 3,
    Role.PF: 4,
    Role.C: 5,
}


def formation_spot(court: Court, side: Side, role: Role) -> Vec2:
    spot = HOME_FORMATION[role]
    if side == Side.HOME:
        return spot
    return Vec2(court.width - spot.x, spot.y)


# =============================================================================
# Team State
# =============================================================================

@dataclass
class TeamStats:
    """Aggregate team counters."""
    points: int = 0
    field_goals_made: int = 0
    field_goals_attempted: int = 0
    threes_made: int = 0
    threes_attempted: int = 0
    rebounds: int = 0
    assists: int = 0
    steals: int = 0
    blocks: int = 0
    turnovers: int = 0
    fouls: int = 0
    quarter_fouls: list[int] = field(default_factory=lambda: [0, 0, 0, 0])
    timeouts: int = 7


@dataclass
class TeamStrategy:
    offense: OffenseScheme = OffenseScheme.BALANCED
    defense: DefenseScheme = DefenseScheme.MAN_TO_MAN
    pace: int = 50          # 0-100
    focus: str = "balanced"  # inside / outside / balanced


@dataclass
class Team:
    """One side's roster plus bench.

    The five on-court players are `roster`; `bench` is disjoint from it.
    """
    side: Side
    name: str
    colors: tuple[str, str] = ("#ffffff", "#000000")
    rating: int = 75
    roster: list[Player] = field(default_factory=list)
    bench: list[Player] = field(default_factory=list)
    stats: TeamStats = field(default_factory=TeamStats)
    strategy: TeamStrategy = field(default_factory=TeamStrategy)

    # =========================================================================
    # Lookups
    # =========================================================================

    def get_player(self, player_id: str) -> Optional[Player]:
        for player in self.roster:
            if player.id == player_id:
                return player
        return None

    def player_by_role(self, role: Role) -> Optional[Player]:
        return next((p for p in self.roster if p.role == role), None)

    def player_by_number(self, number: int) -> Optional[Player]:
        return next((p for p in self.roster if p.number == number), None)

    def best_shooter(self) -> Player:
        return max(self.roster, key=lambda p: p.attributes.shooting + p.attributes.three_point)

    def best_defender(self) -> Player:
        return max(self.roster, key=lambda p: p.attributes.defense)

    def frontcourt(self) -> list[Player]:
        return [p for p in self.roster if p.role.is_frontcourt]

    # =========================================================================
    # Roster management
    # =========================================================================

    def substitute(self, out_id: str, in_id: str) -> bool:
        """Swap an on-court player with a bench player.

        Returns False (no change) unless out_id is on court without the ball
        and in_id is on the bench.
        """
        out_player = self.get_player(out_id)
        in_player = next((p for p in self.bench if p.id == in_id), None)
        if out_player is None or in_player is None or out_player.has_ball:
            return False

        index = self.roster.index(out_player)
        self.roster[index] = in_player
        self.bench.remove(in_player)
        self.bench.append(out_player)

        in_player.reset_position(out_player.pos)
        in_player.home_pos = out_player.home_pos
        in_player.is_controlled = out_player.is_controlled
        out_player.is_controlled = False
        return True

    # =========================================================================
    # Stats
    # =========================================================================

    def add_foul(self, quarter: int) -> None:
        self.stats.fouls += 1
        if 1 <= quarter <= 4:
            self.stats.quarter_fouls[quarter - 1] += 1

    def quarter_fouls(self, quarter: int) -> int:
        if 1 <= quarter <= 4:
            return self.stats.quarter_fouls[quarter - 1]
        return 0

    def call_timeout(self) -> bool:
        if self.stats.timeouts > 0:
            self.stats.timeouts -= 1
            return True
        return False

    @property
    def field_goal_pct(self) -> float:
        if self.stats.field_goals_attempted == 0:
            return 0.0
        return self.stats.field_goals_made / self.stats.field_goals_attempted * 100

    @property
    def three_point_pct(self) -> float:
        if self.stats.threes_attempted == 0:
            return 0.0
        return self.stats.threes_made / self.stats.threes_attempted * 100

    def reset_stats(self) -> None:
        self.stats = TeamStats()
        for player in self.roster + self.bench:
            player.reset_stats()

    def reset_strategy(self) -> None:
        """Drop schemes called during play, back to the default man-to-man."""
        self.strategy = TeamStrategy()

    def reset_positions(self) -> None:
        for player in self.roster:
            player.reset_position()


# =============================================================================
# Roster generation
# =============================================================================

def generate_team(
    side: Side,
    name: str,
    court: Court,
    rng: random.Random,
    colors: tuple[str, str] = ("#ffffff", "#000000"),
    rating: int = 75,
    bench_size: int = 0,
) -> Team:
    """Build a team from role templates with ±5 variance per rating.

    Bench players reuse the role cycle and get jersey numbers from 6 up.
    """
    team = Team(side=side, name=name, colors=colors, rating=rating)

    for role in ROLE_ORDER:
        team.roster.append(_make_player(side, name, role, DEFAULT_NUMBERS[role], court, rng))

    for i in range(bench_size):
        role = ROLE_ORDER[i % len(ROLE_ORDER)]
        team.bench.append(_make_player(side, name, role, 6 + i, court, rng))

    return team


def _make_player(
    side: Side,
    team_name: str,
    role: Role,
    number: int,
    court: Court,
    rng: random.Random,
) -> Player:
    spot = formation_spot(court, side, role)
    player_id = f"{side.value}-{role.value}" if number <= 5 else f"{side.value}-{number}"
    return Player(
        id=player_id,
        name=f"{team_name} {role.value}" if number <= 5 else f"{team_name} #{number}",
        side=side,
        role=role,
        number=number,
        pos=spot,
        home_pos=spot,
        attributes=PlayerAttributes.with_variance(ROLE_TEMPLATES[role], rng),
    )
