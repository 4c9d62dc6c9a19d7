"""Shared simulation context.

One SimulationContext is created per match and passed by reference to every
subsystem call (entity update, physics, decision engine, orchestrator). It
owns the entities, the authoritative match state, the event bus, the
deferred-effect queue and the outcome queue that physics and AI fill and the
orchestrator drains at the end of each tick.
"""

from __future__ import annotations

import random
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Iterator, Optional

from .core.clock import Clock
from .core.court import Court, Side
from .core.entities import Ball, Player
from .core.events import EventBus, EventType
from .core.scheduler import EffectScheduler
from .core.team import Team
from .core.trace import TraceSystem
from .core.vec2 import Vec2


SHOT_CLOCK_SECONDS = 24
QUARTERS = 4


# =============================================================================
# Outcomes
# =============================================================================

class OutcomeKind(str, Enum):
    """Terminal occurrences the orchestrator applies at end of tick."""
    BASKET = "basket"
    TURNOVER = "turnover"
    STEAL = "steal"
    FOUL = "foul"
    OUT_OF_BOUNDS = "out_of_bounds"
    POSSESSION = "possession"       # Catch or rebound that moves possession


@dataclass
class Outcome:
    """A queued terminal occurrence.

    Attributes:
        kind: What happened
        side: Side that ends up with the ball (or the scoring side)
        player_id: Primary actor (shooter, stealer, fouler, catcher...)
        target_id: Secondary actor (assist, victim, fouled player...)
        points: Points for a basket
    """
    kind: OutcomeKind
    side: Side
    player_id: Optional[str] = None
    target_id: Optional[str] = None
    points: int = 0
    data: dict[str, Any] = field(default_factory=dict)


# =============================================================================
# Match State
# =============================================================================

@dataclass
class MatchState:
    """Score, clocks and possession.

    The game clock and shot clock are independent counters; the shot clock
    is not bounded by the game clock.
    """
    score: dict[Side, int] = field(default_factory=lambda: {Side.HOME: 0, Side.AWAY: 0})
    quarter: int = 1
    quarter_length: int = 720
    game_clock: int = 720
    shot_clock: int = SHOT_CLOCK_SECONDS
    possession: Side = Side.HOME
    active: bool = False
    paused: bool = False
    game_over: bool = False

    def score_diff(self, side: Side) -> int:
        """Points `side` leads by (negative when trailing)."""
        return self.score[side] - self.score[side.opponent]

    def reset(self) -> None:
        self.score = {Side.HOME: 0, Side.AWAY: 0}
        self.quarter = 1
        self.game_clock = self.quarter_length
        self.shot_clock = SHOT_CLOCK_SECONDS
        self.possession = Side.HOME
        self.active = False
        self.paused = False
        self.game_over = False


# =============================================================================
# Context
# =============================================================================

@dataclass
class SimulationContext:
    """Everything a subsystem needs for one tick of one match."""
    court: Court
    teams: dict[Side, Team]
    ball: Ball
    rng: random.Random
    state: MatchState = field(default_factory=MatchState)
    clock: Clock = field(default_factory=Clock)
    event_bus: EventBus = field(default_factory=EventBus)
    scheduler: EffectScheduler = field(default_factory=EffectScheduler)
    trace: TraceSystem = field(default_factory=TraceSystem)
    outcomes: list[Outcome] = field(default_factory=list)

    # =========================================================================
    # Lookups
    # =========================================================================

    @property
    def now(self) -> float:
        """Simulation time in seconds."""
        return self.clock.current_time

    def players(self) -> Iterator[Player]:
        """All on-court players, home first."""
        yield from self.teams[Side.HOME].roster
        yield from self.teams[Side.AWAY].roster

    def team(self, side: Side) -> Team:
        return self.teams[side]

    def teammates(self, player: Player) -> list[Player]:
        return [p for p in self.teams[player.side].roster if p.id != player.id]

    def opponents(self, side: Side) -> list[Player]:
        return self.teams[side.opponent].roster

    def get_player(self, player_id: Optional[str]) -> Optional[Player]:
        if player_id is None:
            return None
        for player in self.players():
            if player.id == player_id:
                return player
        return None

    def holder(self) -> Optional[Player]:
        return self.get_player(self.ball.holder_id)

    def controlled_player(self, side: Side = Side.HOME) -> Optional[Player]:
        return next((p for p in self.teams[side].roster if p.is_controlled), None)

    # =========================================================================
    # Ball ownership
    # =========================================================================

    def give_ball(self, player: Player) -> None:
        """Attach the ball to a player; nobody else keeps has_ball."""
        for other in self.players():
            other.has_ball = False
        self.ball.attach(player.id)
        player.has_ball = True
        self.ball.update(player)

    def release_ball(self, velocity: Vec2, vz: float, z: float = 0.0) -> Optional[Player]:
        """Launch the ball out of the holder's hands. Returns the releaser."""
        releaser = self.holder()
        if releaser is not None:
            releaser.has_ball = False
        self.ball.launch(velocity, vz, self.now, z=z)
        return releaser

    def kill_ball(self) -> None:
        """Dead ball: nobody holds it and it is not in flight."""
        for player in self.players():
            player.has_ball = False
        self.ball.stop()

    # =========================================================================
    # Events, outcomes, deferred effects
    # =========================================================================

    def emit(
        self,
        event_type: EventType,
        player_id: Optional[str] = None,
        description: str = "",
        target_id: Optional[str] = None,
        **data: Any,
    ) -> None:
        self.event_bus.emit_simple(
            event_type,
            self.clock.tick_count,
            self.now,
            player_id=player_id,
            description=description,
            target_id=target_id,
            **data,
        )

    def queue(self, outcome: Outcome) -> None:
        self.outcomes.append(outcome)

    def schedule(self, delay_ms: float, name: str, callback: Callable[[], None]) -> None:
        self.scheduler.schedule(self.now, delay_ms, name, callback)
