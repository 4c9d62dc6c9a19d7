"""Game orchestrator: match lifecycle, tick ordering and terminal outcomes.

Tick order (fixed):
    1. Fire due deferred effects
    2. Apply the controlled player's movement intent
    3. Entity self-update (timers, stamina, ball snap)
    4. Physics (movement, collisions, boundaries, score check)
    5. Decision engines
    6. Apply queued outcomes (score, turnovers, possession)

The 1 Hz game clock is advanced separately by `clock_tick`; `simulate`
interleaves the two for headless runs.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import Optional, Union

from .ai.difficulty import DEFAULT_DIFFICULTY
from .ai.engine import DecisionEngine
from .ai.tactics import Tactic
from .context import (
    QUARTERS,
    SHOT_CLOCK_SECONDS,
    MatchState,
    Outcome,
    OutcomeKind,
    SimulationContext,
)
from .controls import InputController
from .core.clock import TICKS_PER_SECOND, Clock
from .core.court import Court, Side
from .core.entities import Ball, DribbleMove, Player
from .core.events import EventBus, EventType
from .core.geometry import format_clock
from .core.team import generate_team
from .core.vec2 import Vec2
from .export import MatchSnapshot, build_snapshot
from .physics.engine import PhysicsEngine

logger = logging.getLogger(__name__)


BASKET_INBOUND_MS = 1500
DEAD_BALL_INBOUND_MS = 1000
INBOUND_EFFECT = "inbound"


# =============================================================================
# Configuration
# =============================================================================

@dataclass
class TeamDescriptor:
    """Name, colors and overall rating for one side."""
    name: str
    color1: str = "#ffffff"
    color2: str = "#000000"
    rating: int = 75


@dataclass
class MatchConfig:
    """Everything needed to build a match.

    Attributes:
        home: Controlled side
        away: AI side
        difficulty: Difficulty preset key for the AI
        quarter_length: Quarter length in seconds
        seed: Seed for the match's random source (None for a random match)
        autopilot: Let the AI drive the home side too
        tick_rate: Simulation ticks per second
        use_grid: Use the spatial grid for collision pairs
    """
    home: TeamDescriptor = field(default_factory=lambda: TeamDescriptor("Lakers", "#552583", "#FDB927"))
    away: TeamDescriptor = field(default_factory=lambda: TeamDescriptor("Celtics", "#007A33", "#FFFFFF"))
    difficulty: str = DEFAULT_DIFFICULTY
    quarter_length: int = 720
    seed: Optional[int] = None
    autopilot: bool = False
    tick_rate: int = TICKS_PER_SECOND
    use_grid: bool = True


# =============================================================================
# Orchestrator
# =============================================================================

class Orchestrator:
    """Runs one match.

    Usage:
        match = Orchestrator(MatchConfig(seed=7, autopilot=True))
        match.start()
        match.simulate(60)
        print(match.snapshot().score)
    """

    def __init__(self, config: Optional[MatchConfig] = None):
        self.config = config or MatchConfig()
        rng = random.Random(self.config.seed)
        court = Court()

        teams = {
            Side.HOME: generate_team(
                Side.HOME,
                self.config.home.name,
                court,
                rng,
                colors=(self.config.home.color1, self.config.home.color2),
                rating=self.config.home.rating,
            ),
            Side.AWAY: generate_team(
                Side.AWAY,
                self.config.away.name,
                court,
                rng,
                colors=(self.config.away.color1, self.config.away.color2),
                rating=self.config.away.rating,
            ),
        }

        self.ctx = SimulationContext(
            court=court,
            teams=teams,
            ball=Ball(pos=court.center),
            rng=rng,
            state=MatchState(
                quarter_length=self.config.quarter_length,
                game_clock=self.config.quarter_length,
            ),
            clock=Clock(tick_rate=1.0 / self.config.tick_rate),
        )

        self.physics = PhysicsEngine(use_grid=self.config.use_grid)
        self.controls = InputController(self.ctx, Side.HOME)
        self.engines: dict[Side, DecisionEngine] = {
            Side.AWAY: DecisionEngine(self.ctx, Side.AWAY, self.config.difficulty),
        }
        if self.config.autopilot:
            self.engines[Side.HOME] = DecisionEngine(self.ctx, Side.HOME, self.config.difficulty)

        self._ticks_into_second = 0
        self._setup_tipoff()

    # =========================================================================
    # Accessors
    # =========================================================================

    @property
    def state(self) -> MatchState:
        return self.ctx.state

    @property
    def ball(self) -> Ball:
        return self.ctx.ball

    @property
    def event_bus(self) -> EventBus:
        return self.ctx.event_bus

    @property
    def is_running(self) -> bool:
        state = self.state
        return state.active and not state.paused and not state.game_over

    def _setup_tipoff(self) -> None:
        """Formation spots, home PG controlled (unless autopilot) and holding the ball."""
        for team in self.ctx.teams.values():
            team.reset_positions()
            for player in team.roster:
                player.is_controlled = False

        home_pg = self.ctx.team(Side.HOME).roster[0]
        if not self.config.autopilot:
            home_pg.is_controlled = True

        self.ball.reset(self.ctx.court.center)
        self.ctx.give_ball(home_pg)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def start(self) -> bool:
        state = self.state
        if state.active or state.game_over:
            return False
        state.active = True
        state.paused = False
        if self.ball.is_dead:
            self.inbound()
        self.ctx.emit(
            EventType.MATCH_START,
            description=f"{self.config.home.name} vs {self.config.away.name}",
        )
        logger.info(f"Match started: {self.config.home.name} vs {self.config.away.name}")
        return True

    def pause(self) -> bool:
        if not self.state.active or self.state.paused:
            return False
        self.state.paused = True
        self.ctx.emit(EventType.PAUSED)
        return True

    def resume(self) -> bool:
        if not self.state.active or not self.state.paused:
            return False
        self.state.paused = False
        self.ctx.emit(EventType.RESUMED)
        return True

    def stop(self) -> None:
        """End the match where it stands; queued effects never fire."""
        self.state.active = False
        self.state.paused = False
        self.ctx.scheduler.invalidate()
        self.ctx.emit(EventType.MATCH_STOPPED)
        logger.info("Match stopped")

    def reset(self) -> None:
        """Back to tip-off: positions, score, clocks, stats and team schemes."""
        ctx = self.ctx
        ctx.scheduler.invalidate()
        ctx.outcomes.clear()
        ctx.state.reset()
        ctx.clock.reset()
        ctx.trace.clear()
        for team in ctx.teams.values():
            team.reset_stats()
            team.reset_strategy()
        self.physics.reset()
        self.controls.reset()
        for engine in self.engines.values():
            engine.reset()
        self._ticks_into_second = 0
        self._setup_tipoff()
        ctx.emit(EventType.MATCH_RESET)
        logger.info("Match reset")

    # =========================================================================
    # Ticking
    # =========================================================================

    def tick(self) -> bool:
        """One simulation tick. Returns False if the match isn't running."""
        if not self.is_running:
            return False

        ctx = self.ctx
        dt = ctx.clock.tick()
        ctx.trace.set_tick(ctx.clock.tick_count, ctx.now)

        ctx.scheduler.advance(ctx.now)
        self.controls.apply(dt)

        for player in ctx.players():
            player.update()
        ctx.ball.update(ctx.holder())

        self.physics.update(ctx)

        for engine in self.engines.values():
            engine.update()

        self.apply_outcomes()
        return True

    def clock_tick(self) -> bool:
        """One game-clock second."""
        if not self.is_running:
            return False

        state = self.state
        state.game_clock -= 1
        if not self.ball.is_dead:
            state.shot_clock -= 1

        if state.shot_clock <= 0:
            self._shot_clock_violation()
        if state.game_clock <= 0:
            self._end_quarter()
        return True

    def simulate(self, seconds: float) -> int:
        """Run headless for `seconds` of simulation time.

        Starts the match if needed. Advances the game clock once per
        `tick_rate` ticks, carrying the phase across calls.

        Returns:
            Number of ticks run
        """
        if not self.state.active and not self.state.game_over:
            self.start()

        ticks_per_second = self.ctx.clock.ticks_per_second
        ran = 0
        for _ in range(round(seconds * ticks_per_second)):
            if not self.tick():
                break
            ran += 1
            self._ticks_into_second += 1
            if self._ticks_into_second >= ticks_per_second:
                self._ticks_into_second = 0
                self.clock_tick()
        return ran

    # =========================================================================
    # Clock events
    # =========================================================================

    def _shot_clock_violation(self) -> None:
        state = self.state
        offender = state.possession
        self.ctx.kill_ball()
        self.ctx.emit(
            EventType.SHOT_CLOCK_VIOLATION,
            description=f"Shot clock violation on {self.ctx.team(offender).name}",
            side=offender.value,
        )
        self._change_possession(offender.opponent, "shot_clock_violation")
        self._schedule_inbound(DEAD_BALL_INBOUND_MS)

    def _end_quarter(self) -> None:
        state = self.state
        self.ctx.emit(
            EventType.QUARTER_END,
            description=f"End of Q{state.quarter}",
            quarter=state.quarter,
            home=state.score[Side.HOME],
            away=state.score[Side.AWAY],
        )
        logger.info(f"End of Q{state.quarter}: {state.score[Side.HOME]}-{state.score[Side.AWAY]}")

        state.quarter += 1
        if state.quarter > QUARTERS:
            state.quarter = QUARTERS
            state.game_clock = 0
            state.game_over = True
            state.active = False
            self.ctx.scheduler.invalidate()
            self.ctx.emit(
                EventType.GAME_END,
                description=f"Final: {self.config.home.name} {state.score[Side.HOME]}, "
                            f"{self.config.away.name} {state.score[Side.AWAY]}",
                home=state.score[Side.HOME],
                away=state.score[Side.AWAY],
            )
            logger.info(f"Game over: {state.score[Side.HOME]}-{state.score[Side.AWAY]}")
            return

        state.game_clock = state.quarter_length
        state.shot_clock = SHOT_CLOCK_SECONDS

    # =========================================================================
    # Outcomes
    # =========================================================================

    def apply_outcomes(self) -> None:
        """Drain the outcome queue in the order outcomes were queued."""
        outcomes, self.ctx.outcomes = self.ctx.outcomes, []
        appliers = {
            OutcomeKind.BASKET: self._apply_basket,
            OutcomeKind.TURNOVER: self._apply_turnover,
            OutcomeKind.STEAL: self._apply_steal,
            OutcomeKind.FOUL: self._apply_foul,
            OutcomeKind.OUT_OF_BOUNDS: self._apply_out_of_bounds,
            OutcomeKind.POSSESSION: self._apply_possession,
        }
        for outcome in outcomes:
            appliers[outcome.kind](outcome)

    def _change_possession(self, side: Side, reason: str) -> None:
        """Award possession (possibly to the same side) and reset the shot clock."""
        state = self.state
        previous = state.possession
        state.possession = side
        state.shot_clock = SHOT_CLOCK_SECONDS
        self.ctx.emit(
            EventType.POSSESSION_CHANGE,
            description=f"{self.ctx.team(side).name} ball",
            side=side.value,
            previous=previous.value,
            reason=reason,
        )

    def _schedule_inbound(self, delay_ms: float) -> None:
        self.ctx.scheduler.cancel(INBOUND_EFFECT)
        self.ctx.schedule(delay_ms, INBOUND_EFFECT, self.inbound)

    def inbound(self) -> None:
        """Reset positions and hand the ball to the possessing side's first player."""
        ctx = self.ctx
        for team in ctx.teams.values():
            team.reset_positions()
        ctx.ball.reset(ctx.court.center)
        ctx.give_ball(ctx.team(self.state.possession).roster[0])

    def _apply_basket(self, outcome: Outcome) -> None:
        ctx = self.ctx
        side = outcome.side
        points = outcome.points
        team = ctx.team(side)

        self.state.score[side] += points
        team.stats.points += points

        shooter = ctx.get_player(outcome.player_id)
        if shooter is not None:
            shooter.stats.points += points
            shooter.stats.shots_made += 1
            team.stats.field_goals_made += 1
            if points == 3:
                shooter.stats.three_made += 1
                team.stats.threes_made += 1

        passer = ctx.get_player(outcome.target_id)
        assist_id = None
        if passer is not None and passer.side == side and passer is not shooter:
            passer.stats.assists += 1
            team.stats.assists += 1
            assist_id = passer.id

        scorer = shooter.name if shooter else team.name
        ctx.emit(
            EventType.BASKET_MADE,
            player_id=outcome.player_id,
            target_id=assist_id,
            description=f"{scorer} scores {points}!",
            side=side.value,
            points=points,
            dunk=bool(outcome.data.get("dunk")),
        )
        ctx.ball.last_passer_id = None
        self._change_possession(side.opponent, "basket")
        self._schedule_inbound(BASKET_INBOUND_MS)

    def _apply_turnover(self, outcome: Outcome) -> None:
        culprit = self.ctx.get_player(outcome.player_id)
        if culprit is not None:
            culprit.stats.turnovers += 1
            self.ctx.team(culprit.side).stats.turnovers += 1
        self.ctx.emit(
            EventType.TURNOVER,
            player_id=outcome.player_id,
            description=f"Turnover by {culprit.name if culprit else self.ctx.team(outcome.side.opponent).name}",
        )
        self._change_possession(outcome.side, "turnover")
        self._schedule_inbound(DEAD_BALL_INBOUND_MS)

    def _apply_steal(self, outcome: Outcome) -> None:
        ctx = self.ctx
        stealer = ctx.get_player(outcome.player_id)
        victim = ctx.get_player(outcome.target_id)
        if stealer is not None:
            stealer.stats.steals += 1
            ctx.team(stealer.side).stats.steals += 1
        if victim is not None:
            victim.stats.turnovers += 1
            ctx.team(victim.side).stats.turnovers += 1
        ctx.emit(
            EventType.STEAL,
            player_id=outcome.player_id,
            target_id=outcome.target_id,
            description=f"{stealer.name if stealer else 'Defense'} steals it!",
        )
        ctx.ball.last_passer_id = None
        self._change_possession(outcome.side, "steal")

    def _apply_foul(self, outcome: Outcome) -> None:
        ctx = self.ctx
        fouler = ctx.get_player(outcome.player_id)
        if fouler is not None:
            fouler.stats.fouls += 1
            ctx.team(fouler.side).add_foul(self.state.quarter)
        ctx.emit(
            EventType.FOUL,
            player_id=outcome.player_id,
            target_id=outcome.target_id,
            description=f"Foul on {fouler.name if fouler else 'defense'}",
        )
        self._change_possession(outcome.side, "foul")

    def _apply_out_of_bounds(self, outcome: Outcome) -> None:
        self.ctx.emit(
            EventType.OUT_OF_BOUNDS,
            description=f"Out of bounds, {self.ctx.team(outcome.side).name} ball",
            **outcome.data,
        )
        self._change_possession(outcome.side, "out_of_bounds")
        self._schedule_inbound(DEAD_BALL_INBOUND_MS)

    def _apply_possession(self, outcome: Outcome) -> None:
        """A catch: rebounds and changes of side reset the shot clock."""
        ctx = self.ctx
        catcher = ctx.get_player(outcome.player_id)
        rebound = bool(outcome.data.get("rebound"))
        changed_side = outcome.side != self.state.possession

        if rebound:
            if catcher is not None:
                catcher.stats.rebounds += 1
            ctx.team(outcome.side).stats.rebounds += 1
            ctx.emit(
                EventType.REBOUND,
                player_id=outcome.player_id,
                description=f"{catcher.name if catcher else 'Team'} grabs the rebound",
                offensive=not changed_side,
            )
        else:
            ctx.emit(
                EventType.CATCH,
                player_id=outcome.player_id,
                target_id=ctx.ball.last_passer_id,
                description=f"{catcher.name if catcher else 'Team'} catches it",
            )

        if rebound or changed_side:
            ctx.ball.last_passer_id = None
            self._change_possession(outcome.side, "rebound" if rebound else "interception")

    # =========================================================================
    # Commands
    # =========================================================================

    def set_movement_intent(self, dx: float, dy: float, sprint: bool = False) -> bool:
        if not self.is_running:
            return False
        return self.controls.set_movement_intent(dx, dy, sprint)

    def start_shot_charge(self) -> bool:
        if not self.is_running:
            return False
        return self.controls.start_shot_charge()

    def release_shot(self, power: Optional[float] = None, aim: Optional[Vec2] = None) -> bool:
        if not self.is_running:
            return False
        return self.controls.release_shot(power, aim)

    def perform_dribble(self, move: Union[DribbleMove, str]) -> bool:
        if not self.is_running:
            return False
        if not isinstance(move, DribbleMove):
            try:
                move = DribbleMove(move)
            except ValueError:
                logger.warning(f"Unknown dribble move '{move}'")
                return False
        return self.controls.perform_dribble(move)

    def pump_fake(self) -> bool:
        if not self.is_running:
            return False
        return self.controls.pump_fake()

    def switch_player(self) -> bool:
        if not self.is_running:
            return False
        return self.controls.switch_player()

    def call_tactic(self, tactic: Union[Tactic, str], side: Side = Side.AWAY) -> bool:
        """Have an AI side run a tactic now."""
        engine = self.engines.get(side)
        if engine is None or not self.is_running:
            return False
        return engine.run_tactic(tactic)

    @property
    def controlled_player(self) -> Optional[Player]:
        return self.ctx.controlled_player(Side.HOME)

    # =========================================================================
    # Export
    # =========================================================================

    def snapshot(self) -> MatchSnapshot:
        return build_snapshot(self.ctx)

    def clock_display(self) -> str:
        return format_clock(self.state.game_clock)
