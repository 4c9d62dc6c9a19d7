"""Decision engine: the opponent AI for one side.

Each tick the engine either defends (side without possession) or, no more
often than the difficulty's decision latency, makes one offensive decision
for its ball handler. Latency is measured on simulation time, so a paused
match never accumulates decisions.

Decision lifecycle:
    IDLE → ANALYZING → ACTING → SUCCESS | FAILURE → IDLE
"""

from __future__ import annotations

import logging
import random
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from ..context import SimulationContext
from ..core.court import Side
from ..core.entities import Player, Role
from ..core.events import EventType
from ..core.trace import TraceCategory
from .actions import (
    ActionRunner,
    ActionType,
    candidate_actions,
    choose_action,
    parse_action,
    viable_actions,
)
from .defense import DefenseController
from .difficulty import DifficultyProfile, get_difficulty
from .situation import SituationType, analyze, defensive_pressure
from .tactics import Tactic, TacticRunner

logger = logging.getLogger(__name__)


class DecisionPhase(str, Enum):
    IDLE = "idle"
    ANALYZING = "analyzing"
    ACTING = "acting"
    SUCCESS = "success"
    FAILURE = "failure"


@dataclass
class Decision:
    """Record of one offensive decision."""
    tick: int
    time: float
    side: Side
    handler_id: Optional[str]
    situation: Optional[SituationType]
    action: Optional[ActionType]
    phase: DecisionPhase

    def to_dict(self) -> dict:
        return {
            "tick": self.tick,
            "time": round(self.time, 3),
            "side": self.side.value,
            "handler_id": self.handler_id,
            "situation": self.situation.value if self.situation else None,
            "action": self.action.value if self.action else None,
            "phase": self.phase.value,
        }


# Off-ball spacing: role -> (depth in front of the attacked hoop, lateral offset)
SPACING_SPOTS: dict[Role, tuple[float, float]] = {
    Role.PG: (320.0, 0.0),
    Role.SG: (260.0, -180.0),
    Role.SF: (260.0, 180.0),
    Role.PF: (130.0, -110.0),
    Role.C: (90.0, 110.0),
}
SPACING_TOLERANCE = 60.0
HISTORY_LENGTH = 50


class DecisionEngine:
    """AI controller for one side.

    Args:
        ctx: Shared simulation context
        side: The side this engine plays (away by default)
        difficulty: A profile or preset key
        rng: Random source; defaults to the context's
    """

    def __init__(
        self,
        ctx: SimulationContext,
        side: Side = Side.AWAY,
        difficulty: Union[DifficultyProfile, str] = "pro",
        rng: Optional[random.Random] = None,
    ):
        self.ctx = ctx
        self.side = side
        self.rng = rng if rng is not None else ctx.rng
        self.phase = DecisionPhase.IDLE
        self.last_decision_time: Optional[float] = None
        self.history: deque[Decision] = deque(maxlen=HISTORY_LENGTH)
        self.set_difficulty(difficulty)

    def set_difficulty(self, difficulty: Union[DifficultyProfile, str]) -> None:
        if isinstance(difficulty, str):
            difficulty = get_difficulty(difficulty)
        self.difficulty = difficulty
        self.actions = ActionRunner(self.ctx, difficulty, self.rng)
        self.tactics = TacticRunner(self.ctx, self.side, self.actions, self.rng)
        self.defense = DefenseController(self.ctx, self.side, difficulty, self.rng)

    def reset(self) -> None:
        self.phase = DecisionPhase.IDLE
        self.last_decision_time = None
        self.history.clear()

    @property
    def last_decision(self) -> Optional[Decision]:
        return self.history[-1] if self.history else None

    # =========================================================================
    # Main update
    # =========================================================================

    def update(self) -> Optional[Decision]:
        """Per-tick entry point. Returns a Decision when one was made."""
        state = self.ctx.state
        if not state.active or state.paused or state.game_over:
            return None

        self.chase_loose_ball()

        if state.possession != self.side:
            self.defense.update()
            return None

        if self.ctx.ball.is_dead or not self.decision_due():
            return None
        self.last_decision_time = self.ctx.now
        return self.decide()

    def decision_due(self) -> bool:
        if self.last_decision_time is None:
            return True
        return self.ctx.now - self.last_decision_time >= self.difficulty.decision_latency - 1e-9

    def handler(self) -> Optional[Player]:
        holder = self.ctx.holder()
        if holder is not None and holder.side == self.side and not holder.is_controlled:
            return holder
        return None

    def decide(self) -> Decision:
        """Analyze, choose and execute one action for the handler."""
        ctx = self.ctx
        handler = self.handler()
        if handler is None:
            outlet = self.find_open_player()
            if outlet is not None:
                ctx.trace.trace(outlet.id, outlet.name, TraceCategory.PERCEPTION, "No handler; open outlet")
            return self._record(None, None, None, DecisionPhase.IDLE)

        self.phase = DecisionPhase.ANALYZING
        situation = analyze(ctx, self.side, handler)
        teammates = ctx.teammates(handler)
        viable = viable_actions(candidate_actions(situation.type), handler, teammates)
        ctx.trace.trace(
            handler.id, handler.name, TraceCategory.PERCEPTION,
            f"{situation.type.value}: clock={situation.shot_clock} diff={situation.score_diff} "
            f"pressure={situation.pressure:.2f} viable={[a.value for a in viable]}",
        )

        action = choose_action(situation.type, handler, teammates, self.difficulty, self.rng)
        ctx.trace.trace(handler.id, handler.name, TraceCategory.DECISION, f"Chose {action.value}")

        self.phase = DecisionPhase.ACTING
        ok = self.execute(action, handler)
        self.phase = DecisionPhase.SUCCESS if ok else DecisionPhase.FAILURE
        ctx.trace.trace(handler.id, handler.name, TraceCategory.ACTION, f"{action.value} -> {self.phase.value}")

        self.space_floor(handler)
        ctx.emit(
            EventType.DECISION_MADE,
            player_id=handler.id,
            description=f"{handler.name}: {action.value}",
            action=action.value,
            situation=situation.type.value,
            success=ok,
        )
        logger.debug(f"{self.side.value} {handler.id} {situation.type.value} -> {action.value} ({self.phase.value})")

        decision = self._record(handler, situation.type, action, self.phase)
        self.phase = DecisionPhase.IDLE
        return decision

    def execute(self, action: Union[ActionType, str], handler: Player) -> bool:
        """Run one action for the handler, by enum or wire name."""
        if isinstance(action, str) and not isinstance(action, ActionType):
            action = parse_action(action)
        if action == ActionType.FAST_BREAK:
            return self.tactics.run(Tactic.FAST_BREAK)
        if action == ActionType.PICK_AND_ROLL:
            return self.tactics.run(Tactic.PICK_AND_ROLL)
        return self.actions.run(action, handler)

    def run_tactic(self, tactic: Union[Tactic, str]) -> bool:
        """Call a team tactic by enum or wire name."""
        if isinstance(tactic, str) and not isinstance(tactic, Tactic):
            try:
                tactic = Tactic(tactic)
            except ValueError:
                logger.warning(f"Unknown tactic '{tactic}'")
                return False

        self.ctx.emit(
            EventType.TACTIC_CALLED,
            description=f"{self.ctx.team(self.side).name} calls {tactic.value}",
            tactic=tactic.value,
            side=self.side.value,
        )
        return self.tactics.run(tactic)

    def _record(
        self,
        handler: Optional[Player],
        situation: Optional[SituationType],
        action: Optional[ActionType],
        phase: DecisionPhase,
    ) -> Decision:
        decision = Decision(
            tick=self.ctx.clock.tick_count,
            time=self.ctx.now,
            side=self.side,
            handler_id=handler.id if handler else None,
            situation=situation,
            action=action,
            phase=phase,
        )
        self.history.append(decision)
        return decision

    # =========================================================================
    # Off-ball
    # =========================================================================

    def find_open_player(self) -> Optional[Player]:
        """Teammate under the least defensive pressure."""
        roster = self.ctx.team(self.side).roster
        if not roster:
            return None
        defenders = self.ctx.opponents(self.side)
        return min(roster, key=lambda p: defensive_pressure(p, defenders))

    def chase_loose_ball(self) -> Optional[Player]:
        """Send the nearest player after a loose ball."""
        ball = self.ctx.ball
        if not ball.is_loose:
            return None
        chasers = [p for p in self.ctx.team(self.side).roster if not p.is_controlled]
        if not chasers:
            return None
        chaser = min(chasers, key=lambda p: p.pos.distance_to(ball.pos))
        chaser.set_target(ball.pos, sprint=True)
        return chaser

    def space_floor(self, handler: Player) -> None:
        """Idle teammates drift to their spacing spots."""
        court = self.ctx.court
        for player in self.ctx.teammates(handler):
            if player.target is not None or player.is_controlled:
                continue
            depth, lateral = SPACING_SPOTS[player.role]
            spot = court.spot_in_front_of_hoop(self.side, depth, lateral)
            if player.pos.distance_to(spot) > SPACING_TOLERANCE:
                player.set_target(spot)
