"""In-memory game log for accumulating play-by-play events."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from hoops.simulation.context import MatchState
from hoops.simulation.core.court import Side
from hoops.simulation.core.events import Event, EventBus, EventType
from hoops.simulation.core.geometry import format_clock


# Events that become log rows
LOGGED_EVENTS = frozenset({
    EventType.MATCH_START,
    EventType.SHOT_ATTEMPT,
    EventType.SHOT_MISSED,
    EventType.BASKET_MADE,
    EventType.DUNK,
    EventType.REBOUND,
    EventType.STEAL,
    EventType.BLOCK,
    EventType.TURNOVER,
    EventType.FOUL,
    EventType.OUT_OF_BOUNDS,
    EventType.SHOT_CLOCK_VIOLATION,
    EventType.QUARTER_END,
    EventType.GAME_END,
})


@dataclass
class LogEntry:
    """Single entry in the game log."""

    timestamp: datetime
    quarter: int
    time_remaining: str
    event_type: str
    description: str
    home_score: int
    away_score: int

    player_id: Optional[str] = None
    is_scoring_play: bool = False
    is_turnover: bool = False


@dataclass
class ScoringPlay:
    """Record of a scoring play."""

    quarter: int
    time_remaining: str
    side: str
    team_name: str
    points: int
    description: str
    scorer_id: Optional[str]
    assist_id: Optional[str]
    home_score_after: int
    away_score_after: int


@dataclass
class BoxScoreLine:
    """Counters for one player, built purely from events."""

    player_id: str
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

    @property
    def field_goal_pct(self) -> float:
        if self.field_goals_attempted == 0:
            return 0.0
        return self.field_goals_made / self.field_goals_attempted * 100


class GameLog:
    """
    In-memory accumulator for play-by-play events.

    Subscribes to an EventBus and reads the match state at the moment each
    event is emitted, so every row carries the quarter, clock and score it
    happened at.
    """

    def __init__(self, home_name: str = "HOME", away_name: str = "AWAY") -> None:
        self.home_name = home_name
        self.away_name = away_name
        self.entries: list[LogEntry] = []
        self.scoring_plays: list[ScoringPlay] = []
        self.box_score: dict[str, BoxScoreLine] = {}
        self._state: Optional[MatchState] = None
        self._bus: Optional[EventBus] = None

    def connect_to_event_bus(self, event_bus: EventBus, state: MatchState) -> None:
        """Subscribe to all events from a match's bus."""
        self._bus = event_bus
        self._state = state
        event_bus.subscribe_all(self.handle_event)

    def disconnect(self) -> None:
        if self._bus is not None:
            self._bus.unsubscribe_all(self.handle_event)
            self._bus = None

    def _line(self, player_id: Optional[str]) -> Optional[BoxScoreLine]:
        if player_id is None:
            return None
        if player_id not in self.box_score:
            self.box_score[player_id] = BoxScoreLine(player_id=player_id)
        return self.box_score[player_id]

    def _scoreboard(self) -> tuple[int, str, int, int]:
        state = self._state
        if state is None:
            return 0, "0:00", 0, 0
        return (
            state.quarter,
            format_clock(state.game_clock),
            state.score[Side.HOME],
            state.score[Side.AWAY],
        )

    # =========================================================================
    # Event handling
    # =========================================================================

    def handle_event(self, event: Event) -> None:
        self._count(event)
        if event.type not in LOGGED_EVENTS:
            return

        quarter, clock, home, away = self._scoreboard()
        is_score = event.type == EventType.BASKET_MADE
        self.entries.append(LogEntry(
            timestamp=datetime.now(),
            quarter=quarter,
            time_remaining=clock,
            event_type=event.type.value.upper(),
            description=event.description,
            home_score=home,
            away_score=away,
            player_id=event.player_id,
            is_scoring_play=is_score,
            is_turnover=event.type in (EventType.TURNOVER, EventType.STEAL, EventType.SHOT_CLOCK_VIOLATION),
        ))

        if is_score:
            side = event.data.get("side", Side.HOME.value)
            self.scoring_plays.append(ScoringPlay(
                quarter=quarter,
                time_remaining=clock,
                side=side,
                team_name=self.home_name if side == Side.HOME.value else self.away_name,
                points=event.data.get("points", 2),
                description=event.description,
                scorer_id=event.player_id,
                assist_id=event.target_id,
                home_score_after=home,
                away_score_after=away,
            ))

    def _count(self, event: Event) -> None:
        """Box-score counters."""
        line = self._line(event.player_id)
        if line is None:
            return

        if event.type == EventType.SHOT_ATTEMPT:
            line.field_goals_attempted += 1
            if event.data.get("points") == 3:
                line.threes_attempted += 1
        elif event.type == EventType.BASKET_MADE:
            points = event.data.get("points", 2)
            line.points += points
            line.field_goals_made += 1
            if points == 3:
                line.threes_made += 1
            assist = self._line(event.target_id)
            if assist is not None:
                assist.assists += 1
        elif event.type == EventType.REBOUND:
            line.rebounds += 1
        elif event.type == EventType.STEAL:
            line.steals += 1
            victim = self._line(event.target_id)
            if victim is not None:
                victim.turnovers += 1
        elif event.type == EventType.BLOCK:
            line.blocks += 1
        elif event.type == EventType.TURNOVER:
            line.turnovers += 1
        elif event.type == EventType.FOUL:
            line.fouls += 1

    # =========================================================================
    # Queries
    # =========================================================================

    def get_entries_by_quarter(self) -> dict[int, list[LogEntry]]:
        """Group entries by quarter."""
        by_quarter: dict[int, list[LogEntry]] = {}
        for entry in self.entries:
            by_quarter.setdefault(entry.quarter, []).append(entry)
        return by_quarter

    def get_scoring_summary(self) -> list[ScoringPlay]:
        """Get all scoring plays."""
        return self.scoring_plays.copy()

    def points_for(self, side: Side) -> int:
        return sum(p.points for p in self.scoring_plays if p.side == side.value)

    @property
    def turnover_count(self) -> int:
        return len([e for e in self.entries if e.is_turnover])

    def format_play_by_play(self, last_n: Optional[int] = None) -> str:
        entries = self.entries[-last_n:] if last_n else self.entries
        return "\n".join(
            f"Q{e.quarter} {e.time_remaining}  {e.home_score}-{e.away_score}  {e.description}"
            for e in entries
        )
