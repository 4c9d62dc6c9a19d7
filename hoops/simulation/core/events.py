"""Event system for simulation state changes.

Events are emitted by systems and can be subscribed to by other systems,
the game log, or an external UI collaborator. The bus history doubles as the
narrative event stream (basket made, steal, foul, quarter end...).
"""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Optional


class EventType(str, Enum):
    """Types of events that can occur during a match."""

    # =========================================================================
    # Match Lifecycle
    # =========================================================================
    MATCH_START = "match_start"
    PAUSED = "paused"
    RESUMED = "resumed"
    MATCH_STOPPED = "match_stopped"
    MATCH_RESET = "match_reset"
    QUARTER_END = "quarter_end"
    GAME_END = "game_end"

    # =========================================================================
    # Scoring
    # =========================================================================
    SHOT_ATTEMPT = "shot_attempt"
    SHOT_MISSED = "shot_missed"
    BASKET_MADE = "basket_made"
    DUNK = "dunk"

    # =========================================================================
    # Ball Movement / Possession
    # =========================================================================
    PASS = "pass"
    CATCH = "catch"
    REBOUND = "rebound"
    POSSESSION_CHANGE = "possession_change"
    STEAL = "steal"
    BLOCK = "block"
    TURNOVER = "turnover"
    OUT_OF_BOUNDS = "out_of_bounds"
    SHOT_CLOCK_VIOLATION = "shot_clock_violation"
    FOUL = "foul"

    # =========================================================================
    # Player Moves
    # =========================================================================
    DRIBBLE_MOVE = "dribble_move"
    PUMP_FAKE = "pump_fake"
    PLAYER_SWITCH = "player_switch"

    # =========================================================================
    # AI / Decision
    # =========================================================================
    DECISION_MADE = "decision_made"
    TACTIC_CALLED = "tactic_called"

    # =========================================================================
    # System
    # =========================================================================
    ERROR = "error"


# Events a scoreboard/play-by-play collaborator is expected to surface.
NARRATIVE_EVENTS = frozenset({
    EventType.BASKET_MADE,
    EventType.DUNK,
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
class Event:
    """An event that occurred during the match.

    Attributes:
        type: The type of event
        tick: When the event occurred
        time: Simulation time in seconds when event occurred
        player_id: Primary player involved (if any)
        target_id: Secondary player involved (if any)
        data: Additional event-specific data
        description: Human-readable description
    """
    type: EventType
    tick: int
    time: float
    player_id: Optional[str] = None
    target_id: Optional[str] = None
    data: dict[str, Any] = field(default_factory=dict)
    description: str = ""

    @property
    def is_narrative(self) -> bool:
        return self.type in NARRATIVE_EVENTS

    def __str__(self) -> str:
        """Readable event string for logging."""
        parts = [f"[{self.time:.2f}s]", f"{self.type.value}"]

        if self.player_id:
            parts.append(f"by {self.player_id}")

        if self.target_id:
            parts.append(f"-> {self.target_id}")

        if self.description:
            parts.append(f"- {self.description}")

        return " ".join(parts)

    def format_detailed(self) -> str:
        """Detailed multi-line format for analysis."""
        lines = [
            f"Event: {self.type.value}",
            f"  Time: {self.time:.3f}s (tick {self.tick})",
        ]

        if self.player_id:
            lines.append(f"  Player: {self.player_id}")

        if self.target_id:
            lines.append(f"  Target: {self.target_id}")

        if self.description:
            lines.append(f"  Description: {self.description}")

        if self.data:
            lines.append("  Data:")
            for key, value in self.data.items():
                lines.append(f"    {key}: {value}")

        return "\n".join(lines)


# Type alias for event handlers
EventHandler = Callable[[Event], None]


class EventBus:
    """Pub/sub event bus for match events.

    Usage:
        bus = EventBus()

        bus.subscribe(EventType.BASKET_MADE, on_score)
        bus.subscribe_all(my_logger)

        bus.emit(Event(type=EventType.STEAL, tick=10, time=0.16))
    """

    def __init__(self) -> None:
        self._handlers: dict[EventType, list[EventHandler]] = defaultdict(list)
        self._global_handlers: list[EventHandler] = []
        self._history: list[Event] = []
        self._recording: bool = True

    def subscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """Subscribe to a specific event type."""
        self._handlers[event_type].append(handler)

    def subscribe_all(self, handler: EventHandler) -> None:
        """Subscribe to all events."""
        self._global_handlers.append(handler)

    def unsubscribe(self, event_type: EventType, handler: EventHandler) -> None:
        """Unsubscribe from a specific event type."""
        if handler in self._handlers[event_type]:
            self._handlers[event_type].remove(handler)

    def unsubscribe_all(self, handler: EventHandler) -> None:
        """Remove a global handler."""
        if handler in self._global_handlers:
            self._global_handlers.remove(handler)

    def emit(self, event: Event) -> None:
        """Emit an event to all subscribers."""
        if self._recording:
            self._history.append(event)

        for handler in self._handlers[event.type]:
            handler(event)

        for handler in self._global_handlers:
            handler(event)

    def emit_simple(
        self,
        event_type: EventType,
        tick: int,
        time: float,
        player_id: Optional[str] = None,
        description: str = "",
        target_id: Optional[str] = None,
        **data: Any,
    ) -> Event:
        """Convenience method to emit an event with less boilerplate."""
        event = Event(
            type=event_type,
            tick=tick,
            time=time,
            player_id=player_id,
            target_id=target_id,
            description=description,
            data=data,
        )
        self.emit(event)
        return event

    @property
    def history(self) -> list[Event]:
        """Get all recorded events."""
        return self._history

    def clear_history(self) -> None:
        """Clear event history."""
        self._history.clear()

    def set_recording(self, enabled: bool) -> None:
        """Enable or disable event recording."""
        self._recording = enabled

    def get_events_by_type(self, event_type: EventType) -> list[Event]:
        """Get all events of a specific type from history."""
        return [e for e in self._history if e.type == event_type]

    def get_events_for_player(self, player_id: str) -> list[Event]:
        """Get all events involving a specific player."""
        return [
            e for e in self._history
            if e.player_id == player_id or e.target_id == player_id
        ]

    def format_history(self, last_n: Optional[int] = None) -> str:
        """Format event history as readable text."""
        events = self._history[-last_n:] if last_n else self._history
        return "\n".join(str(e) for e in events)

    def __len__(self) -> int:
        return len(self._history)

    def __bool__(self) -> bool:
        """EventBus is always truthy (even with empty history)."""
        return True
