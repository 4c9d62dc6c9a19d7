"""Simulation clock and time management.

Provides consistent simulation time across all systems. This is the tick
clock, not the game clock shown on the scoreboard: it keeps running through
dead balls and stops only while the match is paused.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional


TICKS_PER_SECOND = 60


@dataclass
class Clock:
    """Manages simulation time.

    The clock advances in discrete ticks. Each tick represents a fixed
    amount of simulated time (default 1/60 s, one display frame).

    Attributes:
        tick_rate: Seconds per tick
        current_time: Elapsed time in seconds
        tick_count: Number of ticks elapsed
    """
    tick_rate: float = 1.0 / TICKS_PER_SECOND
    current_time: float = 0.0
    tick_count: int = 0

    # Event tracking
    _events: dict[str, float] = field(default_factory=dict)

    def tick(self) -> float:
        """Advance time by one tick.

        Returns:
            Delta time (seconds) for this tick
        """
        self.tick_count += 1
        self.current_time = self.tick_count * self.tick_rate
        return self.tick_rate

    def reset(self) -> None:
        """Reset clock to initial state."""
        self.current_time = 0.0
        self.tick_count = 0
        self._events.clear()

    # =========================================================================
    # Event Timing
    # =========================================================================

    def mark_event(self, name: str) -> None:
        """Mark the current time for a named event."""
        self._events[name] = self.current_time

    def time_since(self, event_name: str) -> Optional[float]:
        """Seconds since a marked event, or None if event not marked."""
        if event_name not in self._events:
            return None
        return self.current_time - self._events[event_name]

    def elapsed_at_least(self, event_name: str, seconds: float) -> bool:
        """True if the event was never marked or happened `seconds` ago or more."""
        elapsed = self.time_since(event_name)
        return elapsed is None or elapsed >= seconds - 1e-9

    # =========================================================================
    # Utility
    # =========================================================================

    @property
    def ticks_per_second(self) -> int:
        return round(1.0 / self.tick_rate)

    def seconds_to_ticks(self, seconds: float) -> int:
        """Convert seconds to ticks (rounded)."""
        return round(seconds / self.tick_rate)

    def format_time(self) -> str:
        """Format current time as readable string."""
        return f"{self.current_time:.2f}s (tick {self.tick_count})"

    def __repr__(self) -> str:
        return f"Clock(time={self.current_time:.3f}s, tick={self.tick_count})"
