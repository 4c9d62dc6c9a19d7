"""Trace system for AI decision debugging.

Captures what the decision engine saw, chose and did, organized by tick, so
a debugging UI can show a timeline of AI decisions. Each simulation context
owns its own TraceSystem; there is no module-level instance.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional
from enum import Enum


class TraceCategory(Enum):
    """Categories of trace messages."""
    PERCEPTION = "perception"  # Situation read, pressure, candidates
    DECISION = "decision"      # Action or tactic chosen
    ACTION = "action"          # What was actually executed


@dataclass
class TraceEntry:
    """A single trace entry from a player."""
    tick: int
    time: float
    player_id: str
    player_name: str
    category: TraceCategory
    message: str


class TraceSystem:
    """Trace collector for AI decisions.

    Usage:
        trace = context.trace
        trace.enable(True)

        # At start of each tick in the orchestrator:
        trace.set_tick(tick_num, sim_time)

        # In the decision engine:
        trace.trace(player.id, player.name, TraceCategory.DECISION, "Driving to the rim")

        # To get entries for the websocket:
        entries = trace.get_new_entries()
    """

    def __init__(self, max_entries: int = 5000):
        self._enabled = False
        self._entries: List[TraceEntry] = []
        self._current_tick = 0
        self._current_time = 0.0
        self._last_retrieved_tick = -1
        self._max_entries = max_entries

    def enable(self, enabled: bool = True) -> None:
        """Enable or disable trace collection."""
        self._enabled = enabled
        if enabled:
            self._entries.clear()
            self._last_retrieved_tick = -1

    def is_enabled(self) -> bool:
        """Check if tracing is enabled."""
        return self._enabled

    def set_tick(self, tick: int, time: float) -> None:
        """Set the current tick/time for subsequent trace calls."""
        self._current_tick = tick
        self._current_time = time

    def trace(self, player_id: str, player_name: str, category: TraceCategory, message: str) -> None:
        """Add a trace entry for a player.

        Args:
            player_id: Unique player identifier
            player_name: Human-readable player name
            category: Type of trace (perception, decision, action)
            message: Concise description of what happened
        """
        if not self._enabled:
            return
        self._entries.append(TraceEntry(
            tick=self._current_tick,
            time=self._current_time,
            player_id=player_id,
            player_name=player_name,
            category=category,
            message=message
        ))
        # Keep only the newest max_entries
        if len(self._entries) > self._max_entries:
            del self._entries[: len(self._entries) - self._max_entries]

    def get_entries(self, since_tick: Optional[int] = None) -> List[TraceEntry]:
        """Get trace entries, optionally filtered by tick."""
        if since_tick is None:
            return list(self._entries)
        return [e for e in self._entries if e.tick >= since_tick]

    def get_entries_for_player(self, player_id: str) -> List[TraceEntry]:
        """Get trace entries for a specific player."""
        return [e for e in self._entries if e.player_id == player_id]

    def get_new_entries(self) -> List[TraceEntry]:
        """Get entries since last retrieval and update marker.

        Useful for incremental websocket sends.
        """
        new_entries = [e for e in self._entries if e.tick > self._last_retrieved_tick]
        if self._entries:
            self._last_retrieved_tick = self._current_tick
        return new_entries

    def clear(self) -> None:
        """Clear all trace entries."""
        self._entries.clear()
        self._last_retrieved_tick = -1

    def to_dict_list(self, entries: Optional[List[TraceEntry]] = None) -> List[Dict]:
        """Convert entries to list of dicts for JSON serialization."""
        if entries is None:
            entries = self._entries
        return [
            {
                "tick": e.tick,
                "time": e.time,
                "player_id": e.player_id,
                "player_name": e.player_name,
                "category": e.category.value,
                "message": e.message
            }
            for e in entries
        ]
