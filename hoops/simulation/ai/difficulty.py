"""Difficulty presets for the opponent AI."""

from __future__ import annotations

import logging
from dataclasses import dataclass

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DifficultyProfile:
    """Tuning knobs for one difficulty level.

    Attributes:
        decision_latency_ms: Minimum sim time between offensive decisions
        accuracy: Multiplier on shot make probability
        defense_reaction: Scales defensive closeouts and block attempts
        mistake_rate: Scales the chance a decision is a turnover
        aggression: Shot bias on offense, steal attempts on defense
    """
    key: str
    decision_latency_ms: int
    accuracy: float
    defense_reaction: float
    mistake_rate: float
    aggression: float

    @property
    def decision_latency(self) -> float:
        """Latency in seconds."""
        return self.decision_latency_ms / 1000.0


DEFAULT_DIFFICULTY = "pro"

DIFFICULTIES: dict[str, DifficultyProfile] = {
    "rookie": DifficultyProfile("rookie", 1000, 0.40, 0.3, 0.30, 0.3),
    "pro": DifficultyProfile("pro", 700, 0.55, 0.5, 0.20, 0.5),
    "allstar": DifficultyProfile("allstar", 500, 0.65, 0.7, 0.10, 0.7),
    "legendary": DifficultyProfile("legendary", 300, 0.75, 0.9, 0.05, 0.9),
}


def get_difficulty(key: str) -> DifficultyProfile:
    """Look up a preset, falling back to pro for unknown keys."""
    profile = DIFFICULTIES.get(key.lower() if key else "")
    if profile is None:
        logger.warning(f"Unknown difficulty '{key}', using {DEFAULT_DIFFICULTY}")
        return DIFFICULTIES[DEFAULT_DIFFICULTY]
    return profile
