"""Basketball simulation core.

Organized the same way for every subsystem:
- core: vectors, court geometry, entities, clock, events, deferred effects
- physics: ball flight, player movement, collisions, score detection
- ai: situational analysis, action selection, tactics, defense
- orchestrator: match state, tick ordering, terminal events
"""

from .orchestrator import MatchConfig, Orchestrator, TeamDescriptor

__all__ = ["MatchConfig", "Orchestrator", "TeamDescriptor"]
