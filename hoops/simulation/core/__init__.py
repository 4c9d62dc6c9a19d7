"""Core primitives: vectors, court, entities, time, events."""

from .vec2 import Vec2
from .court import Court, Side
from .entities import Ball, DribbleMove, Player, PlayerAttributes, Role, ShotAttempt
from .team import DefenseScheme, OffenseScheme, Team, generate_team
from .clock import Clock
from .events import Event, EventBus, EventType
from .scheduler import EffectScheduler

__all__ = [
    "Vec2",
    "Court",
    "Side",
    "Ball",
    "DribbleMove",
    "Player",
    "PlayerAttributes",
    "Role",
    "ShotAttempt",
    "DefenseScheme",
    "OffenseScheme",
    "Team",
    "generate_team",
    "Clock",
    "Event",
    "EventBus",
    "EventType",
    "EffectScheduler",
]
