"""Physics: ball flight, player movement, collisions, boundaries, scoring."""

from .ball_flight import integrate, solve_launch
from .collision import BallContact, PlayerContact, resolve_player_collision
from .engine import PhysicsEngine
from .launch import release_pass, release_shot
from .movement import MovementProfile, MovementResult, MovementSolver
from .spatial import SpatialGrid, SpatialQuery

__all__ = [
    "integrate",
    "solve_launch",
    "BallContact",
    "PlayerContact",
    "resolve_player_collision",
    "PhysicsEngine",
    "release_pass",
    "release_shot",
    "MovementProfile",
    "MovementResult",
    "MovementSolver",
    "SpatialGrid",
    "SpatialQuery",
]
