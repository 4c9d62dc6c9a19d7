"""Pydantic schemas for API request/response models."""

from hoops.api.schemas.match import (
    AimSchema,
    CommandRequest,
    CommandResponse,
    CreateMatchRequest,
    DifficultySchema,
    GameLogResponse,
    ScoringPlaySchema,
    SessionResponse,
    SimulateRequest,
    TeamDescriptorSchema,
)

__all__ = [
    "AimSchema",
    "CommandRequest",
    "CommandResponse",
    "CreateMatchRequest",
    "DifficultySchema",
    "GameLogResponse",
    "ScoringPlaySchema",
    "SessionResponse",
    "SimulateRequest",
    "TeamDescriptorSchema",
]
