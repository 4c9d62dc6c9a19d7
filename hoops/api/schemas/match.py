"""Pydantic schemas for the match API."""

from typing import Any, Literal, Optional

from pydantic import BaseModel, Field


DifficultyKey = Literal["rookie", "pro", "allstar", "legendary"]

CommandName = Literal[
    "move",
    "shoot_start",
    "shoot_release",
    "dribble",
    "pump_fake",
    "switch_player",
    "tactic",
]


class TeamDescriptorSchema(BaseModel):
    """Name, colors and overall rating for one side."""

    name: str = Field(default="Team", min_length=1, max_length=40)
    color1: str = Field(default="#ffffff", pattern=r"^#[0-9a-fA-F]{6}$")
    color2: str = Field(default="#000000", pattern=r"^#[0-9a-fA-F]{6}$")
    rating: int = Field(default=75, ge=0, le=99)


class CreateMatchRequest(BaseModel):
    """Request to create a new match session."""

    home: Optional[TeamDescriptorSchema] = None
    away: Optional[TeamDescriptorSchema] = None
    difficulty: DifficultyKey = "pro"
    quarter_minutes: int = Field(default=12, ge=1, le=12)
    seed: Optional[int] = None
    autopilot: bool = False
    tick_rate: int = Field(default=60, ge=10, le=120)


class SessionResponse(BaseModel):
    """Response containing session information and the current snapshot."""

    session_id: str
    created_at: str
    home: TeamDescriptorSchema
    away: TeamDescriptorSchema
    difficulty: str
    quarter_minutes: int
    autopilot: bool
    tick_rate: int
    is_running: bool
    state: dict[str, Any]


class SimulateRequest(BaseModel):
    """Run a stopped match headless for a stretch of game time."""

    seconds: float = Field(default=60.0, gt=0, le=3600)


class AimSchema(BaseModel):
    """A court point to aim a shot at."""

    x: float
    y: float


class CommandRequest(BaseModel):
    """One input command for the controlled side.

    Only the fields the command uses are read: dx/dy/sprint for move,
    power/aim for shoot_release, move for dribble, tactic for tactic.
    """

    command: CommandName
    dx: float = Field(default=0.0, ge=-1.0, le=1.0)
    dy: float = Field(default=0.0, ge=-1.0, le=1.0)
    sprint: bool = False
    power: Optional[float] = Field(default=None, ge=0, le=1)
    aim: Optional[AimSchema] = None
    move: str = "normal"
    tactic: str = ""


class CommandResponse(BaseModel):
    """Whether a command was accepted."""

    command: str
    accepted: bool


class DifficultySchema(BaseModel):
    """An AI difficulty preset."""

    key: str
    decision_latency_ms: int
    accuracy: float
    defense_reaction: float
    mistake_rate: float
    aggression: float


class ScoringPlaySchema(BaseModel):
    """A made basket from the game log."""

    quarter: int
    time_remaining: str
    side: str
    team_name: str
    points: int
    description: str
    scorer_id: Optional[str] = None
    assist_id: Optional[str] = None
    home_score_after: int
    away_score_after: int


class GameLogResponse(BaseModel):
    """Play-by-play and scoring summary for a session."""

    session_id: str
    entries: list[dict[str, Any]]
    scoring_plays: list[ScoringPlaySchema]
    box_score: dict[str, dict[str, Any]]
