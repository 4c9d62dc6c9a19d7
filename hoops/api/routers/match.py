"""REST API router for match sessions."""

from dataclasses import asdict
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, HTTPException, status

from hoops.api.schemas.match import (
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
from hoops.api.services.session_manager import MatchSession, get_session_manager
from hoops.simulation import MatchConfig, TeamDescriptor
from hoops.simulation.ai.difficulty import DIFFICULTIES

router = APIRouter(prefix="/match", tags=["match"])


def _parse_session_id(session_id: str) -> UUID:
    try:
        return UUID(session_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid session ID format",
        )


def _team_to_schema(team: TeamDescriptor) -> TeamDescriptorSchema:
    return TeamDescriptorSchema(
        name=team.name,
        color1=team.color1,
        color2=team.color2,
        rating=team.rating,
    )


def _config_from_request(request: Optional[CreateMatchRequest]) -> MatchConfig:
    """Build a MatchConfig, keeping defaults for anything not sent."""
    config = MatchConfig()
    if request is None:
        return config

    if request.home:
        config.home = TeamDescriptor(**request.home.model_dump())
    if request.away:
        config.away = TeamDescriptor(**request.away.model_dump())
    config.difficulty = request.difficulty
    config.quarter_length = request.quarter_minutes * 60
    config.seed = request.seed
    config.autopilot = request.autopilot
    config.tick_rate = request.tick_rate
    return config


def _session_to_response(session: MatchSession) -> SessionResponse:
    config = session.config
    return SessionResponse(
        session_id=str(session.session_id),
        created_at=session.created_at.isoformat(),
        home=_team_to_schema(config.home),
        away=_team_to_schema(config.away),
        difficulty=config.difficulty,
        quarter_minutes=config.quarter_length // 60,
        autopilot=config.autopilot,
        tick_rate=config.tick_rate,
        is_running=session.is_running,
        state=session.state_payload(),
    )


async def _require_session(session_id: str) -> MatchSession:
    uuid = _parse_session_id(session_id)
    session = await get_session_manager().get_session(uuid)
    if session is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found",
        )
    return session


@router.post("/sessions", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session(request: Optional[CreateMatchRequest] = None) -> SessionResponse:
    """Create a new match session at tip-off."""
    manager = get_session_manager()
    session = await manager.create_session(_config_from_request(request))
    return _session_to_response(session)


@router.get("/sessions", response_model=list[str])
async def list_sessions() -> list[str]:
    """List all active session IDs."""
    manager = get_session_manager()
    return [str(s.session_id) for s in await manager.list_sessions()]


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session(session_id: str) -> SessionResponse:
    """Get a match session by ID."""
    session = await _require_session(session_id)
    return _session_to_response(session)


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_session(session_id: str) -> None:
    """Stop and delete a match session."""
    uuid = _parse_session_id(session_id)
    deleted = await get_session_manager().delete_session(uuid)
    if not deleted:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Session not found",
        )


@router.post("/sessions/{session_id}/reset", response_model=SessionResponse)
async def reset_session(session_id: str) -> SessionResponse:
    """Put a match back at tip-off."""
    session = await _require_session(session_id)
    await get_session_manager().reset(session.session_id)
    return _session_to_response(session)


@router.post("/sessions/{session_id}/simulate", response_model=SessionResponse)
async def simulate_session(session_id: str, request: SimulateRequest) -> SessionResponse:
    """Run a stopped match headless for some game time."""
    session = await _require_session(session_id)
    result = await get_session_manager().simulate(session.session_id, request.seconds)
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Session is running live",
        )
    return _session_to_response(result)


@router.post("/sessions/{session_id}/command", response_model=CommandResponse)
async def send_command(session_id: str, request: CommandRequest) -> CommandResponse:
    """Send one input command to the controlled side."""
    session = await _require_session(session_id)
    accepted = await get_session_manager().command(
        session.session_id,
        request.command,
        request.model_dump(exclude={"command"}),
    )
    return CommandResponse(command=request.command, accepted=accepted)


@router.get("/sessions/{session_id}/log", response_model=GameLogResponse)
async def get_game_log(session_id: str) -> GameLogResponse:
    """Play-by-play, scoring plays and box score for a session."""
    session = await _require_session(session_id)
    log = session.game_log
    entries = []
    for entry in log.entries:
        row = asdict(entry)
        row["timestamp"] = entry.timestamp.isoformat()
        entries.append(row)
    return GameLogResponse(
        session_id=str(session.session_id),
        entries=entries,
        scoring_plays=[ScoringPlaySchema(**asdict(p)) for p in log.get_scoring_summary()],
        box_score={pid: asdict(line) for pid, line in log.box_score.items()},
    )


@router.get("/difficulties", response_model=list[DifficultySchema])
async def list_difficulties() -> list[DifficultySchema]:
    """List the AI difficulty presets."""
    return [DifficultySchema(**asdict(profile)) for profile in DIFFICULTIES.values()]
