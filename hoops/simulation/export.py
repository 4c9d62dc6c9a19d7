"""Export match state to plain data for renderers and the API."""

from __future__ import annotations

import json
from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Optional

from .context import SimulationContext
from .core.entities import Ball, Player
from .core.events import Event
from .core.geometry import format_clock
from .core.team import Team


@dataclass
class PlayerFrame:
    """One player's visible state."""
    id: str
    name: str
    side: str
    role: str
    number: int
    x: float
    y: float
    vx: float
    vy: float
    has_ball: bool
    is_controlled: bool
    is_shooting: bool
    stamina: float
    dribble: str
    target_x: Optional[float] = None
    target_y: Optional[float] = None


@dataclass
class BallFrame:
    """The ball's visible state."""
    x: float
    y: float
    z: float
    vx: float
    vy: float
    vz: float
    holder_id: Optional[str]
    in_air: bool
    spin: float
    trajectory: List[List[float]] = field(default_factory=list)


@dataclass
class TeamFrame:
    side: str
    name: str
    colors: List[str]
    defense: str
    stats: Dict[str, Any]


@dataclass
class EventFrame:
    """Event as sent over the wire."""
    tick: int
    time: float
    type: str
    player_id: Optional[str]
    target_id: Optional[str]
    description: str
    data: Dict[str, Any] = field(default_factory=dict)


@dataclass
class MatchSnapshot:
    """Complete match state at one tick."""
    tick: int
    time: float
    quarter: int
    game_clock: int
    game_clock_display: str
    shot_clock: int
    score: Dict[str, int]
    possession: str
    active: bool
    paused: bool
    game_over: bool
    teams: List[TeamFrame]
    players: List[PlayerFrame]
    ball: BallFrame

    def to_json(self) -> str:
        return json.dumps(snapshot_to_dict(self), indent=2)


def player_frame(player: Player) -> PlayerFrame:
    return PlayerFrame(
        id=player.id,
        name=player.name,
        side=player.side.value,
        role=player.role.value,
        number=player.number,
        x=round(player.pos.x, 2),
        y=round(player.pos.y, 2),
        vx=round(player.velocity.x, 3),
        vy=round(player.velocity.y, 3),
        has_ball=player.has_ball,
        is_controlled=player.is_controlled,
        is_shooting=player.is_shooting,
        stamina=round(player.current_stamina, 1),
        dribble=player.dribble.value,
        target_x=round(player.target.x, 2) if player.target else None,
        target_y=round(player.target.y, 2) if player.target else None,
    )


def ball_frame(ball: Ball) -> BallFrame:
    return BallFrame(
        x=round(ball.pos.x, 2),
        y=round(ball.pos.y, 2),
        z=round(ball.z, 2),
        vx=round(ball.velocity.x, 3),
        vy=round(ball.velocity.y, 3),
        vz=round(ball.vz, 3),
        holder_id=ball.holder_id,
        in_air=ball.in_air,
        spin=round(ball.spin, 2),
        trajectory=[[round(x, 1), round(y, 1), round(z, 1)] for x, y, z in ball.trajectory],
    )


def team_frame(team: Team) -> TeamFrame:
    stats = asdict(team.stats)
    stats["field_goal_pct"] = round(team.field_goal_pct, 1)
    stats["three_point_pct"] = round(team.three_point_pct, 1)
    return TeamFrame(
        side=team.side.value,
        name=team.name,
        colors=list(team.colors),
        defense=team.strategy.defense.value,
        stats=stats,
    )


def event_frame(event: Event) -> EventFrame:
    return EventFrame(
        tick=event.tick,
        time=round(event.time, 3),
        type=event.type.value,
        player_id=event.player_id,
        target_id=event.target_id,
        description=event.description,
        data=dict(event.data),
    )


def build_snapshot(ctx: SimulationContext) -> MatchSnapshot:
    state = ctx.state
    return MatchSnapshot(
        tick=ctx.clock.tick_count,
        time=round(ctx.now, 3),
        quarter=state.quarter,
        game_clock=state.game_clock,
        game_clock_display=format_clock(state.game_clock),
        shot_clock=state.shot_clock,
        score={side.value: points for side, points in state.score.items()},
        possession=state.possession.value,
        active=state.active,
        paused=state.paused,
        game_over=state.game_over,
        teams=[team_frame(team) for team in ctx.teams.values()],
        players=[player_frame(p) for p in ctx.players()],
        ball=ball_frame(ctx.ball),
    )


def snapshot_to_dict(snapshot: MatchSnapshot) -> Dict[str, Any]:
    """JSON-ready form of a snapshot."""
    return asdict(snapshot)


class EventRecorder:
    """Buffers bus events between snapshots so a client sees each one once."""

    def __init__(self) -> None:
        self.pending: List[EventFrame] = []

    def record(self, event: Event) -> None:
        self.pending.append(event_frame(event))

    def drain(self) -> List[Dict[str, Any]]:
        events, self.pending = self.pending, []
        return [asdict(e) for e in events]
