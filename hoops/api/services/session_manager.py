"""Session manager for live matches served over the API."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Awaitable, Callable, Optional
from uuid import UUID, uuid4

from hoops.logging import GameLog
from hoops.simulation import MatchConfig, Orchestrator
from hoops.simulation.core.vec2 import Vec2
from hoops.simulation.export import EventRecorder, snapshot_to_dict

logger = logging.getLogger(__name__)


SessionCallback = Callable[["MatchSession"], Awaitable[None]]


@dataclass
class MatchSession:
    """A live match plus the asyncio tasks that drive it."""

    session_id: UUID
    config: MatchConfig
    orchestrator: Orchestrator
    game_log: GameLog
    recorder: EventRecorder
    created_at: datetime = field(default_factory=datetime.now)
    on_tick: Optional[SessionCallback] = None
    on_complete: Optional[SessionCallback] = None

    # Async control
    _tick_task: Optional[asyncio.Task] = field(default=None, repr=False)
    _clock_task: Optional[asyncio.Task] = field(default=None, repr=False)
    _stop_requested: bool = field(default=False, repr=False)

    @property
    def is_running(self) -> bool:
        return self._tick_task is not None and not self._tick_task.done()

    def state_payload(self) -> dict[str, Any]:
        return snapshot_to_dict(self.orchestrator.snapshot())

    def tick_payload(self) -> dict[str, Any]:
        return {
            "state": self.state_payload(),
            "events": self.recorder.drain(),
        }


def build_session(config: MatchConfig) -> MatchSession:
    """Create a match and wire its log and event buffer to the bus."""
    orchestrator = Orchestrator(config)
    game_log = GameLog(config.home.name, config.away.name)
    game_log.connect_to_event_bus(orchestrator.event_bus, orchestrator.state)
    recorder = EventRecorder()
    orchestrator.event_bus.subscribe_all(recorder.record)
    return MatchSession(
        session_id=uuid4(),
        config=config,
        orchestrator=orchestrator,
        game_log=game_log,
        recorder=recorder,
    )


# =============================================================================
# Commands
# =============================================================================

def apply_command(match: Orchestrator, command: str, params: dict[str, Any]) -> bool:
    """Route a named input command to the orchestrator.

    Returns False for unknown commands or commands that aren't valid now.
    """
    if command == "move":
        return match.set_movement_intent(
            float(params.get("dx", 0.0)),
            float(params.get("dy", 0.0)),
            bool(params.get("sprint", False)),
        )
    if command == "shoot_start":
        return match.start_shot_charge()
    if command == "shoot_release":
        aim = params.get("aim")
        return match.release_shot(
            power=params.get("power"),
            aim=Vec2(aim["x"], aim["y"]) if aim else None,
        )
    if command == "dribble":
        return match.perform_dribble(params.get("move", "normal"))
    if command == "pump_fake":
        return match.pump_fake()
    if command == "switch_player":
        return match.switch_player()
    if command == "tactic":
        return match.call_tactic(params.get("tactic", ""))
    logger.warning(f"Unknown command '{command}'")
    return False


# =============================================================================
# Manager
# =============================================================================

class MatchSessionManager:
    """
    Manages live match sessions.

    Each running session owns two tasks: a tick loop at the match's tick
    rate and a 1 Hz game clock. Both run on the event loop thread, so they
    never interleave inside a tick.
    """

    def __init__(self) -> None:
        self._sessions: dict[UUID, MatchSession] = {}
        self._lock = asyncio.Lock()

    @property
    def active_sessions(self) -> list[UUID]:
        return list(self._sessions.keys())

    async def create_session(self, config: MatchConfig) -> MatchSession:
        session = build_session(config)
        async with self._lock:
            self._sessions[session.session_id] = session
        logger.info(f"Created match session {session.session_id}")
        return session

    async def get_session(self, session_id: UUID) -> Optional[MatchSession]:
        async with self._lock:
            return self._sessions.get(session_id)

    async def list_sessions(self) -> list[MatchSession]:
        async with self._lock:
            return list(self._sessions.values())

    async def delete_session(self, session_id: UUID) -> bool:
        """Stop and forget a session. Returns True if it existed."""
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return False
            await self._stop_tasks(session)
            session.game_log.disconnect()
            del self._sessions[session_id]
        logger.info(f"Deleted match session {session_id}")
        return True

    async def cleanup_all(self) -> None:
        for session_id in self.active_sessions:
            await self.delete_session(session_id)

    # =========================================================================
    # Control
    # =========================================================================

    async def start(
        self,
        session_id: UUID,
        on_tick: Optional[SessionCallback] = None,
        on_complete: Optional[SessionCallback] = None,
    ) -> bool:
        """Start the match and its loops. False if missing, running or over."""
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None or session.is_running:
                return False

            match = session.orchestrator
            if match.state.game_over:
                return False
            if not match.state.active:
                match.start()
            else:
                match.resume()

            session.on_tick = on_tick
            session.on_complete = on_complete
            session._stop_requested = False
            session._tick_task = asyncio.create_task(self._run_tick_loop(session))
            session._clock_task = asyncio.create_task(self._run_clock_loop(session))
            return True

    async def stop(self, session_id: UUID) -> bool:
        """Cancel the loops but keep the match where it stands."""
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return False
            await self._stop_tasks(session)
            return True

    async def pause(self, session_id: UUID) -> bool:
        session = await self.get_session(session_id)
        return session is not None and session.orchestrator.pause()

    async def resume(self, session_id: UUID) -> bool:
        session = await self.get_session(session_id)
        return session is not None and session.orchestrator.resume()

    async def reset(self, session_id: UUID) -> bool:
        """Stop the loops and put the match back at tip-off."""
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return False
            await self._stop_tasks(session)
            session.orchestrator.reset()
            session.recorder.drain()
            return True

    async def step(self, session_id: UUID, ticks: int = 1) -> bool:
        """Advance a stopped match by hand."""
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None or session.is_running:
                return False
            match = session.orchestrator
            return match.simulate(ticks / match.ctx.clock.ticks_per_second) > 0

    async def simulate(self, session_id: UUID, seconds: float) -> Optional[MatchSession]:
        """Run a stopped match headless for a stretch of game time."""
        async with self._lock:
            session = self._sessions.get(session_id)
            if session is None or session.is_running:
                return None
            session.orchestrator.simulate(seconds)
            return session

    async def command(self, session_id: UUID, command: str, params: dict[str, Any]) -> bool:
        session = await self.get_session(session_id)
        if session is None:
            return False
        return apply_command(session.orchestrator, command, params)

    # =========================================================================
    # Loops
    # =========================================================================

    async def _stop_tasks(self, session: MatchSession) -> None:
        """Cancel a session's loops (must hold lock)."""
        session._stop_requested = True
        for task in (session._tick_task, session._clock_task):
            if task is None or task.done():
                continue
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        session._tick_task = None
        session._clock_task = None

    async def _run_tick_loop(self, session: MatchSession) -> None:
        match = session.orchestrator
        interval = 1.0 / match.config.tick_rate

        while not session._stop_requested and not match.state.game_over:
            if match.tick() and session.on_tick is not None:
                try:
                    await session.on_tick(session)
                except Exception as exc:
                    logger.warning(f"Tick callback failed for {session.session_id}: {exc}")
                    session._stop_requested = True
                    break
            await asyncio.sleep(interval)

        if match.state.game_over and session.on_complete is not None:
            try:
                await session.on_complete(session)
            except Exception as exc:
                logger.warning(f"Complete callback failed for {session.session_id}: {exc}")

    async def _run_clock_loop(self, session: MatchSession) -> None:
        match = session.orchestrator
        while not session._stop_requested and not match.state.game_over:
            await asyncio.sleep(1.0)
            match.clock_tick()


# Global session manager instance
_session_manager: Optional[MatchSessionManager] = None


def get_session_manager() -> MatchSessionManager:
    """Get the global session manager instance."""
    global _session_manager
    if _session_manager is None:
        _session_manager = MatchSessionManager()
    return _session_manager
