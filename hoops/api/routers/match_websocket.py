"""WebSocket router for live match updates and input."""

import json
from uuid import UUID

from fastapi import APIRouter, WebSocket, WebSocketDisconnect
from pydantic import ValidationError

from hoops.api.schemas.match import CommandRequest
from hoops.api.services.session_manager import MatchSession, get_session_manager

router = APIRouter(tags=["match-websocket"])


def _error(message: str, code: str) -> dict:
    return {"type": "error", "message": message, "code": code}


@router.websocket("/match/ws/{session_id}")
async def match_websocket(websocket: WebSocket, session_id: str) -> None:
    """
    WebSocket endpoint for a live match.

    Client messages:
    - start: Start the tick loop and game clock
    - pause: Pause the match
    - resume: Resume a paused match
    - reset: Stop the loops and go back to tip-off
    - step: Advance a stopped match by `ticks` ticks
    - sync: Request full state sync
    - command: Input for the controlled player (see CommandRequest)

    Server messages:
    - state_sync: Full snapshot on connect or request
    - tick: Snapshot plus the events since the last tick
    - command_result: Whether a command was accepted
    - complete: Sent once when the game ends
    - error: Error message
    """
    await websocket.accept()

    manager = get_session_manager()

    # Validate session ID
    try:
        uuid = UUID(session_id)
    except ValueError:
        await websocket.send_json(_error("Invalid session ID format", "INVALID_SESSION_ID"))
        await websocket.close()
        return

    session = await manager.get_session(uuid)
    if session is None:
        await websocket.send_json(_error("Session not found", "SESSION_NOT_FOUND"))
        await websocket.close()
        return

    async def send_sync() -> None:
        await websocket.send_json({
            "type": "state_sync",
            "payload": session.state_payload(),
        })

    async def send_tick(live: MatchSession) -> None:
        await websocket.send_json({
            "type": "tick",
            "payload": live.tick_payload(),
        })

    async def send_complete(live: MatchSession) -> None:
        await websocket.send_json({
            "type": "complete",
            "payload": {
                "state": live.state_payload(),
                "play_by_play": live.game_log.format_play_by_play(),
            },
        })

    # Send initial state
    await send_sync()

    try:
        while True:
            data = await websocket.receive_text()
            try:
                message = json.loads(data)
            except json.JSONDecodeError:
                await websocket.send_json(_error("Invalid JSON", "INVALID_JSON"))
                continue

            msg_type = message.get("type")

            if msg_type == "start":
                success = await manager.start(uuid, on_tick=send_tick, on_complete=send_complete)
                if not success:
                    await websocket.send_json(_error(
                        "Could not start match (already running or over?)",
                        "START_FAILED",
                    ))

            elif msg_type == "pause":
                await manager.pause(uuid)

            elif msg_type == "resume":
                await manager.resume(uuid)

            elif msg_type == "reset":
                await manager.reset(uuid)
                await send_sync()

            elif msg_type == "step":
                ticks = message.get("ticks", 1)
                if not isinstance(ticks, int) or ticks < 1:
                    await websocket.send_json(_error("ticks must be a positive integer", "INVALID_STEP"))
                    continue
                success = await manager.step(uuid, ticks)
                if success:
                    await websocket.send_json({
                        "type": "tick",
                        "payload": session.tick_payload(),
                    })
                else:
                    await websocket.send_json(_error(
                        "Could not step match (running live or over?)",
                        "STEP_FAILED",
                    ))

            elif msg_type == "sync":
                await send_sync()

            elif msg_type == "command":
                try:
                    command = CommandRequest.model_validate(message.get("payload", {}))
                except ValidationError as exc:
                    await websocket.send_json(_error(str(exc), "INVALID_COMMAND"))
                    continue
                accepted = await manager.command(
                    uuid,
                    command.command,
                    command.model_dump(exclude={"command"}),
                )
                await websocket.send_json({
                    "type": "command_result",
                    "payload": {"command": command.command, "accepted": accepted},
                })

            else:
                await websocket.send_json(_error(
                    f"Unknown message type: {msg_type}",
                    "UNKNOWN_MESSAGE",
                ))

    except WebSocketDisconnect:
        # Keep the session; just stop driving it
        await manager.stop(uuid)
