from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status
import redis

from pathbot.api.deps import get_level_provider, get_redis, get_registry, get_settings
from pathbot.api.models import (
    ActionResponse,
    CommandRequest,
    LevelChangeRequest,
    ScoresResponse,
    SessionCreateRequest,
    SessionResponse,
    SnapshotModel,
)
from pathbot.config import GAME_ID, EngineSettings
from pathbot.levels.provider import LevelProvider
from pathbot.sessions import Session, SessionRegistry
from pathbot.store import get_scores
from pathbot.websocket_hub import hub

router = APIRouter()


def _require_session(reg: SessionRegistry, session_id: str) -> Session:
    session = reg.get(session_id)
    if session is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")
    return session


def _action_response(session: Session, accepted: bool) -> ActionResponse:
    return ActionResponse(
        session_id=session.session_id,
        accepted=accepted,
        snapshot=SnapshotModel.from_snapshot(session.engine.snapshot()),
    )


@router.websocket("/ws/sessions/{session_id}")
async def session_updates_ws(
    websocket: WebSocket,
    session_id: str,
    reg: SessionRegistry = Depends(get_registry),
) -> None:
    session = reg.get(session_id)
    if session is None:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION, reason="Session not found")
        return

    await hub.connect(session_id, websocket)

    try:
        await websocket.send_json(
            {
                "type": "snapshot",
                "session_id": session_id,
                "event": {},
                "snapshot": SnapshotModel.from_snapshot(session.engine.snapshot()).model_dump(mode="json"),
            }
        )
        # Keep the socket open; client can optionally send pings.
        while True:
            await websocket.receive_text()
    except WebSocketDisconnect:
        await hub.disconnect(session_id, websocket)
    except Exception:
        await hub.disconnect(session_id, websocket)
        raise
    finally:
        # Idle time counts from the moment the last viewer left.
        session.touch()


@router.get("/healthcheck")
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@router.post("/sessions", response_model=SessionResponse, status_code=status.HTTP_201_CREATED)
async def create_session_route(
    payload: SessionCreateRequest,
    r: redis.Redis = Depends(get_redis),
    provider: LevelProvider | None = Depends(get_level_provider),
    settings: EngineSettings = Depends(get_settings),
    reg: SessionRegistry = Depends(get_registry),
) -> SessionResponse:
    session = await reg.create(r=r, player_id=payload.player_id, provider=provider, settings=settings)
    return SessionResponse(
        session_id=session.session_id,
        player_id=session.player_id,
        snapshot=SnapshotModel.from_snapshot(session.engine.snapshot()),
    )


@router.get("/sessions/{session_id}", response_model=SessionResponse)
async def get_session_route(session_id: str, reg: SessionRegistry = Depends(get_registry)) -> SessionResponse:
    session = _require_session(reg, session_id)
    return SessionResponse(
        session_id=session.session_id,
        player_id=session.player_id,
        snapshot=SnapshotModel.from_snapshot(session.engine.snapshot()),
    )


@router.delete("/sessions/{session_id}", status_code=status.HTTP_204_NO_CONTENT)
async def close_session_route(session_id: str, reg: SessionRegistry = Depends(get_registry)) -> None:
    if not await reg.close(session_id):
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Session not found")


@router.post("/sessions/{session_id}/commands", response_model=ActionResponse)
async def add_command_route(
    session_id: str,
    payload: CommandRequest,
    reg: SessionRegistry = Depends(get_registry),
) -> ActionResponse:
    session = _require_session(reg, session_id)
    accepted = session.engine.add_command(payload.command)
    return _action_response(session, accepted)


@router.delete("/sessions/{session_id}/commands/{index}", response_model=ActionResponse)
async def remove_command_route(
    session_id: str,
    index: int,
    reg: SessionRegistry = Depends(get_registry),
) -> ActionResponse:
    session = _require_session(reg, session_id)
    accepted = session.engine.remove_command(index)
    return _action_response(session, accepted)


@router.delete("/sessions/{session_id}/commands", response_model=ActionResponse)
async def clear_commands_route(session_id: str, reg: SessionRegistry = Depends(get_registry)) -> ActionResponse:
    session = _require_session(reg, session_id)
    accepted = session.engine.clear()
    return _action_response(session, accepted)


@router.post("/sessions/{session_id}/run", response_model=ActionResponse)
async def run_route(session_id: str, reg: SessionRegistry = Depends(get_registry)) -> ActionResponse:
    session = _require_session(reg, session_id)
    accepted = session.engine.run()
    return _action_response(session, accepted)


@router.post("/sessions/{session_id}/replay", response_model=ActionResponse)
async def replay_route(session_id: str, reg: SessionRegistry = Depends(get_registry)) -> ActionResponse:
    session = _require_session(reg, session_id)
    accepted = session.engine.replay()
    return _action_response(session, accepted)


@router.post("/sessions/{session_id}/level", response_model=ActionResponse)
async def change_level_route(
    session_id: str,
    payload: LevelChangeRequest,
    reg: SessionRegistry = Depends(get_registry),
) -> ActionResponse:
    session = _require_session(reg, session_id)
    accepted = await session.engine.change_level(payload.delta)
    return _action_response(session, accepted)


@router.get("/players/{player_id}/scores", response_model=ScoresResponse)
async def scores_route(player_id: str, r: redis.Redis = Depends(get_redis)) -> ScoresResponse:
    raw = get_scores(r=r, player_id=player_id, game_id=GAME_ID)
    return ScoresResponse(
        player_id=player_id,
        game_id=GAME_ID,
        best_score=int(raw["best_score"]) if raw.get("best_score") else None,
        total_plays=int(raw.get("total_plays") or 0),
        last_played=raw.get("last_played"),
    )
