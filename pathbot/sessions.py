from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass, field
from uuid import uuid4

import redis

from pathbot.api.models import SnapshotModel
from pathbot.config import EngineSettings
from pathbot.core.events import EngineEvent
from pathbot.engine.engine import Listener, PathEngine
from pathbot.engine.types import RunOutcome
from pathbot.levels.loader import LevelLoader
from pathbot.levels.provider import LevelProvider
from pathbot.store import RedisProgressStore, RedisScoreSink
from pathbot.websocket_hub import SessionWebSocketHub, hub

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class Session:
    session_id: str
    player_id: str
    engine: PathEngine
    last_active: float = field(default_factory=time.monotonic)

    def touch(self) -> None:
        self.last_active = time.monotonic()


class SessionRegistry:
    """Live puzzle sessions held by this process.

    Engines own running timers, so they can't be rebuilt from Redis per request
    the way plain game state can; only the player's progress and scores persist.
    """

    def __init__(self, *, ws_hub: SessionWebSocketHub = hub) -> None:
        self._by_id: dict[str, Session] = {}
        self._lock = asyncio.Lock()
        self._hub = ws_hub
        self._pending: set[asyncio.Task[None]] = set()

    def __len__(self) -> int:
        return len(self._by_id)

    async def create(
        self,
        *,
        r: redis.Redis,
        player_id: str,
        provider: LevelProvider | None,
        settings: EngineSettings,
    ) -> Session:
        engine = PathEngine(
            loader=LevelLoader(provider=provider),
            progress=RedisProgressStore(r=r, player_id=player_id),
            scores=RedisScoreSink(r=r, player_id=player_id),
            settings=settings,
        )
        session = Session(session_id=uuid4().hex, player_id=player_id, engine=engine)
        engine.subscribe(self._broadcaster(session))

        async with self._lock:
            self._by_id[session.session_id] = session

        await engine.start()
        logger.info("Session %s started for player %s at level %s", session.session_id, player_id, engine.level_number)
        return session

    def get(self, session_id: str) -> Session | None:
        session = self._by_id.get(session_id)
        if session is not None:
            session.touch()
        return session

    async def close(self, session_id: str) -> bool:
        async with self._lock:
            session = self._by_id.pop(session_id, None)
        if session is None:
            return False
        session.engine.close()
        logger.info("Session %s closed", session_id)
        return True

    async def reap_idle(self, *, max_idle_s: float, now: float | None = None) -> list[str]:
        """Close sessions nobody has used for `max_idle_s` seconds.

        A session with an open WebSocket or a run in progress is never idle.
        """

        now = time.monotonic() if now is None else now
        idle = [
            s.session_id
            for s in list(self._by_id.values())
            if now - s.last_active >= max_idle_s
            and self._hub.connection_count(s.session_id) == 0
            and s.engine.run_state.outcome != RunOutcome.running
        ]
        closed = [sid for sid in idle if await self.close(sid)]
        if closed:
            logger.info("Reaped %d idle sessions", len(closed))
        return closed

    async def reap_forever(self, *, max_idle_s: float, interval_s: float) -> None:
        while True:
            await asyncio.sleep(interval_s)
            try:
                await self.reap_idle(max_idle_s=max_idle_s)
            except Exception:
                logger.exception("Idle session sweep failed")

    async def close_all(self) -> None:
        async with self._lock:
            sessions = list(self._by_id.values())
            self._by_id.clear()
        for session in sessions:
            session.engine.close()

    def _broadcaster(self, session: Session) -> Listener:
        def _on_event(event: EngineEvent) -> None:
            if self._hub.connection_count(session.session_id) == 0:
                return
            try:
                loop = asyncio.get_running_loop()
            except RuntimeError:
                return

            payload: dict[str, object] = {
                "type": event.type.lower(),
                "session_id": session.session_id,
                "event": event.payload,
                "snapshot": SnapshotModel.from_snapshot(session.engine.snapshot()).model_dump(mode="json"),
            }
            task = loop.create_task(self._hub.broadcast(session.session_id, payload))
            self._pending.add(task)
            task.add_done_callback(self._pending.discard)

        return _on_event


registry = SessionRegistry()
