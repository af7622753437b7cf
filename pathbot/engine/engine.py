from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

from pathbot.config import EngineSettings
from pathbot.core.events import EngineEvent, EventType
from pathbot.engine.command_queue import CommandQueue
from pathbot.engine.moves import project
from pathbot.engine.scheduler import RunScheduler
from pathbot.engine.types import Direction, EngineState, Level, Position, RunState
from pathbot.levels.loader import OFFLINE_LEVEL, LevelLoader, LoadedLevel
from pathbot.store import ProgressStore, ScoreSink

logger = logging.getLogger(__name__)

Listener = Callable[[EngineEvent], None]


@dataclass(frozen=True, slots=True)
class EngineSnapshot:
    level: Level
    level_number: int
    queue: tuple[Direction, ...]
    run: RunState
    ghost_position: Position
    is_loading: bool
    message: str | None
    is_generated: bool


class PathEngine:
    """Owner of one puzzle session's state.

    Only this object (and the scheduler it owns) mutates the EngineState.
    Input that arrives at the wrong time (editing mid-run, running an empty
    queue, anything while a level loads) is ignored and reported as False,
    never raised.
    """

    def __init__(
        self,
        *,
        loader: LevelLoader,
        progress: ProgressStore | None = None,
        scores: ScoreSink | None = None,
        settings: EngineSettings | None = None,
        level: Level | None = None,
    ) -> None:
        self.settings = settings or EngineSettings()
        self._loader = loader
        self._progress = progress
        self._scores = scores

        initial = level or OFFLINE_LEVEL
        self._state = EngineState(level=initial, queue=CommandQueue(), run=RunState(robot_pos=initial.start))
        self._scheduler = RunScheduler(
            state=self._state,
            start_delay_s=self.settings.start_delay_s,
            tick_interval_s=self.settings.tick_interval_s,
            on_event=self._on_scheduler_event,
        )

        self._listeners: list[Listener] = []
        self._loading = False
        self._load_seq = 0
        self._closed = False
        self._ghost_cache: tuple[int, Level, Position] | None = None
        # Sink writes running in worker threads.
        self._background: set[asyncio.Task[None]] = set()

    # ---- read side ----

    @property
    def scheduler(self) -> RunScheduler:
        return self._scheduler

    @property
    def level(self) -> Level:
        return self._state.level

    @property
    def level_number(self) -> int:
        return self._state.level_number

    @property
    def queue(self) -> tuple[Direction, ...]:
        return self._state.queue.as_tuple()

    @property
    def run_state(self) -> RunState:
        return self._state.run.copy()

    @property
    def is_loading(self) -> bool:
        return self._loading

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def ghost_position(self) -> Position:
        st = self._state
        cached = self._ghost_cache
        if cached is not None and cached[0] == st.queue.version and cached[1] is st.level:
            return cached[2]
        pos = project(st.queue, st.level)
        self._ghost_cache = (st.queue.version, st.level, pos)
        return pos

    def snapshot(self) -> EngineSnapshot:
        st = self._state
        return EngineSnapshot(
            level=st.level,
            level_number=st.level_number,
            queue=st.queue.as_tuple(),
            run=st.run.copy(),
            ghost_position=self.ghost_position,
            is_loading=self._loading,
            message=st.message,
            is_generated=st.is_generated,
        )

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ---- player input ----

    def _accepts_input(self) -> bool:
        return not self._loading and not self._closed

    def add_command(self, cmd: Direction | str) -> bool:
        if not self._accepts_input():
            return False
        if not self._state.queue.append(cmd):
            return False
        self._emit("QUEUE_CHANGED", {"length": len(self._state.queue)})
        return True

    def remove_command(self, index: int) -> bool:
        if not self._accepts_input():
            return False
        if not self._state.queue.remove(index):
            return False
        self._emit("QUEUE_CHANGED", {"length": len(self._state.queue)})
        return True

    def clear(self) -> bool:
        """Empty the queue and force the run back to idle at the level start."""

        if not self._accepts_input():
            return False
        self._scheduler.reset()
        self._state.queue.clear()
        self._emit("QUEUE_CHANGED", {"length": 0})
        return True

    def run(self) -> bool:
        if not self._accepts_input():
            return False
        return self._scheduler.start()

    def replay(self) -> bool:
        """Back to idle at the start of the same level; the queue is kept."""

        if not self._accepts_input():
            return False
        self._scheduler.reset()
        return True

    async def wait_for_run(self) -> None:
        await self._scheduler.wait()

    # ---- levels ----

    async def start(self) -> bool:
        """Load the persisted level (level 1 when nothing usable is stored)."""

        level_number = 1
        if self._progress is not None:
            try:
                level_number = await asyncio.to_thread(self._progress.load_current_level)
            except Exception:
                logger.exception("Could not read persisted level; starting at level 1")
        return await self.load_level(level_number)

    async def change_level(self, delta: int) -> bool:
        return await self.load_level(self._state.level_number + delta)

    async def load_level(self, level_number: int) -> bool:
        """Fetch and swap in a level.

        Returns False when the request is rejected (level < 1, engine closed) or
        when a newer request superseded it before it resolved.
        """

        if self._closed or level_number < 1:
            return False

        self._load_seq += 1
        token = self._load_seq

        self._scheduler.reset()
        self._loading = True
        self._emit("LEVEL_LOADING", {"requested": level_number})

        try:
            loaded = await self._loader.load(level_number)
        finally:
            if token == self._load_seq:
                self._loading = False

        if token != self._load_seq or self._closed:
            logger.info("Discarding stale level %s result", level_number)
            return False

        self._apply_loaded(loaded)
        await self._persist_level(loaded.level_number)
        return True

    def _apply_loaded(self, loaded: LoadedLevel) -> None:
        # No awaits in here: the swap is atomic with respect to every other handler.
        st = self._state
        st.level = loaded.level
        st.level_number = loaded.level_number
        st.message = loaded.message
        st.is_generated = loaded.is_generated
        st.queue.clear()
        self._scheduler.reset()

        self._emit(
            "LEVEL_LOADED",
            {"is_generated": loaded.is_generated, "message": loaded.message or ""},
        )

    async def _persist_level(self, level_number: int) -> None:
        # Worker thread; the loop keeps ticking while the store answers.
        if self._progress is None:
            return
        try:
            await asyncio.to_thread(self._progress.save_current_level, level_number)
        except Exception:
            logger.exception("Could not persist current level %s", level_number)

    def close(self) -> None:
        """Cancel timers and drop any in-flight level request."""

        self._closed = True
        self._load_seq += 1
        self._loading = False
        self._scheduler.cancel()
        self._listeners.clear()

    # ---- events / scoring ----

    def _on_scheduler_event(self, event: EngineEvent) -> None:
        if event.type == "RUN_WON":
            self._schedule_score()
        self._dispatch(event)

    def _schedule_score(self) -> None:
        if self._scores is None:
            return
        score = self.settings.points_per_level * self._state.level_number
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self._record_score(score)
            return
        task = loop.create_task(asyncio.to_thread(self._record_score, score))
        self._background.add(task)
        task.add_done_callback(self._background.discard)

    async def drain_background(self) -> None:
        """Wait for score writes still running in worker threads."""

        if self._background:
            await asyncio.gather(*list(self._background))

    def _record_score(self, score: int) -> None:
        assert self._scores is not None
        try:
            self._scores.record_score(self.settings.game_id, score)
        except Exception:
            logger.exception("Failed to record score %s for %s", score, self.settings.game_id)

    def _emit(self, type: EventType, payload: dict[str, Any]) -> None:
        self._dispatch(EngineEvent.now(type=type, level_number=self._state.level_number, payload=payload))

    def _dispatch(self, event: EngineEvent) -> None:
        for listener in list(self._listeners):
            try:
                listener(event)
            except Exception:
                logger.exception("Engine listener failed for %s", event.type)
