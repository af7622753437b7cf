from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

from pathbot.core.events import EngineEvent, EventType
from pathbot.engine.fsm import RunFSM
from pathbot.engine.moves import apply_command
from pathbot.engine.types import EngineState, RunOutcome

logger = logging.getLogger(__name__)

EventSink = Callable[[EngineEvent], None]


class RunScheduler:
    """Executes the command queue one step per tick.

    Timing contract:
      - `start()` arms a one-shot start delay (lets the reset settle on screen),
        then a tick fires every `tick_interval_s` until the run ends.
      - at most one start-delay handle and one tick handle exist at any time;
        every entry point cancels outstanding handles before arming new ones.

    Each tick reads the engine state through the shared `EngineState` reference,
    never through a snapshot captured when the run started.
    """

    def __init__(
        self,
        *,
        state: EngineState,
        start_delay_s: float = 0.5,
        tick_interval_s: float = 0.6,
        on_event: EventSink | None = None,
    ) -> None:
        self._state = state
        self.start_delay_s = start_delay_s
        self.tick_interval_s = tick_interval_s
        self._on_event = on_event
        self._start_handle: asyncio.TimerHandle | None = None
        self._tick_handle: asyncio.TimerHandle | None = None
        self._done: asyncio.Event | None = None

    @property
    def has_pending_timers(self) -> bool:
        return self._start_handle is not None or self._tick_handle is not None

    def enter_running(self) -> bool:
        """Transition idle -> running without arming timers.

        Returns False (and changes nothing) for an empty queue or a run that is not idle.
        """

        st = self._state
        run = st.run
        if len(st.queue) == 0:
            return False
        if run.outcome != RunOutcome.idle:
            return False

        self.cancel()

        fsm = RunFSM(run)
        fsm.begin()
        fsm.sync_outcome_to_model()

        run.robot_pos = st.level.start
        run.cursor = -1
        st.queue.lock()

        self._emit("RUN_STARTED", {"commands": len(st.queue)})
        return True

    def start(self) -> bool:
        """Enter running and arm the start delay. Needs a running event loop.

        Without one nothing could ever tick, so the run is refused before any
        state changes.
        """

        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            logger.warning("Run refused: no running event loop to drive its timers")
            return False

        if not self.enter_running():
            return False

        self._done = asyncio.Event()
        self._start_handle = loop.call_later(self.start_delay_s, self._on_start_delay)
        return True

    def step(self) -> bool:
        """Advance one command. Returns True while the run is still going."""

        st = self._state
        run = st.run
        if run.outcome != RunOutcome.running:
            return False

        next_index = run.cursor + 1
        if next_index >= len(st.queue):
            # Win/fail is only decided once the whole queue has executed.
            self._finish(won=run.robot_pos == st.level.goal, reason="queue_exhausted")
            return False

        candidate = apply_command(run.robot_pos, st.queue[next_index], st.level.grid_size)
        run.robot_pos = candidate
        run.cursor = next_index
        self._emit("RUN_STEPPED", {"cursor": next_index, "x": candidate.x, "y": candidate.y})

        if candidate in st.level.obstacles:
            self._finish(won=False, reason="obstacle")
            return False

        return True

    def cancel(self) -> None:
        if self._start_handle is not None:
            self._start_handle.cancel()
            self._start_handle = None
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None
        if self._done is not None:
            self._done.set()

    def reset(self) -> None:
        """Cancel timers and rewind to idle at the level start. The queue is kept."""

        self.cancel()

        st = self._state
        fsm = RunFSM(st.run)
        fsm.rewind()
        fsm.sync_outcome_to_model()

        st.run.robot_pos = st.level.start
        st.run.cursor = -1
        st.queue.unlock()

        self._emit("RUN_RESET", {})

    async def wait(self) -> None:
        """Resolve once the current run ends or is cancelled."""

        if self._done is None:
            return
        await self._done.wait()

    # ---- timer callbacks ----

    def _on_start_delay(self) -> None:
        self._start_handle = None
        self._schedule_tick()

    def _schedule_tick(self) -> None:
        loop = asyncio.get_running_loop()
        self._tick_handle = loop.call_later(self.tick_interval_s, self._on_tick)

    def _on_tick(self) -> None:
        self._tick_handle = None
        if self.step():
            self._schedule_tick()

    def _finish(self, *, won: bool, reason: str) -> None:
        st = self._state
        fsm = RunFSM(st.run)
        if won:
            fsm.win()
        else:
            fsm.lose()
        fsm.sync_outcome_to_model()

        st.queue.unlock()
        self.cancel()

        pos = st.run.robot_pos
        payload = {"cursor": st.run.cursor, "x": pos.x, "y": pos.y, "reason": reason}
        self._emit("RUN_WON" if won else "RUN_FAILED", payload)

    def _emit(self, type: EventType, payload: dict[str, Any]) -> None:
        if self._on_event is None:
            return
        event = EngineEvent.now(type=type, level_number=self._state.level_number, payload=payload)
        try:
            self._on_event(event)
        except Exception:
            logger.exception("Engine event listener failed for %s", type)
