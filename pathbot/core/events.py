from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Literal

EventType = Literal[
    "RUN_STARTED",
    "RUN_STEPPED",
    "RUN_WON",
    "RUN_FAILED",
    "RUN_RESET",
    "QUEUE_CHANGED",
    "LEVEL_LOADING",
    "LEVEL_LOADED",
]


@dataclass(frozen=True, slots=True)
class EngineEvent:
    type: EventType
    level_number: int
    payload: dict[str, Any]
    ts: datetime

    @staticmethod
    def now(*, type: EventType, level_number: int, payload: dict[str, Any] | None = None) -> "EngineEvent":
        return EngineEvent(type=type, level_number=level_number, payload=payload or {}, ts=datetime.now(timezone.utc))
