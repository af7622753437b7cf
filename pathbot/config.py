from __future__ import annotations

import os
from dataclasses import dataclass

# Timings match the original browser game: 500 ms settle pause, then one step every 600 ms.
DEFAULT_START_DELAY_MS = 500
DEFAULT_TICK_INTERVAL_MS = 600

GAME_ID = "sequencing"


@dataclass(frozen=True, slots=True)
class EngineSettings:
    start_delay_s: float = DEFAULT_START_DELAY_MS / 1000
    tick_interval_s: float = DEFAULT_TICK_INTERVAL_MS / 1000
    game_id: str = GAME_ID
    points_per_level: int = 10


def _ms_from_env(name: str, default: int) -> int:
    raw = os.environ.get(name)
    if raw is None or not raw.strip():
        return default
    value = int(raw)
    if value < 0:
        raise ValueError(f"{name} must be >= 0, got {value}")
    return value


def settings_from_env() -> EngineSettings:
    return EngineSettings(
        start_delay_s=_ms_from_env("PATHBOT_START_DELAY_MS", DEFAULT_START_DELAY_MS) / 1000,
        tick_interval_s=_ms_from_env("PATHBOT_TICK_INTERVAL_MS", DEFAULT_TICK_INTERVAL_MS) / 1000,
    )


def log_level_from_env() -> str:
    return os.environ.get("PATHBOT_LOG_LEVEL", "INFO").upper()


DEFAULT_SESSION_IDLE_TTL_S = 30 * 60
SESSION_SWEEP_INTERVAL_S = 60.0


def session_idle_ttl_from_env() -> float:
    """Seconds an unused session is kept alive; 0 disables reaping."""

    raw = os.environ.get("PATHBOT_SESSION_IDLE_TTL_S")
    if raw is None or not raw.strip():
        return float(DEFAULT_SESSION_IDLE_TTL_S)
    value = float(raw)
    if value < 0:
        raise ValueError(f"PATHBOT_SESSION_IDLE_TTL_S must be >= 0, got {value}")
    return value
