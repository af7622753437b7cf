from __future__ import annotations

import os
from pathlib import Path
from typing import Any

import pytest


@pytest.fixture(scope="session", autouse=True)
def _load_dotenv_for_tests() -> None:
    """Load repo .env for local runs.

    This makes OPENAI_BASE_URL / OPENAI_MODEL available to the env-gated
    integration tests without exporting them in your shell.

    In CI we *don't* auto-load `.env`, so those tests stay skipped unless
    explicitly opted-in with PATHBOT_LOAD_DOTENV_FOR_TESTS=1.
    """

    if os.environ.get("CI") and os.environ.get("PATHBOT_LOAD_DOTENV_FOR_TESTS") != "1":
        return

    env_path = Path(__file__).resolve().parents[1] / ".env"
    if env_path.exists():
        from dotenv import load_dotenv

        load_dotenv(dotenv_path=env_path, override=False)

    # If using a local OpenAI-compatible endpoint, some clients require a key string.
    if os.environ.get("OPENAI_BASE_URL") and not os.environ.get("OPENAI_API_KEY"):
        os.environ["OPENAI_API_KEY"] = "ollama"


class StaticLevelProvider:
    """Always answers with the same 4x4 level: start (0,0), goal (3,0), obstacle (1,1)."""

    def __init__(self) -> None:
        self.requests: list[int] = []

    async def request_level(self, level_number: int) -> dict[str, Any]:
        self.requests.append(level_number)
        return {
            "gridSize": 4,
            "robotPos": {"x": 0, "y": 0},
            "goalPos": {"x": 3, "y": 0},
            "obstacles": [{"x": 1, "y": 1}],
            "message": f"Level {level_number}: fly to the moon base!",
        }


@pytest.fixture()
def static_provider() -> StaticLevelProvider:
    return StaticLevelProvider()


@pytest.fixture()
def client_and_redis(static_provider: StaticLevelProvider):
    """FastAPI TestClient wired to fakeredis, a static level provider and zero run delays."""

    import fakeredis
    from fastapi.testclient import TestClient

    from pathbot.api.deps import get_level_provider, get_redis, get_settings
    from pathbot.config import EngineSettings
    from pathbot.main import app

    r = fakeredis.FakeRedis(decode_responses=True)

    app.dependency_overrides[get_redis] = lambda: r
    app.dependency_overrides[get_level_provider] = lambda: static_provider
    app.dependency_overrides[get_settings] = lambda: EngineSettings(start_delay_s=0.0, tick_interval_s=0.0)

    with TestClient(app) as c:
        yield c, r
    app.dependency_overrides.clear()
