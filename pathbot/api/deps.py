from __future__ import annotations

import redis

from pathbot.config import EngineSettings, settings_from_env
from pathbot.infra.redis_client import shared_redis
from pathbot.levels.provider import LevelProvider, create_default_level_provider
from pathbot.sessions import SessionRegistry, registry


def get_redis() -> redis.Redis:
    return shared_redis()


def get_level_provider() -> LevelProvider | None:
    return create_default_level_provider()


def get_settings() -> EngineSettings:
    return settings_from_env()


def get_registry() -> SessionRegistry:
    return registry
