from __future__ import annotations

import logging
from dataclasses import dataclass

from pathbot.engine.types import Level, Position
from pathbot.levels.payload import parse_level_payload
from pathbot.levels.provider import LevelProvider

logger = logging.getLogger(__name__)

OFFLINE_MESSAGE = "AI Offline: using an offline level."
FALLBACK_MESSAGE = "Fallback Level (AI generation failed)"

OFFLINE_LEVEL = Level(grid_size=4, start=Position(0, 0), goal=Position(2, 2))
FALLBACK_LEVEL = Level(grid_size=4, start=Position(0, 0), goal=Position(3, 3))


@dataclass(frozen=True, slots=True)
class LoadedLevel:
    level_number: int
    level: Level
    message: str | None
    is_generated: bool


class LevelLoader:
    """Turns a level number into a playable Level, whatever the provider does.

    - no provider configured: the offline level
    - provider raised or returned an invalid payload: the fallback level
    - otherwise: the generated level (is_generated=True)
    """

    def __init__(self, *, provider: LevelProvider | None) -> None:
        self.provider = provider

    async def load(self, level_number: int) -> LoadedLevel:
        if level_number < 1:
            raise ValueError("level_number must be >= 1")

        if self.provider is None:
            logger.info("No level provider configured; serving offline level for level %s", level_number)
            return LoadedLevel(level_number=level_number, level=OFFLINE_LEVEL, message=OFFLINE_MESSAGE, is_generated=False)

        try:
            raw = await self.provider.request_level(level_number)
            parsed = parse_level_payload(raw)
        except Exception as e:
            logger.warning("Level %s generation failed, using fallback: %s", level_number, e)
            return LoadedLevel(level_number=level_number, level=FALLBACK_LEVEL, message=FALLBACK_MESSAGE, is_generated=False)

        logger.info("Loaded generated level %s (%dx%d)", level_number, parsed.level.grid_size, parsed.level.grid_size)
        return LoadedLevel(level_number=level_number, level=parsed.level, message=parsed.message, is_generated=True)
