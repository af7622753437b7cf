from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any

from pathbot.agents.base import Agent
from pathbot.agents.json_schema import JsonSchema
from pathbot.core.context import LevelBrief, RenderedContext
from pathbot.levels.payload import ParsedLevel, parse_level_payload, strip_code_fence

logger = logging.getLogger(__name__)

MIN_GRID_SIZE = 4
MAX_GRID_SIZE = 8


class LevelDesignError(RuntimeError):
    pass


@dataclass(frozen=True, slots=True)
class DesignedLevel:
    parsed: ParsedLevel
    raw: dict[str, Any]


def make_level_brief(level_number: int, *, theme: str = "Space/Robots") -> LevelBrief:
    """Progressive difficulty.

    Level 1: 4x4, no obstacles. Level 2: 4x4, 1 obstacle. Level 3: 5x5, 2 obstacles ...
    The grid stops growing at 8x8; obstacles keep coming.
    """

    if level_number < 1:
        raise ValueError("level_number must be >= 1")
    grid_size = min(MAX_GRID_SIZE, MIN_GRID_SIZE + (level_number - 1) // 2)
    obstacle_count = max(0, level_number - 1)
    return LevelBrief(level_number=level_number, grid_size=grid_size, obstacle_count=obstacle_count, theme=theme)


_POINT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "additionalProperties": False,
    "properties": {"x": {"type": "integer"}, "y": {"type": "integer"}},
    "required": ["x", "y"],
}

_LEVEL_SCHEMA = JsonSchema(
    name="design_level",
    schema={
        "type": "object",
        "additionalProperties": False,
        "properties": {
            "gridSize": {"type": "integer"},
            "robotPos": _POINT_SCHEMA,
            "goalPos": _POINT_SCHEMA,
            "obstacles": {"type": "array", "items": _POINT_SCHEMA},
            "message": {"type": "string"},
        },
        "required": ["gridSize", "robotPos", "goalPos", "obstacles", "message"],
    },
    strict=True,
)


def _build_prompt(brief: LevelBrief) -> str:
    return (
        "Generate a level configuration in JSON format.\n\n"
        f"Current Level: {brief.level_number}\n"
        f"Grid Size: {brief.grid_size}\n"
        f"Obstacles: place {brief.obstacle_count} obstacles (excluding start/goal).\n\n"
        "Response Format:\n"
        "{\n"
        '    "gridSize": number,\n'
        '    "robotPos": {"x": number, "y": number},\n'
        '    "goalPos": {"x": number, "y": number},\n'
        '    "obstacles": [{"x": number, "y": number}],\n'
        '    "message": "Short encouraging text"\n'
        "}\n"
    )


async def design_level_with_agent(
    *,
    agent: Agent,
    ctx: RenderedContext,
    brief: LevelBrief,
    max_attempts: int = 3,
) -> DesignedLevel:
    """Ask an agent for a level and validate it.

    The reply must be a JSON object describing a structurally valid level.
    Invalid replies are retried; after `max_attempts` a LevelDesignError is raised.
    """

    prompt = _build_prompt(brief)

    last_err: Exception | None = None
    for attempt in range(1, max_attempts + 1):
        action = await agent.propose_action(prompt=prompt, ctx=ctx, structured_output=_LEVEL_SCHEMA)

        try:
            parsed = parse_level_payload(action.content)
        except Exception as e:
            logger.info("Level %s draft %d rejected: %s", brief.level_number, attempt, e)
            last_err = e
            continue

        if parsed.level.grid_size != brief.grid_size:
            logger.info(
                "Level %s came back %dx%d (asked for %dx%d); keeping it",
                brief.level_number,
                parsed.level.grid_size,
                parsed.level.grid_size,
                brief.grid_size,
                brief.grid_size,
            )

        raw = json.loads(strip_code_fence(action.content))
        return DesignedLevel(parsed=parsed, raw=raw)

    raise LevelDesignError(f"Failed to design level {brief.level_number} after {max_attempts} attempts: {last_err}")
