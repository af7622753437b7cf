from __future__ import annotations

import json
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, ValidationError, field_validator, model_validator

from pathbot.engine.types import Level, LevelError, Position


class LevelPayloadError(RuntimeError):
    pass


class PointPayload(BaseModel):
    x: int
    y: int

    @model_validator(mode="before")
    @classmethod
    def _accept_pairs(cls, data: Any) -> Any:
        # Some models answer [x, y] instead of {"x": .., "y": ..}.
        if isinstance(data, (list, tuple)) and len(data) == 2:
            return {"x": data[0], "y": data[1]}
        return data

    def to_position(self) -> Position:
        return Position(x=self.x, y=self.y)


class LevelPayload(BaseModel):
    """Wire shape of a generated level.

    Accepts the generator's camelCase keys (`gridSize`, `robotPos`, `goalPos`)
    as well as snake_case / short names (`grid_size`, `start`, `goal`).
    """

    model_config = ConfigDict(extra="ignore")

    grid_size: int = Field(validation_alias=AliasChoices("gridSize", "grid_size"))
    start: PointPayload = Field(validation_alias=AliasChoices("robotPos", "start", "robot_pos"))
    goal: PointPayload = Field(validation_alias=AliasChoices("goalPos", "goal", "goal_pos"))
    obstacles: list[PointPayload] = Field(default_factory=list)
    message: str | None = None

    @field_validator("obstacles", mode="before")
    @classmethod
    def _none_means_no_obstacles(cls, v: Any) -> Any:
        return [] if v is None else v


@dataclass(frozen=True, slots=True)
class ParsedLevel:
    level: Level
    message: str | None = None


def strip_code_fence(text: str) -> str:
    """Drop markdown fences (```json ... ```) that LLMs like to wrap JSON in."""

    return text.replace("```json", "").replace("```", "").strip()


def parse_level_payload(raw: Mapping[str, Any] | str) -> ParsedLevel:
    """Validate a provider payload and build a Level from it.

    Never trusts the shape: anything that isn't a JSON object describing a
    valid level raises LevelPayloadError.
    """

    if isinstance(raw, str):
        try:
            data = json.loads(strip_code_fence(raw))
        except json.JSONDecodeError as e:
            raise LevelPayloadError(f"Invalid JSON: {e}") from e
    else:
        data = raw

    if not isinstance(data, Mapping):
        raise LevelPayloadError("Expected a JSON object")

    try:
        payload = LevelPayload.model_validate(dict(data))
    except ValidationError as e:
        raise LevelPayloadError(f"Malformed level payload ({e.error_count()} errors): {e}") from e

    try:
        level = Level(
            grid_size=payload.grid_size,
            start=payload.start.to_position(),
            goal=payload.goal.to_position(),
            obstacles=frozenset(o.to_position() for o in payload.obstacles),
        )
    except LevelError as e:
        raise LevelPayloadError(f"Invalid level: {e}") from e

    message = payload.message.strip() if payload.message and payload.message.strip() else None
    return ParsedLevel(level=level, message=message)
