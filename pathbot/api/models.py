from __future__ import annotations

from pydantic import BaseModel, Field

from pathbot.engine.engine import EngineSnapshot
from pathbot.engine.types import Direction, Position, RunOutcome


class SessionCreateRequest(BaseModel):
    player_id: str = Field(..., min_length=1, max_length=128)


class CommandRequest(BaseModel):
    command: Direction


class LevelChangeRequest(BaseModel):
    delta: int = Field(..., ge=-100, le=100)


class PositionModel(BaseModel):
    x: int
    y: int

    @classmethod
    def from_position(cls, pos: Position) -> "PositionModel":
        return cls(x=pos.x, y=pos.y)


class LevelModel(BaseModel):
    grid_size: int
    start: PositionModel
    goal: PositionModel
    obstacles: list[PositionModel] = Field(default_factory=list)


class RunStateModel(BaseModel):
    robot_pos: PositionModel
    # Index of the last executed command; -1 before the first tick.
    cursor: int
    outcome: RunOutcome


class SnapshotModel(BaseModel):
    level_number: int
    level: LevelModel
    queue: list[Direction]
    run: RunStateModel
    ghost_position: PositionModel
    is_loading: bool
    message: str | None = None
    is_generated: bool = False

    @classmethod
    def from_snapshot(cls, snap: EngineSnapshot) -> "SnapshotModel":
        level = snap.level
        return cls(
            level_number=snap.level_number,
            level=LevelModel(
                grid_size=level.grid_size,
                start=PositionModel.from_position(level.start),
                goal=PositionModel.from_position(level.goal),
                # Stable order for clients and tests.
                obstacles=[PositionModel.from_position(p) for p in sorted(level.obstacles, key=lambda p: (p.y, p.x))],
            ),
            queue=list(snap.queue),
            run=RunStateModel(
                robot_pos=PositionModel.from_position(snap.run.robot_pos),
                cursor=snap.run.cursor,
                outcome=snap.run.outcome,
            ),
            ghost_position=PositionModel.from_position(snap.ghost_position),
            is_loading=snap.is_loading,
            message=snap.message,
            is_generated=snap.is_generated,
        )


class SessionResponse(BaseModel):
    session_id: str
    player_id: str
    snapshot: SnapshotModel


class ActionResponse(BaseModel):
    """Result of a player input. `accepted` is False when the input was ignored."""

    session_id: str
    accepted: bool
    snapshot: SnapshotModel


class ScoresResponse(BaseModel):
    player_id: str
    game_id: str
    best_score: int | None = None
    total_plays: int = 0
    last_played: str | None = None
