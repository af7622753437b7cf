from __future__ import annotations

from dataclasses import dataclass
from enum import StrEnum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from pathbot.engine.command_queue import CommandQueue


class LevelError(ValueError):
    pass


@dataclass(frozen=True, slots=True)
class Position:
    x: int
    y: int

    def in_bounds(self, grid_size: int) -> bool:
        return 0 <= self.x < grid_size and 0 <= self.y < grid_size


class Direction(StrEnum):
    up = "up"
    down = "down"
    left = "left"
    right = "right"


# A command is just a direction; kept as an alias so call sites read naturally.
Command = Direction


@dataclass(frozen=True, slots=True)
class Level:
    """One puzzle configuration.

    Built whole and swapped whole; construction enforces:
    - grid_size >= 1 and every position inside [0, grid_size)
    - start != goal
    - neither start nor goal is an obstacle
    """

    grid_size: int
    start: Position
    goal: Position
    obstacles: frozenset[Position] = frozenset()

    def __post_init__(self) -> None:
        if self.grid_size < 1:
            raise LevelError(f"grid_size must be >= 1, got {self.grid_size}")
        for label, pos in (("start", self.start), ("goal", self.goal)):
            if not pos.in_bounds(self.grid_size):
                raise LevelError(f"{label} {pos} is outside a {self.grid_size}x{self.grid_size} grid")
        if self.start == self.goal:
            raise LevelError("start and goal must differ")
        for pos in self.obstacles:
            if not pos.in_bounds(self.grid_size):
                raise LevelError(f"obstacle {pos} is outside a {self.grid_size}x{self.grid_size} grid")
        if self.start in self.obstacles:
            raise LevelError("start cannot be an obstacle")
        if self.goal in self.obstacles:
            raise LevelError("goal cannot be an obstacle")


class RunOutcome(StrEnum):
    idle = "idle"
    running = "running"
    won = "won"
    failed = "failed"


@dataclass(slots=True)
class RunState:
    robot_pos: Position
    # Index of the last executed command; -1 before the first tick.
    cursor: int = -1
    outcome: RunOutcome = RunOutcome.idle

    def copy(self) -> "RunState":
        return RunState(robot_pos=self.robot_pos, cursor=self.cursor, outcome=self.outcome)


@dataclass(slots=True)
class EngineState:
    level: Level
    queue: "CommandQueue"
    run: RunState
    level_number: int = 1
    message: str | None = None
    is_generated: bool = False
