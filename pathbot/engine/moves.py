from __future__ import annotations

from collections.abc import Iterable

from pathbot.engine.types import Direction, Level, Position

_STEPS: dict[Direction, tuple[int, int]] = {
    Direction.up: (0, -1),
    Direction.down: (0, 1),
    Direction.left: (-1, 0),
    Direction.right: (1, 0),
}


def _clamp(value: int, grid_size: int) -> int:
    return max(0, min(grid_size - 1, value))


def apply_command(pos: Position, cmd: Direction, grid_size: int) -> Position:
    """Move one cell in `cmd`'s direction.

    Each axis clamps on its own: pushing against a wall leaves the robot where it is.
    """

    dx, dy = _STEPS[Direction(cmd)]
    return Position(x=_clamp(pos.x + dx, grid_size), y=_clamp(pos.y + dy, grid_size))


def project(commands: Iterable[Direction], level: Level) -> Position:
    """Ghost preview: where the queue ends up by geometry alone (obstacles ignored)."""

    pos = level.start
    for cmd in commands:
        pos = apply_command(pos, cmd, level.grid_size)
    return pos
