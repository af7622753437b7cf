from __future__ import annotations

from collections.abc import Iterator

from pathbot.engine.types import Direction


class CommandQueue:
    """Player-authored moves, in execution order.

    Edits are silently ignored while locked (the scheduler locks it for the
    duration of a run). `version` bumps on every effective mutation so callers
    can cache anything derived from the contents.
    """

    def __init__(self, commands: list[Direction] | None = None) -> None:
        self._items: list[Direction] = list(commands or [])
        self._locked = False
        self.version = 0

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Direction]:
        return iter(self._items)

    def __getitem__(self, index: int) -> Direction:
        return self._items[index]

    @property
    def locked(self) -> bool:
        return self._locked

    def lock(self) -> None:
        self._locked = True

    def unlock(self) -> None:
        self._locked = False

    def as_tuple(self) -> tuple[Direction, ...]:
        return tuple(self._items)

    def append(self, cmd: Direction | str) -> bool:
        if self._locked:
            return False
        self._items.append(Direction(cmd))
        self.version += 1
        return True

    def remove(self, index: int) -> bool:
        if self._locked:
            return False
        if not 0 <= index < len(self._items):
            return False
        del self._items[index]
        self.version += 1
        return True

    def clear(self) -> None:
        self._items.clear()
        self.version += 1
