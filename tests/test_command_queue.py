from __future__ import annotations

import pytest

from pathbot.engine.command_queue import CommandQueue
from pathbot.engine.types import Direction


def test_append_keeps_insertion_order() -> None:
    q = CommandQueue()
    assert q.append(Direction.right)
    assert q.append("down")
    assert q.append(Direction.left)

    assert q.as_tuple() == (Direction.right, Direction.down, Direction.left)
    assert len(q) == 3
    assert q[1] is Direction.down


def test_append_rejects_unknown_direction() -> None:
    q = CommandQueue()
    with pytest.raises(ValueError):
        q.append("jump")
    assert len(q) == 0


def test_remove_shifts_later_entries_down() -> None:
    q = CommandQueue([Direction.up, Direction.down, Direction.left])
    assert q.remove(1)
    assert q.as_tuple() == (Direction.up, Direction.left)


@pytest.mark.parametrize("index", [-1, 3, 99])
def test_remove_nonexistent_index_is_a_noop(index: int) -> None:
    q = CommandQueue([Direction.up, Direction.down, Direction.left])
    version = q.version

    assert q.remove(index) is False
    assert q.as_tuple() == (Direction.up, Direction.down, Direction.left)
    assert q.version == version


def test_locked_queue_ignores_edits() -> None:
    q = CommandQueue([Direction.up])
    q.lock()
    version = q.version

    assert q.append(Direction.down) is False
    assert q.remove(0) is False
    assert q.as_tuple() == (Direction.up,)
    assert q.version == version

    q.unlock()
    assert q.append(Direction.down)


def test_every_mutation_bumps_version() -> None:
    q = CommandQueue()
    versions = [q.version]
    q.append(Direction.up)
    versions.append(q.version)
    q.remove(0)
    versions.append(q.version)
    q.clear()
    versions.append(q.version)

    assert versions == sorted(set(versions))
