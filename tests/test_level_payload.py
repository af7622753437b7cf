from __future__ import annotations

import pytest

from pathbot.engine.types import Level, LevelError, Position
from pathbot.levels.payload import LevelPayloadError, parse_level_payload


def test_parse_accepts_generator_camel_case() -> None:
    parsed = parse_level_payload(
        {
            "gridSize": 5,
            "robotPos": {"x": 0, "y": 0},
            "goalPos": {"x": 4, "y": 2},
            "obstacles": [{"x": 1, "y": 1}, {"x": 2, "y": 2}],
            "message": "  Blast off!  ",
        }
    )
    assert parsed.level == Level(
        grid_size=5,
        start=Position(0, 0),
        goal=Position(4, 2),
        obstacles=frozenset({Position(1, 1), Position(2, 2)}),
    )
    assert parsed.message == "Blast off!"


def test_parse_accepts_snake_case_and_pairs() -> None:
    parsed = parse_level_payload({"grid_size": 4, "start": [0, 0], "goal": [3, 3], "obstacles": [[1, 2]]})
    assert parsed.level.start == Position(0, 0)
    assert parsed.level.obstacles == frozenset({Position(1, 2)})
    assert parsed.message is None


def test_parse_strips_markdown_fences() -> None:
    text = '```json\n{"gridSize": 4, "robotPos": {"x": 0, "y": 0}, "goalPos": {"x": 2, "y": 2}}\n```'
    parsed = parse_level_payload(text)
    assert parsed.level.goal == Position(2, 2)
    assert parsed.level.obstacles == frozenset()


def test_null_obstacles_mean_none() -> None:
    parsed = parse_level_payload({"gridSize": 4, "robotPos": [0, 0], "goalPos": [1, 0], "obstacles": None})
    assert parsed.level.obstacles == frozenset()


@pytest.mark.parametrize(
    "bad",
    [
        "not json",
        "[]",
        "{}",
        {"gridSize": 4, "robotPos": {"x": 0}, "goalPos": {"x": 1, "y": 1}},
        {"gridSize": "big", "robotPos": [0, 0], "goalPos": [1, 1]},
        {"gridSize": 4, "robotPos": [0, 0], "goalPos": [0, 0]},
        {"gridSize": 4, "robotPos": [0, 0], "goalPos": [4, 0]},
        {"gridSize": 4, "robotPos": [-1, 0], "goalPos": [3, 0]},
        {"gridSize": 0, "robotPos": [0, 0], "goalPos": [1, 0]},
        {"gridSize": 4, "robotPos": [0, 0], "goalPos": [3, 0], "obstacles": [[0, 0]]},
        {"gridSize": 4, "robotPos": [0, 0], "goalPos": [3, 0], "obstacles": [[3, 0]]},
        {"gridSize": 4, "robotPos": [0, 0], "goalPos": [3, 0], "obstacles": [[9, 9]]},
    ],
)
def test_parse_rejects_invalid_payloads(bad: object) -> None:
    with pytest.raises(LevelPayloadError):
        parse_level_payload(bad)  # type: ignore[arg-type]


def test_level_constructor_enforces_invariants() -> None:
    with pytest.raises(LevelError):
        Level(grid_size=1, start=Position(0, 0), goal=Position(0, 0))
    with pytest.raises(ValueError):
        Level(grid_size=3, start=Position(0, 0), goal=Position(2, 2), obstacles=frozenset({Position(2, 2)}))
