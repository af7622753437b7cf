from __future__ import annotations

import logging
from datetime import UTC, datetime
from typing import Protocol

import redis

logger = logging.getLogger(__name__)

PLAYER_KEY_PREFIX = "pathbot:player:"  # + {player_id}:...
CURRENT_LEVEL_FIELD = "current_level"
SCORES_FIELD = "scores"


def _current_level_key(player_id: str) -> str:
    return f"{PLAYER_KEY_PREFIX}{player_id}:{CURRENT_LEVEL_FIELD}"


def _score_key(player_id: str, game_id: str) -> str:
    return f"{PLAYER_KEY_PREFIX}{player_id}:{SCORES_FIELD}:{game_id}"


class ProgressStore(Protocol):
    def load_current_level(self) -> int:  # pragma: no cover
        ...

    def save_current_level(self, level_number: int) -> None:  # pragma: no cover
        ...


class ScoreSink(Protocol):
    def record_score(self, game_id: str, score: int) -> None:  # pragma: no cover
        ...


def load_current_level(*, r: redis.Redis, player_id: str) -> int:
    """Read the persisted level; anything missing or unusable means level 1."""

    raw = r.get(_current_level_key(player_id))
    if not raw:
        return 1
    try:
        level = int(raw)
    except ValueError:
        logger.warning("Ignoring unreadable current level %r for player %s", raw, player_id)
        return 1
    return level if level >= 1 else 1


def save_current_level(*, r: redis.Redis, player_id: str, level_number: int) -> None:
    if level_number < 1:
        raise ValueError("level_number must be >= 1")
    r.set(_current_level_key(player_id), str(level_number))


def record_score(*, r: redis.Redis, player_id: str, game_id: str, score: int) -> dict[str, str]:
    """Keep the best score, count plays, stamp the last play time."""

    key = _score_key(player_id, game_id)
    best_raw = r.hget(key, "best_score")
    best = int(best_raw) if best_raw else None

    pipe = r.pipeline()
    if best is None or score > best:
        pipe.hset(key, "best_score", str(score))
    pipe.hincrby(key, "total_plays", 1)
    pipe.hset(key, "last_played", datetime.now(tz=UTC).isoformat())
    pipe.execute()

    logger.info("Score saved for %s/%s: %s", player_id, game_id, score)
    return get_scores(r=r, player_id=player_id, game_id=game_id)


def get_scores(*, r: redis.Redis, player_id: str, game_id: str) -> dict[str, str]:
    return dict(r.hgetall(_score_key(player_id, game_id)))


class RedisProgressStore:
    def __init__(self, *, r: redis.Redis, player_id: str) -> None:
        self._r = r
        self.player_id = player_id

    def load_current_level(self) -> int:
        return load_current_level(r=self._r, player_id=self.player_id)

    def save_current_level(self, level_number: int) -> None:
        save_current_level(r=self._r, player_id=self.player_id, level_number=level_number)


class RedisScoreSink:
    def __init__(self, *, r: redis.Redis, player_id: str) -> None:
        self._r = r
        self.player_id = player_id

    def record_score(self, game_id: str, score: int) -> None:
        record_score(r=self._r, player_id=self.player_id, game_id=game_id, score=score)
