from __future__ import annotations

import fakeredis
import pytest

from pathbot.store import (
    RedisProgressStore,
    RedisScoreSink,
    get_scores,
    load_current_level,
    record_score,
    save_current_level,
)


@pytest.fixture()
def r() -> fakeredis.FakeRedis:
    return fakeredis.FakeRedis(decode_responses=True)


def test_current_level_defaults_to_one(r: fakeredis.FakeRedis) -> None:
    assert load_current_level(r=r, player_id="p1") == 1


def test_current_level_round_trip(r: fakeredis.FakeRedis) -> None:
    save_current_level(r=r, player_id="p1", level_number=5)
    assert load_current_level(r=r, player_id="p1") == 5
    # Players don't share progress.
    assert load_current_level(r=r, player_id="p2") == 1


@pytest.mark.parametrize("stored", ["banana", "0", "-4"])
def test_unusable_current_level_means_one(r: fakeredis.FakeRedis, stored: str) -> None:
    r.set("pathbot:player:p1:current_level", stored)
    assert load_current_level(r=r, player_id="p1") == 1


def test_save_rejects_levels_below_one(r: fakeredis.FakeRedis) -> None:
    with pytest.raises(ValueError):
        save_current_level(r=r, player_id="p1", level_number=0)


def test_record_score_keeps_best_and_counts_plays(r: fakeredis.FakeRedis) -> None:
    record_score(r=r, player_id="p1", game_id="sequencing", score=30)
    record_score(r=r, player_id="p1", game_id="sequencing", score=10)
    scores = record_score(r=r, player_id="p1", game_id="sequencing", score=20)

    assert scores["best_score"] == "30"
    assert scores["total_plays"] == "3"
    assert scores["last_played"]


def test_scores_are_per_game(r: fakeredis.FakeRedis) -> None:
    record_score(r=r, player_id="p1", game_id="sequencing", score=10)
    assert get_scores(r=r, player_id="p1", game_id="other") == {}


def test_redis_adapters_bind_the_player(r: fakeredis.FakeRedis) -> None:
    progress = RedisProgressStore(r=r, player_id="kid")
    sink = RedisScoreSink(r=r, player_id="kid")

    progress.save_current_level(4)
    sink.record_score("sequencing", 40)

    assert progress.load_current_level() == 4
    assert get_scores(r=r, player_id="kid", game_id="sequencing")["best_score"] == "40"
