from __future__ import annotations

import pytest

from pathbot.agents.autogen_config import settings_from_env as llm_settings_from_env
from pathbot.agents.factory import create_default_agent
from pathbot.config import EngineSettings, log_level_from_env, settings_from_env


def test_engine_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PATHBOT_START_DELAY_MS", raising=False)
    monkeypatch.delenv("PATHBOT_TICK_INTERVAL_MS", raising=False)

    s = settings_from_env()
    assert s == EngineSettings()
    assert s.start_delay_s == pytest.approx(0.5)
    assert s.tick_interval_s == pytest.approx(0.6)
    assert s.game_id == "sequencing"


def test_engine_timings_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PATHBOT_START_DELAY_MS", "0")
    monkeypatch.setenv("PATHBOT_TICK_INTERVAL_MS", "250")

    s = settings_from_env()
    assert s.start_delay_s == 0
    assert s.tick_interval_s == pytest.approx(0.25)


def test_negative_timings_are_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("PATHBOT_TICK_INTERVAL_MS", "-1")
    with pytest.raises(ValueError):
        settings_from_env()


def test_log_level_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PATHBOT_LOG_LEVEL", raising=False)
    assert log_level_from_env() == "INFO"
    monkeypatch.setenv("PATHBOT_LOG_LEVEL", "debug")
    assert log_level_from_env() == "DEBUG"


def test_no_agent_without_llm_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("OPENAI_API_KEY", "OPENAI_BASE_URL", "OAI_CONFIG_LIST"):
        monkeypatch.delenv(name, raising=False)

    assert llm_settings_from_env().configured is False
    assert create_default_agent(name="level-designer") is None


def test_llm_settings_read_model(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("OPENAI_API_KEY", "sk-test")
    monkeypatch.setenv("OPENAI_MODEL", "gpt-4o")
    monkeypatch.delenv("OAI_CONFIG_LIST", raising=False)

    s = llm_settings_from_env()
    assert s.configured
    assert s.model == "gpt-4o"
    assert s.config_list_path is None


def test_session_idle_ttl_from_env(monkeypatch: pytest.MonkeyPatch) -> None:
    from pathbot.config import session_idle_ttl_from_env

    monkeypatch.delenv("PATHBOT_SESSION_IDLE_TTL_S", raising=False)
    assert session_idle_ttl_from_env() == 1800

    monkeypatch.setenv("PATHBOT_SESSION_IDLE_TTL_S", "0")
    assert session_idle_ttl_from_env() == 0

    monkeypatch.setenv("PATHBOT_SESSION_IDLE_TTL_S", "-5")
    with pytest.raises(ValueError):
        session_idle_ttl_from_env()
