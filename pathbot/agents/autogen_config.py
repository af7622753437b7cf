from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from autogen import LLMConfig

DEFAULT_MODEL = "gpt-4o-mini"


@dataclass(frozen=True, slots=True)
class OpenAICompatibleSettings:
    model: str
    base_url: str | None
    api_key: str | None
    # Optional AG2 OAI_CONFIG_LIST file; wins over the individual variables when set.
    config_list_path: Path | None = None

    @property
    def configured(self) -> bool:
        return bool(self.api_key or self.base_url or self.config_list_path)


def settings_from_env(*, default_model: str = DEFAULT_MODEL) -> OpenAICompatibleSettings:
    config_list = os.environ.get("OAI_CONFIG_LIST")
    return OpenAICompatibleSettings(
        model=os.environ.get("OPENAI_MODEL", default_model),
        # For Ollama, typically http://127.0.0.1:11434/v1
        base_url=os.environ.get("OPENAI_BASE_URL") or None,
        api_key=os.environ.get("OPENAI_API_KEY") or None,
        config_list_path=Path(config_list) if config_list else None,
    )


def llm_config_from_env(*, default_model: str = DEFAULT_MODEL) -> LLMConfig:
    s = settings_from_env(default_model=default_model)

    if s.config_list_path is not None:
        # Matches AG2 docs: LLMConfig.from_json(path="OAI_CONFIG_LIST")
        return LLMConfig.from_json(path=str(s.config_list_path))

    # Many OpenAI-compatible servers ignore the key but the SDK requires one.
    api_key = s.api_key or ("ollama" if s.base_url else None)

    if not api_key:
        raise RuntimeError(
            "Set OPENAI_API_KEY for hosted OpenAI, or set OPENAI_BASE_URL for a local OpenAI-compatible server"
        )

    config: dict[str, Any] = {"model": s.model, "api_key": api_key}
    if s.base_url:
        config["base_url"] = s.base_url

    return LLMConfig(config_list=[config])
