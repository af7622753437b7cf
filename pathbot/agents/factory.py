from __future__ import annotations

from typing import cast

from pathbot.agents.ag2_backend import Ag2ChatAgent
from pathbot.agents.autogen_config import settings_from_env
from pathbot.agents.base import Agent


def create_default_agent(*, name: str) -> Agent | None:
    """Create the default LLM-backed agent, or None when no LLM is configured.

    Uses AG2/autogen and reads model configuration from env.
    """

    settings = settings_from_env()
    if not settings.configured:
        return None
    return cast(Agent, Ag2ChatAgent(name=name, model=settings.model))
