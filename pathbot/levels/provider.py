from __future__ import annotations

from collections.abc import Mapping
from typing import Any, Protocol

from pathbot.agents.base import Agent
from pathbot.agents.factory import create_default_agent
from pathbot.agents.level_designer import design_level_with_agent, make_level_brief
from pathbot.core.context import compose_context
from pathbot.prompts import designer_context

LevelPayloadLike = Mapping[str, Any] | str


class LevelProvider(Protocol):
    """External level source.

    May raise or return garbage; the loader validates and falls back.
    """

    async def request_level(self, level_number: int) -> LevelPayloadLike:  # pragma: no cover
        ...


class AgentLevelProvider:
    """Generates levels with an LLM agent following the difficulty curve."""

    def __init__(self, *, agent: Agent, max_attempts: int = 3) -> None:
        self.agent = agent
        self.max_attempts = max_attempts

    async def request_level(self, level_number: int) -> LevelPayloadLike:
        brief = make_level_brief(level_number)
        ctx = compose_context(base=designer_context(), brief=brief)
        designed = await design_level_with_agent(
            agent=self.agent,
            ctx=ctx,
            brief=brief,
            max_attempts=self.max_attempts,
        )
        return designed.raw


def create_default_level_provider() -> LevelProvider | None:
    """LLM-backed provider, or None (offline mode) when no LLM is configured."""

    agent = create_default_agent(name="level-designer")
    if agent is None:
        return None
    return AgentLevelProvider(agent=agent)
