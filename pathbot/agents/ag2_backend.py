from __future__ import annotations

import asyncio
import logging
from dataclasses import dataclass
from typing import Any

from autogen import ConversableAgent

from pathbot.agents.autogen_config import llm_config_from_env
from pathbot.agents.base import AgentAction
from pathbot.agents.json_schema import JsonSchema
from pathbot.core.context import RenderedContext

logger = logging.getLogger(__name__)


def _extract_last_content(messages: object) -> str:
    """Extract the last non-empty message content from AG2 chat history."""

    if not isinstance(messages, list):
        return ""

    for msg in reversed(messages):
        if isinstance(msg, dict):
            content = msg.get("content")
            if isinstance(content, str) and content.strip():
                return content.strip()
    return ""


@dataclass(slots=True)
class Ag2ChatAgent:
    """Single-turn AG2 agent used to draft levels.

    - Prompt context is built by our code (RenderedContext).
    - LLM transport/config is handled by AG2 (`autogen`), see autogen_config for env vars.

    AG2's `run` is blocking, so it is pushed to a worker thread to keep the
    event loop (and any running puzzle timers) responsive.
    """

    name: str
    model: str

    def _run_blocking(self, *, prompt: str, ctx: RenderedContext, structured_output: JsonSchema | None) -> str:
        llm_config = llm_config_from_env(default_model=self.model)

        agent = ConversableAgent(
            name=self.name,
            system_message=ctx.system_prompt,
            llm_config=llm_config,
            human_input_mode="NEVER",
        )

        # AG2 forwards unknown kwargs through to the OpenAI client.
        extra: dict[str, Any] = {}
        if structured_output is not None:
            extra["response_format"] = structured_output.as_response_format()

        result = agent.run(message=prompt, max_turns=1, **extra)
        result.process()

        text = _extract_last_content(list(result.messages))
        if not text and isinstance(result.summary, str):
            text = result.summary.strip()
        return text

    async def propose_action(
        self,
        *,
        prompt: str,
        ctx: RenderedContext,
        structured_output: JsonSchema | None = None,
    ) -> AgentAction:
        text = await asyncio.to_thread(
            self._run_blocking, prompt=prompt, ctx=ctx, structured_output=structured_output
        )
        logger.debug("Agent %s replied with %d chars", self.name, len(text))
        return AgentAction(
            kind="chat",
            content=text,
            metadata={"model": self.model, **({"structured": True} if structured_output else {})},
        )
