from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Protocol

from pathbot.agents.json_schema import JsonSchema
from pathbot.core.context import RenderedContext


@dataclass(frozen=True, slots=True)
class AgentAction:
    """One raw reply from an LLM agent. `content` is untrusted text."""

    kind: str
    content: str
    metadata: dict[str, Any] = field(default_factory=dict)


class Agent(Protocol):
    name: str

    async def propose_action(
        self,
        *,
        prompt: str,
        ctx: RenderedContext,
        structured_output: JsonSchema | None = None,
    ) -> AgentAction:  # pragma: no cover
        ...
