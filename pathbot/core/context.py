from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True, slots=True)
class BaseAgentContext:
    """Global, shared instructions for the level designer agent."""

    system_prompt: str
    metadata: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class LevelBrief:
    """Per-request overlay: which level we want and how hard it should be."""

    level_number: int
    grid_size: int
    obstacle_count: int
    theme: str = ""


@dataclass(frozen=True, slots=True)
class RenderedContext:
    """Final, merged context passed into the LLM agent."""

    system_prompt: str

    def as_messages(self) -> list[dict[str, str]]:
        return [{"role": "system", "content": self.system_prompt}]


def compose_context(*, base: BaseAgentContext, brief: LevelBrief) -> RenderedContext:
    parts: list[str] = []
    parts.append(base.system_prompt.strip())

    lines = [
        "LEVEL BRIEF:",
        f"- level_number: {brief.level_number}",
        f"- target_grid_size: {brief.grid_size}x{brief.grid_size}",
        f"- target_obstacles: {brief.obstacle_count}",
    ]
    if brief.theme.strip():
        lines.append(f"- theme: {brief.theme.strip()}")
    parts.append("\n".join(lines))

    system_prompt = "\n\n".join([p for p in parts if p.strip()]).strip()
    return RenderedContext(system_prompt=system_prompt)
