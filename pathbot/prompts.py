from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pathbot.core.context import BaseAgentContext

PROMPT_DIR = Path(__file__).resolve().parent / "prompt_texts"
LEVEL_DESIGNER_PROMPT = "level_designer.txt"


class PromptLoadError(RuntimeError):
    pass


@lru_cache(maxsize=None)
def load_prompt(name: str) -> str:
    """Read one of the prompt files packaged under `pathbot/prompt_texts/`."""

    path = PROMPT_DIR / name
    if not path.is_file():
        raise PromptLoadError(f"Prompt not found: {path}")
    return path.read_text(encoding="utf-8").strip() + "\n"


def designer_context(*, extra_rules: str = "") -> BaseAgentContext:
    """Level designer rules, optionally preceded by deployment-specific instructions."""

    sections = [extra_rules.strip(), load_prompt(LEVEL_DESIGNER_PROMPT).strip()]
    return BaseAgentContext(
        system_prompt="\n\n".join(s for s in sections if s),
        metadata={"prompt": LEVEL_DESIGNER_PROMPT},
    )
