"""
Shared context preamble for every agent call.

Lists where the state files live and the house rules the agent must follow.
"""

from sir.lib.config import SirConfig
from sir.lib.constants import SENTINEL_ERROR, SENTINEL_QUESTION
from sir.lib.prompts import render_prompt

__all__ = ["build_context", "clarification_rule"]


def clarification_rule(config: SirConfig) -> str:
    """Rule line telling the agent whether it may stop to ask questions."""
    if config.allow_questions:
        return (
            f"If something is unclear, output questions wrapped in "
            f"{SENTINEL_QUESTION}...</question> and stop."
        )
    return (
        f"Do not ask questions. Make reasonable assumptions and record them in "
        f"{config.progress}."
    )


def build_context(config: SirConfig) -> str:
    """Render the context block. Pure function of config."""
    files = "\n".join(
        f"- {label}: {path}" for label, path in config.tracked_files().items()
    )
    return render_prompt(
        "context",
        files=files,
        tone=config.tone,
        blocked_token=SENTINEL_ERROR,
        clarification_rule=clarification_rule(config),
    )
