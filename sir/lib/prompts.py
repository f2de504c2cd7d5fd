"""
Markdown prompt templates shipped in sir/prompts/.

A template is plain markdown with str.format() placeholders. Doubled braces
stay literal, which is how the PRD template carries its JSON example. A
leading <!-- ... --> block documents the variables and is removed on load.
"""

import logging
import re
import string
from functools import lru_cache
from pathlib import Path

logger = logging.getLogger(__name__)

PROMPTS_DIR = Path(__file__).resolve().parent.parent / "prompts"

_COMMENT_BLOCK = re.compile(r'<!--.*?-->\s*', re.DOTALL)


class PromptError(Exception):
    """A template is missing or could not be filled in."""
    pass


@lru_cache(maxsize=None)
def load_prompt(name: str) -> str:
    """Template text for `name`, comments removed (cached)."""
    path = PROMPTS_DIR / f"{name}.md"
    try:
        raw = path.read_text()
    except FileNotFoundError:
        raise PromptError(f"no prompt template '{name}' ({path})") from None

    logger.debug(f"Loaded prompt template {path.name}")
    return _COMMENT_BLOCK.sub('', raw).strip() + "\n"


def template_variables(name: str) -> set[str]:
    """Placeholder names used by a template."""
    return {
        field.split('.')[0].split('[')[0]
        for _, field, _, _ in string.Formatter().parse(load_prompt(name))
        if field
    }


def render_prompt(name: str, **values) -> str:
    """
    Fill a template.

    Raises:
        PromptError: If the template is missing or any placeholder has no value
    """
    missing = template_variables(name) - set(values)
    if missing:
        raise PromptError(
            f"Missing required variable(s) {', '.join(sorted(missing))} for prompt '{name}'"
        )
    return load_prompt(name).format(**values)


def clear_cache():
    load_prompt.cache_clear()
