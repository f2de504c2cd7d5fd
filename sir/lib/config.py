"""
Configuration loader for SIR.

Builds one immutable SirConfig at startup from built-in defaults, an optional
<SIR_DIR>/sir.env file and the process environment (environment wins).
"""

import logging
import os
import re
import shlex
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from . import envparse
from .constants import (
    DEFAULT_ITERATIONS,
    ENV_FILENAME,
    LOCK_FILENAME,
    LOGS_DIRNAME,
    MEMORY_DIRNAME,
)

logger = logging.getLogger(__name__)

DEFAULT_TONE = "ultra-terse. drop fluff. ok bad grammar. no essays."

# Every key SIR reads from the environment or sir.env
CONFIG_KEYS = (
    "SIR_DIR", "MEM", "PRD", "TASKS", "PROG", "GUIDE", "STORIES", "INBOX", "PROCESSED",
    "AI_CMD", "AI_ARGS_DEFAULT", "AI_INTERACTIVE_CMD", "TONE", "ALLOW_QUESTIONS",
    "AI_TIMEOUT", "LOCK_TIMEOUT",
)

_ITERATIONS_PATTERN = re.compile(r'^[0-9]+$')


class ConfigurationError(Exception):
    """Bad argument or setting. Reported before any agent call."""
    pass


@dataclass(frozen=True)
class SirConfig:
    """Resolved settings for one SIR process."""
    project_dir: Path
    state_root: Path
    memory_dir: Path
    prd: Path
    tasks: Path
    progress: Path
    guidelines: Path
    stories: Path
    inbox: Path
    processed: Path
    ai_cmd: str = "claude"
    ai_args: tuple[str, ...] = ("-p",)
    interactive_cmd: tuple[str, ...] = ("claude",)
    tone: str = DEFAULT_TONE
    allow_questions: bool = True
    ai_timeout: int = 3600  # seconds, 0 = no timeout
    lock_timeout: int = 10

    @property
    def log_dir(self) -> Path:
        return self.state_root / LOGS_DIRNAME

    @property
    def lock_file(self) -> Path:
        return self.state_root / LOCK_FILENAME

    @property
    def agent_command(self) -> list[str]:
        """Default agent command line (prompt goes on stdin)."""
        return [self.ai_cmd, *self.ai_args]

    def tracked_files(self) -> dict[str, Path]:
        """Label -> path for every tracked state file, in display order."""
        return {
            "PRD": self.prd,
            "Tasks": self.tasks,
            "Progress": self.progress,
            "Guidelines": self.guidelines,
            "Stories": self.stories,
            "Inbox": self.inbox,
            "Processed": self.processed,
        }


def _resolve(base: Path, value: str) -> Path:
    path = Path(value).expanduser()
    return path if path.is_absolute() else base / path


def _parse_int(key: str, value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise ConfigurationError(f"{key} must be an integer, got '{value}'") from None
    if number < 0:
        raise ConfigurationError(f"{key} must not be negative, got {number}")
    return number


def _split_command(key: str, value: str) -> tuple[str, ...]:
    try:
        return tuple(shlex.split(value))
    except ValueError as e:
        raise ConfigurationError(f"{key}: {e} in '{value}'") from None


def load_config(environ: Optional[Mapping[str, str]] = None,
                project_dir: Optional[Path] = None) -> SirConfig:
    """Resolve SirConfig from defaults, sir.env and the environment.

    Args:
        environ: Environment mapping (defaults to os.environ)
        project_dir: Directory relative paths resolve against (defaults to cwd)

    Raises:
        ConfigurationError: on malformed sir.env or bad values
    """
    environ = os.environ if environ is None else environ
    base = (project_dir or Path.cwd()).resolve()

    state_root = _resolve(base, environ.get("SIR_DIR") or ".sir")

    env_file = state_root / ENV_FILENAME
    try:
        file_values = envparse.read_env_file(env_file)
    except ValueError as e:
        raise ConfigurationError(str(e)) from None
    if file_values:
        logger.debug(f"Loaded {len(file_values)} setting(s) from {env_file}")
        unknown = sorted(set(file_values) - set(CONFIG_KEYS))
        if unknown:
            logger.warning(f"Ignoring unknown keys in {env_file}: {', '.join(unknown)}")

    values = {k: v for k, v in file_values.items() if k in CONFIG_KEYS}
    values.update({k: environ[k] for k in CONFIG_KEYS if environ.get(k)})

    memory_dir = _resolve(base, values["MEM"]) if values.get("MEM") else state_root / MEMORY_DIRNAME

    def path_for(key: str, default_name: str) -> Path:
        return _resolve(base, values[key]) if values.get(key) else memory_dir / default_name

    try:
        allow_questions = envparse.parse_flag(values.get("ALLOW_QUESTIONS", "true"))
    except ValueError as e:
        raise ConfigurationError(f"ALLOW_QUESTIONS: {e}") from None

    ai_cmd = values.get("AI_CMD", "claude").strip()
    if not ai_cmd:
        raise ConfigurationError("AI_CMD must not be empty")

    interactive_cmd = _split_command("AI_INTERACTIVE_CMD", values.get("AI_INTERACTIVE_CMD", "claude"))
    if not interactive_cmd:
        raise ConfigurationError("AI_INTERACTIVE_CMD must not be empty")

    return SirConfig(
        project_dir=base,
        state_root=state_root,
        memory_dir=memory_dir,
        prd=path_for("PRD", "PRD.md"),
        tasks=path_for("TASKS", "tasks.json"),
        progress=path_for("PROG", "progress.txt"),
        guidelines=path_for("GUIDE", "GUIDELINES.md"),
        stories=path_for("STORIES", "stories.md"),
        inbox=path_for("INBOX", "inbox"),
        processed=path_for("PROCESSED", "processed.txt"),
        ai_cmd=ai_cmd,
        ai_args=_split_command("AI_ARGS_DEFAULT", values.get("AI_ARGS_DEFAULT", "-p")),
        interactive_cmd=interactive_cmd,
        tone=values.get("TONE", DEFAULT_TONE),
        allow_questions=allow_questions,
        ai_timeout=_parse_int("AI_TIMEOUT", values.get("AI_TIMEOUT", "3600")),
        lock_timeout=_parse_int("LOCK_TIMEOUT", values.get("LOCK_TIMEOUT", "10")),
    )


def parse_iterations(value: Optional[str]) -> int:
    """Parse the --loop/--iterations budget.

    None means the flag was not given. Only plain non-negative integers are accepted.

    Raises:
        ConfigurationError: if value is not a non-negative integer
    """
    if value is None:
        return DEFAULT_ITERATIONS
    value = str(value).strip()
    if not _ITERATIONS_PATTERN.match(value):
        raise ConfigurationError(f"loop must be a non-negative integer, got '{value}'")
    return int(value)
