"""Prompt builders, one per SIR command.

Each builder returns only the instruction block; build_prompt() prepends the
shared context. All of them are pure given config and `now`.
"""

from datetime import datetime
from pathlib import Path
from typing import Optional

from sir.lib.config import SirConfig
from sir.lib.constants import SENTINEL_COMPLETE, TIMESTAMP_FORMAT
from sir.lib.context import build_context
from sir.lib.prompts import render_prompt
from sir.pm.models import Task

NONE = "none"

MENU_ENTRIES = [
    ("prd", "create PRD + tasks from a prompt or a directory scan"),
    ("rafael", "implement the next task, one at a time"),
    ("guidar", "write project guidelines"),
    ("storyteller", "write user stories from the PRD"),
    ("projector", "process new inbox files"),
]


def timestamp() -> str:
    return datetime.now().strftime(TIMESTAMP_FORMAT)


def _or_none(value) -> str:
    return str(value) if value else NONE


def build_prd_prompt(config: SirConfig, prompt: Optional[str], scan_dir: Optional[Path],
                     now: str) -> str:
    return render_prompt(
        "prd",
        prompt=_or_none(prompt),
        scan_dir=_or_none(scan_dir),
        prd_path=config.prd,
        tasks_path=config.tasks,
        progress_path=config.progress,
        now=now,
    )


def build_rafael_prompt(config: SirConfig, suggested: Optional[Task], now: str) -> str:
    suggested_task = f"{suggested.id} ({suggested.title})" if suggested else NONE
    return render_prompt(
        "rafael",
        prd_path=config.prd,
        tasks_path=config.tasks,
        progress_path=config.progress,
        guidelines_path=config.guidelines,
        suggested_task=suggested_task,
        complete_token=SENTINEL_COMPLETE,
        now=now,
    )


def build_guidar_prompt(config: SirConfig, prompt: Optional[str], scan_dir: Optional[Path],
                        now: str) -> str:
    return render_prompt(
        "guidar",
        prompt=_or_none(prompt),
        scan_dir=_or_none(scan_dir),
        guidelines_path=config.guidelines,
        progress_path=config.progress,
        now=now,
    )


def build_storyteller_prompt(config: SirConfig, prompt: Optional[str], now: str) -> str:
    return render_prompt(
        "storyteller",
        prompt=_or_none(prompt),
        prd_path=config.prd,
        tasks_path=config.tasks,
        stories_path=config.stories,
        progress_path=config.progress,
        now=now,
    )


def build_projector_prompt(config: SirConfig, new_files: list[str], now: str) -> str:
    listing = "\n".join(f"- {name}" for name in new_files) or f"- {NONE}"
    return render_prompt(
        "projector",
        inbox_path=config.inbox,
        new_files=listing,
        processed_path=config.processed,
        prd_path=config.prd,
        tasks_path=config.tasks,
        stories_path=config.stories,
        progress_path=config.progress,
        now=now,
    )


def build_menu_prompt(config: SirConfig) -> str:
    commands = "\n".join(
        f"{i}. {name}: {summary}" for i, (name, summary) in enumerate(MENU_ENTRIES, 1)
    )
    return build_context(config) + "\n" + render_prompt("menu", commands=commands)


def build_prompt(command: str, args: dict, config: SirConfig, now: Optional[str] = None) -> str:
    """Full prompt (context + instructions) for a command.

    Args:
        command: prd, rafael, guidar, storyteller or projector
        args: Command inputs: prompt, scan_dir, suggested, new_files
        config: Resolved configuration
        now: Timestamp to interpolate (defaults to current time)

    Raises:
        ValueError: If command is unknown
    """
    now = now or timestamp()

    if command == "prd":
        body = build_prd_prompt(config, args.get("prompt"), args.get("scan_dir"), now)
    elif command == "rafael":
        body = build_rafael_prompt(config, args.get("suggested"), now)
    elif command == "guidar":
        body = build_guidar_prompt(config, args.get("prompt"), args.get("scan_dir"), now)
    elif command == "storyteller":
        body = build_storyteller_prompt(config, args.get("prompt"), now)
    elif command == "projector":
        body = build_projector_prompt(config, args.get("new_files", []), now)
    else:
        raise ValueError(f"Unknown command: {command}")

    return build_context(config) + "\n" + body
