"""
Read-side access to tasks.json.

The agent rewrites this file at will, so every read is validated and
anything malformed raises CorruptState instead of being guessed at.
"""

import logging
from typing import Optional

from sir.lib.config import SirConfig
from sir.lib.validate import ValidationError, validate_file
from sir.pm.models import Task

logger = logging.getLogger(__name__)


class CorruptState(Exception):
    """A state file failed structural validation."""
    pass


def load_tasks(config: SirConfig) -> list[Task]:
    """Load and validate the task list.

    Raises:
        CorruptState: If the file is missing, not JSON, fails the schema
            or repeats a task id
    """
    try:
        data = validate_file(config.tasks, "tasks")
    except ValidationError as e:
        raise CorruptState(f"{config.tasks}: {e}") from None

    seen = set()
    duplicates = []
    for record in data["tasks"]:
        if record["id"] in seen and record["id"] not in duplicates:
            duplicates.append(record["id"])
        seen.add(record["id"])
    if duplicates:
        raise CorruptState(f"{config.tasks}: duplicate task id(s): {', '.join(duplicates)}")

    tasks = [Task.from_dict(record) for record in data["tasks"]]
    logger.debug(f"Loaded {len(tasks)} task(s) from {config.tasks}")
    return tasks


def next_pending_task(tasks: list[Task]) -> Optional[Task]:
    """First pending task in list order.

    This is a deterministic fallback only. The agent picks the real next task.
    """
    for task in tasks:
        if task.is_pending:
            return task
    return None


def summarize(tasks: list[Task]) -> dict:
    """Counts for status output."""
    return {
        "total": len(tasks),
        "passing": sum(1 for t in tasks if t.passes),
        "blocked": sum(1 for t in tasks if not t.passes and t.status == "blocked"),
    }
