"""
PM (project management) module for SIR.

Read-side view of the task list the agent maintains.
"""

from sir.pm.models import Task
from sir.pm.tasks import (
    CorruptState,
    load_tasks,
    next_pending_task,
    summarize,
)

__all__ = [
    "Task",
    "CorruptState",
    "load_tasks",
    "next_pending_task",
    "summarize",
]
