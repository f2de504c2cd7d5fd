"""
Data models for the task list.
"""

from dataclasses import dataclass, field
from typing import Optional


@dataclass
class Task:
    """One unit of work from tasks.json.

    The agent owns these records; SIR only reads them.
    """
    id: str                                    # T001
    title: str
    passes: bool                               # set by the agent after verification
    description: str = ""
    steps: list[str] = field(default_factory=list)
    status: Optional[str] = None               # todo, doing, blocked, done
    deps: list[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: dict) -> "Task":
        return cls(
            id=data["id"],
            title=data["title"],
            passes=data["passes"],
            description=data.get("description", data.get("desc", "")),
            steps=list(data.get("steps", [])),
            status=data.get("status"),
            deps=list(data.get("deps", [])),
        )

    @property
    def is_pending(self) -> bool:
        return not self.passes and self.status in (None, "todo", "doing")
