"""Task-loop state machine using the transitions library.

States:
    running                 - iteration `iteration` of `budget` is next
    awaiting_clarification  - agent asked for a human; stop
    done                    - agent reported all work complete; stop
    failed                  - invocation error or corrupt state; stop
    exhausted               - budget spent without completion; stop

Usage:
    fsm = LoopFSM(budget=3)
    while fsm.state == "running":
        ...
        fsm.advance()
"""

import logging

from transitions import Machine

logger = logging.getLogger(__name__)


STATES = [
    "running",
    "awaiting_clarification",
    "done",
    "failed",
    "exhausted",
]

TERMINAL_STATES = frozenset(STATES) - {"running"}

# First matching transition wins, so the budget check goes before the fallthrough
TRANSITIONS = [
    {"trigger": "advance", "source": "running", "dest": "running",
     "conditions": "has_budget", "before": "next_iteration"},
    {"trigger": "advance", "source": "running", "dest": "exhausted"},

    {"trigger": "ask", "source": "running", "dest": "awaiting_clarification"},
    {"trigger": "complete", "source": "running", "dest": "done"},
    {"trigger": "fail", "source": "running", "dest": "failed"},
]


class LoopFSM:
    """State of one `sir rafael` run.

    A budget of 0 starts directly in `exhausted`, so no iteration runs.
    """

    def __init__(self, budget: int):
        if budget < 0:
            raise ValueError(f"budget must be non-negative, got {budget}")
        self.budget = budget
        self.iteration = 1

        self.machine = Machine(
            model=self,
            states=STATES,
            transitions=TRANSITIONS,
            initial="running" if budget > 0 else "exhausted",
            auto_transitions=False,
            send_event=True,
            after_state_change="on_state_change",
        )

    def has_budget(self, event) -> bool:
        return self.iteration < self.budget

    def next_iteration(self, event) -> None:
        self.iteration += 1

    def on_state_change(self, event) -> None:
        logger.info(
            f"[LOOP] {event.transition.source} -> {event.transition.dest} "
            f"({event.event.name}, iteration {self.iteration}/{self.budget})"
        )

    @property
    def finished(self) -> bool:
        return self.state in TERMINAL_STATES
