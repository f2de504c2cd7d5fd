"""
The rafael task loop: one task per agent call, up to a budget of calls.
"""

import logging
import sys
from dataclasses import dataclass
from typing import TextIO

from sir.agents.cli_agent import Agent
from sir.lib.config import SirConfig
from sir.lib.constants import EXIT_BLOCKED, EXIT_ERROR, EXIT_OK
from sir.pm.tasks import CorruptState, load_tasks, next_pending_task
from sir.runner.fsm import LoopFSM
from sir.runner.prompt_context import build_prompt
from sir.runner.stages import Outcome, run_stage

logger = logging.getLogger(__name__)

EXIT_CODE_FOR_STATE = {
    "done": EXIT_OK,
    "exhausted": EXIT_OK,
    "awaiting_clarification": EXIT_BLOCKED,
    "failed": EXIT_ERROR,
}


@dataclass
class LoopResult:
    state: str
    invocations: int
    last_output: str = ""
    error: str = ""

    @property
    def exit_code(self) -> int:
        return EXIT_CODE_FOR_STATE[self.state]


def run_task_loop(config: SirConfig, agent: Agent, budget: int, out: TextIO = None) -> LoopResult:
    """Run up to `budget` single-task iterations.

    Stops early on invocation failure, corrupt tasks.json, a blocking
    sentinel or the completion sentinel. Iterations never overlap.
    """
    out = out or sys.stdout
    fsm = LoopFSM(budget)
    invocations = 0
    last_output = ""

    while not fsm.finished:
        print(f"--- rafael iteration {fsm.iteration}/{budget} ---", file=out)

        try:
            suggested = next_pending_task(load_tasks(config))
        except CorruptState as e:
            print(f"ERROR: {e}", file=sys.stderr)
            fsm.fail()
            return LoopResult(fsm.state, invocations, last_output, str(e))

        prompt = build_prompt("rafael", {"suggested": suggested}, config)
        result = run_stage(agent, prompt, label=f"rafael-{fsm.iteration}", out=out)
        invocations += 1
        last_output = result.output

        if result.outcome is Outcome.FAILED:
            fsm.fail()
            return LoopResult(fsm.state, invocations, last_output, result.error or "")
        if result.outcome is Outcome.BLOCKED:
            fsm.ask()
        elif result.outcome is Outcome.COMPLETE:
            fsm.complete()
        else:
            fsm.advance()

    return LoopResult(fsm.state, invocations, last_output)
