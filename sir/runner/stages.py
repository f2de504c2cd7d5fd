"""
Single agent round-trip and outcome classification.

Every command ends up here: send the prompt, relay the text, decide whether
the agent succeeded, asked for a human, or failed.
"""

import logging
import sys
from dataclasses import dataclass
from enum import Enum
from typing import Optional, TextIO

from sir.agents.cli_agent import Agent, AgentInvocationError
from sir.lib.config import SirConfig
from sir.lib.constants import (
    BLOCKED_SENTINELS,
    EXIT_BLOCKED,
    EXIT_ERROR,
    EXIT_OK,
    SENTINEL_COMPLETE,
)
from sir.runner.prompt_context import build_prompt

logger = logging.getLogger(__name__)


class Outcome(Enum):
    SUCCESS = "success"
    COMPLETE = "complete"
    BLOCKED = "blocked"  # agent needs a human (question or <error>)
    FAILED = "failed"

    @property
    def exit_code(self) -> int:
        if self is Outcome.FAILED:
            return EXIT_ERROR
        if self is Outcome.BLOCKED:
            return EXIT_BLOCKED
        return EXIT_OK


def classify_output(output: str) -> Outcome:
    """Scan agent text for sentinels.

    Blocking sentinels win over completion so a half-finished answer that
    also asks a question stops for the human. No sentinel means SUCCESS.
    """
    if any(token in output for token in BLOCKED_SENTINELS):
        return Outcome.BLOCKED
    if SENTINEL_COMPLETE in output:
        return Outcome.COMPLETE
    return Outcome.SUCCESS


@dataclass
class StageResult:
    outcome: Outcome
    output: str = ""
    error: Optional[str] = None

    @property
    def exit_code(self) -> int:
        return self.outcome.exit_code


def run_stage(agent: Agent, prompt: str, label: str, out: TextIO = None) -> StageResult:
    """Invoke the agent once, print its output, classify the result.

    AgentInvocationError is reported on stderr and returned as FAILED;
    nothing the agent already wrote to disk is rolled back.
    """
    out = out or sys.stdout

    try:
        result = agent.invoke(prompt, label=label)
    except AgentInvocationError as e:
        logger.warning(f"{label}: {e}")
        if e.output:
            print(e.output, file=out)
        print(f"ERROR: {e}", file=sys.stderr)
        return StageResult(Outcome.FAILED, e.output, str(e))

    print(result.output, file=out)
    if result.stderr.strip():
        print(result.stderr.rstrip(), file=sys.stderr)
    outcome = classify_output(result.output)
    logger.info(f"{label}: {outcome.value}")
    return StageResult(outcome, result.output)


def run_command(config: SirConfig, agent: Agent, command: str, inputs: dict,
                out: TextIO = None) -> StageResult:
    """One build-prompt / invoke / relay cycle for a non-looping command."""
    out = out or sys.stdout
    prompt = build_prompt(command, inputs, config)
    result = run_stage(agent, prompt, label=command, out=out)

    if result.outcome is Outcome.BLOCKED:
        print(f"{command}: agent is waiting for clarification. Answer, then re-run.", file=out)
    return result
