"""
sir rafael - Implement tasks one by one until done, blocked or out of budget.
"""

from sir.agents.cli_agent import Agent
from sir.lib.config import SirConfig, parse_iterations
from sir.lib.store import ensure_initialized
from sir.runner.loop import run_task_loop


def cmd_rafael(args, config: SirConfig, agent: Agent) -> int:
    budget = parse_iterations(args.loop)

    ensure_initialized(config)
    result = run_task_loop(config, agent, budget)

    if result.state == "done":
        print("PRD complete, exiting.")
    elif result.state == "awaiting_clarification":
        print(f"Agent is waiting for clarification after {result.invocations} iteration(s).")
        print("Answer the question (e.g. in the PRD or progress log), then re-run.")
    elif result.state == "exhausted":
        print(f"Ran {result.invocations} iteration(s) without completion. Re-run to continue.")
    else:
        print(f"Stopped after {result.invocations} iteration(s): {result.error}")

    return result.exit_code
