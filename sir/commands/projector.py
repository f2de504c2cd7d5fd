"""
sir projector - Fold new inbox files into the PRD, stories and tasks.
"""

from sir.agents.cli_agent import Agent
from sir.lib.config import SirConfig
from sir.lib.store import ensure_initialized, new_inbox_files
from sir.runner.stages import Outcome, run_command


def cmd_projector(args, config: SirConfig, agent: Agent) -> int:
    ensure_initialized(config)

    new_files = new_inbox_files(config)
    if not new_files:
        print(f"Inbox empty: nothing new in {config.inbox}")
        return 0

    print(f"Processing {len(new_files)} new inbox file(s):")
    for name in new_files:
        print(f"  {name}")
    print()

    result = run_command(config, agent, "projector", {"new_files": new_files})

    if result.outcome is Outcome.SUCCESS:
        remaining = new_inbox_files(config)
        if remaining:
            print(f"WARNING: {len(remaining)} file(s) not marked processed: {', '.join(remaining)}")
    return result.exit_code
