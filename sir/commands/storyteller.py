"""
sir storyteller - Write user stories from the PRD.
"""

from sir.agents.cli_agent import Agent
from sir.lib.config import SirConfig
from sir.lib.store import ensure_initialized
from sir.runner.stages import Outcome, run_command


def cmd_storyteller(args, config: SirConfig, agent: Agent) -> int:
    ensure_initialized(config)

    if not args.prompt and not config.prd.read_text().strip():
        print(f"WARNING: {config.prd} is empty; run 'sir prd' first for better stories.")

    result = run_command(config, agent, "storyteller", {"prompt": args.prompt})

    if result.outcome is Outcome.SUCCESS:
        print(f"Stories: {config.stories}")
    return result.exit_code
