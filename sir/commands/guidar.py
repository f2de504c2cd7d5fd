"""
sir guidar - Write project guidelines.
"""

from sir.agents.cli_agent import Agent
from sir.commands.prd import resolve_scan_dir
from sir.lib.config import SirConfig
from sir.lib.store import ensure_initialized
from sir.runner.stages import Outcome, run_command


def cmd_guidar(args, config: SirConfig, agent: Agent) -> int:
    scan_dir = resolve_scan_dir(config, args.dir)

    ensure_initialized(config)
    result = run_command(config, agent, "guidar", {"prompt": args.prompt, "scan_dir": scan_dir})

    if result.outcome is Outcome.SUCCESS:
        print(f"Guidelines: {config.guidelines}")
    return result.exit_code
