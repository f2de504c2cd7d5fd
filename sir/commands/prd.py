"""
sir prd - Create the PRD and task list from a prompt or a directory scan.
"""

from pathlib import Path

from sir.agents.cli_agent import Agent
from sir.lib.config import ConfigurationError, SirConfig
from sir.lib.store import ensure_initialized
from sir.runner.stages import Outcome, run_command


def resolve_scan_dir(config: SirConfig, scan_dir: str | None) -> Path | None:
    """Resolve --dir against the project directory.

    Raises:
        ConfigurationError: If the directory doesn't exist
    """
    if not scan_dir:
        return None
    path = Path(scan_dir).expanduser()
    if not path.is_absolute():
        path = config.project_dir / path
    if not path.is_dir():
        raise ConfigurationError(f"dir not found: {scan_dir}")
    return path


def cmd_prd(args, config: SirConfig, agent: Agent) -> int:
    if not args.prompt and not args.dir:
        raise ConfigurationError("need --prompt or --dir")
    scan_dir = resolve_scan_dir(config, args.dir)

    ensure_initialized(config)
    result = run_command(config, agent, "prd", {"prompt": args.prompt, "scan_dir": scan_dir})

    if result.outcome is Outcome.SUCCESS:
        print(f"PRD: {config.prd}")
        print(f"Tasks: {config.tasks}")
        print("Next: sir rafael --loop N")
    return result.exit_code
