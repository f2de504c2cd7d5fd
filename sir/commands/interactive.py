"""
sir interactive - Open an interactive agent session with the SIR menu.
"""

from sir.agents.cli_agent import run_interactive
from sir.lib.config import SirConfig
from sir.lib.store import ensure_initialized
from sir.runner.prompt_context import build_menu_prompt


def cmd_interactive(args, config: SirConfig) -> int:
    ensure_initialized(config)
    prompt = build_menu_prompt(config)
    return run_interactive(config.interactive_cmd, prompt, cwd=config.project_dir)
