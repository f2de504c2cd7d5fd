"""
Per-command agent configuration.

Loads <SIR_DIR>/agents.yaml to pick the CLI used for each SIR command.
Without the file every command uses AI_CMD + AI_ARGS_DEFAULT.

Example agents.yaml:

    commands:
      rafael: claude -p --dangerously-skip-permissions
      projector: codex exec -

The prompt is always passed on stdin, never as an argument.
"""

import logging
import shlex
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

import yaml

from sir.lib.config import SirConfig
from sir.lib.constants import AGENTS_FILENAME

logger = logging.getLogger(__name__)

# Commands that hand a prompt to the agent
AGENT_COMMANDS = ("prd", "rafael", "guidar", "storyteller", "projector")


@dataclass
class AgentsConfig:
    """Command name -> agent command line overrides from agents.yaml."""
    commands: dict[str, str] = field(default_factory=dict)


def load_agents_config(state_root: Optional[Path]) -> AgentsConfig:
    """Load agents.yaml from the state root.

    Missing or unparseable files yield an empty config (defaults apply).
    """
    if state_root is None:
        return AgentsConfig()

    config_path = state_root / AGENTS_FILENAME
    if not config_path.exists():
        return AgentsConfig()

    try:
        data = yaml.safe_load(config_path.read_text())
    except yaml.YAMLError as e:
        logger.warning(f"Failed to parse {config_path}: {e}")
        return AgentsConfig()

    if not isinstance(data, dict) or not isinstance(data.get("commands"), dict):
        logger.warning(f"{config_path} has no 'commands' mapping, using defaults")
        return AgentsConfig()

    commands = {}
    for name, cmd in data["commands"].items():
        if name not in AGENT_COMMANDS:
            logger.warning(f"Ignoring unknown command '{name}' in {config_path}")
            continue
        if not isinstance(cmd, str) or not cmd.strip():
            logger.warning(f"Ignoring empty command line for '{name}' in {config_path}")
            continue
        try:
            shlex.split(cmd)
        except ValueError as e:
            logger.warning(f"Ignoring unparseable command line for '{name}' in {config_path}: {e}")
            continue
        commands[name] = cmd

    return AgentsConfig(commands=commands)


def get_command_line(agents: AgentsConfig, config: SirConfig, command: str) -> list[str]:
    """Build the agent argv for a SIR command.

    Raises:
        ValueError: If command is not one that invokes the agent
    """
    if command not in AGENT_COMMANDS:
        raise ValueError(f"Unknown command: {command}")

    override = agents.commands.get(command)
    if override:
        return shlex.split(override)
    return config.agent_command
