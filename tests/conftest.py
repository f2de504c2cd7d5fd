"""Shared fixtures: a scripted in-memory agent and an isolated config."""

import pytest

from sir.agents.cli_agent import Agent, AgentInvocationError, AgentResult
from sir.lib.config import load_config


class ScriptedAgent(Agent):
    """Returns scripted (output, exit_code) pairs in order and records prompts.

    A bare string means exit code 0. Once the script runs out, the last
    entry repeats.
    """

    def __init__(self, *script):
        self.script = [s if isinstance(s, tuple) else (s, 0) for s in script] or [("", 0)]
        self.prompts = []
        self.labels = []

    @property
    def calls(self) -> int:
        return len(self.prompts)

    def invoke(self, prompt, label="agent"):
        self.prompts.append(prompt)
        self.labels.append(label)
        output, exit_code = self.script[min(len(self.prompts), len(self.script)) - 1]
        if exit_code != 0:
            raise AgentInvocationError(exit_code, "scripted failure", output)
        return AgentResult(output=output)


@pytest.fixture
def environ(tmp_path):
    """Environment pointing SIR at a temp state root."""
    return {"SIR_DIR": str(tmp_path / ".sir"), "LOCK_TIMEOUT": "0"}


@pytest.fixture
def config(tmp_path, environ):
    return load_config(environ, project_dir=tmp_path)


@pytest.fixture
def scripted_agent():
    """Factory: scripted_agent("out1", ("boom", 2), ...)."""
    return ScriptedAgent
