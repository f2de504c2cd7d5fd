"""
Agent integration for SIR.

The agent is an external CLI (claude by default). SIR pipes the full prompt
on stdin and relays whatever text comes back. Passing the prompt via stdin
avoids CLI argument length and quoting limits.
"""

import logging
import shutil
import subprocess
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Optional, Sequence

logger = logging.getLogger(__name__)


class AgentUnavailable(Exception):
    """The configured agent executable can't be found or started."""
    pass


class AgentInvocationError(Exception):
    """The agent ran but exited non-zero (or timed out)."""

    def __init__(self, exit_code: int, stderr: str = "", output: str = ""):
        self.exit_code = exit_code
        self.stderr = stderr
        self.output = output
        detail = stderr.strip() or output.strip() or "(no output)"
        super().__init__(f"agent failed (exit {exit_code}): {detail}")


@dataclass
class AgentResult:
    output: str
    exit_code: int = 0
    stderr: str = ""


class Agent:
    """Anything that turns a prompt into text."""

    def invoke(self, prompt: str, label: str = "agent") -> AgentResult:
        """Run one prompt.

        Raises:
            AgentInvocationError: If the call fails
        """
        raise NotImplementedError


class CliAgent(Agent):
    """Agent backed by an external command reading the prompt from stdin."""

    def __init__(self, command: Sequence[str], cwd: Optional[Path] = None,
                 timeout: int = 0, log_dir: Optional[Path] = None):
        if not command:
            raise AgentUnavailable("empty agent command")
        self.command = list(command)
        self.cwd = cwd
        self.timeout = timeout or None
        self.log_dir = log_dir

    @property
    def binary(self) -> str:
        return self.command[0]

    def check_available(self) -> None:
        """Fail fast if the executable isn't on PATH.

        Raises:
            AgentUnavailable: If the binary can't be resolved
        """
        if shutil.which(self.binary) is None:
            raise AgentUnavailable(f"need {self.binary} (not found on PATH)")

    def invoke(self, prompt: str, label: str = "agent") -> AgentResult:
        logger.info(f"Invoking {self.binary} for {label} ({len(prompt)} chars)")

        try:
            result = subprocess.run(
                self.command,
                cwd=str(self.cwd) if self.cwd else None,
                input=prompt,
                capture_output=True,
                encoding="utf-8",
                errors="replace",
                timeout=self.timeout,
            )
        except subprocess.TimeoutExpired:
            self._write_transcript(label, prompt, -1, "", f"Timeout after {self.timeout}s")
            raise AgentInvocationError(-1, f"timed out after {self.timeout}s") from None
        except OSError as e:
            raise AgentUnavailable(f"could not start {self.binary}: {e}") from None

        self._write_transcript(label, prompt, result.returncode, result.stdout, result.stderr)
        logger.info(f"{self.binary} exited {result.returncode}")

        if result.returncode != 0:
            raise AgentInvocationError(result.returncode, result.stderr, result.stdout)

        return AgentResult(output=result.stdout, exit_code=0, stderr=result.stderr)

    def _write_transcript(self, label: str, prompt: str, exit_code: int,
                          stdout: str, stderr: str) -> None:
        if not self.log_dir:
            return
        try:
            self.log_dir.mkdir(parents=True, exist_ok=True)
            stamp = datetime.now().strftime("%Y%m%d-%H%M%S-%f")
            log_file = self.log_dir / f"{stamp}_{label}.log"
            log_file.write_text(
                f"=== COMMAND ===\n{' '.join(self.command)}\n\n"
                f"=== PROMPT ===\n{prompt}\n\n"
                f"=== EXIT CODE ===\n{exit_code}\n\n"
                f"=== STDOUT ===\n{stdout}\n\n"
                f"=== STDERR ===\n{stderr}\n"
            )
        except OSError as e:
            logger.warning(f"Failed to write agent transcript: {e}")


def run_interactive(command: Sequence[str], prompt: str, cwd: Optional[Path] = None) -> int:
    """Hand off to an interactive agent session with the terminal attached.

    The opening prompt goes as the last argument because stdin belongs to the user.

    Returns:
        Exit code of the interactive session

    Raises:
        AgentUnavailable: If the interactive binary isn't on PATH
    """
    binary = command[0]
    if shutil.which(binary) is None:
        raise AgentUnavailable(f"need {binary} (not found on PATH)")

    logger.info(f"Starting interactive session: {binary}")
    result = subprocess.run([*command, prompt], cwd=str(cwd) if cwd else None)
    return result.returncode
