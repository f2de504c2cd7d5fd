"""End-to-end tests for sir.cli.main with a scripted agent."""

import json
import pytest
from unittest.mock import MagicMock, patch

from sir.cli import main
from sir.lib.config import load_config
from sir.lib.constants import EXIT_BLOCKED, EXIT_ERROR, EXIT_OK
from sir.runner.locking import state_lock

COMPLETE = "<promise>COMPLETE</promise>"


class TestInit:
    """sir init."""

    def test_creates_state_from_nothing(self, tmp_path, environ, capsys):
        assert main(["init"], environ=environ) == EXIT_OK

        memory = tmp_path / ".sir" / "memory"
        assert json.loads((memory / "tasks.json").read_text()) == {"tasks": []}
        for name in ("PRD.md", "progress.txt", "GUIDELINES.md"):
            assert (memory / name).read_text() == ""
        assert "SIR initialized" in capsys.readouterr().out

    def test_twice_is_idempotent(self, tmp_path, environ):
        main(["init"], environ=environ)
        prd = tmp_path / ".sir" / "memory" / "PRD.md"
        prd.write_text("# keep me\n")

        assert main(["init"], environ=environ) == EXIT_OK
        assert prd.read_text() == "# keep me\n"


class TestPrd:
    """sir prd."""

    def test_requires_prompt_or_dir(self, environ, scripted_agent, capsys):
        agent = scripted_agent("x")
        assert main(["prd"], agent=agent, environ=environ) == EXIT_ERROR
        assert agent.calls == 0
        assert "need --prompt or --dir" in capsys.readouterr().err

    def test_missing_dir(self, tmp_path, environ, scripted_agent, capsys):
        agent = scripted_agent("x")
        code = main(["prd", "--dir", str(tmp_path / "nope")], agent=agent, environ=environ)
        assert code == EXIT_ERROR
        assert agent.calls == 0
        assert "dir not found" in capsys.readouterr().err

    def test_prompt(self, environ, scripted_agent, capsys):
        agent = scripted_agent("<success>prd created</success>")
        code = main(["prd", "--prompt", "todo app"], agent=agent, environ=environ)
        assert code == EXIT_OK
        assert agent.calls == 1
        assert "User prompt: todo app" in agent.prompts[0]
        assert "<success>prd created</success>" in capsys.readouterr().out

    def test_dir_scan(self, tmp_path, environ, scripted_agent):
        src = tmp_path / "src"
        src.mkdir()
        agent = scripted_agent("ok")
        assert main(["prd", "--dir", str(src)], agent=agent, environ=environ) == EXIT_OK
        assert f"Scan directory: {src}" in agent.prompts[0]
        assert "User prompt: none" in agent.prompts[0]

    def test_agent_asks_question(self, environ, scripted_agent):
        agent = scripted_agent("<question>web or mobile?</question>")
        code = main(["prd", "--prompt", "app"], agent=agent, environ=environ)
        assert code == EXIT_BLOCKED

    def test_agent_failure(self, environ, scripted_agent):
        agent = scripted_agent(("", 1))
        assert main(["prd", "--prompt", "app"], agent=agent, environ=environ) == EXIT_ERROR


class TestRafael:
    """sir rafael."""

    def test_malformed_loop(self, environ, scripted_agent, capsys):
        agent = scripted_agent("x")
        assert main(["rafael", "--loop", "abc"], agent=agent, environ=environ) == EXIT_ERROR
        assert agent.calls == 0
        assert "loop must be" in capsys.readouterr().err

    def test_completes_early(self, environ, scripted_agent, capsys):
        agent = scripted_agent(COMPLETE)
        assert main(["rafael", "--loop", "3"], agent=agent, environ=environ) == EXIT_OK
        assert agent.calls == 1
        assert "PRD complete, exiting." in capsys.readouterr().out

    def test_blocked_on_second_call(self, environ, scripted_agent):
        agent = scripted_agent("did T001", "<question>which auth?</question>")
        assert main(["rafael", "--loop", "2"], agent=agent, environ=environ) == EXIT_BLOCKED
        assert agent.calls == 2

    def test_budget_exhausted_is_success(self, environ, scripted_agent, capsys):
        agent = scripted_agent("did a task")
        assert main(["rafael", "--iterations", "3"], agent=agent, environ=environ) == EXIT_OK
        assert agent.calls == 3
        assert "Re-run to continue" in capsys.readouterr().out

    def test_zero_iterations(self, environ, scripted_agent):
        agent = scripted_agent("x")
        assert main(["rafael", "--loop", "0"], agent=agent, environ=environ) == EXIT_OK
        assert agent.calls == 0

    def test_default_budget(self, environ, scripted_agent):
        agent = scripted_agent("x")
        main(["rafael"], agent=agent, environ=environ)
        assert agent.calls == 10

    def test_corrupt_tasks(self, tmp_path, environ, scripted_agent):
        main(["init"], environ=environ)
        (tmp_path / ".sir" / "memory" / "tasks.json").write_text('{"tasks": "nope"}')
        agent = scripted_agent("x")
        assert main(["rafael", "--loop", "2"], agent=agent, environ=environ) == EXIT_ERROR
        assert agent.calls == 0


class TestOtherCommands:

    def test_guidar(self, environ, scripted_agent, capsys):
        agent = scripted_agent("<success>guidelines created</success>")
        assert main(["guidar", "--prompt", "pep8"], agent=agent, environ=environ) == EXIT_OK
        assert agent.labels == ["guidar"]
        assert "Guidelines:" in capsys.readouterr().out

    def test_storyteller(self, environ, scripted_agent):
        agent = scripted_agent("<success>stories created</success>")
        assert main(["storyteller"], agent=agent, environ=environ) == EXIT_OK
        assert "Storyteller" in agent.prompts[0]

    def test_projector_skips_empty_inbox(self, environ, scripted_agent, capsys):
        agent = scripted_agent("x")
        assert main(["projector"], agent=agent, environ=environ) == EXIT_OK
        assert agent.calls == 0
        assert "Inbox empty" in capsys.readouterr().out

    def test_projector_processes_new_files(self, tmp_path, environ, scripted_agent):
        main(["init"], environ=environ)
        memory = tmp_path / ".sir" / "memory"
        (memory / "inbox" / "call.txt").write_text("client wants dark mode")
        (memory / "inbox" / "old.txt").write_text("done already")
        (memory / "processed.txt").write_text("old.txt\n")

        agent = scripted_agent("<success>inbox processed</success>")
        assert main(["projector"], agent=agent, environ=environ) == EXIT_OK
        assert "- call.txt" in agent.prompts[0]
        assert "- old.txt" not in agent.prompts[0]

    def test_status(self, tmp_path, environ, capsys):
        main(["init"], environ=environ)
        (tmp_path / ".sir" / "memory" / "tasks.json").write_text(json.dumps({"tasks": [
            {"id": "T001", "title": "scaffold", "passes": True},
            {"id": "T002", "title": "login", "passes": False},
        ]}))
        capsys.readouterr()

        assert main(["status"], environ=environ) == EXIT_OK
        out = capsys.readouterr().out
        assert "1/2 passing" in out
        assert "T002 login" in out

    def test_status_uninitialized(self, environ):
        assert main(["status"], environ=environ) == 1

    @patch("sir.agents.cli_agent.shutil.which", return_value="/usr/bin/claude")
    @patch("sir.agents.cli_agent.subprocess.run")
    def test_interactive(self, mock_run, mock_which, environ):
        mock_run.return_value = MagicMock(returncode=0)
        assert main(["interactive"], environ=environ) == EXIT_OK
        argv = mock_run.call_args.args[0]
        assert argv[0] == "claude"
        assert "rafael" in argv[-1]

    def test_no_command_prints_help(self, capsys):
        assert main([]) == EXIT_OK
        assert "usage: sir" in capsys.readouterr().out


class TestFatalErrors:

    @patch("sir.agents.cli_agent.shutil.which", return_value=None)
    def test_agent_unavailable(self, mock_which, environ, capsys):
        env = dict(environ, AI_CMD="ghost-agent")
        assert main(["rafael", "--loop", "1"], environ=env) == EXIT_ERROR
        assert "need ghost-agent" in capsys.readouterr().err

    @patch("sir.agents.cli_agent.shutil.which", return_value="/usr/bin/claude")
    def test_agents_yaml_picks_command(self, mock_which, tmp_path, environ):
        (tmp_path / ".sir").mkdir()
        (tmp_path / ".sir" / "agents.yaml").write_text("commands:\n  projector: codex exec -\n")
        with patch("sir.commands.projector.run_command") as mock_cmd:
            (tmp_path / ".sir" / "memory" / "inbox").mkdir(parents=True)
            (tmp_path / ".sir" / "memory" / "inbox" / "a.txt").write_text("a")
            mock_cmd.return_value = MagicMock(exit_code=0)
            main(["projector"], environ=environ)
        agent = mock_cmd.call_args.args[1]
        assert agent.command == ["codex", "exec", "-"]
        mock_which.assert_called_with("codex")

    def test_lock_held_by_other_process(self, tmp_path, environ, scripted_agent, capsys):
        agent = scripted_agent("x")
        with state_lock(load_config(environ, project_dir=tmp_path)):
            code = main(["rafael", "--loop", "1"], agent=agent, environ=environ)
        assert code == EXIT_ERROR
        assert agent.calls == 0
        assert "Could not acquire" in capsys.readouterr().err

    def test_bad_config(self, environ, capsys):
        env = dict(environ, AI_TIMEOUT="forever")
        assert main(["init"], environ=env) == EXIT_ERROR
        assert "AI_TIMEOUT" in capsys.readouterr().err


def write_agent_script(path, body):
    path.write_text("#!/bin/sh\ncat >/dev/null\n" + body)
    path.chmod(0o755)
    return path


class TestRealAgentProcess:
    """main() driving an executable script as AI_CMD."""

    def test_non_utf8_output_does_not_crash_loop(self, tmp_path, environ, capsys):
        script = write_agent_script(tmp_path / "agent.sh", "printf 'ok \\377\\376 done\\n'\n")
        env = dict(environ, AI_CMD=str(script))

        assert main(["rafael", "--loop", "2"], environ=env) == EXIT_OK
        out = capsys.readouterr().out
        assert out.count("ok \ufffd\ufffd done") == 2
        assert len(list((tmp_path / ".sir" / "logs").glob("*_rafael-*.log"))) == 2

    def test_completion_from_real_process(self, tmp_path, environ):
        script = write_agent_script(tmp_path / "agent.sh", f"echo '{COMPLETE}'\n")
        env = dict(environ, AI_CMD=str(script))
        assert main(["rafael", "--loop", "5"], environ=env) == EXIT_OK
        assert len(list((tmp_path / ".sir" / "logs").glob("*.log"))) == 1

    def test_agent_stderr_reaches_terminal(self, tmp_path, environ, capsys):
        script = write_agent_script(tmp_path / "agent.sh", "echo 'warming up' >&2\necho '<success>prd created</success>'\n")
        env = dict(environ, AI_CMD=str(script))

        assert main(["prd", "--prompt", "app"], environ=env) == EXIT_OK
        assert "warming up" in capsys.readouterr().err


class TestMalformedCommandLines:

    def test_unbalanced_quote_in_args(self, environ, capsys):
        env = dict(environ, AI_ARGS_DEFAULT='-p "unterminated')
        assert main(["init"], environ=env) == EXIT_ERROR
        assert "ERROR: AI_ARGS_DEFAULT" in capsys.readouterr().err

    def test_bad_agents_yaml_line_falls_back_to_default(self, tmp_path, environ):
        script = write_agent_script(tmp_path / "agent.sh", "echo did it\n")
        (tmp_path / ".sir").mkdir()
        (tmp_path / ".sir" / "agents.yaml").write_text("commands:\n  rafael: 'claude \"oops'\n")
        env = dict(environ, AI_CMD=str(script))

        assert main(["rafael", "--loop", "1"], environ=env) == EXIT_OK


class TestStatusIsReadOnly:

    def test_uninitialized_leaves_no_state_root(self, tmp_path, environ):
        assert main(["status"], environ=environ) == 1
        assert not (tmp_path / ".sir").exists()

    def test_reports_running_command(self, tmp_path, environ, capsys):
        main(["init"], environ=environ)
        capsys.readouterr()

        with state_lock(load_config(environ, project_dir=tmp_path)):
            assert main(["status"], environ=environ) == EXIT_OK

        assert "another sir command holds the lock" in capsys.readouterr().out

    def test_idle_state_not_reported_as_running(self, environ, capsys):
        main(["init"], environ=environ)
        main(["status"], environ=environ)
        assert "holds the lock" not in capsys.readouterr().out
