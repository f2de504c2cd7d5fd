#!/usr/bin/env python3
"""SIR CLI entrypoint."""

import argparse
import logging
import sys

from sir.agents.cli_agent import AgentUnavailable, CliAgent
from sir.commands import guidar as cmd_guidar_module
from sir.commands import init as cmd_init_module
from sir.commands import interactive as cmd_interactive_module
from sir.commands import prd as cmd_prd_module
from sir.commands import projector as cmd_projector_module
from sir.commands import rafael as cmd_rafael_module
from sir.commands import status as cmd_status_module
from sir.commands import storyteller as cmd_storyteller_module
from sir.lib.agents_config import get_command_line, load_agents_config
from sir.lib.config import ConfigurationError, SirConfig, load_config
from sir.lib.constants import EXIT_ERROR
from sir.lib.prompts import PromptError
from sir.pm.tasks import CorruptState
from sir.runner.locking import LockTimeout, state_lock

logger = logging.getLogger(__name__)

# Failures that end a command before or outside an agent call
FATAL_ERRORS = (ConfigurationError, AgentUnavailable, CorruptState, LockTimeout, PromptError)

EPILOG = """\
environment:
  SIR_DIR, MEM, PRD, TASKS, PROG, GUIDE, STORIES, INBOX, PROCESSED,
  AI_CMD, AI_ARGS_DEFAULT, AI_INTERACTIVE_CMD, TONE, ALLOW_QUESTIONS,
  AI_TIMEOUT, LOCK_TIMEOUT  (also read from $SIR_DIR/sir.env)

exit codes:
  0 success or loop budget used up, 1 error, 3 agent needs clarification

examples:
  sir init
  sir prd --prompt "build a todo app"
  sir rafael --loop 5
"""


def make_agent(config: SirConfig, command: str) -> CliAgent:
    """Build the subprocess agent for a command and check it is installed."""
    agents = load_agents_config(config.state_root)
    agent = CliAgent(
        get_command_line(agents, config, command),
        cwd=config.project_dir,
        timeout=config.ai_timeout,
        log_dir=config.log_dir,
    )
    agent.check_available()
    return agent


def cmd_init(args, config, agent=None):
    return cmd_init_module.cmd_init(args, config)


def cmd_prd(args, config, agent):
    return cmd_prd_module.cmd_prd(args, config, agent)


def cmd_rafael(args, config, agent):
    return cmd_rafael_module.cmd_rafael(args, config, agent)


def cmd_guidar(args, config, agent):
    return cmd_guidar_module.cmd_guidar(args, config, agent)


def cmd_storyteller(args, config, agent):
    return cmd_storyteller_module.cmd_storyteller(args, config, agent)


def cmd_projector(args, config, agent):
    return cmd_projector_module.cmd_projector(args, config, agent)


def cmd_interactive(args, config, agent=None):
    return cmd_interactive_module.cmd_interactive(args, config)


def cmd_status(args, config, agent=None):
    return cmd_status_module.cmd_status(args, config)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog='sir',
        description='SIR - Stateful Incremental Reasoner',
        epilog=EPILOG,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('--verbose', '-v', action='store_true', help='Debug logging to stderr')
    subparsers = parser.add_subparsers(dest='command')

    # sir init
    p_init = subparsers.add_parser('init', help='Initialize the state folder')
    p_init.set_defaults(func=cmd_init, needs_agent=False)

    # sir prd
    p_prd = subparsers.add_parser('prd', help='Create PRD + tasks from a prompt or directory scan')
    p_prd.add_argument('--prompt', help='What to build')
    p_prd.add_argument('--dir', help='Directory to scan for existing material')
    p_prd.set_defaults(func=cmd_prd, needs_agent=True)

    # sir rafael
    p_rafael = subparsers.add_parser('rafael', help='Implement tasks one per iteration')
    p_rafael.add_argument('--loop', '--iterations', dest='loop', metavar='N',
                          help='Iteration budget (default 10)')
    p_rafael.set_defaults(func=cmd_rafael, needs_agent=True)

    # sir guidar
    p_guidar = subparsers.add_parser('guidar', help='Write project guidelines')
    p_guidar.add_argument('--prompt', help='Extra guidance')
    p_guidar.add_argument('--dir', help='Directory to infer conventions from')
    p_guidar.set_defaults(func=cmd_guidar, needs_agent=True)

    # sir storyteller
    p_story = subparsers.add_parser('storyteller', help='Write user stories from the PRD')
    p_story.add_argument('--prompt', help='Extra guidance')
    p_story.set_defaults(func=cmd_storyteller, needs_agent=True)

    # sir projector
    p_projector = subparsers.add_parser('projector', help='Process new inbox files')
    p_projector.set_defaults(func=cmd_projector, needs_agent=True)

    # sir interactive
    p_interactive = subparsers.add_parser('interactive', help='Open an interactive agent session')
    p_interactive.set_defaults(func=cmd_interactive, needs_agent=False)

    # sir status
    p_status = subparsers.add_parser('status', help='Show task and inbox summary')
    p_status.set_defaults(func=cmd_status, needs_agent=False, needs_lock=False)

    return parser


def main(argv=None, agent=None, environ=None) -> int:
    """Run the CLI.

    Args:
        argv: Arguments (defaults to sys.argv[1:])
        agent: Agent to use instead of the configured CLI (tests)
        environ: Environment mapping (defaults to os.environ)
    """
    parser = build_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    if not getattr(args, 'func', None):
        parser.print_help()
        return 0

    try:
        config = load_config(environ)
        if args.needs_agent and agent is None:
            agent = make_agent(config, args.command)

        if not getattr(args, 'needs_lock', True):
            return args.func(args, config, agent)
        with state_lock(config):
            return args.func(args, config, agent)

    except FATAL_ERRORS as e:
        logger.debug(f"{args.command} aborted: {type(e).__name__}")
        print(f"ERROR: {e}", file=sys.stderr)
        return EXIT_ERROR


if __name__ == '__main__':
    sys.exit(main())
