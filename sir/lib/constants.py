"""Shared constants for SIR."""

# Sentinel tokens the agent emits. Matched as literal substrings.
SENTINEL_COMPLETE = "<promise>COMPLETE</promise>"
SENTINEL_QUESTION = "<question>"
SENTINEL_ERROR = "<error>"

# Any of these in the output means the agent needs a human
BLOCKED_SENTINELS = (SENTINEL_QUESTION, SENTINEL_ERROR)

# Exit codes
EXIT_OK = 0
EXIT_ERROR = 1
EXIT_BLOCKED = 3

DEFAULT_ITERATIONS = 10

# Layout relative to the state root / memory dir
MEMORY_DIRNAME = "memory"
LOGS_DIRNAME = "logs"
LOCK_FILENAME = "sir.lock"
ENV_FILENAME = "sir.env"
AGENTS_FILENAME = "agents.yaml"

EMPTY_TASKS_DOCUMENT = '{"tasks":[]}\n'

TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
