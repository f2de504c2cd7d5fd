"""
sir init - Create the state root and tracked files.
"""

from sir.lib.config import SirConfig
from sir.lib.store import ensure_initialized


def cmd_init(args, config: SirConfig) -> int:
    created = ensure_initialized(config)

    for path in created:
        print(f"  created {path}")
    print(f"SIR initialized in {config.state_root}")
    return 0
