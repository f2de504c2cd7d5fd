"""State store for SIR.

Creates the tracked files under the state root and answers simple questions
about the inbox. Everything else in these files belongs to the agent.
"""

import logging
from pathlib import Path

from sir.lib.config import SirConfig
from sir.lib.constants import EMPTY_TASKS_DOCUMENT

logger = logging.getLogger(__name__)


def ensure_initialized(config: SirConfig) -> list[Path]:
    """Create the state root, memory dir, inbox and tracked files if absent.

    Existing files are never touched. Safe to call before every command.

    Returns:
        Paths that were created by this call
    """
    created = []

    for directory in (config.state_root, config.memory_dir, config.inbox):
        if not directory.exists():
            directory.mkdir(parents=True)
            created.append(directory)

    initial_content = {
        config.prd: "",
        config.progress: "",
        config.guidelines: "",
        config.stories: "",
        config.processed: "",
        config.tasks: EMPTY_TASKS_DOCUMENT,
    }
    for path, content in initial_content.items():
        if path.exists():
            continue
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
        created.append(path)

    if created:
        logger.info(f"Initialized {len(created)} path(s) under {config.state_root}")
    return created


def list_inbox(config: SirConfig) -> list[str]:
    """Sorted names of regular, non-hidden files in the inbox."""
    if not config.inbox.is_dir():
        return []
    return sorted(
        p.name for p in config.inbox.iterdir()
        if p.is_file() and not p.name.startswith(".")
    )


def read_processed(config: SirConfig) -> set[str]:
    """Filenames already reconciled from the inbox."""
    if not config.processed.exists():
        return set()
    return {line.strip() for line in config.processed.read_text().splitlines() if line.strip()}


def new_inbox_files(config: SirConfig) -> list[str]:
    """Inbox files not yet listed in the processed markers."""
    processed = read_processed(config)
    return [name for name in list_inbox(config) if name not in processed]
