"""
Single-writer lock on the state root.

Every command holds an exclusive flock on <state_root>/sir.lock while it runs,
so two `sir` processes never drive agents against the same files. The lock
file is never unlinked: waiters must flock the same inode as the holder.
"""

import atexit
import fcntl
import logging
import os
import signal
import sys
import time
from contextlib import contextmanager
from pathlib import Path

from sir.lib.config import SirConfig

logger = logging.getLogger(__name__)

POLL_INTERVAL = 1.0


class LockTimeout(Exception):
    """The state root stayed locked for longer than LOCK_TIMEOUT."""
    pass


def _try_flock(fd) -> bool:
    try:
        fcntl.flock(fd, fcntl.LOCK_EX | fcntl.LOCK_NB)
    except BlockingIOError:
        return False
    return True


def is_locked(lock_file: Path) -> bool:
    """True if some open file description currently holds the lock."""
    try:
        fd = open(lock_file, 'r')
    except FileNotFoundError:
        return False
    with fd:
        if not _try_flock(fd):
            return True
        fcntl.flock(fd, fcntl.LOCK_UN)
    return False


@contextmanager
def state_lock(config: SirConfig):
    """
    Hold the state-root lock for the body of the block.

    Polls once a second until config.lock_timeout seconds have passed
    (0 means a single attempt). The lock is dropped on normal exit,
    exceptions, Ctrl-C and SIGTERM.

    Raises:
        LockTimeout: If another process keeps the lock
    """
    lock_file = config.lock_file
    lock_file.parent.mkdir(parents=True, exist_ok=True)

    fd = open(lock_file, 'a')
    deadline = time.monotonic() + config.lock_timeout
    while not _try_flock(fd):
        if time.monotonic() >= deadline:
            fd.close()
            raise LockTimeout(
                f"Could not acquire {lock_file} within {config.lock_timeout}s "
                f"(another sir process is running)"
            )
        logger.debug(f"{lock_file} busy, retrying")
        time.sleep(POLL_INTERVAL)

    def release():
        if fd.closed:
            return
        fcntl.flock(fd, fcntl.LOCK_UN)
        fd.close()

    fd.seek(0)
    fd.truncate()
    fd.write(f"{os.getpid()}\n")
    fd.flush()
    logger.debug(f"Locked {config.state_root} (pid {os.getpid()})")

    atexit.register(release)
    previous_sigterm = signal.signal(signal.SIGTERM, lambda *_: sys.exit(1))
    try:
        yield
    finally:
        signal.signal(signal.SIGTERM, previous_sigterm)
        atexit.unregister(release)
        release()
        logger.debug(f"Unlocked {config.state_root}")
