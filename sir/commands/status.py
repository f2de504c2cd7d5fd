"""
sir status - Summarize tasks and inbox.
"""

from sir.lib.config import SirConfig
from sir.lib.store import new_inbox_files
from sir.pm.tasks import load_tasks, next_pending_task, summarize
from sir.runner.locking import is_locked


def cmd_status(args, config: SirConfig) -> int:
    if not config.tasks.exists():
        print(f"Not initialized: {config.tasks} missing. Run 'sir init'.")
        return 1

    tasks = load_tasks(config)
    counts = summarize(tasks)
    pending = next_pending_task(tasks)

    print(f"State:   {config.state_root}")
    print(f"Tasks:   {counts['passing']}/{counts['total']} passing"
          + (f", {counts['blocked']} blocked" if counts['blocked'] else ""))
    if pending:
        print(f"Next:    {pending.id} {pending.title}")
    elif tasks:
        print("Next:    (all tasks pass)")
    else:
        print("Next:    (no tasks, run 'sir prd')")
    print(f"Inbox:   {len(new_inbox_files(config))} new file(s)")
    if is_locked(config.lock_file):
        print("Running: another sir command holds the lock")
    return 0
