"""Decide what happens to CopyTasks whose destination already exists."""

import enum
import os

from rich.markup import escape

from .selection import CopyTask
from .ui import Prompter, SetupCancelled, console


class ConflictPolicy(str, enum.Enum):
    ASK = "ask"
    SKIP = "skip"
    OVERWRITE = "overwrite"
    BACKUP = "backup"


POLICY_CHOICES = {
    ConflictPolicy.ASK.value: "Ask for each item",
    ConflictPolicy.SKIP.value: "Skip all existing items",
    ConflictPolicy.OVERWRITE.value: "Overwrite all",
    ConflictPolicy.BACKUP.value: "Backup and overwrite all",
}


def find_conflicts(tasks: list[CopyTask]) -> list[CopyTask]:
    return [task for task in tasks if os.path.lexists(task.dest)]


def apply_policy(conflicts: list[CopyTask], policy: ConflictPolicy, prompter: Prompter) -> None:
    """Mark ``skip``/``backup`` on the conflicting tasks according to ``policy``."""
    for task in conflicts:
        if policy is ConflictPolicy.SKIP:
            task.skip = True
        elif policy is ConflictPolicy.BACKUP:
            task.backup = True
        elif policy is ConflictPolicy.ASK:
            if not prompter.confirm(f"Overwrite {task.name}?", default=False):
                task.skip = True
            else:
                task.backup = prompter.confirm(f"  Create backup of {task.name}?", default=True)


def resolve_conflicts(tasks: list[CopyTask], prompter: Prompter) -> list[CopyTask]:
    """Ask once how to treat existing destinations and annotate ``tasks`` in place."""
    conflicts = find_conflicts(tasks)
    if not conflicts:
        return tasks

    console.print(f"\n[yellow]Found {len(conflicts)} existing item(s):[/yellow]\n")
    for task in conflicts:
        console.print(f"[bright_black]  - {escape(task.name)}[/bright_black]")

    choice = prompter.select(POLICY_CHOICES, "How do you want to handle existing files?", "ask")
    if not choice:
        raise SetupCancelled()

    apply_policy(conflicts, ConflictPolicy(choice), prompter)
    return tasks
