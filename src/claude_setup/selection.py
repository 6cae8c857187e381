"""Interactive selection of what to install, as an explicit state machine."""

import enum
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from rich.markup import escape

from .scanner import SourceItem, count_entries, list_children
from .ui import Prompter, console

FOLDER_ICONS = {
    "agents": "🤖",
    "skills": "📚",
    "commands": "⚡",
    "rules": "📏",
    "hooks": "🪝",
    "contexts": "📝",
    "examples": "💡",
    "plugins": "🔌",
}

REVIEW_CHOICES = {
    "continue": "Continue with installation",
    "restart": "Start over (reselect items)",
    "cancel": "Cancel installation",
}


@dataclass
class CopyTask:
    source: Path
    dest: Path
    name: str
    type: str
    skip: bool = False
    backup: bool = False


class State(enum.Enum):
    SELECT_FOLDERS = "select_folders"
    SELECT_SUB_ITEMS = "select_sub_items"
    REVIEW = "review"
    CONTINUE = "continue"
    CANCEL = "cancel"


class SelectionWorkflow:
    """Walk the user from folder selection to a reviewed list of CopyTasks.

    ``run()`` returns the tasks, or ``None`` when the user cancels or ends up
    with nothing selected. Restart goes back to folder selection with every
    previous choice dropped.
    """

    def __init__(self, source_items: list[SourceItem], claude_dir: Path, prompter: Prompter):
        self.source_items = list(source_items)
        self.claude_dir = Path(claude_dir)
        self.prompter = prompter
        self.state = State.SELECT_FOLDERS
        self.selected_folders: list[SourceItem] = []
        self.tasks: list[CopyTask] = []

    def run(self) -> Optional[list[CopyTask]]:
        while True:
            if self.state is State.SELECT_FOLDERS:
                self.state = self._select_folders()
            elif self.state is State.SELECT_SUB_ITEMS:
                self.state = self._select_sub_items()
            elif self.state is State.REVIEW:
                self.state = self._review()
            elif self.state is State.CONTINUE:
                return self.tasks
            else:
                return None

    def reset(self) -> None:
        self.selected_folders = []
        self.tasks = []
        self.state = State.SELECT_FOLDERS

    def _select_folders(self) -> State:
        console.print("[bold]Select folders to install[/bold]")
        options = {item.name: f"{escape(item.name)}/" for item in self.source_items}
        chosen = self.prompter.checkbox(
            options, "Choose folders to copy (Space to select, Enter to confirm)", page_size=10
        )
        if not chosen:
            console.print("\n[yellow]No folders selected. Installation cancelled.[/yellow]")
            return State.CANCEL

        chosen = set(chosen)
        self.selected_folders = [item for item in self.source_items if item.name in chosen]
        return State.SELECT_SUB_ITEMS

    def _select_sub_items(self) -> State:
        for folder in self.selected_folders:
            sub_items = list_children(folder.path)

            if not sub_items:
                # Nothing to choose from: install the folder as a whole
                self.tasks.append(CopyTask(
                    source=folder.path,
                    dest=self.claude_dir / folder.name,
                    name=folder.name,
                    type="directory",
                ))
                continue

            icon = FOLDER_ICONS.get(folder.name, "📁")
            console.print(f"\n[bold]{icon} Select items from [cyan]{escape(folder.name)}[/cyan][/bold]")
            options = {
                sub.name: f"{escape(sub.name)} {'📁' if sub.is_dir else '📄'}"
                for sub in sub_items
            }
            chosen = set(self.prompter.checkbox(
                options,
                f"Choose items from {escape(folder.name)} (Space to select, Enter to confirm)",
                page_size=15,
            ))
            for sub in sub_items:
                if sub.name in chosen:
                    self.tasks.append(CopyTask(
                        source=sub.path,
                        dest=self.claude_dir / folder.name / sub.name,
                        name=f"{folder.name}/{sub.name}",
                        type=sub.type,
                    ))

        if not self.tasks:
            console.print("\n[yellow]No items selected. Installation cancelled.[/yellow]")
            return State.CANCEL
        return State.REVIEW

    def _review(self) -> State:
        total_files, total_dirs = count_entries(task.source for task in self.tasks)

        console.print("\n[bold]Selection Summary[/bold]\n")
        console.print(f"[bright_black]  Total items selected: {len(self.tasks)}[/bright_black]")
        console.print(f"[bright_black]  Files: {total_files}, directories: {total_dirs}[/bright_black]")
        console.print("\n[bright_black]  Selected items:[/bright_black]")
        for task in self.tasks:
            console.print(f"[bright_black]    - {escape(task.name)}[/bright_black]")

        choice = self.prompter.select(REVIEW_CHOICES, "What would you like to do?", "continue")

        if choice == "restart":
            console.print("\n[cyan]Restarting selection...[/cyan]\n")
            self.reset()
            return State.SELECT_FOLDERS
        if choice == "continue":
            return State.CONTINUE

        console.print("\n[yellow]Installation cancelled.[/yellow]")
        return State.CANCEL
