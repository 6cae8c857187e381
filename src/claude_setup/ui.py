"""Terminal UI pieces: console, step tracker, arrow-key menus and the Prompter."""

from typing import Optional

import readchar
import typer
from rich.console import Console
from rich.live import Live
from rich.panel import Panel
from rich.table import Table
from rich.tree import Tree

console = Console()


class SetupCancelled(Exception):
    """Raised when the user dismisses a prompt (Escape, Ctrl+C, empty answer)."""


class StepTracker:
    """Track and render hierarchical steps as a tree.
    Supports live auto-refresh via an attached refresh callback.
    """
    def __init__(self, title: str):
        self.title = title
        self.steps = []  # list of dicts: {key, label, status, detail}
        self._refresh_cb = None

    def attach_refresh(self, cb):
        self._refresh_cb = cb

    def add(self, key: str, label: str):
        if key not in [s["key"] for s in self.steps]:
            self.steps.append({"key": key, "label": label, "status": "pending", "detail": ""})
            self._maybe_refresh()

    def start(self, key: str, detail: str = ""):
        self._update(key, status="running", detail=detail)

    def complete(self, key: str, detail: str = ""):
        self._update(key, status="done", detail=detail)

    def error(self, key: str, detail: str = ""):
        self._update(key, status="error", detail=detail)

    def skip(self, key: str, detail: str = ""):
        self._update(key, status="skipped", detail=detail)

    def _update(self, key: str, status: str, detail: str):
        for s in self.steps:
            if s["key"] == key:
                s["status"] = status
                if detail:
                    s["detail"] = detail
                self._maybe_refresh()
                return

        self.steps.append({"key": key, "label": key, "status": status, "detail": detail})
        self._maybe_refresh()

    def _maybe_refresh(self):
        if self._refresh_cb:
            self._refresh_cb()

    def render(self):
        tree = Tree(f"[cyan]{self.title}[/cyan]", guide_style="grey50")
        symbols = {
            "done": "[green]●[/green]",
            "pending": "[green dim]○[/green dim]",
            "running": "[cyan]○[/cyan]",
            "error": "[red]●[/red]",
            "skipped": "[yellow]○[/yellow]",
        }
        for step in self.steps:
            label = step["label"]
            detail_text = step["detail"].strip() if step["detail"] else ""
            status = step["status"]
            symbol = symbols.get(status, " ")

            if status == "pending":
                if detail_text:
                    line = f"{symbol} [bright_black]{label} ({detail_text})[/bright_black]"
                else:
                    line = f"{symbol} [bright_black]{label}[/bright_black]"
            else:
                if detail_text:
                    line = f"{symbol} [white]{label}[/white] [bright_black]({detail_text})[/bright_black]"
                else:
                    line = f"{symbol} [white]{label}[/white]"

            tree.add(line)
        return tree


def get_key():
    """Get a single keypress in a cross-platform way using readchar."""
    key = readchar.readkey()

    if key == readchar.key.UP or key == readchar.key.CTRL_P:
        return 'up'
    if key == readchar.key.DOWN or key == readchar.key.CTRL_N:
        return 'down'

    if key == readchar.key.ENTER:
        return 'enter'

    if key == " ":
        return 'space'

    if key == readchar.key.ESC:
        return 'escape'

    if key == readchar.key.CTRL_C:
        raise KeyboardInterrupt

    return key


def select_with_arrows(options: dict, prompt_text: str = "Select an option", default_key: str = None) -> str:
    """
    Interactive selection using arrow keys with Rich Live display.

    Args:
        options: Dict with keys as option keys and values as descriptions
        prompt_text: Text to show above the options
        default_key: Default option key to start with

    Returns:
        Selected option key

    Raises:
        SetupCancelled: on Escape or Ctrl+C
    """
    option_keys = list(options.keys())
    if default_key and default_key in option_keys:
        selected_index = option_keys.index(default_key)
    else:
        selected_index = 0

    def create_selection_panel():
        table = Table.grid(padding=(0, 2))
        table.add_column(style="cyan", justify="left", width=3)
        table.add_column(style="white", justify="left")

        for i, key in enumerate(option_keys):
            pointer = "▶" if i == selected_index else " "
            table.add_row(pointer, f"[cyan]{options[key]}[/cyan]")

        table.add_row("", "")
        table.add_row("", "[dim]Use ↑/↓ to navigate, Enter to select, Esc to cancel[/dim]")

        return Panel(
            table,
            title=f"[bold]{prompt_text}[/bold]",
            border_style="cyan",
            padding=(1, 2)
        )

    console.print()

    with Live(create_selection_panel(), console=console, transient=True, auto_refresh=False) as live:
        while True:
            try:
                key = get_key()
            except KeyboardInterrupt:
                raise SetupCancelled() from None

            if key == 'up':
                selected_index = (selected_index - 1) % len(option_keys)
            elif key == 'down':
                selected_index = (selected_index + 1) % len(option_keys)
            elif key == 'enter':
                return option_keys[selected_index]
            elif key == 'escape':
                raise SetupCancelled()

            live.update(create_selection_panel(), refresh=True)


def checkbox_with_arrows(
    options: dict,
    prompt_text: str = "Select items",
    checked: Optional[set] = None,
    page_size: int = 10,
) -> list:
    """Multi-select with arrow keys; Space toggles, 'a' toggles all, Enter confirms.

    Returns the checked option keys in option order.
    """
    option_keys = list(options.keys())
    selected = set(option_keys) if checked is None else set(checked) & set(option_keys)
    cursor = 0

    def visible_window():
        if len(option_keys) <= page_size:
            return 0, len(option_keys)
        start = min(max(cursor - page_size // 2, 0), len(option_keys) - page_size)
        return start, start + page_size

    def create_checkbox_panel():
        table = Table.grid(padding=(0, 1))
        table.add_column(style="cyan", justify="left", width=2)
        table.add_column(justify="left", width=3)
        table.add_column(style="white", justify="left")

        start, end = visible_window()
        for i in range(start, end):
            key = option_keys[i]
            pointer = "▶" if i == cursor else " "
            box = "[green]◉[/green]" if key in selected else "[bright_black]◯[/bright_black]"
            table.add_row(pointer, box, options[key])

        table.add_row("", "", "")
        footer = f"{len(selected)}/{len(option_keys)} selected"
        if end - start < len(option_keys):
            footer += f", showing {start + 1}-{end}"
        table.add_row("", "", f"[dim]{footer}[/dim]")
        table.add_row("", "", "[dim]↑/↓ move, Space toggle, a toggle all, Enter confirm, Esc cancel[/dim]")

        return Panel(
            table,
            title=f"[bold]{prompt_text}[/bold]",
            border_style="cyan",
            padding=(1, 2)
        )

    console.print()

    with Live(create_checkbox_panel(), console=console, transient=True, auto_refresh=False) as live:
        while True:
            try:
                key = get_key()
            except KeyboardInterrupt:
                raise SetupCancelled() from None

            if key == 'up':
                cursor = (cursor - 1) % len(option_keys)
            elif key == 'down':
                cursor = (cursor + 1) % len(option_keys)
            elif key == 'space':
                current = option_keys[cursor]
                if current in selected:
                    selected.discard(current)
                else:
                    selected.add(current)
            elif key == 'a':
                selected = set() if len(selected) == len(option_keys) else set(option_keys)
            elif key == 'enter':
                return [k for k in option_keys if k in selected]
            elif key == 'escape':
                raise SetupCancelled()

            live.update(create_checkbox_panel(), refresh=True)


class Prompter:
    """All interactive input of an install run goes through here."""

    def checkbox(self, options: dict, prompt_text: str, page_size: int = 10) -> list:
        if not options:
            return []
        return checkbox_with_arrows(options, prompt_text, page_size=page_size)

    def select(self, options: dict, prompt_text: str, default_key: str = None) -> str:
        return select_with_arrows(options, prompt_text, default_key)

    def confirm(self, message: str, default: bool = False) -> bool:
        try:
            return typer.confirm(message, default=default)
        except (typer.Abort, KeyboardInterrupt):
            raise SetupCancelled() from None

    def secret(self, message: str) -> str:
        """Ask for a hidden value until something other than whitespace is entered."""
        while True:
            try:
                value = typer.prompt(message, hide_input=True)
            except (typer.Abort, KeyboardInterrupt):
                raise SetupCancelled() from None
            if value.strip():
                return value.strip()
            console.print("[red]Value cannot be empty[/red]")
