"""One install run: selection, conflicts, API keys, copying, summary."""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Mapping, Optional

from rich.live import Live
from rich.markup import escape
from rich.panel import Panel

from .conflicts import resolve_conflicts
from .copying import copy_item
from .credentials import CredentialProvisioner, SkillKeyConfig, skills_needing_keys
from .scanner import list_top_level
from .selection import CopyTask, SelectionWorkflow
from .ui import Prompter, StepTracker, console


@dataclass
class InstallSummary:
    copied: list[str] = field(default_factory=list)
    failed: dict[str, str] = field(default_factory=dict)
    skipped: list[str] = field(default_factory=list)


def skip_reason(environ: Mapping[str, str], interactive: bool) -> Optional[str]:
    """Why the interactive flow should not run at all, or ``None``."""
    if environ.get("CI") or "SKIP_CLAUDE_SETUP" in environ:
        return "CI environment or SKIP_CLAUDE_SETUP set"
    if not interactive:
        return "non-interactive terminal"
    return None


def copy_tasks(tasks: list[CopyTask]) -> InstallSummary:
    """Copy every non-skipped task in order; one failure does not stop the rest."""
    summary = InstallSummary(skipped=[t.name for t in tasks if t.skip])
    to_copy = [t for t in tasks if not t.skip]

    tracker = StepTracker("Installing")
    for task in tasks:
        tracker.add(task.name, escape(task.name))
        if task.skip:
            tracker.skip(task.name, "already exists")

    with Live(tracker.render(), console=console, refresh_per_second=8, transient=True) as live:
        tracker.attach_refresh(lambda: live.update(tracker.render()))
        for task in to_copy:
            tracker.start(task.name, "copying")
            result = copy_item(task.source, task.dest, backup=task.backup, overwrite=True)
            if result.success:
                detail = f"backed up to {result.backup_path.name}" if result.backup_path else "copied"
                tracker.complete(task.name, detail)
                summary.copied.append(task.name)
            else:
                tracker.error(task.name, escape(result.error))
                summary.failed[task.name] = result.error

    console.print(tracker.render())
    return summary


def confirm_install(tasks: list[CopyTask], claude_dir: Path, prompter: Prompter) -> bool:
    to_copy = [t for t in tasks if not t.skip]
    if not to_copy:
        console.print("\n[yellow]No items to copy. Installation cancelled.[/yellow]")
        return False

    skipped = len(tasks) - len(to_copy)
    lines = [
        f"{'Destination':<15} [dim]{claude_dir}[/dim]",
        f"{'Items to copy':<15} [green]{len(to_copy)}[/green]",
    ]
    if skipped:
        lines.append(f"{'Items to skip':<15} [yellow]{skipped}[/yellow]")

    console.print()
    console.print(Panel("\n".join(lines), title="[cyan]Final Installation Summary[/cyan]", border_style="cyan", padding=(1, 2)))

    if not prompter.confirm("Proceed with installation?", default=True):
        console.print("\n[yellow]Installation cancelled.[/yellow]")
        return False
    return True


def print_summary(summary: InstallSummary, claude_dir: Path) -> None:
    lines = [f"[green]✓ Successfully copied: {len(summary.copied)} item(s)[/green]"]
    if summary.failed:
        lines.append(f"[red]✗ Failed: {len(summary.failed)} item(s)[/red]")
        for name, error in summary.failed.items():
            lines.append(f"  [red]- {escape(name)}:[/red] [bright_black]{escape(error)}[/bright_black]")
    if summary.skipped:
        lines.append(f"[yellow]○ Skipped: {len(summary.skipped)} item(s)[/yellow]")
    lines.append("")
    lines.append(f"[dim]Configuration installed to: {claude_dir}[/dim]")
    lines.append("[dim]You can run 'claude-setup' anytime to reconfigure.[/dim]")

    border = "red" if summary.failed else "green"
    console.print()
    console.print(Panel("\n".join(lines), title="[bold]Installation Complete[/bold]", border_style=border, padding=(1, 2)))


def run_install(
    source_root: Path,
    claude_dir: Path,
    prompter: Prompter,
    environ: Mapping[str, str],
    home: Path,
    registry: Mapping[str, SkillKeyConfig],
) -> Optional[InstallSummary]:
    """Run the whole interactive install.

    Returns ``None`` when the user backs out before anything is copied.
    ``SetupCancelled`` from a dismissed prompt propagates to the caller.
    """
    claude_dir = Path(claude_dir)
    claude_dir.mkdir(parents=True, exist_ok=True)
    console.print(f"[green]✓[/green] Claude directory: {claude_dir}\n")

    source_items = list_top_level(source_root)
    if not source_items:
        console.print("[yellow]No items found to copy.[/yellow]")
        return None

    tasks = SelectionWorkflow(source_items, claude_dir, prompter).run()
    if tasks is None:
        return None

    resolve_conflicts(tasks, prompter)

    if not confirm_install(tasks, claude_dir, prompter):
        return None

    CredentialProvisioner(registry, prompter, environ, home).provision(
        skills_needing_keys(tasks, registry)
    )

    summary = copy_tasks(tasks)
    print_summary(summary, claude_dir)
    return summary
