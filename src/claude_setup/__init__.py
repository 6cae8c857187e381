#!/usr/bin/env python3
# /// script
# requires-python = ">=3.11"
# dependencies = [
#     "typer",
#     "rich",
#     "readchar",
# ]
# ///
"""
Claude Setup - install agents, skills, commands, rules and hooks into ~/.claude

Usage:
    claude-setup                 # interactive install
    claude-setup install --target /some/other/.claude
    claude-setup check           # read-only self checks
    claude-setup version

Set CI or SKIP_CLAUDE_SETUP to skip the interactive install (e.g. when run as a
post-install hook).
"""

import importlib.util
import os
import sys
from pathlib import Path
from typing import Optional

import typer
from rich.align import Align
from rich.panel import Panel
from rich.table import Table
from rich.text import Text
from typer.core import TyperGroup

from .credentials import SKILLS_REQUIRING_API_KEYS
from .installer import run_install, skip_reason
from .scanner import list_children, list_top_level
from .ui import Prompter, SetupCancelled, StepTracker, console

# src/claude_setup -> repository root when running from a source checkout
CHECKOUT_ROOT = Path(__file__).resolve().parent.parent.parent

REQUIRED_LIBRARIES = ["typer", "rich", "readchar"]

BANNER = """
 ██████╗██╗      █████╗ ██╗   ██╗██████╗ ███████╗
██╔════╝██║     ██╔══██╗██║   ██║██╔══██╗██╔════╝
██║     ██║     ███████║██║   ██║██║  ██║█████╗
██║     ██║     ██╔══██║██║   ██║██║  ██║██╔══╝
╚██████╗███████╗██║  ██║╚██████╔╝██████╔╝███████╗
 ╚═════╝╚══════╝╚═╝  ╚═╝ ╚═════╝ ╚═════╝ ╚══════╝
"""

TAGLINE = "Claude Everything Setup - agents, skills, commands, rules and hooks"


class BannerGroup(TyperGroup):
    """Custom group that shows banner before help."""

    def format_help(self, ctx, formatter):
        show_banner()
        super().format_help(ctx, formatter)


app = typer.Typer(
    name="claude-setup",
    help="Copy Claude configuration folders into your ~/.claude directory",
    add_completion=False,
    invoke_without_command=True,
    cls=BannerGroup,
)


def show_banner():
    """Display the ASCII art banner."""
    banner_lines = BANNER.strip().split('\n')
    colors = ["bright_blue", "blue", "cyan", "bright_cyan", "white", "bright_white"]

    styled_banner = Text()
    for i, line in enumerate(banner_lines):
        color = colors[i % len(colors)]
        styled_banner.append(line + "\n", style=color)

    console.print(Align.center(styled_banner))
    console.print(Align.center(Text(TAGLINE, style="italic bright_yellow")))
    console.print()


def resolve_source_root(source: Optional[str] = None) -> Path:
    if source or os.environ.get("CLAUDE_SETUP_SOURCE"):
        return Path(source or os.environ["CLAUDE_SETUP_SOURCE"]).expanduser()
    # Installed wheels have no folders next to them; use the directory we were run from
    if (CHECKOUT_ROOT / "pyproject.toml").is_file():
        return CHECKOUT_ROOT
    return Path.cwd()


def resolve_claude_dir(target: Optional[str] = None) -> Path:
    return Path(target or os.environ.get("CLAUDE_CONFIG_DIR") or Path.home() / ".claude").expanduser()


def _debug_panel() -> None:
    env_pairs = [
        ("Python", sys.version.split()[0]),
        ("Platform", sys.platform),
        ("CWD", str(Path.cwd())),
        ("SHELL", os.environ.get("SHELL", "(unset)")),
    ]
    label_width = max(len(k) for k, _ in env_pairs)
    env_lines = [f"{k.ljust(label_width)} → [bright_black]{v}[/bright_black]" for k, v in env_pairs]
    console.print(Panel("\n".join(env_lines), title="Debug Environment", border_style="magenta"))


def _install(source: Optional[str], target: Optional[str], debug: bool) -> None:
    reason = skip_reason(os.environ, sys.stdin.isatty())
    if reason:
        console.print(f"\n[bright_black]Skipping Claude setup ({reason})[/bright_black]")
        console.print("[bright_black]  Run 'claude-setup' manually when ready.[/bright_black]\n")
        raise typer.Exit(0)

    show_banner()
    source_root = resolve_source_root(source)
    claude_dir = resolve_claude_dir(target)
    console.print(f"[bright_black]This will copy configuration files to {claude_dir}/[/bright_black]\n")

    try:
        run_install(
            source_root,
            claude_dir,
            Prompter(),
            environ=os.environ,
            home=Path.home(),
            registry=SKILLS_REQUIRING_API_KEYS,
        )
    except (SetupCancelled, KeyboardInterrupt):
        console.print("\n\n[yellow]Installation cancelled by user.[/yellow]")
        raise typer.Exit(0)
    except Exception as e:
        console.print(Panel(f"Installation failed: {e}", title="Failure", border_style="red"))
        if debug:
            _debug_panel()
        raise typer.Exit(1)


@app.callback()
def callback(ctx: typer.Context):
    """Run the interactive install when no subcommand is provided."""
    if ctx.invoked_subcommand is None:
        _install(source=None, target=None, debug=False)


@app.command()
def install(
    source: str = typer.Option(None, "--source", help="Package root holding the installable folders (or set CLAUDE_SETUP_SOURCE)"),
    target: str = typer.Option(None, "--target", help="Configuration directory to install into (or set CLAUDE_CONFIG_DIR, default ~/.claude)"),
    debug: bool = typer.Option(False, "--debug", help="Show diagnostic environment output when installation fails"),
):
    """
    Interactively copy configuration folders into the Claude directory.

    This command will:
    1. Let you pick folders, then items inside each folder
    2. Ask how to handle items that already exist (skip, overwrite, backup, ask)
    3. Offer to store API keys needed by selected skills in your shell profile
    4. Copy everything and print a summary
    """
    _install(source, target, debug)


@app.command()
def check(
    source: str = typer.Option(None, "--source", help="Package root holding the installable folders"),
    target: str = typer.Option(None, "--target", help="Configuration directory to inspect"),
):
    """Run read-only self checks: directories, installable items, libraries."""
    show_banner()
    console.print("[bold]Checking installation sources...[/bold]\n")

    tracker = StepTracker("Claude Setup Self Check")
    failed = False

    tracker.add("claude-dir", "Resolve Claude directory")
    try:
        claude_dir = resolve_claude_dir(target)
        state = "exists" if claude_dir.is_dir() else "will be created"
        tracker.complete("claude-dir", f"{claude_dir} ({state})")
    except Exception as e:
        tracker.error("claude-dir", str(e))
        failed = True

    tracker.add("source-items", "Enumerate installable folders")
    try:
        source_root = resolve_source_root(source)
        items = list_top_level(source_root)
        tracker.complete("source-items", f"{len(items)} folder(s) in {source_root}")
        for item in items:
            tracker.add(f"item:{item.name}", f"{item.name}/")
            tracker.complete(f"item:{item.name}", f"{len(list_children(item.path))} item(s)")
    except Exception as e:
        tracker.error("source-items", str(e))
        failed = True

    for library in REQUIRED_LIBRARIES:
        key = f"lib:{library}"
        tracker.add(key, f"{library} installed")
        try:
            if importlib.util.find_spec(library) is None:
                raise ImportError(f"No module named '{library}'")
            tracker.complete(key, "available")
        except Exception as e:
            tracker.error(key, str(e))
            failed = True

    console.print(tracker.render())

    if failed:
        console.print("\n[bold red]Some checks failed.[/bold red]")
        raise typer.Exit(1)

    console.print("\n[bold green]All checks passed![/bold green]")
    console.print("[dim]Run 'claude-setup' in a terminal for the interactive installer.[/dim]")


@app.command()
def version():
    """Display version and system information."""
    import platform
    import importlib.metadata

    show_banner()

    cli_version = "unknown"
    try:
        cli_version = importlib.metadata.version("claude-setup")
    except importlib.metadata.PackageNotFoundError:
        # Running from source: read pyproject.toml
        try:
            import tomllib
            pyproject_path = CHECKOUT_ROOT / "pyproject.toml"
            if pyproject_path.exists():
                with open(pyproject_path, "rb") as f:
                    data = tomllib.load(f)
                    cli_version = data.get("project", {}).get("version", "unknown")
        except (OSError, ValueError):
            pass

    info_table = Table(show_header=False, box=None, padding=(0, 2))
    info_table.add_column("Key", style="cyan", justify="right")
    info_table.add_column("Value", style="white")

    info_table.add_row("CLI Version", cli_version)
    info_table.add_row("Claude Dir", str(resolve_claude_dir()))
    info_table.add_row("", "")
    info_table.add_row("Python", platform.python_version())
    info_table.add_row("Platform", platform.system())
    info_table.add_row("Architecture", platform.machine())

    panel = Panel(
        info_table,
        title="[bold cyan]Claude Setup Information[/bold cyan]",
        border_style="cyan",
        padding=(1, 2)
    )

    console.print(panel)
    console.print()


def main():
    app()


def check_main():
    app(["check"])


if __name__ == "__main__":
    main()
