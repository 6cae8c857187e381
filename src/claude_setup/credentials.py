"""API-key provisioning for skills that need an external service key."""

import re
from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from typing import Mapping

from rich.markup import escape

from .selection import CopyTask
from .ui import Prompter, console


@dataclass(frozen=True)
class SkillKeyConfig:
    env_var: str
    display_name: str
    acquisition_url: str
    description: str


# Skill sub-item name -> key it needs
SKILLS_REQUIRING_API_KEYS: Mapping[str, SkillKeyConfig] = MappingProxyType({
    "web-search": SkillKeyConfig(
        env_var="TAVILY_API_KEY",
        display_name="Tavily API",
        acquisition_url="https://app.tavily.com",
        description="Required for web search functionality",
    ),
})


def skills_needing_keys(tasks: list[CopyTask], registry: Mapping[str, SkillKeyConfig]) -> list[str]:
    """Names of the selected, non-skipped skills that appear in ``registry``."""
    names = []
    for task in tasks:
        if task.skip or not task.name.startswith("skills/"):
            continue
        skill_name = task.name[len("skills/"):]
        if skill_name in registry:
            names.append(skill_name)
    return names


def detect_shell_profile(shell: str, home: Path) -> Path:
    """Pick the profile file a new ``export`` line should go to."""
    home = Path(home)
    shell = shell or "/bin/bash"
    if "zsh" in shell:
        return home / ".zshrc"
    if "bash" in shell:
        bash_profile = home / ".bash_profile"
        return bash_profile if bash_profile.exists() else home / ".bashrc"
    return home / ".profile"


def update_profile(profile: Path, env_var: str, value: str) -> str:
    """Set ``export ENV_VAR="value"`` in ``profile``.

    Every existing ``export ENV_VAR=...`` line is rewritten; otherwise a new line
    is appended. This is plain text substitution, not shell parsing.
    Returns ``"updated"`` or ``"added"``.
    """
    value = value.strip() if value else ""
    if not value:
        raise ValueError(f"Refusing to write an empty value for {env_var}")

    profile = Path(profile)
    export_line = f'export {env_var}="{value}"'
    content = profile.read_text(encoding="utf-8") if profile.exists() else ""

    if f"export {env_var}=" in content:
        pattern = re.compile(rf"export {re.escape(env_var)}=.*")
        profile.write_text(pattern.sub(lambda _: export_line, content), encoding="utf-8")
        return "updated"

    with profile.open("a", encoding="utf-8") as f:
        f.write(f"\n{export_line}\n")
    return "added"


def _manual_hint(env_var: str) -> None:
    console.print(f'[cyan]    export {env_var}="your-api-key"[/cyan]\n')


class CredentialProvisioner:
    """Offer to store missing API keys in the user's shell profile."""

    def __init__(self, registry: Mapping[str, SkillKeyConfig], prompter: Prompter, environ: Mapping[str, str], home: Path):
        self.registry = registry
        self.prompter = prompter
        self.environ = environ
        self.home = Path(home)

    def provision(self, skill_names: list[str]) -> None:
        """Handle each distinct key once, in the order its first skill appears."""
        if not skill_names:
            return

        console.print("\n[bold]API Key Configuration[/bold]\n")
        seen = set()
        for skill_name in skill_names:
            config = self.registry[skill_name]
            if config.env_var in seen:
                continue
            seen.add(config.env_var)
            self.provision_one(skill_name, config)

    def provision_one(self, skill_name: str, config: SkillKeyConfig) -> None:
        if self.environ.get(config.env_var):
            console.print(f"[green]  ✓ {config.display_name} key already set ({config.env_var})[/green]")
            return

        console.print(f"[yellow]  ! {skill_name} requires {config.display_name}[/yellow]")
        console.print(f"[bright_black]    {config.description}[/bright_black]")
        console.print(f"[bright_black]    Get your API key at: {config.acquisition_url}[/bright_black]\n")

        if not self.prompter.confirm(f"Would you like to set up {config.env_var} now?", default=True):
            console.print("[bright_black]    You can set it later by adding to your shell config:[/bright_black]")
            _manual_hint(config.env_var)
            return

        value = self.prompter.secret(f"Enter your {config.display_name} key")
        profile = detect_shell_profile(self.environ.get("SHELL", ""), self.home)

        try:
            outcome = update_profile(profile, config.env_var, value)
        except (OSError, ValueError) as e:
            console.print(f"[red]  ✗ Failed to save API key: {escape(str(e))}[/red]")
            console.print("[bright_black]    You can manually add this to your shell config:[/bright_black]")
            _manual_hint(config.env_var)
            return

        verb = "Updated" if outcome == "updated" else "Added"
        preposition = "in" if outcome == "updated" else "to"
        console.print(f"[green]  ✓ {verb} {config.env_var} {preposition} {profile}[/green]")
        console.print(f"[bright_black]    Run 'source {profile}' or restart your terminal to apply.[/bright_black]\n")
