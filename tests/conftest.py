"""Shared fixtures and a scripted Prompter for claude_setup tests."""

from __future__ import annotations

from pathlib import Path

import pytest

from claude_setup.ui import Prompter, SetupCancelled

# Answer for ``checkbox``: keep every option checked (the menu default)
ALL = None
# Any answer equal to this raises SetupCancelled, as if the prompt was dismissed
CANCEL = SetupCancelled


class ScriptedPrompter(Prompter):
    """Prompter that replays queued answers and records every prompt it was asked."""

    def __init__(self, checkbox=(), select=(), confirm=(), secret=()):
        self.answers = {
            "checkbox": list(checkbox),
            "select": list(select),
            "confirm": list(confirm),
            "secret": list(secret),
        }
        self.calls: list[tuple[str, str]] = []
        self.checkbox_options: list[dict] = []

    def _next(self, kind: str, prompt: str):
        self.calls.append((kind, prompt))
        queue = self.answers[kind]
        assert queue, f"unexpected {kind} prompt: {prompt}"
        answer = queue.pop(0)
        if answer is CANCEL:
            raise SetupCancelled()
        return answer

    def prompts(self, kind: str) -> list[str]:
        return [prompt for k, prompt in self.calls if k == kind]

    def checkbox(self, options, prompt_text, page_size=10):
        self.checkbox_options.append(dict(options))
        answer = self._next("checkbox", prompt_text)
        return list(options) if answer is ALL else list(answer)

    def select(self, options, prompt_text, default_key=None):
        return self._next("select", prompt_text)

    def confirm(self, message, default=False):
        return self._next("confirm", message)

    def secret(self, message):
        return self._next("secret", message)


@pytest.fixture
def package_root(tmp_path: Path) -> Path:
    """Package root with an empty agents/, skills/{web-search,notes} and an excluded scripts/."""
    root = tmp_path / "pkg"
    (root / "agents").mkdir(parents=True)
    (root / "skills" / "web-search").mkdir(parents=True)
    (root / "skills" / "web-search" / "SKILL.md").write_text("# web search\n")
    (root / "skills" / "notes").mkdir()
    (root / "skills" / "notes" / "SKILL.md").write_text("# notes\n")
    (root / "scripts").mkdir()
    (root / "scripts" / "postinstall.py").write_text("print('hi')\n")
    (root / "README.md").write_text("readme\n")
    return root


@pytest.fixture
def home(tmp_path: Path) -> Path:
    home = tmp_path / "home"
    home.mkdir()
    return home


@pytest.fixture
def claude_dir(home: Path) -> Path:
    return home / ".claude"
