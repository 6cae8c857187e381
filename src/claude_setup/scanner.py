"""Enumerate installable folders and their sub-items from a package root."""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Tuple

# Never offered for installation, regardless of what sits at the package root
EXCLUDED_DIRS = frozenset({
    "node_modules",
    ".git",
    "scripts",
    "bin",
    "mcp-configs",
    ".idea",
    ".vscode",
    # Python checkout / build leftovers
    "src",
    "tests",
    "__pycache__",
    ".venv",
    "venv",
    "build",
    "dist",
    ".pytest_cache",
})


@dataclass(frozen=True)
class SourceItem:
    name: str
    path: Path
    type: str  # "directory" or "file"

    @property
    def is_dir(self) -> bool:
        return self.type == "directory"


def list_top_level(root_dir: Path) -> list[SourceItem]:
    """Return the installable top-level folders of ``root_dir``.

    Only directories are kept and ``EXCLUDED_DIRS`` are dropped. The order is
    whatever the directory read yields; it is also the menu order.
    """
    root_dir = Path(root_dir)
    with os.scandir(root_dir) as entries:
        return [
            SourceItem(name=entry.name, path=root_dir / entry.name, type="directory")
            for entry in entries
            if entry.is_dir() and entry.name not in EXCLUDED_DIRS
        ]


def list_children(dir_path: Path) -> list[SourceItem]:
    """Return the immediate, non-hidden children of ``dir_path``; ``[]`` if it is missing."""
    dir_path = Path(dir_path)
    if not dir_path.is_dir():
        return []

    with os.scandir(dir_path) as entries:
        return [
            SourceItem(
                name=entry.name,
                path=dir_path / entry.name,
                type="directory" if entry.is_dir() else "file",
            )
            for entry in entries
            if not entry.name.startswith(".")
        ]


def count_entries(paths: Iterable[Path]) -> Tuple[int, int]:
    """Count files and directories (recursively) under the given paths."""
    total_files = 0
    total_dirs = 0
    for path in paths:
        path = Path(path)
        if not path.exists():
            continue
        if not path.is_dir():
            total_files += 1
            continue
        total_dirs += 1
        for sub in path.rglob("*"):
            if sub.is_dir():
                total_dirs += 1
            else:
                total_files += 1
    return total_files, total_dirs
