"""Copy a file or directory tree into the configuration directory."""

import os
import shutil
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

BACKUP_SUFFIX = ".backup"


@dataclass(frozen=True)
class CopyResult:
    success: bool
    error: Optional[str] = None
    backup_path: Optional[Path] = None


def backup_path_for(dest: Path) -> Path:
    dest = Path(dest)
    return dest.with_name(dest.name + BACKUP_SUFFIX)


def _remove(path: Path) -> None:
    if path.is_dir() and not path.is_symlink():
        shutil.rmtree(path)
    else:
        path.unlink()


def copy_tree(source: Path, dest: Path, overwrite: bool = True) -> None:
    """Recursively copy ``source`` onto ``dest``, merging into existing directories.

    Files at matching sub-paths are replaced when ``overwrite`` is true and kept
    otherwise. Existing destination files with no counterpart in ``source`` are
    never touched.
    """
    source = Path(source)
    dest = Path(dest)

    def copy_file(src, dst):
        if not overwrite and os.path.lexists(dst):
            return dst
        return shutil.copy2(src, dst)

    if source.is_dir():
        shutil.copytree(source, dest, copy_function=copy_file, dirs_exist_ok=True)
    else:
        # copy2 would silently write into dest/<name> instead
        if dest.is_dir():
            raise IsADirectoryError(f"Cannot overwrite directory with non-directory: {dest}")
        dest.parent.mkdir(parents=True, exist_ok=True)
        copy_file(source, dest)


def create_backup(dest: Path) -> Path:
    """Copy ``dest`` to its ``.backup`` sibling, replacing any earlier backup."""
    dest = Path(dest)
    target = backup_path_for(dest)
    if os.path.lexists(target):
        _remove(target)
    if dest.is_dir():
        shutil.copytree(dest, target, symlinks=True)
    else:
        shutil.copy2(dest, target)
    return target


def copy_item(source: Path, dest: Path, backup: bool = False, overwrite: bool = True) -> CopyResult:
    """Copy one item, optionally backing up the existing destination first.

    Failures come back as ``CopyResult(success=False, error=...)``; a failed
    backup leaves the destination untouched.
    """
    dest = Path(dest)
    saved = None

    if backup and os.path.lexists(dest):
        try:
            saved = create_backup(dest)
        except (OSError, shutil.Error) as e:
            return CopyResult(success=False, error=f"backup failed: {e}")

    try:
        copy_tree(source, dest, overwrite=overwrite)
    except (OSError, shutil.Error) as e:
        return CopyResult(success=False, error=str(e), backup_path=saved)

    return CopyResult(success=True, backup_path=saved)
