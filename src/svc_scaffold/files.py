"""File-tree helpers: template copy, package metadata, VCS cleanup."""

from __future__ import annotations

import json
import logging
import shutil
from collections.abc import Iterable
from pathlib import Path

__all__ = ["copy_template_tree", "remove_dirs", "update_package_json"]

log = logging.getLogger(__name__)


def copy_template_tree(source: Path, target: Path) -> Path:
    """Copy the contents of *source* into *target*.

    *target* may already exist (pre-create hooks run in it).

    Raises:
        FileNotFoundError: If *source* is not a directory.
    """
    if not source.is_dir():
        msg = f"Template directory not found: {source}"
        raise FileNotFoundError(msg)
    shutil.copytree(source, target, dirs_exist_ok=True, symlinks=True)
    return target


def update_package_json(path: Path, service_name: str) -> bool:
    """Point a copied ``package.json`` at the new service.

    Sets ``name`` and blanks ``description``, ``author`` and ``license``.
    Returns ``False`` when there is no such file.
    """
    if not path.is_file():
        return False
    data = json.loads(path.read_text(encoding="utf-8"))
    data["name"] = service_name
    data["description"] = ""
    data["author"] = ""
    data["license"] = ""
    path.write_text(json.dumps(data, indent=2, ensure_ascii=False), encoding="utf-8")
    return True


def remove_dirs(root: Path, names: Iterable[str]) -> list[Path]:
    """Recursively delete directories under *root* whose name is in *names*."""
    targets = set(names)
    removed: list[Path] = []
    for entry in sorted(root.iterdir()):
        if entry.is_symlink() or not entry.is_dir():
            continue
        if entry.name in targets:
            shutil.rmtree(entry)
            removed.append(entry)
            log.debug("Removed %s", entry)
        else:
            removed.extend(remove_dirs(entry, targets))
    return removed
