"""Property collection and substitution into the copied service tree."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from svc_scaffold.models import Property, Template
from svc_scaffold.prompts import PropertyAborted
from svc_scaffold.protocols import Prompter

__all__ = [
    "PROJECT_PROPERTY",
    "apply_properties",
    "collect_properties",
    "project_name",
    "render_token",
]

log = logging.getLogger(__name__)

PROJECT_PROPERTY = "PROJECT"


def project_name(project_root: Path, stack: Mapping[str, Any] | None = None) -> str:
    """Return the enclosing project's name.

    Uses the ``name`` field of the loaded *stack* manifest when it has one,
    otherwise the project root directory name.
    """
    if stack is not None:
        name = stack.get("name")
        if isinstance(name, str) and name:
            return name
    return project_root.resolve().name


def collect_properties(
    template: Template,
    project: str,
    prompter: Prompter,
) -> list[Property]:
    """Collect ``PROJECT`` followed by every custom property of *template*.

    Properties are produced in declaration order.  Each producer is the
    prop's own ``func`` if it has one, otherwise the *prompter*.

    Raises:
        PropertyAborted: If any producer returns an empty value.  Nothing
            collected so far is returned.
    """
    props = [Property(name=PROJECT_PROPERTY, value=project)]

    for prop in template.props:
        print()
        print(f"{prop.prompt}:")
        value = prop.func() if prop.func is not None else prompter.ask(prop.name)
        if not value:
            msg = f"No value given for property {prop.name}"
            raise PropertyAborted(msg)
        props.append(Property(name=prop.name, value=value))

    return props


def render_token(name: str) -> str:
    """Return the placeholder written in template files for property *name*."""
    return "{{" + name + "}}"


def apply_properties(root: Path, props: list[Property]) -> list[Path]:
    """Replace every property token in the text files under *root*.

    Binary files are left alone.  Returns the files that were rewritten.
    """
    changed: list[Path] = []
    for path in sorted(root.rglob("*")):
        if not path.is_file() or path.is_symlink():
            continue
        try:
            text = path.read_text(encoding="utf-8")
        except UnicodeDecodeError:
            continue

        updated = text
        for prop in props:
            updated = updated.replace(render_token(prop.name), prop.value)

        if updated != text:
            path.write_text(updated, encoding="utf-8")
            changed.append(path)
            log.debug("Applied properties to %s", path)
    return changed
