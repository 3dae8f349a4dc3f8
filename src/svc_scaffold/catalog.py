"""Template and client catalog loading and validation.

The catalog is a single YAML document with two lists, ``templates`` and
``clients``.  It is loaded once per run and handed to the selection and
synchronisation steps as plain data.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml

from svc_scaffold.models import Client, HookCommand, Template, TemplateProp

__all__ = ["Catalog", "CatalogValidationError", "load_catalog"]

_TOP_LEVEL_KEYS = frozenset(("templates", "clients"))
_TEMPLATE_KEYS = frozenset(("id", "name", "props", "select_clients", "before_create"))
_CLIENT_KEYS = frozenset(("id", "name", "category"))
_PROP_KEYS = frozenset(("name", "prompt"))
_HOOK_KEYS = frozenset(("cmd", "dir"))
_MISSING: object = object()


@dataclass(frozen=True)
class Catalog:
    """Ordered, immutable template and client registries."""

    templates: tuple[Template, ...]
    clients: tuple[Client, ...]

    def template(self, template_id: str) -> Template | None:
        for template in self.templates:
            if template.id == template_id:
                return template
        return None


class CatalogValidationError(ValueError):
    """Raised when a catalog file fails schema validation."""

    def __init__(self, path: Path, errors: Iterable[str]) -> None:
        self.path = path
        self.errors = [error for error in errors if error]
        details = "\n".join(f"- {error}" for error in self.errors)
        message = f"Invalid catalog file: {path}"
        if details:
            message = f"{message}\n{details}"
        super().__init__(message)


def load_catalog(path: Path) -> Catalog:
    """Load and validate a YAML catalog file."""
    resolved = path.resolve()
    if not resolved.is_file():
        msg = f"Catalog file not found: {resolved}"
        raise FileNotFoundError(msg)

    raw = resolved.read_text(encoding="utf-8")
    try:
        data = yaml.safe_load(raw)
    except yaml.YAMLError as exc:
        raise CatalogValidationError(
            resolved, [f"YAML parse error: {str(exc).strip()}"]
        ) from exc

    if not isinstance(data, dict):
        raise CatalogValidationError(
            resolved,
            ["Top-level YAML document must be a mapping with keys: templates, clients."],
        )

    errors: list[str] = []
    extra_top = sorted(str(key) for key in data if key not in _TOP_LEVEL_KEYS)
    if extra_top:
        errors.append(
            f"Unexpected top-level keys: {', '.join(extra_top)}. Allowed keys: templates, clients."
        )

    templates = _validate_templates(_require_list(data, "templates", errors), errors)
    clients = _validate_clients(_require_list(data, "clients", errors), errors)
    _validate_unique_ids("templates", [t.id for t in templates], errors)
    _validate_unique_ids("clients", [c.id for c in clients], errors)

    if errors:
        raise CatalogValidationError(resolved, errors)
    return Catalog(templates=tuple(templates), clients=tuple(clients))


def _require_list(data: dict[str, Any], key: str, errors: list[str]) -> list[Any]:
    value = data.get(key, _MISSING)
    if value is _MISSING:
        errors.append(f"Missing required top-level key: {key}")
        return []
    if not isinstance(value, list):
        errors.append(f"{key} must be a list")
        return []
    return value


def _validate_templates(entries: list[Any], errors: list[str]) -> list[Template]:
    templates: list[Template] = []
    for index, entry in enumerate(entries):
        location = f"templates[{index}]"
        if not _check_mapping(entry, location, _TEMPLATE_KEYS, errors):
            continue

        template_id = _required_str(entry.get("id", _MISSING), f"{location}.id", errors)
        name = _required_str(entry.get("name", _MISSING), f"{location}.name", errors)
        props = _validate_props(entry.get("props", []), f"{location}.props", errors)
        hooks = _validate_hooks(entry.get("before_create", []), f"{location}.before_create", errors)
        select_clients = entry.get("select_clients", False)
        if not isinstance(select_clients, bool):
            errors.append(f"{location}.select_clients must be a boolean")
            continue
        if template_id is None or name is None or props is None or hooks is None:
            continue

        templates.append(
            Template(
                id=template_id,
                name=name,
                props=tuple(props),
                select_clients=select_clients,
                before_create=tuple(hooks),
            )
        )
    return templates


def _validate_props(value: Any, path: str, errors: list[str]) -> list[TemplateProp] | None:
    if not isinstance(value, list):
        errors.append(f"{path} must be a list")
        return None
    props: list[TemplateProp] = []
    for index, entry in enumerate(value):
        location = f"{path}[{index}]"
        if not _check_mapping(entry, location, _PROP_KEYS, errors):
            continue
        name = _required_str(entry.get("name", _MISSING), f"{location}.name", errors)
        prompt = _required_str(entry.get("prompt", _MISSING), f"{location}.prompt", errors)
        if name is not None and prompt is not None:
            props.append(TemplateProp(name=name, prompt=prompt))
    return props


def _validate_hooks(value: Any, path: str, errors: list[str]) -> list[HookCommand] | None:
    if not isinstance(value, list):
        errors.append(f"{path} must be a list")
        return None
    hooks: list[HookCommand] = []
    for index, entry in enumerate(value):
        location = f"{path}[{index}]"
        if not _check_mapping(entry, location, _HOOK_KEYS, errors):
            continue
        cmd = _required_str(entry.get("cmd", _MISSING), f"{location}.cmd", errors)
        directory = entry.get("dir", "")
        if not isinstance(directory, str):
            errors.append(f"{location}.dir must be a string")
            continue
        if cmd is not None:
            hooks.append(HookCommand(cmd=cmd, dir=directory))
    return hooks


def _validate_clients(entries: list[Any], errors: list[str]) -> list[Client]:
    clients: list[Client] = []
    for index, entry in enumerate(entries):
        location = f"clients[{index}]"
        if not _check_mapping(entry, location, _CLIENT_KEYS, errors):
            continue
        client_id = _required_str(entry.get("id", _MISSING), f"{location}.id", errors)
        name = _required_str(entry.get("name", _MISSING), f"{location}.name", errors)
        category = _required_str(entry.get("category", _MISSING), f"{location}.category", errors)
        if client_id is None or name is None or category is None:
            continue
        clients.append(Client(id=client_id, name=name, category=category))
    return clients


def _check_mapping(
    entry: Any, location: str, allowed: frozenset[str], errors: list[str]
) -> bool:
    if not isinstance(entry, dict):
        errors.append(f"{location} must be a mapping")
        return False
    extra_keys = sorted(str(key) for key in entry if key not in allowed)
    if extra_keys:
        errors.append(
            f"{location} has unexpected keys: {', '.join(extra_keys)}. "
            f"Allowed keys: {', '.join(sorted(allowed))}."
        )
    return True


def _validate_unique_ids(section: str, ids: list[str], errors: list[str]) -> None:
    seen: set[str] = set()
    for item_id in ids:
        if item_id in seen:
            errors.append(f"{section} contains duplicate id '{item_id}'")
        seen.add(item_id)


def _required_str(value: Any, path: str, errors: list[str]) -> str | None:
    if value is _MISSING:
        errors.append(f"{path} is required")
        return None
    if not isinstance(value, str):
        errors.append(f"{path} must be a string")
        return None
    if not value.strip():
        errors.append(f"{path} must be a non-empty string")
        return None
    return value
