"""Project manifest IO and merge operations.

Manifests are JSON documents read and written whole.  Writes use a two-space
indent and no trailing newline so diffs against hand-maintained files stay
small.  Nothing here locks the files: concurrent edits to the same manifest
during a run are lost.
"""

from __future__ import annotations

import json
import logging
from collections.abc import Iterable, Mapping
from pathlib import Path
from typing import Any

from svc_scaffold.models import Client, ManifestFragment

__all__ = [
    "ManifestError",
    "consume_template_manifest",
    "dump_manifest",
    "load_manifest",
    "merge_deploy_env",
    "merge_env_service",
    "merge_stack_service",
    "render_env_lines",
    "save_manifest",
    "write_env_file",
]

log = logging.getLogger(__name__)


class ManifestError(ValueError):
    """Raised when a manifest file is malformed."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = path
        self.reason = reason
        super().__init__(f"Invalid manifest {path}: {reason}")


# ---------------------------------------------------------------------------
# IO
# ---------------------------------------------------------------------------


def load_manifest(path: Path) -> dict[str, Any]:
    """Read and parse a JSON manifest whose top level is an object.

    Raises:
        FileNotFoundError: If *path* does not exist.
        ManifestError: If the file is not valid JSON or not an object.
    """
    raw = path.read_text(encoding="utf-8")
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise ManifestError(path, f"JSON parse error: {exc}") from exc
    if not isinstance(data, dict):
        raise ManifestError(path, "expected a JSON object at the top level")
    return data


def dump_manifest(data: Mapping[str, Any]) -> str:
    """Serialise *data* the way manifests are stored on disk."""
    return json.dumps(data, indent=2, ensure_ascii=False)


def save_manifest(path: Path, data: Mapping[str, Any]) -> Path:
    """Write *data* to *path*, replacing the previous content."""
    path.write_text(dump_manifest(data), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Merges
# ---------------------------------------------------------------------------


def merge_stack_service(
    stack: dict[str, Any],
    service_name: str,
    service_attrs: Mapping[str, Any] | None,
    clients: Iterable[Client],
    *,
    path: Path | None = None,
) -> dict[str, Any]:
    """Register *service_name* and its clients in a stack document.

    The service entry is replaced as a whole.  Each selected client is
    registered under the service and at the top level as a non-external
    client; an existing top-level client entry is reset.
    """
    services = _section(stack, "services", path)
    if service_name in services:
        log.warning("Replacing existing stack entry for service '%s'", service_name)

    entry: dict[str, Any] = {**(service_attrs or {}), "clients": {}}
    services[service_name] = entry

    top_clients = _section(stack, "clients", path)
    for client in clients:
        entry["clients"][client.id] = {}
        top_clients[client.id] = {"external": False}
    return stack


def merge_env_service(
    env: dict[str, Any],
    service_name: str,
    variables: Mapping[str, Any],
    *,
    path: Path | None = None,
) -> dict[str, Any]:
    """Set the env manifest entry of *service_name* to a copy of *variables*."""
    services = _section(env, "services", path)
    if service_name in services:
        log.warning("Replacing existing env entry for service '%s'", service_name)
    services[service_name] = dict(variables)
    return env


def merge_deploy_env(
    deploy: dict[str, Any],
    env: Mapping[str, Any],
    *,
    path: Path | None = None,
) -> dict[str, Any]:
    """Shallow-merge *env* into the deploy document's ``env`` map; *env* wins."""
    current = deploy.get("env")
    if current is None:
        current = {}
    if not isinstance(current, dict):
        raise ManifestError(path or Path("<deploy>"), "'env' must be an object")
    deploy["env"] = {**current, **env}
    return deploy


def _section(doc: dict[str, Any], key: str, path: Path | None) -> dict[str, Any]:
    value = doc.get(key)
    if value is None:
        value = {}
        doc[key] = value
    if not isinstance(value, dict):
        raise ManifestError(path or Path("<manifest>"), f"'{key}' must be an object")
    return value


# ---------------------------------------------------------------------------
# Env files
# ---------------------------------------------------------------------------


def render_env_lines(variables: Mapping[str, Any]) -> list[str]:
    """Convert a variables map to ``KEY=VALUE`` lines.

    Strings are written verbatim; other values as JSON (``true``, ``8080``).
    """
    lines: list[str] = []
    for key, value in variables.items():
        rendered = value if isinstance(value, str) else json.dumps(value)
        lines.append(f"{key}={rendered}")
    return lines


def write_env_file(path: Path, variables: Mapping[str, Any]) -> Path:
    """Write *variables* to *path* as an env file, creating parent directories."""
    path.parent.mkdir(parents=True, exist_ok=True)
    lines = render_env_lines(variables)
    path.write_text("\n".join(lines) + ("\n" if lines else ""), encoding="utf-8")
    return path


# ---------------------------------------------------------------------------
# Template manifest
# ---------------------------------------------------------------------------


def consume_template_manifest(path: Path) -> ManifestFragment | None:
    """Read the template-bundled manifest at *path*, then delete it.

    Returns ``None`` when the template ships no manifest.  A malformed file
    raises :class:`ManifestError` and is left in place.
    """
    if not path.is_file():
        return None
    data = load_manifest(path)
    fragment = ManifestFragment.from_dict(data)
    path.unlink()
    log.debug("Consumed template manifest %s", path)
    return fragment
