"""Core data models for svc-scaffold.

This module defines the typed dataclasses used across the scaffolding run:

- **Catalog-related**: HookCommand, TemplateProp, Template, Client
- **Run-related**: Property, EnvSpec, DeployAttrs, ManifestFragment
- **Outcome-related**: ScaffoldResult
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

# ---------------------------------------------------------------------------
# Catalog-related models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class HookCommand:
    """A shell command run before the template tree is copied."""

    cmd: str
    dir: str = ""


@dataclass(frozen=True)
class TemplateProp:
    """A custom property a template asks for.

    ``func`` produces the value.  When it is ``None`` the Property Collector
    asks the active prompter using ``prompt``.
    """

    name: str
    prompt: str
    func: Callable[[], str] | None = field(default=None, compare=False)


@dataclass(frozen=True)
class Template:
    """A service template from the catalog."""

    id: str
    name: str
    props: tuple[TemplateProp, ...] = ()
    select_clients: bool = False
    before_create: tuple[HookCommand, ...] = ()


@dataclass(frozen=True)
class Client:
    """A third-party integration a service can connect to."""

    id: str
    name: str
    category: str

    @property
    def label(self) -> str:
        return f"({self.category}) {self.name}"


# ---------------------------------------------------------------------------
# Run-related models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Property:
    """A collected ``{name, value}`` pair substituted into the service tree."""

    name: str
    value: str


@dataclass(frozen=True)
class EnvSpec:
    """Environment variables a template declares for the new service."""

    vars: dict[str, Any] | None = None
    debug_env_file: str | None = None


@dataclass(frozen=True)
class DeployAttrs:
    """Deploy manifest additions; ``env`` is merged into the top-level ``env`` map."""

    env: dict[str, Any] = field(default_factory=dict)


@dataclass(frozen=True)
class ManifestFragment:
    """Template-bundled defaults consumed once at service creation."""

    stack_attrs: dict[str, Any] | None = None
    env_spec: EnvSpec | None = None
    deploy_attrs: DeployAttrs | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> ManifestFragment:
        """Build a fragment from the ``stack`` / ``env`` / ``deploy`` keys of *data*."""
        stack = data.get("stack")
        env = data.get("env")
        deploy = data.get("deploy")

        env_spec: EnvSpec | None = None
        if isinstance(env, dict):
            vars_raw = env.get("vars")
            debug_file = env.get("debugEnvFile")
            env_spec = EnvSpec(
                vars=dict(vars_raw) if isinstance(vars_raw, dict) else None,
                debug_env_file=debug_file if isinstance(debug_file, str) and debug_file else None,
            )

        deploy_attrs: DeployAttrs | None = None
        if isinstance(deploy, dict):
            deploy_env = deploy.get("env")
            deploy_attrs = DeployAttrs(env=dict(deploy_env) if isinstance(deploy_env, dict) else {})

        return cls(
            stack_attrs=dict(stack) if isinstance(stack, dict) else None,
            env_spec=env_spec,
            deploy_attrs=deploy_attrs,
        )


# ---------------------------------------------------------------------------
# Outcome-related models
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class ScaffoldResult:
    """Summary of a completed scaffolding run."""

    service_name: str
    service_dir: Path
    template: Template
    properties: list[Property]
    clients: list[Client]
    injected: bool = False
    commands_run: list[str] = field(default_factory=list)
    manifests_written: list[Path] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Exports
# ---------------------------------------------------------------------------

__all__ = [
    "Client",
    "DeployAttrs",
    "EnvSpec",
    "HookCommand",
    "ManifestFragment",
    "Property",
    "ScaffoldResult",
    "Template",
    "TemplateProp",
]
