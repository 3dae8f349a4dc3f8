"""Run configuration: paths, manifest file names, markers and commands."""

from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

__all__ = ["ScaffoldConfig", "resolve_config"]

_ENV_PROJECT_ROOT = "SVC_SCAFFOLD_PROJECT_ROOT"
_ENV_HOME = "SVC_SCAFFOLD_HOME"
_ENV_CATALOG = "SVC_SCAFFOLD_CATALOG"
_ENV_CLIENTS_ROOT = "SVC_SCAFFOLD_CLIENTS_ROOT"
_ENV_INSTALL_COMMAND = "SVC_SCAFFOLD_INSTALL_COMMAND"

_DEFAULT_HOME = ".scaffold"
_DEFAULT_INSTALL_COMMAND = "npm install"


@dataclass(frozen=True)
class ScaffoldConfig:
    """Resolved settings for one scaffolding run.

    All paths are absolute once produced by :func:`resolve_config`.
    """

    project_root: Path
    home: Path
    catalog_path: Path
    templates_dir: Path
    clients_root: Path
    services_dir: str = "services"
    stack_manifest: str = "stack.json"
    env_manifest: str = "stack-env.json"
    deploy_manifest: str = "stack-deploy.json"
    template_manifest: str = "service-manifest.json"
    usage_example: str = "usage-example.ts"
    main_file: str = "main.ts"
    imports_marker: str = "// @scaffold:imports"
    usage_marker: str = "// @scaffold:client-usage"
    import_prefix: str = "import"
    install_command: str = _DEFAULT_INSTALL_COMMAND
    stack_env_file: str = ".env.stack"
    remove_dirs: tuple[str, ...] = (".git",)

    @property
    def stack_path(self) -> Path:
        return self.project_root / self.stack_manifest

    @property
    def env_path(self) -> Path:
        return self.project_root / self.env_manifest

    @property
    def deploy_path(self) -> Path:
        return self.project_root / self.deploy_manifest

    def service_dir(self, service_name: str) -> Path:
        """Return the directory a service named *service_name* lives in."""
        return self.project_root / self.services_dir / service_name

    def template_dir(self, template_id: str) -> Path:
        return self.templates_dir / template_id

    def usage_example_path(self, client_id: str) -> Path:
        return self.clients_root / client_id / self.usage_example


def resolve_config(
    *,
    project_root: Path | None = None,
    home: Path | None = None,
    catalog_path: Path | None = None,
    clients_root: Path | None = None,
    install_command: str | None = None,
) -> ScaffoldConfig:
    """Return the effective configuration after applying precedence rules.

    Explicit arguments win over environment variables, which win over
    defaults.  Relative paths are resolved against the current directory.
    """
    root = project_root or _env_path(_ENV_PROJECT_ROOT) or Path.cwd()
    root = root.resolve()
    resolved_home = (home or _env_path(_ENV_HOME) or root / _DEFAULT_HOME).resolve()
    resolved_catalog = (
        catalog_path or _env_path(_ENV_CATALOG) or resolved_home / "catalog.yaml"
    ).resolve()
    resolved_clients = (
        clients_root or _env_path(_ENV_CLIENTS_ROOT) or resolved_home / "clients"
    ).resolve()

    if install_command is None:
        env_install = os.environ.get(_ENV_INSTALL_COMMAND)
        install_command = (
            env_install.strip() if env_install is not None else _DEFAULT_INSTALL_COMMAND
        )

    return ScaffoldConfig(
        project_root=root,
        home=resolved_home,
        catalog_path=resolved_catalog,
        templates_dir=resolved_home / "templates",
        clients_root=resolved_clients,
        install_command=install_command,
    )


def _env_path(key: str) -> Path | None:
    value = os.environ.get(key)
    if value is None or not value.strip():
        return None
    return Path(value.strip())
