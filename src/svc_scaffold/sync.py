"""Config synchronisation: write a new service into the project manifests.

Four steps run in order, each against its own file:

1. stack merge (always)
2. env sync, when the template declares env vars; the env reconciler reads
   the stack document written by step 1
3. debug env file, when the template names one
4. deploy merge, when the template declares deploy attributes

There is no rollback.  If a later step fails, earlier writes stay on disk.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from svc_scaffold.config import ScaffoldConfig
from svc_scaffold.manifests import (
    ManifestError,
    load_manifest,
    merge_deploy_env,
    merge_env_service,
    merge_stack_service,
    save_manifest,
    write_env_file,
)
from svc_scaffold.models import Client, DeployAttrs, ManifestFragment
from svc_scaffold.protocols import EnvReconciler

__all__ = ["ConfigSynchronizer", "StackEnvFileReconciler", "SyncReport"]

log = logging.getLogger(__name__)


@dataclass
class SyncReport:
    """Files written by a synchronisation run, in write order."""

    written: list[Path] = field(default_factory=list)


class StackEnvFileReconciler:
    """Default reconciler: gathers every service's ``vars`` into one env file."""

    def __init__(self, path: Path) -> None:
        self._path = path

    @property
    def path(self) -> Path:
        return self._path

    def reconcile(self, stack: dict[str, Any]) -> None:
        services = stack.get("services")
        variables: dict[str, Any] = {}
        if isinstance(services, dict):
            for entry in services.values():
                if isinstance(entry, dict) and isinstance(entry.get("vars"), dict):
                    variables.update(entry["vars"])
        write_env_file(self._path, variables)
        log.debug("Reconciled %d stack variables into %s", len(variables), self._path)


class ConfigSynchronizer:
    """Merges a new service into the stack, env and deploy manifests."""

    def __init__(
        self,
        config: ScaffoldConfig,
        reconciler: EnvReconciler | None = None,
    ) -> None:
        self._config = config
        self._reconciler = reconciler or StackEnvFileReconciler(
            config.project_root / config.stack_env_file
        )

    def synchronize(
        self,
        service_name: str,
        service_dir: Path,
        fragment: ManifestFragment | None,
        clients: Sequence[Client],
    ) -> SyncReport:
        """Run all four steps for *service_name*.

        Raises:
            ManifestError: If a target manifest is malformed.
            FileNotFoundError: If a required manifest is missing.
        """
        fragment = fragment or ManifestFragment()
        report = SyncReport()

        self.update_stack(service_name, fragment.stack_attrs, clients, report)

        env_spec = fragment.env_spec
        if env_spec is not None and env_spec.vars is not None:
            self.sync_env(service_name, env_spec.vars, report)
            if env_spec.debug_env_file:
                self.write_debug_env(service_dir, env_spec.debug_env_file, env_spec.vars, report)

        if fragment.deploy_attrs is not None:
            self.update_deploy(fragment.deploy_attrs, report)

        return report

    def update_stack(
        self,
        service_name: str,
        service_attrs: Mapping[str, Any] | None,
        clients: Sequence[Client],
        report: SyncReport,
    ) -> None:
        path = self._config.stack_path
        stack = load_manifest(path)
        merge_stack_service(stack, service_name, service_attrs, clients, path=path)
        report.written.append(save_manifest(path, stack))
        log.info(
            "Registered service '%s' with %d client(s) in %s", service_name, len(clients), path
        )

    def sync_env(
        self,
        service_name: str,
        variables: Mapping[str, Any],
        report: SyncReport,
    ) -> None:
        # The reconciler works from the persisted stack, not the in-memory copy.
        stack = load_manifest(self._config.stack_path)
        self._reconciler.reconcile(stack)

        path = self._config.env_path
        env = load_manifest(path)
        merge_env_service(env, service_name, variables, path=path)
        report.written.append(save_manifest(path, env))
        log.info("Registered %d env var(s) for '%s' in %s", len(variables), service_name, path)

    def write_debug_env(
        self,
        service_dir: Path,
        debug_env_file: str,
        variables: Mapping[str, Any],
        report: SyncReport,
    ) -> None:
        target = _inside(service_dir, debug_env_file)
        report.written.append(write_env_file(target, variables))
        log.info("Wrote debug env file %s", target)

    def update_deploy(self, deploy_attrs: DeployAttrs, report: SyncReport) -> None:
        path = self._config.deploy_path
        deploy = load_manifest(path)
        merge_deploy_env(deploy, deploy_attrs.env, path=path)
        report.written.append(save_manifest(path, deploy))
        log.info("Merged %d deploy env var(s) into %s", len(deploy_attrs.env), path)


def _inside(root: Path, relative: str) -> Path:
    target = (root / relative.lstrip("/\\")).resolve()
    if not target.is_relative_to(root.resolve()):
        raise ManifestError(Path(relative), f"debug env file must stay inside {root}")
    return target
