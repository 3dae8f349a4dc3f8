"""Scaffolding orchestrator -- ties selection, files, manifests and code together."""

from __future__ import annotations

import logging
from pathlib import Path

from svc_scaffold.catalog import Catalog
from svc_scaffold.config import ScaffoldConfig
from svc_scaffold.files import copy_template_tree, remove_dirs, update_package_json
from svc_scaffold.injector import CodeInjector
from svc_scaffold.manifests import consume_template_manifest, load_manifest
from svc_scaffold.models import Client, ScaffoldResult, Template
from svc_scaffold.properties import apply_properties, collect_properties, project_name
from svc_scaffold.protocols import CommandRunner, EnvReconciler, Prompter
from svc_scaffold.selection import select_many, select_one
from svc_scaffold.shell import ShellRunner
from svc_scaffold.sync import ConfigSynchronizer
from svc_scaffold.validators import validate_service_name

__all__ = ["RULE", "ServiceScaffolder", "banner"]

log = logging.getLogger(__name__)

RULE = "-" * 78


def banner(message: str) -> None:
    """Print a horizontal rule followed by *message*."""
    print(RULE)
    print(message)


class ServiceScaffolder:
    """Creates a new service from a catalog template and wires it into the project.

    Steps run strictly in sequence.  Validation and selection failures stop
    the run before the service directory exists; a failure after that point
    leaves whatever was already written in place.
    """

    def __init__(
        self,
        config: ScaffoldConfig,
        catalog: Catalog,
        prompter: Prompter,
        *,
        runner: CommandRunner | None = None,
        reconciler: EnvReconciler | None = None,
    ) -> None:
        self._config = config
        self._catalog = catalog
        self._prompter = prompter
        self._runner = runner or ShellRunner()
        self._synchronizer = ConfigSynchronizer(config, reconciler)
        self._injector = CodeInjector(config)

    def run(self, service_name: str, *, install: bool = True) -> ScaffoldResult:
        """Scaffold *service_name* and return what was created.

        Raises:
            ServiceNameError: If the name is invalid.
            FileExistsError: If the service directory already exists.
            FileNotFoundError: If a project manifest or the template is missing.
            ScaffoldAborted: If the user cancels a prompt or gives unusable input.
            ManifestError: If a project manifest is malformed.
            ExternalCommandError: If a hook or the install command fails.
        """
        validate_service_name(service_name)
        print(f"Creating new service: {service_name}")

        service_dir = self._config.service_dir(service_name)
        if service_dir.exists():
            msg = f"Directory already exists: {service_dir}"
            raise FileExistsError(msg)

        stack = load_manifest(self._config.stack_path)

        template = self._select_template()
        props = collect_properties(
            template,
            project_name(self._config.project_root, stack),
            self._prompter,
        )
        clients = self._select_clients(service_name) if template.select_clients else []

        service_dir.mkdir(parents=True)
        commands_run = self._run_hooks(template, service_dir)

        banner("Copying components...")
        copy_template_tree(self._config.template_dir(template.id), service_dir)
        update_package_json(service_dir / "package.json", service_name)

        banner("Updating service properties...")
        apply_properties(service_dir, props)

        fragment = consume_template_manifest(service_dir / self._config.template_manifest)
        report = self._synchronizer.synchronize(service_name, service_dir, fragment, clients)

        banner("Generating client usage demo code...")
        injected = self._injector.inject(service_dir, clients)

        if install and self._config.install_command:
            print(f'Running "{self._config.install_command}"...')
            self._runner.run(self._config.install_command, service_dir)
            commands_run.append(self._config.install_command)

        banner("Cleaning up...")
        remove_dirs(service_dir, self._config.remove_dirs)

        log.info("Scaffolded service '%s' from template '%s'", service_name, template.id)
        return ScaffoldResult(
            service_name=service_name,
            service_dir=service_dir.resolve(),
            template=template,
            properties=props,
            clients=clients,
            injected=injected,
            commands_run=commands_run,
            manifests_written=report.written,
        )

    # ------------------------------------------------------------------
    # Steps
    # ------------------------------------------------------------------

    def _select_template(self) -> Template:
        print()
        banner("Select service template:")
        templates = self._catalog.templates
        index = select_one([template.name for template in templates], self._prompter)
        return templates[index]

    def _select_clients(self, service_name: str) -> list[Client]:
        print()
        banner(
            f'Select third-party service clients that "{service_name}" connects to '
            "(one at a time),"
        )
        print(
            "(select one of the message broker clients if your services "
            "should talk to each other):"
        )
        return select_many(
            self._catalog.clients,
            self._prompter,
            label=lambda client: client.label,
            name=lambda client: client.name,
        )

    def _run_hooks(self, template: Template, service_dir: Path) -> list[str]:
        commands: list[str] = []
        if not template.before_create:
            return commands

        banner("Running beforeCreate commands...")
        for hook in template.before_create:
            print(f"run: {hook.cmd}")
            cwd = service_dir / hook.dir.lstrip("/\\") if hook.dir else service_dir
            self._runner.run(hook.cmd, cwd)
            commands.append(hook.cmd)
        return commands
