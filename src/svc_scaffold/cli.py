"""Command-line interface for svc-scaffold."""

from __future__ import annotations

import argparse
import logging
import os
import sys
from pathlib import Path
from typing import TYPE_CHECKING

from svc_scaffold import __version__

if TYPE_CHECKING:
    from svc_scaffold.models import ScaffoldResult


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="svc-scaffold",
        description="svc-scaffold: add template-based services to a multi-service project.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Log diagnostic details to stderr.",
    )

    subparsers = parser.add_subparsers(dest="command")

    add_parser = subparsers.add_parser("add-service", help="Create a new service.")
    add_parser.add_argument("name", help="Name of the new service.")
    add_parser.add_argument(
        "--project-root",
        type=Path,
        default=None,
        help="Project directory. Overrides SVC_SCAFFOLD_PROJECT_ROOT. Default: current directory.",
    )
    _add_catalog_arguments(add_parser)
    add_parser.add_argument(
        "--skip-install",
        action="store_true",
        default=False,
        help="Do not run the dependency install command.",
    )

    catalog_parser = subparsers.add_parser("catalog", help="List templates and clients.")
    catalog_parser.add_argument(
        "--project-root",
        type=Path,
        default=None,
        help="Project directory. Overrides SVC_SCAFFOLD_PROJECT_ROOT. Default: current directory.",
    )
    _add_catalog_arguments(catalog_parser)

    return parser


def _add_catalog_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--home",
        type=Path,
        default=None,
        help="Directory holding the catalog, templates and clients. Overrides SVC_SCAFFOLD_HOME.",
    )
    parser.add_argument(
        "--catalog",
        type=Path,
        default=None,
        help="Path to the catalog YAML file. Overrides SVC_SCAFFOLD_CATALOG.",
    )


def _add_service_command(
    name: str,
    *,
    project_root: Path | None,
    home: Path | None,
    catalog_path: Path | None,
    skip_install: bool,
) -> int:
    """Execute the 'add-service' subcommand."""
    from svc_scaffold.catalog import CatalogValidationError, load_catalog
    from svc_scaffold.config import resolve_config
    from svc_scaffold.manifests import ManifestError
    from svc_scaffold.prompts import ConsolePrompter, ScaffoldAborted
    from svc_scaffold.scaffold import ServiceScaffolder
    from svc_scaffold.shell import ExternalCommandError
    from svc_scaffold.validators import ServiceNameError

    config = resolve_config(project_root=project_root, home=home, catalog_path=catalog_path)

    try:
        catalog = load_catalog(config.catalog_path)
    except (FileNotFoundError, CatalogValidationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    scaffolder = ServiceScaffolder(config, catalog, ConsolePrompter())
    try:
        result = scaffolder.run(name, install=not skip_install)
    except ScaffoldAborted as exc:
        print(f"Aborted: {exc}", file=sys.stderr)
        return 1
    except ExternalCommandError as exc:
        print(f"External command failed: {exc}", file=sys.stderr)
        return 1
    except (ServiceNameError, FileExistsError, FileNotFoundError, ManifestError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    _print_success(result)
    return 0


def _catalog_command(
    *,
    project_root: Path | None,
    home: Path | None,
    catalog_path: Path | None,
) -> int:
    from svc_scaffold.catalog import CatalogValidationError, load_catalog
    from svc_scaffold.config import resolve_config

    config = resolve_config(project_root=project_root, home=home, catalog_path=catalog_path)
    try:
        catalog = load_catalog(config.catalog_path)
    except (FileNotFoundError, CatalogValidationError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print("Templates:")
    for index, template in enumerate(catalog.templates, start=1):
        extra = " (selects clients)" if template.select_clients else ""
        print(f"{index}. {template.id} - {template.name}{extra}")
    print("Clients:")
    for index, client in enumerate(catalog.clients, start=1):
        print(f"{index}. {client.id} - {client.label}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")

    if args.command == "add-service":
        name: str = args.name
        return _add_service_command(
            name,
            project_root=args.project_root,
            home=args.home,
            catalog_path=args.catalog,
            skip_install=args.skip_install,
        )

    if args.command == "catalog":
        return _catalog_command(
            project_root=args.project_root,
            home=args.home,
            catalog_path=args.catalog,
        )

    # No subcommand: print help.
    parser.print_help()
    return 0


def _print_success(result: ScaffoldResult) -> None:
    from svc_scaffold.scaffold import banner

    banner(f"Success! Created {result.service_name} service in {result.service_dir}")
    print()
    print("We suggest that you continue by typing")
    print()
    print(f"\t cd {os.path.join('.', 'services', result.service_name)}")
    print("\t (start coding: edit the main file, add dependencies, etc.)")
    print()


if __name__ == "__main__":
    sys.exit(main())
