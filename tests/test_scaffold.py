"""End-to-end tests for the scaffolding orchestrator."""

from __future__ import annotations

import json
from pathlib import Path
from typing import Any

import pytest

from svc_scaffold.catalog import Catalog, load_catalog
from svc_scaffold.config import ScaffoldConfig, resolve_config
from svc_scaffold.manifests import ManifestError
from svc_scaffold.prompts import PropertyAborted, ScriptedPrompter, SelectionAborted
from svc_scaffold.scaffold import ServiceScaffolder
from svc_scaffold.shell import ExternalCommandError
from svc_scaffold.validators import ServiceNameError

_CATALOG = """\
templates:
  - id: "node-api"
    name: "Node.js API"
    select_clients: true
    props:
      - name: "PORT"
        prompt: "Service port"
    before_create:
      - cmd: "git init"
      - cmd: "touch marker"
        dir: "/tools"
  - id: "static"
    name: "Static site"
clients:
  - id: "nats"
    name: "NATS"
    category: "broker"
  - id: "pg"
    name: "PostgreSQL"
    category: "database"
"""

_MAIN = """// @scaffold:imports
import { start } from './app';

async function main() {
  // @scaffold:client-usage
  await start();
}
"""


class FakeRunner:
    def __init__(self, fail_on: str | None = None) -> None:
        self.calls: list[tuple[str, Path]] = []
        self._fail_on = fail_on

    def run(self, cmd: str, cwd: Path) -> None:
        self.calls.append((cmd, cwd))
        if cmd == self._fail_on:
            raise ExternalCommandError(cmd, cwd, 1)


class RecordingReconciler:
    def __init__(self) -> None:
        self.seen: list[dict[str, Any]] = []

    def reconcile(self, stack: dict[str, Any]) -> None:
        self.seen.append(stack)


def _write_json(path: Path, data: Any) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(json.dumps(data, indent=2), encoding="utf-8")


def _read_json(path: Path) -> Any:
    return json.loads(path.read_text(encoding="utf-8"))


def _make_project(tmp_path: Path) -> tuple[ScaffoldConfig, Catalog]:
    root = tmp_path / "shop"
    home = tmp_path / "home"
    _write_json(root / "stack.json", {"name": "shop", "services": {}, "clients": {}})
    _write_json(root / "stack-env.json", {"services": {}})
    _write_json(root / "stack-deploy.json", {"env": {"LOG_LEVEL": "info"}})

    (home).mkdir()
    (home / "catalog.yaml").write_text(_CATALOG, encoding="utf-8")

    tpl = home / "templates" / "node-api"
    (tpl / ".git").mkdir(parents=True)
    (tpl / ".git" / "HEAD").write_text("ref: refs/heads/main\n", encoding="utf-8")
    (tpl / "main.ts").write_text(_MAIN, encoding="utf-8")
    (tpl / "config.ts").write_text(
        "export const project = '{{PROJECT}}';\nexport const port = {{PORT}};\n",
        encoding="utf-8",
    )
    _write_json(tpl / "package.json", {"name": "node-api-template", "license": "MIT"})
    _write_json(
        tpl / "service-manifest.json",
        {
            "stack": {"build": "."},
            "env": {"vars": {"PORT": "8080"}, "debugEnvFile": "/.env"},
            "deploy": {"env": {"ORDERS_URL": "http://orders:8080"}},
        },
    )
    (home / "templates" / "static").mkdir(parents=True)
    (home / "templates" / "static" / "index.html").write_text("<h1>hi</h1>", encoding="utf-8")

    clients = home / "clients"
    (clients / "nats").mkdir(parents=True)
    (clients / "nats" / "usage-example.ts").write_text(
        "import { connect } from 'nats';\n\nconst nc = await connect();\n", encoding="utf-8"
    )
    (clients / "pg").mkdir(parents=True)
    (clients / "pg" / "usage-example.ts").write_text(
        "import { Pool } from 'pg';\n\nconst pool = new Pool();\n", encoding="utf-8"
    )

    config = resolve_config(project_root=root, home=home, install_command="npm install")
    return config, load_catalog(config.catalog_path)


def _scaffolder(
    config: ScaffoldConfig,
    catalog: Catalog,
    answers: list[str],
    runner: FakeRunner | None = None,
) -> tuple[ServiceScaffolder, ScriptedPrompter, FakeRunner, RecordingReconciler]:
    prompter = ScriptedPrompter(answers)
    runner = runner or FakeRunner()
    reconciler = RecordingReconciler()
    scaffolder = ServiceScaffolder(
        config, catalog, prompter, runner=runner, reconciler=reconciler
    )
    return scaffolder, prompter, runner, reconciler


class TestServiceScaffolder:
    def test_full_run(self, tmp_path: Path, capsys: pytest.CaptureFixture[str]) -> None:
        config, catalog = _make_project(tmp_path)
        scaffolder, prompter, runner, reconciler = _scaffolder(
            config, catalog, ["1", "8080", "1", "2", "0"]
        )

        result = scaffolder.run("orders")

        service_dir = config.service_dir("orders")
        assert result.service_dir == service_dir.resolve()
        assert result.template.id == "node-api"
        assert [c.id for c in result.clients] == ["nats", "pg"]
        assert [(p.name, p.value) for p in result.properties] == [
            ("PROJECT", "shop"),
            ("PORT", "8080"),
        ]
        assert result.injected is True
        assert result.commands_run == ["git init", "touch marker", "npm install"]
        assert prompter.remaining == 0

        assert runner.calls == [
            ("git init", service_dir),
            ("touch marker", service_dir / "tools"),
            ("npm install", service_dir),
        ]

        stack = _read_json(config.stack_path)
        assert stack["services"]["orders"] == {
            "build": ".",
            "clients": {"nats": {}, "pg": {}},
        }
        assert stack["clients"] == {"nats": {"external": False}, "pg": {"external": False}}
        assert _read_json(config.env_path) == {"services": {"orders": {"PORT": "8080"}}}
        assert _read_json(config.deploy_path) == {
            "env": {"LOG_LEVEL": "info", "ORDERS_URL": "http://orders:8080"}
        }
        assert len(reconciler.seen) == 1
        assert "orders" in reconciler.seen[0]["services"]

        assert result.manifests_written == [
            config.stack_path,
            config.env_path,
            (service_dir / ".env").resolve(),
            config.deploy_path,
        ]
        assert (service_dir / ".env").read_text(encoding="utf-8") == "PORT=8080\n"
        assert not (service_dir / "service-manifest.json").exists()
        assert not (service_dir / ".git").exists()
        assert _read_json(service_dir / "package.json")["name"] == "orders"
        assert (service_dir / "config.ts").read_text(encoding="utf-8") == (
            "export const project = 'shop';\nexport const port = 8080;\n"
        )

        main = (service_dir / "main.ts").read_text(encoding="utf-8")
        assert main.startswith(
            "import { connect } from 'nats';\nimport { Pool } from 'pg';\n"
        )
        assert "  //========== NATS ==========\n  {\n    const nc = await connect();\n  }" in main
        assert "  //========== PostgreSQL ==========" in main
        assert "@scaffold" not in main

        out = capsys.readouterr().out
        assert "Creating new service: orders" in out
        assert "Select service template:" in out

    def test_reselecting_client_registers_once(self, tmp_path: Path) -> None:
        config, catalog = _make_project(tmp_path)
        scaffolder, _, _, _ = _scaffolder(config, catalog, ["1", "8080", "1", "1", "0"])

        result = scaffolder.run("orders")

        assert [c.id for c in result.clients] == ["nats"]
        stack = _read_json(config.stack_path)
        assert stack["services"]["orders"]["clients"] == {"nats": {}}

    def test_template_without_clients(self, tmp_path: Path) -> None:
        config, catalog = _make_project(tmp_path)
        scaffolder, prompter, runner, reconciler = _scaffolder(config, catalog, ["2"])

        result = scaffolder.run("site")

        assert result.clients == []
        assert result.injected is False
        assert prompter.remaining == 0
        assert runner.calls == [("npm install", config.service_dir("site"))]
        assert reconciler.seen == []
        assert result.manifests_written == [config.stack_path]
        stack = _read_json(config.stack_path)
        assert stack["services"]["site"] == {"clients": {}}
        assert (config.service_dir("site") / "index.html").exists()

    def test_skip_install(self, tmp_path: Path) -> None:
        config, catalog = _make_project(tmp_path)
        scaffolder, _, runner, _ = _scaffolder(config, catalog, ["2"])

        result = scaffolder.run("site", install=False)

        assert runner.calls == []
        assert result.commands_run == []

    def test_invalid_name_has_no_side_effects(self, tmp_path: Path) -> None:
        config, catalog = _make_project(tmp_path)
        scaffolder, prompter, _, _ = _scaffolder(config, catalog, ["1"])
        before = config.stack_path.read_text(encoding="utf-8")

        with pytest.raises(ServiceNameError):
            scaffolder.run("Bad Name")

        assert prompter.asked == []
        assert not (config.project_root / "services").exists()
        assert config.stack_path.read_text(encoding="utf-8") == before

    def test_existing_directory_is_rejected(self, tmp_path: Path) -> None:
        config, catalog = _make_project(tmp_path)
        config.service_dir("orders").mkdir(parents=True)
        scaffolder, prompter, _, _ = _scaffolder(config, catalog, ["1"])

        with pytest.raises(FileExistsError, match="Directory already exists"):
            scaffolder.run("orders")
        assert prompter.asked == []

    def test_template_selection_abort(self, tmp_path: Path) -> None:
        config, catalog = _make_project(tmp_path)
        scaffolder, _, runner, _ = _scaffolder(config, catalog, ["x"])

        with pytest.raises(SelectionAborted):
            scaffolder.run("orders")

        assert not config.service_dir("orders").exists()
        assert runner.calls == []

    def test_empty_property_aborts_before_directory(self, tmp_path: Path) -> None:
        config, catalog = _make_project(tmp_path)
        before = config.stack_path.read_text(encoding="utf-8")
        scaffolder, _, _, _ = _scaffolder(config, catalog, ["1", ""])

        with pytest.raises(PropertyAborted):
            scaffolder.run("orders")

        assert not config.service_dir("orders").exists()
        assert config.stack_path.read_text(encoding="utf-8") == before

    def test_client_selection_abort(self, tmp_path: Path) -> None:
        config, catalog = _make_project(tmp_path)
        scaffolder, _, _, _ = _scaffolder(config, catalog, ["1", "8080", "1", "nope"])

        with pytest.raises(SelectionAborted):
            scaffolder.run("orders")
        assert not config.service_dir("orders").exists()

    def test_hook_failure_stops_run(self, tmp_path: Path) -> None:
        config, catalog = _make_project(tmp_path)
        scaffolder, _, runner, _ = _scaffolder(
            config, catalog, ["1", "8080", "0"], runner=FakeRunner(fail_on="git init")
        )

        with pytest.raises(ExternalCommandError):
            scaffolder.run("orders")

        assert runner.calls == [("git init", config.service_dir("orders"))]
        assert config.service_dir("orders").is_dir()
        assert "orders" not in _read_json(config.stack_path)["services"]

    def test_malformed_stack_manifest_fails_before_any_side_effect(self, tmp_path: Path) -> None:
        config, catalog = _make_project(tmp_path)
        config.stack_path.write_text("{nope", encoding="utf-8")
        scaffolder, prompter, runner, _ = _scaffolder(config, catalog, ["1", "8080", "0"])

        with pytest.raises(ManifestError, match="JSON parse error"):
            scaffolder.run("orders")

        assert prompter.asked == []
        assert runner.calls == []
        assert not config.service_dir("orders").exists()

    def test_non_object_stack_manifest_fails_before_any_side_effect(self, tmp_path: Path) -> None:
        config, catalog = _make_project(tmp_path)
        config.stack_path.write_text("[]", encoding="utf-8")
        scaffolder, _, runner, _ = _scaffolder(config, catalog, ["1", "8080", "0"])

        with pytest.raises(ManifestError):
            scaffolder.run("orders")

        assert runner.calls == []
        assert not config.service_dir("orders").exists()

    def test_missing_stack_manifest_fails_before_any_side_effect(self, tmp_path: Path) -> None:
        config, catalog = _make_project(tmp_path)
        config.stack_path.unlink()
        scaffolder, _, runner, _ = _scaffolder(config, catalog, ["1", "8080", "0"])

        with pytest.raises(FileNotFoundError):
            scaffolder.run("orders")

        assert runner.calls == []
        assert not config.service_dir("orders").exists()
