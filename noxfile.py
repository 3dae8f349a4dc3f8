"""Nox sessions for svc-scaffold development.

Sessions run against the active environment; install with ``pip install -e ".[dev]"``.
"""

from __future__ import annotations

import nox

nox.options.sessions = ["fmt", "lint", "typecheck", "tests", "cli"]
nox.options.reuse_existing_virtualenvs = True

PACKAGE = "src/svc_scaffold"
SOURCES = ["src", "tests", "noxfile.py"]


@nox.session(python=False)
def fmt(session: nox.Session) -> None:
    """Sort imports and format sources with ruff."""
    session.run("ruff", "check", "--select", "I", "--fix", *SOURCES)
    session.run("ruff", "format", *SOURCES)


@nox.session(python=False)
def lint(session: nox.Session) -> None:
    """Lint without rewriting; also fails on unformatted files."""
    session.run("ruff", "check", *SOURCES)
    session.run("ruff", "format", "--check", *SOURCES)


@nox.session(python=False)
def typecheck(session: nox.Session) -> None:
    """Run mypy (strict, from pyproject) over the package."""
    session.run("mypy", PACKAGE)


@nox.session(python=False)
def tests(session: nox.Session) -> None:
    """Run the pytest suite; extra arguments are passed through."""
    session.run("pytest", *(session.posargs or ["-q"]))


@nox.session(python=False)
def cli(session: nox.Session) -> None:
    """Check the installed console script starts."""
    session.run("svc-scaffold", "--version")
    session.run("svc-scaffold", "add-service", "--help", silent=True)
