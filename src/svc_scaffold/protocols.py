"""Protocols (interfaces) for the collaborators the scaffolder drives."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Prompter(Protocol):
    """Interface for reading one line of user input.

    Implementations raise ``ScaffoldAborted`` when the user cancels.
    """

    def ask(self, prompt: str) -> str:
        """Show *prompt* and return the raw answer."""
        ...


@runtime_checkable
class CommandRunner(Protocol):
    """Interface for synchronous external commands (hooks, dependency install)."""

    def run(self, cmd: str, cwd: Path) -> None:
        """Run *cmd* in *cwd*, raising ``ExternalCommandError`` on failure."""
        ...


@runtime_checkable
class EnvReconciler(Protocol):
    """Regenerates the project env file from an updated stack document."""

    def reconcile(self, stack: dict[str, Any]) -> None:
        """Rewrite derived env state for every service in *stack*."""
        ...
