"""Synchronous external command execution.

Hooks and dependency installation are opaque shell commands.  They run to
completion in the foreground, with output streamed to the terminal; a
non-zero exit stops the whole run.  There is no retry and no timeout.
"""

from __future__ import annotations

import logging
import subprocess
from pathlib import Path

__all__ = ["ExternalCommandError", "ShellRunner"]

log = logging.getLogger(__name__)


class ExternalCommandError(RuntimeError):
    """Raised when an external command cannot be started or exits non-zero."""

    def __init__(self, cmd: str, cwd: Path, returncode: int | None, detail: str = "") -> None:
        self.cmd = cmd
        self.cwd = cwd
        self.returncode = returncode
        if returncode is None:
            message = f"Command could not be started in {cwd}: {cmd}"
        else:
            message = f"Command failed (exit {returncode}) in {cwd}: {cmd}"
        if detail:
            message = f"{message} ({detail})"
        super().__init__(message)


class ShellRunner:
    """Runs commands through the system shell."""

    def __init__(self) -> None:
        self._history: list[str] = []

    @property
    def history(self) -> list[str]:
        """Return the commands run so far."""
        return list(self._history)

    def run(self, cmd: str, cwd: Path) -> None:
        log.debug("Running: %s (cwd=%s)", cmd, cwd)
        self._history.append(cmd)
        try:
            subprocess.run(cmd, shell=True, cwd=cwd, check=True)
        except subprocess.CalledProcessError as exc:
            raise ExternalCommandError(cmd, cwd, exc.returncode) from exc
        except OSError as exc:
            raise ExternalCommandError(cmd, cwd, None, str(exc)) from exc
