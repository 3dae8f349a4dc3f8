"""Prompter implementations and the abort signal they raise."""

from __future__ import annotations

from collections.abc import Iterable

__all__ = [
    "ConsolePrompter",
    "PropertyAborted",
    "ScaffoldAborted",
    "ScriptedPrompter",
    "SelectionAborted",
]


class ScaffoldAborted(RuntimeError):
    """Raised when the user cancels or gives unusable input; ends the run."""


class SelectionAborted(ScaffoldAborted):
    """Raised when a template or client selection cannot be completed."""


class PropertyAborted(ScaffoldAborted):
    """Raised when a custom property producer yields an empty value."""


class ConsolePrompter:
    """Prompter that reads answers from stdin."""

    def ask(self, prompt: str) -> str:
        try:
            return input(f"{prompt}: ")
        except (EOFError, KeyboardInterrupt) as exc:
            print()
            msg = "Input cancelled"
            raise ScaffoldAborted(msg) from exc


class ScriptedPrompter:
    """Prompter that replays a fixed sequence of answers.

    Used for non-interactive runs and tests.  Running out of answers is
    treated like the user cancelling the prompt.
    """

    def __init__(self, answers: Iterable[str]) -> None:
        self._answers = list(answers)
        self._asked: list[str] = []

    @property
    def asked(self) -> list[str]:
        """Return the prompts shown so far."""
        return list(self._asked)

    @property
    def remaining(self) -> int:
        return len(self._answers)

    def ask(self, prompt: str) -> str:
        self._asked.append(prompt)
        if not self._answers:
            msg = f"No scripted answer left for prompt: {prompt}"
            raise ScaffoldAborted(msg)
        return self._answers.pop(0)
