"""Numbered-menu selection flows.

Two flows are supported:

* ``select_one`` - pick exactly one option; any unusable answer aborts.
* ``select_many`` - pick options one at a time until ``0`` is entered.
  Unknown option numbers are reported and the loop continues; picking an
  option twice keeps a single entry.
"""

from __future__ import annotations

import re
import sys
from collections.abc import Callable, Sequence
from typing import TypeVar

from svc_scaffold.prompts import SelectionAborted
from svc_scaffold.protocols import Prompter

__all__ = ["EXIT_OPTION", "NUMBER_PROMPT", "select_many", "select_one"]

T = TypeVar("T")

NUMBER_PROMPT = "Type the number"
EXIT_OPTION = "0"

_DIGITS_RE = re.compile(r"^[0-9]+$")


def select_one(labels: Sequence[str], prompter: Prompter) -> int:
    """Show *labels* as a 1-based menu and return the chosen 0-based index.

    Raises:
        SelectionAborted: If the answer is not a number or is out of range.
    """
    for number, label in enumerate(labels, start=1):
        _print_option(number, label)

    answer = _read_number(prompter)
    index = int(answer) - 1
    if index < 0 or index >= len(labels):
        msg = f"No option {answer}"
        raise SelectionAborted(msg)
    return index


def select_many(
    options: Sequence[T],
    prompter: Prompter,
    *,
    label: Callable[[T], str] = str,
    name: Callable[[T], str] | None = None,
) -> list[T]:
    """Accumulate options until the exit sentinel ``0`` is chosen.

    The returned list keeps insertion order and holds each option object at
    most once (compared by identity).

    Raises:
        SelectionAborted: If the prompter is cancelled or an answer is not a number.
    """
    display_name = name or label
    selected: list[T] = []

    while True:
        _print_option(0, "exit selection")
        for number, option in enumerate(options, start=1):
            _print_option(number, label(option))

        answer = _read_number(prompter)
        if answer == EXIT_OPTION:
            return selected

        index = int(answer) - 1
        if 0 <= index < len(options):
            option = options[index]
            if not any(existing is option for existing in selected):
                selected.append(option)
        else:
            print(f"No option {answer}", file=sys.stderr)

        print()
        print("Selected: ")
        print(f"[{', '.join(display_name(item) for item in selected)}]")
        print("Select another one: ")
        print()


def _read_number(prompter: Prompter) -> str:
    answer = prompter.ask(NUMBER_PROMPT).strip()
    if not _DIGITS_RE.match(answer):
        msg = f"Digits only, got {answer!r}"
        raise SelectionAborted(msg)
    # Normalise "00", "007" and the like so "0" is the only exit token.
    return str(int(answer))


def _print_option(number: int, label: str) -> None:
    print(f"{number}) {label}")
