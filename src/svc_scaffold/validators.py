"""Validation of user-supplied names before any side effect happens."""

from __future__ import annotations

import re

__all__ = ["MAX_NAME_LENGTH", "ServiceNameError", "validate_service_name"]

MAX_NAME_LENGTH = 64

# Lowercase words joined by single hyphens or underscores, starting with a letter.
_NAME_RE = re.compile(r"^[a-z][a-z0-9]*(?:[-_][a-z0-9]+)*$")


class ServiceNameError(ValueError):
    """Raised when a service name is structurally invalid."""


def validate_service_name(name: str) -> str:
    """Return *name* unchanged if it is a valid service name.

    Raises:
        ServiceNameError: If the name is empty, too long, or contains
            characters other than lowercase letters, digits, ``-`` and ``_``.
    """
    if not name:
        msg = "Service name not specified"
        raise ServiceNameError(msg)
    if len(name) > MAX_NAME_LENGTH:
        msg = f"Service name '{name}' is longer than {MAX_NAME_LENGTH} characters"
        raise ServiceNameError(msg)
    if not _NAME_RE.match(name):
        msg = (
            f"Invalid service name '{name}': use lowercase letters, digits, '-' or '_', "
            "starting with a letter"
        )
        raise ServiceNameError(msg)
    return name
