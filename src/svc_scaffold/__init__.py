"""svc-scaffold: add template-based services to a multi-service project."""

from __future__ import annotations

__version__ = "0.1.0"

__all__ = ["__version__"]
