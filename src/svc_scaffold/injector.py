"""Client usage code generation and marker-based injection.

Each selected client may ship a usage snippet.  Import lines from all
snippets are hoisted into one de-duplicated header; the remaining lines of
each snippet become a scoped block under a banner comment.  Both are then
spliced into the service's entry-point file at two marker tokens.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

from svc_scaffold.config import ScaffoldConfig
from svc_scaffold.models import Client

__all__ = [
    "CodeInjector",
    "UsageCode",
    "build_usage_code",
    "client_block",
    "inject_usage_code",
    "split_snippet",
]

log = logging.getLogger(__name__)

_BLOCK_INDENT = "  "


@dataclass
class UsageCode:
    """Aggregated header and body lines for all selected clients."""

    header: list[str] = field(default_factory=list)
    body: list[str] = field(default_factory=list)

    @property
    def empty(self) -> bool:
        return not self.header and not self.body


def split_snippet(text: str, import_prefix: str = "import") -> tuple[list[str], list[str]]:
    """Split snippet *text* into ``(import_lines, body_lines)``.

    A line is an import when it starts with *import_prefix* as a whole word,
    so ``importer.run();`` stays in the body.  A leading blank body line
    (usually the gap after the imports) is dropped.
    """
    imports: list[str] = []
    body: list[str] = []
    for line in text.strip().splitlines():
        if _is_import(line, import_prefix):
            imports.append(line)
        else:
            body.append(line)
    if body and not body[0].strip():
        body.pop(0)
    return imports, body


def _is_import(line: str, prefix: str) -> bool:
    stripped = line.strip()
    if not stripped.startswith(prefix):
        return False
    if not prefix or not _is_word_char(prefix[-1]):
        return True
    rest = stripped[len(prefix) :]
    return not rest or not _is_word_char(rest[0])


def _is_word_char(char: str) -> bool:
    return char.isalnum() or char in "_$"


def client_block(client: Client, body: Sequence[str]) -> list[str]:
    """Return *body* wrapped in a braces scope under a banner for *client*."""
    return [
        "",
        f"//========== {client.name} ==========",
        "{",
        *(f"{_BLOCK_INDENT}{line}" for line in body),
        "}",
    ]


def build_usage_code(
    clients: Sequence[Client],
    snippet_path: Callable[[Client], Path],
    import_prefix: str = "import",
) -> UsageCode:
    """Collect usage code for *clients* in selection order.

    Clients without a snippet file are skipped.
    """
    code = UsageCode()
    for client in clients:
        path = snippet_path(client)
        if not path.is_file():
            log.debug("No usage snippet for client '%s' at %s", client.id, path)
            continue

        imports, body = split_snippet(path.read_text(encoding="utf-8"), import_prefix)
        for line in imports:
            if line not in code.header:
                code.header.append(line)
        code.body.extend(client_block(client, body))
    return code


def inject_usage_code(
    path: Path,
    code: UsageCode,
    *,
    imports_marker: str,
    usage_marker: str,
) -> bool:
    """Splice *code* into *path* at the two markers.

    The indentation in front of *usage_marker* is applied to every body
    line.  Only the first occurrence of each marker is replaced.  When the
    file has no usage marker it is left untouched and ``False`` is returned.
    """
    text = path.read_text(encoding="utf-8")
    if usage_marker not in text:
        return False

    indent = ""
    for line in text.split("\n"):
        if usage_marker in line:
            indent = line.split(usage_marker, 1)[0]
            break

    body = "\n".join(f"{indent}{line}" for line in code.body)
    updated = text.replace(imports_marker, "\n".join(code.header), 1).replace(
        f"{indent}{usage_marker}", body, 1
    )
    path.write_text(updated, encoding="utf-8")
    return True


class CodeInjector:
    """Generates client usage code for a new service using run configuration."""

    def __init__(self, config: ScaffoldConfig) -> None:
        self._config = config

    def build(self, clients: Sequence[Client]) -> UsageCode:
        return build_usage_code(
            clients,
            lambda client: self._config.usage_example_path(client.id),
            self._config.import_prefix,
        )

    def inject(self, service_dir: Path, clients: Sequence[Client]) -> bool:
        """Inject usage code for *clients* into the service's main file.

        Returns ``True`` if the main file was rewritten.
        """
        code = self.build(clients)
        if code.empty:
            return False

        main_file = service_dir / self._config.main_file
        if not main_file.is_file():
            log.warning("Main file %s not found; skipping client usage code", main_file)
            return False

        injected = inject_usage_code(
            main_file,
            code,
            imports_marker=self._config.imports_marker,
            usage_marker=self._config.usage_marker,
        )
        if not injected:
            log.info("No usage marker in %s; left unchanged", main_file)
        return injected
