"""Line-oriented extraction of imports and globals.

A deliberately heuristic scanner, not a parser. It walks the buffer once
with two states:

- Default: imports and zero-indent assignments are collected.
- InClassBody: entered on a ``class`` header, left on the first code line
  indented no deeper than that header.

Only one open class body is tracked. Nested classes are handled only as far
as leaving the outer class resets the state.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Iterable
from enum import Enum

from uv_run.context.types import ExtractedContext

logger = logging.getLogger(__name__)

IMPORT_PATTERN = re.compile(r"^\s*(?:import\s+\S|from\s+\S+\s+import\b)")
CLASS_HEADER_PATTERN = re.compile(r"^\s*class\s+\w")
FUNCTION_HEADER_PATTERN = re.compile(r"^\s*(?:async\s+)?def\s")
ASSIGNMENT_PATTERN = re.compile(r"^[A-Za-z_]\w*\s*=(?!=)")
_LEADING_WS = re.compile(r"^\s*")
# Names, aliases, commas, dots, parens, star and line continuations
_NAME_LIST_PATTERN = re.compile(r"^[\w\s,.()*\\]*$")


class ScanState(Enum):
    """Scanner states."""

    DEFAULT = "default"
    IN_CLASS_BODY = "in_class_body"


def indent_width(line: str) -> int:
    """Return the number of leading whitespace characters."""
    match = _LEADING_WS.match(line)
    return match.end() if match else 0


def is_code_line(line: str) -> bool:
    """Return True for lines that are neither blank nor comments."""
    stripped = line.strip()
    return bool(stripped) and not stripped.startswith("#")


def _strip_comment(line: str) -> str:
    """Drop a trailing ``#`` comment. Import lines carry no string literals."""
    return line.split("#", 1)[0]


def _continues(statement: str) -> bool:
    """Return True if an import statement spans further lines."""
    code = "\n".join(_strip_comment(part) for part in statement.splitlines())
    if code.rstrip().endswith("\\"):
        return True
    return code.count("(") > code.count(")")


def _can_continue(line: str) -> bool:
    """Return True if line could belong to an open import's name list."""
    if (
        IMPORT_PATTERN.match(line)
        or CLASS_HEADER_PATTERN.match(line)
        or FUNCTION_HEADER_PATTERN.match(line)
    ):
        return False
    return bool(_NAME_LIST_PATTERN.match(_strip_comment(line)))


def extract_context(lines: Iterable[str]) -> ExtractedContext:
    """Collect imports and top-level assignments from a buffer.

    Args:
        lines: Buffer lines, without terminators.

    Returns:
        ExtractedContext with imports and globals in file order.

    """
    imports: list[str] = []
    globals_: list[str] = []
    state = ScanState.DEFAULT
    class_indent = 0
    pending_import: list[str] | None = None

    for line in lines:
        # Continuation of a multi-line import
        if pending_import is not None:
            if _can_continue(line):
                pending_import.append(line.strip())
                if not _continues("\n".join(pending_import)):
                    imports.append("\n".join(pending_import))
                    pending_import = None
                continue
            logger.warning("Dropping unterminated import: %s", pending_import[0])
            pending_import = None

        if (
            state is ScanState.IN_CLASS_BODY
            and is_code_line(line)
            and indent_width(line) <= class_indent
        ):
            state = ScanState.DEFAULT

        if IMPORT_PATTERN.match(line):
            statement = line.strip()
            if _continues(statement):
                pending_import = [statement]
            else:
                imports.append(statement)
            continue

        if CLASS_HEADER_PATTERN.match(line):
            state = ScanState.IN_CLASS_BODY
            class_indent = indent_width(line)
            continue

        if (
            state is ScanState.DEFAULT
            and not FUNCTION_HEADER_PATTERN.match(line)
            and ASSIGNMENT_PATTERN.match(line)
        ):
            globals_.append(line)

    if pending_import is not None:
        logger.warning("Dropping unterminated import: %s", pending_import[0])

    return ExtractedContext(imports=tuple(imports), globals=tuple(globals_))
