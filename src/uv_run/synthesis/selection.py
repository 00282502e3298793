"""Selection classification and script synthesis.

Pipeline: selection_text() → classify_selection() → build_selection_script()

The synthesized script is laid out as::

    <imports>

    <globals>

    # SELECTED CODE
    <transformed selection>

The transformation depends on the classification: indented fragments are
wrapped in a function, function definitions get a guarded call, bare
expressions get their value printed and plain statements get a completion
marker.
"""

from __future__ import annotations

import ast
import logging
import re
from collections.abc import Sequence

from uv_run.context.extractor import extract_context
from uv_run.context.types import ExtractedContext, SelectionRange
from uv_run.core.exceptions import InputError
from uv_run.synthesis.types import (
    ClassDef,
    Classification,
    Expression,
    FunctionDef,
    IndentedFragment,
    ScriptKind,
    Statement,
    SynthesizedScript,
)

logger = logging.getLogger(__name__)

WRAPPER_NAME = "run_selection"
INDENT = "    "
SELECTION_MARKER = "# SELECTED CODE"
EXPRESSION_LABEL = "Expression result:"
COMPLETION_MESSAGE = "Code executed successfully."

DEF_HEADER_PATTERN = re.compile(r"^\s*def\s+(\w+)\s*\(")
CLASS_HEADER_PATTERN = re.compile(r"^\s*class\s+\w+")
PRINT_CALL_PATTERN = re.compile(r"\bprint\s*\(")
# "=" that is not part of ==, !=, <= or >=
ASSIGNMENT_OPERATOR_PATTERN = re.compile(r"(?<![=!<>])=(?!=)")
LOOP_OR_BRANCH_PATTERN = re.compile(r"\b(?:for|if)\s")


def selection_text(lines: Sequence[str], selection: SelectionRange) -> str:
    """Cut the selected text out of a buffer.

    The last line is clipped to end_column and the first line starts at
    start_column; interior lines are taken verbatim.

    Args:
        lines: Buffer lines.
        selection: 1-indexed inclusive range.

    Returns:
        Selected text, lines joined with newlines.

    Raises:
        InputError: If the range does not fit the buffer.

    """
    selection.validate(len(lines))
    selected = list(lines[selection.start_line - 1 : selection.end_line])
    selected[-1] = selected[-1][: selection.end_column]
    selected[0] = selected[0][selection.start_column - 1 :]
    return "\n".join(selected)


def is_all_indented(text: str) -> bool:
    """Return True if every non-blank line starts with whitespace."""
    non_blank = [line for line in text.splitlines() if line.strip()]
    return bool(non_blank) and all(line[0].isspace() for line in non_blank)


def _header_line(text: str) -> str:
    """Return the first non-blank line that is not a decorator."""
    for line in text.splitlines():
        stripped = line.strip()
        if stripped and not stripped.startswith("@"):
            return line
    return ""


def _expression_source(text: str) -> str | None:
    """Return the source of text's single expression, or None.

    Trailing comments are not part of the returned source, so it can be
    embedded in a call.
    """
    source = text.strip()
    try:
        tree = ast.parse(source, mode="eval")
    except (SyntaxError, ValueError):
        return None
    return ast.get_source_segment(source, tree.body) or ast.unparse(tree.body)


def _is_called(name: str, text: str) -> bool:
    """Return True if text calls name() anywhere outside its own def header."""
    for match in re.finditer(rf"\b{re.escape(name)}\s*\(", text):
        if re.search(r"\bdef\s+$", text[: match.start()]):
            continue
        return True
    return False


def classify_selection(text: str) -> Classification:
    """Classify a selected fragment.

    Args:
        text: Selected text.

    Returns:
        One of the Classification variants.

    """
    if is_all_indented(text):
        return IndentedFragment()

    header = _header_line(text)
    def_match = DEF_HEADER_PATTERN.match(header)
    if def_match:
        return FunctionDef(name=def_match.group(1))
    if CLASS_HEADER_PATTERN.match(header):
        return ClassDef()

    if (
        not ASSIGNMENT_OPERATOR_PATTERN.search(text)
        and not LOOP_OR_BRANCH_PATTERN.search(text)
        and not PRINT_CALL_PATTERN.search(text)
        and _expression_source(text) is not None
    ):
        return Expression()
    return Statement()


def _transform(text: str, classification: Classification) -> list[str]:
    """Turn the selection into the script body for its classification."""
    selected = text.splitlines()

    if isinstance(classification, IndentedFragment):
        body = [f"{INDENT}{line}" if line.strip() else "" for line in selected]
        return [
            f"def {WRAPPER_NAME}():",
            *body,
            "",
            "# Auto-call the wrapper function",
            f"{WRAPPER_NAME}()",
        ]

    if isinstance(classification, Expression):
        expression = _expression_source(text) or text.strip()
        return [
            *selected,
            "",
            "# Auto-added print for expression",
            *f"print({EXPRESSION_LABEL!r}, {expression})".splitlines(),
        ]

    if isinstance(classification, FunctionDef):
        name = classification.name
        if _is_called(name, text):
            return selected
        return [
            *selected,
            "",
            "# Auto-added function call",
            'if __name__ == "__main__":',
            f'{INDENT}print("Auto-executing function: {name}")',
            f"{INDENT}result = {name}()",
            f"{INDENT}if result is not None:",
            f'{INDENT * 2}print(f"Return value: {{result}}")',
        ]

    if isinstance(classification, Statement):
        if PRINT_CALL_PATTERN.search(text) or text.lstrip().startswith("#"):
            return selected
        return [
            *selected,
            "",
            "# Auto-added execution marker",
            f"print({COMPLETION_MESSAGE!r})",
        ]

    # ClassDef: definitions only, nothing to call
    return selected


def build_selection_script(text: str, context: ExtractedContext) -> SynthesizedScript:
    """Assemble a runnable script from selected text and its file context.

    Args:
        text: Selected text.
        context: Imports and globals of the surrounding file.

    Returns:
        SynthesizedScript of kind SELECTION.

    Raises:
        InputError: If the selection is empty or blank.

    """
    if not text.strip():
        raise InputError("No code selected")

    classification = classify_selection(text)
    logger.debug("Selection classified as %s", type(classification).__name__)

    lines: list[str] = []
    for statement in context.imports:
        lines.extend(statement.splitlines())
    lines.append("")
    lines.extend(context.globals)
    lines.append("")
    lines.append(SELECTION_MARKER)
    lines.extend(_transform(text, classification))

    return SynthesizedScript(kind=ScriptKind.SELECTION, lines=tuple(lines))


def synthesize_selection_script(
    lines: Sequence[str],
    selection: SelectionRange,
) -> SynthesizedScript:
    """Build the script for a selection within a buffer.

    Args:
        lines: Full buffer lines.
        selection: Selected range.

    Returns:
        SynthesizedScript of kind SELECTION.

    Raises:
        InputError: If the range is invalid or selects only blank text.

    """
    text = selection_text(lines, selection)
    if not text.strip():
        raise InputError("No code selected")
    return build_selection_script(text, extract_context(lines))
