"""Top-level function catalog and invocation scripts.

The catalog is a single pass over the buffer matching unindented
``def NAME(`` headers. The invocation script imports the file as a module
from its own directory and calls the chosen function with no arguments.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Sequence
from pathlib import Path

from uv_run.core.exceptions import InputError
from uv_run.synthesis.types import FunctionCatalogEntry, ScriptKind, SynthesizedScript

logger = logging.getLogger(__name__)

TOP_LEVEL_DEF_PATTERN = re.compile(r"^def\s+(\w+)\s*\(")
CHOOSER_PROMPT = "Select function to run:"

# (options, prompt) -> chosen option, or None when cancelled
Chooser = Callable[[Sequence[str], str], "str | None"]


def build_function_catalog(lines: Iterable[str]) -> list[FunctionCatalogEntry]:
    """List top-level functions in file order.

    Duplicate names are kept; each header gets its own entry.

    Args:
        lines: Buffer lines.

    Returns:
        Catalog entries in order of appearance.

    """
    catalog: list[FunctionCatalogEntry] = []
    for line in lines:
        match = TOP_LEVEL_DEF_PATTERN.match(line)
        if match:
            catalog.append(
                FunctionCatalogEntry(name=match.group(1), occurrence_index=len(catalog))
            )
    return catalog


def select_function(
    catalog: Sequence[FunctionCatalogEntry],
    chooser: Chooser,
) -> FunctionCatalogEntry | None:
    """Pick the function to run.

    A single entry is selected without consulting the chooser. With more
    entries the chooser is shown ``def NAME()`` labels; a cancelled chooser
    returns None and nothing else happens.

    Args:
        catalog: Function catalog.
        chooser: Interactive chooser.

    Returns:
        Chosen entry, or None if the chooser was cancelled.

    Raises:
        InputError: If the catalog is empty.

    """
    if not catalog:
        raise InputError("No functions found in current file")
    if len(catalog) == 1:
        return catalog[0]

    options = [entry.label for entry in catalog]
    choice = chooser(options, CHOOSER_PROMPT)
    if choice is None:
        logger.debug("Function chooser cancelled")
        return None
    try:
        return catalog[options.index(choice)]
    except ValueError:
        raise InputError(f"Unknown function choice: {choice}") from None


def synthesize_invocation_script(
    module_path: Path | str,
    function_name: str,
) -> SynthesizedScript:
    """Build a script that imports a file as a module and calls a function.

    Args:
        module_path: Path of the source file. Its stem is the module name
            and its directory is put first on sys.path.
        function_name: Function to call with no arguments.

    Returns:
        SynthesizedScript of kind FUNCTION.

    Raises:
        InputError: If function_name is not a valid identifier or the path
            has no file name.

    """
    if not function_name.isidentifier():
        raise InputError(f"Not a valid function name: {function_name!r}")

    path = Path(module_path).expanduser().absolute()
    module_name = path.stem
    if not module_name:
        raise InputError(f"Cannot derive a module name from {module_path!s}")

    lines = ["import sys", f"sys.path.insert(0, {str(path.parent)!r})"]
    if module_name.isidentifier():
        module_ref = module_name
        lines.append(f"import {module_name}")
    else:
        module_ref = "_module"
        lines.append("import importlib")
        lines.append(f"{module_ref} = importlib.import_module({module_name!r})")

    lines.extend(
        [
            "",
            'if __name__ == "__main__":',
            f'    print("Running function: {function_name}")',
            f"    result = {module_ref}.{function_name}()",
            "    if result is not None:",
            '        print(f"Return value: {result}")',
        ]
    )
    return SynthesizedScript(kind=ScriptKind.FUNCTION, lines=tuple(lines))
