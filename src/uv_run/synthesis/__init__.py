"""Script synthesis for selections and top-level functions.

Two independent pipelines, both producing a SynthesizedScript:

- Selection: selection_text() → classify_selection() → build_selection_script()
- Function: build_function_catalog() → select_function() → synthesize_invocation_script()
"""

from uv_run.synthesis.functions import (
    build_function_catalog,
    select_function,
    synthesize_invocation_script,
)
from uv_run.synthesis.selection import (
    build_selection_script,
    classify_selection,
    selection_text,
    synthesize_selection_script,
)
from uv_run.synthesis.types import (
    ClassDef,
    Classification,
    Expression,
    FunctionCatalogEntry,
    FunctionDef,
    IndentedFragment,
    ScriptKind,
    Statement,
    SynthesizedScript,
)

__all__ = [
    "build_function_catalog",
    "build_selection_script",
    "classify_selection",
    "select_function",
    "selection_text",
    "synthesize_invocation_script",
    "synthesize_selection_script",
    "ClassDef",
    "Classification",
    "Expression",
    "FunctionCatalogEntry",
    "FunctionDef",
    "IndentedFragment",
    "ScriptKind",
    "Statement",
    "SynthesizedScript",
]
