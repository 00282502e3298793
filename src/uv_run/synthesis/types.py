"""Data types produced by the synthesizers.

Defines the selection Classification variants, ScriptKind, SynthesizedScript
and FunctionCatalogEntry.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import TypeAlias


@dataclass(frozen=True, slots=True)
class FunctionDef:
    """Selection starts with a function definition.

    Attributes:
        name: Name of the defined function.

    """

    name: str


@dataclass(frozen=True, slots=True)
class ClassDef:
    """Selection starts with a class definition."""


@dataclass(frozen=True, slots=True)
class IndentedFragment:
    """Every non-blank selected line is indented."""


@dataclass(frozen=True, slots=True)
class Expression:
    """Selection is a bare expression whose value should be shown."""


@dataclass(frozen=True, slots=True)
class Statement:
    """Anything else: run as-is."""


Classification: TypeAlias = FunctionDef | ClassDef | IndentedFragment | Expression | Statement


class ScriptKind(str, Enum):
    """Kinds of synthesized scripts, one staging file each."""

    SELECTION = "selection"
    FUNCTION = "function"

    @property
    def file_name(self) -> str:
        """Well-known staging file name for this kind."""
        return f"run_{self.value}.py"


@dataclass(frozen=True, slots=True)
class SynthesizedScript:
    """A complete, runnable script.

    Attributes:
        kind: Which pipeline produced the script.
        lines: Script lines without terminators.

    """

    kind: ScriptKind
    lines: tuple[str, ...]

    @property
    def text(self) -> str:
        """Script source, newline-terminated."""
        return "\n".join(self.lines) + "\n"


@dataclass(frozen=True, slots=True)
class FunctionCatalogEntry:
    """A top-level function found in a buffer.

    Attributes:
        name: Function name.
        occurrence_index: Position of this header among all headers found,
            starting at 0. Duplicate names keep distinct indexes.

    """

    name: str
    occurrence_index: int

    @property
    def label(self) -> str:
        """Text shown to the user when choosing a function."""
        return f"def {self.name}()"
