"""Core data types for buffer snapshots and context extraction.

Defines SourceBuffer, SelectionRange, and ExtractedContext as the inputs and
intermediate results shared by the extractor and the synthesizers.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

from uv_run.core.exceptions import InputError


@dataclass(frozen=True, slots=True)
class SourceBuffer:
    """Immutable snapshot of a file's lines.

    Attributes:
        lines: Lines without line terminators.

    """

    lines: tuple[str, ...]

    @classmethod
    def from_text(cls, text: str) -> SourceBuffer:
        """Snapshot text, splitting on any line terminator."""
        return cls(lines=tuple(text.splitlines()))

    @classmethod
    def from_path(cls, path: Path) -> SourceBuffer:
        """Snapshot a UTF-8 file from disk.

        Raises:
            InputError: If the file cannot be read.

        """
        try:
            return cls.from_text(path.read_text(encoding="utf-8"))
        except (OSError, UnicodeDecodeError) as e:
            raise InputError(f"Cannot read {path}: {e}") from e

    def __len__(self) -> int:
        return len(self.lines)


@dataclass(frozen=True, slots=True)
class SelectionRange:
    """Selected region of a SourceBuffer.

    All positions are 1-indexed and inclusive. end_column may exceed the
    length of the last line, meaning "to end of line".

    Attributes:
        start_line: First selected line.
        start_column: First selected column on start_line.
        end_line: Last selected line.
        end_column: Last selected column on end_line.

    """

    start_line: int
    start_column: int
    end_line: int
    end_column: int

    def validate(self, line_count: int) -> None:
        """Check the range against a buffer of line_count lines.

        Raises:
            InputError: If the range is inverted or out of bounds.

        """
        if self.start_line < 1 or self.start_column < 1 or self.end_column < 0:
            raise InputError(f"Selection positions are 1-indexed: {self}")
        if self.end_line < self.start_line:
            raise InputError(f"Selection ends before it starts: {self}")
        if self.end_line > line_count:
            raise InputError(
                f"Selection ends on line {self.end_line}, buffer has {line_count} lines"
            )


@dataclass(frozen=True, slots=True)
class ExtractedContext:
    """Module-level context of a buffer.

    Attributes:
        imports: Import statements, in file order.
        globals: Top-level variable assignments, in file order.

    """

    imports: tuple[str, ...] = field(default_factory=tuple)
    globals: tuple[str, ...] = field(default_factory=tuple)
