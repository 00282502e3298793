"""Buffer snapshots and module-level context extraction.

Pipeline: SourceBuffer → extract_context() → ExtractedContext
"""

from uv_run.context.extractor import extract_context
from uv_run.context.types import ExtractedContext, SelectionRange, SourceBuffer

__all__ = [
    "extract_context",
    "ExtractedContext",
    "SelectionRange",
    "SourceBuffer",
]
