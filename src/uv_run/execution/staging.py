"""Staging files for synthesized scripts.

Each ScriptKind owns one fixed file in the staging directory. Every write
replaces the whole file through a temp file and os.replace(), so a reader
sees either the previous script or the new one, never a mix.

Two quick triggers of the same kind share the path. A slow-starting run of
the first script may read the second; last write wins.
"""

from __future__ import annotations

import contextlib
import logging
import os
from pathlib import Path

from uv_run.core.exceptions import ResourceError
from uv_run.synthesis.types import ScriptKind, SynthesizedScript

logger = logging.getLogger(__name__)

# Suffix for temporary files during atomic write
TEMP_FILE_SUFFIX = ".tmp"


class StagingArea:
    """Fixed-path staging directory.

    Attributes:
        directory: Directory holding one file per ScriptKind.

    """

    def __init__(self, directory: Path | str) -> None:
        self.directory = Path(directory).expanduser()

    def path_for(self, kind: ScriptKind) -> Path:
        """Return the staging file path for a script kind."""
        return self.directory / kind.file_name

    def write(self, script: SynthesizedScript) -> Path:
        """Write a script to its staging file, replacing any previous one.

        Args:
            script: Script to stage.

        Returns:
            Path of the staging file.

        Raises:
            ResourceError: If the directory or file cannot be written.

        """
        path = self.path_for(script.kind)
        temp_path = path.with_suffix(path.suffix + TEMP_FILE_SUFFIX)

        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(temp_path, "w", encoding="utf-8") as f:
                f.write(script.text)
            os.replace(temp_path, path)
        except OSError as e:
            with contextlib.suppress(OSError):
                temp_path.unlink(missing_ok=True)
            raise ResourceError(f"Failed to create temporary file {path}: {e}") from e

        logger.debug("Staged %s script at %s", script.kind.value, path)
        return path
