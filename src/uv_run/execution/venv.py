"""Project virtual environment lookup and activation.

Activation never touches os.environ; it derives a new environment mapping
that the runner passes to child processes.
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from pathlib import Path

logger = logging.getLogger(__name__)

VENV_DIR_NAME = ".venv"


def find_project_venv(cwd: Path | str) -> Path | None:
    """Return cwd/.venv if it is a directory."""
    venv_path = Path(cwd) / VENV_DIR_NAME
    if venv_path.is_dir():
        return venv_path
    return None


def activate_venv(
    venv_path: Path | str,
    environ: Mapping[str, str],
    platform: str = sys.platform,
) -> dict[str, str]:
    """Derive an environment with a virtual environment activated.

    Args:
        venv_path: Root of the virtual environment.
        environ: Base environment. Not modified.
        platform: Platform identifier, "win32" selects Scripts and ";".

    Returns:
        New environment with VIRTUAL_ENV set and the venv's executables
        first on PATH.

    """
    is_windows = platform == "win32"
    bin_dir = "Scripts" if is_windows else "bin"
    pathsep = ";" if is_windows else ":"

    venv = str(venv_path)
    env = dict(environ)
    env["VIRTUAL_ENV"] = venv
    venv_bin = f"{venv}/{bin_dir}"
    current_path = env.get("PATH", "")
    env["PATH"] = f"{venv_bin}{pathsep}{current_path}" if current_path else venv_bin
    return env


def project_environment(
    cwd: Path | str,
    auto_activate: bool,
) -> tuple[dict[str, str], Path | None]:
    """Environment for child processes started from cwd.

    Args:
        cwd: Project directory.
        auto_activate: Activate cwd/.venv when present.

    Returns:
        Tuple of (environment, activated venv path or None).

    """
    if auto_activate:
        venv_path = find_project_venv(cwd)
        if venv_path is not None:
            logger.debug("Activating virtual environment: %s", venv_path)
            return activate_venv(venv_path, os.environ), venv_path
    return dict(os.environ), None
