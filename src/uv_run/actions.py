"""User-facing actions: run a selection, a function, a file or a uv command.

Each action recomputes its inputs from the buffer snapshot it is given,
stages the script, and submits it to the runner without waiting. Errors are
raised in pipeline order:

- InputError before anything is written
- ResourceError before anything is launched
"""

from __future__ import annotations

import logging
import shlex
from collections.abc import Sequence
from dataclasses import dataclass
from pathlib import Path

from uv_run.context.types import SelectionRange, SourceBuffer
from uv_run.core.config import UvRunConfig
from uv_run.core.exceptions import InputError
from uv_run.execution.runner import (
    ExecutionHandle,
    ExitCallback,
    LineCallback,
    ProcessRunner,
    build_run_command,
)
from uv_run.execution.staging import StagingArea
from uv_run.execution.venv import project_environment
from uv_run.synthesis.functions import (
    Chooser,
    build_function_catalog,
    select_function,
    synthesize_invocation_script,
)
from uv_run.synthesis.selection import synthesize_selection_script

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class OutputCallbacks:
    """Where process output goes."""

    on_stdout: LineCallback | None = None
    on_stderr: LineCallback | None = None
    on_exit: ExitCallback | None = None


def _launch(
    config: UvRunConfig,
    command: str,
    runner: ProcessRunner,
    callbacks: OutputCallbacks | None,
    cwd: Path | None,
) -> ExecutionHandle:
    workdir = cwd or Path.cwd()
    env, venv_path = project_environment(workdir, config.auto_activate_venv)
    if venv_path is not None and config.notify_activate_venv:
        logger.info("Activated virtual environment: %s", venv_path)

    callbacks = callbacks or OutputCallbacks()
    if not config.execution.notify_output:
        callbacks = OutputCallbacks(on_exit=callbacks.on_exit)

    return runner.submit(
        command,
        on_stdout=callbacks.on_stdout,
        on_stderr=callbacks.on_stderr,
        on_exit=callbacks.on_exit,
        cwd=workdir,
        env=env,
    )


def run_selection(
    config: UvRunConfig,
    buffer: SourceBuffer,
    selection: SelectionRange,
    runner: ProcessRunner,
    callbacks: OutputCallbacks | None = None,
    cwd: Path | None = None,
) -> ExecutionHandle:
    """Run the selected code with the file's imports and globals.

    Raises:
        InputError: Empty selection or invalid range.
        ResourceError: Staging or launch failure.

    """
    script = synthesize_selection_script(buffer.lines, selection)
    path = StagingArea(config.staging_dir).write(script)
    logger.info("Running selected code...")
    return _launch(
        config, build_run_command(config.execution.run_command, path), runner, callbacks, cwd
    )


def choose_function(
    file_path: Path,
    buffer: SourceBuffer,
    chooser: Chooser,
    function_name: str | None = None,
) -> str | None:
    """Resolve which top-level function to run.

    A given function_name must be defined in the buffer; otherwise the
    catalog selection policy applies.

    Returns:
        Function name, or None if the chooser was cancelled.

    Raises:
        InputError: No functions, or function_name not among them.

    """
    catalog = build_function_catalog(buffer.lines)
    if function_name is None:
        entry = select_function(catalog, chooser)
        return None if entry is None else entry.name
    if not any(entry.name == function_name for entry in catalog):
        raise InputError(f"Function not found in {file_path.name}: {function_name}")
    return function_name


def run_function(
    config: UvRunConfig,
    file_path: Path,
    buffer: SourceBuffer,
    runner: ProcessRunner,
    chooser: Chooser,
    function_name: str | None = None,
    callbacks: OutputCallbacks | None = None,
    cwd: Path | None = None,
) -> ExecutionHandle | None:
    """Run one top-level function of a file.

    Args:
        config: Configuration value.
        file_path: Path of the file the buffer was read from.
        buffer: Buffer snapshot.
        runner: Process runner.
        chooser: Asked only when the file has several functions and
            function_name is not given.
        function_name: Run this function without asking.
        callbacks: Output callbacks.
        cwd: Working directory for the process.

    Returns:
        ExecutionHandle, or None if the chooser was cancelled.

    Raises:
        InputError: No functions, or function_name not among them.
        ResourceError: Staging or launch failure.

    """
    name = choose_function(file_path, buffer, chooser, function_name)
    if name is None:
        return None

    script = synthesize_invocation_script(file_path, name)
    path = StagingArea(config.staging_dir).write(script)
    logger.info("Running function: %s", name)
    return _launch(
        config, build_run_command(config.execution.run_command, path), runner, callbacks, cwd
    )


def run_file(
    config: UvRunConfig,
    file_path: Path | None,
    runner: ProcessRunner,
    callbacks: OutputCallbacks | None = None,
    cwd: Path | None = None,
) -> ExecutionHandle:
    """Run a whole file with the configured run command.

    Raises:
        InputError: If no file is given.
        ResourceError: Launch failure.

    """
    if file_path is None or not str(file_path):
        raise InputError("No file is open")
    logger.info("Running: %s", file_path.name)
    return _launch(
        config, build_run_command(config.execution.run_command, file_path), runner, callbacks, cwd
    )


def run_package_command(
    config: UvRunConfig,
    args: Sequence[str],
    runner: ProcessRunner,
    callbacks: OutputCallbacks | None = None,
    cwd: Path | None = None,
) -> ExecutionHandle:
    """Run a uv subcommand such as ``add``, ``remove``, ``sync`` or ``init``.

    Raises:
        InputError: If args is empty.
        ResourceError: If uv cannot be started.

    """
    if not args:
        raise InputError("No uv command given")
    command = shlex.join(["uv", *args])
    return _launch(config, command, runner, callbacks, cwd)
