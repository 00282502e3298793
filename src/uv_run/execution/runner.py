"""Fire-and-forget subprocess runner.

submit() starts the process and returns immediately. Reader threads forward
stdout and stderr line by line to callbacks, and a waiter thread reports the
exit code. Output is relayed verbatim; a failing process is not interpreted
here.

There is no cancellation: once submitted, a process runs to completion.

Example:
    >>> runner = ProcessRunner()
    >>> handle = runner.submit(
    ...     build_run_command("uv run python", script_path),
    ...     on_stdout=print,
    ... )

"""

from __future__ import annotations

import logging
import shlex
import threading
import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from pathlib import Path
from subprocess import PIPE, Popen
from typing import IO

from uv_run.core.exceptions import DownstreamError, ResourceError

logger = logging.getLogger(__name__)

LineCallback = Callable[[str], None]
ExitCallback = Callable[["ExecutionResult"], None]


@dataclass(frozen=True, slots=True)
class ExecutionResult:
    """Outcome of a finished process.

    Attributes:
        command: Command as submitted.
        exit_code: Process exit code.
        stdout: Collected standard output.
        stderr: Collected standard error.
        duration_ms: Wall time from start to exit.

    """

    command: str
    exit_code: int
    stdout: str
    stderr: str
    duration_ms: int

    @property
    def ok(self) -> bool:
        """True if the process exited with status 0."""
        return self.exit_code == 0

    def check(self) -> ExecutionResult:
        """Return self, or raise DownstreamError on a non-zero exit."""
        if not self.ok:
            raise DownstreamError(
                f"Command failed with exit code {self.exit_code}: {self.command}",
                result=self,
            )
        return self


class ExecutionHandle:
    """Handle to a submitted process.

    The core never waits on a handle. wait() is for outer glue such as the
    CLI, which has nothing else to do while the process runs.
    """

    def __init__(self, command: str, process: Popen[str]) -> None:
        self.command = command
        self.pid = process.pid
        self._done = threading.Event()
        self._result: ExecutionResult | None = None

    def _finish(self, result: ExecutionResult) -> None:
        self._result = result
        self._done.set()

    def done(self) -> bool:
        """Return True once the process has exited."""
        return self._done.is_set()

    def wait(self, timeout: float | None = None) -> ExecutionResult | None:
        """Block until the process exits.

        Args:
            timeout: Seconds to wait, or None for no limit.

        Returns:
            ExecutionResult, or None if the timeout elapsed first.

        """
        self._done.wait(timeout)
        return self._result


def build_run_command(run_command: str, script_path: Path | str) -> str:
    """Append a shell-quoted script path to a run command template."""
    return f"{run_command} {shlex.quote(str(script_path))}"


def _pump(stream: IO[str], chunks: list[str], callback: LineCallback | None) -> None:
    """Read a stream line by line until EOF."""
    for line in iter(stream.readline, ""):
        chunks.append(line)
        if callback is not None:
            try:
                callback(line.rstrip("\n"))
            except Exception:
                logger.exception("Output callback failed")
    stream.close()


class ProcessRunner:
    """Starts processes and streams their output to callbacks."""

    def submit(
        self,
        command: str,
        *,
        on_stdout: LineCallback | None = None,
        on_stderr: LineCallback | None = None,
        on_exit: ExitCallback | None = None,
        cwd: Path | str | None = None,
        env: Mapping[str, str] | None = None,
    ) -> ExecutionHandle:
        """Start a command without waiting for it.

        Args:
            command: Command line, split with shlex.
            on_stdout: Called with each stdout line.
            on_stderr: Called with each stderr line.
            on_exit: Called once with the ExecutionResult.
            cwd: Working directory for the process.
            env: Full environment for the process (inherit if None).

        Returns:
            ExecutionHandle for the running process.

        Raises:
            ResourceError: If the executable cannot be started.

        """
        argv = shlex.split(command)
        if not argv:
            raise ResourceError("Empty run command")

        logger.info("Running: %s", command)
        start_time = time.perf_counter()
        try:
            process = Popen(
                argv,
                stdout=PIPE,
                stderr=PIPE,
                text=True,
                encoding="utf-8",
                errors="replace",
                cwd=cwd,
                env=dict(env) if env is not None else None,
            )
        except FileNotFoundError as e:
            raise ResourceError(f"Executable not found: {argv[0]}") from e
        except PermissionError as e:
            raise ResourceError(f"Permission denied executing {argv[0]}: {e}") from e

        handle = ExecutionHandle(command, process)
        stdout_chunks: list[str] = []
        stderr_chunks: list[str] = []

        stdout_thread = threading.Thread(
            target=_pump,
            args=(process.stdout, stdout_chunks, on_stdout),
            daemon=True,
        )
        stderr_thread = threading.Thread(
            target=_pump,
            args=(process.stderr, stderr_chunks, on_stderr),
            daemon=True,
        )

        def wait_for_exit() -> None:
            returncode = process.wait()
            stdout_thread.join()
            stderr_thread.join()
            result = ExecutionResult(
                command=command,
                exit_code=returncode,
                stdout="".join(stdout_chunks),
                stderr="".join(stderr_chunks),
                duration_ms=int((time.perf_counter() - start_time) * 1000),
            )
            logger.debug(
                "Process exited: command=%s, exit_code=%d, duration_ms=%d",
                command,
                returncode,
                result.duration_ms,
            )
            if on_exit is not None:
                try:
                    on_exit(result)
                except Exception:
                    logger.exception("Exit callback failed")
            handle._finish(result)

        stdout_thread.start()
        stderr_thread.start()
        threading.Thread(target=wait_for_exit, daemon=True).start()
        return handle
