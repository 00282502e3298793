"""Tests for the fire-and-forget process runner.

These tests start real subprocesses using the current interpreter so that
stdout/stderr streaming and exit codes are exercised end to end.
"""

import shlex
import sys
import threading
from pathlib import Path

import pytest

from uv_run.core.exceptions import DownstreamError, ResourceError
from uv_run.execution.runner import ExecutionResult, ProcessRunner, build_run_command

PYTHON = shlex.quote(sys.executable)


def _python(code: str) -> str:
    return f"{PYTHON} -c {shlex.quote(code)}"


class TestBuildRunCommand:
    """Tests for build_run_command()."""

    def test_appends_quoted_path(self) -> None:
        cmd = build_run_command("uv run python", Path("/tmp/my dir/run_selection.py"))
        assert cmd == "uv run python '/tmp/my dir/run_selection.py'"
        assert shlex.split(cmd)[-1] == "/tmp/my dir/run_selection.py"


class TestProcessRunner:
    """Tests for ProcessRunner.submit()."""

    def test_streams_stdout_and_reports_exit(self) -> None:
        stdout: list[str] = []
        exits: list[ExecutionResult] = []
        handle = ProcessRunner().submit(
            _python("print('hello'); print('world')"),
            on_stdout=stdout.append,
            on_exit=exits.append,
        )
        result = handle.wait(timeout=30)
        assert result is not None
        assert handle.done()
        assert result.ok
        assert stdout == ["hello", "world"]
        assert exits == [result]
        assert result.stdout == "hello\nworld\n"

    def test_relays_stderr_and_nonzero_exit(self) -> None:
        stderr: list[str] = []
        handle = ProcessRunner().submit(
            _python("import sys; sys.stderr.write('boom\\n'); sys.exit(3)"),
            on_stderr=stderr.append,
        )
        result = handle.wait(timeout=30)
        assert result is not None
        assert result.exit_code == 3
        assert stderr == ["boom"]
        with pytest.raises(DownstreamError) as exc_info:
            result.check()
        assert exc_info.value.result is result

    def test_submit_does_not_block(self) -> None:
        release = threading.Event()
        lines: list[str] = []

        def on_stdout(line: str) -> None:
            lines.append(line)
            release.wait(timeout=30)

        handle = ProcessRunner().submit(_python("print('x')"), on_stdout=on_stdout)
        # Output callback is still blocked, so the handle cannot be done yet
        assert not handle.done()
        release.set()
        assert handle.wait(timeout=30) is not None

    def test_passes_env_and_cwd(self, tmp_path: Path) -> None:
        stdout: list[str] = []
        handle = ProcessRunner().submit(
            _python("import os; print(os.environ['UV_RUN_TEST']); print(os.getcwd())"),
            on_stdout=stdout.append,
            cwd=tmp_path,
            env={"UV_RUN_TEST": "yes", "PATH": ""},
        )
        handle.wait(timeout=30)
        assert stdout[0] == "yes"
        assert Path(stdout[1]).resolve() == tmp_path.resolve()

    def test_failing_callback_does_not_lose_exit(self) -> None:
        def on_stdout(line: str) -> None:
            raise RuntimeError("callback bug")

        handle = ProcessRunner().submit(_python("print('x')"), on_stdout=on_stdout)
        result = handle.wait(timeout=30)
        assert result is not None
        assert result.ok

    def test_missing_executable_raises_resource_error(self) -> None:
        with pytest.raises(ResourceError, match="Executable not found"):
            ProcessRunner().submit("definitely-not-a-real-binary-uv-run --help")

    def test_empty_command_raises_resource_error(self) -> None:
        with pytest.raises(ResourceError, match="Empty run command"):
            ProcessRunner().submit("   ")
