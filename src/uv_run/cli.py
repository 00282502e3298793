"""Command-line entry point for uv-run.

Builds the configuration once, wires console callbacks into the runner and
waits for the submitted process so its exit code becomes the CLI's.
"""

import logging
from pathlib import Path

import typer

from uv_run.actions import (
    OutputCallbacks,
    choose_function,
    run_file,
    run_function,
    run_package_command,
    run_selection,
)
from uv_run.cli_utils import (
    EXIT_CONFIG_ERROR,
    EXIT_ERROR,
    EXIT_SUCCESS,
    _error,
    _info,
    _setup_logging,
    _success,
    _warning,
    console,
    prompt_choice,
)
from uv_run.context.types import SelectionRange, SourceBuffer
from uv_run.core.config import DEFAULT_CONFIG_PATH, UvRunConfig, load_config
from uv_run.core.exceptions import ConfigError, InputError, ResourceError
from uv_run.execution.runner import ExecutionHandle, ExecutionResult, ProcessRunner
from uv_run.synthesis.functions import synthesize_invocation_script
from uv_run.synthesis.selection import synthesize_selection_script

logger = logging.getLogger(__name__)

# Column meaning "through the end of the line"
END_OF_LINE = 2**31 - 1

app = typer.Typer(
    name="uv-run",
    help="Run Python files, selections and functions through uv",
    no_args_is_help=True,
)


def _parse_position(value: str, default_column: int) -> tuple[int, int]:
    """Parse LINE or LINE:COLUMN."""
    line, sep, column = value.partition(":")
    try:
        return int(line), int(column) if sep else default_column
    except ValueError:
        raise typer.BadParameter(f"Expected LINE or LINE:COLUMN, got {value!r}") from None


def _config(ctx: typer.Context) -> UvRunConfig:
    config: UvRunConfig = ctx.obj["config"]
    return config


def _read_buffer(file: Path) -> SourceBuffer:
    try:
        return SourceBuffer.from_path(file)
    except InputError as e:
        _error(str(e))
        raise typer.Exit(code=EXIT_ERROR) from None


def _console_callbacks(config: UvRunConfig) -> OutputCallbacks:
    def on_stdout(line: str) -> None:
        console.print(line, markup=False, highlight=False, soft_wrap=True)

    def on_stderr(line: str) -> None:
        console.print(line, style="yellow", markup=False, highlight=False, soft_wrap=True)

    def on_exit(result: ExecutionResult) -> None:
        if not config.execution.notify_output:
            return
        if result.ok:
            _success(f"Command completed successfully: {result.command}")
        else:
            _error(f"Command failed: {result.command}")

    return OutputCallbacks(on_stdout=on_stdout, on_stderr=on_stderr, on_exit=on_exit)


def _exit_code(result: ExecutionResult | None) -> int:
    """Map a process result to a shell exit status."""
    if result is None:
        return EXIT_ERROR
    # Killed by signal N: Popen reports -N, shells report 128 + N
    if result.exit_code < 0:
        return 128 - result.exit_code
    return result.exit_code


def _finish(handle: ExecutionHandle | None) -> None:
    """Wait for a submitted process and exit with its status."""
    if handle is None:
        raise typer.Exit(code=EXIT_SUCCESS)
    raise typer.Exit(code=_exit_code(handle.wait()))


def _fail(e: Exception) -> typer.Exit:
    _error(str(e))
    return typer.Exit(code=EXIT_ERROR)


@app.callback()
def main(
    ctx: typer.Context,
    config_path: Path | None = typer.Option(
        None,
        "--config",
        "-c",
        help="Path to YAML config file",
    ),
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Enable verbose output"),
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only show errors"),
) -> None:
    """Load configuration and set up logging."""
    _setup_logging(verbose=verbose, quiet=quiet)

    if config_path is None and DEFAULT_CONFIG_PATH.expanduser().is_file():
        config_path = DEFAULT_CONFIG_PATH
    try:
        config = load_config(config_path)
    except ConfigError as e:
        _error(str(e))
        raise typer.Exit(code=EXIT_CONFIG_ERROR) from None

    ctx.obj = {"config": config, "runner": ProcessRunner()}


@app.command("run-file")
def run_file_command(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="Python file to run"),
) -> None:
    """Run a whole file."""
    config = _config(ctx)
    try:
        handle = run_file(config, file, ctx.obj["runner"], _console_callbacks(config))
    except (InputError, ResourceError) as e:
        raise _fail(e) from None
    _finish(handle)


@app.command("run-selection")
def run_selection_command(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="File containing the selection"),
    start: str = typer.Option(..., "--start", "-s", help="Start position LINE[:COLUMN]"),
    end: str = typer.Option(..., "--end", "-e", help="End position LINE[:COLUMN]"),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Print the script instead of running it"
    ),
) -> None:
    """Run selected lines with the file's imports and globals."""
    config = _config(ctx)
    buffer = _read_buffer(file)
    start_line, start_column = _parse_position(start, 1)
    end_line, end_column = _parse_position(end, END_OF_LINE)
    selection = SelectionRange(start_line, start_column, end_line, end_column)

    try:
        if dry_run:
            script = synthesize_selection_script(buffer.lines, selection)
            console.print(script.text, markup=False, highlight=False, soft_wrap=True, end="")
            raise typer.Exit(code=EXIT_SUCCESS)
        _info("Running selected code...")
        handle = run_selection(
            config, buffer, selection, ctx.obj["runner"], _console_callbacks(config)
        )
    except (InputError, ResourceError) as e:
        raise _fail(e) from None
    _finish(handle)


@app.command("run-function")
def run_function_command(
    ctx: typer.Context,
    file: Path = typer.Argument(..., help="File defining the function"),
    name: str | None = typer.Option(
        None, "--name", "-f", help="Function to run (prompt if omitted)"
    ),
    dry_run: bool = typer.Option(
        False, "--dry-run", "-n", help="Print the script instead of running it"
    ),
) -> None:
    """Run one top-level function of a file."""
    config = _config(ctx)
    buffer = _read_buffer(file)

    try:
        if dry_run:
            function_name = choose_function(file, buffer, prompt_choice, name)
            if function_name is None:
                raise typer.Exit(code=EXIT_SUCCESS)
            script = synthesize_invocation_script(file, function_name)
            console.print(script.text, markup=False, highlight=False, soft_wrap=True, end="")
            raise typer.Exit(code=EXIT_SUCCESS)

        handle = run_function(
            config,
            file,
            buffer,
            ctx.obj["runner"],
            prompt_choice,
            function_name=name,
            callbacks=_console_callbacks(config),
        )
    except (InputError, ResourceError) as e:
        raise _fail(e) from None
    _finish(handle)


def _uv(ctx: typer.Context, args: list[str]) -> None:
    config = _config(ctx)
    try:
        handle = run_package_command(config, args, ctx.obj["runner"], _console_callbacks(config))
    except (InputError, ResourceError) as e:
        raise _fail(e) from None
    _finish(handle)


@app.command("add")
def add_command(
    ctx: typer.Context,
    package: str = typer.Argument(..., help="Package to add"),
) -> None:
    """Add a package (uv add)."""
    _uv(ctx, ["add", package])


@app.command("remove")
def remove_command(
    ctx: typer.Context,
    package: str = typer.Argument(..., help="Package to remove"),
) -> None:
    """Remove a package (uv remove)."""
    _uv(ctx, ["remove", package])


@app.command("sync")
def sync_command(
    ctx: typer.Context,
    all_: bool = typer.Option(
        False, "--all", help="Sync all extras, groups and packages"
    ),
) -> None:
    """Sync packages from the lockfile (uv sync)."""
    args = ["sync"]
    if all_:
        args.extend(["--all-extras", "--all-packages", "--all-groups"])
    _uv(ctx, args)


@app.command("init")
def init_command(ctx: typer.Context) -> None:
    """Initialize a new project (uv init)."""
    _uv(ctx, ["init"])


@app.command("venv")
def venv_command(
    ctx: typer.Context,
    path: str | None = typer.Argument(None, help="Environment directory (default .venv)"),
    python: str | None = typer.Option(
        None, "--python", "-p", help="Interpreter version or path for the environment"
    ),
) -> None:
    """Create a virtual environment (uv venv)."""
    args = ["venv"]
    if path:
        args.append(path)
    if python:
        args.extend(["--python", python])
    _uv(ctx, args)


@app.command("staging")
def staging_command(ctx: typer.Context) -> None:
    """Show the staging directory."""
    config = _config(ctx)
    if not config.staging_dir.is_dir():
        _warning(f"Staging directory does not exist yet: {config.staging_dir}")
        return
    _info(f"Staging directory: {config.staging_dir}")


if __name__ == "__main__":
    app()
