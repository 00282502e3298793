"""Staging, subprocess execution and virtual environment handling."""

from uv_run.execution.runner import (
    ExecutionHandle,
    ExecutionResult,
    ProcessRunner,
    build_run_command,
)
from uv_run.execution.staging import StagingArea
from uv_run.execution.venv import activate_venv, find_project_venv, project_environment

__all__ = [
    "ExecutionHandle",
    "ExecutionResult",
    "ProcessRunner",
    "StagingArea",
    "activate_venv",
    "build_run_command",
    "find_project_venv",
    "project_environment",
]
