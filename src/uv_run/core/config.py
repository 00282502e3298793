"""Configuration models for uv-run.

The configuration is an immutable value built once at the composition
boundary (CLI or editor glue) and passed explicitly to every action:

    defaults -> YAML file -> overrides

Example:
    >>> from uv_run.core.config import load_config
    >>> config = load_config(overrides={"execution": {"run_command": "python3"}})
    >>> config.execution.run_command
    'python3'

"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from uv_run.core.exceptions import ConfigError

logger = logging.getLogger(__name__)

# Maximum config file size (1MB)
MAX_CONFIG_SIZE = 1024 * 1024

DEFAULT_STAGING_DIR = "~/.cache/uv_run"
DEFAULT_CONFIG_PATH = Path("~/.config/uv_run/config.yaml")


class ExecutionConfig(BaseModel):
    """Execution options.

    Attributes:
        run_command: Command template used to run scripts. The script path is
            appended, shell-quoted.
        notify_output: Relay process output and exit status to the user.

    """

    model_config = ConfigDict(frozen=True)

    run_command: str = Field(
        default="uv run python",
        min_length=1,
        description="Python run command template",
    )
    notify_output: bool = Field(
        default=True,
        description="Show process output and exit status",
    )


class UvRunConfig(BaseModel):
    """Root configuration.

    Attributes:
        auto_activate_venv: Run child processes inside the project's .venv
            when one exists.
        notify_activate_venv: Tell the user when a venv was activated.
        staging_dir: Directory holding the staging scripts.
        execution: Execution options.

    """

    model_config = ConfigDict(frozen=True)

    auto_activate_venv: bool = Field(default=True)
    notify_activate_venv: bool = Field(default=True)
    staging_dir: Path = Field(default=Path(DEFAULT_STAGING_DIR))
    execution: ExecutionConfig = Field(default_factory=ExecutionConfig)

    @field_validator("staging_dir", mode="after")
    @classmethod
    def expand_staging_dir(cls, v: Path) -> Path:
        """Expand ~ in the staging directory."""
        return v.expanduser()


def _deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge override into base recursively, override wins.

    Neither input is mutated.
    """
    merged = dict(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _deep_merge(merged[key], value)
        else:
            merged[key] = value
    return merged


def _read_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML config file into a mapping.

    Args:
        path: Path to the YAML file.

    Returns:
        Parsed mapping (empty for an empty file).

    Raises:
        ConfigError: On read, size, parse or shape errors.

    """
    if not path.is_file():
        raise ConfigError(f"Config path is not a file: {path}")

    try:
        with path.open("r", encoding="utf-8") as f:
            content = f.read(MAX_CONFIG_SIZE + 1)
    except OSError as e:
        raise ConfigError(f"Cannot read config {path}: {e}") from e

    if len(content) > MAX_CONFIG_SIZE:
        raise ConfigError(f"Config {path} exceeds 1MB limit")

    try:
        data = yaml.safe_load(content)
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if data is None:
        return {}
    if not isinstance(data, dict):
        raise ConfigError(f"Config must be a YAML mapping, got {type(data).__name__}")
    return data


def load_config(
    path: Path | str | None = None,
    overrides: dict[str, Any] | None = None,
) -> UvRunConfig:
    """Build the configuration value.

    Args:
        path: Optional YAML config file. Tilde is expanded.
        overrides: Optional mapping applied last.

    Returns:
        Validated, frozen UvRunConfig.

    Raises:
        ConfigError: If the file is unusable or the merged data is invalid.

    """
    data: dict[str, Any] = UvRunConfig().model_dump(mode="python")

    if path is not None:
        config_path = Path(path).expanduser()
        logger.debug("Loading config from %s", config_path)
        data = _deep_merge(data, _read_config_file(config_path))

    if overrides:
        data = _deep_merge(data, overrides)

    try:
        return UvRunConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Config validation failed: {e}") from e
