"""Custom exception hierarchy for uv-run.

All custom exceptions inherit from UvRunError to enable:
- Unified exception handling at the CLI boundary
- Clear distinction from built-in exceptions
- Consistent error messaging patterns
"""

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from uv_run.execution.runner import ExecutionResult

__all__ = [
    "UvRunError",
    "ConfigError",
    "InputError",
    "ResourceError",
    "DownstreamError",
]


class UvRunError(Exception):
    """Base exception for all uv-run errors."""

    pass


class ConfigError(UvRunError):
    """Configuration loading or validation error.

    Raised when:
    - Configuration file cannot be read
    - Configuration file is not a YAML mapping
    - Merged configuration fails pydantic validation
    """

    pass


class InputError(UvRunError):
    """User input cannot be turned into a script.

    Raised before any file is written when:
    - The selection is empty or blank
    - The selection range does not fit the buffer
    - No top-level functions exist in the file
    - The requested function name is unknown or not an identifier
    """

    pass


class ResourceError(UvRunError):
    """Staging or execution resource is unavailable.

    Raised when:
    - The staging directory cannot be created
    - The staging file cannot be written (permissions, disk full)
    - The run command executable is not found

    Always raised before an execution is launched.
    """

    pass


class DownstreamError(UvRunError):
    """External process failed.

    The core never raises this on its own. Output of the process is relayed
    verbatim through runner callbacks; callers that want a hard failure call
    ExecutionResult.check().

    Attributes:
        result: The finished ExecutionResult.

    """

    def __init__(self, message: str, result: "ExecutionResult") -> None:
        """Initialize DownstreamError with message and the failed result.

        Args:
            message: Human-readable error message.
            result: ExecutionResult of the failed process.

        """
        super().__init__(message)
        self.result = result
