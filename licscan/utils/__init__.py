"""
Utility modules for licscan.

Shared error types, the registry error handling decorator, and the
external command runner.
"""

from licscan.utils.api_error_handler import handle_external_api_errors
from licscan.utils.command_runner import CommandResult, CommandRunner, SubprocessCommandRunner
from licscan.utils.exceptions import (
    APIConnectionError,
    APITimeoutError,
    EnumerationFailedError,
    ExternalAPIError,
    InvalidConfigurationError,
    LicenseScanError,
    PrepareFailedError,
    RegistryUnavailableError,
)

__all__ = [
    "handle_external_api_errors",
    "CommandResult",
    "CommandRunner",
    "SubprocessCommandRunner",
    "LicenseScanError",
    "InvalidConfigurationError",
    "PrepareFailedError",
    "EnumerationFailedError",
    "ExternalAPIError",
    "APITimeoutError",
    "APIConnectionError",
    "RegistryUnavailableError",
]
