"""
Exception hierarchy for licscan.

Two families live here:

- ``LicenseScanError`` and its subclasses cover failures of the adapter
  itself (bad configuration, a failed install, unreadable enumerator
  output). These are fatal and surfaced to the operator.
- ``ExternalAPIError`` and its subclasses cover failures when talking to
  the package registry. These carry service/endpoint context and a
  suggested action, and are downgraded to empty metadata per package.
"""

from typing import List, Optional, Sequence, Union


Command = Union[str, Sequence[str]]


def format_command(command: Command) -> str:
    """Render a command (string or argv list) as a single line."""
    if isinstance(command, str):
        return command
    return " ".join(str(part) for part in command)


class LicenseScanError(Exception):
    """Base exception for all adapter-level failures."""


class InvalidConfigurationError(LicenseScanError):
    """
    Raised when adapter configuration is invalid.

    Construction of an adapter never succeeds with an invalid configuration.
    """

    def __init__(self, message: str, option: Optional[str] = None):
        self.message = message
        self.option = option
        super().__init__(message)


class PrepareFailedError(LicenseScanError):
    """
    Raised when the installer exits with a non-zero status.

    Suppressed (logged only) when the adapter runs with ``prepare_no_fail``.
    """

    def __init__(
        self,
        command: Command,
        exit_status: int,
        stderr: str = "",
    ):
        self.command = format_command(command)
        self.exit_status = exit_status
        self.stderr = stderr
        super().__init__(
            f"Prepare command '{self.command}' failed | Exit status: {exit_status}"
        )


class EnumerationFailedError(LicenseScanError):
    """
    Raised when the dependency enumerator fails to run or produces output
    that cannot be decoded into package records.
    """

    def __init__(
        self,
        message: str,
        command: Optional[Command] = None,
        exit_status: Optional[int] = None,
        original_exception: Optional[Exception] = None,
    ):
        self.message = message
        self.command = format_command(command) if command is not None else None
        self.exit_status = exit_status
        self.original_exception = original_exception

        error_parts: List[str] = [message]

        if self.command:
            error_parts.append(f"Command: {self.command}")

        if exit_status is not None:
            error_parts.append(f"Exit status: {exit_status}")

        if original_exception:
            error_parts.append(f"Original error: {str(original_exception)}")

        super().__init__(" | ".join(error_parts))


class ExternalAPIError(Exception):
    """
    Base exception for all registry-related errors.

    Used directly for generic request failures that don't fit a more
    specific category.
    """

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        endpoint: Optional[str] = None,
        original_exception: Optional[Exception] = None,
        suggested_action: Optional[str] = None,
    ):
        """
        Initialize ExternalAPIError.

        Args:
            message: Human-readable error message
            service: Name of the external service (e.g., "PyPI")
            endpoint: URL that failed
            original_exception: The original exception that was caught
            suggested_action: Suggested action for the user to resolve the issue
        """
        self.message = message
        self.service = service
        self.endpoint = endpoint
        self.original_exception = original_exception
        self.suggested_action = suggested_action

        error_parts = [message]

        if service:
            error_parts.append(f"Service: {service}")

        if endpoint:
            error_parts.append(f"Endpoint: {endpoint}")

        if suggested_action:
            error_parts.append(f"Action: {suggested_action}")

        if original_exception:
            error_parts.append(f"Original error: {str(original_exception)}")

        super().__init__(" | ".join(error_parts))


class APITimeoutError(ExternalAPIError):
    """Raised when a registry request times out."""

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        endpoint: Optional[str] = None,
        timeout_duration: Optional[float] = None,
        original_exception: Optional[Exception] = None,
    ):
        self.timeout_duration = timeout_duration

        suggested_action = "Check network connectivity and retry"
        if timeout_duration:
            suggested_action += f" (timeout after {timeout_duration}s)"

        super().__init__(
            message=message,
            service=service,
            endpoint=endpoint,
            original_exception=original_exception,
            suggested_action=suggested_action,
        )


class APIConnectionError(ExternalAPIError):
    """
    Raised when no connection to the registry can be established.

    This typically indicates:
    - Network connectivity issues
    - DNS resolution failures
    - Proxy or firewall restrictions
    """

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        endpoint: Optional[str] = None,
        original_exception: Optional[Exception] = None,
    ):
        super().__init__(
            message=message,
            service=service,
            endpoint=endpoint,
            original_exception=original_exception,
            suggested_action=(
                "Check network connectivity and verify the registry is accessible"
            ),
        )


class RegistryUnavailableError(ExternalAPIError):
    """
    Soft failure: the registry answered, but not with usable metadata.

    Covers non-success statuses and redirect chains that exhaust their hop
    budget. Only used to build log messages; callers receive an empty
    mapping instead.
    """

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        endpoint: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        self.status_code = status_code

        if status_code == 404:
            suggested_action = "Package or version is not published on the registry"
        elif status_code is not None and 300 <= status_code < 400:
            suggested_action = "Registry kept redirecting; check the package name"
        else:
            suggested_action = "Registry did not return metadata; try again later"

        super().__init__(
            message=message,
            service=service,
            endpoint=endpoint,
            suggested_action=suggested_action,
        )


__all__ = [
    "LicenseScanError",
    "InvalidConfigurationError",
    "PrepareFailedError",
    "EnumerationFailedError",
    "ExternalAPIError",
    "APITimeoutError",
    "APIConnectionError",
    "RegistryUnavailableError",
    "format_command",
]
