"""
Reusable decorator for handling registry API exceptions.

Wraps a registry lookup so that a transport failure for one package is
logged and replaced with a fallback value instead of aborting the scan.
"""

import functools
import logging
from typing import Any, Callable, Optional

import requests

from .exceptions import (
    APIConnectionError,
    APITimeoutError,
    ExternalAPIError,
)


def handle_external_api_errors(
    service: str,
    return_on_error: Any = None,
    log_stats: bool = True,
    suppress_errors: bool = True,
):
    """
    Decorator that automatically handles registry API exceptions.

    Usage:
        @handle_external_api_errors(service="PyPI", return_on_error={})
        def pypi_def(self, name, version):
            ...

    Args:
        service: Name of the external service (e.g., "PyPI")
        return_on_error: Value to return when an error occurs (default: None).
            Mutable fallbacks are copied per call.
        log_stats: Whether to increment self.stats["errors"] on failure
        suppress_errors: If True, return fallback value; if False, raise the
            typed exception

    Returns:
        Decorated function that handles all exceptions automatically
    """

    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        def wrapper(self, *args, **kwargs):
            logger = getattr(self, "logger", logging.getLogger(func.__name__))
            context = _extract_context(args, kwargs)
            stats = getattr(self, "stats", None) if log_stats else None

            try:
                return func(self, *args, **kwargs)

            except requests.exceptions.Timeout as e:
                error = APITimeoutError(
                    message=f"Timeout while calling {service}",
                    service=service,
                    endpoint=_request_url(e),
                    timeout_duration=getattr(self, "timeout", None),
                    original_exception=e,
                )
                log_level = "warning"

            except requests.exceptions.ConnectionError as e:
                error = APIConnectionError(
                    message=f"Connection failed for {service}",
                    service=service,
                    endpoint=_request_url(e),
                    original_exception=e,
                )
                log_level = "warning"

            except requests.exceptions.RequestException as e:
                error = ExternalAPIError(
                    message=f"Request failed for {service}",
                    service=service,
                    endpoint=_request_url(e),
                    original_exception=e,
                    suggested_action="Check network connectivity and retry",
                )
                log_level = "error"

            except Exception as e:
                error = ExternalAPIError(
                    message=f"Unexpected error calling {service}",
                    service=service,
                    original_exception=e,
                    suggested_action="This is an unexpected error. Please report this issue.",
                )
                log_level = "error"

            return _handle_error(
                error=error,
                logger=logger,
                log_level=log_level,
                stats=stats,
                context=context,
                suppress=suppress_errors,
                return_value=return_on_error,
            )

        return wrapper

    return decorator


def _request_url(error: requests.exceptions.RequestException) -> Optional[str]:
    request = getattr(error, "request", None)
    return getattr(request, "url", None)


def _extract_context(args: tuple, kwargs: dict) -> str:
    """
    Build a ``package@version`` label from the wrapped call's arguments.

    Args:
        args: Positional arguments (without ``self``)
        kwargs: Keyword arguments

    Returns:
        Context string, or an empty string when nothing identifies the call
    """
    package = kwargs.get("name") or (args[0] if len(args) > 0 else None)
    version = kwargs.get("version") or (args[1] if len(args) > 1 else None)

    if package and version:
        return f"{package}@{version}"
    elif package:
        return str(package)
    return ""


def _handle_error(
    error: Exception,
    logger: logging.Logger,
    log_level: str,
    stats: Optional[dict],
    context: str,
    suppress: bool,
    return_value: Any,
):
    log_message = str(error)
    if context:
        log_message = f"[{context}] {log_message}"

    if log_level == "debug":
        logger.debug(log_message)
    elif log_level == "warning":
        logger.warning(log_message)
    else:
        logger.error(log_message)

    if stats is not None and "errors" in stats:
        stats["errors"] += 1

    if not suppress:
        raise error

    if isinstance(return_value, (dict, list, set)):
        return type(return_value)(return_value)
    return return_value


__all__ = ["handle_external_api_errors"]
