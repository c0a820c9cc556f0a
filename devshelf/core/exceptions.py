"""
Infrastructure exceptions for DevShelf.

These cover everything outside the progress rules: settings that cannot be
loaded, collaborators (progress store, activity log) that fail underneath
the service, and misuse of the event bus. The engine itself never raises
them.
"""

from __future__ import annotations

from devshelf.modules.shared.exceptions import DevShelfError, ErrorSeverity


class DevShelfInfrastructureException(DevShelfError):
    """Errors raised by configuration, storage adapters and the event bus."""


class ConfigurationError(DevShelfInfrastructureException):
    """A setting is missing or points at something unusable."""

    DEFAULT_SEVERITY = ErrorSeverity.CRITICAL

    def __init__(self, config_key: str, message: str) -> None:
        self.config_key = config_key
        super().__init__(message, {"config_key": config_key})


class PersistenceError(DevShelfInfrastructureException):
    """
    A collaborator call failed while serving a progress operation.

    Args:
        operation: Dotted name of the call, e.g. "progress.save" or
            "activity.record"
        original_error: What the collaborator raised

    The snapshot handed to the failed call is discarded, so the whole
    service operation can be retried.
    """

    DEFAULT_RETRYABLE = True

    def __init__(self, operation: str, original_error: Exception) -> None:
        self.operation = operation
        self.original_error = original_error
        super().__init__(
            f"{operation} failed: {original_error}",
            {"operation": operation, "cause": type(original_error).__name__},
        )


class EventBusError(DevShelfInfrastructureException):
    """Bad subscription (empty event name, non-callable listener)."""

    def __init__(self, event_name: str, message: str) -> None:
        self.event_name = event_name
        super().__init__(message, {"event_name": event_name})


def is_transient_error(exc: BaseException) -> bool:
    """Whether repeating the failed operation could succeed."""
    return isinstance(exc, DevShelfError) and exc.is_retryable


def get_error_severity(exc: BaseException) -> ErrorSeverity:
    """Severity of a DevShelf error; anything else counts as ERROR."""
    if isinstance(exc, DevShelfError):
        return exc.severity
    return ErrorSeverity.ERROR
