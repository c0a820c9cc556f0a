"""
Domain exceptions for DevShelf.

The progress engine clamps numbers it does not like; it only raises when an
input has no usable meaning at all, such as an activity kind nobody knows
or an achievement definition that would corrupt the catalog.

Every DevShelf error, domain or infrastructure, derives from `DevShelfError`
and can be turned into a flat dict for structured logs with `to_dict()`.
Severity is a class-level default so a log handler can pick the log level
without knowing the concrete type.
"""

from __future__ import annotations

import logging
from enum import Enum
from typing import Any, Dict, Optional


class ErrorSeverity(Enum):
    """How loudly an error should be logged."""

    DEBUG = "debug"
    INFO = "info"  # bad user input
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"  # the process cannot serve progress correctly

    @property
    def log_level(self) -> int:
        return getattr(logging, self.name)


class DevShelfError(Exception):
    """
    Root of the DevShelf exception tree.

    Subclasses set DEFAULT_SEVERITY and DEFAULT_RETRYABLE; `details` holds
    whatever identifies the failing input (field name, achievement id,
    collaborator operation).
    """

    DEFAULT_SEVERITY: ErrorSeverity = ErrorSeverity.ERROR
    DEFAULT_RETRYABLE: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        *,
        severity: Optional[ErrorSeverity] = None,
        is_retryable: Optional[bool] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.details: Dict[str, Any] = dict(details or {})
        self.severity = severity or self.DEFAULT_SEVERITY
        self.is_retryable = self.DEFAULT_RETRYABLE if is_retryable is None else is_retryable

    @property
    def error_code(self) -> str:
        return type(self).__name__

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error_code": self.error_code,
            "message": self.message,
            "details": self.details,
            "severity": self.severity.value,
            "is_retryable": self.is_retryable,
        }

    def __str__(self) -> str:
        if not self.details:
            return f"[{self.error_code}] {self.message}"
        return f"[{self.error_code}] {self.message} {self.details}"


class DevShelfDomainException(DevShelfError):
    """Errors raised by progress and achievement rules."""


class ValidationError(DevShelfDomainException):
    """
    Input that cannot be interpreted: an unknown activity kind, an empty
    user id, a check-in day that is not a date.

    Args:
        field: Name of the rejected argument or document key
        message: What is wrong with it
    """

    DEFAULT_SEVERITY = ErrorSeverity.INFO

    def __init__(self, field: str, message: str) -> None:
        self.field = field
        super().__init__(message, {"field": field})


class CatalogError(DevShelfDomainException):
    """
    An achievement catalog was built from invalid definitions.

    Raised at load time only: duplicate ids, negative rewards, counts below
    one, unknown requirement types or an unreadable extension file.
    """

    DEFAULT_SEVERITY = ErrorSeverity.CRITICAL

    def __init__(self, achievement_id: Optional[str], reason: str) -> None:
        self.achievement_id = achievement_id
        self.reason = reason
        message = f"Achievement '{achievement_id}': {reason}" if achievement_id else reason
        super().__init__(message, {"achievement_id": achievement_id, "reason": reason})
