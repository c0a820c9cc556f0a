"""
Base Service Foundation

Purpose
-------
Provides the foundational class for DevShelf services. Services orchestrate
the pure progress engine with external collaborators, emit events, and log
what they did.

Design Notes
------------
This base class provides:
- Structured logging with operation context
- Safe config access patterns
- Event emission helpers
- Common error logging

What this class does NOT do:
- Manage storage transactions (the repository adapter's job)
- Contain progression rules (those live in the pure engine)

Usage
-----
    class ProgressService(BaseService):
        def __init__(self, repository, activity_log, event_bus, logger):
            super().__init__(Config, event_bus, logger)
            self._repository = repository
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional, Type

if TYPE_CHECKING:
    from logging import Logger

    from devshelf.core.config.config import Config
    from devshelf.core.event.bus import EventBus


class BaseService:
    """
    Base class for DevShelf services.

    Args:
        config: Static configuration class
        event_bus: Event bus for cross-module communication
        logger: Structured logger instance
    """

    def __init__(
        self,
        config: Type[Config],
        event_bus: EventBus,
        logger: Logger,
    ) -> None:
        self._config = config
        self._events = event_bus
        self.log = logger

    def get_config(
        self, key: str, default: Optional[Any] = None, required: bool = False
    ) -> Any:
        """
        Safely retrieve configuration value.

        Raises:
            ConfigurationError: If required=True and key is missing
        """
        from devshelf.core.exceptions import ConfigurationError

        value = getattr(self._config, key, default)
        if required and value is None:
            raise ConfigurationError(
                key, f"Required configuration key '{key}' is missing"
            )
        return value

    async def emit_event(
        self,
        event_type: str,
        data: Dict[str, Any],
        context: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Emit a domain event for cross-module communication.

        Args:
            event_type: Type/name of the event
            data: Event payload data
            context: Optional additional context (user_id, resource_id, etc.)
        """
        await self._events.publish(event_type, {**data, **(context or {})})

    def log_operation(self, operation: str, **context: Any) -> None:
        """Log a service operation with structured context."""
        self.log.info(
            f"Service operation: {operation}",
            extra={"operation": operation, **context},
        )

    def log_error(
        self,
        operation: str,
        error: Exception,
        **context: Any,
    ) -> None:
        """Log a service error at the level its severity calls for."""
        from devshelf.core.exceptions import get_error_severity

        severity = get_error_severity(error)
        self.log.log(
            severity.log_level,
            f"Service error during {operation}: {error}",
            extra={
                "operation": operation,
                "error_type": type(error).__name__,
                "error_message": str(error),
                "severity": severity.value,
                **context,
            },
        )
