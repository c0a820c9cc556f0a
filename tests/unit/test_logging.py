"""
Unit Tests for the Logging Subsystem
====================================

Test Coverage
-------------
- LogContext propagation (sync and async)
- Record enrichment by ContextFilter
- JSON formatting of context and extra fields
- Health snapshot after initialization
"""

import json
import logging

import pytest

from devshelf.core.logging import (
    LogContext,
    clear_log_context,
    get_log_context,
    get_logging_health,
    set_log_context,
)
from devshelf.core.logging.logger import (
    ColoredFormatter,
    ContextFilter,
    JSONFormatter,
    LoggerConfig,
)


def _record(message="hello", **extra):
    record = logging.LogRecord(
        name="devshelf.tests",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=message,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


@pytest.fixture(autouse=True)
def clean_context():
    clear_log_context()
    yield
    clear_log_context()


@pytest.mark.unit
class TestLogContext:
    def test_context_is_scoped(self):
        # Act
        with LogContext(user_id="u1", activity="viewed", correlation_id="abc"):
            inside = get_log_context()

        # Assert
        assert inside["user_id"] == "u1"
        assert inside["activity"] == "viewed"
        assert inside["correlation_id"] == "abc"
        assert get_log_context() == {}

    @pytest.mark.asyncio
    async def test_async_context(self):
        async with LogContext(user_id="u2", operation="check_in"):
            assert get_log_context()["operation"] == "check_in"

        assert get_log_context() == {}

    def test_generated_correlation_id(self):
        context = LogContext(user_id="u1").context

        assert len(context["correlation_id"]) == 8

    def test_unset_fields_are_left_out(self):
        context = LogContext(user_id="u1", component=None, operation=None).context

        assert "operation" not in context
        assert "component" not in context

    def test_nested_contexts_merge(self):
        # Arrange & Act
        with LogContext(user_id="u1", correlation_id="outer"):
            with LogContext(resource_id="r2", operation="track_activity"):
                inner = get_log_context()
            outer = get_log_context()

        # Assert
        assert inner["user_id"] == "u1"
        assert inner["resource_id"] == "r2"
        assert "operation" not in outer
        assert outer["correlation_id"] == "outer"

    def test_set_log_context_merges(self):
        set_log_context(user_id="u1")
        set_log_context(resource_id=42)

        assert get_log_context() == {"user_id": "u1", "resource_id": "42"}


@pytest.mark.unit
class TestFormatting:
    def test_filter_enriches_from_context(self):
        # Arrange
        record = _record()

        # Act
        with LogContext(user_id="u1", resource_id="r9", correlation_id="c1"):
            ContextFilter().filter(record)

        # Assert
        assert record.user_id == "u1"
        assert record.resource_id == "r9"
        assert record.correlation_id == "c1"
        assert record.component == "devshelf"
        assert record.operation == "N/A"

    def test_explicit_operation_wins(self):
        record = _record(operation="progress.track_activity")

        with LogContext(operation="ambient"):
            ContextFilter().filter(record)

        assert record.operation == "progress.track_activity"

    def test_json_output(self):
        # Arrange
        record = _record("Activity tracked", xp_awarded=25)
        with LogContext(user_id="u1", correlation_id="c1"):
            ContextFilter().filter(record)

        # Act
        data = json.loads(JSONFormatter().format(record))

        # Assert
        assert data["message"] == "Activity tracked"
        assert data["user_id"] == "u1"
        assert "resource_id" not in data
        assert data["extra"] == {"xp_awarded": 25}


@pytest.mark.unit
def test_colored_formatter_leaves_record_untouched():
    record = _record()

    ColoredFormatter(LoggerConfig.TEXT_FORMAT).format(record)

    assert record.levelname == "INFO"


@pytest.mark.unit
def test_logging_health_after_import():
    health = get_logging_health()

    assert health.initialized is True
    assert health.queue_max_size > 0
