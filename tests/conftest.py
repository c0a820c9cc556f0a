"""
Pytest Configuration and Fixtures for DevShelf Tests
====================================================

Purpose
-------
Centralized test fixtures for the DevShelf test suite: snapshot factories,
a fresh EventBus per test, and in-memory stand-ins for the collaborators the
ProgressService talks to.

Responsibilities
----------------
- Force the testing environment before devshelf is imported
- Snapshot factories for engine tests
- In-memory repository, activity log and notification sink
- Mocked collaborators for failure-path tests

Non-Responsibilities
--------------------
- Test implementation (delegated to test files)
- Production adapters (none ship with the package)

Architecture Notes
------------------
- Everything is in-process; no test needs network or disk beyond tmp_path
- Fixtures are function scoped so every test starts from a clean slate
"""

from __future__ import annotations

import os

# Must be set before devshelf.core.config is imported (it loads on import)
os.environ["ENVIRONMENT"] = "testing"
os.environ["LOG_LEVEL"] = "DEBUG"
os.environ["LOG_TO_FILE"] = "false"
os.environ.pop("ACHIEVEMENTS_FILE", None)

from datetime import datetime, timezone
from typing import Dict, List, Optional, Set, Tuple

import pytest

from devshelf.core.event.bus import EventBus
from devshelf.core.logging.logger import get_logger
from devshelf.domain.models.progress import ActivityKind, ProgressSnapshot
from devshelf.modules.progress.catalog import DEFAULT_CATALOG, get_catalog
from devshelf.modules.progress.messages import NotificationMessage
from devshelf.modules.progress.service import ProgressService

logger = get_logger(__name__)

FIXED_NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


# ============================================================================
# PYTEST CONFIGURATION
# ============================================================================


def pytest_configure(config):
    """Register markers used across the suite."""
    config.addinivalue_line("markers", "unit: fast tests without I/O")
    config.addinivalue_line("markers", "domain: domain model tests")
    config.addinivalue_line("markers", "service: async service tests")


@pytest.fixture(autouse=True)
def _reset_catalog_cache():
    """Catalog lookups are cached per process; start every test clean."""
    get_catalog.cache_clear()
    yield
    get_catalog.cache_clear()


# ============================================================================
# IN-MEMORY COLLABORATORS
# ============================================================================


class InMemoryProgressRepository:
    """ProgressRepository backed by a dict; records every save."""

    def __init__(self) -> None:
        self.snapshots: Dict[str, ProgressSnapshot] = {}
        self.saves: List[ProgressSnapshot] = []

    async def get(self, user_id: str) -> Optional[ProgressSnapshot]:
        return self.snapshots.get(user_id)

    async def save(self, snapshot: ProgressSnapshot) -> None:
        self.snapshots[snapshot.user_id] = snapshot
        self.saves.append(snapshot)


class InMemoryActivityLog:
    """ActivityLog backed by a set of (user, resource, kind) tuples."""

    def __init__(self) -> None:
        self.recorded: Set[Tuple[str, str, str]] = set()
        self.history: List[Tuple[str, str, str]] = []

    async def has_recorded(self, user_id: str, resource_id: str, kind: ActivityKind) -> bool:
        return (user_id, resource_id, ActivityKind.parse(kind).value) in self.recorded

    async def record(self, user_id: str, resource_id: str, kind: ActivityKind) -> None:
        entry = (user_id, resource_id, ActivityKind.parse(kind).value)
        self.recorded.add(entry)
        self.history.append(entry)


class RecordingSink:
    """NotificationSink that keeps what it was given."""

    def __init__(self) -> None:
        self.delivered: List[NotificationMessage] = []

    async def deliver(self, notification: NotificationMessage) -> None:
        self.delivered.append(notification)


# ============================================================================
# DOMAIN FIXTURES
# ============================================================================


@pytest.fixture
def fixed_now() -> datetime:
    return FIXED_NOW


@pytest.fixture
def fresh_snapshot() -> ProgressSnapshot:
    """A brand-new user: every counter 0, level 1."""
    return ProgressSnapshot.new("user-1")


@pytest.fixture
def make_snapshot():
    """Factory for snapshots with selected fields set."""

    def _make(**fields) -> ProgressSnapshot:
        fields.setdefault("user_id", "user-1")
        return ProgressSnapshot(**fields)

    return _make


@pytest.fixture
def catalog():
    return DEFAULT_CATALOG


# ============================================================================
# SERVICE FIXTURES
# ============================================================================


@pytest.fixture
def event_bus() -> EventBus:
    return EventBus()


@pytest.fixture
def repository() -> InMemoryProgressRepository:
    return InMemoryProgressRepository()


@pytest.fixture
def activity_log() -> InMemoryActivityLog:
    return InMemoryActivityLog()


@pytest.fixture
def sink() -> RecordingSink:
    return RecordingSink()


@pytest.fixture
def published(event_bus):
    """List of (event_name, payload) pairs seen on the bus."""
    seen: List[Tuple[str, dict]] = []
    event_bus.subscribe(
        "*",
        lambda payload: seen.append((payload["event_name"], payload)),
        identifier="tests.recorder",
    )
    return seen


@pytest.fixture
def progress_service(repository, activity_log, event_bus) -> ProgressService:
    return ProgressService(
        repository=repository,
        activity_log=activity_log,
        event_bus=event_bus,
        logger=get_logger("tests.progress_service"),
        catalog=DEFAULT_CATALOG,
    )


@pytest.fixture
def failing_repository(mocker):
    """Repository whose backend is down."""
    repo = mocker.MagicMock()
    repo.get = mocker.AsyncMock(side_effect=ConnectionError("store unavailable"))
    repo.save = mocker.AsyncMock()
    return repo
