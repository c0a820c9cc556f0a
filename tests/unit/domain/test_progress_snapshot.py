"""
Unit Tests for Progress Domain Models
=====================================

Purpose
-------
Test the progress snapshot, badges and activity kinds without any
collaborators.

Test Coverage
-------------
- Fresh snapshots and clamping of drifted values
- Requirement dimension to counter mapping
- Conversion from and to stored documents (snake_case and camelCase)
- Badge timestamps
- Activity kind parsing

Testing Strategy
----------------
- Unit tests (fast, no I/O)
- AAA pattern (Arrange, Act, Assert)
- Test one behavior per test
"""

from datetime import date, datetime, timezone

import pytest

from devshelf.domain.models import (
    ActivityKind,
    Badge,
    ProgressSnapshot,
    RequirementType,
    normalize_date,
)
from devshelf.modules.shared.exceptions import CatalogError, ValidationError


# ============================================================================
# SNAPSHOT CONSTRUCTION
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestProgressSnapshot:
    """Test ProgressSnapshot construction and queries."""

    def test_new_snapshot_defaults(self):
        # Arrange & Act
        snapshot = ProgressSnapshot.new("user-1")

        # Assert
        assert snapshot.user_id == "user-1"
        assert snapshot.xp == 0
        assert snapshot.level == 1
        assert snapshot.current_streak == 0
        assert snapshot.last_visit_date is None
        assert snapshot.achievements == frozenset()
        assert snapshot.badges == ()

    def test_drifted_numbers_are_clamped(self):
        # Arrange & Act
        snapshot = ProgressSnapshot(
            xp=-40,
            level=0,
            current_streak=float("nan"),
            total_resources_viewed="12",
            total_helpful_marked=3.7,
        )

        # Assert
        assert snapshot.xp == 0
        assert snapshot.level == 1
        assert snapshot.current_streak == 0
        assert snapshot.total_resources_viewed == 12
        assert snapshot.total_helpful_marked == 3

    def test_snapshot_is_immutable(self, fresh_snapshot):
        with pytest.raises(AttributeError):
            fresh_snapshot.xp = 10

    def test_with_changes_returns_new_instance(self, fresh_snapshot):
        # Act
        updated = fresh_snapshot.with_changes(xp=120, last_visit_date=date(2024, 3, 10))

        # Assert
        assert updated.xp == 120
        assert updated.last_visit_date == "2024-03-10"
        assert fresh_snapshot.xp == 0

    @pytest.mark.parametrize(
        "requirement, field",
        [
            (RequirementType.STREAK, "current_streak"),
            (RequirementType.VIEWS, "total_resources_viewed"),
            (RequirementType.COMPLETED, "total_resources_completed"),
            (RequirementType.SUBMISSIONS, "total_resources_submitted"),
            (RequirementType.HELPFUL, "total_helpful_marked"),
            (RequirementType.FAVORITES, "total_resources_bookmarked"),
        ],
    )
    def test_counter_for_each_dimension(self, requirement, field):
        snapshot = ProgressSnapshot(**{field: 7})

        assert snapshot.counter_for(requirement) == 7
        assert snapshot.counter_for(requirement.value) == 7

    def test_counter_for_unknown_dimension_is_zero(self, fresh_snapshot):
        assert fresh_snapshot.counter_for("likes") == 0

    def test_has_unlocked(self):
        snapshot = ProgressSnapshot(achievements={"views_10"})

        assert snapshot.has_unlocked("views_10")
        assert not snapshot.has_unlocked("views_50")


# ============================================================================
# STORED DOCUMENTS
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestSnapshotDocuments:
    """Test conversion from and to stored documents."""

    def test_from_camel_case_document(self):
        # Arrange
        document = {
            "id": "abc",
            "userId": "user-9",
            "xp": 275,
            "level": 2,
            "currentStreak": 4,
            "longestStreak": 9,
            "lastVisitDate": "2024-03-09",
            "totalResourcesViewed": 31,
            "totalResourcesCompleted": 6,
            "totalResourcesBookmarked": 2,
            "totalResourcesSubmitted": 1,
            "totalContributions": 0,
            "achievements": ["views_10", "completed_5", "submit_1"],
            "badges": [
                {
                    "id": "views_10",
                    "name": "Curious Mind",
                    "description": "View 10 resources",
                    "icon": "👀",
                    "unlockedAt": "2024-03-01T10:00:00Z",
                }
            ],
        }

        # Act
        snapshot = ProgressSnapshot.from_dict(document)

        # Assert
        assert snapshot.user_id == "user-9"
        assert snapshot.current_streak == 4
        assert snapshot.total_resources_viewed == 31
        assert snapshot.total_helpful_marked == 0
        assert snapshot.achievements == frozenset({"views_10", "completed_5", "submit_1"})
        assert snapshot.badges[0].unlocked_at == datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)

    def test_empty_last_visit_is_none(self):
        snapshot = ProgressSnapshot.from_dict({"lastVisitDate": ""})

        assert snapshot.last_visit_date is None

    def test_bad_values_are_clamped_not_rejected(self):
        snapshot = ProgressSnapshot.from_dict({"xp": "lots", "level": -2, "achievements": None})

        assert snapshot.xp == 0
        assert snapshot.level == 1
        assert snapshot.achievements == frozenset()

    def test_round_trip_through_snake_case_document(self, fixed_now):
        # Arrange
        badge = Badge("submit_1", "Contributor", "Submit your first resource", "📝", fixed_now)
        snapshot = ProgressSnapshot(
            user_id="user-1",
            xp=150,
            level=2,
            total_resources_submitted=1,
            achievements={"submit_1"},
            badges=(badge,),
        )

        # Act
        restored = ProgressSnapshot.from_dict(snapshot.to_dict())

        # Assert
        assert restored == snapshot

    @pytest.mark.parametrize(
        "document",
        [
            {"achievements": 5, "badges": 3},
            {"achievements": {"views_10": True}, "badges": "views_10"},
            {"achievements": [None, 7, "views_10"], "badges": [None, 1, "x"]},
        ],
    )
    def test_corrupted_collections_are_emptied_not_rejected(self, document):
        snapshot = ProgressSnapshot.from_dict(document)

        assert snapshot.achievements <= frozenset({"views_10"})
        assert snapshot.badges == ()

    def test_millisecond_unlock_time(self, fixed_now):
        """Browser clients store Date.now() values."""
        document = {"badges": [{"id": "views_10", "unlockedAt": 1710072000000}]}

        snapshot = ProgressSnapshot.from_dict(document)

        assert snapshot.badges[0].unlocked_at == fixed_now

    @pytest.mark.parametrize("value", [1e300, 10**30])
    def test_out_of_range_epoch_has_no_unlock_time(self, value):
        badge = Badge.from_dict({"id": "views_10", "unlockedAt": value})

        assert badge.unlocked_at is None

    @pytest.mark.parametrize("value", [float("inf"), -5])
    def test_unusable_epoch_clamps_to_zero(self, value):
        badge = Badge.from_dict({"id": "views_10", "unlockedAt": value})

        assert badge.unlocked_at == datetime(1970, 1, 1, tzinfo=timezone.utc)

    def test_duplicate_badges_are_dropped(self, fixed_now):
        badge = Badge("views_10", "Curious Mind", "View 10 resources", "👀", fixed_now)

        snapshot = ProgressSnapshot(badges=(badge, badge))

        assert len(snapshot.badges) == 1


# ============================================================================
# SUPPORTING VALUE TYPES
# ============================================================================


@pytest.mark.unit
@pytest.mark.domain
class TestValueTypes:
    """Test ActivityKind, RequirementType and date helpers."""

    @pytest.mark.parametrize("value", ["viewed", "VIEWED", " viewed ", ActivityKind.VIEWED])
    def test_activity_kind_parse(self, value):
        assert ActivityKind.parse(value) is ActivityKind.VIEWED

    def test_activity_kind_parse_rejects_unknown(self):
        with pytest.raises(ValidationError):
            ActivityKind.parse("liked")

    def test_first_time_only_kinds(self):
        first_time = {kind for kind in ActivityKind if kind.is_first_time_only}

        assert first_time == {ActivityKind.VIEWED, ActivityKind.COMPLETED, ActivityKind.BOOKMARKED}

    def test_requirement_type_parse_rejects_unknown(self):
        with pytest.raises(CatalogError):
            RequirementType.parse("likes")

    @pytest.mark.parametrize(
        "value, expected",
        [
            ("2024-03-09", "2024-03-09"),
            ("2024-03-09T23:10:00Z", "2024-03-09"),
            (date(2024, 3, 9), "2024-03-09"),
            (datetime(2024, 3, 9, 8, 0), "2024-03-09"),
            ("", None),
            ("yesterday", None),
            (None, None),
        ],
    )
    def test_normalize_date(self, value, expected):
        assert normalize_date(value) == expected

    def test_badge_epoch_timestamp(self):
        badge = Badge.from_dict({"id": "x", "unlocked_at": 0})

        assert badge.unlocked_at == datetime(1970, 1, 1, tzinfo=timezone.utc)
