"""
Unit Tests for the Achievement Evaluator
========================================

Test Coverage
-------------
- Unlock selection and catalog order
- Skipping already unlocked entries
- Idempotence
- Dashboard progress and next achievements
"""

import pytest

from devshelf.modules.progress.evaluator import (
    achievement_progress,
    evaluate_achievements,
    next_achievements,
)


def _ids(definitions):
    return [definition.id for definition in definitions]


@pytest.mark.unit
class TestEvaluateAchievements:
    """Test evaluate_achievements."""

    def test_fresh_snapshot_unlocks_nothing(self, fresh_snapshot, catalog):
        assert evaluate_achievements(fresh_snapshot, catalog=catalog) == []

    def test_skipped_tiers_unlock_together(self, make_snapshot, catalog):
        """60 views earns both the 10 and the 50 tier in one pass."""
        # Arrange
        snapshot = make_snapshot(total_resources_viewed=60)

        # Act
        unlocked = evaluate_achievements(snapshot, catalog=catalog)

        # Assert
        assert _ids(unlocked) == ["views_10", "views_50"]

    def test_threshold_is_inclusive(self, make_snapshot, catalog):
        snapshot = make_snapshot(total_resources_completed=5)

        assert _ids(evaluate_achievements(snapshot, catalog=catalog)) == ["completed_5"]

    def test_already_unlocked_are_never_returned(self, make_snapshot, catalog):
        snapshot = make_snapshot(total_resources_viewed=60, achievements={"views_10"})

        assert _ids(evaluate_achievements(snapshot, catalog=catalog)) == ["views_50"]

    def test_explicit_already_unlocked_overrides_snapshot(self, make_snapshot, catalog):
        snapshot = make_snapshot(total_resources_viewed=60, achievements={"views_10"})

        result = evaluate_achievements(snapshot, already_unlocked=[], catalog=catalog)

        assert _ids(result) == ["views_10", "views_50"]

    def test_evaluation_is_idempotent(self, make_snapshot, catalog):
        """Marking the first result unlocked leaves nothing for a second pass."""
        # Arrange
        snapshot = make_snapshot(total_resources_viewed=120, current_streak=8)
        first = evaluate_achievements(snapshot, catalog=catalog)

        # Act
        second = evaluate_achievements(
            snapshot, already_unlocked=snapshot.achievements | set(_ids(first)), catalog=catalog
        )

        # Assert
        assert second == []

    def test_results_follow_catalog_order_across_dimensions(self, make_snapshot, catalog):
        snapshot = make_snapshot(
            total_resources_bookmarked=10,
            total_resources_submitted=1,
            current_streak=3,
        )

        assert _ids(evaluate_achievements(snapshot, catalog=catalog)) == [
            "streak_3",
            "submit_1",
            "favorites_10",
        ]

    def test_does_not_modify_snapshot(self, make_snapshot, catalog):
        snapshot = make_snapshot(total_resources_viewed=60)

        evaluate_achievements(snapshot, catalog=catalog)

        assert snapshot.achievements == frozenset()

    def test_uses_process_catalog_by_default(self, make_snapshot):
        snapshot = make_snapshot(total_helpful_marked=10)

        assert _ids(evaluate_achievements(snapshot)) == ["helpful_10"]


@pytest.mark.unit
class TestAchievementProgress:
    """Test dashboard progress helpers."""

    def test_progress_for_every_entry(self, make_snapshot, catalog):
        # Arrange
        snapshot = make_snapshot(total_resources_viewed=25, achievements={"views_10"})

        # Act
        progress = {item.achievement.id: item for item in achievement_progress(snapshot, catalog)}

        # Assert
        assert len(progress) == 18
        assert progress["views_10"].unlocked is True
        assert progress["views_10"].percentage == 100.0
        assert progress["views_50"].current == 25
        assert progress["views_50"].target == 50
        assert progress["views_50"].percentage == 50.0
        assert progress["views_50"].remaining == 25

    def test_next_achievements_fewest_remaining_first(self, make_snapshot, catalog):
        # Arrange
        snapshot = make_snapshot(
            total_resources_viewed=8,
            total_resources_completed=4,
            current_streak=2,
        )

        # Act
        upcoming = next_achievements(snapshot, limit=4, catalog=catalog)

        # Assert
        assert [item.achievement.id for item in upcoming] == [
            "streak_3",
            "completed_5",
            "submit_1",
            "views_10",
        ]

    def test_next_achievements_for_new_user(self, fresh_snapshot, catalog):
        upcoming = next_achievements(fresh_snapshot, limit=2, catalog=catalog)

        # submit_1 needs one submission; nothing else is that close
        assert [item.achievement.id for item in upcoming] == ["submit_1", "streak_3"]

    def test_next_achievements_skips_unlocked(self, make_snapshot, catalog):
        snapshot = make_snapshot(total_resources_submitted=1, achievements={"submit_1"})

        upcoming = next_achievements(snapshot, limit=18, catalog=catalog)

        assert "submit_1" not in [item.achievement.id for item in upcoming]
        assert len(upcoming) == 17

    def test_non_positive_limit_returns_empty(self, fresh_snapshot, catalog):
        assert next_achievements(fresh_snapshot, limit=0, catalog=catalog) == []
