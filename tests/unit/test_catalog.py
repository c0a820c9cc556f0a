"""
Unit Tests for the Achievement Catalog
======================================

Test Coverage
-------------
- Built-in entries, order and rewards
- Validation of definitions
- YAML extension loading
- Process catalog selection from Config
"""

import pytest

from devshelf.core.config import Config
from devshelf.domain.models.achievement import (
    AchievementDefinition,
    AchievementRequirement,
    RequirementType,
)
from devshelf.modules.progress.catalog import (
    ACHIEVEMENTS,
    DEFAULT_CATALOG,
    AchievementCatalog,
    definition_from_mapping,
    get_catalog,
)
from devshelf.modules.shared.exceptions import CatalogError


def _definition(achievement_id="custom_1", reward=10, count=1, kind=RequirementType.VIEWS):
    return AchievementDefinition(
        id=achievement_id,
        name="Custom",
        description="Custom achievement",
        icon="*",
        xp_reward=reward,
        requirement=AchievementRequirement(type=kind, count=count),
    )


# ============================================================================
# BUILT-IN CATALOG
# ============================================================================


@pytest.mark.unit
class TestBuiltInCatalog:
    """Test the built-in achievement list."""

    def test_catalog_has_eighteen_entries(self):
        assert len(ACHIEVEMENTS) == 18
        assert len(DEFAULT_CATALOG) == 18

    def test_catalog_order(self):
        assert DEFAULT_CATALOG.ids == (
            "streak_3", "streak_7", "streak_30", "streak_100",
            "views_10", "views_50", "views_100", "views_500",
            "completed_5", "completed_25", "completed_100",
            "submit_1", "submit_5", "submit_20",
            "helpful_10", "helpful_50",
            "favorites_10", "favorites_50",
        )

    def test_submit_1_definition(self):
        # Act
        definition = DEFAULT_CATALOG.get("submit_1")

        # Assert
        assert definition.name == "Contributor"
        assert definition.description == "Submit your first resource"
        assert definition.icon == "📝"
        assert definition.xp_reward == 100
        assert definition.requirement_type is RequirementType.SUBMISSIONS
        assert definition.threshold == 1

    def test_unknown_id_returns_none(self):
        assert DEFAULT_CATALOG.get("nope") is None
        assert "nope" not in DEFAULT_CATALOG
        assert "views_50" in DEFAULT_CATALOG

    def test_by_requirement_keeps_tier_order(self):
        tiers = DEFAULT_CATALOG.by_requirement("views")

        assert [d.threshold for d in tiers] == [10, 50, 100, 500]

    def test_favorites_rewards(self):
        assert [d.xp_reward for d in DEFAULT_CATALOG.by_requirement(RequirementType.FAVORITES)] == [30, 150]


# ============================================================================
# VALIDATION
# ============================================================================


@pytest.mark.unit
class TestCatalogValidation:
    """Test that bad definitions are rejected at load time."""

    def test_duplicate_id_rejected(self):
        with pytest.raises(CatalogError) as exc_info:
            DEFAULT_CATALOG.extend([_definition(achievement_id="views_10")])

        assert exc_info.value.achievement_id == "views_10"
        assert "Duplicate" in str(exc_info.value)

    def test_negative_reward_rejected(self):
        with pytest.raises(CatalogError):
            AchievementCatalog([_definition(reward=-1)])

    def test_zero_count_rejected(self):
        with pytest.raises(CatalogError):
            AchievementCatalog([_definition(count=0)])

    def test_extend_appends_without_touching_original(self):
        # Act
        extended = DEFAULT_CATALOG.extend([_definition()])

        # Assert
        assert len(extended) == 19
        assert extended.ids[-1] == "custom_1"
        assert len(DEFAULT_CATALOG) == 18

    def test_unknown_requirement_type_in_mapping(self):
        with pytest.raises(CatalogError) as exc_info:
            definition_from_mapping(
                {"id": "x", "xp_reward": 5, "requirement": {"type": "likes", "count": 3}}
            )

        assert exc_info.value.achievement_id == "x"

    def test_mapping_accepts_camel_case_reward(self):
        definition = definition_from_mapping(
            {"id": "x", "name": "X", "xpReward": 7, "requirement": {"type": "helpful", "count": 2}}
        )

        assert definition.xp_reward == 7
        assert definition.requirement_type is RequirementType.HELPFUL


# ============================================================================
# YAML EXTENSION
# ============================================================================


@pytest.mark.unit
class TestYamlExtension:
    """Test loading extra achievements from YAML."""

    def test_from_yaml_appends_entries(self, tmp_path):
        # Arrange
        path = tmp_path / "achievements.yaml"
        path.write_text(
            "achievements:\n"
            "  - id: views_1000\n"
            "    name: Archivist\n"
            "    description: View 1000 resources\n"
            "    icon: box\n"
            "    xp_reward: 2500\n"
            "    requirement: {type: views, count: 1000}\n",
            encoding="utf-8",
        )

        # Act
        catalog = AchievementCatalog.from_yaml(path)

        # Assert
        assert len(catalog) == 19
        assert catalog.get("views_1000").xp_reward == 2500
        assert catalog.ids[:18] == DEFAULT_CATALOG.ids

    def test_from_yaml_accepts_bare_list(self, tmp_path):
        path = tmp_path / "extra.yml"
        path.write_text(
            "- id: helpful_100\n"
            "  xp_reward: 400\n"
            "  requirement: {type: helpful, count: 100}\n",
            encoding="utf-8",
        )

        catalog = AchievementCatalog.from_yaml(path)

        assert catalog.ids[-1] == "helpful_100"

    def test_from_yaml_missing_file(self, tmp_path):
        with pytest.raises(CatalogError):
            AchievementCatalog.from_yaml(tmp_path / "missing.yaml")

    def test_from_yaml_rejects_scalar_document(self, tmp_path):
        path = tmp_path / "bad.yaml"
        path.write_text("just a string\n", encoding="utf-8")

        with pytest.raises(CatalogError):
            AchievementCatalog.from_yaml(path)


# ============================================================================
# PROCESS CATALOG
# ============================================================================


@pytest.mark.unit
class TestGetCatalog:
    """Test catalog selection from configuration."""

    def test_default_when_not_configured(self, monkeypatch):
        monkeypatch.setattr(Config, "ACHIEVEMENTS_FILE", None)

        assert get_catalog() is DEFAULT_CATALOG

    def test_extended_when_configured(self, monkeypatch, tmp_path):
        # Arrange
        path = tmp_path / "achievements.yaml"
        path.write_text(
            "- id: streak_365\n"
            "  xp_reward: 5000\n"
            "  requirement: {type: streak, count: 365}\n",
            encoding="utf-8",
        )
        monkeypatch.setattr(Config, "ACHIEVEMENTS_FILE", path)

        # Act
        catalog = get_catalog()

        # Assert
        assert "streak_365" in catalog
        assert get_catalog() is catalog
