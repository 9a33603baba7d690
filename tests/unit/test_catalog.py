"""Catalog lookups and badge tiers."""

from __future__ import annotations

from ayanfe.achievements.catalog import AchievementCatalog, AchievementDef, BadgeDef, badge_tier
from ayanfe.achievements.seed import ACHIEVEMENT_SEED_DATA, BADGE_SEED_DATA


def _catalog() -> AchievementCatalog:
    badges = [BadgeDef(1, "Welcome", "d", "\U0001f44b", "onboarding", 1, 10)]
    achievements = [
        AchievementDef(1, "First Conversation", "d", 1, "message_count", 1),
        AchievementDef(2, "Orphan", "d", 99, "message_count", 5),
        AchievementDef(3, "Night Session", "d", 1, "time_of_day", 1, {"startHour": 0, "endHour": 4}),
    ]
    return AchievementCatalog.build(badges, achievements)


class TestBadgeTier:
    def test_levels_map_to_tiers(self):
        assert badge_tier(1) == "bronze"
        assert badge_tier(2) == "gold"
        assert badge_tier(3) == "diamond"

    def test_out_of_range_is_clamped(self):
        assert badge_tier(0) == "bronze"
        assert badge_tier(7) == "diamond"


class TestCatalog:
    def test_for_type(self):
        names = [a.name for a in _catalog().for_type("message_count")]
        assert names == ["First Conversation", "Orphan"]

    def test_badge_for_missing_badge(self):
        catalog = _catalog()
        orphan = catalog.for_type("message_count")[1]
        assert catalog.badge_for(orphan) is None

    def test_rule_carries_conditions(self):
        night = _catalog().for_type("time_of_day")[0]
        assert night.rule.conditions == {"startHour": 0, "endHour": 4}

    def test_empty(self):
        assert AchievementCatalog.empty().for_type("message_count") == []


class TestSeedData:
    def test_every_achievement_names_a_seeded_badge(self):
        badge_names = {b["name"] for b in BADGE_SEED_DATA}
        assert all(a["badge"] in badge_names for a in ACHIEVEMENT_SEED_DATA)

    def test_names_are_unique(self):
        assert len({b["name"] for b in BADGE_SEED_DATA}) == len(BADGE_SEED_DATA)
        assert len({a["name"] for a in ACHIEVEMENT_SEED_DATA}) == len(ACHIEVEMENT_SEED_DATA)
