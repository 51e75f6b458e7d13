from types import SimpleNamespace

import pytest

from tracker.data_models.progress import TierInfo
from tracker.utils.progress import ProgressCalculator

TIER = TierInfo(id=1, name="Tier 1", min_power=0, max_power=2000, kill_multiplier=1.0, death_multiplier=0.01)


def member(governor_id, power, kills=0, deaths=0, baseline_power=None, baseline_kills=None, baseline_deaths=None):
    """Member row; baseline defaults to current, as right after a creation upload."""
    return SimpleNamespace(
        governor_id=governor_id,
        username=f"gov{governor_id}",
        kingdom="100",
        current_power=power,
        current_kills=kills,
        current_deaths=deaths,
        resources_gathered=0,
        baseline_power=power if baseline_power is None else baseline_power,
        baseline_kills=kills if baseline_kills is None else baseline_kills,
        baseline_deaths=deaths if baseline_deaths is None else baseline_deaths,
    )


class TestRequirements:

    @pytest.mark.parametrize("power, multiplier, expected", [
        (1000, 1.0, 1000),
        (1999, 0.01, 19),
        (45_500_000, 0.5, 22_750_000),
        (1234, 0.0, 0),
    ])
    def test_requirement_is_floored(self, power, multiplier, expected):
        assert ProgressCalculator.requirement(power, multiplier) == expected

    def test_tier_bounds_are_half_open(self):
        tiers = [TIER, TierInfo(2, "Tier 2", 2000, 5000, 2.0, 0.02)]
        assert ProgressCalculator.resolve_tier(0, tiers).id == 1
        assert ProgressCalculator.resolve_tier(1999, tiers).id == 1
        assert ProgressCalculator.resolve_tier(2000, tiers).id == 2
        assert ProgressCalculator.resolve_tier(5000, tiers) is None

    def test_first_matching_tier_wins_on_overlap(self):
        tiers = [TIER, TierInfo(2, "Overlap", 500, 3000, 2.0, 0.02)]
        assert ProgressCalculator.resolve_tier(1000, tiers).id == 1

    def test_ranking_power_prefers_baseline(self):
        assert ProgressCalculator.ranking_power(1500, 3000) == 1500
        assert ProgressCalculator.ranking_power(0, 3000) == 3000
        assert ProgressCalculator.ranking_power(None, None) == 0


class TestProgressPercent:

    def test_zero_requirement_counts_as_met(self):
        assert ProgressCalculator.progress_percent(0, 0) == 100.0

    def test_monotonic_and_capped(self):
        shown = [
            ProgressCalculator.display_percent(ProgressCalculator.progress_percent(g, 300))
            for g in range(0, 700, 7)
        ]
        assert shown == sorted(shown)
        assert max(shown) == 100.0

    @pytest.mark.parametrize("raw, expected", [
        (12.25, 12.3),
        (33.3333, 33.3),
        (66.6666, 66.7),
        (100.0, 100.0),
        (250.0, 100.0),
        (-5.0, -5.0),
    ])
    def test_display_rounding(self, raw, expected):
        assert ProgressCalculator.display_percent(raw) == expected


class TestMemberProgress:

    def test_creation_scenario(self):
        progress = ProgressCalculator.calculate_progress(
            [member("1", 1000, kills=5), member("2", 5000)],
            [TIER]
        )
        first, second = progress

        assert first.tier == TIER
        assert first.kill_requirement == 1000
        assert first.death_requirement == 10
        assert first.kills_gained == 0
        assert first.kill_progress == 0.0
        assert not first.is_compliant

        assert second.tier is None
        assert not second.is_ranked
        assert not second.is_compliant

    def test_compliance_at_exactly_one_hundred_percent(self):
        stat = member("1", 1000, kills=1500, deaths=30, baseline_kills=500, baseline_deaths=20)
        progress = ProgressCalculator.calculate_member_progress(stat, [TIER])
        assert progress.kills_gained == 1000
        assert progress.deaths_gained == 10
        assert progress.kill_progress == 100.0
        assert progress.death_progress == 100.0
        assert progress.is_compliant

    def test_one_requirement_short_is_non_compliant(self):
        stat = member("1", 1000, kills=5000, deaths=29, baseline_kills=0, baseline_deaths=20)
        progress = ProgressCalculator.calculate_member_progress(stat, [TIER])
        assert progress.kill_progress == 100.0
        assert progress.raw_kill_progress == 500.0
        assert progress.death_progress == 90.0
        assert not progress.is_compliant

    def test_tier_uses_baseline_power(self):
        # Grew out of the tier mid-season but is still judged by season-start power
        stat = member("1", 9000, baseline_power=1000)
        progress = ProgressCalculator.calculate_member_progress(stat, [TIER])
        assert progress.ranking_power == 1000
        assert progress.tier == TIER

    def test_negative_gain(self):
        stat = member("1", 1000, kills=100, baseline_kills=300)
        progress = ProgressCalculator.calculate_member_progress(stat, [TIER])
        assert progress.kills_gained == -200
        assert progress.kill_progress == -20.0

    def test_unranked_member_still_reports_gains(self):
        stat = member("1", 5000, kills=700, baseline_kills=200)
        progress = ProgressCalculator.calculate_member_progress(stat, [TIER])
        assert progress.kills_gained == 500
        assert progress.kill_requirement == 0
        assert progress.kill_progress == 0.0

    def test_orm_tiers_are_detached(self):
        row = SimpleNamespace(id=7, name="Row", min_power=0, max_power=10_000, kill_multiplier=2, death_multiplier=None)
        progress = ProgressCalculator.calculate_progress([member("1", 1000)], [row])
        assert progress[0].tier == TierInfo(7, "Row", 0, 10_000, 2.0, 0.0)
        assert progress[0].kill_requirement == 2000
        assert progress[0].death_requirement == 0


class TestRanking:

    def test_weighted_score_descending(self):
        rows = ProgressCalculator.calculate_progress([
            member("a", 1000, kills=100, baseline_kills=0),
            member("b", 1000, deaths=60, baseline_deaths=0),
            member("c", 1000, kills=10, deaths=10, baseline_kills=0, baseline_deaths=0),
        ], [TIER])
        ranked = ProgressCalculator.rank(rows)
        assert [p.governor_id for p in ranked] == ["b", "a", "c"]
        assert [p.ranking_score for p in ranked] == [120, 100, 30]

    def test_ties_keep_storage_order(self):
        rows = ProgressCalculator.calculate_progress(
            [member(str(i), 1000, kills=50, baseline_kills=0) for i in range(5)],
            [TIER]
        )
        assert [p.governor_id for p in ProgressCalculator.rank(rows)] == ["0", "1", "2", "3", "4"]

    def test_to_dict_includes_score(self):
        row = ProgressCalculator.calculate_member_progress(member("1", 1000, kills=10, baseline_kills=0), [TIER])
        data = row.to_dict()
        assert data["ranking_score"] == 10
        assert data["tier"]["name"] == "Tier 1"
