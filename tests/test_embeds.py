from types import SimpleNamespace

from tracker.data_models.progress import TierInfo
from tracker.data_models.season import ContinuityWarning, SeasonConfig
from tracker.utils.embeds import SeasonEmbeds, format_compact, progress_line
from tracker.utils.exceptions import NotFoundError
from tracker.utils.progress import ProgressCalculator

TIER = TierInfo(1, "Tier 1", 0, 2000, 1.0, 0.01)


def progress(governor_id, kills_gained, power=1000):
    stat = SimpleNamespace(
        governor_id=governor_id, username=f"gov{governor_id}", kingdom="100",
        current_power=power, current_kills=kills_gained, current_deaths=0, resources_gathered=0,
        baseline_power=power, baseline_kills=0, baseline_deaths=0
    )
    return ProgressCalculator.calculate_member_progress(stat, [TIER])


def test_format_compact():
    assert format_compact(950) == "950"
    assert format_compact(1500) == "1.5K"
    assert format_compact(2_300_000) == "2.3M"
    assert format_compact(4_100_000_000) == "4.1B"
    assert format_compact(-1500) == "-1.5K"


def test_progress_line():
    assert progress_line(progress("1", 0, power=9000)).startswith("Unranked")
    assert progress_line(progress("1", 500)).startswith("❌ Kills 500/1.0K (50.0%)")


def test_leaderboard_ranks_and_footer():
    embed = SeasonEmbeds.leaderboard(
        [progress("1", 900), progress("2", 100)],
        "Top",
        SeasonConfig(season_label="Season 1", season_start_date="2026-01-01")
    )
    assert embed.description.startswith("**1.** gov1")
    assert "**2.** gov2" in embed.description
    assert embed.footer.text == "Season 1 · started 2026-01-01"


def test_empty_leaderboard():
    embed = SeasonEmbeds.leaderboard([], "Top", SeasonConfig())
    assert embed.description == "No members to show."


def test_error_and_warning_embeds():
    assert SeasonEmbeds.error(NotFoundError('tier', 3)).description == "❌ Tier `3` not found!"

    warning = ContinuityWarning("date_gap", "2026-01-10", "2026-01-14", "Date gap! ...")
    embed = SeasonEmbeds.continuity_warning(warning)
    assert embed.description == "Date gap! ..."
    assert [f.value for f in embed.fields] == ["2026-01-10", "2026-01-14"]
