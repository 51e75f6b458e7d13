import math
from typing import Iterable, List, Optional, Sequence

from tracker.constants import RankingConstants
from tracker.data_models.progress import MemberProgress, TierInfo


class ProgressCalculator:
    """Tier resolution and kill/death requirement progress for season members"""

    @staticmethod
    def to_tier_info(tier) -> TierInfo:
        """Detach a tier row (ORM object or TierInfo) into a TierInfo value"""
        if isinstance(tier, TierInfo):
            return tier
        return TierInfo(
            id=tier.id,
            name=tier.name,
            min_power=int(tier.min_power or 0),
            max_power=int(tier.max_power or 0),
            kill_multiplier=float(tier.kill_multiplier or 0),
            death_multiplier=float(tier.death_multiplier or 0)
        )

    @staticmethod
    def ranking_power(baseline_power: Optional[int], current_power: Optional[int]) -> int:
        """Season-start power when recorded, otherwise the current power"""
        return int(baseline_power or 0) or int(current_power or 0)

    @staticmethod
    def resolve_tier(power: int, tiers: Sequence[TierInfo]) -> Optional[TierInfo]:
        """
        Find the tier bucket for a power value

        Args:
            power: Effective ranking power
            tiers: Tier table in table order

        Returns:
            First tier with min_power <= power < max_power, or None (unranked)
        """
        for tier in tiers:
            if tier.min_power <= power < tier.max_power:
                return tier
        return None

    @staticmethod
    def requirement(power: int, multiplier: float) -> int:
        """Required gain for a power value: floor(power * multiplier)"""
        return math.floor(power * multiplier)

    @staticmethod
    def progress_percent(gained: int, requirement: int) -> float:
        """
        Raw progress percentage toward a requirement

        A zero requirement counts as already satisfied (100%). Negative gains
        (data corrected downward) give negative progress.
        """
        if requirement > 0:
            return (gained / requirement) * 100
        return 100.0

    @staticmethod
    def display_percent(raw_percent: float) -> float:
        """Round half up to one decimal place and cap at 100"""
        scale = 10 ** RankingConstants.PROGRESS_DECIMALS
        rounded = math.floor(raw_percent * scale + 0.5) / scale
        return min(RankingConstants.PROGRESS_CAP, rounded)

    @staticmethod
    def calculate_member_progress(stat, tiers: Sequence[TierInfo]) -> MemberProgress:
        """
        Annotate one member row with tier assignment and progress

        Args:
            stat: MemberStat row (any object with the member stat attributes)
            tiers: Tier table in table order, already detached

        Returns:
            MemberProgress for the member
        """
        current_power = int(stat.current_power or 0)
        current_kills = int(stat.current_kills or 0)
        current_deaths = int(stat.current_deaths or 0)
        baseline_power = int(stat.baseline_power or 0)
        baseline_kills = int(stat.baseline_kills or 0)
        baseline_deaths = int(stat.baseline_deaths or 0)

        power = ProgressCalculator.ranking_power(baseline_power, current_power)
        tier = ProgressCalculator.resolve_tier(power, tiers)

        kills_gained = current_kills - baseline_kills
        deaths_gained = current_deaths - baseline_deaths

        if tier is None:
            kill_requirement = death_requirement = 0
            raw_kill = raw_death = 0.0
            kill_progress = death_progress = 0.0
            is_compliant = False
        else:
            kill_requirement = ProgressCalculator.requirement(power, tier.kill_multiplier)
            death_requirement = ProgressCalculator.requirement(power, tier.death_multiplier)
            raw_kill = ProgressCalculator.progress_percent(kills_gained, kill_requirement)
            raw_death = ProgressCalculator.progress_percent(deaths_gained, death_requirement)
            kill_progress = ProgressCalculator.display_percent(raw_kill)
            death_progress = ProgressCalculator.display_percent(raw_death)
            # Evaluated on the displayed values so exactly 100.0 is compliant
            is_compliant = kill_progress >= 100 and death_progress >= 100

        return MemberProgress(
            governor_id=stat.governor_id,
            username=stat.username or '',
            kingdom=stat.kingdom or '',
            current_power=current_power,
            current_kills=current_kills,
            current_deaths=current_deaths,
            resources_gathered=int(stat.resources_gathered or 0),
            baseline_power=baseline_power,
            baseline_kills=baseline_kills,
            baseline_deaths=baseline_deaths,
            ranking_power=power,
            tier=tier,
            kill_requirement=kill_requirement,
            death_requirement=death_requirement,
            kills_gained=kills_gained,
            deaths_gained=deaths_gained,
            kill_progress=kill_progress,
            death_progress=death_progress,
            raw_kill_progress=raw_kill,
            raw_death_progress=raw_death,
            is_compliant=is_compliant
        )

    @staticmethod
    def calculate_progress(stats: Iterable, tiers: Iterable) -> List[MemberProgress]:
        """Annotate every member row, preserving storage order"""
        tier_table = [ProgressCalculator.to_tier_info(t) for t in tiers]
        return [ProgressCalculator.calculate_member_progress(s, tier_table) for s in stats]

    @staticmethod
    def rank(progress: Iterable[MemberProgress]) -> List[MemberProgress]:
        """
        Order members by weighted score (kills gained + 2 * deaths gained), descending

        The sort is stable: equal scores keep storage order.
        """
        return sorted(progress, key=lambda p: p.ranking_score, reverse=True)
