"""
Reporting service: progress, leaderboards and compliance reports.

Read-only. Each call loads the member rows and the tier table and runs them
through ProgressCalculator. Reads never wait on ingestion; a report built
while an update upload is running may mix old and new rows.
"""

import logging
from typing import List, Optional

from tracker.config import Config
from tracker.data_models.progress import MemberProgress
from tracker.data_models.season import KingdomTotals, SeasonOverview
from tracker.utils.exceptions import ValidationError
from tracker.utils.progress import ProgressCalculator

logger = logging.getLogger(__name__)

class ReportingService:
    """Builds annotated member views for presentation layers."""

    def __init__(self, database, config_service):
        self.db = database
        self.config_service = config_service

    async def compute_progress(self) -> List[MemberProgress]:
        """Every member with tier and progress annotations, in storage order."""
        stats = await self.db.get_all_member_stats()
        tiers = await self.db.get_tiers()
        return ProgressCalculator.calculate_progress(stats, tiers)

    async def leaderboard(self) -> List[MemberProgress]:
        """All members ordered by weighted score, ties in storage order."""
        return ProgressCalculator.rank(await self.compute_progress())

    async def top_n(self, limit: Optional[int] = None) -> List[MemberProgress]:
        """
        Highest weighted scores.

        Args:
            limit: Number of rows (default Config.DEFAULT_TOP_LIMIT)

        Raises:
            ValidationError: If limit is not positive
        """
        if limit is None:
            limit = Config.DEFAULT_TOP_LIMIT
        if limit <= 0:
            raise ValidationError('limit', "Limit must be a positive number")
        return (await self.leaderboard())[:limit]

    async def non_compliant(self, include_unranked: bool = True) -> List[MemberProgress]:
        """
        Members that have not met both requirements, in leaderboard order.

        Args:
            include_unranked: Count members outside every tier as non-compliant
        """
        rows = [p for p in await self.leaderboard() if not p.is_compliant]
        if not include_unranked:
            rows = [p for p in rows if p.is_ranked]
        logger.debug(f"Non-compliance report: {len(rows)} member(s)")
        return rows

    async def member_progress(self, governor_id: str) -> Optional[MemberProgress]:
        """Progress for a single governor, or None if not tracked this season."""
        stat = await self.db.get_member_stat(str(governor_id))
        if stat is None:
            return None
        tiers = [ProgressCalculator.to_tier_info(t) for t in await self.db.get_tiers()]
        return ProgressCalculator.calculate_member_progress(stat, tiers)

    async def kingdom_totals(self) -> List[KingdomTotals]:
        return await self.db.get_kingdom_totals()

    async def overview(self) -> SeasonOverview:
        """Season header: configuration, member/tier counts and kingdom totals."""
        return SeasonOverview(
            config=self.config_service.snapshot(),
            member_count=await self.db.count_member_stats(),
            tier_count=len(await self.db.get_tiers()),
            kingdoms=await self.kingdom_totals()
        )
