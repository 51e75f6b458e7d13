"""
Progress data models: a member's season row annotated with tier and
requirement progress.
"""

from dataclasses import dataclass, asdict
from typing import Any, Dict, Optional

from tracker.constants import RankingConstants


@dataclass(frozen=True)
class TierInfo:
    """Detached copy of a tier row."""
    id: int
    name: str
    min_power: int
    max_power: int
    kill_multiplier: float
    death_multiplier: float


@dataclass(frozen=True)
class MemberProgress:
    """Single member row with tier assignment and progress metrics."""
    governor_id: str
    username: str
    kingdom: str
    current_power: int
    current_kills: int
    current_deaths: int
    resources_gathered: int
    baseline_power: int
    baseline_kills: int
    baseline_deaths: int
    ranking_power: int
    tier: Optional[TierInfo]
    kill_requirement: int
    death_requirement: int
    kills_gained: int
    deaths_gained: int
    kill_progress: float
    death_progress: float
    raw_kill_progress: float
    raw_death_progress: float
    is_compliant: bool
    
    @property
    def is_ranked(self) -> bool:
        return self.tier is not None
    
    @property
    def ranking_score(self) -> int:
        return (self.kills_gained * RankingConstants.KILL_WEIGHT
                + self.deaths_gained * RankingConstants.DEATH_WEIGHT)
    
    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data['ranking_score'] = self.ranking_score
        return data
