"""
Season data models: configuration snapshot and lifecycle operation results.
"""

from dataclasses import dataclass, field
from typing import List, Optional


@dataclass(frozen=True)
class SeasonConfig:
    """Read-only view of the season_config table."""
    season_label: Optional[str] = None
    season_start_date: Optional[str] = None
    last_scan_kingdom: Optional[str] = None
    last_scan_end_date: Optional[str] = None
    public_stats_visible: bool = True


@dataclass(frozen=True)
class ContinuityWarning:
    """Advisory rejection of an update upload. Resubmit with override to accept."""
    kind: str  # "kingdom_mismatch" or "date_gap"
    previous: str
    incoming: str
    message: str


@dataclass(frozen=True)
class IngestResult:
    """Outcome of one ingestion call."""
    kind: str
    processed: int = 0
    inserted: int = 0
    updated: int = 0
    backup_id: Optional[int] = None
    warning: Optional[ContinuityWarning] = None
    
    @property
    def accepted(self) -> bool:
        return self.warning is None


@dataclass(frozen=True)
class ResetResult:
    """Outcome of a season reset."""
    previous_label: Optional[str]
    new_label: str
    members_cleared: int
    backup_id: Optional[int] = None


@dataclass(frozen=True)
class KingdomTotals:
    """Summed current values for every member of one kingdom."""
    kingdom: str
    members: int
    power: int
    kill_points: int
    deaths: int
    resources: int


@dataclass(frozen=True)
class SeasonOverview:
    """Season header shown above leaderboards."""
    config: SeasonConfig
    member_count: int
    tier_count: int
    kingdoms: List[KingdomTotals] = field(default_factory=list)
