"""
Snapshot data models for spreadsheet ingestion.

Immutable values produced once per upload: the resolved column layout
(FieldMap), the canonical per-governor records, and the scan period decoded
from the upload filename.
"""

from dataclasses import dataclass
from enum import Enum

NOT_FOUND = -1


class IngestKind(Enum):
    CREATION = "creation"
    UPDATE = "update"


@dataclass(frozen=True)
class FieldMap:
    """Column index per canonical field, NOT_FOUND when the sheet lacks it."""
    governor_id: int = NOT_FOUND
    username: int = NOT_FOUND
    kingdom: int = NOT_FOUND
    power: int = NOT_FOUND
    t5_deaths: int = NOT_FOUND
    t4_deaths: int = NOT_FOUND
    kill_points: int = NOT_FOUND
    resources: int = NOT_FOUND


@dataclass(frozen=True)
class SnapshotRecord:
    """One governor's values as exported by the game client."""
    governor_id: str
    username: str
    kingdom: str
    power: int
    deaths: int
    kill_points: int
    resources: int


@dataclass(frozen=True)
class ScanPeriod:
    """Kingdom and date range encoded as `<kingdom>-<start>-<end>` in a filename."""
    kingdom: str
    start_date: str
    end_date: str
    
    def __str__(self) -> str:
        return f"{self.kingdom} ({self.start_date} → {self.end_date})"
