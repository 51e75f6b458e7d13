"""
Scan Filename Parser Utility

Decodes the kingdom and scan period that exported snapshot files carry as a
filename prefix, e.g. "1234-2026-01-01-2026-01-10_stats.xlsx".
"""

import re
from pathlib import PurePath
from typing import Optional

from tracker.constants import SCAN_FILENAME_PATTERN
from tracker.data_models.snapshot import ScanPeriod

_SCAN_FILENAME_RE = re.compile(SCAN_FILENAME_PATTERN)


def parse_scan_filename(filename: Optional[str]) -> Optional[ScanPeriod]:
    """
    Extract the scan period from an upload filename.
    
    Args:
        filename: Original upload filename, with or without directories
        
    Returns:
        ScanPeriod, or None when the name does not follow the convention
        
    Examples:
        "100-2026-01-01-2026-01-10.xlsx" -> ScanPeriod("100", "2026-01-01", "2026-01-10")
        "stats.xlsx" -> None
    """
    if not filename:
        return None
    
    match = _SCAN_FILENAME_RE.match(PurePath(filename).name)
    if not match:
        return None
    
    return ScanPeriod(
        kingdom=match.group(1),
        start_date=match.group(2),
        end_date=match.group(3)
    )
