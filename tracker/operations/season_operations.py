"""
Season Operations Module

Season lifecycle management: snapshot ingestion, continuity validation,
season reset and backups.

Key functionality:
- ingest(): Parse an uploaded spreadsheet and merge it as a season creation
  or a season update
- validate_continuity(): Check an update's kingdom and scan period against the
  last ingested scan
- reset_season(): Back up and clear member stats, then relabel the season
- create_backup(): Manual snapshot of the current member rows

Ingest, reset and backup are serialized by a single lock per instance; the
application must share one SeasonOperations instance. Each write runs in one
transaction, so a failed creation ingestion leaves the previous season intact.
"""

import asyncio
from datetime import date, timedelta
from typing import Optional, Union
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.constants import ConfigKeys
from tracker.data_models.season import ContinuityWarning, IngestResult, ResetResult, SeasonConfig
from tracker.data_models.snapshot import IngestKind, ScanPeriod
from tracker.database.models import Backup
from tracker.operations.stats_operations import StatsOperations
from tracker.utils.exceptions import OperationError, ParseError, ValidationError
from tracker.utils.logger import setup_logger
from tracker.utils.scan_filename_parser import parse_scan_filename
from tracker.utils.spreadsheet import parse_snapshot_file

logger = setup_logger(__name__)


class SeasonOperations:
    """
    Business logic operations for the season lifecycle.

    Uses the database as stats store accessor and the configuration service
    as the single owner of SeasonConfig state.
    """

    def __init__(self, database, config_service, stats_ops: Optional[StatsOperations] = None):
        """Initialize with database and config service instances"""
        self.db = database
        self.config_service = config_service
        self.stats_ops = stats_ops or StatsOperations(database)
        self.logger = logger
        self._lock = asyncio.Lock()

    @staticmethod
    def validate_continuity(period: Optional[ScanPeriod], config: SeasonConfig) -> Optional[ContinuityWarning]:
        """
        Compare an incoming scan period with the last ingested scan.

        Args:
            period: Scan period decoded from the upload filename
            config: Current season configuration

        Returns:
            ContinuityWarning when the kingdom differs or the new period does not
            start where the last one ended, otherwise None
        """
        if period is None:
            return None

        previous_kingdom = config.last_scan_kingdom
        if previous_kingdom and previous_kingdom != period.kingdom:
            return ContinuityWarning(
                kind='kingdom_mismatch',
                previous=previous_kingdom,
                incoming=period.kingdom,
                message=(
                    f"Kingdom mismatch! Previous: {previous_kingdom}, File: {period.kingdom}. "
                    f"Use same Kingdom?"
                )
            )

        previous_end = config.last_scan_end_date
        if previous_end and not SeasonOperations._is_contiguous(previous_end, period.start_date):
            return ContinuityWarning(
                kind='date_gap',
                previous=previous_end,
                incoming=period.start_date,
                message=(
                    f"Date gap! Previous ended: {previous_end}, File starts: {period.start_date}. "
                    f"Recommendation: Match start date with previous end date."
                )
            )

        return None

    @staticmethod
    def _is_contiguous(previous_end: str, start: str) -> bool:
        """A scan continues the last one if it starts on its end date or the day after."""
        if previous_end == start:
            return True
        try:
            gap = date.fromisoformat(start) - date.fromisoformat(previous_end)
        except ValueError:
            return False
        return gap == timedelta(days=1)

    async def ingest(
        self,
        kind: Union[IngestKind, str],
        data: bytes,
        filename: Optional[str] = None,
        override_continuity: bool = False
    ) -> IngestResult:
        """
        Ingest an uploaded snapshot spreadsheet.

        Creation: back up current rows, clear them, insert every record with a
        fresh baseline and record the season start date from the filename.
        Update: after the continuity check, refresh current values.
        Either way the filename's kingdom and end date become the new last-scan
        markers.

        Args:
            kind: IngestKind or its value ("creation" / "update")
            data: Raw file bytes
            filename: Original upload filename
            override_continuity: Accept an update despite a continuity warning

        Returns:
            IngestResult with counts, or carrying a ContinuityWarning and
            nothing persisted

        Raises:
            ValidationError: If kind is unknown
            ParseError: If the spreadsheet is unreadable or has no records
            OperationError: If the store rejects the write (nothing is persisted)
        """
        kind = self._coerce_kind(kind)

        # Parse everything before the first write
        records = parse_snapshot_file(data, filename)
        if not records:
            raise ParseError("No governor records found in the spreadsheet")

        period = parse_scan_filename(filename)

        async with self._lock:
            await self.config_service.load_all()
            config = self.config_service.snapshot()

            if kind is IngestKind.UPDATE and not override_continuity:
                warning = self.validate_continuity(period, config)
                if warning:
                    self.logger.warning(f"Update upload '{filename}' rejected: {warning.message}")
                    return IngestResult(kind=kind.value, warning=warning)

            backup_id = None
            try:
                async with self.db.transaction() as session:
                    if kind is IngestKind.CREATION:
                        backup = await self._snapshot_members(
                            session,
                            name=f"Auto-Backup (New List {config.season_label})",
                            season=config.season_label,
                            source=filename
                        )
                        backup_id = backup.id if backup else None
                        await self.db.clear_all_member_stats(session=session)

                    inserted, updated = await self.stats_ops.apply_all(kind, records, session=session)

                    if period:
                        if kind is IngestKind.CREATION:
                            await self.config_service.set(ConfigKeys.SEASON_START_DATE, period.start_date, session=session)
                        await self.config_service.set(ConfigKeys.LAST_SCAN_KINGDOM, period.kingdom, session=session)
                        await self.config_service.set(ConfigKeys.LAST_SCAN_END_DATE, period.end_date, session=session)
            except SQLAlchemyError as e:
                self.logger.error(f"{kind.value.capitalize()} upload '{filename}' rolled back: {e}")
                raise OperationError(f"{kind.value} ingest", str(e)) from e
            finally:
                # Cache may hold values from a rolled back transaction
                await self.config_service.load_all()

        self.logger.info(
            f"Ingested {kind.value} upload '{filename}': {len(records)} record(s), "
            f"scan period {period or 'not encoded'}"
        )
        return IngestResult(
            kind=kind.value,
            processed=len(records),
            inserted=inserted,
            updated=updated,
            backup_id=backup_id
        )

    async def reset_season(self, new_label: str, reason: Optional[str] = None) -> ResetResult:
        """
        Close the current season: back up all member rows, clear them and
        switch to a new season label.

        No backup is written when there are no member rows.

        Raises:
            ValidationError: If new_label is blank
            OperationError: If the store rejects the write
        """
        new_label = (new_label or '').strip()
        if not new_label:
            raise ValidationError('season label', "Season name cannot be empty")

        async with self._lock:
            await self.config_service.load_all()
            previous_label = self.config_service.snapshot().season_label

            try:
                async with self.db.transaction() as session:
                    backup = await self._snapshot_members(
                        session,
                        name=f"Auto-Backup (Reset {previous_label})",
                        season=previous_label,
                        source=reason or 'Reset Action'
                    )
                    cleared = await self.db.clear_all_member_stats(session=session)
                    await self.config_service.set(ConfigKeys.CURRENT_SEASON, new_label, session=session)
            except SQLAlchemyError as e:
                self.logger.error(f"Season reset to '{new_label}' rolled back: {e}")
                raise OperationError("season reset", str(e)) from e
            finally:
                await self.config_service.load_all()

        self.logger.info(
            f"Season reset: '{previous_label}' -> '{new_label}', {cleared} member(s) cleared, "
            f"backup {backup.id if backup else 'skipped (no members)'}"
        )
        return ResetResult(
            previous_label=previous_label,
            new_label=new_label,
            members_cleared=cleared,
            backup_id=backup.id if backup else None
        )

    async def rename_season(self, new_label: str):
        """Change the season label without touching member rows."""
        new_label = (new_label or '').strip()
        if not new_label:
            raise ValidationError('season label', "Season name cannot be empty")
        async with self._lock:
            await self.config_service.set(ConfigKeys.CURRENT_SEASON, new_label)

    async def create_backup(self, name: Optional[str] = None, source: Optional[str] = None) -> Optional[Backup]:
        """
        Manually snapshot the current member rows.

        Returns:
            The new Backup, or None when there are no member rows
        """
        async with self._lock:
            season = self.config_service.snapshot().season_label
            async with self.db.transaction() as session:
                backup = await self._snapshot_members(
                    session,
                    name=name or f"Manual Backup ({season})",
                    season=season,
                    source=source or 'Manual Backup'
                )

        if backup is None:
            self.logger.info("Manual backup skipped: no member rows")
        return backup

    async def toggle_public_stats(self) -> bool:
        """Flip public stats visibility; returns the new state."""
        visible = not self.config_service.snapshot().public_stats_visible
        await self.config_service.set(ConfigKeys.PUBLIC_STATS_VISIBLE, 'true' if visible else 'false')
        return visible

    async def _snapshot_members(
        self,
        session: AsyncSession,
        name: str,
        season: Optional[str],
        source: Optional[str]
    ) -> Optional[Backup]:
        rows = await self.db.get_all_member_stats(session=session)
        if not rows:
            return None

        backup = await self.db.create_backup(
            name=name,
            season=season,
            source=source,
            rows=[row.to_dict() for row in rows],
            session=session
        )
        self.logger.info(f"Backup created: '{name}' ({len(rows)} members)")
        return backup

    @staticmethod
    def _coerce_kind(kind: Union[IngestKind, str]) -> IngestKind:
        if isinstance(kind, IngestKind):
            return kind
        try:
            return IngestKind(str(kind).lower())
        except ValueError:
            raise ValidationError('ingest kind', f"Unknown upload type '{kind}'. Use 'creation' or 'update'.")
