"""
Stats Operations Module

Merges snapshot records into stored member statistics. Two variants:

- creation: replace the member row and reset its season baseline to the
  incoming values (the only way a baseline is redefined)
- update: refresh current values only; an existing baseline is untouched,
  a governor seen for the first time mid-season gets baseline == current

Both variants are idempotent for identical input and only ever touch the
row of the governor being applied.
"""

from typing import Optional, Sequence, Tuple
from contextlib import asynccontextmanager
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.data_models.snapshot import IngestKind, SnapshotRecord
from tracker.utils.logger import setup_logger

logger = setup_logger(__name__)


class StatsOperations:
    """Baseline/delta merge of snapshot records into member statistics."""

    def __init__(self, database):
        """Initialize with database instance"""
        self.db = database
        self.logger = logger

    @asynccontextmanager
    async def _get_session_context(self, session: Optional[AsyncSession] = None):
        """
        Provides a session context. Uses the provided session if available,
        otherwise creates and manages a new transaction.
        """
        if session:
            yield session
        else:
            async with self.db.transaction() as new_session:
                yield new_session

    async def apply_creation(self, record: SnapshotRecord, session: Optional[AsyncSession] = None) -> bool:
        """
        Set current and baseline values from the record.

        Returns:
            True if the governor was inserted, False if replaced
        """
        async with self._get_session_context(session) as s:
            return await self.db.upsert_creation(record, session=s)

    async def apply_update(self, record: SnapshotRecord, session: Optional[AsyncSession] = None) -> bool:
        """
        Set current values from the record, seeding the baseline only on insert.

        Returns:
            True if the governor was inserted, False if updated
        """
        async with self._get_session_context(session) as s:
            return await self.db.upsert_current(record, session=s)

    async def apply(self, kind: IngestKind, record: SnapshotRecord, session: Optional[AsyncSession] = None) -> bool:
        """Dispatch one record to the merge variant for kind."""
        if kind is IngestKind.CREATION:
            return await self.apply_creation(record, session=session)
        return await self.apply_update(record, session=session)

    async def apply_all(
        self,
        kind: IngestKind,
        records: Sequence[SnapshotRecord],
        session: Optional[AsyncSession] = None
    ) -> Tuple[int, int]:
        """
        Apply a batch of records in sheet order within one transaction.

        Later rows for the same governor win.

        Returns:
            (inserted, updated) counts
        """
        inserted = updated = 0
        async with self._get_session_context(session) as s:
            for record in records:
                if await self.apply(kind, record, session=s):
                    inserted += 1
                else:
                    updated += 1

        self.logger.info(
            f"Applied {len(records)} {kind.value} record(s): {inserted} inserted, {updated} updated"
        )
        return inserted, updated
