import json
from typing import Optional, List, Dict, Any
from sqlalchemy.ext.asyncio import create_async_engine, AsyncSession, async_sessionmaker
from sqlalchemy import select, delete, func
from contextlib import asynccontextmanager

from tracker.config import Config
from tracker.constants import ConfigKeys
from tracker.data_models.season import KingdomTotals
from tracker.data_models.snapshot import SnapshotRecord
from tracker.database.models import Base, MemberStat, Tier, SeasonConfigEntry, Backup
from tracker.utils.logger import setup_logger

class Database:
    """Stats store accessor: member stats, tiers, season configuration and backups.

    Every accessor takes an optional session so several calls can share one
    transaction (see transaction()). Without a session each call commits on
    its own.
    """

    def __init__(self, database_url: Optional[str] = None):
        self.logger = setup_logger(__name__)
        self.database_url = database_url or Config.DATABASE_URL
        self.engine = None
        self.async_session = None

    async def initialize(self):
        """Initialize the database connection and create tables"""
        self.logger.info("Initializing database...")

        # Convert sqlite URL to async if needed
        database_url = self.database_url
        if database_url.startswith('sqlite:///'):
            database_url = database_url.replace('sqlite:///', 'sqlite+aiosqlite:///')

        self.engine = create_async_engine(
            database_url,
            echo=Config.DEBUG,
            future=True
        )

        self.async_session = async_sessionmaker(
            self.engine,
            class_=AsyncSession,
            expire_on_commit=False
        )

        async with self.engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

        self.logger.info("Database initialized successfully")

        await self.initialize_default_data()

    async def initialize_default_data(self):
        """Seed the season label on first start"""
        current = await self.get_config_value(ConfigKeys.CURRENT_SEASON)
        if current is None:
            self.logger.info(f"No season configured, starting '{Config.DEFAULT_SEASON_LABEL}'")
            await self.set_config_value(ConfigKeys.CURRENT_SEASON, Config.DEFAULT_SEASON_LABEL)

    @asynccontextmanager
    async def transaction(self):
        """
        Create a transaction boundary for atomic operations.

        All operations within the context are committed together on success,
        or rolled back together on failure.

        Usage:
            async with db.transaction() as session:
                await db.create_backup(..., session=session)
                await db.clear_all_member_stats(session=session)
                # Both commit together here
        """
        async with self.async_session() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise
            finally:
                await session.close()

    @asynccontextmanager
    async def _session_scope(self, session: Optional[AsyncSession] = None):
        """Use the caller's session as-is, or open a committing one."""
        if session:
            yield session
        else:
            async with self.transaction() as new_session:
                yield new_session

    async def close(self):
        """Close the database connection"""
        if self.engine:
            await self.engine.dispose()
            self.logger.info("Database connection closed")

    # Member stat operations
    async def get_all_member_stats(self, session: Optional[AsyncSession] = None) -> List[MemberStat]:
        """All member rows in storage (insertion) order"""
        async with self._session_scope(session) as s:
            result = await s.execute(select(MemberStat).order_by(MemberStat.id))
            return list(result.scalars().all())

    async def get_member_stat(self, governor_id: str, session: Optional[AsyncSession] = None) -> Optional[MemberStat]:
        async with self._session_scope(session) as s:
            result = await s.execute(
                select(MemberStat).where(MemberStat.governor_id == governor_id)
            )
            return result.scalar_one_or_none()

    async def count_member_stats(self, session: Optional[AsyncSession] = None) -> int:
        async with self._session_scope(session) as s:
            return await s.scalar(select(func.count(MemberStat.id))) or 0

    async def upsert_creation(self, record: SnapshotRecord, session: Optional[AsyncSession] = None) -> bool:
        """
        Insert or replace a member row, resetting its baseline to the record's values.

        Returns:
            True if a new row was inserted, False if an existing row was replaced
        """
        async with self._session_scope(session) as s:
            stat = await self.get_member_stat(record.governor_id, session=s)
            inserted = stat is None
            if inserted:
                stat = MemberStat(governor_id=record.governor_id)
                s.add(stat)

            self._apply_current(stat, record)
            stat.baseline_power = record.power
            stat.baseline_kills = record.kill_points
            stat.baseline_deaths = record.deaths
            await s.flush()
            return inserted

    async def upsert_current(self, record: SnapshotRecord, session: Optional[AsyncSession] = None) -> bool:
        """
        Insert or update a member row's current values, keeping an existing baseline.

        A governor seen for the first time is seeded with baseline == current.

        Returns:
            True if a new row was inserted, False if an existing row was updated
        """
        async with self._session_scope(session) as s:
            stat = await self.get_member_stat(record.governor_id, session=s)
            inserted = stat is None
            if inserted:
                stat = MemberStat(
                    governor_id=record.governor_id,
                    baseline_power=record.power,
                    baseline_kills=record.kill_points,
                    baseline_deaths=record.deaths
                )
                s.add(stat)

            self._apply_current(stat, record)
            await s.flush()
            return inserted

    @staticmethod
    def _apply_current(stat: MemberStat, record: SnapshotRecord):
        stat.username = record.username
        stat.kingdom = record.kingdom
        stat.current_power = record.power
        stat.current_kills = record.kill_points
        stat.current_deaths = record.deaths
        stat.resources_gathered = record.resources

    async def clear_all_member_stats(self, session: Optional[AsyncSession] = None) -> int:
        """Delete every member row; returns the number of rows removed"""
        async with self._session_scope(session) as s:
            result = await s.execute(delete(MemberStat))
            return result.rowcount or 0

    async def get_kingdom_totals(self, session: Optional[AsyncSession] = None) -> List[KingdomTotals]:
        """Member count and summed current values per kingdom, largest power first"""
        async with self._session_scope(session) as s:
            result = await s.execute(
                select(
                    MemberStat.kingdom,
                    func.count(MemberStat.id),
                    func.coalesce(func.sum(MemberStat.current_power), 0),
                    func.coalesce(func.sum(MemberStat.current_kills), 0),
                    func.coalesce(func.sum(MemberStat.current_deaths), 0),
                    func.coalesce(func.sum(MemberStat.resources_gathered), 0)
                )
                .group_by(MemberStat.kingdom)
                .order_by(func.sum(MemberStat.current_power).desc())
            )
            return [
                KingdomTotals(
                    kingdom=kingdom or '',
                    members=members,
                    power=int(power),
                    kill_points=int(kills),
                    deaths=int(deaths),
                    resources=int(resources)
                )
                for kingdom, members, power, kills, deaths, resources in result.all()
            ]

    # Tier operations
    async def get_tiers(self, session: Optional[AsyncSession] = None) -> List[Tier]:
        """Tier table ordered by lower bound"""
        async with self._session_scope(session) as s:
            result = await s.execute(select(Tier).order_by(Tier.min_power, Tier.id))
            return list(result.scalars().all())

    async def get_tier(self, tier_id: int, session: Optional[AsyncSession] = None) -> Optional[Tier]:
        async with self._session_scope(session) as s:
            return await s.get(Tier, tier_id)

    async def save_tier(
        self,
        name: str,
        min_power: int,
        max_power: int,
        kill_multiplier: float,
        death_multiplier: float,
        tier_id: Optional[int] = None,
        session: Optional[AsyncSession] = None
    ) -> Optional[Tier]:
        """Create a tier, or update it when tier_id is given. Returns None for an unknown tier_id."""
        async with self._session_scope(session) as s:
            if tier_id is not None:
                tier = await self.get_tier(tier_id, session=s)
                if tier is None:
                    return None
            else:
                tier = Tier()
                s.add(tier)

            tier.name = name
            tier.min_power = min_power
            tier.max_power = max_power
            tier.kill_multiplier = kill_multiplier
            tier.death_multiplier = death_multiplier
            await s.flush()
            return tier

    async def delete_tier(self, tier_id: int, session: Optional[AsyncSession] = None) -> bool:
        async with self._session_scope(session) as s:
            result = await s.execute(delete(Tier).where(Tier.id == tier_id))
            return (result.rowcount or 0) > 0

    # Season configuration operations
    async def get_config_value(self, key: str, session: Optional[AsyncSession] = None) -> Optional[str]:
        async with self._session_scope(session) as s:
            entry = await s.get(SeasonConfigEntry, key)
            return entry.value if entry else None

    async def get_all_config(self, session: Optional[AsyncSession] = None) -> Dict[str, Optional[str]]:
        async with self._session_scope(session) as s:
            result = await s.execute(select(SeasonConfigEntry))
            return {entry.key: entry.value for entry in result.scalars().all()}

    async def set_config_value(self, key: str, value: Optional[str], session: Optional[AsyncSession] = None):
        async with self._session_scope(session) as s:
            entry = await s.get(SeasonConfigEntry, key)
            if entry:
                entry.value = value
            else:
                s.add(SeasonConfigEntry(key=key, value=value))
            await s.flush()

    # Backup operations
    async def create_backup(
        self,
        name: str,
        season: Optional[str],
        source: Optional[str],
        rows: List[Dict[str, Any]],
        session: Optional[AsyncSession] = None
    ) -> Backup:
        """Store a serialized copy of member rows"""
        async with self._session_scope(session) as s:
            backup = Backup(
                name=name,
                season=season,
                source=source,
                member_count=len(rows),
                data=json.dumps(rows)
            )
            s.add(backup)
            await s.flush()
            return backup

    async def get_backups(self, session: Optional[AsyncSession] = None) -> List[Backup]:
        """All backups, newest first"""
        async with self._session_scope(session) as s:
            result = await s.execute(select(Backup).order_by(Backup.id.desc()))
            return list(result.scalars().all())

    async def get_backup(self, backup_id: int, session: Optional[AsyncSession] = None) -> Optional[Backup]:
        async with self._session_scope(session) as s:
            return await s.get(Backup, backup_id)

    async def delete_backup(self, backup_id: int, session: Optional[AsyncSession] = None) -> bool:
        async with self._session_scope(session) as s:
            result = await s.execute(delete(Backup).where(Backup.id == backup_id))
            return (result.rowcount or 0) > 0
