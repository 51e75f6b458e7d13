"""
Season configuration service.

Caches the season_config table in memory and exposes it as an immutable
SeasonConfig value. Reads are served from the cache; writes go through the
database and reload the cache afterwards.
"""

import logging
from typing import Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from tracker.constants import ConfigKeys
from tracker.data_models.season import SeasonConfig

logger = logging.getLogger(__name__)

class ConfigurationService:
    """Manages season configuration with simple caching."""

    def __init__(self, database):
        """
        Initialize configuration service.

        Args:
            database: Database instance (stats store accessor)
        """
        self.db = database
        self._cache: Dict[str, Optional[str]] = {}

    async def load_all(self, session: Optional[AsyncSession] = None):
        """Load all configuration rows from the database into memory."""
        self._cache = await self.db.get_all_config(session=session)
        logger.info(f"Loaded {len(self._cache)} season configuration values")

    def get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        """
        Get configuration value by key.

        Args:
            key: Configuration key (see ConfigKeys)
            default: Default value if key not found or empty

        Returns:
            Stored string value or default
        """
        value = self._cache.get(key)
        return value if value not in (None, '') else default

    async def set(self, key: str, value: Optional[str], session: Optional[AsyncSession] = None):
        """
        Persist a configuration value.

        When a session is supplied the write joins the caller's transaction and
        the cache is updated in place; the caller must call load_all() again if
        that transaction rolls back.
        """
        old_value = self._cache.get(key)
        await self.db.set_config_value(key, value, session=session)

        if session is None:
            await self.load_all()
        else:
            self._cache[key] = value

        logger.info(f"Season config '{key}' changed: {old_value!r} -> {value!r}")

    def snapshot(self) -> SeasonConfig:
        """Current season configuration as an immutable value."""
        return SeasonConfig(
            season_label=self.get(ConfigKeys.CURRENT_SEASON),
            season_start_date=self.get(ConfigKeys.SEASON_START_DATE),
            last_scan_kingdom=self.get(ConfigKeys.LAST_SCAN_KINGDOM),
            last_scan_end_date=self.get(ConfigKeys.LAST_SCAN_END_DATE),
            public_stats_visible=self.get(ConfigKeys.PUBLIC_STATS_VISIBLE, 'true') != 'false'
        )

    def list_all(self) -> Dict[str, Optional[str]]:
        """Return all configuration values."""
        return self._cache.copy()
