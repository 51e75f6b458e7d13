import json
from sqlalchemy import (
    Column, Integer, String, DateTime, Text, Float, BigInteger, CheckConstraint
)
from sqlalchemy.orm import declarative_base
from sqlalchemy.sql import func
from typing import Any, Dict, List

Base = declarative_base()

class MemberStat(Base):
    """One governor's statistics for the active season.

    Baseline columns are written only by season-creation ingestion; update
    ingestion touches the current columns.
    """
    __tablename__ = 'member_stats'

    # Surrogate key keeps storage order stable for ranking ties
    id = Column(Integer, primary_key=True, autoincrement=True)
    governor_id = Column(String(64), unique=True, nullable=False, index=True)
    username = Column(String(100), default='')
    kingdom = Column(String(50), default='')

    # Current values (latest snapshot)
    current_power = Column(BigInteger, default=0, nullable=False)
    current_kills = Column(BigInteger, default=0, nullable=False)
    current_deaths = Column(BigInteger, default=0, nullable=False)
    resources_gathered = Column(BigInteger, default=0, nullable=False)

    # Season-start values
    baseline_power = Column(BigInteger, default=0, nullable=False)
    baseline_kills = Column(BigInteger, default=0, nullable=False)
    baseline_deaths = Column(BigInteger, default=0, nullable=False)

    # Metadata
    created_at = Column(DateTime, default=func.now())
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    def to_dict(self) -> Dict[str, Any]:
        """Serializable copy used for backups and exports"""
        return {
            'governor_id': self.governor_id,
            'username': self.username,
            'kingdom': self.kingdom,
            'current_power': self.current_power,
            'current_kills': self.current_kills,
            'current_deaths': self.current_deaths,
            'resources_gathered': self.resources_gathered,
            'baseline_power': self.baseline_power,
            'baseline_kills': self.baseline_kills,
            'baseline_deaths': self.baseline_deaths,
        }

    def __repr__(self):
        return f"<MemberStat(governor_id='{self.governor_id}', username='{self.username}', power={self.current_power})>"

class Tier(Base):
    """Power bucket defining kill/death requirement multipliers."""
    __tablename__ = 'tiers'

    id = Column(Integer, primary_key=True)
    name = Column(String(100), nullable=False)
    min_power = Column(BigInteger, nullable=False, default=0)   # inclusive
    max_power = Column(BigInteger, nullable=False, default=0)   # exclusive
    kill_multiplier = Column(Float, nullable=False, default=0.0)
    death_multiplier = Column(Float, nullable=False, default=0.0)  # fraction of power

    created_at = Column(DateTime, default=func.now())

    __table_args__ = (
        CheckConstraint('min_power >= 0', name='ck_tier_min_power'),
    )

    def __repr__(self):
        return f"<Tier(name='{self.name}', range=[{self.min_power}, {self.max_power}))>"

class SeasonConfigEntry(Base):
    """Key/value row backing the SeasonConfig singleton."""
    __tablename__ = 'season_config'

    key = Column(String(100), primary_key=True)
    value = Column(Text, nullable=True)
    updated_at = Column(DateTime, default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<SeasonConfigEntry(key='{self.key}', value='{self.value}')>"

class Backup(Base):
    """Immutable snapshot of every MemberStat row taken before destructive season changes."""
    __tablename__ = 'backups'

    id = Column(Integer, primary_key=True)
    name = Column(String(200), nullable=False)
    season = Column(String(100), nullable=True)
    source = Column(String(255), nullable=True)
    member_count = Column(Integer, default=0, nullable=False)
    data = Column(Text, nullable=False, default='[]')  # JSON list of MemberStat.to_dict()
    created_at = Column(DateTime, default=func.now())

    @property
    def rows(self) -> List[Dict[str, Any]]:
        return json.loads(self.data or '[]')

    def __repr__(self):
        return f"<Backup(id={self.id}, name='{self.name}', season='{self.season}', members={self.member_count})>"
