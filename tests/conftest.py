"""
Shared fixtures: a fresh file-backed SQLite database per test, plus the
services and operations wired the way the bot wires them.
"""

import csv
import io

import pytest
import pytest_asyncio
from openpyxl import Workbook

from tracker.database.database import Database
from tracker.operations.backup_operations import BackupOperations
from tracker.operations.season_operations import SeasonOperations
from tracker.operations.stats_operations import StatsOperations
from tracker.operations.tier_operations import TierOperations
from tracker.services.configuration import ConfigurationService
from tracker.services.reporting import ReportingService

HEADERS = ['Character ID', 'Username', 'Kingdom', 'Power', 'T5 Deaths', 'T4 Deaths', 'Total Kill Points', 'Resources Gathered']


def _make_xlsx(rows, headers=HEADERS) -> bytes:
    """Build an in-memory workbook with a header row."""
    workbook = Workbook()
    sheet = workbook.active
    sheet.append(list(headers))
    for row in rows:
        sheet.append(list(row))
    buffer = io.BytesIO()
    workbook.save(buffer)
    return buffer.getvalue()


def _make_csv(rows, headers=HEADERS) -> bytes:
    buffer = io.StringIO()
    writer = csv.writer(buffer)
    writer.writerow(headers)
    writer.writerows(rows)
    return buffer.getvalue().encode('utf-8')


@pytest_asyncio.fixture
async def db(tmp_path):
    database = Database(f"sqlite:///{tmp_path / 'test.db'}")
    await database.initialize()
    yield database
    await database.close()


@pytest_asyncio.fixture
async def config_service(db):
    service = ConfigurationService(db)
    await service.load_all()
    return service


@pytest.fixture
def stats_ops(db):
    return StatsOperations(db)


@pytest.fixture
def season_ops(db, config_service):
    return SeasonOperations(db, config_service)


@pytest.fixture
def tier_ops(db):
    return TierOperations(db)


@pytest.fixture
def backup_ops(db):
    return BackupOperations(db)


@pytest.fixture
def reporting(db, config_service):
    return ReportingService(db, config_service)


@pytest.fixture
def make_xlsx():
    return _make_xlsx


@pytest.fixture
def make_csv():
    return _make_csv
