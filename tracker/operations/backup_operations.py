"""
Backup Operations Module

Read and delete access to season backups. Backups are written by
SeasonOperations only and are never modified.
"""

import json
from typing import Any, Dict, List, Tuple

from tracker.database.models import Backup
from tracker.utils.exceptions import NotFoundError
from tracker.utils.logger import setup_logger

logger = setup_logger(__name__)


class BackupOperations:
    """List, export and delete backups."""

    def __init__(self, database):
        self.db = database
        self.logger = logger

    async def list_backups(self) -> List[Backup]:
        """All backups, newest first"""
        return await self.db.get_backups()

    async def get_backup(self, backup_id: int) -> Backup:
        """
        Raises:
            NotFoundError: If backup_id does not exist
        """
        backup = await self.db.get_backup(backup_id)
        if backup is None:
            raise NotFoundError('backup', backup_id)
        return backup

    async def export_backup(self, backup_id: int) -> Tuple[str, str]:
        """
        Render a backup as a downloadable JSON document.

        Returns:
            (filename, json_text) with filename "backup-<season>-<id>.json"
        """
        backup = await self.get_backup(backup_id)
        document: Dict[str, Any] = {
            'id': backup.id,
            'name': backup.name,
            'season': backup.season,
            'source': backup.source,
            'created_at': backup.created_at.isoformat() if backup.created_at else None,
            'member_count': backup.member_count,
            'members': backup.rows,
        }
        filename = f"backup-{backup.season or 'unknown'}-{backup.id}.json"
        return filename, json.dumps(document, indent=2)

    async def delete_backup(self, backup_id: int):
        """
        Raises:
            NotFoundError: If backup_id does not exist
        """
        if not await self.db.delete_backup(backup_id):
            raise NotFoundError('backup', backup_id)
        self.logger.info(f"Backup {backup_id} deleted")
