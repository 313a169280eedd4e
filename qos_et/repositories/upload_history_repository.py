# -*- coding: utf-8 -*-
"""
Upload history and change history repository.

Both logs are append-only: entries are written once and never updated or
deleted. The dataset freshness evaluator reads upload history; the correction
merge reads change history.
"""

import json
from typing import List, Optional

from qos_et.models.upload_history import ChangeHistoryEntry, UploadHistoryEntry
from qos_et.services.exceptions import DuplicateIdException
from qos_et.utils.datetime_utils import to_sortable_isoformat, utc_now
from qos_et.utils.logger import get_logger
from .db_adapter import DatabaseAdapter

logger = get_logger(__name__)


class UploadHistoryRepository:
    """Repository for upload and change history entries."""

    def __init__(self, db: DatabaseAdapter):
        self.db = db

    # ==================== Upload history ====================

    def add_upload(self, entry: UploadHistoryEntry) -> UploadHistoryEntry:
        """Append an upload attempt."""
        query = """
            INSERT INTO upload_history (id, section, uploaded_at_iso, success, payload, recorded_at)
            VALUES (?, ?, ?, ?, ?, ?)
        """
        params = (
            entry.id,
            entry.section,
            entry.uploaded_at_iso,
            bool(entry.success),
            json.dumps(entry.to_dict(), ensure_ascii=False),
            to_sortable_isoformat(utc_now()),
        )
        try:
            self.db.execute_write(query, params)
        except Exception as e:
            if self.db.is_integrity_error(e):
                raise DuplicateIdException(entry.id)
            raise
        logger.debug(f"Recorded upload {entry.id} for section {entry.section} (success={entry.success})")
        return entry

    def list_uploads(self, section: Optional[str] = None) -> List[UploadHistoryEntry]:
        """Upload attempts in the order they were recorded."""
        query = "SELECT payload FROM upload_history"
        params = ()
        if section:
            query += " WHERE section = ?"
            params = (section,)
        query += " ORDER BY recorded_at"

        rows = self.db.fetch_all(query, params)
        return [UploadHistoryEntry.from_dict(json.loads(row["payload"])) for row in rows]

    # ==================== Change history ====================

    def add_change(self, entry: ChangeHistoryEntry) -> ChangeHistoryEntry:
        """Append a manual change."""
        self.add_changes([entry])
        return entry

    def add_changes(self, entries: List[ChangeHistoryEntry]) -> int:
        """Append several changes in one transaction."""
        query = """
            INSERT INTO change_history (id, record_id, record_type, change_type, payload, changed_at)
            VALUES (?, ?, ?, ?, ?, ?)
        """
        params_list = [
            (
                entry.id,
                entry.record_id,
                entry.record_type,
                entry.change_type,
                json.dumps(entry.to_dict(), ensure_ascii=False, default=str),
                entry.timestamp,
            )
            for entry in entries
        ]
        try:
            return self.db.execute_batches(query, params_list, len(params_list) or 1)
        except Exception as e:
            if self.db.is_integrity_error(e):
                raise DuplicateIdException(", ".join(entry.id for entry in entries))
            raise

    def list_changes(self, record_id: Optional[str] = None,
                     record_type: Optional[str] = None) -> List[ChangeHistoryEntry]:
        """Change entries, optionally for one record."""
        query = "SELECT payload FROM change_history WHERE 1=1"
        params = []
        if record_id:
            query += " AND record_id = ?"
            params.append(record_id)
        if record_type:
            query += " AND record_type = ?"
            params.append(record_type)
        query += " ORDER BY changed_at"

        rows = self.db.fetch_all(query, tuple(params))
        return [ChangeHistoryEntry.from_dict(json.loads(row["payload"])) for row in rows]
