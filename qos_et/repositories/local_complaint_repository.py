# -*- coding: utf-8 -*-
"""
Embedded complaint store.

Client-local, single-process storage: every complaint is one JSON document
keyed by its id in the ``complaint_documents`` table of a SQLite database.
There is no ownership scoping here; ``user_id``/``tenant_id`` arguments are
accepted for interface compatibility and ignored.
"""

import json
from datetime import datetime
from typing import Any, Dict, List, Optional

from qos_et.app.config import Config
from qos_et.models.complaint import Complaint
from qos_et.services.exceptions import (
    DuplicateIdException,
    NotFoundException,
    UnsupportedOperationException,
    ValidationException,
)
from qos_et.services.validation_service import ValidationService
from qos_et.utils.datetime_utils import to_sortable_isoformat, utc_now
from qos_et.utils.logger import get_logger
from .complaint_repository import (
    ComplaintData,
    ComplaintRepository,
    matches_filters,
    normalize_filters,
)
from .db_adapter import DatabaseAdapter, RowProxy

logger = get_logger(__name__)

_INSERT = """
    INSERT INTO complaint_documents (id, payload, created_on, created_at, updated_at)
    VALUES (?, ?, ?, ?, ?)
"""

_INSERT_IGNORE = _INSERT + " ON CONFLICT (id) DO NOTHING"

_UPSERT = _INSERT + """
    ON CONFLICT (id) DO UPDATE SET
        payload = excluded.payload,
        created_on = excluded.created_on,
        updated_at = excluded.updated_at
"""


class LocalComplaintRepository(ComplaintRepository):
    """Repository for complaints kept in the embedded store."""

    backend_name = "local"

    def __init__(self, db: DatabaseAdapter,
                 validation_service: ValidationService = None,
                 chunk_size: int = None):
        super().__init__(validation_service)
        self.db = db
        self.chunk_size = chunk_size or Config.EMBEDDED_WRITE_CHUNK

    # ==================== Mapping ====================

    def _to_row(self, complaint: Complaint) -> tuple:
        return (
            complaint.id,
            json.dumps(complaint.to_dict(), ensure_ascii=False),
            to_sortable_isoformat(complaint.created_on),
            to_sortable_isoformat(complaint.created_at),
            to_sortable_isoformat(complaint.updated_at),
        )

    def _row_to_complaint(self, row: RowProxy) -> Complaint:
        """Decode a stored document; corrupt documents raise ValidationException."""
        try:
            data = json.loads(row["payload"])
            if row.get("created_at"):
                data["created_at"] = row["created_at"]
            return Complaint.from_dict(data)
        except (ValueError, KeyError, TypeError) as e:
            raise ValidationException(
                f"Stored complaint document {row.get('id')} is malformed: {e}",
                field="payload",
                errors=[{"field": "payload", "message": str(e)}],
            )

    # ==================== Reads ====================

    def find_all(self, filters: Optional[Dict[str, Any]] = None) -> List[Complaint]:
        filters = normalize_filters(filters)
        rows = self.db.fetch_all("SELECT * FROM complaint_documents ORDER BY created_on DESC")
        complaints = [self._row_to_complaint(row) for row in rows]
        return [c for c in complaints if matches_filters(c, filters)]

    def find_by_id(self, record_id: str, user_id: Optional[str] = None,
                   tenant_id: Optional[str] = None) -> Optional[Complaint]:
        row = self.db.fetch_one("SELECT * FROM complaint_documents WHERE id = ?", (record_id,))
        if row:
            return self._row_to_complaint(row)
        return None

    def find_by_date_range(self, start: datetime, end: datetime,
                           user_id: Optional[str] = None,
                           tenant_id: Optional[str] = None) -> List[Complaint]:
        start_key = to_sortable_isoformat(start)
        end_key = to_sortable_isoformat(end)
        if start_key is None or end_key is None:
            raise ValidationException("Invalid date range", field="created_on")

        rows = self.db.fetch_all(
            "SELECT * FROM complaint_documents WHERE created_on >= ? AND created_on <= ? "
            "ORDER BY created_on DESC",
            (start_key, end_key)
        )
        return [self._row_to_complaint(row) for row in rows]

    def find_by_site(self, site_code: str, user_id: Optional[str] = None,
                     tenant_id: Optional[str] = None) -> List[Complaint]:
        return self.find_all({"site_code": site_code})

    def find_by_notification_number(self, notification_number: str,
                                    plant: Optional[str] = None,
                                    user_id: Optional[str] = None,
                                    tenant_id: Optional[str] = None) -> List[Complaint]:
        filters = {"plant": plant} if plant else {}
        return [c for c in self.find_all(filters)
                if c.notification_number == notification_number]

    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        attribute_filters = {k: v for k, v in normalize_filters(filters).items()
                             if k not in ("user_id", "tenant_id")}
        if not attribute_filters:
            return self.count_documents()
        return len(self.find_all(attribute_filters))

    def count_documents(self) -> int:
        """Number of stored documents."""
        row = self.db.fetch_one("SELECT COUNT(*) as count FROM complaint_documents")
        return row["count"] if row else 0

    # ==================== Writes ====================

    def create(self, data: ComplaintData) -> Complaint:
        complaint = self._validated_complaint(data)

        if self.find_by_id(complaint.id) is not None:
            raise DuplicateIdException(complaint.id)

        try:
            self.db.execute_write(_INSERT, self._to_row(complaint))
        except Exception as e:
            if self.db.is_integrity_error(e):
                raise DuplicateIdException(complaint.id)
            raise

        logger.debug(f"Created local complaint: {complaint.id}")
        return complaint

    def create_many(self, data: List[ComplaintData]) -> int:
        complaints = [self._validated_complaint(item) for item in data]
        if not complaints:
            return 0

        existing = {row["id"] for row in self.db.fetch_all("SELECT id FROM complaint_documents")}
        pending = []
        for complaint in complaints:
            if complaint.id in existing:
                continue
            existing.add(complaint.id)
            pending.append(self._to_row(complaint))

        created = self.db.execute_batches(_INSERT_IGNORE, pending, self.chunk_size)
        logger.info(f"Created {created} local complaints ({len(complaints) - created} skipped)")
        return created

    def update(self, record_id: str, data: Dict[str, Any],
               user_id: Optional[str] = None,
               tenant_id: Optional[str] = None) -> Complaint:
        changes = self._validated_changes(data)

        existing = self.find_by_id(record_id)
        if existing is None:
            raise NotFoundException("Complaint", record_id)

        updated = existing.merged_with(changes)
        _, payload, created_on, _, updated_at = self._to_row(updated)
        self.db.execute_write(
            "UPDATE complaint_documents SET payload = ?, created_on = ?, updated_at = ? WHERE id = ?",
            (payload, created_on, updated_at, record_id)
        )
        logger.debug(f"Updated local complaint: {record_id}")
        return updated

    def upsert(self, record_id: str, data: ComplaintData) -> Complaint:
        complaint = self._validated_complaint(data, record_id=record_id)
        complaint.updated_at = utc_now()

        existing = self.find_by_id(record_id)
        if existing is not None:
            complaint.created_at = existing.created_at

        self.db.execute_write(_UPSERT, self._to_row(complaint))
        return complaint

    def upsert_many(self, data: List[ComplaintData]) -> int:
        complaints = [self._validated_complaint(item) for item in data]
        now = utc_now()
        rows = []
        for complaint in complaints:
            complaint.updated_at = now
            rows.append(self._to_row(complaint))

        written = self.db.execute_batches(_UPSERT, rows, self.chunk_size)
        logger.info(f"Upserted {written} local complaints")
        return written

    def delete(self, record_id: str, user_id: Optional[str] = None,
               tenant_id: Optional[str] = None) -> None:
        raise UnsupportedOperationException("delete", self.backend_name)

    def clear(self) -> None:
        """Remove every stored document."""
        self.db.execute_write("DELETE FROM complaint_documents")
        logger.info("Cleared local complaint store")

