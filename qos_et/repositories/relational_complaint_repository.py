# -*- coding: utf-8 -*-
"""
Relational complaint store.

Durable multi-tenant storage in the typed ``complaints`` table, primary key
``(user_id, tenant_id, id)``. Runs on PostgreSQL in production and on SQLite
in development and tests.

Ownership rules:
- List reads (find_all, count, find_by_date_range, find_by_site,
  find_by_notification_number) return nothing without a ``user_id`` and
  filter by ``tenant_id`` only when one is given.
- Id-addressed operations (find_by_id, update, upsert, delete) address the
  exact ``(user_id, tenant_id, id)`` identity; a missing tenant means the
  tenant-less partition, stored as ``''``.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from qos_et.models.complaint import Complaint, DataSource, NotificationCategory, NotificationType, UnitConversion
from qos_et.services.exceptions import DuplicateIdException, NotFoundException, ValidationException
from qos_et.services.validation_service import ValidationService
from qos_et.utils.datetime_utils import from_isoformat, to_sortable_isoformat, utc_now
from qos_et.utils.logger import get_logger
from .complaint_repository import ComplaintData, ComplaintRepository, normalize_filters
from .db_adapter import DatabaseAdapter, RowProxy

logger = get_logger(__name__)

_COLUMNS = (
    "id", "user_id", "tenant_id",
    "notification_number", "notification_type", "category",
    "plant", "site_code", "site_name", "created_on", "defective_parts", "source",
    "unit_of_measure", "material_description", "material_number", "conversion_json",
    "created_at", "updated_at",
)

# Columns rewritten by update/upsert; identity and created_at never change
_MUTABLE_COLUMNS = tuple(c for c in _COLUMNS if c not in ("id", "user_id", "tenant_id", "created_at"))

_INSERT = (
    f"INSERT INTO complaints ({', '.join(_COLUMNS)}) "
    f"VALUES ({', '.join('?' for _ in _COLUMNS)})"
)

_INSERT_IGNORE = _INSERT + " ON CONFLICT (user_id, tenant_id, id) DO NOTHING"

_UPSERT = _INSERT + " ON CONFLICT (user_id, tenant_id, id) DO UPDATE SET " + ", ".join(
    f"{column} = excluded.{column}" for column in _MUTABLE_COLUMNS
)

_UPDATE = (
    f"UPDATE complaints SET {', '.join(f'{c} = ?' for c in _MUTABLE_COLUMNS)} "
    "WHERE user_id = ? AND tenant_id = ? AND id = ?"
)


def _tenant_key(tenant_id: Optional[str]) -> str:
    return tenant_id or ""


class RelationalComplaintRepository(ComplaintRepository):
    """Repository for complaints kept in the relational store."""

    backend_name = "postgres"

    def __init__(self, db: DatabaseAdapter, validation_service: ValidationService = None):
        super().__init__(validation_service)
        self.db = db

    # ==================== Mapping ====================

    def _ts(self, value):
        """Timestamp parameter in the form the backend stores."""
        if self.db.stores_timestamps_as_text:
            return to_sortable_isoformat(value)
        return from_isoformat(value)

    def _to_row(self, complaint: Complaint) -> Dict[str, Any]:
        return {
            "id": complaint.id,
            "user_id": complaint.user_id,
            "tenant_id": _tenant_key(complaint.tenant_id),
            "notification_number": complaint.notification_number,
            "notification_type": complaint.notification_type.value,
            "category": complaint.category.value,
            "plant": complaint.plant,
            "site_code": complaint.site_code,
            "site_name": complaint.site_name,
            "created_on": self._ts(complaint.created_on),
            "defective_parts": complaint.defective_parts,
            "source": complaint.source.value,
            "unit_of_measure": complaint.unit_of_measure,
            "material_description": complaint.material_description,
            "material_number": complaint.material_number,
            "conversion_json": complaint.conversion.to_json() if complaint.conversion else None,
            "created_at": self._ts(complaint.created_at),
            "updated_at": self._ts(complaint.updated_at),
        }

    def _insert_params(self, complaint: Complaint) -> Tuple:
        row = self._to_row(complaint)
        return tuple(row[c] for c in _COLUMNS)

    def _row_to_complaint(self, row: RowProxy) -> Complaint:
        """Convert a database row to Complaint; a corrupt conversion raises ValidationException."""
        try:
            conversion = UnitConversion.from_value(row.get("conversion_json"))
        except (ValueError, TypeError) as e:
            raise ValidationException(
                f"Stored conversion for complaint {row['id']} is malformed: {e}",
                field="conversion",
                errors=[{"field": "conversion", "message": str(e)}],
            )

        return Complaint(
            id=row["id"],
            notification_number=row["notification_number"],
            notification_type=NotificationType(row["notification_type"]),
            category=NotificationCategory(row["category"]),
            plant=row["plant"],
            site_code=row["site_code"],
            site_name=row.get("site_name"),
            created_on=from_isoformat(row["created_on"]),
            defective_parts=float(row["defective_parts"]),
            source=DataSource(row["source"]),
            unit_of_measure=row.get("unit_of_measure"),
            material_description=row.get("material_description"),
            material_number=row.get("material_number"),
            conversion=conversion,
            user_id=row["user_id"],
            tenant_id=row["tenant_id"] or None,
            created_at=from_isoformat(row["created_at"]) or utc_now(),
            updated_at=from_isoformat(row["updated_at"]) or utc_now(),
        )

    # ==================== Scoping ====================

    @staticmethod
    def _list_scope(user_id: Optional[str], tenant_id: Optional[str]) -> Tuple[str, List[Any]]:
        clause = " AND user_id = ?"
        params: List[Any] = [user_id]
        if tenant_id:
            clause += " AND tenant_id = ?"
            params.append(tenant_id)
        return clause, params

    @staticmethod
    def _require_owner(complaint: Complaint) -> None:
        if not complaint.user_id:
            raise ValidationException(
                "user_id is required by the relational store",
                field="user_id",
                errors=[{"field": "user_id", "message": "user_id is required"}],
            )

    def _select(self, where: str, params: List[Any]) -> List[Complaint]:
        rows = self.db.fetch_all(
            f"SELECT * FROM complaints WHERE 1=1{where} ORDER BY created_on DESC",
            tuple(params)
        )
        return [self._row_to_complaint(row) for row in rows]

    # ==================== Reads ====================

    def find_all(self, filters: Optional[Dict[str, Any]] = None) -> List[Complaint]:
        filters = normalize_filters(filters)
        if not filters.get("user_id"):
            return []

        where, params = self._list_scope(filters["user_id"], filters.get("tenant_id"))
        for key in ("plant", "site_code", "notification_type", "category"):
            if key in filters:
                where += f" AND {key} = ?"
                params.append(filters[key])
        return self._select(where, params)

    def find_by_id(self, record_id: str, user_id: Optional[str] = None,
                   tenant_id: Optional[str] = None) -> Optional[Complaint]:
        if not user_id:
            return None
        row = self.db.fetch_one(
            "SELECT * FROM complaints WHERE user_id = ? AND tenant_id = ? AND id = ?",
            (user_id, _tenant_key(tenant_id), record_id)
        )
        if row:
            return self._row_to_complaint(row)
        return None

    def find_by_date_range(self, start: datetime, end: datetime,
                           user_id: Optional[str] = None,
                           tenant_id: Optional[str] = None) -> List[Complaint]:
        if not user_id:
            return []
        start_value, end_value = self._ts(start), self._ts(end)
        if start_value is None or end_value is None:
            raise ValidationException("Invalid date range", field="created_on")

        where, params = self._list_scope(user_id, tenant_id)
        where += " AND created_on >= ? AND created_on <= ?"
        params.extend([start_value, end_value])
        return self._select(where, params)

    def find_by_site(self, site_code: str, user_id: Optional[str] = None,
                     tenant_id: Optional[str] = None) -> List[Complaint]:
        if not user_id:
            return []
        where, params = self._list_scope(user_id, tenant_id)
        where += " AND site_code = ?"
        params.append(site_code)
        return self._select(where, params)

    def find_by_notification_number(self, notification_number: str,
                                    plant: Optional[str] = None,
                                    user_id: Optional[str] = None,
                                    tenant_id: Optional[str] = None) -> List[Complaint]:
        if not user_id:
            return []
        where, params = self._list_scope(user_id, tenant_id)
        where += " AND notification_number = ?"
        params.append(notification_number)
        if plant:
            where += " AND plant = ?"
            params.append(plant)
        return self._select(where, params)

    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        filters = normalize_filters(filters)
        if not filters.get("user_id"):
            return 0

        where, params = self._list_scope(filters["user_id"], filters.get("tenant_id"))
        for key in ("plant", "site_code", "notification_type", "category"):
            if key in filters:
                where += f" AND {key} = ?"
                params.append(filters[key])
        row = self.db.fetch_one(f"SELECT COUNT(*) as count FROM complaints WHERE 1=1{where}", tuple(params))
        return int(row["count"]) if row else 0

    # ==================== Writes ====================

    def create(self, data: ComplaintData) -> Complaint:
        complaint = self._validated_complaint(data)
        self._require_owner(complaint)

        if self.find_by_id(complaint.id, complaint.user_id, complaint.tenant_id) is not None:
            raise DuplicateIdException(complaint.id)

        try:
            self.db.execute_write(_INSERT, self._insert_params(complaint))
        except Exception as e:
            if self.db.is_integrity_error(e):
                raise DuplicateIdException(complaint.id)
            raise

        logger.debug(f"Created complaint {complaint.id} for user {complaint.user_id}")
        return complaint

    def create_many(self, data: List[ComplaintData]) -> int:
        complaints = [self._validated_complaint(item) for item in data]
        for complaint in complaints:
            self._require_owner(complaint)
        if not complaints:
            return 0

        seen = set()
        pending = []
        for complaint in complaints:
            key = (complaint.user_id, _tenant_key(complaint.tenant_id), complaint.id)
            if key in seen:
                continue
            seen.add(key)
            pending.append(self._insert_params(complaint))

        created = self.db.execute_batches(_INSERT_IGNORE, pending, len(pending))
        logger.info(f"Created {created} complaints ({len(complaints) - created} skipped)")
        return created

    def update(self, record_id: str, data: Dict[str, Any],
               user_id: Optional[str] = None,
               tenant_id: Optional[str] = None) -> Complaint:
        changes = self._validated_changes(data)

        existing = self.find_by_id(record_id, user_id, tenant_id)
        if existing is None:
            raise NotFoundException("Complaint", record_id)

        updated = existing.merged_with(changes)
        row = self._to_row(updated)
        params = tuple(row[c] for c in _MUTABLE_COLUMNS) + (user_id, _tenant_key(tenant_id), record_id)
        if self.db.execute_write(_UPDATE, params) == 0:
            raise NotFoundException("Complaint", record_id)

        logger.debug(f"Updated complaint {record_id} for user {user_id}")
        return updated

    def upsert(self, record_id: str, data: ComplaintData) -> Complaint:
        complaint = self._validated_complaint(data, record_id=record_id)
        self._require_owner(complaint)
        complaint.updated_at = utc_now()

        self.db.execute_write(_UPSERT, self._insert_params(complaint))
        stored = self.find_by_id(record_id, complaint.user_id, complaint.tenant_id)
        return stored or complaint

    def upsert_many(self, data: List[ComplaintData]) -> int:
        complaints = [self._validated_complaint(item) for item in data]
        for complaint in complaints:
            self._require_owner(complaint)
        if not complaints:
            return 0

        now = utc_now()
        rows = []
        for complaint in complaints:
            complaint.updated_at = now
            rows.append(self._insert_params(complaint))

        written = self.db.execute_batches(_UPSERT, rows, len(rows))
        logger.info(f"Upserted {written} complaints")
        return written

    def delete(self, record_id: str, user_id: Optional[str] = None,
               tenant_id: Optional[str] = None) -> None:
        if not user_id:
            raise NotFoundException("Complaint", record_id)

        deleted = self.db.execute_write(
            "DELETE FROM complaints WHERE user_id = ? AND tenant_id = ? AND id = ?",
            (user_id, _tenant_key(tenant_id), record_id)
        )
        if deleted == 0:
            raise NotFoundException("Complaint", record_id)
        logger.debug(f"Deleted complaint {record_id} for user {user_id}")
