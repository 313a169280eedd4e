# -*- coding: utf-8 -*-
"""
Import service for complaint batches.

Classifies every record of a batch as imported (new), updated (id already
stored in the caller's scope) or skipped (invalid or failed to write). A dry
run performs the same classification without writing, so its counts match
what a committing import of the same batch would report.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Set

from qos_et.models.complaint import normalize_complaint_payload
from qos_et.repositories.complaint_repository import ComplaintRepository
from qos_et.services.exceptions import StorageUnavailableException, ValidationException
from qos_et.services.request_context import RequestContext
from qos_et.services.validation_service import ValidationService
from qos_et.utils.logger import get_logger

logger = get_logger(__name__)


class ImportStatus(Enum):
    """Import record status."""
    PENDING = "pending"
    IMPORTED = "imported"
    UPDATED = "updated"
    SKIPPED = "skipped"


@dataclass
class ImportRecord:
    """A record of the batch being classified."""
    index: int
    record_id: Optional[str]
    data: Dict[str, Any]
    status: ImportStatus = ImportStatus.PENDING
    error: Optional[str] = None

    def skip(self, error: str) -> "ImportRecord":
        self.status = ImportStatus.SKIPPED
        self.error = error
        return self


@dataclass
class ImportResult:
    """Result of an import operation."""
    total: int = 0
    imported: int = 0
    updated: int = 0
    skipped: int = 0
    errors: List[Dict[str, Any]] = field(default_factory=list)
    dry_run: bool = False
    message: str = ""

    def count(self, record: ImportRecord) -> None:
        """Tally a classified record."""
        if record.status == ImportStatus.IMPORTED:
            self.imported += 1
        elif record.status == ImportStatus.UPDATED:
            self.updated += 1
        else:
            self.skipped += 1
            self.errors.append({
                "index": record.index,
                "id": record.record_id,
                "error": record.error,
            })

    def summarize(self) -> str:
        if self.dry_run:
            self.message = (
                f"Dry run complete. Would import {self.imported} new, "
                f"update {self.updated} existing, skip {self.skipped}."
            )
        else:
            self.message = (
                f"Import complete. Imported {self.imported} new, "
                f"updated {self.updated} existing, skipped {self.skipped}."
            )
        return self.message

    def to_dict(self) -> dict:
        return {
            "total": self.total,
            "imported": self.imported,
            "updated": self.updated,
            "skipped": self.skipped,
            "errors": list(self.errors),
            "dry_run": self.dry_run,
            "message": self.message,
        }


class ImportService:
    """
    Import reconciler.

    Records are processed one at a time in batch order. A failing record is
    reported and skipped; only an unreachable backend or an unusable batch
    stops the import.
    """

    def __init__(self, repository: ComplaintRepository,
                 validation_service: ValidationService = None):
        self.repository = repository
        self.validation = validation_service or ValidationService()

    def import_complaints(self, records: List[Dict[str, Any]],
                          context: RequestContext,
                          dry_run: bool = False) -> ImportResult:
        """
        Import a batch of complaint records for the caller.

        Args:
            records: Complaint payloads (snake_case or camelCase keys)
            context: Caller identity; overrides any user_id/tenant_id on the records
            dry_run: Classify only, write nothing

        Returns:
            ImportResult with counts, per-record errors and a summary message

        Raises:
            ValidationException: records is not a list or the caller has no user id
            StorageUnavailableException: the backend cannot be reached
        """
        if not isinstance(records, list):
            raise ValidationException(
                "Import payload must contain a list of complaints",
                field="complaints",
                errors=[{"field": "complaints", "message": "Must be a list"}],
            )
        if context is None or not (context.user_id or "").strip():
            raise ValidationException(
                "A user id is required to import complaints",
                field="user_id",
                errors=[{"field": "user_id", "message": "user_id is required"}],
            )

        result = ImportResult(total=len(records), dry_run=dry_run)
        seen_ids: Set[str] = set()

        logger.info(
            f"{'Dry-run' if dry_run else 'Committing'} import of {len(records)} complaints "
            f"for user {context.user_id} (tenant {context.tenant_id or '-'})"
        )

        for index, raw in enumerate(records):
            record = self._classify(index, raw, context, seen_ids)
            if not dry_run and record.status != ImportStatus.SKIPPED:
                self._commit(record, context)
            result.count(record)

        result.summarize()
        logger.info(result.message)
        return result

    def _classify(self, index: int, raw: Any, context: RequestContext,
                  seen_ids: Set[str]) -> ImportRecord:
        """Shared by dry run and commit; decides imported, updated or skipped."""
        if not isinstance(raw, dict):
            return ImportRecord(index=index, record_id=None, data={}).skip("Record must be an object")

        data = normalize_complaint_payload(raw)
        data["user_id"] = context.user_id
        data["tenant_id"] = context.tenant_id
        record_id = data.get("id") if isinstance(data.get("id"), str) else None
        record = ImportRecord(index=index, record_id=record_id, data=data)

        try:
            record.data = self.validation.validate_complaint(data)
        except ValidationException as e:
            return record.skip(e.message)

        if record_id in seen_ids:
            exists = True
        else:
            try:
                exists = self.repository.find_by_id(record_id, context.user_id, context.tenant_id) is not None
            except StorageUnavailableException:
                raise
            except Exception as e:
                logger.warning(f"Existence check failed for complaint {record_id}: {e}")
                return record.skip(str(e))

        seen_ids.add(record_id)
        record.status = ImportStatus.UPDATED if exists else ImportStatus.IMPORTED
        return record

    def _commit(self, record: ImportRecord, context: RequestContext) -> None:
        """Write a classified record; a failure turns it into a skip."""
        try:
            if record.status == ImportStatus.UPDATED:
                self.repository.update(record.record_id, record.data, context.user_id, context.tenant_id)
            else:
                self.repository.create(record.data)
        except StorageUnavailableException:
            raise
        except Exception as e:
            logger.warning(f"Import of complaint {record.record_id} failed: {e}")
            record.skip(str(e))
