# -*- coding: utf-8 -*-
"""
Complaint Controller
====================
List, read, create, update, delete and import complaints for a caller.

Every operation takes the caller's RequestContext and returns an
OperationResult; ownership scope always comes from the context, never from
the payload.
"""

from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from qos_et.models.complaint import normalize_complaint_payload
from qos_et.repositories.complaint_repository import ComplaintRepository, matches_filters, normalize_filters
from qos_et.services.exceptions import NotFoundException, ValidationException
from qos_et.services.import_service import ImportService
from qos_et.services.request_context import RequestContext
from qos_et.utils.datetime_utils import from_isoformat, utc_now
from qos_et.utils.logger import get_logger
from .base_controller import BaseController, ErrorCodes, OperationResult

logger = get_logger(__name__)

EPOCH = datetime(1970, 1, 1)


class ComplaintController(BaseController):
    """Controller for complaint operations."""

    def __init__(self, repository: ComplaintRepository, import_service: ImportService = None):
        super().__init__()
        self.repository = repository
        self.import_service = import_service or ImportService(repository)

    # ==================== Reads ====================

    def list_complaints(self, context: RequestContext,
                        plant: Optional[str] = None,
                        site_code: Optional[str] = None,
                        notification_type: Optional[str] = None,
                        category: Optional[str] = None,
                        start_date: Union[str, datetime, None] = None,
                        end_date: Union[str, datetime, None] = None) -> OperationResult:
        """
        List the caller's complaints.

        With a start or end date the date-range query is used and the other
        filters are applied to its result; an open start means the epoch and
        an open end means now.
        """
        def _list():
            filters = normalize_filters({
                **context.scope(),
                "plant": plant,
                "site_code": site_code,
                "notification_type": notification_type,
                "category": category,
            })

            if start_date or end_date:
                start = self._parse_bound("start_date", start_date, EPOCH)
                end = self._parse_bound("end_date", end_date, None)
                complaints = self.repository.find_by_date_range(
                    start, end, context.user_id, context.tenant_id
                )
                complaints = [c for c in complaints if matches_filters(c, filters)]
            else:
                complaints = self.repository.find_all(filters)

            return [c.to_dict() for c in complaints]

        return self.execute_with_error_handling("list_complaints", _list)

    def get_complaint(self, context: RequestContext, record_id: str) -> OperationResult:
        def _get():
            complaint = self.repository.find_by_id(record_id, context.user_id, context.tenant_id)
            if complaint is None:
                raise NotFoundException("Complaint", record_id)
            return complaint.to_dict()

        return self.execute_with_error_handling("get_complaint", _get)

    # ==================== Writes ====================

    def create_complaints(self, context: RequestContext,
                          payload: Union[Dict[str, Any], List[Dict[str, Any]]]) -> OperationResult:
        """Create one complaint (dict) or many (list); the context's scope is applied to each."""
        def _create():
            items = payload if isinstance(payload, list) else [payload]
            scoped = [self._scoped(item, context) for item in items]

            if len(scoped) == 1 and not isinstance(payload, list):
                created = self.repository.create(scoped[0])
                self._trigger_callbacks("data_changed")
                return OperationResult.ok(data=created.to_dict(), message="Complaint created")

            count = self.repository.create_many(scoped)
            self._trigger_callbacks("data_changed")
            return OperationResult.ok(data={"count": count, "created": count},
                                      message=f"Created {count} complaints")

        self._log_operation("create_complaints", user_id=context.user_id)
        return self.execute_with_error_handling("create_complaints", _create)

    def update_complaint(self, context: RequestContext, record_id: str,
                         changes: Dict[str, Any]) -> OperationResult:
        def _update():
            if not isinstance(changes, dict):
                raise ValidationException("Update payload must be an object")
            updated = self.repository.update(record_id, changes, context.user_id, context.tenant_id)
            self._trigger_callbacks("data_changed")
            return updated.to_dict()

        return self.execute_with_error_handling("update_complaint", _update)

    def delete_complaint(self, context: RequestContext, record_id: str) -> OperationResult:
        def _delete():
            if self.repository.find_by_id(record_id, context.user_id, context.tenant_id) is None:
                raise NotFoundException("Complaint", record_id)
            self.repository.delete(record_id, context.user_id, context.tenant_id)
            self._trigger_callbacks("data_changed")
            return {"id": record_id, "deleted": True}

        return self.execute_with_error_handling("delete_complaint", _delete)

    def import_complaints(self, context: RequestContext, payload: Dict[str, Any],
                          dry_run: bool = False) -> OperationResult:
        """Import ``payload["complaints"]``; a dry run reports what would happen."""
        def _import():
            if not isinstance(payload, dict) or not isinstance(payload.get("complaints"), list):
                raise ValidationException(
                    "Request body must contain a 'complaints' array",
                    field="complaints",
                    errors=[{"field": "complaints", "message": "Must be a list"}],
                )
            result = self.import_service.import_complaints(payload["complaints"], context, dry_run=dry_run)
            if not dry_run and (result.imported or result.updated):
                self._trigger_callbacks("data_changed")
            return OperationResult.ok(data=result.to_dict(), message=result.message)

        self._log_operation("import_complaints", user_id=context.user_id, dry_run=dry_run)
        return self.execute_with_error_handling("import_complaints", _import)

    # ==================== Helpers ====================

    @staticmethod
    def _scoped(item: Any, context: RequestContext) -> Dict[str, Any]:
        if not isinstance(item, dict):
            raise ValidationException("Each complaint must be an object")
        data = normalize_complaint_payload(item)
        data["user_id"] = context.user_id
        data["tenant_id"] = context.tenant_id
        return data

    @staticmethod
    def _parse_bound(name: str, value: Any, default: Optional[datetime]) -> datetime:
        if not value:
            return from_isoformat(default) if default else utc_now()
        parsed = from_isoformat(value)
        if parsed is None:
            raise ValidationException(
                "Invalid query parameters",
                field=name,
                errors=[{"field": name, "message": "Invalid date"}],
            )
        return parsed


__all__ = ["ComplaintController", "ErrorCodes", "OperationResult"]
