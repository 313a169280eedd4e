# -*- coding: utf-8 -*-
"""
Complaint repository interface.

Both storage backends implement this contract so callers (import reconciler,
correction merge, controller) never need to know which one is active.
"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Dict, List, Optional, Union

from qos_et.models.complaint import Complaint, normalize_complaint_payload
from qos_et.services.validation_service import ValidationService

ComplaintData = Union[Complaint, Dict[str, Any]]

# Filter keys understood by find_all/count
FILTER_KEYS = ("user_id", "tenant_id", "plant", "site_code", "notification_type", "category")


def normalize_filters(filters: Optional[Dict[str, Any]]) -> Dict[str, Any]:
    """Accept camelCase or snake_case filter keys; drop unknown and empty ones."""
    normalized = normalize_complaint_payload(filters or {})
    result = {}
    for key in FILTER_KEYS:
        value = normalized.get(key)
        value = getattr(value, "value", value)
        if value is not None and value != "":
            result[key] = value
    return result


def matches_filters(complaint: Complaint, filters: Dict[str, Any]) -> bool:
    """In-memory attribute filter; scope keys are not considered here."""
    if "plant" in filters and complaint.plant != filters["plant"]:
        return False
    if "site_code" in filters and complaint.site_code != filters["site_code"]:
        return False
    if "notification_type" in filters and complaint.notification_type.value != filters["notification_type"]:
        return False
    if "category" in filters and complaint.category.value != filters["category"]:
        return False
    return True


class ComplaintRepository(ABC):
    """
    Storage contract for complaint records.

    ``data`` arguments accept a ``Complaint`` or a payload dict with
    snake_case or camelCase keys. Every write validates its payload first and
    raises ``ValidationException`` without touching storage when it fails.
    """

    backend_name = "abstract"

    def __init__(self, validation_service: ValidationService = None):
        self.validation = validation_service or ValidationService()

    # ==================== Reads ====================

    @abstractmethod
    def find_all(self, filters: Optional[Dict[str, Any]] = None) -> List[Complaint]:
        """All complaints matching ``filters``, newest ``created_on`` first."""
        pass

    @abstractmethod
    def find_by_id(self, record_id: str, user_id: Optional[str] = None,
                   tenant_id: Optional[str] = None) -> Optional[Complaint]:
        pass

    @abstractmethod
    def find_by_date_range(self, start: datetime, end: datetime,
                           user_id: Optional[str] = None,
                           tenant_id: Optional[str] = None) -> List[Complaint]:
        """Complaints with ``start <= created_on <= end``."""
        pass

    @abstractmethod
    def find_by_site(self, site_code: str, user_id: Optional[str] = None,
                     tenant_id: Optional[str] = None) -> List[Complaint]:
        pass

    @abstractmethod
    def find_by_notification_number(self, notification_number: str,
                                    plant: Optional[str] = None,
                                    user_id: Optional[str] = None,
                                    tenant_id: Optional[str] = None) -> List[Complaint]:
        pass

    @abstractmethod
    def count(self, filters: Optional[Dict[str, Any]] = None) -> int:
        pass

    # ==================== Writes ====================

    @abstractmethod
    def create(self, data: ComplaintData) -> Complaint:
        """Insert a new complaint; raises DuplicateIdException when the id exists."""
        pass

    @abstractmethod
    def create_many(self, data: List[ComplaintData]) -> int:
        """Insert many; ids already stored or repeated in ``data`` are skipped."""
        pass

    @abstractmethod
    def update(self, record_id: str, data: Dict[str, Any],
               user_id: Optional[str] = None,
               tenant_id: Optional[str] = None) -> Complaint:
        """Replace the provided fields; raises NotFoundException when absent."""
        pass

    @abstractmethod
    def upsert(self, record_id: str, data: ComplaintData) -> Complaint:
        pass

    @abstractmethod
    def upsert_many(self, data: List[ComplaintData]) -> int:
        pass

    @abstractmethod
    def delete(self, record_id: str, user_id: Optional[str] = None,
               tenant_id: Optional[str] = None) -> None:
        pass

    # ==================== Helpers ====================

    def _payload(self, data: ComplaintData) -> Dict[str, Any]:
        if isinstance(data, Complaint):
            return data.to_dict()
        return dict(data)

    def _validated_complaint(self, data: ComplaintData,
                             record_id: Optional[str] = None) -> Complaint:
        """Run the validation gate and build the entity."""
        payload = self._payload(data)
        if record_id is not None:
            payload = normalize_complaint_payload(payload)
            payload["id"] = record_id
        normalized = self.validation.validate_complaint(payload)
        return Complaint.from_dict(normalized)

    def _validated_changes(self, data: Dict[str, Any]) -> Dict[str, Any]:
        """Run the validation gate on a partial update."""
        if isinstance(data, Complaint):
            data = data.to_dict()
        return self.validation.validate_complaint_update(data)
