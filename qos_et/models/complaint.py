# -*- coding: utf-8 -*-
"""
Complaint entity model.

Quality notifications (customer, supplier and internal complaints, deviations
and PPAP) imported from SAP exports, manual entry or the local upload store.
"""

import json
from dataclasses import dataclass, field, replace
from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from qos_et.utils.datetime_utils import from_isoformat, to_isoformat, utc_now


class NotificationType(str, Enum):
    """SAP QM notification type."""
    Q1 = "Q1"
    Q2 = "Q2"
    Q3 = "Q3"
    D1 = "D1"
    D2 = "D2"
    D3 = "D3"
    P1 = "P1"
    P2 = "P2"
    P3 = "P3"
    OTHER = "Other"


class NotificationCategory(str, Enum):
    """Business category derived from the notification type."""
    CUSTOMER_COMPLAINT = "CustomerComplaint"
    SUPPLIER_COMPLAINT = "SupplierComplaint"
    INTERNAL_COMPLAINT = "InternalComplaint"
    DEVIATION = "Deviation"
    PPAP = "PPAP"


class DataSource(str, Enum):
    """Where a complaint record came from."""
    SAP_S4 = "SAP_S4"
    MANUAL = "Manual"
    IMPORT = "Import"


# camelCase keys of the external record shape -> model field names
COMPLAINT_FIELD_ALIASES: Dict[str, str] = {
    "notificationNumber": "notification_number",
    "notificationType": "notification_type",
    "siteCode": "site_code",
    "siteName": "site_name",
    "createdOn": "created_on",
    "defectiveParts": "defective_parts",
    "unitOfMeasure": "unit_of_measure",
    "materialDescription": "material_description",
    "materialNumber": "material_number",
    "conversionJson": "conversion",
    "conversion_json": "conversion",
    "userId": "user_id",
    "tenantId": "tenant_id",
    "createdAt": "created_at",
    "updatedAt": "updated_at",
}

CONVERSION_FIELD_ALIASES: Dict[str, str] = {
    "originalValue": "original_value",
    "originalUnit": "original_unit",
    "convertedValue": "converted_value",
    "bottleSize": "bottle_size",
    "lengthPerPiece": "length_per_piece",
    "areaPerPiece": "area_per_piece",
    "materialDescription": "material_description",
    "wasConverted": "was_converted",
}

# Fields a caller may write through create/update/upsert
COMPLAINT_DATA_FIELDS = (
    "notification_number",
    "notification_type",
    "category",
    "plant",
    "site_code",
    "site_name",
    "created_on",
    "defective_parts",
    "source",
    "unit_of_measure",
    "material_description",
    "material_number",
    "conversion",
)


def _apply_aliases(data: Dict[str, Any], aliases: Dict[str, str]) -> Dict[str, Any]:
    normalized = {}
    for key, value in data.items():
        normalized[aliases.get(key, key)] = value
    return normalized


def normalize_complaint_payload(payload: Dict[str, Any]) -> Dict[str, Any]:
    """
    Return a copy of a complaint payload keyed by model field names.

    camelCase and snake_case keys are both accepted; the input is not modified.
    """
    return _apply_aliases(dict(payload), COMPLAINT_FIELD_ALIASES)


@dataclass
class UnitConversion:
    """
    Record of a unit-of-measure conversion to pieces.

    Stored alongside the complaint so the original quantity stays traceable.
    """
    original_value: float
    original_unit: str
    converted_value: float
    was_converted: bool = False
    bottle_size: Optional[float] = None
    length_per_piece: Optional[float] = None
    area_per_piece: Optional[float] = None
    material_description: Optional[str] = None

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        data = {
            "original_value": self.original_value,
            "original_unit": self.original_unit,
            "converted_value": self.converted_value,
            "was_converted": self.was_converted,
        }
        for name in ("bottle_size", "length_per_piece", "area_per_piece", "material_description"):
            value = getattr(self, name)
            if value is not None:
                data[name] = value
        return data

    def to_json(self) -> str:
        return json.dumps(self.to_dict(), ensure_ascii=False)

    @classmethod
    def from_dict(cls, data: dict) -> "UnitConversion":
        """Create UnitConversion from dictionary (camelCase keys accepted)."""
        data = _apply_aliases(data, CONVERSION_FIELD_ALIASES)
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})

    @classmethod
    def from_value(cls, value: Any) -> Optional["UnitConversion"]:
        """Build from a UnitConversion, a dict or a JSON string; None stays None."""
        if value is None or value == "":
            return None
        if isinstance(value, UnitConversion):
            return value
        if isinstance(value, str):
            value = json.loads(value)
        return cls.from_dict(value)


@dataclass
class Complaint:
    """
    Complaint entity.

    The ``id`` is assigned by the caller and stays stable across re-imports,
    which is what lets the import reconciler tell new records from updates.
    """

    id: str
    notification_number: str
    notification_type: NotificationType
    category: NotificationCategory
    plant: str
    site_code: str
    created_on: datetime
    defective_parts: float
    source: DataSource = DataSource.IMPORT

    site_name: Optional[str] = None
    unit_of_measure: Optional[str] = None
    material_description: Optional[str] = None
    material_number: Optional[str] = None
    conversion: Optional[UnitConversion] = None

    # Ownership (relational store only)
    user_id: Optional[str] = None
    tenant_id: Optional[str] = None

    # Metadata
    created_at: datetime = field(default_factory=utc_now)
    updated_at: datetime = field(default_factory=utc_now)

    def merged_with(self, data: Dict[str, Any]) -> "Complaint":
        """
        Return a copy with the provided fields replaced.

        Only keys present in ``data`` are applied; everything else keeps its
        current value. ``updated_at`` is refreshed.
        """
        data = normalize_complaint_payload(data)
        changes = {}
        for name in COMPLAINT_DATA_FIELDS:
            if name in data:
                changes[name] = data[name]
        changes = self._coerce(changes)
        changes["updated_at"] = utc_now()
        return replace(self, **changes)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "notification_number": self.notification_number,
            "notification_type": self.notification_type.value,
            "category": self.category.value,
            "plant": self.plant,
            "site_code": self.site_code,
            "site_name": self.site_name,
            "created_on": to_isoformat(self.created_on),
            "defective_parts": self.defective_parts,
            "source": self.source.value,
            "unit_of_measure": self.unit_of_measure,
            "material_description": self.material_description,
            "material_number": self.material_number,
            "conversion": self.conversion.to_dict() if self.conversion else None,
            "user_id": self.user_id,
            "tenant_id": self.tenant_id,
            "created_at": to_isoformat(self.created_at),
            "updated_at": to_isoformat(self.updated_at),
        }

    @staticmethod
    def _coerce(data: Dict[str, Any]) -> Dict[str, Any]:
        """Turn wire values (strings, dicts) into model types."""
        coerced = dict(data)
        if "notification_type" in coerced:
            coerced["notification_type"] = NotificationType(coerced["notification_type"])
        if "category" in coerced:
            coerced["category"] = NotificationCategory(coerced["category"])
        if "source" in coerced:
            if coerced["source"] is None:
                coerced.pop("source")
            else:
                coerced["source"] = DataSource(coerced["source"])
        if "created_on" in coerced:
            coerced["created_on"] = from_isoformat(coerced["created_on"])
        if "defective_parts" in coerced and coerced["defective_parts"] is not None:
            coerced["defective_parts"] = float(coerced["defective_parts"])
        if "conversion" in coerced:
            coerced["conversion"] = UnitConversion.from_value(coerced["conversion"])
        for name in ("created_at", "updated_at"):
            if name in coerced:
                coerced[name] = from_isoformat(coerced[name]) or utc_now()
        return coerced

    @classmethod
    def from_dict(cls, data: dict) -> "Complaint":
        """
        Create Complaint from dictionary.

        Expects a payload that already passed the validation gate.
        """
        data = cls._coerce(normalize_complaint_payload(data))
        return cls(**{k: v for k, v in data.items() if k in cls.__dataclass_fields__})
