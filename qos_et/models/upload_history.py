# -*- coding: utf-8 -*-
"""
Upload history and change history models.

Upload-history entries are written by the upload surface on every attempt
(successful or not) and never modified afterwards. Change-history entries are
written by the manual-edit surface whenever a record is changed after import.
"""

import dataclasses
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from qos_et.utils.datetime_utils import from_isoformat, to_isoformat, utc_now


class RecordTypes:
    """Record types referenced by change history."""
    COMPLAINT = "complaint"
    DELIVERY = "delivery"
    PPAP = "ppap"
    DEVIATION = "deviation"
    MANUAL_ENTRY = "manual_entry"
    FILE_UPLOAD = "file_upload"


class ChangeTypes:
    """Kinds of change recorded in change history."""
    CONVERSION = "conversion"
    MANUAL_EDIT = "manual_edit"
    CORRECTION = "correction"
    BULK_ACTION = "bulk_action"
    NEW_ENTRY = "new_entry"
    FILE_UPLOAD = "file_upload"
    DUPLICATE = "duplicate"


def _as_bool(value: Any) -> bool:
    """Stored flags may arrive as strings ("true"/"false") from JSON exports."""
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)


@dataclass
class UploadedFile:
    """A file that was part of an upload attempt."""
    name: str
    size: int = 0

    def to_dict(self) -> dict:
        return {"name": self.name, "size": self.size}


@dataclass
class UploadHistoryEntry:
    """
    One upload attempt for a dataset section.

    ``uploaded_at_iso`` is kept as the string the upload surface produced;
    malformed values are tolerated here and ignored by the health evaluator.
    """
    section: str
    uploaded_at_iso: str
    success: bool
    files: List[UploadedFile] = field(default_factory=list)
    notes: Optional[str] = None
    summary: Dict[str, Any] = field(default_factory=dict)
    used_in: List[str] = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    @property
    def uploaded_at(self):
        """Parsed upload time, or None when the stored value is malformed."""
        return from_isoformat(self.uploaded_at_iso)

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "section": self.section,
            "uploaded_at_iso": self.uploaded_at_iso,
            "success": self.success,
            "files": [f.to_dict() for f in self.files],
            "notes": self.notes,
            "summary": dict(self.summary),
            "used_in": list(self.used_in),
        }

    @classmethod
    def from_dict(cls, data: dict) -> "UploadHistoryEntry":
        """Create UploadHistoryEntry from dictionary (camelCase keys accepted)."""
        files = [
            f if isinstance(f, UploadedFile) else UploadedFile(name=f.get("name", ""), size=f.get("size", 0))
            for f in data.get("files") or []
        ]
        return cls(
            id=data.get("id") or str(uuid.uuid4()),
            section=data.get("section") or "",
            uploaded_at_iso=data.get("uploaded_at_iso", data.get("uploadedAtIso", "")),
            success=_as_bool(data.get("success", False)),
            files=files,
            notes=data.get("notes"),
            summary=dict(data.get("summary") or {}),
            used_in=list(data.get("used_in", data.get("usedIn")) or []),
        )


@dataclass
class ChangeHistoryEntry:
    """A manual change to a record after it was imported."""
    record_id: str
    record_type: str
    field: str = "all"
    old_value: Any = None
    new_value: Any = None
    editor: str = ""
    reason: Optional[str] = None
    change_type: str = ChangeTypes.MANUAL_EDIT
    # ``field`` above shadows dataclasses.field inside this class body
    timestamp: str = dataclasses.field(default_factory=lambda: to_isoformat(utc_now()))
    id: str = dataclasses.field(default_factory=lambda: str(uuid.uuid4()))

    def refers_to(self, record_id: str, record_type: str) -> bool:
        """True when this change was made to the given record."""
        return self.record_id == record_id and self.record_type == record_type

    def to_dict(self) -> dict:
        """Convert to dictionary for serialization."""
        return {
            "id": self.id,
            "timestamp": self.timestamp,
            "editor": self.editor,
            "record_id": self.record_id,
            "record_type": self.record_type,
            "field": self.field,
            "old_value": self.old_value,
            "new_value": self.new_value,
            "reason": self.reason,
            "change_type": self.change_type,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ChangeHistoryEntry":
        """Create ChangeHistoryEntry from dictionary (camelCase keys accepted)."""
        return cls(
            id=data.get("id") or str(uuid.uuid4()),
            timestamp=data.get("timestamp") or to_isoformat(utc_now()),
            editor=data.get("editor", ""),
            record_id=data.get("record_id", data.get("recordId")),
            record_type=data.get("record_type", data.get("recordType")),
            field=data.get("field", "all"),
            old_value=data.get("old_value", data.get("oldValue")),
            new_value=data.get("new_value", data.get("newValue")),
            reason=data.get("reason"),
            change_type=data.get("change_type", data.get("changeType", ChangeTypes.MANUAL_EDIT)),
        )


@dataclass
class UploadSummary:
    """
    The processed result of one upload batch.

    ``processed_data`` maps a record kind ("complaints", "deliveries") to the
    records as they stand after any manual edits made during review.
    """
    processed_data: Dict[str, List[Any]] = field(default_factory=dict)
    change_history: List[ChangeHistoryEntry] = field(default_factory=list)
    id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def records(self, data_key: str) -> List[Any]:
        return list(self.processed_data.get(data_key) or [])

    def was_corrected(self, record_id: str, record_type: str) -> bool:
        return any(change.refers_to(record_id, record_type) for change in self.change_history)
