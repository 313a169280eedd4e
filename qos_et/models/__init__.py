# -*- coding: utf-8 -*-
"""
QOS-ET Data Models
"""

from .complaint import (
    Complaint,
    DataSource,
    NotificationCategory,
    NotificationType,
    UnitConversion,
)
from .upload_history import (
    ChangeHistoryEntry,
    ChangeTypes,
    RecordTypes,
    UploadedFile,
    UploadHistoryEntry,
    UploadSummary,
)

__all__ = [
    "Complaint",
    "DataSource",
    "NotificationCategory",
    "NotificationType",
    "UnitConversion",
    "ChangeHistoryEntry",
    "ChangeTypes",
    "RecordTypes",
    "UploadedFile",
    "UploadHistoryEntry",
    "UploadSummary",
]
