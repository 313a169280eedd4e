# -*- coding: utf-8 -*-
"""
Dataset freshness.

Derives, per dataset section, whether data is present and recent enough from
the upload history. Nothing here reads storage or the clock unless ``now`` is
omitted, so results are reproducible in tests.
"""

import math
from dataclasses import dataclass
from datetime import datetime
from typing import Dict, Iterable, List, Optional, Union

from qos_et.app.config import Config, Sections
from qos_et.models.upload_history import UploadHistoryEntry
from qos_et.utils.datetime_utils import days_between, ensure_utc, utc_now

STATUS_OK = "ok"
STATUS_MISSING = "missing"
STATUS_STALE = "stale"

SECTION_NAMES = {
    Sections.COMPLAINTS: "Complaints dataset",
    Sections.DELIVERIES: "Deliveries dataset",
    Sections.PPAP: "PPAP dataset",
    Sections.DEVIATIONS: "Deviations dataset",
    Sections.AUDIT: "Audit dataset",
    Sections.PLANTS: "Plants dataset",
}

HistoryLike = Union[UploadHistoryEntry, dict]


@dataclass
class DatasetHealthInfo:
    """Health snapshot of one dataset section."""
    status: str
    last_success_iso: Optional[str] = None
    last_upload_iso: Optional[str] = None
    days_since_last_success: Optional[int] = None
    is_stale: bool = True
    has_data: bool = False

    def to_dict(self) -> dict:
        return {
            "status": self.status,
            "last_success_iso": self.last_success_iso,
            "last_upload_iso": self.last_upload_iso,
            "days_since_last_success": self.days_since_last_success,
            "is_stale": self.is_stale,
            "has_data": self.has_data,
        }


@dataclass
class DatasetIssue:
    """A section whose status is not ok."""
    section: str
    health: DatasetHealthInfo
    message: str


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def _entries(history: Iterable[HistoryLike]) -> List[UploadHistoryEntry]:
    return [h if isinstance(h, UploadHistoryEntry) else UploadHistoryEntry.from_dict(h)
            for h in history or []]


def _latest(entries: List[UploadHistoryEntry]) -> Optional[UploadHistoryEntry]:
    """Most recent entry by upload time; unparseable timestamps are ignored."""
    dated = [e for e in entries if e.uploaded_at is not None]
    if not dated:
        return None
    return max(dated, key=lambda e: e.uploaded_at)


def get_dataset_health(section: str, history: Iterable[HistoryLike],
                       stale_threshold_days: float = None,
                       now: Optional[datetime] = None) -> DatasetHealthInfo:
    """
    Health of one dataset section.

    Args:
        section: Upload section key (complaints, deliveries, ...)
        history: Upload history entries of any section
        stale_threshold_days: Data older than this is stale (default from config)
        now: Reference time; the current time when omitted

    Returns:
        ``missing`` without a successful upload, ``stale`` when the last
        success is more than the threshold ago, otherwise ``ok``
    """
    if stale_threshold_days is None:
        stale_threshold_days = Config.STALE_THRESHOLD_DAYS
    now = ensure_utc(now) if now is not None else utc_now()

    section_history = [e for e in _entries(history) if e.section == section]
    last_success = _latest([e for e in section_history if e.success])
    last_upload = _latest(section_history)

    if last_success is None:
        return DatasetHealthInfo(
            status=STATUS_MISSING,
            last_upload_iso=last_upload.uploaded_at_iso if last_upload else None,
        )

    days = days_between(last_success.uploaded_at, now)
    is_stale = days > stale_threshold_days

    return DatasetHealthInfo(
        status=STATUS_STALE if is_stale else STATUS_OK,
        last_success_iso=last_success.uploaded_at_iso,
        last_upload_iso=last_upload.uploaded_at_iso if last_upload else None,
        days_since_last_success=_round_half_up(days),
        is_stale=is_stale,
        has_data=True,
    )


def get_dataset_health_summary(history: Iterable[HistoryLike],
                               stale_threshold_days: float = None,
                               now: Optional[datetime] = None) -> Dict[str, DatasetHealthInfo]:
    """Health of every tracked section, keyed by section."""
    entries = _entries(history)
    now = ensure_utc(now) if now is not None else utc_now()
    return {
        section: get_dataset_health(section, entries, stale_threshold_days, now)
        for section in Sections.ALL
    }


def get_dataset_status_message(section: str, health: DatasetHealthInfo) -> str:
    """Human-readable status line for a section."""
    name = SECTION_NAMES.get(section, f"{section.capitalize()} dataset")

    if health.status == STATUS_MISSING:
        return f"{name} is missing. No successful uploads recorded."
    if health.status == STATUS_STALE:
        days = health.days_since_last_success
        plural = "" if days == 1 else "s"
        return f"{name} is stale. Last successful upload was {days} day{plural} ago."
    if health.status == STATUS_OK:
        return f"{name} is up to date."
    return f"{name} status unknown."


def get_datasets_with_issues(summary: Dict[str, DatasetHealthInfo]) -> List[DatasetIssue]:
    """Sections that are missing or stale, with their status message."""
    return [
        DatasetIssue(section=section, health=health,
                     message=get_dataset_status_message(section, health))
        for section, health in summary.items()
        if health.status != STATUS_OK
    ]
