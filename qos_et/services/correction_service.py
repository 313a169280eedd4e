# -*- coding: utf-8 -*-
"""
Correction merge.

Records corrected during upload review live in upload summaries. When raw
records and corrected records are combined, the corrected version of a record
always wins and every id appears exactly once.
"""

from typing import Any, Iterable, List, Optional, Union

from qos_et.models.complaint import normalize_complaint_payload
from qos_et.models.upload_history import ChangeHistoryEntry, RecordTypes, UploadSummary
from qos_et.repositories.complaint_repository import ComplaintRepository
from qos_et.services.request_context import RequestContext
from qos_et.utils.logger import get_logger

logger = get_logger(__name__)

SummaryLike = Union[UploadSummary, dict]


def record_id_of(record: Any) -> Optional[str]:
    """Id of a model object or a plain dict."""
    if isinstance(record, dict):
        return record.get("id")
    return getattr(record, "id", None)


def merge_with_corrected_data(raw: Iterable[Any], corrected: Iterable[Any]) -> List[Any]:
    """
    Merge corrected records over raw ones.

    Every corrected record comes first (first occurrence per id), followed by
    the raw records whose id has not been emitted yet, in their original order.
    Applying the merge again with the same corrections changes nothing.
    """
    merged = []
    emitted = set()

    for record in list(corrected) + list(raw):
        record_id = record_id_of(record)
        if record_id in emitted:
            continue
        merged.append(record)
        emitted.add(record_id)

    return merged


def _as_summary(summary: SummaryLike) -> UploadSummary:
    if isinstance(summary, UploadSummary):
        return summary
    changes = summary.get("change_history", summary.get("changeHistory")) or []
    return UploadSummary(
        processed_data=dict(summary.get("processed_data", summary.get("processedData")) or {}),
        change_history=[c if isinstance(c, ChangeHistoryEntry) else ChangeHistoryEntry.from_dict(c)
                        for c in changes],
    )


def get_corrected_records(summaries: Iterable[SummaryLike], record_type: str,
                          data_key: str) -> List[Any]:
    """
    Records from upload summaries that were changed during review.

    A record counts as corrected when its own summary's change history has an
    entry with the same record id and record type. The first summary that
    corrected an id wins.
    """
    corrected = []
    seen = set()

    for summary in summaries:
        summary = _as_summary(summary)
        for record in summary.records(data_key):
            record_id = record_id_of(record)
            if record_id in seen:
                continue
            if summary.was_corrected(record_id, record_type):
                corrected.append(record)
                seen.add(record_id)

    return corrected


def get_corrected_complaints(summaries: Iterable[SummaryLike]) -> List[Any]:
    return get_corrected_records(summaries, RecordTypes.COMPLAINT, "complaints")


def get_corrected_deliveries(summaries: Iterable[SummaryLike]) -> List[Any]:
    return get_corrected_records(summaries, RecordTypes.DELIVERY, "deliveries")


def apply_complaint_corrections(complaints: Iterable[Any],
                                summaries: Iterable[SummaryLike]) -> List[Any]:
    """Complaints with their reviewed versions swapped in."""
    return merge_with_corrected_data(complaints, get_corrected_complaints(summaries))


def apply_delivery_corrections(deliveries: Iterable[Any],
                               summaries: Iterable[SummaryLike]) -> List[Any]:
    """Deliveries with their reviewed versions swapped in."""
    return merge_with_corrected_data(deliveries, get_corrected_deliveries(summaries))


def persist_corrections(repository: ComplaintRepository,
                        summaries: Iterable[SummaryLike],
                        context: RequestContext) -> int:
    """
    Write corrected complaints into the repository for the caller.

    Each corrected complaint replaces the stored record with the same id in
    the caller's scope, or is created when absent.

    Returns:
        Number of complaints written
    """
    corrected = get_corrected_complaints(summaries)
    if not corrected:
        return 0

    payloads = []
    for record in corrected:
        payload = record.to_dict() if hasattr(record, "to_dict") else dict(record)
        payload = normalize_complaint_payload(payload)
        payload["user_id"] = context.user_id
        payload["tenant_id"] = context.tenant_id
        payloads.append(payload)

    written = repository.upsert_many(payloads)
    logger.info(f"Persisted {written} corrected complaints for user {context.user_id}")
    return written
