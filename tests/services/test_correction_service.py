# -*- coding: utf-8 -*-
"""
Tests for merging reviewed corrections over raw records.
"""

from qos_et.models.upload_history import ChangeHistoryEntry, RecordTypes, UploadSummary
from qos_et.services.correction_service import (
    apply_complaint_corrections,
    apply_delivery_corrections,
    get_corrected_complaints,
    get_corrected_records,
    merge_with_corrected_data,
    persist_corrections,
)


def _change(record_id, record_type=RecordTypes.COMPLAINT):
    return ChangeHistoryEntry(record_id=record_id, record_type=record_type, field="plant")


class TestMerge:

    def test_corrected_first_then_remaining_raw(self):
        """Test corrected first then remaining raw."""
        raw = [{"id": "a", "v": 1}, {"id": "b", "v": 1}, {"id": "c", "v": 1}]
        corrected = [{"id": "b", "v": 2}]

        merged = merge_with_corrected_data(raw, corrected)

        assert merged == [{"id": "b", "v": 2}, {"id": "a", "v": 1}, {"id": "c", "v": 1}]

    def test_merge_is_idempotent(self):
        """Test merge is idempotent."""
        raw = [{"id": "a", "v": 1}, {"id": "b", "v": 1}]
        corrected = [{"id": "a", "v": 9}]

        once = merge_with_corrected_data(raw, corrected)
        twice = merge_with_corrected_data(once, corrected)

        assert twice == once

    def test_each_id_appears_once(self):
        """Test each id appears once."""
        raw = [{"id": "a"}, {"id": "a"}, {"id": "b"}]
        corrected = [{"id": "b", "fixed": True}, {"id": "b", "fixed": False}]

        merged = merge_with_corrected_data(raw, corrected)

        assert [r["id"] for r in merged] == ["b", "a"]
        assert merged[0]["fixed"] is True

    def test_empty_inputs(self):
        """Test empty inputs."""
        assert merge_with_corrected_data([], []) == []
        assert merge_with_corrected_data([{"id": "a"}], []) == [{"id": "a"}]


class TestCorrectedRecords:

    def test_only_records_with_matching_change(self):
        """Test only records with matching change."""
        summary = UploadSummary(
            processed_data={"complaints": [{"id": "a"}, {"id": "b"}, {"id": "c"}]},
            change_history=[_change("a"), _change("c", RecordTypes.DELIVERY)],
        )

        assert get_corrected_complaints([summary]) == [{"id": "a"}]

    def test_first_summary_wins(self):
        """Test first summary wins."""
        first = UploadSummary(processed_data={"complaints": [{"id": "a", "v": 1}]},
                              change_history=[_change("a")])
        second = UploadSummary(processed_data={"complaints": [{"id": "a", "v": 2}]},
                               change_history=[_change("a")])

        assert get_corrected_complaints([first, second]) == [{"id": "a", "v": 1}]

    def test_change_in_other_summary_does_not_count(self):
        """Test change in other summary does not count."""
        data_only = UploadSummary(processed_data={"complaints": [{"id": "a"}]})
        changes_only = UploadSummary(change_history=[_change("a")])

        assert get_corrected_complaints([data_only, changes_only]) == []

    def test_camel_case_dict_summaries(self):
        """Test camel case dict summaries."""
        summary = {
            "processedData": {"deliveries": [{"id": "d1", "qty": 3}]},
            "changeHistory": [{"recordId": "d1", "recordType": "delivery", "field": "qty"}],
        }

        assert get_corrected_records([summary], RecordTypes.DELIVERY, "deliveries") == [{"id": "d1", "qty": 3}]


class TestApplyCorrections:

    def test_complaints(self):
        """Test complaints."""
        summary = UploadSummary(processed_data={"complaints": [{"id": "b", "plant": "FIXED"}]},
                                change_history=[_change("b")])
        raw = [{"id": "a", "plant": "P1"}, {"id": "b", "plant": "P2"}]

        result = apply_complaint_corrections(raw, [summary])

        assert result == [{"id": "b", "plant": "FIXED"}, {"id": "a", "plant": "P1"}]

    def test_deliveries(self):
        """Test deliveries."""
        summary = UploadSummary(processed_data={"deliveries": [{"id": "d2", "qty": 0}]},
                                change_history=[_change("d2", RecordTypes.DELIVERY)])
        raw = [{"id": "d1", "qty": 5}, {"id": "d2", "qty": 7}]

        result = apply_delivery_corrections(raw, [summary])

        assert [d["qty"] for d in result] == [0, 5]

    def test_no_summaries(self):
        """Test no summaries."""
        raw = [{"id": "a"}]
        assert apply_complaint_corrections(raw, []) == raw


class TestPersistCorrections:

    def test_writes_into_callers_scope(self, relational_repo, make_payload, context):
        """Test writes into callers scope."""
        relational_repo.create(make_payload(id="a", userId="alice", plant="P1"))
        summary = UploadSummary(
            processed_data={"complaints": [make_payload(id="a", plant="P9"), make_payload(id="b")]},
            change_history=[_change("a")],
        )

        written = persist_corrections(relational_repo, [summary], context)

        assert written == 1
        assert relational_repo.find_by_id("a", "alice").plant == "P9"
        assert relational_repo.find_by_id("b", "alice") is None

    def test_nothing_to_persist(self, relational_repo, context):
        """Test nothing to persist."""
        assert persist_corrections(relational_repo, [UploadSummary()], context) == 0
