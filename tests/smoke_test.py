# -*- coding: utf-8 -*-
"""
Smoke tests for QOS-ET.
These tests verify the models and helpers without a database.
"""

import os
import unittest
from datetime import date, datetime, timedelta, timezone

os.environ.setdefault("QOS_LOG_TO_FILE", "false")


class TestModels(unittest.TestCase):
    """Test model classes."""

    def test_complaint_from_camel_case(self):
        """Test Complaint creation from an external payload."""
        from qos_et.models.complaint import Complaint, DataSource, NotificationCategory, NotificationType

        complaint = Complaint.from_dict({
            "id": "C-1",
            "notificationNumber": "200001",
            "notificationType": "Q3",
            "category": "InternalComplaint",
            "plant": "P100",
            "siteCode": "S01",
            "createdOn": "2024-03-01T10:00:00Z",
            "defectiveParts": "7",
        })

        self.assertEqual(complaint.notification_type, NotificationType.Q3)
        self.assertEqual(complaint.category, NotificationCategory.INTERNAL_COMPLAINT)
        self.assertEqual(complaint.source, DataSource.IMPORT)
        self.assertEqual(complaint.defective_parts, 7.0)
        self.assertEqual(complaint.created_on.tzinfo, timezone.utc)

    def test_complaint_to_dict(self):
        """Test Complaint serialization."""
        from qos_et.models.complaint import Complaint

        complaint = Complaint.from_dict({
            "id": "C-2", "notification_number": "1", "notification_type": "Other",
            "category": "PPAP", "plant": "P", "site_code": "S",
            "created_on": "2024-01-01", "defective_parts": 0,
            "conversion": {"originalValue": 5, "originalUnit": "ML", "convertedValue": 5},
        })
        data = complaint.to_dict()

        self.assertEqual(data["notification_type"], "Other")
        self.assertEqual(data["created_on"], "2024-01-01T00:00:00+00:00")
        self.assertEqual(data["conversion"]["original_unit"], "ML")
        self.assertFalse(data["conversion"]["was_converted"])
        self.assertIn("updated_at", data)

    def test_merged_with_keeps_identity(self):
        """Test partial merge only touches provided fields."""
        from qos_et.models.complaint import Complaint

        original = Complaint.from_dict({
            "id": "C-3", "notification_number": "1", "notification_type": "Q1",
            "category": "CustomerComplaint", "plant": "P", "site_code": "S",
            "created_on": "2024-01-01", "defective_parts": 1,
            "user_id": "alice",
        })
        merged = original.merged_with({"plant": "P2", "userId": "mallory", "id": "other"})

        self.assertEqual(merged.plant, "P2")
        self.assertEqual(merged.id, "C-3")
        self.assertEqual(merged.user_id, "alice")
        self.assertEqual(original.plant, "P")

    def test_upload_history_entry(self):
        """Test UploadHistoryEntry parsing."""
        from qos_et.models.upload_history import UploadHistoryEntry

        entry = UploadHistoryEntry.from_dict({
            "section": "deliveries", "uploadedAtIso": "2024-05-01T08:00:00Z",
            "success": True, "files": [{"name": "a.xlsx", "size": 10}],
        })

        self.assertEqual(entry.uploaded_at, datetime(2024, 5, 1, 8, tzinfo=timezone.utc))
        self.assertEqual(entry.files[0].name, "a.xlsx")
        self.assertIsNotNone(entry.id)

    def test_change_history_refers_to(self):
        """Test ChangeHistoryEntry matching."""
        from qos_et.models.upload_history import ChangeHistoryEntry

        change = ChangeHistoryEntry.from_dict({"recordId": "C-1", "recordType": "complaint"})

        self.assertTrue(change.refers_to("C-1", "complaint"))
        self.assertFalse(change.refers_to("C-1", "delivery"))

    def test_change_history_defaults(self):
        """Test ChangeHistoryEntry creation with generated timestamp and id."""
        from qos_et.models.upload_history import ChangeHistoryEntry, ChangeTypes

        first = ChangeHistoryEntry(record_id="C-1", record_type="complaint")
        second = ChangeHistoryEntry(record_id="C-1", record_type="complaint")

        self.assertEqual(first.field, "all")
        self.assertEqual(first.change_type, ChangeTypes.MANUAL_EDIT)
        self.assertIsNotNone(datetime.fromisoformat(first.timestamp))
        self.assertNotEqual(first.id, second.id)

    def test_upload_history_entry_lenient_fields(self):
        """Test UploadHistoryEntry parsing of missing section and string flags."""
        from qos_et.models.upload_history import UploadHistoryEntry

        entry = UploadHistoryEntry.from_dict({"uploadedAtIso": "2024-05-01", "success": "false"})

        self.assertEqual(entry.section, "")
        self.assertFalse(entry.success)
        self.assertTrue(UploadHistoryEntry.from_dict({"section": "ppap", "success": "TRUE"}).success)


class TestDatetimeUtils(unittest.TestCase):
    """Test datetime helpers."""

    def test_from_isoformat(self):
        """Test from isoformat."""
        from qos_et.utils.datetime_utils import from_isoformat

        self.assertEqual(from_isoformat("2024-01-15T10:30:00Z"),
                         datetime(2024, 1, 15, 10, 30, tzinfo=timezone.utc))
        self.assertEqual(from_isoformat(date(2024, 1, 15)),
                         datetime(2024, 1, 15, tzinfo=timezone.utc))
        self.assertEqual(from_isoformat(datetime(2024, 1, 15, 12, tzinfo=timezone(timedelta(hours=2)))),
                         datetime(2024, 1, 15, 10, tzinfo=timezone.utc))
        self.assertIsNone(from_isoformat("not a date"))
        self.assertIsNone(from_isoformat(""))

    def test_sortable_isoformat(self):
        """Test sortable isoformat."""
        from qos_et.utils.datetime_utils import to_sortable_isoformat

        self.assertEqual(to_sortable_isoformat("2024-01-15T10:30:00Z"),
                         "2024-01-15T10:30:00.000000+00:00")
        self.assertLess(to_sortable_isoformat("2024-01-15T10:30:00Z"),
                        to_sortable_isoformat("2024-01-15T10:30:00.500000Z"))

    def test_days_between(self):
        """Test days between."""
        from qos_et.utils.datetime_utils import days_between

        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        self.assertEqual(days_between(start, start + timedelta(days=1, hours=12)), 1.5)


class TestConfig(unittest.TestCase):
    """Test configuration."""

    def test_sections(self):
        """Test sections."""
        from qos_et.app.config import Config, Sections

        self.assertEqual(len(Sections.ALL), 6)
        self.assertEqual(Config.EMBEDDED_WRITE_CHUNK, 2000)
        self.assertGreater(Config.STALE_THRESHOLD_DAYS, 0)


if __name__ == "__main__":
    unittest.main()
