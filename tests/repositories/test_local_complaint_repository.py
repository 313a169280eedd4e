# -*- coding: utf-8 -*-
"""
Tests for the embedded complaint store.
"""

from datetime import datetime, timezone

import pytest

from qos_et.models.complaint import DataSource, NotificationType
from qos_et.repositories.local_complaint_repository import LocalComplaintRepository
from qos_et.services.exceptions import (
    DuplicateIdException,
    NotFoundException,
    UnsupportedOperationException,
    ValidationException,
)


class TestCreateAndRead:
    """Create, find and count."""

    def test_create_then_find_by_id(self, local_repo, make_payload):
        """Test create then find by id."""
        created = local_repo.create(make_payload())
        found = local_repo.find_by_id("C-1")

        assert found is not None
        assert found.id == created.id
        assert found.notification_type == NotificationType.Q1
        assert found.source == DataSource.SAP_S4
        assert found.defective_parts == 5.0
        assert found.created_on == datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)
        assert found.site_name == "Site One"

    def test_find_missing_returns_none(self, local_repo):
        """Test find missing returns none."""
        assert local_repo.find_by_id("nope") is None

    def test_create_duplicate_raises(self, local_repo, make_payload):
        """Test create duplicate raises."""
        local_repo.create(make_payload())

        with pytest.raises(DuplicateIdException):
            local_repo.create(make_payload(plant="P200"))

        assert local_repo.find_by_id("C-1").plant == "P100"

    def test_invalid_payload_is_not_stored(self, local_repo, make_payload):
        """Test invalid payload is not stored."""
        with pytest.raises(ValidationException):
            local_repo.create(make_payload(defectiveParts=-3))

        assert local_repo.count_documents() == 0

    def test_scope_is_ignored(self, local_repo, make_payload):
        """Test scope is ignored."""
        local_repo.create(make_payload(userId="alice"))

        assert local_repo.find_by_id("C-1", user_id="bob") is not None
        assert len(local_repo.find_all({"user_id": "bob", "tenant_id": "t9"})) == 1
        assert local_repo.count({"userId": "bob"}) == 1

    def test_find_all_newest_first_with_filters(self, local_repo, make_payload):
        """Test find all newest first with filters."""
        local_repo.create(make_payload(id="old", createdOn="2024-01-01T00:00:00Z"))
        local_repo.create(make_payload(id="new", createdOn="2024-06-01T00:00:00Z"))
        local_repo.create(make_payload(id="other-plant", plant="P200", createdOn="2024-03-01T00:00:00Z"))

        assert [c.id for c in local_repo.find_all()] == ["new", "other-plant", "old"]
        assert [c.id for c in local_repo.find_all({"plant": "P100"})] == ["new", "old"]
        assert local_repo.count({"plant": "P200"}) == 1
        assert local_repo.count() == 3

    def test_find_by_date_range_inclusive(self, local_repo, make_payload):
        """Test find by date range inclusive."""
        local_repo.create(make_payload(id="a", createdOn="2024-01-01T00:00:00Z"))
        local_repo.create(make_payload(id="b", createdOn="2024-02-01T00:00:00Z"))
        local_repo.create(make_payload(id="c", createdOn="2024-03-01T00:00:00Z"))

        found = local_repo.find_by_date_range(
            datetime(2024, 1, 1, tzinfo=timezone.utc),
            datetime(2024, 2, 1, tzinfo=timezone.utc),
        )
        assert [c.id for c in found] == ["b", "a"]

    def test_find_by_site_and_notification_number(self, local_repo, make_payload):
        """Test find by site and notification number."""
        local_repo.create(make_payload(id="a", siteCode="S01", notificationNumber="N1"))
        local_repo.create(make_payload(id="b", siteCode="S02", notificationNumber="N1", plant="P2"))

        assert [c.id for c in local_repo.find_by_site("S02")] == ["b"]
        assert {c.id for c in local_repo.find_by_notification_number("N1")} == {"a", "b"}
        assert [c.id for c in local_repo.find_by_notification_number("N1", plant="P2")] == ["b"]


class TestBulkWrites:
    """create_many and upsert_many."""

    def test_create_many_skips_existing_and_repeated_ids(self, local_repo, make_payload):
        """Test create many skips existing and repeated ids."""
        local_repo.create(make_payload(id="a"))

        created = local_repo.create_many([
            make_payload(id="a"),
            make_payload(id="b"),
            make_payload(id="b", plant="P999"),
            make_payload(id="c"),
        ])

        assert created == 2
        assert local_repo.count_documents() == 3
        assert local_repo.find_by_id("b").plant == "P100"

    def test_create_many_in_chunks(self, sqlite_db, make_payload):
        """Test create many in chunks."""
        repo = LocalComplaintRepository(sqlite_db, chunk_size=2)

        created = repo.create_many([make_payload(id=f"id-{i}") for i in range(5)])

        assert created == 5
        assert repo.count_documents() == 5

    def test_create_many_rejects_invalid_batch(self, local_repo, make_payload):
        """Test create many rejects invalid batch."""
        with pytest.raises(ValidationException):
            local_repo.create_many([make_payload(id="a"), make_payload(id="b", category="Nope")])

        assert local_repo.count_documents() == 0

    def test_upsert_many(self, local_repo, make_payload):
        """Test upsert many."""
        local_repo.create(make_payload(id="a"))

        written = local_repo.upsert_many([make_payload(id="a", plant="P2"), make_payload(id="b")])

        assert written == 2
        assert local_repo.find_by_id("a").plant == "P2"
        assert local_repo.find_by_id("b") is not None


class TestUpdateUpsertDelete:
    """Mutations of single records."""

    def test_update_replaces_only_provided_fields(self, local_repo, make_payload):
        """Test update replaces only provided fields."""
        created = local_repo.create(make_payload())

        updated = local_repo.update("C-1", {"defectiveParts": 12, "siteName": None})

        assert updated.defective_parts == 12.0
        assert updated.site_name is None
        assert updated.plant == "P100"
        assert updated.updated_at >= created.updated_at

        stored = local_repo.find_by_id("C-1")
        assert stored.defective_parts == 12.0
        assert stored.notification_number == "200001"

    def test_update_missing_raises(self, local_repo):
        """Test update missing raises."""
        with pytest.raises(NotFoundException):
            local_repo.update("ghost", {"plant": "P1"})

    def test_update_invalid_change(self, local_repo, make_payload):
        """Test update invalid change."""
        local_repo.create(make_payload())

        with pytest.raises(ValidationException):
            local_repo.update("C-1", {"defectiveParts": -1})

    def test_upsert_creates_then_replaces(self, local_repo, make_payload):
        """Test upsert creates then replaces."""
        first = local_repo.upsert("C-1", make_payload())
        second = local_repo.upsert("C-1", make_payload(plant="P300"))

        assert second.plant == "P300"
        assert second.created_at == first.created_at
        assert local_repo.count_documents() == 1
        assert local_repo.find_by_id("C-1").created_at == first.created_at

    def test_upsert_uses_argument_id(self, local_repo, make_payload):
        """Test upsert uses argument id."""
        local_repo.upsert("X-7", make_payload(id="ignored"))

        assert local_repo.find_by_id("X-7") is not None
        assert local_repo.find_by_id("ignored") is None

    def test_delete_is_unsupported(self, local_repo, make_payload):
        """Test delete is unsupported."""
        local_repo.create(make_payload())

        with pytest.raises(UnsupportedOperationException) as exc_info:
            local_repo.delete("C-1")

        assert exc_info.value.backend == "local"
        assert local_repo.find_by_id("C-1") is not None

    def test_clear(self, local_repo, make_payload):
        """Test clear."""
        local_repo.create_many([make_payload(id="a"), make_payload(id="b")])

        local_repo.clear()

        assert local_repo.count_documents() == 0
        assert local_repo.find_all() == []


class TestStoredDocuments:
    """Decoding stored documents."""

    def test_conversion_survives_storage(self, local_repo, make_payload):
        """Test conversion survives storage."""
        conversion = {"originalValue": 1200, "originalUnit": "ML", "convertedValue": 2.0,
                      "wasConverted": True, "bottleSize": 600}
        local_repo.create(make_payload(unitOfMeasure="ML", conversion=conversion))

        stored = local_repo.find_by_id("C-1")
        assert stored.conversion.original_value == 1200
        assert stored.conversion.bottle_size == 600
        assert stored.conversion.was_converted is True

    def test_corrupt_document_raises_validation_error(self, local_repo, sqlite_db):
        """Test corrupt document raises validation error."""
        sqlite_db.execute_write(
            "INSERT INTO complaint_documents (id, payload, created_on) VALUES (?, ?, ?)",
            ("bad", "{broken", "2024-01-01")
        )

        with pytest.raises(ValidationException):
            local_repo.find_by_id("bad")
