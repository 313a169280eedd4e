# -*- coding: utf-8 -*-
"""
Tests for the relational complaint store (on SQLite).

Tests cover:
- Ownership scoping of list reads and id-addressed operations
- Duplicate handling
- Update, upsert and delete
- Row mapping
"""

from datetime import datetime, timezone

import pytest

from qos_et.services.exceptions import DuplicateIdException, NotFoundException, ValidationException


@pytest.fixture
def seeded(relational_repo, make_payload):
    """Two users, one of them with two tenants."""
    relational_repo.create(make_payload(id="a1", userId="alice", createdOn="2024-01-01T00:00:00Z"))
    relational_repo.create(make_payload(id="a2", userId="alice", tenantId="t1", createdOn="2024-02-01T00:00:00Z"))
    relational_repo.create(make_payload(id="a3", userId="alice", tenantId="t2", plant="P200",
                                        createdOn="2024-03-01T00:00:00Z"))
    relational_repo.create(make_payload(id="b1", userId="bob", createdOn="2024-04-01T00:00:00Z"))
    return relational_repo


class TestScoping:
    """Reads never cross ownership boundaries."""

    def test_unscoped_list_reads_are_empty(self, seeded):
        """Test unscoped list reads are empty."""
        assert seeded.find_all() == []
        assert seeded.find_all({"plant": "P100"}) == []
        assert seeded.count() == 0
        assert seeded.find_by_site("S01") == []
        assert seeded.find_by_notification_number("200001") == []
        assert seeded.find_by_date_range(datetime(2000, 1, 1), datetime(2100, 1, 1)) == []

    def test_list_reads_only_return_callers_records(self, seeded):
        """Test list reads only return callers records."""
        assert [c.id for c in seeded.find_all({"user_id": "alice"})] == ["a3", "a2", "a1"]
        assert [c.id for c in seeded.find_all({"userId": "bob"})] == ["b1"]
        assert seeded.count({"user_id": "alice"}) == 3

    def test_tenant_filter_applies_when_given(self, seeded):
        """Test tenant filter applies when given."""
        assert [c.id for c in seeded.find_all({"user_id": "alice", "tenant_id": "t1"})] == ["a2"]
        assert seeded.count({"user_id": "alice", "tenantId": "t2"}) == 1

    def test_attribute_filters(self, seeded):
        """Test attribute filters."""
        assert [c.id for c in seeded.find_all({"user_id": "alice", "plant": "P200"})] == ["a3"]
        assert seeded.count({"user_id": "alice", "notification_type": "Q1"}) == 3
        assert seeded.count({"user_id": "alice", "category": "PPAP"}) == 0

    def test_find_by_id_needs_exact_identity(self, seeded):
        """Test find by id needs exact identity."""
        assert seeded.find_by_id("a1", "alice") is not None
        assert seeded.find_by_id("a1") is None
        assert seeded.find_by_id("a1", "bob") is None
        assert seeded.find_by_id("a2", "alice") is None
        assert seeded.find_by_id("a2", "alice", "t1").tenant_id == "t1"

    def test_same_id_in_different_scopes(self, relational_repo, make_payload):
        """Test same id in different scopes."""
        relational_repo.create(make_payload(id="shared", userId="alice", plant="PA"))
        relational_repo.create(make_payload(id="shared", userId="bob", plant="PB"))

        assert relational_repo.find_by_id("shared", "alice").plant == "PA"
        assert relational_repo.find_by_id("shared", "bob").plant == "PB"

    def test_date_range_site_and_number_are_scoped(self, seeded):
        """Test date range site and number are scoped."""
        found = seeded.find_by_date_range(
            datetime(2024, 1, 1, tzinfo=timezone.utc),
            datetime(2024, 2, 1, tzinfo=timezone.utc),
            user_id="alice",
        )
        assert [c.id for c in found] == ["a2", "a1"]
        assert [c.id for c in seeded.find_by_site("S01", "bob")] == ["b1"]
        assert {c.id for c in seeded.find_by_notification_number("200001", user_id="alice")} == {"a1", "a2", "a3"}
        assert [c.id for c in seeded.find_by_notification_number("200001", "P200", "alice")] == ["a3"]


class TestWrites:
    """Create, update, upsert and delete."""

    def test_create_requires_user(self, relational_repo, make_payload):
        """Test create requires user."""
        with pytest.raises(ValidationException) as exc_info:
            relational_repo.create(make_payload())

        assert exc_info.value.fields == ["user_id"]

    def test_create_duplicate_in_scope(self, relational_repo, make_payload):
        """Test create duplicate in scope."""
        relational_repo.create(make_payload(userId="alice"))

        with pytest.raises(DuplicateIdException):
            relational_repo.create(make_payload(userId="alice"))

    def test_create_many_skips_duplicates(self, relational_repo, make_payload):
        """Test create many skips duplicates."""
        relational_repo.create(make_payload(id="a", userId="alice"))

        created = relational_repo.create_many([
            make_payload(id="a", userId="alice"),
            make_payload(id="b", userId="alice"),
            make_payload(id="b", userId="alice"),
            make_payload(id="a", userId="bob"),
        ])

        assert created == 2
        assert relational_repo.count({"user_id": "alice"}) == 2
        assert relational_repo.count({"user_id": "bob"}) == 1

    def test_update_in_scope(self, seeded):
        """Test update in scope."""
        updated = seeded.update("a2", {"defectiveParts": 9, "plant": "P900"}, "alice", "t1")

        assert updated.plant == "P900"
        stored = seeded.find_by_id("a2", "alice", "t1")
        assert stored.defective_parts == 9.0
        assert stored.plant == "P900"
        assert stored.notification_number == "200001"
        assert stored.updated_at >= stored.created_at

    def test_update_outside_scope_is_not_found(self, seeded):
        """Test update outside scope is not found."""
        with pytest.raises(NotFoundException):
            seeded.update("a1", {"plant": "X"}, "bob")
        with pytest.raises(NotFoundException):
            seeded.update("a1", {"plant": "X"})

        assert seeded.find_by_id("a1", "alice").plant == "P100"

    def test_upsert_creates_then_replaces(self, relational_repo, make_payload):
        """Test upsert creates then replaces."""
        first = relational_repo.upsert("u1", make_payload(userId="alice"))
        second = relational_repo.upsert("u1", make_payload(userId="alice", plant="P300"))

        assert second.plant == "P300"
        assert second.created_at == first.created_at
        assert relational_repo.count({"user_id": "alice"}) == 1

    def test_upsert_many(self, relational_repo, make_payload):
        """Test upsert many."""
        relational_repo.create(make_payload(id="a", userId="alice"))

        written = relational_repo.upsert_many([
            make_payload(id="a", userId="alice", plant="P2"),
            make_payload(id="b", userId="alice"),
        ])

        assert written == 2
        assert relational_repo.find_by_id("a", "alice").plant == "P2"

    def test_delete(self, seeded):
        """Test delete."""
        seeded.delete("a1", "alice")

        assert seeded.find_by_id("a1", "alice") is None
        assert seeded.count({"user_id": "alice"}) == 2

    def test_delete_outside_scope(self, seeded):
        """Test delete outside scope."""
        with pytest.raises(NotFoundException):
            seeded.delete("a1", "bob")
        with pytest.raises(NotFoundException):
            seeded.delete("a1")
        with pytest.raises(NotFoundException):
            seeded.delete("missing", "alice")

        assert seeded.find_by_id("a1", "alice") is not None


class TestRowMapping:
    """Two-way mapping between rows and Complaint."""

    def test_round_trip(self, relational_repo, make_payload):
        """Test round trip."""
        conversion = {"originalValue": 12.2, "originalUnit": "M", "convertedValue": 2.0,
                      "wasConverted": True, "lengthPerPiece": 6.1}
        relational_repo.create(make_payload(userId="alice", tenantId="t1", unitOfMeasure="M",
                                            materialNumber="MAT-1", conversionJson=conversion))

        stored = relational_repo.find_by_id("C-1", "alice", "t1")

        assert stored.user_id == "alice"
        assert stored.tenant_id == "t1"
        assert stored.material_number == "MAT-1"
        assert stored.conversion.length_per_piece == 6.1
        assert stored.created_on == datetime(2024, 3, 1, 10, 0, tzinfo=timezone.utc)

    def test_tenantless_record_maps_to_none(self, relational_repo, make_payload):
        """Test tenantless record maps to none."""
        relational_repo.create(make_payload(userId="alice"))
        assert relational_repo.find_by_id("C-1", "alice").tenant_id is None

    def test_malformed_conversion_column(self, relational_repo, sqlite_db, make_payload):
        """Test malformed conversion column."""
        relational_repo.create(make_payload(userId="alice"))
        sqlite_db.execute_write("UPDATE complaints SET conversion_json = ? WHERE id = ?", ("{oops", "C-1"))

        with pytest.raises(ValidationException):
            relational_repo.find_by_id("C-1", "alice")
