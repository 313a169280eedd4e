# -*- coding: utf-8 -*-
"""
Shared fixtures.

Every test gets its own SQLite file under tmp_path; no PostgreSQL server is
needed. File logging is switched off before any qos_et module is imported.
"""

import os

os.environ["QOS_LOG_TO_FILE"] = "false"
os.environ["DATA_BACKEND"] = "local"

import pytest

from qos_et.repositories.db_adapter import SQLiteAdapter
from qos_et.repositories.local_complaint_repository import LocalComplaintRepository
from qos_et.repositories.relational_complaint_repository import RelationalComplaintRepository
from qos_et.services.request_context import RequestContext


BASE_PAYLOAD = {
    "id": "C-1",
    "notificationNumber": "200001",
    "notificationType": "Q1",
    "category": "CustomerComplaint",
    "plant": "P100",
    "siteCode": "S01",
    "siteName": "Site One",
    "createdOn": "2024-03-01T10:00:00Z",
    "defectiveParts": 5,
    "source": "SAP_S4",
}


@pytest.fixture
def make_payload():
    """Build a valid complaint payload; keyword overrides replace fields."""
    def _make(**overrides):
        payload = dict(BASE_PAYLOAD)
        payload.update(overrides)
        return payload
    return _make


@pytest.fixture
def sqlite_db(tmp_path):
    """Initialised throw-away SQLite database."""
    db = SQLiteAdapter(tmp_path / "test.db")
    db.connect()
    db.initialize()
    yield db
    db.close()


@pytest.fixture
def local_repo(sqlite_db):
    return LocalComplaintRepository(sqlite_db)


@pytest.fixture
def relational_repo(sqlite_db):
    return RelationalComplaintRepository(sqlite_db)


@pytest.fixture
def context():
    return RequestContext(user_id="alice", tenant_id=None)


@pytest.fixture
def other_context():
    return RequestContext(user_id="bob", tenant_id=None)
