# -*- coding: utf-8 -*-
"""
Tests for caller identity.
"""

import dataclasses

import pytest

from qos_et.app.config import Config
from qos_et.services.request_context import RequestContext


def test_from_headers_is_case_insensitive():
    """Test from headers is case insensitive."""
    ctx = RequestContext.from_headers({"X-Demo-User": "alice", "X-Tenant-Id": "t1"})

    assert ctx.user_id == "alice"
    assert ctx.tenant_id == "t1"
    assert ctx.scope() == {"user_id": "alice", "tenant_id": "t1"}


def test_missing_headers_fall_back_to_default_user():
    """Test missing headers fall back to default user."""
    ctx = RequestContext.from_headers(None)

    assert ctx.user_id == Config.DEFAULT_USER_ID
    assert ctx.tenant_id is None
    assert ctx.scope() == {"user_id": Config.DEFAULT_USER_ID}


def test_blank_headers_are_treated_as_absent():
    """Test blank headers are treated as absent."""
    ctx = RequestContext.from_headers({"x-demo-user": "  ", "x-tenant-id": ""})

    assert ctx.user_id == Config.DEFAULT_USER_ID
    assert ctx.tenant_id is None


def test_context_is_immutable():
    """Test context is immutable."""
    ctx = RequestContext(user_id="alice")
    with pytest.raises(dataclasses.FrozenInstanceError):
        ctx.user_id = "bob"
