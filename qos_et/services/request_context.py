# -*- coding: utf-8 -*-
"""
Caller identity for a request.

The core never authenticates. The surrounding system passes a user id and an
optional tenant tag, which scope every read and write on the relational store.
"""

from dataclasses import dataclass
from typing import Mapping, Optional

from qos_et.app.config import Config

USER_HEADER = "x-demo-user"
TENANT_HEADER = "x-tenant-id"


@dataclass(frozen=True)
class RequestContext:
    """Identity and tenant of the caller."""
    user_id: str = Config.DEFAULT_USER_ID
    tenant_id: Optional[str] = None

    @classmethod
    def from_headers(cls, headers: Optional[Mapping[str, str]]) -> "RequestContext":
        """Read identity from request headers (case-insensitive names)."""
        lowered = {str(k).lower(): v for k, v in (headers or {}).items()}
        user_id = (lowered.get(USER_HEADER) or "").strip() or Config.DEFAULT_USER_ID
        tenant_id = (lowered.get(TENANT_HEADER) or "").strip() or None
        return cls(user_id=user_id, tenant_id=tenant_id)

    def scope(self) -> dict:
        """Filter dict for list reads."""
        scope = {"user_id": self.user_id}
        if self.tenant_id:
            scope["tenant_id"] = self.tenant_id
        return scope
