# -*- coding: utf-8 -*-
"""
QOS-ET Repository Layer
"""

# Lazy imports to avoid circular dependencies
__all__ = [
    "DatabaseFactory",
    "ComplaintRepository",
    "LocalComplaintRepository",
    "RelationalComplaintRepository",
    "UploadHistoryRepository",
    "get_complaint_repository",
]


def __getattr__(name):
    """Lazy import to avoid circular dependencies."""
    if name == "DatabaseFactory":
        from .db_adapter import DatabaseFactory
        return DatabaseFactory
    elif name == "ComplaintRepository":
        from .complaint_repository import ComplaintRepository
        return ComplaintRepository
    elif name == "LocalComplaintRepository":
        from .local_complaint_repository import LocalComplaintRepository
        return LocalComplaintRepository
    elif name == "RelationalComplaintRepository":
        from .relational_complaint_repository import RelationalComplaintRepository
        return RelationalComplaintRepository
    elif name == "UploadHistoryRepository":
        from .upload_history_repository import UploadHistoryRepository
        return UploadHistoryRepository
    elif name == "get_complaint_repository":
        from .repo_factory import get_complaint_repository
        return get_complaint_repository
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
