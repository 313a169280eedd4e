# -*- coding: utf-8 -*-
"""
QOS-ET Service Layer
"""

# Lazy imports to avoid circular dependencies
__all__ = [
    "ValidationService",
    "ImportService",
    "RequestContext",
]


def __getattr__(name):
    """Lazy import to avoid circular dependencies."""
    if name == "ValidationService":
        from .validation_service import ValidationService
        return ValidationService
    elif name == "ImportService":
        from .import_service import ImportService
        return ImportService
    elif name == "RequestContext":
        from .request_context import RequestContext
        return RequestContext
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
