# -*- coding: utf-8 -*-
"""
QOS-ET Controllers
==================
Narrow contract used by the surrounding system (API routes, upload screens).
Controllers translate domain exceptions into OperationResult envelopes.
"""

from .base_controller import BaseController, ErrorCodes, OperationResult
from .complaint_controller import ComplaintController

__all__ = [
    "BaseController",
    "ErrorCodes",
    "OperationResult",
    "ComplaintController",
]
