# -*- coding: utf-8 -*-
"""
QOS-ET Utility Module
"""

from .logger import get_logger, setup_logger
from .datetime_utils import from_isoformat, to_isoformat, utc_now

__all__ = [
    "get_logger",
    "setup_logger",
    "from_isoformat",
    "to_isoformat",
    "utc_now",
]
