# -*- coding: utf-8 -*-
"""
QOS-ET Data Consistency Core

Storage abstraction, validation, import reconciliation, correction merge and
dataset freshness for quality-complaint records.
"""

__version__ = "1.0.0"
