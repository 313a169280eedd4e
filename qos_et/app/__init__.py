# -*- coding: utf-8 -*-
"""
QOS-ET Application Core Module
"""

from .config import Config, Sections

__all__ = ["Config", "Sections"]
