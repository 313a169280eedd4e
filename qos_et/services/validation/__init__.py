# -*- coding: utf-8 -*-
"""Validation services package."""

from .validation_strategy import (
    CompositeValidator,
    ConversionRecordValidator,
    DateFieldValidator,
    EnumFieldValidator,
    NonNegativeNumberValidator,
    RequiredFieldsValidator,
    ValidationStrategy,
)
from .validation_factory import ValidationFactory, build_complaint_validator

__all__ = [
    'ValidationStrategy',
    'RequiredFieldsValidator',
    'EnumFieldValidator',
    'NonNegativeNumberValidator',
    'DateFieldValidator',
    'ConversionRecordValidator',
    'CompositeValidator',
    'ValidationFactory',
    'build_complaint_validator',
]
