# -*- coding: utf-8 -*-
"""
Validation Strategy Pattern - Abstract interface for record validation.

Each strategy checks one rule and reports field-level errors as
``{"field": ..., "message": ...}`` dictionaries. Strategies built with
``partial=True`` only look at fields that are present in the record, which is
how partial updates are validated with the same rules as full records.
"""

import json
from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional

from qos_et.utils.datetime_utils import from_isoformat

FieldError = Dict[str, str]


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


class ValidationStrategy(ABC):
    """
    Abstract base class for validation strategies.

    Each strategy implements specific validation rules for different record types.
    """

    def __init__(self, partial: bool = False):
        self.partial = partial

    @abstractmethod
    def validate(self, record: Dict[str, Any]) -> List[FieldError]:
        """
        Validate a record and return list of field errors.

        Args:
            record: Dictionary containing record data to validate

        Returns:
            List of ``{"field", "message"}`` dicts (empty list if valid)
        """
        pass

    def is_valid(self, record: Dict[str, Any]) -> bool:
        """Check if record passes this strategy."""
        return len(self.validate(record)) == 0

    def _skip(self, record: Dict[str, Any], field: str) -> bool:
        """Partial validation ignores absent fields."""
        return self.partial and field not in record


class RequiredFieldsValidator(ValidationStrategy):
    """
    Validates that specified fields exist and are non-empty strings.
    """

    def __init__(self, required_fields: List[str],
                 field_labels: Optional[Dict[str, str]] = None,
                 partial: bool = False):
        """
        Initialize validator with required fields.

        Args:
            required_fields: List of field names that must be present and non-empty
            field_labels: Optional mapping of field names to human-readable labels
            partial: Only check fields present in the record
        """
        super().__init__(partial)
        self.required_fields = list(required_fields)
        self.field_labels = field_labels or {}

    def validate(self, record: Dict[str, Any]) -> List[FieldError]:
        errors = []

        for field in self.required_fields:
            if self._skip(record, field):
                continue

            label = self.field_labels.get(field, field)

            if field not in record or record[field] is None:
                errors.append({"field": field, "message": f"{label} is required"})
                continue

            value = record[field]
            if not isinstance(value, str):
                errors.append({"field": field, "message": f"{label} must be a string"})
            elif not value.strip():
                errors.append({"field": field, "message": f"{label} cannot be empty"})

        return errors


class EnumFieldValidator(ValidationStrategy):
    """Validates that a field holds one of a fixed set of values."""

    def __init__(self, field: str, allowed: Iterable[str], partial: bool = False):
        super().__init__(partial)
        self.field = field
        self.allowed = [getattr(v, "value", v) for v in allowed]

    def validate(self, record: Dict[str, Any]) -> List[FieldError]:
        if self._skip(record, self.field):
            return []

        value = record.get(self.field)
        value = getattr(value, "value", value)
        if value not in self.allowed:
            return [{
                "field": self.field,
                "message": f"Invalid value {value!r}; expected one of: {', '.join(self.allowed)}",
            }]
        return []


class NonNegativeNumberValidator(ValidationStrategy):
    """Validates a numeric field that must be zero or greater."""

    def __init__(self, field: str, partial: bool = False):
        super().__init__(partial)
        self.field = field

    def validate(self, record: Dict[str, Any]) -> List[FieldError]:
        if self._skip(record, self.field):
            return []

        value = record.get(self.field)
        if not _is_number(value):
            return [{"field": self.field, "message": "Must be a number"}]
        if value != value:  # NaN
            return [{"field": self.field, "message": "Must be a number"}]
        if value < 0:
            return [{"field": self.field, "message": "Must be >= 0"}]
        return []


class DateFieldValidator(ValidationStrategy):
    """Validates that a field holds a parseable date or timestamp."""

    def __init__(self, field: str, partial: bool = False):
        super().__init__(partial)
        self.field = field

    def validate(self, record: Dict[str, Any]) -> List[FieldError]:
        if self._skip(record, self.field):
            return []

        if from_isoformat(record.get(self.field)) is None:
            return [{"field": self.field, "message": "Invalid or missing date"}]
        return []


class ConversionRecordValidator(ValidationStrategy):
    """
    Validates an optional unit-conversion record.

    Accepts a dict (camelCase or snake_case keys) or its JSON string form.
    Absent or null values are valid.
    """

    def __init__(self, field: str = "conversion", partial: bool = False):
        super().__init__(partial)
        self.field = field

    def validate(self, record: Dict[str, Any]) -> List[FieldError]:
        value = record.get(self.field)
        if value is None or value == "":
            return []

        if hasattr(value, "to_dict"):
            value = value.to_dict()

        if isinstance(value, str):
            try:
                value = json.loads(value)
            except ValueError:
                return [{"field": self.field, "message": "Conversion is not valid JSON"}]

        if not isinstance(value, dict):
            return [{"field": self.field, "message": "Conversion must be an object"}]

        errors = []
        original_value = value.get("original_value", value.get("originalValue"))
        original_unit = value.get("original_unit", value.get("originalUnit"))
        converted_value = value.get("converted_value", value.get("convertedValue"))
        was_converted = value.get("was_converted", value.get("wasConverted"))

        if not _is_number(original_value):
            errors.append({"field": f"{self.field}.original_value", "message": "Must be a number"})
        if not isinstance(original_unit, str):
            errors.append({"field": f"{self.field}.original_unit", "message": "Must be a string"})
        if not _is_number(converted_value):
            errors.append({"field": f"{self.field}.converted_value", "message": "Must be a number"})
        if not isinstance(was_converted, bool):
            errors.append({"field": f"{self.field}.was_converted", "message": "Must be true or false"})

        for name, alias in (("bottle_size", "bottleSize"),
                            ("length_per_piece", "lengthPerPiece"),
                            ("area_per_piece", "areaPerPiece")):
            extra = value.get(name, value.get(alias))
            if extra is not None and not _is_number(extra):
                errors.append({"field": f"{self.field}.{name}", "message": "Must be a number"})

        return errors


class CompositeValidator(ValidationStrategy):
    """Runs several strategies and concatenates their errors."""

    def __init__(self, strategies: List[ValidationStrategy]):
        super().__init__(partial=any(s.partial for s in strategies))
        self.strategies = list(strategies)

    def validate(self, record: Dict[str, Any]) -> List[FieldError]:
        errors = []
        for strategy in self.strategies:
            errors.extend(strategy.validate(record))
        return errors
