# -*- coding: utf-8 -*-
"""
Validation Factory - Creates appropriate validators for different record types.

Provides a central point for creating and managing validation strategies.
"""

from typing import Dict, List, Optional

from qos_et.models.complaint import DataSource, NotificationCategory, NotificationType
from .validation_strategy import (
    CompositeValidator,
    ConversionRecordValidator,
    DateFieldValidator,
    EnumFieldValidator,
    FieldError,
    NonNegativeNumberValidator,
    RequiredFieldsValidator,
    ValidationStrategy,
)

COMPLAINT_FIELD_LABELS = {
    "id": "ID",
    "notification_number": "Notification number",
    "plant": "Plant",
    "site_code": "Site code",
}


def build_complaint_validator(partial: bool = False) -> ValidationStrategy:
    """Rules for a complaint payload keyed by model field names."""
    required = ["notification_number", "plant", "site_code"]
    if not partial:
        required.insert(0, "id")

    return CompositeValidator([
        RequiredFieldsValidator(required, COMPLAINT_FIELD_LABELS, partial=partial),
        EnumFieldValidator("notification_type", NotificationType, partial=partial),
        EnumFieldValidator("category", NotificationCategory, partial=partial),
        EnumFieldValidator("source", DataSource, partial=partial),
        DateFieldValidator("created_on", partial=partial),
        NonNegativeNumberValidator("defective_parts", partial=partial),
        ConversionRecordValidator("conversion", partial=partial),
    ])


class ValidationFactory:
    """
    Factory for creating validation strategies based on record type.

    This class acts as a registry and factory for different validation strategies,
    allowing easy creation of validators for different record types.
    """

    def __init__(self):
        """Initialize the validation factory."""
        self._validators: Dict[str, ValidationStrategy] = {}
        self._register_default_validators()

    def _register_default_validators(self):
        """Register built-in validators."""
        self.register_validator('complaint', build_complaint_validator(partial=False))
        self.register_validator('complaint_update', build_complaint_validator(partial=True))

    def register_validator(self, record_type: str, validator: ValidationStrategy):
        """
        Register a validation strategy for a specific record type.

        Args:
            record_type: Type identifier (e.g., 'complaint', 'complaint_update')
            validator: ValidationStrategy instance
        """
        self._validators[record_type.lower()] = validator

    def get_validator(self, record_type: str) -> Optional[ValidationStrategy]:
        """Get a registered validator by record type, or None."""
        return self._validators.get(record_type.lower())

    def validate(self, record: Dict, record_type: str) -> List[FieldError]:
        """
        Validate a record using the appropriate validator.

        Args:
            record: Dictionary containing record data
            record_type: Type of record to validate

        Returns:
            List of field errors (empty if valid)
        """
        validator = self.get_validator(record_type)
        if not validator:
            return [{"field": "", "message": f"No validator registered for record type: {record_type}"}]

        return validator.validate(record)

    def is_valid(self, record: Dict, record_type: str) -> bool:
        """Check if a record is valid."""
        return len(self.validate(record, record_type)) == 0

    def get_registered_types(self) -> List[str]:
        """Get list of registered record types."""
        return list(self._validators.keys())
