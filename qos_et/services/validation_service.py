# -*- coding: utf-8 -*-
"""
Data validation service.

Every write path (create, update, upsert, import) passes its payload through
here before touching storage. Validation never mutates the input and never
reads from storage.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List

from qos_et.models.complaint import normalize_complaint_payload
from qos_et.services.exceptions import ValidationException
from qos_et.services.validation.validation_factory import ValidationFactory
from qos_et.utils.logger import get_logger

logger = get_logger(__name__)


@dataclass
class ValidationResult:
    """Result of a validation check."""
    is_valid: bool
    errors: List[Dict[str, str]] = field(default_factory=list)

    @property
    def messages(self) -> List[str]:
        return [f"{e['field']}: {e['message']}" if e.get("field") else e["message"]
                for e in self.errors]


class ValidationService:
    """Service for complaint payload validation."""

    def __init__(self, factory: ValidationFactory = None):
        self._validation_factory = factory or ValidationFactory()

    def check_complaint(self, payload: Dict[str, Any], partial: bool = False) -> ValidationResult:
        """Validate without raising."""
        if not isinstance(payload, dict):
            return ValidationResult(
                is_valid=False,
                errors=[{"field": "", "message": "Complaint payload must be an object"}]
            )

        record_type = "complaint_update" if partial else "complaint"
        errors = self._validation_factory.validate(normalize_complaint_payload(payload), record_type)
        return ValidationResult(is_valid=len(errors) == 0, errors=errors)

    def validate_complaint(self, payload: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate a full complaint payload.

        Args:
            payload: Complaint fields, snake_case or camelCase keys

        Returns:
            A normalized copy of the payload keyed by model field names

        Raises:
            ValidationException: with one ``{"field", "message"}`` entry per problem
        """
        result = self.check_complaint(payload)
        if not result.is_valid:
            raise self._to_exception(result, payload)
        return normalize_complaint_payload(payload)

    def validate_complaint_update(self, partial: Dict[str, Any]) -> Dict[str, Any]:
        """
        Validate a partial update: the same rules, applied only to present fields.

        Raises:
            ValidationException: when a present field is invalid
        """
        result = self.check_complaint(partial, partial=True)
        if not result.is_valid:
            raise self._to_exception(result, partial)
        return normalize_complaint_payload(partial)

    @staticmethod
    def _to_exception(result: ValidationResult, payload: Any) -> ValidationException:
        record_id = payload.get("id") if isinstance(payload, dict) else None
        logger.debug(f"Validation failed for complaint {record_id}: {result.messages}")
        first_field = result.errors[0].get("field") if result.errors else None
        return ValidationException(
            "Validation failed: " + "; ".join(result.messages),
            field=first_field or None,
            errors=result.errors,
        )
