# -*- coding: utf-8 -*-
"""Custom exceptions for the data consistency core."""


class ValidationException(Exception):
    """Exception raised for validation errors."""

    def __init__(self, message: str, field: str = None,
                 errors: list = None, context: str = None):
        super().__init__(message)
        self.message = message
        self.field = field
        self.errors = errors or []
        self.context = context

    @property
    def fields(self) -> list:
        """Names of the fields that failed."""
        return [e["field"] for e in self.errors if e.get("field")]


class RepositoryException(Exception):
    """Base class for storage-layer errors."""

    def __init__(self, message: str, context: str = None):
        super().__init__(message)
        self.message = message
        self.context = context

    def __str__(self):
        return self.message


class NotFoundException(RepositoryException):
    """Update or delete target is absent in the caller's scope."""

    def __init__(self, entity: str, record_id: str, context: str = None):
        super().__init__(f"{entity} with id {record_id} not found", context)
        self.entity = entity
        self.record_id = record_id


class DuplicateIdException(RepositoryException):
    """Create collided with an existing record id."""

    def __init__(self, record_id: str, context: str = None):
        super().__init__(f"Record with id {record_id} already exists", context)
        self.record_id = record_id


class UnsupportedOperationException(RepositoryException):
    """The active backend does not offer this operation."""

    def __init__(self, operation: str, backend: str, context: str = None):
        super().__init__(
            f"{operation} is not supported by the {backend} backend", context
        )
        self.operation = operation
        self.backend = backend


class StorageUnavailableException(RepositoryException):
    """Backend cannot be reached."""

    def __init__(self, message: str, original_error: Exception = None,
                 context: str = None):
        super().__init__(message, context)
        self.original_error = original_error
