# -*- coding: utf-8 -*-
"""
Base Controller
===============
Base class for controllers in QOS-ET.

Controllers are the narrow contract the surrounding system calls. They never
raise: every outcome is an OperationResult envelope with an error code.
"""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Generic, List, Optional, TypeVar

from qos_et.services.exceptions import (
    DuplicateIdException,
    NotFoundException,
    StorageUnavailableException,
    UnsupportedOperationException,
    ValidationException,
)
from qos_et.utils.logger import get_logger

logger = get_logger(__name__)

T = TypeVar('T')


class ErrorCodes:
    """Error codes carried by failed results."""
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE_ID = "DUPLICATE_ID"
    UNSUPPORTED = "UNSUPPORTED"
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"
    INTERNAL_ERROR = "INTERNAL_ERROR"


# Most specific first
_ERROR_CODES = (
    (ValidationException, ErrorCodes.VALIDATION_ERROR),
    (NotFoundException, ErrorCodes.NOT_FOUND),
    (DuplicateIdException, ErrorCodes.DUPLICATE_ID),
    (UnsupportedOperationException, ErrorCodes.UNSUPPORTED),
    (StorageUnavailableException, ErrorCodes.STORAGE_UNAVAILABLE),
)


@dataclass
class OperationResult(Generic[T]):
    """Result of a controller operation."""
    success: bool
    data: Optional[T] = None
    message: str = ""
    error_code: Optional[str] = None
    errors: List[Any] = field(default_factory=list)

    @classmethod
    def ok(cls, data: T = None, message: str = "") -> 'OperationResult[T]':
        """Create a successful result."""
        return cls(success=True, data=data, message=message)

    @classmethod
    def fail(cls, message: str, error_code: str = ErrorCodes.INTERNAL_ERROR,
             errors: List[Any] = None) -> 'OperationResult[T]':
        """Create a failed result."""
        return cls(success=False, message=message, error_code=error_code, errors=errors or [])

    def to_dict(self) -> dict:
        """Envelope as returned to callers."""
        if self.success:
            envelope = {"success": True, "data": self.data}
            if self.message:
                envelope["message"] = self.message
            return envelope
        envelope = {"success": False, "error": {"code": self.error_code, "message": self.message}}
        if self.errors:
            envelope["error"]["details"] = list(self.errors)
        return envelope


def error_code_for(error: Exception) -> str:
    for exc_type, code in _ERROR_CODES:
        if isinstance(error, exc_type):
            return code
    return ErrorCodes.INTERNAL_ERROR


class BaseController:
    """
    Base controller class.

    Provides:
    - Error handling into OperationResult envelopes
    - Logging
    - Change callbacks
    """

    def __init__(self):
        self._last_error = ""
        self._callbacks: Dict[str, List[Callable]] = {}

    @property
    def last_error(self) -> str:
        """Get last error message."""
        return self._last_error

    def _set_error(self, error: str):
        """Set error message."""
        self._last_error = error
        if error:
            logger.error(f"{self.__class__.__name__}: {error}")

    def _log_operation(self, operation: str, **kwargs):
        """Log an operation."""
        logger.info(f"{self.__class__.__name__}.{operation}: {kwargs}")

    def register_callback(self, event: str, callback: Callable):
        """Register a callback for an event."""
        if event not in self._callbacks:
            self._callbacks[event] = []
        self._callbacks[event].append(callback)

    def _trigger_callbacks(self, event: str, *args, **kwargs):
        """Trigger callbacks for an event."""
        if event in self._callbacks:
            for callback in self._callbacks[event]:
                try:
                    callback(*args, **kwargs)
                except Exception as e:
                    logger.error(f"Error in callback for {event}: {e}")

    def execute_with_error_handling(
        self,
        operation: str,
        func: Callable,
        *args,
        **kwargs
    ) -> OperationResult:
        """Execute a function with standard error handling."""
        try:
            result = func(*args, **kwargs)
            self._last_error = ""
            return result if isinstance(result, OperationResult) else OperationResult.ok(data=result)
        except Exception as e:
            code = error_code_for(e)
            if code == ErrorCodes.INTERNAL_ERROR:
                logger.exception(f"{self.__class__.__name__}.{operation} failed")
            self._set_error(str(e))
            errors = e.errors if isinstance(e, ValidationException) else []
            return OperationResult.fail(message=str(e), error_code=code, errors=errors)
