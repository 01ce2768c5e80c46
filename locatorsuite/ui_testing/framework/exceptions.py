"""
================================================================================
Classified Errors
================================================================================

Fixed failure taxonomy shared by the locator registry, the selector resolver,
the error/retry envelope and the API helpers.

Hierarchy:
    ClassifiedError
    ├── LocatorNotFoundError        (ELEMENT_NOT_FOUND)
    └── LocatorFileNotFoundError    (ELEMENT_NOT_FOUND)

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Optional


class ErrorType(str, Enum):
    """Failure kinds used for retry and reporting decisions."""
    ELEMENT_NOT_FOUND = "ELEMENT_NOT_FOUND"
    TIMEOUT = "TIMEOUT"
    API_ERROR = "API_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    AUTHENTICATION_ERROR = "AUTHENTICATION_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    ASSERTION_ERROR = "ASSERTION_ERROR"
    UNKNOWN = "UNKNOWN"


class ClassifiedError(Exception):
    """
    Error tagged with one of the fixed failure kinds.

    Attributes are assigned once in ``__init__`` and never changed afterwards.

    Attributes:
        message: Human-readable failure message
        error_type: Failure kind
        context: Where the failure happened (step / page / action name)
        details: Free-form diagnostic payload
        timestamp: ISO-8601 creation time (UTC)
    """

    def __init__(
        self,
        message: str,
        error_type: ErrorType = ErrorType.UNKNOWN,
        details: Optional[Dict[str, Any]] = None,
        context: str = "",
    ) -> None:
        super().__init__(message)
        self.message = message
        self.error_type = ErrorType(error_type)
        self.details: Dict[str, Any] = dict(details or {})
        self.context = context
        self.timestamp = datetime.now(timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        """Structured form used for log records and Allure attachments."""
        return {
            "message": self.message,
            "type": self.error_type.value,
            "context": self.context,
            "details": self.details,
            "timestamp": self.timestamp,
        }

    def __str__(self) -> str:
        return self.message


class LocatorNotFoundError(ClassifiedError):
    """Raised when no namespace of a locator document holds the element key."""

    def __init__(self, page_name: str, element_key: str) -> None:
        super().__init__(
            f"Locator not found: {page_name}.{element_key}",
            ErrorType.ELEMENT_NOT_FOUND,
            details={"page": page_name, "key": element_key},
        )


class LocatorFileNotFoundError(ClassifiedError):
    """Raised when the backing locator document does not exist."""

    def __init__(self, path: str) -> None:
        super().__init__(
            f"Locator file not found: {path}",
            ErrorType.ELEMENT_NOT_FOUND,
            details={"path": path},
        )


__all__ = [
    "ErrorType",
    "ClassifiedError",
    "LocatorNotFoundError",
    "LocatorFileNotFoundError",
]
