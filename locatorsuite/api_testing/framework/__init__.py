"""
================================================================================
API Testing Framework
================================================================================

httpx-based API helpers sharing the UI framework's error taxonomy.

Modules:
    - http_client: API client with token handling, 5xx retry and Allure logging
    - response_validator: Batched status / property / value / schema checks

Author: Automation Team
License: MIT
================================================================================
"""

from .http_client import ApiClient, DEFAULT_HEADERS
from .response_validator import (
    collect_errors,
    validate_properties,
    validate_response,
    validate_schema,
    validate_status,
)

__all__ = [
    "ApiClient",
    "DEFAULT_HEADERS",
    "collect_errors",
    "validate_properties",
    "validate_response",
    "validate_schema",
    "validate_status",
]
