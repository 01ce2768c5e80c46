"""
================================================================================
UI Testing Framework
================================================================================

Playwright-based UI automation driven by YAML locator files.

Components:
    - locator_registry: YAML locator loading, caching and key resolution
    - selector_resolver: css / xpath= / text= dispatch to Playwright queries
    - error_handler: Error classification, retry and safe actions
    - page_context: Page + locator document pairing used by page objects
    - browser_manager: Browser lifecycle management

Author: Automation Team
License: MIT
================================================================================
"""

from .exceptions import (
    ClassifiedError,
    ErrorType,
    LocatorFileNotFoundError,
    LocatorNotFoundError,
)
from .selector_resolver import Selector, SelectorKind, SelectorResolver, classify
from .locator_registry import LocatorCache, LocatorDocument, LocatorRegistry
from .error_handler import (
    ErrorHandler,
    Retrier,
    RetryState,
    assert_with_message,
    classify_error,
    log_step,
    retryable,
    with_retry,
)
from .page_context import PageContext
from .browser_manager import BrowserManager

__all__ = [
    "ClassifiedError",
    "ErrorType",
    "LocatorFileNotFoundError",
    "LocatorNotFoundError",
    "Selector",
    "SelectorKind",
    "SelectorResolver",
    "classify",
    "LocatorCache",
    "LocatorDocument",
    "LocatorRegistry",
    "ErrorHandler",
    "Retrier",
    "RetryState",
    "assert_with_message",
    "classify_error",
    "log_step",
    "retryable",
    "with_retry",
    "PageContext",
    "BrowserManager",
]
