# ================================================================================
# Error Handler Module
# ================================================================================
#
# Error classification, retry and "safe" element actions for UI steps.
#
# Key Features:
#   - Fixed failure taxonomy (see exceptions.ErrorType)
#   - Structured loguru record + full-page screenshot before every raise
#   - Fixed-delay retry with an observable state machine
#   - Existence-probed click / type that fail fast with ELEMENT_NOT_FOUND
#   - Allure step integration
#
# ================================================================================

import time
from datetime import datetime
from enum import Enum
from functools import wraps
from pathlib import Path
from typing import Any, Callable, List, Optional, TypeVar, Union

import allure
import httpx
from loguru import logger
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Locator, Page
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from .exceptions import ClassifiedError, ErrorType
from .selector_resolver import (
    DEFAULT_VISIBLE_TIMEOUT,
    SelectorLike,
    SelectorResolver,
    classify,
)


T = TypeVar("T")

DEFAULT_MAX_RETRIES = 3
DEFAULT_RETRY_DELAY_MS = 1000
DEFAULT_ACTION_TIMEOUT = 10000  # milliseconds

SCREENSHOT_DIR = Path(__file__).parent.parent / "screenshots"

MASK = "***"


class RetryState(str, Enum):
    """Lifecycle of one retryable action."""
    PENDING = "pending"
    ATTEMPTING = "attempting"
    WAITING = "waiting"
    SUCCEEDED = "succeeded"
    FAILED = "failed"


class Retrier:
    """
    Runs an action with fixed-delay retries.

    PENDING -> ATTEMPTING -> SUCCEEDED
                          -> WAITING -> ATTEMPTING ...
                          -> FAILED (retries exhausted, last error re-raised)

    The action must be idempotent; nothing is rolled back between attempts.
    """

    def __init__(
        self,
        max_retries: int = DEFAULT_MAX_RETRIES,
        delay_ms: int = DEFAULT_RETRY_DELAY_MS,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if max_retries < 0:
            raise ValueError(f"max_retries must be >= 0, got {max_retries}")
        self.max_retries = max_retries
        self.delay_ms = delay_ms
        self._sleep = sleep
        self.state = RetryState.PENDING
        self.attempts = 0
        self.delays: List[int] = []

    def run(self, action: Callable[[], T]) -> T:
        self.state = RetryState.PENDING
        self.attempts = 0
        self.delays = []

        while True:
            self.state = RetryState.ATTEMPTING
            self.attempts += 1
            try:
                result = action()
            except Exception as e:
                if self.attempts > self.max_retries:
                    self.state = RetryState.FAILED
                    logger.error(
                        f"All {self.attempts} attempts failed: {e}"
                    )
                    raise
                logger.warning(
                    f"Attempt {self.attempts}/{self.max_retries + 1} failed: {e}. "
                    f"Retrying in {self.delay_ms}ms..."
                )
                self.state = RetryState.WAITING
                self.delays.append(self.delay_ms)
                self._sleep(self.delay_ms / 1000)
                continue

            self.state = RetryState.SUCCEEDED
            return result


def with_retry(
    action: Callable[[], T],
    max_retries: int = DEFAULT_MAX_RETRIES,
    delay_ms: int = DEFAULT_RETRY_DELAY_MS,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Invoke `action`, retrying up to `max_retries` more times on failure.

    The last failure propagates unchanged once retries are exhausted.
    """
    return Retrier(max_retries, delay_ms, sleep).run(action)


def retryable(
    max_retries: int = DEFAULT_MAX_RETRIES,
    delay_ms: int = DEFAULT_RETRY_DELAY_MS,
):
    """Decorator form of `with_retry`."""
    def decorator(func: Callable):
        @wraps(func)
        def wrapper(*args, **kwargs):
            return with_retry(lambda: func(*args, **kwargs), max_retries, delay_ms)
        return wrapper
    return decorator


def classify_error(error: BaseException) -> ErrorType:
    """Map an exception onto the failure taxonomy."""
    if isinstance(error, ClassifiedError):
        return error.error_type
    carried = getattr(error, "error_type", None)
    if carried is not None:
        try:
            return ErrorType(carried)
        except ValueError:
            pass
    if isinstance(error, PlaywrightTimeoutError):
        return ErrorType.TIMEOUT
    if isinstance(error, httpx.TransportError):
        return ErrorType.NETWORK_ERROR
    if isinstance(error, AssertionError):
        return ErrorType.ASSERTION_ERROR
    return ErrorType.UNKNOWN


def assert_with_message(condition: Any, message: str) -> None:
    """Raise ASSERTION_ERROR with `message` when `condition` is falsy."""
    if not condition:
        raise ClassifiedError(message, ErrorType.ASSERTION_ERROR)


def log_step(description: str) -> None:
    """Record a test step in the run log and the Allure report."""
    logger.info(f"[STEP] {description}")
    with allure.step(description):
        pass


class ErrorHandler:
    """
    Error/retry envelope around Playwright actions.

    Example:
        handler = ErrorHandler(page)
        handler.safe_click("#submit")
        handler.safe_type("#password", secret, sensitive=True)
        handler.with_error_handling(lambda: page.click("#flaky"), "open menu", retries=2)
    """

    def __init__(
        self,
        page: Optional[Page] = None,
        resolver: Optional[SelectorResolver] = None,
        screenshot_dir: Union[str, Path, None] = None,
    ):
        """
        Args:
            page: Playwright page used for actions and failure screenshots
            resolver: Selector resolver; built from `page` when omitted
            screenshot_dir: Where failure screenshots are written
        """
        self.page = page
        if resolver is None and page is not None:
            resolver = SelectorResolver(page)
        self.resolver = resolver
        self.screenshot_dir = Path(screenshot_dir) if screenshot_dir else SCREENSHOT_DIR

    # =========================================================================
    # Classification
    # =========================================================================

    def handle_error(
        self,
        error: BaseException,
        context: str = "",
        should_raise: bool = True,
    ) -> ClassifiedError:
        """
        Classify, log and screenshot a failure, then raise or return it.

        Args:
            error: The failure to handle
            context: Step / action description for the log record
            should_raise: Re-raise the classified error when True

        Returns:
            The classified error (only when `should_raise` is False)
        """
        if isinstance(error, ClassifiedError):
            classified = error
        else:
            classified = ClassifiedError(
                str(error) or type(error).__name__,
                classify_error(error),
                details={"exception": type(error).__name__},
                context=context,
            )

        record = classified.to_dict()
        record["context"] = context or classified.context
        logger.bind(**record).error(
            "\n========== ERROR ==========\n"
            f"Context: {record['context']}\n"
            f"Type: {record['type']}\n"
            f"Message: {record['message']}\n"
            f"Timestamp: {record['timestamp']}\n"
            "==========================="
        )

        self._capture_failure_screenshot(record["context"])

        if should_raise:
            if classified is error:
                raise classified
            raise classified from error
        return classified

    def _capture_failure_screenshot(self, context: str) -> Optional[Path]:
        """Full-page screenshot; failures here are logged and ignored."""
        if self.page is None:
            return None

        safe_context = "".join(c if c.isalnum() else "-" for c in context)[:60] or "step"
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S_%f")
        filepath = self.screenshot_dir / f"error-{safe_context}-{timestamp}.png"
        try:
            self.screenshot_dir.mkdir(parents=True, exist_ok=True)
            png = self.page.screenshot(path=str(filepath), full_page=True)
            allure.attach(
                png,
                name=f"error-{safe_context}",
                attachment_type=allure.attachment_type.PNG,
            )
        except (PlaywrightError, OSError) as e:
            logger.warning(f"Failed to capture failure screenshot: {e}")
            return None
        return filepath

    def with_error_handling(
        self,
        action: Callable[[], T],
        context: str,
        should_raise: bool = True,
        retries: int = 0,
        retry_delay_ms: int = DEFAULT_RETRY_DELAY_MS,
    ) -> Optional[T]:
        """
        Run `action` with retries; route the final failure through handle_error.

        Returns:
            The action's result, or None when the failure was swallowed
        """
        try:
            return with_retry(action, retries, retry_delay_ms)
        except Exception as e:
            self.handle_error(e, context, should_raise)
            return None

    # =========================================================================
    # Safe Actions
    # =========================================================================

    def _require_resolver(self) -> SelectorResolver:
        if self.resolver is None:
            raise RuntimeError("ErrorHandler has no page; safe actions need one.")
        return self.resolver

    def _probe(self, selector: SelectorLike) -> Locator:
        resolver = self._require_resolver()
        parsed = classify(selector)
        if not resolver.exists(parsed):
            raise ClassifiedError(
                f"Element not found: {parsed.raw}",
                ErrorType.ELEMENT_NOT_FOUND,
                details={"selector": parsed.raw},
            )
        return resolver.query(parsed).first

    @allure.step("Safe click: {selector}")
    def safe_click(
        self,
        selector: SelectorLike,
        timeout_ms: int = DEFAULT_ACTION_TIMEOUT,
        force: bool = False,
    ) -> None:
        """
        Click after an existence probe; absent elements fail fast.

        Raises:
            ClassifiedError: ELEMENT_NOT_FOUND when the probe misses
        """
        locator = self._probe(selector)
        logger.info(f"Clicking element: {selector}")
        locator.click(timeout=timeout_ms, force=force)

    def safe_type(
        self,
        selector: SelectorLike,
        text: str,
        timeout_ms: int = DEFAULT_ACTION_TIMEOUT,
        clear: bool = True,
        sensitive: bool = False,
    ) -> None:
        """
        Type into an element after an existence probe.

        Args:
            selector: Target input
            text: Text to type
            timeout_ms: Action timeout
            clear: Clear the field first
            sensitive: Keep the value out of the log
        """
        shown = MASK if sensitive else f"'{text[:50]}'"
        with allure.step(f"Safe type: {shown} into {selector}"):
            locator = self._probe(selector)
            logger.info(f"Typing {shown} into: {selector}")
            if clear:
                locator.clear(timeout=timeout_ms)
            locator.press_sequentially(text, timeout=timeout_ms)

    @allure.step("Safe wait for: {selector}")
    def safe_wait_for(
        self,
        selector: SelectorLike,
        timeout_ms: int = DEFAULT_VISIBLE_TIMEOUT,
    ) -> Locator:
        """Wait for visibility; raises TIMEOUT when it does not happen."""
        return self._require_resolver().query_visible(selector, timeout_ms)


__all__ = [
    "RetryState",
    "Retrier",
    "with_retry",
    "retryable",
    "classify_error",
    "assert_with_message",
    "log_step",
    "ErrorHandler",
]
