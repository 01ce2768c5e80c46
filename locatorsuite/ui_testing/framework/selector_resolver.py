"""
================================================================================
Selector Resolver
================================================================================

Turns selector expressions into live Playwright locators.

Selector grammar (prefix convention used by the YAML locator files):
    xpath=<xpath-expression>   -> XPath query
    text=<literal>             -> "find by visible text" query (substring)
    <anything else>            -> CSS selector

There is no escape syntax: a CSS selector that happens to start with
`xpath=` or `text=` is classified by its prefix.

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from enum import Enum
from typing import Union

from loguru import logger
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Locator, Page
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from .exceptions import ClassifiedError, ErrorType


XPATH_PREFIX = "xpath="
TEXT_PREFIX = "text="

DEFAULT_VISIBLE_TIMEOUT = 10000  # milliseconds

# Returns true when the expression selects at least one node
_XPATH_EXISTS_JS = """
(expr) => document.evaluate(
    expr, document, null, XPathResult.FIRST_ORDERED_NODE_TYPE, null
).singleNodeValue !== null
"""


class SelectorKind(str, Enum):
    CSS = "css"
    XPATH = "xpath"
    TEXT = "text"


@dataclass(frozen=True)
class Selector:
    """
    Parsed selector expression.

    Attributes:
        kind: Which query engine handles the payload
        payload: Expression with the prefix stripped
        raw: The expression exactly as written in the locator file
    """
    kind: SelectorKind
    payload: str
    raw: str

    def __str__(self) -> str:
        return self.raw


SelectorLike = Union[str, Selector]


def classify(selector: SelectorLike) -> Selector:
    """
    Classify a selector expression by prefix.

    Total: every string yields a Selector, CSS being the default.

        >>> classify("xpath=//div").kind
        <SelectorKind.XPATH: 'xpath'>
        >>> classify(".btn-primary").payload
        '.btn-primary'
    """
    if isinstance(selector, Selector):
        return selector
    if selector.startswith(XPATH_PREFIX):
        return Selector(SelectorKind.XPATH, selector[len(XPATH_PREFIX):], selector)
    if selector.startswith(TEXT_PREFIX):
        return Selector(SelectorKind.TEXT, selector[len(TEXT_PREFIX):], selector)
    return Selector(SelectorKind.CSS, selector, selector)


class SelectorResolver:
    """
    Dispatches parsed selectors to Playwright query primitives.

    Usage:
        >>> resolver = SelectorResolver(page)
        >>> resolver.query_visible("text=Sign in").click()
        >>> resolver.exists("xpath=//form[@id='login']")
        True
    """

    def __init__(self, page: Page) -> None:
        self.page = page

    def query(self, selector: SelectorLike) -> Locator:
        """Return a locator for every element matching the selector."""
        parsed = classify(selector)
        if parsed.kind is SelectorKind.XPATH:
            return self.page.locator(f"xpath={parsed.payload}")
        if parsed.kind is SelectorKind.TEXT:
            # Case-sensitive substring, same as the existence probe
            return self.page.get_by_text(re.compile(re.escape(parsed.payload)))
        return self.page.locator(f"css={parsed.payload}")

    def query_visible(
        self,
        selector: SelectorLike,
        timeout_ms: int = DEFAULT_VISIBLE_TIMEOUT,
    ) -> Locator:
        """
        Return the first match once it is visible.

        Raises:
            ClassifiedError: TIMEOUT when the element is not visible in time
        """
        parsed = classify(selector)
        locator = self.query(parsed).first
        try:
            locator.wait_for(state="visible", timeout=timeout_ms)
        except PlaywrightTimeoutError as e:
            raise ClassifiedError(
                f"Element not visible within {timeout_ms}ms: {parsed.raw}",
                ErrorType.TIMEOUT,
                details={"selector": parsed.raw, "timeout_ms": timeout_ms},
            ) from e
        return locator

    def exists(self, selector: SelectorLike) -> bool:
        """
        Probe the current DOM without waiting or raising.

        Text selectors match anywhere in the rendered body text, so unrelated
        text elsewhere on the page also counts as a hit.
        """
        parsed = classify(selector)
        try:
            if parsed.kind is SelectorKind.XPATH:
                return bool(self.page.evaluate(_XPATH_EXISTS_JS, parsed.payload))
            if parsed.kind is SelectorKind.TEXT:
                body_text = self.page.inner_text("body") or ""
                return parsed.payload in body_text
            return self.page.locator(f"css={parsed.payload}").count() > 0
        except PlaywrightError as e:
            logger.debug(f"Existence probe failed for '{parsed.raw}': {e}")
            return False


__all__ = [
    "SelectorKind",
    "Selector",
    "SelectorLike",
    "SelectorResolver",
    "classify",
    "DEFAULT_VISIBLE_TIMEOUT",
]
