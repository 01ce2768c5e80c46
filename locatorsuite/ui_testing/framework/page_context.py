"""
================================================================================
Page Context
================================================================================

A PageContext binds a live Playwright page to one YAML locator document.
Page objects hold a context and call its operations by element key; they do
not inherit from a base page.

    ctx = PageContext.create(page, "login", registry)
    ctx.type("usernameInput", "demo_user")
    ctx.click("loginButton")

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from datetime import datetime
from pathlib import Path
from typing import Iterable, Mapping, Optional, Union

import allure
from loguru import logger
from playwright.sync_api import Locator, Page, expect

from .error_handler import SCREENSHOT_DIR, ErrorHandler, log_step
from .locator_registry import LocatorRegistry
from .selector_resolver import Selector, SelectorResolver


DEFAULT_PAGE_TIMEOUT = 10000  # milliseconds
DEFAULT_LOADING_TIMEOUT = 30000  # milliseconds

# Indicators that must be gone before the page counts as loaded
LOADING_INDICATORS = ('[data-testid="loading-spinner"]', ".loading")


@dataclass
class PageContext:
    """
    Live page + locator document pairing.

    Attributes:
        page: Playwright page
        page_name: Locator document name (`config/locators/<page_name>.yaml`)
        registry: Locator registry shared by the session
        resolver: Selector resolver bound to `page`
        timeout_ms: Default wait timeout for element operations
        base_url: Application base URL used by `visit`
    """
    page: Page
    page_name: str
    registry: LocatorRegistry
    resolver: SelectorResolver
    timeout_ms: int = DEFAULT_PAGE_TIMEOUT
    base_url: str = ""
    screenshot_dir: Path = field(default=SCREENSHOT_DIR)

    @classmethod
    def create(
        cls,
        page: Page,
        page_name: str,
        registry: LocatorRegistry,
        timeout_ms: int = DEFAULT_PAGE_TIMEOUT,
        base_url: str = "",
        screenshot_dir: Union[str, Path, None] = None,
    ) -> "PageContext":
        return cls(
            page=page,
            page_name=page_name,
            registry=registry,
            resolver=SelectorResolver(page),
            timeout_ms=timeout_ms,
            base_url=base_url.rstrip("/"),
            screenshot_dir=Path(screenshot_dir) if screenshot_dir else SCREENSHOT_DIR,
        )

    def errors(self) -> ErrorHandler:
        """Error/retry envelope bound to this page."""
        return ErrorHandler(self.page, self.resolver, self.screenshot_dir)

    # =========================================================================
    # Locator Access
    # =========================================================================

    def selector(self, element_key: str) -> Selector:
        return self.registry.resolve_selector(self.page_name, element_key)

    def element(self, element_key: str) -> Locator:
        """All elements matching the key's selector."""
        return self.resolver.query(self.selector(element_key))

    def wait_for(self, element_key: str, timeout_ms: Optional[int] = None) -> Locator:
        """First matching element, once visible."""
        return self.resolver.query_visible(
            self.selector(element_key),
            self.timeout_ms if timeout_ms is None else timeout_ms,
        )

    def exists(self, element_key: str) -> bool:
        return self.resolver.exists(self.selector(element_key))

    def is_visible(self, element_key: str) -> bool:
        return self.element(element_key).first.is_visible()

    # =========================================================================
    # Interactions
    # =========================================================================

    def click(self, element_key: str, force: bool = False) -> None:
        log_step(f"Clicking: {element_key}")
        self.wait_for(element_key).click(timeout=self.timeout_ms, force=force)

    def type(self, element_key: str, text: str, sensitive: bool = False) -> None:
        """Clear the field, then type `text`; sensitive values stay out of the log."""
        log_step(f"Typing into: {element_key}")
        locator = self.wait_for(element_key)
        locator.clear(timeout=self.timeout_ms)
        locator.press_sequentially(text, timeout=self.timeout_ms)
        logger.debug(f"Typed {'***' if sensitive else repr(text)} into {element_key}")

    def clear(self, element_key: str) -> None:
        self.wait_for(element_key).clear(timeout=self.timeout_ms)

    def select(self, element_key: str, value: str) -> None:
        log_step(f"Selecting: {value} from {element_key}")
        self.wait_for(element_key).select_option(value, timeout=self.timeout_ms)

    def check(self, element_key: str) -> None:
        self.wait_for(element_key).check(timeout=self.timeout_ms)

    def uncheck(self, element_key: str) -> None:
        self.wait_for(element_key).uncheck(timeout=self.timeout_ms)

    def fill_form(self, fields: Mapping[str, str], sensitive: Iterable[str] = ()) -> None:
        """
        Type each value into the element named by its key, in mapping order.

        Args:
            fields: Element key -> text
            sensitive: Keys whose values stay out of the log
        """
        hidden = set(sensitive)
        for element_key, text in fields.items():
            self.type(element_key, text, sensitive=element_key in hidden)

    def drag_to(self, source_key: str, target_key: str) -> None:
        log_step(f"Dragging: {source_key} -> {target_key}")
        source = self.wait_for(source_key)
        target = self.wait_for(target_key)
        source.drag_to(target, timeout=self.timeout_ms)

    def upload_file(self, element_key: str, *file_paths: Union[str, Path]) -> None:
        """Set the files of a file input."""
        log_step(f"Uploading {len(file_paths)} file(s) into: {element_key}")
        self.element(element_key).first.set_input_files(
            [str(p) for p in file_paths], timeout=self.timeout_ms
        )

    def scroll_to(self, element_key: str) -> None:
        self.element(element_key).first.scroll_into_view_if_needed(timeout=self.timeout_ms)

    def get_text(self, element_key: str) -> str:
        return self.wait_for(element_key).text_content() or ""

    def get_attribute(self, element_key: str, attribute: str) -> Optional[str]:
        return self.wait_for(element_key).get_attribute(attribute)

    # =========================================================================
    # Verifications
    # =========================================================================

    def verify_text(self, element_key: str, text: str) -> None:
        expect(self.wait_for(element_key)).to_contain_text(text, timeout=self.timeout_ms)

    def verify_exact_text(self, element_key: str, text: str) -> None:
        expect(self.wait_for(element_key)).to_have_text(text, timeout=self.timeout_ms)

    def verify_value(self, element_key: str, value: str) -> None:
        expect(self.wait_for(element_key)).to_have_value(value, timeout=self.timeout_ms)

    def verify_enabled(self, element_key: str) -> None:
        expect(self.wait_for(element_key)).to_be_enabled(timeout=self.timeout_ms)

    def verify_disabled(self, element_key: str) -> None:
        expect(self.wait_for(element_key)).to_be_disabled(timeout=self.timeout_ms)

    # =========================================================================
    # Navigation
    # =========================================================================

    def visit(self, path: str = "/", wait_until: str = "load") -> None:
        log_step(f"Visiting: {path}")
        self.page.goto(f"{self.base_url}{path}", wait_until=wait_until)

    def wait_for_page_load(self, state: str = "load") -> None:
        self.page.wait_for_load_state(state, timeout=self.timeout_ms)

    def wait_for_loading(self, timeout_ms: int = DEFAULT_LOADING_TIMEOUT) -> None:
        """Wait until no loading indicator is left in the DOM."""
        for indicator in LOADING_INDICATORS:
            if self.resolver.exists(indicator):
                logger.debug(f"Waiting for loading indicator to go: {indicator}")
                self.resolver.query(indicator).first.wait_for(state="detached", timeout=timeout_ms)

    def verify_url(self, path: str) -> None:
        expect(self.page).to_have_url(re.compile(re.escape(path)), timeout=self.timeout_ms)

    def verify_title(self, title: str) -> None:
        expect(self.page).to_have_title(re.compile(re.escape(title)), timeout=self.timeout_ms)

    def screenshot(self, name: str, full_page: bool = False) -> Path:
        """Save a screenshot and attach it to Allure."""
        self.screenshot_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filepath = self.screenshot_dir / f"{name}_{timestamp}.png"
        png = self.page.screenshot(path=str(filepath), full_page=full_page)
        allure.attach(png, name=name, attachment_type=allure.attachment_type.PNG)
        logger.debug(f"Screenshot saved: {filepath}")
        return filepath


__all__ = [
    "PageContext",
    "DEFAULT_PAGE_TIMEOUT",
    "DEFAULT_LOADING_TIMEOUT",
]
