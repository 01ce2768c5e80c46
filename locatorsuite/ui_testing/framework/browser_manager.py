"""
================================================================================
Browser Manager
================================================================================

Browser lifecycle management for UI automation (sync Playwright API).

Features:
    - One browser per test session
    - Isolated contexts per test
    - Browser configuration presets from config.yaml

Author: Automation Team
License: MIT
================================================================================
"""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from loguru import logger
from playwright.sync_api import (
    Browser,
    BrowserContext,
    Page,
    Playwright,
    sync_playwright,
)

from locatorsuite.common.config_loader import ConfigLoader


class BrowserManager:
    """
    Manages the browser instance and contexts for UI testing.

    Usage:
        with BrowserManager() as manager:
            page = manager.new_page()
            page.goto("https://example.com")
    """

    DEFAULT_LAUNCH_OPTIONS: Dict[str, Any] = {
        "headless": True,
        "args": ["--ignore-certificate-errors"],
    }

    # Mirrors the 1920x1080 viewport the locator files were written against
    DEFAULT_CONTEXT_OPTIONS: Dict[str, Any] = {
        "viewport": {"width": 1920, "height": 1080},
        "ignore_https_errors": True,
    }

    def __init__(
        self,
        headless: bool = True,
        browser_type: str = "chromium",
        default_timeout: int = 10000,
    ):
        """
        Args:
            headless: Run browser in headless mode
            browser_type: Browser to use - 'chromium', 'firefox', 'webkit'
            default_timeout: Default Playwright timeout for new contexts (ms)
        """
        self.headless = headless
        self.browser_type = browser_type
        self.default_timeout = default_timeout

        self._playwright: Optional[Playwright] = None
        self._browser: Optional[Browser] = None
        self._contexts: List[BrowserContext] = []

    @classmethod
    def from_config(cls, config: Optional[ConfigLoader] = None) -> "BrowserManager":
        config = config or ConfigLoader()
        return cls(
            headless=config.get("ui.headless", True),
            browser_type=config.get("ui.browser", "chromium"),
            default_timeout=int(config.get("ui.default_timeout", 10000)),
        )

    def __enter__(self) -> "BrowserManager":
        self.start()
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def start(self) -> None:
        """Start Playwright and launch browser."""
        self._playwright = sync_playwright().start()

        if self.browser_type == "firefox":
            browser_launcher = self._playwright.firefox
        elif self.browser_type == "webkit":
            browser_launcher = self._playwright.webkit
        else:
            browser_launcher = self._playwright.chromium

        launch_options = {
            **self.DEFAULT_LAUNCH_OPTIONS,
            "headless": self.headless,
        }

        try:
            self._browser = browser_launcher.launch(**launch_options)
        except Exception:
            self._playwright.stop()
            self._playwright = None
            raise
        logger.debug(
            f"Browser started: {self.browser_type} "
            f"(headless={self.headless})"
        )

    def close(self) -> None:
        """Close all contexts and browser."""
        for context in self._contexts:
            try:
                context.close()
            except Exception as e:
                logger.debug(f"Context already closed: {e}")
        self._contexts.clear()

        if self._browser:
            self._browser.close()
            self._browser = None

        if self._playwright:
            self._playwright.stop()
            self._playwright = None

        logger.debug("Browser closed")

    def new_context(self, **options: Any) -> BrowserContext:
        """
        Create new isolated browser context.

        Args:
            **options: Overrides for DEFAULT_CONTEXT_OPTIONS
        """
        if not self._browser:
            raise RuntimeError("Browser not started. Call start() first.")

        context_options = {**self.DEFAULT_CONTEXT_OPTIONS, **options}
        context = self._browser.new_context(**context_options)
        context.set_default_timeout(self.default_timeout)
        self._contexts.append(context)
        return context

    def new_page(
        self,
        context: Optional[BrowserContext] = None,
        **context_options: Any,
    ) -> Page:
        """Create new page in a new or existing context."""
        if context is None:
            context = self.new_context(**context_options)
        return context.new_page()

    @property
    def browser(self) -> Optional[Browser]:
        return self._browser


__all__ = [
    "BrowserManager",
]
