"""
================================================================================
UI Testing Pytest Configuration
================================================================================

Fixtures for browser management, the locator registry and page objects.

The pages under test are served from memory through `page.route`, so the
suite runs against the real locator files without an application server.
UI tests are skipped when no Playwright browser can be launched.

================================================================================
"""

from pathlib import Path
from typing import Generator
from urllib.parse import urlparse

import allure
import pytest
from loguru import logger
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import Page, Route

from locatorsuite.common.config_loader import ConfigLoader
from locatorsuite.ui_testing.framework.browser_manager import BrowserManager
from locatorsuite.ui_testing.framework.locator_registry import LocatorCache, LocatorRegistry
from locatorsuite.ui_testing.framework.page_context import PageContext
from locatorsuite.ui_testing.pages.home_page import HomePage
from locatorsuite.ui_testing.pages.login_page import LoginPage


APP_BASE_URL = "http://app.test"

LOGIN_HTML = """<!DOCTYPE html>
<html>
<head><title>Sign in | Demo App</title></head>
<body>
  <h1>Sign in</h1>
  <form id="login-form">
    <input id="username" name="username" type="text">
    <input id="password" name="password" type="password">
    <label><input id="remember-me" type="checkbox"> Remember me</label>
    <button type="submit" disabled>Log in</button>
  </form>
  <div class="validation-error" style="display:none">Password is required</div>
  <div class="error-message" style="display:none"></div>
  <a href="/forgot-password">Forgot password?</a>
  <a href="/signup">Create an account</a>
  <button data-testid="google-login">Continue with Google</button>
  <button data-testid="facebook-login">Continue with Facebook</button>
  <script>
    const form = document.getElementById('login-form');
    const username = document.getElementById('username');
    const password = document.getElementById('password');
    const submit = form.querySelector("button[type='submit']");
    username.addEventListener('input', () => { submit.disabled = !username.value; });
    form.addEventListener('submit', (event) => {
      event.preventDefault();
      if (!password.value) {
        document.querySelector('.validation-error').style.display = 'block';
        return;
      }
      if (username.value === 'demo_user' && password.value === 'demo_password') {
        window.location.href = '/';
        return;
      }
      const error = document.querySelector('.error-message');
      error.textContent = 'Invalid username or password';
      error.style.display = 'block';
    });
  </script>
</body>
</html>
"""

HOME_HTML = """<!DOCTYPE html>
<html>
<head><title>Home | Demo App</title></head>
<body>
  <header>
    <a class="logo" href="/">Demo App</a>
    <input name="search" type="text">
    <button aria-label="Search">Go</button>
    <button data-testid="notification-bell">Bell <span class="notification-count"> 3 </span></button>
    <button data-testid="user-menu">Account</button>
    <nav id="menu" style="display:none">
      <a href="/profile">Profile</a>
      <a href="/settings">Settings</a>
      <a href="/login">Logout</a>
    </nav>
  </header>
  <main>
    <section class="hero">Welcome back</section>
    <div id="search-results"></div>
    <ul class="featured-items"><li>Featured one</li><li>Featured two</li></ul>
  </main>
  <footer><p class="copyright">© 2026 Demo App</p></footer>
  <script>
    document.querySelector("[data-testid='user-menu']").addEventListener('click', () => {
      document.getElementById('menu').style.display = 'block';
    });
    document.querySelector("button[aria-label='Search']").addEventListener('click', () => {
      const term = document.querySelector("input[name='search']").value;
      document.getElementById('search-results').textContent = 'Results for: ' + term;
    });
  </script>
</body>
</html>
"""

PAGES = {
    "/": HOME_HTML,
    "/login": LOGIN_HTML,
}


def _serve_demo_app(route: Route) -> None:
    path = urlparse(route.request.url).path or "/"
    body = PAGES.get(path)
    if body is None:
        body = f"<html><head><title>{path}</title></head><body><h1>{path}</h1></body></html>"
    route.fulfill(status=200, content_type="text/html", body=body)


# ================================================================================
# Browser Fixtures
# ================================================================================

@pytest.fixture(scope="session")
def browser_manager() -> Generator[BrowserManager, None, None]:
    """
    Session-scoped browser manager fixture.

    Provides a single browser for all tests in the session, reducing browser
    launch overhead.
    """
    manager = BrowserManager.from_config()
    try:
        manager.start()
    except PlaywrightError as e:
        pytest.skip(f"Playwright browser unavailable: {e}")
    yield manager
    manager.close()


@pytest.fixture(scope="function")
def page(browser_manager: BrowserManager) -> Generator[Page, None, None]:
    """
    Function-scoped page in its own context, routed to the demo app.
    """
    context = browser_manager.new_context(base_url=APP_BASE_URL)
    context.route("**/*", _serve_demo_app)
    page = context.new_page()
    yield page
    context.close()


# ================================================================================
# Locator Fixtures
# ================================================================================

@pytest.fixture(scope="session")
def locator_cache() -> LocatorCache:
    """One locator cache per test session."""
    return LocatorCache()


@pytest.fixture(scope="session")
def locator_registry(locator_cache: LocatorCache) -> LocatorRegistry:
    return LocatorRegistry.from_config(ConfigLoader(), cache=locator_cache)


# ================================================================================
# Page Object Fixtures
# ================================================================================

@pytest.fixture
def login_page(page: Page, locator_registry: LocatorRegistry, tmp_path: Path) -> LoginPage:
    ctx = PageContext.create(
        page,
        LoginPage.PAGE_NAME,
        locator_registry,
        timeout_ms=5000,
        base_url=APP_BASE_URL,
        screenshot_dir=tmp_path / "screenshots",
    )
    return LoginPage(ctx)


@pytest.fixture
def home_page(page: Page, locator_registry: LocatorRegistry, tmp_path: Path) -> HomePage:
    ctx = PageContext.create(
        page,
        HomePage.PAGE_NAME,
        locator_registry,
        timeout_ms=5000,
        base_url=APP_BASE_URL,
        screenshot_dir=tmp_path / "screenshots",
    )
    return HomePage(ctx)


@pytest.fixture
def test_data():
    """
    Provides common test data for UI tests.
    """
    return {
        "valid_user": {
            "username": "demo_user",
            "password": "demo_password",
        },
        "invalid_user": {
            "username": "invalid_user",
            "password": "wrong_password",
        },
    }


# ================================================================================
# Test Lifecycle Hooks
# ================================================================================

@pytest.hookimpl(hookwrapper=True)
def pytest_runtest_makereport(item, call):
    """
    Attach a full-page screenshot to Allure when a UI test fails.
    """
    outcome = yield
    report = outcome.get_result()

    if report.when == "call" and report.failed:
        page = getattr(item, "funcargs", {}).get("page")
        if page is None:
            return
        try:
            allure.attach(
                page.screenshot(full_page=True),
                name="failure_screenshot",
                attachment_type=allure.attachment_type.PNG,
            )
        except PlaywrightError as e:
            logger.warning(f"Failed to capture screenshot on failure: {e}")
