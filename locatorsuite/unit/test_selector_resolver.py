import re
from unittest.mock import MagicMock

import pytest
from playwright.sync_api import Error as PlaywrightError
from playwright.sync_api import TimeoutError as PlaywrightTimeoutError

from locatorsuite.ui_testing.framework.exceptions import ClassifiedError, ErrorType
from locatorsuite.ui_testing.framework.selector_resolver import (
    Selector,
    SelectorKind,
    SelectorResolver,
    classify,
)


@pytest.mark.parametrize(
    "expression, kind, payload",
    [
        ('xpath=//div[@id="x"]', SelectorKind.XPATH, '//div[@id="x"]'),
        ("text=Submit", SelectorKind.TEXT, "Submit"),
        (".btn-primary", SelectorKind.CSS, ".btn-primary"),
        ("", SelectorKind.CSS, ""),
        ("text=", SelectorKind.TEXT, ""),
        ("div.xpath=odd", SelectorKind.CSS, "div.xpath=odd"),
    ],
)
def test_classify(expression, kind, payload):
    selector = classify(expression)

    assert selector.kind is kind
    assert selector.payload == payload
    assert selector.raw == expression
    assert str(selector) == expression


def test_classify_passes_parsed_selector_through():
    selector = Selector(SelectorKind.TEXT, "Go", "text=Go")

    assert classify(selector) is selector


def test_query_dispatch():
    page = MagicMock()
    resolver = SelectorResolver(page)

    resolver.query("xpath=//form")
    page.locator.assert_called_with("xpath=//form")

    resolver.query("#username")
    page.locator.assert_called_with("css=#username")

    resolver.query("text=Sign in")
    page.get_by_text.assert_called_once_with(re.compile(re.escape("Sign in")))


def test_text_query_is_case_sensitive_substring():
    page = MagicMock()

    SelectorResolver(page).query("text=sign in (2)")

    pattern = page.get_by_text.call_args.args[0]
    assert pattern.search("Please sign in (2) now")
    assert not pattern.search("Sign in (2)")
    assert not pattern.search("sign in 2")


def test_text_query_and_exists_agree_on_case():
    page = MagicMock()
    page.inner_text.return_value = "Sign in"
    resolver = SelectorResolver(page)

    resolver.query("text=sign in")
    pattern = page.get_by_text.call_args.args[0]

    assert resolver.exists("text=sign in") is False
    assert pattern.search(page.inner_text.return_value) is None


def test_query_visible_returns_first_match():
    page = MagicMock()
    first = page.locator.return_value.first

    result = SelectorResolver(page).query_visible("#username", timeout_ms=500)

    assert result is first
    first.wait_for.assert_called_once_with(state="visible", timeout=500)


def test_query_visible_timeout_is_classified():
    page = MagicMock()
    page.locator.return_value.first.wait_for.side_effect = PlaywrightTimeoutError("Timeout 500ms exceeded")

    with pytest.raises(ClassifiedError) as exc_info:
        SelectorResolver(page).query_visible(".toast", timeout_ms=500)

    assert exc_info.value.error_type is ErrorType.TIMEOUT
    assert str(exc_info.value) == "Element not visible within 500ms: .toast"
    assert exc_info.value.details == {"selector": ".toast", "timeout_ms": 500}


def test_exists_css_counts_matches():
    page = MagicMock()
    page.locator.return_value.count.return_value = 2
    resolver = SelectorResolver(page)

    assert resolver.exists(".item")
    page.locator.assert_called_with("css=.item")

    page.locator.return_value.count.return_value = 0
    assert not resolver.exists(".item")


def test_exists_xpath_evaluates_in_page():
    page = MagicMock()
    page.evaluate.return_value = True

    assert SelectorResolver(page).exists("xpath=//h1")
    assert page.evaluate.call_args.args[1] == "//h1"


def test_exists_text_is_substring_of_body_text():
    page = MagicMock()
    page.inner_text.return_value = "Welcome back, please Sign in to continue"
    resolver = SelectorResolver(page)

    assert resolver.exists("text=Sign in")
    assert resolver.exists("text=back, please")
    assert not resolver.exists("text=Sign out")
    page.inner_text.assert_called_with("body")


def test_exists_swallows_playwright_errors():
    page = MagicMock()
    page.evaluate.side_effect = PlaywrightError("SyntaxError: invalid xpath")

    assert SelectorResolver(page).exists("xpath=//[") is False
