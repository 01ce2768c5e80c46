"""
================================================================================
Root Pytest Configuration
================================================================================

Registers project-wide markers, tags tests by directory and initialises
logging once per session.

================================================================================
"""

import os

import pytest

from locatorsuite.common.log_config import init_logger


def pytest_configure(config):
    """Configure pytest with project-wide custom markers."""

    # Priority markers
    config.addinivalue_line(
        "markers", "P0: Critical priority tests - must pass for deployment"
    )
    config.addinivalue_line(
        "markers", "P1: High priority tests - important functionality"
    )
    config.addinivalue_line(
        "markers", "P2: Medium priority tests - edge cases and minor features"
    )
    config.addinivalue_line(
        "markers", "P3: Low priority tests - extensive validation"
    )

    # Test type markers
    config.addinivalue_line(
        "markers", "smoke: Quick verification tests"
    )
    config.addinivalue_line(
        "markers", "unit: Framework unit tests (no browser, no network)"
    )

    # Domain markers
    config.addinivalue_line(
        "markers", "api: API-specific tests"
    )
    config.addinivalue_line(
        "markers", "ui: UI-specific tests"
    )

    # Feature markers
    config.addinivalue_line(
        "markers", "auth: Tests related to authentication"
    )

    init_logger()


def pytest_collection_modifyitems(config, items):
    """Add directory-based markers to collected tests."""
    for item in items:
        path = str(item.fspath)
        if "api_testing" in path:
            item.add_marker(pytest.mark.api)
        if "ui_testing" in path:
            item.add_marker(pytest.mark.ui)
        if f"{os.sep}unit{os.sep}" in path:
            item.add_marker(pytest.mark.unit)


def pytest_report_header(config):
    """Add custom header to pytest output."""
    return [
        "",
        "=" * 60,
        "YAML Locator Test Suite",
        "=" * 60,
        "",
    ]
