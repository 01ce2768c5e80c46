"""
Locator-driven test suites package.

Keeps `locatorsuite` importable to support:
  - IDE navigation
  - programmatic runners (e.g., `run_tests.py`)
  - page objects and API helpers reused from other test repositories

All content is demo-safe and does not include production secrets.
"""

__version__ = "1.0.0"
