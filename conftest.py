"""
Repository-level pytest configuration (showcase-safe).

Why this exists:
  - Provide safe defaults for demo environments (no secrets embedded)

Important:
  Values below are placeholders. Real projects should load secrets from a
  secure secret manager in CI/CD.
"""

from __future__ import annotations

import os
from typing import Generator

import pytest


@pytest.fixture(scope="session", autouse=True)
def _demo_safe_env_defaults() -> Generator[None, None, None]:
    """
    Set demo-safe environment defaults if not already provided by the user/CI.
    """
    defaults = {
        # UI
        "UI_USERNAME": "demo_user",
        "UI_PASSWORD": "demo_password",
    }

    for k, v in defaults.items():
        os.environ.setdefault(k, v)

    yield
