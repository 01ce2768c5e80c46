"""
================================================================================
Page Objects
================================================================================

Each page object wraps a PageContext for its locator file and exposes the
page's flows (login, search, logout, ...).

Author: Automation Team
License: MIT
================================================================================
"""

from .login_page import LoginPage
from .home_page import HomePage

__all__ = [
    "LoginPage",
    "HomePage",
]
