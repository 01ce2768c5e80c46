"""
================================================================================
Common Utilities
================================================================================

Shared configuration and logging setup.

Usage:
    from locatorsuite.common import ConfigLoader, init_logger

    init_logger()
    root = ConfigLoader().get_path("locators.root")

================================================================================
"""

from .config_loader import ConfigLoader, ConfigurationError
from .log_config import init_logger, reset_logger

__all__ = [
    "ConfigLoader",
    "ConfigurationError",
    "init_logger",
    "reset_logger",
]
