"""
Utility modules for stablematch.

This package contains shared utilities used across the application:
- config: Configuration management
- logger: Logging infrastructure
- constants: Application-wide constants
"""

from stablematch.utils.config import (
    AppSettings,
    LoggingSettings,
    MatchingSettings,
    SolverSettings,
    get_settings,
    reload_settings,
)
from stablematch.utils.constants import (
    APP_NAME,
    APP_DISPLAY_NAME,
    VERSION,
    DEFAULT_FUNC,
    MatchingProblemType,
    RequirementType,
)
from stablematch.utils.logger import (
    setup_logging,
    get_logger,
    LoggerMixin,
)

__all__ = [
    # Config
    "AppSettings",
    "LoggingSettings",
    "MatchingSettings",
    "SolverSettings",
    "get_settings",
    "reload_settings",
    # Constants
    "APP_NAME",
    "APP_DISPLAY_NAME",
    "VERSION",
    "DEFAULT_FUNC",
    "MatchingProblemType",
    "RequirementType",
    # Logger
    "setup_logging",
    "get_logger",
    "LoggerMixin",
]
