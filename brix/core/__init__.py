"""Ambient infrastructure: settings and logging."""

from .config import BrixSettings, DatabaseSettings, IntelligenceSettings, get_settings
from .logging_config import get_logger, setup_logging

__all__ = [
    "BrixSettings",
    "DatabaseSettings",
    "IntelligenceSettings",
    "get_settings",
    "get_logger",
    "setup_logging",
]
