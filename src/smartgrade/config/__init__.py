"""
Configuration module.

Handles loading of application settings and grading defaults.
"""

from .loader import ConfigLoader
from .models import AppConfig, ExportSettings, GradingDefaults, LoggingSettings

__all__ = [
    "ConfigLoader",
    "AppConfig",
    "GradingDefaults",
    "ExportSettings",
    "LoggingSettings",
]
