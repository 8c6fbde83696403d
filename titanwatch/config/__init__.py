"""Configuration package for runtime settings and startup validation."""

from .logging_setup import config_configure_logging
from .settings import SettingsLoadError, WatchSettings, config_load_settings

__all__ = ["SettingsLoadError", "WatchSettings", "config_configure_logging", "config_load_settings"]
