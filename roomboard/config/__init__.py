"""Configuration package."""

from roomboard.config.logging import configure_logging, get_logger
from roomboard.config.settings import Settings, settings

__all__ = ["settings", "Settings", "configure_logging", "get_logger"]
