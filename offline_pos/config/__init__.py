"""
Configuration for the offline POS cache.
"""

from .config_manager import (
    CONFIG_DIR_ENV,
    ConfigManager,
    get_config_manager,
    reset_config_manager,
)

__all__ = [
    "CONFIG_DIR_ENV",
    "ConfigManager",
    "get_config_manager",
    "reset_config_manager",
]
