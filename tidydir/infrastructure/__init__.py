"""tidydir Infrastructure Layer.

This layer provides services used by the command layer:
- ConfigManager: Layered YAML configuration, path expansion, RuleSet build
- Logger: Structured logging system
"""

from .config_manager import (
    ConfigManager,
    ConfigSource,
    Settings,
    default_config_path,
    write_default_config,
)
from .logger import Logger, LogLevel, get_logger, set_global_logger

__all__ = [
    # Logger exports
    "Logger",
    "LogLevel",
    "get_logger",
    "set_global_logger",
    # ConfigManager exports
    "ConfigSource",
    "ConfigManager",
    "Settings",
    "default_config_path",
    "write_default_config",
]
