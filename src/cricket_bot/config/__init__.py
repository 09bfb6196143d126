"""Configuration loading and validation."""

from .loader import load_config
from .schema import (
    BehaviorConfig,
    BotConfig,
    ContentConfig,
    DataConfig,
    LoggingConfig,
    MessengerConfig,
    ServerConfig,
)

__all__ = [
    # Loader
    "load_config",
    # Root config
    "BotConfig",
    # Sections
    "MessengerConfig",
    "ContentConfig",
    "DataConfig",
    "BehaviorConfig",
    "ServerConfig",
    "LoggingConfig",
]
