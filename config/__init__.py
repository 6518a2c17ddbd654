"""
Configuration Package.

Schema-based configuration for the harness:
- ConfigManager: loads defaults, an optional JSON file and environment variables
- ConfigSchema: type-safe configuration sections with validation

Importing this package never reads the environment; call
``get_config_manager()`` for the shared, loaded configuration.
"""

from config.config_manager import ConfigManager, get_config_manager
from config.config_schema import (
    ConfigSchema,
    LoggingConfig,
    ReportingConfig,
    RunConfig,
    SeleniumConfig,
    TargetConfig,
)

__all__ = [
    "ConfigManager",
    "ConfigSchema",
    "LoggingConfig",
    "ReportingConfig",
    "RunConfig",
    "SeleniumConfig",
    "TargetConfig",
    "get_config_manager",
]
