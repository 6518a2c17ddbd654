#!/usr/bin/env python3

"""
Configuration Manager.

Loads the harness configuration from three layers, later layers winning:

1. Schema defaults
2. An optional JSON configuration file
3. Environment variables (``.env`` is loaded first unless
   ``CONFIG_SKIP_DOTENV`` is set)

Invalid environment values are logged and ignored so a typo never hides the
rest of the configuration; schema violations raise ``ConfigurationError``.
"""

import copy
import json
import logging
import os
from pathlib import Path
from typing import Any, Optional, Union

from dotenv import load_dotenv

from config.config_schema import ConfigSchema, EnvironmentType, LoggingConfig, SeleniumConfig, TargetConfig
from core.exceptions import ConfigurationError

logger = logging.getLogger(__name__)

_TRUE_VALUES = {"true", "1", "yes", "on"}


class _ConfigManagerSingleton:
    """Container class for singleton instance to avoid global statement."""

    instance: Optional["ConfigManager"] = None


def get_config_manager(
    config_file: Optional[Union[str, Path]] = None,
    force_new: bool = False,
) -> "ConfigManager":
    """
    Get the shared ConfigManager instance.

    Args:
        config_file: Optional configuration file path (only used on first call)
        force_new: If True, create a new instance

    Returns:
        The shared ConfigManager instance
    """
    if force_new or _ConfigManagerSingleton.instance is None:
        _ConfigManagerSingleton.instance = ConfigManager(config_file=config_file)
    return _ConfigManagerSingleton.instance


class ConfigManager:
    """
    Configuration manager with type-safe schemas and validation.

    Usage:
        from config.config_manager import get_config_manager
        config = get_config_manager().get_config()
    """

    def __init__(
        self,
        config_file: Optional[Union[str, Path]] = None,
        auto_load: bool = True,
    ) -> None:
        skip_dotenv = os.getenv("CONFIG_SKIP_DOTENV", "").strip().lower()
        if skip_dotenv not in _TRUE_VALUES:
            load_dotenv()

        env_file = os.getenv("E2E_CONFIG_FILE")
        self.config_file = Path(config_file) if config_file else (Path(env_file) if env_file else None)
        self._config_cache: Optional[ConfigSchema] = None

        if auto_load:
            self.load_config()

    def load_config(self) -> ConfigSchema:
        """
        Load and validate configuration from all sources.

        Returns:
            Validated configuration schema

        Raises:
            ConfigurationError: If the merged configuration is invalid
        """
        config_data = self._get_default_config()

        if self.config_file is not None:
            config_data = self._merge_configs(config_data, self._load_config_file())

        config_data = self._merge_configs(config_data, self._load_environment_variables())

        try:
            config = ConfigSchema.from_dict(config_data)
        except (TypeError, ValueError) as e:
            logger.error(f"Failed to load configuration: {e}")
            raise ConfigurationError(f"Configuration loading failed: {e}") from e

        validation_errors = config.validate()
        if validation_errors:
            raise ConfigurationError(f"Configuration validation failed: {validation_errors}")

        self._config_cache = config
        logger.debug(f"Configuration loaded for environment: {config.environment}")
        return config

    def get_config(self) -> ConfigSchema:
        """Return the cached configuration, loading it on first use."""
        if self._config_cache is None:
            return self.load_config()
        return self._config_cache

    def reload(self) -> ConfigSchema:
        self._config_cache = None
        return self.load_config()

    def get_selenium_config(self) -> SeleniumConfig:
        return self.get_config().selenium

    def get_target_config(self) -> TargetConfig:
        return self.get_config().target

    def get_logging_config(self) -> LoggingConfig:
        return self.get_config().logging

    @staticmethod
    def _get_default_config() -> dict[str, Any]:
        return {"environment": "development"}

    def _load_config_file(self) -> dict[str, Any]:
        """Load a JSON configuration file; a missing file is a configuration error."""
        if self.config_file is None:
            raise ConfigurationError("No configuration file set")
        if not self.config_file.exists():
            raise ConfigurationError(f"Configuration file not found: {self.config_file}")
        if self.config_file.suffix.lower() != ".json":
            raise ConfigurationError(
                f"Unsupported configuration file format: {self.config_file.suffix}",
                recovery_hint="Use a .json configuration file",
            )
        try:
            with self.config_file.open(encoding="utf-8") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            raise ConfigurationError(f"Could not read configuration file {self.config_file}: {e}") from e
        if not isinstance(data, dict):
            raise ConfigurationError("Configuration file must contain a JSON object")
        logger.debug(f"Loaded configuration file: {self.config_file}")
        return data

    # --- Environment variables ---

    @staticmethod
    def _set_string_config(config: dict[str, Any], section: str, key: str, env_var: str) -> None:
        """Set a string configuration value from environment variable."""
        value = os.getenv(env_var)
        if value:
            config.setdefault(section, {})[key] = value.strip()

    @staticmethod
    def _set_int_config(config: dict[str, Any], section: str, key: str, env_var: str) -> None:
        """Set an integer configuration value from environment variable."""
        value = os.getenv(env_var)
        if value:
            try:
                config.setdefault(section, {})[key] = int(value)
            except ValueError:
                logger.warning(f"Invalid {env_var} value: {value}")

    @staticmethod
    def _set_float_config(config: dict[str, Any], section: str, key: str, env_var: str) -> None:
        """Set a float configuration value from environment variable."""
        value = os.getenv(env_var)
        if value:
            try:
                config.setdefault(section, {})[key] = float(value)
            except ValueError:
                logger.warning(f"Invalid {env_var} value: {value}")

    @staticmethod
    def _set_bool_config(config: dict[str, Any], section: str, key: str, env_var: str) -> None:
        """Set a boolean configuration value from environment variable."""
        value = os.getenv(env_var)
        if value is not None and value.strip():
            config.setdefault(section, {})[key] = value.strip().lower() in _TRUE_VALUES

    @staticmethod
    def _set_list_config(config: dict[str, Any], section: str, key: str, env_var: str) -> None:
        """Set a comma-separated list configuration value from environment variable."""
        value = os.getenv(env_var)
        if value:
            config.setdefault(section, {})[key] = [item.strip() for item in value.split(",") if item.strip()]

    def _load_main_config_from_env(self, config: dict[str, Any]) -> None:
        environment = os.getenv("ENVIRONMENT", "").strip().lower()
        if environment in {e.value for e in EnvironmentType}:
            config["environment"] = environment
        elif environment:
            logger.warning(f"Invalid ENVIRONMENT value: {environment}")
        debug = os.getenv("DEBUG_MODE")
        if debug is not None and debug.strip():
            config["debug_mode"] = debug.strip().lower() in _TRUE_VALUES

    def _load_selenium_config_from_env(self, config: dict[str, Any]) -> None:
        self._set_string_config(config, "selenium", "browser", "E2E_BROWSER")
        self._set_string_config(config, "selenium", "chrome_driver_path", "CHROME_DRIVER_PATH")
        self._set_string_config(config, "selenium", "chrome_browser_path", "CHROME_BROWSER_PATH")
        self._set_bool_config(config, "selenium", "use_undetected_chrome", "USE_UNDETECTED_CHROME")
        self._set_bool_config(config, "selenium", "headless_mode", "HEADLESS_MODE")
        self._set_bool_config(config, "selenium", "ignore_tls_errors", "IGNORE_TLS_ERRORS")
        self._set_list_config(config, "selenium", "extra_arguments", "BROWSER_EXTRA_ARGS")
        self._set_int_config(config, "selenium", "implicit_wait_ms", "IMPLICIT_WAIT_MS")
        self._set_int_config(config, "selenium", "page_load_timeout", "PAGE_LOAD_TIMEOUT")
        self._set_int_config(config, "selenium", "script_timeout", "SCRIPT_TIMEOUT")
        self._set_int_config(config, "selenium", "explicit_wait", "EXPLICIT_WAIT")
        self._set_float_config(config, "selenium", "probe_timeout", "SESSION_PROBE_TIMEOUT")
        self._set_float_config(config, "selenium", "close_timeout", "SESSION_CLOSE_TIMEOUT")

        window_size = os.getenv("WINDOW_SIZE")
        if window_size:
            try:
                width, height = (int(part) for part in window_size.split(","))
            except ValueError:
                logger.warning(f"Invalid WINDOW_SIZE value: {window_size}")
            else:
                config.setdefault("selenium", {}).update(window_width=width, window_height=height)

    def _load_target_config_from_env(self, config: dict[str, Any]) -> None:
        self._set_string_config(config, "target", "base_url", "GATEWAY_BASE_URL")
        self._set_string_config(config, "target", "login_path", "GATEWAY_LOGIN_PATH")
        self._set_string_config(config, "target", "payment_path", "GATEWAY_PAYMENT_PATH")
        self._set_string_config(config, "target", "api_base_url", "GATEWAY_API_BASE_URL")
        self._set_string_config(config, "target", "username", "GATEWAY_USERNAME")
        self._set_string_config(config, "target", "password", "GATEWAY_PASSWORD")
        self._set_string_config(config, "target", "merchant_id", "GATEWAY_MERCHANT_ID")
        self._set_string_config(config, "target", "api_token", "GATEWAY_API_TOKEN")
        self._set_bool_config(config, "target", "verify_tls", "GATEWAY_VERIFY_TLS")
        self._set_int_config(config, "target", "api_timeout", "GATEWAY_API_TIMEOUT")

    def _load_reporting_config_from_env(self, config: dict[str, Any]) -> None:
        self._set_string_config(config, "reporting", "results_dir", "RESULTS_DIR")
        self._set_string_config(config, "reporting", "report_file", "REPORT_FILE")
        self._set_string_config(config, "reporting", "json_results_file", "JSON_RESULTS_FILE")
        self._set_string_config(config, "reporting", "report_title", "REPORT_TITLE")
        self._set_bool_config(config, "reporting", "screenshot_on_pass", "SCREENSHOT_ON_PASS")

    def _load_run_config_from_env(self, config: dict[str, Any]) -> None:
        self._set_int_config(config, "run", "max_test_retries", "MAX_TEST_RETRIES")
        self._set_float_config(config, "run", "retry_delay", "TEST_RETRY_DELAY")
        self._set_list_config(config, "run", "groups", "TEST_GROUPS")
        self._set_bool_config(config, "run", "run_live_suites", "RUN_LIVE_SUITES")

    def _load_logging_config_from_env(self, config: dict[str, Any]) -> None:
        self._set_string_config(config, "logging", "log_level", "LOG_LEVEL")
        self._set_string_config(config, "logging", "log_file", "LOG_FILE")
        self._set_bool_config(config, "logging", "enable_file_logging", "ENABLE_FILE_LOGGING")
        self._set_int_config(config, "logging", "max_log_size_mb", "MAX_LOG_SIZE_MB")
        self._set_int_config(config, "logging", "backup_count", "LOG_BACKUP_COUNT")

    def _load_environment_variables(self) -> dict[str, Any]:
        """Load configuration from environment variables."""
        config: dict[str, Any] = {}
        self._load_main_config_from_env(config)
        self._load_selenium_config_from_env(config)
        self._load_target_config_from_env(config)
        self._load_reporting_config_from_env(config)
        self._load_run_config_from_env(config)
        self._load_logging_config_from_env(config)
        return config

    def _merge_configs(self, base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
        """
        Merge two configuration dictionaries.

        Args:
            base: Base configuration
            override: Override configuration

        Returns:
            Merged configuration
        """
        result = copy.deepcopy(base)

        for key, value in override.items():
            if key in result and isinstance(result[key], dict) and isinstance(value, dict):
                result[key] = self._merge_configs(result[key], value)
            else:
                result[key] = value

        return result


__all__ = ["ConfigManager", "get_config_manager"]
