#!/usr/bin/env python3

"""
Configuration Schema Definitions.

Type-safe configuration schemas with validation for the E2E harness. Each
section is a dataclass that validates itself in ``__post_init__``; the
combined ``ConfigSchema`` adds cross-section checks in ``validate()``.

Target URLs and credentials have no defaults: the gateway hosts under test
are supplied per environment and never hardcoded.
"""

import logging
from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)

SUPPORTED_BROWSERS = ("chrome", "firefox", "edge")
VALID_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
MAX_PROBE_TIMEOUT = 2.0


class EnvironmentType(Enum):
    """Environment types for configuration."""

    DEVELOPMENT = "development"
    TESTING = "testing"
    STAGING = "staging"
    CI = "ci"


def _is_http_url(value: str) -> bool:
    return value.startswith(("http://", "https://"))


@dataclass
class SeleniumConfig:
    """Selenium/WebDriver configuration schema."""

    browser: str = "chrome"
    chrome_driver_path: Optional[Path] = None
    chrome_browser_path: Optional[Path] = None
    use_undetected_chrome: bool = False

    # Browser behavior
    headless_mode: bool = True
    window_width: int = 1920
    window_height: int = 1080
    ignore_tls_errors: bool = False
    extra_arguments: list[str] = field(default_factory=list)

    # Timeouts
    implicit_wait_ms: int = 0
    page_load_timeout: int = 30
    script_timeout: int = 30
    explicit_wait: int = 10
    probe_timeout: float = MAX_PROBE_TIMEOUT
    close_timeout: float = 5.0

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self.browser = self.browser.strip().lower()
        if self.browser not in SUPPORTED_BROWSERS:
            raise ValueError(f"browser must be one of {SUPPORTED_BROWSERS}, got '{self.browser}'")
        if self.window_width <= 0 or self.window_height <= 0:
            raise ValueError("window_width and window_height must be positive")
        if self.implicit_wait_ms < 0:
            raise ValueError("implicit_wait_ms must be non-negative")
        if self.page_load_timeout <= 0 or self.script_timeout <= 0:
            raise ValueError("page_load_timeout and script_timeout must be positive")
        if self.explicit_wait < 0:
            raise ValueError("explicit_wait must be non-negative")
        if not 0 < self.probe_timeout <= MAX_PROBE_TIMEOUT:
            raise ValueError(f"probe_timeout must be in (0, {MAX_PROBE_TIMEOUT}] seconds")
        if self.close_timeout <= 0:
            raise ValueError("close_timeout must be positive")
        if self.chrome_driver_path is not None:
            self.chrome_driver_path = Path(self.chrome_driver_path)
        if self.chrome_browser_path is not None:
            self.chrome_browser_path = Path(self.chrome_browser_path)
        self.extra_arguments = [arg for arg in self.extra_arguments if arg]

    @property
    def window_size(self) -> str:
        return f"{self.window_width},{self.window_height}"


@dataclass
class TargetConfig:
    """Externally hosted gateway pages and API under test."""

    base_url: str = ""
    login_path: str = ""
    payment_path: str = ""
    api_base_url: str = ""

    # Credentials come from the environment only
    username: Optional[str] = None
    password: Optional[str] = None
    merchant_id: Optional[str] = None
    api_token: Optional[str] = None

    verify_tls: bool = True
    api_timeout: int = 30

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        for name in ("base_url", "api_base_url"):
            value = getattr(self, name).strip()
            if value and not _is_http_url(value):
                raise ValueError(f"{name} must start with http:// or https://")
            setattr(self, name, value.rstrip("/"))
        if self.api_timeout <= 0:
            raise ValueError("api_timeout must be positive")

    @property
    def ui_configured(self) -> bool:
        return bool(self.base_url)

    @property
    def api_configured(self) -> bool:
        return bool(self.api_base_url)

    @property
    def has_credentials(self) -> bool:
        return bool(self.username and self.password)

    def page_url(self, path: str) -> str:
        """Join a page path onto the base URL."""
        if not path:
            return self.base_url
        if _is_http_url(path):
            return path
        return f"{self.base_url}/{path.lstrip('/')}"

    @property
    def login_url(self) -> str:
        return self.page_url(self.login_path)

    @property
    def payment_url(self) -> str:
        return self.page_url(self.payment_path)


@dataclass
class ReportingConfig:
    """Screenshot and report output locations."""

    results_dir: Path = Path("test-results")
    screenshots_subdir: str = "screenshots"
    report_file: Path = Path("test-report.html")
    json_results_file: Optional[Path] = Path("test-results/results.json")
    screenshot_on_pass: bool = False
    report_title: str = "Gateway E2E Test Report"

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self.results_dir = Path(self.results_dir)
        self.report_file = Path(self.report_file)
        if self.json_results_file is not None:
            self.json_results_file = Path(self.json_results_file)
        if not self.screenshots_subdir or Path(self.screenshots_subdir).is_absolute():
            raise ValueError("screenshots_subdir must be a relative directory name")
        if self.report_file.suffix.lower() not in {".html", ".htm"}:
            raise ValueError("report_file must be an .html file")

    @property
    def screenshots_dir(self) -> Path:
        return self.results_dir / self.screenshots_subdir


@dataclass
class RunConfig:
    """Test run behavior."""

    max_test_retries: int = 0
    retry_delay: float = 1.0
    groups: list[str] = field(default_factory=list)
    run_live_suites: bool = False

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        if self.max_test_retries < 0:
            raise ValueError("max_test_retries must be non-negative")
        if self.retry_delay < 0:
            raise ValueError("retry_delay must be non-negative")
        self.groups = [g.strip().lower() for g in self.groups if g and g.strip()]


@dataclass
class LoggingConfig:
    """Logging configuration schema."""

    log_level: str = "INFO"
    log_file: Path = Path("Logs/e2e.log")
    enable_file_logging: bool = True
    max_log_size_mb: int = 10
    backup_count: int = 5

    def __post_init__(self) -> None:
        """Validate configuration after initialization."""
        self.log_level = self.log_level.upper()
        if self.log_level not in VALID_LOG_LEVELS:
            raise ValueError(f"log_level must be one of {VALID_LOG_LEVELS}")
        self.log_file = Path(self.log_file)
        if self.max_log_size_mb <= 0:
            raise ValueError("max_log_size_mb must be positive")
        if self.backup_count < 0:
            raise ValueError("backup_count must be non-negative")


_SECTIONS: dict[str, type] = {
    "selenium": SeleniumConfig,
    "target": TargetConfig,
    "reporting": ReportingConfig,
    "run": RunConfig,
    "logging": LoggingConfig,
}


@dataclass
class ConfigSchema:
    """Main configuration schema that combines all sub-schemas."""

    environment: str = EnvironmentType.DEVELOPMENT.value
    debug_mode: bool = False

    selenium: SeleniumConfig = field(default_factory=SeleniumConfig)
    target: TargetConfig = field(default_factory=TargetConfig)
    reporting: ReportingConfig = field(default_factory=ReportingConfig)
    run: RunConfig = field(default_factory=RunConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self) -> None:
        valid = {e.value for e in EnvironmentType}
        if self.environment not in valid:
            raise ValueError(f"environment must be one of {sorted(valid)}")

    def to_dict(self) -> dict[str, Any]:
        """Convert configuration to dictionary with paths as strings."""

        def _plain(value: Any) -> Any:
            if isinstance(value, Path):
                return str(value)
            if isinstance(value, dict):
                return {k: _plain(v) for k, v in value.items()}
            if isinstance(value, list):
                return [_plain(v) for v in value]
            return value

        data = _plain(asdict(self))
        for key in ("username", "password", "api_token"):
            if data["target"].get(key):
                data["target"][key] = "***"
        return data

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "ConfigSchema":
        """Create configuration from dictionary."""
        sections = {name: schema(**data.get(name, {})) for name, schema in _SECTIONS.items()}
        main_data = {k: v for k, v in data.items() if k not in _SECTIONS}
        return cls(**sections, **main_data)

    def validate(self) -> list[str]:
        """Cross-section checks; returns a list of problems."""
        errors: list[str] = []
        if self.environment == EnvironmentType.CI.value and not self.selenium.headless_mode:
            errors.append("selenium.headless_mode must be enabled in the ci environment")
        if self.run.run_live_suites and not (self.target.ui_configured or self.target.api_configured):
            errors.append("run.run_live_suites requires target.base_url or target.api_base_url")
        if self.selenium.use_undetected_chrome and self.selenium.browser != "chrome":
            errors.append("selenium.use_undetected_chrome is only valid with the chrome browser")
        return errors


__all__ = [
    "MAX_PROBE_TIMEOUT",
    "SUPPORTED_BROWSERS",
    "ConfigSchema",
    "EnvironmentType",
    "LoggingConfig",
    "ReportingConfig",
    "RunConfig",
    "SeleniumConfig",
    "TargetConfig",
]
