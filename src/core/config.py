#!/usr/bin/env python3
"""
Centralized Configuration Manager

Provides a single source of truth for all application configuration:
environment settings (with .env support) and the immutable per-run
load test configuration built from command line flags and the secret file.
"""

import logging
from argparse import Namespace
from dataclasses import dataclass
from datetime import date
from typing import Optional

import pytz

from .dates import parse_start_date
from .env_loader import get_env_var
from .exceptions import ConfigurationError
from .models.report import DEFAULT_METRIC_EXPRESSION, Secret

logger = logging.getLogger(__name__)

DEFAULT_START_DATE = "2019-09-25"
DEFAULT_QUOTA_USER = "fixed"
DEFAULT_REPORTING_ENDPOINT = "https://analyticsreporting.googleapis.com"
DEFAULT_TOKEN_URI = "https://oauth2.googleapis.com/token"


@dataclass(frozen=True)
class ApplicationConfig:
    """Environment-derived application configuration."""
    request_timeout: float = 30.0
    quota_user: str = DEFAULT_QUOTA_USER
    metric_expression: str = DEFAULT_METRIC_EXPRESSION
    reporting_endpoint: str = DEFAULT_REPORTING_ENDPOINT
    token_uri: str = DEFAULT_TOKEN_URI
    default_timezone: str = "UTC"

    # Logging
    log_level: str = "INFO"
    verbose_logging: bool = False


@dataclass(frozen=True)
class LoadTestConfig:
    """
    Immutable configuration of a single load test run.

    Constructed once at startup and passed explicitly into the driver.
    """
    view_id: str
    count: int = 5
    concurrency: int = 0
    interval: float = 1.0
    start_date: date = date(2019, 9, 25)
    walk_back: bool = False
    batch_window: float = 1.0
    metric_expression: str = DEFAULT_METRIC_EXPRESSION
    quota_user: str = DEFAULT_QUOTA_USER

    @property
    def is_sequential(self) -> bool:
        return self.concurrency == 0


class ConfigManager:
    """Manages application configuration with validation and environment loading."""

    def __init__(self):
        self._config: Optional[ApplicationConfig] = None

    def get_config(self, force_reload: bool = False) -> ApplicationConfig:
        """
        Get application configuration.

        Args:
            force_reload: Force reloading configuration from environment

        Returns:
            Application configuration object
        """
        if self._config is None or force_reload:
            self._config = self._build_config()
        return self._config

    def _build_config(self) -> ApplicationConfig:
        """Build configuration from environment variables."""
        try:
            request_timeout = float(get_env_var('REQUEST_TIMEOUT', '30'))
        except ValueError:
            raise ConfigurationError('REQUEST_TIMEOUT', "must be a number of seconds") from None

        config = ApplicationConfig(
            request_timeout=request_timeout,
            quota_user=get_env_var('QUOTA_USER', DEFAULT_QUOTA_USER),
            metric_expression=get_env_var('METRIC_EXPRESSION', DEFAULT_METRIC_EXPRESSION),
            reporting_endpoint=get_env_var('REPORTING_ENDPOINT', DEFAULT_REPORTING_ENDPOINT).rstrip('/'),
            token_uri=get_env_var('TOKEN_URI', DEFAULT_TOKEN_URI),
            default_timezone=get_env_var('DEFAULT_TIMEZONE', 'UTC'),
            log_level=get_env_var('LOG_LEVEL', 'INFO').upper(),
            verbose_logging=get_env_var('VERBOSE_LOGGING', 'false').lower() == 'true'
        )

        self._validate_config(config)
        return config

    def _validate_config(self, config: ApplicationConfig) -> None:
        """Validate configuration values."""
        errors = []

        if config.request_timeout <= 0:
            errors.append("REQUEST_TIMEOUT must be positive")

        if not config.reporting_endpoint.startswith(('https://', 'http://')):
            errors.append("REPORTING_ENDPOINT must be an http(s) URL")

        if not config.quota_user:
            errors.append("QUOTA_USER must not be empty")

        if config.default_timezone not in pytz.all_timezones_set:
            errors.append(f"DEFAULT_TIMEZONE {config.default_timezone!r} is not a known timezone")

        valid_log_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if config.log_level not in valid_log_levels:
            errors.append(f"LOG_LEVEL must be one of: {', '.join(valid_log_levels)}")

        if errors:
            raise ConfigurationError('environment', '; '.join(errors))

        logger.debug("Configuration validation passed")

    def update_logging(self, verbose: bool = False) -> None:
        """Configure logging based on current configuration."""
        config = self.get_config()

        level_name = 'DEBUG' if verbose else config.log_level
        numeric_level = getattr(logging, level_name)
        logging.getLogger().setLevel(numeric_level)

        if config.verbose_logging or verbose:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(filename)s:%(lineno)d - %(message)s'
        else:
            format_str = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

        for handler in logging.getLogger().handlers:
            handler.setLevel(numeric_level)
            handler.setFormatter(logging.Formatter(format_str, datefmt='%Y-%m-%d %H:%M:%S'))


def build_load_test_config(args: Namespace, secret: Secret, app_config: ApplicationConfig) -> LoadTestConfig:
    """
    Build the immutable run configuration from parsed flags and the secret.

    Raises:
        ConfigurationError: If a flag value is out of range
        InvalidDateError: If the start date cannot be parsed
    """
    count = getattr(args, 'count', 5)
    concurrency = getattr(args, 'concurrent', 0)
    interval = getattr(args, 'interval', 1.0)
    batch_window = getattr(args, 'batch_window', 1.0)

    if count is None or count < 1:
        raise ConfigurationError('count', f"must be at least 1, got {count}")
    if concurrency is None or concurrency < 0:
        raise ConfigurationError('concurrent', f"must be 0 (sequential) or positive, got {concurrency}")
    if interval is None or interval < 0:
        raise ConfigurationError('interval', f"must not be negative, got {interval}")
    if batch_window is None or batch_window < 0:
        raise ConfigurationError('batch_window', f"must not be negative, got {batch_window}")

    timezone_name = getattr(args, 'timezone', None) or app_config.default_timezone
    start_date = parse_start_date(getattr(args, 'start_date', None) or DEFAULT_START_DATE, timezone_name)

    return LoadTestConfig(
        view_id=secret.view_id,
        count=count,
        concurrency=concurrency,
        interval=interval,
        start_date=start_date,
        walk_back=bool(getattr(args, 'walk_back', False)),
        batch_window=batch_window,
        metric_expression=getattr(args, 'metric', None) or app_config.metric_expression,
        quota_user=getattr(args, 'quota_user', None) or app_config.quota_user
    )


# Global configuration manager instance
_config_manager: Optional[ConfigManager] = None


def get_config_manager() -> ConfigManager:
    """Get global configuration manager instance."""
    global _config_manager
    if _config_manager is None:
        _config_manager = ConfigManager()
    return _config_manager
