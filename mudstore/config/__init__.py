"""
Configuration module for mudstore.

This module provides type-safe, validated configuration using Pydantic BaseSettings.

Usage:
    from mudstore.config import get_config

    config = get_config()
    logger.info("Storage configuration", data_dir=str(config.storage.data_dir))
"""

import sys
import threading
from functools import lru_cache
from os import getenv

from .models import AppConfig, LoggingConfig, StorageConfig

__all__ = ["get_config", "reset_config", "AppConfig", "LoggingConfig", "StorageConfig"]

# Module-level config cache
_config_instance = None
_config_lock = threading.Lock()


def _is_test_mode() -> bool:
    """
    Detect if running in test environment.

    Returns:
        bool: True if running under pytest, False otherwise
    """
    if "pytest" in sys.modules:
        return True

    if getenv("PYTEST_CURRENT_TEST"):
        return True

    return False


@lru_cache(maxsize=1)
def _get_config_cached() -> AppConfig:
    """
    Production config loader with caching.

    Returns:
        AppConfig: Cached application configuration
    """
    global _config_instance  # pylint: disable=global-statement  # Reason: thread-safe singleton
    with _config_lock:
        if _config_instance is None:
            _config_instance = AppConfig()
    return _config_instance


def get_config() -> AppConfig:
    """
    Get application configuration (singleton in production, fresh in tests).

    Configuration is loaded from environment variables and the .env file.

    Returns:
        AppConfig: The application configuration

    Raises:
        ValidationError: If configuration is invalid
    """
    if _is_test_mode():
        return AppConfig()
    return _get_config_cached()


def reset_config() -> None:
    """
    Reset the configuration cache.

    Primarily used by tests to force a configuration reload.
    """
    global _config_instance  # pylint: disable=global-statement  # Reason: thread-safe singleton

    with _config_lock:
        _get_config_cached.cache_clear()
        _config_instance = None
