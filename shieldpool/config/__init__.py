"""
Configuration Module
====================

Centralized configuration management using Pydantic Settings.
Loads from environment variables with type validation and defaults.

Usage:
    from shieldpool.config import settings

    print(settings.environment)
    print(settings.pool.tree_depth)
"""

from shieldpool.config.settings import (
    Environment,
    LogLevel,
    PoolSettings,
    Settings,
    get_settings,
)


# Global settings instance (singleton)
settings = get_settings()

__all__ = [
    "Settings",
    "PoolSettings",
    "get_settings",
    "settings",
    "Environment",
    "LogLevel",
]
