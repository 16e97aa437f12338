"""Configuration management module.

This module provides:
- Environment-based configuration with validation
- Component settings groups (backend service, storage, sync, notifications)
- Cached settings access via get_settings()
"""

from .settings import (
    ClusterServiceSettings,
    Environment,
    LogFormat,
    LogLevel,
    NotificationSettings,
    Settings,
    StorageSettings,
    SyncSettings,
    get_settings,
)

__all__ = [
    # Main settings
    "Settings",
    "get_settings",
    # Enums
    "Environment",
    "LogLevel",
    "LogFormat",
    # Component settings
    "ClusterServiceSettings",
    "StorageSettings",
    "SyncSettings",
    "NotificationSettings",
]
