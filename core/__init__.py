"""Core utilities and configuration for redis-scripts"""
from core.config import Settings, get_settings
from core.exceptions import (
    ConfigurationError,
    RedisScriptsError,
    ScriptLoadError,
    ScriptNotFoundError,
    ShaMismatchError,
)
from core.logging import get_logger

__all__ = [
    "Settings",
    "get_settings",
    "get_logger",
    "RedisScriptsError",
    "ScriptNotFoundError",
    "ShaMismatchError",
    "ScriptLoadError",
    "ConfigurationError",
]
