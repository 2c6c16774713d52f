"""
Core module - Engineering foundation

Contains configuration, logging, HTTP client, errors and time utilities.
"""

from polyarb.core.config import Settings, get_settings, load_yaml_config
from polyarb.core.errors import (
    PolyarbError,
    ConfigurationError,
    ProviderError,
    FetchError,
    RateLimitError,
    EmptyResultError,
    PersistenceError,
    SnapshotNotFoundError,
)
from polyarb.core.logging import setup_logging, get_logger

__all__ = [
    "Settings",
    "get_settings",
    "load_yaml_config",
    "PolyarbError",
    "ConfigurationError",
    "ProviderError",
    "FetchError",
    "RateLimitError",
    "EmptyResultError",
    "PersistenceError",
    "SnapshotNotFoundError",
    "setup_logging",
    "get_logger",
]
