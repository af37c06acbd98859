"""
Utility functions and helpers for the imbstream library.

This module provides:
- config: Configuration management
- file_utils: JSON file helpers used by the configuration layer
- logging: Logging utilities
- errors: Custom exception types
"""

from imbstream.utils.config import Config, get_config, set_global_config, load_config
from imbstream.utils.file_utils import ensure_dir, load_json, save_json
from imbstream.utils.logging import setup_logger, configure_from_config
from imbstream.utils.errors import (
    ImbStreamError,
    ConfigError,
    InvalidInputError,
    SchemaError,
    UnsupportedModeError,
    NumericDomainError,
    OversamplingLimitError
)

__all__ = [
    # Configuration
    "Config",
    "get_config",
    "set_global_config",
    "load_config",

    # File utilities
    "ensure_dir",
    "load_json",
    "save_json",

    # Logging utilities
    "setup_logger",
    "configure_from_config",

    # Error classes
    "ImbStreamError",
    "ConfigError",
    "InvalidInputError",
    "SchemaError",
    "UnsupportedModeError",
    "NumericDomainError",
    "OversamplingLimitError"
]
