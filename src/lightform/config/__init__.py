"""Configuration management for lightform.

This module provides configuration management using Pydantic models.
Configuration can be provided via CLI arguments or defaults.

Key classes:
- GeometryConfig: Kernel tolerances and trace step sizes
- LiteConfig: Lightening engine parameters and feature toggles
- LoggingConfig: Logging settings
- LightformSettings: Main application settings
"""

from lightform.config.settings import (
    GeometryConfig,
    LightformSettings,
    LiteConfig,
    LoggingConfig,
    get_default_settings,
)

__all__ = [
    "GeometryConfig",
    "LightformSettings",
    "LiteConfig",
    "LoggingConfig",
    "get_default_settings",
]
