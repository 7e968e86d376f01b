"""Utility functions for lightform.

This module provides utility functions including:

- Logging setup and configuration
- Per-run diagnostics and statistics
"""

from lightform.utils.logging import (
    RunLogger,
    RunStats,
    configure_logging,
)

__all__ = [
    "RunLogger",
    "RunStats",
    "configure_logging",
]
