"""Utility functions for glyphanatomy.

This module provides utility functions including:

- Logging setup and configuration
- Per-run detection statistics
"""

from glyphanatomy.utils.logging import (
    DetectionLogger,
    DetectionStats,
    configure_logging,
    get_logger,
)

__all__ = [
    "DetectionLogger",
    "DetectionStats",
    "configure_logging",
    "get_logger",
]
