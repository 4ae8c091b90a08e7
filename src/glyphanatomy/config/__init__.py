"""Configuration management for glyphanatomy.

This module provides configuration management using Pydantic models.
Detection tuning is read-only and loaded once per process.

Key classes:
- DetectionConfig: Numeric tuning table for every detector
- GeometryConfig, ScanConfig: Shared primitive settings
- StemConfig, BarConfig, SerifConfig, CavityConfig, ConvergenceConfig,
  WedgeConfig, TittleConfig, TerminalConfig, StrokeConfig: Per-family settings
- ExtractorConfig: Segment extraction settings
- LoggingConfig: Logging settings
- AnatomySettings: Main application settings
"""

from glyphanatomy.config.settings import (
    AnatomySettings,
    BarConfig,
    CavityConfig,
    ConvergenceConfig,
    DetectionConfig,
    ExtractorConfig,
    GeometryConfig,
    LoggingConfig,
    ScanConfig,
    SerifConfig,
    StemConfig,
    StrokeConfig,
    TerminalConfig,
    TittleConfig,
    WedgeConfig,
    get_default_config,
    get_default_settings,
    load_detection_config,
)

__all__ = [
    "AnatomySettings",
    "BarConfig",
    "CavityConfig",
    "ConvergenceConfig",
    "DetectionConfig",
    "ExtractorConfig",
    "GeometryConfig",
    "LoggingConfig",
    "ScanConfig",
    "SerifConfig",
    "StemConfig",
    "StrokeConfig",
    "TerminalConfig",
    "TittleConfig",
    "WedgeConfig",
    "get_default_config",
    "get_default_settings",
    "load_detection_config",
]
