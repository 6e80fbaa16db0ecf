"""
Configuration for the vertical profile engine.

This module provides:
- ProfileConfig: Data class holding numeric, tropopause and regrid settings
- load_config: Loading and validation of YAML/JSON configuration files
"""

from vprofile.config.settings import (
    ProfileConfig,
    NumericsConfig,
    TropopauseConfig,
    RegridConfig,
    load_config,
)

__all__ = [
    "ProfileConfig",
    "NumericsConfig",
    "TropopauseConfig",
    "RegridConfig",
    "load_config",
]
