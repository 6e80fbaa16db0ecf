"""
Profile engine configuration data structures.

Defines the tunable numeric thresholds of the vertical profile engine:
the near-zero guard used by the kernel and column transforms, the WMO
tropopause criteria and the regridding behaviour used by the collocation
driven smoothing.
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Union

import yaml

from vprofile.utils.constants import (
    EPSILON,
    TROPOPAUSE_LAPSE_RATE,
    TROPOPAUSE_WINDOW_HEIGHT,
    TROPOPAUSE_MAX_PRESSURE,
    TROPOPAUSE_MIN_PRESSURE,
)

logger = logging.getLogger(__name__)


@dataclass
class NumericsConfig:
    """Numeric guard settings.

    Attributes:
        epsilon: Layer heights and air densities below this value are treated
            as zero (the affected kernel rows/columns are zeroed)
    """
    epsilon: float = EPSILON


@dataclass
class TropopauseConfig:
    """WMO tropopause criteria.

    Attributes:
        lapse_rate_threshold: Lapse rate [K/m] at or below which a level qualifies
        window_height: Height [m] above a candidate level over which the
            average lapse rate must also stay below the threshold
        max_pressure: Levels at higher pressure [Pa] are skipped
        min_pressure: The scan stops once pressure [Pa] drops to this value
    """
    lapse_rate_threshold: float = TROPOPAUSE_LAPSE_RATE
    window_height: float = TROPOPAUSE_WINDOW_HEIGHT
    max_pressure: float = TROPOPAUSE_MAX_PRESSURE
    min_pressure: float = TROPOPAUSE_MIN_PRESSURE


@dataclass
class RegridConfig:
    """Vertical regridding behaviour.

    Attributes:
        log_pressure: Interpolate in log space when the axis is pressure-like
        interval_partial_columns: Regrid partial column profiles by layer
            overlap (mass conserving) when grid bounds are available
    """
    log_pressure: bool = True
    interval_partial_columns: bool = True


@dataclass
class ProfileConfig:
    """Complete engine configuration.

    Example YAML input:
        numerics:
          epsilon: 1.0e-10
        tropopause:
          lapse_rate_threshold: 0.002
          window_height: 2000
        regrid:
          log_pressure: true
    """
    numerics: NumericsConfig = field(default_factory=NumericsConfig)
    tropopause: TropopauseConfig = field(default_factory=TropopauseConfig)
    regrid: RegridConfig = field(default_factory=RegridConfig)

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> "ProfileConfig":
        """Create ProfileConfig from a dictionary.

        Args:
            config_dict: Configuration dictionary; missing sections and keys
                fall back to their defaults

        Returns:
            ProfileConfig instance
        """
        config_dict = config_dict or {}

        num_dict = config_dict.get("numerics", {})
        numerics = NumericsConfig(
            epsilon=float(num_dict.get("epsilon", EPSILON)),
        )

        trop_dict = config_dict.get("tropopause", {})
        tropopause = TropopauseConfig(
            lapse_rate_threshold=float(trop_dict.get("lapse_rate_threshold", TROPOPAUSE_LAPSE_RATE)),
            window_height=float(trop_dict.get("window_height", TROPOPAUSE_WINDOW_HEIGHT)),
            max_pressure=float(trop_dict.get("max_pressure", TROPOPAUSE_MAX_PRESSURE)),
            min_pressure=float(trop_dict.get("min_pressure", TROPOPAUSE_MIN_PRESSURE)),
        )

        regrid_dict = config_dict.get("regrid", {})
        regrid = RegridConfig(
            log_pressure=bool(regrid_dict.get("log_pressure", True)),
            interval_partial_columns=bool(regrid_dict.get("interval_partial_columns", True)),
        )

        return cls(numerics=numerics, tropopause=tropopause, regrid=regrid)

    @classmethod
    def from_json(cls, json_path: Union[str, Path]) -> "ProfileConfig":
        """Load configuration from a JSON file."""
        with open(json_path, 'r') as f:
            config_dict = json.load(f)
        return cls.from_dict(config_dict)

    @classmethod
    def from_yaml(cls, yaml_path: Union[str, Path]) -> "ProfileConfig":
        """Load configuration from a YAML file."""
        with open(yaml_path, 'r') as f:
            config_dict = yaml.safe_load(f)
        return cls.from_dict(config_dict)

    def to_dict(self) -> Dict[str, Any]:
        """Convert configuration to a nested dictionary."""
        return {
            "numerics": {
                "epsilon": self.numerics.epsilon,
            },
            "tropopause": {
                "lapse_rate_threshold": self.tropopause.lapse_rate_threshold,
                "window_height": self.tropopause.window_height,
                "max_pressure": self.tropopause.max_pressure,
                "min_pressure": self.tropopause.min_pressure,
            },
            "regrid": {
                "log_pressure": self.regrid.log_pressure,
                "interval_partial_columns": self.regrid.interval_partial_columns,
            },
        }

    def to_json(self, json_path: Union[str, Path], indent: int = 2) -> None:
        """Save configuration to a JSON file."""
        with open(json_path, 'w') as f:
            json.dump(self.to_dict(), f, indent=indent)

    def to_yaml(self, yaml_path: Union[str, Path]) -> None:
        """Save configuration to a YAML file."""
        with open(yaml_path, 'w') as f:
            yaml.dump(self.to_dict(), f, default_flow_style=False, sort_keys=False)

    def validate(self) -> List[str]:
        """Validate configuration parameters.

        Returns:
            List of validation error messages (empty if valid)
        """
        errors = []

        if self.numerics.epsilon <= 0:
            errors.append("epsilon must be positive")

        if self.tropopause.lapse_rate_threshold <= 0:
            errors.append("tropopause lapse rate threshold must be positive")
        if self.tropopause.window_height <= 0:
            errors.append("tropopause window height must be positive")
        if self.tropopause.min_pressure >= self.tropopause.max_pressure:
            errors.append("tropopause min_pressure must be less than max_pressure")

        return errors


def load_config(path: Union[str, Path]) -> ProfileConfig:
    """
    Load engine configuration from YAML or JSON file.

    Parameters
    ----------
    path : str or Path
        Path to configuration file (.yaml, .yml, or .json)

    Returns
    -------
    config : ProfileConfig
        Loaded configuration

    Raises
    ------
    FileNotFoundError
        If configuration file doesn't exist
    ValueError
        If file format is not supported or the configuration is invalid
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    suffix = path.suffix.lower()

    if suffix in ('.yaml', '.yml'):
        config = ProfileConfig.from_yaml(path)
    elif suffix == '.json':
        config = ProfileConfig.from_json(path)
    else:
        raise ValueError(f"Unsupported file format: {suffix}. Use .yaml, .yml, or .json")

    errors = config.validate()
    for error in errors:
        logger.warning(f"Configuration validation error: {error}")
    if errors:
        raise ValueError(f"Invalid configuration in {path}: {'; '.join(errors)}")

    logger.info(f"Loaded profile configuration from {path}")
    return config
