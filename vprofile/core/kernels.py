"""
Averaging kernel transforms.

Conversions between partial-column and density averaging kernels (scaled by
layer thickness), between volume mixing ratio and number density averaging
kernels (scaled by the air number density), and the tropospheric /
stratospheric masking of column averaging kernels.

Every matrix conversion scales the rows by a per-level weight w_i and the
columns by its inverse 1/w_j. Where a weight is below epsilon the division is
replaced by zeroing the affected rows or columns.
"""

from typing import Optional

import numpy as np

from vprofile.config.settings import NumericsConfig
from vprofile.core.grid import as_bounds, as_profile
from vprofile.exceptions import InvalidArgumentError


def _as_square(avk, name: str) -> np.ndarray:
    avk = np.array(avk, dtype=np.float64)
    if avk.ndim != 2 or avk.shape[0] != avk.shape[1]:
        raise InvalidArgumentError(f"{name} should be a square {{vertical,vertical}} matrix "
                                   f"(got shape {tuple(avk.shape)})")
    return avk


def _layer_heights(altitude_bounds, num_levels: int) -> np.ndarray:
    bounds = as_bounds(altitude_bounds, num_levels, "altitude bounds")
    return np.abs(bounds[:, 1] - bounds[:, 0])


def _check_weights(weights: np.ndarray, num_levels: int, name: str) -> np.ndarray:
    if len(weights) != num_levels:
        raise InvalidArgumentError(f"{name} should have {num_levels} levels (got {len(weights)})")
    return weights


def _epsilon(epsilon: Optional[float], config: Optional[NumericsConfig]) -> float:
    if epsilon is not None:
        return epsilon
    return (config or NumericsConfig()).epsilon


def _divide_rows(matrix: np.ndarray, weights: np.ndarray, epsilon: float) -> np.ndarray:
    valid = np.abs(weights) >= epsilon
    safe = np.where(valid, weights, 1.0)
    return np.where(valid[:, None], matrix / safe[:, None], 0.0)


def _divide_columns(matrix: np.ndarray, weights: np.ndarray, epsilon: float) -> np.ndarray:
    valid = np.abs(weights) >= epsilon
    safe = np.where(valid, weights, 1.0)
    return np.where(valid[None, :], matrix / safe[None, :], 0.0)


def density_avk_from_partial_column_avk_and_altitude_bounds(
    partial_column_avk,
    altitude_bounds,
    epsilon: Optional[float] = None,
    config: Optional[NumericsConfig] = None,
) -> np.ndarray:
    """
    Convert a partial column AVK to a density AVK.

    A_density[i, j] = A_pc[i, j] * h_j / h_i, with h the layer thickness.
    Rows of layers thinner than epsilon become zero.

    Parameters
    ----------
    partial_column_avk : array_like
        Partial column AVK {vertical, vertical}
    altitude_bounds : array_like
        Lower and upper altitude [m] per level {vertical, 2}
    epsilon : float, optional
        Minimum layer thickness [m]
    config : NumericsConfig, optional
        Numeric settings supplying epsilon when it is not given

    Returns
    -------
    np.ndarray
        Density AVK {vertical, vertical}
    """
    epsilon = _epsilon(epsilon, config)
    avk = _as_square(partial_column_avk, "partial column avk")
    height = _layer_heights(altitude_bounds, avk.shape[0])

    density_avk = _divide_rows(avk, height, epsilon)
    return density_avk * height[None, :]


def partial_column_avk_from_density_avk_and_altitude_bounds(
    density_avk,
    altitude_bounds,
    epsilon: Optional[float] = None,
    config: Optional[NumericsConfig] = None,
) -> np.ndarray:
    """
    Convert a density AVK to a partial column AVK.

    A_pc[i, j] = A_density[i, j] * h_i / h_j, with h the layer thickness.
    Columns of layers thinner than epsilon become zero.

    Parameters
    ----------
    density_avk : array_like
        Density AVK {vertical, vertical}
    altitude_bounds : array_like
        Lower and upper altitude [m] per level {vertical, 2}
    epsilon : float, optional
        Minimum layer thickness [m]
    config : NumericsConfig, optional
        Numeric settings supplying epsilon when it is not given

    Returns
    -------
    np.ndarray
        Partial column AVK {vertical, vertical}
    """
    epsilon = _epsilon(epsilon, config)
    avk = _as_square(density_avk, "density avk")
    height = _layer_heights(altitude_bounds, avk.shape[0])

    partial_column_avk = avk * height[:, None]
    return _divide_columns(partial_column_avk, height, epsilon)


def number_density_avk_from_volume_mixing_ratio_avk(
    volume_mixing_ratio_avk,
    number_density_air,
    epsilon: Optional[float] = None,
    config: Optional[NumericsConfig] = None,
) -> np.ndarray:
    """
    Convert a volume mixing ratio AVK to a number density AVK.

    A_nd[i, j] = A_vmr[i, j] * n_i / n_j, with n the air number density.
    Columns of levels with a near-zero air density become zero.

    Parameters
    ----------
    volume_mixing_ratio_avk : array_like
        Volume mixing ratio AVK {vertical, vertical}
    number_density_air : array_like
        Number density of air [molec/cm³] {vertical}
    epsilon : float, optional
        Minimum absolute air number density
    config : NumericsConfig, optional
        Numeric settings supplying epsilon when it is not given

    Returns
    -------
    np.ndarray
        Number density AVK {vertical, vertical}
    """
    epsilon = _epsilon(epsilon, config)
    avk = _as_square(volume_mixing_ratio_avk, "volume mixing ratio avk")
    density = _check_weights(as_profile(number_density_air, "number density of air"), avk.shape[0],
                             "number density of air")

    number_density_avk = avk * density[:, None]
    return _divide_columns(number_density_avk, density, epsilon)


def volume_mixing_ratio_avk_from_number_density_avk(
    number_density_avk,
    number_density_air,
    epsilon: Optional[float] = None,
    config: Optional[NumericsConfig] = None,
) -> np.ndarray:
    """
    Convert a number density AVK to a volume mixing ratio AVK.

    A_vmr[i, j] = A_nd[i, j] * n_j / n_i, with n the air number density.
    Rows of levels with a near-zero air density become zero.

    Parameters
    ----------
    number_density_avk : array_like
        Number density AVK {vertical, vertical}
    number_density_air : array_like
        Number density of air [molec/cm³] {vertical}
    epsilon : float, optional
        Minimum absolute air number density
    config : NumericsConfig, optional
        Numeric settings supplying epsilon when it is not given

    Returns
    -------
    np.ndarray
        Volume mixing ratio AVK {vertical, vertical}
    """
    epsilon = _epsilon(epsilon, config)
    avk = _as_square(number_density_avk, "number density avk")
    density = _check_weights(as_profile(number_density_air, "number density of air"), avk.shape[0],
                             "number density of air")

    volume_mixing_ratio_avk = _divide_rows(avk, density, epsilon)
    return volume_mixing_ratio_avk * density[None, :]


def column_avk_from_partial_column_avk(partial_column_avk) -> np.ndarray:
    """Sum the rows of a 2D partial column AVK into a 1D column AVK."""
    avk = _as_square(partial_column_avk, "partial column avk")
    return avk.sum(axis=0)


def tropospheric_column_avk_from_column_avk(column_avk, altitude_bounds,
                                            tropopause_altitude: float) -> np.ndarray:
    """
    Restrict a column AVK to the troposphere.

    Levels whose lower bound lies at or above the tropopause are set to zero.

    Parameters
    ----------
    column_avk : array_like
        Column AVK {vertical}
    altitude_bounds : array_like
        Lower and upper altitude [m] per level {vertical, 2}
    tropopause_altitude : float
        Altitude of the tropopause [m]

    Returns
    -------
    np.ndarray
        Tropospheric column AVK {vertical}
    """
    column_avk = as_profile(column_avk, "column avk")
    bounds = as_bounds(altitude_bounds, len(column_avk), "altitude bounds")
    return np.where(bounds[:, 0] < tropopause_altitude, column_avk, 0.0)


def stratospheric_column_avk_from_column_avk(column_avk, altitude_bounds,
                                             tropopause_altitude: float) -> np.ndarray:
    """
    Restrict a column AVK to the stratosphere.

    Levels whose upper bound lies at or below the tropopause are set to zero.

    Parameters
    ----------
    column_avk : array_like
        Column AVK {vertical}
    altitude_bounds : array_like
        Lower and upper altitude [m] per level {vertical, 2}
    tropopause_altitude : float
        Altitude of the tropopause [m]

    Returns
    -------
    np.ndarray
        Stratospheric column AVK {vertical}
    """
    column_avk = as_profile(column_avk, "column avk")
    bounds = as_bounds(altitude_bounds, len(column_avk), "altitude bounds")
    return np.where(bounds[:, 1] <= tropopause_altitude, 0.0, column_avk)
