"""
Column integration of partial column profiles.

Partial column profiles are summed into total, tropospheric and
stratospheric columns. NaN levels are ignored; a column only becomes NaN when
no level contributed. The layer that contains the tropopause is split: by a
linear fraction for altitude bounds, and by a log-pressure fraction for
pressure bounds (pressure decays roughly exponentially with height).
"""

import numpy as np
from numba import jit

from vprofile.core.grid import as_bounds, as_profile


# =============================================================================
# Numba-accelerated sums
# =============================================================================

@jit(nopython=True, cache=True)
def _column(partial_column):
    column = 0.0
    empty = True
    for k in range(len(partial_column)):
        if not np.isnan(partial_column[k]):
            column += partial_column[k]
            empty = False
    if empty:
        return np.nan
    return column


@jit(nopython=True, cache=True)
def _tropo_column_altitude(partial_column, bounds, tropopause):
    column = 0.0
    empty = True
    for k in range(len(partial_column)):
        if np.isnan(partial_column[k]):
            continue
        lower = bounds[k, 0]
        upper = bounds[k, 1]
        if lower < tropopause:
            if upper <= tropopause:
                column += partial_column[k]
            else:
                column += partial_column[k] * (tropopause - lower) / (upper - lower)
            empty = False
    if empty:
        return np.nan
    return column


@jit(nopython=True, cache=True)
def _strato_column_altitude(partial_column, bounds, tropopause):
    column = 0.0
    empty = True
    for k in range(len(partial_column)):
        if np.isnan(partial_column[k]):
            continue
        lower = bounds[k, 0]
        upper = bounds[k, 1]
        if upper > tropopause:
            if lower >= tropopause:
                column += partial_column[k]
            else:
                column += partial_column[k] * (upper - tropopause) / (upper - lower)
            empty = False
    if empty:
        return np.nan
    return column


@jit(nopython=True, cache=True)
def _tropo_column_pressure(partial_column, bounds, tropopause):
    column = 0.0
    empty = True
    for k in range(len(partial_column)):
        if np.isnan(partial_column[k]):
            continue
        lower = bounds[k, 0]
        upper = bounds[k, 1]
        if lower > tropopause:
            if upper >= tropopause:
                column += partial_column[k]
            else:
                column += partial_column[k] * np.log(tropopause / lower) / np.log(upper / lower)
            empty = False
    if empty:
        return np.nan
    return column


@jit(nopython=True, cache=True)
def _strato_column_pressure(partial_column, bounds, tropopause):
    column = 0.0
    empty = True
    for k in range(len(partial_column)):
        if np.isnan(partial_column[k]):
            continue
        lower = bounds[k, 0]
        upper = bounds[k, 1]
        if upper < tropopause:
            if lower <= tropopause:
                column += partial_column[k]
            else:
                column += partial_column[k] * np.log(upper / tropopause) / np.log(upper / lower)
            empty = False
    if empty:
        return np.nan
    return column


# =============================================================================
# Public API
# =============================================================================

def profile_column_from_partial_column(partial_column) -> float:
    """
    Integrate a partial column profile into a total column.

    Parameters
    ----------
    partial_column : array_like
        Partial column profile [molec/m²]

    Returns
    -------
    float
        Column [molec/m²], NaN if all levels are NaN
    """
    return float(_column(as_profile(partial_column, "partial column profile")))


def profile_tropo_column_from_partial_column_and_altitude(partial_column, altitude_bounds,
                                                          tropopause_altitude: float) -> float:
    """
    Integrate the tropospheric part of a partial column profile.

    Parameters
    ----------
    partial_column : array_like
        Partial column profile [molec/m²]
    altitude_bounds : array_like
        Lower and upper altitude [m] per level, {vertical, 2}
    tropopause_altitude : float
        Altitude of the tropopause [m]

    Returns
    -------
    float
        Tropospheric column [molec/m²]
    """
    partial_column = as_profile(partial_column, "partial column profile")
    bounds = as_bounds(altitude_bounds, len(partial_column), "altitude bounds")
    return float(_tropo_column_altitude(partial_column, bounds, float(tropopause_altitude)))


def profile_strato_column_from_partial_column_and_altitude(partial_column, altitude_bounds,
                                                           tropopause_altitude: float) -> float:
    """
    Integrate the stratospheric part of a partial column profile.

    Parameters
    ----------
    partial_column : array_like
        Partial column profile [molec/m²]
    altitude_bounds : array_like
        Lower and upper altitude [m] per level, {vertical, 2}
    tropopause_altitude : float
        Altitude of the tropopause [m]

    Returns
    -------
    float
        Stratospheric column [molec/m²]
    """
    partial_column = as_profile(partial_column, "partial column profile")
    bounds = as_bounds(altitude_bounds, len(partial_column), "altitude bounds")
    return float(_strato_column_altitude(partial_column, bounds, float(tropopause_altitude)))


def profile_tropo_column_from_partial_column_and_pressure(partial_column, pressure_bounds,
                                                          tropopause_pressure: float) -> float:
    """
    Integrate the tropospheric part of a partial column profile using pressure bounds.

    Parameters
    ----------
    partial_column : array_like
        Partial column profile [molec/m²]
    pressure_bounds : array_like
        Lower and upper pressure [Pa] per level, {vertical, 2}
    tropopause_pressure : float
        Pressure at the tropopause [Pa]

    Returns
    -------
    float
        Tropospheric column [molec/m²]
    """
    partial_column = as_profile(partial_column, "partial column profile")
    bounds = as_bounds(pressure_bounds, len(partial_column), "pressure bounds")
    return float(_tropo_column_pressure(partial_column, bounds, float(tropopause_pressure)))


def profile_strato_column_from_partial_column_and_pressure(partial_column, pressure_bounds,
                                                           tropopause_pressure: float) -> float:
    """
    Integrate the stratospheric part of a partial column profile using pressure bounds.

    Parameters
    ----------
    partial_column : array_like
        Partial column profile [molec/m²]
    pressure_bounds : array_like
        Lower and upper pressure [Pa] per level, {vertical, 2}
    tropopause_pressure : float
        Pressure at the tropopause [Pa]

    Returns
    -------
    float
        Stratospheric column [molec/m²]
    """
    partial_column = as_profile(partial_column, "partial column profile")
    bounds = as_bounds(pressure_bounds, len(partial_column), "pressure bounds")
    return float(_strato_column_pressure(partial_column, bounds, float(tropopause_pressure)))
