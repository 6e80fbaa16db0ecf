"""
Hydrostatic profile integrators.

Convert between pressure, altitude and geopotential height vertical
coordinates by integrating the hydrostatic equation level by level from the
surface upwards:

    dz = (R T / (M g)) d(ln p)

using the trapezoidal mean of temperature and molar mass of air between two
levels. The altitude integrators evaluate gravity per step (WGS84, latitude
and altitude dependent); the geopotential height integrators use the
standard gravity g0 throughout.

Profiles may be stored surface-first or top-of-atmosphere-first. The walk
always starts at the surface and results are written back in the storage
order of the input.
"""

import numpy as np
from numba import jit

from vprofile.core.grid import (
    as_bounds,
    as_profile,
    height_is_top_first,
    pressure_is_top_first,
    storage_index,
)
from vprofile.core.gravity import (
    gravity_from_latitude_and_altitude,
    normal_gravity_from_latitude,
)
from vprofile.exceptions import InvalidArgumentError
from vprofile.utils.constants import MOLAR_GAS_CONSTANT, STANDARD_GRAVITY


# =============================================================================
# Numba-accelerated level loops
# =============================================================================

@jit(nopython=True, cache=True)
def _altitude_from_pressure(pressure, temperature, molar_mass_air, surface_pressure,
                            surface_height, latitude):
    n = len(pressure)
    altitude = np.empty(n)
    top_first = pressure_is_top_first(pressure)

    prev_z = 0.0
    prev_p = 0.0
    prev_t = 0.0
    prev_m = 0.0
    for i in range(n):
        k = storage_index(i, n, top_first)
        p = pressure[k]
        t = temperature[k]
        m = molar_mass_air[k]

        if i == 0:
            g = normal_gravity_from_latitude(latitude)
            z = surface_height + 1e3 * (t / m) * (MOLAR_GAS_CONSTANT / g) * np.log(surface_pressure / p)
        else:
            g = gravity_from_latitude_and_altitude(latitude, prev_z)
            z = prev_z + 1e3 * ((prev_t + t) / (prev_m + m)) * (MOLAR_GAS_CONSTANT / g) * np.log(prev_p / p)

        altitude[k] = z
        prev_z = z
        prev_p = p
        prev_t = t
        prev_m = m

    return altitude


@jit(nopython=True, cache=True)
def _gph_from_pressure(pressure, temperature, molar_mass_air, surface_pressure, surface_height):
    n = len(pressure)
    gph = np.empty(n)
    top_first = pressure_is_top_first(pressure)
    scale = MOLAR_GAS_CONSTANT / STANDARD_GRAVITY

    prev_z = 0.0
    prev_p = 0.0
    prev_t = 0.0
    prev_m = 0.0
    for i in range(n):
        k = storage_index(i, n, top_first)
        p = pressure[k]
        t = temperature[k]
        m = molar_mass_air[k]

        if i == 0:
            z = surface_height + 1e3 * (t / m) * scale * np.log(surface_pressure / p)
        else:
            z = prev_z + 1e3 * ((prev_t + t) / (prev_m + m)) * scale * np.log(prev_p / p)

        gph[k] = z
        prev_z = z
        prev_p = p
        prev_t = t
        prev_m = m

    return gph


@jit(nopython=True, cache=True)
def _pressure_from_altitude(altitude, temperature, molar_mass_air, surface_pressure,
                            surface_height, latitude):
    n = len(altitude)
    pressure = np.empty(n)
    top_first = height_is_top_first(altitude)

    prev_z = 0.0
    prev_p = 0.0
    prev_t = 0.0
    prev_m = 0.0
    for i in range(n):
        k = storage_index(i, n, top_first)
        z = altitude[k]
        t = temperature[k]
        m = molar_mass_air[k]

        if i == 0:
            g = gravity_from_latitude_and_altitude(latitude, (z + surface_height) / 2)
            p = surface_pressure * np.exp(-1e-3 * (m / t) * (g / MOLAR_GAS_CONSTANT) * (z - surface_height))
        else:
            g = gravity_from_latitude_and_altitude(latitude, (prev_z + z) / 2)
            p = prev_p * np.exp(-1e-3 * ((prev_m + m) / (prev_t + t)) * (g / MOLAR_GAS_CONSTANT) * (z - prev_z))

        pressure[k] = p
        prev_z = z
        prev_p = p
        prev_t = t
        prev_m = m

    return pressure


@jit(nopython=True, cache=True)
def _pressure_from_gph(gph, temperature, molar_mass_air, surface_pressure, surface_height):
    n = len(gph)
    pressure = np.empty(n)
    top_first = height_is_top_first(gph)
    scale = STANDARD_GRAVITY / MOLAR_GAS_CONSTANT

    prev_z = 0.0
    prev_p = 0.0
    prev_t = 0.0
    prev_m = 0.0
    for i in range(n):
        k = storage_index(i, n, top_first)
        z = gph[k]
        t = temperature[k]
        m = molar_mass_air[k]

        if i == 0:
            p = surface_pressure * np.exp(-1e-3 * (m / t) * scale * (z - surface_height))
        else:
            p = prev_p * np.exp(-1e-3 * ((prev_m + m) / (prev_t + t)) * scale * (z - prev_z))

        pressure[k] = p
        prev_z = z
        prev_p = p
        prev_t = t
        prev_m = m

    return pressure


@jit(nopython=True, cache=True)
def _column_mass_density(surface_pressure, pressure_bounds, altitude, latitude):
    sum_dp = 0.0
    sum_dp_over_g = 0.0
    for i in range(len(altitude)):
        g = gravity_from_latitude_and_altitude(latitude, altitude[i])
        dp = pressure_bounds[i, 0] - pressure_bounds[i, 1]
        sum_dp += dp
        sum_dp_over_g += dp / g
    return surface_pressure * sum_dp_over_g / sum_dp


# =============================================================================
# Public API
# =============================================================================

def _check_triplet(axis, temperature, molar_mass_air, axis_name):
    axis = as_profile(axis, axis_name)
    temperature = as_profile(temperature, "temperature profile")
    molar_mass_air = as_profile(molar_mass_air, "molar mass profile")
    if len(axis) == 0:
        raise InvalidArgumentError(f"{axis_name} should have at least one level")
    if len(temperature) != len(axis) or len(molar_mass_air) != len(axis):
        raise InvalidArgumentError(
            f"{axis_name}, temperature and molar mass profiles have inconsistent lengths "
            f"({len(axis)}, {len(temperature)}, {len(molar_mass_air)})"
        )
    return axis, temperature, molar_mass_air


def profile_altitude_from_pressure(
    pressure,
    temperature,
    molar_mass_air,
    surface_pressure: float,
    surface_height: float,
    latitude: float,
) -> np.ndarray:
    """
    Convert a pressure profile to an altitude profile.

    Parameters
    ----------
    pressure : array_like
        Pressure vertical profile [Pa]
    temperature : array_like
        Temperature vertical profile [K]
    molar_mass_air : array_like
        Molar mass of total air [g/mol]
    surface_pressure : float
        Surface pressure [Pa]
    surface_height : float
        Surface height [m]
    latitude : float
        Latitude [degree_north]

    Returns
    -------
    np.ndarray
        Altitude profile [m], in the storage order of `pressure`
    """
    pressure, temperature, molar_mass_air = _check_triplet(
        pressure, temperature, molar_mass_air, "pressure profile"
    )
    return _altitude_from_pressure(pressure, temperature, molar_mass_air, float(surface_pressure),
                                   float(surface_height), float(latitude))


def profile_pressure_from_altitude(
    altitude,
    temperature,
    molar_mass_air,
    surface_pressure: float,
    surface_height: float,
    latitude: float,
) -> np.ndarray:
    """
    Convert an altitude profile to a pressure profile.

    Parameters
    ----------
    altitude : array_like
        Altitude vertical profile [m]
    temperature : array_like
        Temperature vertical profile [K]
    molar_mass_air : array_like
        Molar mass of total air [g/mol]
    surface_pressure : float
        Surface pressure [Pa]
    surface_height : float
        Surface height [m]
    latitude : float
        Latitude [degree_north]

    Returns
    -------
    np.ndarray
        Pressure profile [Pa], in the storage order of `altitude`
    """
    altitude, temperature, molar_mass_air = _check_triplet(
        altitude, temperature, molar_mass_air, "altitude profile"
    )
    return _pressure_from_altitude(altitude, temperature, molar_mass_air, float(surface_pressure),
                                   float(surface_height), float(latitude))


def profile_gph_from_pressure(
    pressure,
    temperature,
    molar_mass_air,
    surface_pressure: float,
    surface_height: float,
) -> np.ndarray:
    """
    Convert a pressure profile to a geopotential height profile.

    Parameters
    ----------
    pressure : array_like
        Pressure vertical profile [Pa]
    temperature : array_like
        Temperature vertical profile [K]
    molar_mass_air : array_like
        Molar mass of total air [g/mol]
    surface_pressure : float
        Surface pressure [Pa]
    surface_height : float
        Surface geopotential height [m]

    Returns
    -------
    np.ndarray
        Geopotential height profile [m]
    """
    pressure, temperature, molar_mass_air = _check_triplet(
        pressure, temperature, molar_mass_air, "pressure profile"
    )
    return _gph_from_pressure(pressure, temperature, molar_mass_air, float(surface_pressure),
                              float(surface_height))


def profile_pressure_from_gph(
    gph,
    temperature,
    molar_mass_air,
    surface_pressure: float,
    surface_height: float,
) -> np.ndarray:
    """
    Convert a geopotential height profile to a pressure profile.

    Parameters
    ----------
    gph : array_like
        Geopotential height vertical profile [m]
    temperature : array_like
        Temperature vertical profile [K]
    molar_mass_air : array_like
        Molar mass of total air [g/mol]
    surface_pressure : float
        Surface pressure [Pa]
    surface_height : float
        Surface geopotential height [m]

    Returns
    -------
    np.ndarray
        Pressure profile [Pa]
    """
    gph, temperature, molar_mass_air = _check_triplet(
        gph, temperature, molar_mass_air, "geopotential height profile"
    )
    return _pressure_from_gph(gph, temperature, molar_mass_air, float(surface_pressure),
                              float(surface_height))


def column_mass_density_from_surface_pressure_and_profile(
    surface_pressure: float,
    pressure_bounds,
    altitude,
    latitude: float,
) -> float:
    """
    Total column mass density of air from the surface pressure.

    Uses p_s / g_avg where the average gravity is weighted by the pressure
    thickness of each layer.

    Parameters
    ----------
    surface_pressure : float
        Surface pressure [Pa]
    pressure_bounds : array_like
        Lower and upper pressure boundaries [Pa] per level, {vertical, 2}
    altitude : array_like
        Altitude profile [m] (increasing)
    latitude : float
        Latitude at the surface [degree_north]

    Returns
    -------
    float
        Column mass density [kg/m²]
    """
    altitude = as_profile(altitude, "altitude profile")
    pressure_bounds = as_bounds(pressure_bounds, len(altitude), "pressure bounds")
    return float(_column_mass_density(float(surface_pressure), pressure_bounds, altitude, float(latitude)))
