"""
Gravity and geopotential primitives.

Latitude and altitude dependent gravity on the WGS84 ellipsoid, and the
conversions between geometric height (altitude), geopotential and
geopotential height. All functions are scalar and compiled with numba so the
hydrostatic integrators can call them from their level loops.
"""

import math

from numba import jit

from vprofile.utils.constants import (
    STANDARD_GRAVITY,
    WGS84_SEMI_MAJOR_AXIS,
    WGS84_FLATTENING,
    WGS84_GRAVITY_EQUATOR,
    WGS84_SOMIGLIANA_CONSTANT,
    WGS84_ECCENTRICITY_SQUARED,
    WGS84_GRAVITY_RATIO,
)

_DEG2RAD = math.pi / 180.0


@jit(nopython=True, cache=True)
def normal_gravity_from_latitude(latitude: float) -> float:
    """Gravitational acceleration at sea level (Somigliana formula).

    Args:
        latitude: Latitude [degree_north]

    Returns:
        Normal gravity [m/s²]
    """
    sin_phi = math.sin(latitude * _DEG2RAD)
    sin2 = sin_phi * sin_phi
    return (WGS84_GRAVITY_EQUATOR * (1.0 + WGS84_SOMIGLIANA_CONSTANT * sin2) /
            math.sqrt(1.0 - WGS84_ECCENTRICITY_SQUARED * sin2))


@jit(nopython=True, cache=True)
def gravity_from_latitude_and_altitude(latitude: float, altitude: float) -> float:
    """Gravitational acceleration at a given altitude above the ellipsoid.

    Args:
        latitude: Latitude [degree_north]
        altitude: Altitude [m]

    Returns:
        Gravity [m/s²]
    """
    sin_phi = math.sin(latitude * _DEG2RAD)
    a = WGS84_SEMI_MAJOR_AXIS
    f = WGS84_FLATTENING
    g = normal_gravity_from_latitude(latitude)
    return g * (1.0 - 2.0 / a * (1.0 + f + WGS84_GRAVITY_RATIO - 2.0 * f * sin_phi * sin_phi) * altitude +
                3.0 * altitude * altitude / (a * a))


@jit(nopython=True, cache=True)
def local_curvature_radius_at_surface_from_latitude(latitude: float) -> float:
    """Effective local earth radius used for geopotential height conversions [m]."""
    sin_phi = math.sin(latitude * _DEG2RAD)
    f = WGS84_FLATTENING
    return WGS84_SEMI_MAJOR_AXIS / (1.0 + f + WGS84_GRAVITY_RATIO - 2.0 * f * sin_phi * sin_phi)


@jit(nopython=True, cache=True)
def altitude_from_gph_and_latitude(gph: float, latitude: float) -> float:
    """Convert geopotential height to geometric height (altitude).

    Args:
        gph: Geopotential height [m]
        latitude: Latitude [degree_north]

    Returns:
        Altitude [m]
    """
    g = normal_gravity_from_latitude(latitude)
    radius = local_curvature_radius_at_surface_from_latitude(latitude)
    return STANDARD_GRAVITY * radius * gph / (g * radius - STANDARD_GRAVITY * gph)


@jit(nopython=True, cache=True)
def gph_from_altitude_and_latitude(altitude: float, latitude: float) -> float:
    """Convert geometric height (altitude) to geopotential height.

    Args:
        altitude: Altitude [m]
        latitude: Latitude [degree_north]

    Returns:
        Geopotential height [m]
    """
    g = normal_gravity_from_latitude(latitude)
    radius = local_curvature_radius_at_surface_from_latitude(latitude)
    return (g / STANDARD_GRAVITY) * radius * altitude / (altitude + radius)


@jit(nopython=True, cache=True)
def geopotential_from_gph(gph: float) -> float:
    """Convert geopotential height [m] to geopotential [m²/s²]."""
    return STANDARD_GRAVITY * gph


@jit(nopython=True, cache=True)
def gph_from_geopotential(geopotential: float) -> float:
    """Convert geopotential [m²/s²] to geopotential height [m]."""
    return geopotential / STANDARD_GRAVITY
