"""
Physical constants for vertical profile conversions.

All constants are in SI units unless otherwise specified.
"""

# Gas constant
MOLAR_GAS_CONSTANT = 8.3144598  # J/(mol·K)

# Reference gravity used to define geopotential height (WMO)
STANDARD_GRAVITY = 9.80665  # m/s^2

# WGS84 ellipsoid and normal gravity
WGS84_SEMI_MAJOR_AXIS = 6378137.0  # m
WGS84_FLATTENING = 1.0 / 298.257223563
WGS84_GRAVITY_EQUATOR = 9.7803253359  # m/s^2
WGS84_SOMIGLIANA_CONSTANT = 0.00193185265241
WGS84_ECCENTRICITY_SQUARED = 0.00669437999013
WGS84_GRAVITY_RATIO = 0.00344978650684  # omega^2 a^2 b / GM

# Dry air
DRY_AIR_MOLAR_MASS = 28.9644  # g/mol

# Guard for near-zero layer heights and densities
EPSILON = 1e-10

# WMO tropopause definition
TROPOPAUSE_LAPSE_RATE = 0.002  # K/m (2 °C/km)
TROPOPAUSE_WINDOW_HEIGHT = 2000.0  # m
TROPOPAUSE_MAX_PRESSURE = 50000.0  # Pa
TROPOPAUSE_MIN_PRESSURE = 5000.0  # Pa
