"""Shared fixtures for vprofile tests."""

import numpy as np
import pytest

from vprofile.utils.constants import DRY_AIR_MOLAR_MASS, MOLAR_GAS_CONSTANT, STANDARD_GRAVITY


def isa_temperature(altitude):
    """International Standard Atmosphere temperature [K] up to 20 km."""
    altitude = np.asarray(altitude, dtype=np.float64)
    return np.where(altitude <= 11000.0, 288.15 - 0.0065 * altitude, 216.65)


def isa_pressure(altitude):
    """International Standard Atmosphere pressure [Pa] up to 20 km."""
    altitude = np.asarray(altitude, dtype=np.float64)
    m = DRY_AIR_MOLAR_MASS * 1e-3
    exponent = STANDARD_GRAVITY * m / (MOLAR_GAS_CONSTANT * 0.0065)
    p_troposphere = 101325.0 * (isa_temperature(np.minimum(altitude, 11000.0)) / 288.15) ** exponent
    p11 = 101325.0 * (216.65 / 288.15) ** exponent
    p_stratosphere = p11 * np.exp(-STANDARD_GRAVITY * m * (altitude - 11000.0) / (MOLAR_GAS_CONSTANT * 216.65))
    return np.where(altitude <= 11000.0, p_troposphere, p_stratosphere)


@pytest.fixture
def isa_profile():
    """21 levels, 0-20 km in 1 km steps: (altitude, pressure, temperature)."""
    altitude = np.arange(21) * 1000.0
    return altitude, isa_pressure(altitude), isa_temperature(altitude)


@pytest.fixture
def fine_isa_profile():
    """81 levels, 0-20 km in 250 m steps: (altitude, pressure, temperature)."""
    altitude = np.arange(81) * 250.0
    return altitude, isa_pressure(altitude), isa_temperature(altitude)
