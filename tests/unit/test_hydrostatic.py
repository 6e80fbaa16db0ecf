"""
Unit tests for the hydrostatic profile integrators.
"""

import numpy as np
import pytest

from vprofile.core.gravity import gravity_from_latitude_and_altitude
from vprofile.core.hydrostatic import (
    column_mass_density_from_surface_pressure_and_profile,
    profile_altitude_from_pressure,
    profile_gph_from_pressure,
    profile_pressure_from_altitude,
    profile_pressure_from_gph,
)
from vprofile.exceptions import InvalidArgumentError
from vprofile.utils.constants import DRY_AIR_MOLAR_MASS, MOLAR_GAS_CONSTANT, STANDARD_GRAVITY


@pytest.fixture
def ten_levels():
    """A monotonic 10 level profile, surface first."""
    pressure = np.array([100000.0, 90000.0, 80000.0, 70000.0, 60000.0,
                         50000.0, 40000.0, 30000.0, 20000.0, 10000.0])
    temperature = np.linspace(288.0, 220.0, 10)
    molar_mass = np.full(10, DRY_AIR_MOLAR_MASS)
    return pressure, temperature, molar_mass


class TestGphFromPressure:
    """Tests for profile_gph_from_pressure."""

    def test_isothermal_matches_hypsometric_equation(self):
        pressure = np.array([100000.0, 50000.0, 25000.0])
        temperature = np.full(3, 250.0)
        molar_mass = np.full(3, DRY_AIR_MOLAR_MASS)

        gph = profile_gph_from_pressure(pressure, temperature, molar_mass, 100000.0, 0.0)

        scale_height = 1e3 * 250.0 / DRY_AIR_MOLAR_MASS * MOLAR_GAS_CONSTANT / STANDARD_GRAVITY
        expected = scale_height * np.log(100000.0 / pressure)
        np.testing.assert_allclose(gph, expected, rtol=1e-12)

    def test_surface_height_offset(self, ten_levels):
        pressure, temperature, molar_mass = ten_levels
        base = profile_gph_from_pressure(pressure, temperature, molar_mass, 101325.0, 0.0)
        raised = profile_gph_from_pressure(pressure, temperature, molar_mass, 101325.0, 250.0)
        np.testing.assert_allclose(raised - base, 250.0)

    def test_top_first_storage(self, ten_levels):
        """Reversed input gives the reversed output."""
        pressure, temperature, molar_mass = ten_levels
        surface_first = profile_gph_from_pressure(pressure, temperature, molar_mass, 101325.0, 0.0)
        top_first = profile_gph_from_pressure(pressure[::-1], temperature[::-1], molar_mass[::-1], 101325.0, 0.0)
        np.testing.assert_allclose(top_first, surface_first[::-1])

    def test_monotonic(self, ten_levels):
        gph = profile_gph_from_pressure(*ten_levels, 101325.0, 0.0)
        assert np.all(np.diff(gph) > 0)


class TestPressureGphRoundTrip:
    """Pressure -> gph -> pressure returns the input."""

    def test_round_trip(self, ten_levels):
        pressure, temperature, molar_mass = ten_levels
        gph = profile_gph_from_pressure(pressure, temperature, molar_mass, 101325.0, 10.0)
        result = profile_pressure_from_gph(gph, temperature, molar_mass, 101325.0, 10.0)
        np.testing.assert_allclose(result, pressure, rtol=1e-6)

    def test_round_trip_top_first(self, ten_levels):
        pressure, temperature, molar_mass = (a[::-1].copy() for a in ten_levels)
        gph = profile_gph_from_pressure(pressure, temperature, molar_mass, 101325.0, 0.0)
        result = profile_pressure_from_gph(gph, temperature, molar_mass, 101325.0, 0.0)
        np.testing.assert_allclose(result, pressure, rtol=1e-6)


class TestAltitudeFromPressure:
    """Tests for profile_altitude_from_pressure / profile_pressure_from_altitude."""

    def test_single_level_uses_normal_gravity(self):
        altitude = profile_altitude_from_pressure([90000.0], [280.0], [DRY_AIR_MOLAR_MASS], 100000.0, 0.0, 30.0)
        g = gravity_from_latitude_and_altitude(30.0, 0.0)
        expected = 1e3 * 280.0 / DRY_AIR_MOLAR_MASS * MOLAR_GAS_CONSTANT / g * np.log(100000.0 / 90000.0)
        assert np.isclose(altitude[0], expected, rtol=1e-12)

    def test_altitude_above_gph(self, ten_levels):
        """Gravity decreases with height, so altitude exceeds gph aloft."""
        pressure, temperature, molar_mass = ten_levels
        altitude = profile_altitude_from_pressure(pressure, temperature, molar_mass, 101325.0, 0.0, 45.0)
        gph = profile_gph_from_pressure(pressure, temperature, molar_mass, 101325.0, 0.0)
        assert altitude[-1] > gph[-1]

    def test_approximate_round_trip(self, ten_levels):
        pressure, temperature, molar_mass = ten_levels
        altitude = profile_altitude_from_pressure(pressure, temperature, molar_mass, 101325.0, 0.0, 45.0)
        result = profile_pressure_from_altitude(altitude, temperature, molar_mass, 101325.0, 0.0, 45.0)
        np.testing.assert_allclose(result, pressure, rtol=5e-3)

    def test_top_first_storage(self, ten_levels):
        pressure, temperature, molar_mass = ten_levels
        altitude = profile_altitude_from_pressure(pressure, temperature, molar_mass, 101325.0, 0.0, 45.0)
        reversed_altitude = profile_altitude_from_pressure(pressure[::-1], temperature[::-1], molar_mass[::-1],
                                                           101325.0, 0.0, 45.0)
        np.testing.assert_allclose(reversed_altitude, altitude[::-1])

        result = profile_pressure_from_altitude(altitude[::-1], temperature[::-1], molar_mass[::-1],
                                                101325.0, 0.0, 45.0)
        np.testing.assert_allclose(result, pressure[::-1], rtol=5e-3)


class TestValidation:
    """Invalid inputs raise InvalidArgumentError."""

    def test_length_mismatch(self):
        with pytest.raises(InvalidArgumentError):
            profile_gph_from_pressure([1000.0, 500.0], [250.0], [28.9644, 28.9644], 1000.0, 0.0)

    def test_not_one_dimensional(self):
        with pytest.raises(InvalidArgumentError):
            profile_pressure_from_gph(np.zeros((2, 2)), np.zeros((2, 2)), np.zeros((2, 2)), 1000.0, 0.0)

    def test_empty_profile(self):
        with pytest.raises(InvalidArgumentError):
            profile_altitude_from_pressure([], [], [], 1000.0, 0.0, 0.0)

    def test_is_value_error(self):
        """InvalidArgumentError can be caught as a ValueError."""
        with pytest.raises(ValueError):
            profile_pressure_from_altitude([0.0], [250.0, 260.0], [28.9644], 1000.0, 0.0, 0.0)


class TestColumnMassDensity:
    """Tests for column_mass_density_from_surface_pressure_and_profile."""

    def test_single_layer(self):
        result = column_mass_density_from_surface_pressure_and_profile(101325.0, [[101325.0, 0.0]], [0.0], 45.0)
        assert np.isclose(result, 101325.0 / gravity_from_latitude_and_altitude(45.0, 0.0))

    def test_flat_bounds_accepted(self):
        flat = column_mass_density_from_surface_pressure_and_profile(
            100000.0, [100000.0, 50000.0, 50000.0, 0.0], [2000.0, 10000.0], 0.0
        )
        nested = column_mass_density_from_surface_pressure_and_profile(
            100000.0, [[100000.0, 50000.0], [50000.0, 0.0]], [2000.0, 10000.0], 0.0
        )
        assert flat == nested
        assert 10000.0 < flat < 10300.0

    def test_inconsistent_bounds(self):
        with pytest.raises(InvalidArgumentError):
            column_mass_density_from_surface_pressure_and_profile(1000.0, [[1000.0, 0.0]], [0.0, 1.0], 0.0)
