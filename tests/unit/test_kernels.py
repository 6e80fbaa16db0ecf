"""
Unit tests for the averaging kernel transforms.
"""

import numpy as np
import pytest

from vprofile.core.kernels import (
    column_avk_from_partial_column_avk,
    density_avk_from_partial_column_avk_and_altitude_bounds,
    number_density_avk_from_volume_mixing_ratio_avk,
    partial_column_avk_from_density_avk_and_altitude_bounds,
    stratospheric_column_avk_from_column_avk,
    tropospheric_column_avk_from_column_avk,
    volume_mixing_ratio_avk_from_number_density_avk,
)
from vprofile.config.settings import NumericsConfig
from vprofile.exceptions import InvalidArgumentError

BOUNDS = np.array([[0.0, 1000.0], [1000.0, 3000.0], [3000.0, 6000.0]])


@pytest.fixture
def avk():
    return np.array([[0.8, 0.1, 0.0],
                     [0.2, 0.6, 0.1],
                     [0.0, 0.3, 0.4]])


class TestPartialColumnDensity:
    """Partial column <-> density kernels."""

    def test_scaling(self, avk):
        density = density_avk_from_partial_column_avk_and_altitude_bounds(avk, BOUNDS)
        height = np.array([1000.0, 2000.0, 3000.0])
        np.testing.assert_allclose(density, avk * height[None, :] / height[:, None])

    def test_round_trip(self, avk):
        density = density_avk_from_partial_column_avk_and_altitude_bounds(avk, BOUNDS)
        result = partial_column_avk_from_density_avk_and_altitude_bounds(density, BOUNDS)
        np.testing.assert_allclose(result, avk)

    def test_identity_preserved(self):
        identity = np.eye(3)
        np.testing.assert_allclose(density_avk_from_partial_column_avk_and_altitude_bounds(identity, BOUNDS),
                                   identity)

    def test_thin_layer_zeroed(self):
        bounds = [[0.0, 1000.0], [1000.0, 3000.0], [3000.0, 3000.0]]
        density = density_avk_from_partial_column_avk_and_altitude_bounds(np.ones((3, 3)), bounds)
        expected = np.array([[1.0, 2.0, 0.0],
                             [0.5, 1.0, 0.0],
                             [0.0, 0.0, 0.0]])
        np.testing.assert_allclose(density, expected)

        partial_column = partial_column_avk_from_density_avk_and_altitude_bounds(np.ones((3, 3)), bounds)
        np.testing.assert_allclose(partial_column[:, 2], 0.0)
        np.testing.assert_allclose(partial_column[2, :], 0.0)

    def test_round_trip_thin_layer(self, avk):
        """Rows and columns of a layer thinner than epsilon become and stay zero."""
        bounds = [[0.0, 1000.0], [1000.0, 3000.0], [3000.0, 3000.0]]
        density = density_avk_from_partial_column_avk_and_altitude_bounds(avk, bounds)
        result = partial_column_avk_from_density_avk_and_altitude_bounds(density, bounds)

        expected = avk.copy()
        expected[2, :] = 0.0
        expected[:, 2] = 0.0
        np.testing.assert_allclose(result, expected)

    def test_top_first_bounds(self, avk):
        """Layer thickness does not depend on the bound order."""
        reversed_bounds = BOUNDS[:, ::-1]
        np.testing.assert_allclose(
            density_avk_from_partial_column_avk_and_altitude_bounds(avk, reversed_bounds),
            density_avk_from_partial_column_avk_and_altitude_bounds(avk, BOUNDS),
        )

    def test_epsilon_override(self):
        bounds = [[0.0, 1000.0], [1000.0, 1000.5]]
        density = density_avk_from_partial_column_avk_and_altitude_bounds(np.ones((2, 2)), bounds, epsilon=1.0)
        np.testing.assert_allclose(density[1], 0.0)

    def test_numerics_config_epsilon(self, avk):
        """Layers thinner than the configured epsilon are zeroed."""
        config = NumericsConfig(epsilon=1500.0)
        density = density_avk_from_partial_column_avk_and_altitude_bounds(avk, BOUNDS, config=config)
        np.testing.assert_allclose(density[0], 0.0)
        np.testing.assert_allclose(density[1:], density_avk_from_partial_column_avk_and_altitude_bounds(avk, BOUNDS)[1:])

        partial_column = partial_column_avk_from_density_avk_and_altitude_bounds(avk, BOUNDS, config=config)
        np.testing.assert_allclose(partial_column[:, 0], 0.0)

    def test_explicit_epsilon_wins(self, avk):
        density = density_avk_from_partial_column_avk_and_altitude_bounds(
            avk, BOUNDS, epsilon=1e-10, config=NumericsConfig(epsilon=1500.0))
        assert density[0, 0] == pytest.approx(0.8)

    def test_not_square(self):
        with pytest.raises(InvalidArgumentError):
            density_avk_from_partial_column_avk_and_altitude_bounds(np.ones((3, 2)), BOUNDS)

    def test_bad_bounds(self, avk):
        with pytest.raises(InvalidArgumentError):
            partial_column_avk_from_density_avk_and_altitude_bounds(avk, BOUNDS[:2])


class TestMixingRatioNumberDensity:
    """Volume mixing ratio <-> number density kernels."""

    def test_values(self):
        avk = np.array([[1.0, 2.0], [3.0, 4.0]])
        density = np.array([2.0, 4.0])
        result = number_density_avk_from_volume_mixing_ratio_avk(avk, density)
        np.testing.assert_allclose(result, [[1.0, 1.0], [6.0, 4.0]])

    def test_round_trip(self):
        avk = np.array([[1.0, 2.0], [3.0, 4.0]])
        density = np.array([2.0e19, 4.0e18])
        number_density = number_density_avk_from_volume_mixing_ratio_avk(avk, density)
        np.testing.assert_allclose(volume_mixing_ratio_avk_from_number_density_avk(number_density, density), avk)

    def test_zero_density_zeroed(self):
        avk = np.ones((2, 2))
        density = np.array([1.0, 0.0])
        np.testing.assert_allclose(number_density_avk_from_volume_mixing_ratio_avk(avk, density)[:, 1], 0.0)
        np.testing.assert_allclose(volume_mixing_ratio_avk_from_number_density_avk(avk, density)[1, :], 0.0)

    def test_density_length_mismatch(self):
        with pytest.raises(InvalidArgumentError):
            number_density_avk_from_volume_mixing_ratio_avk(np.eye(2), [1.0, 2.0, 3.0])


class TestColumnKernels:
    """Column kernels and their tropospheric / stratospheric parts."""

    def test_column_avk_sums_rows(self):
        avk = np.array([[1.0, 2.0], [3.0, 4.0]])
        np.testing.assert_allclose(column_avk_from_partial_column_avk(avk), [4.0, 6.0])

    def test_tropospheric_mask(self):
        bounds = [[0.0, 1000.0], [1000.0, 2000.0], [2000.0, 3000.0]]
        result = tropospheric_column_avk_from_column_avk([1.0, 2.0, 3.0], bounds, 1500.0)
        np.testing.assert_allclose(result, [1.0, 2.0, 0.0])

    def test_stratospheric_mask(self):
        bounds = [[0.0, 1000.0], [1000.0, 2000.0], [2000.0, 3000.0]]
        result = stratospheric_column_avk_from_column_avk([1.0, 2.0, 3.0], bounds, 1500.0)
        np.testing.assert_allclose(result, [0.0, 2.0, 3.0])

    def test_masks_on_layer_boundary(self):
        bounds = [[0.0, 1000.0], [1000.0, 2000.0]]
        tropo = tropospheric_column_avk_from_column_avk([1.0, 1.0], bounds, 1000.0)
        strato = stratospheric_column_avk_from_column_avk([1.0, 1.0], bounds, 1000.0)
        np.testing.assert_allclose(tropo, [1.0, 0.0])
        np.testing.assert_allclose(strato, [0.0, 1.0])
