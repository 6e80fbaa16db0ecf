"""
Unit tests for variable derivation.
"""

import numpy as np
import pytest

from vprofile.config.settings import NumericsConfig, ProfileConfig, TropopauseConfig
from vprofile.core.gravity import gph_from_altitude_and_latitude
from vprofile.exceptions import NotDerivableError
from vprofile.product.derive import get_derived_variable
from vprofile.product.product import Product
from vprofile.product.variable import DataType, DimensionType, Variable
from vprofile.utils.constants import STANDARD_GRAVITY

TIME = DimensionType.TIME
VERTICAL = DimensionType.VERTICAL
INDEPENDENT = DimensionType.INDEPENDENT


@pytest.fixture
def profile_product():
    """Two altitude profiles with their latitude."""
    altitude = np.array([[0.0, 1000.0, 2000.0], [0.0, 5000.0, 10000.0]])
    return Product([
        Variable("altitude", altitude, (TIME, VERTICAL), "m"),
        Variable("latitude", np.array([10.0, 60.0]), (TIME,), "degree_north"),
    ])


class TestDirect:
    """Copying and broadcasting existing variables."""

    def test_copy(self, profile_product):
        variable = get_derived_variable(profile_product, "altitude", DataType.DOUBLE, "m", (TIME, VERTICAL))
        np.testing.assert_array_equal(variable.data, profile_product.get_variable("altitude").data)
        variable.data[0, 0] = -1.0
        assert profile_product.get_variable("altitude").data[0, 0] == 0.0

    def test_unit_conversion(self, profile_product):
        variable = get_derived_variable(profile_product, "altitude", None, "km", (TIME, VERTICAL))
        np.testing.assert_allclose(variable.data[1], [0.0, 5.0, 10.0])
        assert variable.unit == "km"

    def test_data_type_conversion(self, profile_product):
        variable = get_derived_variable(profile_product, "latitude", DataType.FLOAT, None, (TIME,))
        assert variable.data_type is DataType.FLOAT

    def test_broadcast_over_time(self):
        product = Product([
            Variable("altitude", np.array([0.0, 1000.0]), (VERTICAL,), "m"),
            Variable("latitude", np.array([1.0, 2.0, 3.0]), (TIME,), "degree_north"),
        ])
        variable = get_derived_variable(product, "altitude", DataType.DOUBLE, "m", (TIME, VERTICAL))
        assert variable.dimension == (3, 2)
        np.testing.assert_array_equal(variable.data[2], [0.0, 1000.0])

    def test_wrong_dimensions_not_derivable(self, profile_product):
        with pytest.raises(NotDerivableError, match="could not derive variable 'latitude'"):
            get_derived_variable(profile_product, "latitude", DataType.DOUBLE, None, (TIME, VERTICAL))

    def test_incompatible_unit(self, profile_product):
        with pytest.raises(NotDerivableError):
            get_derived_variable(profile_product, "altitude", DataType.DOUBLE, "K", (TIME, VERTICAL))


class TestBounds:
    """Axis bounds from grid midpoints."""

    def test_linear_bounds(self):
        product = Product([Variable("altitude", np.array([0.0, 1000.0, 2000.0]), (VERTICAL,), "m")])
        bounds = get_derived_variable(product, "altitude_bounds", DataType.DOUBLE, "m", (VERTICAL, INDEPENDENT))
        np.testing.assert_allclose(bounds.data, [[-500.0, 500.0], [500.0, 1500.0], [1500.0, 2500.0]])
        assert bounds.unit == "m"

    def test_log_pressure_bounds(self):
        product = Product([Variable("pressure", np.array([1000.0, 100.0]), (VERTICAL,), "Pa")])
        bounds = get_derived_variable(product, "pressure_bounds", DataType.DOUBLE, "Pa", (VERTICAL, INDEPENDENT))
        expected = [[1000.0 * np.sqrt(10.0), np.sqrt(1e5)], [np.sqrt(1e5), 100.0 / np.sqrt(10.0)]]
        np.testing.assert_allclose(bounds.data, expected)

    def test_padded_grid(self):
        product = Product([
            Variable("altitude", np.array([[0.0, 1000.0, np.nan]]), (TIME, VERTICAL), "m"),
        ])
        bounds = get_derived_variable(product, "altitude_bounds", DataType.DOUBLE, "m",
                                      (TIME, VERTICAL, INDEPENDENT))
        np.testing.assert_allclose(bounds.data[0, :2], [[-500.0, 500.0], [500.0, 1500.0]])
        assert np.all(np.isnan(bounds.data[0, 2]))

    def test_existing_bounds_preferred(self):
        product = Product([
            Variable("altitude", np.array([500.0, 1500.0]), (VERTICAL,), "m"),
            Variable("altitude_bounds", np.array([[0.0, 1000.0], [1000.0, 2000.0]]), (VERTICAL, INDEPENDENT), "m"),
        ])
        bounds = get_derived_variable(product, "altitude_bounds", DataType.DOUBLE, "m", (VERTICAL, INDEPENDENT))
        np.testing.assert_allclose(bounds.data, [[0.0, 1000.0], [1000.0, 2000.0]])


class TestConversions:
    """Physical conversions between variables."""

    def test_gph_from_altitude_and_latitude(self, profile_product):
        gph = get_derived_variable(profile_product, "geopotential_height", DataType.DOUBLE, "m", (TIME, VERTICAL))
        assert gph.dimension == (2, 3)
        assert gph.data[1, 2] == pytest.approx(gph_from_altitude_and_latitude(10000.0, 60.0))
        assert gph.data[0, 1] == pytest.approx(gph_from_altitude_and_latitude(1000.0, 10.0))

    def test_altitude_from_gph_round_trip(self, profile_product):
        gph = get_derived_variable(profile_product, "geopotential_height", DataType.DOUBLE, "m", (TIME, VERTICAL))
        product = Product([gph, profile_product.get_variable("latitude").copy()])
        altitude = get_derived_variable(product, "altitude", DataType.DOUBLE, "m", (TIME, VERTICAL))
        np.testing.assert_allclose(altitude.data, profile_product.get_variable("altitude").data, atol=1e-6)

    def test_geopotential_chain(self, profile_product):
        """geopotential <- geopotential_height <- altitude + latitude"""
        geopotential = get_derived_variable(profile_product, "geopotential", DataType.DOUBLE, None,
                                            (TIME, VERTICAL))
        gph = get_derived_variable(profile_product, "geopotential_height", DataType.DOUBLE, "m", (TIME, VERTICAL))
        np.testing.assert_allclose(geopotential.data, gph.data * STANDARD_GRAVITY)
        assert geopotential.unit == "m2/s2"

    def test_tropopause_altitude(self, isa_profile):
        altitude, pressure, temperature = isa_profile
        product = Product([
            Variable("altitude", altitude[None, :], (TIME, VERTICAL), "m"),
            Variable("pressure", pressure[None, :] / 100.0, (TIME, VERTICAL), "hPa"),
            Variable("temperature", temperature[None, :], (TIME, VERTICAL), "K"),
        ])
        result = get_derived_variable(product, "tropopause_altitude", DataType.DOUBLE, "km", (TIME,))
        assert result.dimension == (1,)
        assert result.data[0] == pytest.approx(11.0)

        result = get_derived_variable(product, "tropopause_pressure", DataType.DOUBLE, "Pa", (TIME,))
        assert result.data[0] == pytest.approx(pressure[11])

    def test_tropopause_config(self, isa_profile):
        altitude, pressure, temperature = isa_profile
        product = Product([
            Variable("altitude", altitude[None, :], (TIME, VERTICAL), "m"),
            Variable("pressure", pressure[None, :], (TIME, VERTICAL), "Pa"),
            Variable("temperature", temperature[None, :], (TIME, VERTICAL), "K"),
        ])
        config = ProfileConfig(tropopause=TropopauseConfig(lapse_rate_threshold=0.007))
        result = get_derived_variable(product, "tropopause_altitude", DataType.DOUBLE, "m", (TIME,), config)
        assert np.isnan(result.data[0])

    def test_tropopause_numerics_epsilon(self, isa_profile):
        altitude, pressure, temperature = isa_profile
        product = Product([
            Variable("altitude", altitude[None, :], (TIME, VERTICAL), "m"),
            Variable("pressure", pressure[None, :], (TIME, VERTICAL), "Pa"),
            Variable("temperature", temperature[None, :], (TIME, VERTICAL), "K"),
        ])
        config = ProfileConfig(numerics=NumericsConfig(epsilon=1500.0))
        result = get_derived_variable(product, "tropopause_altitude", DataType.DOUBLE, "m", (TIME,), config)
        assert np.isnan(result.data[0])

    def test_missing_source(self):
        product = Product([Variable("latitude", np.array([10.0]), (TIME,), "degree_north")])
        with pytest.raises(NotDerivableError):
            get_derived_variable(product, "tropopause_altitude", DataType.DOUBLE, "m", (TIME,))

    def test_cyclic_conversions_terminate(self):
        """geopotential and geopotential_height refer to each other."""
        product = Product([Variable("latitude", np.array([10.0]), (TIME,), "degree_north")])
        with pytest.raises(NotDerivableError, match="geopotential_height"):
            get_derived_variable(product, "geopotential_height", DataType.DOUBLE, "m", (TIME, VERTICAL))


class TestProductMethods:
    """Product.get_derived_variable / add_derived_variable."""

    def test_add_derived_variable(self, profile_product):
        profile_product.add_derived_variable("altitude_bounds", DataType.DOUBLE, "m",
                                             (TIME, VERTICAL, INDEPENDENT))
        assert profile_product.get_variable("altitude_bounds").dimension == (2, 3, 2)

    def test_add_derived_variable_replaces(self, profile_product):
        profile_product.add_derived_variable("altitude", DataType.DOUBLE, "km", (TIME, VERTICAL))
        assert profile_product.get_variable("altitude").unit == "km"
        assert profile_product.variable_names == ["altitude", "latitude"]
