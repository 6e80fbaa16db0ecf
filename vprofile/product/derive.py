"""
Variable derivation.

A derived variable is produced from the content of a product, in a requested
data type, unit and dimension signature. Derivation is tried in order:

1. an existing variable with exactly the requested dimensions is copied;
2. an existing time independent variable is broadcast over time;
3. ``<axis>_bounds`` is computed from the midpoints of the ``<axis>`` grid;
4. a physical conversion from the registry below.

Anything else raises NotDerivableError.
"""

import logging
from dataclasses import dataclass
from typing import Callable, FrozenSet, List, Optional, Sequence, Tuple

import numpy as np

from vprofile.config.settings import ProfileConfig
from vprofile.core.gravity import (
    altitude_from_gph_and_latitude,
    geopotential_from_gph,
    gph_from_altitude_and_latitude,
    gph_from_geopotential,
)
from vprofile.core.grid import bounds_from_midpoints, unpadded_length
from vprofile.core.tropopause import tropopause_index_from_altitude_and_temperature
from vprofile.exceptions import InvalidArgumentError, NotDerivableError
from vprofile.product.naming import axis_name_from_bounds, is_pressure_axis
from vprofile.product.variable import DataType, DimensionType, Variable

logger = logging.getLogger(__name__)

_altitude_from_gph = np.vectorize(altitude_from_gph_and_latitude, otypes=[np.float64])
_gph_from_altitude = np.vectorize(gph_from_altitude_and_latitude, otypes=[np.float64])
_geopotential_from_gph = np.vectorize(geopotential_from_gph, otypes=[np.float64])
_gph_from_geopotential = np.vectorize(gph_from_geopotential, otypes=[np.float64])


@dataclass(frozen=True)
class Source:
    """A variable a conversion rule needs, with the unit it wants it in."""
    name: str
    unit: Optional[str]
    # drop the trailing vertical dimension (e.g. latitude for an altitude profile)
    per_profile: bool = False


@dataclass(frozen=True)
class Conversion:
    """A physical derivation of `name` from a list of source variables."""
    name: str
    unit: str
    sources: Tuple[Source, ...]
    compute: Callable
    # the result has no vertical dimension while the sources do
    reduces_vertical: bool = False


def _tropopause(field: str):
    def compute(config: ProfileConfig, altitude, pressure, temperature):
        altitude = altitude.reshape(-1, altitude.shape[-1])
        pressure = pressure.reshape(-1, pressure.shape[-1])
        temperature = temperature.reshape(-1, temperature.shape[-1])
        result = np.full(altitude.shape[0], np.nan)
        for k in range(altitude.shape[0]):
            n = unpadded_length(altitude[k])
            index = tropopause_index_from_altitude_and_temperature(
                altitude[k, :n], pressure[k, :n], temperature[k, :n], config.tropopause,
                epsilon=config.numerics.epsilon,
            )
            if index >= 0:
                result[k] = altitude[k, index] if field == "altitude" else pressure[k, index]
        return result
    return compute


CONVERSIONS: List[Conversion] = [
    Conversion("geopotential", "m2/s2",
               (Source("geopotential_height", "m"),),
               lambda config, gph: _geopotential_from_gph(gph)),
    Conversion("geopotential_height", "m",
               (Source("geopotential", "m2/s2"),),
               lambda config, geopotential: _gph_from_geopotential(geopotential)),
    Conversion("geopotential_height", "m",
               (Source("altitude", "m"), Source("latitude", "degree_north", per_profile=True)),
               lambda config, altitude, latitude: _gph_from_altitude(altitude, latitude[..., np.newaxis])),
    Conversion("altitude", "m",
               (Source("geopotential_height", "m"), Source("latitude", "degree_north", per_profile=True)),
               lambda config, gph, latitude: _altitude_from_gph(gph, latitude[..., np.newaxis])),
    Conversion("tropopause_altitude", "m",
               (Source("altitude", "m"), Source("pressure", "Pa"), Source("temperature", "K")),
               _tropopause("altitude"), reduces_vertical=True),
    Conversion("tropopause_pressure", "Pa",
               (Source("altitude", "m"), Source("pressure", "Pa"), Source("temperature", "K")),
               _tropopause("pressure"), reduces_vertical=True),
]


def get_derived_variable(
    product,
    name: str,
    data_type: Optional[DataType],
    unit: Optional[str],
    dimension_type: Sequence[DimensionType],
    config: Optional[ProfileConfig] = None,
) -> Variable:
    """
    Derive a variable from a product.

    Parameters
    ----------
    product : Product
        Product to derive from (not modified)
    name : str
        Name of the variable to derive
    data_type : DataType or None
        Requested data type (None keeps the derived type)
    unit : str or None
        Requested unit (None keeps the derived unit)
    dimension_type : sequence of DimensionType
        Requested dimension signature
    config : ProfileConfig, optional
        Engine configuration (tropopause criteria)

    Returns
    -------
    Variable
        New variable, not attached to the product

    Raises
    ------
    NotDerivableError
        If the variable cannot be derived, or its unit cannot be converted
    """
    config = config or ProfileConfig()
    variable = _derive(product, name, tuple(dimension_type), config, frozenset())
    if unit is not None:
        variable.convert_unit(unit)
    if data_type is not None:
        variable.convert_data_type(data_type)
    return variable


def _derive(product, name: str, dimension_type: Tuple[DimensionType, ...], config: ProfileConfig,
            pending: FrozenSet[str]) -> Variable:
    pending = pending | {name}

    if product.has_variable(name):
        existing = product.get_variable(name)
        if existing.dimension_type == dimension_type:
            return existing.copy()
        if (len(dimension_type) > 0 and dimension_type[0] is DimensionType.TIME
                and existing.dimension_type == dimension_type[1:]):
            return _broadcast_over_time(product, existing)

    axis = axis_name_from_bounds(name)
    if (axis is not None and axis not in pending and len(dimension_type) > 1
            and dimension_type[-1] is DimensionType.INDEPENDENT):
        try:
            grid = _derive(product, axis, dimension_type[:-1], config, pending)
        except NotDerivableError:
            pass
        else:
            logger.debug(f"Deriving '{name}' from the midpoints of '{axis}'")
            bounds = bounds_from_midpoints(grid.data, log_space=is_pressure_axis(axis))
            return Variable(name, bounds, dimension_type, grid.unit)

    for conversion in CONVERSIONS:
        if conversion.name != name or any(source.name in pending for source in conversion.sources):
            continue
        try:
            return _convert(product, conversion, dimension_type, config, pending)
        except NotDerivableError as e:
            logger.debug(f"Conversion of '{name}' from {[s.name for s in conversion.sources]} failed: {e}")

    dims = ",".join(t.value for t in dimension_type)
    raise NotDerivableError(f"could not derive variable '{name}' {{{dims}}}")


def _broadcast_over_time(product, variable: Variable) -> Variable:
    num_time = product.dimension[DimensionType.TIME]
    if num_time == 0:
        raise NotDerivableError(f"cannot broadcast '{variable.name}' over time: product has no time dimension")
    data = np.broadcast_to(variable.data, (num_time,) + variable.data.shape).copy()
    return Variable(variable.name, data, (DimensionType.TIME,) + variable.dimension_type, variable.unit,
                    variable.description)


def _convert(product, conversion: Conversion, dimension_type: Tuple[DimensionType, ...], config: ProfileConfig,
             pending: FrozenSet[str]) -> Variable:
    if conversion.reduces_vertical:
        profile_dims = dimension_type + (DimensionType.VERTICAL,)
    else:
        profile_dims = dimension_type

    arrays = []
    for source in conversion.sources:
        source_dims = profile_dims
        if source.per_profile:
            if not profile_dims or profile_dims[-1] is not DimensionType.VERTICAL:
                raise NotDerivableError(f"'{source.name}' requires a vertical dimension")
            source_dims = profile_dims[:-1]
        variable = _derive(product, source.name, source_dims, config, pending)
        variable.convert_unit(source.unit)
        variable.convert_data_type(DataType.DOUBLE)
        arrays.append(variable.data)

    data = np.asarray(conversion.compute(config, *arrays), dtype=np.float64)
    expected = arrays[0].shape[:-1] if conversion.reduces_vertical else arrays[0].shape
    try:
        data = data.reshape(expected)
    except ValueError:
        raise InvalidArgumentError(f"derived '{conversion.name}' has unexpected shape {data.shape}") from None

    logger.debug(f"Derived '{conversion.name}' from {[s.name for s in conversion.sources]}")
    return Variable(conversion.name, data, dimension_type, conversion.unit)
