"""
Vertical regridding of products.

All variables of a product whose last dimension is vertical are brought onto
a new vertical axis. Profiles are interpolated linearly (in log space for
pressure-like axes); partial column profiles are redistributed by layer
overlap when grid bounds are available, which conserves the column amount.
Target levels outside the source range become NaN.
"""

import logging
from typing import Optional

import numpy as np
from numba import jit

from vprofile.config.settings import ProfileConfig
from vprofile.core.grid import unpadded_length
from vprofile.exceptions import InvalidArgumentError, NotDerivableError
from vprofile.product.derive import get_derived_variable
from vprofile.product.naming import bounds_name, is_partial_column, is_pressure_axis
from vprofile.product.variable import DataType, DimensionType, Variable

logger = logging.getLogger(__name__)


# =============================================================================
# Interpolation kernels
# =============================================================================

def _interpolate_linear(source_grid: np.ndarray, source_values: np.ndarray, target_grid: np.ndarray) -> np.ndarray:
    """Linear interpolation of one profile; NaN outside the source range."""
    out = np.full(len(target_grid), np.nan)
    if len(source_grid) == 0:
        return out
    if source_grid[0] > source_grid[-1]:
        source_grid, source_values = source_grid[::-1], source_values[::-1]

    valid = ~np.isnan(target_grid)
    out[valid] = np.interp(target_grid[valid], source_grid, source_values, left=np.nan, right=np.nan)
    return out


@jit(nopython=True, cache=True)
def _interpolate_interval(source_bounds, source_values, target_bounds, out):
    """Overlap-weighted redistribution of layer amounts onto target layers."""
    for t in range(target_bounds.shape[0]):
        t_low = min(target_bounds[t, 0], target_bounds[t, 1])
        t_high = max(target_bounds[t, 0], target_bounds[t, 1])
        out[t] = np.nan
        if np.isnan(t_low) or np.isnan(t_high):
            continue
        total = 0.0
        valid = False
        for s in range(source_bounds.shape[0]):
            value = source_values[s]
            if np.isnan(value):
                continue
            s_low = min(source_bounds[s, 0], source_bounds[s, 1])
            s_high = max(source_bounds[s, 0], source_bounds[s, 1])
            width = s_high - s_low
            if not width > 0:
                continue
            overlap = min(s_high, t_high) - max(s_low, t_low)
            if overlap > 0:
                total += value * overlap / width
                valid = True
        if valid:
            out[t] = total


# =============================================================================
# Regridding
# =============================================================================

def derive_axis(product, name: str, unit: Optional[str]) -> Variable:
    """Derive a vertical axis, preferring a time independent one."""
    try:
        return get_derived_variable(product, name, DataType.DOUBLE, unit, (DimensionType.VERTICAL,))
    except NotDerivableError:
        return get_derived_variable(product, name, DataType.DOUBLE, unit,
                                    (DimensionType.TIME, DimensionType.VERTICAL))


def _check_target(product, target_grid: Variable, target_bounds: Optional[Variable]):
    dims = target_grid.dimension_type
    if dims not in ((DimensionType.VERTICAL,), (DimensionType.TIME, DimensionType.VERTICAL)):
        raise InvalidArgumentError("target grid should have dimensions {vertical} or {time,vertical}")
    if target_grid.data_type is not DataType.DOUBLE:
        raise InvalidArgumentError("invalid data type for target grid")
    if dims[0] is DimensionType.TIME and target_grid.dimension[0] != product.dimension[DimensionType.TIME]:
        raise InvalidArgumentError("time dimension of target grid does not match product")
    if target_bounds is not None:
        if target_bounds.dimension_type != dims + (DimensionType.INDEPENDENT,):
            raise InvalidArgumentError("target bounds should have the dimensions of the target grid plus {2}")
        if target_bounds.dimension != target_grid.dimension + (2,):
            raise InvalidArgumentError("target bounds and target grid have inconsistent dimensions")
        if target_bounds.data_type is not DataType.DOUBLE:
            raise InvalidArgumentError("invalid data type for target bounds")


def regrid_with_axis_variable(
    product,
    target_grid: Variable,
    target_bounds: Optional[Variable] = None,
    config: Optional[ProfileConfig] = None,
) -> None:
    """
    Regrid a product in place onto a new vertical axis.

    Parameters
    ----------
    product : Product
        Product to regrid
    target_grid : Variable
        Target axis {vertical} or {time,vertical}; its name and unit select the
        source axis that is derived from the product
    target_bounds : Variable, optional
        Bounds of the target axis, needed for interval regridding of partial
        column profiles
    config : ProfileConfig, optional
        Engine configuration

    Raises
    ------
    InvalidArgumentError
        If the target axis has invalid dimensions
    NotDerivableError
        If the product has no matching source axis
    """
    config = config or ProfileConfig()
    _check_target(product, target_grid, target_bounds)

    axis = target_grid.name
    source_grid = derive_axis(product, axis, target_grid.unit)
    source_bounds = None
    if target_bounds is not None and config.regrid.interval_partial_columns:
        try:
            source_bounds = get_derived_variable(product, bounds_name(axis), DataType.DOUBLE, target_grid.unit,
                                                 source_grid.dimension_type + (DimensionType.INDEPENDENT,))
        except NotDerivableError as e:
            logger.debug(f"No source bounds for '{axis}': {e}")

    log_space = config.regrid.log_pressure and is_pressure_axis(axis)
    source_x = np.log(source_grid.data) if log_space else source_grid.data
    target_x = np.log(target_grid.data) if log_space else target_grid.data
    num_target = target_grid.dimension[-1]

    logger.info(f"Regridding product on '{axis}' ({source_grid.dimension[-1]} -> {num_target} levels)")

    num_time = product.dimension[DimensionType.TIME]
    time_dependent_axis = source_grid.num_dimensions == 2 or target_grid.num_dimensions == 2

    variables = []
    for variable in product:
        if variable.name == axis:
            variables.append(target_grid.copy())
            continue

        num_vertical = sum(1 for t in variable.dimension_type if t is DimensionType.VERTICAL)
        if num_vertical == 0:
            variables.append(variable)
            continue
        if (variable.name.endswith("_bounds") or num_vertical > 1
                or variable.dimension_type[-1] is not DimensionType.VERTICAL):
            logger.debug(f"Removing variable '{variable.name}' during regridding")
            continue
        if variable.data_type not in (DataType.FLOAT, DataType.DOUBLE):
            logger.debug(f"Removing non floating point variable '{variable.name}' during regridding")
            continue

        if time_dependent_axis and variable.dimension_type[0] is not DimensionType.TIME:
            variable = Variable(variable.name, np.broadcast_to(variable.data, (num_time,) + variable.dimension),
                                (DimensionType.TIME,) + variable.dimension_type, variable.unit,
                                variable.description)

        if source_bounds is not None and is_partial_column(variable.name):
            source, target = source_bounds.data, target_bounds.data
            if log_space:
                source, target = np.log(source), np.log(target)
            variables.append(_regrid_variable(variable, source, target, num_target, interval=True))
        else:
            variables.append(_regrid_variable(variable, source_x, target_x, num_target, interval=False))

    product.set_variables(variables)


def _regrid_variable(variable: Variable, source: np.ndarray, target: np.ndarray, num_target: int,
                     interval: bool) -> Variable:
    data = np.ascontiguousarray(variable.data, dtype=np.float64)
    time_dependent = variable.dimension_type[0] is DimensionType.TIME
    num_time = data.shape[0] if time_dependent else 1
    blocks = data.reshape(num_time, -1, data.shape[-1])
    result = np.full(blocks.shape[:2] + (num_target,), np.nan)

    # axes are {vertical} or {time,vertical}, bounds carry a trailing {2}
    axis_ndim = 2 if interval else 1

    for k in range(num_time):
        source_row = np.ascontiguousarray(source[k] if source.ndim > axis_ndim else source)
        target_row = np.ascontiguousarray(target[k] if target.ndim > axis_ndim else target)
        if not interval:
            source_row = source_row[:unpadded_length(source_row)]
        for b in range(blocks.shape[1]):
            values = blocks[k, b]
            if interval:
                _interpolate_interval(source_row, values, target_row, result[k, b])
            else:
                result[k, b] = _interpolate_linear(source_row, values[:len(source_row)], target_row)

    return Variable(variable.name, result.reshape(data.shape[:-1] + (num_target,)), variable.dimension_type,
                    variable.unit, variable.description)
