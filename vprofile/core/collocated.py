"""
Smoothing with the averaging kernels of collocated products.

A reference product (e.g. model or sonde profiles) is made comparable to a
retrieval by applying the retrieval's averaging kernel and apriori. The
kernels, apriori profiles and vertical grids are taken from a collocated
product, or gathered from all products of dataset B of a collocation result.
Samples are matched on ``collocation_index``: the collocated samples are
reordered so that row i belongs to row i of the reference product.

Two kinds of results are supported:

- profiles: the reference product is regridded onto the kernel grid and the
  requested variables are smoothed in place;
- columns: a partial column profile is derived from the reference product,
  regridded onto the column kernel grid and integrated with the column kernel.
"""

import logging
from typing import Callable, List, Optional, Sequence

import numpy as np
from numba import jit

from vprofile.config.settings import ProfileConfig
from vprofile.core.grid import bounds_from_midpoints
from vprofile.core.smoothing import variable_smooth_vertical
from vprofile.exceptions import (
    InconsistentCollocationError,
    InvalidArgumentError,
    NotDerivableError,
    OutOfMemoryError,
)
from vprofile.product.collocation import CollocationResult
from vprofile.product.naming import (
    COLLOCATION_INDEX,
    apriori_name,
    avk_name,
    bounds_name,
    is_profile_auxiliary,
    is_pressure_axis,
)
from vprofile.product.product import Product
from vprofile.product.regrid import derive_axis
from vprofile.product.variable import DataType, DimensionType, Variable

logger = logging.getLogger(__name__)

TIME = DimensionType.TIME
VERTICAL = DimensionType.VERTICAL
INDEPENDENT = DimensionType.INDEPENDENT

GRID_DIMS = (TIME, VERTICAL)
BOUNDS_DIMS = (TIME, VERTICAL, INDEPENDENT)
AVK_DIMS = (TIME, VERTICAL, VERTICAL)


# =============================================================================
# Numba-accelerated column kernel
# =============================================================================

@jit(nopython=True, cache=True)
def _smoothed_column(partial_column, column_avk, apriori, has_apriori, column):
    """
    Integrate partial columns with a column averaging kernel.

    column[i] = sum_j avk[i, j] (pc[i, j] - apr[i, j]) + apr[i, j], where
    terms with a NaN partial column or NaN apriori are left out. The result
    is NaN when no term contributed.
    """
    num_columns, num_levels = partial_column.shape
    for i in range(num_columns):
        value = 0.0
        valid = False
        for j in range(num_levels):
            apriori_valid = has_apriori and not np.isnan(apriori[i, j])
            if not np.isnan(partial_column[i, j]):
                value += column_avk[i, j] * partial_column[i, j]
                valid = True
                if apriori_valid:
                    value -= column_avk[i, j] * apriori[i, j]
            if apriori_valid:
                value += apriori[i, j]
                valid = True
        column[i] = value if valid else np.nan


# =============================================================================
# Shared steps
# =============================================================================

def _check_source_product(product: Product, smooth_variables: Sequence[str] = ()) -> np.ndarray:
    """Validate the reference product and return its collocation indices."""
    if not product.has_dimension(VERTICAL):
        raise InvalidArgumentError("product has no vertical dimension")
    for name in smooth_variables:
        if not product.has_variable(name):
            raise InvalidArgumentError(f"product has no variable named '{name}'")
    return product.get_variable(COLLOCATION_INDEX).data


def _check_column_dimensions(dimension_type: Sequence[DimensionType]) -> tuple:
    dimension_type = tuple(dimension_type)
    if len(dimension_type) == 0 or dimension_type[0] is not TIME:
        raise InvalidArgumentError(
            "first dimension of requested smoothed vertical column should be the time dimension"
        )
    if len(dimension_type) >= len(DimensionType):
        raise InvalidArgumentError(f"number of dimensions ({len(dimension_type)}) too large")
    return dimension_type


def _try_add(product: Product, variable_name: str, unit: Optional[str], dimension_type,
             config: ProfileConfig) -> None:
    """Add an optional derived variable; failure to derive it is not an error."""
    try:
        product.add_derived_variable(variable_name, DataType.DOUBLE, unit, dimension_type, config)
    except NotDerivableError as e:
        logger.debug(f"Optional variable '{variable_name}' not available: {e}")


def _try_add_from(target: Product, source: Product, variable_name: str, unit: Optional[str], dimension_type,
                  config: ProfileConfig) -> None:
    try:
        variable = source.get_derived_variable(variable_name, DataType.DOUBLE, unit, dimension_type, config)
    except NotDerivableError as e:
        logger.debug(f"Optional variable '{variable_name}' not available: {e}")
        return
    target.add_variable(variable)


def _merge_collocated_dataset(
    collocation_index: np.ndarray,
    collocation_result: CollocationResult,
    add_variables: Callable[[Product], None],
    keep: Callable[[str], bool],
) -> Product:
    """
    Gather the dataset B samples that match the reference product.

    Every dataset B product that takes part in a pair is reduced to its
    matching samples, extended by `add_variables`, stripped to the variables
    accepted by `keep`, and appended to the merged product.
    """
    filtered = collocation_result.shallow_copy()
    filtered.filter_for_collocation_indices(collocation_index)
    if filtered.num_pairs != len(collocation_index):
        raise InconsistentCollocationError("product and collocation result are inconsistent")

    merged = None
    for source_product in filtered.dataset_b.source_product:
        collocated_product = filtered.get_filtered_product_b(source_product)
        if collocated_product is None:
            logger.debug(f"No matching pairs for '{source_product}'")
            continue
        if collocated_product.is_empty():
            logger.warning(f"Skipping empty collocated product '{source_product}'")
            continue

        add_variables(collocated_product)
        for name in collocated_product.variable_names:
            if name != COLLOCATION_INDEX and not keep(name):
                collocated_product.remove_variable(name)

        if merged is None:
            merged = collocated_product
        else:
            merged.append(collocated_product)
        logger.debug(f"Merged {collocated_product.dimension[TIME]} samples from '{source_product}'")

    if merged is None:
        raise InconsistentCollocationError("collocated dataset does not contain any matching pairs")
    return merged


def _smooth_with_auxiliaries(product: Product, smooth_variables: Sequence[str], vertical_axis: str,
                             auxiliary: Product, collocation_index: np.ndarray, config: ProfileConfig) -> None:
    auxiliary.filter_by_index(COLLOCATION_INDEX, collocation_index)

    vertical_grid = auxiliary.get_variable(vertical_axis)
    vertical_bounds = auxiliary.get_variable(bounds_name(vertical_axis))
    product.regrid_with_axis_variable(vertical_grid, vertical_bounds, config)

    for name in smooth_variables:
        variable = product.get_variable(name)
        avk = auxiliary.get_variable(avk_name(name))
        apriori = None
        if auxiliary.has_variable(apriori_name(name)):
            apriori = auxiliary.get_variable(apriori_name(name))
        logger.debug(f"Smoothing '{name}' (apriori: {apriori is not None})")
        variable_smooth_vertical(variable, vertical_grid, avk, apriori)


# =============================================================================
# Profile smoothing
# =============================================================================

def product_smooth_vertical_with_collocated_product(
    product: Product,
    smooth_variables: Sequence[str],
    vertical_axis: str,
    vertical_unit: Optional[str],
    collocated_product: Product,
    config: Optional[ProfileConfig] = None,
) -> None:
    """
    Smooth variables of a product with the kernels of a collocated product.

    The product is first regridded onto the vertical grid of the averaging
    kernels; every variable in `smooth_variables` is then smoothed with
    ``<variable>_avk`` and, when the collocated product provides it,
    ``<variable>_apriori``.

    Parameters
    ----------
    product : Product
        Reference product, modified in place; needs a collocation_index variable
    smooth_variables : sequence of str
        Names of the variables to smooth
    vertical_axis : str
        Name of the vertical axis variable (e.g. 'altitude', 'pressure')
    vertical_unit : str
        Unit in which the vertical axis is compared
    collocated_product : Product
        Product holding the kernels, apriori and vertical grid
    config : ProfileConfig, optional
        Engine configuration

    Raises
    ------
    InvalidArgumentError
        If the product has no vertical dimension, lacks a variable to smooth
        or its collocation_index, or dimensions do not line up
    NotDerivableError
        If the grid, grid bounds or a kernel cannot be derived
    InconsistentCollocationError
        If a sample of the product has no collocated counterpart
    """
    config = config or ProfileConfig()
    smooth_variables = list(smooth_variables)
    collocation_index = _check_source_product(product, smooth_variables)

    logger.info(f"Smoothing {len(smooth_variables)} variable(s) with collocated product on '{vertical_axis}'")

    auxiliary = Product()
    auxiliary.add_variable(collocated_product.get_derived_variable(COLLOCATION_INDEX, DataType.INT32, None,
                                                                   (TIME,), config))
    auxiliary.add_variable(collocated_product.get_derived_variable(vertical_axis, DataType.DOUBLE, vertical_unit,
                                                                   GRID_DIMS, config))
    auxiliary.add_variable(collocated_product.get_derived_variable(bounds_name(vertical_axis), DataType.DOUBLE,
                                                                   vertical_unit, BOUNDS_DIMS, config))
    for name in smooth_variables:
        unit = product.get_variable(name).unit
        auxiliary.add_variable(collocated_product.get_derived_variable(avk_name(name), DataType.DOUBLE, "",
                                                                       AVK_DIMS, config))
        _try_add_from(auxiliary, collocated_product, apriori_name(name), unit, GRID_DIMS, config)

    _smooth_with_auxiliaries(product, smooth_variables, vertical_axis, auxiliary, collocation_index, config)


def product_smooth_vertical_with_collocated_dataset(
    product: Product,
    smooth_variables: Sequence[str],
    vertical_axis: str,
    vertical_unit: Optional[str],
    collocation_result: CollocationResult,
    config: Optional[ProfileConfig] = None,
) -> None:
    """
    Smooth variables of a product with the kernels of collocated dataset B products.

    As product_smooth_vertical_with_collocated_product, with the vertical
    grids, kernels and apriori profiles gathered from every dataset B product
    that has a pair with a sample of `product`.

    Raises
    ------
    InconsistentCollocationError
        If the collocation result does not hold exactly one pair per sample
        of the product, or no dataset B product has a matching pair
    """
    config = config or ProfileConfig()
    smooth_variables = list(smooth_variables)
    collocation_index = _check_source_product(product, smooth_variables)
    units = {name: product.get_variable(name).unit for name in smooth_variables}
    grid_bounds = bounds_name(vertical_axis)

    logger.info(f"Smoothing {len(smooth_variables)} variable(s) with collocated dataset on '{vertical_axis}'")

    def add_variables(collocated_product: Product) -> None:
        collocated_product.add_derived_variable(vertical_axis, DataType.DOUBLE, vertical_unit, GRID_DIMS, config)
        collocated_product.add_derived_variable(grid_bounds, DataType.DOUBLE, vertical_unit, BOUNDS_DIMS, config)
        for name in smooth_variables:
            collocated_product.add_derived_variable(avk_name(name), DataType.DOUBLE, "", AVK_DIMS, config)
            _try_add(collocated_product, apriori_name(name), units[name], GRID_DIMS, config)

    def keep(name: str) -> bool:
        return name in (vertical_axis, grid_bounds) or is_profile_auxiliary(name)

    merged = _merge_collocated_dataset(collocation_index, collocation_result, add_variables, keep)
    _smooth_with_auxiliaries(product, smooth_variables, vertical_axis, merged, collocation_index, config)


# =============================================================================
# Smoothed columns
# =============================================================================

def product_get_smoothed_column(
    product: Product,
    name: str,
    unit: Optional[str],
    vertical_grid: Variable,
    vertical_bounds: Optional[Variable],
    column_avk: Variable,
    apriori: Optional[Variable] = None,
    config: Optional[ProfileConfig] = None,
) -> Variable:
    """
    Derive a column smoothed with a column averaging kernel.

    A partial column profile `name` is derived from the product, regridded
    onto the grid of the column kernel and integrated with the kernel and
    optional apriori.

    Parameters
    ----------
    product : Product
        Product to derive the partial column profile from (not modified)
    name : str
        Name of the partial column profile, and of the resulting column
    unit : str
        Unit of the partial column profile and of the result
    vertical_grid : Variable
        Vertical grid of the column kernel, last dimension vertical
    vertical_bounds : Variable, optional
        Grid bounds of the column kernel
    column_avk : Variable
        Column averaging kernel, last dimension vertical
    apriori : Variable, optional
        Apriori partial column profile, same dimensions as `column_avk`
    config : ProfileConfig, optional
        Engine configuration

    Returns
    -------
    Variable
        Smoothed column, dimensions of `column_avk` without the vertical one
    """
    config = config or ProfileConfig()

    if not product.has_dimension(VERTICAL):
        raise InvalidArgumentError("product has no vertical dimension")
    if vertical_grid.num_dimensions < 1 or vertical_grid.dimension_type[-1] is not VERTICAL:
        raise InvalidArgumentError("vertical grid has invalid dimensions")
    if vertical_grid.data_type is not DataType.DOUBLE:
        raise InvalidArgumentError("invalid data type for vertical grid")
    if column_avk.num_dimensions < 1 or column_avk.dimension_type[-1] is not VERTICAL:
        raise InvalidArgumentError("column avk has invalid dimensions")
    num_levels = vertical_grid.dimension[-1]
    if column_avk.dimension[-1] != num_levels:
        raise InvalidArgumentError("column avk and vertical grid have inconsistent dimensions")
    if column_avk.data_type is not DataType.DOUBLE:
        raise InvalidArgumentError("invalid data type for column avk")
    if apriori is not None:
        if apriori.data_type is not DataType.DOUBLE:
            raise InvalidArgumentError("invalid data type for apriori")
        if apriori.dimension_type != column_avk.dimension_type or apriori.dimension != column_avk.dimension:
            raise InvalidArgumentError("apriori profile and column avk have inconsistent dimensions")

    regrid_product = Product()
    regrid_product.add_variable(product.get_derived_variable(name, DataType.DOUBLE, unit,
                                                             column_avk.dimension_type, config))

    source_grid = derive_axis(product, vertical_grid.name, vertical_grid.unit)
    regrid_product.add_variable(source_grid)
    regrid_product.add_variable(_source_bounds(product, source_grid, config))

    regrid_product.regrid_with_axis_variable(vertical_grid, vertical_bounds, config)
    partial_column = regrid_product.get_variable(name)
    if partial_column.dimension != column_avk.dimension:
        raise InvalidArgumentError("partial column profile and column avk have inconsistent dimensions")

    try:
        column = np.empty(column_avk.num_elements // num_levels if num_levels else 0, dtype=np.float64)
    except MemoryError:
        raise OutOfMemoryError("out of memory (could not allocate smoothed column)") from None

    if num_levels > 0:
        if apriori is not None:
            apriori_data = np.ascontiguousarray(apriori.data).reshape(-1, num_levels)
        else:
            apriori_data = np.empty((0, 0), dtype=np.float64)
        _smoothed_column(np.ascontiguousarray(partial_column.data).reshape(-1, num_levels),
                         np.ascontiguousarray(column_avk.data).reshape(-1, num_levels),
                         apriori_data, apriori is not None, column)
    else:
        column[:] = np.nan

    return Variable(name, column.reshape(column_avk.dimension[:-1]), column_avk.dimension_type[:-1], unit)


def _source_bounds(product: Product, source_grid: Variable, config: ProfileConfig) -> Variable:
    """Bounds of the source grid, derived from the product or from the grid midpoints."""
    name = bounds_name(source_grid.name)
    try:
        return product.get_derived_variable(name, DataType.DOUBLE, source_grid.unit,
                                            source_grid.dimension_type + (INDEPENDENT,), config)
    except NotDerivableError:
        logger.debug(f"Computing '{name}' from the midpoints of '{source_grid.name}'")
        bounds = bounds_from_midpoints(source_grid.data, log_space=is_pressure_axis(source_grid.name))
        return Variable(name, bounds, source_grid.dimension_type + (INDEPENDENT,), source_grid.unit)


def product_get_smoothed_column_using_collocated_product(
    product: Product,
    name: str,
    unit: Optional[str],
    dimension_type: Sequence[DimensionType],
    vertical_axis: str,
    vertical_unit: Optional[str],
    collocated_product: Product,
    config: Optional[ProfileConfig] = None,
) -> Variable:
    """
    Derive a smoothed column using the column kernel of a collocated product.

    The collocated product provides ``<name>_avk`` (and optionally
    ``<name>_apriori``) with dimensions `dimension_type` + {vertical}, and
    the vertical grid and grid bounds of the kernel.

    Returns
    -------
    Variable
        Smoothed column with dimensions `dimension_type`
    """
    config = config or ProfileConfig()
    dimension_type = _check_column_dimensions(dimension_type)
    collocation_index = _check_source_product(product)
    profile_dims = dimension_type + (VERTICAL,)

    logger.info(f"Deriving smoothed column '{name}' with collocated product on '{vertical_axis}'")

    auxiliary = Product()
    auxiliary.add_variable(collocated_product.get_derived_variable(COLLOCATION_INDEX, DataType.INT32, None,
                                                                   (TIME,), config))
    auxiliary.add_variable(collocated_product.get_derived_variable(vertical_axis, DataType.DOUBLE, vertical_unit,
                                                                   GRID_DIMS, config))
    auxiliary.add_variable(collocated_product.get_derived_variable(bounds_name(vertical_axis), DataType.DOUBLE,
                                                                   vertical_unit, BOUNDS_DIMS, config))
    auxiliary.add_variable(collocated_product.get_derived_variable(avk_name(name), DataType.DOUBLE, "",
                                                                   profile_dims, config))
    _try_add_from(auxiliary, collocated_product, apriori_name(name), unit, profile_dims, config)

    return _smoothed_column_from_auxiliaries(product, name, unit, vertical_axis, auxiliary, collocation_index,
                                             config)


def product_get_smoothed_column_using_collocated_dataset(
    product: Product,
    name: str,
    unit: Optional[str],
    dimension_type: Sequence[DimensionType],
    vertical_axis: str,
    vertical_unit: Optional[str],
    collocation_result: CollocationResult,
    config: Optional[ProfileConfig] = None,
) -> Variable:
    """
    Derive a smoothed column using the column kernels of collocated dataset B products.

    Returns
    -------
    Variable
        Smoothed column with dimensions `dimension_type`

    Raises
    ------
    InconsistentCollocationError
        If the collocation result does not hold exactly one pair per sample
        of the product, or no dataset B product has a matching pair
    """
    config = config or ProfileConfig()
    dimension_type = _check_column_dimensions(dimension_type)
    collocation_index = _check_source_product(product)
    profile_dims = dimension_type + (VERTICAL,)
    keep_names: List[str] = [vertical_axis, bounds_name(vertical_axis), avk_name(name), apriori_name(name)]

    logger.info(f"Deriving smoothed column '{name}' with collocated dataset on '{vertical_axis}'")

    def add_variables(collocated_product: Product) -> None:
        collocated_product.add_derived_variable(vertical_axis, DataType.DOUBLE, vertical_unit, GRID_DIMS, config)
        collocated_product.add_derived_variable(bounds_name(vertical_axis), DataType.DOUBLE, vertical_unit,
                                                BOUNDS_DIMS, config)
        collocated_product.add_derived_variable(avk_name(name), DataType.DOUBLE, "", profile_dims, config)
        _try_add(collocated_product, apriori_name(name), unit, profile_dims, config)

    merged = _merge_collocated_dataset(collocation_index, collocation_result, add_variables,
                                       lambda variable_name: variable_name in keep_names)
    return _smoothed_column_from_auxiliaries(product, name, unit, vertical_axis, merged, collocation_index, config)


def _smoothed_column_from_auxiliaries(product: Product, name: str, unit: Optional[str], vertical_axis: str,
                                      auxiliary: Product, collocation_index: np.ndarray,
                                      config: ProfileConfig) -> Variable:
    auxiliary.filter_by_index(COLLOCATION_INDEX, collocation_index)
    apriori = None
    if auxiliary.has_variable(apriori_name(name)):
        apriori = auxiliary.get_variable(apriori_name(name))
    return product_get_smoothed_column(
        product, name, unit,
        auxiliary.get_variable(vertical_axis),
        auxiliary.get_variable(bounds_name(vertical_axis)),
        auxiliary.get_variable(avk_name(name)),
        apriori,
        config,
    )
