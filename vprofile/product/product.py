"""
Products: named collections of variables sharing dimension extents.

A product keeps its variables in insertion order and tracks the extent of
every dimension type in use. All variables using a dimension type must agree
on its extent, except for independent dimensions which are free.
"""

import logging
from typing import Dict, Iterable, Iterator, List, Optional, Sequence

import numpy as np

from vprofile.exceptions import InconsistentCollocationError, InvalidArgumentError
from vprofile.product import derive, regrid
from vprofile.product.variable import DataType, DimensionType, Variable

logger = logging.getLogger(__name__)


class Product:
    """Ordered set of variables with a shared dimension table.

    Attributes:
        source_product: Name of the product the variables were taken from
    """

    def __init__(self, variables: Optional[Iterable[Variable]] = None, source_product: Optional[str] = None):
        self.source_product = source_product
        self._variables: Dict[str, Variable] = {}
        self._dimension: Dict[DimensionType, int] = {t: 0 for t in DimensionType}
        for variable in variables or []:
            self.add_variable(variable)

    def __repr__(self):
        names = ", ".join(self._variables)
        return f"Product(source_product={self.source_product!r}, variables=[{names}])"

    def __len__(self) -> int:
        return len(self._variables)

    def __iter__(self) -> Iterator[Variable]:
        return iter(list(self._variables.values()))

    def __contains__(self, name: str) -> bool:
        return name in self._variables

    @property
    def variable_names(self) -> List[str]:
        return list(self._variables)

    @property
    def dimension(self) -> Dict[DimensionType, int]:
        """Extent per dimension type (0 when unused)."""
        return dict(self._dimension)

    def has_dimension(self, dimension_type: DimensionType) -> bool:
        return self._dimension[dimension_type] > 0

    def is_empty(self) -> bool:
        """A product is empty when it has no variables or no time samples."""
        if not self._variables:
            return True
        return self._dimension[DimensionType.TIME] == 0 and any(
            DimensionType.TIME in v.dimension_type for v in self._variables.values()
        )

    # -------------------------------------------------------------------------
    # Variable management
    # -------------------------------------------------------------------------

    def has_variable(self, name: str) -> bool:
        return name in self._variables

    def get_variable(self, name: str) -> Variable:
        try:
            return self._variables[name]
        except KeyError:
            raise InvalidArgumentError(f"product has no variable named '{name}'") from None

    def _check_dimensions(self, variable: Variable, ignore: Optional[str] = None):
        for dim_type, extent in zip(variable.dimension_type, variable.dimension):
            if dim_type is DimensionType.INDEPENDENT:
                continue
            current = self._extent_without(dim_type, ignore)
            if current and current != extent:
                raise InvalidArgumentError(
                    f"dimension of type '{dim_type.value}' of variable '{variable.name}' has length {extent}, "
                    f"product has length {current}"
                )

    def _extent_without(self, dim_type: DimensionType, ignore: Optional[str]) -> int:
        if ignore is None:
            return self._dimension[dim_type]
        for name, other in self._variables.items():
            if name == ignore:
                continue
            for other_type, extent in zip(other.dimension_type, other.dimension):
                if other_type is dim_type:
                    return extent
        return 0

    def _update_dimensions(self):
        self._dimension = {t: 0 for t in DimensionType}
        for variable in self._variables.values():
            for dim_type, extent in zip(variable.dimension_type, variable.dimension):
                if dim_type is not DimensionType.INDEPENDENT:
                    self._dimension[dim_type] = extent

    def add_variable(self, variable: Variable) -> None:
        """Add a variable; its name must be new and its extents consistent."""
        if variable.name in self._variables:
            raise InvalidArgumentError(f"product already contains a variable named '{variable.name}'")
        self._check_dimensions(variable)
        self._variables[variable.name] = variable
        self._update_dimensions()

    def replace_variable(self, variable: Variable) -> None:
        """Replace the variable of the same name, keeping its position."""
        if variable.name not in self._variables:
            raise InvalidArgumentError(f"product has no variable named '{variable.name}'")
        self._check_dimensions(variable, ignore=variable.name)
        self._variables[variable.name] = variable
        self._update_dimensions()

    def remove_variable(self, name: str) -> Variable:
        variable = self.get_variable(name)
        del self._variables[name]
        self._update_dimensions()
        return variable

    def set_variables(self, variables: Sequence[Variable]) -> None:
        """Replace the full content of the product.

        Used when all vertical variables change extent at once (regridding).
        """
        self._variables = {}
        self._update_dimensions()
        for variable in variables:
            self.add_variable(variable)

    def copy(self) -> "Product":
        """Deep copy of the product."""
        return Product((v.copy() for v in self._variables.values()), source_product=self.source_product)

    # -------------------------------------------------------------------------
    # Sample selection and concatenation
    # -------------------------------------------------------------------------

    def select_rows(self, rows: Sequence[int]) -> None:
        """Keep the given time samples (in the given order) of every time dependent variable."""
        rows = np.asarray(rows, dtype=np.int64)
        for variable in self._variables.values():
            if variable.num_dimensions > 0 and variable.dimension_type[0] is DimensionType.TIME:
                variable.data = variable.data[rows]
        self._update_dimensions()

    def filter_by_index(self, variable_name: str, index_values: Sequence[int]) -> None:
        """
        Reorder and filter the time samples to match a list of index values.

        After the call, sample i of the product is the sample whose
        `variable_name` value equals ``index_values[i]``.

        Raises:
            InvalidArgumentError: If the index variable is not an int32 {time} variable
            InconsistentCollocationError: If an index value is not present
        """
        index = self.get_variable(variable_name)
        if index.dimension_type != (DimensionType.TIME,):
            raise InvalidArgumentError(f"variable '{variable_name}' should have dimensions {{time}}")
        if index.data_type is not DataType.INT32:
            raise InvalidArgumentError(f"variable '{variable_name}' should be of type int32")

        row_of = {int(value): row for row, value in enumerate(index.data)}
        rows = []
        for value in np.asarray(index_values).ravel():
            row = row_of.get(int(value))
            if row is None:
                raise InconsistentCollocationError(f"product does not contain {variable_name} value {int(value)}")
            rows.append(row)

        logger.debug(f"Filtering product on '{variable_name}' ({len(row_of)} -> {len(rows)} samples)")
        self.select_rows(rows)

    def append(self, other: "Product") -> None:
        """
        Append the time samples of another product.

        Both products must hold the same variables. Time dependent variables
        are concatenated; other dimensions of differing extent are padded
        (NaN for floating point data). Time independent variables must be
        identical.
        """
        if set(self._variables) != set(other.variable_names):
            raise InvalidArgumentError("products don't have the same list of variables")

        for name, variable in self._variables.items():
            other_variable = other.get_variable(name)
            if variable.dimension_type != other_variable.dimension_type:
                raise InvalidArgumentError(f"variable '{name}' has inconsistent dimensions between products")
            if variable.num_dimensions == 0 or variable.dimension_type[0] is not DimensionType.TIME:
                if not np.array_equal(variable.data, other_variable.data, equal_nan=variable.data.dtype.kind == "f"):
                    raise InvalidArgumentError(f"time independent variable '{name}' differs between products")
                continue

            this_data, other_data = _pad_to_common_shape(variable, other_variable)
            variable.data = np.concatenate([this_data, other_data], axis=0)

        self._update_dimensions()

    # -------------------------------------------------------------------------
    # Derivation and regridding
    # -------------------------------------------------------------------------

    def get_derived_variable(self, name: str, data_type: Optional[DataType], unit: Optional[str],
                             dimension_type: Sequence[DimensionType], config=None) -> Variable:
        """Derive a new variable from the content of this product."""
        return derive.get_derived_variable(self, name, data_type, unit, dimension_type, config)

    def add_derived_variable(self, name: str, data_type: Optional[DataType], unit: Optional[str],
                             dimension_type: Sequence[DimensionType], config=None) -> None:
        """Derive a variable and add it, replacing an existing variable of the same name."""
        variable = self.get_derived_variable(name, data_type, unit, dimension_type, config)
        if self.has_variable(name):
            self.replace_variable(variable)
        else:
            self.add_variable(variable)

    def regrid_with_axis_variable(self, target_grid: Variable, target_bounds: Optional[Variable] = None,
                                  config=None) -> None:
        """Regrid all vertical variables onto a new vertical axis."""
        regrid.regrid_with_axis_variable(self, target_grid, target_bounds, config)


def _pad_to_common_shape(a: Variable, b: Variable):
    """Pad non-time dimensions of two variables to their common extent."""
    shape = tuple(max(x, y) for x, y in zip(a.dimension[1:], b.dimension[1:]))
    return _pad(a, shape), _pad(b, shape)


def _pad(variable: Variable, shape) -> np.ndarray:
    data = variable.data
    if data.shape[1:] == shape:
        return data
    for dim_type, have, want in zip(variable.dimension_type[1:], data.shape[1:], shape):
        if have != want and dim_type is DimensionType.INDEPENDENT:
            raise InvalidArgumentError(f"independent dimension of variable '{variable.name}' differs between products")
    if data.dtype.kind == "f":
        fill = np.nan
    elif data.dtype.kind == "O":
        fill = ""
    else:
        fill = 0
    padded = np.full((data.shape[0],) + shape, fill, dtype=data.dtype)
    padded[tuple(slice(0, n) for n in data.shape)] = data
    return padded
