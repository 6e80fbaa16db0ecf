"""
Vertical smoothing with an averaging kernel.

A profile x is smoothed as x' = x_a + A (x - x_a), with A the averaging
kernel and x_a the (optional) apriori. This maps a high resolution reference
profile onto what a retrieval with that kernel would have reported.
"""

from typing import Optional

import numpy as np
from numba import jit

from vprofile.core.grid import unpadded_length
from vprofile.exceptions import InvalidArgumentError, OutOfMemoryError
from vprofile.product.variable import DataType, DimensionType, Variable

TIME = DimensionType.TIME
VERTICAL = DimensionType.VERTICAL


@jit(nopython=True, cache=True)
def _smooth(data, num_valid, averaging_kernel, apriori, has_apriori, vector):
    """
    Apply the averaging kernel to every profile in place.

    data: (time, blocks, vertical); num_valid: valid levels per time row;
    averaging_kernel: (time, vertical, vertical); apriori: (time, vertical).
    """
    num_time, num_blocks, _ = data.shape
    for k in range(num_time):
        n = num_valid[k]
        for b in range(num_blocks):
            for i in range(n):
                vector[i] = data[k, b, i]
                if has_apriori:
                    vector[i] -= apriori[k, i]

            for i in range(n):
                if np.isnan(vector[i]):
                    continue
                value = 0.0
                count = 0
                for j in range(n):
                    if not np.isnan(vector[j]):
                        value += averaging_kernel[k, i, j] * vector[j]
                        count += 1
                if has_apriori:
                    value += apriori[k, i]
                elif count == 0:
                    value = np.nan
                data[k, b, i] = value


def variable_smooth_vertical(
    variable: Variable,
    vertical_axis: Optional[Variable],
    averaging_kernel: Variable,
    apriori: Optional[Variable] = None,
) -> None:
    """
    Smooth a variable in place with an averaging kernel and optional apriori.

    Parameters
    ----------
    variable : Variable
        Variable to smooth, dimensions {time,...,vertical}
    vertical_axis : Variable, optional
        Vertical grid {time,vertical}; its trailing NaN padding determines
        the number of valid levels per time sample
    averaging_kernel : Variable
        Averaging kernel {time,vertical,vertical}
    apriori : Variable, optional
        Apriori profile {time,vertical}

    Raises
    ------
    InvalidArgumentError
        If an input is missing, is not double precision or has inconsistent
        dimensions
    OutOfMemoryError
        If the working buffer cannot be allocated

    Notes
    -----
    All inputs must be of type DataType.DOUBLE. Levels whose value is NaN,
    and levels beyond the valid length, are left untouched.
    """
    if variable is None:
        raise InvalidArgumentError("variable is None")
    if averaging_kernel is None:
        raise InvalidArgumentError("avk is None")
    if variable.data_type is not DataType.DOUBLE:
        raise InvalidArgumentError("invalid data type for variable")
    if (variable.num_dimensions < 2 or variable.dimension_type[0] is not TIME
            or variable.dimension_type[-1] is not VERTICAL):
        raise InvalidArgumentError("variable should have dimensions {time,...,vertical}")
    if averaging_kernel.data_type is not DataType.DOUBLE:
        raise InvalidArgumentError("invalid data type for averaging kernel")
    if averaging_kernel.dimension_type != (TIME, VERTICAL, VERTICAL):
        raise InvalidArgumentError("averaging kernel should have dimensions {time,vertical,vertical}")
    if averaging_kernel.dimension[1] != averaging_kernel.dimension[2]:
        raise InvalidArgumentError("vertical dimensions of averaging kernel do not match")
    if (variable.dimension[0] != averaging_kernel.dimension[0]
            or variable.dimension[-1] != averaging_kernel.dimension[1]):
        raise InvalidArgumentError("variable and avk have inconsistent dimensions")
    num_time, max_vertical = averaging_kernel.dimension[:2]

    if apriori is not None:
        if apriori.data_type is not DataType.DOUBLE:
            raise InvalidArgumentError("invalid data type for apriori")
        if apriori.dimension_type != (TIME, VERTICAL):
            raise InvalidArgumentError("apriori should have dimensions {time,vertical}")
        if apriori.dimension != (num_time, max_vertical):
            raise InvalidArgumentError("apriori and avk have inconsistent dimensions")

    if vertical_axis is not None:
        if vertical_axis.data_type is not DataType.DOUBLE:
            raise InvalidArgumentError("invalid data type for axis variable")
        if vertical_axis.dimension_type != (TIME, VERTICAL):
            raise InvalidArgumentError("axis variable should have dimensions {time,vertical}")
        if vertical_axis.dimension != (num_time, max_vertical):
            raise InvalidArgumentError("axis variable and avk have inconsistent dimensions")

    if variable.num_elements == 0:
        return

    try:
        vector = np.empty(max_vertical, dtype=np.float64)
        num_valid = np.full(num_time, max_vertical, dtype=np.int64)
    except MemoryError:
        raise OutOfMemoryError(
            f"out of memory (could not allocate {max_vertical * 8} bytes)"
        ) from None

    if vertical_axis is not None:
        axis = np.ascontiguousarray(vertical_axis.data)
        for k in range(num_time):
            num_valid[k] = unpadded_length(axis[k])

    data = np.ascontiguousarray(variable.data)
    if apriori is not None:
        apriori_data = np.ascontiguousarray(apriori.data)
    else:
        apriori_data = np.empty((0, 0), dtype=np.float64)

    _smooth(data.reshape(num_time, -1, max_vertical), num_valid, np.ascontiguousarray(averaging_kernel.data),
            apriori_data, apriori is not None, vector)
    variable.data = data
