"""
Vertical grid helpers shared by the profile routines.

Vertical axes are stored either surface-first or top-of-atmosphere-first;
the storage direction is never assumed and is detected here by comparing
the first and last level. Also holds the padding and grid-bounds helpers.
"""

import numpy as np
from numba import jit

from vprofile.exceptions import InvalidArgumentError


@jit(nopython=True, cache=True)
def pressure_is_top_first(pressure: np.ndarray) -> bool:
    """True when a pressure axis starts at the top of the atmosphere."""
    return pressure[0] < pressure[len(pressure) - 1]


@jit(nopython=True, cache=True)
def height_is_top_first(height: np.ndarray) -> bool:
    """True when an altitude/gph axis starts at the top of the atmosphere."""
    return height[0] > height[len(height) - 1]


@jit(nopython=True, cache=True)
def storage_index(i: int, num_levels: int, top_first: bool) -> int:
    """Storage index of the i-th level counted from the surface."""
    if top_first:
        return num_levels - 1 - i
    return i


@jit(nopython=True, cache=True)
def unpadded_length(vector: np.ndarray) -> int:
    """Number of levels left after trimming trailing NaN padding.

    A vector consisting only of NaN values counts as fully valid.
    """
    n = len(vector)
    for i in range(n - 1, -1, -1):
        if not np.isnan(vector[i]):
            return i + 1
    return n


def as_profile(values, name: str) -> np.ndarray:
    """Return a profile as a 1-D contiguous float64 array."""
    array = np.ascontiguousarray(values, dtype=np.float64)
    if array.ndim != 1:
        raise InvalidArgumentError(f"{name} should be a one dimensional profile (got {array.ndim} dimensions)")
    return array


def as_bounds(values, num_levels: int, name: str) -> np.ndarray:
    """Return grid bounds as a contiguous {vertical, 2} float64 array.

    Accepts either a {vertical, 2} array or its flattened form.
    """
    array = np.ascontiguousarray(values, dtype=np.float64)
    if array.ndim == 1 and array.size == 2 * num_levels:
        array = array.reshape(num_levels, 2)
    if array.shape != (num_levels, 2):
        raise InvalidArgumentError(
            f"{name} should have dimensions {{{num_levels},2}} (got {tuple(array.shape)})"
        )
    return array


def bounds_from_midpoints(grid: np.ndarray, log_space: bool = False) -> np.ndarray:
    """
    Derive layer bounds from a grid of layer midpoints.

    Interior bounds lie halfway between neighbouring midpoints, the outer
    bounds are extrapolated by half a layer. Trailing NaN padding is kept as
    NaN bounds.

    Parameters
    ----------
    grid : np.ndarray
        Midpoints, shape (..., vertical)
    log_space : bool
        Compute the halfway points in log space (pressure-like axes)

    Returns
    -------
    np.ndarray
        Bounds, shape (..., vertical, 2)
    """
    grid = np.asarray(grid, dtype=np.float64)
    rows = grid.reshape(-1, grid.shape[-1])
    bounds = np.full(rows.shape + (2,), np.nan)

    for r, row in enumerate(rows):
        n = unpadded_length(row)
        values = np.log(row[:n]) if log_space else row[:n]
        if n == 1:
            edges = np.array([values[0], values[0]])
        else:
            mid = 0.5 * (values[:-1] + values[1:])
            first = values[0] - 0.5 * (values[1] - values[0])
            last = values[-1] + 0.5 * (values[-1] - values[-2])
            edges = np.concatenate(([first], mid, [last]))
        if log_space:
            edges = np.exp(edges)
        bounds[r, :n, 0] = edges[:-1]
        bounds[r, :n, 1] = edges[1:]

    return bounds.reshape(grid.shape + (2,))
