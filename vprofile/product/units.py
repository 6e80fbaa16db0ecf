"""
Unit conversion for variable buffers.

Unit strings follow the udunits-like conventions common in atmospheric data
products (``molec/cm2``, ``hPa``, ``ppmv``, ``degree_north``). They are
normalized and handed to a pint unit registry holding the extra definitions
needed for these products.
"""

import re
from functools import lru_cache
from typing import Optional

import numpy as np
import pint

from vprofile.exceptions import NotDerivableError

unit_registry = pint.UnitRegistry()

_EXTRA_DEFINITIONS = [
    "ppv = 1",
    "ppmv = 1e-6 * ppv",
    "ppbv = 1e-9 * ppv",
    "pptv = 1e-12 * ppv",
    "degree_north = degree",
    "degree_east = degree",
]

for _definition in _EXTRA_DEFINITIONS:
    unit_registry.define(_definition)

# 'cm2' -> 'cm**2', 'm-3' -> 'm**-3'
_EXPONENT_PATTERN = re.compile(r"(?<=[A-Za-z])(-?\d+)")


def normalize_unit(unit: Optional[str]) -> str:
    """Rewrite a product unit string into pint syntax."""
    if unit is None:
        return ""
    unit = unit.strip()
    if unit == "1":
        return ""
    return _EXPONENT_PATTERN.sub(r"**\1", unit)


@lru_cache(maxsize=256)
def _parse(unit: str):
    return unit_registry.parse_units(normalize_unit(unit))


def units_compatible(unit_a: Optional[str], unit_b: Optional[str]) -> bool:
    """True if values in `unit_a` can be converted to `unit_b`."""
    try:
        return _parse(unit_a or "").dimensionality == _parse(unit_b or "").dimensionality
    except pint.errors.PintError:
        return False


def convert_unit(values: np.ndarray, from_unit: Optional[str], to_unit: Optional[str]) -> np.ndarray:
    """
    Convert values between two units.

    Parameters
    ----------
    values : np.ndarray
        Values expressed in `from_unit`
    from_unit : str or None
        Source unit (None is dimensionless)
    to_unit : str or None
        Target unit (None is dimensionless)

    Returns
    -------
    np.ndarray
        Values expressed in `to_unit`

    Raises
    ------
    NotDerivableError
        If either unit is unknown or the units are not compatible
    """
    if (from_unit or "") == (to_unit or ""):
        return values
    try:
        quantity = unit_registry.Quantity(np.asarray(values, dtype=np.float64), _parse(from_unit or ""))
        return np.asarray(quantity.to(_parse(to_unit or "")).magnitude)
    except pint.errors.PintError as e:
        raise NotDerivableError(f"cannot convert unit '{from_unit}' to '{to_unit}': {e}") from e
