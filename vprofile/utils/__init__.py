"""
Utility constants.

Constants
---------
STANDARD_GRAVITY : float
    Reference gravity defining geopotential height (m/s^2)
MOLAR_GAS_CONSTANT : float
    Universal gas constant (J/mol/K)
DRY_AIR_MOLAR_MASS : float
    Molar mass of dry air (g/mol)
EPSILON : float
    Threshold below which layer heights and densities count as zero
"""

from vprofile.utils.constants import (
    MOLAR_GAS_CONSTANT,
    STANDARD_GRAVITY,
    DRY_AIR_MOLAR_MASS,
    EPSILON,
)

__all__ = [
    "MOLAR_GAS_CONSTANT",
    "STANDARD_GRAVITY",
    "DRY_AIR_MOLAR_MASS",
    "EPSILON",
]
