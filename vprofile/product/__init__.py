"""
Product containers and the operations the profile engine needs on them.

Classes
-------
Variable
    Named multi-dimensional variable with dimension types and a unit
Product
    Ordered collection of variables sharing dimension extents
Dataset
    List of source products of one side of a collocation
CollocationResult
    Matching sample pairs between two datasets

Functions
---------
get_derived_variable
    Derive a variable in a requested type, unit and dimension signature
regrid_with_axis_variable
    Bring all vertical variables of a product onto a new vertical axis
convert_unit
    Convert values between unit strings
"""

from vprofile.product.variable import DataType, DimensionType, Variable
from vprofile.product.units import convert_unit
from vprofile.product.product import Product
from vprofile.product.derive import get_derived_variable
from vprofile.product.regrid import regrid_with_axis_variable
from vprofile.product.collocation import CollocationPair, CollocationResult, Dataset

__all__ = [
    "DataType",
    "DimensionType",
    "Variable",
    "convert_unit",
    "Product",
    "get_derived_variable",
    "regrid_with_axis_variable",
    "CollocationPair",
    "CollocationResult",
    "Dataset",
]
