"""
vprofile: vertical profile conversion and averaging kernel smoothing.

Harmonizes atmospheric remote sensing retrievals onto comparable vertical
representations: coordinate conversions between pressure, altitude and
geopotential height, column integration, WMO tropopause location, averaging
kernel algebra, and smoothing of reference profiles with the kernels of
collocated retrievals.

Modules
-------
core
    Profile computations (gravity, hydrostatic integration, tropopause,
    columns, kernel transforms, smoothing, collocation driven smoothing)
product
    Variable and product containers, derivation, regridding, collocation
config
    Engine configuration (numeric guards, tropopause criteria, regridding)
utils
    Physical constants
exceptions
    Error taxonomy
"""

__version__ = "0.1.0"
__author__ = "vprofile Contributors"

# core must be imported before product (see vprofile.core)
from vprofile.core import (
    product_get_smoothed_column,
    product_get_smoothed_column_using_collocated_dataset,
    product_get_smoothed_column_using_collocated_product,
    product_smooth_vertical_with_collocated_dataset,
    product_smooth_vertical_with_collocated_product,
    tropopause_index_from_altitude_and_temperature,
    variable_smooth_vertical,
)
from vprofile.config import ProfileConfig, load_config
from vprofile.exceptions import (
    InconsistentCollocationError,
    InvalidArgumentError,
    NotDerivableError,
    OutOfMemoryError,
    VProfileError,
)
from vprofile.product import (
    CollocationPair,
    CollocationResult,
    Dataset,
    DataType,
    DimensionType,
    Product,
    Variable,
)

__all__ = [
    "__version__",
    "product_get_smoothed_column",
    "product_get_smoothed_column_using_collocated_dataset",
    "product_get_smoothed_column_using_collocated_product",
    "product_smooth_vertical_with_collocated_dataset",
    "product_smooth_vertical_with_collocated_product",
    "tropopause_index_from_altitude_and_temperature",
    "variable_smooth_vertical",
    "ProfileConfig",
    "load_config",
    "VProfileError",
    "InvalidArgumentError",
    "NotDerivableError",
    "OutOfMemoryError",
    "InconsistentCollocationError",
    "CollocationPair",
    "CollocationResult",
    "Dataset",
    "DataType",
    "DimensionType",
    "Product",
    "Variable",
]
