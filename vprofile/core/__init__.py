"""
Vertical profile computations.

Modules
-------
gravity
    WGS84 gravity and geopotential height conversions
hydrostatic
    Pressure / altitude / geopotential height profile integrators
tropopause
    WMO lapse-rate tropopause locator
columns
    Total, tropospheric and stratospheric column integration
kernels
    Averaging kernel transforms
smoothing
    Averaging kernel smoothing of profile variables
collocated
    Smoothing with kernels taken from collocated products
"""

from vprofile.core.gravity import (
    altitude_from_gph_and_latitude,
    geopotential_from_gph,
    gph_from_altitude_and_latitude,
    gph_from_geopotential,
    gravity_from_latitude_and_altitude,
    local_curvature_radius_at_surface_from_latitude,
    normal_gravity_from_latitude,
)
from vprofile.core.hydrostatic import (
    column_mass_density_from_surface_pressure_and_profile,
    profile_altitude_from_pressure,
    profile_gph_from_pressure,
    profile_pressure_from_altitude,
    profile_pressure_from_gph,
)
from vprofile.core.tropopause import (
    tropopause_altitude,
    tropopause_index_from_altitude_and_temperature,
    tropopause_pressure,
)
from vprofile.core.columns import (
    profile_column_from_partial_column,
    profile_strato_column_from_partial_column_and_altitude,
    profile_strato_column_from_partial_column_and_pressure,
    profile_tropo_column_from_partial_column_and_altitude,
    profile_tropo_column_from_partial_column_and_pressure,
)
from vprofile.core.kernels import (
    column_avk_from_partial_column_avk,
    density_avk_from_partial_column_avk_and_altitude_bounds,
    number_density_avk_from_volume_mixing_ratio_avk,
    partial_column_avk_from_density_avk_and_altitude_bounds,
    stratospheric_column_avk_from_column_avk,
    tropospheric_column_avk_from_column_avk,
    volume_mixing_ratio_avk_from_number_density_avk,
)
# smoothing and collocated depend on vprofile.product, which in turn uses the
# modules above; keep them last
from vprofile.core.smoothing import variable_smooth_vertical
from vprofile.core.collocated import (
    product_get_smoothed_column,
    product_get_smoothed_column_using_collocated_dataset,
    product_get_smoothed_column_using_collocated_product,
    product_smooth_vertical_with_collocated_dataset,
    product_smooth_vertical_with_collocated_product,
)

__all__ = [
    "altitude_from_gph_and_latitude",
    "geopotential_from_gph",
    "gph_from_altitude_and_latitude",
    "gph_from_geopotential",
    "gravity_from_latitude_and_altitude",
    "local_curvature_radius_at_surface_from_latitude",
    "normal_gravity_from_latitude",
    "column_mass_density_from_surface_pressure_and_profile",
    "profile_altitude_from_pressure",
    "profile_gph_from_pressure",
    "profile_pressure_from_altitude",
    "profile_pressure_from_gph",
    "tropopause_altitude",
    "tropopause_index_from_altitude_and_temperature",
    "tropopause_pressure",
    "profile_column_from_partial_column",
    "profile_strato_column_from_partial_column_and_altitude",
    "profile_strato_column_from_partial_column_and_pressure",
    "profile_tropo_column_from_partial_column_and_altitude",
    "profile_tropo_column_from_partial_column_and_pressure",
    "column_avk_from_partial_column_avk",
    "density_avk_from_partial_column_avk_and_altitude_bounds",
    "number_density_avk_from_volume_mixing_ratio_avk",
    "partial_column_avk_from_density_avk_and_altitude_bounds",
    "stratospheric_column_avk_from_column_avk",
    "tropospheric_column_avk_from_column_avk",
    "volume_mixing_ratio_avk_from_number_density_avk",
    "variable_smooth_vertical",
    "product_get_smoothed_column",
    "product_get_smoothed_column_using_collocated_dataset",
    "product_get_smoothed_column_using_collocated_product",
    "product_smooth_vertical_with_collocated_dataset",
    "product_smooth_vertical_with_collocated_product",
]
