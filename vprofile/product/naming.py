"""
Variable naming conventions used to locate profile auxiliaries.

For a profile variable ``X`` the averaging kernel is stored as ``X_avk`` and
the apriori as ``X_apriori``; the bounds of a vertical axis ``Y`` are stored
as ``Y_bounds``. Collocated products carry the pair identifier in
``collocation_index``.
"""

COLLOCATION_INDEX = "collocation_index"
INDEX = "index"

BOUNDS_SUFFIX = "_bounds"
AVK_SUFFIX = "_avk"
APRIORI_SUFFIX = "_apriori"


def bounds_name(axis: str) -> str:
    return f"{axis}{BOUNDS_SUFFIX}"


def avk_name(variable: str) -> str:
    return f"{variable}{AVK_SUFFIX}"


def apriori_name(variable: str) -> str:
    return f"{variable}{APRIORI_SUFFIX}"


def axis_name_from_bounds(name: str):
    """Axis name for a bounds variable name, None if `name` is not one."""
    if name.endswith(BOUNDS_SUFFIX) and len(name) > len(BOUNDS_SUFFIX):
        return name[:-len(BOUNDS_SUFFIX)]
    return None


def is_profile_auxiliary(name: str) -> bool:
    """True for averaging kernel and apriori variable names."""
    return AVK_SUFFIX in name or APRIORI_SUFFIX in name


def is_pressure_axis(name: str) -> bool:
    """Pressure-like axes are interpolated in log space."""
    return "pressure" in name


def is_partial_column(name: str) -> bool:
    """Partial column profiles are regridded by layer overlap."""
    return "column" in name
