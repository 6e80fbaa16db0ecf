"""
Tropopause location using the WMO lapse-rate definition.

The tropopause is the lowest level at which the lapse rate decreases to
2 °C/km or less, provided that the average lapse rate between this level and
all higher levels within 2 km does not exceed 2 °C/km. Only levels between
50000 Pa and 5000 Pa are considered, which is why pressure is required as an
input.
"""

from typing import Optional

import numpy as np
from numba import jit

from vprofile.config.settings import NumericsConfig, TropopauseConfig
from vprofile.core.grid import as_profile
from vprofile.exceptions import InvalidArgumentError


@jit(nopython=True, cache=True)
def _tropopause_index(altitude, pressure, temperature, lapse_rate_threshold, window_height,
                      max_pressure, min_pressure, epsilon):
    n = len(altitude)
    i = 1

    while i < n - 1 and pressure[i] > max_pressure:
        i += 1
    if i >= n - 1:
        return -1

    height = altitude[i] - altitude[i - 1]
    if height < 0:
        # altitude needs to be increasing
        return -1
    if height < epsilon:
        lapse_below = np.nan
    else:
        lapse_below = (temperature[i - 1] - temperature[i]) / height

    while i < n - 1 and pressure[i] > min_pressure:
        height = altitude[i + 1] - altitude[i]
        if height < 0:
            return -1
        if height < epsilon:
            # zero-height layer: keep the previous lapse rate
            lapse_above = lapse_below
        else:
            lapse_above = (temperature[i] - temperature[i + 1]) / height

        if lapse_below > lapse_rate_threshold and lapse_above <= lapse_rate_threshold:
            lapse_sum = 0.0
            count = 0
            k = i + 2
            while k < n and altitude[k] <= altitude[i] + window_height:
                height = altitude[k] - altitude[k - 1]
                if height >= epsilon:
                    lapse_sum += (temperature[k - 1] - temperature[k]) / height
                    count += 1
                k += 1
            if count == 0 or lapse_sum / count <= lapse_rate_threshold:
                return i

        lapse_below = lapse_above
        i += 1

    return -1


def tropopause_index_from_altitude_and_temperature(
    altitude,
    pressure,
    temperature,
    config: Optional[TropopauseConfig] = None,
    epsilon: Optional[float] = None,
) -> int:
    """
    Find the tropopause level of a profile.

    Parameters
    ----------
    altitude : array_like
        Altitude profile [m], increasing
    pressure : array_like
        Pressure profile [Pa], decreasing
    temperature : array_like
        Temperature profile [K]
    config : TropopauseConfig, optional
        Override of the WMO criteria
    epsilon : float, optional
        Layers thinner than this [m] count as zero-height and are skipped;
        defaults to the NumericsConfig value

    Returns
    -------
    int
        Index of the tropopause level, or -1 if altitude is not increasing or
        no level satisfies the criteria inside the pressure window
    """
    config = config or TropopauseConfig()
    epsilon = NumericsConfig().epsilon if epsilon is None else epsilon

    altitude = as_profile(altitude, "altitude profile")
    pressure = as_profile(pressure, "pressure profile")
    temperature = as_profile(temperature, "temperature profile")
    if len(pressure) != len(altitude) or len(temperature) != len(altitude):
        raise InvalidArgumentError(
            f"altitude, pressure and temperature profiles have inconsistent lengths "
            f"({len(altitude)}, {len(pressure)}, {len(temperature)})"
        )

    return int(_tropopause_index(
        altitude, pressure, temperature,
        float(config.lapse_rate_threshold),
        float(config.window_height),
        float(config.max_pressure),
        float(config.min_pressure),
        float(epsilon),
    ))


def tropopause_altitude(altitude, pressure, temperature, config: Optional[TropopauseConfig] = None,
                        epsilon: Optional[float] = None) -> float:
    """Altitude [m] of the tropopause, NaN if it cannot be located."""
    index = tropopause_index_from_altitude_and_temperature(altitude, pressure, temperature, config, epsilon)
    if index < 0:
        return np.nan
    return float(np.asarray(altitude, dtype=np.float64)[index])


def tropopause_pressure(altitude, pressure, temperature, config: Optional[TropopauseConfig] = None,
                        epsilon: Optional[float] = None) -> float:
    """Pressure [Pa] at the tropopause, NaN if it cannot be located."""
    index = tropopause_index_from_altitude_and_temperature(altitude, pressure, temperature, config, epsilon)
    if index < 0:
        return np.nan
    return float(np.asarray(pressure, dtype=np.float64)[index])
