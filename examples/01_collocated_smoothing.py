#!/usr/bin/env python3
"""
Smoothing Sonde Profiles with Retrieval Averaging Kernels
=========================================================

This example compares a high resolution ozone sonde profile with a
coarse satellite retrieval. The sonde profile is regridded onto the
retrieval grid and smoothed with the retrieval averaging kernel and
apriori, which gives the profile the retrieval would have reported if the
sonde profile were the true atmosphere.

The example also integrates the smoothed partial columns into
tropospheric and stratospheric columns using the WMO tropopause of the
sonde temperature profile.

Usage:
    python 01_collocated_smoothing.py
    python 01_collocated_smoothing.py --kernel-width 3000
    python 01_collocated_smoothing.py --config profile.yaml

Output:
    - Console: smoothed profile and column amounts
"""

import argparse
import logging
import sys

import numpy as np

sys.path.insert(0, '..')

try:
    from vprofile import (
        DimensionType,
        Product,
        ProfileConfig,
        Variable,
        load_config,
        product_smooth_vertical_with_collocated_product,
    )
    from vprofile.core import (
        profile_strato_column_from_partial_column_and_altitude,
        profile_tropo_column_from_partial_column_and_altitude,
        tropopause_altitude,
    )
    from vprofile.utils.constants import DRY_AIR_MOLAR_MASS, MOLAR_GAS_CONSTANT, STANDARD_GRAVITY
except ImportError:
    print("Error: vprofile package not found.")
    print("Please install it first: pip install -e . (from the project root)")
    sys.exit(1)

TIME = DimensionType.TIME
VERTICAL = DimensionType.VERTICAL


def parse_args():
    parser = argparse.ArgumentParser(
        description="Smooth a sonde ozone profile with a retrieval averaging kernel",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s                          # Default Gaussian kernel, 2 km wide
  %(prog)s --kernel-width 5000      # Broader kernel, less vertical detail
  %(prog)s --config profile.yaml    # Custom tropopause criteria
        """
    )
    parser.add_argument(
        "--kernel-width", type=float, default=2000.0,
        help="Width of the Gaussian averaging kernel rows in meters (default: 2000)"
    )
    parser.add_argument(
        "--config", type=str, default=None,
        help="YAML or JSON engine configuration"
    )
    parser.add_argument(
        "--verbose", action="store_true",
        help="Enable debug logging"
    )
    return parser.parse_args()


def sonde_profile():
    """Idealized midlatitude sonde: ISA temperature and a stratospheric ozone peak."""
    altitude = np.arange(0.0, 30001.0, 250.0)
    temperature = np.where(altitude <= 11000.0, 288.15 - 0.0065 * altitude,
                           np.where(altitude <= 20000.0, 216.65, 216.65 + 0.001 * (altitude - 20000.0)))
    scale = 1e-3 * DRY_AIR_MOLAR_MASS * STANDARD_GRAVITY / MOLAR_GAS_CONSTANT
    pressure = 101325.0 * np.exp(-scale * np.cumsum(np.r_[0.0, np.diff(altitude) / temperature[1:]]))
    ozone = 0.04 + 8.0 * np.exp(-0.5 * ((altitude - 23000.0) / 4500.0) ** 2)
    return altitude, pressure, temperature, ozone


def retrieval_grid():
    return np.arange(1000.0, 30000.0, 2000.0)


def gaussian_kernel(grid, width):
    """Row-normalized Gaussian kernel with a reduced sensitivity near the surface."""
    distance = grid[:, None] - grid[None, :]
    kernel = np.exp(-0.5 * (distance / width) ** 2)
    kernel /= kernel.sum(axis=1, keepdims=True)
    sensitivity = 1.0 - np.exp(-grid / 5000.0)
    return kernel * sensitivity[:, None]


def main():
    args = parse_args()
    logging.basicConfig(level=logging.DEBUG if args.verbose else logging.WARNING,
                        format="%(levelname)s %(name)s: %(message)s")

    config = load_config(args.config) if args.config else ProfileConfig()

    print("=" * 70)
    print("SONDE PROFILE SMOOTHING WITH RETRIEVAL AVERAGING KERNELS")
    print("=" * 70)

    altitude, pressure, temperature, ozone = sonde_profile()
    sonde = Product([
        Variable("altitude", altitude, (VERTICAL,), "m"),
        Variable("pressure", pressure[None, :], (TIME, VERTICAL), "Pa"),
        Variable("temperature", temperature[None, :], (TIME, VERTICAL), "K"),
        Variable("O3", ozone[None, :], (TIME, VERTICAL), "ppmv"),
        Variable("collocation_index", np.array([0], dtype=np.int32), (TIME,)),
    ])

    grid = retrieval_grid()
    apriori = np.full(len(grid), 2.0)
    retrieval = Product([
        Variable("collocation_index", np.array([0], dtype=np.int32), (TIME,)),
        Variable("altitude", grid[None, :], (TIME, VERTICAL), "m"),
        Variable("O3_avk", gaussian_kernel(grid, args.kernel_width)[None], (TIME, VERTICAL, VERTICAL)),
        Variable("O3_apriori", apriori[None, :], (TIME, VERTICAL), "ppmv"),
    ])

    tropopause = tropopause_altitude(altitude, pressure, temperature, config.tropopause, config.numerics.epsilon)
    print(f"\nSonde levels:      {len(altitude)}")
    print(f"Retrieval levels:  {len(grid)}")
    print(f"Kernel width:      {args.kernel_width:.0f} m")
    print(f"WMO tropopause:    {tropopause / 1000:.2f} km")

    product_smooth_vertical_with_collocated_product(sonde, ["O3"], "altitude", "m", retrieval, config)
    smoothed = sonde.get_variable("O3").data[0]
    truth = np.interp(grid, altitude, ozone)

    print(f"\n{'Altitude (km)':>14} {'Sonde (ppmv)':>14} {'Smoothed (ppmv)':>16} {'Apriori (ppmv)':>15}")
    print("-" * 62)
    for z, x, xs, xa in zip(grid, truth, smoothed, apriori):
        print(f"{z / 1000:>14.1f} {x:>14.3f} {xs:>16.3f} {xa:>15.3f}")

    # layer thickness weighted mixing ratios as a stand-in for partial columns
    bounds = np.stack([grid - 1000.0, grid + 1000.0], axis=1)
    thickness = bounds[:, 1] - bounds[:, 0]
    print("\nColumn-weighted ozone (ppmv km):")
    for label, profile in (("sonde", truth), ("smoothed", smoothed)):
        partial = profile * thickness / 1000.0
        tropo = profile_tropo_column_from_partial_column_and_altitude(partial, bounds, tropopause)
        strato = profile_strato_column_from_partial_column_and_altitude(partial, bounds, tropopause)
        print(f"  {label:<9} troposphere {tropo:8.2f}   stratosphere {strato:8.2f}")

    return 0


if __name__ == "__main__":
    sys.exit(main())
