"""
Re-basing CLI for lagshift.
"""

import argparse
import os
import re

import matplotlib


matplotlib.use("Agg")
import matplotlib.pyplot as plt  # noqa: E402

import lagshift  # noqa: E402
from lagshift.plotting import plot_lags  # noqa: E402
from lagshift.utils import logger  # noqa: E402


def read_args(argv=None):
    # construct parser
    descr = """
    Re-base scenario emission factors onto current market intensities for
    every lag year.

    Example usage:

    lagshift scenarios.csv --rc lagshift.yaml --plot
    """
    parser = argparse.ArgumentParser(
        description=descr, formatter_class=argparse.RawDescriptionHelpFormatter
    )
    input_file = "Emission series file (CSV or XLSX)."
    parser.add_argument("input_file", help=input_file)
    rc = "Runcontrol YAML file with market intensities per sector."
    parser.add_argument("--rc", help=rc, default=None)
    interpolate = "Interpolate the emission series onto annual steps first."
    parser.add_argument("--interpolate", help=interpolate, action="store_true")
    output_path = "Path to use for output file names."
    parser.add_argument("--output_path", help=output_path, default=".")
    output_prefix = "Prefix to use for output file names."
    parser.add_argument("--output_prefix", help=output_prefix, default=None)
    plot = "Write one chart per scenario and sector."
    parser.add_argument("--plot", help=plot, action="store_true")

    args = parser.parse_args(argv)
    return args


def _slug(x):
    return re.sub(r"[^A-Za-z0-9]+", "_", x).strip("_")


def rebase(
    inf,
    rc,
    output_path,
    output_prefix,
    interpolate=False,
    plot=False,
    return_result=False,
    write_output=True,
):
    # check files exist
    check = [inf, rc]
    for f in check:
        if f and not os.path.exists(f):
            raise OSError(f"{f} does not exist on the filesystem.")

    # read input
    series = lagshift.read_series(inf)
    rc = lagshift.RunControl(rc=rc)
    config = rc["config"]
    if interpolate or config.get("interpolate"):
        logger().info("Interpolating emission series onto annual steps")
        series = lagshift.interpolate_annual(series)

    # do core re-basing
    rebaser = lagshift.Rebaser(series, config["market_intensities"], config=config)
    projection = rebaser.rebase()
    wide = rebaser.wide()
    metadata = rebaser.metadata()

    if write_output:
        prefix = output_prefix or os.path.splitext(os.path.basename(inf))[0]
        fname = os.path.join(output_path, f"{prefix}_lagged.xlsx")
        logger().info(f"Writing result to: {fname}")
        lagshift.pd_write(projection, fname, sheet_name="data", index=False)

        fname = os.path.join(output_path, f"{prefix}_lagged_wide.xlsx")
        logger().info(f"Writing wide result to: {fname}")
        lagshift.pd_write(wide, fname, sheet_name="data")

        fname = os.path.join(output_path, f"{prefix}_metadata.xlsx")
        logger().info(f"Writing metadata to: {fname}")
        lagshift.pd_write(metadata, fname)

        if plot:
            used = set()
            for scenario, sector in rebaser.groups():
                ax = plot_lags(projection, scenario=scenario, sector=sector)
                stem = name = f"{prefix}_{_slug(scenario)}_{_slug(sector)}"
                # labels differing only in punctuation share a slug
                n = 1
                while stem in used:
                    n += 1
                    stem = f"{name}_{n}"
                used.add(stem)
                fname = os.path.join(output_path, f"{stem}_lags.png")
                logger().info(f"Writing chart to: {fname}")
                ax.figure.savefig(fname)
                plt.close(ax.figure)

    if return_result:
        return projection, wide, metadata


def main(argv=None):
    # parse cli
    args = read_args(argv)

    # run program
    rebase(
        args.input_file,
        args.rc,
        args.output_path,
        args.output_prefix,
        interpolate=args.interpolate,
        plot=args.plot,
    )


if __name__ == "__main__":
    main()
