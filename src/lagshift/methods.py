"""
This module defines the table operations used to validate, reshape and
re-base emission series, including the ratio that rescales a scenario onto a
current-market emission intensity in a given lag year.
"""

import numpy as np
import pandas as pd

from lagshift import utils
from lagshift.errors import MalformedInput, UndefinedRatio, UnknownSector
from lagshift.utils import df_idx, group_idx, required_cols, unit_col


def _warn(msg, *args, **kwargs):
    utils.logger().warning(msg, *args, **kwargs)


def _rows(df):
    return df.to_string(index=False, max_rows=100)


def check_series(df):
    """
    Validate a long emission series.

    Parameters
    ----------
    df : pd.DataFrame
        emission series with columns scenario, sector, year, emission_factor
        and optionally emission_factor_unit

    Returns
    -------
    df : pd.DataFrame
        normalized copy with integer years, float emission factors and a
        string unit column

    Raises
    ------
    MalformedInput
        if columns are missing, values are invalid, or years are duplicated or
        not strictly increasing within a scenario and sector
    """
    missing = [c for c in required_cols if c not in df.columns]
    if missing:
        raise MalformedInput(f"Emission series is missing required columns: {missing}")
    if df.empty:
        raise MalformedInput("Emission series is empty")

    df = df.copy()
    if unit_col not in df.columns:
        df[unit_col] = ""
    extra = [c for c in df.columns if c not in required_cols + [unit_col]]
    if extra:
        _warn(f"Extra columns found in emission series, dropping {extra}")
    df = df[required_cols + [unit_col]].copy()

    nolabel = df[group_idx].isnull().any(axis=1)
    if nolabel.any():
        raise MalformedInput(f"Missing scenario or sector labels for\n{_rows(df[nolabel])}")
    df[group_idx] = df[group_idx].astype(str)
    df[unit_col] = df[unit_col].fillna("").astype(str)

    years = pd.to_numeric(df["year"], errors="coerce")
    bad = years.isnull() | (years != years.round())
    if bad.any():
        raise MalformedInput(f"Years must be integers, found\n{_rows(df[bad])}")
    df["year"] = years.astype(int)

    values = pd.to_numeric(df["emission_factor"], errors="coerce")
    bad = ~np.isfinite(values) | (values < 0)
    if bad.any():
        raise MalformedInput(
            f"Emission factors must be finite and non-negative, found\n{_rows(df[bad])}"
        )
    df["emission_factor"] = values.astype(float)

    dup = df.duplicated(group_idx + ["year"], keep=False)
    if dup.any():
        raise MalformedInput(f"Duplicated scenario, sector and year for\n{_rows(df[dup])}")

    step = df.groupby(group_idx, sort=False)["year"].diff()
    unordered = step <= 0
    if unordered.any():
        raise MalformedInput(
            f"Years are not strictly increasing within a group at\n{_rows(df[unordered])}"
        )

    units = df.groupby(group_idx, sort=False)[unit_col].nunique()
    if (units > 1).any():
        raise MalformedInput(
            f"More than one unit reported for\n{units[units > 1].reset_index().to_string(index=False)}"
        )

    return df.reset_index(drop=True)


def to_wide(df, value="emission_factor"):
    """
    Convert a long emission series into the standard calculation format.

    The result is indexed by scenario, sector and unit with one column per
    year. All groups must report the same years.
    """
    wide = (
        df.rename(columns={unit_col: "unit"})
        .set_index(df_idx + ["year"])[value]
        .unstack("year")
    )
    wide.columns = wide.columns.astype(int)
    wide.columns.name = "year"

    gaps = wide.isnull().any(axis=1)
    if gaps.any():
        missing = wide.loc[gaps].isnull()
        report = {
            idx: [year for year, isgap in row.items() if isgap]
            for idx, row in missing.iterrows()
        }
        msg = "\n".join(f"{idx}: {years}" for idx, years in report.items())
        raise MalformedInput(f"Groups do not share a common set of years, missing\n{msg}")
    return wide


def to_long(wide, value="emission_factor"):
    """
    Convert a frame in the standard calculation format back into long form.
    """
    names = list(wide.index.names)
    df = wide.reset_index().melt(id_vars=names, var_name="year", value_name=value)
    df = df.dropna(subset=[value])
    df["year"] = df["year"].astype(int)
    df = df.sort_values(names + ["year"], kind="stable").reset_index(drop=True)
    return df.rename(columns={"unit": unit_col})


def interpolate_annual(df):
    """
    Linearly interpolate every scenario and sector onto annual steps between
    its first and last year. Reported years keep their values.
    """
    df = check_series(df)
    dfs = []
    for (scenario, sector), group in df.groupby(group_idx, sort=False):
        years = np.arange(group["year"].iloc[0], group["year"].iloc[-1] + 1)
        values = np.interp(years, group["year"], group["emission_factor"])
        dfs.append(
            pd.DataFrame(
                {
                    "scenario": scenario,
                    "sector": sector,
                    "year": years,
                    "emission_factor": values,
                    unit_col: group[unit_col].iloc[0],
                }
            )
        )
    return pd.concat(dfs, ignore_index=True)[required_cols + [unit_col]]


def index_to_base_year(df, base=100.0, name="emission_factor_index"):
    """
    Index every scenario and sector to its first (base) year.

    Parameters
    ----------
    df : pd.DataFrame
        long emission series
    base : float, optional
        value assigned to the base year
    name : string, optional
        name of the added column

    Returns
    -------
    df : pd.DataFrame
        validated series with the indexed values in column `name`
    """
    df = check_series(df)
    first = df.groupby(group_idx, sort=False)["emission_factor"].transform("first")
    zero = first == 0
    if zero.any():
        raise UndefinedRatio(f"Emission factor is zero in the base year for\n{_rows(df[zero])}")
    df[name] = df["emission_factor"] / first * base
    return df


def pct_change(df, start_year=None, end_year=None):
    """
    Percent change of the emission factor between two years for every
    scenario and sector, defaulting to the first and last year.
    """
    wide = to_wide(check_series(df))
    start = wide.columns[0] if start_year is None else int(start_year)
    end = wide.columns[-1] if end_year is None else int(end_year)
    for year in (start, end):
        if year not in wide.columns:
            raise MalformedInput(f"Year {year} is not in the emission series")

    zero = wide[start] == 0
    if zero.any():
        raise UndefinedRatio(
            f"Emission factor is zero in {start} for\n"
            f"{wide.loc[zero, start].reset_index().to_string(index=False)}"
        )
    change = (wide[end] / wide[start] - 1) * 100
    change.name = "pct_change"
    return change


def lag_years(years):
    """
    Return the years used as baselines for each lag.

    Lag `i` (counting from 1) uses the `i`-th year after the first of the
    sorted distinct `years`, so there is one lag fewer than there are years.
    """
    years = sorted({int(y) for y in years})
    if len(years) < 2:
        raise MalformedInput(f"At least two distinct years are required, found {years}")
    return years[1:]


def lag_label(i, fmt="Lag {}"):
    return fmt.format(i)


def market_intensity(index, intensities):
    """
    Market intensity for every row of `index`, looked up by sector.

    Parameters
    ----------
    index : pd.MultiIndex
        index with a sector level
    intensities : dict or pd.Series
        mapping from sector label to market intensity

    Raises
    ------
    UnknownSector
        if a sector has no market intensity
    """
    intensities = dict(intensities)
    sectors = index.get_level_values("sector")
    unknown = sorted(set(sectors) - set(intensities))
    if unknown:
        raise UnknownSector(
            f"No market intensity configured for sectors {unknown}, "
            f"known sectors are {sorted(intensities)}"
        )
    return pd.Series(
        [float(intensities[s]) for s in sectors], index=index, name="market_intensity"
    )


def rebase_to_year(wide, intensities, lag_year):
    """
    Rescale market intensities by the scenario trajectories relative to
    `lag_year`.

    Parameters
    ----------
    wide : pd.DataFrame
        emission factors in the standard calculation format
    intensities : dict or pd.Series
        mapping from sector label to market intensity
    lag_year : int
        column used as the new baseline

    Returns
    -------
    df : pd.DataFrame
        intensity * emission_factor(year) / emission_factor(lag_year) for
        all years up to and including `lag_year`
    """
    if lag_year not in wide.columns:
        raise MalformedInput(f"Lag year {lag_year} is not in the emission series")

    reference = wide[lag_year]
    zero = reference == 0
    if zero.any():
        raise UndefinedRatio(
            f"Emission factor is zero in lag year {lag_year} for\n"
            f"{reference[zero].reset_index().to_string(index=False)}"
        )

    cols = [c for c in wide.columns if c <= lag_year]
    ratios = wide[cols].div(reference, axis=0)
    rebased = ratios.mul(market_intensity(wide.index, intensities), axis=0)

    overflow = ~np.isfinite(rebased).all(axis=1)
    if overflow.any():
        raise UndefinedRatio(
            f"Rescaling to lag year {lag_year} is not finite for\n"
            f"{wide.loc[overflow, cols].reset_index().to_string(index=False)}"
        )
    return rebased


def pivot_lags(projection, value="emission_factor_ald"):
    """
    Pivot a lagged projection wide by year, one row per scenario, sector,
    unit and lag. Years after a lag year are left empty.
    """
    df = projection.rename(columns={unit_col: "unit"})
    idx = df_idx + ["lag"]
    wide = df.set_index(idx + ["year"])[value].unstack("year")
    order = pd.MultiIndex.from_frame(df[idx].drop_duplicates())
    wide = wide.reindex(order)
    wide.columns.name = "year"
    return wide
