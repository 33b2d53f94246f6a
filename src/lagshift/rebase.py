import math

import pandas as pd
from pandas_indexing import projectlevel

from lagshift import utils
from lagshift.errors import MalformedInput
from lagshift.methods import (
    check_series,
    lag_label,
    lag_years,
    market_intensity,
    pivot_lags,
    rebase_to_year,
    to_long,
    to_wide,
)
from lagshift.utils import df_idx, group_idx, lag_cols, unit_col


def _log(msg, *args, **kwargs):
    utils.logger().info(msg, *args, **kwargs)


def _warn(msg, *args, **kwargs):
    utils.logger().warning(msg, *args, **kwargs)


def _check_intensities(intensities):
    intensities = dict(intensities)
    bad = {
        k: v
        for k, v in intensities.items()
        if isinstance(v, bool)
        or not utils.isnum(v)
        or not math.isfinite(float(v))
        or float(v) < 0
    }
    if bad:
        raise MalformedInput(
            f"Market intensities must be finite and non-negative numbers, found {bad}"
        )
    return {str(k): float(v) for k, v in intensities.items()}


class Rebaser:
    """
    A class used to re-base scenario emission factors onto current market
    intensities for every possible lag year.
    """

    def __init__(self, data, market_intensities, config={}, scenarios=None):
        """
        The Rebaser class validates an emission series and prepares it in the
        standard calculation format.

        Every scenario and sector must report the same years and every sector
        must have a market intensity.

        Parameters
        ----------
        data : pd.DataFrame
            long emission series with columns scenario, sector, year,
            emission_factor and optionally emission_factor_unit
        market_intensities : dict
            mapping from sector label to current market intensity
        config : dict, optional
            configuration dictionary, supports `lag_label` and `scenarios`
        scenarios : list, optional
            scenario order used for output (e.g., by ambition), unlisted
            scenarios follow in order of appearance
        """
        data = check_series(data)
        self.market_intensities = _check_intensities(market_intensities)
        self.label = config.get("lag_label") or "Lag {}"
        if lag_label(1, self.label) == lag_label(2, self.label):
            raise MalformedInput(
                f"Lag label {self.label!r} must contain a placeholder for the lag index"
            )

        # scenario ordering for output
        order = scenarios if scenarios is not None else config.get("scenarios")
        order = [str(s) for s in order or []]
        appearing = list(pd.unique(data["scenario"]))
        unused = [s for s in order if s not in appearing]
        if unused:
            _warn(f"Ordered scenarios not found in data, ignoring {unused}")
        self.scenarios = [s for s in order if s in appearing] + [
            s for s in appearing if s not in order
        ]

        self.data = to_wide(data)
        self.intensity = market_intensity(self.data.index, self.market_intensities)
        self.projection = None

    def groups(self):
        """
        Return pd.MultiIndex of the scenario and sector pairs in the data.
        """
        return projectlevel(self.data.index, group_idx).unique()

    def lag_years(self):
        """
        Return list of lag years, the first lag being the second data year.
        """
        return lag_years(self.data.columns)

    def _sort(self, df):
        rank = {s: i for i, s in enumerate(self.scenarios)}
        return df.sort_values(
            ["lag_index", "scenario", "sector", "year"],
            key=lambda col: col.map(rank) if col.name == "scenario" else col,
            kind="stable",
        ).reset_index(drop=True)

    def rebase(self):
        """
        Return pd.DataFrame of the lagged projection for every lag year.

        Each lag sub-series covers the years up to and including its lag
        year with
        emission_factor_ald = market_intensity * emission_factor(year)
        / emission_factor(lag_year).
        """
        keys = group_idx + [unit_col, "year"]
        dfs = []
        for i, year in enumerate(self.lag_years(), start=1):
            label = lag_label(i, self.label)
            _log(f"Rebasing to {label} ({year})")
            rebased = rebase_to_year(self.data, self.market_intensities, year)
            ald = to_long(rebased, value="emission_factor_ald")
            ef = to_long(self.data[rebased.columns], value="emission_factor")
            dfs.append(
                ef.merge(ald, on=keys, how="inner", validate="one_to_one").assign(
                    lag=label, lag_index=i, lag_year=year
                )
            )

        projection = self._sort(pd.concat(dfs, ignore_index=True))
        self.projection = projection[lag_cols]
        return self.projection

    def _projection(self):
        return self.projection if self.projection is not None else self.rebase()

    def wide(self):
        """
        Return pd.DataFrame of the lagged projection pivoted wide by year.
        """
        return pivot_lags(self._projection())

    def metadata(self):
        """
        Return pd.DataFrame with one row per scenario, sector and lag
        describing how each lag sub-series was rescaled.
        """
        df = self._projection().rename(columns={unit_col: "unit"})
        g = df.groupby(df_idx + ["lag"], sort=False)
        meta = pd.concat(
            [
                g["lag_index"].first(),
                g["lag_year"].first(),
                g["year"].first().rename("base_year"),
                g["emission_factor"].first().rename("base_emission_factor"),
                g["emission_factor"].last().rename("lag_emission_factor"),
                g["emission_factor_ald"].first().rename("base_emission_factor_ald"),
            ],
            axis=1,
        )
        meta["market_intensity"] = meta.index.get_level_values("sector").map(
            self.market_intensities
        )
        return meta
