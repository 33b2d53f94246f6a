import matplotlib.pyplot as plt
from pandas_indexing import isin, projectlevel

from lagshift.methods import check_series, pivot_lags, to_wide
from lagshift.utils import group_idx


def _axes(ax):
    if ax is None:
        _, ax = plt.subplots()
    return ax


def plot_lags(
    projection, scenario=None, sector=None, ax=None, value="emission_factor_ald"
):
    """
    Line chart of a lagged projection with one line per lag.

    The projection is restricted to `scenario` and `sector` where given, and
    must contain a single scenario and sector afterwards.
    """
    wide = pivot_lags(projection, value=value)
    filters = {
        k: v for k, v in dict(scenario=scenario, sector=sector).items() if v is not None
    }
    if filters:
        wide = wide.loc[isin(**filters)]
    if wide.empty:
        raise ValueError(f"No lagged projection found for {filters}")

    groups = projectlevel(wide.index, group_idx).unique()
    if len(groups) > 1:
        raise ValueError(
            "Select a single scenario and sector to plot, found\n"
            f"{groups.to_frame().to_string(index=False)}"
        )
    ((scenario, sector),) = groups

    ax = _axes(ax)
    for idx, row in wide.iterrows():
        row = row.dropna()
        ax.plot(row.index, row.values, label=idx[-1])
    unit = wide.index.get_level_values("unit")[0]
    ax.set(title=f"{scenario} | {sector}", xlabel="year", ylabel=unit or value)
    ax.legend()
    return ax


def plot_scenarios(series, sector, ax=None):
    """
    Line chart of the emission factor of every scenario in `sector`.
    """
    df = check_series(series)
    df = df[df["sector"] == sector]
    if df.empty:
        raise ValueError(f"No emission series found for sector {sector}")

    wide = to_wide(df)
    ax = _axes(ax)
    for idx, row in wide.iterrows():
        ax.plot(row.index, row.values, label=idx[0])
    unit = wide.index.get_level_values("unit")[0]
    ax.set(title=sector, xlabel="year", ylabel=unit or "emission_factor")
    ax.legend()
    return ax
