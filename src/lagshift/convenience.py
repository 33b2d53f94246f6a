from lagshift.methods import interpolate_annual, pivot_lags  # noqa: F401
from lagshift.rebase import Rebaser


def rebase_all(
    series, market_intensities, interpolate=False, scenarios=None, label="Lag {}"
):
    """
    Re-base all scenarios in ``series`` onto ``market_intensities`` for every
    lag year.

    Parameters
    ----------
    series : :obj:`pd.DataFrame`
        long emission series with columns scenario, sector, year,
        emission_factor and optionally emission_factor_unit

    market_intensities : dict
        mapping from sector label to the current market emission intensity,
        e.g. ``{"steel": 2.1, "cement": 0.65}``

    interpolate : bool, optional
        if True, interpolate ``series`` onto annual steps first, so that every
        year becomes a lag year

    scenarios : list, optional
        order of scenarios in the result, e.g. by ambition

    label : str, optional
        format string for lag labels

    Returns
    -------
    :obj:`pd.DataFrame`
        The lagged projection in long form, one sub-series per lag labelled
        "Lag 1", "Lag 2", ...

    Raises
    ------
    MalformedInput
        ``series`` is missing columns, has duplicated or unordered years, or
        its scenarios and sectors do not share a common set of years

    UndefinedRatio
        The emission factor in a lag year is zero

    UnknownSector
        A sector in ``series`` has no entry in ``market_intensities``
    """
    if interpolate:
        series = interpolate_annual(series)
    rebaser = Rebaser(
        series, market_intensities, config={"lag_label": label}, scenarios=scenarios
    )
    return rebaser.rebase()
