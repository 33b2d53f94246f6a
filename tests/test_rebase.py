import numpy as np
import numpy.testing as npt
import pandas as pd
import pandas.testing as pdt
import pytest

from lagshift.errors import MalformedInput, UndefinedRatio, UnknownSector
from lagshift.rebase import Rebaser
from lagshift.utils import lag_cols


_series = pd.DataFrame(
    {
        "scenario": ["B2DS"] * 6 + ["SDS"] * 6,
        "sector": (["steel"] * 3 + ["cement"] * 3) * 2,
        "year": [2014, 2020, 2030] * 4,
        "emission_factor": [1.8, 1.6, 1.2, 0.6, 0.5, 0.3]
        + [1.8, 1.7, 1.5, 0.6, 0.55, 0.45],
        "emission_factor_unit": (["t CO2/t steel"] * 3 + ["t CO2/t cement"] * 3) * 2,
    }
)

_intensities = {"steel": 2.1, "cement": 0.65, "aviation": 0.09}


def _select(df, **filters):
    mask = np.logical_and.reduce([df[k] == v for k, v in filters.items()])
    return df[mask].set_index("year")


def test_rebase_example():
    df = _series[(_series.scenario == "B2DS") & (_series.sector == "steel")]
    obs = Rebaser(df, {"steel": 2.1}).rebase()

    lag1 = _select(obs, lag="Lag 1")
    assert list(lag1.index) == [2014, 2020]
    npt.assert_almost_equal(lag1.loc[2014, "emission_factor_ald"], 2.3625)
    assert lag1.loc[2020, "emission_factor_ald"] == 2.1

    lag2 = _select(obs, lag="Lag 2")
    assert list(lag2.index) == [2014, 2020, 2030]
    npt.assert_almost_equal(
        lag2["emission_factor_ald"].values, [2.1 * 1.8 / 1.2, 2.1 * 1.6 / 1.2, 2.1]
    )


def test_rebase_columns():
    obs = Rebaser(_series, _intensities).rebase()
    assert list(obs.columns) == lag_cols
    # 4 groups with 2 years in Lag 1 and 3 years in Lag 2
    assert len(obs) == 4 * 2 + 4 * 3
    assert set(obs["emission_factor_unit"]) == {"t CO2/t steel", "t CO2/t cement"}


def test_number_of_lags():
    df = pd.DataFrame(
        {
            "scenario": "NZE",
            "sector": "aviation",
            "year": range(2020, 2032),
            "emission_factor": np.linspace(0.1, 0.05, 12),
        }
    )
    r = Rebaser(df, _intensities)
    obs = r.rebase()
    assert obs["lag"].nunique() == 12 - 1
    assert list(obs["lag_index"].unique()) == list(range(1, 12))
    assert r.lag_years() == list(range(2021, 2032))


def test_lag_year_equals_market_intensity():
    obs = Rebaser(_series, _intensities).rebase()
    at_lag = obs[obs["year"] == obs["lag_year"]]
    assert len(at_lag) == 4 * 2
    exp = at_lag["sector"].map(_intensities)
    assert (at_lag["emission_factor_ald"] == exp).all()


def test_non_increasing_scenarios_stay_non_increasing():
    obs = Rebaser(_series, _intensities).rebase()
    for _, group in obs.groupby(["scenario", "sector", "lag"]):
        assert (group["emission_factor_ald"].diff().dropna() <= 0).all()


def test_zero_in_lag_year():
    df = _series.copy()
    df.loc[7, "emission_factor"] = 0.0
    r = Rebaser(df, _intensities)
    with pytest.raises(UndefinedRatio, match="2020"):
        r.rebase()


def test_zero_in_base_year_only():
    df = _series.copy()
    df.loc[0, "emission_factor"] = 0.0
    obs = Rebaser(df, _intensities).rebase()
    assert np.isfinite(obs["emission_factor_ald"]).all()
    assert (_select(obs, scenario="B2DS", sector="steel").loc[2014, "emission_factor_ald"] == 0).all()


def test_overflow_in_lag_ratio():
    df = pd.DataFrame(
        {
            "scenario": "B2DS",
            "sector": "steel",
            "year": [2014, 2020],
            "emission_factor": [1e300, 1e-300],
        }
    )
    with pytest.raises(UndefinedRatio, match="not finite"):
        Rebaser(df, {"steel": 2.1}).rebase()


def test_unknown_sector():
    with pytest.raises(UnknownSector, match="cement"):
        Rebaser(_series, {"steel": 2.1})


@pytest.mark.parametrize("value", (-1.0, np.nan, np.inf, None, "high", True))
def test_invalid_market_intensity(value):
    with pytest.raises(MalformedInput, match="Market intensities"):
        Rebaser(_series, {"steel": 2.1, "cement": value})


def test_missing_years():
    with pytest.raises(MalformedInput, match="common set of years"):
        Rebaser(_series.drop(index=[11]), _intensities)


def test_single_year():
    df = _series[_series.year == 2014]
    with pytest.raises(MalformedInput, match="two distinct years"):
        Rebaser(df, _intensities).rebase()


def test_deterministic():
    first = Rebaser(_series, _intensities).rebase()
    r = Rebaser(_series, _intensities)
    second = r.rebase()
    third = r.rebase()
    pdt.assert_frame_equal(first, second)
    pdt.assert_frame_equal(second, third)
    assert first.to_csv(index=False) == third.to_csv(index=False)


def test_scenario_order():
    obs = Rebaser(_series, _intensities, scenarios=["SDS", "B2DS"]).rebase()
    lag1 = obs[obs["lag_index"] == 1]
    assert list(lag1["scenario"].unique()) == ["SDS", "B2DS"]
    assert list(obs["lag_index"]) == sorted(obs["lag_index"])


def test_scenario_order_from_config():
    config = {"scenarios": ["SDS", "NZE"], "lag_label": "Lag {} year(s)"}
    r = Rebaser(_series, _intensities, config=config)
    assert r.scenarios == ["SDS", "B2DS"]
    assert r.rebase()["lag"].iloc[0] == "Lag 1 year(s)"


def test_lag_label_without_placeholder():
    with pytest.raises(MalformedInput, match="placeholder"):
        Rebaser(_series, _intensities, config={"lag_label": "Lag"})


def test_lag_label_positional_placeholder():
    obs = Rebaser(_series, _intensities, config={"lag_label": "Lag {0} {0}"}).rebase()
    assert obs["lag"].unique().tolist() == ["Lag 1 1", "Lag 2 2"]


def test_default_order_is_appearance():
    df = pd.concat([_series[_series.scenario == "SDS"], _series[_series.scenario == "B2DS"]])
    obs = Rebaser(df, _intensities).rebase()
    assert list(obs["scenario"].unique()) == ["SDS", "B2DS"]


def test_groups():
    r = Rebaser(_series, _intensities)
    assert list(r.groups()) == [
        ("B2DS", "cement"),
        ("B2DS", "steel"),
        ("SDS", "cement"),
        ("SDS", "steel"),
    ]


def test_wide():
    r = Rebaser(_series, _intensities)
    obs = r.wide()
    assert obs.index.names == ["scenario", "sector", "unit", "lag"]
    assert list(obs.columns) == [2014, 2020, 2030]
    row = obs.loc[("B2DS", "steel", "t CO2/t steel", "Lag 1")]
    npt.assert_almost_equal(row[2014], 2.3625)
    assert np.isnan(row[2030])


def test_wide_keeps_lag_order():
    df = pd.DataFrame(
        {
            "scenario": "NZE",
            "sector": "aviation",
            "year": range(2020, 2032),
            "emission_factor": np.linspace(0.1, 0.05, 12),
        }
    )
    obs = Rebaser(df, _intensities).wide()
    assert list(obs.index.get_level_values("lag")) == [f"Lag {i}" for i in range(1, 12)]


def test_metadata():
    r = Rebaser(_series, _intensities)
    obs = r.metadata()
    assert len(obs) == 4 * 2
    row = obs.loc[("B2DS", "steel", "t CO2/t steel", "Lag 1")]
    assert row["lag_year"] == 2020
    assert row["base_year"] == 2014
    assert row["lag_emission_factor"] == 1.6
    assert row["base_emission_factor"] == 1.8
    assert row["market_intensity"] == 2.1
    npt.assert_almost_equal(row["base_emission_factor_ald"], 2.3625)
