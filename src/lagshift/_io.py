"""
Provides helper functions for reading emission series and configuration files.

The default configuration values are provided in lagshift.RC_DEFAULTS.
"""

import os
from collections.abc import Mapping

import yaml

from lagshift.methods import check_series
from lagshift.utils import isstr, pd_read


RC_DEFAULTS = """
config:
    market_intensities:
        steel: 2.1
        cement: 0.65
        aviation: 0.09
    lag_label: "Lag {}"
    interpolate: false
    scenarios: null
"""


def _recursive_update(d, u):
    for k, v in u.items():
        if isinstance(v, Mapping):
            r = _recursive_update(d.get(k) or {}, v)
            d[k] = r
        else:
            d[k] = u[k]
    return d


def read_series(f, *args, **kwargs):
    """
    Read and validate an emission series.

    Parameters
    ----------
    f : string or Path
        path to a CSV or XLSX file with columns scenario, sector, year,
        emission_factor and optionally emission_factor_unit
    args, kwargs : sent directly to the Pandas read function

    Returns
    -------
    df : pd.DataFrame
    """
    df = pd_read(f, True, *args, **kwargs)
    if df.empty:
        raise ValueError(f"Emission series in {f} is empty")
    return check_series(df)


class RunControl(Mapping):
    """
    A thin wrapper around a Python Dictionary to support configuration of
    re-basing runs. Input can be provided as dictionaries or YAML files.
    """

    def __init__(self, rc=None, defaults=None):
        """
        Parameters
        ----------
        rc : string, file, dictionary, optional
            a path to a YAML file, a file handle for a YAML file, or a
            dictionary describing run control configuration
        defaults : string, file, dictionary, optional
            a path to a YAML file, a file handle for a YAML file, or a
            dictionary describing **default** run control configuration
        """
        rc = rc or {}
        defaults = defaults or RC_DEFAULTS

        rc = self._load_yaml(rc)
        defaults = self._load_yaml(defaults)
        self.store = _recursive_update(defaults, rc)

    def __getitem__(self, k):
        return self.store[k]

    def __iter__(self):
        return iter(self.store)

    def __len__(self):
        return len(self.store)

    def __repr__(self):
        return self.store.__repr__()

    def _load_yaml(self, obj):
        if hasattr(obj, "read"):  # it's a file
            obj = obj.read()
        if isstr(obj) and os.path.exists(obj):
            with open(obj) as f:
                obj = f.read()
        if not isinstance(obj, dict):
            obj = yaml.safe_load(obj) or {}
        return obj

    def recursive_update(self, k, d):
        """
        Recursively update a top-level option in the run control.

        Parameters
        ----------
        k : string
            the top-level key
        d : dictionary or similar
            the dictionary to use for updating
        """
        u = self.__getitem__(k)
        self.store[k] = _recursive_update(u, d)
