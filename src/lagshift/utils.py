import logging

import pandas as pd


_logger = None

# columns of a long emission series
required_cols = ["scenario", "sector", "year", "emission_factor"]
unit_col = "emission_factor_unit"

# default dataframe index of the standard calculation format
df_idx = ["scenario", "sector", "unit"]

# levels identifying a single trajectory
group_idx = ["scenario", "sector"]

# columns of a lagged projection, in output order
lag_cols = [
    "scenario",
    "sector",
    unit_col,
    "lag",
    "lag_index",
    "lag_year",
    "year",
    "emission_factor",
    "emission_factor_ald",
]


def logger():
    """
    Global Logger used for lagshift.
    """
    global _logger
    if _logger is None:
        logging.basicConfig()
        _logger = logging.getLogger()
        _logger.setLevel("INFO")
    return _logger


def isstr(x):
    """
    Returns True if x is a string.
    """
    return isinstance(x, str)


def isnum(s):
    """
    Returns True if s is a number.
    """
    try:
        float(s)
        return True
    except (TypeError, ValueError):
        return False


def pd_read(f, str_cols=False, *args, **kwargs):
    """
    Try to read a file with pandas, supports CSV and XLSX.

    Parameters
    ----------
    f : string
        the file to read in
    str_cols : bool, optional
        turn all columns into strings (numerical column names are sometimes
        read in as numerical dtypes)
    args, kwargs : sent directly to the Pandas read function

    Returns
    -------
    df : pd.DataFrame
    """
    f = str(f)
    if f.endswith("csv"):
        df = pd.read_csv(f, *args, **kwargs)
    else:
        df = pd.read_excel(f, *args, **kwargs)

    if str_cols:
        df.columns = [str(x) for x in df.columns]

    return df


def pd_write(df, f, *args, **kwargs):
    """
    Try to write a file with pandas, supports CSV and XLSX.
    """
    # guess whether to use index, unless we're told otherwise
    index = kwargs.pop("index", isinstance(df.index, pd.MultiIndex))

    f = str(f)
    if f.endswith("csv"):
        df.to_csv(f, index=index, *args, **kwargs)
    else:
        with pd.ExcelWriter(f, engine="xlsxwriter") as writer:
            df.to_excel(writer, index=index, *args, **kwargs)
