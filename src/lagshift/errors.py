class MalformedInput(ValueError):
    """
    Error raised when an emission series is malformed (missing columns,
    duplicated or unordered years, invalid values).
    """


class UndefinedRatio(ValueError):
    """
    Error raised when the reference emission factor of a ratio is zero.
    """


class UnknownSector(ValueError):
    """
    Error raised when a sector has no configured market intensity.
    """
