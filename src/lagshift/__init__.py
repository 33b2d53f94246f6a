from importlib.metadata import version as _version

from lagshift._io import *  # noqa: F401, F403
from lagshift.convenience import *  # noqa: F401, F403
from lagshift.methods import *  # noqa: F401, F403
from lagshift.rebase import *  # noqa: F401, F403
from lagshift.utils import *  # noqa: F401, F403


try:
    __version__ = _version("lagshift")
except Exception:
    # Local copy or not installed with setuptools.
    __version__ = "999"
